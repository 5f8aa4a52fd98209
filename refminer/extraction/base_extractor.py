"""Base class for structured-data extractors."""

from abc import ABC, abstractmethod
from typing import List

from refminer.models import MicroRecord


class BaseRecordExtractor(ABC):
    """
    Abstract base class for structured-data extractors.

    Implementations must be:
    1. Cheap: No network access, pure parsing of the given markup
    2. Tolerant: Malformed markup yields fewer records, never an exception
    3. Deterministic: Same input -> same output
    """

    @abstractmethod
    def extract(self, content: str) -> List[MicroRecord]:
        """
        Extract typed records from page markup.

        Args:
            content: Raw page markup

        Returns:
            List of MicroRecord objects
        """
        pass


class CompositeExtractor(BaseRecordExtractor):
    """Run several extractors over the same markup and concatenate their records."""

    def __init__(self, extractors: List[BaseRecordExtractor]):
        self.extractors = list(extractors)

    def extract(self, content: str) -> List[MicroRecord]:
        records: List[MicroRecord] = []
        for extractor in self.extractors:
            records.extend(extractor.extract(content))
        return records
