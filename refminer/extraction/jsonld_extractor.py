"""JSON-LD extractor for application/ld+json script blocks."""

import json
import logging
from typing import Any, List

from bs4 import BeautifulSoup

from refminer.models import MicroRecord
from .base_extractor import BaseRecordExtractor

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class JsonLdExtractor(BaseRecordExtractor):
    """
    Extract typed JSON-LD nodes as records.

    Top-level nodes, list members and "@graph" members with an "@type" each
    become one record. Nested objects are flattened to their "name".
    """

    def __init__(self, parser: str = "html.parser"):
        self.parser = parser

    def extract(self, content: str) -> List[MicroRecord]:
        if not content or "ld+json" not in content:
            return []

        soup = BeautifulSoup(content, self.parser)
        records = []
        for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
            try:
                data = json.loads(script.string or "")
            except ValueError as e:
                logger.debug(f"Skipping malformed JSON-LD block: {e}")
                continue
            for node in self._iter_nodes(data):
                records.append(self._read_node(node))

        logger.debug(f"Extracted {len(records)} JSON-LD items")
        return records

    def _iter_nodes(self, data: Any):
        if isinstance(data, list):
            for entry in data:
                yield from self._iter_nodes(entry)
        elif isinstance(data, dict):
            if "@graph" in data:
                yield from self._iter_nodes(data["@graph"])
            elif "@type" in data:
                yield data

    def _read_node(self, node: dict) -> MicroRecord:
        declared = node["@type"]
        types = declared if isinstance(declared, list) else [declared]
        record = MicroRecord(types=[str(t) for t in types])
        for key, value in node.items():
            if key.startswith("@"):
                continue
            for text in self._flatten(value):
                record.add(key, text)
        return record

    def _flatten(self, value: Any) -> List[str]:
        if isinstance(value, list):
            flat = []
            for entry in value:
                flat.extend(self._flatten(entry))
            return flat
        if isinstance(value, dict):
            for key in ("name", "@value", "@id"):
                if key in value:
                    return self._flatten(value[key])
            return []
        if isinstance(value, bool) or value is None:
            return []
        return [str(value)]
