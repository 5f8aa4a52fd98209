"""MicroRecord model representing one structured item found on a web page."""

from dataclasses import dataclass, field
from typing import Dict, List


@dataclass
class MicroRecord:
    """
    A typed property bag extracted from a page's embedded markup.

    Attributes:
        types: Declared item types (e.g., "http://schema.org/Movie")
        properties: Field name -> one or more string values
    """

    types: List[str] = field(default_factory=list)
    properties: Dict[str, List[str]] = field(default_factory=dict)

    def has_type(self, type_name: str) -> bool:
        """
        Check whether the record declares a type.

        Both full type URLs and bare names are accepted; the comparison uses
        the last path segment, case-insensitively.

        Args:
            type_name: Type name such as "Movie" or "http://schema.org/Movie"

        Returns:
            True if any declared type matches
        """
        wanted = _short_type(type_name)
        return any(_short_type(t) == wanted for t in self.types)

    def get(self, field_name: str) -> List[str]:
        """Return the values of a field (empty list if absent)."""
        return self.properties.get(field_name, [])

    def add(self, field_name: str, value: str):
        """Append a value to a field, skipping blanks."""
        if value is None:
            return
        value = value.strip()
        if value:
            self.properties.setdefault(field_name, []).append(value)

    def __repr__(self) -> str:
        return f"MicroRecord(types={self.types}, fields={sorted(self.properties)})"


def _short_type(type_name: str) -> str:
    return type_name.rstrip("/").rsplit("/", 1)[-1].rsplit("#", 1)[-1].lower()
