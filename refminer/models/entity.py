"""Entity model representing a knowledge-base item and its attribute values."""

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Dict, Any, List, Tuple, Union

from .stable_id import generate_citation_id


# Wikibase time precision scale
PRECISION_MILLENNIUM = 6
PRECISION_CENTURY = 7
PRECISION_DECADE = 8
PRECISION_YEAR = 9
PRECISION_MONTH = 10
PRECISION_DAY = 11

_WIKIBASE_TIME = re.compile(r"^([+-]?\d+)-(\d{2})-(\d{2})T")


@dataclass(frozen=True)
class EntityReference:
    """
    An attribute value pointing at another entity.

    Attributes:
        entity_id: Referenced entity identifier (e.g., "Q30")
        labels: Display labels and aliases of the referenced entity
    """

    entity_id: str
    labels: Tuple[str, ...] = ()

    @property
    def key(self) -> str:
        return self.entity_id


@dataclass(frozen=True)
class DateValue:
    """
    A calendar date with a precision.

    Missing parts (month/day) are 0 when the precision does not cover them.

    Attributes:
        year: Year (may be negative)
        month: Month 1-12, or 0
        day: Day 1-31, or 0
        precision: Wikibase precision (PRECISION_DAY, PRECISION_YEAR, ...)
    """

    year: int
    month: int = 0
    day: int = 0
    precision: int = PRECISION_DAY

    @property
    def key(self) -> str:
        return self.to_wikibase_time()

    @classmethod
    def from_wikibase_time(cls, time: str, precision: int) -> 'DateValue':
        """
        Parse a Wikibase time string such as "+1946-06-14T00:00:00Z".

        Args:
            time: Wikibase time string
            precision: Wikibase precision

        Returns:
            DateValue

        Raises:
            ValueError: If the string is not a Wikibase time
        """
        match = _WIKIBASE_TIME.match(time)
        if not match:
            raise ValueError(f"Not a Wikibase time value: {time!r}")
        year, month, day = (int(part) for part in match.groups())
        return cls(year=year, month=month, day=day, precision=precision)

    def to_wikibase_time(self) -> str:
        sign = "-" if self.year < 0 else "+"
        return f"{sign}{abs(self.year):04d}-{self.month:02d}-{self.day:02d}T00:00:00Z"

    def truncated(self, precision: int) -> Tuple[int, ...]:
        """
        Reduce the date to the parts that are significant at a precision.

        Args:
            precision: Target precision

        Returns:
            Comparable tuple
        """
        if precision >= PRECISION_DAY:
            return (self.year, self.month, self.day)
        if precision == PRECISION_MONTH:
            return (self.year, self.month)
        if precision == PRECISION_YEAR:
            return (self.year,)
        if precision == PRECISION_DECADE:
            return (self.year // 10,)
        if precision == PRECISION_CENTURY:
            return ((self.year - 1) // 100,)
        return ((self.year - 1) // 1000,)


@dataclass(frozen=True)
class TextValue:
    """
    A free-text attribute value.

    Attributes:
        text: The string value
        language: Language tag for monolingual text, None for plain strings
    """

    text: str
    language: Optional[str] = None

    @property
    def key(self) -> str:
        return self.text


AttributeValue = Union[EntityReference, DateValue, TextValue]


@dataclass
class Statement:
    """
    One value of an entity attribute together with its existing citations.

    Attributes:
        statement_id: Statement GUID in the entity store
        attribute_key: Attribute identifier (e.g., "P57")
        value: The attribute value
        reference_urls: Source URLs already cited for this value
    """

    statement_id: str
    attribute_key: str
    value: AttributeValue
    reference_urls: List[str] = field(default_factory=list)

    def __repr__(self) -> str:
        return f"Statement(id={self.statement_id}, attribute={self.attribute_key}, value={self.value})"


@dataclass
class Citation:
    """
    A staged citation: a source URL supporting one statement.

    Attributes:
        citation_id: Deterministic ID (see generate_citation_id)
        entity_id: Entity the statement belongs to
        attribute_key: Attribute of the statement
        statement_id: Statement GUID
        source_url: Supporting page URL
        retrieved_at: When the supporting page was fetched
    """

    citation_id: str
    entity_id: str
    attribute_key: str
    statement_id: str
    source_url: str
    retrieved_at: Optional[datetime] = None

    def __post_init__(self):
        """Initialize timestamp if not provided."""
        if self.retrieved_at is None:
            self.retrieved_at = datetime.utcnow()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "citation_id": self.citation_id,
            "entity_id": self.entity_id,
            "attribute_key": self.attribute_key,
            "statement_id": self.statement_id,
            "source_url": self.source_url,
            "retrieved_at": self.retrieved_at.isoformat() if self.retrieved_at else None,
        }


@dataclass
class Entity:
    """
    A transient, read-mostly view of a knowledge-base item.

    Attributes:
        entity_id: Unique identifier (e.g., "Q42")
        labels: Language -> display label
        statements: Attribute key -> ordered statements
        sitelinks: Site id (e.g., "enwiki") -> page title
        pending_citations: Citations staged during this run, not yet saved
    """

    entity_id: str
    labels: Dict[str, str] = field(default_factory=dict)
    statements: Dict[str, List[Statement]] = field(default_factory=dict)
    sitelinks: Dict[str, str] = field(default_factory=dict)
    pending_citations: List[Citation] = field(default_factory=list)

    def get_statements(self, attribute_key: str) -> List[Statement]:
        """Return statements for an attribute (empty list if none)."""
        return self.statements.get(attribute_key, [])

    def get_values(self, attribute_key: str) -> List[AttributeValue]:
        return [s.value for s in self.get_statements(attribute_key)]

    def stage_citation(
        self,
        statement: Statement,
        source_url: str,
        retrieved_at: Optional[datetime] = None
    ) -> bool:
        """
        Stage a citation for a statement.

        Nothing is staged if the statement already cites the URL or the same
        citation was staged earlier in this run.

        Args:
            statement: Statement being corroborated
            source_url: Supporting page URL
            retrieved_at: When the page was fetched (default: now)

        Returns:
            True if a new citation was staged
        """
        if source_url in statement.reference_urls:
            return False

        citation_id = generate_citation_id(self.entity_id, statement.statement_id, source_url)
        if any(c.citation_id == citation_id for c in self.pending_citations):
            return False

        self.pending_citations.append(Citation(
            citation_id=citation_id,
            entity_id=self.entity_id,
            attribute_key=statement.attribute_key,
            statement_id=statement.statement_id,
            source_url=source_url,
            retrieved_at=retrieved_at,
        ))
        return True

    def __repr__(self) -> str:
        return f"Entity(id={self.entity_id}, attributes={len(self.statements)}, sitelinks={len(self.sitelinks)})"
