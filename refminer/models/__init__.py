"""Data models for reference discovery."""

from .entity import (
    Entity,
    Statement,
    Citation,
    EntityReference,
    DateValue,
    TextValue,
    AttributeValue,
    PRECISION_MILLENNIUM,
    PRECISION_CENTURY,
    PRECISION_DECADE,
    PRECISION_YEAR,
    PRECISION_MONTH,
    PRECISION_DAY,
)
from .micro_record import MicroRecord
from .stable_id import (
    generate_citation_id,
    normalize_text,
    normalize_label,
)

__all__ = [
    "Entity",
    "Statement",
    "Citation",
    "EntityReference",
    "DateValue",
    "TextValue",
    "AttributeValue",
    "MicroRecord",
    "PRECISION_MILLENNIUM",
    "PRECISION_CENTURY",
    "PRECISION_DECADE",
    "PRECISION_YEAR",
    "PRECISION_MONTH",
    "PRECISION_DAY",
    "generate_citation_id",
    "normalize_text",
    "normalize_label",
]
