"""Persistence: processed ledger, entity stores and local citation log."""

from .processed_ledger import ProcessedLedger
from .citation_store import CitationStore
from .entity_store import (
    BaseEntityStore,
    WikibaseEntityStore,
    DryRunEntityStore,
    entity_from_wikibase,
    citation_snaks,
)

__all__ = [
    "ProcessedLedger",
    "CitationStore",
    "BaseEntityStore",
    "WikibaseEntityStore",
    "DryRunEntityStore",
    "entity_from_wikibase",
    "citation_snaks",
]
