"""Structured-data extraction module."""

from .base_extractor import BaseRecordExtractor, CompositeExtractor
from .microdata_extractor import MicrodataExtractor
from .jsonld_extractor import JsonLdExtractor


def default_extractor() -> BaseRecordExtractor:
    """Microdata followed by JSON-LD."""
    return CompositeExtractor([MicrodataExtractor(), JsonLdExtractor()])


__all__ = [
    "BaseRecordExtractor",
    "CompositeExtractor",
    "MicrodataExtractor",
    "JsonLdExtractor",
    "default_extractor",
]
