"""Stable ID generation utilities for citations."""

import hashlib


def normalize_text(text: str) -> str:
    """
    Normalize text for consistent hashing and comparison.

    Collapses whitespace and strips leading/trailing space.

    Args:
        text: Input text

    Returns:
        Normalized text
    """
    return " ".join(text.strip().split())


def normalize_label(label: str) -> str:
    """
    Normalize a display label for case-insensitive comparison.

    Args:
        label: Label or free-text value

    Returns:
        Whitespace-collapsed, casefolded label
    """
    return normalize_text(label).casefold()


def generate_citation_id(entity_id: str, statement_id: str, source_url: str) -> str:
    """
    Generate a deterministic ID for a Citation.

    The ID is a SHA256 hash of:
    - entity_id
    - statement_id (the cited attribute value)
    - source_url

    The same source attached to the same statement always gets the same ID,
    which keeps staging and the local citation log idempotent.

    Args:
        entity_id: Entity identifier (e.g., "Q42")
        statement_id: Statement GUID (e.g., "Q42$8F1B...")
        source_url: URL of the supporting page

    Returns:
        SHA256 hash as hex string

    Example:
        >>> generate_citation_id("Q42", "Q42$abc", "http://www.imdb.com/name/nm0010930")
        '5c0d9a...'
    """
    components = f"{entity_id}|{statement_id}|{source_url}"
    hash_object = hashlib.sha256(components.encode('utf-8'))
    return hash_object.hexdigest()
