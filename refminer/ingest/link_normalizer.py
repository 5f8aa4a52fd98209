"""Canonicalization of outbound links harvested from source pages."""

import re
from typing import Iterable, List

# Mirror and country hosts (m.imdb.com, uk.imdb.com, www.imdb.de, ...) collapse to one host
_IMDB_HOST = re.compile(r"//[^./]+\.imdb\.[^/]+(?=/|$)", re.IGNORECASE)
CANONICAL_IMDB_HOST = "//www.imdb.com"

ARCHIVE_MARKERS = ("archive.org",)

# Slashes and whitespace at either end, in any mix
_EDGE_JUNK = re.compile(r"^[\s/]+|[\s/]+$")


def normalize_link(raw: str) -> str:
    """
    Canonicalize a raw link into a comparable form.

    Rules, applied in order:
    1. A protocol-relative link ("//host/path") gets the http scheme
    2. Any fragment ("#...") is dropped
    3. Leading and trailing "/" and whitespace are trimmed, together
    4. Known IMDb mirror/country hosts are rewritten to www.imdb.com

    Pure and idempotent. Malformed input is never rejected; it comes back
    trimmed.

    Args:
        raw: Link as harvested

    Returns:
        Normalized link

    Examples:
        >>> normalize_link("//example.com/a")
        'http://example.com/a'
        >>> normalize_link("http://x.com/a#sec1")
        'http://x.com/a'
    """
    link = (raw or "").strip()

    if link.startswith("//"):
        link = "http:" + link

    link = link.split("#", 1)[0]
    link = _EDGE_JUNK.sub("", link)

    if ".imdb." in link.lower():
        link = _IMDB_HOST.sub(CANONICAL_IMDB_HOST, link, count=1)

    return link


def is_archive_link(raw: str) -> bool:
    """True for links into a web archive mirror, which are never fetched."""
    return any(marker in raw for marker in ARCHIVE_MARKERS)


def harvest_links(raw_links: Iterable[str]) -> List[str]:
    """
    Drop archive links, normalize, and deduplicate.

    First-seen order is kept; callers shuffle if they need to.

    Args:
        raw_links: Links as harvested from one or more pages

    Returns:
        Distinct normalized links
    """
    seen = set()
    links = []
    for raw in raw_links:
        if is_archive_link(raw):
            continue
        link = normalize_link(raw)
        if not link or link in seen:
            continue
        seen.add(link)
        links.append(link)
    return links
