"""Link harvesting and retrieval."""

from .link_normalizer import normalize_link, is_archive_link, harvest_links
from .fetch_batcher import FetchBatcher, FetchResult, build_link_client
from .page_renderer import MediaWikiPageRenderer, RenderedPage, site_host

__all__ = [
    "normalize_link",
    "is_archive_link",
    "harvest_links",
    "FetchBatcher",
    "FetchResult",
    "build_link_client",
    "MediaWikiPageRenderer",
    "RenderedPage",
    "site_host",
]
