"""Render source wiki pages and collect their outbound links."""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

import httpx

from refminer.errors import PageRenderError

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SPECIAL_SITE_HOSTS = {
    "commonswiki": "commons.wikimedia.org",
    "specieswiki": "species.wikimedia.org",
    "metawiki": "meta.wikimedia.org",
    "wikidatawiki": "www.wikidata.org",
    "mediawikiwiki": "www.mediawiki.org",
    "sourceswiki": "wikisource.org",
}


def site_host(site_id: str) -> Optional[str]:
    """
    Map a site id such as "enwiki" to its host.

    Args:
        site_id: Site id ending in "wiki"

    Returns:
        Host name, or None for site ids that are not wikis
    """
    if site_id in SPECIAL_SITE_HOSTS:
        return SPECIAL_SITE_HOSTS[site_id]
    if not site_id.endswith("wiki") or len(site_id) <= len("wiki"):
        return None
    language = site_id[:-len("wiki")].replace("_", "-")
    return f"{language}.wikipedia.org"


@dataclass
class RenderedPage:
    """Parsed page content relevant to reference discovery."""
    site_id: str
    title: str
    outbound_links: List[str] = field(default_factory=list)


class MediaWikiPageRenderer:
    """Render pages through the MediaWiki parse API."""

    def __init__(self, client: httpx.AsyncClient, scheme: str = "https"):
        """
        Args:
            client: HTTP client for wiki API requests
            scheme: URL scheme for wiki hosts
        """
        self.client = client
        self.scheme = scheme

    def api_url(self, site_id: str) -> str:
        host = site_host(site_id)
        if host is None:
            raise PageRenderError(f"Unknown site id: {site_id}")
        return f"{self.scheme}://{host}/w/api.php"

    async def render(self, site_id: str, title: str) -> RenderedPage:
        """
        Render one page and return its external links.

        Args:
            site_id: Site id (e.g., "enwiki")
            title: Page title on that site

        Returns:
            RenderedPage

        Raises:
            PageRenderError: On transport failure or an API error response
        """
        params = {
            "action": "parse",
            "page": title,
            "prop": "externallinks",
            "redirects": 1,
            "format": "json",
            "formatversion": 2,
        }
        try:
            response = await self.client.get(self.api_url(site_id), params=params)
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise PageRenderError(f"Failed to render {site_id}:{title}: {e}") from e

        if "error" in payload:
            info = payload["error"].get("info", payload["error"].get("code", "unknown error"))
            raise PageRenderError(f"Failed to render {site_id}:{title}: {info}")

        links = payload.get("parse", {}).get("externallinks", [])
        logger.debug(f"Rendered {site_id}:{title} ({len(links)} external links)")
        return RenderedPage(site_id=site_id, title=title, outbound_links=list(links))
