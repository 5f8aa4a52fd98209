"""Bounded-concurrency retrieval of external links."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional, Sequence

import httpx

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@dataclass
class FetchResult:
    """
    Outcome of fetching one link.

    Attributes:
        url: Link that was requested
        effective_url: Final URL after redirects (None on transport failure)
        content: Response body text (None on failure)
        status_code: HTTP status (None if no response arrived)
        error: Failure description (None on success)
        fetched_at: When the response arrived (None on transport failure)
    """

    url: str
    effective_url: Optional[str] = None
    content: Optional[str] = None
    status_code: Optional[int] = None
    error: Optional[str] = None
    fetched_at: Optional[datetime] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def __repr__(self) -> str:
        state = "ok" if self.ok else f"error={self.error}"
        return f"FetchResult(url={self.url}, {state})"


def build_link_client(
    connect_timeout: float = 3.14,
    request_timeout: float = 10.0,
    user_agent: Optional[str] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> httpx.AsyncClient:
    """
    Create the HTTP client used for external links.

    Args:
        connect_timeout: Seconds allowed to establish a connection
        request_timeout: Seconds allowed for each read/write
        user_agent: User-Agent header
        transport: Optional transport (tests pass httpx.MockTransport)

    Returns:
        Configured httpx.AsyncClient (caller closes it)
    """
    headers = {"User-Agent": user_agent} if user_agent else None
    return httpx.AsyncClient(
        headers=headers,
        timeout=httpx.Timeout(request_timeout, connect=connect_timeout),
        follow_redirects=True,
        transport=transport,
    )


class FetchBatcher:
    """
    Fetch many links in fixed-size chunks with bounded concurrency.

    Each chunk's requests run concurrently, limited by a semaphore. A failing
    request (timeout, connection error, non-2xx status) becomes an error
    FetchResult; it never aborts the chunk or raises out of fetch_all().
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        chunk_size: int = 25,
        concurrency_limit: int = 25,
        request_timeout: float = 10.0
    ):
        """
        Initialize the batcher.

        Args:
            client: HTTP client (see build_link_client)
            chunk_size: Links per chunk, independent of concurrency
            concurrency_limit: Default maximum in-flight requests
            request_timeout: Hard overall timeout per request in seconds
        """
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.client = client
        self.chunk_size = chunk_size
        self.concurrency_limit = concurrency_limit
        self.request_timeout = request_timeout

    async def fetch_all(
        self,
        links: Sequence[str],
        concurrency_limit: Optional[int] = None,
        on_result: Optional[Callable[[FetchResult], None]] = None
    ) -> List[FetchResult]:
        """
        Fetch every link and return one result per link.

        Results come back in completion order, not input order.

        Args:
            links: Links to fetch
            concurrency_limit: Maximum in-flight requests (default: instance setting)
            on_result: Called as each request completes, successful or not

        Returns:
            List of FetchResults, same length as links
        """
        limit = concurrency_limit or self.concurrency_limit
        semaphore = asyncio.Semaphore(limit)
        results: List[FetchResult] = []

        for start in range(0, len(links), self.chunk_size):
            chunk = links[start:start + self.chunk_size]
            tasks = [
                asyncio.ensure_future(self._fetch_one(url, semaphore))
                for url in chunk
            ]
            for next_done in asyncio.as_completed(tasks):
                result = await next_done
                results.append(result)
                if on_result is not None:
                    on_result(result)

        failed = sum(1 for r in results if not r.ok)
        logger.info(f"Fetched {len(results) - failed}/{len(results)} links ({failed} failed)")
        return results

    async def _fetch_one(self, url: str, semaphore: asyncio.Semaphore) -> FetchResult:
        """Fetch a single link under the semaphore, converting failures to results."""
        async with semaphore:
            try:
                response = await asyncio.wait_for(
                    self.client.get(url, follow_redirects=True),
                    timeout=self.request_timeout
                )
            except asyncio.TimeoutError:
                logger.debug(f"Timed out fetching {url}")
                return FetchResult(url=url, error=f"timeout after {self.request_timeout}s")
            except Exception as e:
                logger.debug(f"Failed to fetch {url}: {e}")
                return FetchResult(url=url, error=f"{type(e).__name__}: {e}")

        fetched_at = datetime.utcnow()
        effective_url = str(response.url)
        if not response.is_success:
            logger.debug(f"HTTP {response.status_code} for {url}")
            return FetchResult(
                url=url,
                effective_url=effective_url,
                status_code=response.status_code,
                error=f"HTTP {response.status_code}",
                fetched_at=fetched_at
            )

        return FetchResult(
            url=url,
            effective_url=effective_url,
            content=response.text,
            status_code=response.status_code,
            fetched_at=fetched_at
        )
