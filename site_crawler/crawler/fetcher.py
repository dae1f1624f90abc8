# site_crawler/crawler/fetcher.py
"""
Fetcher module: HTTP retrieval of HTML pages with timeout, retry/backoff and content-type filtering.
"""
from __future__ import annotations

import asyncio
from typing import Optional, Sequence

from aiohttp import ClientError, ClientSession, ClientTimeout

from site_crawler.config import CrawlerConfig
from site_crawler.crawler.models import CrawlUrl
from site_crawler.logger import get_logger

__all__ = ("AiohttpPageFetcher", "FetchError", "RETRY_STATUS")

RETRY_STATUS: Sequence[int] = tuple(range(500, 600)) + (429,)
MAX_BACKOFF = 60.0

DEFAULT_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}

logger = get_logger("fetcher")


class FetchError(Exception):
    """Transport-level failure that survived every retry."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


class _RetryableStatus(Exception):
    def __init__(self, status: int) -> None:
        super().__init__(f"HTTP {status}")
        self.status = status


class AiohttpPageFetcher:
    """Fetches HTML pages with aiohttp.

    Use as an async context manager, or hand in an existing session (which
    then stays owned by the caller)::

        async with AiohttpPageFetcher(config) as fetcher:
            html = await fetcher.fetch_page(CrawlUrl("example.com"))
    """

    def __init__(
        self,
        config: CrawlerConfig,
        session: Optional[ClientSession] = None,
        *,
        backoff_factor: float = 1.0,
    ) -> None:
        self.config = config
        self.session = session
        self.backoff_factor = backoff_factor
        self._owns_session = session is None

    async def __aenter__(self) -> AiohttpPageFetcher:
        if self.session is None:
            self.session = ClientSession(
                timeout=ClientTimeout(total=self.config.timeout),
                headers={"User-Agent": self.config.user_agent, **DEFAULT_HEADERS},
                raise_for_status=False,
            )
            self._owns_session = True
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()

    async def fetch_page(self, url: CrawlUrl) -> Optional[str]:
        """
        Return the HTML body of *url*.

        ``None`` for non-2xx responses, non-HTML content and retryable statuses
        that never recovered. Raises :class:`FetchError` when the connection
        keeps failing after ``max_retries`` retries.
        """
        if not self.session:
            raise RuntimeError("Session not initialized")

        target = url.normalized
        attempts = 0
        while True:
            try:
                return await self._get(target)
            except _RetryableStatus as e:
                attempts += 1
                if attempts > self.config.max_retries:
                    logger.warning("HTTP %s for %s after %d attempts", e.status, target, attempts)
                    return None
                reason = str(e)
            except (ClientError, asyncio.TimeoutError) as e:
                attempts += 1
                reason = str(e) or type(e).__name__
                if attempts > self.config.max_retries:
                    logger.warning("Failed %s: %s", target, reason)
                    raise FetchError(target, reason) from e
            backoff = min(MAX_BACKOFF, self.backoff_factor * 2 ** (attempts - 1))
            logger.debug(
                "Retry %d/%d for %s after %.2f s (%s)",
                attempts, self.config.max_retries, target, backoff, reason,
            )
            await asyncio.sleep(backoff)

    async def _get(self, target: str) -> Optional[str]:
        logger.debug("Fetching page: %s", target)
        async with self.session.get(  # type: ignore[union-attr]
            target,
            headers={"User-Agent": self.config.user_agent, **DEFAULT_HEADERS},
            timeout=ClientTimeout(total=self.config.timeout),
            allow_redirects=True,
        ) as resp:
            if resp.status in RETRY_STATUS:
                raise _RetryableStatus(resp.status)
            if not 200 <= resp.status < 300:
                logger.warning("HTTP %s for %s", resp.status, target)
                return None
            mime = resp.headers.get("Content-Type", "").split(";", 1)[0].strip().lower()
            if mime != "text/html":
                logger.debug("Skipping non-HTML content: %s for %s", mime or "<none>", target)
                return None
            return await resp.text(errors="replace")
