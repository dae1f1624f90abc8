# === FILE: site_crawler/crawler/crawler.py ===
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from site_crawler.aggregator import CrawlCounters
from site_crawler.config import CrawlerConfig
from site_crawler.crawler.frontier import Frontier, VisitedSet
from site_crawler.crawler.interfaces import LinkExtractor, PageFetcher, ResultReporter
from site_crawler.crawler.models import CrawlResult, CrawlStatus, CrawlSummary, CrawlUrl

__all__ = ("AsyncCrawler",)

FETCH_FAILED_MESSAGE = "Failed to fetch page content"


def _describe(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


@dataclass
class _CrawlState:
    """Everything the workers of one crawl share."""

    domain: str
    permits: asyncio.Semaphore
    frontier: Frontier = field(default_factory=Frontier)
    visited: VisitedSet = field(default_factory=VisitedSet)
    counters: CrawlCounters = field(default_factory=CrawlCounters)


class AsyncCrawler:
    """Single-domain crawler: a pool of asyncio workers draining one frontier.

    Each normalised URL is fetched at most once; only links on the seed's
    host are followed. ``max_concurrency`` permits bound the number of
    fetches in flight; *workers* (default: the same number) sets how many
    worker tasks compete for them.
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        extractor: LinkExtractor,
        reporter: ResultReporter,
        config: Optional[CrawlerConfig] = None,
        *,
        workers: Optional[int] = None,
    ) -> None:
        self.fetcher = fetcher
        self.extractor = extractor
        self.reporter = reporter
        self.config = config or CrawlerConfig()
        if workers is not None and workers < 1:
            raise ValueError("workers must be >= 1")
        self.workers: int = workers or self.config.max_concurrency
        self.logger = logging.getLogger("SiteCrawler")

    async def crawl_website(self, seed: CrawlUrl | str) -> CrawlSummary:
        """Crawl every page reachable from *seed* on the same host and return the totals.

        An invalid *seed* raises :class:`pydantic.ValidationError` before any
        fetch. Per-page failures end up in ``failed_pages``; anything else
        raised inside a worker aborts the crawl and propagates from here.
        """
        start_url = seed if isinstance(seed, CrawlUrl) else CrawlUrl(seed)
        state = _CrawlState(
            domain=start_url.domain,
            permits=asyncio.Semaphore(self.config.max_concurrency),
        )
        self.logger.info("Старт обхода: %s (домен %s)", start_url, state.domain)
        started = time.monotonic()

        state.visited.mark_if_absent(start_url)
        state.frontier.push(start_url)

        workers = [
            asyncio.create_task(self._worker(i, state), name=f"crawl-worker-{i}")
            for i in range(self.workers)
        ]
        drained = asyncio.create_task(state.frontier.join(), name="crawl-drained")
        try:
            await asyncio.wait([drained, *workers], return_when=asyncio.FIRST_COMPLETED)
            interrupted = state.frontier.in_flight
        finally:
            drained.cancel()
            for w in workers:
                w.cancel()
            outcomes = await asyncio.gather(*workers, return_exceptions=True)
            await asyncio.gather(drained, return_exceptions=True)

        for outcome in outcomes:
            if isinstance(outcome, Exception):
                self.logger.error(
                    "Обход прерван: %s (в работе оставалось %d URL)", _describe(outcome), interrupted
                )
                raise outcome

        summary = state.counters.snapshot()
        self.reporter.report_completion(
            summary.total_pages, summary.successful_pages, summary.failed_pages
        )
        duration = time.monotonic() - started
        self.logger.info(
            "Завершено: %d страниц (%d успешно, %d с ошибкой), найдено %d URL, за %.2f с",
            summary.total_pages,
            summary.successful_pages,
            summary.failed_pages,
            len(state.visited),
            duration,
        )
        return summary

    async def _worker(self, worker_id: int, state: _CrawlState) -> None:
        self.logger.debug("Worker %d started", worker_id)
        while True:
            url = await state.frontier.pop()
            async with state.permits:
                try:
                    result = await self._visit(url, state.domain)
                    self._enqueue(result, state)
                    self.reporter.report_result(result)
                    state.counters.record(result)
                finally:
                    state.frontier.done()
                if self.config.request_delay_millis:
                    await asyncio.sleep(self.config.request_delay)

    def _enqueue(self, result: CrawlResult, state: _CrawlState) -> None:
        if result.status is not CrawlStatus.SUCCESS:
            return
        for link in result.links:
            if state.visited.mark_if_absent(link):
                state.frontier.push(link)

    async def _visit(self, url: CrawlUrl, domain: str) -> CrawlResult:
        self.logger.debug("Crawling: %s", url)
        html, error = await self._fetch(url)
        if html is None:
            self.logger.warning("Failed to crawl %s: %s", url, error)
            return CrawlResult.failed(url, error or FETCH_FAILED_MESSAGE)

        links, error = self._extract(html, url)
        if error is not None:
            self.logger.warning("Failed to extract links from %s: %s", url, error)
            return CrawlResult.failed(url, error)

        same_domain = [link for link in links if link.domain == domain]
        self.logger.debug("%s: %d links, %d on %s", url, len(links), len(same_domain), domain)
        return CrawlResult.success(url, same_domain)

    async def _fetch(self, url: CrawlUrl) -> Tuple[Optional[str], Optional[str]]:
        try:
            html = await self.fetcher.fetch_page(url)
        except Exception as exc:
            return None, _describe(exc)
        if html is None:
            return None, FETCH_FAILED_MESSAGE
        return html, None

    def _extract(self, html: str, url: CrawlUrl) -> Tuple[List[CrawlUrl], Optional[str]]:
        try:
            return list(self.extractor.extract_links(html, url)), None
        except Exception as exc:
            return [], _describe(exc)
