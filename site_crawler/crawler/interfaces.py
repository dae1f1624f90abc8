# site_crawler/crawler/interfaces.py
"""
Collaborator contracts used by :class:`~site_crawler.crawler.crawler.AsyncCrawler`.

Any object with matching methods will do; tests substitute simple doubles.
"""
from __future__ import annotations

from typing import List, Optional, Protocol, runtime_checkable

from site_crawler.crawler.models import CrawlResult, CrawlUrl


@runtime_checkable
class PageFetcher(Protocol):
    async def fetch_page(self, url: CrawlUrl) -> Optional[str]:
        """Return HTML for *url*, ``None`` for non-success or non-HTML responses.

        Must be bounded by the configured timeout; may raise on transport failure.
        """
        ...


@runtime_checkable
class LinkExtractor(Protocol):
    def extract_links(self, html: str, base_url: CrawlUrl) -> List[CrawlUrl]:
        """Return absolute http(s) links found in *html*, de-duplicated."""
        ...


@runtime_checkable
class ResultReporter(Protocol):
    def report_result(self, result: CrawlResult) -> None:
        """Called once per visited URL."""
        ...

    def report_completion(self, total: int, successful: int, failed: int) -> None:
        """Called exactly once, after every worker has stopped."""
        ...
