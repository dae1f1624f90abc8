# site_crawler/crawler/__init__.py
"""Crawl core: URL model, frontier primitives, worker pool and its collaborators."""
from site_crawler.crawler.crawler import AsyncCrawler
from site_crawler.crawler.frontier import Frontier, VisitedSet
from site_crawler.crawler.models import CrawlResult, CrawlStatus, CrawlSummary, CrawlUrl

__all__ = [
    "AsyncCrawler",
    "CrawlResult",
    "CrawlStatus",
    "CrawlSummary",
    "CrawlUrl",
    "Frontier",
    "VisitedSet",
]
