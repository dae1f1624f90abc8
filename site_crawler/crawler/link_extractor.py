# site_crawler/crawler/link_extractor.py
"""
Link extraction for SiteCrawler: absolute http(s) links from ``<a href>`` tags.
"""
from __future__ import annotations

from typing import Dict, List
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup
from bs4.element import Tag
from pydantic import ValidationError

from site_crawler.crawler.models import CrawlUrl
from site_crawler.logger import get_logger

__all__ = ("SoupLinkExtractor", "extract_links")

_ALLOWED_SCHEMES = ("http", "https")

logger = get_logger("links")


def extract_links(html: str, base_url: CrawlUrl) -> List[CrawlUrl]:
    """
    Extract absolute HTTP(S) links from *html*.

    Relative references are resolved against ``base_url``; mailto:,
    javascript: and other schemes are dropped; duplicates (by normalised
    form) are removed keeping first-seen order. Never raises: markup that
    cannot be parsed yields an empty list.
    """
    try:
        soup = BeautifulSoup(html or "", "html.parser")
        tags = soup.find_all("a", href=True)
    except Exception as exc:  # html.parser can still choke on pathological input
        logger.warning("Failed to parse HTML for %s: %s", base_url, exc)
        return []

    found: Dict[str, CrawlUrl] = {}
    for tag in tags:
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if not isinstance(href_val, str):
            continue
        raw = href_val.strip()
        if not raw:
            continue
        try:
            absolute = urljoin(base_url.normalized, raw)
            if urlparse(absolute).scheme.lower() not in _ALLOWED_SCHEMES:
                continue
            link = CrawlUrl(absolute)
        except (ValidationError, ValueError):
            logger.debug("Invalid URL found: %s", raw)
            continue
        found.setdefault(link.normalized, link)

    logger.debug("Extracted %d links from %s", len(found), base_url)
    return list(found.values())


class SoupLinkExtractor:
    """:class:`~site_crawler.crawler.interfaces.LinkExtractor` backed by BeautifulSoup."""

    def extract_links(self, html: str, base_url: CrawlUrl) -> List[CrawlUrl]:
        return extract_links(html, base_url)
