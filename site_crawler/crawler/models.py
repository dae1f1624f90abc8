# site_crawler/crawler/models.py
"""
Data models for the SiteCrawler crawler.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from site_crawler.utils import extract_domain, normalize_url

__all__ = ("CrawlUrl", "CrawlStatus", "CrawlResult", "CrawlSummary")


class CrawlUrl(BaseModel):
    """Validated absolute URL, stored in normalised form.

    ``CrawlUrl("Example.com/a/")`` holds ``"https://example.com/a"``. Two
    instances with the same normalised string compare and hash equal.
    Invalid input raises :class:`pydantic.ValidationError`.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    value: str

    def __init__(self, value: str, /, **data: Any) -> None:
        super().__init__(value=value, **data)

    @field_validator("value", mode="before")
    @classmethod
    def _normalize(cls, v: Any) -> str:
        return normalize_url(v)

    @property
    def normalized(self) -> str:
        return self.value

    @property
    def domain(self) -> str:
        """Lower-cased host, port excluded."""
        return extract_domain(self.value)

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"CrawlUrl({self.value!r})"


class CrawlStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True, slots=True)
class CrawlResult:
    """Outcome of visiting one page; *links* holds the same-domain links found on it."""

    url: CrawlUrl
    links: tuple[CrawlUrl, ...] = ()
    status: CrawlStatus = CrawlStatus.SUCCESS
    error_message: Optional[str] = None

    @classmethod
    def success(cls, url: CrawlUrl, links: list[CrawlUrl] | tuple[CrawlUrl, ...]) -> CrawlResult:
        return cls(url=url, links=tuple(links), status=CrawlStatus.SUCCESS)

    @classmethod
    def failed(cls, url: CrawlUrl, message: str) -> CrawlResult:
        return cls(url=url, status=CrawlStatus.FAILED, error_message=message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url.normalized,
            "status": self.status.value,
            "links": [link.normalized for link in self.links],
            "error": self.error_message,
        }


@dataclass(frozen=True, slots=True)
class CrawlSummary:
    """Final counters of one crawl."""

    total_pages: int = 0
    successful_pages: int = 0
    failed_pages: int = 0
    skipped_pages: int = 0

    @property
    def success_rate(self) -> int:
        """Integer percentage of successful pages, 0 for an empty crawl."""
        return (self.successful_pages * 100) // self.total_pages if self.total_pages else 0

    def to_dict(self) -> dict[str, int]:
        return {
            "total_pages": self.total_pages,
            "successful_pages": self.successful_pages,
            "failed_pages": self.failed_pages,
            "skipped_pages": self.skipped_pages,
            "success_rate": self.success_rate,
        }
