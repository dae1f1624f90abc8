# File: tests/test_models.py
import pytest
from pydantic import ValidationError
from site_crawler.crawler.models import CrawlResult, CrawlStatus, CrawlSummary, CrawlUrl
from site_crawler.utils import normalize_url


@pytest.mark.parametrize(
    "raw,normalized,domain",
    [
        ("https://example.com", "https://example.com/", "example.com"),
        ("http://example.com", "http://example.com/", "example.com"),
        ("example.com", "https://example.com/", "example.com"),
        ("https://example.com/path/", "https://example.com/path", "example.com"),
        ("https://example.com/", "https://example.com/", "example.com"),
        ("https://EXAMPLE.COM/Path", "https://example.com/Path", "example.com"),
        ("https://example.com/path?param=value#frag", "https://example.com/path", "example.com"),
        ("https://sub.example.com", "https://sub.example.com/", "sub.example.com"),
        ("https://example.com:8080/path", "https://example.com:8080/path", "example.com"),
        ("HTTPS://Example.com//", "https://example.com/", "example.com"),
        ("  example.com/a  ", "https://example.com/a", "example.com"),
    ],
)
def test_normalization(raw, normalized, domain):
    url = CrawlUrl(raw)
    assert url.normalized == normalized
    assert url.domain == domain
    assert str(url) == normalized


@pytest.mark.parametrize(
    "raw",
    [
        "example.com",
        "https://EXAMPLE.com/a/b/",
        "http://localhost:8080/x//",
        "https://example.com/a?b=c",
        "https://[::1]:8443/index.html",
        "https://user:pw@example.com/private/",
    ],
)
def test_normalization_is_idempotent(raw):
    once = normalize_url(raw)
    assert normalize_url(once) == once
    assert CrawlUrl(once) == CrawlUrl(raw)


@pytest.mark.parametrize(
    "raw",
    ["", "   ", "ht tp://bad url", "ht tp://invalid url with spaces", "https://", "https://exa mple.com",
     "https://example.com:99999/", "https://ex<ample>.com/"],
)
def test_invalid_urls_raise_validation_error(raw):
    with pytest.raises(ValidationError):
        CrawlUrl(raw)


def test_equality_and_hash_use_normalized_form():
    a = CrawlUrl("EXAMPLE.com/page/")
    b = CrawlUrl("https://example.com/page")
    assert a == b
    assert hash(a) == hash(b)
    assert len({a, b}) == 1
    assert a != CrawlUrl("https://example.com/other")


def test_crawl_url_is_immutable():
    url = CrawlUrl("example.com")
    with pytest.raises(ValidationError):
        url.value = "https://other.com/"  # type: ignore[misc]


def test_crawl_result_factories():
    url = CrawlUrl("example.com")
    ok = CrawlResult.success(url, [CrawlUrl("example.com/a")])
    assert ok.status is CrawlStatus.SUCCESS
    assert ok.links == (CrawlUrl("example.com/a"),)
    assert ok.error_message is None

    bad = CrawlResult.failed(url, "boom")
    assert bad.status is CrawlStatus.FAILED
    assert bad.links == ()
    assert bad.to_dict() == {"url": "https://example.com/", "status": "failed", "links": [], "error": "boom"}


def test_summary_success_rate():
    assert CrawlSummary(4, 3, 1).success_rate == 75
    assert CrawlSummary(3, 2, 1).success_rate == 66
    assert CrawlSummary().success_rate == 0
