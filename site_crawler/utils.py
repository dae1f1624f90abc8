# File: site_crawler/utils.py
"""site_crawler.utils: URL normalisation helpers shared by the crawler and the link extractor."""

from __future__ import annotations

import re
from typing import Sequence
from urllib.parse import urlsplit, urlunsplit

from site_crawler.logger import logger

__all__: Sequence[str] = (
    "DEFAULT_SCHEME",
    "normalize_url",
    "extract_domain",
)

DEFAULT_SCHEME = "https"

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)
_WHITESPACE_RE = re.compile(r"\s")
_HOST_RE = re.compile(r"^[\w\-.~%]+$")


def normalize_url(url: str) -> str:
    """Return the canonical form of *url*.

    Missing schemes default to ``https``; scheme and host are lower-cased; an
    explicit port is kept; user-info, query and fragment are dropped; the root
    path is ``/`` and other paths lose their trailing slashes.

    Raises :class:`ValueError` when *url* cannot be read as an absolute URL.
    The function is idempotent: ``normalize_url(normalize_url(u)) == normalize_url(u)``.
    """
    if not isinstance(url, str):
        raise ValueError(f"URL must be a string, got {type(url).__name__}")
    raw = url.strip()
    if not raw:
        raise ValueError("URL cannot be blank")
    if _WHITESPACE_RE.search(raw):
        raise ValueError(f"Invalid URL format: {url!r}")
    if not _SCHEME_RE.match(raw):
        raw = f"{DEFAULT_SCHEME}://{raw}"

    parts = urlsplit(raw)
    host = parts.hostname
    if not host:
        raise ValueError(f"Invalid URL format: {url!r}")
    if ":" in host:
        # IPv6 literal, brackets were stripped by urlsplit
        host = f"[{host}]"
    elif not _HOST_RE.match(host):
        raise ValueError(f"Invalid host in URL: {url!r}")

    try:
        port = parts.port
    except ValueError as exc:
        raise ValueError(f"Invalid port in URL: {url!r}") from exc

    netloc = host if port is None else f"{host}:{port}"
    path = parts.path.rstrip("/") or "/"
    normalized = urlunsplit((parts.scheme.lower(), netloc, path, "", ""))
    logger.debug("Normalized URL: %s -> %s", url, normalized)
    return normalized


def extract_domain(url: str) -> str:
    """Return the lower-cased host of an already normalised *url* (port excluded)."""
    return (urlsplit(url).hostname or "").lower()
