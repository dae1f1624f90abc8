# site_crawler/crawler/frontier.py
"""
Shared work structures of one crawl: the URL frontier and the visited set.
"""
from __future__ import annotations

import asyncio
import threading
from typing import Optional, Set

from site_crawler.crawler.models import CrawlUrl

__all__ = ("Frontier", "VisitedSet")


class Frontier:
    """Unbounded FIFO of URLs waiting for a visit, with in-flight accounting.

    Every pushed URL stays *pending* until the worker that popped it calls
    :meth:`done`. Workers push the links they discover before calling
    :meth:`done`, so :meth:`join` returns only when the queue is empty and
    no popped URL can still produce more work.

    Safe for concurrent use by tasks running on one event loop.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[CrawlUrl] = asyncio.Queue()
        self._pending = 0

    def push(self, url: CrawlUrl) -> None:
        """Append *url*; never blocks."""
        self._queue.put_nowait(url)
        self._pending += 1

    def try_pop(self) -> Optional[CrawlUrl]:
        """Return the next URL, or ``None`` when nothing is queued right now."""
        try:
            return self._queue.get_nowait()
        except asyncio.QueueEmpty:
            return None

    async def pop(self) -> CrawlUrl:
        """Wait for the next URL."""
        return await self._queue.get()

    def done(self) -> None:
        """Mark one popped URL as fully processed."""
        self._pending -= 1
        self._queue.task_done()

    async def join(self) -> None:
        """Wait until every pushed URL has been popped and marked done."""
        await self._queue.join()

    @property
    def in_flight(self) -> int:
        """URLs popped but not yet marked done."""
        return self._pending - self._queue.qsize()


class VisitedSet:
    """Normalised URLs already accepted into the frontier.

    :meth:`mark_if_absent` is the only way in and is atomic across threads
    and tasks: for any key exactly one caller ever gets ``True``.
    """

    def __init__(self) -> None:
        self._keys: Set[str] = set()
        self._lock = threading.Lock()

    def mark_if_absent(self, key: str | CrawlUrl) -> bool:
        """Insert *key*; return ``True`` only if this call inserted it."""
        norm = key.normalized if isinstance(key, CrawlUrl) else key
        with self._lock:
            if norm in self._keys:
                return False
            self._keys.add(norm)
            return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._keys)
