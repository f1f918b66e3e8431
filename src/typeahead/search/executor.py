"""Paginated query executor with a stale-time cache.

Sits between the orchestrator and the HTTP client. Pages are cached by
``(query, page)``; a cached page younger than ``stale_time`` seconds is
served without touching the network. Identical requests issued while one
is outstanding share a single fetch.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Protocol

from typeahead.models import Page

logger = logging.getLogger(__name__)

FetchFn = Callable[[str, int], Awaitable[Page]]


class PageExecutor(Protocol):
    """Anything that can fetch one page of results for a query."""

    async def execute(self, query: str, page: int) -> Page: ...


@dataclass
class _CacheEntry:
    page: Page
    fetched_at: float


class CachingPageExecutor:
    """Cache-fronted page fetcher implementing ``PageExecutor``.

    Failures are never cached. Cancelling a caller does not cancel a fetch
    that other callers share; the fetch is shielded.
    """

    def __init__(
        self,
        fetch: FetchFn,
        stale_time: float = 300.0,
        max_entries: int = 256,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._fetch = fetch
        self._stale_time = stale_time
        self._max_entries = max_entries
        self._clock = clock
        self._cache: dict[tuple[str, int], _CacheEntry] = {}
        self._inflight: dict[tuple[str, int], asyncio.Task] = {}
        self.hits = 0
        self.misses = 0

    async def execute(self, query: str, page: int) -> Page:
        key = (query, page)
        entry = self._cache.get(key)
        if entry is not None and self._clock() - entry.fetched_at < self._stale_time:
            self.hits += 1
            logger.debug("Cache hit query=%r page=%d", query, page)
            return entry.page

        task = self._inflight.get(key)
        if task is None:
            self.misses += 1
            task = asyncio.get_running_loop().create_task(self._fetch(query, page))
            self._inflight[key] = task
            task.add_done_callback(lambda t, key=key: self._on_done(key, t))
        return await asyncio.shield(task)

    def _on_done(self, key: tuple[str, int], task: asyncio.Task) -> None:
        self._inflight.pop(key, None)
        if task.cancelled():
            return
        # Retrieve the exception even if every caller went away
        if task.exception() is not None:
            return
        self._cache.pop(key, None)
        self._cache[key] = _CacheEntry(task.result(), self._clock())
        while len(self._cache) > self._max_entries:
            oldest = next(iter(self._cache))
            del self._cache[oldest]

    def invalidate(self, query: str | None = None) -> None:
        """Evict cached pages for *query*, or everything when None."""
        if query is None:
            self._cache.clear()
            return
        for key in [k for k in self._cache if k[0] == query]:
            del self._cache[key]

    def __len__(self) -> int:
        return len(self._cache)
