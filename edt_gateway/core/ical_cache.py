"""In-memory TTL cache for raw timetable feeds.

Entries are keyed by group identifier alone: the whole feed is cached, never a
filtered view, so every date range for a group shares one entry.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from typing import Optional

from cachetools import TTLCache

logger = logging.getLogger(__name__)


class IcalCache:
    """Concurrency-safe key/value store with a fixed time-to-live per entry.

    Expired entries are invisible to readers even before ``TTLCache`` evicts
    them. All access goes through an ``asyncio.Lock`` so concurrent request
    handlers never observe a partially updated store.
    """

    def __init__(
        self,
        ttl_seconds: float,
        maxsize: int = 256,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._cache: TTLCache[str, str] = TTLCache(maxsize=maxsize, ttl=ttl_seconds, timer=timer)
        self._lock = asyncio.Lock()
        self._hits = 0
        self._misses = 0

    async def get(self, group_id: str) -> Optional[str]:
        """Return the live entry for ``group_id`` or None."""
        async with self._lock:
            data = self._cache.get(group_id)
            if data is None:
                self._misses += 1
            else:
                self._hits += 1
            return data

    async def set(self, group_id: str, data: str) -> None:
        """Store ``data`` under ``group_id``, restarting its TTL."""
        async with self._lock:
            self._cache[group_id] = data
        logger.debug("Cached feed for %s (%d chars, ttl=%ss)", group_id, len(data), self.ttl_seconds)

    def __len__(self) -> int:
        self._cache.expire()
        return len(self._cache)

    def stats(self) -> dict[str, int]:
        """Live entry count plus lookup hits and misses since creation."""
        return {"entries": len(self), "hits": self._hits, "misses": self._misses}
