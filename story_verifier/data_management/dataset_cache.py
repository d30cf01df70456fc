"""In-memory TTL memoization of fetched source datasets.

Follows the store pattern used elsewhere in the package:
- Keyed by (adapter, state, zip)
- Async-safe with one asyncio.Lock
- Degraded (fallback) datasets are never stored, so a recovered upstream is
  retried on the next verification

Usage:
    from story_verifier.data_management.dataset_cache import DatasetCache

    cache = DatasetCache(ttl_seconds=300)
    dataset = await cache.get_or_fetch("housing", geography, adapter.fetch)
"""

import asyncio
import time
from typing import Awaitable, Callable, Optional

import structlog

from story_verifier.data_management.schemas.dataset_schema import Geography, SourceDataset

CacheKey = tuple[str, str, Optional[str]]


class DatasetCache:
    """TTL cache for adapter datasets.

    Data structure:
    {
        (adapter, state, zip): (stored_at, SourceDataset),
        ...
    }
    """

    def __init__(
        self,
        ttl_seconds: Optional[float] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        """Initialize DatasetCache.

        Args:
            ttl_seconds: Entry lifetime. Defaults to DATASET_CACHE_TTL_SECONDS;
                0 disables caching entirely.
            clock: Monotonic clock override for tests.
        """
        if ttl_seconds is None:
            from story_verifier.config.settings import settings

            ttl_seconds = settings.dataset_cache_ttl_seconds
        self.ttl_seconds = max(0.0, ttl_seconds)
        self._clock = clock or time.monotonic
        self._entries: dict[CacheKey, tuple[float, SourceDataset]] = {}
        self._lock = asyncio.Lock()
        self.hits = 0
        self.misses = 0
        self._logger = structlog.get_logger().bind(component="DatasetCache")

    @property
    def enabled(self) -> bool:
        return self.ttl_seconds > 0

    @staticmethod
    def _key(adapter: str, geography: Geography) -> CacheKey:
        return (adapter, geography.state, geography.zip)

    async def get(self, adapter: str, geography: Geography) -> Optional[SourceDataset]:
        """Return a fresh cached dataset, or None on miss or expiry."""
        if not self.enabled:
            return None

        key = self._key(adapter, geography)
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return None

            stored_at, dataset = entry
            if self._clock() - stored_at >= self.ttl_seconds:
                del self._entries[key]
                self.misses += 1
                self._logger.debug("cache_expired", adapter=adapter, state=geography.state)
                return None

            self.hits += 1
            return dataset

    async def put(self, dataset: SourceDataset) -> bool:
        """Store a dataset. Returns False when it was not cacheable."""
        if not self.enabled or dataset.degraded:
            return False

        key = self._key(dataset.adapter, dataset.geography)
        async with self._lock:
            self._entries[key] = (self._clock(), dataset)
        self._logger.debug(
            "cache_stored",
            adapter=dataset.adapter,
            state=dataset.geography.state,
            zip=dataset.geography.zip,
        )
        return True

    async def get_or_fetch(
        self,
        adapter: str,
        geography: Geography,
        fetch: Callable[[Geography], Awaitable[SourceDataset]],
    ) -> SourceDataset:
        """Return the cached dataset or fetch, store and return a new one.

        Concurrent misses for the same key may both fetch; the last fresh
        result wins. Fetching outside the lock keeps slow upstreams from
        serializing unrelated adapters.
        """
        cached = await self.get(adapter, geography)
        if cached is not None:
            self._logger.debug("cache_hit", adapter=adapter, state=geography.state)
            return cached

        dataset = await fetch(geography)
        await self.put(dataset)
        return dataset

    async def clear(self) -> None:
        async with self._lock:
            count = len(self._entries)
            self._entries.clear()
        self._logger.info("cache_cleared", entries=count)

    def __len__(self) -> int:
        return len(self._entries)

    def stats(self) -> dict[str, float]:
        total = self.hits + self.misses
        return {
            "entries": len(self._entries),
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": self.hits / total if total else 0.0,
            "ttl_seconds": self.ttl_seconds,
        }
