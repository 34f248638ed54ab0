"""
Hit/Miss Statistics Tracker

Counters live in the cache itself as ordinary entries (cache:hits and
cache:misses under the store's namespace). They are shared by every serving
instance that talks to the same backend, survive process restarts for as
long as the backend does, and are reset only by a full clear.

Each read bumps exactly one counter through the backend's atomic
increment-or-create, so concurrent readers never lose or duplicate a count.
Both counters are read back with one MGET, which keeps
hits + misses == total requests inside any single snapshot.

Author: Creo Platform Team
Date: 2026-01-14
"""

from typing import TYPE_CHECKING

from creo_cache.config.constants import HITS_KEY, MISSES_KEY
from creo_cache.core.logging.logger import get_logger
from creo_cache.infrastructure.cache.models import CacheStatistics, StoreStats

if TYPE_CHECKING:
    from creo_cache.infrastructure.cache.cache_store import CacheStore

logger = get_logger(__name__)


class StatsTracker:
    """
    Records cache lookups and derives hit/miss rates.

    Usage:
        tracker = store.tracker
        await tracker.record_hit()
        hits, misses = await tracker.read_counters()
        hit_rate, miss_rate = StatsTracker.compute_rates(hits, misses)
    """

    def __init__(self, store: "CacheStore"):
        self._store = store

    async def record_hit(self) -> int:
        return await self._store.increment(HITS_KEY)

    async def record_miss(self) -> int:
        return await self._store.increment(MISSES_KEY)

    async def record(self, hit: bool) -> int:
        return await (self.record_hit() if hit else self.record_miss())

    async def read_counters(self) -> tuple[int, int]:
        """
        Read both counters in one atomic step.

        Returns:
            (hits, misses), with absent counters read as 0
        """
        hits, misses = await self._store.get_many([HITS_KEY, MISSES_KEY])
        return int(hits or 0), int(misses or 0)

    @staticmethod
    def compute_rates(hits: int, misses: int) -> tuple[float, float]:
        """
        Hit rate and its complement. Both are 0 when nothing has been read yet.
        """
        total = hits + misses
        if total == 0:
            return 0.0, 0.0
        hit_rate = hits / total
        return hit_rate, 1.0 - hit_rate

    async def snapshot(self, store_stats: StoreStats | None = None) -> CacheStatistics:
        """Combine backend size figures with the current counters."""
        if store_stats is None:
            store_stats = await self._store.get_stats()
        hits, misses = await self.read_counters()
        hit_rate, miss_rate = self.compute_rates(hits, misses)

        logger.debug("Cache statistics snapshot", stage="STATS.1", hits=hits, misses=misses)

        return CacheStatistics(
            total_keys=store_stats.total_keys,
            memory_usage_bytes=store_stats.memory_usage_bytes,
            hits=hits,
            misses=misses,
            hit_rate=hit_rate,
            miss_rate=miss_rate,
        )
