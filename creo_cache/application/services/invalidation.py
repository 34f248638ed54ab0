"""
Cache invalidation helpers for the data families the platform caches.
"""

from creo_cache.config.constants import CacheKeys
from creo_cache.core.logging.logger import get_logger
from creo_cache.infrastructure.cache.cache_store import CacheStore

logger = get_logger(__name__)


class CacheInvalidator:
    """
    Drops cached entries after the underlying data changes.

    Usage:
        invalidator = CacheInvalidator(store)
        await invalidator.invalidate_user("user-123")
    """

    def __init__(self, store: CacheStore):
        self._store = store

    async def invalidate_user(self, user_id: str) -> int:
        """Profile, credits and orders for one user, including keyed sub-entries."""
        removed = 0
        for base in (CacheKeys.USER_PROFILE, CacheKeys.USER_CREDITS, CacheKeys.USER_ORDERS):
            removed += await self._store.delete_pattern(f"{base}:{user_id}")
            removed += await self._store.delete_pattern(f"{base}:{user_id}:*")
        logger.info("User cache invalidated", stage="CACHE.DEL", user_id=user_id, removed=removed)
        return removed

    async def invalidate_stock_search(self) -> int:
        return await self._store.delete_pattern(f"{CacheKeys.STOCK_SEARCH}:*")

    async def invalidate_ai_generation(self) -> int:
        return await self._store.delete_pattern(f"{CacheKeys.AI_GENERATION}:*")

    async def invalidate_system_stats(self) -> bool:
        return await self._store.delete(CacheKeys.SYSTEM_STATS)

    async def invalidate_all(self) -> bool:
        return await self._store.clear()
