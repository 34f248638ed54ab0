"""
Integration Tests against a real Redis

Skipped unless USE_REAL_REDIS=1; REDIS_HOST / REDIS_PORT select the server.
"""

import os
import uuid

import pytest

from creo_cache.config.constants import HealthState
from creo_cache.infrastructure.cache.cache_store import CacheStore
from creo_cache.infrastructure.cache.redis_backend import RedisBackend
from tests.test_fixtures.cache_factory import CacheTestFactory


@pytest.fixture
async def redis_store(use_real_redis):
    if not use_real_redis:
        pytest.skip("Set USE_REAL_REDIS=1 to run Redis integration tests")

    settings = CacheTestFactory.settings(
        CACHE_BACKEND="redis",
        CACHE_NAMESPACE=f"it-{uuid.uuid4().hex[:8]}",
        REDIS_HOST=os.getenv("REDIS_HOST", "localhost"),
        REDIS_PORT=int(os.getenv("REDIS_PORT", "6379")),
    )
    store = CacheStore(RedisBackend(settings), settings)
    await store.connect()
    yield store
    await store.clear()
    await store.close()


@pytest.mark.integration
class TestRedisCacheStore:
    """End-to-end store behavior on Redis."""

    @pytest.mark.asyncio
    async def test_round_trip_and_counters(self, redis_store):
        """Test set/get and that lookups are counted in Redis."""
        await redis_store.set("stock:providers", ["unsplash"], ttl=60)

        assert await redis_store.get("stock:providers") == ["unsplash"]
        assert await redis_store.get("missing") is None
        assert await redis_store.tracker.read_counters() == (1, 1)

    @pytest.mark.asyncio
    async def test_clear_is_scoped_to_namespace(self, redis_store):
        """Test that clear empties only this namespace."""
        await redis_store.set("a", 1)
        await redis_store.clear()

        assert (await redis_store.get_stats()).total_keys == 0

    @pytest.mark.asyncio
    async def test_health(self, redis_store):
        """Test that a local Redis reports healthy or degraded."""
        health = await redis_store.health()

        assert health.status in (HealthState.HEALTHY, HealthState.DEGRADED)
