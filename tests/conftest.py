"""
Pytest Configuration and Shared Test Fixtures

Fixtures defined here are available to every test module.
"""

import pytest

from tests.test_fixtures.cache_factory import CacheTestFactory, FakeClock


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def test_settings():
    """Settings for an in-memory backend under the 'test' namespace."""
    return CacheTestFactory.settings()


@pytest.fixture(scope="session")
def use_real_redis():
    """Check if real Redis should be used for integration tests."""
    import os

    return os.getenv("USE_REAL_REDIS", "0").lower() in ("1", "true", "yes")


# ============================================================================
# Cache Fixtures
# ============================================================================


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
async def memory_store(test_settings, fake_clock):
    """Connected CacheStore over an InMemoryBackend driven by fake_clock."""
    store = await CacheTestFactory.memory_store(test_settings, clock=fake_clock)
    yield store
    await store.close()


@pytest.fixture
def cache_factory():
    return CacheTestFactory
