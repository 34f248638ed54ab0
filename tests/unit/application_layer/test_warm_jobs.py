"""
Unit Tests for the default warm jobs
"""

import httpx
import pytest

from creo_cache.application.services.warm_jobs import EMPTY_SYSTEM_STATS, build_default_jobs
from creo_cache.config.constants import POPULAR_SEARCH_TERMS, CacheKeys
from creo_cache.infrastructure.cache.cache_warmer import CacheWarmer
from creo_cache.infrastructure.upstream.catalog_client import CatalogClient


def _upstream(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"data": {"path": request.url.path}})


@pytest.mark.unit
class TestDefaultWarmJobs:
    """Test the default job set."""

    def test_without_upstream_seeds_searches_and_stats(self):
        """Test that without a catalog API only seeded jobs are built."""
        jobs = build_default_jobs(CatalogClient(None))

        names = [job.name for job in jobs]
        assert names[0] == "system-stats"
        assert len(jobs) == 1 + len(POPULAR_SEARCH_TERMS)
        assert f"stock-search:{POPULAR_SEARCH_TERMS[0]}" in names

    def test_with_upstream_adds_catalog_jobs(self):
        """Test that a configured catalog adds provider, category, style and preset jobs."""
        jobs = build_default_jobs(CatalogClient("https://api.example.test"))

        keys = {job.key for job in jobs}
        assert {
            CacheKeys.STOCK_PROVIDERS,
            CacheKeys.STOCK_CATEGORIES,
            CacheKeys.AI_STYLES,
            CacheKeys.AI_PRESETS,
            CacheKeys.SYSTEM_STATS,
        } <= keys

    def test_job_names_are_unique(self):
        """Test that the default jobs can all be registered."""
        jobs = build_default_jobs(CatalogClient("https://api.example.test"))

        assert len({job.name for job in jobs}) == len(jobs)

    @pytest.mark.asyncio
    async def test_default_jobs_populate_store(self, memory_store):
        """Test that a warm run over the default jobs fills every key."""
        catalog = CatalogClient(
            "https://api.example.test", transport=httpx.MockTransport(_upstream)
        )
        warmer = CacheWarmer(memory_store, max_concurrency=4)
        for job in build_default_jobs(catalog):
            warmer.register(job)

        report = await warmer.warm_all()
        await catalog.aclose()

        assert report.ok is True
        assert await memory_store.get(CacheKeys.AI_STYLES) == {"path": "/ai/styles"}
        assert await memory_store.get(f"{CacheKeys.STOCK_SEARCH}:nature") == {
            "term": "nature",
            "results": [],
        }

    @pytest.mark.asyncio
    async def test_placeholder_system_stats(self, memory_store):
        """Test that the placeholder system stats job stores zeros."""
        warmer = CacheWarmer(memory_store)
        for job in build_default_jobs(CatalogClient(None)):
            warmer.register(job)

        await warmer.warm_all()

        assert await memory_store.get(CacheKeys.SYSTEM_STATS) == EMPTY_SYSTEM_STATS
