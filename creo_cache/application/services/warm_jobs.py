"""
Default warm jobs.

Catalog-backed jobs are registered only when an upstream catalog API is
configured. The popular-search and system-stats jobs always run; without an
upstream they seed placeholder payloads so the first request after a deploy
or a clear finds the key populated.
"""

from typing import Any

from creo_cache.config.constants import POPULAR_SEARCH_TERMS, CacheKeys, CacheTTL
from creo_cache.infrastructure.cache.cache_warmer import WarmJob
from creo_cache.infrastructure.upstream.catalog_client import CatalogClient

EMPTY_SYSTEM_STATS: dict[str, int] = {
    "totalUsers": 0,
    "totalOrders": 0,
    "totalRevenue": 0,
    "activeUsers": 0,
}


def _search_seed(term: str):
    async def fetch() -> dict[str, Any]:
        return {"term": term, "results": []}

    return fetch


async def _empty_system_stats() -> dict[str, int]:
    return dict(EMPTY_SYSTEM_STATS)


def build_default_jobs(catalog: CatalogClient) -> list[WarmJob]:
    """Jobs for every hot key the platform serves."""
    jobs: list[WarmJob] = []

    if catalog.is_configured:
        jobs.extend([
            WarmJob(
                "stock-providers",
                CacheKeys.STOCK_PROVIDERS,
                catalog.fetch_stock_providers,
                CacheTTL.STOCK_PROVIDERS,
            ),
            WarmJob(
                "stock-categories",
                CacheKeys.STOCK_CATEGORIES,
                catalog.fetch_stock_categories,
                CacheTTL.LONG,
            ),
            WarmJob("ai-styles", CacheKeys.AI_STYLES, catalog.fetch_ai_styles, CacheTTL.LONG),
            WarmJob("ai-presets", CacheKeys.AI_PRESETS, catalog.fetch_ai_presets, CacheTTL.LONG),
            WarmJob(
                "system-stats",
                CacheKeys.SYSTEM_STATS,
                catalog.fetch_system_stats,
                CacheTTL.SYSTEM_STATS,
            ),
        ])
    else:
        jobs.append(
            WarmJob(
                "system-stats", CacheKeys.SYSTEM_STATS, _empty_system_stats, CacheTTL.SYSTEM_STATS
            )
        )

    for term in POPULAR_SEARCH_TERMS:
        jobs.append(
            WarmJob(
                f"stock-search:{term}",
                f"{CacheKeys.STOCK_SEARCH}:{term}",
                _search_seed(term),
                CacheTTL.STOCK_SEARCH,
            )
        )

    return jobs
