"""
Combined Cache Statistics Service

Merges local statistics (backend size plus the shared hit/miss counters)
with edge statistics into the payload returned by the stats endpoint and
the CLI.

Degradation policy:
    - Edge unavailable → cdnHitRate / cdnTotalRequests are 0 and
      edgeAvailable is false; the rest of the response is unaffected
    - Backend failure → propagates; there is nothing meaningful to report

Author: Creo Platform Team
Date: 2026-01-14
"""

from datetime import datetime
from typing import Any

from creo_cache.core.exceptions import RemoteUnavailableError
from creo_cache.core.logging.logger import get_logger
from creo_cache.infrastructure.cache.cache_store import CacheStore
from creo_cache.infrastructure.edge.edge_stats import EdgeStatistics, EdgeStatsAdapter
from creo_cache.infrastructure.monitoring.metrics_collector import (
    MetricsCollector,
    get_metrics_collector,
)

logger = get_logger(__name__)


class CacheStatsService:
    """Builds the combined statistics view."""

    def __init__(
        self,
        store: CacheStore,
        edge: EdgeStatsAdapter,
        metrics: MetricsCollector | None = None,
    ):
        self._store = store
        self._edge = edge
        self._metrics = metrics or get_metrics_collector()

    async def _edge_stats(self) -> tuple[EdgeStatistics, bool]:
        try:
            stats = await self._edge.fetch_edge_stats()
        except RemoteUnavailableError as e:
            self._metrics.record_edge_fetch(available=False)
            logger.warning("Edge statistics unavailable", stage="STATS.2", error=e.message)
            return EdgeStatistics.unavailable(), False
        self._metrics.record_edge_fetch(available=True)
        return stats, True

    async def get_stats(self) -> dict[str, Any]:
        """
        Snapshot of local and edge statistics.

        STAGE-STATS

        Returns:
            Dict with totalKeys, memoryUsageBytes, hits, misses, hitRate,
            missRate, totalRequests, cachedRequests, cdnHitRate,
            cdnTotalRequests, edgeAvailable and timestamp
        """
        local = await self._store.tracker.snapshot()
        edge, edge_available = await self._edge_stats()

        return {
            **local.to_dict(),
            "cachedRequests": local.hits,
            "cdnHitRate": edge.hit_rate,
            "cdnTotalRequests": edge.total_requests,
            "edgeAvailable": edge_available,
            "timestamp": datetime.utcnow().isoformat() + "Z",
        }
