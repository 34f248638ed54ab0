"""
Cache Runtime Container

Builds every cache component from settings and owns their lifecycle. The
FastAPI lifespan and the CLI both go through this class, so there is exactly
one place where the backend connection is opened and closed.

    CacheRuntime
        ├── backend (RedisBackend | InMemoryBackend)
        ├── store: CacheStore (+ store.tracker: StatsTracker)
        ├── edge: EdgeStatsAdapter
        ├── catalog: CatalogClient
        ├── warmer: CacheWarmer (default jobs registered, then frozen)
        ├── stats_service: CacheStatsService
        ├── invalidator: CacheInvalidator
        └── scheduler: WarmScheduler

Author: Creo Platform Team
Date: 2026-01-14
"""

from collections.abc import Iterable

import httpx

from creo_cache.application.services.cache_stats_service import CacheStatsService
from creo_cache.application.services.invalidation import CacheInvalidator
from creo_cache.application.services.warm_jobs import build_default_jobs
from creo_cache.config.settings import Settings
from creo_cache.core.exceptions import ConfigurationError
from creo_cache.core.interfaces.cache import CacheBackend
from creo_cache.core.logging.logger import get_logger
from creo_cache.infrastructure.cache.cache_store import CacheStore
from creo_cache.infrastructure.cache.cache_warmer import CacheWarmer, WarmJob, WarmScheduler
from creo_cache.infrastructure.cache.memory_backend import InMemoryBackend
from creo_cache.infrastructure.cache.redis_backend import RedisBackend
from creo_cache.infrastructure.edge.edge_stats import EdgeStatsAdapter
from creo_cache.infrastructure.monitoring.metrics_collector import get_metrics_collector
from creo_cache.infrastructure.upstream.catalog_client import CatalogClient

logger = get_logger(__name__)


def create_backend(settings: Settings) -> CacheBackend:
    backend = settings.CACHE_BACKEND
    if backend == "memory":
        return InMemoryBackend()
    if backend == "redis":
        return RedisBackend(settings)
    raise ConfigurationError(f"Unknown cache backend: {backend}", details={"backend": backend})


class CacheRuntime:
    """
    Explicitly constructed cache components with a start/close lifecycle.

    Usage:
        runtime = CacheRuntime.build(settings)
        await runtime.start()
        try:
            report = await runtime.warmer.warm_all()
        finally:
            await runtime.close()
    """

    def __init__(
        self,
        settings: Settings,
        backend: CacheBackend,
        edge: EdgeStatsAdapter,
        catalog: CatalogClient,
        jobs: Iterable[WarmJob] | None = None,
    ):
        metrics = get_metrics_collector()
        self.settings = settings
        self.backend = backend
        self.store = CacheStore(backend, settings, metrics=metrics)
        self.edge = edge
        self.catalog = catalog
        self.stats_service = CacheStatsService(self.store, edge, metrics=metrics)
        self.invalidator = CacheInvalidator(self.store)

        self.warmer = CacheWarmer.from_settings(self.store, settings, metrics=metrics)
        for job in build_default_jobs(catalog) if jobs is None else jobs:
            self.warmer.register(job)
        self.warmer.freeze()

        self.scheduler = WarmScheduler(self.warmer, settings.warming.WARM_SCHEDULE_INTERVAL)
        self._started = False

    @classmethod
    def build(
        cls,
        settings: Settings,
        backend: CacheBackend | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        jobs: Iterable[WarmJob] | None = None,
    ) -> "CacheRuntime":
        """
        Wire the runtime from settings.

        Args:
            settings: Loaded settings
            backend: Override the configured backend (tests pass InMemoryBackend)
            transport: httpx transport shared by the edge and catalog clients
            jobs: Override the default warm jobs
        """
        return cls(
            settings,
            backend=backend or create_backend(settings),
            edge=EdgeStatsAdapter.from_settings(settings, transport=transport),
            catalog=CatalogClient.from_settings(settings, transport=transport),
            jobs=jobs,
        )

    @property
    def started(self) -> bool:
        return self._started

    async def start(self) -> None:
        """
        Start the scheduler, connect the backend, then optionally warm.

        STAGE-0: Runtime startup

        The scheduler runs even when the backend is unreachable here; its
        runs succeed again once the backend recovers.

        Raises:
            BackendUnreachableError: If the backend cannot be reached
        """
        warming = self.settings.warming
        if warming.WARM_SCHEDULE_ENABLED:
            self.scheduler.start()

        await self.store.connect()
        self._started = True

        if warming.WARM_ON_STARTUP:
            report = await self.warmer.warm_all()
            logger.info(
                "Startup warm run finished",
                stage="0",
                succeeded=len(report.succeeded),
                failed=len(report.failed),
            )

        logger.info(
            "Cache runtime started",
            stage="0",
            backend=self.settings.cache.CACHE_BACKEND,
            warm_jobs=len(self.warmer.jobs),
        )

    async def close(self) -> None:
        """
        Stop warming and release connections.

        STAGE-6: Runtime shutdown
        """
        await self.scheduler.stop()
        self.warmer.close()
        await self.edge.aclose()
        await self.catalog.aclose()
        await self.store.close()
        self._started = False
        logger.info("Cache runtime closed", stage="6")
