"""
FastAPI Dependency Injection

Route handlers receive cache components through these providers. Everything
comes from the CacheRuntime stored on app.state by the lifespan handler, so
tests can build an app around any runtime (for example one with an
in-memory backend).
"""

import secrets
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request, status

from creo_cache.application.runtime import CacheRuntime
from creo_cache.application.services.cache_stats_service import CacheStatsService
from creo_cache.config.settings import Settings, get_settings
from creo_cache.infrastructure.cache.cache_store import CacheStore
from creo_cache.infrastructure.cache.cache_warmer import CacheWarmer
from creo_cache.infrastructure.monitoring.metrics_collector import (
    MetricsCollector,
    get_metrics_collector,
)


def get_runtime(request: Request) -> CacheRuntime:
    """
    Retrieve the CacheRuntime from application state.

    Raises:
        HTTPException: 503 if the lifespan has not built a runtime
    """
    runtime = getattr(request.app.state, "runtime", None)
    if runtime is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Cache runtime is not initialized",
        )
    return runtime


def get_cache_store(runtime: Annotated[CacheRuntime, Depends(get_runtime)]) -> CacheStore:
    return runtime.store


def get_cache_warmer(runtime: Annotated[CacheRuntime, Depends(get_runtime)]) -> CacheWarmer:
    return runtime.warmer


def get_stats_service(
    runtime: Annotated[CacheRuntime, Depends(get_runtime)],
) -> CacheStatsService:
    return runtime.stats_service


def get_metrics() -> MetricsCollector:
    return get_metrics_collector()


def get_app_settings(request: Request) -> Settings:
    """Settings the app was created with, falling back to the process-wide instance."""
    return getattr(request.app.state, "settings", None) or get_settings()


async def verify_admin_access(
    settings: Annotated[Settings, Depends(get_app_settings)],
    x_admin_token: Annotated[str | None, Header()] = None,
) -> None:
    """
    Require the X-Admin-Token header when ADMIN_TOKEN is configured.

    Raises:
        HTTPException: 401 when the token is missing or wrong
    """
    expected = settings.app.ADMIN_TOKEN
    if not expected:
        return
    if x_admin_token is None or not secrets.compare_digest(
        x_admin_token.encode("utf-8"), expected.encode("utf-8")
    ):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Admin token required",
        )


# ============================================================================
# TYPE ALIASES FOR DEPENDENCY INJECTION
# ============================================================================

CacheStoreDep = Annotated[CacheStore, Depends(get_cache_store)]
CacheWarmerDep = Annotated[CacheWarmer, Depends(get_cache_warmer)]
StatsServiceDep = Annotated[CacheStatsService, Depends(get_stats_service)]
MetricsDep = Annotated[MetricsCollector, Depends(get_metrics)]
SettingsDep = Annotated[Settings, Depends(get_app_settings)]
