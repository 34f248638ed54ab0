"""
Cache Administration Routes

Operational endpoints for the shared cache, used by the admin console,
deploy hooks and monitoring:

    GET  /admin/cache/health   backend probe (503 when unhealthy)
    GET  /admin/cache/stats    local + edge statistics
    POST /admin/cache/clear    drop every entry in the namespace
    POST /admin/cache/warm     run all warm jobs and wait for them
    GET  /admin/cache/metrics  Prometheus exposition

Backend failures raised here are turned into structured 503 responses by the
application's exception handlers; nothing in this module lets an error take
the process down.
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse

from creo_cache.application.api.dependencies import (
    CacheStoreDep,
    CacheWarmerDep,
    MetricsDep,
    StatsServiceDep,
    verify_admin_access,
)
from creo_cache.application.api.models.cache import (
    CacheHealthResponse,
    CacheStatsResponse,
    ClearResponse,
    ErrorResponse,
    WarmResponse,
)
from creo_cache.core.logging.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(
    prefix="/admin/cache",
    tags=["Cache"],
    dependencies=[Depends(verify_admin_access)],
)


def _timestamp() -> str:
    return datetime.utcnow().isoformat() + "Z"


@router.get(
    "/health",
    response_model=CacheHealthResponse,
    response_model_exclude_none=True,
    responses={503: {"model": CacheHealthResponse, "description": "Backend unhealthy"}},
)
async def cache_health(store: CacheStoreDep):
    """
    Probe the cache backend.

    Always answers: an unreachable backend is reported as status "unhealthy"
    with latencyMs 0 and the failure reason, with HTTP 503 so load balancers
    and uptime checks can act on it.
    """
    health = await store.health()
    if not health.is_healthy:
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=health.to_dict())
    return health.to_dict()


@router.get(
    "/stats",
    response_model=CacheStatsResponse,
    responses={503: {"model": ErrorResponse, "description": "Backend unavailable"}},
)
async def cache_stats(stats_service: StatsServiceDep):
    """Combined cache statistics; edge fields are zeroed when the edge is unreachable."""
    return await stats_service.get_stats()


@router.post(
    "/clear",
    response_model=ClearResponse,
    responses={503: {"model": ErrorResponse, "description": "Backend unavailable"}},
)
async def clear_cache(store: CacheStoreDep):
    """
    Remove every cache entry, hit/miss counters included.

    Affects every consumer of the shared backend.
    """
    await store.clear()
    logger.warning("Cache cleared via admin endpoint", stage="CACHE.CLEAR")
    return {"message": "Cache cleared successfully", "timestamp": _timestamp()}


@router.post(
    "/warm",
    response_model=WarmResponse,
    responses={409: {"model": ErrorResponse, "description": "No warm jobs registered"}},
)
async def warm_cache(warmer: CacheWarmerDep):
    """
    Run every registered warm job and respond once all have settled.

    Individual job failures do not fail the request; they are listed in the
    report.
    """
    report = await warmer.warm_all(require_jobs=True)
    message = (
        "Cache warming completed successfully"
        if report.ok
        else f"Cache warming completed with {len(report.failed)} failed job(s)"
    )
    return {"message": message, "timestamp": _timestamp(), "report": report.to_dict()}


@router.get("/metrics", response_class=Response)
async def cache_metrics(metrics: MetricsDep):
    """Prometheus text exposition of the process metrics."""
    return Response(content=metrics.get_prometheus_metrics(), media_type=metrics.get_content_type())
