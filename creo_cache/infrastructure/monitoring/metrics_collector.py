#!/usr/bin/env python3
"""
Metrics Collector with Prometheus Integration

Process-level metrics for the cache service:
- Backend operation counts and latency by operation and result
- Health probe latency
- Warm job outcomes and run duration
- Edge statistics fetch outcomes

These complement the backend-resident hit/miss counters: Prometheus metrics
are per process, the cache:hits / cache:misses entries are shared by all
instances.

Author: Creo Platform Team
Date: 2026-01-14
"""

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    Counter,
    Gauge,
    Histogram,
    Info,
    generate_latest,
)

from creo_cache.config.settings import get_settings
from creo_cache.core.logging.logger import get_logger

logger = get_logger(__name__)


# ============================================================================
# Metric Definitions
# ============================================================================

CACHE_OPERATIONS = Counter(
    'creo_cache_operations_total',
    'Cache backend operations',
    ['operation', 'result']  # result: ok, unreachable, timeout, error
)

CACHE_OPERATION_DURATION = Histogram(
    'creo_cache_operation_duration_seconds',
    'Cache backend operation duration in seconds',
    ['operation'],
    buckets=(0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5)
)

CACHE_LOOKUPS = Counter(
    'creo_cache_lookups_total',
    'Cache reads by outcome',
    ['outcome']  # hit, miss
)

CACHE_HEALTH_LATENCY = Gauge(
    'creo_cache_health_latency_ms',
    'Latency of the last backend health probe in milliseconds'
)

WARM_JOBS = Counter(
    'creo_cache_warm_jobs_total',
    'Warm jobs settled',
    ['result']  # succeeded, failed
)

WARM_RUN_DURATION = Histogram(
    'creo_cache_warm_run_duration_seconds',
    'Duration of a full warm run',
    buckets=(0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0)
)

EDGE_FETCHES = Counter(
    'creo_cache_edge_fetches_total',
    'Edge statistics fetches',
    ['result']  # ok, unavailable
)

APP_INFO = Info(
    'creo_cache_app',
    'Cache service information'
)


class MetricsCollector:
    """
    Facade over the module-level Prometheus collectors.

    STAGE-M: Metrics collection

    Usage:
        metrics = get_metrics_collector()
        metrics.record_operation("GET", "ok", 0.0012)
        output = metrics.get_prometheus_metrics()
    """

    def __init__(self):
        settings = get_settings()
        APP_INFO.info({
            'version': settings.app.APP_VERSION,
            'environment': settings.app.ENVIRONMENT,
            'app_name': settings.app.APP_NAME,
        })
        logger.info("Metrics collector initialized", stage="M.0")

    # =========================================================================
    # Cache Metrics
    # =========================================================================

    def record_operation(self, operation: str, result: str, duration_seconds: float) -> None:
        CACHE_OPERATIONS.labels(operation=operation, result=result).inc()
        CACHE_OPERATION_DURATION.labels(operation=operation).observe(duration_seconds)

    def record_lookup(self, hit: bool) -> None:
        CACHE_LOOKUPS.labels(outcome="hit" if hit else "miss").inc()

    def set_health_latency(self, latency_ms: float) -> None:
        CACHE_HEALTH_LATENCY.set(latency_ms)

    # =========================================================================
    # Warming Metrics
    # =========================================================================

    def record_warm_job(self, succeeded: bool) -> None:
        WARM_JOBS.labels(result="succeeded" if succeeded else "failed").inc()

    def record_warm_run(self, duration_seconds: float) -> None:
        WARM_RUN_DURATION.observe(duration_seconds)

    # =========================================================================
    # Edge Metrics
    # =========================================================================

    def record_edge_fetch(self, available: bool) -> None:
        EDGE_FETCHES.labels(result="ok" if available else "unavailable").inc()

    # =========================================================================
    # Export
    # =========================================================================

    def get_prometheus_metrics(self) -> bytes:
        """
        Get Prometheus metrics output.

        Returns:
            bytes: Prometheus text format metrics
        """
        return generate_latest(REGISTRY)

    def get_content_type(self) -> str:
        """Get Prometheus content type."""
        return CONTENT_TYPE_LATEST


# Global metrics collector
_metrics: MetricsCollector | None = None


def get_metrics_collector() -> MetricsCollector:
    """Get global metrics collector."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics
