"""
Cache Store

The key/value abstraction every other component uses. It owns key
namespacing, JSON serialization (orjson), per-call timeouts and the health
probe, and delegates storage to an injected CacheBackend.

Architecture:
    CacheStore
        ├── CacheBackend (Redis or in-memory, injected)
        ├── StatsTracker (hit/miss counters kept in the same backend)
        └── MetricsCollector (per-process Prometheus metrics)

Failure semantics:
    get / set / delete / clear raise BackendUnreachableError or
    BackendTimeoutError and never retry; the caller decides whether to fall
    back. health() never raises.

Author: Creo Platform Team
Date: 2026-01-14
"""

import asyncio
import functools
import hashlib
import time
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import orjson

from creo_cache.config.constants import HealthState
from creo_cache.config.settings import Settings
from creo_cache.core.exceptions import BackendTimeoutError, BackendUnreachableError, CacheError
from creo_cache.core.interfaces.cache import CacheBackend
from creo_cache.core.logging.logger import get_logger
from creo_cache.infrastructure.cache.models import HealthStatus, StoreStats
from creo_cache.infrastructure.cache.stats_tracker import StatsTracker
from creo_cache.infrastructure.monitoring.metrics_collector import (
    MetricsCollector,
    get_metrics_collector,
)

logger = get_logger(__name__)

T = TypeVar("T")


class CacheStore:
    """
    Namespaced, serialized, time-bounded access to a cache backend.

    One instance is built at process start and shared by reference; the
    backend connection is not owned exclusively by any caller.

    Usage:
        store = CacheStore(RedisBackend(settings), settings)
        await store.connect()
        await store.set("stock:providers", providers, ttl=CacheTTL.STOCK_PROVIDERS)
        providers = await store.get("stock:providers")
    """

    def __init__(
        self,
        backend: CacheBackend,
        settings: Settings,
        metrics: MetricsCollector | None = None,
    ):
        cache_settings = settings.cache
        self._backend = backend
        self._namespace = cache_settings.CACHE_NAMESPACE
        self._default_ttl = cache_settings.CACHE_DEFAULT_TTL
        self._timeout = cache_settings.CACHE_OPERATION_TIMEOUT
        self._latency_threshold_ms = cache_settings.CACHE_HEALTH_LATENCY_THRESHOLD_MS
        self._metrics = metrics or get_metrics_collector()
        self.tracker = StatsTracker(self)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def connect(self) -> None:
        await self._call("CONNECT", self._backend.connect())
        logger.info("Cache store connected", stage="CACHE.0", namespace=self._namespace)

    async def close(self) -> None:
        await self._backend.disconnect()
        logger.info("Cache store closed", stage="CACHE.6")

    # -------------------------------------------------------------------------
    # Key handling and bounded calls
    # -------------------------------------------------------------------------

    def qualify(self, key: str) -> str:
        return f"{self._namespace}:{key}" if self._namespace else key

    def _namespace_pattern(self) -> str | None:
        return f"{self._namespace}:*" if self._namespace else None

    def _resolve_ttl(self, ttl: int | None) -> int | None:
        return ttl or None

    async def _call(self, operation: str, awaitable: Awaitable[T]) -> T:
        """
        Await a backend call under the per-call timeout.

        A timeout is a backend failure: it raises BackendTimeoutError, and
        other backend errors pass through unchanged.
        """
        start = time.perf_counter()
        result = "ok"
        try:
            return await asyncio.wait_for(awaitable, timeout=self._timeout)
        except asyncio.TimeoutError as e:
            result = "timeout"
            logger.warning(
                "Cache operation timed out",
                stage=f"CACHE.{operation}",
                timeout_seconds=self._timeout,
            )
            raise BackendTimeoutError(
                f"Cache {operation} exceeded {self._timeout}s",
                details={"operation": operation, "timeout_seconds": self._timeout},
            ) from e
        except BackendTimeoutError:
            result = "timeout"
            raise
        except BackendUnreachableError:
            result = "unreachable"
            raise
        except Exception:
            result = "error"
            raise
        finally:
            self._metrics.record_operation(operation, result, time.perf_counter() - start)

    @staticmethod
    def _serialize(value: Any) -> str:
        return orjson.dumps(value).decode("utf-8")

    @staticmethod
    def _deserialize(raw: str | None) -> Any:
        if raw is None:
            return None
        return orjson.loads(raw)

    # -------------------------------------------------------------------------
    # Core operations
    # -------------------------------------------------------------------------

    async def get(self, key: str) -> Any | None:
        """
        Read a value, recording the lookup as a hit or a miss.

        STAGE-CACHE.GET

        Returns:
            The stored value, or None when absent or expired

        Raises:
            BackendUnreachableError, BackendTimeoutError
        """
        raw = await self._call("GET", self._backend.get(self.qualify(key)))
        hit = raw is not None

        await self.tracker.record(hit)
        self._metrics.record_lookup(hit)
        logger.debug("Cache lookup", stage="CACHE.GET", key=key, hit=hit)

        return self._deserialize(raw)

    async def get_many(self, keys: list[str]) -> list[Any | None]:
        """Read several keys in one backend call without touching the counters."""
        raws = await self._call("MGET", self._backend.mget([self.qualify(key) for key in keys]))
        return [self._deserialize(raw) for raw in raws]

    async def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        """
        Store a value, overwriting any previous one.

        STAGE-CACHE.SET

        Args:
            key: Cache key (namespace is added here)
            value: Any orjson-serializable payload
            ttl: Seconds to live; None or 0 stores the entry without expiry
        """
        effective_ttl = self._resolve_ttl(ttl)
        await self._call(
            "SET", self._backend.set(self.qualify(key), self._serialize(value), effective_ttl)
        )
        logger.debug("Cache write", stage="CACHE.SET", key=key, ttl=effective_ttl)
        return True

    async def delete(self, key: str) -> bool:
        removed = await self._call("DEL", self._backend.delete(self.qualify(key)))
        logger.debug("Cache delete", stage="CACHE.DEL", key=key, removed=removed)
        return removed > 0

    async def clear(self) -> bool:
        """
        Remove every entry in the namespace, the hit/miss counters included.

        STAGE-CACHE.CLEAR

        This invalidates the working set for every concurrent consumer of
        the backend; it is an administrative operation.
        """
        removed = await self._call("CLEAR", self._backend.flush(self._namespace_pattern()))
        logger.warning(
            "Cache cleared", stage="CACHE.CLEAR", namespace=self._namespace, removed=removed
        )
        return True

    async def health(self) -> HealthStatus:
        """
        Probe the backend with a PING and classify the round trip.

        STAGE-CACHE.HEALTH

        Never raises: unreachable, timed-out or failing backends all become
        an unhealthy status with latency 0 and the failure reason.
        """
        start = time.perf_counter()
        try:
            await asyncio.wait_for(self._backend.ping(), timeout=self._timeout)
        except asyncio.TimeoutError:
            return self._unhealthy(f"Health probe exceeded {self._timeout}s")
        except Exception as e:
            return self._unhealthy(str(e) or e.__class__.__name__)

        latency_ms = round((time.perf_counter() - start) * 1000, 3)
        self._metrics.set_health_latency(latency_ms)
        status = (
            HealthState.HEALTHY
            if latency_ms <= self._latency_threshold_ms
            else HealthState.DEGRADED
        )
        if status == HealthState.DEGRADED:
            logger.warning(
                "Cache backend slow",
                stage="CACHE.HEALTH",
                latency_ms=latency_ms,
                threshold_ms=self._latency_threshold_ms,
            )
        return HealthStatus(status=status, latency_ms=latency_ms)

    def _unhealthy(self, reason: str) -> HealthStatus:
        logger.error("Cache backend unhealthy", stage="CACHE.HEALTH", error=reason)
        return HealthStatus(status=HealthState.UNHEALTHY, latency_ms=0, error=reason)

    async def get_stats(self) -> StoreStats:
        """
        Backend size snapshot.

        With a namespace configured, the key count enumerates the namespace
        with SCAN, which is O(n) in the number of keys. Keep this off hot paths.
        """
        total_keys = await self._call("COUNT", self._backend.count_keys(self._namespace_pattern()))
        memory = await self._call("INFO", self._backend.memory_usage())
        return StoreStats(total_keys=total_keys, memory_usage_bytes=memory)

    # -------------------------------------------------------------------------
    # Convenience operations
    # -------------------------------------------------------------------------

    async def exists(self, key: str) -> bool:
        return await self._call("EXISTS", self._backend.exists(self.qualify(key)))

    async def expire(self, key: str, ttl: int) -> bool:
        return await self._call("EXPIRE", self._backend.expire(self.qualify(key), ttl))

    async def increment(self, key: str, by: int = 1) -> int:
        """Atomic increment-or-create; the counter never expires."""
        return await self._call("INCR", self._backend.incr(self.qualify(key), by))

    async def delete_pattern(self, pattern: str) -> int:
        """
        Delete every key in the namespace matching a glob pattern.

        Enumerates with SCAN (O(n)); meant for invalidation, not request paths.
        """
        keys = await self._call("SCAN", self._backend.scan_keys(self.qualify(pattern)))
        if not keys:
            return 0
        removed = await self._call("DEL", self._backend.delete(*keys))
        logger.info("Cache pattern deleted", stage="CACHE.DEL", pattern=pattern, removed=removed)
        return removed

    async def get_or_set(
        self,
        key: str,
        fallback: Callable[[], Awaitable[T]],
        ttl: int | None = None,
    ) -> T:
        """
        Cache-aside read: return the cached value, or compute, store and return it.

        When the backend fails, the value is computed directly and the
        failure is logged; the computed value is still returned. A stored
        JSON null is indistinguishable from a miss.

        A ttl of None stores the computed value with CACHE_DEFAULT_TTL.
        """
        try:
            cached = await self.get(key)
        except CacheError as e:
            logger.warning(
                "Cache read failed, computing directly", stage="CACHE.GET", key=key, error=str(e)
            )
            return await fallback()

        if cached is not None:
            return cached

        value = await fallback()
        try:
            await self.set(key, value, self._default_ttl if ttl is None else ttl)
        except CacheError as e:
            logger.warning("Cache write failed", stage="CACHE.SET", key=key, error=str(e))
        return value

    @staticmethod
    def generate_cache_key(prefix: str, *args: Any, **kwargs: Any) -> str:
        """
        Stable key from a prefix and call arguments.

        Arguments are JSON-encoded (non-JSON values via str) and hashed with MD5.

        Returns:
            Cache key (e.g., "stock:search:5d41402abc4b2a76...")
        """
        payload = orjson.dumps([args, kwargs], default=str, option=orjson.OPT_SORT_KEYS)
        return f"{prefix}:{hashlib.md5(payload).hexdigest()}"


def cached(store: CacheStore, ttl: int | None = None, key_prefix: str | None = None):
    """
    Decorator caching an async function's result through CacheStore.get_or_set.

    Usage:
        @cached(store, ttl=CacheTTL.STOCK_SEARCH, key_prefix="stock:search")
        async def search(term: str) -> dict: ...
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        prefix = key_prefix or f"{func.__module__}.{func.__qualname__}"

        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            key = CacheStore.generate_cache_key(prefix, *args, **kwargs)
            return await store.get_or_set(key, lambda: func(*args, **kwargs), ttl)

        return wrapper

    return decorator
