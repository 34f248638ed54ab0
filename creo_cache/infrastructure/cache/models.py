"""
Value types reported by the cache store and the stats tracker.

All are computed on demand and never persisted.
"""

from dataclasses import dataclass
from typing import Any

from creo_cache.config.constants import HealthState


@dataclass(frozen=True)
class HealthStatus:
    """Result of one backend probe. latency_ms is 0 when the probe failed."""

    status: HealthState
    latency_ms: float
    error: str | None = None

    @property
    def is_healthy(self) -> bool:
        return self.status != HealthState.UNHEALTHY

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"status": self.status.value, "latencyMs": self.latency_ms}
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(frozen=True)
class StoreStats:
    total_keys: int
    memory_usage_bytes: int


@dataclass(frozen=True)
class CacheStatistics:
    """
    Local cache statistics. hits and misses come from a single atomic read,
    so total_requests == hits + misses always holds.
    """

    total_keys: int
    memory_usage_bytes: int
    hits: int
    misses: int
    hit_rate: float
    miss_rate: float

    @property
    def total_requests(self) -> int:
        return self.hits + self.misses

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalKeys": self.total_keys,
            "memoryUsageBytes": self.memory_usage_bytes,
            "hits": self.hits,
            "misses": self.misses,
            "hitRate": self.hit_rate,
            "missRate": self.miss_rate,
            "totalRequests": self.total_requests,
        }
