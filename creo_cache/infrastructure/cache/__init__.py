"""
Cache infrastructure: backends, store, statistics and warming.
"""

from .cache_store import CacheStore, cached
from .cache_warmer import CacheWarmer, FailedJob, WarmJob, WarmReport, WarmScheduler
from .memory_backend import InMemoryBackend
from .models import CacheStatistics, HealthStatus, StoreStats
from .redis_backend import RedisBackend
from .stats_tracker import StatsTracker

__all__ = [
    "CacheStore",
    "cached",
    "CacheWarmer",
    "FailedJob",
    "WarmJob",
    "WarmReport",
    "WarmScheduler",
    "InMemoryBackend",
    "RedisBackend",
    "CacheStatistics",
    "HealthStatus",
    "StoreStats",
    "StatsTracker",
]
