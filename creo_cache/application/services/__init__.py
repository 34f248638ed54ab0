from .cache_stats_service import CacheStatsService
from .invalidation import CacheInvalidator
from .warm_jobs import build_default_jobs

__all__ = ["CacheStatsService", "CacheInvalidator", "build_default_jobs"]
