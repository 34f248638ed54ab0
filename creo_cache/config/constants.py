#!/usr/bin/env python3
"""
Cache Keys, TTLs and Enumerations

Well-known key families and TTL tiers shared by the store, the warmer and
invalidation helpers.

Author: Creo Platform Team
Date: 2026-01-14
"""

from enum import Enum

# ============================================================================
# Cache Keys
# ============================================================================


class CacheKeys:
    """Base keys for each cached data family. Namespacing is applied by the store."""

    # Stock search
    STOCK_SEARCH = "stock:search"
    STOCK_PROVIDERS = "stock:providers"
    STOCK_CATEGORIES = "stock:categories"

    # AI generation
    AI_GENERATION = "ai:generation"
    AI_STYLES = "ai:styles"
    AI_PRESETS = "ai:presets"

    # User data
    USER_PROFILE = "user:profile"
    USER_CREDITS = "user:credits"
    USER_ORDERS = "user:orders"

    # System
    SYSTEM_STATS = "system:stats"
    API_USAGE = "api:usage"
    ERROR_LOGS = "error:logs"


# Hit/miss counters live in the cache itself so they share its durability
HITS_KEY = "cache:hits"
MISSES_KEY = "cache:misses"


# ============================================================================
# TTL tiers (seconds)
# ============================================================================


class CacheTTL:
    """Time-to-live tiers in seconds."""

    SHORT = 300
    MEDIUM = 3600
    LONG = 86400
    VERY_LONG = 604800

    STOCK_SEARCH = 1800
    STOCK_PROVIDERS = 86400
    AI_GENERATION = 3600
    USER_PROFILE = 1800
    USER_CREDITS = 300
    SYSTEM_STATS = 300


POPULAR_SEARCH_TERMS: tuple[str, ...] = (
    "nature",
    "business",
    "people",
    "technology",
    "abstract",
    "landscape",
    "portrait",
    "office",
    "city",
    "food",
)


# ============================================================================
# Enumerations
# ============================================================================


class HealthState(str, Enum):
    """Outcome of a backend health probe."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class JobState(str, Enum):
    """Lifecycle of a single warm job within one run: PENDING -> RUNNING -> terminal."""

    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobState.SUCCEEDED, JobState.FAILED)

