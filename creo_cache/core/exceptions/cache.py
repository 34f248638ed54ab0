"""
Cache Backend Exceptions

Failures talking to the cache backend. Store operations surface these to
the caller without retrying.

Author: Creo Platform Team
Date: 2026-01-14
"""

from creo_cache.core.exceptions.base import CacheCoreError


class CacheError(CacheCoreError):
    """Base exception for cache backend errors."""
    pass


class BackendUnreachableError(CacheError):
    """
    Raised when the cache backend cannot be reached.

    Common causes:
    - Redis server is down
    - Network connectivity issues
    - Incorrect host/port configuration
    - Authentication failure
    """
    pass


class BackendTimeoutError(CacheError):
    """Raised when a backend operation exceeds its per-call deadline."""
    pass
