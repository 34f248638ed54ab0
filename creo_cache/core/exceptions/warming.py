"""
Cache Warmer Exceptions

Author: Creo Platform Team
Date: 2026-01-14
"""

from creo_cache.core.exceptions.base import CacheCoreError


class WarmerError(CacheCoreError):
    """Base exception for cache warmer errors."""
    pass


class JobFailedError(WarmerError):
    """A warm job's own fetch or store step raised."""
    pass


class WarmCancelledError(WarmerError):
    """A warm run was aborted by its caller or by shutdown."""
    pass


class EmptyRegistryError(WarmerError):
    """warm_all was asked to require jobs but none are registered."""
    pass


class RegistryFrozenError(WarmerError):
    """A job was registered after the registry was frozen at startup."""
    pass


class DuplicateJobError(WarmerError):
    """A job with the same name is already registered."""
    pass
