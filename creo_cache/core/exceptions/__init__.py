"""
Exception hierarchy for the cache service.

    CacheCoreError
    ├── ConfigurationError
    ├── CacheError
    │   ├── BackendUnreachableError
    │   └── BackendTimeoutError
    ├── RemoteUnavailableError
    └── WarmerError
        ├── JobFailedError
        ├── WarmCancelledError
        ├── EmptyRegistryError
        ├── RegistryFrozenError
        └── DuplicateJobError
"""

from .base import CacheCoreError, ConfigurationError
from .cache import BackendTimeoutError, BackendUnreachableError, CacheError
from .edge import RemoteUnavailableError
from .warming import (
    DuplicateJobError,
    EmptyRegistryError,
    JobFailedError,
    RegistryFrozenError,
    WarmCancelledError,
    WarmerError,
)

__all__ = [
    "CacheCoreError",
    "ConfigurationError",
    "CacheError",
    "BackendUnreachableError",
    "BackendTimeoutError",
    "RemoteUnavailableError",
    "WarmerError",
    "JobFailedError",
    "WarmCancelledError",
    "EmptyRegistryError",
    "RegistryFrozenError",
    "DuplicateJobError",
]
