"""
Core Module

Foundational components: logging, exceptions and backend interfaces.
"""

from .exceptions import (
    BackendTimeoutError,
    BackendUnreachableError,
    CacheCoreError,
    CacheError,
    ConfigurationError,
    DuplicateJobError,
    EmptyRegistryError,
    JobFailedError,
    RegistryFrozenError,
    RemoteUnavailableError,
    WarmCancelledError,
    WarmerError,
)
from .logging import (
    clear_request_id,
    get_logger,
    get_request_id,
    log_stage,
    set_request_id,
    setup_logging,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "set_request_id",
    "get_request_id",
    "clear_request_id",
    "log_stage",
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
