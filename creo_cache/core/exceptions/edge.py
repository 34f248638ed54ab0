"""
Remote Reporting Exceptions

Author: Creo Platform Team
Date: 2026-01-14
"""

from creo_cache.core.exceptions.base import CacheCoreError


class RemoteUnavailableError(CacheCoreError):
    """
    Raised when a remote reporting or catalog endpoint cannot be used.

    Covers connection errors, timeouts, non-2xx responses, malformed bodies
    and a missing endpoint configuration.
    """
    pass
