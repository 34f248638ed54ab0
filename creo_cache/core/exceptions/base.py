"""
Base Exception Class

Root of the cache service's exception hierarchy. Specialized exceptions live
in their themed modules (cache, edge, warming).

Author: Creo Platform Team
Date: 2026-01-14
"""

from typing import Any


class CacheCoreError(Exception):
    """
    Base exception for all cache service errors.

    Attributes:
        message: Error message
        request_id: Request ID for correlation (if available)
        details: Additional error details (dict)

    Example:
        raise BackendUnreachableError(
            "Redis connection refused",
            details={"host": "cache.internal", "port": 6379},
        )
    """

    def __init__(
        self, message: str, request_id: str | None = None, details: dict[str, Any] | None = None
    ):
        self.message = message
        self.request_id = request_id
        self.details = (details or {}).copy()
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for logging/API responses.

        Returns:
            Dict with error_type, message, request_id, and details
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "request_id": self.request_id,
            "details": self.details,
        }

    def with_context(self, **context) -> "CacheCoreError":
        """Add context to the error details; returns self for chaining."""
        self.details.update(context)
        return self

    def __repr__(self) -> str:
        details_str = f", details={self.details}" if self.details else ""
        request_id_str = f", request_id='{self.request_id}'" if self.request_id else ""
        return f"{self.__class__.__name__}(message='{self.message}'{request_id_str}{details_str})"

    @classmethod
    def from_exception(
        cls,
        exc: BaseException,
        message: str | None = None,
        request_id: str | None = None,
        **details,
    ) -> "CacheCoreError":
        """
        Wrap a third-party exception, keeping its type and message in details.

        Example:
            >>> try:
            ...     await client.ping()
            ... except redis.ConnectionError as e:
            ...     raise BackendUnreachableError.from_exception(e, operation="ping")
        """
        error_message = message or str(exc) or exc.__class__.__name__
        error_details = {
            "original_error": exc.__class__.__name__,
            "original_message": str(exc),
            **details,
        }
        return cls(error_message, request_id=request_id, details=error_details)


class ConfigurationError(CacheCoreError):
    """Raised when configuration is invalid or missing."""
    pass
