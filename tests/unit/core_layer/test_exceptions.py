"""
Unit Tests for Exception Hierarchy
"""

import pytest

from creo_cache.core.exceptions import (
    BackendTimeoutError,
    BackendUnreachableError,
    CacheCoreError,
    CacheError,
    DuplicateJobError,
    EmptyRegistryError,
    RemoteUnavailableError,
    WarmCancelledError,
    WarmerError,
)


@pytest.mark.unit
class TestExceptionHierarchy:
    """Test the class hierarchy."""

    @pytest.mark.parametrize(
        "exc_class, parent",
        [
            (BackendUnreachableError, CacheError),
            (BackendTimeoutError, CacheError),
            (CacheError, CacheCoreError),
            (RemoteUnavailableError, CacheCoreError),
            (EmptyRegistryError, WarmerError),
            (WarmCancelledError, WarmerError),
            (DuplicateJobError, WarmerError),
            (WarmerError, CacheCoreError),
        ],
    )
    def test_subclass_relationships(self, exc_class, parent):
        """Test that each exception sits under its expected parent."""
        assert issubclass(exc_class, parent)

    def test_remote_unavailable_is_not_a_backend_error(self):
        """Test that edge failures cannot be mistaken for cache backend failures."""
        assert not issubclass(RemoteUnavailableError, CacheError)


@pytest.mark.unit
class TestCacheCoreError:
    """Test the base exception helpers."""

    def test_to_dict(self):
        """Test that to_dict includes type, message, request ID and details."""
        error = BackendUnreachableError(
            "Redis connection refused", request_id="req-1", details={"port": 6379}
        )

        assert error.to_dict() == {
            "error_type": "BackendUnreachableError",
            "message": "Redis connection refused",
            "request_id": "req-1",
            "details": {"port": 6379},
        }

    def test_with_context_chains(self):
        """Test that with_context adds details and returns the same instance."""
        error = CacheError("failed")

        assert error.with_context(operation="GET").details == {"operation": "GET"}

    def test_details_are_copied(self):
        """Test that the caller's details dict is not shared."""
        details = {"a": 1}
        error = CacheError("failed", details=details)
        error.with_context(b=2)

        assert details == {"a": 1}

    def test_from_exception_keeps_original(self):
        """Test that from_exception records the wrapped exception type and message."""
        error = RemoteUnavailableError.from_exception(
            ConnectionRefusedError("refused"), message="Edge down", path="/stats"
        )

        assert isinstance(error, RemoteUnavailableError)
        assert error.message == "Edge down"
        assert error.details["original_error"] == "ConnectionRefusedError"
        assert error.details["path"] == "/stats"

    def test_repr_includes_details(self):
        """Test that repr shows the class, message and details."""
        text = repr(CacheError("failed", details={"key": "k"}))

        assert text.startswith("CacheError(message='failed'")
        assert "details={'key': 'k'}" in text
