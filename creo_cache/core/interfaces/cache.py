"""
Cache Backend Protocol

The storage contract CacheStore is written against. Backends deal in fully
qualified (already namespaced) keys and string payloads; serialization and
namespacing are the store's job.

Architectural Decision: Protocol-based abstraction
- Redis in production, an in-process backend for development and tests
- CacheStore receives a backend explicitly instead of importing a global client
- Runtime checking with @runtime_checkable

Author: Creo Platform Team
Date: 2026-01-14
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class CacheBackend(Protocol):
    """
    Protocol every cache backend implements.

    Implementations:
    - RedisBackend: redis.asyncio with a shared connection pool
    - InMemoryBackend: dict-backed store with expiry checked on read

    Failure contract:
    - Connection problems raise BackendUnreachableError
    - Backend-side timeouts raise BackendTimeoutError
    - A missing key is never an error
    """

    async def connect(self) -> None:
        """
        Establish the backend connection.

        Raises:
            BackendUnreachableError: If the backend cannot be reached
        """
        ...

    async def disconnect(self) -> None:
        ...

    async def ping(self) -> bool:
        """Minimal round trip; raises on failure."""
        ...

    async def get(self, key: str) -> str | None:
        ...

    async def set(self, key: str, value: str, ttl: int | None = None) -> bool:
        """
        Store a value, overwriting any previous one.

        Args:
            key: Fully qualified key
            value: Serialized payload
            ttl: Seconds until the entry expires; None or 0 means no expiry
        """
        ...

    async def delete(self, *keys: str) -> int:
        """Delete keys, returning how many existed."""
        ...

    async def exists(self, key: str) -> bool:
        ...

    async def expire(self, key: str, ttl: int) -> bool:
        ...

    async def incr(self, key: str, amount: int = 1) -> int:
        """Atomic increment-or-create. Returns the new value."""
        ...

    async def mget(self, keys: list[str]) -> list[str | None]:
        """Read several keys in one atomic step."""
        ...

    async def scan_keys(self, match: str) -> list[str]:
        """Enumerate keys matching a glob pattern. O(n): not for hot paths."""
        ...

    async def flush(self, match: str | None = None) -> int:
        """
        Remove every key matching the pattern, or the whole database when
        match is None. Returns the number of keys removed when known.
        """
        ...

    async def count_keys(self, match: str | None = None) -> int:
        """Count live keys. Pattern counts enumerate the keyspace."""
        ...

    async def memory_usage(self) -> int:
        """Backend-reported memory use in bytes."""
        ...
