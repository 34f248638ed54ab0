"""
In-Memory Cache Backend

Process-local CacheBackend for development, single-instance deployments and
tests. Entries store their absolute expiry time, which is checked on every
read; an expired entry behaves exactly like a missing one.

A single asyncio.Lock serializes mutations, which makes incr and mget
linearizable for concurrent callers on the same event loop.

Author: Creo Platform Team
Date: 2026-01-14
"""

import asyncio
import fnmatch
import time
from collections.abc import Callable
from dataclasses import dataclass

from creo_cache.core.exceptions import BackendUnreachableError, CacheError
from creo_cache.core.logging.logger import get_logger

logger = get_logger(__name__)


@dataclass
class _Entry:
    value: str
    expires_at: float | None = None

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class InMemoryBackend:
    """
    Dict-backed implementation of the CacheBackend protocol.

    Args:
        clock: Monotonic time source in seconds; tests inject a fake clock
               to move past TTLs without sleeping.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._store: dict[str, _Entry] = {}
        self._lock = asyncio.Lock()
        self._connected = False

    async def connect(self) -> None:
        self._connected = True
        logger.info("In-memory cache backend ready", stage="MEMORY.1")

    async def disconnect(self) -> None:
        self._connected = False
        self._store.clear()
        logger.info("In-memory cache backend closed", stage="MEMORY.3")

    def _ensure_connected(self) -> None:
        if not self._connected:
            raise BackendUnreachableError("In-memory backend is not connected")

    def _live(self, key: str) -> _Entry | None:
        entry = self._store.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            del self._store[key]
            return None
        return entry

    def _expiry(self, ttl: int | None) -> float | None:
        return self._clock() + ttl if ttl else None

    async def ping(self) -> bool:
        self._ensure_connected()
        return True

    async def get(self, key: str) -> str | None:
        self._ensure_connected()
        entry = self._live(key)
        return entry.value if entry else None

    async def set(self, key: str, value: str, ttl: int | None = None) -> bool:
        self._ensure_connected()
        async with self._lock:
            self._store[key] = _Entry(value=value, expires_at=self._expiry(ttl))
        return True

    async def delete(self, *keys: str) -> int:
        self._ensure_connected()
        async with self._lock:
            removed = 0
            for key in keys:
                if self._live(key) is not None:
                    del self._store[key]
                    removed += 1
            return removed

    async def exists(self, key: str) -> bool:
        self._ensure_connected()
        return self._live(key) is not None

    async def expire(self, key: str, ttl: int) -> bool:
        self._ensure_connected()
        async with self._lock:
            entry = self._live(key)
            if entry is None:
                return False
            entry.expires_at = self._expiry(ttl)
            return True

    async def incr(self, key: str, amount: int = 1) -> int:
        self._ensure_connected()
        async with self._lock:
            entry = self._live(key)
            try:
                current = int(entry.value) if entry else 0
            except ValueError as e:
                raise CacheError.from_exception(
                    e, message="value is not an integer or out of range", operation="INCR", key=key
                ) from e
            new_value = current + amount
            if entry:
                entry.value = str(new_value)
            else:
                self._store[key] = _Entry(value=str(new_value))
            return new_value

    async def mget(self, keys: list[str]) -> list[str | None]:
        self._ensure_connected()
        async with self._lock:
            return [entry.value if (entry := self._live(key)) else None for key in keys]

    async def scan_keys(self, match: str) -> list[str]:
        self._ensure_connected()
        return [key for key in list(self._store) if fnmatch.fnmatchcase(key, match) and self._live(key)]

    async def flush(self, match: str | None = None) -> int:
        self._ensure_connected()
        async with self._lock:
            if match is None:
                removed = len(self._store)
                self._store.clear()
                return removed
            doomed = [key for key in self._store if fnmatch.fnmatchcase(key, match)]
            for key in doomed:
                del self._store[key]
            return len(doomed)

    async def count_keys(self, match: str | None = None) -> int:
        self._ensure_connected()
        if match is None:
            return sum(1 for key in list(self._store) if self._live(key))
        return len(await self.scan_keys(match))

    async def memory_usage(self) -> int:
        """Approximate payload size: UTF-8 length of keys and values."""
        self._ensure_connected()
        return sum(
            len(key.encode()) + len(entry.value.encode()) for key, entry in list(self._store.items())
        )
