"""
Redis Cache Backend with Connection Pooling

Architecture:
    RedisBackend (CacheBackend implementation)
        ├── ConnectionManager (pool lifecycle)
        └── OperationExecutor (commands with error translation)

Error translation:
    redis TimeoutError     → BackendTimeoutError
    redis ConnectionError  → BackendUnreachableError
    any other RedisError   → CacheError

Expiry is native (SET ... EX); counters use INCRBY, which is atomic
increment-or-create on the server.

Author: Creo Platform Team
Date: 2026-01-14
"""

from contextlib import asynccontextmanager

import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool
from redis.exceptions import ConnectionError, RedisError, TimeoutError

from creo_cache.config.settings import Settings
from creo_cache.core.exceptions import BackendTimeoutError, BackendUnreachableError, CacheError
from creo_cache.core.logging.logger import get_logger

logger = get_logger(__name__)

SCAN_BATCH_SIZE = 500


@asynccontextmanager
async def translate_redis_errors(operation: str, **context):
    """Re-raise redis-py exceptions as cache backend errors."""
    try:
        yield
    except TimeoutError as e:
        logger.error(f"Redis {operation} timed out", stage=f"REDIS.{operation}", error=str(e), **context)
        raise BackendTimeoutError.from_exception(e, operation=operation, **context) from e
    except ConnectionError as e:
        logger.error(f"Redis {operation} unreachable", stage=f"REDIS.{operation}", error=str(e), **context)
        raise BackendUnreachableError.from_exception(e, operation=operation, **context) from e
    except RedisError as e:
        logger.error(f"Redis {operation} failed", stage=f"REDIS.{operation}", error=str(e), **context)
        raise CacheError.from_exception(e, operation=operation, **context) from e


# =============================================================================
# LAYER 1: CONNECTION MANAGEMENT
# =============================================================================


class ConnectionManager:
    """
    Manages the Redis connection pool.

    The pool is acquired once at startup and shared by every caller; no
    component owns it exclusively.
    """

    def __init__(self, settings: Settings):
        self._settings = settings
        self._pool: ConnectionPool | None = None
        self._client: redis.Redis | None = None

    async def connect(self) -> redis.Redis:
        """
        Create the pool and verify it with a PING.

        STAGE-REDIS.1: Connection establishment

        Raises:
            BackendUnreachableError: If the server cannot be reached
        """
        if self._client is not None:
            return self._client

        redis_settings = self._settings.redis
        self._pool = ConnectionPool(
            host=redis_settings.REDIS_HOST,
            port=redis_settings.REDIS_PORT,
            db=redis_settings.REDIS_DB,
            password=redis_settings.REDIS_PASSWORD,
            max_connections=redis_settings.REDIS_MAX_CONNECTIONS,
            socket_connect_timeout=redis_settings.REDIS_SOCKET_CONNECT_TIMEOUT,
            socket_timeout=redis_settings.REDIS_SOCKET_TIMEOUT,
            health_check_interval=redis_settings.REDIS_HEALTH_CHECK_INTERVAL,
            decode_responses=True,
        )
        # Kept after a failed PING: the pool opens connections per command
        client = redis.Redis(connection_pool=self._pool)
        self._client = client

        try:
            await client.ping()
        except (ConnectionError, TimeoutError) as e:
            logger.error("Failed to connect to Redis", stage="REDIS.1", error=str(e))
            raise BackendUnreachableError(
                message=f"Failed to connect to Redis: {e}",
                details={"host": redis_settings.REDIS_HOST, "port": redis_settings.REDIS_PORT},
            ) from e

        logger.info(
            "Redis connected",
            stage="REDIS.1",
            host=redis_settings.REDIS_HOST,
            port=redis_settings.REDIS_PORT,
            db=redis_settings.REDIS_DB,
        )
        return client

    async def disconnect(self) -> None:
        """
        Close the client and the pool.

        STAGE-REDIS.3: Connection cleanup
        """
        if self._client is not None:
            await self._client.aclose()
        if self._pool is not None:
            await self._pool.disconnect()
        self._client = None
        self._pool = None
        logger.info("Redis disconnected", stage="REDIS.3")

    def get_client(self) -> redis.Redis:
        if self._client is None:
            raise BackendUnreachableError("Redis backend is not connected")
        return self._client


# =============================================================================
# LAYER 2: OPERATION EXECUTOR
# =============================================================================


class OperationExecutor:
    """
    Executes Redis commands with consistent error translation and logging.
    """

    def __init__(self, connection: ConnectionManager):
        self._connection = connection

    @property
    def _redis(self) -> redis.Redis:
        return self._connection.get_client()

    async def ping(self) -> bool:
        async with translate_redis_errors("PING"):
            return bool(await self._redis.ping())

    async def get(self, key: str) -> str | None:
        async with translate_redis_errors("GET", key=key):
            return await self._redis.get(key)

    async def set(self, key: str, value: str, ttl: int | None = None) -> bool:
        async with translate_redis_errors("SET", key=key):
            result = await self._redis.set(key, value, ex=ttl or None)
            return bool(result)

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        async with translate_redis_errors("DEL", keys=len(keys)):
            return await self._redis.delete(*keys)

    async def exists(self, key: str) -> bool:
        async with translate_redis_errors("EXISTS", key=key):
            return await self._redis.exists(key) == 1

    async def expire(self, key: str, ttl: int) -> bool:
        async with translate_redis_errors("EXPIRE", key=key):
            return bool(await self._redis.expire(key, ttl))

    async def incrby(self, key: str, amount: int) -> int:
        async with translate_redis_errors("INCRBY", key=key):
            return await self._redis.incrby(key, amount)

    async def mget(self, keys: list[str]) -> list[str | None]:
        async with translate_redis_errors("MGET", keys=len(keys)):
            return await self._redis.mget(keys)

    async def scan(self, match: str) -> list[str]:
        async with translate_redis_errors("SCAN", match=match):
            return [key async for key in self._redis.scan_iter(match=match, count=SCAN_BATCH_SIZE)]

    async def flushdb(self) -> None:
        async with translate_redis_errors("FLUSHDB"):
            await self._redis.flushdb()

    async def dbsize(self) -> int:
        async with translate_redis_errors("DBSIZE"):
            return await self._redis.dbsize()

    async def used_memory(self) -> int:
        async with translate_redis_errors("INFO"):
            info = await self._redis.info("memory")
            return int(info.get("used_memory", 0))


# =============================================================================
# LAYER 3: PUBLIC BACKEND
# =============================================================================


class RedisBackend:
    """
    CacheBackend implementation over a pooled redis.asyncio client.

    Usage:
        backend = RedisBackend(settings)
        await backend.connect()
        await backend.set("creo:stock:providers", "[...]", ttl=86400)
    """

    def __init__(self, settings: Settings):
        self._connection = ConnectionManager(settings)
        self._executor = OperationExecutor(self._connection)

    async def connect(self) -> None:
        await self._connection.connect()

    async def disconnect(self) -> None:
        await self._connection.disconnect()

    async def ping(self) -> bool:
        return await self._executor.ping()

    async def get(self, key: str) -> str | None:
        return await self._executor.get(key)

    async def set(self, key: str, value: str, ttl: int | None = None) -> bool:
        return await self._executor.set(key, value, ttl)

    async def delete(self, *keys: str) -> int:
        return await self._executor.delete(*keys)

    async def exists(self, key: str) -> bool:
        return await self._executor.exists(key)

    async def expire(self, key: str, ttl: int) -> bool:
        return await self._executor.expire(key, ttl)

    async def incr(self, key: str, amount: int = 1) -> int:
        return await self._executor.incrby(key, amount)

    async def mget(self, keys: list[str]) -> list[str | None]:
        return await self._executor.mget(keys)

    async def scan_keys(self, match: str) -> list[str]:
        return await self._executor.scan(match)

    async def flush(self, match: str | None = None) -> int:
        """
        Remove keys matching the pattern, or FLUSHDB when no pattern is given.

        Pattern removal is SCAN + batched DEL so the server is never blocked
        by a single KEYS call.
        """
        if match is None:
            await self._executor.flushdb()
            return -1

        keys = await self._executor.scan(match)
        removed = 0
        for start in range(0, len(keys), SCAN_BATCH_SIZE):
            removed += await self._executor.delete(*keys[start : start + SCAN_BATCH_SIZE])
        return removed

    async def count_keys(self, match: str | None = None) -> int:
        """
        DBSIZE for the whole database; a SCAN enumeration (O(n)) for a
        namespace. Only called from stats reporting.
        """
        if match is None:
            return await self._executor.dbsize()
        return len(await self._executor.scan(match))

    async def memory_usage(self) -> int:
        return await self._executor.used_memory()
