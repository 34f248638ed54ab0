#!/usr/bin/env python3
"""
Centralized Configuration Module using Pydantic Settings

Type-safe, environment-based configuration for the cache service. Values are
read once at process start (environment and optional .env file) and are not
mutated afterwards; components receive the settings they need explicitly.

Architectural Decision: Pydantic Settings for type safety and validation
- Environment variable loading with .env support
- Type validation at startup (fail fast on misconfiguration)
- Grouped views (redis, cache, warming, ...) for the components that use them

Author: Creo Platform Team
Date: 2026-01-14
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class RedisSettings(BaseSettings):
    """
    Redis connection configuration.

    STAGE-0.1: Backend connection configuration
    """

    REDIS_HOST: str = Field(default="localhost", description="Redis server host")
    REDIS_PORT: int = Field(default=6379, description="Redis server port")
    REDIS_DB: int = Field(default=0, description="Redis database number")
    REDIS_PASSWORD: str | None = Field(default=None, description="Redis password (if required)")
    REDIS_MAX_CONNECTIONS: int = Field(default=50, description="Maximum pooled connections")
    REDIS_SOCKET_TIMEOUT: float = Field(default=5.0, description="Socket timeout in seconds")
    REDIS_SOCKET_CONNECT_TIMEOUT: float = Field(default=5.0, description="Connect timeout in seconds")
    REDIS_HEALTH_CHECK_INTERVAL: int = Field(default=30, description="Pool health check interval")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class CacheSettings(BaseSettings):
    """
    Cache store behaviour.

    STAGE-2: Cache configuration
    """

    CACHE_BACKEND: Literal["redis", "memory"] = Field(default="redis", description="Backend type")
    CACHE_NAMESPACE: str = Field(default="creo", description="Key prefix for every cache entry")
    CACHE_DEFAULT_TTL: int = Field(default=3600, ge=0, description="TTL for get_or_set values stored without one (seconds)")
    CACHE_OPERATION_TIMEOUT: float = Field(default=2.0, gt=0, description="Per-call timeout (seconds)")
    CACHE_HEALTH_LATENCY_THRESHOLD_MS: float = Field(
        default=100.0, gt=0, description="Ping latency above which health is degraded"
    )

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class WarmingSettings(BaseSettings):
    """
    Cache warmer configuration.

    STAGE-W: Warm job scheduling
    """

    WARM_MAX_CONCURRENCY: int = Field(default=4, ge=1, le=64, description="Worker pool size")
    WARM_JOB_TIMEOUT: float = Field(default=30.0, gt=0, description="Per-job timeout (seconds)")
    WARM_DEADLINE: float = Field(default=120.0, gt=0, description="Overall warm run deadline")
    WARM_ON_STARTUP: bool = Field(default=False, description="Run a warm pass at startup")
    WARM_SCHEDULE_ENABLED: bool = Field(default=False, description="Enable periodic warming")
    WARM_SCHEDULE_INTERVAL: float = Field(default=900.0, gt=0, description="Seconds between runs")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class EdgeSettings(BaseSettings):
    """Edge (CDN) statistics endpoint."""

    EDGE_STATS_URL: str | None = Field(default=None, description="Edge stats reporting URL")
    EDGE_STATS_TOKEN: str | None = Field(default=None, description="Bearer token for edge stats")
    EDGE_STATS_TIMEOUT: float = Field(default=3.0, gt=0, description="Request timeout (seconds)")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class UpstreamSettings(BaseSettings):
    """Upstream catalog API used by warm jobs."""

    UPSTREAM_API_BASE_URL: str | None = Field(default=None, description="Catalog API base URL")
    UPSTREAM_API_TOKEN: str | None = Field(default=None, description="Catalog API bearer token")
    UPSTREAM_TIMEOUT: float = Field(default=10.0, gt=0, description="Request timeout (seconds)")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class LoggingSettings(BaseSettings):
    """
    Logging configuration for structured logging.

    STAGE-L: Logging configuration
    """

    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        if v.upper() not in _VALID_LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {_VALID_LOG_LEVELS}")
        return v.upper()

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class ApplicationSettings(BaseSettings):
    """General application settings."""

    ENVIRONMENT: Literal["development", "staging", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    APP_NAME: str = Field(default="Creo Cache Service", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")
    API_HOST: str = Field(default="0.0.0.0", description="API host")
    API_PORT: int = Field(default=8000, description="API port")
    API_PREFIX: str = Field(default="/api", description="Prefix for all API routes")
    ADMIN_TOKEN: str | None = Field(default=None, description="Token required by admin routes")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class Settings(BaseSettings):
    """
    Main settings class that aggregates all configuration sections.

    STAGE-0: Centralized configuration initialization

    Usage:
        from creo_cache.config.settings import get_settings

        settings = get_settings()
        timeout = settings.cache.CACHE_OPERATION_TIMEOUT
    """

    # Redis settings
    REDIS_HOST: str = Field(default="localhost", description="Redis server host")
    REDIS_PORT: int = Field(default=6379, description="Redis server port")
    REDIS_DB: int = Field(default=0, description="Redis database number")
    REDIS_PASSWORD: str | None = Field(default=None, description="Redis password (if required)")
    REDIS_MAX_CONNECTIONS: int = Field(default=50, description="Maximum pooled connections")
    REDIS_SOCKET_TIMEOUT: float = Field(default=5.0, description="Socket timeout in seconds")
    REDIS_SOCKET_CONNECT_TIMEOUT: float = Field(default=5.0, description="Connect timeout in seconds")
    REDIS_HEALTH_CHECK_INTERVAL: int = Field(default=30, description="Pool health check interval")

    # Cache settings
    CACHE_BACKEND: Literal["redis", "memory"] = Field(default="redis", description="Backend type")
    CACHE_NAMESPACE: str = Field(default="creo", description="Key prefix for every cache entry")
    CACHE_DEFAULT_TTL: int = Field(default=3600, ge=0, description="TTL for get_or_set values stored without one (seconds)")
    CACHE_OPERATION_TIMEOUT: float = Field(default=2.0, gt=0, description="Per-call timeout (seconds)")
    CACHE_HEALTH_LATENCY_THRESHOLD_MS: float = Field(
        default=100.0, gt=0, description="Ping latency above which health is degraded"
    )

    # Warming settings
    WARM_MAX_CONCURRENCY: int = Field(default=4, ge=1, le=64, description="Worker pool size")
    WARM_JOB_TIMEOUT: float = Field(default=30.0, gt=0, description="Per-job timeout (seconds)")
    WARM_DEADLINE: float = Field(default=120.0, gt=0, description="Overall warm run deadline")
    WARM_ON_STARTUP: bool = Field(default=False, description="Run a warm pass at startup")
    WARM_SCHEDULE_ENABLED: bool = Field(default=False, description="Enable periodic warming")
    WARM_SCHEDULE_INTERVAL: float = Field(default=900.0, gt=0, description="Seconds between runs")

    # Edge statistics
    EDGE_STATS_URL: str | None = Field(default=None, description="Edge stats reporting URL")
    EDGE_STATS_TOKEN: str | None = Field(default=None, description="Bearer token for edge stats")
    EDGE_STATS_TIMEOUT: float = Field(default=3.0, gt=0, description="Request timeout (seconds)")

    # Upstream catalog
    UPSTREAM_API_BASE_URL: str | None = Field(default=None, description="Catalog API base URL")
    UPSTREAM_API_TOKEN: str | None = Field(default=None, description="Catalog API bearer token")
    UPSTREAM_TIMEOUT: float = Field(default=10.0, gt=0, description="Request timeout (seconds)")

    # Logging settings
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    # Application settings
    ENVIRONMENT: Literal["development", "staging", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    APP_NAME: str = Field(default="Creo Cache Service", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")
    API_HOST: str = Field(default="0.0.0.0", description="API host")
    API_PORT: int = Field(default=8000, description="API port")
    API_PREFIX: str = Field(default="/api", description="Prefix for all API routes")
    ADMIN_TOKEN: str | None = Field(default=None, description="Token required by admin routes")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        if v.upper() not in _VALID_LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {_VALID_LOG_LEVELS}")
        return v.upper()

    @property
    def redis(self) -> RedisSettings:
        """Get Redis settings."""
        return RedisSettings(
            REDIS_HOST=self.REDIS_HOST,
            REDIS_PORT=self.REDIS_PORT,
            REDIS_DB=self.REDIS_DB,
            REDIS_PASSWORD=self.REDIS_PASSWORD,
            REDIS_MAX_CONNECTIONS=self.REDIS_MAX_CONNECTIONS,
            REDIS_SOCKET_TIMEOUT=self.REDIS_SOCKET_TIMEOUT,
            REDIS_SOCKET_CONNECT_TIMEOUT=self.REDIS_SOCKET_CONNECT_TIMEOUT,
            REDIS_HEALTH_CHECK_INTERVAL=self.REDIS_HEALTH_CHECK_INTERVAL,
        )

    @property
    def cache(self) -> CacheSettings:
        """Get cache settings."""
        return CacheSettings(
            CACHE_BACKEND=self.CACHE_BACKEND,
            CACHE_NAMESPACE=self.CACHE_NAMESPACE,
            CACHE_DEFAULT_TTL=self.CACHE_DEFAULT_TTL,
            CACHE_OPERATION_TIMEOUT=self.CACHE_OPERATION_TIMEOUT,
            CACHE_HEALTH_LATENCY_THRESHOLD_MS=self.CACHE_HEALTH_LATENCY_THRESHOLD_MS,
        )

    @property
    def warming(self) -> WarmingSettings:
        """Get warmer settings."""
        return WarmingSettings(
            WARM_MAX_CONCURRENCY=self.WARM_MAX_CONCURRENCY,
            WARM_JOB_TIMEOUT=self.WARM_JOB_TIMEOUT,
            WARM_DEADLINE=self.WARM_DEADLINE,
            WARM_ON_STARTUP=self.WARM_ON_STARTUP,
            WARM_SCHEDULE_ENABLED=self.WARM_SCHEDULE_ENABLED,
            WARM_SCHEDULE_INTERVAL=self.WARM_SCHEDULE_INTERVAL,
        )

    @property
    def edge(self) -> EdgeSettings:
        """Get edge statistics settings."""
        return EdgeSettings(
            EDGE_STATS_URL=self.EDGE_STATS_URL,
            EDGE_STATS_TOKEN=self.EDGE_STATS_TOKEN,
            EDGE_STATS_TIMEOUT=self.EDGE_STATS_TIMEOUT,
        )

    @property
    def upstream(self) -> UpstreamSettings:
        """Get upstream catalog settings."""
        return UpstreamSettings(
            UPSTREAM_API_BASE_URL=self.UPSTREAM_API_BASE_URL,
            UPSTREAM_API_TOKEN=self.UPSTREAM_API_TOKEN,
            UPSTREAM_TIMEOUT=self.UPSTREAM_TIMEOUT,
        )

    @property
    def logging(self) -> LoggingSettings:
        """Get logging settings."""
        return LoggingSettings(LOG_LEVEL=self.LOG_LEVEL, LOG_FORMAT=self.LOG_FORMAT)

    @property
    def app(self) -> ApplicationSettings:
        """Get application settings."""
        return ApplicationSettings(
            ENVIRONMENT=self.ENVIRONMENT,
            APP_NAME=self.APP_NAME,
            APP_VERSION=self.APP_VERSION,
            API_HOST=self.API_HOST,
            API_PORT=self.API_PORT,
            API_PREFIX=self.API_PREFIX,
            ADMIN_TOKEN=self.ADMIN_TOKEN,
        )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


# Global settings instance (lazy singleton)
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the process-wide settings instance.

    STAGE-0.3: Settings initialization

    Returns:
        Settings: Settings loaded on first access
    """
    global _settings

    if _settings is None:
        _settings = Settings()

    return _settings


def reload_settings() -> Settings:
    """
    Reload settings (useful for testing).

    Returns:
        Settings: New settings instance
    """
    global _settings
    _settings = Settings()
    return _settings
