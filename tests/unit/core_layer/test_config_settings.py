"""
Unit Tests for Configuration Settings

Tests the settings loading, validation, and default values.
"""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from creo_cache.config.settings import Settings, get_settings, reload_settings


@pytest.mark.unit
class TestSettingsDefaults:
    """Test Settings defaults and grouped views."""

    def test_settings_has_grouped_views(self):
        """Test that Settings exposes every configuration section."""
        settings = Settings(_env_file=None)

        for section in ("redis", "cache", "warming", "edge", "upstream", "logging", "app"):
            assert hasattr(settings, section)

    def test_cache_defaults(self):
        """Test that cache settings have reasonable defaults."""
        with patch.dict(os.environ, {}, clear=True):
            cache = Settings(_env_file=None).cache

        assert cache.CACHE_BACKEND == "redis"
        assert cache.CACHE_NAMESPACE == "creo"
        assert cache.CACHE_DEFAULT_TTL == 3600
        assert cache.CACHE_OPERATION_TIMEOUT > 0

    def test_warming_defaults(self):
        """Test that warming is bounded and off until enabled."""
        with patch.dict(os.environ, {}, clear=True):
            warming = Settings(_env_file=None).warming

        assert warming.WARM_MAX_CONCURRENCY == 4
        assert warming.WARM_ON_STARTUP is False
        assert warming.WARM_SCHEDULE_ENABLED is False

    def test_optional_remotes_default_to_unconfigured(self):
        """Test that edge and upstream URLs are unset by default."""
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.edge.EDGE_STATS_URL is None
        assert settings.upstream.UPSTREAM_API_BASE_URL is None
        assert settings.app.ADMIN_TOKEN is None


@pytest.mark.unit
class TestSettingsValidation:
    """Test validation of configuration values."""

    def test_log_level_is_normalized(self):
        """Test that LOG_LEVEL is upper-cased."""
        assert Settings(_env_file=None, LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"

    def test_invalid_log_level_rejected(self):
        """Test that an unknown LOG_LEVEL fails validation."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, LOG_LEVEL="LOUD")

    def test_invalid_backend_rejected(self):
        """Test that CACHE_BACKEND only accepts known backends."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, CACHE_BACKEND="memcached")

    def test_warm_concurrency_bounds(self):
        """Test that WARM_MAX_CONCURRENCY must be at least 1."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, WARM_MAX_CONCURRENCY=0)

    def test_negative_ttl_rejected(self):
        """Test that CACHE_DEFAULT_TTL cannot be negative."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, CACHE_DEFAULT_TTL=-1)


@pytest.mark.unit
class TestSettingsLoading:
    """Test environment loading and the singleton."""

    def test_environment_overrides_defaults(self):
        """Test that environment variables override defaults."""
        env = {"CACHE_NAMESPACE": "staging", "WARM_MAX_CONCURRENCY": "8", "REDIS_PORT": "6380"}
        with patch.dict(os.environ, env):
            settings = Settings(_env_file=None)

        assert settings.cache.CACHE_NAMESPACE == "staging"
        assert settings.warming.WARM_MAX_CONCURRENCY == 8
        assert settings.redis.REDIS_PORT == 6380

    def test_get_settings_returns_singleton(self):
        """Test that get_settings caches its instance."""
        assert get_settings() is get_settings()

    def test_reload_settings_replaces_instance(self):
        """Test that reload_settings builds a new instance."""
        original = get_settings()
        reloaded = reload_settings()

        assert reloaded is not original
        assert get_settings() is reloaded
