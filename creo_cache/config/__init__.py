"""
Configuration package for creo-cache.

Centralized, type-safe configuration management using Pydantic Settings.
"""

from .settings import (
    Settings,
    get_settings,
    reload_settings,
)

__all__ = [
    "Settings",
    "get_settings",
    "reload_settings",
]
