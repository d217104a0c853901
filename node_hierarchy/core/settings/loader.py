"""LRU-cached settings loaders.

Settings are loaded and validated once, then cached for the lifetime of the
process.

Usage:
    from node_hierarchy.core.settings import get_db_settings

    settings = get_db_settings()  # First call: loads and validates
    settings = get_db_settings()  # Subsequent calls: cached instance

Testing:
    clear_all_caches()  # force reload after changing the environment
"""

from __future__ import annotations

from functools import lru_cache

from .app import AppSettings
from .database import DatabaseSettings
from .hierarchy import HierarchySettings
from .logs import LoggingSettings


@lru_cache(maxsize=1)
def get_app_settings() -> AppSettings:
    """Get cached application settings."""
    return AppSettings()


@lru_cache(maxsize=1)
def get_db_settings() -> DatabaseSettings:
    """Get cached database settings."""
    return DatabaseSettings()


@lru_cache(maxsize=1)
def get_hierarchy_settings() -> HierarchySettings:
    """Get cached hierarchy engine settings."""
    return HierarchySettings()


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    """Get cached logging settings."""
    return LoggingSettings()


def clear_all_caches() -> None:
    """Clear every cached settings instance."""
    get_app_settings.cache_clear()
    get_db_settings.cache_clear()
    get_hierarchy_settings.cache_clear()
    get_logging_settings.cache_clear()
