"""Modular Pydantic Settings v2 configuration.

Settings are split by domain (app/db/hierarchy/logging), each with its own
environment prefix and optional YAML/conf.d files, and loaded through
LRU-cached getters.

Configuration precedence (highest to lowest):
    1. init kwargs (testing/overrides)
    2. YAML/conf.d files (optional, local/dev)
    3. Environment variables (production)
    4. .env file (development only)
    5. secrets_dir (Kubernetes/Docker secrets)
"""

from __future__ import annotations

from .app import AppSettings
from .database import DatabaseSettings
from .hierarchy import HierarchySettings
from .loader import (
    clear_all_caches,
    get_app_settings,
    get_db_settings,
    get_hierarchy_settings,
    get_logging_settings,
)
from .logs import LoggingSettings

__all__ = [
    "AppSettings",
    "DatabaseSettings",
    "HierarchySettings",
    "LoggingSettings",
    "clear_all_caches",
    "get_app_settings",
    "get_db_settings",
    "get_hierarchy_settings",
    "get_logging_settings",
]
