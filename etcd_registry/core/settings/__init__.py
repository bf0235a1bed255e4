"""Pydantic Settings v2 configuration.

Import settings via cached loaders:
    from etcd_registry.core.settings import get_etcd_settings

Configuration precedence (highest to lowest):
    1. init kwargs (testing/overrides)
    2. YAML/conf.d files (optional)
    3. Environment variables
    4. .env file
    5. secrets_dir
"""

from __future__ import annotations

from .etcd import EtcdSettings, SyncPolicy
from .loader import clear_all_caches, get_etcd_settings, get_logging_settings
from .logs import LoggingSettings

__all__ = [
    "EtcdSettings",
    "LoggingSettings",
    "SyncPolicy",
    "clear_all_caches",
    "get_etcd_settings",
    "get_logging_settings",
]
