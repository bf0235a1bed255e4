"""LRU-cached settings loaders.

Settings are loaded and validated once, then cached for the lifetime of the process.

Usage:
    from etcd_registry.core.settings.loader import get_etcd_settings

    settings = get_etcd_settings()  # First call: loads and validates
    settings = get_etcd_settings()  # Subsequent calls: returns cached instance

Testing:
    In tests, clear the cache to force reload:
    get_etcd_settings.cache_clear()
"""

from __future__ import annotations

from functools import lru_cache

from .etcd import EtcdSettings
from .logs import LoggingSettings


@lru_cache(maxsize=1)
def get_etcd_settings() -> EtcdSettings:
    """Get cached etcd adapter settings.

    Returns:
        Validated and frozen EtcdSettings instance.
    """
    return EtcdSettings()


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    """Get cached logging settings.

    Returns:
        Validated and frozen LoggingSettings instance.
    """
    return LoggingSettings()


def clear_all_caches() -> None:
    """Clear all settings caches.

    Useful for testing or when you need to force reload settings.
    """
    get_etcd_settings.cache_clear()
    get_logging_settings.cache_clear()
