"""
Config - Configuration.

- settings.py: Settings from environment
- factory.py: Backend and EntityStore factories, logging from settings
"""

from .settings import (
    Settings,
    CacheBackendType,
    StoreBackendType,
    LogLevel,
    get_settings,
    reset_settings,
    load_env,
)
from .factory import (
    create_cache_backend,
    create_store_backend,
    create_entity_store,
    configure_logging,
)

__all__ = [
    # Settings
    "Settings",
    "CacheBackendType",
    "StoreBackendType",
    "LogLevel",
    "get_settings",
    "reset_settings",
    "load_env",
    # Factories
    "create_cache_backend",
    "create_store_backend",
    "create_entity_store",
    "configure_logging",
]
