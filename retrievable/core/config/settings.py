"""
Settings - Configuration using dataclasses.

Environment variables:
- CACHE_BACKEND: memory, redis
- STORE_BACKEND: sqlite, memory
- REDIS_URL: Redis connection URL
- REDIS_PREFIX: Cache key prefix
- CACHE_DEFAULT_TTL: Seconds for writes without ttl (0 = backend retention)
- CACHE_MAX_ENTRIES: In-memory cache bound (0 = unbounded)
- CACHE_MAX_ITEM_BYTES: Payload ceiling
- DB_PATH: SQLite database path
- BACKEND_TIMEOUT: Socket / lock timeout in seconds
- LOG_LEVEL: DEBUG, INFO, WARNING, ERROR
- LOG_JSON: true / false
"""

import os
from enum import Enum
from pathlib import Path
from typing import Optional, Union
from dataclasses import dataclass, field

from dotenv import load_dotenv


class CacheBackendType(str, Enum):
    """Cache backend options."""
    MEMORY = "memory"
    REDIS = "redis"


class StoreBackendType(str, Enum):
    """Durable store backend options."""
    SQLITE = "sqlite"
    MEMORY = "memory"


class LogLevel(str, Enum):
    """Log level options."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


@dataclass
class Settings:
    """Settings from environment."""

    # Cache
    cache_backend: CacheBackendType = field(
        default_factory=lambda: CacheBackendType(os.getenv("CACHE_BACKEND", "memory").lower())
    )
    redis_url: Optional[str] = field(
        default_factory=lambda: os.getenv("REDIS_URL")
    )
    redis_prefix: str = field(
        default_factory=lambda: os.getenv("REDIS_PREFIX", "retrievable:")
    )
    cache_default_ttl: float = field(
        default_factory=lambda: float(os.getenv("CACHE_DEFAULT_TTL", "0"))
    )
    cache_max_entries: int = field(
        default_factory=lambda: int(os.getenv("CACHE_MAX_ENTRIES", "0"))
    )
    cache_max_item_bytes: int = field(
        default_factory=lambda: int(os.getenv("CACHE_MAX_ITEM_BYTES", "1000000"))
    )

    # Store
    store_backend: StoreBackendType = field(
        default_factory=lambda: StoreBackendType(os.getenv("STORE_BACKEND", "sqlite").lower())
    )
    db_path: str = field(
        default_factory=lambda: os.getenv("DB_PATH", "data/entities.db")
    )

    # Backends
    backend_timeout: float = field(
        default_factory=lambda: float(os.getenv("BACKEND_TIMEOUT", "5.0"))
    )

    # Logging
    log_level: LogLevel = field(
        default_factory=lambda: LogLevel(os.getenv("LOG_LEVEL", "INFO").upper())
    )
    log_json: bool = field(
        default_factory=lambda: os.getenv("LOG_JSON", "false").lower() == "true"
    )


# Singleton instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get settings singleton."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the singleton so the next get_settings() re-reads the environment."""
    global _settings
    _settings = None


def load_env(env_file: Union[str, Path, None] = None, override: bool = False) -> bool:
    """
    Load a .env file into the environment and reset settings.

    Args:
        env_file: Path to .env (default: search from the working directory)
        override: Overwrite variables already set in the environment

    Returns:
        True if a file was loaded
    """
    loaded = load_dotenv(env_file, override=override)
    reset_settings()
    return loaded
