"""
Backend Factory - Create backends and an EntityStore from configuration.

Uses factory pattern for dependency injection. This is the only place that
reads Settings; everything below it receives its collaborators explicitly.
"""

from typing import Optional

from retrievable.common.logging import get_logger, setup_logging
from ..cache import CacheAdapter
from ..errors import ConfigurationError
from ..interfaces import CacheBackend, StoreBackend
from ..orchestrator import EntityStore
from ..store import StoreAdapter
from .settings import CacheBackendType, Settings, StoreBackendType, get_settings

logger = get_logger(__name__)


def create_cache_backend(
    backend: Optional[CacheBackendType] = None,
    settings: Optional[Settings] = None,
    **kwargs
) -> CacheBackend:
    """
    Factory for cache backends.

    Args:
        backend: Cache backend (default from settings)
        settings: Settings to use (default: singleton)
        **kwargs: Backend-specific arguments

    Returns:
        CacheBackend implementation

    Example:
        cache = create_cache_backend()  # Uses settings
        cache = create_cache_backend(CacheBackendType.REDIS, url="redis://...")
    """
    settings = settings or get_settings()
    backend = backend or settings.cache_backend
    default_ttl = settings.cache_default_ttl or None

    if backend == CacheBackendType.MEMORY:
        from ..connectors.inmemory_cache import InMemoryCache
        return InMemoryCache(
            default_ttl=kwargs.get('default_ttl', default_ttl),
            max_entries=kwargs.get('max_entries', settings.cache_max_entries or None),
        )

    elif backend == CacheBackendType.REDIS:
        from ..connectors.redis_cache import RedisCache
        url = kwargs.get('url', settings.redis_url)
        if not url:
            raise ConfigurationError("Redis URL required for redis backend", data={"backend": "redis"})
        return RedisCache(
            url=url,
            prefix=kwargs.get('prefix', settings.redis_prefix),
            default_ttl=kwargs.get('default_ttl', default_ttl),
            socket_timeout=kwargs.get('socket_timeout', settings.backend_timeout),
        )

    raise ConfigurationError(f"Unknown cache backend: {backend}", data={"backend": str(backend)})


def create_store_backend(
    backend: Optional[StoreBackendType] = None,
    settings: Optional[Settings] = None,
    **kwargs
) -> StoreBackend:
    """
    Factory for durable store backends.

    Example:
        store = create_store_backend()  # Uses settings
        store = create_store_backend(StoreBackendType.SQLITE, db_path="/tmp/e.db")
    """
    settings = settings or get_settings()
    backend = backend or settings.store_backend

    if backend == StoreBackendType.SQLITE:
        from ..connectors.sqlite_store import SQLiteStore
        return SQLiteStore(
            db_path=kwargs.get('db_path', settings.db_path),
            timeout=kwargs.get('timeout', settings.backend_timeout),
        )

    elif backend == StoreBackendType.MEMORY:
        from ..connectors.inmemory_store import InMemoryStore
        return InMemoryStore()

    raise ConfigurationError(f"Unknown store backend: {backend}", data={"backend": str(backend)})


def configure_logging(
    settings: Optional[Settings] = None,
    log_file: Optional[str] = None,
    force: bool = False,
) -> None:
    """
    Set up logging from LOG_LEVEL / LOG_JSON settings.

    Example:
        configure_logging()
        store = create_entity_store()
    """
    settings = settings or get_settings()
    setup_logging(
        level=settings.log_level.value,
        log_file=log_file,
        json_format=settings.log_json,
        force=force,
    )


def create_entity_store(settings: Optional[Settings] = None) -> EntityStore:
    """
    Wire an EntityStore from settings.

    Returns:
        EntityStore over the configured cache and store backends
    """
    settings = settings or get_settings()
    entity_store = EntityStore(
        CacheAdapter(create_cache_backend(settings=settings), max_item_bytes=settings.cache_max_item_bytes),
        StoreAdapter(create_store_backend(settings=settings)),
    )
    logger.info("Entity store created", data={
        "cache_backend": settings.cache_backend.value,
        "store_backend": settings.store_backend.value,
    })
    return entity_store
