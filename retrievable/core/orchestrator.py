"""
EntityStore - Cache-aside orchestration over a CacheAdapter and a StoreAdapter.

Read:   cache hit returns without touching the store; any cache failure falls
        through to the store, and a successful store read repopulates the
        cache (backend default ttl).
Write:  cache write-through first, then the durable put. The put result is
        the result of the operation.
Delete: cache delete, then durable delete. Only the store outcome propagates.

Two error lanes:
- best-effort (cache): CacheError / SerializationError are logged and swallowed
- authoritative (store): every failure propagates unchanged

OperationCancelled is never swallowed, except by the repopulate that follows a
successful store read: the record is already loaded at that point.

Known gap: the cache is written before the durable put commits, so a failed
put can leave a cache entry for data that was never stored.

Usage:
    store = EntityStore(CacheAdapter(InMemoryCache()), StoreAdapter(SQLiteStore(path)))
    key = store.place_entity(ctx, "alice", user)
    store.get_entity(ctx, "alice", User())
    store.delete_entity(ctx, key)
"""

from typing import Any, Callable

from retrievable.common.logging import get_logger
from .cache import CacheAdapter
from .cache.adapter import TTL
from .context import RequestContext
from .errors import CacheError, OperationCancelled, SerializationError
from .interfaces.capabilities import Capabilities
from .keys import StorageKey
from .monitoring import entity_operation_seconds, track_duration
from .store import StoreAdapter, ensure_readable

logger = get_logger(__name__)

# Failures a best-effort cache call absorbs
_CACHE_FAILURES = (CacheError, SerializationError)
_REPOPULATE_FAILURES = _CACHE_FAILURES + (OperationCancelled,)


class EntityStore:
    """Read-through, write-through and delete-through for any keyed record."""

    def __init__(self, cache: CacheAdapter, store: StoreAdapter):
        """
        Args:
            cache: Adapter over the volatile cache
            store: Adapter over the durable store
        """
        self.cache = cache
        self.store = store

    def _best_effort(
        self,
        operation: str,
        cache_key: str,
        func: Callable,
        *args: Any,
        absorb: tuple = _CACHE_FAILURES,
    ) -> bool:
        """Run a cache call whose failure (one of ``absorb``) must not fail the operation."""
        try:
            func(*args)
        except absorb as e:
            logger.warning(
                f"Cache {operation} skipped",
                data={"cache_key": cache_key, "error_type": type(e).__name__},
            )
            return False
        return True

    @track_duration(entity_operation_seconds, {'operation': 'get_entity'})
    def get_entity(self, ctx: RequestContext, key_material: Any, record: Any) -> Any:
        """
        Load ``record`` from the cache, falling back to the durable store.

        Returns:
            ``record``, populated

        Raises:
            InvalidRecordError: record lacks derive_key
            InvalidKeyMaterial: material maps to the zero key (no backend call)
            NotFound / StoreBackendError: from the durable store, unchanged
            OperationCancelled: context cancelled or past its deadline
        """
        caps = Capabilities.resolve(record)
        key = caps.derive_key(ctx, key_material)
        ensure_readable(key, key_material)
        cache_key = key.encode()

        try:
            self.cache.get(ctx, cache_key, record, serializer=caps.serializer)
        except (CacheError, SerializationError) as e:
            logger.debug(
                "Falling through to store",
                data={"cache_key": cache_key, "reason": type(e).__name__},
            )
        else:
            caps.assign_key(key)
            return record

        self.store.get(ctx, key_material, record, capabilities=caps)

        self._best_effort(
            "repopulate", cache_key,
            self.cache.set, ctx, cache_key, record, None, caps.serializer,
            absorb=_REPOPULATE_FAILURES,
        )
        return record

    @track_duration(entity_operation_seconds, {'operation': 'place_entity'})
    def place_entity(self, ctx: RequestContext, key_material: Any, record: Any) -> StorageKey:
        """
        Write ``record`` to the cache (best-effort) and then the durable store.

        Incomplete keys skip the cache write: their id only exists after the
        put, so there is no cache key to populate yet. This is the one case where
        the store put is not preceded by a cache write; caching under the
        incomplete key would address an entry no later read can reach.

        Returns:
            Resolved StorageKey from the durable store
        """
        caps = Capabilities.resolve(record)
        key = caps.derive_key(ctx, key_material)

        if key.incomplete:
            logger.debug("Incomplete key, skipping cache write-through", data={"kind": key.kind})
        else:
            cache_key = key.encode()
            self._best_effort(
                "write-through", cache_key,
                self.cache.set, ctx, cache_key, record, None, caps.serializer,
            )

        return self.store.put(ctx, key_material, record, capabilities=caps)

    @track_duration(entity_operation_seconds, {'operation': 'delete_entity'})
    def delete_entity(self, ctx: RequestContext, key: StorageKey) -> None:
        """
        Delete ``key`` from the cache (best-effort) and then the durable store.

        Deleting a key absent from both backends succeeds.
        """
        cache_key = key.encode()
        self._best_effort("delete", cache_key, self.cache.delete, ctx, cache_key)
        self.store.delete_key(ctx, key)

    def delete_record(self, ctx: RequestContext, key_material: Any, record: Any) -> StorageKey:
        """Derive the key from ``record`` and delete it everywhere."""
        key = Capabilities.resolve(record).derive_key(ctx, key_material)
        self.delete_entity(ctx, key)
        return key

    def refresh_entity_ttl(self, ctx: RequestContext, key_material: Any, record: Any, ttl: TTL) -> None:
        """
        Reattach a new ttl to the cached copy of a record.

        Raises:
            InvalidKeyMaterial: material maps to the zero key
            CacheMiss: nothing cached at the key
        """
        key = Capabilities.resolve(record).derive_key(ctx, key_material)
        ensure_readable(key, key_material)
        self.cache.refresh_ttl(ctx, key.encode(), ttl)
