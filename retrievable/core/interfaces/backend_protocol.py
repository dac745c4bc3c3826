"""
Backend Protocols - Interfaces the adapters depend on.

Implementations:
- InMemoryCache (retrievable.core.connectors.inmemory_cache)
- RedisCache (retrievable.core.connectors.redis_cache)
- InMemoryStore (retrievable.core.connectors.inmemory_store)
- SQLiteStore (retrievable.core.connectors.sqlite_store)
"""

from typing import Any, Optional, Protocol, TYPE_CHECKING, runtime_checkable

if TYPE_CHECKING:
    from ..context import RequestContext
    from ..keys import StorageKey


@runtime_checkable
class CacheBackend(Protocol):
    """Volatile byte cache (DI interface).

    Transport failures are raised as CacheBackendError.
    """

    def get(self, ctx: "RequestContext", key: str) -> Optional[bytes]:
        """Get raw bytes by key, None on miss."""
        ...

    def set(self, ctx: "RequestContext", key: str, value: bytes, ttl: Optional[float] = None) -> None:
        """Set raw bytes. ttl None or 0 means the backend's default retention."""
        ...

    def delete(self, ctx: "RequestContext", key: str) -> None:
        """Delete key. Deleting an absent key is not an error."""
        ...


@runtime_checkable
class StoreBackend(Protocol):
    """Durable key/value store (DI interface).

    Transport failures are raised as StoreBackendError.
    """

    def put(self, ctx: "RequestContext", key: "StorageKey", record: Any) -> "StorageKey":
        """Persist record; returns the resolved key (ids allocated for incomplete keys)."""
        ...

    def get(self, ctx: "RequestContext", key: "StorageKey", record: Any) -> None:
        """Load record state into ``record``; raises NotFound when absent."""
        ...

    def delete(self, ctx: "RequestContext", key: "StorageKey") -> None:
        """Delete key. Deleting an absent key is not an error."""
        ...
