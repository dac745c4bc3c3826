"""
Connectors - Backend implementations.

- inmemory_cache.py: In-memory byte cache (unit tests, single process)
- redis_cache.py: Redis-based byte cache (production, distributed)
- inmemory_store.py: In-memory durable store stand-in (unit tests)
- sqlite_store.py: SQLite-based durable store
"""

from .inmemory_cache import InMemoryCache, CacheEntry
from .redis_cache import RedisCache
from .inmemory_store import InMemoryStore
from .sqlite_store import SQLiteStore

__all__ = [
    "InMemoryCache",
    "CacheEntry",
    "RedisCache",
    "InMemoryStore",
    "SQLiteStore",
]
