"""
Cache adapter.

    CacheAdapter (size ceiling, ttl, record encoding)
        └── CacheBackend (InMemoryCache, RedisCache)
"""

from .adapter import CacheAdapter, MAX_ITEM_BYTES, normalize_ttl

__all__ = [
    'CacheAdapter',
    'MAX_ITEM_BYTES',
    'normalize_ttl',
]
