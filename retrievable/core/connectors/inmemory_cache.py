"""
InMemoryCache - In-process byte cache.

Dict-based, no persistence. Used for unit tests and single-process setups.
"""

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from ..context import RequestContext


@dataclass
class CacheEntry:
    """Cache entry with optional expiration."""
    value: bytes
    expires_at: Optional[float] = None

    def is_expired(self, now: float) -> bool:
        """Check if entry is expired."""
        if self.expires_at is None:
            return False
        return now >= self.expires_at


class InMemoryCache:
    """
    In-memory cache implementation.

    Implements CacheBackend. Oldest entries are evicted once ``max_entries``
    is reached, so callers cannot assume an entry survives until its ttl.
    """

    def __init__(
        self,
        default_ttl: Optional[float] = None,
        max_entries: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            default_ttl: Retention in seconds for writes without ttl (None = until evicted)
            max_entries: Entry bound (None = unbounded)
            clock: Monotonic time source
        """
        self.default_ttl = default_ttl
        self.max_entries = max_entries
        self._clock = clock
        self._store: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, ctx: RequestContext, key: str) -> Optional[bytes]:
        """Get value by key."""
        ctx.check("cache.get")
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            if entry.is_expired(self._clock()):
                del self._store[key]
                return None
            return entry.value

    def set(self, ctx: RequestContext, key: str, value: bytes, ttl: Optional[float] = None) -> None:
        """Set value with optional TTL in seconds."""
        ctx.check("cache.set")
        ttl = ttl or self.default_ttl
        expires_at = self._clock() + ttl if ttl else None
        with self._lock:
            self._store.pop(key, None)
            self._store[key] = CacheEntry(value=bytes(value), expires_at=expires_at)
            if self.max_entries is not None:
                while len(self._store) > self.max_entries:
                    self._store.popitem(last=False)

    def delete(self, ctx: RequestContext, key: str) -> None:
        """Delete key."""
        ctx.check("cache.delete")
        with self._lock:
            self._store.pop(key, None)

    def exists(self, key: str) -> bool:
        """Check if key exists and not expired."""
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return False
            if entry.is_expired(self._clock()):
                del self._store[key]
                return False
            return True

    def ttl(self, key: str) -> Optional[float]:
        """Remaining seconds for key, None if absent or kept until evicted."""
        with self._lock:
            entry = self._store.get(key)
            if entry is None or entry.expires_at is None:
                return None
            return max(0.0, entry.expires_at - self._clock())

    def clear(self) -> None:
        """Clear all cache."""
        with self._lock:
            self._store.clear()

    def keys(self) -> list:
        """Get all non-expired keys (vectorized cleanup)."""
        with self._lock:
            keys_arr = np.array(list(self._store.keys()), dtype=object)
            if len(keys_arr) == 0:
                return []
            now = self._clock()
            expired_mask = np.array([self._store[k].is_expired(now) for k in keys_arr], dtype=bool)
            for key in keys_arr[expired_mask]:
                del self._store[key]
            return keys_arr[~expired_mask].tolist()

    def size(self) -> int:
        """Get number of entries."""
        return len(self.keys())
