"""
CacheAdapter - Size-bounded, TTL-aware facade over a CacheBackend.

Independent of record types: values are encoded with their own
CustomSerialization when they have it, otherwise with the default JSON
encoder. Payloads above MAX_ITEM_BYTES never reach the backend.

Usage:
    cache = CacheAdapter(InMemoryCache())
    cache.set(ctx, key.encode(), user, ttl=60)
    cache.get(ctx, key.encode(), user)     # raises CacheMiss when absent
"""

from datetime import timedelta
from typing import Any, Optional, Union

from retrievable.common.logging import get_logger
from ..context import RequestContext
from ..errors import CacheBackendError, CacheMiss, PayloadTooLarge
from ..interfaces.backend_protocol import CacheBackend
from ..interfaces.capabilities import CustomSerialization
from ..monitoring import record_cache_operation
from ..serialization import decode_payload, encode_payload, serializer_of

logger = get_logger(__name__)

# Memcache-style item ceiling, applied to the payload only (not the key)
MAX_ITEM_BYTES = 1_000_000

TTL = Union[float, int, timedelta, None]

# Marker: look the serializer up on the value itself
_RESOLVE: Any = object()


def normalize_ttl(ttl: TTL) -> Optional[float]:
    """Seconds as float, or None for the backend's default retention."""
    if ttl is None:
        return None
    if isinstance(ttl, timedelta):
        ttl = ttl.total_seconds()
    if ttl < 0:
        raise ValueError(f"ttl must not be negative: {ttl}")
    return float(ttl) or None


def _serializer_for(value: Any, serializer: Any) -> Optional[CustomSerialization]:
    if serializer is _RESOLVE:
        return serializer_of(value)
    return serializer


class CacheAdapter:
    """
    Translate orchestrator intent into cache backend calls.

    Every method checks the request context before calling the backend.
    """

    def __init__(self, backend: CacheBackend, max_item_bytes: int = MAX_ITEM_BYTES):
        """
        Args:
            backend: CacheBackend implementation
            max_item_bytes: Payload ceiling in bytes
        """
        self.backend = backend
        self.max_item_bytes = max_item_bytes

    def set(
        self,
        ctx: RequestContext,
        cache_key: str,
        value: Any,
        ttl: TTL = None,
        serializer: Any = _RESOLVE,
    ) -> None:
        """
        Encode ``value`` and write it to the cache.

        Args:
            ctx: Request context
            cache_key: Canonical cache key
            value: Record to cache
            ttl: Seconds (or timedelta); None/0 keeps the backend default retention
            serializer: Pre-resolved CustomSerialization (or None); looked up on
                ``value`` when omitted

        Raises:
            PayloadTooLarge: encoded payload exceeds max_item_bytes (no backend call)
            EncodeFailure: value could not be encoded
            CacheBackendError: backend write failed
        """
        payload = encode_payload(value, _serializer_for(value, serializer))
        if len(payload) > self.max_item_bytes:
            record_cache_operation("set", "too_large")
            raise PayloadTooLarge(
                "Payload too large for cache",
                data={"cache_key": cache_key, "size": len(payload), "limit": self.max_item_bytes},
            )

        ctx.check("cache.set")
        try:
            self.backend.set(ctx, cache_key, payload, normalize_ttl(ttl))
        except CacheBackendError:
            record_cache_operation("set", "error")
            raise
        record_cache_operation("set", "ok")
        logger.debug("Cache set", data={"cache_key": cache_key, "size": len(payload)})

    def get(
        self,
        ctx: RequestContext,
        cache_key: str,
        out_record: Any,
        serializer: Any = _RESOLVE,
    ) -> None:
        """
        Read ``cache_key`` and decode it into ``out_record``.

        Raises:
            CacheMiss: entry absent or backend unreachable
            DecodeFailure: entry present but not decodable into out_record
        """
        ctx.check("cache.get")
        try:
            payload = self.backend.get(ctx, cache_key)
        except CacheBackendError as e:
            record_cache_operation("get", "error")
            raise CacheMiss(
                "Cache unavailable, treating as miss",
                data={"cache_key": cache_key},
                cause=e,
            )

        if payload is None:
            record_cache_operation("get", "miss")
            raise CacheMiss("Cache miss", data={"cache_key": cache_key})

        decode_payload(payload, out_record, _serializer_for(out_record, serializer))
        record_cache_operation("get", "hit")

    def delete(self, ctx: RequestContext, cache_key: str) -> None:
        """Best-effort delete; absent and present entries are both success."""
        ctx.check("cache.delete")
        try:
            self.backend.delete(ctx, cache_key)
        except CacheBackendError:
            record_cache_operation("delete", "error")
            raise
        record_cache_operation("delete", "ok")

    def refresh_ttl(self, ctx: RequestContext, cache_key: str, ttl: TTL) -> None:
        """
        Rewrite the current entry with a new ttl.

        Raises:
            CacheMiss: entry no longer present
            CacheBackendError: backend read or write failed
        """
        ctx.check("cache.refresh")
        payload = self.backend.get(ctx, cache_key)
        if payload is None:
            record_cache_operation("refresh", "miss")
            raise CacheMiss("Cannot refresh ttl of absent entry", data={"cache_key": cache_key})

        ctx.check("cache.refresh")
        self.backend.set(ctx, cache_key, payload, normalize_ttl(ttl))
        record_cache_operation("refresh", "ok")
