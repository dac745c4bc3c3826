"""
RedisCache - Redis-based byte cache for production.

Requires redis package: pip install redis
"""

from typing import Optional

import redis

from retrievable.common.logging import get_logger
from ..context import RequestContext
from ..errors import CacheBackendError

logger = get_logger(__name__)


class RedisCache:
    """
    Redis-based cache implementation.

    Implements CacheBackend. Values are stored as raw bytes; keys are
    namespaced with ``prefix``. A single call blocks for at most
    ``socket_timeout`` seconds; the request context is checked before and
    after it.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        prefix: str = "retrievable:",
        default_ttl: Optional[float] = None,
        socket_timeout: float = 5.0,
        client: Optional["redis.Redis"] = None,
    ):
        """
        Initialize Redis cache.

        Args:
            url: Redis connection URL (redis://host:port/db)
            prefix: Key prefix for namespacing
            default_ttl: Retention in seconds for writes without ttl (None = server policy)
            socket_timeout: Upper bound for a single call in seconds
            client: Pre-built client (takes precedence over url)
        """
        if client is None:
            if not url:
                raise ValueError("Redis URL required when no client is given")
            client = redis.Redis.from_url(
                url,
                decode_responses=False,
                socket_timeout=socket_timeout,
                socket_connect_timeout=socket_timeout,
            )
            logger.info("Redis cache initialized", data={"url": url, "prefix": prefix})

        self.client = client
        self.prefix = prefix
        self.default_ttl = default_ttl
        self.socket_timeout = socket_timeout

    def _key(self, key: str) -> str:
        """Add prefix to key."""
        return f"{self.prefix}{key}"

    def _call(self, ctx: RequestContext, operation: str, key: str, func, *args, **kwargs):
        ctx.check(f"cache.{operation}")
        try:
            result = func(*args, **kwargs)
        except redis.RedisError as e:
            raise CacheBackendError(
                f"Redis {operation} error",
                data={"cache_key": key, "operation": operation},
                cause=e,
            )
        # A call that outlived the context is reported as cancelled
        ctx.check(f"cache.{operation}")
        return result

    def get(self, ctx: RequestContext, key: str) -> Optional[bytes]:
        """Get value by key."""
        return self._call(ctx, "get", key, self.client.get, self._key(key))

    def set(self, ctx: RequestContext, key: str, value: bytes, ttl: Optional[float] = None) -> None:
        """Set value with optional TTL in seconds."""
        ttl = ttl or self.default_ttl
        if ttl:
            self._call(
                ctx, "set", key,
                self.client.set, self._key(key), value, px=max(1, int(ttl * 1000)),
            )
        else:
            self._call(ctx, "set", key, self.client.set, self._key(key), value)

    def delete(self, ctx: RequestContext, key: str) -> None:
        """Delete key."""
        self._call(ctx, "delete", key, self.client.delete, self._key(key))

    def clear(self) -> None:
        """Clear all cache entries with prefix."""
        try:
            keys = list(self.client.scan_iter(match=f"{self.prefix}*"))
            if keys:
                self.client.delete(*keys)
        except redis.RedisError as e:
            logger.error(f"Redis clear error: {e}")

    def ping(self) -> bool:
        """Check Redis connection."""
        try:
            return bool(self.client.ping())
        except redis.RedisError:
            return False
