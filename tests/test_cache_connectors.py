"""Unit tests for cache connectors.

Tests cache implementations:
    - InMemoryCache: In-memory dict-based cache
    - RedisCache: Redis-based cache (mocked client, plus live server when available)

Tests cache protocol compliance and edge cases.
"""

import pytest
from unittest.mock import MagicMock

import redis

from retrievable.core.context import RequestContext
from retrievable.core.errors import CacheBackendError, OperationCancelled
from retrievable.core.interfaces import CacheBackend


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


# =============================================================================
# INMEMORY CACHE TESTS
# =============================================================================

@pytest.mark.unit
class TestInMemoryCache:
    """Tests for InMemoryCache implementation."""

    @pytest.fixture
    def clock(self):
        return FakeClock()

    @pytest.fixture
    def cache(self, clock):
        """Create fresh InMemoryCache for each test."""
        from retrievable.core.connectors.inmemory_cache import InMemoryCache
        return InMemoryCache(clock=clock)

    def test_implements_protocol(self, cache):
        """Test InMemoryCache satisfies CacheBackend.

        ЧТО ПРОВЕРЯЕМ:
            runtime_checkable protocol accepts the connector
        """
        assert isinstance(cache, CacheBackend)

    def test_set_and_get_basic(self, cache, ctx):
        """Test basic set/get operations.

        ЧТО ПРОВЕРЯЕМ:
            Bytes can be stored and retrieved unchanged
        """
        cache.set(ctx, "key1", b"value1")
        cache.set(ctx, "key2", bytearray(b"value2"))

        assert cache.get(ctx, "key1") == b"value1"
        assert cache.get(ctx, "key2") == b"value2"

    def test_get_nonexistent_key(self, cache, ctx):
        """Test get returns None for nonexistent keys.

        ЧТО ПРОВЕРЯЕМ:
            Missing keys return None, not raise exception
        """
        assert cache.get(ctx, "nonexistent") is None

    def test_set_with_ttl(self, cache, clock, ctx):
        """Test TTL expiration.

        ЧТО ПРОВЕРЯЕМ:
            Keys expire after TTL seconds
        """
        cache.set(ctx, "expiring", b"value", ttl=1)

        assert cache.get(ctx, "expiring") == b"value"

        clock.advance(1.5)

        assert cache.get(ctx, "expiring") is None

    def test_default_ttl_applies(self, clock, ctx):
        from retrievable.core.connectors.inmemory_cache import InMemoryCache
        cache = InMemoryCache(default_ttl=10, clock=clock)

        cache.set(ctx, "k", b"v")

        assert cache.ttl("k") == pytest.approx(10.0)
        clock.advance(10)
        assert cache.get(ctx, "k") is None

    def test_explicit_ttl_overrides_default(self, clock, ctx):
        from retrievable.core.connectors.inmemory_cache import InMemoryCache
        cache = InMemoryCache(default_ttl=10, clock=clock)

        cache.set(ctx, "k", b"v", ttl=100)

        clock.advance(50)
        assert cache.get(ctx, "k") == b"v"

    def test_delete_key(self, cache, ctx):
        """Test key deletion.

        ЧТО ПРОВЕРЯЕМ:
            delete() removes key from cache
        """
        cache.set(ctx, "to_delete", b"value")
        cache.delete(ctx, "to_delete")

        assert cache.get(ctx, "to_delete") is None

    def test_delete_nonexistent_key(self, cache, ctx):
        """Test deleting nonexistent key doesn't raise.

        ЧТО ПРОВЕРЯЕМ:
            delete() on missing key is a no-op
        """
        cache.delete(ctx, "nonexistent")

    def test_exists_with_expired_key(self, cache, clock, ctx):
        """Test exists() returns False for expired keys.

        ЧТО ПРОВЕРЯЕМ:
            Expired keys are considered non-existent
        """
        cache.set(ctx, "short", b"v", ttl=1)
        assert cache.exists("short")

        clock.advance(2)

        assert not cache.exists("short")

    def test_keys_drops_expired(self, cache, clock, ctx):
        cache.set(ctx, "keep", b"1")
        cache.set(ctx, "drop", b"2", ttl=1)

        clock.advance(5)

        assert cache.keys() == ["keep"]
        assert cache.size() == 1

    def test_keys_empty(self, cache):
        assert cache.keys() == []

    def test_max_entries_evicts_oldest(self, clock, ctx):
        """Test bounded cache evicts in insertion order.

        ЧТО ПРОВЕРЯЕМ:
            Oldest entry leaves first, rewritten entries count as new
        """
        from retrievable.core.connectors.inmemory_cache import InMemoryCache
        cache = InMemoryCache(max_entries=2, clock=clock)

        cache.set(ctx, "a", b"1")
        cache.set(ctx, "b", b"2")
        cache.set(ctx, "a", b"1'")
        cache.set(ctx, "c", b"3")

        assert cache.get(ctx, "b") is None
        assert cache.get(ctx, "a") == b"1'"
        assert cache.get(ctx, "c") == b"3"

    def test_clear(self, cache, ctx):
        cache.set(ctx, "a", b"1")
        cache.clear()
        assert cache.size() == 0

    def test_cancelled_context(self, cache):
        ctx = RequestContext.background()
        ctx.cancel()

        with pytest.raises(OperationCancelled):
            cache.set(ctx, "k", b"v")
        assert cache.size() == 0


# =============================================================================
# REDIS CACHE TESTS (mocked client)
# =============================================================================

@pytest.mark.unit
class TestRedisCache:
    """Tests for RedisCache against a mocked redis client."""

    @pytest.fixture
    def client(self):
        return MagicMock(spec=redis.Redis)

    @pytest.fixture
    def cache(self, client):
        from retrievable.core.connectors.redis_cache import RedisCache
        return RedisCache(client=client, prefix="test:")

    def test_implements_protocol(self, cache):
        assert isinstance(cache, CacheBackend)

    def test_requires_url_or_client(self):
        from retrievable.core.connectors.redis_cache import RedisCache

        with pytest.raises(ValueError):
            RedisCache()

    def test_get_uses_prefix(self, cache, client, ctx):
        client.get.return_value = b"payload"

        assert cache.get(ctx, "k") == b"payload"
        client.get.assert_called_once_with("test:k")

    def test_set_without_ttl(self, cache, client, ctx):
        cache.set(ctx, "k", b"v")

        client.set.assert_called_once_with("test:k", b"v")

    def test_set_with_ttl_uses_milliseconds(self, cache, client, ctx):
        """Test fractional ttl is kept at millisecond precision.

        ЧТО ПРОВЕРЯЕМ:
            ttl=1.5 -> px=1500
        """
        cache.set(ctx, "k", b"v", ttl=1.5)

        client.set.assert_called_once_with("test:k", b"v", px=1500)

    def test_default_ttl(self, client, ctx):
        from retrievable.core.connectors.redis_cache import RedisCache
        cache = RedisCache(client=client, prefix="test:", default_ttl=60)

        cache.set(ctx, "k", b"v")

        client.set.assert_called_once_with("test:k", b"v", px=60000)

    def test_delete(self, cache, client, ctx):
        cache.delete(ctx, "k")

        client.delete.assert_called_once_with("test:k")

    def test_redis_error_wrapped(self, cache, client, ctx):
        client.get.side_effect = redis.ConnectionError("refused")

        with pytest.raises(CacheBackendError) as exc_info:
            cache.get(ctx, "k")

        assert isinstance(exc_info.value.cause, redis.ConnectionError)

    def test_timeout_wrapped(self, cache, client, ctx):
        client.set.side_effect = redis.TimeoutError("slow")

        with pytest.raises(CacheBackendError):
            cache.set(ctx, "k", b"v")

    def test_cancelled_context_skips_call(self, cache, client):
        ctx = RequestContext.background()
        ctx.cancel()

        with pytest.raises(OperationCancelled):
            cache.get(ctx, "k")

        client.get.assert_not_called()

    def test_call_outliving_context_reported_as_cancelled(self, cache, client):
        ctx = RequestContext.background()
        client.get.side_effect = lambda key: ctx.cancel() or b"late"

        with pytest.raises(OperationCancelled):
            cache.get(ctx, "k")

    def test_ping(self, cache, client):
        client.ping.return_value = True
        assert cache.ping() is True

        client.ping.side_effect = redis.ConnectionError("down")
        assert cache.ping() is False

    def test_clear_deletes_prefixed_keys(self, cache, client):
        client.scan_iter.return_value = iter([b"test:a", b"test:b"])

        cache.clear()

        client.scan_iter.assert_called_once_with(match="test:*")
        client.delete.assert_called_once_with(b"test:a", b"test:b")


# =============================================================================
# REDIS CACHE TESTS (live server)
# =============================================================================

@pytest.mark.integration
@pytest.mark.requires_redis
class TestRedisCacheLive:
    """Tests against a real Redis server (skipped when unavailable)."""

    @pytest.fixture
    def cache(self, redis_url):
        from retrievable.core.connectors.redis_cache import RedisCache
        cache = RedisCache(url=redis_url, prefix="retrievable-test:")
        cache.clear()
        yield cache
        cache.clear()

    def test_round_trip(self, cache, ctx):
        cache.set(ctx, "k", b"\x00binary\xff")

        assert cache.get(ctx, "k") == b"\x00binary\xff"

    def test_ttl_is_set(self, cache, ctx):
        cache.set(ctx, "k", b"v", ttl=30)

        pttl = cache.client.pttl("retrievable-test:k")
        assert 0 < pttl <= 30000

    def test_delete_absent(self, cache, ctx):
        cache.delete(ctx, "absent")
        assert cache.get(ctx, "absent") is None
