"""
Pytest configuration for retrievable tests.

Automatically adds project root to sys.path so that 'from retrievable...'
and 'from tests...' imports work. Defines markers and shared fixtures.
"""
import os
import sys
import tempfile
import pytest
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from retrievable.core.cache import CacheAdapter
from retrievable.core.config.settings import reset_settings
from retrievable.core.context import RequestContext
from retrievable.core.orchestrator import EntityStore
from retrievable.core.store import StoreAdapter
from tests.records import CallLog, RecordingCache, RecordingStore


# =============================================================================
# Pytest Markers
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (real backends)")
    config.addinivalue_line("markers", "requires_redis: Requires Redis service")


# =============================================================================
# Shared Fixtures
# =============================================================================

@pytest.fixture
def project_root() -> Path:
    """Return project root path."""
    return PROJECT_ROOT


@pytest.fixture
def ctx() -> RequestContext:
    """Background request context in the default namespace."""
    return RequestContext.background()


@pytest.fixture
def temp_db_path():
    """Path to a SQLite file inside a temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "entities.db"


@pytest.fixture
def call_log() -> CallLog:
    """Shared, ordered log of backend calls."""
    return CallLog()


@pytest.fixture
def recording_cache(call_log) -> RecordingCache:
    return RecordingCache(call_log)


@pytest.fixture
def recording_store(call_log) -> RecordingStore:
    return RecordingStore(call_log)


@pytest.fixture
def entity_store(recording_cache, recording_store) -> EntityStore:
    """EntityStore over in-memory backends that record every call."""
    return EntityStore(CacheAdapter(recording_cache), StoreAdapter(recording_store))


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Settings singleton is re-read from the environment for every test."""
    reset_settings()
    yield
    reset_settings()


# =============================================================================
# Redis Fixture
# =============================================================================

@pytest.fixture(scope="session")
def redis_url():
    """
    URL of a reachable Redis server, or skip.

    Reads REDIS_URL (default redis://localhost:6379/15) and pings it.
    """
    import redis

    url = os.getenv("REDIS_URL", "redis://localhost:6379/15")
    try:
        client = redis.Redis.from_url(url, socket_connect_timeout=1)
        client.ping()
        client.close()
    except redis.RedisError:
        pytest.skip(f"Redis not available at {url}")
    return url
