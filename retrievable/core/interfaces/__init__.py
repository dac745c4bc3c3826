"""
Interfaces - Protocols for Dependency Injection.

Capability protocols describe what a record may implement; backend
protocols describe what the adapters need from the cache and the store.

Example:
    def build(cache: CacheBackend, store: StoreBackend) -> EntityStore:
        return EntityStore(CacheAdapter(cache), StoreAdapter(store))
"""

from .capabilities import (
    KeyDerivation,
    SelfKeyAssignment,
    CustomSerialization,
    Capabilities,
)
from .backend_protocol import (
    CacheBackend,
    StoreBackend,
)

__all__ = [
    # Capabilities
    'KeyDerivation',
    'SelfKeyAssignment',
    'CustomSerialization',
    'Capabilities',
    # Backends
    'CacheBackend',
    'StoreBackend',
]
