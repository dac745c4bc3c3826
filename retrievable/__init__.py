"""
retrievable - Cache-aside entity store.

Reads check a volatile cache first and fall back to a durable store; writes
go to both, cache first and non-authoritatively.

Structure:
- core/      - Orchestrator, adapters, connectors, config, errors
- common/    - Shared utilities (logging)

Example:
    from dataclasses import dataclass, field
    from retrievable import EntityStore, RequestContext, StringID, string_key

    @dataclass
    class User(StringID):
        name: str = ""
        id: str = field(default="", metadata={"transient": True})

        def derive_key(self, ctx, key_material):
            return string_key(ctx, "User", key_material)

    ctx = RequestContext.background()
    store.place_entity(ctx, "alice", User(name="Alice"))
    user = store.get_entity(ctx, "alice", User())
"""

from .core.context import RequestContext
from .core.keys import StorageKey, IntID, StringID, int_key, string_key
from .core.interfaces import (
    KeyDerivation,
    SelfKeyAssignment,
    CustomSerialization,
    Capabilities,
    CacheBackend,
    StoreBackend,
)
from .core.cache import CacheAdapter, MAX_ITEM_BYTES
from .core.store import StoreAdapter
from .core.orchestrator import EntityStore
from .core.errors import (
    RetrievableError,
    InvalidRecordError,
    KeyDerivationError,
    InvalidKeyMaterial,
    OperationCancelled,
    DeadlineExceeded,
    ConfigurationError,
    SerializationError,
    EncodeFailure,
    DecodeFailure,
    CacheError,
    CacheMiss,
    PayloadTooLarge,
    CacheBackendError,
    StoreError,
    NotFound,
    StoreBackendError,
)

__version__ = "0.1.0"

__all__ = [
    # Context / keys
    'RequestContext',
    'StorageKey',
    'IntID',
    'StringID',
    'int_key',
    'string_key',
    # Capabilities
    'KeyDerivation',
    'SelfKeyAssignment',
    'CustomSerialization',
    'Capabilities',
    # Backends
    'CacheBackend',
    'StoreBackend',
    # Adapters / orchestrator
    'CacheAdapter',
    'MAX_ITEM_BYTES',
    'StoreAdapter',
    'EntityStore',
    # Errors
    'RetrievableError',
    'InvalidRecordError',
    'KeyDerivationError',
    'InvalidKeyMaterial',
    'OperationCancelled',
    'DeadlineExceeded',
    'ConfigurationError',
    'SerializationError',
    'EncodeFailure',
    'DecodeFailure',
    'CacheError',
    'CacheMiss',
    'PayloadTooLarge',
    'CacheBackendError',
    'StoreError',
    'NotFound',
    'StoreBackendError',
]
