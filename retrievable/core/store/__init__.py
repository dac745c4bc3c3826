"""
Store adapter.

    StoreAdapter (key derivation, zero-key guard, self-key assignment)
        └── StoreBackend (InMemoryStore, SQLiteStore)
"""

from .adapter import StoreAdapter, ensure_readable

__all__ = [
    'StoreAdapter',
    'ensure_readable',
]
