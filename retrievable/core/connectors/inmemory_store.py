"""
InMemoryStore - In-process durable store stand-in for unit tests.

Records are kept as encoded snapshots (their own CustomSerialization when they
have it, default JSON otherwise), so later mutation of a caller's record
never leaks into the store.
"""

import threading
from typing import Any, Dict, Tuple

from ..context import RequestContext
from ..errors import NotFound
from ..keys import StorageKey
from ..serialization import decode_payload, encode_payload, serializer_of


class InMemoryStore:
    """
    Dict-backed StoreBackend.

    Incomplete keys get sequential int ids per (namespace, parent, kind).
    """

    def __init__(self):
        self._rows: Dict[Tuple[str, str], bytes] = {}
        self._sequences: Dict[Tuple[str, str, str], int] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _row_id(key: StorageKey) -> Tuple[str, str]:
        return key.namespace, key.path_string()

    @staticmethod
    def _scope(key: StorageKey) -> Tuple[str, str, str]:
        parent = key.parent.path_string() if key.parent is not None else ""
        return key.namespace, parent, key.kind

    def put(self, ctx: RequestContext, key: StorageKey, record: Any) -> StorageKey:
        """Store a snapshot of ``record``; allocates an id for incomplete keys."""
        ctx.check("store.put")
        payload = encode_payload(record, serializer_of(record))
        with self._lock:
            scope = self._scope(key)
            if key.incomplete:
                key = key.with_int_id(self._sequences.get(scope, 0) + 1)
            if key.int_id:
                self._sequences[scope] = max(self._sequences.get(scope, 0), key.int_id)
            self._rows[self._row_id(key)] = payload
        return key

    def get(self, ctx: RequestContext, key: StorageKey, record: Any) -> None:
        """Load the snapshot at ``key`` into ``record``."""
        ctx.check("store.get")
        with self._lock:
            payload = self._rows.get(self._row_id(key))
        if payload is None:
            raise NotFound("Entity not found", data={"key": str(key)})
        decode_payload(payload, record, serializer_of(record))

    def delete(self, ctx: RequestContext, key: StorageKey) -> None:
        """Delete key; absent keys are ignored."""
        ctx.check("store.delete")
        with self._lock:
            self._rows.pop(self._row_id(key), None)

    def count(self) -> int:
        with self._lock:
            return len(self._rows)

    def clear(self) -> None:
        with self._lock:
            self._rows.clear()
            self._sequences.clear()
