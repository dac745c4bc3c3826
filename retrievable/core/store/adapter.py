"""
StoreAdapter - Facade over a durable StoreBackend.

Derives storage keys through the record's KeyDerivation capability and hands
resolved keys back to records implementing SelfKeyAssignment. Backend
failures are surfaced unmodified; NotFound stays distinct from other errors.
"""

from typing import Any, Optional

from retrievable.common.logging import get_logger
from ..context import RequestContext
from ..errors import InvalidKeyMaterial, NotFound, StoreError
from ..interfaces.backend_protocol import StoreBackend
from ..interfaces.capabilities import Capabilities
from ..keys import StorageKey, StringID
from ..monitoring import record_store_operation

logger = get_logger(__name__)


def ensure_readable(key: StorageKey, key_material: Any = None) -> None:
    """
    Reject the zero (incomplete) key before any backend call.

    Raises:
        InvalidKeyMaterial: key has neither string_id nor int_id
    """
    if key.incomplete:
        raise InvalidKeyMaterial(
            "Key material resolves to the reserved zero key",
            data={"kind": key.kind, "key_material": repr(key_material)},
        )


class StoreAdapter:
    """Translate orchestrator intent into durable store calls."""

    def __init__(self, backend: StoreBackend):
        self.backend = backend

    def put(
        self,
        ctx: RequestContext,
        key_material: Any,
        record: Any,
        capabilities: Optional[Capabilities] = None,
    ) -> StorageKey:
        """
        Write ``record`` at the key derived from ``key_material``.

        Raises:
            InvalidKeyMaterial: incomplete key for a StringID record (the
                allocated int id could not be kept in its string id)

        Returns:
            Resolved StorageKey (with allocated id for incomplete keys)
        """
        caps = capabilities or Capabilities.resolve(record)
        key = caps.derive_key(ctx, key_material)
        if key.incomplete and isinstance(record, StringID):
            raise InvalidKeyMaterial(
                "String-keyed records must supply their own id",
                data={"kind": key.kind, "key_material": repr(key_material)},
            )

        ctx.check("store.put")
        try:
            resolved = self.backend.put(ctx, key, record)
        except StoreError:
            record_store_operation("put", "error")
            raise
        record_store_operation("put", "ok")

        caps.assign_key(resolved)
        return resolved

    def get(
        self,
        ctx: RequestContext,
        key_material: Any,
        out_record: Any,
        capabilities: Optional[Capabilities] = None,
    ) -> StorageKey:
        """
        Load the record at the key derived from ``key_material``.

        Raises:
            InvalidKeyMaterial: key material maps to the zero key (no backend call)
            NotFound: no record at the key
            StoreBackendError: backend failure
        """
        caps = capabilities or Capabilities.resolve(out_record)
        key = caps.derive_key(ctx, key_material)
        ensure_readable(key, key_material)

        ctx.check("store.get")
        try:
            self.backend.get(ctx, key, out_record)
        except NotFound:
            record_store_operation("get", "not_found")
            raise
        except StoreError:
            record_store_operation("get", "error")
            raise
        record_store_operation("get", "ok")

        caps.assign_key(key)
        return key

    def delete(
        self,
        ctx: RequestContext,
        key_material: Any,
        record: Any,
        capabilities: Optional[Capabilities] = None,
    ) -> StorageKey:
        """Delete the record at the key derived from ``key_material``. Idempotent."""
        caps = capabilities or Capabilities.resolve(record)
        key = caps.derive_key(ctx, key_material)
        self.delete_key(ctx, key)
        return key

    def delete_key(self, ctx: RequestContext, key: StorageKey) -> None:
        """Delete by an already-known key. Idempotent."""
        ctx.check("store.delete")
        try:
            self.backend.delete(ctx, key)
        except StoreError:
            record_store_operation("delete", "error")
            raise
        record_store_operation("delete", "ok")
        logger.debug("Store delete", data={"key": str(key)})
