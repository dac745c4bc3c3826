"""
Storage keys and key helpers.

A StorageKey identifies one record in the durable store. Its canonical string
encoding (``encode()``) addresses the record's entry in the cache.

Key shapes:
- complete:   exactly one of string_id / int_id set
- incomplete: neither set; the durable store allocates an int_id on put.
              Reading at an incomplete key is rejected (InvalidKeyMaterial).
"""

import base64
import binascii
import json
from dataclasses import dataclass
from typing import Any, Dict, Optional, TYPE_CHECKING

from .errors import KeyDerivationError

if TYPE_CHECKING:
    from .context import RequestContext


@dataclass(frozen=True)
class StorageKey:
    """Hierarchical key: (namespace, parent path, kind, id)."""

    kind: str
    string_id: str = ""
    int_id: int = 0
    parent: Optional["StorageKey"] = None
    namespace: str = ""

    def __post_init__(self):
        if not self.kind:
            raise KeyDerivationError("StorageKey requires a kind")
        if self.string_id and self.int_id:
            raise KeyDerivationError(
                "StorageKey cannot have both string_id and int_id",
                data={"kind": self.kind},
            )
        if self.int_id < 0:
            raise KeyDerivationError(
                "StorageKey int_id must be positive",
                data={"kind": self.kind, "int_id": self.int_id},
            )
        if self.parent is not None:
            if self.parent.incomplete:
                raise KeyDerivationError(
                    "StorageKey parent must be complete",
                    data={"kind": self.kind},
                )
            if self.parent.namespace != self.namespace:
                raise KeyDerivationError(
                    "StorageKey parent must share the namespace",
                    data={"kind": self.kind},
                )

    @classmethod
    def new(
        cls,
        ctx: "RequestContext",
        kind: str,
        string_id: str = "",
        int_id: int = 0,
        parent: Optional["StorageKey"] = None,
    ) -> "StorageKey":
        """Build a key in the context's namespace."""
        return cls(
            kind=kind,
            string_id=string_id,
            int_id=int_id,
            parent=parent,
            namespace=ctx.namespace,
        )

    @classmethod
    def incomplete_key(
        cls,
        ctx: "RequestContext",
        kind: str,
        parent: Optional["StorageKey"] = None,
    ) -> "StorageKey":
        """Key whose int_id is allocated by the durable store on put."""
        return cls.new(ctx, kind, parent=parent)

    @property
    def incomplete(self) -> bool:
        return not self.string_id and self.int_id == 0

    def with_int_id(self, int_id: int) -> "StorageKey":
        return StorageKey(
            kind=self.kind,
            int_id=int_id,
            parent=self.parent,
            namespace=self.namespace,
        )

    # ============== Encoding ==============

    def _path(self) -> list:
        path = self.parent._path() if self.parent is not None else []
        path.append([self.kind, self.string_id or self.int_id])
        return path

    def to_dict(self) -> Dict[str, Any]:
        return {"ns": self.namespace, "path": self._path()}

    def path_string(self) -> str:
        """Compact, human-readable path used by stores as the row identity."""
        return json.dumps(self._path(), separators=(",", ":"), ensure_ascii=False)

    def encode(self) -> str:
        """Canonical cache key: URL-safe base64 of the sorted compact JSON path."""
        raw = json.dumps(
            self.to_dict(), sort_keys=True, separators=(",", ":"), ensure_ascii=False
        ).encode("utf-8")
        return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")

    @classmethod
    def decode(cls, encoded: str) -> "StorageKey":
        """Inverse of encode()."""
        padded = encoded + "=" * (-len(encoded) % 4)
        try:
            payload = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")))
            namespace = payload["ns"]
            path = payload["path"]
        except (binascii.Error, ValueError, KeyError, TypeError) as e:
            raise KeyDerivationError(
                "Cannot decode storage key",
                data={"encoded": encoded},
                cause=e,
            )

        key = None
        for kind, ident in path:
            if isinstance(ident, str):
                key = cls(kind=kind, string_id=ident, parent=key, namespace=namespace)
            else:
                key = cls(kind=kind, int_id=int(ident), parent=key, namespace=namespace)
        if key is None:
            raise KeyDerivationError("Cannot decode empty storage key path", data={"encoded": encoded})
        return key

    def __str__(self) -> str:
        prefix = f"{self.namespace}:" if self.namespace else ""
        return prefix + "/".join(f"{kind},{ident}" for kind, ident in self._path())


# ============== Key helpers ==============

def string_key(
    ctx: "RequestContext",
    kind: str,
    key_material: Any,
    parent: Optional[StorageKey] = None,
) -> StorageKey:
    """
    Build a string-id key from plain material.

    ``None`` and ``""`` give an incomplete key; other non-string material is
    a programming error.
    """
    if key_material is None:
        return StorageKey.incomplete_key(ctx, kind, parent)
    if not isinstance(key_material, str):
        raise KeyDerivationError(
            f"Unsupported key material for {kind}: expected str",
            data={"kind": kind, "material_type": type(key_material).__name__},
        )
    return StorageKey.new(ctx, kind, string_id=key_material, parent=parent)


def int_key(
    ctx: "RequestContext",
    kind: str,
    key_material: Any,
    parent: Optional[StorageKey] = None,
) -> StorageKey:
    """
    Build an int-id key from plain material.

    ``None`` and ``0`` give an incomplete key. Booleans are rejected even
    though they are ints.
    """
    if key_material is None:
        return StorageKey.incomplete_key(ctx, kind, parent)
    if isinstance(key_material, bool) or not isinstance(key_material, int):
        raise KeyDerivationError(
            f"Unsupported key material for {kind}: expected int",
            data={"kind": kind, "material_type": type(key_material).__name__},
        )
    return StorageKey.new(ctx, kind, int_id=key_material, parent=parent)


class IntID:
    """
    Mixin implementing SelfKeyAssignment for records keyed by integer id.

    The assigned id is stored in ``self.id``.
    """

    def assign_key(self, key: StorageKey) -> None:
        self.id = key.int_id


class StringID:
    """
    Mixin implementing SelfKeyAssignment for records keyed by string id.

    The assigned id is stored in ``self.id``. String ids are never allocated by
    the store, so placing such a record needs non-empty key material.
    """

    def assign_key(self, key: StorageKey) -> None:
        self.id = key.string_id
