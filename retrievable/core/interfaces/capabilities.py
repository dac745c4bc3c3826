"""
Capability Protocols - What a record may implement to participate.

- KeyDerivation (mandatory): derive_key(ctx, key_material) -> StorageKey
- SelfKeyAssignment (optional): assign_key(key) after a resolving read/write
- CustomSerialization (optional): to_bytes() / from_bytes(data) for the cache
  and the durable store

Capabilities are resolved once per operation with Capabilities.resolve().
"""

from dataclasses import dataclass
from typing import Any, Optional, Protocol, TYPE_CHECKING, runtime_checkable

from ..errors import InvalidRecordError

if TYPE_CHECKING:
    from ..context import RequestContext
    from ..keys import StorageKey


@runtime_checkable
class KeyDerivation(Protocol):
    """Record that can build its storage key from caller key material."""

    def derive_key(self, ctx: "RequestContext", key_material: Any) -> "StorageKey":
        """Build the storage key. Same (ctx, material) must give the same key."""
        ...


@runtime_checkable
class SelfKeyAssignment(KeyDerivation, Protocol):
    """Record that keeps its own resolved key (e.g. auto-allocated ids)."""

    def assign_key(self, key: "StorageKey") -> None:
        """Accept the resolved key into record state. Must not fail."""
        ...


@runtime_checkable
class CustomSerialization(Protocol):
    """Record that encodes itself for the cache."""

    def to_bytes(self) -> bytes:
        """Deterministic encoding of the record state."""
        ...

    def from_bytes(self, data: bytes) -> None:
        """
        Fully reconstruct record state or raise.

        Validate ``data`` before assigning anything: a failure after partial
        assignment leaves the record half-decoded.
        """
        ...


@dataclass(frozen=True)
class Capabilities:
    """Capabilities of one record, resolved once per operation."""

    record: Any
    key_derivation: KeyDerivation
    self_key: Optional[SelfKeyAssignment] = None
    serializer: Optional[CustomSerialization] = None

    @classmethod
    def resolve(cls, record: Any) -> "Capabilities":
        """
        Inspect ``record`` for the three capabilities.

        Raises:
            InvalidRecordError: record lacks KeyDerivation
        """
        if not isinstance(record, KeyDerivation):
            raise InvalidRecordError(
                f"{type(record).__name__} does not implement derive_key(ctx, key_material)",
                data={"record_type": type(record).__name__},
            )
        return cls(
            record=record,
            key_derivation=record,
            self_key=record if isinstance(record, SelfKeyAssignment) else None,
            serializer=record if isinstance(record, CustomSerialization) else None,
        )

    def derive_key(self, ctx: "RequestContext", key_material: Any) -> "StorageKey":
        return self.key_derivation.derive_key(ctx, key_material)

    def assign_key(self, key: "StorageKey") -> None:
        if self.self_key is not None:
            self.self_key.assign_key(key)
