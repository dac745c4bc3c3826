"""
Default record serialization.

A record's state is its public attributes: dataclass fields for dataclasses,
otherwise every instance attribute not starting with an underscore. Dataclass
fields declared with ``field(metadata={"transient": True})`` are left out.

The default payload is compact JSON with sorted keys, so the same record
state always produces the same bytes. Decoding validates the whole payload
before touching the record; a failed decode leaves the record unchanged.

Records implementing CustomSerialization bypass the default encoding in both
the cache and the durable store. Their from_bytes must validate the payload
before assigning anything: a from_bytes that fails halfway leaves the record
half-decoded, and nothing here can roll it back.
"""

import dataclasses
import json
from typing import Any, Dict, Optional

from .errors import DecodeFailure, EncodeFailure, RetrievableError
from .interfaces.capabilities import CustomSerialization


def _state_fields(record: Any) -> Optional[set]:
    if dataclasses.is_dataclass(record) and not isinstance(record, type):
        return {
            f.name for f in dataclasses.fields(record)
            if not f.metadata.get("transient")
        }
    return None


def record_properties(record: Any) -> Dict[str, Any]:
    """Snapshot of the record's persisted state."""
    names = _state_fields(record)
    if names is not None:
        return {name: getattr(record, name) for name in names}
    try:
        attrs = vars(record)
    except TypeError as e:
        raise EncodeFailure(
            f"{type(record).__name__} has no instance state to serialize",
            data={"record_type": type(record).__name__},
            cause=e,
        )
    return {name: value for name, value in attrs.items() if not name.startswith("_")}


def apply_properties(record: Any, properties: Any) -> None:
    """Load a property mapping into ``record``; all-or-nothing."""
    record_type = type(record).__name__
    if not isinstance(properties, dict):
        raise DecodeFailure(
            f"Expected an object payload for {record_type}",
            data={"record_type": record_type, "payload_type": type(properties).__name__},
        )

    names = _state_fields(record)
    if names is not None:
        missing = names - properties.keys()
        unknown = properties.keys() - names
        if missing or unknown:
            raise DecodeFailure(
                f"Payload does not match {record_type} fields",
                data={
                    "record_type": record_type,
                    "missing": sorted(missing),
                    "unknown": sorted(unknown),
                },
            )
    elif any(not isinstance(name, str) or name.startswith("_") for name in properties):
        raise DecodeFailure(
            f"Payload has invalid attribute names for {record_type}",
            data={"record_type": record_type},
        )

    for name, value in properties.items():
        setattr(record, name, value)


def default_encode(record: Any) -> bytes:
    """Encode record state as deterministic JSON bytes."""
    properties = record_properties(record)
    try:
        return json.dumps(
            properties, sort_keys=True, separators=(",", ":"), ensure_ascii=False
        ).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise EncodeFailure(
            f"Cannot encode {type(record).__name__} as JSON",
            data={"record_type": type(record).__name__},
            cause=e,
        )


def default_decode(data: bytes, record: Any) -> None:
    """Decode JSON bytes produced by default_encode into ``record``."""
    try:
        properties = json.loads(data)
    except (UnicodeDecodeError, ValueError) as e:
        raise DecodeFailure(
            f"Cannot decode {type(record).__name__} payload",
            data={"record_type": type(record).__name__, "size": len(data)},
            cause=e,
        )
    apply_properties(record, properties)


def serializer_of(record: Any) -> Optional[CustomSerialization]:
    """The record itself when it implements CustomSerialization, else None."""
    return record if isinstance(record, CustomSerialization) else None


def encode_payload(record: Any, serializer: Optional[CustomSerialization] = None) -> bytes:
    """Encode via the record's own serialization if present, else the default."""
    if serializer is None:
        return default_encode(record)
    try:
        payload = serializer.to_bytes()
    except RetrievableError:
        raise
    except Exception as e:
        raise EncodeFailure(
            f"{type(record).__name__}.to_bytes failed",
            data={"record_type": type(record).__name__},
            cause=e,
        )
    if not isinstance(payload, (bytes, bytearray)):
        raise EncodeFailure(
            f"{type(record).__name__}.to_bytes must return bytes",
            data={"record_type": type(record).__name__, "returned": type(payload).__name__},
        )
    return bytes(payload)


def decode_payload(data: bytes, record: Any, serializer: Optional[CustomSerialization] = None) -> None:
    """Decode via the record's own serialization if present, else the default."""
    if serializer is None:
        default_decode(data, record)
        return
    try:
        serializer.from_bytes(data)
    except RetrievableError:
        raise
    except Exception as e:
        raise DecodeFailure(
            f"{type(record).__name__}.from_bytes failed",
            data={"record_type": type(record).__name__, "size": len(data)},
            cause=e,
        )
