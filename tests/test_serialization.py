"""
Unit tests for default record serialization.

Tests cover:
1. Deterministic default encoding (dataclasses, plain objects, transient fields)
2. Strict, all-or-nothing decoding
3. Custom serialization hooks and their error wrapping
"""

from dataclasses import dataclass

import pytest

from retrievable.core.errors import DecodeFailure, EncodeFailure
from retrievable.core.serialization import (
    decode_payload,
    default_decode,
    default_encode,
    encode_payload,
    record_properties,
)
from tests.records import Blob, Note, User


@pytest.mark.unit
class TestDefaultEncode:
    """Tests for default_encode / record_properties."""

    def test_transient_fields_skipped(self):
        user = User(name="Alice", email="a@x", id="alice")

        assert record_properties(user) == {"name": "Alice", "email": "a@x"}

    def test_encoding_is_deterministic(self):
        """Same state gives byte-identical payloads.

        ЧТО ПРОВЕРЯЕМ:
            Sorted keys, compact separators
        """
        payload = default_encode(User(name="Alice", email="a@x"))

        assert payload == b'{"email":"a@x","name":"Alice"}'
        assert payload == default_encode(User(email="a@x", name="Alice", id="other"))

    def test_plain_object_private_attrs_skipped(self):
        blob = Blob("hi")

        assert record_properties(blob) == {"text": "hi"}

    def test_unencodable_value(self):
        @dataclass
        class Bad:
            value: object = None

        with pytest.raises(EncodeFailure):
            default_encode(Bad(value=object()))

    def test_object_without_state(self):
        with pytest.raises(EncodeFailure):
            default_encode(42)


@pytest.mark.unit
class TestDefaultDecode:
    """Tests for default_decode."""

    def test_decode_into_dataclass(self):
        note = Note()

        default_decode(b'{"text":"hello"}', note)

        assert note.text == "hello"
        assert note.id == 0

    def test_invalid_json(self):
        with pytest.raises(DecodeFailure):
            default_decode(b"{oops", User())

    def test_non_object_payload(self):
        with pytest.raises(DecodeFailure):
            default_decode(b"[1, 2]", User())

    def test_missing_field_leaves_record_unchanged(self):
        """Failed decode is all-or-nothing.

        ЧТО ПРОВЕРЯЕМ:
            Partially matching payload does not mutate the record
        """
        user = User(name="before", email="before@x")

        with pytest.raises(DecodeFailure):
            default_decode(b'{"name":"after"}', user)

        assert user.name == "before"
        assert user.email == "before@x"

    def test_unknown_field_rejected(self):
        with pytest.raises(DecodeFailure):
            default_decode(b'{"text":"x","extra":1}', Note())

    def test_private_attribute_rejected_for_plain_object(self):
        blob = Blob("keep")

        with pytest.raises(DecodeFailure):
            default_decode(b'{"_to_bytes_calls":99}', blob)

        assert blob._to_bytes_calls == 0


@pytest.mark.unit
class TestCustomSerialization:
    """Tests for encode_payload / decode_payload with a serializer."""

    def test_serializer_takes_precedence(self):
        blob = Blob("data")

        assert encode_payload(blob, blob) == b"BLOB:data"
        assert encode_payload(blob, None) == b'{"text":"data"}'

    def test_from_bytes_error_wrapped(self):
        blob = Blob()

        with pytest.raises(DecodeFailure) as exc_info:
            decode_payload(b"nope", blob, blob)

        assert isinstance(exc_info.value.cause, ValueError)

    def test_to_bytes_must_return_bytes(self):
        class Wrong:
            def to_bytes(self):
                return "text"

            def from_bytes(self, data):
                pass

        record = Wrong()
        with pytest.raises(EncodeFailure):
            encode_payload(record, record)

    def test_to_bytes_error_wrapped(self):
        class Broken:
            def to_bytes(self):
                raise RuntimeError("boom")

            def from_bytes(self, data):
                pass

        record = Broken()
        with pytest.raises(EncodeFailure):
            encode_payload(record, record)
