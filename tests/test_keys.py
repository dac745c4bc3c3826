"""
Unit tests for storage keys and key helpers.

Tests cover:
1. StorageKey validation (shape, parent, namespace)
2. Canonical encoding (deterministic, namespace-aware, reversible)
3. string_key / int_key helpers (zero material, wrong types)
4. IntID / StringID self key mixins
"""

import pytest

from retrievable.core.context import RequestContext
from retrievable.core.errors import KeyDerivationError
from retrievable.core.interfaces import SelfKeyAssignment
from retrievable.core.keys import IntID, StorageKey, StringID, int_key, string_key
from tests.records import Note, User


# =============================================================================
# StorageKey
# =============================================================================

@pytest.mark.unit
class TestStorageKey:
    """Tests for StorageKey construction."""

    def test_new_uses_context_namespace(self):
        ctx = RequestContext.background(namespace="tenant-a")

        key = StorageKey.new(ctx, "User", string_id="alice")

        assert key.namespace == "tenant-a"
        assert key.string_id == "alice"
        assert not key.incomplete

    def test_incomplete_key(self, ctx):
        key = StorageKey.incomplete_key(ctx, "Note")

        assert key.incomplete
        assert key.int_id == 0 and key.string_id == ""

    def test_both_ids_rejected(self):
        with pytest.raises(KeyDerivationError):
            StorageKey(kind="User", string_id="a", int_id=1)

    def test_negative_int_id_rejected(self):
        with pytest.raises(KeyDerivationError):
            StorageKey(kind="Note", int_id=-1)

    def test_empty_kind_rejected(self):
        with pytest.raises(KeyDerivationError):
            StorageKey(kind="")

    def test_incomplete_parent_rejected(self, ctx):
        parent = StorageKey.incomplete_key(ctx, "Folder")

        with pytest.raises(KeyDerivationError):
            StorageKey.new(ctx, "Note", int_id=1, parent=parent)

    def test_parent_in_other_namespace_rejected(self):
        parent = StorageKey(kind="Folder", string_id="f", namespace="a")

        with pytest.raises(KeyDerivationError):
            StorageKey(kind="Note", int_id=1, parent=parent, namespace="b")

    def test_with_int_id_keeps_parent_and_namespace(self, ctx):
        parent = StorageKey.new(ctx, "Folder", string_id="f")
        key = StorageKey.incomplete_key(ctx, "Note", parent=parent).with_int_id(5)

        assert key.int_id == 5
        assert key.parent == parent
        assert key.namespace == ctx.namespace

    def test_keys_are_hashable_values(self, ctx):
        a = StorageKey.new(ctx, "User", string_id="alice")
        b = StorageKey.new(ctx, "User", string_id="alice")

        assert a == b
        assert len({a, b}) == 1

    def test_str(self):
        parent = StorageKey(kind="Folder", string_id="f", namespace="ns")
        key = StorageKey(kind="Note", int_id=3, parent=parent, namespace="ns")

        assert str(key) == "ns:Folder,f/Note,3"


# =============================================================================
# Encoding
# =============================================================================

@pytest.mark.unit
class TestKeyEncoding:
    """Tests for the canonical cache key encoding."""

    def test_encode_is_deterministic(self, ctx):
        """Same key always encodes to the same cache key.

        ЧТО ПРОВЕРЯЕМ:
            Equal keys give equal strings, no padding characters
        """
        a = StorageKey.new(ctx, "User", string_id="alice").encode()
        b = StorageKey.new(ctx, "User", string_id="alice").encode()

        assert a == b
        assert "=" not in a

    def test_namespace_changes_encoding(self):
        a = StorageKey(kind="User", string_id="alice", namespace="a")
        b = StorageKey(kind="User", string_id="alice", namespace="b")

        assert a.encode() != b.encode()

    def test_string_and_int_ids_do_not_collide(self):
        as_string = StorageKey(kind="Note", string_id="1")
        as_int = StorageKey(kind="Note", int_id=1)

        assert as_string.encode() != as_int.encode()

    def test_decode_restores_key(self):
        parent = StorageKey(kind="Folder", string_id="f/ü", namespace="ns")
        key = StorageKey(kind="Note", int_id=42, parent=parent, namespace="ns")

        assert StorageKey.decode(key.encode()) == key

    def test_decode_garbage_raises(self):
        with pytest.raises(KeyDerivationError):
            StorageKey.decode("!!not-a-key!!")


# =============================================================================
# Helpers
# =============================================================================

@pytest.mark.unit
class TestKeyHelpers:
    """Tests for string_key / int_key."""

    @pytest.mark.parametrize("material", [None, ""])
    def test_string_key_zero_material_is_incomplete(self, ctx, material):
        assert string_key(ctx, "User", material).incomplete

    def test_string_key_wrong_type(self, ctx):
        with pytest.raises(KeyDerivationError):
            string_key(ctx, "User", 42)

    @pytest.mark.parametrize("material", [None, 0])
    def test_int_key_zero_material_is_incomplete(self, ctx, material):
        assert int_key(ctx, "Note", material).incomplete

    @pytest.mark.parametrize("material", ["1", 1.0, True])
    def test_int_key_wrong_type(self, ctx, material):
        with pytest.raises(KeyDerivationError):
            int_key(ctx, "Note", material)

    def test_helpers_accept_parent(self, ctx):
        parent = string_key(ctx, "Folder", "f")

        key = int_key(ctx, "Note", 3, parent=parent)

        assert key.parent == parent


# =============================================================================
# Mixins
# =============================================================================

@pytest.mark.unit
class TestSelfKeyMixins:
    """Tests for IntID / StringID."""

    def test_mixin_records_satisfy_protocol(self):
        assert isinstance(User(), SelfKeyAssignment)
        assert isinstance(Note(), SelfKeyAssignment)

    def test_int_id_assigns(self, ctx):
        note = Note()
        note.assign_key(StorageKey.new(ctx, "Note", int_id=9))
        assert note.id == 9

    def test_string_id_assigns(self, ctx):
        user = User()
        user.assign_key(StorageKey.new(ctx, "User", string_id="bob"))
        assert user.id == "bob"

    def test_mixins_alone_are_not_records(self):
        # assign_key without derive_key does not make a record
        assert not isinstance(IntID(), SelfKeyAssignment)
        assert not isinstance(StringID(), SelfKeyAssignment)
