"""Tests for Message construction, equality, merging and extension accessors."""

from __future__ import annotations

import pytest

from protowire.message import ExtensionDescriptor, FieldType
from protowire.proto.unittest_pb2 import (
    AllTypes,
    ExtensibleHost,
    ForeignEnum,
    ForeignMessage,
    enum_extension,
    int32_extension,
    message_extension,
    string_extension,
)


class TestConstruction:
    """Keyword construction and schema metadata."""

    def test_kwargs_set_fields(self) -> None:
        msg = ForeignMessage(c=1)
        assert msg.HasField("c")
        assert not msg.HasField("d")

    def test_unknown_kwarg_raises(self) -> None:
        with pytest.raises(TypeError, match="no field 'e'"):
            ForeignMessage(e=1)

    def test_full_name(self) -> None:
        assert AllTypes.full_name == "protowire_unittest.AllTypes"
        assert AllTypes.NestedMessage.full_name == "protowire_unittest.AllTypes.NestedMessage"

    def test_extension_range_membership(self) -> None:
        assert ExtensibleHost.is_extensible()
        assert ExtensibleHost.in_extension_range(100)
        assert ExtensibleHost.in_extension_range(199)
        assert not ExtensibleHost.in_extension_range(200)
        assert ExtensibleHost.in_extension_range(1000)
        assert not AllTypes.is_extensible()

    def test_list_fields_in_number_order(self) -> None:
        msg = ForeignMessage(d=2, c=1)
        assert [(f.name, v) for f, v in msg.ListFields()] == [("c", 1), ("d", 2)]

    def test_repr(self) -> None:
        assert repr(ForeignMessage(c=3)) == "ForeignMessage(c=3)"


class TestEquality:
    """Equality covers presence, values, extensions and unknown bytes."""

    def test_empty_messages_equal(self) -> None:
        assert AllTypes() == AllTypes()

    def test_presence_matters(self) -> None:
        assert ForeignMessage(c=0) != ForeignMessage()

    def test_values_matter(self) -> None:
        assert ForeignMessage(c=1) != ForeignMessage(c=2)

    def test_different_types_not_equal(self) -> None:
        assert ForeignMessage() != AllTypes.NestedMessage()

    def test_empty_repeated_equals_absent(self) -> None:
        touched = AllTypes()
        touched.repeated_int32  # noqa: B018
        assert touched == AllTypes()

    def test_unknown_fields_matter(self) -> None:
        a = ForeignMessage()
        b = ForeignMessage()
        b.unknown_fields.append(5, 0, b"\x28\x01")
        assert a != b

    def test_extensions_matter(self) -> None:
        a = ExtensibleHost()
        b = ExtensibleHost()
        b.SetExtension(int32_extension, 0)
        assert a != b

    def test_unhashable(self) -> None:
        with pytest.raises(TypeError):
            hash(ForeignMessage())


class TestExtensionAccessors:
    """Get/Set/Has/Clear on extension values."""

    def test_unset_extension_returns_default(self) -> None:
        host = ExtensibleHost()
        assert not host.HasExtension(int32_extension)
        assert host.GetExtension(int32_extension) == 0
        assert host.GetExtension(string_extension) == "none"

    def test_set_and_clear(self) -> None:
        host = ExtensibleHost()
        host.SetExtension(int32_extension, 7)
        assert host.HasExtension(int32_extension)
        assert host.GetExtension(int32_extension) == 7
        host.ClearExtension(int32_extension)
        assert not host.HasExtension(int32_extension)

    def test_set_validates_value(self) -> None:
        with pytest.raises(TypeError):
            ExtensibleHost().SetExtension(int32_extension, "seven")

    def test_enum_extension_coerces(self) -> None:
        host = ExtensibleHost()
        host.SetExtension(enum_extension, 6)
        assert host.GetExtension(enum_extension) is ForeignEnum.FOREIGN_BAZ

    def test_wrong_host_rejected(self) -> None:
        with pytest.raises(TypeError, match="extends"):
            AllTypes().SetExtension(int32_extension, 1)

    def test_extensions_iterate_in_number_order(self) -> None:
        host = ExtensibleHost()
        host.SetExtension(message_extension, ForeignMessage(c=1))
        host.SetExtension(string_extension, "s")
        host.SetExtension(int32_extension, 1)
        assert [d.number for d, _ in host.extensions] == [100, 103, 1000]

    def test_descriptor_requires_message_type(self) -> None:
        with pytest.raises(TypeError, match="message_type"):
            ExtensionDescriptor(
                number=150,
                field_type=FieldType.MESSAGE,
                extendee=ExtensibleHost,
                full_name="x.bad",
            )

    def test_descriptor_default_is_validated(self) -> None:
        with pytest.raises(TypeError, match="x.bad"):
            ExtensionDescriptor(
                number=150,
                field_type=FieldType.INT32,
                extendee=ExtensibleHost,
                full_name="x.bad",
                default="x",
            )

    def test_write_through_unset_message_extension(self) -> None:
        host = ExtensibleHost()
        assert host.GetExtension(message_extension) is host.GetExtension(message_extension)
        assert not host.HasExtension(message_extension)
        host.GetExtension(message_extension).c = 4
        assert host.HasExtension(message_extension)
        assert host.GetExtension(message_extension) == ForeignMessage(c=4)


class TestMergeAndCopy:
    """MergeFrom follows protobuf merge semantics; CopyFrom replaces."""

    def test_merge_overwrites_scalars_and_keeps_others(self) -> None:
        a = ForeignMessage(c=1, d=2)
        a.MergeFrom(ForeignMessage(c=9))
        assert (a.c, a.d) == (9, 2)

    def test_merge_concatenates_repeated(self) -> None:
        a = AllTypes(repeated_int32=[1])
        a.MergeFrom(AllTypes(repeated_int32=[2, 3]))
        assert a.repeated_int32 == [1, 2, 3]

    def test_merge_recurses_into_submessages(self) -> None:
        a = AllTypes(optional_foreign_message=ForeignMessage(c=1))
        a.MergeFrom(AllTypes(optional_foreign_message=ForeignMessage(d=2)))
        assert a.optional_foreign_message == ForeignMessage(c=1, d=2)

    def test_merge_recurses_into_message_extensions(self) -> None:
        a = ExtensibleHost()
        a.SetExtension(message_extension, ForeignMessage(c=1))
        b = ExtensibleHost()
        b.SetExtension(message_extension, ForeignMessage(d=2))
        a.MergeFrom(b)
        assert a.GetExtension(message_extension) == ForeignMessage(c=1, d=2)

    def test_merge_copies_message_extensions(self) -> None:
        source = ExtensibleHost()
        source.SetExtension(message_extension, ForeignMessage(c=1))
        target = ExtensibleHost()
        target.MergeFrom(source)
        source.GetExtension(message_extension).c = 5
        assert target.GetExtension(message_extension).c == 1

    def test_merge_into_unset_sub_message_sets_presence(self) -> None:
        msg = AllTypes()
        msg.optional_foreign_message.MergeFrom(ForeignMessage(c=3))
        assert msg.HasField("optional_foreign_message")
        assert msg.optional_foreign_message.c == 3

    def test_merge_copies_submessages(self) -> None:
        source = AllTypes(optional_foreign_message=ForeignMessage(c=1))
        target = AllTypes()
        target.MergeFrom(source)
        source.optional_foreign_message.c = 5
        assert target.optional_foreign_message.c == 1

    def test_merge_appends_unknown_fields(self) -> None:
        a = ForeignMessage()
        a.unknown_fields.append(5, 0, b"\x28\x01")
        b = ForeignMessage()
        b.unknown_fields.append(6, 0, b"\x30\x02")
        a.MergeFrom(b)
        assert bytes(a.unknown_fields) == b"\x28\x01\x30\x02"

    def test_merge_wrong_type_raises(self) -> None:
        with pytest.raises(TypeError):
            ForeignMessage().MergeFrom(AllTypes())

    def test_copy_from_replaces(self, all_types_message: AllTypes) -> None:
        target = AllTypes(optional_int32=1, repeated_int32=[9])
        target.CopyFrom(all_types_message)
        assert target == all_types_message

    def test_clear(self, all_types_message: AllTypes) -> None:
        all_types_message.unknown_fields.append(99, 0, b"\x98\x06\x01")
        all_types_message.Clear()
        assert all_types_message == AllTypes()

    def test_discard_unknown_fields_recurses(self) -> None:
        nested = ForeignMessage()
        nested.unknown_fields.append(5, 0, b"\x28\x01")
        msg = AllTypes(optional_foreign_message=nested)
        msg.unknown_fields.append(5, 0, b"\x28\x01")
        msg.DiscardUnknownFields()
        assert not msg.unknown_fields
        assert not msg.optional_foreign_message.unknown_fields
