"""Tests for ExtensionRegistry registration, lookup, merging and discovery."""

from __future__ import annotations

import logging
from unittest.mock import MagicMock, patch

import pytest

from protowire.exceptions import ExtensionConflict, RegistryFrozenError, UnsupportedFieldNumber
from protowire.message import ExtensionDescriptor, FieldType
from protowire.proto.unittest_pb2 import (
    UNITTEST_EXTENSIONS,
    ExtensibleHost,
    int32_extension,
    message_extension,
    string_extension,
)
from protowire.proto.unittest_reserved_pb2 import (
    UNITTEST_RESERVED_EXTENSIONS,
    SwiftReservedTest,
    SwiftReservedTestExt,
    debug_description,
)
from protowire.registry import ExtensionRegistry


def _descriptor(
    number: int, name: str, field_type: FieldType = FieldType.INT32
) -> ExtensionDescriptor:
    return ExtensionDescriptor(
        number=number,
        field_type=field_type,
        extendee=ExtensibleHost,
        full_name=f"protowire_unittest.{name}",
    )


class TestRegistration:
    """add() validates ranges and conflicts up front."""

    def test_add_and_find(self) -> None:
        ext = _descriptor(150, "ext150")
        registry = ExtensionRegistry([ext])
        assert registry.find(ExtensibleHost, 150) is ext
        assert registry.find(ExtensibleHost, 151) is None
        assert ext in registry
        assert len(registry) == 1

    def test_find_by_name(self) -> None:
        assert UNITTEST_EXTENSIONS.find_by_name("protowire_unittest.int32_extension") is (
            int32_extension
        )
        assert UNITTEST_EXTENSIONS.find_by_name("protowire_unittest.missing") is None

    def test_out_of_range_rejected(self) -> None:
        with pytest.raises(UnsupportedFieldNumber, match=r"\[100, 200\)"):
            ExtensionRegistry([_descriptor(50, "low")])

    def test_range_end_is_exclusive(self) -> None:
        with pytest.raises(UnsupportedFieldNumber):
            ExtensionRegistry([_descriptor(200, "edge")])

    def test_host_without_ranges_rejected(self) -> None:
        stray = ExtensionDescriptor(
            number=5,
            field_type=FieldType.BOOL,
            extendee=SwiftReservedTest,
            full_name="protowire_unittest.stray",
        )
        with pytest.raises(UnsupportedFieldNumber, match="none"):
            ExtensionRegistry([stray])

    def test_same_slot_different_descriptor_conflicts(self) -> None:
        registry = ExtensionRegistry([_descriptor(150, "first")])
        with pytest.raises(ExtensionConflict, match="claimed by both"):
            registry.add(_descriptor(150, "second"))

    def test_same_name_different_slot_conflicts(self) -> None:
        registry = ExtensionRegistry([_descriptor(150, "dup")])
        with pytest.raises(ExtensionConflict, match="already registered"):
            registry.add(_descriptor(151, "dup"))

    def test_equal_descriptor_is_noop(self) -> None:
        registry = ExtensionRegistry([_descriptor(150, "again")])
        registry.add(_descriptor(150, "again"))
        assert len(registry) == 1

    def test_registration_logged_at_debug(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="protowire"):
            ExtensionRegistry([_descriptor(150, "logged")])
        assert any("protowire_unittest.logged" in r.getMessage() for r in caplog.records)


class TestFreeze:
    """A frozen registry is read-only."""

    def test_freeze_blocks_add(self) -> None:
        registry = ExtensionRegistry().freeze()
        assert registry.frozen
        with pytest.raises(RegistryFrozenError):
            registry.add(_descriptor(150, "late"))

    def test_shipped_registries_are_frozen(self) -> None:
        assert UNITTEST_EXTENSIONS.frozen
        assert UNITTEST_RESERVED_EXTENSIONS.frozen

    def test_merge_of_frozen_is_unfrozen(self) -> None:
        merged = UNITTEST_EXTENSIONS.merge()
        assert not merged.frozen
        merged.add(_descriptor(150, "extra"))
        assert len(merged) == len(UNITTEST_EXTENSIONS) + 1


class TestComposition:
    """Independently declared sets compose into one registry."""

    def test_union_operator(self) -> None:
        combined = UNITTEST_EXTENSIONS | UNITTEST_RESERVED_EXTENSIONS
        assert len(combined) == len(UNITTEST_EXTENSIONS) + len(UNITTEST_RESERVED_EXTENSIONS)
        assert debug_description in combined
        assert SwiftReservedTestExt.hash_value in combined
        assert int32_extension in combined

    def test_merge_conflict_raises(self) -> None:
        clash = ExtensionRegistry([_descriptor(100, "clash")])
        with pytest.raises(ExtensionConflict):
            UNITTEST_EXTENSIONS | clash

    def test_merge_accepts_plain_iterables(self) -> None:
        merged = ExtensionRegistry().merge([int32_extension], (string_extension,))
        assert len(merged) == 2

    def test_or_with_non_registry_unsupported(self) -> None:
        with pytest.raises(TypeError):
            UNITTEST_EXTENSIONS | [int32_extension]  # type: ignore[operator]

    def test_extensions_for_sorted_by_number(self) -> None:
        numbers = [d.number for d in UNITTEST_EXTENSIONS.extensions_for(ExtensibleHost)]
        assert numbers == sorted(numbers)
        assert numbers[-1] == message_extension.number
        assert UNITTEST_EXTENSIONS.extensions_for(SwiftReservedTest) == []

    def test_iteration_order(self) -> None:
        combined = UNITTEST_RESERVED_EXTENSIONS | UNITTEST_EXTENSIONS
        keys = [(d.extendee.full_name, d.number) for d in combined]
        assert keys == sorted(keys)


class TestEntryPoints:
    """from_entry_points() discovers published extension sets."""

    def test_loads_registry_and_single_descriptor(self) -> None:
        ep_set = MagicMock()
        ep_set.name = "unittest"
        ep_set.value = "protowire.proto.unittest_pb2:UNITTEST_EXTENSIONS"
        ep_set.load.return_value = UNITTEST_EXTENSIONS

        ep_single = MagicMock()
        ep_single.name = "debug_description"
        ep_single.value = "protowire.proto.unittest_reserved_pb2:debug_description"
        ep_single.load.return_value = debug_description

        with patch("importlib.metadata.entry_points", return_value=[ep_set, ep_single]):
            registry = ExtensionRegistry.from_entry_points()

        assert len(registry) == len(UNITTEST_EXTENSIONS) + 1
        assert registry.find(SwiftReservedTest.ClassMessage, 1000) is debug_description
        assert not registry.frozen

    def test_group_name_passed(self) -> None:
        with patch("importlib.metadata.entry_points", return_value=[]) as mock_eps:
            ExtensionRegistry.from_entry_points()
        mock_eps.assert_called_once_with(group="protowire.extensions")

    def test_failed_load_is_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        broken = MagicMock()
        broken.name = "broken"
        broken.value = "missing.module:EXTENSIONS"
        broken.load.side_effect = ImportError("No module named 'missing'")

        good = MagicMock()
        good.name = "good"
        good.value = "protowire.proto.unittest_pb2:int32_extension"
        good.load.return_value = int32_extension

        with (
            caplog.at_level(logging.WARNING, logger="protowire"),
            patch("importlib.metadata.entry_points", return_value=[broken, good]),
        ):
            registry = ExtensionRegistry.from_entry_points()

        assert len(registry) == 1
        assert any("broken" in r.getMessage() for r in caplog.records)

    def test_conflicting_sets_raise(self) -> None:
        first = MagicMock()
        first.name = "first"
        first.load.return_value = [_descriptor(150, "one")]
        second = MagicMock()
        second.name = "second"
        second.load.return_value = [_descriptor(150, "two")]

        with (
            patch("importlib.metadata.entry_points", return_value=[first, second]),
            pytest.raises(ExtensionConflict),
        ):
            ExtensionRegistry.from_entry_points()

