"""Base class for schema-defined messages.

Subclasses declare their fields as :class:`~protowire.message.Field` class
attributes. Every field tracks presence independently: an unset field is
absent from the wire and reports the type's default, which is distinct from
a field explicitly set to that default.

Extensible messages list their extension ranges as half-open intervals::

    class Host(Message):
        full_name = "pkg.Host"
        extension_ranges = ((1000, 2001),)

        id = Field(1, FieldType.INT64)
"""

from __future__ import annotations

from operator import attrgetter
from typing import TYPE_CHECKING, Any, ClassVar, TypeVar

from protowire.message.extensions import ExtensionDescriptor, ExtensionFieldValueSet
from protowire.message.fields import Field, FieldType
from protowire.wire.format import MAX_FIELD_NUMBER
from protowire.wire.unknown import UnknownFieldStore

if TYPE_CHECKING:
    from protowire.config import CodecConfig
    from protowire.logging.logger import CodecLogger
    from protowire.registry import ExtensionRegistry

M = TypeVar("M", bound="Message")


class Message:
    """A protocol-buffer message with presence tracking.

    Holds three kinds of state: declared field values, an
    :class:`~protowire.wire.UnknownFieldStore` of undeclared wire data, and,
    for extensible messages, an :class:`ExtensionFieldValueSet`.

    Two messages are equal when they are the same type and agree on every
    declared field (presence and value), every extension value, and the
    unknown-field bytes.
    """

    __slots__ = ("_values", "_unknown_fields", "_extensions", "_pending", "_parent_link")

    full_name: ClassVar[str] = ""
    extension_ranges: ClassVar[tuple[tuple[int, int], ...]] = ()

    _fields_by_name: ClassVar[dict[str, Field]] = {}
    _fields_by_number: ClassVar[dict[int, Field]] = {}
    _sorted_fields: ClassVar[tuple[Field, ...]] = ()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "full_name" not in cls.__dict__:
            cls.full_name = cls.__qualname__

        for start, end in cls.extension_ranges:
            if not 0 < start < end <= MAX_FIELD_NUMBER + 1:
                raise TypeError(f"{cls.full_name}: invalid extension range [{start}, {end})")

        by_name: dict[str, Field] = {}
        for klass in reversed(cls.__mro__):
            for name, attr in vars(klass).items():
                if isinstance(attr, Field):
                    by_name[name] = attr

        by_number: dict[int, Field] = {}
        for field in by_name.values():
            if field.number in by_number:
                raise TypeError(
                    f"{cls.full_name}: fields {by_number[field.number].name!r} and "
                    f"{field.name!r} share number {field.number}"
                )
            if cls.in_extension_range(field.number):
                raise TypeError(
                    f"{cls.full_name}: field {field.name!r} number {field.number} "
                    f"lies in an extension range"
                )
            by_number[field.number] = field

        cls._fields_by_name = by_name
        cls._fields_by_number = by_number
        cls._sorted_fields = tuple(sorted(by_number.values(), key=attrgetter("number")))

    def __init__(self, **kwargs: Any) -> None:
        self._values: dict[str, Any] = {}
        self._unknown_fields = UnknownFieldStore()
        self._extensions = ExtensionFieldValueSet()
        self._pending: dict[Any, Message] = {}
        self._parent_link: tuple[Message, Any] | None = None
        for name, value in kwargs.items():
            if name not in self._fields_by_name:
                raise TypeError(f"{self.full_name} has no field {name!r}")
            setattr(self, name, value)

    # ------------------------------------------------------------------
    # Schema
    # ------------------------------------------------------------------

    @classmethod
    def fields(cls) -> tuple[Field, ...]:
        """Declared fields in ascending field-number order."""
        return cls._sorted_fields

    @classmethod
    def in_extension_range(cls, number: int) -> bool:
        return any(start <= number < end for start, end in cls.extension_ranges)

    @classmethod
    def is_extensible(cls) -> bool:
        return bool(cls.extension_ranges)

    def _field(self, name: str) -> Field:
        try:
            return self._fields_by_name[name]
        except KeyError:
            raise ValueError(f"{self.full_name} has no field {name!r}") from None

    # ------------------------------------------------------------------
    # Presence
    # ------------------------------------------------------------------

    def HasField(self, name: str) -> bool:  # noqa: N802
        """Return whether the singular field *name* is set.

        Raises:
            ValueError: If *name* is not declared or is a repeated field.
        """
        field = self._field(name)
        if field.repeated:
            raise ValueError(f"{self.full_name}.{name} is repeated; use len() instead")
        return name in self._values

    def ClearField(self, name: str) -> None:  # noqa: N802
        """Return field *name* to the unset state."""
        delattr(self, self._field(name).name)

    def ListFields(self) -> list[tuple[Field, Any]]:  # noqa: N802
        """Return ``(field, value)`` for every present field, by field number."""
        return [
            (field, self._values[field.name])
            for field in self._sorted_fields
            if self._is_present(field)
        ]

    def _is_present(self, field: Field) -> bool:
        if field.name not in self._values:
            return False
        return not field.repeated or bool(self._values[field.name])

    def Clear(self) -> None:  # noqa: N802
        """Unset every field and drop extension values and unknown fields."""
        for key in list(self._pending):
            self._drop_pending(key)
        self._values.clear()
        self._extensions.clear_all()
        self._unknown_fields.clear()

    @property
    def unknown_fields(self) -> UnknownFieldStore:
        return self._unknown_fields

    def DiscardUnknownFields(self) -> None:  # noqa: N802
        """Drop unknown fields here and in every present sub-message."""
        self._unknown_fields.clear()
        for field, value in self.ListFields():
            if field.field_type is not FieldType.MESSAGE:
                continue
            for sub in value if field.repeated else (value,):
                sub.DiscardUnknownFields()
        for descriptor, value in self._extensions:
            if descriptor.field_type is FieldType.MESSAGE:
                value.DiscardUnknownFields()

    # ------------------------------------------------------------------
    # Extensions
    # ------------------------------------------------------------------

    @property
    def extensions(self) -> ExtensionFieldValueSet:
        return self._extensions

    def _check_extension(self, descriptor: ExtensionDescriptor) -> None:
        if descriptor.extendee is not type(self):
            raise TypeError(
                f"Extension {descriptor.full_name} extends "
                f"{descriptor.extendee.full_name}, not {self.full_name}"
            )

    def HasExtension(self, descriptor: ExtensionDescriptor) -> bool:  # noqa: N802
        self._check_extension(descriptor)
        return self._extensions.has(descriptor)

    def GetExtension(self, descriptor: ExtensionDescriptor) -> Any:  # noqa: N802
        """Return the extension value, or its default while unset.

        An unset message extension returns a sub-message that becomes the
        extension's value when it is first written to.
        """
        self._check_extension(descriptor)
        if descriptor.field_type is FieldType.MESSAGE and not self._extensions.has(descriptor):
            message_type = descriptor.message_type
            return self._pending_child(descriptor, message_type)  # type: ignore[arg-type]
        return self._extensions.get(descriptor)

    def SetExtension(self, descriptor: ExtensionDescriptor, value: Any) -> None:  # noqa: N802
        self._check_extension(descriptor)
        value = descriptor.coerce(value)
        self._drop_pending(descriptor)
        self._extensions.set(descriptor, value)
        self._mark_present()

    def ClearExtension(self, descriptor: ExtensionDescriptor) -> None:  # noqa: N802
        self._check_extension(descriptor)
        self._drop_pending(descriptor)
        self._extensions.clear(descriptor)

    # ------------------------------------------------------------------
    # Unset sub-messages
    # ------------------------------------------------------------------

    def _pending_child(self, key: Any, message_type: type[M]) -> M:
        """Return the empty sub-message reported for the unset field *key*.

        *key* is a field name or an :class:`ExtensionDescriptor`. The same
        instance is returned until the field is set or cleared.
        """
        child = self._pending.get(key)
        if child is None:
            child = message_type()
            child._parent_link = (self, key)
            self._pending[key] = child
        return child  # type: ignore[return-value]

    def _drop_pending(self, key: Any) -> None:
        child = self._pending.pop(key, None)
        if child is not None:
            child._parent_link = None

    def _mark_present(self) -> None:
        """Store this message in its parent after a write, then up the chain."""
        link = self._parent_link
        if link is None:
            return
        self._parent_link = None
        parent, key = link
        if parent._pending.get(key) is not self:
            return
        del parent._pending[key]
        if isinstance(key, ExtensionDescriptor):
            if not parent._extensions.has(key):
                parent._extensions.set(key, self)
        elif key not in parent._values:
            parent._values[key] = self
        parent._mark_present()

    # ------------------------------------------------------------------
    # Merging
    # ------------------------------------------------------------------

    def MergeFrom(self, other: Message) -> None:  # noqa: N802
        """Merge *other* into this message with protobuf merge semantics.

        Singular scalars are overwritten and repeated fields are
        concatenated. Present sub-messages, message extensions included, are
        merged recursively. Unknown fields are appended.
        """
        if type(other) is not type(self):
            raise TypeError(f"Cannot merge {other.full_name} into {self.full_name}")
        for field, value in other.ListFields():
            if field.field_type is FieldType.MESSAGE:
                if field.repeated:
                    getattr(self, field.name).extend(_copy_message(v) for v in value)
                elif field.name in self._values:
                    self._values[field.name].MergeFrom(value)
                else:
                    self._drop_pending(field.name)
                    self._values[field.name] = _copy_message(value)
            elif field.repeated:
                getattr(self, field.name).extend(value)
            else:
                self._values[field.name] = value
        for descriptor, value in other._extensions:
            if descriptor.field_type is not FieldType.MESSAGE:
                self._extensions.set(descriptor, value)
            elif self._extensions.has(descriptor):
                self._extensions.get(descriptor).MergeFrom(value)
            else:
                self._drop_pending(descriptor)
                self._extensions.set(descriptor, _copy_message(value))
        self._unknown_fields.extend(other._unknown_fields)
        self._mark_present()

    def CopyFrom(self, other: Message) -> None:  # noqa: N802
        """Replace this message's contents with a copy of *other*."""
        if other is self:
            return
        self.Clear()
        self.MergeFrom(other)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def SerializeToString(self, trace: CodecLogger | None = None) -> bytes:  # noqa: N802
        """Serialize to canonical protobuf wire format."""
        from protowire.codec.encoder import encode_message

        return encode_message(self, trace=trace)

    def ByteSize(self) -> int:  # noqa: N802
        return len(self.SerializeToString())

    @classmethod
    def FromString(  # noqa: N802
        cls: type[M],
        data: bytes,
        registry: ExtensionRegistry | None = None,
        config: CodecConfig | None = None,
        trace: CodecLogger | None = None,
        overrides: dict[str, Any] | None = None,
    ) -> M:
        """Deserialize a new message from protobuf wire format.

        *overrides* adjusts the decoder settings of *config* for this call.

        Raises:
            MalformedWireData: If *data* is not valid wire data for this type.
        """
        from protowire.codec.decoder import decode_message

        return decode_message(
            cls, data, registry=registry, config=config, trace=trace, overrides=overrides
        )

    def ParseFromString(  # noqa: N802
        self,
        data: bytes,
        registry: ExtensionRegistry | None = None,
        config: CodecConfig | None = None,
        trace: CodecLogger | None = None,
    ) -> int:
        """Clear this message and decode *data* into it.

        Returns:
            Number of bytes consumed.
        """
        from protowire.codec.decoder import merge_from_bytes

        self.Clear()
        merge_from_bytes(self, data, registry=registry, config=config, trace=trace)
        return len(data)

    # ------------------------------------------------------------------
    # Comparison and display
    # ------------------------------------------------------------------

    def _present_values(self) -> dict[str, Any]:
        return {
            name: value
            for name, value in self._values.items()
            if not (isinstance(value, list) and not value)
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Message):
            return NotImplemented
        if type(other) is not type(self):
            return False
        return (
            self._present_values() == other._present_values()
            and self._extensions == other._extensions
            and self._unknown_fields == other._unknown_fields
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        parts = [f"{field.name}={value!r}" for field, value in self.ListFields()]
        parts.extend(f"[{d.full_name}]={v!r}" for d, v in self._extensions)
        if self._unknown_fields:
            parts.append(f"unknown_fields={len(self._unknown_fields)}")
        return f"{type(self).__name__}({', '.join(parts)})"


def _copy_message(message: M) -> M:
    copy = type(message)()
    copy.MergeFrom(message)
    return copy
