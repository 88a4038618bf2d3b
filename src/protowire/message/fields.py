"""Field declarations for the message model.

A :class:`Field` is a data descriptor placed on a :class:`~protowire.message.Message`
subclass. Reading an unset field returns the type's default without making
it present; assigning validates and stores the value; ``del`` clears it.
"""

from __future__ import annotations

import enum
import math
import struct
import sys
from typing import TYPE_CHECKING, Any

from protowire.wire.format import WireType

if TYPE_CHECKING:
    from protowire.message.base import Message
    from protowire.message.enums import ProtoEnum

_FLOAT = struct.Struct("<f")


class FieldType(enum.Enum):
    """Declared protobuf field types and the wire type each one uses."""

    INT32 = ("int32", WireType.VARINT)
    INT64 = ("int64", WireType.VARINT)
    UINT32 = ("uint32", WireType.VARINT)
    UINT64 = ("uint64", WireType.VARINT)
    SINT32 = ("sint32", WireType.VARINT)
    SINT64 = ("sint64", WireType.VARINT)
    BOOL = ("bool", WireType.VARINT)
    ENUM = ("enum", WireType.VARINT)
    FIXED64 = ("fixed64", WireType.FIXED64)
    SFIXED64 = ("sfixed64", WireType.FIXED64)
    DOUBLE = ("double", WireType.FIXED64)
    FIXED32 = ("fixed32", WireType.FIXED32)
    SFIXED32 = ("sfixed32", WireType.FIXED32)
    FLOAT = ("float", WireType.FIXED32)
    STRING = ("string", WireType.LENGTH_DELIMITED)
    BYTES = ("bytes", WireType.LENGTH_DELIMITED)
    MESSAGE = ("message", WireType.LENGTH_DELIMITED)

    def __init__(self, type_name: str, wire_type: WireType) -> None:
        self.type_name = type_name
        self.wire_type = wire_type

    @property
    def packable(self) -> bool:
        """Whether repeated values of this type may use packed encoding."""
        return self.wire_type != WireType.LENGTH_DELIMITED


_INT_RANGES: dict[FieldType, tuple[int, int]] = {
    FieldType.INT32: (-(1 << 31), 1 << 31),
    FieldType.SINT32: (-(1 << 31), 1 << 31),
    FieldType.SFIXED32: (-(1 << 31), 1 << 31),
    FieldType.ENUM: (-(1 << 31), 1 << 31),
    FieldType.UINT32: (0, 1 << 32),
    FieldType.FIXED32: (0, 1 << 32),
    FieldType.INT64: (-(1 << 63), 1 << 63),
    FieldType.SINT64: (-(1 << 63), 1 << 63),
    FieldType.SFIXED64: (-(1 << 63), 1 << 63),
    FieldType.UINT64: (0, 1 << 64),
    FieldType.FIXED64: (0, 1 << 64),
}

_ZERO_DEFAULTS: dict[FieldType, Any] = {
    FieldType.BOOL: False,
    FieldType.FLOAT: 0.0,
    FieldType.DOUBLE: 0.0,
    FieldType.STRING: "",
    FieldType.BYTES: b"",
}


def _round_to_float32(value: float) -> float:
    # Stored at float32 precision so decode(encode(m)) == m.
    try:
        return _FLOAT.unpack(_FLOAT.pack(value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def coerce_value(
    field_type: FieldType,
    value: Any,
    *,
    label: str,
    enum_type: type[ProtoEnum] | None = None,
    message_type: type[Message] | None = None,
) -> Any:
    """Validate *value* for *field_type* and return its stored form.

    Args:
        field_type: Declared type of the field.
        value: Candidate value.
        label: Field or extension name used in error messages.
        enum_type: Enum class for ENUM fields.
        message_type: Message class for MESSAGE fields.

    Returns:
        The value to store (enums coerced to *enum_type*, floats rounded to
        float32 precision, bytes-likes converted to ``bytes``).

    Raises:
        TypeError: If *value* has the wrong Python type.
        ValueError: If an integer is out of range for *field_type*.
    """
    if field_type is FieldType.MESSAGE:
        if not isinstance(value, message_type):  # type: ignore[arg-type]
            expected = message_type.__name__  # type: ignore[union-attr]
            raise TypeError(f"{label}: expected {expected}, got {type(value).__name__}")
        return value

    if field_type is FieldType.BOOL:
        if not isinstance(value, int):
            raise TypeError(f"{label}: expected bool, got {type(value).__name__}")
        return bool(value)

    if field_type in (FieldType.FLOAT, FieldType.DOUBLE):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(f"{label}: expected float, got {type(value).__name__}")
        value = float(value)
        return _round_to_float32(value) if field_type is FieldType.FLOAT else value

    if field_type is FieldType.STRING:
        if not isinstance(value, str):
            raise TypeError(f"{label}: expected str, got {type(value).__name__}")
        return value

    if field_type is FieldType.BYTES:
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise TypeError(f"{label}: expected bytes, got {type(value).__name__}")
        return bytes(value)

    # Integer-valued types, enums included.
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{label}: expected int, got {type(value).__name__}")
    low, high = _INT_RANGES[field_type]
    if not low <= value < high:
        raise ValueError(f"{label}: value {value} out of range for {field_type.type_name}")
    if field_type is FieldType.ENUM:
        return enum_type(value)  # type: ignore[misc]
    return int(value)


def default_for(
    field_type: FieldType,
    *,
    enum_type: type[ProtoEnum] | None = None,
    message_type: type[Message] | None = None,
) -> Any:
    """Return the zero value reported for an unset field of *field_type*."""
    if field_type is FieldType.MESSAGE:
        return message_type()  # type: ignore[misc]
    if field_type is FieldType.ENUM:
        # proto2 semantics: the first declared value.
        return next(iter(enum_type))  # type: ignore[call-overload]
    return _ZERO_DEFAULTS.get(field_type, 0)


def resolve_type_reference(reference: Any, module_name: str) -> Any:
    """Resolve a dotted type name relative to *module_name*.

    Classes are returned unchanged, so references may be given either as
    the class itself or as a string such as ``"Outer.Inner"``.
    """
    if not isinstance(reference, str):
        return reference
    target: Any = sys.modules[module_name]
    for part in reference.split("."):
        target = getattr(target, part)
    return target


class Field:
    """A declared field on a message class.

    Args:
        number: Field number, unique within the message.
        field_type: Declared :class:`FieldType`.
        message_type: Message class (or dotted name within the declaring
            module) for MESSAGE fields.
        enum_type: :class:`~protowire.message.ProtoEnum` subclass for ENUM fields.
        repeated: Whether the field holds a list of values.
        packed: Encode repeated numeric values packed in one
            length-delimited record. Both forms are accepted on decode.
        default: Value reported while the field is unset. Defaults to the
            type's zero value.

    Example::

        class Point(Message):
            x = Field(1, FieldType.SINT32)
            y = Field(2, FieldType.SINT32)
    """

    def __init__(
        self,
        number: int,
        field_type: FieldType,
        *,
        message_type: Any = None,
        enum_type: type[ProtoEnum] | None = None,
        repeated: bool = False,
        packed: bool = False,
        default: Any = None,
    ) -> None:
        if number <= 0:
            raise ValueError(f"Field numbers must be positive, got {number}")
        if field_type is FieldType.MESSAGE and message_type is None:
            raise TypeError("MESSAGE fields require message_type")
        if field_type is FieldType.ENUM and enum_type is None:
            raise TypeError("ENUM fields require enum_type")
        if packed and not (repeated and field_type.packable):
            raise TypeError(f"{field_type.type_name} fields cannot be packed")
        if default is not None:
            if repeated or field_type is FieldType.MESSAGE:
                raise TypeError(f"{field_type.type_name} fields cannot declare a default")
            default = coerce_value(
                field_type, default, label=f"default of field {number}", enum_type=enum_type
            )
        self.number = number
        self.field_type = field_type
        self.enum_type = enum_type
        self.repeated = repeated
        self.packed = packed
        self.name = ""
        self._message_type = message_type
        self._owner_module = ""
        self._default = default

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name
        self._owner_module = owner.__module__

    @property
    def message_type(self) -> type[Message] | None:
        """The sub-message class, resolving a string reference on first use."""
        if isinstance(self._message_type, str):
            self._message_type = resolve_type_reference(self._message_type, self._owner_module)
        return self._message_type

    @property
    def default_value(self) -> Any:
        if self._default is not None:
            return self._default
        return default_for(
            self.field_type, enum_type=self.enum_type, message_type=self.message_type
        )

    def coerce(self, value: Any) -> Any:
        """Validate one (non-list) value for this field."""
        return coerce_value(
            self.field_type,
            value,
            label=self.name,
            enum_type=self.enum_type,
            message_type=self.message_type,
        )

    def __get__(self, obj: Message | None, objtype: type | None = None) -> Any:
        if obj is None:
            return self
        values = obj._values
        if self.name in values:
            return values[self.name]
        if self.repeated:
            # Stored so that in-place appends stick; an empty list is still absent.
            values[self.name] = []
            return values[self.name]
        if self.field_type is FieldType.MESSAGE:
            return obj._pending_child(self.name, self.message_type)  # type: ignore[arg-type]
        return self.default_value

    def __set__(self, obj: Message, value: Any) -> None:
        if self.repeated:
            if isinstance(value, (str, bytes)) or not hasattr(value, "__iter__"):
                raise TypeError(f"{self.name}: repeated field requires an iterable")
            coerced: Any = [self.coerce(v) for v in value]
        else:
            coerced = self.coerce(value)
        obj._drop_pending(self.name)
        obj._values[self.name] = coerced
        obj._mark_present()

    def __delete__(self, obj: Message) -> None:
        obj._drop_pending(self.name)
        obj._values.pop(self.name, None)

    def __repr__(self) -> str:
        label = "repeated " if self.repeated else ""
        return f"Field({self.name!r}, {self.number}, {label}{self.field_type.type_name})"
