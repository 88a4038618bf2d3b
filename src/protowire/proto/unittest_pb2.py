"""Hand-written message classes for ``unittest.proto``.

Covers every scalar type, nested and foreign sub-messages, enums, repeated
fields (packed and unpacked) and an extensible message with extensions of
each value kind::

    package protowire_unittest;

    enum ForeignEnum { FOREIGN_FOO = 4; FOREIGN_BAR = 5; FOREIGN_BAZ = 6; }

    message ForeignMessage { optional int32 c = 1; optional int32 d = 2; }

    message AllTypes {
      enum NestedEnum { FOO = 1; BAR = 2; BAZ = 3; NEG = -1; }
      message NestedMessage { optional int32 bb = 1; }

      optional int32    optional_int32    = 1;
      ...
      optional AllTypes recursive     = 27;
      repeated int32    repeated_int32    = 31;
      ...
      repeated sint64   packed_sint64     = 90 [packed = true];
    }

    message ExtensibleHost { optional int32 id = 1; extensions 100 to 199, 1000 to max; }

    extend ExtensibleHost { ... }
"""

from __future__ import annotations

from protowire.message import ExtensionDescriptor, Field, FieldType, Message, ProtoEnum
from protowire.registry import ExtensionRegistry

_PACKAGE = "protowire_unittest"


class ForeignEnum(ProtoEnum):
    FOREIGN_FOO = 4
    FOREIGN_BAR = 5
    FOREIGN_BAZ = 6


class ForeignMessage(Message):
    full_name = f"{_PACKAGE}.ForeignMessage"

    c = Field(1, FieldType.INT32)
    d = Field(2, FieldType.INT32)


class AllTypes(Message):
    full_name = f"{_PACKAGE}.AllTypes"

    class NestedEnum(ProtoEnum):
        FOO = 1
        BAR = 2
        BAZ = 3
        NEG = -1

    class NestedMessage(Message):
        full_name = f"{_PACKAGE}.AllTypes.NestedMessage"

        bb = Field(1, FieldType.INT32)

    optional_int32 = Field(1, FieldType.INT32)
    optional_int64 = Field(2, FieldType.INT64)
    optional_uint32 = Field(3, FieldType.UINT32)
    optional_uint64 = Field(4, FieldType.UINT64)
    optional_sint32 = Field(5, FieldType.SINT32)
    optional_sint64 = Field(6, FieldType.SINT64)
    optional_fixed32 = Field(7, FieldType.FIXED32)
    optional_fixed64 = Field(8, FieldType.FIXED64)
    optional_sfixed32 = Field(9, FieldType.SFIXED32)
    optional_sfixed64 = Field(10, FieldType.SFIXED64)
    optional_float = Field(11, FieldType.FLOAT)
    optional_double = Field(12, FieldType.DOUBLE)
    optional_bool = Field(13, FieldType.BOOL)
    optional_string = Field(14, FieldType.STRING)
    optional_bytes = Field(15, FieldType.BYTES)

    optional_nested_message = Field(18, FieldType.MESSAGE, message_type=NestedMessage)
    optional_foreign_message = Field(19, FieldType.MESSAGE, message_type=ForeignMessage)
    optional_nested_enum = Field(21, FieldType.ENUM, enum_type=NestedEnum)
    optional_foreign_enum = Field(22, FieldType.ENUM, enum_type=ForeignEnum)

    default_int32 = Field(25, FieldType.INT32, default=41)
    default_string = Field(26, FieldType.STRING, default="hello")
    recursive = Field(27, FieldType.MESSAGE, message_type="AllTypes")

    repeated_int32 = Field(31, FieldType.INT32, repeated=True)
    repeated_string = Field(44, FieldType.STRING, repeated=True)
    repeated_nested_message = Field(
        48, FieldType.MESSAGE, message_type=NestedMessage, repeated=True
    )
    repeated_nested_enum = Field(51, FieldType.ENUM, enum_type=NestedEnum, repeated=True)

    packed_int32 = Field(87, FieldType.INT32, repeated=True, packed=True)
    packed_double = Field(88, FieldType.DOUBLE, repeated=True, packed=True)
    packed_fixed32 = Field(89, FieldType.FIXED32, repeated=True, packed=True)
    packed_sint64 = Field(90, FieldType.SINT64, repeated=True, packed=True)


class ExtensibleHost(Message):
    full_name = f"{_PACKAGE}.ExtensibleHost"
    extension_ranges = ((100, 200), (1000, 1 << 29))

    id = Field(1, FieldType.INT32)


def _extension(
    number: int, name: str, field_type: FieldType, **kwargs: object
) -> ExtensionDescriptor:
    return ExtensionDescriptor(
        number=number,
        field_type=field_type,
        extendee=ExtensibleHost,
        full_name=f"{_PACKAGE}.{name}",
        **kwargs,  # type: ignore[arg-type]
    )


int32_extension = _extension(100, "int32_extension", FieldType.INT32)
sint64_extension = _extension(101, "sint64_extension", FieldType.SINT64)
double_extension = _extension(102, "double_extension", FieldType.DOUBLE)
string_extension = _extension(103, "string_extension", FieldType.STRING, default="none")
bytes_extension = _extension(104, "bytes_extension", FieldType.BYTES)
enum_extension = _extension(
    105, "enum_extension", FieldType.ENUM, enum_type=ForeignEnum
)
message_extension = _extension(
    1000, "message_extension", FieldType.MESSAGE, message_type=ForeignMessage
)

# Every extension declared in this file.
UNITTEST_EXTENSIONS = ExtensionRegistry(
    [
        int32_extension,
        sint64_extension,
        double_extension,
        string_extension,
        bytes_extension,
        enum_extension,
        message_extension,
    ]
).freeze()
