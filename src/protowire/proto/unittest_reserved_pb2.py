"""Hand-written message classes for ``unittest_reserved.proto``.

The schema exercises names that collide with runtime members of message
classes (``is_initialized``, ``hash_value``, ``debug_description``) plus an
extensible nested message with extensions declared in two places::

    package protobuf_unittest;

    message SwiftReservedTest {
      enum Enum { DOUBLE = 1; JSON = 2; CLASS = 3; _ = 4; SELF = 5; TYPE = 6; }
      enum ProtocolEnum { a = 1; }
      message class { extensions 1000 to 2000; }
      message Type {}
      message isEqual {}

      optional int32 proto_message_name = 10;
      optional int32 proto_package_name = 11;
      optional int32 any_type_prefix = 12;
      optional int32 any_type_url = 13;
      optional string is_initialized = 20;
      optional string hash_value = 21;
      optional int32 debug_description = 22;
    }

    message SwiftReservedTestExt {
      extend SwiftReservedTest.class { optional bool hash_value = 1001; }
    }

    extend SwiftReservedTest.class { optional bool debug_description = 1000; }

If the proto definition changes, update these classes by hand.
"""

from __future__ import annotations

from protowire.message import ExtensionDescriptor, Field, FieldType, Message, ProtoEnum
from protowire.registry import ExtensionRegistry

_PACKAGE = "protobuf_unittest"


class SwiftReservedTest(Message):
    """Scalar fields whose names shadow message-level attributes."""

    full_name = f"{_PACKAGE}.SwiftReservedTest"

    class Enum(ProtoEnum):
        DOUBLE = 1
        JSON = 2
        CLASS = 3
        UNDERSCORE = 4  # proto name "_"
        SELF = 5
        TYPE = 6

    class ProtocolEnum(ProtoEnum):
        a = 1

    class ClassMessage(Message):
        """Carries no fields of its own, only extensions in [1000, 2001)."""

        full_name = f"{_PACKAGE}.SwiftReservedTest.class"
        extension_ranges = ((1000, 2001),)

    class TypeMessage(Message):
        full_name = f"{_PACKAGE}.SwiftReservedTest.Type"

    class IsEqualMessage(Message):
        full_name = f"{_PACKAGE}.SwiftReservedTest.isEqual"

    proto_message_name = Field(10, FieldType.INT32)
    proto_package_name = Field(11, FieldType.INT32)
    any_type_prefix = Field(12, FieldType.INT32)
    any_type_url = Field(13, FieldType.INT32)
    is_initialized = Field(20, FieldType.STRING)
    hash_value = Field(21, FieldType.STRING)
    debug_description = Field(22, FieldType.INT32)


class SwiftReservedTestExt(Message):
    """Scope for the ``hash_value`` extension; has no fields."""

    full_name = f"{_PACKAGE}.SwiftReservedTestExt"

    hash_value = ExtensionDescriptor(
        number=1001,
        field_type=FieldType.BOOL,
        extendee=SwiftReservedTest.ClassMessage,
        full_name=f"{_PACKAGE}.SwiftReservedTestExt.hash_value",
        default=False,
    )


debug_description = ExtensionDescriptor(
    number=1000,
    field_type=FieldType.BOOL,
    extendee=SwiftReservedTest.ClassMessage,
    full_name=f"{_PACKAGE}.debug_description",
    default=False,
)

# Every extension declared in this file.
UNITTEST_RESERVED_EXTENSIONS = ExtensionRegistry(
    [
        debug_description,
        SwiftReservedTestExt.hash_value,
    ]
).freeze()
