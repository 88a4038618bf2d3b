"""Message model: declared fields, presence, enums and extensions.

    from protowire.message import Field, FieldType, Message, ProtoEnum
"""

from protowire.message.base import Message
from protowire.message.enums import ProtoEnum
from protowire.message.extensions import ExtensionDescriptor, ExtensionFieldValueSet
from protowire.message.fields import Field, FieldType

__all__ = [
    "ExtensionDescriptor",
    "ExtensionFieldValueSet",
    "Field",
    "FieldType",
    "Message",
    "ProtoEnum",
]
