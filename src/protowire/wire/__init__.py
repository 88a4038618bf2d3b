"""Wire-format primitives and unknown-field storage."""

from protowire.wire.format import (
    MAX_FIELD_NUMBER,
    WireType,
    decode_tag,
    decode_varint,
    encode_tag,
    encode_varint,
    skip_field,
)
from protowire.wire.unknown import UnknownField, UnknownFieldStore

__all__ = [
    "MAX_FIELD_NUMBER",
    "UnknownField",
    "UnknownFieldStore",
    "WireType",
    "decode_tag",
    "decode_varint",
    "encode_tag",
    "encode_varint",
    "skip_field",
]
