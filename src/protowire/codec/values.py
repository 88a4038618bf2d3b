"""Scalar value conversion between Python values and wire bytes.

Sub-messages are handled by the encoder and decoder themselves; everything
else goes through :func:`encode_scalar` and :func:`decode_scalar`.
Packed repeated fixed-width values are converted in bulk with numpy.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import numpy as np

from protowire.exceptions import MalformedWireData
from protowire.message.fields import FieldType
from protowire.wire import format as wire

if TYPE_CHECKING:
    from protowire.message.enums import ProtoEnum

_UINT32_MASK = (1 << 32) - 1

# Little-endian numpy dtypes for packed fixed-width payloads.
_PACKED_DTYPES: dict[FieldType, str] = {
    FieldType.FIXED32: "<u4",
    FieldType.SFIXED32: "<i4",
    FieldType.FLOAT: "<f4",
    FieldType.FIXED64: "<u8",
    FieldType.SFIXED64: "<i8",
    FieldType.DOUBLE: "<f8",
}


def encode_scalar(field_type: FieldType, value: Any) -> bytes:
    """Encode a non-message value, without its tag.

    Args:
        field_type: Declared type of the value.
        value: Value as stored on the message.

    Returns:
        Wire bytes for the value.
    """
    if field_type in (FieldType.SINT32, FieldType.SINT64):
        return wire.encode_varint(wire.zigzag_encode(value))
    if field_type.wire_type == wire.WireType.VARINT:
        return wire.encode_varint(int(value))
    if field_type is FieldType.FLOAT:
        return wire.encode_float(value)
    if field_type is FieldType.DOUBLE:
        return wire.encode_double(value)
    if field_type in (FieldType.FIXED32, FieldType.SFIXED32):
        return wire.encode_fixed32(value)
    if field_type in (FieldType.FIXED64, FieldType.SFIXED64):
        return wire.encode_fixed64(value)
    if field_type is FieldType.STRING:
        # surrogateescape round-trips strings decoded with validate_utf8 off.
        return wire.encode_length_delimited(value.encode("utf-8", "surrogateescape"))
    if field_type is FieldType.BYTES:
        return wire.encode_length_delimited(value)
    raise TypeError(f"encode_scalar does not handle {field_type.type_name}")


def _convert_varint(
    field_type: FieldType, raw: int, enum_type: type[ProtoEnum] | None
) -> Any:
    if field_type is FieldType.INT32:
        return wire.to_signed32(raw)
    if field_type is FieldType.INT64:
        return wire.to_signed64(raw)
    if field_type is FieldType.UINT32:
        return raw & _UINT32_MASK
    if field_type is FieldType.UINT64:
        return raw
    if field_type is FieldType.SINT32:
        return wire.zigzag_decode(raw & _UINT32_MASK)
    if field_type is FieldType.SINT64:
        return wire.zigzag_decode(raw)
    if field_type is FieldType.BOOL:
        return raw != 0
    # ENUM: unknown values become unrecognized pseudo-members.
    return enum_type(wire.to_signed32(raw))  # type: ignore[misc]


def decode_scalar(
    field_type: FieldType,
    data: bytes,
    offset: int,
    *,
    enum_type: type[ProtoEnum] | None = None,
    validate_utf8: bool = True,
) -> tuple[Any, int]:
    """Decode one non-message value whose tag has already been read.

    Returns:
        Tuple of (value, new_offset).

    Raises:
        MalformedWireData: If the value is truncated or, for strings, not
            valid UTF-8 while *validate_utf8* is set.
    """
    if field_type.wire_type == wire.WireType.VARINT:
        raw, offset = wire.decode_varint(data, offset)
        return _convert_varint(field_type, raw, enum_type), offset
    if field_type is FieldType.FLOAT:
        return wire.decode_float(data, offset)
    if field_type is FieldType.DOUBLE:
        return wire.decode_double(data, offset)
    if field_type is FieldType.FIXED32:
        return wire.decode_fixed32(data, offset)
    if field_type is FieldType.SFIXED32:
        raw, offset = wire.decode_fixed32(data, offset)
        return wire.to_signed32(raw), offset
    if field_type is FieldType.FIXED64:
        return wire.decode_fixed64(data, offset)
    if field_type is FieldType.SFIXED64:
        raw, offset = wire.decode_fixed64(data, offset)
        return wire.to_signed64(raw), offset

    payload, offset = wire.decode_length_delimited(data, offset)
    if field_type is FieldType.BYTES:
        return bytes(payload), offset
    if field_type is FieldType.STRING:
        if not validate_utf8:
            return payload.decode("utf-8", "surrogateescape"), offset
        try:
            return payload.decode("utf-8"), offset
        except UnicodeDecodeError as exc:
            raise MalformedWireData(f"Invalid UTF-8 in string field: {exc}") from exc
    raise TypeError(f"decode_scalar does not handle {field_type.type_name}")


def encode_packed(field_type: FieldType, values: list[Any]) -> bytes:
    """Encode repeated numeric *values* as one packed payload (no tag or length)."""
    dtype = _PACKED_DTYPES.get(field_type)
    if dtype is not None:
        return np.asarray(values, dtype=dtype).tobytes()
    return b"".join(encode_scalar(field_type, v) for v in values)


def decode_packed(
    field_type: FieldType,
    payload: bytes,
    *,
    enum_type: type[ProtoEnum] | None = None,
) -> list[Any]:
    """Decode a packed payload of repeated numeric values.

    Raises:
        MalformedWireData: If a fixed-width payload is not a whole number of
            elements, or a varint is truncated.
    """
    dtype = _PACKED_DTYPES.get(field_type)
    if dtype is not None:
        size = np.dtype(dtype).itemsize
        if len(payload) % size:
            raise MalformedWireData(
                f"Packed {field_type.type_name} payload of {len(payload)} bytes "
                f"is not a multiple of {size}"
            )
        return np.frombuffer(payload, dtype=dtype).tolist()

    values: list[Any] = []
    offset = 0
    while offset < len(payload):
        raw, offset = wire.decode_varint(payload, offset)
        values.append(_convert_varint(field_type, raw, enum_type))
    return values
