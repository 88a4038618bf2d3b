"""Protocol-buffer wire-format primitives.

Wire format reference:
- Tag: varint of ``(field_number << 3) | wire_type``
- Varint (0): LEB128, at most ten bytes, negative integers as 64-bit two's complement
- Fixed64 (1): eight little-endian bytes
- Length-delimited (2): varint length, then raw bytes
- Start/end group (3/4): legacy delimiters, only ever skipped
- Fixed32 (5): four little-endian bytes

Every decoder takes ``(data, offset)`` and returns ``(value, new_offset)``.
Truncated or invalid input raises :class:`~protowire.exceptions.MalformedWireData`.
"""

from __future__ import annotations

import enum
import struct

from protowire.exceptions import MalformedWireData

MAX_FIELD_NUMBER = (1 << 29) - 1
MAX_VARINT_BYTES = 10

_UINT32_MASK = (1 << 32) - 1
_UINT64_MASK = (1 << 64) - 1

_FLOAT = struct.Struct("<f")
_DOUBLE = struct.Struct("<d")


class WireType(enum.IntEnum):
    """The six wire types defined by the protobuf encoding."""

    VARINT = 0
    FIXED64 = 1
    LENGTH_DELIMITED = 2
    START_GROUP = 3
    END_GROUP = 4
    FIXED32 = 5


_VALID_WIRE_TYPES = frozenset(int(w) for w in WireType)


# ---------------------------------------------------------------------------
# Varints
# ---------------------------------------------------------------------------


def encode_varint(value: int) -> bytes:
    """Encode an integer as a protobuf varint (LEB128).

    Negative values are encoded as their 64-bit two's complement, which
    always takes ten bytes.

    Args:
        value: Integer in ``[-2**63, 2**64)``.

    Returns:
        LEB128-encoded bytes.
    """
    if value < 0:
        value &= _UINT64_MASK
    parts: list[int] = []
    while value > 0x7F:
        parts.append((value & 0x7F) | 0x80)
        value >>= 7
    parts.append(value & 0x7F)
    return bytes(parts)


def decode_varint(data: bytes, offset: int) -> tuple[int, int]:
    """Decode an unsigned 64-bit varint from bytes at the given offset.

    Args:
        data: Raw bytes.
        offset: Starting position.

    Returns:
        Tuple of (decoded_value, new_offset).

    Raises:
        MalformedWireData: If the input ends mid-varint or the varint is
            longer than ten bytes.
    """
    result = 0
    shift = 0
    end = len(data)
    while True:
        if offset >= end:
            raise MalformedWireData("Truncated varint")
        b = data[offset]
        offset += 1
        result |= (b & 0x7F) << shift
        if not (b & 0x80):
            return result & _UINT64_MASK, offset
        shift += 7
        if shift >= 7 * MAX_VARINT_BYTES:
            raise MalformedWireData(f"Varint exceeds {MAX_VARINT_BYTES} bytes")


def zigzag_encode(value: int) -> int:
    """Map a signed integer onto an unsigned one (sint32/sint64)."""
    return (value << 1) ^ (value >> 63)


def zigzag_decode(value: int) -> int:
    """Inverse of :func:`zigzag_encode`."""
    return (value >> 1) ^ -(value & 1)


def to_signed32(value: int) -> int:
    """Reinterpret the low 32 bits of *value* as a signed integer."""
    value &= _UINT32_MASK
    return value - (1 << 32) if value & (1 << 31) else value


def to_signed64(value: int) -> int:
    """Reinterpret the low 64 bits of *value* as a signed integer."""
    value &= _UINT64_MASK
    return value - (1 << 64) if value & (1 << 63) else value


# ---------------------------------------------------------------------------
# Tags
# ---------------------------------------------------------------------------


def encode_tag(field_number: int, wire_type: int) -> bytes:
    """Encode a protobuf field tag.

    Args:
        field_number: The proto field number (1-based).
        wire_type: One of the :class:`WireType` values.

    Returns:
        Varint-encoded tag bytes.
    """
    return encode_varint((field_number << 3) | wire_type)


def decode_tag(data: bytes, offset: int) -> tuple[int, int, int]:
    """Decode a field tag.

    Returns:
        Tuple of (field_number, wire_type, new_offset).

    Raises:
        MalformedWireData: If the tag is truncated, names field 0 or a field
            number above 2**29-1, or uses wire type 6 or 7.
    """
    tag, offset = decode_varint(data, offset)
    field_number = tag >> 3
    wire_type = tag & 0x07
    if wire_type not in _VALID_WIRE_TYPES:
        raise MalformedWireData(f"Invalid wire type {wire_type} for field {field_number}")
    if field_number == 0 or field_number > MAX_FIELD_NUMBER:
        raise MalformedWireData(f"Invalid field number {field_number}")
    return field_number, wire_type, offset


# ---------------------------------------------------------------------------
# Fixed-width and length-delimited values
# ---------------------------------------------------------------------------


def encode_fixed32(value: int) -> bytes:
    return (value & _UINT32_MASK).to_bytes(4, "little")


def encode_fixed64(value: int) -> bytes:
    return (value & _UINT64_MASK).to_bytes(8, "little")


def encode_float(value: float) -> bytes:
    return _FLOAT.pack(value)


def encode_double(value: float) -> bytes:
    return _DOUBLE.pack(value)


def _take(data: bytes, offset: int, size: int) -> tuple[bytes, int]:
    end = offset + size
    if end > len(data):
        raise MalformedWireData(
            f"Truncated value: need {size} bytes at offset {offset}, "
            f"have {len(data) - offset}"
        )
    return data[offset:end], end


def decode_fixed32(data: bytes, offset: int) -> tuple[int, int]:
    raw, offset = _take(data, offset, 4)
    return int.from_bytes(raw, "little"), offset


def decode_fixed64(data: bytes, offset: int) -> tuple[int, int]:
    raw, offset = _take(data, offset, 8)
    return int.from_bytes(raw, "little"), offset


def decode_float(data: bytes, offset: int) -> tuple[float, int]:
    raw, offset = _take(data, offset, 4)
    return _FLOAT.unpack(raw)[0], offset


def decode_double(data: bytes, offset: int) -> tuple[float, int]:
    raw, offset = _take(data, offset, 8)
    return _DOUBLE.unpack(raw)[0], offset


def encode_length_delimited(payload: bytes) -> bytes:
    """Prefix *payload* with its varint length."""
    return encode_varint(len(payload)) + payload


def decode_length_delimited(data: bytes, offset: int) -> tuple[bytes, int]:
    """Read a varint length followed by that many bytes.

    Raises:
        MalformedWireData: If the length or the payload is truncated.
    """
    length, offset = decode_varint(data, offset)
    return _take(data, offset, length)


# ---------------------------------------------------------------------------
# Skipping
# ---------------------------------------------------------------------------


def skip_field(data: bytes, offset: int, field_number: int, wire_type: int) -> int:
    """Skip over the value of a field whose tag has already been read.

    Groups are skipped as a unit, including any nested groups. Open groups
    are tracked on an explicit stack, so nesting depth is bounded only by
    the input length.

    Args:
        data: Raw bytes.
        offset: Position just after the tag.
        field_number: Number from the tag (needed to match END_GROUP).
        wire_type: Wire type from the tag.

    Returns:
        Offset of the first byte after the value.

    Raises:
        MalformedWireData: If the value is truncated, or a group is not
            closed by its matching END_GROUP.
    """
    if wire_type != WireType.START_GROUP:
        return _skip_scalar(data, offset, field_number, wire_type)

    open_groups = [field_number]
    while open_groups:
        if offset >= len(data):
            raise MalformedWireData(f"Unterminated group for field {open_groups[-1]}")
        inner_number, inner_type, offset = decode_tag(data, offset)
        if inner_type == WireType.START_GROUP:
            open_groups.append(inner_number)
        elif inner_type == WireType.END_GROUP:
            if inner_number != open_groups[-1]:
                raise MalformedWireData(
                    f"END_GROUP for field {inner_number} inside group {open_groups[-1]}"
                )
            open_groups.pop()
        else:
            offset = _skip_scalar(data, offset, inner_number, inner_type)
    return offset


def _skip_scalar(data: bytes, offset: int, field_number: int, wire_type: int) -> int:
    if wire_type == WireType.VARINT:
        _, offset = decode_varint(data, offset)
    elif wire_type == WireType.FIXED64:
        _, offset = _take(data, offset, 8)
    elif wire_type == WireType.LENGTH_DELIMITED:
        _, offset = decode_length_delimited(data, offset)
    elif wire_type == WireType.FIXED32:
        _, offset = _take(data, offset, 4)
    else:
        raise MalformedWireData(f"Unexpected END_GROUP for field {field_number}")
    return offset
