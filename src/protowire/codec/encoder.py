"""Wire-format encoder.

Output order is fixed so that ``decode(encode(m)) == m``:

1. Declared fields by ascending field number; unset fields are omitted.
2. Extension values by ascending field number.
3. Unknown fields, verbatim, in the order they were captured.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any

from protowire.codec.values import encode_packed, encode_scalar
from protowire.exceptions import UnsupportedFieldNumber
from protowire.message.fields import FieldType
from protowire.wire.format import WireType, encode_length_delimited, encode_tag

if TYPE_CHECKING:
    from protowire.logging.logger import CodecLogger
    from protowire.message.base import Message


def encode_message(message: Message, trace: CodecLogger | None = None) -> bytes:
    """Serialize *message* to canonical protobuf wire format.

    Args:
        message: The message to encode.
        trace: Optional trace logger that receives a record for this call.

    Returns:
        Wire-format bytes.

    Raises:
        UnsupportedFieldNumber: If an extension value's field number is
            outside the host message's extension ranges.
    """
    started_ns = time.perf_counter_ns()
    parts: list[bytes] = []
    _encode_into(message, parts)
    data = b"".join(parts)
    if trace is not None:
        trace.record_call("encode", message, len(data), started_ns)
    return data


def _encode_into(message: Message, parts: list[bytes]) -> None:
    message_cls = type(message)
    values = message._values

    for field in message_cls._sorted_fields:
        if field.name not in values:
            continue
        value = values[field.name]
        if not field.repeated:
            _encode_field(parts, field.number, field.field_type, value)
        elif field.packed and value:
            parts.append(encode_tag(field.number, WireType.LENGTH_DELIMITED))
            parts.append(encode_length_delimited(encode_packed(field.field_type, value)))
        else:
            for item in value:
                _encode_field(parts, field.number, field.field_type, item)

    for descriptor, value in message.extensions:
        if not message_cls.in_extension_range(descriptor.number):
            raise UnsupportedFieldNumber(
                f"Extension {descriptor.full_name} uses field {descriptor.number}, "
                f"outside the extension ranges of {message_cls.full_name}"
            )
        _encode_field(parts, descriptor.number, descriptor.field_type, value)

    parts.append(bytes(message.unknown_fields))


def _encode_field(parts: list[bytes], number: int, field_type: FieldType, value: Any) -> None:
    if field_type is FieldType.MESSAGE:
        parts.append(encode_tag(number, WireType.LENGTH_DELIMITED))
        parts.append(encode_length_delimited(encode_message(value)))
    else:
        parts.append(encode_tag(number, field_type.wire_type))
        parts.append(encode_scalar(field_type, value))
