"""Wire-format decoder.

Reads tags until the input is exhausted. Each field is routed to one of
three places:

1. A declared field: decoded with the field's type and stored, replacing
   any earlier value for singular fields (last one wins).
2. An extension: the number lies in one of the message's extension ranges
   and the registry knows a descriptor for it; decoded with the
   descriptor's type into the message's extension value set.
3. The unknown-field store: tag and value bytes are kept verbatim.

Sub-messages are decoded recursively over their length-delimited payload.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any, TypeVar

from protowire.codec.values import decode_packed, decode_scalar
from protowire.config import default_config, resolve_config
from protowire.exceptions import MalformedWireData
from protowire.message.fields import FieldType
from protowire.wire.format import (
    WireType,
    decode_length_delimited,
    decode_tag,
    skip_field,
)

if TYPE_CHECKING:
    from protowire.config import CodecConfig
    from protowire.logging.logger import CodecLogger
    from protowire.message.base import Message
    from protowire.message.enums import ProtoEnum
    from protowire.message.extensions import ExtensionDescriptor
    from protowire.message.fields import Field
    from protowire.registry import ExtensionRegistry

M = TypeVar("M", bound="Message")

logger = logging.getLogger("protowire")


def decode_message(
    message_cls: type[M],
    data: bytes,
    registry: ExtensionRegistry | None = None,
    config: CodecConfig | None = None,
    trace: CodecLogger | None = None,
    overrides: dict[str, Any] | None = None,
) -> M:
    """Decode *data* into a new instance of *message_cls*.

    Args:
        message_cls: The message type to produce.
        data: Protobuf wire-format bytes.
        registry: Extensions to recognise. Without one, extension-range
            fields are kept as unknown fields.
        config: Codec configuration; the environment-loaded default if omitted.
        trace: Optional trace logger that receives a record for this call.
        overrides: Per-call values for the decoder settings
            (``max_recursion_depth``, ``validate_utf8``, ``discard_unknown_fields``)
            applied on top of *config*.

    Returns:
        The decoded message.

    Raises:
        MalformedWireData: If *data* is truncated, contains an invalid
            varint, tag or UTF-8 string, nests too deeply, or carries a
            declared field with the wrong wire type.
        ConfigValidationError: If *overrides* names a field that cannot be
            overridden per call.
    """
    message = message_cls()
    merge_from_bytes(
        message, data, registry=registry, config=config, trace=trace, overrides=overrides
    )
    return message


def merge_from_bytes(
    message: Message,
    data: bytes,
    registry: ExtensionRegistry | None = None,
    config: CodecConfig | None = None,
    trace: CodecLogger | None = None,
    overrides: dict[str, Any] | None = None,
) -> None:
    """Decode *data* into an existing *message*.

    Fields already set on *message* are overwritten by fields present in
    *data*; unknown fields are appended after those already stored.

    Raises:
        MalformedWireData: See :func:`decode_message`.
        ConfigValidationError: See :func:`decode_message`.
    """
    started_ns = time.perf_counter_ns()
    data = bytes(data)
    resolved = resolve_config(config or default_config(), overrides)
    _Decoder(registry, resolved).decode_into(message, data, depth=0)
    message._mark_present()
    if trace is not None:
        trace.record_call("decode", message, len(data), started_ns)


class _Decoder:
    """Decoding state shared across one top-level call."""

    def __init__(self, registry: ExtensionRegistry | None, config: CodecConfig) -> None:
        self._registry = registry
        self._max_depth = config.max_recursion_depth
        self._validate_utf8 = config.validate_utf8
        self._keep_unknown = not config.discard_unknown_fields

    def decode_into(self, message: Message, data: bytes, depth: int) -> None:
        if depth > self._max_depth:
            raise MalformedWireData(
                f"Message nesting exceeds max_recursion_depth={self._max_depth}"
            )
        message_cls = type(message)
        fields = message_cls._fields_by_number
        offset = 0
        end = len(data)
        while offset < end:
            tag_start = offset
            number, wire_type, offset = decode_tag(data, offset)
            if wire_type == WireType.END_GROUP:
                raise MalformedWireData(f"Unexpected END_GROUP for field {number}")

            field = fields.get(number)
            if field is not None:
                offset = self._decode_field(message, field, data, offset, wire_type, depth)
                continue

            if self._registry is not None and message_cls.in_extension_range(number):
                descriptor = self._registry.find(message_cls, number)
                if descriptor is not None:
                    offset = self._decode_extension(
                        message, descriptor, data, offset, wire_type, depth
                    )
                    continue

            offset = skip_field(data, offset, number, wire_type)
            if self._keep_unknown:
                message.unknown_fields.append(number, wire_type, data[tag_start:offset])
                logger.debug(
                    "Preserved unknown field %d (wire type %d) on %s",
                    number,
                    wire_type,
                    message_cls.full_name,
                )

    def _decode_field(
        self,
        message: Message,
        field: Field,
        data: bytes,
        offset: int,
        wire_type: int,
        depth: int,
    ) -> int:
        values = message._values
        if (
            field.repeated
            and field.field_type.packable
            and wire_type == WireType.LENGTH_DELIMITED
        ):
            payload, offset = decode_length_delimited(data, offset)
            items = decode_packed(field.field_type, payload, enum_type=field.enum_type)
            values.setdefault(field.name, []).extend(items)
            return offset

        _check_wire_type(message, field.name, field.field_type, wire_type)
        value, offset = self._decode_value(
            field.field_type,
            data,
            offset,
            depth,
            enum_type=field.enum_type,
            message_type=field.message_type,
        )
        if field.repeated:
            values.setdefault(field.name, []).append(value)
        else:
            values[field.name] = value
        return offset

    def _decode_extension(
        self,
        message: Message,
        descriptor: ExtensionDescriptor,
        data: bytes,
        offset: int,
        wire_type: int,
        depth: int,
    ) -> int:
        _check_wire_type(message, descriptor.full_name, descriptor.field_type, wire_type)
        value, offset = self._decode_value(
            descriptor.field_type,
            data,
            offset,
            depth,
            enum_type=descriptor.enum_type,
            message_type=descriptor.message_type,
        )
        message.extensions.set(descriptor, value)
        return offset

    def _decode_value(
        self,
        field_type: FieldType,
        data: bytes,
        offset: int,
        depth: int,
        *,
        enum_type: type[ProtoEnum] | None,
        message_type: type[Message] | None,
    ) -> tuple[Any, int]:
        if field_type is FieldType.MESSAGE:
            payload, offset = decode_length_delimited(data, offset)
            sub = message_type()  # type: ignore[misc]
            self.decode_into(sub, payload, depth + 1)
            return sub, offset
        return decode_scalar(
            field_type,
            data,
            offset,
            enum_type=enum_type,
            validate_utf8=self._validate_utf8,
        )


def _check_wire_type(message: Message, label: str, field_type: FieldType, wire_type: int) -> None:
    if field_type.wire_type != wire_type:
        raise MalformedWireData(
            f"{message.full_name}.{label}: expected wire type "
            f"{int(field_type.wire_type)} for {field_type.type_name}, got {wire_type}"
        )
