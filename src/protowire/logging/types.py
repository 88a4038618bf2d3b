"""Data types for the codec trace logging subsystem."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class CodecRecord:
    """Immutable record of one top-level encode or decode call.

    Attributes:
        timestamp_ns: Wall-clock time the call finished (nanoseconds since epoch).
        operation: ``"encode"`` or ``"decode"``.
        message_type: Fully-qualified name of the top-level message.
        byte_count: Size of the wire data produced or consumed.
        declared_fields: Number of declared fields present on the message.
        extension_fields: Number of extension values on the message.
        unknown_fields: Number of unknown fields on the message.
        elapsed_ms: Time spent in the codec (milliseconds).
    """

    timestamp_ns: int
    operation: str
    message_type: str
    byte_count: int
    declared_fields: int
    extension_fields: int
    unknown_fields: int
    elapsed_ms: float
