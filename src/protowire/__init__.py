"""protowire: protocol-buffer wire-format codec with presence, extensions and unknown fields.

Messages are declared as Python classes; the codec encodes them to the
canonical binary wire format and decodes them back, preserving undeclared
fields byte-for-byte and unrecognized enum values. Extensions are resolved
through an explicitly constructed :class:`ExtensionRegistry`.
"""

from __future__ import annotations

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("protowire")
except PackageNotFoundError:
    __version__ = "0.0.0"

from protowire.codec import decode_message, encode_message, merge_from_bytes
from protowire.config import CodecConfig, resolve_config, validate_overrides
from protowire.exceptions import (
    ConfigValidationError,
    ExtensionConflict,
    MalformedWireData,
    ProtoWireError,
    ReadFailure,
    RegistryFrozenError,
    UnsupportedFieldNumber,
    WriteFailure,
)
from protowire.message import (
    ExtensionDescriptor,
    Field,
    FieldType,
    Message,
    ProtoEnum,
)
from protowire.registry import ExtensionRegistry

__all__ = [
    "CodecConfig",
    "ConfigValidationError",
    "ExtensionConflict",
    "ExtensionDescriptor",
    "ExtensionRegistry",
    "Field",
    "FieldType",
    "MalformedWireData",
    "Message",
    "ProtoEnum",
    "ProtoWireError",
    "ReadFailure",
    "RegistryFrozenError",
    "UnsupportedFieldNumber",
    "WriteFailure",
    "__version__",
    "decode_message",
    "encode_message",
    "merge_from_bytes",
    "resolve_config",
    "validate_overrides",
]
