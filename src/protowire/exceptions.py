"""Exception hierarchy for protowire.

All exceptions derive from ProtoWireError, enabling broad catch patterns
at the application boundary while allowing fine-grained handling internally.
Unknown fields and unrecognized enum values are never errors; they are
preserved on the message instead.
"""


class ProtoWireError(Exception):
    """Base exception for all protowire errors."""


class MalformedWireData(ProtoWireError):
    """The input is not valid protocol-buffer wire data.

    Raised for truncated tags or values, varints longer than ten bytes,
    invalid wire types, wire types that do not match a declared field,
    invalid UTF-8 in string fields, and nesting beyond the configured
    recursion limit.
    """


class ExtensionConflict(ProtoWireError):
    """Two extension descriptors claim the same slot.

    Raised at registration time when a (host message, field number) pair or
    a fully-qualified extension name is already taken.
    """


class UnsupportedFieldNumber(ProtoWireError):
    """An extension field number lies outside its host's extension ranges.

    Raised when such a descriptor is registered and when a message carrying
    such an extension value is encoded.
    """


class RegistryFrozenError(ProtoWireError):
    """Registration was attempted on a frozen extension registry."""


class ConfigValidationError(ProtoWireError):
    """Configuration override validation failed.

    Raised when per-call overrides contain unknown keys or attempt to
    override infrastructure fields.
    """


class ReadFailure(ProtoWireError):
    """Reading input bytes from a stream or file failed."""


class WriteFailure(ProtoWireError):
    """Writing output bytes to a stream or file failed."""
