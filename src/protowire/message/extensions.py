"""Extension descriptors and the per-message extension value set."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from protowire.message.fields import FieldType, coerce_value, default_for

if TYPE_CHECKING:
    from protowire.message.base import Message
    from protowire.message.enums import ProtoEnum


@dataclass(frozen=True, slots=True)
class ExtensionDescriptor:
    """A field declared outside its host message.

    Attributes:
        number: Field number, inside one of the extendee's extension ranges.
        field_type: Declared type of the value.
        extendee: The extensible message class this extension attaches to.
        full_name: Fully-qualified proto name, e.g. ``"pkg.Outer.my_ext"``.
        default: Value reported while unset (type zero value when ``None``).
        enum_type: Enum class for ENUM extensions.
        message_type: Message class for MESSAGE extensions.
    """

    number: int
    field_type: FieldType
    extendee: type[Message]
    full_name: str
    default: Any = None
    enum_type: type[ProtoEnum] | None = None
    message_type: type[Message] | None = None

    def __post_init__(self) -> None:
        if self.number <= 0:
            raise ValueError(f"{self.full_name}: field numbers must be positive")
        if self.field_type is FieldType.MESSAGE and self.message_type is None:
            raise TypeError(f"{self.full_name}: MESSAGE extensions require message_type")
        if self.field_type is FieldType.ENUM and self.enum_type is None:
            raise TypeError(f"{self.full_name}: ENUM extensions require enum_type")
        if self.default is not None:
            if self.field_type is FieldType.MESSAGE:
                raise TypeError(f"{self.full_name}: MESSAGE extensions cannot declare a default")
            object.__setattr__(self, "default", self.coerce(self.default))

    @property
    def default_value(self) -> Any:
        if self.default is not None:
            return self.default
        return default_for(
            self.field_type, enum_type=self.enum_type, message_type=self.message_type
        )

    def coerce(self, value: Any) -> Any:
        return coerce_value(
            self.field_type,
            value,
            label=self.full_name,
            enum_type=self.enum_type,
            message_type=self.message_type,
        )


class ExtensionFieldValueSet:
    """Typed extension values held by one message, keyed by field number.

    Iteration yields ``(descriptor, value)`` pairs in ascending field-number
    order, which is the order the encoder emits them in.
    """

    __slots__ = ("_values",)

    def __init__(self) -> None:
        self._values: dict[int, tuple[ExtensionDescriptor, Any]] = {}

    def has(self, descriptor: ExtensionDescriptor) -> bool:
        entry = self._values.get(descriptor.number)
        return entry is not None and entry[0] == descriptor

    def get(self, descriptor: ExtensionDescriptor) -> Any:
        entry = self._values.get(descriptor.number)
        if entry is None or entry[0] != descriptor:
            return descriptor.default_value
        return entry[1]

    def set(self, descriptor: ExtensionDescriptor, value: Any) -> None:
        """Store *value* without validation (decoder path)."""
        self._values[descriptor.number] = (descriptor, value)

    def clear(self, descriptor: ExtensionDescriptor) -> None:
        if self.has(descriptor):
            del self._values[descriptor.number]

    def clear_all(self) -> None:
        self._values.clear()

    def __iter__(self) -> Iterator[tuple[ExtensionDescriptor, Any]]:
        for number in sorted(self._values):
            yield self._values[number]

    def __len__(self) -> int:
        return len(self._values)

    def __bool__(self) -> bool:
        return bool(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ExtensionFieldValueSet):
            return NotImplemented
        return self._values == other._values

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        items = ", ".join(f"{d.full_name}={v!r}" for d, v in self)
        return f"ExtensionFieldValueSet({items})"
