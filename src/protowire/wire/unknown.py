"""Opaque storage for fields a message does not declare."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class UnknownField:
    """One undeclared field exactly as it appeared on the wire.

    Attributes:
        field_number: Number from the tag.
        wire_type: Wire type from the tag.
        data: Tag and value bytes, verbatim.
    """

    field_number: int
    wire_type: int
    data: bytes


class UnknownFieldStore:
    """Ordered, append-only record of undeclared fields.

    Fields are kept in the order they were captured during decode and
    re-emitted verbatim on encode. Two stores are equal when their
    concatenated bytes are equal.
    """

    __slots__ = ("_fields",)

    def __init__(self) -> None:
        self._fields: list[UnknownField] = []

    def append(self, field_number: int, wire_type: int, data: bytes) -> None:
        self._fields.append(UnknownField(field_number, wire_type, bytes(data)))

    def extend(self, other: UnknownFieldStore) -> None:
        self._fields.extend(other._fields)

    def clear(self) -> None:
        self._fields.clear()

    def __bytes__(self) -> bytes:
        return b"".join(f.data for f in self._fields)

    def __iter__(self) -> Iterator[UnknownField]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __bool__(self) -> bool:
        return bool(self._fields)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UnknownFieldStore):
            return NotImplemented
        return bytes(self) == bytes(other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        numbers = ", ".join(str(f.field_number) for f in self._fields)
        return f"UnknownFieldStore([{numbers}])"
