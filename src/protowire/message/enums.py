"""Open enumerations for protobuf enum fields."""

from __future__ import annotations

import enum
from typing import Any


class ProtoEnum(enum.IntEnum):
    """Base class for protobuf enums.

    Calling the class with an integer that no member declares does not
    raise. It returns an *unrecognized* pseudo-member that keeps the raw
    value, so data written by a newer schema survives a decode/encode
    round trip unchanged::

        class Color(ProtoEnum):
            RED = 1
            GREEN = 2

        Color(7).recognized   # False
        int(Color(7))         # 7
    """

    @classmethod
    def _missing_(cls, value: Any) -> ProtoEnum | None:
        if isinstance(value, bool) or not isinstance(value, int):
            return None
        pseudo = int.__new__(cls, value)
        pseudo._name_ = f"UNRECOGNIZED_{value}"
        pseudo._value_ = value
        return pseudo

    @property
    def recognized(self) -> bool:
        """Whether this value is one of the declared members."""
        return self._name_ in type(self).__members__

    def __repr__(self) -> str:
        if self.recognized:
            return f"<{type(self).__name__}.{self._name_}: {self._value_}>"
        return f"<{type(self).__name__} unrecognized: {self._value_}>"
