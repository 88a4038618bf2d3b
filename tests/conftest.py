"""Shared pytest fixtures for protowire tests.

Provides configuration objects isolated from the environment, trace
loggers, and populated reference messages used across test modules.
"""

from __future__ import annotations

import pytest

from protowire.config import CodecConfig
from protowire.logging import CodecLogger
from protowire.proto.unittest_pb2 import AllTypes, ForeignMessage


@pytest.fixture
def default_config() -> CodecConfig:
    """Return a CodecConfig with all default values, ignoring any .env file."""
    return CodecConfig(_env_file=None)  # type: ignore[call-arg]


@pytest.fixture
def lenient_config() -> CodecConfig:
    """Return a config that accepts invalid UTF-8 in string fields."""
    return CodecConfig(_env_file=None, validate_utf8=False)  # type: ignore[call-arg]


@pytest.fixture
def diagnostic_trace() -> CodecLogger:
    """Return a silent trace logger that keeps every record in memory."""
    config = CodecConfig(
        _env_file=None,
        log_level="none",
        diagnostic_mode=True,  # type: ignore[call-arg]
    )
    return CodecLogger(config)


@pytest.fixture
def all_types_message() -> AllTypes:
    """Return an AllTypes with every kind of field populated.

    Float values are exactly representable at float32 precision.
    """
    return AllTypes(
        optional_int32=-42,
        optional_int64=-(1 << 40),
        optional_uint32=(1 << 32) - 1,
        optional_uint64=(1 << 64) - 1,
        optional_sint32=-7,
        optional_sint64=1 << 50,
        optional_fixed32=0xDEADBEEF,
        optional_fixed64=0x0123456789ABCDEF,
        optional_sfixed32=-2,
        optional_sfixed64=-(1 << 62),
        optional_float=1.5,
        optional_double=3.141592653589793,
        optional_bool=True,
        optional_string="héllo wörld",
        optional_bytes=b"\x00\xff\x10",
        optional_nested_message=AllTypes.NestedMessage(bb=17),
        optional_foreign_message=ForeignMessage(c=1, d=2),
        optional_nested_enum=AllTypes.NestedEnum.BAZ,
        optional_foreign_enum=5,
        recursive=AllTypes(optional_int32=1),
        repeated_int32=[1, -1, 300],
        repeated_string=["a", "", "c"],
        repeated_nested_message=[AllTypes.NestedMessage(bb=1), AllTypes.NestedMessage()],
        repeated_nested_enum=[AllTypes.NestedEnum.FOO, AllTypes.NestedEnum.NEG],
        packed_int32=[0, 1, -1, 1 << 20],
        packed_double=[0.5, -2.25],
        packed_fixed32=[1, 0xFFFFFFFF],
        packed_sint64=[-1, 1, -(1 << 40)],
    )
