"""Trace logging subsystem for protowire.

Provides immutable per-call codec records and a configurable logger
that supports none/summary/full verbosity and in-memory diagnostic mode.
"""

from protowire.logging.logger import CodecLogger
from protowire.logging.types import CodecRecord

__all__ = [
    "CodecLogger",
    "CodecRecord",
]
