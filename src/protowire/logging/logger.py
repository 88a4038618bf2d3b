"""Trace logger for encode and decode calls.

Uses the standard ``logging`` module with the ``"protowire"`` logger.
No ``print()`` statements. Supports three verbosity levels and an
in-memory diagnostic mode for post-hoc analysis.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import asdict
from typing import TYPE_CHECKING, Any

from protowire.logging.types import CodecRecord

if TYPE_CHECKING:
    from protowire.config import CodecConfig
    from protowire.message.base import Message

logger = logging.getLogger("protowire")


class CodecLogger:
    """Per-call codec trace logger.

    Log levels:
        ``"none"``: No logging output. Records are still stored if
        ``diagnostic_mode=True``.

        ``"summary"``: One line per call with the message type, size,
        field counts and timing.

        ``"full"``: Full JSON dump of all record fields.

    Diagnostic mode stores all records in memory for later inspection via
    ``get_diagnostic_data()`` and ``get_summary_stats()``.
    """

    def __init__(self, config: CodecConfig) -> None:
        """Initialize the logger from configuration.

        Args:
            config: Configuration providing ``log_level`` and ``diagnostic_mode``.
        """
        self._log_level = config.log_level
        self._diagnostic_mode = config.diagnostic_mode
        self._records: list[CodecRecord] = []

    def record_call(
        self,
        operation: str,
        message: Message,
        byte_count: int,
        started_ns: int,
    ) -> CodecRecord:
        """Build a record for a finished call on *message* and log it.

        Args:
            operation: ``"encode"`` or ``"decode"``.
            message: The top-level message that was encoded or decoded.
            byte_count: Size of the wire data.
            started_ns: ``time.perf_counter_ns()`` taken when the call began.

        Returns:
            The logged record.
        """
        record = CodecRecord(
            timestamp_ns=time.time_ns(),
            operation=operation,
            message_type=message.full_name,
            byte_count=byte_count,
            declared_fields=len(message.ListFields()),
            extension_fields=len(message.extensions),
            unknown_fields=len(message.unknown_fields),
            elapsed_ms=(time.perf_counter_ns() - started_ns) / 1e6,
        )
        self.log_record(record)
        return record

    def log_record(self, record: CodecRecord) -> None:
        """Log a single codec record.

        Args:
            record: Immutable record of one encode or decode call.
        """
        if self._diagnostic_mode:
            self._records.append(record)

        if self._log_level == "none":
            return

        if self._log_level == "summary":
            logger.info(
                "%s %s bytes=%d fields=%d extensions=%d unknown=%d time=%.3fms",
                record.operation,
                record.message_type,
                record.byte_count,
                record.declared_fields,
                record.extension_fields,
                record.unknown_fields,
                record.elapsed_ms,
            )
        elif self._log_level == "full":
            logger.info("codec_record: %s", json.dumps(asdict(record)))

    def get_diagnostic_data(self) -> list[CodecRecord]:
        """Return all stored records (requires ``diagnostic_mode=True``).

        Returns:
            List of all CodecRecord instances logged so far.
            Empty if diagnostic_mode is False.
        """
        return list(self._records)

    def get_summary_stats(self) -> dict[str, Any]:
        """Compute summary statistics over all stored records.

        Returns:
            Dictionary with aggregate stats, or empty dict if no records.
        """
        if not self._records:
            return {}

        sizes = [r.byte_count for r in self._records]
        times = [r.elapsed_ms for r in self._records]
        n = len(self._records)
        return {
            "total_calls": n,
            "encode_calls": sum(1 for r in self._records if r.operation == "encode"),
            "decode_calls": sum(1 for r in self._records if r.operation == "decode"),
            "total_bytes": sum(sizes),
            "mean_bytes": sum(sizes) / n,
            "max_bytes": max(sizes),
            "mean_elapsed_ms": sum(times) / n,
            "max_elapsed_ms": max(times),
            "unknown_field_count": sum(r.unknown_fields for r in self._records),
        }
