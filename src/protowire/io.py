"""Byte-level I/O helpers around the codec.

The codec never touches files or streams; these helpers read an encoded
buffer completely and write encoded output exactly. A partial read is
never treated as the whole input: reads continue until EOF, and an
interrupted read is retried. A non-blocking stream that is not ready is
waited on with :mod:`selectors` until its descriptor becomes ready.
"""

from __future__ import annotations

import logging
import selectors
import sys
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO, TypeVar

from protowire.codec.decoder import decode_message
from protowire.codec.encoder import encode_message
from protowire.config import default_config
from protowire.exceptions import ReadFailure, WriteFailure

if TYPE_CHECKING:
    from protowire.config import CodecConfig
    from protowire.exceptions import ProtoWireError
    from protowire.message.base import Message
    from protowire.registry import ExtensionRegistry

M = TypeVar("M", bound="Message")

logger = logging.getLogger("protowire")


def _wait_ready(stream: BinaryIO, events: int, failure: type[ProtoWireError], context: str) -> None:
    """Block until the descriptor behind *stream* is ready for *events*.

    Raises:
        failure: If *stream* has no file descriptor to wait on.
    """
    try:
        fd = stream.fileno()
    except (AttributeError, OSError, ValueError) as exc:
        raise failure(f"Stream would block {context} and has no descriptor to wait on") from exc
    with selectors.DefaultSelector() as selector:
        selector.register(fd, events)
        selector.select()


def read_all(stream: BinaryIO, chunk_size: int | None = None) -> bytes:
    """Read *stream* until EOF.

    Args:
        stream: A binary stream (file object, ``sys.stdin.buffer``, socket file).
        chunk_size: Bytes requested per ``read()``; from config if omitted.

    Returns:
        Every byte up to EOF.

    Raises:
        ReadFailure: If the stream raises an ``OSError`` other than an
            interrupted system call, or would block without a descriptor.
    """
    size = chunk_size or default_config().read_chunk_size
    buffer = bytearray()
    while True:
        try:
            chunk = stream.read(size)
        except InterruptedError:
            continue
        except BlockingIOError:
            chunk = None
        except OSError as exc:
            raise ReadFailure(f"Read failed after {len(buffer)} bytes: {exc}") from exc
        if chunk is None:
            _wait_ready(stream, selectors.EVENT_READ, ReadFailure, f"after {len(buffer)} bytes")
            continue
        if not chunk:
            return bytes(buffer)
        buffer += chunk


def write_exact(stream: BinaryIO, data: bytes) -> None:
    """Write every byte of *data* to *stream*, then flush.

    Raw streams may accept fewer bytes than offered; the remainder is
    written in further calls. Bytes a buffered stream reports as written
    in a ``BlockingIOError`` count towards the total.

    Raises:
        WriteFailure: If the stream raises ``OSError``, stops accepting
            bytes, or would block without a descriptor.
    """
    view = memoryview(data)
    written = 0
    while written < len(view):
        try:
            count = stream.write(view[written:])
        except InterruptedError:
            continue
        except BlockingIOError as exc:
            written += exc.characters_written
            count = None
        except OSError as exc:
            raise WriteFailure(
                f"Write failed after {written} of {len(view)} bytes: {exc}"
            ) from exc
        if count is None:
            context = f"after {written} of {len(view)} bytes"
            _wait_ready(stream, selectors.EVENT_WRITE, WriteFailure, context)
            continue
        if count == 0:
            raise WriteFailure(f"Stream accepted no bytes after {written} of {len(view)}")
        written += count
    try:
        stream.flush()
    except OSError as exc:
        raise WriteFailure(f"Flush failed: {exc}") from exc


def read_stdin() -> bytes:
    """Read standard input until EOF."""
    return read_all(sys.stdin.buffer)


def write_stdout(data: bytes) -> None:
    """Write *data* exactly to standard output."""
    write_exact(sys.stdout.buffer, data)


def print_stderr(message: str, config: CodecConfig | None = None) -> None:
    """Write one line to stderr, prefixed with the configured program name."""
    program = (config or default_config()).program_name
    sys.stderr.write(f"{program}: {message}\n")
    sys.stderr.flush()


def read_file(path: str | Path) -> bytes:
    """Return the full contents of *path*.

    Raises:
        ReadFailure: If the file cannot be opened or read.
    """
    try:
        with open(path, "rb") as handle:
            return read_all(handle)
    except OSError as exc:
        raise ReadFailure(f"Cannot read {path}: {exc}") from exc


def write_file(path: str | Path, data: bytes) -> None:
    """Replace the contents of *path* with *data*.

    Raises:
        WriteFailure: If the file cannot be opened or written.
    """
    try:
        with open(path, "wb") as handle:
            write_exact(handle, data)
    except OSError as exc:
        raise WriteFailure(f"Cannot write {path}: {exc}") from exc
    logger.debug("Wrote %d bytes to %s", len(data), path)


def load_message(
    path: str | Path,
    message_cls: type[M],
    registry: ExtensionRegistry | None = None,
    config: CodecConfig | None = None,
) -> M:
    """Read *path* and decode it as *message_cls*.

    Raises:
        ReadFailure: If the file cannot be read.
        MalformedWireData: If the contents are not valid wire data.
    """
    return decode_message(message_cls, read_file(path), registry=registry, config=config)


def dump_message(path: str | Path, message: Message) -> None:
    """Encode *message* and write it to *path*.

    Raises:
        WriteFailure: If the file cannot be written.
        UnsupportedFieldNumber: If an extension value is out of range.
    """
    write_file(path, encode_message(message))
