"""Whole-object read and write routines.

:func:`read_object` streams an object into a :class:`TransferBuffer` that
grows by one chunk per read; :func:`write_object` sends a fully buffered
payload in a single write and checks the commit confirmation.

Both record failures in the ``read_write`` error slot of the connection's
facility before raising.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from bucketio.config import DEFAULT_CHUNK_SIZE
from bucketio.connection import get_connection
from bucketio.exceptions import (
    READ_WRITE,
    BackendError,
    InvalidArgumentError,
    OutOfMemoryError,
    ReadOpenError,
    ReadStreamError,
    WriteCommitError,
    WriteOpenError,
)
from bucketio.general import Verbosity

if TYPE_CHECKING:
    from collections.abc import Callable

    from bucketio.connection import Connection
    from bucketio.ports import ObjectMetadata, Readable

CHUNK_SIZE = DEFAULT_CHUNK_SIZE
"""Buffer growth increment and size of each read attempt (1 MiB)."""


class TransferBuffer:
    """Growable byte region with a logical length.

    ``capacity`` only ever grows, one chunk at a time; ``length`` is the
    number of valid bytes and is the authoritative size of the content.
    """

    def __init__(self) -> None:
        """Create an empty buffer with no storage allocated."""
        self._data = bytearray()
        self.length = 0

    @property
    def capacity(self) -> int:
        return len(self._data)

    @property
    def view(self) -> memoryview:
        """Zero-copy view of the valid bytes."""
        return memoryview(self._data)[: self.length]

    def tobytes(self) -> bytes:
        """Copy of the valid bytes."""
        return bytes(self._data[: self.length])

    def grow(self, increment: int) -> None:
        """Ensure room for *increment* more bytes after ``length``."""
        missing = self.length + increment - len(self._data)
        if missing > 0:
            self._data.extend(bytes(missing))

    def put(self, chunk: bytes) -> None:
        """Copy *chunk* to offset ``length`` without advancing it."""
        self._data[self.length : self.length + len(chunk)] = chunk

    def release(self) -> None:
        """Drop the storage; the buffer becomes empty."""
        self._data = bytearray()
        self.length = 0

    def __len__(self) -> int:
        return self.length

    def __bytes__(self) -> bytes:
        return self.tobytes()

    def __repr__(self) -> str:
        return f"TransferBuffer(length={self.length}, capacity={self.capacity})"


def _require_name(value: object, name: str, code: int, where: str) -> None:
    """Raise ``InvalidArgumentError`` unless *value* is a non-empty string."""
    if not isinstance(value, str) or not value:
        msg = f"{where}: {name} was empty."
        raise InvalidArgumentError(msg, code=code)


# ---------------------------------------------------------------------------
# Read
# ---------------------------------------------------------------------------


def read_object(
    bucket: str,
    key: str,
    *,
    connection: Connection | None = None,
    chunk_size: int | None = None,
    progress: Callable[[int], object] | None = None,
) -> TransferBuffer:
    """Read the whole of *key* in *bucket* into a new buffer.

    Parameters
    ----------
    bucket, key:
        Identify the object; both must be non-empty.
    connection:
        Open connection to use (default: the process-wide connection).
    chunk_size:
        Growth increment and read size; defaults to the connection config.
    progress:
        Called with the number of bytes accounted after every read.

    Raises
    ------
    InvalidArgumentError
        Empty *bucket*/*key* or a non-positive *chunk_size*.
    ReadOpenError
        The object could not be opened (missing, forbidden, network).
    ReadStreamError
        Reading failed before end-of-stream.
    OutOfMemoryError
        The buffer could not be grown.

    """
    conn = connection or get_connection()
    log = conn.log
    with log.recording(READ_WRITE):
        _require_name(bucket, "bucket", 1, "read_object")
        _require_name(key, "key", 2, "read_object")
        size = conn.config.chunk_size if chunk_size is None else chunk_size
        if size <= 0:
            msg = f"read_object: chunk_size must be positive, got {size}."
            raise InvalidArgumentError(msg, code=3)
        log.log_format(
            Verbosity.TERSE, "read_object(bucket=%s,key=%s):Started.", bucket, key
        )
        backend = conn.backend
        log.log_format(
            Verbosity.VERBOSE,
            "read_object:open_read_stream(bucket=%s,key=%s).",
            bucket,
            key,
        )
        try:
            stream = backend.open_read_stream(bucket, key)
        except BackendError as e:
            msg = (
                f"read_object: Failed to read '{key}' from '{bucket}' "
                f"with status '{e}'."
            )
            raise ReadOpenError(msg) from e
        try:
            buffer = _read_all(stream, bucket, key, size, progress)
        finally:
            _close_read_stream(stream, bucket, key)
        log.log_format(
            Verbosity.TERSE,
            "read_object(bucket=%s,key=%s):Finished reading %d bytes.",
            bucket,
            key,
            buffer.length,
        )
        return buffer


def _read_all(
    stream: Readable,
    bucket: str,
    key: str,
    size: int,
    progress: Callable[[int], object] | None,
) -> TransferBuffer:
    """Drain *stream* into a buffer grown by *size* per read."""
    buffer = TransferBuffer()
    done = False
    while not done:
        try:
            buffer.grow(size)
        except MemoryError as e:
            length = buffer.length
            buffer.release()
            msg = (
                f"read_object: Failed to read '{key}' from '{bucket}': "
                f"memory allocation error with size {length}."
            )
            raise OutOfMemoryError(msg) from e
        try:
            chunk = stream.read(size)
        except BackendError as e:
            transferred = buffer.length
            buffer.release()
            msg = (
                f"read_object: Failed to read '{key}' from '{bucket}': "
                f"read failed after {transferred} bytes ({e})."
            )
            raise ReadStreamError(msg, transferred=transferred) from e
        buffer.put(chunk)
        if stream.eof:
            accounted = len(chunk)
            done = True
        elif len(chunk) == size:
            accounted = size
        else:
            transferred = buffer.length + len(chunk)
            buffer.release()
            msg = (
                f"read_object: Failed to read '{key}' from '{bucket}': "
                f"short read of {len(chunk)} of {size} bytes "
                f"without end-of-stream after {transferred} bytes."
            )
            raise ReadStreamError(msg, transferred=transferred)
        buffer.length += accounted
        if progress is not None:
            progress(accounted)
    return buffer


def _close_read_stream(stream: Readable, bucket: str, key: str) -> None:
    """Close *stream*; failures are logged and never change the outcome."""
    try:
        stream.close()
    except (BackendError, OSError) as e:
        logger.warning(f"Failed to close read stream for s3://{bucket}/{key}: {e}")


# ---------------------------------------------------------------------------
# Write
# ---------------------------------------------------------------------------


def write_object(
    bucket: str,
    key: str,
    data: bytes | bytearray | memoryview,
    *,
    connection: Connection | None = None,
) -> ObjectMetadata:
    """Write *data* as object *key* in *bucket* and return its metadata.

    Zero-length *data* is rejected with ``InvalidArgumentError``.  When the
    commit fails a ``WriteCommitError`` is raised; the remote object may be
    partially written and is not rolled back.
    """
    conn = connection or get_connection()
    log = conn.log
    with log.recording(READ_WRITE):
        _require_name(bucket, "bucket", 5, "write_object")
        _require_name(key, "key", 6, "write_object")
        if data is None:
            msg = "write_object: data was None."
            raise InvalidArgumentError(msg, code=7)
        length = memoryview(data).nbytes
        if length == 0:
            msg = "write_object: data length was 0."
            raise InvalidArgumentError(msg, code=8)
        log.log_format(
            Verbosity.INTERMEDIATE,
            "write_object:Starting writing %d bytes to bucket '%s' key '%s'.",
            length,
            bucket,
            key,
        )
        backend = conn.backend
        log.log_format(
            Verbosity.VERBOSE,
            "write_object:open_write_stream(bucket=%s,key=%s).",
            bucket,
            key,
        )
        try:
            stream = backend.open_write_stream(bucket, key)
        except BackendError as e:
            msg = (
                f"write_object: Failed to write '{key}' to '{bucket}' "
                f"with status '{e}'."
            )
            raise WriteOpenError(msg) from e
        try:
            stream.write(data)
            log.log(Verbosity.VERY_VERBOSE, "write_object:Closing stream.")
            metadata = stream.close()
        except BackendError as e:
            msg = (
                f"write_object: Failed to write '{key}' to '{bucket}' "
                f"with status '{e}'."
            )
            raise WriteCommitError(msg) from e
        log.log_format(
            Verbosity.INTERMEDIATE,
            "write_object:Finished writing to bucket '%s' key '%s'.",
            bucket,
            key,
        )
        return metadata
