"""Protocols defining the storage backend boundary.

``StorageBackend`` is the single seam between the transfer engine and a
storage SDK.  In production it is satisfied by ``S3Backend``; in tests an
in-memory fake can be used instead.
"""

from __future__ import annotations

from typing import Protocol

from pydantic import BaseModel


class ObjectMetadata(BaseModel):
    """Confirmation returned by a committed write."""

    bucket: str
    key: str
    size: int
    etag: str = ""


class Readable(Protocol):
    """Sequential read channel bound to one object."""

    @property
    def eof(self) -> bool:
        """True once a read has hit the end of the object."""
        ...

    def read(self, size: int) -> bytes:
        """Return the next *size* bytes.

        Fewer bytes are returned only by the read that reaches end-of-stream,
        which also sets :attr:`eof`.  Failures raise ``BackendError``.
        """
        ...

    def close(self) -> None:
        """Release the underlying connection."""
        ...


class Writable(Protocol):
    """Sequential write channel bound to one object."""

    def write(self, data: bytes | bytearray | memoryview) -> None:
        """Queue *data* for the object."""
        ...

    def close(self) -> ObjectMetadata:
        """Finalize the object and return its metadata.

        Raises ``BackendError`` when the backend does not confirm the write.
        """
        ...


class StorageBackend(Protocol):
    """Minimal interface for the object operations used by the engine."""

    def open_read_stream(self, bucket: str, key: str) -> Readable:
        """Open *key* in *bucket* for reading; raises ``BackendError``."""
        ...

    def open_write_stream(self, bucket: str, key: str) -> Writable:
        """Open *key* in *bucket* for writing; raises ``BackendError``."""
        ...
