"""boto3 adapter implementing ``StorageBackend``.

This is the only module that talks to the S3 API.  It converts botocore
failures into ``BackendError`` carrying the backend's status message.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from bucketio.exceptions import BackendError
from bucketio.ports import ObjectMetadata

if TYPE_CHECKING:
    from bucketio.s3_types import S3Client


def status_message(exc: Exception) -> str:
    """Return the backend status text of a botocore exception."""
    if isinstance(exc, ClientError):
        error = exc.response.get("Error", {})
        code = error.get("Code", "")
        message = error.get("Message") or str(exc)
        return f"{code}: {message}" if code else message
    return str(exc) or type(exc).__name__


def _request_body(parts: list[bytes | bytearray | memoryview]) -> bytes | bytearray:
    """Return a ``put_object`` body for *parts*.

    A single ``bytes``/``bytearray`` part is passed through as is; botocore
    does not accept ``memoryview`` bodies, so anything else is joined.
    """
    if len(parts) == 1 and isinstance(parts[0], (bytes, bytearray)):
        return parts[0]
    return b"".join(parts)


class S3ReadStream:
    """``Readable`` over the streaming body of a ``get_object`` response."""

    def __init__(self, body: Any) -> None:  # noqa: ANN401
        """Wrap a botocore ``StreamingBody``."""
        self._body = body
        self._eof = False

    @property
    def eof(self) -> bool:
        """True once a read has hit the end of the object."""
        return self._eof

    def read(self, size: int) -> bytes:
        """Read exactly *size* bytes unless the body ends first.

        ``StreamingBody.read`` may return short reads mid-object, so this
        keeps reading until *size* bytes are collected or a read comes back
        empty.
        """
        parts: list[bytes] = []
        remaining = size
        try:
            while remaining > 0:
                part = self._body.read(remaining)
                if not part:
                    self._eof = True
                    break
                parts.append(part)
                remaining -= len(part)
        except (BotoCoreError, OSError) as e:
            raise BackendError(status_message(e)) from e
        return b"".join(parts)

    def close(self) -> None:
        """Close the streaming body."""
        try:
            self._body.close()
        except (BotoCoreError, OSError) as e:
            raise BackendError(status_message(e)) from e


class S3WriteStream:
    """``Writable`` that collects data and commits it with ``put_object``."""

    def __init__(self, client: S3Client, bucket: str, key: str) -> None:
        """Bind the stream to one object."""
        self._client = client
        self._bucket = bucket
        self._key = key
        self._parts: list[bytes | bytearray | memoryview] = []

    def write(self, data: bytes | bytearray | memoryview) -> None:
        """Queue *data* for the object without copying it."""
        self._parts.append(data)

    def close(self) -> ObjectMetadata:
        """Upload the queued data and return the stored object's metadata."""
        body = _request_body(self._parts)
        self._parts.clear()
        try:
            resp = self._client.put_object(Bucket=self._bucket, Key=self._key, Body=body)
        except (BotoCoreError, ClientError) as e:
            raise BackendError(status_message(e)) from e
        etag = str(resp.get("ETag", "")).strip('"') if resp else ""
        if not etag:
            msg = "backend returned no object metadata"
            raise BackendError(msg)
        return ObjectMetadata(
            bucket=self._bucket,
            key=self._key,
            size=len(body),
            etag=etag,
        )


class S3Backend:
    """``StorageBackend`` implementation backed by a boto3 S3 client.

    The caller owns the client; this adapter is stateless.
    """

    def __init__(self, client: S3Client) -> None:
        """Wrap an already-created boto3 S3 client."""
        self.client = client

    def open_read_stream(self, bucket: str, key: str) -> S3ReadStream:
        """Issue ``get_object`` and return a stream over its body."""
        try:
            resp = self.client.get_object(Bucket=bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            raise BackendError(status_message(e)) from e
        logger.trace(
            f"get_object s3://{bucket}/{key}: "
            f"{resp.get('ContentLength', '?')} bytes announced"
        )
        return S3ReadStream(resp["Body"])

    def open_write_stream(self, bucket: str, key: str) -> S3WriteStream:
        """Return a stream committing *key* in *bucket* on close.

        Nothing is sent until :meth:`S3WriteStream.close`, so a missing
        bucket or denied access surfaces there.
        """
        return S3WriteStream(self.client, bucket, key)
