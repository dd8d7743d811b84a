"""Custom exception hierarchy for bucketio.

All library-specific exceptions inherit from ``BucketioError`` so consumers
can catch ``except BucketioError`` to handle any bucketio failure.

Each error carries a numeric ``code`` and the name of the facility error
slot (``module``) it is recorded in, see :mod:`bucketio.general`.
"""

from __future__ import annotations

CONNECTION = "connection"
READ_WRITE = "read_write"
GENERAL = "general"


class BucketioError(Exception):
    """Base exception for all bucketio errors."""

    code: int = 1
    module: str = GENERAL

    def __init__(self, message: str, *, code: int | None = None) -> None:
        """Initialize with a message and an optional explicit error code."""
        super().__init__(message)
        if code is not None:
            self.code = code


class BackendError(BucketioError):
    """Raised by storage adapters when the backend reports a failure.

    The message is the backend's own status text; the transfer engine wraps
    it into one of the typed errors below.
    """


# ---------------------------------------------------------------------------
# Connection
# ---------------------------------------------------------------------------


class ClientConnectionError(BucketioError):
    """Raised when the storage client cannot be constructed."""

    code = 1
    module = CONNECTION


class NotConnectedError(BucketioError):
    """Raised when the client handle is requested before ``open()``."""

    code = 2
    module = CONNECTION


# ---------------------------------------------------------------------------
# Read / write
# ---------------------------------------------------------------------------


class InvalidArgumentError(BucketioError):
    """Raised for empty identifiers, missing data or zero-length writes."""

    module = READ_WRITE


class ReadOpenError(BucketioError):
    """Raised when a readable stream cannot be opened."""

    code = 9
    module = READ_WRITE


class OutOfMemoryError(BucketioError):
    """Raised when the transfer buffer cannot be grown."""

    code = 10
    module = READ_WRITE


class WriteOpenError(BucketioError):
    """Raised when a writable stream cannot be opened."""

    code = 11
    module = READ_WRITE


class ReadStreamError(BucketioError):
    """Raised when reading from an open stream fails before end-of-stream."""

    code = 12
    module = READ_WRITE

    def __init__(self, message: str, *, transferred: int = 0) -> None:
        """Initialize with the number of bytes read before the failure."""
        super().__init__(message)
        self.transferred = transferred


class WriteCommitError(BucketioError):
    """Raised when finalizing a write does not confirm the object.

    The object may have been partially written remotely; nothing is rolled
    back.
    """

    code = 13
    module = READ_WRITE


# ---------------------------------------------------------------------------
# Front-ends
# ---------------------------------------------------------------------------


class LocalFileError(BucketioError):
    """Raised when a local file cannot be loaded or saved."""
