"""bucketio -- whole-object reads and writes against S3-compatible storage."""

from bucketio.config import StorageConfig
from bucketio.connection import Connection, get_connection, get_handle, open_connection
from bucketio.exceptions import (
    BackendError,
    BucketioError,
    ClientConnectionError,
    InvalidArgumentError,
    LocalFileError,
    NotConnectedError,
    OutOfMemoryError,
    ReadOpenError,
    ReadStreamError,
    WriteCommitError,
    WriteOpenError,
)
from bucketio.general import Facility, Verbosity, facility
from bucketio.ports import ObjectMetadata, Readable, StorageBackend, Writable
from bucketio.read_write import CHUNK_SIZE, TransferBuffer, read_object, write_object

__all__ = [
    "CHUNK_SIZE",
    "BackendError",
    "BucketioError",
    "ClientConnectionError",
    "Connection",
    "Facility",
    "InvalidArgumentError",
    "LocalFileError",
    "NotConnectedError",
    "ObjectMetadata",
    "OutOfMemoryError",
    "ReadOpenError",
    "ReadStreamError",
    "Readable",
    "StorageBackend",
    "StorageConfig",
    "TransferBuffer",
    "Verbosity",
    "WriteCommitError",
    "WriteOpenError",
    "Writable",
    "facility",
    "get_connection",
    "get_handle",
    "open_connection",
    "read_object",
    "write_object",
]
