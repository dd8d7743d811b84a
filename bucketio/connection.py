"""Connection holder: owns the storage client handle.

The handle is created by an explicit :meth:`Connection.open` using ambient
credentials and is never closed; callers borrow it through
:attr:`Connection.handle` or the :attr:`Connection.backend` adapter.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import boto3
from botocore.exceptions import BotoCoreError

from bucketio.config import StorageConfig
from bucketio.exceptions import CONNECTION, ClientConnectionError, NotConnectedError
from bucketio.general import Facility, Verbosity, facility
from bucketio.s3_backend import S3Backend, status_message

if TYPE_CHECKING:
    from collections.abc import Callable

    from bucketio.ports import StorageBackend
    from bucketio.s3_types import S3Client


class Connection:
    """A single lazily opened storage client.

    Not safe for concurrent use: a second :meth:`open` simply replaces the
    handle.  Create one ``Connection`` per thread if needed.
    """

    def __init__(
        self,
        config: StorageConfig | None = None,
        *,
        log: Facility | None = None,
        backend_factory: Callable[[S3Client], StorageBackend] = S3Backend,
    ) -> None:
        """Store settings; no network or credential access happens here."""
        self.config = config or StorageConfig()
        self.log = log or facility
        self._backend_factory = backend_factory
        self._client: S3Client | None = None
        self._backend: StorageBackend | None = None

    @property
    def is_open(self) -> bool:
        """True once :meth:`open` has succeeded."""
        return self._client is not None

    def open(self) -> None:
        """Create the client handle from the ambient credential chain.

        Raises ``ClientConnectionError`` when the session or client cannot
        be constructed (unknown profile, malformed endpoint, ...).  The
        previous handle is dropped first, so after a failed call the holder
        is unopened.
        """
        with self.log.recording(CONNECTION):
            self.log.log(Verbosity.TERSE, "Connection.open:Started.")
            self._client = None
            self._backend = None
            cfg = self.config
            try:
                session = boto3.Session(profile_name=cfg.profile_name)
                client: S3Client = session.client(
                    "s3",
                    endpoint_url=cfg.endpoint_url or None,
                    region_name=cfg.region_name or None,
                )
            except (BotoCoreError, ValueError) as e:
                msg = (
                    "Connection.open: Failed to create storage client: "
                    f"{status_message(e)}"
                )
                raise ClientConnectionError(msg) from e
            self._client = client
            self._backend = self._backend_factory(client)
            self.log.log_format(
                Verbosity.TERSE,
                "Connection.open:Finished (endpoint=%s).",
                cfg.endpoint_url or "default",
            )

    @property
    def handle(self) -> S3Client:
        """Return the client handle.

        Raises ``NotConnectedError`` when :meth:`open` has not succeeded.
        """
        if self._client is None:
            raise self._not_connected("Connection.handle")
        return self._client

    @property
    def backend(self) -> StorageBackend:
        """Return the storage adapter wrapping :attr:`handle`."""
        if self._backend is None:
            raise self._not_connected("Connection.backend")
        return self._backend

    def _not_connected(self, where: str) -> NotConnectedError:
        """Record and return the error for use before :meth:`open`."""
        msg = f"{where}: open() has not been called successfully."
        error = NotConnectedError(msg)
        self.log.set_error(CONNECTION, error.code, msg)
        return error


_default_connection: Connection | None = None


def get_connection() -> Connection:
    """Return the process-wide default connection (created unopened)."""
    global _default_connection  # noqa: PLW0603
    if _default_connection is None:
        _default_connection = Connection(StorageConfig.load())
    return _default_connection


def open_connection(config: StorageConfig | None = None) -> Connection:
    """Open the default connection, replacing its settings if *config* is given."""
    conn = get_connection()
    if config is not None:
        conn.config = config
    conn.open()
    return conn


def get_handle() -> S3Client:
    """Return the default connection's client handle."""
    return get_connection().handle
