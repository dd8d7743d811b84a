"""Shared pytest fixtures for bucketio tests."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import MagicMock

import pytest

from bucketio.config import StorageConfig
from bucketio.connection import Connection
from bucketio.exceptions import CONNECTION, GENERAL, READ_WRITE
from bucketio.general import ErrorState, Facility, LogConfig, facility
from tests.fixtures.fake_storage import FakeStorage

if TYPE_CHECKING:
    from collections.abc import Callable


@pytest.fixture(autouse=True)
def _isolate_default_facility(monkeypatch: pytest.MonkeyPatch) -> None:
    """Give every test a clean process-wide facility and no config leakage."""
    monkeypatch.setattr(facility, "log_config", LogConfig())
    monkeypatch.setattr(
        facility,
        "errors",
        {name: ErrorState() for name in (CONNECTION, READ_WRITE, GENERAL)},
    )
    monkeypatch.setattr("bucketio.connection._default_connection", None)
    for name in (
        "BUCKETIO_CONFIG",
        "BUCKETIO_ENDPOINT_URL",
        "BUCKETIO_REGION",
        "BUCKETIO_CHUNK_SIZE",
        "BUCKETIO_LOG_LEVEL",
        "BUCKETIO_LOG_SINK",
        "AWS_PROFILE",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake_s3(monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    """Patch boto3.Session in the connection module to hand out a mock client."""
    client = MagicMock(name="s3_client")
    monkeypatch.setattr(
        "bucketio.connection.boto3.Session",
        lambda **_kw: MagicMock(client=lambda *_a, **_kw: client),
    )
    return client


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def log() -> Facility:
    return Facility()


@pytest.fixture
def make_connection(
    fake_s3: MagicMock,  # noqa: ARG001
    storage: FakeStorage,
    log: Facility,
) -> Callable[..., Connection]:
    """Build an opened ``Connection`` whose backend is the fake storage."""

    def _make(**config: object) -> Connection:
        conn = Connection(
            StorageConfig(**config),  # type: ignore[arg-type]
            log=log,
            backend_factory=lambda _client: storage,
        )
        conn.open()
        return conn

    return _make


@pytest.fixture
def conn(make_connection: Callable[..., Connection]) -> Connection:
    return make_connection()
