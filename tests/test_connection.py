"""Tests for the connection holder with boto3 patched out."""

from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ProfileNotFound

from bucketio import connection as connection_module
from bucketio.config import StorageConfig
from bucketio.connection import Connection, get_connection, get_handle, open_connection
from bucketio.exceptions import CONNECTION, ClientConnectionError, NotConnectedError
from bucketio.general import Facility, facility
from bucketio.read_write import read_object
from bucketio.s3_backend import S3Backend


def _recording_session(
    monkeypatch: pytest.MonkeyPatch,
) -> tuple[MagicMock, list[dict[str, Any]], list[dict[str, Any]]]:
    """Patch boto3.Session, recording session and client kwargs."""
    client = MagicMock(name="s3_client")
    session_kwargs: list[dict[str, Any]] = []
    client_kwargs: list[dict[str, Any]] = []

    def _client(service: str, **kwargs: Any) -> MagicMock:
        assert service == "s3"
        client_kwargs.append(kwargs)
        return client

    def _session(**kwargs: Any) -> MagicMock:
        session_kwargs.append(kwargs)
        return MagicMock(client=_client)

    monkeypatch.setattr("bucketio.connection.boto3.Session", _session)
    return client, session_kwargs, client_kwargs


def test_open_builds_client_from_config(
    monkeypatch: pytest.MonkeyPatch,
    log: Facility,
) -> None:
    client, session_kwargs, client_kwargs = _recording_session(monkeypatch)
    cfg = StorageConfig(
        endpoint_url="https://storage.googleapis.com",
        region_name="auto",
        profile_name="gcs",
    )
    conn = Connection(cfg, log=log)

    conn.open()

    assert conn.is_open
    assert conn.handle is client
    assert isinstance(conn.backend, S3Backend)
    assert session_kwargs == [{"profile_name": "gcs"}]
    assert client_kwargs == [
        {"endpoint_url": "https://storage.googleapis.com", "region_name": "auto"}
    ]
    assert log.get_error_number(CONNECTION) == 0


def test_open_defaults_to_ambient_endpoint(
    monkeypatch: pytest.MonkeyPatch,
    log: Facility,
) -> None:
    _client, _session, client_kwargs = _recording_session(monkeypatch)

    Connection(log=log).open()

    assert client_kwargs == [{"endpoint_url": None, "region_name": None}]


def test_second_open_replaces_handle(
    monkeypatch: pytest.MonkeyPatch,
    log: Facility,
) -> None:
    clients = [MagicMock(name="first"), MagicMock(name="second")]
    monkeypatch.setattr(
        "bucketio.connection.boto3.Session",
        lambda **_kw: MagicMock(client=lambda *_a, **_kw: clients.pop(0)),
    )
    conn = Connection(log=log)

    conn.open()
    first = conn.handle
    conn.open()

    assert conn.handle is not first


def test_open_failure_raises_connection_error(
    monkeypatch: pytest.MonkeyPatch,
    log: Facility,
) -> None:
    def _session(**_kwargs: Any) -> MagicMock:
        raise ProfileNotFound(profile="missing")

    monkeypatch.setattr("bucketio.connection.boto3.Session", _session)
    conn = Connection(StorageConfig(profile_name="missing"), log=log)

    with pytest.raises(ClientConnectionError, match="missing"):
        conn.open()

    assert not conn.is_open
    assert log.get_error_number(CONNECTION) == 1
    assert "Connection.open" in log.error_to_string()


def test_failed_reopen_drops_previous_handle(
    monkeypatch: pytest.MonkeyPatch,
    log: Facility,
) -> None:
    _recording_session(monkeypatch)
    conn = Connection(log=log)
    conn.open()
    assert conn.is_open

    def _session(**_kwargs: Any) -> MagicMock:
        raise ProfileNotFound(profile="other")

    monkeypatch.setattr("bucketio.connection.boto3.Session", _session)
    conn.config = StorageConfig(profile_name="other")

    with pytest.raises(ClientConnectionError):
        conn.open()

    assert not conn.is_open
    with pytest.raises(NotConnectedError):
        read_object("bucket", "key", connection=conn)
    assert log.get_error_number(CONNECTION) == 2


def test_invalid_endpoint_raises_connection_error(
    monkeypatch: pytest.MonkeyPatch,
    log: Facility,
) -> None:
    def _client(*_args: Any, **_kwargs: Any) -> MagicMock:
        msg = "Invalid endpoint: not a url"
        raise ValueError(msg)

    monkeypatch.setattr(
        "bucketio.connection.boto3.Session", lambda **_kw: MagicMock(client=_client)
    )

    with pytest.raises(ClientConnectionError, match="Invalid endpoint"):
        Connection(StorageConfig(endpoint_url="not a url"), log=log).open()


def test_handle_before_open_fails(log: Facility) -> None:
    conn = Connection(log=log)

    with pytest.raises(NotConnectedError):
        _ = conn.handle
    with pytest.raises(NotConnectedError):
        _ = conn.backend

    assert log.get_error_number(CONNECTION) == 2


def test_default_connection_helpers(fake_s3: MagicMock) -> None:
    with pytest.raises(NotConnectedError):
        get_handle()
    assert facility.get_error_number(CONNECTION) == 2

    conn = open_connection(StorageConfig(region_name="eu-west-1"))

    assert conn is get_connection()
    assert get_handle() is fake_s3
    assert conn.config.region_name == "eu-west-1"
    assert facility.get_error_number(CONNECTION) == 0


def test_default_connection_loads_config(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text("storage:\n  chunk_size: 4096\n", encoding="utf-8")
    monkeypatch.setenv("BUCKETIO_CONFIG", str(cfg_path))

    assert get_connection().config.chunk_size == 4096
    assert connection_module._default_connection is get_connection()
