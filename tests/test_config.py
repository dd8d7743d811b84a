"""Tests for StorageConfig load/save and env overrides."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from loguru import logger

from bucketio.config import DEFAULT_CHUNK_SIZE, StorageConfig, get_config_path


def _write_yaml(path: Path, data: object) -> Path:
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


def _capture_warnings() -> tuple[list[str], int]:
    messages: list[str] = []
    sink_id = logger.add(lambda msg: messages.append(str(msg)), level="WARNING")
    return messages, sink_id


def test_defaults() -> None:
    cfg = StorageConfig()
    assert cfg.endpoint_url is None
    assert cfg.chunk_size == DEFAULT_CHUNK_SIZE
    assert cfg.log_level == 0
    assert cfg.log_sink == "stdout"


def test_chunk_size_must_be_positive() -> None:
    with pytest.raises(ValueError, match="chunk_size must be positive"):
        StorageConfig(chunk_size=0)


def test_load_from_file(tmp_path: Path) -> None:
    cfg_path = _write_yaml(
        tmp_path / "config.yaml",
        {
            "storage": {
                "endpoint_url": "https://storage.googleapis.com",
                "chunk_size": 4096,
                "log_level": 3,
                "unknown_key": "ignored",
            },
        },
    )

    cfg = StorageConfig.load(cfg_path)

    assert cfg.endpoint_url == "https://storage.googleapis.com"
    assert cfg.chunk_size == 4096
    assert cfg.log_level == 3


def test_load_missing_file_gives_defaults(tmp_path: Path) -> None:
    assert StorageConfig.load(tmp_path / "nonexistent.yaml") == StorageConfig()


def test_env_overrides_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    cfg_path = _write_yaml(
        tmp_path / "config.yaml",
        {"storage": {"region_name": "us-east-1", "chunk_size": 4096}},
    )
    monkeypatch.setenv("BUCKETIO_REGION", "eu-west-1")
    monkeypatch.setenv("BUCKETIO_LOG_LEVEL", "5")
    monkeypatch.setenv("BUCKETIO_LOG_SINK", "loguru")

    cfg = StorageConfig.load(cfg_path)

    assert cfg.region_name == "eu-west-1"
    assert cfg.chunk_size == 4096
    assert cfg.log_level == 5
    assert cfg.log_sink == "loguru"


def test_config_path_from_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BUCKETIO_CONFIG", str(tmp_path / "custom.yaml"))
    assert get_config_path() == tmp_path / "custom.yaml"
    assert get_config_path(tmp_path / "explicit.yaml") == tmp_path / "explicit.yaml"


def test_invalid_env_integer_is_ignored(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BUCKETIO_CHUNK_SIZE", "lots")
    messages, sink_id = _capture_warnings()
    try:
        cfg = StorageConfig.from_env()
    finally:
        logger.remove(sink_id)

    assert cfg.chunk_size == DEFAULT_CHUNK_SIZE
    assert any("BUCKETIO_CHUNK_SIZE" in m for m in messages)


def test_invalid_section_falls_back_to_defaults(tmp_path: Path) -> None:
    cfg_path = _write_yaml(tmp_path / "config.yaml", {"storage": {"chunk_size": -1}})
    messages, sink_id = _capture_warnings()
    try:
        cfg = StorageConfig.from_file(cfg_path)
    finally:
        logger.remove(sink_id)

    assert cfg == StorageConfig()
    assert any("storage" in m for m in messages)


def test_non_mapping_file_is_ignored(tmp_path: Path) -> None:
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text("- just\n- a list\n", encoding="utf-8")
    assert StorageConfig.from_file(cfg_path) == StorageConfig()


def test_broken_yaml_falls_back_to_defaults(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text("storage: [unclosed\n  chunk_size: 4096\n", encoding="utf-8")
    monkeypatch.setenv("BUCKETIO_REGION", "eu-west-1")
    messages, sink_id = _capture_warnings()
    try:
        cfg = StorageConfig.load(cfg_path)
    finally:
        logger.remove(sink_id)

    assert cfg.chunk_size == DEFAULT_CHUNK_SIZE
    assert cfg.region_name == "eu-west-1"
    assert any("Failed to load config" in m for m in messages)


def test_save_preserves_other_sections(tmp_path: Path) -> None:
    cfg_path = _write_yaml(
        tmp_path / "config.yaml",
        {"other_tool": {"host": "http://localhost:8080"}, "storage": {"log_level": 1}},
    )

    StorageConfig(region_name="auto", chunk_size=2048).save_to_file(cfg_path)

    with cfg_path.open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    assert data["other_tool"]["host"] == "http://localhost:8080"
    assert data["storage"]["region_name"] == "auto"
    assert data["storage"]["chunk_size"] == 2048
    assert "endpoint_url" not in data["storage"]
    assert StorageConfig.from_file(cfg_path).chunk_size == 2048
