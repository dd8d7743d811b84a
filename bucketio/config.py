"""Configuration loading with priority: env > config file > defaults."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

import yaml
from loguru import logger
from pydantic import BaseModel, ValidationError, field_validator

CONFIG_DIR = Path.home() / ".config" / "bucketio"
CONFIG_PATH = CONFIG_DIR / "config.yaml"

SECTION = "storage"

DEFAULT_CHUNK_SIZE = 1024 * 1024


def get_config_path(config_path: Path | None = None) -> Path:
    """Return path to config file.

    Uses *config_path* if provided, otherwise BUCKETIO_CONFIG env var,
    otherwise default CONFIG_PATH.
    """
    if config_path is not None:
        return config_path
    path = os.environ.get("BUCKETIO_CONFIG")
    return Path(path) if path else CONFIG_PATH


def _load_raw_yaml(path: Path) -> dict[str, object]:
    """Load a YAML file and return its top-level mapping (or empty dict)."""
    if not path.is_file():
        return {}
    try:
        with path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Failed to load config from {path}: {e}")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Invalid config format in {path}; expected mapping.")
        return {}
    return data


class StorageConfig(BaseModel):
    """Storage backend connection and transfer settings.

    Credentials are never stored here: boto3 resolves them from its own
    ambient sources (environment, shared files, instance metadata).
    """

    endpoint_url: str | None = None
    region_name: str | None = None
    profile_name: str | None = None
    chunk_size: int = DEFAULT_CHUNK_SIZE
    log_level: int = 0
    log_sink: Literal["stdout", "loguru"] = "stdout"

    @field_validator("chunk_size")
    @classmethod
    def _positive_chunk_size(cls, value: int) -> int:
        if value <= 0:
            msg = f"chunk_size must be positive, got {value}"
            raise ValueError(msg)
        return value

    @classmethod
    def _from_section(cls, data: dict[str, object]) -> StorageConfig:
        """Build from a raw YAML top-level dict (reads the ``storage`` key)."""
        section = data.get(SECTION, {})
        if not isinstance(section, dict):
            return cls()
        fields = {k: v for k, v in section.items() if k in cls.model_fields}
        try:
            return cls(**fields)
        except ValidationError as e:
            logger.warning(f"Ignoring invalid '{SECTION}' config section: {e}")
            return cls()

    @classmethod
    def from_file(cls, path: Path = CONFIG_PATH) -> StorageConfig:
        """Load config from a YAML file.  Returns defaults if file is missing."""
        if not path.is_file():
            return cls()
        logger.trace(f"Loading config from {path}")
        return cls._from_section(_load_raw_yaml(path))

    @classmethod
    def from_env(cls) -> StorageConfig:
        """Build config from environment variables.

        Numeric variables that fail to parse are ignored with a warning.
        """
        values: dict[str, object] = {
            "endpoint_url": os.environ.get("BUCKETIO_ENDPOINT_URL"),
            "region_name": os.environ.get("BUCKETIO_REGION"),
            "profile_name": os.environ.get("AWS_PROFILE"),
        }
        if os.environ.get("BUCKETIO_LOG_SINK"):
            values["log_sink"] = os.environ["BUCKETIO_LOG_SINK"]
        for key, env_name in (
            ("chunk_size", "BUCKETIO_CHUNK_SIZE"),
            ("log_level", "BUCKETIO_LOG_LEVEL"),
        ):
            raw = os.environ.get(env_name)
            if not raw:
                continue
            try:
                values[key] = int(raw)
            except ValueError:
                logger.warning(f"Ignoring {env_name}={raw!r}: not an integer")
        try:
            return cls(**values)
        except ValidationError as e:
            logger.warning(f"Ignoring invalid environment settings: {e}")
            return cls()

    def merge(self, override: StorageConfig) -> StorageConfig:
        """Return a new config where *override* values take priority over self.

        Only non-empty strings and fields that *override* set explicitly win.
        """
        explicit = override.model_fields_set
        return StorageConfig(
            endpoint_url=override.endpoint_url or self.endpoint_url,
            region_name=override.region_name or self.region_name,
            profile_name=override.profile_name or self.profile_name,
            chunk_size=(
                override.chunk_size if "chunk_size" in explicit else self.chunk_size
            ),
            log_level=(
                override.log_level if "log_level" in explicit else self.log_level
            ),
            log_sink=override.log_sink if "log_sink" in explicit else self.log_sink,
        )

    @classmethod
    def load(cls, config_path: Path | None = None) -> StorageConfig:
        """Merge file and env: file < env."""
        path = get_config_path(config_path)
        file_cfg = cls.from_file(path)
        env_cfg = cls.from_env()
        return file_cfg.merge(env_cfg)

    def save_to_file(self, path: Path | None = None) -> Path:
        """Write the ``storage`` section, preserving other sections."""
        path = get_config_path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        existing = _load_raw_yaml(path)
        existing[SECTION] = self.model_dump(exclude_none=True)
        content = yaml.safe_dump(existing, default_flow_style=False, sort_keys=False)
        if not content.endswith("\n"):
            content += "\n"
        path.write_text(content, encoding="utf-8")
        logger.info(f"Config saved to {path}")
        return path
