"""Shared helpers for CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from bucketio.config import StorageConfig
from bucketio.connection import Connection
from bucketio.exceptions import BucketioError, LocalFileError
from bucketio.general import (
    Facility,
    facility,
    log_handler_loguru,
    log_handler_stdout,
)

if TYPE_CHECKING:
    import argparse

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_CONNECTION = 2
EXIT_TRANSFER = 3
EXIT_LOCAL_FILE = 4


def load_config(args: argparse.Namespace) -> StorageConfig:
    """Load config from ``-config`` (or env/default path) and apply CLI overrides."""
    config_path = Path(args.config) if args.config else None
    cfg = StorageConfig.load(config_path=config_path)
    if args.log_level is not None:
        cfg = cfg.model_copy(update={"log_level": args.log_level})
    return cfg


def configure_logging(cfg: StorageConfig, log: Facility = facility) -> None:
    """Route library log messages through the absolute level filter."""
    log.set_log_level(cfg.log_level)
    log.set_log_filter(log.log_filter_level_absolute)
    if cfg.log_sink == "loguru":
        log.set_log_handler(log_handler_loguru)
    else:
        log.set_log_handler(log_handler_stdout)


def open_connection(cfg: StorageConfig, log: Facility = facility) -> Connection | None:
    """Open a connection, reporting the error and returning None on failure."""
    logger.info("Opening client connection.")
    conn = Connection(cfg, log=log)
    try:
        conn.open()
    except BucketioError:
        log.report_error()
        return None
    return conn


def load_file(path: Path) -> bytes:
    """Return the whole contents of the local file *path*."""
    try:
        return path.read_bytes()
    except OSError as e:
        msg = f"load_file '{path}' failed: {e.strerror or e}"
        raise LocalFileError(msg) from e


def save_file(path: Path, data: bytes | memoryview) -> None:
    """Write *data* to the local file *path*, replacing any contents."""
    try:
        path.write_bytes(data)
    except OSError as e:
        msg = f"save_file '{path}' failed: {e.strerror or e}"
        raise LocalFileError(msg) from e
