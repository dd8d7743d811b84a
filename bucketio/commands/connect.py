"""Implementation of ``bucketio-connect``: open a client connection and exit."""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from bucketio.commands._helpers import (
    EXIT_CONNECTION,
    EXIT_OK,
    configure_logging,
    load_config,
    open_connection,
)

if TYPE_CHECKING:
    import argparse


def run_connect(args: argparse.Namespace) -> int:
    """Check that a storage client can be created with ambient credentials."""
    cfg = load_config(args)
    configure_logging(cfg)
    if args.bucket:
        logger.info(f"Bucket: {args.bucket}")
    if open_connection(cfg) is None:
        return EXIT_CONNECTION
    logger.info("Connection opened.")
    return EXIT_OK
