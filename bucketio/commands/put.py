"""Implementation of ``bucketio-put``: upload a local file as an object."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from bucketio.commands._helpers import (
    EXIT_CONNECTION,
    EXIT_LOCAL_FILE,
    EXIT_OK,
    EXIT_TRANSFER,
    configure_logging,
    load_config,
    load_file,
    open_connection,
)
from bucketio.exceptions import BucketioError, LocalFileError
from bucketio.read_write import write_object

if TYPE_CHECKING:
    import argparse


def run_put(args: argparse.Namespace) -> int:
    """Load ``-input_filename`` and store it as ``-google_filename``."""
    cfg = load_config(args)
    configure_logging(cfg)
    conn = open_connection(cfg)
    if conn is None:
        return EXIT_CONNECTION

    source = Path(args.input_filename)
    logger.info(f"Loading local file '{source}'.")
    try:
        data = load_file(source)
    except LocalFileError as e:
        logger.error(str(e))
        return EXIT_LOCAL_FILE

    logger.info(
        f"Writing {len(data)} bytes to '{args.google_filename}' "
        f"in bucket '{args.bucket}'."
    )
    try:
        metadata = write_object(
            args.bucket, args.google_filename, data, connection=conn
        )
    except BucketioError:
        conn.log.report_error()
        return EXIT_TRANSFER
    logger.info(f"Upload finished (etag={metadata.etag}).")
    return EXIT_OK
