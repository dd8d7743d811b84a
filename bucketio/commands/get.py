"""Implementation of ``bucketio-get``: download an object to a local file."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger
from tqdm import tqdm

from bucketio.commands._helpers import (
    EXIT_CONNECTION,
    EXIT_LOCAL_FILE,
    EXIT_OK,
    EXIT_TRANSFER,
    configure_logging,
    load_config,
    open_connection,
    save_file,
)
from bucketio.exceptions import BucketioError, LocalFileError
from bucketio.read_write import read_object

if TYPE_CHECKING:
    import argparse


def run_get(args: argparse.Namespace) -> int:
    """Read ``-google_filename`` from ``-bucket`` and save it locally."""
    cfg = load_config(args)
    configure_logging(cfg)
    conn = open_connection(cfg)
    if conn is None:
        return EXIT_CONNECTION

    logger.info(f"Reading '{args.google_filename}' from bucket '{args.bucket}'.")
    with tqdm(
        desc="Downloading", unit="B", unit_scale=True, leave=False
    ) as progress:
        try:
            buffer = read_object(
                args.bucket,
                args.google_filename,
                connection=conn,
                progress=progress.update,
            )
        except BucketioError:
            conn.log.report_error()
            return EXIT_TRANSFER

    output = Path(args.output_filename)
    logger.info(f"Saving {buffer.length} bytes to local file '{output}'.")
    try:
        save_file(output, buffer.view)
    except LocalFileError as e:
        logger.error(str(e))
        return EXIT_LOCAL_FILE
    finally:
        buffer.release()
    logger.info("Download finished.")
    return EXIT_OK
