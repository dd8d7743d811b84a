"""CLI entry points for bucketio.

Three programs share one parser builder: ``bucketio-connect``,
``bucketio-get`` and ``bucketio-put``.  Options use single-dash long names
(``-bucket``, ``-google_filename``, ...) with one-letter aliases.
"""

from __future__ import annotations

import argparse
import sys
from typing import TYPE_CHECKING, NoReturn

from bucketio.commands._helpers import EXIT_USAGE
from bucketio.commands.connect import run_connect
from bucketio.commands.get import run_get
from bucketio.commands.put import run_put

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

_CREDENTIALS_HINT = (
    "Credentials are resolved by boto3 (AWS_ACCESS_KEY_ID / "
    "AWS_SECRET_ACCESS_KEY, AWS_PROFILE, shared config files)."
)


class _Parser(argparse.ArgumentParser):
    """Argument parser that exits with ``EXIT_USAGE`` on bad arguments."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(EXIT_USAGE, f"{self.prog}: error: {message}\n")


class _HelpAction(argparse.Action):
    """``-help``: print help and stop without running the program."""

    def __init__(
        self,
        option_strings: Sequence[str],
        dest: str,
        help: str | None = None,  # noqa: A002
        **_kwargs: object,
    ) -> None:
        super().__init__(
            option_strings, dest, nargs=0, default=argparse.SUPPRESS, help=help
        )

    def __call__(
        self,
        parser: argparse.ArgumentParser,
        _namespace: argparse.Namespace,
        _values: object,
        _option_string: str | None = None,
    ) -> None:
        parser.print_help()
        parser.exit(EXIT_USAGE)


class CliApp:
    """Command-line front-end for one bucketio program."""

    PROGRAMS: dict[str, str] = {
        "connect": "Open a storage client connection using ambient credentials.",
        "get": "Download an object from a bucket and save it to a local file.",
        "put": "Upload a local file into a bucket as an object.",
    }

    def __init__(self, program: str) -> None:
        """Initialize the parser for *program* (``connect``, ``get`` or ``put``)."""
        if program not in self.PROGRAMS:
            msg = f"Unknown program {program!r}; expected one of {list(self.PROGRAMS)}"
            raise ValueError(msg)
        self.program = program
        self._parser = self._build_parser()

    def _build_parser(self) -> argparse.ArgumentParser:
        parser = _Parser(
            prog=f"bucketio-{self.program}",
            description=self.PROGRAMS[self.program],
            epilog=_CREDENTIALS_HINT,
            add_help=False,
        )
        transfer = self.program != "connect"
        parser.add_argument(
            "-b",
            "-bucket",
            dest="bucket",
            required=transfer,
            help="Bucket to interact with.",
        )
        if transfer:
            parser.add_argument(
                "-g",
                "-google_filename",
                dest="google_filename",
                required=True,
                help="Object key inside the bucket.",
            )
        if self.program == "get":
            parser.add_argument(
                "-o",
                "-output_filename",
                dest="output_filename",
                required=True,
                help="Local file to save the downloaded object into.",
            )
        if self.program == "put":
            parser.add_argument(
                "-i",
                "-input_filename",
                dest="input_filename",
                required=True,
                help="Local file to upload.",
            )
        parser.add_argument(
            "-l",
            "-log_level",
            dest="log_level",
            type=int,
            choices=range(6),
            metavar="0..5",
            default=None,
            help="Library log verbosity (default: config log_level).",
        )
        parser.add_argument(
            "-config",
            dest="config",
            default=None,
            help=(
                "Path to YAML config (default: ~/.config/bucketio/config.yaml "
                "or BUCKETIO_CONFIG)."
            ),
        )
        parser.add_argument("-help", action=_HelpAction, help="Show this help.")
        return parser

    def _command(self) -> Callable[[argparse.Namespace], int]:
        return {"connect": run_connect, "get": run_get, "put": run_put}[self.program]

    def run(self, argv: list[str] | None = None) -> int:
        """Parse *argv*, run the program and return its exit code."""
        args = self._parser.parse_args(argv)
        return self._command()(args)


def main_connect(argv: list[str] | None = None) -> None:
    """Entry point for ``bucketio-connect``."""
    sys.exit(CliApp("connect").run(argv))


def main_get(argv: list[str] | None = None) -> None:
    """Entry point for ``bucketio-get``."""
    sys.exit(CliApp("get").run(argv))


def main_put(argv: list[str] | None = None) -> None:
    """Entry point for ``bucketio-put``."""
    sys.exit(CliApp("put").run(argv))
