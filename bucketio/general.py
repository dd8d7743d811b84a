"""Error slots and level-filtered logging shared by every bucketio module.

Each logical module (``connection``, ``read_write``, ``general``) owns one
error slot: a ``(code, message)`` pair where a zero code means "no error".
Public operations reset their slot on entry and record the error they fail
with, so callers can inspect :meth:`Facility.error_to_string` right after a
failed call.

Log messages go through a pluggable handler and an optional filter that
decides emission from the message level and a configured filter level.
"""

from __future__ import annotations

import sys
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import IntEnum
from typing import TYPE_CHECKING

from loguru import logger

from bucketio.exceptions import CONNECTION, GENERAL, READ_WRITE, BucketioError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    LogHandler = Callable[[int, str], None]
    LogFilter = Callable[[int, str], bool]

MODULES: tuple[str, ...] = (CONNECTION, READ_WRITE, GENERAL)

_MODULE_TITLES = {
    CONNECTION: "Bucketio_Connection",
    READ_WRITE: "Bucketio_Read_Write",
    GENERAL: "Bucketio_General",
}


class Verbosity(IntEnum):
    """Log verbosity levels, from least to most chatty."""

    NONE = 0
    VERY_TERSE = 1
    TERSE = 2
    INTERMEDIATE = 3
    VERBOSE = 4
    VERY_VERBOSE = 5


def current_time_string() -> str:
    """Return the current UTC time as ``DD-MM-YYYYTHH:MM:SS.mmm +0000``."""
    now = datetime.now(timezone.utc)
    millis = now.microsecond // 1000
    return f"{now:%d-%m-%YT%H:%M:%S}.{millis:03d} {now:%z}"


@dataclass
class ErrorState:
    """Error slot of a single module."""

    code: int = 0
    message: str = ""

    def reset(self) -> None:
        self.code = 0
        self.message = ""


@dataclass
class LogConfig:
    """Log sink configuration: handler, filter and filter level."""

    handler: LogHandler | None = None
    filter: LogFilter | None = None
    level: int = 0


@dataclass
class Facility:
    """Error slots plus log configuration.

    The module-level :data:`facility` instance is the process-wide default;
    tests and embedding applications may create their own.
    """

    log_config: LogConfig = field(default_factory=LogConfig)
    errors: dict[str, ErrorState] = field(
        default_factory=lambda: {name: ErrorState() for name in MODULES}
    )

    # ------------------------------------------------------------------
    # Log configuration
    # ------------------------------------------------------------------

    def set_log_handler(self, handler: LogHandler | None) -> None:
        """Set the function called for every emitted log message."""
        self.log_config.handler = handler

    def set_log_filter(self, log_filter: LogFilter | None) -> None:
        """Set the function deciding whether a message is emitted."""
        self.log_config.filter = log_filter

    def set_log_level(self, level: int) -> None:
        """Set the level the standard filters compare message levels to."""
        self.log_config.level = int(level)

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------

    def log(self, level: int, message: str | None) -> None:
        """Pass *message* to the configured handler if the filter allows it.

        Does nothing when no handler is set or *message* is empty.
        """
        if not message:
            return
        handler = self.log_config.handler
        if handler is None:
            return
        log_filter = self.log_config.filter
        if log_filter is not None and not log_filter(level, message):
            return
        handler(level, message)

    def log_format(self, level: int, fmt: str, *args: object) -> None:
        """Format *fmt* with ``%`` and *args*, then :meth:`log` it."""
        if self.log_config.handler is None:
            return
        self.log(level, fmt % args if args else fmt)

    def log_filter_level_absolute(self, level: int, _message: str = "") -> bool:
        """Emit when *level* is at most the configured filter level."""
        return level <= self.log_config.level

    def log_filter_level_bitwise(self, level: int, _message: str = "") -> bool:
        """Emit when *level* shares a bit with the configured filter level."""
        return (level & self.log_config.level) != 0

    # ------------------------------------------------------------------
    # Error slots
    # ------------------------------------------------------------------

    def _slot(self, module: str) -> ErrorState:
        try:
            return self.errors[module]
        except KeyError:
            msg = f"Unknown error module {module!r}; expected one of {MODULES}"
            raise ValueError(msg) from None

    def set_error(self, module: str, code: int, message: str) -> None:
        """Record an error in *module*'s slot."""
        slot = self._slot(module)
        slot.code = code
        slot.message = message

    def reset_error(self, module: str) -> None:
        """Clear *module*'s slot."""
        self._slot(module).reset()

    def get_error_number(self, module: str) -> int:
        """Return *module*'s error code (0 when no error is recorded)."""
        return self._slot(module).code

    def get_error_string(self, module: str) -> str:
        """Return *module*'s error line, stamped with the current time.

        A slot without an error yields a ``Logic Error`` line, as reporting
        an error that was never set is itself a mistake by the caller.
        """
        slot = self._slot(module)
        code, message = slot.code, slot.message
        if code == 0:
            message = "Logic Error:No Error defined"
        return (
            f"{current_time_string()} {_MODULE_TITLES[module]}:"
            f"Error({code}) : {message}\n"
        )

    def is_error(self) -> bool:
        """Return True when any module has a non-zero error code."""
        return any(self.errors[name].code != 0 for name in MODULES)

    def error_to_string(self) -> str:
        """Concatenate the error lines of every module that has an error.

        Returns an ``Error not found`` line when no module has one.
        """
        text = "".join(
            self.get_error_string(name)
            for name in MODULES
            if self.errors[name].code != 0
        )
        if not text:
            text = f"{current_time_string()} Error:error_to_string:Error not found\n"
        return text

    def report_error(self) -> None:
        """Write :meth:`error_to_string` to standard error."""
        sys.stderr.write(self.error_to_string())

    @contextmanager
    def recording(self, module: str) -> Iterator[None]:
        """Reset *module*'s slot, then record any ``BucketioError`` raised.

        Errors owned by another module's slot are recorded there instead,
        so a ``NotConnectedError`` raised during a read lands in the
        connection slot.
        """
        self.reset_error(module)
        try:
            yield
        except BucketioError as exc:
            target = exc.module if exc.module in self.errors else module
            self.set_error(target, exc.code, str(exc))
            raise


# ---------------------------------------------------------------------------
# Standard log handlers
# ---------------------------------------------------------------------------


def log_handler_stdout(_level: int, message: str) -> None:
    """Print *message* to stdout, prefixed with the current UTC time."""
    if not message:
        return
    sys.stdout.write(f"{current_time_string()} {message}\n")
    sys.stdout.flush()


def log_handler_loguru(level: int, message: str) -> None:
    """Forward *message* to loguru at a level derived from *level*."""
    if level <= Verbosity.TERSE:
        logger.info(message)
    elif level == Verbosity.INTERMEDIATE:
        logger.debug(message)
    else:
        logger.trace(message)


facility = Facility()
"""Process-wide default facility used when callers do not supply one."""
