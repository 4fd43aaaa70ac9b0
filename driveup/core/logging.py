"""Logging utilities for driveup."""

from __future__ import annotations

import logging
import sys
import time
from typing import Any, Optional

# =============================================================================
# Constants
# =============================================================================

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
NOISY_LOGGERS = ("httpx", "httpcore")


# =============================================================================
# Logger Setup
# =============================================================================


def setup_logging(
    level: int = logging.WARNING,
    *,
    quiet: bool = False,
    verbose: bool = False,
) -> None:
    """Configure logging for driveup.

    Args:
        level: Base logging level.
        quiet: If True, only show errors.
        verbose: If True, show debug messages (including per-chunk progress).
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        stream=sys.stderr,
    )
    logging.getLogger("driveup").setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance (typically for ``__name__``)."""
    return logging.getLogger(name)


# =============================================================================
# Log Context
# =============================================================================


class LogContext:
    """Context manager that logs start, completion and failure of an operation.

    Context fields are appended to every message so that interleaved log
    lines from independent uploads can be told apart.
    """

    def __init__(
        self,
        operation: str,
        logger: Optional[logging.Logger] = None,
        **context: Any,
    ):
        self.operation = operation
        self.logger = logger or get_logger(__name__)
        self.context = context
        self.started: Optional[float] = None

    @property
    def elapsed(self) -> float:
        """Seconds since the context was entered."""
        if self.started is None:
            return 0.0
        return time.monotonic() - self.started

    def _fields(self) -> str:
        return ", ".join(f"{k}={v}" for k, v in self.context.items())

    def __enter__(self) -> "LogContext":
        self.started = time.monotonic()
        self.logger.info("Starting %s (%s)", self.operation, self._fields())
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if exc_type:
            self.logger.error(
                "%s failed after %.2fs: %s",
                self.operation,
                self.elapsed,
                exc_val,
            )
        else:
            self.logger.info("%s completed in %.2fs", self.operation, self.elapsed)

    def log(self, level: int, message: str, *args: Any) -> None:
        """Log a message tagged with the operation name and context fields."""
        self.logger.log(level, "[%s] " + message + " (%s)", self.operation, *args, self._fields())

    def debug(self, message: str, *args: Any) -> None:
        self.log(logging.DEBUG, message, *args)
