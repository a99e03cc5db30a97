"""Colored logging formatter for console output."""

from __future__ import annotations

import logging
import os
import sys
from typing import TextIO

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class ColoredFormatter(logging.Formatter):
    """Logging formatter that applies ANSI color codes to the levelname field.

    Colors are disabled when the ``NO_COLOR`` environment variable is set or
    when the output stream is not a TTY (e.g. redirected to a file).
    """

    COLORS: dict[int, str] = {
        logging.DEBUG: "\033[36m",     # cyan
        logging.INFO: "\033[32m",      # green
        logging.WARNING: "\033[33m",   # yellow
        logging.ERROR: "\033[31m",     # red
        logging.CRITICAL: "\033[1;31m",  # bold red
    }
    RESET = "\033[0m"

    def __init__(
        self, fmt: str | None = None, datefmt: str | None = None, stream: TextIO | None = None
    ) -> None:
        super().__init__(fmt, datefmt)
        self._stream = stream

    def _use_color(self) -> bool:
        if os.environ.get("NO_COLOR") is not None:
            return False
        stream = self._stream or sys.stdout
        return hasattr(stream, "isatty") and stream.isatty()

    def format(self, record: logging.LogRecord) -> str:
        if self._use_color():
            color = self.COLORS.get(record.levelno, "")
            record = logging.makeLogRecord(record.__dict__)
            record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def setup_logging(log_level: str = "INFO", stream: TextIO | None = None) -> logging.Handler:
    """Install a colored console handler on the ``music_subscription`` logger."""
    resolved_level = getattr(logging, log_level.upper(), logging.INFO)
    stream = stream or sys.stderr

    handler = logging.StreamHandler(stream)
    handler.setFormatter(ColoredFormatter(LOG_FORMAT, LOG_DATE_FORMAT, stream=stream))

    package_logger = logging.getLogger("music_subscription")
    for existing in list(package_logger.handlers):
        if isinstance(existing.formatter, ColoredFormatter):
            package_logger.removeHandler(existing)
    package_logger.addHandler(handler)
    package_logger.setLevel(resolved_level)
    return handler
