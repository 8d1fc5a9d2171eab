#!/usr/bin/env python3
"""iComfort - a Lennox iComfort protocol engine.

This module configures logging for the command line client (and any other app that
wants the same console output): coloured, with millisecond timestamps, and with
warnings/errors on stderr.
"""

from __future__ import annotations

import logging
import logging.handlers
import sys
from datetime import datetime as dt
from typing import Final

import colorlog

from .version import VERSION

_LOGGER = logging.getLogger(__name__)

DEFAULT_FMT: Final = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
DEFAULT_DATEFMT: Final = "%H:%M:%S.%f"

LEVEL_COLOURS: Final[dict[str, str]] = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",  # e.g. a retried publish
    "ERROR": "bold_red",  # e.g. a rejected command
    "CRITICAL": "bold_red",
}

NOISY_LOGGERS: Final = ("aiohttp", "asyncio")  # capped at WARNING


class _MsecFormatter:  # a mix-in, for asctime to millisecond precision
    """Format the creation time of a LogRecord to the millisecond."""

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        datefmt = datefmt or DEFAULT_DATEFMT
        result = dt.fromtimestamp(record.created).strftime(datefmt)
        return result[:-3] if datefmt.endswith("%f") else result


class ConsoleFormatter(_MsecFormatter, colorlog.ColoredFormatter):  # type: ignore[misc]
    pass


class FileFormatter(_MsecFormatter, logging.Formatter):  # type: ignore[misc]
    pass


class LevelFilter(logging.Filter):
    """Process only the records with a level in [min_level, max_level)."""

    def __init__(
        self, min_level: int = logging.NOTSET, max_level: int | None = None
    ) -> None:
        super().__init__()
        self.min_level = min_level
        self.max_level = max_level

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno < self.min_level:
            return False
        return self.max_level is None or record.levelno < self.max_level


def set_logging(
    logger: logging.Logger | None = None,
    level: int = logging.INFO,
    *,
    file_name: str | None = None,
    rotate_backups: int = 0,
) -> None:
    """Configure a logger (the root logger by default) for console output.

    Debug/info go to stdout, and warnings/errors to stderr. Optionally, also log
    (without colour) to a file, rotated at midnight if rotate_backups > 0.
    """

    logger = logger or logging.getLogger()

    logger.setLevel(level)
    for handler in list(logger.handlers):  # set_logging() may be called again
        logger.removeHandler(handler)

    console_fmt = ConsoleFormatter(
        fmt=f"%(log_color)s{DEFAULT_FMT}", reset=True, log_colors=LEVEL_COLOURS
    )

    for stream, level_filter in (
        (sys.stdout, LevelFilter(max_level=logging.WARNING)),
        (sys.stderr, LevelFilter(min_level=logging.WARNING)),
    ):
        handler: logging.Handler = logging.StreamHandler(stream=stream)
        handler.setFormatter(console_fmt)
        handler.addFilter(level_filter)
        logger.addHandler(handler)

    if file_name:
        handler = (
            logging.handlers.TimedRotatingFileHandler(
                file_name, when="midnight", backupCount=rotate_backups
            )
            if rotate_backups
            else logging.FileHandler(file_name)
        )
        handler.setFormatter(FileFormatter(fmt=DEFAULT_FMT))
        logger.addHandler(handler)

    if logger is logging.getLogger():
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(max(level, logging.WARNING))

    _LOGGER.debug("Logging configured (icomfort %s)", VERSION)
