"""Console logging for the ``envbind`` command.

The library modules log through :mod:`logging`; this module routes those
records into loguru so the command prints one consistent console format.
"""
from __future__ import annotations

import logging
import sys
from typing import Optional

from loguru import logger

_CONSOLE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {message}"
_VERBOSE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


class InterceptHandler(logging.Handler):
    """Forward stdlib log records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def configure_logging(level: Optional[str] = None, *, verbose: bool = False) -> None:
    """Install a single stderr sink and capture ``envbind.*`` stdlib loggers.

    ``verbose`` switches to the detailed format at DEBUG level; otherwise
    ``level`` (default ``WARNING``) applies.
    """

    console_level = "DEBUG" if verbose else (level or "WARNING").upper()
    logger.remove()
    logger.add(
        sys.stderr,
        format=_VERBOSE_FORMAT if verbose else _CONSOLE_FORMAT,
        level=console_level,
        colorize=None,
        backtrace=verbose,
        diagnose=verbose,
    )

    library_logger = logging.getLogger("envbind")
    library_logger.handlers = [InterceptHandler()]
    library_logger.setLevel(logging.DEBUG if verbose else console_level)
    library_logger.propagate = False
    logger.debug("Console logging configured at {}", console_level)


__all__ = ["InterceptHandler", "configure_logging", "logger"]
