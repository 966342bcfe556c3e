"""Logger setup for the ``examine`` package.

The library only creates loggers; handlers are installed on request by the
CLI or by callers that want to see why a source slice was not recovered.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

from .config import DEFAULT_LOG_LEVEL

LOGGER_NAME: str = "examine"
LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class FlushingStreamHandler(logging.StreamHandler):
    """StreamHandler that flushes after every emit."""

    def emit(self, record: logging.LogRecord) -> None:
        super().emit(record)
        self.flush()


def configure_logging(
    level: Optional[str] = None,
    log_file: Optional[str | Path] = None,
) -> logging.Logger:
    """Attach a stderr handler (and optionally a file handler) to the package logger.

    Calling it again replaces the handlers installed by a previous call.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)

    resolved = (level or DEFAULT_LOG_LEVEL).upper()
    numeric = logging.getLevelName(resolved)
    if not isinstance(numeric, int):
        raise ValueError(f"unknown log level '{level}'")
    logger.setLevel(numeric)
    logger.propagate = False

    formatter = logging.Formatter(LOG_FORMAT)
    stderr_handler = FlushingStreamHandler(sys.stderr)
    stderr_handler.setFormatter(formatter)
    logger.addHandler(stderr_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(Path(log_file), mode="a", encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    return logger


__all__ = ["FlushingStreamHandler", "LOGGER_NAME", "configure_logging"]
