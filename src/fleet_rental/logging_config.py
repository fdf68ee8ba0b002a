"""Logging setup shared by the desktop app and the scripts."""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from types import TracebackType
from typing import Optional

from fleet_rental.config import (
    LOG_BACKUP_COUNT,
    LOG_FILENAME,
    LOG_LEVEL_ENV,
    LOG_MAX_BYTES,
)
from fleet_rental.paths import get_logs_dir

_FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d: %(message)s"
_CONSOLE_FORMAT = "%(levelname)s %(name)s: %(message)s"


def _resolve_level(default: int) -> int:
    name = os.getenv(LOG_LEVEL_ENV, "").strip().upper()
    level = logging.getLevelName(name) if name else default
    return level if isinstance(level, int) else default


def configure_logging(
    log_dir: Optional[Path] = None, level: int = logging.INFO
) -> Path:
    """Send records to a rotating file and to stderr; return the log file path.

    ``FLEET_RENTAL_LOG_LEVEL`` overrides ``level``. Calling this again
    replaces the previous handlers.
    """
    level = _resolve_level(level)
    log_file = (log_dir or get_logs_dir()) / LOG_FILENAME

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
    file_handler.setLevel(level)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    console_handler.setLevel(max(level, logging.WARNING))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)
    logging.captureWarnings(True)

    def handle_exception(
        exc_type: type[BaseException],
        exc: BaseException,
        traceback: Optional[TracebackType],
    ) -> None:
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc, traceback)
            return
        root_logger.critical("Unhandled exception", exc_info=(exc_type, exc, traceback))

    sys.excepthook = handle_exception
    return log_file


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
