"""Logging configuration for Bison Health."""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from core.config import get_data_dir


LOG_FILE_NAME = "bison_health.log"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(threadName)s] [%(name)s] %(message)s"

ENV_FILE_LEVEL = "BISON_HEALTH_LOG_FILE_LEVEL"
ENV_CONSOLE_LEVEL = "BISON_HEALTH_LOG_CONSOLE_LEVEL"

# httpx logs every request at INFO; connection tests would flood the file
_NOISY_LOGGERS = ("httpx", "httpcore")


def _parse_level(value: Optional[str], default: int) -> int:
    if not value:
        return default
    level = logging.getLevelName(value.strip().upper())
    return level if isinstance(level, int) else default


def _build_file_handler(log_file: Path, level: int) -> Optional[logging.Handler]:
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            log_file,
            maxBytes=2 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
    except OSError as e:
        # Console logging still works on a read-only home directory
        print(f"File logging disabled: {e}", file=sys.stderr)
        return None
    handler.setLevel(level)
    return handler


def _log_uncaught(exc_type, exc, tb) -> None:
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc, tb)
        return
    logging.getLogger("uncaught").critical("Unhandled exception", exc_info=(exc_type, exc, tb))
    sys.__excepthook__(exc_type, exc, tb)


def configure_logging(
    log_dir: Optional[Path] = None,
    file_level: Optional[str] = None,
    console_level: Optional[str] = None,
) -> Path:
    """
    Configure file and console logging.

    Levels come from the arguments, then the BISON_HEALTH_LOG_*_LEVEL
    environment variables, then INFO for the file and WARNING for the console.

    Returns:
        Path of the rotating log file.
    """
    log_file = (log_dir or (get_data_dir() / "logs")) / LOG_FILE_NAME
    file_level_value = _parse_level(file_level or os.getenv(ENV_FILE_LEVEL), logging.INFO)
    console_level_value = _parse_level(
        console_level or os.getenv(ENV_CONSOLE_LEVEL), logging.WARNING
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level_value)
    handlers: list[logging.Handler] = [console_handler]
    file_handler = _build_file_handler(log_file, file_level_value)
    if file_handler is not None:
        handlers.append(file_handler)

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(
        level=min(file_level_value, console_level_value),
        handlers=handlers,
        force=True,
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, file_level_value))
    logging.captureWarnings(True)
    sys.excepthook = _log_uncaught

    logging.getLogger(__name__).debug("Logging initialized at %s", log_file)
    return log_file
