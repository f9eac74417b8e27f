"""
Logging setup for WristPostureTracker.

One named logger with a console handler and an optional rotating file.
Modules log through child loggers: get_logger("Calibration") logs as
"WristPostureTracker.Calibration".
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from .config import LOG_FILENAME, LOG_MAX_BYTES, LOG_BACKUP_COUNT

LOGGER_NAME = "WristPostureTracker"
LOG_DIR_ENV = "WRIST_TRACKER_LOG_DIR"  # Overrides the per-user log directory

FILE_FORMAT = logging.Formatter(
    "%(asctime)s | %(levelname)-8s | %(name)s.%(funcName)s:%(lineno)d | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)
CONSOLE_FORMAT = logging.Formatter(
    "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%H:%M:%S"
)


def get_log_directory(override: Optional[str | Path] = None) -> Path:
    """
    Resolve and create the log directory.

    Order: explicit override, $WRIST_TRACKER_LOG_DIR,
    %APPDATA%/WristPostureTracker/logs on Windows, then
    ~/.wrist_posture_tracker/logs.

    Args:
        override: Directory to use instead of the defaults.

    Returns:
        Path to the log directory, created if it doesn't exist.
    """
    if override is None:
        override = os.environ.get(LOG_DIR_ENV) or None

    if override is not None:
        log_dir = Path(override)
    elif os.environ.get("APPDATA"):
        log_dir = Path(os.environ["APPDATA"]) / "WristPostureTracker" / "logs"
    else:
        log_dir = Path.home() / ".wrist_posture_tracker" / "logs"

    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


def setup_logging(
    debug: bool = False,
    log_to_file: bool = True,
    log_dir: Optional[str | Path] = None,
    log_filename: Optional[str] = None
) -> logging.Logger:
    """
    Configure and return the application logger.

    Calling it again replaces the previous handlers.

    Args:
        debug: Log DEBUG to the console too (the file always gets DEBUG).
        log_to_file: Add a rotating file handler.
        log_dir: Override the log directory.
        log_filename: Override the default log filename.

    Returns:
        Configured logger instance.
    """
    level = logging.DEBUG if debug else logging.INFO

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if log_to_file else level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(CONSOLE_FORMAT)
    logger.addHandler(console_handler)

    if log_to_file:
        log_path = get_log_directory(log_dir) / (log_filename or LOG_FILENAME)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8"
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(FILE_FORMAT)
        logger.addHandler(file_handler)

        logger.debug(f"Logging to file: {log_path}")

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a child logger with the given name.

    Args:
        name: Component name, e.g. "Pipeline".

    Returns:
        Child of the application logger, or the application logger itself.
    """
    base_logger = logging.getLogger(LOGGER_NAME)
    if name:
        return base_logger.getChild(name)
    return base_logger
