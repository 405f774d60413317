"""Logging setup shared by every metrics_reporter module.

The root logger gets a console handler plus a rotating file under ``LOG_DIR``,
which defaults to ``./logs`` in the working directory. When that directory
cannot be created the reporter logs to the console only.
"""

import os
import logging
from logging.handlers import RotatingFileHandler
from typing import List, Optional

LOG_FILE_NAME = "metrics_reporter.log"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

MAX_LOG_BYTES = 10 * 1024 * 1024   # 10MB per file
LOG_BACKUP_COUNT = 7               # Last 7 rotated logs kept

logger = logging.getLogger("metrics_reporter")


def default_log_dir() -> str:
    return os.path.join(os.getcwd(), "logs")


LOG_DIR = os.getenv("LOG_DIR") or default_log_dir()
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def rotating_file_handler(log_dir: str) -> RotatingFileHandler:
    """Create ``log_dir`` if needed; raises OSError when it is not writable."""
    os.makedirs(log_dir, exist_ok=True)
    return RotatingFileHandler(
        os.path.join(log_dir, LOG_FILE_NAME),
        maxBytes=MAX_LOG_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )


def configure_logging(log_dir: Optional[str] = None, level: Optional[str] = None) -> List[logging.Handler]:
    """Install the console and file handlers on the root logger.

    Returns the handlers that were built. A root logger that already has
    handlers is left alone, as with ``logging.basicConfig``.
    """
    log_dir = log_dir or LOG_DIR
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    file_error: Optional[OSError] = None
    try:
        handlers.append(rotating_file_handler(log_dir))
    except OSError as e:
        file_error = e

    logging.basicConfig(
        level=level or LOG_LEVEL,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=handlers,
    )
    if file_error is not None:
        logger.warning(f"File logging disabled, cannot write to {log_dir}: {file_error}")
    return handlers


configure_logging()


def get_logger(name: str) -> logging.Logger:
    """Return a configured logger with the given module name."""
    return logging.getLogger(name)
