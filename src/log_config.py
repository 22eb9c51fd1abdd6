#!/usr/bin/env python3
"""Centralized logging setup."""

import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from .constants import DEFAULT_LOG_DIR, ENV_LOG_DIR
from .exceptions import FileIOError

FILE_LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
) -> None:
    """Setup console logging and the optional per-command log file.

    Args:
        level: Console logging level (default: INFO)
        log_file: Append-mode log file receiving every record at DEBUG

    Note:
        Console output uses a minimal formatter since string_utils.py handles
        timestamp/level formatting.
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    console_handler.setLevel(level)
    root_logger.addHandler(console_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(str(log_file), mode="a", encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter(FILE_LOG_FORMAT, datefmt=FILE_DATE_FORMAT)
        )
        file_handler.setLevel(logging.DEBUG)
        root_logger.addHandler(file_handler)
        root_logger.setLevel(logging.DEBUG)
    else:
        root_logger.setLevel(level)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def init_log_file(
    operation: str,
    log_path: Optional[Union[str, Path]] = None,
    log_dir: Optional[Union[str, Path]] = None,
    timestamp: Optional[datetime] = None,
) -> Path:
    """Create the per-command log file and return its path.

    An explicit *log_path* wins; otherwise the file is
    ``<log_dir>/<operation>-<YYYYmmdd-HHMMSS>.log`` where *log_dir* defaults
    to ``$LOG_DIR`` or ``/tmp/vivado-logs``.

    Raises:
        FileIOError: If the directory or file cannot be created
    """
    if log_path:
        path = Path(log_path)
    else:
        directory = Path(log_dir or os.environ.get(ENV_LOG_DIR) or DEFAULT_LOG_DIR)
        stamp = (timestamp or datetime.now()).strftime("%Y%m%d-%H%M%S")
        path = directory / f"{operation}-{stamp}.log"

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FileIOError(f"Cannot create log directory: {path.parent}") from e
    try:
        path.touch(exist_ok=True)
    except OSError as e:
        raise FileIOError(f"Cannot create log file: {path}") from e
    return path
