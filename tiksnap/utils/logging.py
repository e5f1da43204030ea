"""Logging configuration for TikSnap."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from tiksnap.utils.config import APP_NAME, LOG_FILE


def setup_logging(level: int = logging.INFO, log_file: Optional[Path] = None) -> logging.Logger:
    """
    Configure and return the application logger.

    Args:
        level: Console logging level (default: INFO)
        log_file: Path to log file (default: from config)

    Returns:
        Configured logger instance
    """
    if log_file is None:
        log_file = LOG_FILE

    logger = logging.getLogger(APP_NAME)
    logger.setLevel(logging.DEBUG)

    # Prevent duplicate handlers
    if logger.handlers:
        return logger

    detailed_formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    console_formatter = logging.Formatter(fmt="%(levelname)-8s | %(message)s")

    # Console goes to stderr so stdout stays clean for JSON output
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    log_file.parent.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,  # 10 MB
        backupCount=5,
        encoding="utf-8"
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(detailed_formatter)
    logger.addHandler(file_handler)

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger instance under the application logger.

    Args:
        name: Module name, e.g. ``tiksnap.core.retry`` (default: APP_NAME)

    Returns:
        Logger instance
    """
    if name is None:
        return logging.getLogger(APP_NAME)
    if name.startswith("tiksnap."):
        name = name[len("tiksnap."):]
    return logging.getLogger(f"{APP_NAME}.{name}")
