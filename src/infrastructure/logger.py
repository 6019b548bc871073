"""
Logger Module

Provides a centralized logging system that outputs to both console and file.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional

# Application log file path (relative to project root)
_LOG_FILE_NAME = "kintai.log"

# Overrides the log file location, e.g. for tests or packaged installs
LOG_FILE_ENV = "KINTAI_LOG_FILE"

_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _get_project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent.parent


def _resolve_log_path(log_file: Optional[str]) -> Path:
    if log_file:
        return Path(log_file)
    env_path = os.environ.get(LOG_FILE_ENV)
    if env_path:
        return Path(env_path)
    return _get_project_root() / _LOG_FILE_NAME


def get_logger(name: str, log_file: Optional[str] = None) -> logging.Logger:
    """
    Get or create a logger with console and file handlers.

    Args:
        name: Logger name (typically component name like "RecordStore")
        log_file: Optional custom log file path. If None, uses $KINTAI_LOG_FILE
            or kintai.log in the project root

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Avoid adding handlers multiple times
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG)
    formatter = logging.Formatter(fmt=_FORMAT, datefmt=_DATE_FORMAT)

    # Console handler - INFO level and above
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # File handler - DEBUG level and above
    log_path = _resolve_log_path(log_file)
    try:
        file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    except (OSError, PermissionError) as e:
        # If file logging fails, just log to console
        logger.warning(f"ログファイルを作成できません {log_path}: {e}")

    return logger
