"""Centralized logging configuration for pgprefs."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from .api.config.get_home_dir import get_home_dir


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None
) -> None:
    """
    Configure structured logging for pgprefs.

    Args:
        level: Logging level (default INFO)
        log_file: Optional path to log file (default ~/.pgprefs/pgprefs.log)
        format_string: Optional custom format string
    """
    if format_string is None:
        format_string = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    if log_file is None:
        log_file = get_home_dir("pgprefs.log")

    # Ensure log directory exists
    log_file.parent.mkdir(parents=True, exist_ok=True)

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=5 * 1024 * 1024,
        backupCount=3,  # 5MB * 3
    )

    # Configure root logger
    logging.basicConfig(
        level=level,
        format=format_string,
        handlers=[
            file_handler,
            logging.StreamHandler(sys.stderr)
        ]
    )

    # Suppress noisy third-party loggers
    logging.getLogger('psutil').setLevel(logging.WARNING)

