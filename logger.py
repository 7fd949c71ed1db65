from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from constants import LOG_NAME

LOG_DIRECTORY = Path("logs")
_logger = logging.getLogger(LOG_NAME)


def setup_logger(log_directory: Optional[Path] = LOG_DIRECTORY) -> logging.Logger:
    """Configure the shared logger for the bot."""
    if _logger.handlers:
        # Already configured.
        return _logger

    _logger.setLevel(logging.DEBUG)
    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)
    _logger.addHandler(console_handler)

    if log_directory is not None:
        log_directory.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_directory / f"football_bot_{timestamp}.log"
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        _logger.addHandler(file_handler)
        _logger.debug("Logger initialised with file %s", log_file)

    return _logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return the shared logger, or one of its children."""
    if name:
        return _logger.getChild(name)
    return _logger
