"""
Configure logging for the admin API.

Console output is always enabled; a rotating file handler is added when
``LOG_FILE`` is configured. Safe to call more than once.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
import sys

from .settings import Settings, settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(module)s.%(funcName)s:%(lineno)d - %(message)s"


def _resolve_level(value: str) -> int:
    level = logging.getLevelName(value.upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(config: Settings = settings) -> None:
    log_formatter = logging.Formatter(LOG_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(_resolve_level(config.log_level))
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(log_formatter)
    root_logger.addHandler(console_handler)

    if not config.log_file:
        return

    log_file = config.log_file
    log_dir = os.path.dirname(log_file)
    if log_dir and not os.path.exists(log_dir):
        try:
            os.makedirs(log_dir)
        except OSError as e:
            root_logger.error("Could not create log directory %s: %s. Using current directory for logs.", log_dir, e)
            log_file = os.path.basename(log_file)

    # Rotates at 5MB, keeps 5 backups
    try:
        file_handler = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=5 * 1024 * 1024, backupCount=5, encoding="utf-8"
        )
    except OSError as e:
        root_logger.error("Could not open log file %s: %s. Logging to console only.", log_file, e)
        return
    file_handler.setFormatter(log_formatter)
    root_logger.addHandler(file_handler)
