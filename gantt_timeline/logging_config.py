"""Logging setup for the application entry point."""
from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

LOG_DIR = "logs"
LOG_FILENAME = "gantt_timeline.log"
MAX_BYTES = 5 * 1024 * 1024  # 5 MB
BACKUP_COUNT = 5
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(debug_mode: bool = False, log_to_console: bool = True, log_dir: Optional[str] = LOG_DIR) -> None:
    """Configure the root logger with a rotating file handler and optional console output.

    Passing ``log_dir=None`` skips the file handler. Calling this again
    replaces previously installed handlers.
    """
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    root_logger.setLevel(logging.DEBUG if debug_mode else logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    if log_dir is not None:
        try:
            os.makedirs(log_dir, exist_ok=True)
        except OSError as exc:
            print(f"Failed to create log directory: {exc}. Logging to current directory.", file=sys.stderr)
            log_path = LOG_FILENAME
        else:
            log_path = os.path.join(log_dir, LOG_FILENAME)
        file_handler = RotatingFileHandler(log_path, maxBytes=MAX_BYTES, backupCount=BACKUP_COUNT, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    logging.getLogger(__name__).debug("Logging configured (debug=%s, dir=%s)", debug_mode, log_dir)
