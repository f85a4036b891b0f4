"""Logging for sync runs: console output plus an optional rotating log file."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from config.settings import Settings

LOG_FORMAT = "%(asctime)s %(levelname)-7s [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    logger_name: str = Settings.LOGGER_NAME,
    log_level: int = logging.INFO,
    log_dir: Optional[Path] = None,
    log_file_max_bytes: int = Settings.LOG_FILE_MAX_BYTES,
    log_file_backup_count: int = Settings.LOG_FILE_BACKUP_COUNT,
    console_output: bool = True,
    file_output: bool = True,
):
    """
    Configure the logger shared by the clients, the notifier and the sync loop.

    The run loop calls this once per process, but containers may be rebuilt
    (tests, repeated CLI invocations in one interpreter); a logger that already
    has handlers only gets its level updated so lines are never duplicated.

    Args:
        logger_name: Logger to configure, ``pihole_sync`` by default.
        log_level: ``logging.DEBUG`` when VERBOSE is set, otherwise ``logging.INFO``.
        log_dir: Directory for ``<logger_name>.log`` (defaults to Settings.LOGS_DIR).
        log_file_max_bytes: Size at which the log file is rotated.
        log_file_backup_count: Rotated files to keep.
        console_output: Write to stdout, where container runtimes collect logs.
        file_output: Also write to the rotating log file.

    Returns:
        The configured logger.
    """
    logger = logging.getLogger(logger_name)
    logger.setLevel(log_level)

    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if file_output:
        log_dir = Settings.get_log_dir(log_dir)
        Settings.ensure_directories(log_dir)
        file_name = "".join(c if c.isalnum() or c in "_-" else "_" for c in logger_name)

        file_handler = RotatingFileHandler(
            log_dir / f"{file_name}.log",
            maxBytes=log_file_max_bytes,
            backupCount=log_file_backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
