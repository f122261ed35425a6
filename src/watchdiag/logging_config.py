"""Logging configuration for watchdiag.

The diagnostic channel is usually imported by test suites, so importing it
adds no handlers of its own: records propagate to whatever the host configured.
Call ``configure_logging`` for a console handler, and pass ``log_dir`` to also
write a rotated log file.

Log Rotation Policy (when a log directory is given):
- Max file size: 5 MB per log file
- Backup count: 3 (keeps watchdiag.log, watchdiag.log.1, ..., watchdiag.log.3)
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

ROOT_LOGGER_NAME = "watchdiag"

DEFAULT_LOG_FILE = "watchdiag.log"
DEFAULT_MAX_BYTES = 5 * 1024 * 1024  # 5 MB per file
DEFAULT_BACKUP_COUNT = 3
DEFAULT_LOG_LEVEL = logging.WARNING
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_configured = False


def configure_logging(
    log_dir: str | None = None,
    log_file: str = DEFAULT_LOG_FILE,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    log_level: int | str = DEFAULT_LOG_LEVEL,
    log_format: str = DEFAULT_LOG_FORMAT,
    console_output: bool = True,
) -> logging.Logger:
    """Configure watchdiag logging.

    Args:
        log_dir: Directory for a rotated log file (default: no file)
        log_file: Log file name (default: watchdiag.log)
        max_bytes: Maximum size per log file before rotation (default: 5 MB)
        backup_count: Number of backup files to keep (default: 3)
        log_level: Logging level, as an int or a name like "DEBUG"
        log_format: Log message format
        console_output: Whether to log to the console (default: True)

    Returns:
        The root watchdiag logger instance.
    """
    global _configured

    log_level = _coerce_level(log_level)

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(log_level)

    # Clear existing handlers to avoid duplicates on reconfiguration
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(log_format)

    full_log_path = None
    if log_dir is not None:
        log_path = Path(os.path.expanduser(log_dir))
        log_path.mkdir(parents=True, exist_ok=True)
        full_log_path = log_path / log_file

        file_handler = RotatingFileHandler(
            full_log_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    if console_output:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    # Without our own outputs, leave records to the host application's handlers
    if root_logger.handlers:
        root_logger.propagate = False
    else:
        root_logger.addHandler(logging.NullHandler())
        root_logger.propagate = True

    _configured = True

    root_logger.debug(
        f"Logging configured: file={full_log_path}, "
        f"level={logging.getLevelName(log_level)}"
    )

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a watchdiag component.

    Args:
        name: Component name (e.g., 'testing_hooks', 'reporting')

    Returns:
        A logger instance under the watchdiag namespace.
    """
    if not _configured:
        from .config import load_config

        configure_logging(log_level=load_config().log_level, console_output=False)

    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def set_log_level(level: int | str) -> None:
    """Change the log level for all watchdiag loggers.

    Args:
        level: Logging level (e.g., logging.DEBUG, "DEBUG", logging.WARNING)
    """
    level = _coerce_level(level)

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level)
    for handler in root_logger.handlers:
        handler.setLevel(level)


def _coerce_level(level: int | str) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper())
    return level
