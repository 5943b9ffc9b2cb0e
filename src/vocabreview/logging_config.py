"""Logging configuration for the review engine."""
import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Optional, Union

from vocabreview.config import LoggingSettings, settings


def setup_logging(
    first_message: str = "",
    level: Optional[Union[int, str]] = None,
    config: Optional[LoggingSettings] = None,
) -> None:
    """Configure logging for the entire application.

    Args:
        first_message: Optional banner logged once handlers are installed.
        level: Optional logging level. If None, uses the configured level.
        config: Optional logging settings. If None, uses the global settings.
    """
    config = config or settings.logging

    # Set default level if not provided
    if level is None:
        level = config.level
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    formatter = logging.Formatter(config.format)

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove any existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if first_message:
        root_logger.info(first_message)
    root_logger.info(f"Logging configured with level: {logging.getLevelName(level)}")

    # Add file handler with rotation
    if config.dir is not None:
        log_dir = Path(config.dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        log_file = log_dir / "vocabreview.log"
        file_handler = TimedRotatingFileHandler(
            log_file,
            when=config.rotation,
            interval=config.interval,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

        root_logger.info(
            f"Log file: {log_file} (rotation: {config.rotation}, "
            f"interval: {config.interval}, backup_count: {config.backup_count})"
        )

    # Set logging levels for third-party libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the specified name."""
    return logging.getLogger(name)
