"""
Logging configuration for the Tracked Attachments Console.

This module provides centralized logging setup with support for:
- Multiple log levels
- File and console output
- Log rotation
"""

import logging
import logging.handlers
import os
import sys
import traceback
from typing import Optional, Dict, Any

from config.settings import get_config


class ColoredFormatter(logging.Formatter):
    """Formatter that adds colors to console output."""

    COLORS = {
        'DEBUG': '\033[36m',    # Cyan
        'INFO': '\033[32m',     # Green
        'WARNING': '\033[33m',  # Yellow
        'ERROR': '\033[31m',    # Red
        'CRITICAL': '\033[35m', # Magenta
    }
    RESET = '\033[0m'

    def format(self, record):
        levelname = record.levelname
        if levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            # File handlers share the record
            record.levelname = levelname


def setup_logging(
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
    console_output: bool = True,
    file_output: bool = True
) -> None:
    """
    Setup centralized logging configuration.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Custom log file path
        console_output: Enable console output
        file_output: Enable file output
    """
    config = get_config()

    if log_level is None:
        log_level = 'DEBUG' if config.get('app.debug', False) else config.get('logging.level', 'INFO')

    log_format = config.get('logging.format',
                            '%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    max_file_size = config.get('logging.max_file_size_mb', 10) * 1024 * 1024
    backup_count = config.get('logging.backup_count', 5)
    level = getattr(logging, log_level.upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    file_formatter = logging.Formatter(log_format)
    console_formatter = ColoredFormatter(log_format)

    if file_output:
        if log_file is None:
            logs_dir = os.path.join(config.base_path, config.get('paths.logs_dir', 'logs'))
            os.makedirs(logs_dir, exist_ok=True)
            log_file = os.path.join(logs_dir, 'tracked_attachments.log')

        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_file_size,
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setFormatter(file_formatter)
        file_handler.setLevel(level)
        root_logger.addHandler(file_handler)

        error_log_file = os.path.join(os.path.dirname(log_file), 'errors.log')
        error_handler = logging.handlers.RotatingFileHandler(
            error_log_file,
            maxBytes=max_file_size,
            backupCount=backup_count,
            encoding='utf-8'
        )
        error_handler.setFormatter(file_formatter)
        error_handler.setLevel(logging.ERROR)
        root_logger.addHandler(error_handler)

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(console_formatter)
        console_handler.setLevel(level)
        root_logger.addHandler(console_handler)

    logger = logging.getLogger(__name__)
    logger.info(f"Logging initialized - Level: {log_level}")
    if file_output:
        logger.info(f"Log file: {log_file}")


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for the given name."""
    return logging.getLogger(name)


def log_exception(logger: logging.Logger, exception: Exception, context: str = "") -> None:
    """
    Log an exception with its traceback.

    Args:
        logger: Logger instance
        exception: Exception to log
        context: Additional context information
    """
    error_msg = f"Exception in {context}: {exception}" if context else f"Exception: {exception}"
    logger.error(error_msg)
    tb = exception.__traceback__
    if tb is not None:
        logger.debug("Traceback: " + "".join(traceback.format_exception(type(exception), exception, tb)))


def log_performance(logger: logging.Logger, operation: str, duration: float, details: Optional[Dict[str, Any]] = None) -> None:
    """
    Log performance metrics.

    Args:
        logger: Logger instance
        operation: Operation name
        duration: Duration in seconds
        details: Additional details dictionary
    """
    msg = f"Performance - {operation}: {duration:.3f}s"
    if details:
        detail_str = ", ".join([f"{k}={v}" for k, v in details.items()])
        msg += f" ({detail_str})"

    logger.debug(msg)
