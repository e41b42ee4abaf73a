"""
Module loggers for the Tracked Attachments Console.

``get_module_logger(__name__)`` returns a thin wrapper over the configured
stdlib logger that appends keyword context to each message
(``Tracked attachment deleted - id=4``) and times operations.
"""

import logging
import time
from typing import Any, Dict, Optional

from config.logging_config import get_logger, log_exception, log_performance


class Logger:
    """Logger with keyword context and operation timing."""

    def __init__(self, name: str):
        """
        Args:
            name: Logger name (usually __name__)
        """
        self._logger = get_logger(name)

    def debug(self, message: str, /, **kwargs) -> None:
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, /, **kwargs) -> None:
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, /, **kwargs) -> None:
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, /, **kwargs) -> None:
        self._log(logging.ERROR, message, kwargs)

    def exception(self, exception: Exception, context: str = "", **kwargs) -> None:
        """Log exception with traceback and context."""
        log_exception(self._logger, exception, context)
        if kwargs:
            self.error("Exception context", **kwargs)

    def performance(self, operation: str, duration: float, **kwargs) -> None:
        log_performance(self._logger, operation, duration, kwargs)

    def timing_context(self, operation: str) -> 'TimingContext':
        """Time the wrapped block and log it as a performance record."""
        return TimingContext(self, operation)

    def _log(self, level: int, message: str, context: Dict[str, Any]) -> None:
        if context:
            message = f"{message} - " + ", ".join(f"{k}={v}" for k, v in context.items())
        self._logger.log(level, message)


class TimingContext:
    """Context manager behind ``Logger.timing_context``."""

    def __init__(self, logger: Logger, operation: str):
        self.logger = logger
        self.operation = operation
        self.start_time: Optional[float] = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        self.logger.debug(f"Starting operation: {self.operation}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = time.perf_counter() - (self.start_time or 0.0)
        if exc_type is None:
            self.logger.performance(self.operation, duration)
        else:
            self.logger.performance(f"{self.operation}_failed", duration)
            self.logger.warning(f"Failed operation: {self.operation} after {duration:.3f}s", error=exc_val)


def get_module_logger(name: str) -> Logger:
    return Logger(name)


ui_logger = get_module_logger('ui')


def log_ui_action(action: str, **kwargs) -> None:
    """Log an operator action taken in the UI."""
    ui_logger.info(f"UI action: {action}", **kwargs)
