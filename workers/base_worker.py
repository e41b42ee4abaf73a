"""
Base worker class for the Tracked Attachments Console.

This module provides the base worker class for all background operations:
- Thread-safe execution
- Status reporting
- Completion callbacks
- Error handling

Dispatched work always runs to completion or failure; there is no
cancellation and no timeout.
"""

import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Optional, Callable, List
from enum import Enum

from core.utils.logger import get_module_logger
from core.utils.exceptions import WorkerError, handle_exception

logger = get_module_logger(__name__)

CompletionCallback = Callable[[Any, Optional[Exception]], None]


class WorkerStatus(Enum):
    """Worker status enumeration."""
    IDLE = "idle"
    STARTING = "starting"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class BaseWorker(ABC):
    """Base class for all worker threads."""

    def __init__(self, name: str):
        """
        Initialize base worker.

        Args:
            name: Worker name for identification
        """
        self.name = name

        self._thread: Optional[threading.Thread] = None
        self._lock = threading.RLock()

        self._status = WorkerStatus.IDLE
        self._result: Any = None
        self._error: Optional[Exception] = None

        self._status_callbacks: List[Callable[[WorkerStatus], None]] = []
        self._completion_callbacks: List[CompletionCallback] = []

        self._start_time: Optional[float] = None
        self._end_time: Optional[float] = None

        self._logger = get_module_logger(f"worker.{name}")

    @property
    def status(self) -> WorkerStatus:
        """Get current worker status."""
        with self._lock:
            return self._status

    @property
    def result(self) -> Any:
        """Get worker result (only available after completion)."""
        with self._lock:
            return self._result

    @property
    def error(self) -> Optional[Exception]:
        """Get worker error (only available if failed)."""
        with self._lock:
            return self._error

    @property
    def is_running(self) -> bool:
        return self.status in [WorkerStatus.STARTING, WorkerStatus.RUNNING]

    @property
    def is_completed(self) -> bool:
        return self.status in [WorkerStatus.COMPLETED, WorkerStatus.FAILED]

    @property
    def duration(self) -> Optional[float]:
        """Get worker execution duration."""
        if self._start_time is None:
            return None

        end_time = self._end_time or time.time()
        return end_time - self._start_time

    def add_status_callback(self, callback: Callable[[WorkerStatus], None]) -> None:
        """Add status change callback."""
        with self._lock:
            self._status_callbacks.append(callback)

    def add_completion_callback(self, callback: CompletionCallback) -> None:
        """Add completion callback, called as callback(result, error)."""
        with self._lock:
            self._completion_callbacks.append(callback)

    def start(self, *args, **kwargs) -> None:
        """
        Start worker execution in a daemon thread.

        Args:
            *args: Arguments to pass to worker
            **kwargs: Keyword arguments to pass to worker

        Raises:
            WorkerError: If the worker is already running
        """
        with self._lock:
            if self.is_running:
                raise WorkerError(f"Worker '{self.name}' is already running", worker_type=type(self).__name__)

            self._result = None
            self._error = None
            self._set_status(WorkerStatus.STARTING)
            self._start_time = time.time()
            self._end_time = None

            self._thread = threading.Thread(
                target=self._run_worker,
                args=args,
                kwargs=kwargs,
                name=f"Worker-{self.name}",
                daemon=True
            )
            self._thread.start()

            self._logger.debug(f"Worker '{self.name}' started")

    def wait_for_completion(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for worker to complete.

        Args:
            timeout: Timeout for waiting

        Returns:
            True if completed, False if timeout
        """
        if not self._thread:
            return True

        self._thread.join(timeout)
        return not self._thread.is_alive()

    def _set_status(self, status: WorkerStatus) -> None:
        """Set worker status and notify callbacks."""
        old_status = self._status
        self._status = status

        if old_status != status:
            self._logger.debug(f"Worker status changed: {old_status.value} -> {status.value}")

            for callback in self._status_callbacks:
                try:
                    callback(status)
                except Exception as e:
                    self._logger.exception(e, "in status callback")

    def _notify_completion(self, result: Any, error: Optional[Exception]) -> None:
        for callback in list(self._completion_callbacks):
            try:
                callback(result, error)
            except Exception as e:
                self._logger.exception(e, "in completion callback")

    def _run_worker(self, *args, **kwargs) -> None:
        """Internal worker execution wrapper."""
        try:
            self._set_status(WorkerStatus.RUNNING)

            result = self._execute(*args, **kwargs)

            with self._lock:
                self._result = result
                self._end_time = time.time()

            self._set_status(WorkerStatus.COMPLETED)
            self._logger.debug(f"Worker '{self.name}' completed successfully")
            self._notify_completion(result, None)

        except Exception as e:
            handled_error = handle_exception(e, {'worker': self.name})

            with self._lock:
                self._error = handled_error
                self._end_time = time.time()

            self._set_status(WorkerStatus.FAILED)
            self._logger.warning(f"Worker '{self.name}' failed: {handled_error.message}")
            self._notify_completion(None, handled_error)

    @abstractmethod
    def _execute(self, *args, **kwargs) -> Any:
        """
        Execute worker implementation.

        This method must be implemented by subclasses.

        Returns:
            Worker result

        Raises:
            Any exceptions are converted and reported by the base class
        """
