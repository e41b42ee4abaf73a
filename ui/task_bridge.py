# ui/task_bridge.py
"""
Executor that runs tasks on worker threads and delivers their completion
callbacks on the GUI thread.
"""

from typing import Any, Callable, Optional, Set

from PyQt6.QtCore import QObject, pyqtSignal, pyqtSlot

from core.utils.logger import get_module_logger
from workers.base_worker import CompletionCallback
from workers.task_worker import TaskWorker

logger = get_module_logger(__name__)


class TaskBridge(QObject):
    """Callable executor: ``bridge(name, func, on_done)``."""

    # callback, result, error
    task_finished = pyqtSignal(object, object, object)

    def __init__(self, parent=None):
        super().__init__(parent)
        self._workers: Set[TaskWorker] = set()
        # Emitted from worker threads, queued onto the thread owning the bridge
        self.task_finished.connect(self._deliver)

    def __call__(self, name: str, func: Callable[[], Any], on_done: CompletionCallback) -> None:
        worker = TaskWorker(name, func)

        def finished(result: Any, error: Optional[Exception]) -> None:
            self.task_finished.emit((worker, on_done), result, error)

        worker.add_completion_callback(finished)
        self._workers.add(worker)
        worker.start()

    @pyqtSlot(object, object, object)
    def _deliver(self, token, result, error) -> None:
        worker, on_done = token
        self._workers.discard(worker)
        try:
            on_done(result, error)
        except Exception as e:
            logger.exception(e, f"in completion of task '{worker.name}'")
