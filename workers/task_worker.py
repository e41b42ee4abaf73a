"""
Single-callable background tasks and the executors built on them.

An executor is any callable with the signature

    executor(name, func, on_done)

that runs ``func()`` and eventually calls ``on_done(result, error)``
exactly once. Controllers take an executor so the same code runs in a
background thread under the GUI and synchronously under test.
"""

from typing import Any, Callable, Optional

from core.utils.exceptions import handle_exception
from core.utils.logger import get_module_logger
from workers.base_worker import BaseWorker, CompletionCallback

logger = get_module_logger(__name__)

Executor = Callable[[str, Callable[[], Any], CompletionCallback], None]


class TaskWorker(BaseWorker):
    """Runs one callable in a worker thread."""

    def __init__(self, name: str, func: Callable[[], Any]):
        super().__init__(name=name)
        self._func = func

    def _execute(self, *args, **kwargs) -> Any:
        return self._func()


def run_in_background(name: str, func: Callable[[], Any], on_done: CompletionCallback) -> TaskWorker:
    """
    Run ``func`` in a new worker thread.

    ``on_done`` is called from the worker thread; GUI code must marshal it
    back onto its own thread (see ui.task_bridge).
    """
    worker = TaskWorker(name, func)
    worker.add_completion_callback(on_done)
    worker.start()
    return worker


def run_inline(name: str, func: Callable[[], Any], on_done: CompletionCallback) -> None:
    """Run ``func`` immediately on the calling thread."""
    try:
        result = func()
    except Exception as e:
        error: Optional[Exception] = handle_exception(e, {'task': name})
        logger.debug(f"Inline task '{name}' failed", error=error)
        on_done(None, error)
        return
    on_done(result, None)
