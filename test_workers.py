#!/usr/bin/env python3
"""
Tests for background task workers, executors and exception conversion.
"""

import threading

import pytest

from core.utils.exceptions import (
    ErrorCode, FileReadError, NetworkError, NetworkTimeoutError, TrackedAttachmentsException,
    WorkerError, handle_exception
)
from workers.base_worker import WorkerStatus
from workers.task_worker import TaskWorker, run_in_background, run_inline


def test_run_inline_success():
    results = []
    run_inline("add", lambda: 1 + 1, lambda result, error: results.append((result, error)))
    assert results == [(2, None)]


def test_run_inline_converts_errors():
    results = []

    def fail():
        raise KeyError("missing")

    run_inline("fail", fail, lambda result, error: results.append((result, error)))

    (result, error), = results
    assert result is None
    assert isinstance(error, TrackedAttachmentsException)
    assert error.context == {'task': "fail"}


def test_background_worker_completes():
    done = threading.Event()
    results = []

    def on_done(result, error):
        results.append((result, error))
        done.set()

    worker = run_in_background("answer", lambda: 42, on_done)

    assert done.wait(5)
    assert worker.wait_for_completion(5)
    assert results == [(42, None)]
    assert worker.status is WorkerStatus.COMPLETED
    assert worker.duration is not None


def test_background_worker_reports_failure():
    done = threading.Event()
    results = []

    def fail():
        raise RuntimeError("connection refused")

    def on_done(result, error):
        results.append(error)
        done.set()

    worker = run_in_background("fail", fail, on_done)

    assert done.wait(5)
    worker.wait_for_completion(5)
    assert worker.status is WorkerStatus.FAILED
    assert isinstance(results[0], NetworkError)


def test_worker_cannot_start_twice():
    release = threading.Event()
    worker = TaskWorker("blocked", lambda: release.wait(5))
    worker.start()
    try:
        with pytest.raises(WorkerError):
            worker.start()
    finally:
        release.set()
        worker.wait_for_completion(5)


def test_status_callbacks():
    statuses = []
    worker = TaskWorker("quick", lambda: None)
    worker.add_status_callback(statuses.append)

    worker.start()
    worker.wait_for_completion(5)

    assert statuses[0] is WorkerStatus.STARTING
    assert statuses[-1] is WorkerStatus.COMPLETED


def test_handle_exception_keeps_own_exceptions():
    error = NetworkError("down")
    assert handle_exception(error) is error


@pytest.mark.parametrize("exception, expected", [
    (FileNotFoundError(2, "No such file"), FileReadError),
    (RuntimeError("read timeout"), NetworkTimeoutError),
    (RuntimeError("network unreachable"), NetworkError),
])
def test_handle_exception_heuristics(exception, expected):
    assert isinstance(handle_exception(exception), expected)


def test_handle_exception_fallback():
    error = handle_exception(ValueError("bad"), {'task': "x"})
    assert error.error_code is ErrorCode.UNKNOWN_ERROR
    assert error.message == "Unexpected error (ValueError): bad"
    assert error.get_full_context()['context'] == {'task': "x"}
