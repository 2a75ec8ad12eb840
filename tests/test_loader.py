"""Tests for taskpulse/loader.py — deferred load states."""

import threading
from concurrent.futures import ThreadPoolExecutor, wait

import pytest

from taskpulse.loader import DeferredLoad, LoadStatus


@pytest.fixture
def executor():
    pool = ThreadPoolExecutor(max_workers=1)
    yield pool
    pool.shutdown(wait=True)


def test_idle_before_start():
    load = DeferredLoad(lambda: 1)
    assert load.status is LoadStatus.IDLE
    assert load.error is None
    with pytest.raises(RuntimeError, match="never started"):
        load.result()


def test_pending_then_ready(executor):
    gate = threading.Event()

    def slow():
        gate.wait(timeout=5)
        return ["row"]

    load = DeferredLoad(slow, name="tasks")
    future = load.start(executor)
    assert load.status is LoadStatus.PENDING
    gate.set()
    wait([future], timeout=5)
    assert load.status is LoadStatus.READY
    assert load.result() == ["row"]


def test_start_twice_returns_same_future(executor):
    load = DeferredLoad(lambda: 1)
    assert load.start(executor) is load.start(executor)


def test_failed_load(executor):
    def broken():
        raise OSError("disk gone")

    load = DeferredLoad(broken)
    wait([load.start(executor)], timeout=5)
    assert load.status is LoadStatus.FAILED
    assert isinstance(load.error, OSError)
    with pytest.raises(OSError, match="disk gone"):
        load.result()


def test_retry_after_failure(executor):
    attempts = []

    def flaky():
        attempts.append(1)
        if len(attempts) == 1:
            raise RuntimeError("first try fails")
        return "ok"

    load = DeferredLoad(flaky)
    wait([load.start(executor)], timeout=5)
    assert load.status is LoadStatus.FAILED
    wait([load.retry()], timeout=5)
    assert load.status is LoadStatus.READY
    assert load.result() == "ok"


def test_retry_only_when_failed(executor):
    load = DeferredLoad(lambda: 1)
    wait([load.start(executor)], timeout=5)
    with pytest.raises(RuntimeError, match="only retry a failed load"):
        load.retry()


def test_default_executor():
    load = DeferredLoad(lambda: 42)
    assert load.start().result(timeout=5) == 42
    assert load.status is LoadStatus.READY
