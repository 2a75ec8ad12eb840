"""Deferred loading of the task-list subtree.

A ``DeferredLoad`` wraps a zero-argument loader and runs it once on an
executor. Hosts poll ``status`` to decide between a placeholder (pending),
the real content (ready) and an error panel with a manual retry (failed).
Loads cannot be cancelled once started.
"""

from __future__ import annotations

import enum
import logging
import threading
from collections.abc import Callable
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LoadStatus(str, enum.Enum):
    IDLE = "idle"
    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


_shared_executor: ThreadPoolExecutor | None = None
_shared_lock = threading.Lock()


def _default_executor() -> ThreadPoolExecutor:
    global _shared_executor
    with _shared_lock:
        if _shared_executor is None:
            _shared_executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="taskpulse-load")
        return _shared_executor


class DeferredLoad(Generic[T]):
    def __init__(self, loader: Callable[[], T], name: str = "load") -> None:
        self._loader = loader
        self.name = name
        self._future: Future[T] | None = None
        self._executor: Executor | None = None

    def start(self, executor: Executor | None = None) -> Future[T]:
        """Submit the loader. Calling again returns the same future."""
        if self._future is None:
            self._executor = executor or _default_executor()
            logger.debug("Starting deferred load %r", self.name)
            self._future = self._executor.submit(self._loader)
        return self._future

    @property
    def status(self) -> LoadStatus:
        f = self._future
        if f is None:
            return LoadStatus.IDLE
        if not f.done():
            return LoadStatus.PENDING
        return LoadStatus.FAILED if f.exception() is not None else LoadStatus.READY

    @property
    def error(self) -> BaseException | None:
        if self.status is not LoadStatus.FAILED:
            return None
        assert self._future is not None
        return self._future.exception()

    def result(self, timeout: float | None = None) -> T:
        """Block until loaded and return the value (re-raises a load failure)."""
        if self._future is None:
            raise RuntimeError(f"deferred load {self.name!r} was never started")
        return self._future.result(timeout=timeout)

    def retry(self) -> Future[T]:
        """Start a failed load again on the same executor."""
        if self.status is not LoadStatus.FAILED:
            raise RuntimeError(f"can only retry a failed load, {self.name!r} is {self.status.value}")
        logger.info("Retrying deferred load %r after: %s", self.name, self.error)
        executor = self._executor
        self._future = None
        return self.start(executor)
