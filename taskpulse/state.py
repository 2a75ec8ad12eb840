"""Shared user state: one immutable snapshot plus a single update path.

Readers hold the current ``UserState`` snapshot, never a mutable handle.
``StateStore.update`` swaps in a whole new snapshot in one assignment and
then notifies subscribers synchronously, so nobody observes a half-applied
change.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import replace
from typing import Union

from taskpulse.models import UserState

logger = logging.getLogger(__name__)

StateChange = Union[UserState, Callable[[UserState], UserState]]
Listener = Callable[[UserState, UserState], None]


class StateStore:
    """Holds the current snapshot and applies updates to it."""

    def __init__(self, initial: UserState | None = None) -> None:
        self._snapshot = initial if initial is not None else UserState()
        self._listeners: list[Listener] = []

    @property
    def snapshot(self) -> UserState:
        return self._snapshot

    def update(self, change: StateChange) -> UserState:
        """Apply a full replacement or a ``prev -> next`` function.

        Returns the new snapshot. Listeners are called with (previous, new)
        in subscription order; an update that returns the same object is a
        no-op and notifies nobody. A listener that raises is logged and the
        rest still run: the snapshot has already moved on.
        """
        previous = self._snapshot
        new = change(previous) if callable(change) else change
        if not isinstance(new, UserState):
            raise TypeError(f"state update must produce UserState, got {type(new).__name__}")
        if new is previous:
            return previous

        self._snapshot = new
        for listener in list(self._listeners):
            try:
                listener(previous, new)
            except Exception:
                logger.exception("State listener %r failed", listener)
        return new

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener*; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe


def with_show_progress_bar(value: bool) -> Callable[[UserState], UserState]:
    """Build an update that changes only ``settings.show_progress_bar``."""

    def apply(prev: UserState) -> UserState:
        return replace(prev, settings=replace(prev.settings, show_progress_bar=value))

    return apply


class StateSaver:
    """Writes the store's latest snapshot, one write at a time.

    ``flush`` may be called from any number of threads. Each call reads the
    snapshot only once it holds the lock, so the last write to land is never
    older than one already written.
    """

    def __init__(self, store: StateStore, save: Callable[[UserState], None]) -> None:
        self._store = store
        self._save = save
        self._lock = threading.Lock()
        self._saved = store.snapshot

    def flush(self) -> bool:
        """Save the current snapshot unless it is already on disk.

        Returns True if a write happened. Errors from *save* propagate and
        leave the snapshot marked unsaved, so the next flush tries again.
        """
        with self._lock:
            state = self._store.snapshot
            if state is self._saved:
                return False
            self._save(state)
            self._saved = state
            return True
