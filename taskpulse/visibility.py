"""Show/hide control for the statistics panel, with an undoable hide.

``hide()`` flips ``settings.show_progress_bar`` off and hands the
notification presenter a message that carries an ``UndoAction``. How long
that message (and so the undo) stays on screen is the presenter's call.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from taskpulse.state import StateStore, with_show_progress_bar

logger = logging.getLogger(__name__)

HIDDEN_MESSAGE = "Progress bar hidden. You can enable it in settings."
UNDO_LABEL = "Undo"


class UndoAction:
    """One-shot inverse command: the first call runs it, later calls do nothing."""

    def __init__(self, inverse: Callable[[], None], label: str = UNDO_LABEL) -> None:
        self._inverse = inverse
        self.label = label
        self.used = False

    def __call__(self) -> bool:
        """Run the inverse. Returns False if it had already run."""
        if self.used:
            return False
        self.used = True
        self._inverse()
        return True


@dataclass(frozen=True)
class Notification:
    message: str
    action: UndoAction | None = None


class NotificationPresenter(Protocol):
    """Fire-and-forget toast sink. Return values are never consumed."""

    def notify(self, notification: Notification) -> None: ...


class VisibilityController:
    """Two states, visible and hidden; ``hide`` and ``show`` move between them."""

    def __init__(self, store: StateStore, presenter: NotificationPresenter) -> None:
        self._store = store
        self._presenter = presenter

    @property
    def is_visible(self) -> bool:
        return self._store.snapshot.settings.show_progress_bar

    def _set(self, value: bool) -> None:
        self._store.update(with_show_progress_bar(value))

    def hide(self) -> Notification:
        """Hide the panel and notify with an undo that restores the prior value."""
        prior = self.is_visible
        self._set(False)
        logger.info("Progress bar hidden")

        def restore() -> None:
            self._set(prior)
            logger.info("Progress bar visibility restored to %s by undo", prior)

        notification = Notification(message=HIDDEN_MESSAGE, action=UndoAction(restore))
        self._presenter.notify(notification)
        return notification

    def show(self) -> None:
        self._set(True)
        logger.info("Progress bar shown")
