"""Completion statistics and due-today detection for the dashboard.

``aggregate`` is a pure function of (tasks, now). ``StatsCache`` memoizes it
on the identity of the task collection so hosts can call it on every render.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date, datetime, tzinfo
from typing import Any

from taskpulse.models import DerivedStats, Task

logger = logging.getLogger(__name__)


def deadline_date(deadline: Any, tz: tzinfo | None = None) -> date | None:
    """Return the local calendar date of *deadline*, or None if it has none.

    Accepts date, datetime, or an ISO-8601 string. Aware date-times are
    converted into *tz* first (the system zone when *tz* is None); naive
    ones are taken as already local. Unparseable values give None.
    """
    if deadline is None:
        return None
    if isinstance(deadline, str):
        raw = deadline.strip()
        if not raw:
            return None
        if raw.endswith(("Z", "z")):
            raw = raw[:-1] + "+00:00"
        try:
            deadline = datetime.fromisoformat(raw)
        except ValueError:
            logger.debug("Unparseable deadline %r", raw)
            return None
    if isinstance(deadline, datetime):
        if deadline.tzinfo is not None:
            try:
                deadline = deadline.astimezone(tz)
            except (OverflowError, ValueError, OSError):
                logger.debug("Deadline %r out of range for conversion", deadline)
                return None
        return deadline.date()
    if isinstance(deadline, date):
        return deadline
    logger.debug("Ignoring deadline of type %s", type(deadline).__name__)
    return None


def is_due_today(task: Task, today: date, tz: tzinfo | None = None) -> bool:
    """An undone task whose deadline falls on *today* (time of day ignored)."""
    if task.done or not task.deadline:
        return False
    return deadline_date(task.deadline, tz) == today


def aggregate(tasks: Sequence[Task], now: datetime) -> DerivedStats:
    """Compute completion counts, percentage and the due-today set.

    *now* supplies both the current calendar date and the timezone that
    aware deadlines are converted into. Due-today names keep input order.
    """
    total = len(tasks)
    completed = sum(1 for t in tasks if t.done)
    percentage = 100 * completed / total if total > 0 else 0.0

    today = now.date()
    due_names = tuple(t.name for t in tasks if is_due_today(t, today, now.tzinfo))

    return DerivedStats(
        completed_count=completed,
        completed_percentage=float(percentage),
        due_today_count=len(due_names),
        due_today_names=due_names,
    )


class StatsCache:
    """Memoize ``aggregate`` on the identity of the task collection.

    The cached value is also dropped when the local calendar date of *now*
    moves on, otherwise "due today" would stay pinned to the day the
    collection was last replaced.
    """

    def __init__(self) -> None:
        # Strong reference: keeps the id of the cached collection from being reused.
        self._tasks: Sequence[Task] | None = None
        self._day: date | None = None
        self._stats: DerivedStats | None = None
        self.hits = 0
        self.misses = 0

    def get(self, tasks: Sequence[Task], now: datetime) -> DerivedStats:
        day = now.date()
        if self._stats is not None and tasks is self._tasks and day == self._day:
            self.hits += 1
            return self._stats

        self.misses += 1
        stats = aggregate(tasks, now)
        logger.debug(
            "Recomputed stats for %d tasks: %d done, %d due today",
            len(tasks), stats.completed_count, stats.due_today_count,
        )
        self._tasks = tasks
        self._day = day
        self._stats = stats
        return stats

    def invalidate(self) -> None:
        self._tasks = None
        self._day = None
        self._stats = None
