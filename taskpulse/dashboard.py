"""Dashboard view-model: everything a host needs to draw the home screen.

``build_dashboard`` composes the stats, greeting and motivation for one
``UserState`` snapshot at one moment. Connectivity and layout mode come in
as plain booleans from the host; they only decide banner and button texts.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from taskpulse.greeting import greet, greeting_line
from taskpulse.models import DerivedStats, UserState
from taskpulse.motivation import motivate
from taskpulse.stats import StatsCache, aggregate

OFFLINE_MESSAGE = "You're offline but you can use the app!"


def format_list(items: list[str] | tuple[str, ...]) -> str:
    """English long-style conjunction list: 'A', 'A and B', 'A, B, and C'."""
    items = list(items)
    if not items:
        return ""
    if len(items) == 1:
        return items[0]
    if len(items) == 2:
        return f"{items[0]} and {items[1]}"
    return ", ".join(items[:-1]) + f", and {items[-1]}"


def percentage_label(percentage: float) -> str:
    # Half rounds up (49.5 -> 50), unlike round()'s banker's rounding.
    return f"{math.floor(percentage + 0.5)}%"


def count_header(completed: int, total: int) -> str:
    if completed == 0:
        return f"You have {total} task{'s' if total > 1 else ''} to complete."
    return f"You've completed {completed} out of {total} tasks."


@dataclass(frozen=True)
class DashboardView:
    greeting: str
    greeting_line: str
    emojis_style: str
    stats: DerivedStats
    total_tasks: int
    show_stats_panel: bool
    percentage_label: str
    count_header: str
    motivation: str
    due_today_text: str | None
    glow: bool
    percentage_glow: bool
    offline_banner: str | None
    show_add_button: bool
    add_button_label: str
    animate_add_button: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "greeting": self.greeting,
            "greetingLine": self.greeting_line,
            "emojisStyle": self.emojis_style,
            "stats": self.stats.to_dict(),
            "totalTasks": self.total_tasks,
            "showStatsPanel": self.show_stats_panel,
            "percentageLabel": self.percentage_label,
            "countHeader": self.count_header,
            "motivation": self.motivation,
            "dueTodayText": self.due_today_text,
            "glow": self.glow,
            "percentageGlow": self.percentage_glow,
            "offlineBanner": self.offline_banner,
            "showAddButton": self.show_add_button,
            "addButtonLabel": self.add_button_label,
            "animateAddButton": self.animate_add_button,
        }


def build_dashboard(
    state: UserState,
    now: datetime,
    cache: StatsCache | None = None,
    online: bool = True,
    compact: bool = False,
) -> DashboardView:
    """Build the home-screen view for *state* as of *now*.

    Pass the same *cache* across renders to skip recomputing stats while
    the task collection is unchanged.
    """
    tasks = state.tasks
    stats = cache.get(tasks, now) if cache is not None else aggregate(tasks, now)
    total = len(tasks)
    greeting = greet(now.hour)
    glow = state.settings.enable_glow

    return DashboardView(
        greeting=greeting,
        greeting_line=greeting_line(greeting, state.name),
        emojis_style=state.emojis_style,
        stats=stats,
        total_tasks=total,
        show_stats_panel=total > 0 and state.settings.show_progress_bar,
        percentage_label=percentage_label(stats.completed_percentage),
        count_header=count_header(stats.completed_count, total),
        motivation=motivate(stats.completed_percentage),
        due_today_text=format_list(stats.due_today_names) if stats.due_today_count > 0 else None,
        glow=glow,
        percentage_glow=glow and stats.completed_percentage > 0,
        offline_banner=None if online else OFFLINE_MESSAGE,
        show_add_button=not compact,
        add_button_label="Add New Task" if total > 0 else "Add Task",
        animate_add_button=total == 0,
    )
