"""Motivational text keyed to completion percentage."""

from __future__ import annotations


def motivate(percentage: float) -> str:
    """Return the phrase for a completion percentage in [0, 100].

    Exact 0 and exact 100 are checked before the >= thresholds.
    """
    if percentage == 0:
        return "No tasks completed yet. Keep going!"
    if percentage == 100:
        return "Congratulations! All tasks completed!"
    if percentage >= 75:
        return "Almost there!"
    if percentage >= 50:
        return "You're halfway there! Keep it up!"
    if percentage >= 25:
        return "You're making good progress."
    return "You're just getting started."
