"""Time-of-day greeting for the dashboard header."""

from __future__ import annotations


def greet(hour: int) -> str:
    """Pick a greeting for an hour of the day (0-23).

    Morning is [5, 12), afternoon is (12, 18), everything else is evening.
    Hour 12 itself falls through to evening; that gap is kept as-is.
    """
    if not 0 <= hour <= 23:
        raise ValueError(f"hour must be in 0-23, got {hour}")
    if 5 <= hour < 12:
        return "Good morning"
    if 12 < hour < 18:
        return "Good afternoon"
    return "Good evening"


def greeting_line(greeting: str, name: str = "") -> str:
    name = (name or "").strip()
    return f"{greeting}, {name}" if name else greeting
