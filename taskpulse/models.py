"""Typed dataclasses for the TaskPulse data model.

All stored models use from_dict/to_dict for YAML/JSON serialization.
camelCase on disk is mapped to snake_case in Python.
Unknown keys are ignored; missing keys use defaults.

State models are frozen: a change produces a new value (see
``dataclasses.replace``) rather than mutating the one readers hold.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any


_TRUE_WORDS = {"true", "yes", "on", "1"}
_FALSE_WORDS = {"false", "no", "off", "0"}


def _as_bool(value: Any, default: bool) -> bool:
    """Real booleans pass through; quoted YAML words are read as words."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    return default


def _deadline_to_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


# ── Tasks ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class Task:
    id: str = ""
    name: str = ""
    done: bool = False
    # ISO date or date-time string; YAML may also hand us date/datetime objects.
    deadline: str | date | datetime | None = None
    description: str = ""
    emoji: str | None = None
    color: str = ""
    pinned: bool = False
    date_created: str | None = None

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Task:
        return cls(
            id=str(d.get("id", "")),
            name=str(d.get("name", "")),
            done=_as_bool(d.get("done"), False),
            deadline=d.get("deadline") or None,
            description=str(d.get("description", "") or ""),
            emoji=d.get("emoji") or None,
            color=str(d.get("color", "") or ""),
            pinned=_as_bool(d.get("pinned"), False),
            date_created=_deadline_to_str(d.get("dateCreated", d.get("date_created"))),
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "done": self.done,
        }
        deadline = _deadline_to_str(self.deadline)
        if deadline:
            d["deadline"] = deadline
        if self.description:
            d["description"] = self.description
        if self.emoji:
            d["emoji"] = self.emoji
        if self.color:
            d["color"] = self.color
        if self.pinned:
            d["pinned"] = True
        if self.date_created:
            d["dateCreated"] = self.date_created
        return d


# ── Settings & user state ─────────────────────────────────────


@dataclass(frozen=True)
class Settings:
    show_progress_bar: bool = True
    enable_glow: bool = True
    # Settings this package does not interpret, kept so a save never drops them.
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: dict[str, Any] | None) -> Settings:
        if not d or not isinstance(d, dict):
            return cls()
        known = {"showProgressBar", "enableGlow"}
        return cls(
            show_progress_bar=_as_bool(d.get("showProgressBar"), True),
            enable_glow=_as_bool(d.get("enableGlow"), True),
            extra={k: v for k, v in d.items() if k not in known},
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "showProgressBar": self.show_progress_bar,
            "enableGlow": self.enable_glow,
        }
        d.update(self.extra)
        return d


@dataclass(frozen=True)
class UserState:
    """Snapshot of everything the dashboard reads from the shared store."""

    name: str = ""
    emojis_style: str = "apple"
    settings: Settings = field(default_factory=Settings)
    tasks: tuple[Task, ...] = ()

    @classmethod
    def from_dict(cls, d: dict[str, Any] | None) -> UserState:
        if not d or not isinstance(d, dict):
            return cls()
        return cls(
            name=str(d.get("name", "") or ""),
            emojis_style=str(d.get("emojisStyle", "apple") or "apple"),
            settings=Settings.from_dict(d.get("settings")),
            tasks=tuple(
                Task.from_dict(t) for t in (d.get("tasks") or []) if isinstance(t, dict)
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "emojisStyle": self.emojis_style,
            "settings": self.settings.to_dict(),
            "tasks": [t.to_dict() for t in self.tasks],
        }


# ── Derived values ────────────────────────────────────────────


@dataclass(frozen=True)
class DerivedStats:
    completed_count: int = 0
    completed_percentage: float = 0.0
    due_today_count: int = 0
    due_today_names: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "completedCount": self.completed_count,
            "completedPercentage": self.completed_percentage,
            "dueTodayCount": self.due_today_count,
            "dueTodayNames": list(self.due_today_names),
        }
