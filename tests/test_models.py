"""Tests for taskpulse/models.py — dataclass serialization."""

from datetime import date, datetime

import pytest

from taskpulse.models import DerivedStats, Settings, Task, UserState


def test_task_from_dict_defaults():
    t = Task.from_dict({"id": 7, "name": "Plan"})
    assert t.id == "7"
    assert t.done is False
    assert t.deadline is None
    assert t.pinned is False


def test_task_to_dict_omits_empty_fields():
    assert Task(id="1", name="x").to_dict() == {"id": "1", "name": "x", "done": False}


def test_task_yaml_dates_become_iso_strings():
    t = Task.from_dict({"id": "1", "name": "x", "deadline": date(2026, 10, 17), "dateCreated": datetime(2026, 10, 1, 8, 0)})
    d = t.to_dict()
    assert d["deadline"] == "2026-10-17"
    assert d["dateCreated"] == "2026-10-01T08:00:00"


def test_task_extra_fields():
    t = Task.from_dict({"id": "1", "name": "x", "description": "d", "emoji": "1f600", "color": "#fff", "pinned": True})
    d = t.to_dict()
    assert d["description"] == "d"
    assert d["emoji"] == "1f600"
    assert d["color"] == "#fff"
    assert d["pinned"] is True


def test_settings_keep_unknown_keys():
    s = Settings.from_dict({"showProgressBar": False, "theme": "dark", "voice": {"rate": 1}})
    assert s.show_progress_bar is False
    assert s.enable_glow is True
    assert s.to_dict() == {"showProgressBar": False, "enableGlow": True, "theme": "dark", "voice": {"rate": 1}}


def test_settings_from_garbage():
    assert Settings.from_dict(None) == Settings()
    assert Settings.from_dict("nope") == Settings()


def test_user_state_from_dict():
    state = UserState.from_dict({
        "name": "Ada",
        "emojisStyle": "google",
        "settings": {"enableGlow": False},
        "tasks": [{"id": "1", "name": "x"}, "not a task"],
    })
    assert state.name == "Ada"
    assert state.emojis_style == "google"
    assert state.settings.enable_glow is False
    assert len(state.tasks) == 1
    assert isinstance(state.tasks, tuple)


def test_user_state_empty():
    assert UserState.from_dict({}) == UserState()
    assert UserState().to_dict()["tasks"] == []


def test_derived_stats_to_dict():
    d = DerivedStats(completed_count=1, completed_percentage=25.0, due_today_count=1, due_today_names=("A",)).to_dict()
    assert d == {"completedCount": 1, "completedPercentage": 25.0, "dueTodayCount": 1, "dueTodayNames": ["A"]}


@pytest.mark.parametrize("raw,expected", [("false", False), ("False", False), ("no", False), ("true", True), (True, True), (None, False), ("maybe", False)])
def test_task_done_from_hand_edited_yaml(raw, expected):
    assert Task.from_dict({"id": "1", "name": "x", "done": raw}).done is expected


def test_settings_quoted_false_hides_progress():
    s = Settings.from_dict({"showProgressBar": "false", "enableGlow": "off"})
    assert s.show_progress_bar is False
    assert s.enable_glow is False
    assert Settings.from_dict({"showProgressBar": "garbage"}).show_progress_bar is True
