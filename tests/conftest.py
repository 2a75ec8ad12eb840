"""Shared test fixtures for TaskPulse tests."""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest
import yaml

from taskpulse.models import Task


@pytest.fixture
def now() -> datetime:
    """A fixed mid-morning moment: 2026-10-17 10:00 UTC."""
    return datetime(2026, 10, 17, 10, 0, tzinfo=ZoneInfo("UTC"))


@pytest.fixture
def sample_tasks() -> tuple[Task, ...]:
    return (
        Task(id="t1", name="Write report", done=False, deadline="2026-10-17T17:00:00"),
        Task(id="t2", name="Buy milk", done=True, deadline="2026-10-17"),
        Task(id="t3", name="Call mom", done=False, deadline="2026-10-18T09:00:00"),
        Task(id="t4", name="Water plants", done=True),
    )


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create a temporary workspace with user.yaml and config.yaml."""
    root = tmp_path / "workspace"
    root.mkdir(parents=True)

    user = {
        "name": "Ada",
        "emojisStyle": "apple",
        "settings": {
            "showProgressBar": True,
            "enableGlow": True,
            "theme": "system",
        },
        "tasks": [
            {"id": "a1", "name": "Plan sprint", "done": False},
            {"id": "a2", "name": "Review PR", "done": True},
            {"id": "a3", "name": "Fix CI", "done": False, "deadline": "2026-10-17T12:00:00"},
            {"id": "a4", "name": "Update docs", "done": True},
        ],
    }
    (root / "user.yaml").write_text(
        yaml.dump(user, default_flow_style=False, sort_keys=False), encoding="utf-8"
    )

    config = {"timezone": "UTC", "notification_timeout": 5, "log_level": "debug"}
    (root / "config.yaml").write_text(
        yaml.dump(config, default_flow_style=False), encoding="utf-8"
    )

    # Set env var
    os.environ["TASKPULSE_ROOT"] = str(root)
    yield root
    # Cleanup
    if "TASKPULSE_ROOT" in os.environ:
        del os.environ["TASKPULSE_ROOT"]
