"""Task validation, CRUD and user-state load/save for TaskPulse.

Mutations are pure: they take a ``UserState`` snapshot and return a new one
(or the same one plus errors), so they plug straight into
``StateStore.update``.
"""

from __future__ import annotations

import logging
import re
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from taskpulse.fileio import read_yaml, write_yaml_atomic
from taskpulse.models import Task, UserState
from taskpulse.stats import deadline_date
from taskpulse.workspace import user_path

logger = logging.getLogger(__name__)

TASK_ID_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


# ── Validation ────────────────────────────────────────────────


def validate_task(task: dict[str, Any]) -> list[str]:
    """Validate task fields and return list of errors (empty if valid)."""
    errors = []
    if "id" in task and not TASK_ID_RE.match(str(task["id"])):
        errors.append("id may only contain letters, digits, _ and - (at most 64)")

    name = task.get("name")
    if name is None:
        errors.append("Missing required field: name")
    elif not isinstance(name, str) or not name.strip():
        errors.append("name must be a non-empty string")

    if "done" in task and not isinstance(task["done"], bool):
        errors.append("done must be a boolean")

    deadline = task.get("deadline")
    if deadline not in (None, "") and deadline_date(deadline) is None:
        errors.append(f"Invalid deadline: {deadline!r}")

    return errors


# ── Load / save ───────────────────────────────────────────────


def load_user_state(root: Path | None = None) -> UserState:
    """Load user.yaml into a UserState snapshot (empty state if missing)."""
    path = user_path(root)
    try:
        data = read_yaml(path)
    except Exception as e:
        raise ValueError(f"Cannot read {path}: {e}") from e
    state = UserState.from_dict(data)
    logger.debug("Loaded %d tasks from %s", len(state.tasks), path)
    return state


def save_user_state(state: UserState, root: Path | None = None) -> None:
    """Save a UserState snapshot back to user.yaml atomically."""
    write_yaml_atomic(user_path(root), state.to_dict())


# ── CRUD ──────────────────────────────────────────────────────


def find_task(state: UserState, task_id: str) -> Task | None:
    for t in state.tasks:
        if t.id == task_id:
            return t
    return None


def create_task(state: UserState, task_data: dict[str, Any]) -> tuple[UserState, Task | None, list[str]]:
    """Append a new task. Returns (new_state, task, errors)."""
    errors = validate_task(task_data)
    if errors:
        return state, None, errors

    data = dict(task_data)
    data.setdefault("id", uuid.uuid4().hex[:12])
    data.setdefault("dateCreated", datetime.now(timezone.utc).isoformat(timespec="seconds"))
    data["name"] = data["name"].strip()
    if find_task(state, str(data["id"])):
        return state, None, [f"Task ID already exists: {data['id']}"]

    task = Task.from_dict(data)
    logger.info("Created task %s (%s)", task.id, task.name)
    return replace(state, tasks=state.tasks + (task,)), task, []


def update_task(state: UserState, task_id: str, updates: dict[str, Any]) -> tuple[UserState, Task | None, list[str]]:
    """Update a task by ID. Returns (new_state, updated_task, errors)."""
    task = find_task(state, task_id)
    if task is None:
        return state, None, [f"Task not found: {task_id}"]

    task_dict = task.to_dict()
    task_dict.update(updates)
    # The id is fixed by the lookup, not by the payload.
    task_dict.pop("id", None)

    errors = validate_task(task_dict)
    if errors:
        return state, None, errors
    task_dict["id"] = task_id

    updated = Task.from_dict(task_dict)
    tasks = tuple(updated if t.id == task_id else t for t in state.tasks)
    return replace(state, tasks=tasks), updated, []


def set_done(state: UserState, task_id: str, done: bool) -> tuple[UserState, Task | None, list[str]]:
    return update_task(state, task_id, {"done": done})


def toggle_done(state: UserState, task_id: str) -> tuple[UserState, Task | None, list[str]]:
    task = find_task(state, task_id)
    if task is None:
        return state, None, [f"Task not found: {task_id}"]
    return set_done(state, task_id, not task.done)


def delete_task(state: UserState, task_id: str) -> tuple[UserState, bool]:
    """Remove a task. Returns (new_state, deleted)."""
    remaining = tuple(t for t in state.tasks if t.id != task_id)
    if len(remaining) == len(state.tasks):
        return state, False
    logger.info("Deleted task %s", task_id)
    return replace(state, tasks=remaining), True
