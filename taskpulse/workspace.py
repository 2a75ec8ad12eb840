"""Workspace root, configuration, timezone and path helpers for TaskPulse."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from taskpulse.fileio import read_yaml

logger = logging.getLogger(__name__)

ENV_PREFIX = "TASKPULSE"

DEFAULT_NOTIFICATION_TIMEOUT = 8.0


def _k(suffix: str) -> str:
    return f"{ENV_PREFIX}_{suffix}"


def workspace_root() -> Path:
    """Get the workspace root directory (contains user.yaml and config.yaml)."""
    return Path(
        os.environ.get(_k("ROOT"), str(Path.home() / "taskpulse"))
    ).expanduser().resolve()


# ── Path helpers ──────────────────────────────────────────────

def user_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "user.yaml"


def config_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "config.yaml"


def log_dir(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "logs"


# ── Configuration ─────────────────────────────────────────────


@dataclass(frozen=True)
class Config:
    timezone: str = "UTC"
    # How long a host keeps an undo-bearing notification on screen, in seconds.
    notification_timeout: float = DEFAULT_NOTIFICATION_TIMEOUT
    log_level: str = "INFO"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring non-numeric %s=%r", name, raw)
        return default


def load_config(root: Path | None = None) -> Config:
    """Load config.yaml, then apply TASKPULSE_* environment overrides."""
    data = read_yaml(config_path(root))
    try:
        timeout = float(data.get("notification_timeout", DEFAULT_NOTIFICATION_TIMEOUT))
    except (TypeError, ValueError):
        logger.warning("Invalid notification_timeout in config.yaml; using default")
        timeout = DEFAULT_NOTIFICATION_TIMEOUT
    return Config(
        timezone=os.environ.get(_k("TIMEZONE")) or str(data.get("timezone", "UTC")),
        notification_timeout=_env_float(_k("NOTIFICATION_TIMEOUT"), timeout),
        log_level=(os.environ.get(_k("LOG_LEVEL")) or str(data.get("log_level", "INFO"))).upper(),
    )


def get_user_timezone(root: Path | None = None) -> ZoneInfo:
    """Get the configured timezone, defaulting to UTC when unknown."""
    name = load_config(root).timezone
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r; falling back to UTC", name)
        return ZoneInfo("UTC")


def now_local(root: Path | None = None) -> datetime:
    """Get current datetime in the user's timezone."""
    return datetime.now(get_user_timezone(root))


def today_str(root: Path | None = None) -> str:
    """Get today's date string (YYYY-MM-DD) in the user's timezone."""
    return now_local(root).date().isoformat()
