"""YAML reads and crash-safe writes for the TaskPulse workspace."""

from __future__ import annotations

import fcntl
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)


def read_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML mapping; a missing, blank or non-mapping file reads as {}."""
    if not path.exists():
        return {}
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    document = yaml.safe_load(text)
    if isinstance(document, dict):
        return document
    logger.warning("Ignoring non-mapping YAML document in %s", path)
    return {}


def write_yaml_atomic(path: Path, data: dict[str, Any]) -> None:
    """Dump *data* next to *path* under an exclusive lock, then rename over it.

    Readers see either the previous file or the complete new one.
    """
    content = yaml.dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, staged = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}-", suffix=".yaml")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as out:
            fcntl.flock(out.fileno(), fcntl.LOCK_EX)
            try:
                out.write(content)
                out.flush()
                os.fsync(out.fileno())
            finally:
                fcntl.flock(out.fileno(), fcntl.LOCK_UN)
        os.replace(staged, path)
    except BaseException:
        if os.path.exists(staged):
            os.unlink(staged)
        raise
    logger.debug("Saved %s (%d bytes)", path, len(content))
