"""Logging configuration shared by the terminal and web dashboards."""

from __future__ import annotations

import logging
import sys
from pathlib import Path


class _ConsoleNoiseFilter(logging.Filter):
    """Keep our own logs on the console; let third parties through only at ERROR+."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name == "taskpulse" or record.name.startswith("taskpulse."):
            return True
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path | None = None,
    console_level: int | str = logging.INFO,
    file_level: int | str = logging.DEBUG,
    console: bool = True,
) -> None:
    """Configure root logging once, early in a host's startup.

    Console output goes to stderr (skip it with ``console=False`` when a
    full-screen TUI owns the terminal). When *log_dir* is given, everything
    at *file_level* and above is also written to ``taskpulse.log`` there.
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if console:
        ch = logging.StreamHandler(sys.stderr)
        ch.setLevel(console_level)
        ch.setFormatter(fmt)
        ch.addFilter(_ConsoleNoiseFilter())
        root.addHandler(ch)

    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_dir / "taskpulse.log"), encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(fmt)
        root.addHandler(fh)

    logging.captureWarnings(True)
