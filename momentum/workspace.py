"""Workspace root, configuration, and path helpers for Momentum."""

from __future__ import annotations

import logging
import os
from datetime import date
from pathlib import Path


def workspace_root() -> Path:
    """Directory holding tasks, completions, streaks and settings."""
    return Path(
        os.environ.get("MOMENTUM_ROOT", str(Path.home() / "momentum"))
    ).expanduser().resolve()


def log_level() -> int:
    """Logging level from MOMENTUM_LOG_LEVEL, defaulting to WARNING."""
    name = os.environ.get("MOMENTUM_LOG_LEVEL", "WARNING").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.WARNING


def configure_logging() -> None:
    logging.basicConfig(
        level=log_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def today_str() -> str:
    """Today's local calendar day (YYYY-MM-DD).

    Only the outer surfaces call this; the engines take dates as arguments.
    """
    return date.today().isoformat()


# ── Path helpers ──────────────────────────────────────────────

def tasks_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "tasks.yaml"


def completions_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "completions.json"


def streaks_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "streaks.json"


def settings_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "settings.yaml"


def meta_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "meta.json"
