"""Workspace documents on disk.

Momentum keeps each collection in one small file: YAML for what people
edit by hand (tasks, settings) and JSON for what the app churns through
(completions, streaks, meta). Every document is a mapping; an absent or
blank file reads as ``{}`` so a fresh workspace needs no bootstrapping.
Writes replace the whole file atomically.
"""

from __future__ import annotations

import fcntl
import json
import os
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

import yaml

Document = dict[str, Any]


def _load(path: Path, parse: Callable[[str], Any]) -> Document:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    if not text.strip():
        return {}
    doc = parse(text)
    return doc if isinstance(doc, dict) else {}


def read_json(path: Path) -> Document:
    """completions.json, streaks.json, meta.json."""
    return _load(path, json.loads)


def read_yaml(path: Path) -> Document:
    """tasks.yaml, settings.yaml."""
    return _load(path, yaml.safe_load)


def _replace_file(path: Path, content: str) -> None:
    """Write *content* next to *path* under an exclusive lock, then swap it in."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, staged = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(staged, path)
    except BaseException:
        Path(staged).unlink(missing_ok=True)
        raise


def write_json_atomic(path: Path, doc: Document) -> None:
    _replace_file(path, json.dumps(doc, indent=2, ensure_ascii=False) + "\n")


def write_yaml_atomic(path: Path, doc: Document) -> None:
    _replace_file(path, yaml.safe_dump(doc, allow_unicode=True, sort_keys=False))
