"""Shared test fixtures for Momentum tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Empty workspace directory wired up through MOMENTUM_ROOT, auth disabled."""
    root = tmp_path / "workspace"
    root.mkdir()
    monkeypatch.setenv("MOMENTUM_ROOT", str(root))
    monkeypatch.delenv("MOMENTUM_USERNAME", raising=False)
    monkeypatch.delenv("MOMENTUM_PASSWORD", raising=False)
    return root


@pytest.fixture
def seeded_workspace(workspace: Path) -> Path:
    """Workspace with two daily habits and one Monday chore, no completions yet."""
    tasks = {
        "tasks": [
            {
                "id": "shower",
                "name": "Shower",
                "kind": "habit",
                "schedule": {"type": "daily"},
                "targetPerDay": 1,
                "createdAt": "2025-01-01T08:00:00",
                "updatedAt": "2025-01-01T08:00:00",
            },
            {
                "id": "teeth",
                "name": "Brush teeth",
                "kind": "habit",
                "schedule": {"type": "daily"},
                "targetPerDay": 2,
                "createdAt": "2025-01-01T08:00:00",
                "updatedAt": "2025-01-01T08:00:00",
            },
            {
                "id": "kitchen",
                "name": "Kitchen tidy",
                "kind": "chore",
                "schedule": {"type": "weekdays", "weekdays": [1]},
                "targetPerDay": 1,
                "createdAt": "2025-01-01T08:00:00",
                "updatedAt": "2025-01-01T08:00:00",
            },
        ]
    }
    (workspace / "tasks.yaml").write_text(
        yaml.dump(tasks, default_flow_style=False), encoding="utf-8"
    )
    (workspace / "completions.json").write_text(
        json.dumps({"completions": []}, indent=2), encoding="utf-8"
    )
    # Mark as already seeded so startup does not add the default tasks.
    (workspace / "meta.json").write_text(json.dumps({"seeded": True}), encoding="utf-8")
    return workspace
