"""Workspace persistence for Momentum: tasks, completions, streaks, settings.

The engines never touch disk. This module loads snapshots for them and
owns everything they leave to the caller: ids, timestamps, the
one-log-per-(task, date) rule, and first-run seeding.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any

from momentum.dates import fresh_start_kind, parse_local_date
from momentum.fileio import read_json, read_yaml, write_json_atomic, write_yaml_atomic
from momentum.models import (
    TASK_KINDS,
    CompletionLog,
    Settings,
    StreakState,
    Task,
    schedule_from_dict,
)
from momentum.workspace import (
    completions_path,
    meta_path,
    settings_path,
    streaks_path,
    tasks_path,
)

_LOGGER = logging.getLogger(__name__)

MAX_FOCUS_TASKS = 3


def _now_iso() -> str:
    return datetime.now().astimezone().isoformat(timespec="seconds")


def _new_id() -> str:
    return uuid.uuid4().hex


# ── Validation ────────────────────────────────────────────────


VALID_SCHEDULE_TYPES = {"daily", "weekdays", "times_per_week", "every_n_days"}


def validate_task(task: dict[str, Any]) -> list[str]:
    """Validate task fields and return list of errors (empty if valid)."""
    errors = []
    if not str(task.get("name", "")).strip():
        errors.append("Missing required field: name")
    if task.get("kind", "habit") not in TASK_KINDS:
        errors.append(f"Invalid task kind: {task.get('kind')}")

    target = task.get("targetPerDay", 1)
    if not isinstance(target, int) or isinstance(target, bool) or target < 1:
        errors.append("targetPerDay must be a positive integer")

    schedule = task.get("schedule") or {"type": "daily"}
    if not isinstance(schedule, dict):
        errors.append("schedule must be an object")
    elif schedule.get("type", "daily") not in VALID_SCHEDULE_TYPES:
        errors.append(f"Invalid schedule type: {schedule.get('type')}")
    else:
        weekdays = schedule.get("weekdays") or []
        if not isinstance(weekdays, list) or any(
            not isinstance(d, int) or d < 0 or d > 6 for d in weekdays
        ):
            errors.append("weekdays must be integers 0-6")
        for key in ("timesPerWeek", "everyNDays"):
            if key in schedule and (not isinstance(schedule[key], int) or schedule[key] < 1):
                errors.append(f"{key} must be a positive integer")

    return errors


# ── Tasks ─────────────────────────────────────────────────────


def load_tasks(root: Path | None = None, include_archived: bool = True) -> list[Task]:
    data = read_yaml(tasks_path(root))
    tasks = [Task.from_dict(t) for t in (data.get("tasks") or [])]
    if include_archived:
        return tasks
    return [t for t in tasks if not t.archived]


def save_tasks(tasks: list[Task], root: Path | None = None) -> None:
    write_yaml_atomic(tasks_path(root), {"tasks": [t.to_dict() for t in tasks]})


def find_task(tasks: list[Task], task_id: str) -> Task | None:
    for t in tasks:
        if t.id == task_id:
            return t
    return None


def _focus_count(tasks: list[Task], exclude_id: str = "") -> int:
    return sum(1 for t in tasks if t.focus and not t.archived and t.id != exclude_id)


def create_task(tasks: list[Task], task_data: dict[str, Any]) -> tuple[Task, list[str]]:
    """Create and add a new task. Returns (task, errors)."""
    errors = validate_task(task_data)
    if errors:
        return Task(), errors
    if task_data.get("focus") and _focus_count(tasks) >= MAX_FOCUS_TASKS:
        return Task(), [f"At most {MAX_FOCUS_TASKS} focus tasks"]

    now = _now_iso()
    data = dict(task_data)
    data.update({"id": _new_id(), "createdAt": now, "updatedAt": now, "archived": False})
    task = Task.from_dict(data)
    tasks.append(task)
    _LOGGER.debug("created task %s (%s)", task.id, task.name)
    return task, []


def update_task(
    tasks: list[Task], task_id: str, updates: dict[str, Any]
) -> tuple[Task | None, list[str]]:
    """Update a task by ID. Returns (updated_task, errors)."""
    task = find_task(tasks, task_id)
    if not task:
        return None, [f"Task not found: {task_id}"]

    task_dict = task.to_dict()
    # Identity and creation time belong to the store.
    task_dict.update({k: v for k, v in updates.items() if k not in ("id", "createdAt")})

    errors = validate_task(task_dict)
    if errors:
        return None, errors
    if task_dict.get("focus") and not task.focus and _focus_count(tasks, task_id) >= MAX_FOCUS_TASKS:
        return None, [f"At most {MAX_FOCUS_TASKS} focus tasks"]

    task_dict["updatedAt"] = _now_iso()
    updated = Task.from_dict(task_dict)
    for i, t in enumerate(tasks):
        if t.id == task_id:
            tasks[i] = updated
            break
    return updated, []


def delete_task(tasks: list[Task], completions: list[CompletionLog], task_id: str) -> bool:
    """Remove a task together with its completion logs."""
    for i, t in enumerate(tasks):
        if t.id == task_id:
            tasks.pop(i)
            completions[:] = [c for c in completions if c.task_id != task_id]
            _LOGGER.debug("deleted task %s", task_id)
            return True
    return False


def _set_archived(tasks: list[Task], task_id: str, archived: bool) -> bool:
    task = find_task(tasks, task_id)
    if task is None:
        return False
    task.archived = archived
    task.updated_at = _now_iso()
    return True


def archive_task(tasks: list[Task], task_id: str) -> bool:
    return _set_archived(tasks, task_id, True)


def unarchive_task(tasks: list[Task], task_id: str) -> bool:
    return _set_archived(tasks, task_id, False)


def set_task_focus(tasks: list[Task], task_id: str, focus: bool) -> tuple[Task | None, list[str]]:
    task = find_task(tasks, task_id)
    if task is None:
        return None, [f"Task not found: {task_id}"]
    if focus and not task.focus and _focus_count(tasks, task_id) >= MAX_FOCUS_TASKS:
        _LOGGER.warning("focus refused for %s: %d focus tasks already set", task_id, MAX_FOCUS_TASKS)
        return None, [f"At most {MAX_FOCUS_TASKS} focus tasks"]
    task.focus = focus
    task.updated_at = _now_iso()
    return task, []


# ── Completions ───────────────────────────────────────────────


def load_completions(root: Path | None = None) -> list[CompletionLog]:
    data = read_json(completions_path(root))
    return [CompletionLog.from_dict(c) for c in (data.get("completions") or [])]


def save_completions(completions: list[CompletionLog], root: Path | None = None) -> None:
    write_json_atomic(completions_path(root), {"completions": [c.to_dict() for c in completions]})


def find_completion(completions: list[CompletionLog], task_id: str, day: str) -> CompletionLog | None:
    for c in completions:
        if c.task_id == task_id and c.date == day:
            return c
    return None


def increment_completion(
    completions: list[CompletionLog], task: Task, day: str
) -> CompletionLog | None:
    """Record one more completion, never exceeding the task's target.

    Returns the log row, or None when the target was already met.
    """
    parse_local_date(day)
    log = find_completion(completions, task.id, day)
    if log is None:
        if task.target_per_day < 1:
            return None
        log = CompletionLog(id=_new_id(), task_id=task.id, date=day)
        completions.append(log)
    elif log.count_completed >= task.target_per_day:
        return None
    log.count_completed += 1
    log.timestamps.append(_now_iso())
    return log


def decrement_completion(
    completions: list[CompletionLog], task_id: str, day: str
) -> CompletionLog | None:
    """Undo the latest completion. The row is removed when it reaches 0."""
    log = find_completion(completions, task_id, day)
    if log is None or log.count_completed <= 0:
        return None
    log.count_completed -= 1
    log.timestamps = log.timestamps[:-1]
    if log.count_completed == 0:
        completions.remove(log)
    return log


def set_completion(
    completions: list[CompletionLog], task: Task, day: str, count: int
) -> CompletionLog | None:
    """Set the count directly, clamped to [0, target]. Returns None when the row is gone."""
    parse_local_date(day)
    clamped = max(0, min(count, task.target_per_day))
    log = find_completion(completions, task.id, day)

    if clamped == 0:
        if log is not None:
            completions.remove(log)
        return None

    if log is None:
        log = CompletionLog(id=_new_id(), task_id=task.id, date=day)
        completions.append(log)
    if clamped > log.count_completed:
        log.timestamps.extend(_now_iso() for _ in range(clamped - log.count_completed))
    else:
        log.timestamps = log.timestamps[:clamped]
    log.count_completed = clamped
    return log


# ── Streaks, settings, meta ───────────────────────────────────


def load_streaks(root: Path | None = None) -> StreakState:
    return StreakState.from_dict(read_json(streaks_path(root)))


def save_streaks(state: StreakState, root: Path | None = None) -> None:
    write_json_atomic(streaks_path(root), state.to_dict())


def load_settings(root: Path | None = None) -> Settings:
    return Settings.from_dict(read_yaml(settings_path(root)))


def save_settings(settings: Settings, root: Path | None = None) -> None:
    write_yaml_atomic(settings_path(root), settings.to_dict())


def record_open(today: str, root: Path | None = None) -> str | None:
    """Remember that the app was opened on *today*; return the fresh-start kind."""
    meta = read_json(meta_path(root))
    kind = fresh_start_kind(meta.get("lastOpenDate"), today)
    if meta.get("lastOpenDate") != today:
        meta["lastOpenDate"] = today
        write_json_atomic(meta_path(root), meta)
    return kind


# ── Seeding ───────────────────────────────────────────────────


_SEED_HABITS = [
    ("Shower", 1),
    ("Brush teeth", 2),
    ("Wash face", 1),
]

_SEED_CHORES = [
    ("Trash + reset week", 0, "15-minute weekly reset"),
    ("Kitchen tidy", 1, "15-minute quick clean"),
    ("Bedroom reset", 2, "15-minute tidy up"),
    ("Bathroom wipe-down", 3, "15-minute quick clean"),
    ("Laundry sort + start", 4, "15 minutes"),
    ("Laundry fold + put away", 5, "15 minutes"),
    ("Floors quick sweep", 6, "15-minute sweep"),
]


def seed_tasks() -> list[Task]:
    """Default daily habits plus one 15-minute chore per weekday."""
    now = _now_iso()
    tasks = []
    for name, target in _SEED_HABITS:
        tasks.append(Task(
            id=_new_id(), name=name, kind="habit", target_per_day=target,
            created_at=now, updated_at=now,
        ))
    for name, weekday, notes in _SEED_CHORES:
        tasks.append(Task(
            id=_new_id(), name=name, kind="chore",
            schedule=schedule_from_dict({"type": "weekdays", "weekdays": [weekday]}),
            created_at=now, updated_at=now, notes=notes,
        ))
    return tasks


def initialize_workspace(root: Path | None = None) -> bool:
    """Seed default tasks on first run and make sure settings/streaks exist.

    Returns True when the workspace was seeded by this call.
    """
    meta = read_json(meta_path(root))
    seeded = False
    if not meta.get("seeded"):
        save_tasks(seed_tasks(), root)
        meta["seeded"] = True
        write_json_atomic(meta_path(root), meta)
        seeded = True
        _LOGGER.info("seeded default tasks")

    save_settings(load_settings(root), root)
    save_streaks(load_streaks(root), root)
    return seeded


# ── Export / import ───────────────────────────────────────────


def export_data(root: Path | None = None) -> dict[str, Any]:
    return {
        "tasks": [t.to_dict() for t in load_tasks(root)],
        "completions": [c.to_dict() for c in load_completions(root)],
        "settings": load_settings(root).to_dict(),
        "streaks": load_streaks(root).to_dict(),
    }


def import_data(data: dict[str, Any], root: Path | None = None) -> None:
    """Merge a backup into the workspace. Rows with a known id are replaced."""
    tasks = load_tasks(root)
    by_id = {t.id: i for i, t in enumerate(tasks)}
    for raw in data.get("tasks") or []:
        task = Task.from_dict(raw)
        if task.id in by_id:
            tasks[by_id[task.id]] = task
        else:
            by_id[task.id] = len(tasks)
            tasks.append(task)

    completions = load_completions(root)
    for raw in data.get("completions") or []:
        log = CompletionLog.from_dict(raw)
        existing = find_completion(completions, log.task_id, log.date)
        if existing is not None:
            completions.remove(existing)
        completions.append(log)

    save_tasks(tasks, root)
    save_completions(completions, root)
    if data.get("settings"):
        save_settings(Settings.from_dict(data["settings"]), root)
    if data.get("streaks"):
        save_streaks(StreakState.from_dict(data["streaks"]), root)
    _LOGGER.info("imported %d tasks, %d completions",
                 len(data.get("tasks") or []), len(data.get("completions") or []))
