"""Tests for momentum/repository.py — task CRUD, completion counters, persistence."""

import json

from momentum.models import CompletionLog, Daily, Settings, StreakState, Task
from momentum.repository import (
    MAX_FOCUS_TASKS,
    archive_task,
    create_task,
    decrement_completion,
    delete_task,
    export_data,
    find_completion,
    find_task,
    import_data,
    increment_completion,
    initialize_workspace,
    load_completions,
    load_settings,
    load_streaks,
    load_tasks,
    record_open,
    save_completions,
    save_settings,
    save_streaks,
    save_tasks,
    seed_tasks,
    set_completion,
    set_task_focus,
    unarchive_task,
    update_task,
    validate_task,
)

DAY = "2025-01-15"


def _task(tid="teeth", target=2, focus=False) -> Task:
    return Task(id=tid, name=tid, target_per_day=target, focus=focus, created_at="2025-01-01T00:00:00")


# ── Validation & CRUD ─────────────────────────────────────────


def test_validate_task_valid():
    assert validate_task({"name": "Shower", "kind": "habit", "schedule": {"type": "daily"}}) == []


def test_validate_task_errors():
    assert any("name" in e for e in validate_task({"name": "  "}))
    assert any("kind" in e for e in validate_task({"name": "X", "kind": "errand"}))
    assert any("targetPerDay" in e for e in validate_task({"name": "X", "targetPerDay": 0}))
    assert any("schedule type" in e for e in validate_task({"name": "X", "schedule": {"type": "hourly"}}))
    assert any("weekdays" in e for e in validate_task(
        {"name": "X", "schedule": {"type": "weekdays", "weekdays": [7]}}
    ))
    assert any("everyNDays" in e for e in validate_task(
        {"name": "X", "schedule": {"type": "every_n_days", "everyNDays": 0}}
    ))


def test_create_task_assigns_id_and_timestamps():
    tasks: list[Task] = []
    task, errors = create_task(tasks, {"name": "Shower", "targetPerDay": 1})
    assert errors == []
    assert task.id
    assert task.created_at
    assert task.created_at == task.updated_at
    assert task.schedule == Daily()
    assert tasks == [task]


def test_create_task_invalid_is_not_added():
    tasks: list[Task] = []
    _, errors = create_task(tasks, {"name": ""})
    assert errors
    assert tasks == []


def test_focus_limit():
    tasks = [_task(f"f{i}", focus=True) for i in range(MAX_FOCUS_TASKS)]
    _, errors = create_task(tasks, {"name": "One more", "focus": True})
    assert any("focus" in e for e in errors)

    tasks.append(_task("plain"))
    task, errors = set_task_focus(tasks, "plain", True)
    assert task is None
    assert errors

    set_task_focus(tasks, "f0", False)
    task, errors = set_task_focus(tasks, "plain", True)
    assert errors == []
    assert task.focus is True


def test_update_task_keeps_identity():
    tasks = [_task()]
    updated, errors = update_task(tasks, "teeth", {"id": "hijack", "createdAt": "1999", "targetPerDay": 3})
    assert errors == []
    assert updated.id == "teeth"
    assert updated.created_at == "2025-01-01T00:00:00"
    assert updated.target_per_day == 3
    assert find_task(tasks, "teeth").target_per_day == 3


def test_update_task_missing_or_invalid():
    tasks = [_task()]
    assert update_task(tasks, "nope", {})[0] is None
    updated, errors = update_task(tasks, "teeth", {"kind": "errand"})
    assert updated is None
    assert errors
    assert find_task(tasks, "teeth").kind == "habit"


def test_delete_task_removes_completions():
    tasks = [_task(), _task("shower", target=1)]
    completions = [
        CompletionLog(id="1", task_id="teeth", date=DAY, count_completed=1),
        CompletionLog(id="2", task_id="shower", date=DAY, count_completed=1),
    ]
    assert delete_task(tasks, completions, "teeth")
    assert [t.id for t in tasks] == ["shower"]
    assert [c.task_id for c in completions] == ["shower"]
    assert not delete_task(tasks, completions, "teeth")


def test_archive_and_unarchive():
    tasks = [_task()]
    assert archive_task(tasks, "teeth")
    assert tasks[0].archived
    assert unarchive_task(tasks, "teeth")
    assert not tasks[0].archived
    assert not archive_task(tasks, "nope")


# ── Completions ───────────────────────────────────────────────


def test_increment_creates_one_row_and_caps_at_target():
    task = _task(target=2)
    completions: list[CompletionLog] = []
    increment_completion(completions, task, DAY)
    increment_completion(completions, task, DAY)
    assert increment_completion(completions, task, DAY) is None

    assert len(completions) == 1
    log = completions[0]
    assert log.count_completed == 2
    assert len(log.timestamps) == 2


def test_decrement_removes_row_at_zero():
    task = _task(target=2)
    completions: list[CompletionLog] = []
    increment_completion(completions, task, DAY)
    increment_completion(completions, task, DAY)

    decrement_completion(completions, "teeth", DAY)
    assert find_completion(completions, "teeth", DAY).count_completed == 1
    decrement_completion(completions, "teeth", DAY)
    assert completions == []
    assert decrement_completion(completions, "teeth", DAY) is None


def test_set_completion_clamps():
    task = _task(target=2)
    completions: list[CompletionLog] = []
    log = set_completion(completions, task, DAY, 10)
    assert log.count_completed == 2
    assert len(log.timestamps) == 2

    log = set_completion(completions, task, DAY, 1)
    assert log.count_completed == 1
    assert len(log.timestamps) == 1

    assert set_completion(completions, task, DAY, -3) is None
    assert completions == []


# ── Persistence ───────────────────────────────────────────────


def test_tasks_and_completions_persist(workspace):
    tasks = [_task(), _task("old", target=1)]
    tasks[1].archived = True
    save_tasks(tasks, workspace)
    assert [t.id for t in load_tasks(workspace)] == ["teeth", "old"]
    assert [t.id for t in load_tasks(workspace, include_archived=False)] == ["teeth"]

    completions: list[CompletionLog] = []
    increment_completion(completions, tasks[0], DAY)
    save_completions(completions, workspace)
    data = json.loads((workspace / "completions.json").read_text(encoding="utf-8"))
    assert data["completions"][0]["taskId"] == "teeth"
    assert load_completions(workspace)[0].count_completed == 1


def test_missing_files_load_as_defaults(workspace):
    assert load_tasks(workspace) == []
    assert load_completions(workspace) == []
    assert load_streaks(workspace) == StreakState()
    assert load_settings(workspace) == Settings()


def test_streaks_and_settings_persist(workspace):
    save_streaks(StreakState(consistency_streak=4, last_consistency_date=DAY), workspace)
    assert load_streaks(workspace).consistency_streak == 4

    save_settings(Settings(tone="coach", show_letter_grades=True), workspace)
    assert load_settings(workspace).tone == "coach"


def test_seed_tasks():
    tasks = seed_tasks()
    habits = [t for t in tasks if t.kind == "habit"]
    chores = [t for t in tasks if t.kind == "chore"]
    assert [t.name for t in habits] == ["Shower", "Brush teeth", "Wash face"]
    assert habits[1].target_per_day == 2
    assert len(chores) == 7
    assert len({t.id for t in tasks}) == len(tasks)


def test_initialize_workspace_seeds_once(workspace):
    assert initialize_workspace(workspace) is True
    assert len(load_tasks(workspace)) == 10
    assert (workspace / "settings.yaml").exists()
    assert (workspace / "streaks.json").exists()

    save_tasks(load_tasks(workspace)[:1], workspace)
    assert initialize_workspace(workspace) is False
    assert len(load_tasks(workspace)) == 1


def test_record_open(workspace):
    assert record_open("2025-01-10", workspace) is None
    assert record_open("2025-01-10", workspace) is None
    assert record_open("2025-01-11", workspace) == "new_day"
    assert record_open("2025-01-20", workspace) == "welcome_back"


def test_export_import_merges_by_id(workspace):
    save_tasks([_task()], workspace)
    backup = export_data(workspace)
    assert backup["tasks"][0]["id"] == "teeth"

    backup["tasks"][0]["name"] = "Floss"
    backup["tasks"].append(_task("new", target=1).to_dict())
    backup["completions"] = [
        {"id": "c1", "taskId": "teeth", "date": DAY, "countCompleted": 1, "timestamps": ["t"]},
    ]
    import_data(backup, workspace)
    import_data(backup, workspace)

    tasks = load_tasks(workspace)
    assert [t.id for t in tasks] == ["teeth", "new"]
    assert tasks[0].name == "Floss"
    assert len(load_completions(workspace)) == 1
