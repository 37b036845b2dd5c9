from __future__ import annotations

import logging
import os
import secrets
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Body, Depends, FastAPI, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from momentum import (
    GraceDayUnavailable,
    apply_grace_day,
    calculate_consistency_streak,
    calculate_perfect_streak,
    day_stats,
    last_n_days_stats,
    last_n_weeks_stats,
    next_best_action,
    parse_local_date,
    scheduled_tasks_for_date,
    task_subtitle,
    today_str,
    update_streak_state,
    workspace_root as _workspace_root,
)
from momentum.grading import grade_message
from momentum.models import STREAK_TYPES, Settings
from momentum.repository import (
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
    set_completion,
    set_task_focus,
    unarchive_task,
    update_task,
)
from momentum.workspace import configure_logging

configure_logging()
_LOGGER = logging.getLogger(__name__)

MAX_RANGE = 366


@asynccontextmanager
async def lifespan(_app: FastAPI):
    initialize_workspace(_workspace_root())
    yield


app = FastAPI(title="Momentum", version="0.1.0", lifespan=lifespan)


# ── Auth ──────────────────────────────────────────────────────

security = HTTPBasic(auto_error=False)


def get_current_user(credentials: HTTPBasicCredentials | None = Depends(security)) -> str:
    expected_username = os.environ.get("MOMENTUM_USERNAME", "")
    expected_password = os.environ.get("MOMENTUM_PASSWORD", "")

    if not expected_username or not expected_password:
        return "guest"

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Basic"},
        )

    correct_username = secrets.compare_digest(credentials.username.encode("utf-8"), expected_username.encode("utf-8"))
    correct_password = secrets.compare_digest(credentials.password.encode("utf-8"), expected_password.encode("utf-8"))

    if not (correct_username and correct_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )

    return credentials.username


# ── Helpers ───────────────────────────────────────────────────

def _day(value: str | None) -> str:
    """Validate an incoming date, defaulting to today."""
    if not value:
        return today_str()
    try:
        parse_local_date(value)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return value


def _count(n: int) -> int:
    if n < 1 or n > MAX_RANGE:
        raise HTTPException(status_code=400, detail=f"n must be between 1 and {MAX_RANGE}")
    return n


def _task_or_404(tasks, task_id: str):
    task = find_task(tasks, task_id)
    if task is None:
        raise HTTPException(status_code=404, detail=f"Task not found: {task_id}")
    return task


@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"status": "ok"}


# ── Today & progress ──────────────────────────────────────────

@app.get("/api/today")
def api_today(date: str | None = None, username: str = Depends(get_current_user)) -> dict[str, Any]:
    """Scheduled tasks, score and next step for one day."""
    root = _workspace_root()
    day = _day(date)
    tasks = load_tasks(root, include_archived=False)
    completions = load_completions(root)
    settings = load_settings(root)

    stats = day_stats(tasks, completions, day)
    nxt = next_best_action(tasks, completions, day)
    items = []
    for task in scheduled_tasks_for_date(tasks, day):
        log = find_completion(completions, task.id, day)
        items.append({
            "task": task.to_dict(),
            "subtitle": task_subtitle(task),
            "countCompleted": log.count_completed if log else 0,
        })

    result: dict[str, Any] = {
        "date": day,
        "stats": stats.to_dict(),
        "items": items,
        "nextAction": nxt.to_dict() if nxt else None,
    }
    if settings.show_letter_grades:
        result["gradeMessage"] = grade_message(stats.grade)
    if settings.show_fresh_start_banner and date is None:
        result["freshStart"] = record_open(day, root)
    return result


@app.get("/api/days")
def api_days(n: int = 7, date: str | None = None, username: str = Depends(get_current_user)) -> dict[str, Any]:
    root = _workspace_root()
    stats = last_n_days_stats(load_tasks(root), load_completions(root), _count(n), _day(date))
    return {"days": [s.to_dict() for s in stats]}


@app.get("/api/weeks")
def api_weeks(n: int = 4, date: str | None = None, username: str = Depends(get_current_user)) -> dict[str, Any]:
    root = _workspace_root()
    stats = last_n_weeks_stats(load_tasks(root), load_completions(root), _count(n), _day(date))
    return {"weeks": [s.to_dict() for s in stats]}


# ── Tasks ─────────────────────────────────────────────────────

@app.get("/api/tasks")
def api_list_tasks(include_archived: bool = False, username: str = Depends(get_current_user)) -> dict[str, Any]:
    tasks = load_tasks(_workspace_root(), include_archived=include_archived)
    return {"tasks": [dict(t.to_dict(), subtitle=task_subtitle(t)) for t in tasks]}


@app.post("/api/tasks")
def api_create_task(payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    root = _workspace_root()
    tasks = load_tasks(root)
    task, errors = create_task(tasks, payload)
    if errors:
        raise HTTPException(status_code=400, detail="; ".join(errors))
    save_tasks(tasks, root)
    return {"ok": True, "task": task.to_dict()}


@app.put("/api/tasks/{task_id}")
def api_update_task(task_id: str, payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    root = _workspace_root()
    tasks = load_tasks(root)
    _task_or_404(tasks, task_id)
    updated, errors = update_task(tasks, task_id, payload)
    if errors:
        raise HTTPException(status_code=400, detail="; ".join(errors))
    save_tasks(tasks, root)
    return {"ok": True, "task": updated.to_dict() if updated else None}


@app.delete("/api/tasks/{task_id}")
def api_delete_task(task_id: str, username: str = Depends(get_current_user)) -> dict[str, Any]:
    """Delete a task and its completion history."""
    root = _workspace_root()
    tasks = load_tasks(root)
    completions = load_completions(root)
    if not delete_task(tasks, completions, task_id):
        raise HTTPException(status_code=404, detail=f"Task not found: {task_id}")
    save_tasks(tasks, root)
    save_completions(completions, root)
    return {"ok": True, "task_id": task_id}


@app.post("/api/tasks/{task_id}/archive")
def api_archive_task(task_id: str, payload: dict[str, Any] = Body(default={}), username: str = Depends(get_current_user)) -> dict[str, Any]:
    root = _workspace_root()
    tasks = load_tasks(root)
    _task_or_404(tasks, task_id)
    if payload.get("archived", True):
        archive_task(tasks, task_id)
    else:
        unarchive_task(tasks, task_id)
    save_tasks(tasks, root)
    return {"ok": True, "task": find_task(tasks, task_id).to_dict()}


@app.post("/api/tasks/{task_id}/focus")
def api_focus_task(task_id: str, payload: dict[str, Any] = Body(default={}), username: str = Depends(get_current_user)) -> dict[str, Any]:
    root = _workspace_root()
    tasks = load_tasks(root)
    _task_or_404(tasks, task_id)
    task, errors = set_task_focus(tasks, task_id, bool(payload.get("focus", True)))
    if errors:
        raise HTTPException(status_code=409, detail="; ".join(errors))
    save_tasks(tasks, root)
    return {"ok": True, "task": task.to_dict()}


# ── Completions ───────────────────────────────────────────────

@app.post("/api/completions/{task_id}/{action}")
def api_completion(
    task_id: str,
    action: str,
    payload: dict[str, Any] = Body(default={}),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    """increment | decrement | set (payload: {"count": n}) a task's count for a day."""
    root = _workspace_root()
    day = _day(payload.get("date"))
    tasks = load_tasks(root)
    task = _task_or_404(tasks, task_id)
    completions = load_completions(root)

    if action == "increment":
        increment_completion(completions, task, day)
    elif action == "decrement":
        decrement_completion(completions, task_id, day)
    elif action == "set":
        try:
            count = int(payload.get("count", 0))
        except (TypeError, ValueError):
            raise HTTPException(status_code=400, detail="count must be an integer")
        set_completion(completions, task, day, count)
    else:
        raise HTTPException(status_code=400, detail=f"Unknown action: {action}")

    save_completions(completions, root)
    log = find_completion(completions, task_id, day)
    return {
        "ok": True,
        "date": day,
        "countCompleted": log.count_completed if log else 0,
        "stats": day_stats(tasks, completions, day).to_dict(),
    }


# ── Streaks ───────────────────────────────────────────────────

@app.get("/api/streaks")
def api_get_streaks(date: str | None = None, username: str = Depends(get_current_user)) -> dict[str, Any]:
    """Persisted streak state plus counts recomputed from history."""
    root = _workspace_root()
    day = _day(date)
    tasks = load_tasks(root)
    completions = load_completions(root)
    return {
        "streaks": load_streaks(root).to_dict(),
        "history": {
            "consistency": calculate_consistency_streak(tasks, completions, day),
            "perfect": calculate_perfect_streak(tasks, completions, day),
        },
    }


@app.post("/api/streaks/evaluate")
def api_evaluate_streaks(payload: dict[str, Any] = Body(default={}), username: str = Depends(get_current_user)) -> dict[str, Any]:
    root = _workspace_root()
    day = _day(payload.get("date"))
    update = update_streak_state(load_streaks(root), load_tasks(root), load_completions(root), day)
    save_streaks(update.state, root)
    if update.grace_offers:
        _LOGGER.info("grace day offered on %s for %s", day, ", ".join(update.grace_offers))
    return dict(update.to_dict(), date=day)


@app.post("/api/streaks/grace")
def api_apply_grace(payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    root = _workspace_root()
    day = _day(payload.get("date"))
    streak_type = str(payload.get("streakType", ""))
    if streak_type not in STREAK_TYPES:
        raise HTTPException(status_code=400, detail=f"Invalid streakType: {streak_type}")
    try:
        state = apply_grace_day(load_streaks(root), streak_type, day)
    except GraceDayUnavailable as e:
        raise HTTPException(status_code=409, detail=str(e))
    save_streaks(state, root)
    return {"ok": True, "streaks": state.to_dict()}


# ── Settings & backup ─────────────────────────────────────────

@app.get("/api/settings")
def api_get_settings(username: str = Depends(get_current_user)) -> dict[str, Any]:
    return load_settings(_workspace_root()).to_dict()


@app.put("/api/settings")
def api_put_settings(payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    root = _workspace_root()
    merged = dict(load_settings(root).to_dict(), **payload)
    settings = Settings.from_dict(merged)
    save_settings(settings, root)
    return settings.to_dict()


@app.get("/api/export")
def api_export(username: str = Depends(get_current_user)) -> dict[str, Any]:
    return export_data(_workspace_root())


@app.post("/api/import")
def api_import(payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    try:
        import_data(payload, _workspace_root())
    except (TypeError, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"ok": True}
