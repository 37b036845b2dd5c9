"""Which tasks are due on which day, and per-task completion helpers."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from momentum.dates import WEEKDAY_SHORT, day_of_week, days_between, local_date_of
from momentum.models import (
    CompletionLog,
    Daily,
    EveryNDays,
    Schedule,
    Task,
    TimesPerWeek,
    Weekdays,
)


def is_due(task: Task, day: str) -> bool:
    """True when the task is scheduled for the given local date."""
    if task.archived:
        return False

    schedule = task.schedule
    if isinstance(schedule, Daily):
        return True
    if isinstance(schedule, Weekdays):
        return day_of_week(day) in schedule.weekdays
    if isinstance(schedule, TimesPerWeek):
        # Weekly quota is not enforced; the task is offered every day.
        return True
    if isinstance(schedule, EveryNDays):
        n = schedule.n if schedule.n > 0 else 1
        anchor = local_date_of(task.created_at) if task.created_at else day
        return days_between(anchor, day) % n == 0
    return False


def scheduled_tasks_for_date(tasks: Iterable[Task], day: str) -> list[Task]:
    """Tasks due on *day*, in input order."""
    return [t for t in tasks if is_due(t, day)]


def target_for_date(task: Task, day: str) -> int:
    return task.target_per_day


def is_task_complete(task: Task, completion: CompletionLog | None) -> bool:
    if completion is None:
        return False
    return completion.count_completed >= task.target_per_day


def task_progress(task: Task, completion: CompletionLog | None) -> float:
    """Progress in [0, 1]."""
    if completion is None or completion.count_completed <= 0:
        return 0.0
    if task.target_per_day <= 0:
        return 1.0
    return min(1.0, completion.count_completed / task.target_per_day)


def group_tasks_by_kind(tasks: Sequence[Task]) -> dict[str, list[Task]]:
    return {
        "habits": [t for t in tasks if t.kind == "habit"],
        "chores": [t for t in tasks if t.kind == "chore"],
        "custom": [t for t in tasks if t.kind == "custom"],
    }


def schedule_description(schedule: Schedule) -> str:
    if isinstance(schedule, Daily):
        return "Every day"
    if isinstance(schedule, Weekdays):
        if not schedule.weekdays:
            return "No days selected"
        if len(schedule.weekdays) == 7:
            return "Every day"
        return ", ".join(WEEKDAY_SHORT[d] for d in sorted(schedule.weekdays))
    if isinstance(schedule, TimesPerWeek):
        return f"{schedule.n}x per week"
    if isinstance(schedule, EveryNDays):
        if schedule.n <= 1:
            return "Every day"
        if schedule.n == 2:
            return "Every other day"
        return f"Every {schedule.n} days"
    return "Custom"


def task_subtitle(task: Task) -> str:
    text = schedule_description(task.schedule)
    if task.target_per_day > 1:
        return f"{text} · {task.target_per_day}x daily"
    return text
