"""Momentum score, day/week statistics, and the legacy letter grade.

A day with nothing scheduled scores 100: nobody is penalized for having
no obligations. Completions beyond a task's target never over-count.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence

from momentum.dates import last_n_days, last_n_week_starts, week_dates
from momentum.models import CompletionLog, DayStats, Task, WeekStats
from momentum.scheduling import scheduled_tasks_for_date


CompletionIndex = dict[tuple[str, str], CompletionLog]


# ── Grades ────────────────────────────────────────────────────


def grade_for_percent(percent: int) -> str:
    """A >= 90, B >= 80, C >= 70, D >= 60, otherwise F."""
    if percent >= 90:
        return "A"
    if percent >= 80:
        return "B"
    if percent >= 70:
        return "C"
    if percent >= 60:
        return "D"
    return "F"


def is_passing_grade(grade: str) -> bool:
    return grade in ("A", "B", "C")


def grade_message(grade: str) -> str:
    return {
        "A": "Excellent! You're building great momentum.",
        "B": "Great job! Keep up the good work.",
        "C": "Making progress! Every step counts.",
        "D": "You showed up. That matters.",
        "F": "Tomorrow is a fresh start.",
    }.get(grade, "")


# ── Helpers ───────────────────────────────────────────────────


def completion_index(completions: Iterable[CompletionLog]) -> CompletionIndex:
    """Lookup by (task_id, date). Orphaned rows are simply never joined."""
    return {(c.task_id, c.date): c for c in completions}


def _count_for(index: CompletionIndex, task: Task, day: str) -> int:
    c = index.get((task.id, day))
    return c.count_completed if c is not None else 0


def percent(completed: int, target: int) -> int:
    """Whole percentage, halves rounded up; 100 when there is no target."""
    if target <= 0:
        return 100
    return int(math.floor(completed * 100 / target + 0.5))


# ── Day ───────────────────────────────────────────────────────


def momentum_score(tasks: Sequence[Task], completions: Iterable[CompletionLog], day: str) -> int:
    """0-100 share of today's sub-completions done."""
    scheduled = scheduled_tasks_for_date(tasks, day)
    if not scheduled:
        return 100

    index = completion_index(completions)
    total_target = 0
    total_completed = 0
    for task in scheduled:
        total_target += task.target_per_day
        total_completed += min(_count_for(index, task, day), task.target_per_day)
    return percent(total_completed, total_target)


# Kept under the old name for callers that still use it.
day_completion_percent = momentum_score


def day_stats(
    tasks: Sequence[Task],
    completions: Iterable[CompletionLog],
    day: str,
    index: CompletionIndex | None = None,
) -> DayStats:
    if index is None:
        index = completion_index(completions)

    scheduled = scheduled_tasks_for_date(tasks, day)
    completed_count = 0
    total_target = 0
    total_completed = 0
    focus_total = 0
    focus_completed = 0
    wins: list[str] = []

    for task in scheduled:
        count = _count_for(index, task, day)
        total_target += task.target_per_day
        total_completed += min(count, task.target_per_day)
        done = count >= task.target_per_day
        if done:
            completed_count += 1
            wins.append(task.name)
        if task.focus:
            focus_total += 1
            if done:
                focus_completed += 1

    pct = percent(total_completed, total_target)
    return DayStats(
        date=day,
        total_tasks=len(scheduled),
        completed_tasks=completed_count,
        percentage=pct,
        grade=grade_for_percent(pct),
        total_target=total_target,
        total_completed=total_completed,
        focus_tasks_total=focus_total,
        focus_tasks_completed=focus_completed,
        wins=tuple(wins),
    )


def is_consistent_day(stats: DayStats) -> bool:
    """Showed up: a focus task done if any are set, otherwise any task done."""
    if stats.focus_tasks_total > 0:
        return stats.focus_tasks_completed > 0
    return stats.completed_tasks > 0


def is_perfect_day(stats: DayStats) -> bool:
    """Everything done on a day that had something to do."""
    return stats.percentage == 100 and stats.total_tasks > 0


def last_n_days_stats(
    tasks: Sequence[Task],
    completions: Iterable[CompletionLog],
    n: int,
    from_date: str,
) -> list[DayStats]:
    index = completion_index(completions)
    return [day_stats(tasks, (), d, index) for d in last_n_days(n, from_date)]


# ── Week ──────────────────────────────────────────────────────


def week_stats(
    tasks: Sequence[Task],
    completions: Iterable[CompletionLog],
    week_start_date: str,
    previous: WeekStats | None = None,
    index: CompletionIndex | None = None,
) -> WeekStats:
    if index is None:
        index = completion_index(completions)

    daily = tuple(day_stats(tasks, (), d, index) for d in week_dates(week_start_date))
    total_target = sum(d.total_target for d in daily)
    total_completed = sum(d.total_completed for d in daily)
    pct = percent(total_completed, total_target)

    return WeekStats(
        week_start_date=week_start_date,
        total_tasks=sum(d.total_tasks for d in daily),
        completed_tasks=sum(d.completed_tasks for d in daily),
        total_target=total_target,
        total_completed=total_completed,
        percentage=pct,
        grade=grade_for_percent(pct),
        trend_vs_last_week=pct - previous.percentage if previous is not None else 0,
        consistency_days=sum(1 for d in daily if is_consistent_day(d)),
        perfect_days=sum(1 for d in daily if is_perfect_day(d)),
        daily_stats=daily,
    )


def last_n_weeks_stats(
    tasks: Sequence[Task],
    completions: Iterable[CompletionLog],
    n: int,
    from_date: str,
) -> list[WeekStats]:
    """The n weeks ending with the week of from_date, oldest first.

    Each week's trend is measured against the week computed just before it.
    """
    index = completion_index(completions)
    result: list[WeekStats] = []
    previous: WeekStats | None = None
    for start in last_n_week_starts(n, from_date):
        previous = week_stats(tasks, (), start, previous, index)
        result.append(previous)
    return result
