"""Streak engine for Momentum.

Two independent streaks are tracked in a persisted StreakState:

- consistency: the user showed up (focus-task aware, see is_consistent_day)
- perfect: every scheduled task hit its target

update_streak_state folds one day's result into the state. When a passing
day follows a gap and this week's grace day is unused, the engine only
*offers* the grace day; apply_grace_day must be called explicitly to use it.

The history-scan counters at the bottom recompute streaks from the
completion log alone, for views that have no persisted state.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import replace
from datetime import timedelta

from momentum.dates import is_next_day, parse_local_date, week_start
from momentum.grading import (
    completion_index,
    day_stats,
    is_consistent_day,
    is_passing_grade,
    is_perfect_day,
)
from momentum.models import (
    STREAK_CONSISTENCY,
    STREAK_PERFECT,
    STREAK_TYPES,
    CompletionLog,
    StreakState,
    StreakUpdate,
    Task,
)

_LOGGER = logging.getLogger(__name__)

GRACE_DAYS_PER_WEEK = 1
HISTORY_LIMIT_DAYS = 365


class GraceDayUnavailable(ValueError):
    """This week's grace day has already been used."""


def _roll_grace_week(state: StreakState, day: str) -> None:
    current = week_start(day)
    if state.grace_day_week_start != current:
        state.grace_days_used_this_week = 0
        state.grace_day_week_start = current


def _grace_available(state: StreakState) -> bool:
    return state.grace_days_used_this_week < GRACE_DAYS_PER_WEEK


def _has_gap(last: str | None, day: str) -> bool:
    return last is not None and last != day and not is_next_day(last, day)


def _advance(state: StreakState, kind: str, day: str) -> bool:
    """Fold a passing day into one streak. Returns True when a grace day is offered."""
    count_attr = f"{kind}_streak"
    last_attr = f"last_{kind}_date"
    last = getattr(state, last_attr)

    if not _has_gap(last, day):
        if last != day:
            setattr(state, count_attr, getattr(state, count_attr) + 1)
        setattr(state, last_attr, day)
        return False

    if _grace_available(state) and getattr(state, count_attr) > 0:
        _LOGGER.debug("%s streak gap before %s (last %s): grace day offered", kind, day, last)
        return True

    _LOGGER.debug("%s streak reset on %s (last %s)", kind, day, last)
    setattr(state, count_attr, 1)
    setattr(state, last_attr, day)
    return False


def update_streak_state(
    state: StreakState,
    tasks: Sequence[Task],
    completions: Iterable[CompletionLog],
    day: str,
) -> StreakUpdate:
    """Evaluate *day* against both streaks and return the new state.

    The input state is not modified. A failing day leaves the consistency
    streak untouched; a failing day after a gap in perfect days may offer
    the grace day but never resets the perfect streak by itself.
    """
    new = replace(state)
    _roll_grace_week(new, day)
    stats = day_stats(tasks, completions, day)
    offers: list[str] = []

    if is_consistent_day(stats):
        if _advance(new, STREAK_CONSISTENCY, day):
            offers.append(STREAK_CONSISTENCY)

    if is_perfect_day(stats):
        if _advance(new, STREAK_PERFECT, day):
            offers.append(STREAK_PERFECT)
    elif (
        _has_gap(new.last_perfect_date, day)
        and _grace_available(new)
        and new.perfect_streak > 0
    ):
        _LOGGER.debug("perfect streak missed before %s: grace day offered", day)
        offers.append(STREAK_PERFECT)

    new.best_consistency_streak = max(new.best_consistency_streak, new.consistency_streak)
    new.best_perfect_streak = max(new.best_perfect_streak, new.perfect_streak)
    return StreakUpdate(state=new, grace_offers=tuple(offers))


def apply_grace_day(state: StreakState, streak_type: str, day: str) -> StreakState:
    """Bridge a gap in one streak using this week's grace day.

    The streak keeps its count; only its last date moves to *day*.
    Raises GraceDayUnavailable when the week's budget is spent.
    """
    if streak_type not in STREAK_TYPES:
        raise ValueError(f"Unknown streak type: {streak_type!r}")

    new = replace(state)
    _roll_grace_week(new, day)
    if not _grace_available(new):
        _LOGGER.warning("grace day refused for %s on %s: already used this week", streak_type, day)
        raise GraceDayUnavailable(f"Grace day already used for the week of {new.grace_day_week_start}")

    new.grace_days_used_this_week += 1
    if streak_type == STREAK_CONSISTENCY:
        new.last_consistency_date = day
    else:
        new.last_perfect_date = day
    _LOGGER.debug("grace day applied to %s streak on %s", streak_type, day)
    return new


# ── History scans ─────────────────────────────────────────────


def _scan_back(tasks, completions, from_date, passes) -> int:
    index = completion_index(completions)
    start = parse_local_date(from_date)
    streak = 0
    for i in range(HISTORY_LIMIT_DAYS):
        day = (start - timedelta(days=i)).isoformat()
        stats = day_stats(tasks, (), day, index)
        if stats.total_tasks == 0:
            continue
        if not passes(stats):
            break
        streak += 1
    return streak


def calculate_consistency_streak(
    tasks: Sequence[Task], completions: Iterable[CompletionLog], from_date: str
) -> int:
    """Consecutive consistent days ending at from_date. Days with nothing due are skipped."""
    return _scan_back(tasks, completions, from_date, is_consistent_day)


def calculate_perfect_streak(
    tasks: Sequence[Task], completions: Iterable[CompletionLog], from_date: str
) -> int:
    return _scan_back(tasks, completions, from_date, is_perfect_day)


def calculate_current_streak(
    tasks: Sequence[Task], completions: Iterable[CompletionLog], from_date: str
) -> int:
    """Legacy streak: consecutive days graded C or better."""
    return _scan_back(tasks, completions, from_date, lambda s: is_passing_grade(s.grade))


def calculate_longest_streak(tasks: Sequence[Task], completions: Sequence[CompletionLog]) -> int:
    """Longest run of consecutive passing days among dates that have completions."""
    if not completions:
        return 0

    index = completion_index(completions)
    longest = 0
    current = 0
    prev: str | None = None
    for day in sorted({c.date for c in completions}):
        stats = day_stats(tasks, (), day, index)
        if stats.total_tasks == 0:
            continue
        if is_passing_grade(stats.grade):
            if prev is None or is_next_day(prev, day):
                current += 1
            else:
                current = 1
            longest = max(longest, current)
            prev = day
        else:
            current = 0
            prev = None
    return longest
