"""Typed dataclasses for the Momentum data model.

All stored models use from_dict/to_dict for JSON/YAML serialization.
camelCase on disk is mapped to snake_case in Python.
Unknown keys are ignored; missing keys use defaults.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union


TASK_KINDS = ("habit", "chore", "custom")
GRADES = ("A", "B", "C", "D", "F")

STREAK_CONSISTENCY = "consistency"
STREAK_PERFECT = "perfect"
STREAK_TYPES = (STREAK_CONSISTENCY, STREAK_PERFECT)

TONES = ("gentle", "coach", "minimal")


# ── Schedules ─────────────────────────────────────────────────


@dataclass(frozen=True)
class Daily:
    """Due every calendar day."""

    type = "daily"


@dataclass(frozen=True)
class Weekdays:
    """Due on the listed weekdays (0 = Sunday ... 6 = Saturday)."""

    weekdays: frozenset[int] = frozenset()
    type = "weekdays"


@dataclass(frozen=True)
class TimesPerWeek:
    """Shown every day; the weekly count is advisory only."""

    n: int = 1
    type = "times_per_week"


@dataclass(frozen=True)
class EveryNDays:
    """Due every n days counted from the task's creation date."""

    n: int = 1
    type = "every_n_days"


Schedule = Union[Daily, Weekdays, TimesPerWeek, EveryNDays]


def schedule_from_dict(d: dict[str, Any] | None) -> Schedule:
    """Parse the stored ``{"type": ..., ...}`` shape into a schedule variant."""
    if not d or not isinstance(d, dict):
        return Daily()
    stype = str(d.get("type", "daily"))
    if stype == "daily":
        return Daily()
    if stype == "weekdays":
        return Weekdays(frozenset(int(x) for x in (d.get("weekdays") or [])))
    if stype == "times_per_week":
        return TimesPerWeek(int(d.get("timesPerWeek", 1) or 1))
    if stype == "every_n_days":
        return EveryNDays(int(d.get("everyNDays", 1) or 1))
    raise ValueError(f"Unknown schedule type: {stype!r}")


def schedule_to_dict(schedule: Schedule) -> dict[str, Any]:
    if isinstance(schedule, Weekdays):
        return {"type": schedule.type, "weekdays": sorted(schedule.weekdays)}
    if isinstance(schedule, TimesPerWeek):
        return {"type": schedule.type, "timesPerWeek": schedule.n}
    if isinstance(schedule, EveryNDays):
        return {"type": schedule.type, "everyNDays": schedule.n}
    return {"type": "daily"}


# ── Tasks ─────────────────────────────────────────────────────


@dataclass
class Task:
    id: str = ""
    name: str = ""
    kind: str = "habit"  # habit, chore, custom
    schedule: Schedule = field(default_factory=Daily)
    target_per_day: int = 1
    focus: bool = False
    archived: bool = False
    created_at: str = ""  # ISO timestamp, anchors every_n_days
    updated_at: str = ""
    notes: str = ""

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Task:
        return cls(
            id=str(d.get("id", "")),
            name=str(d.get("name", "")),
            kind=str(d.get("kind", "habit")),
            schedule=schedule_from_dict(d.get("schedule")),
            target_per_day=int(d.get("targetPerDay", 1)),
            focus=bool(d.get("focus", False)),
            archived=bool(d.get("archived", False)),
            created_at=str(d.get("createdAt", "")),
            updated_at=str(d.get("updatedAt", "")),
            notes=str(d.get("notes", "") or ""),
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "kind": self.kind,
            "schedule": schedule_to_dict(self.schedule),
            "targetPerDay": self.target_per_day,
            "focus": self.focus,
            "archived": self.archived,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if self.notes:
            d["notes"] = self.notes
        return d


@dataclass
class CompletionLog:
    id: str = ""
    task_id: str = ""
    date: str = ""  # YYYY-MM-DD, local calendar day
    count_completed: int = 0
    timestamps: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> CompletionLog:
        return cls(
            id=str(d.get("id", "")),
            task_id=str(d.get("taskId", "")),
            date=str(d.get("date", "")),
            count_completed=int(d.get("countCompleted", 0)),
            timestamps=[str(t) for t in (d.get("timestamps") or [])],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "taskId": self.task_id,
            "date": self.date,
            "countCompleted": self.count_completed,
            "timestamps": list(self.timestamps),
        }


# ── Streaks ───────────────────────────────────────────────────


@dataclass
class StreakState:
    consistency_streak: int = 0
    last_consistency_date: str | None = None
    perfect_streak: int = 0
    last_perfect_date: str | None = None
    grace_days_used_this_week: int = 0
    grace_day_week_start: str = ""
    best_consistency_streak: int = 0
    best_perfect_streak: int = 0

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> StreakState:
        if not d or not isinstance(d, dict):
            return cls()
        return cls(
            consistency_streak=int(d.get("consistencyStreak", 0) or 0),
            last_consistency_date=d.get("lastConsistencyDate"),
            perfect_streak=int(d.get("perfectStreak", 0) or 0),
            last_perfect_date=d.get("lastPerfectDate"),
            grace_days_used_this_week=int(d.get("graceDaysUsedThisWeek", 0) or 0),
            grace_day_week_start=str(d.get("graceDayWeekStart", "") or ""),
            best_consistency_streak=int(d.get("bestConsistencyStreak", 0) or 0),
            best_perfect_streak=int(d.get("bestPerfectStreak", 0) or 0),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "consistencyStreak": self.consistency_streak,
            "lastConsistencyDate": self.last_consistency_date,
            "perfectStreak": self.perfect_streak,
            "lastPerfectDate": self.last_perfect_date,
            "graceDaysUsedThisWeek": self.grace_days_used_this_week,
            "graceDayWeekStart": self.grace_day_week_start,
            "bestConsistencyStreak": self.best_consistency_streak,
            "bestPerfectStreak": self.best_perfect_streak,
        }


@dataclass(frozen=True)
class StreakUpdate:
    """Result of one streak evaluation.

    ``grace_offers`` lists the streak types whose gap could be bridged with
    this week's grace day. Nothing is applied until the caller asks.
    """

    state: StreakState
    grace_offers: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"streaks": self.state.to_dict(), "graceOffers": list(self.grace_offers)}


# ── Settings ──────────────────────────────────────────────────


@dataclass
class Settings:
    tone: str = "gentle"
    show_letter_grades: bool = False
    show_streaks: bool = True
    scoring_mode: str = "momentumScore"
    scoring_emphasis: str = "allTasksEqual"
    enable_reminders: bool = False
    show_fresh_start_banner: bool = True

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Settings:
        if not d or not isinstance(d, dict):
            return cls()
        tone = str(d.get("tone", "gentle"))
        return cls(
            tone=tone if tone in TONES else "gentle",
            show_letter_grades=bool(d.get("showLetterGrades", False)),
            show_streaks=bool(d.get("showStreaks", True)),
            scoring_mode=str(d.get("scoringMode", "momentumScore")),
            scoring_emphasis=str(d.get("scoringEmphasis", "allTasksEqual")),
            enable_reminders=bool(d.get("enableReminders", False)),
            show_fresh_start_banner=bool(d.get("showFreshStartBanner", True)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "tone": self.tone,
            "showLetterGrades": self.show_letter_grades,
            "showStreaks": self.show_streaks,
            "scoringMode": self.scoring_mode,
            "scoringEmphasis": self.scoring_emphasis,
            "enableReminders": self.enable_reminders,
            "showFreshStartBanner": self.show_fresh_start_banner,
        }


# ── Derived stats ─────────────────────────────────────────────


@dataclass(frozen=True)
class DayStats:
    date: str = ""
    total_tasks: int = 0
    completed_tasks: int = 0
    percentage: int = 100
    grade: str = "A"
    total_target: int = 0
    total_completed: int = 0
    focus_tasks_total: int = 0
    focus_tasks_completed: int = 0
    wins: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "totalTasks": self.total_tasks,
            "completedTasks": self.completed_tasks,
            "percentage": self.percentage,
            "grade": self.grade,
            "totalTarget": self.total_target,
            "totalCompleted": self.total_completed,
            "focusTasksTotal": self.focus_tasks_total,
            "focusTasksCompleted": self.focus_tasks_completed,
            "wins": list(self.wins),
        }


@dataclass(frozen=True)
class WeekStats:
    week_start_date: str = ""
    total_tasks: int = 0
    completed_tasks: int = 0
    total_target: int = 0
    total_completed: int = 0
    percentage: int = 100
    grade: str = "A"
    trend_vs_last_week: int = 0
    consistency_days: int = 0
    perfect_days: int = 0
    daily_stats: tuple[DayStats, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "weekStartDate": self.week_start_date,
            "totalTasks": self.total_tasks,
            "completedTasks": self.completed_tasks,
            "totalTarget": self.total_target,
            "totalCompleted": self.total_completed,
            "percentage": self.percentage,
            "grade": self.grade,
            "trendVsLastWeek": self.trend_vs_last_week,
            "consistencyDays": self.consistency_days,
            "perfectDays": self.perfect_days,
            "dailyStats": [d.to_dict() for d in self.daily_stats],
        }
