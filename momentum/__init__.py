"""Momentum core library — scheduling, scoring and streak engines.

Public API re-exports for convenient imports:
    from momentum import day_stats, update_streak_state, next_best_action, ...
"""

# Models
from momentum.models import (
    Task,
    CompletionLog,
    StreakState,
    StreakUpdate,
    Settings,
    DayStats,
    WeekStats,
    Daily,
    Weekdays,
    TimesPerWeek,
    EveryNDays,
    Schedule,
    schedule_from_dict,
    schedule_to_dict,
    STREAK_CONSISTENCY,
    STREAK_PERFECT,
)

# Calendar
from momentum.dates import (
    parse_local_date,
    day_of_week,
    days_between,
    week_start,
    week_end,
    week_dates,
    last_n_days,
    last_n_week_starts,
    fresh_start_kind,
)

# Scheduling
from momentum.scheduling import (
    is_due,
    scheduled_tasks_for_date,
    is_task_complete,
    task_progress,
    schedule_description,
    task_subtitle,
)

# Scoring
from momentum.grading import (
    grade_for_percent,
    is_passing_grade,
    momentum_score,
    day_completion_percent,
    day_stats,
    week_stats,
    last_n_days_stats,
    last_n_weeks_stats,
    is_consistent_day,
    is_perfect_day,
)

# Streaks
from momentum.streaks import (
    GraceDayUnavailable,
    update_streak_state,
    apply_grace_day,
    calculate_consistency_streak,
    calculate_perfect_streak,
    calculate_current_streak,
    calculate_longest_streak,
)

# Recommendation
from momentum.recommend import next_best_action, remaining_for

# Workspace
from momentum.workspace import workspace_root, today_str
