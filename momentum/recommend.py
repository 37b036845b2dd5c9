"""Next-best-action suggestion: the easiest remaining step for a day."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from momentum.grading import completion_index
from momentum.models import CompletionLog, Task
from momentum.scheduling import scheduled_tasks_for_date


def remaining_for(task: Task, completions: Iterable[CompletionLog], day: str) -> int:
    """Completions still needed for the task to reach its target on *day*."""
    c = completion_index(completions).get((task.id, day))
    done = c.count_completed if c is not None else 0
    return max(0, task.target_per_day - done)


def next_best_action(
    tasks: Sequence[Task], completions: Iterable[CompletionLog], day: str
) -> Task | None:
    """Pick one incomplete task to suggest, or None when everything is done.

    Ordering: focus tasks first, then fewest completions remaining, then
    chores (framed as quick wins). Remaining ties keep input order.
    """
    index = completion_index(completions)
    pending: list[tuple[Task, int]] = []
    for task in scheduled_tasks_for_date(tasks, day):
        c = index.get((task.id, day))
        done = c.count_completed if c is not None else 0
        if done < task.target_per_day:
            pending.append((task, task.target_per_day - done))

    if not pending:
        return None

    pending.sort(key=lambda p: (not p[0].focus, p[1], p[0].kind != "chore"))
    return pending[0][0]
