#!/usr/bin/env python3
"""Momentum TUI — today's tasks, score and streaks in the terminal, powered by Textual."""

from __future__ import annotations

import logging

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.reactive import reactive
from textual.widgets import DataTable, Footer, Header, Label, Static

from momentum import (
    GraceDayUnavailable,
    apply_grace_day,
    day_stats,
    last_n_days_stats,
    next_best_action,
    scheduled_tasks_for_date,
    task_subtitle,
    today_str,
    update_streak_state,
    workspace_root,
)
from momentum.dates import format_date_for_display
from momentum.grading import grade_message
from momentum.models import Task
from momentum.repository import (
    decrement_completion,
    find_completion,
    increment_completion,
    initialize_workspace,
    load_completions,
    load_settings,
    load_streaks,
    load_tasks,
    record_open,
    save_completions,
    save_streaks,
)
from momentum.workspace import configure_logging

_LOGGER = logging.getLogger(__name__)

_FRESH_START_TEXT = {
    "welcome_back": "Welcome back. Today is a fresh start.",
    "new_week": "New week, clean slate.",
    "new_day": "A new day. Pick one small thing.",
}


CSS = """
Screen {
    layout: vertical;
}

#main-layout {
    height: 1fr;
}

.section-title {
    text-style: bold;
    color: $text;
    margin: 1 0 0 0;
    padding: 0 1;
}

#today-pane {
    width: 2fr;
    padding: 0 1;
}

#side-pane {
    width: 1fr;
    padding: 0 1;
}

#today-table {
    height: 1fr;
}

#score-info, #streak-info, #next-info {
    height: auto;
    padding: 0 1;
    margin: 0 0 1 0;
    border: tall $primary-background-darken-2;
}

#banner {
    height: auto;
    padding: 0 2;
    color: $text-muted;
}

.overlay-screen {
    padding: 1 2;
}

#history-table, #tasks-table {
    height: 1fr;
}
"""


# ── Overlay views ──────────────────────────────────────────────


class HistoryScreen(Vertical):
    """Last seven days, newest first."""

    def __init__(self, day: str, **kwargs) -> None:
        super().__init__(**kwargs)
        self._day = day

    def compose(self) -> ComposeResult:
        yield Label("Last 7 days", classes="section-title")
        yield DataTable(id="history-table")

    def on_mount(self) -> None:
        table: DataTable = self.query_one("#history-table", DataTable)
        table.add_columns("Date", "Score", "Grade", "Done", "Due")

        root = workspace_root()
        stats = last_n_days_stats(load_tasks(root), load_completions(root), 7, self._day)
        for s in reversed(stats):
            table.add_row(
                format_date_for_display(s.date),
                f"{s.percentage}%",
                s.grade,
                str(s.completed_tasks),
                str(s.total_tasks),
            )


class TasksScreen(Vertical):
    """All tasks, archived included."""

    def compose(self) -> ComposeResult:
        yield Label("Tasks", classes="section-title")
        yield DataTable(id="tasks-table")

    def on_mount(self) -> None:
        table: DataTable = self.query_one("#tasks-table", DataTable)
        table.add_columns("Name", "Kind", "Schedule", "Focus", "Archived")
        for t in load_tasks(workspace_root()):
            table.add_row(
                t.name,
                t.kind,
                task_subtitle(t),
                "★" if t.focus else "",
                "yes" if t.archived else "",
            )


# ── Main app ───────────────────────────────────────────────────


class MomentumApp(App):
    """Momentum — gentle daily habit tracker."""

    TITLE = "Momentum"
    CSS = CSS

    BINDINGS = [
        Binding("d", "show_dashboard", "Today"),
        Binding("h", "show_history", "History"),
        Binding("t", "show_tasks", "Tasks"),
        Binding("plus,equals_sign,space", "increment", "Done +1"),
        Binding("minus", "decrement", "Undo"),
        Binding("e", "evaluate_streaks", "Close day"),
        Binding("g", "use_grace", "Grace day"),
        Binding("q", "quit", "Quit"),
    ]

    current_view: reactive[str] = reactive("dashboard")

    def __init__(self, day: str | None = None) -> None:
        super().__init__()
        self._day = day or today_str()
        self._rows: list[Task] = []
        self._grace_offers: tuple[str, ...] = ()

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static(id="banner")
        yield Horizontal(
            Vertical(
                Label("Today", classes="section-title"),
                DataTable(id="today-table", cursor_type="row"),
                id="today-pane",
            ),
            Vertical(
                Label("Momentum", classes="section-title"),
                Static(id="score-info"),
                Label("Next step", classes="section-title"),
                Static(id="next-info"),
                Label("Streaks", classes="section-title"),
                Static(id="streak-info"),
                id="side-pane",
            ),
            id="main-layout",
        )
        yield Footer()

    def on_mount(self) -> None:
        root = workspace_root()
        self.sub_title = format_date_for_display(self._day)
        table: DataTable = self.query_one("#today-table", DataTable)
        table.add_columns("Task", "Schedule", "Progress")

        settings = load_settings(root)
        kind = record_open(self._day, root)
        banner = self.query_one("#banner", Static)
        if settings.show_fresh_start_banner and kind:
            banner.update(_FRESH_START_TEXT[kind])
        else:
            banner.display = False

        self._load_data()

    def _load_data(self) -> None:
        """Reload tasks and completions and refresh every widget."""
        root = workspace_root()
        tasks = load_tasks(root, include_archived=False)
        completions = load_completions(root)
        settings = load_settings(root)

        # Today list
        table: DataTable = self.query_one("#today-table", DataTable)
        cursor = table.cursor_row
        table.clear()
        self._rows = scheduled_tasks_for_date(tasks, self._day)
        for task in self._rows:
            log = find_completion(completions, task.id, self._day)
            done = log.count_completed if log else 0
            mark = "✓" if done >= task.target_per_day else " "
            name = f"★ {task.name}" if task.focus else task.name
            table.add_row(f"{mark} {name}", task_subtitle(task), f"{done}/{task.target_per_day}")
        if self._rows:
            table.move_cursor(row=min(cursor, len(self._rows) - 1))

        # Score
        stats = day_stats(tasks, completions, self._day)
        score = [f"{stats.percentage}%  ({stats.completed_tasks}/{stats.total_tasks} tasks)"]
        if settings.show_letter_grades:
            score.append(f"{stats.grade}: {grade_message(stats.grade)}")
        if stats.wins:
            score.append("Wins: " + ", ".join(stats.wins))
        self.query_one("#score-info", Static).update("\n".join(score))

        # Next best action
        nxt = next_best_action(tasks, completions, self._day)
        self.query_one("#next-info", Static).update(
            nxt.name if nxt else "All done for today."
        )

        # Streaks
        streak_widget = self.query_one("#streak-info", Static)
        if settings.show_streaks:
            state = load_streaks(root)
            lines = [
                f"🔥 Consistency: {state.consistency_streak} (best {state.best_consistency_streak})",
                f"⭐ Perfect: {state.perfect_streak} (best {state.best_perfect_streak})",
            ]
            if self._grace_offers:
                lines.append(f"Grace day available: press g to keep your {self._grace_offers[0]} streak")
            streak_widget.update("\n".join(lines))
        else:
            streak_widget.update("(hidden)")

    def _selected_task(self) -> Task | None:
        if self.current_view != "dashboard" or not self._rows:
            return None
        table: DataTable = self.query_one("#today-table", DataTable)
        return self._rows[table.cursor_row]

    # ── Completion actions ─────────────────────────────────────

    def action_increment(self) -> None:
        task = self._selected_task()
        if task is None:
            return
        root = workspace_root()
        completions = load_completions(root)
        if increment_completion(completions, task, self._day) is None:
            self.notify(f"{task.name} is already done today.")
            return
        save_completions(completions, root)
        self._load_data()

    def action_decrement(self) -> None:
        task = self._selected_task()
        if task is None:
            return
        root = workspace_root()
        completions = load_completions(root)
        if decrement_completion(completions, task.id, self._day) is None:
            return
        save_completions(completions, root)
        self._load_data()

    # ── Streak actions ─────────────────────────────────────────

    def action_evaluate_streaks(self) -> None:
        root = workspace_root()
        update = update_streak_state(
            load_streaks(root), load_tasks(root), load_completions(root), self._day
        )
        save_streaks(update.state, root)
        self._grace_offers = update.grace_offers
        self._load_data()
        self.notify("Streaks updated.", title="Close day")

    def action_use_grace(self) -> None:
        if not self._grace_offers:
            self.notify("No grace day to use right now.")
            return
        # One grace day per week: bridge the first offered streak only.
        streak_type = self._grace_offers[0]
        self._grace_offers = ()
        root = workspace_root()
        try:
            state = apply_grace_day(load_streaks(root), streak_type, self._day)
        except GraceDayUnavailable as e:
            self.notify(str(e), title="Grace day", severity="warning")
            self._load_data()
            return
        save_streaks(state, root)
        self._load_data()
        self.notify(f"Grace day used. {streak_type.capitalize()} streak kept.", title="Grace day")

    # ── View switching ─────────────────────────────────────────

    def action_show_dashboard(self) -> None:
        self._switch_to("dashboard")

    def action_show_history(self) -> None:
        self._switch_to("dashboard" if self.current_view == "history" else "history")

    def action_show_tasks(self) -> None:
        self._switch_to("dashboard" if self.current_view == "tasks" else "tasks")

    def _switch_to(self, view: str) -> None:
        main = self.query_one("#main-layout", Horizontal)
        for old in self.query(".overlay-screen"):
            old.remove()

        dashboard = view == "dashboard"
        self.query_one("#today-pane").display = dashboard
        self.query_one("#side-pane").display = dashboard

        if view == "history":
            main.mount(HistoryScreen(self._day, classes="overlay-screen"))
        elif view == "tasks":
            main.mount(TasksScreen(classes="overlay-screen"))
        else:
            self._load_data()
        self.current_view = view


# ── Entry point ────────────────────────────────────────────────


def main() -> None:
    configure_logging()
    root = workspace_root()
    if initialize_workspace(root):
        _LOGGER.info("created workspace at %s", root)

    app = MomentumApp()
    app.run()


if __name__ == "__main__":
    main()
