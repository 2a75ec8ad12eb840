#!/usr/bin/env python3
"""TaskPulse TUI — terminal home dashboard powered by Textual."""

from __future__ import annotations

import logging
import socket
import sys
from pathlib import Path

from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical, VerticalScroll
from textual.css.query import NoMatches
from textual.timer import Timer
from textual.widgets import (
    DataTable,
    Footer,
    Header,
    Input,
    Label,
    LoadingIndicator,
    ProgressBar,
    Static,
)

from taskpulse import (
    DeferredLoad,
    LoadStatus,
    Notification,
    StateSaver,
    StateStore,
    StatsCache,
    UndoAction,
    UserState,
    VisibilityController,
    build_dashboard,
    create_task,
    delete_task,
    load_config,
    load_user_state,
    log_dir,
    now_local,
    save_user_state,
    setup_logging,
    toggle_done,
    validate_task,
    workspace_root,
)

logger = logging.getLogger("taskpulse.cli")

# Below this many columns the add-task affordance is not offered.
COMPACT_WIDTH = 80


CSS = """
Screen {
    layout: vertical;
}

#greeting {
    text-style: bold;
    padding: 1 2 0 2;
}

#offline {
    color: $warning;
    padding: 0 2;
    display: none;
}

#stats-panel {
    height: auto;
    margin: 1 2;
    padding: 0 1;
    border: round $primary-background-darken-2;
}

#stats-panel.glow {
    border: round $accent;
}

#progress {
    margin: 1 0 0 0;
}

#count-header {
    text-style: bold;
}

#motivation, #due-today {
    color: $text-muted;
}

#tasks-area {
    height: 1fr;
    padding: 0 2;
}

#tasks-table {
    height: 1fr;
}

#load-error {
    color: $error;
    padding: 1 0;
}

#new-task {
    display: none;
    margin: 0 2;
}

#add-hint {
    dock: bottom;
    height: 1;
    padding: 0 2;
    color: $text-muted;
}

#add-hint.pulse {
    color: $accent;
    text-style: bold;
}

.section-title {
    text-style: bold;
    margin: 1 0 0 0;
}
"""


def _parse_new_task(text: str) -> dict:
    """'Name' or 'Name @ 2026-10-17[ 17:00]' -> task payload."""
    name, sep, deadline = text.partition("@")
    data: dict = {"name": name.strip()}
    if sep and deadline.strip():
        data["deadline"] = deadline.strip()
    return data


def _task_rows(state: UserState) -> list[tuple[str, str, str, str]]:
    rows = []
    for t in state.tasks:
        deadline = str(t.deadline) if t.deadline else ""
        rows.append((t.id, "x" if t.done else " ", t.name, deadline))
    return rows


class TuiNotifier:
    """Presents notifications as Textual toasts; keeps the undo alive while shown."""

    def __init__(self, app: TaskPulseApp, timeout: float) -> None:
        self._app = app
        self._timeout = timeout

    def notify(self, notification: Notification) -> None:
        message = notification.message
        if notification.action is not None:
            message += f"  Press u to {notification.action.label.lower()}."
        self._app.notify(message, title="Dashboard", severity="information", timeout=self._timeout)
        if notification.action is not None:
            self._app.offer_undo(notification.action, self._timeout)


class TaskPulseApp(App):
    """TaskPulse — home dashboard with progress, due-today and task list."""

    TITLE = "TaskPulse"
    CSS = CSS
    AUTO_FOCUS = None

    BINDINGS = [
        Binding("a", "add_task", "Add Task"),
        Binding("x", "hide_progress", "Hide Progress"),
        Binding("p", "show_progress", "Show Progress"),
        Binding("u", "undo", "Undo"),
        Binding("d", "delete_task", "Delete"),
        Binding("R", "retry_load", "Retry"),
        Binding("escape", "blur_focus", "Back"),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(self, root: Path) -> None:
        super().__init__()
        self._root = root
        self._config = load_config(root)
        self.store = StateStore(load_user_state(root))
        self._saver = StateSaver(self.store, lambda state: save_user_state(state, root))
        self.controller = VisibilityController(
            self.store, TuiNotifier(self, self._config.notification_timeout)
        )
        self._cache = StatsCache()
        self._online = True
        self._pending_undo: UndoAction | None = None
        self._undo_timer: Timer | None = None
        self._tasks_load: DeferredLoad[list[tuple[str, str, str, str]]] | None = None
        self._load_poll: Timer | None = None

    def check_action(self, action: str, parameters: tuple[object, ...]) -> bool | None:
        """Control which bindings appear in the footer based on context."""
        if action == "undo":
            return self._pending_undo is not None and not self._pending_undo.used
        if action == "add_task":
            return self.size.width >= COMPACT_WIDTH
        if action == "hide_progress":
            return self.controller.is_visible and bool(self.store.snapshot.tasks)
        if action == "show_progress":
            return not self.controller.is_visible
        if action == "retry_load":
            return self._tasks_load is not None and self._tasks_load.status is LoadStatus.FAILED
        return True

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static(id="greeting")
        yield Static(id="offline")
        yield Vertical(
            ProgressBar(total=100, show_eta=False, id="progress"),
            Static(id="count-header"),
            Static(id="motivation"),
            Static(id="due-today"),
            id="stats-panel",
        )
        yield Input(placeholder="Task name  (optional: @ 2026-10-17 17:00)", id="new-task")
        yield VerticalScroll(Label("Tasks", classes="section-title"), id="tasks-area")
        yield Static(id="add-hint")
        yield Footer()

    def on_mount(self) -> None:
        self.store.subscribe(self._on_state_change)
        self._render_dashboard()
        self._start_tasks_load()
        self.set_interval(60, self._render_dashboard)
        self.set_interval(30, self._probe_online)
        self._probe_online()

    def on_resize(self) -> None:
        self._render_dashboard()
        self.refresh_bindings()

    # ── Rendering ──────────────────────────────────────────────

    def _render_dashboard(self) -> None:
        view = build_dashboard(
            self.store.snapshot,
            now_local(self._root),
            cache=self._cache,
            online=self._online,
            compact=self.size.width < COMPACT_WIDTH,
        )

        self.query_one("#greeting", Static).update(f"👋  {view.greeting_line}")

        offline = self.query_one("#offline", Static)
        offline.display = view.offline_banner is not None
        offline.update(view.offline_banner or "")

        panel = self.query_one("#stats-panel", Vertical)
        panel.display = view.show_stats_panel
        panel.set_class(view.glow, "glow")
        if view.show_stats_panel:
            bar = self.query_one("#progress", ProgressBar)
            bar.update(progress=view.stats.completed_percentage)
            self.query_one("#count-header", Static).update(
                f"{view.percentage_label}  {view.count_header}"
            )
            self.query_one("#motivation", Static).update(view.motivation)
            due = self.query_one("#due-today", Static)
            due.display = view.due_today_text is not None
            due.update(f"Tasks due today: {view.due_today_text}" if view.due_today_text else "")

        hint = self.query_one("#add-hint", Static)
        hint.display = view.show_add_button
        hint.update(f"[a] {view.add_button_label}")
        hint.set_class(view.animate_add_button, "pulse")

    def _on_state_change(self, previous: UserState, new: UserState) -> None:
        self._render_dashboard()
        self.refresh_bindings()
        if new.tasks is not previous.tasks and self._tasks_load is not None:
            if self._tasks_load.status is LoadStatus.READY:
                self._fill_table(_task_rows(new))
        self._persist()

    @work(thread=True, group="persist")
    def _persist(self) -> None:
        try:
            self._saver.flush()
        except OSError as e:
            logger.error("Could not save user state: %s", e)
            self.call_from_thread(self.notify, f"Could not save: {e}", title="Error", severity="error")

    # ── Deferred task list ─────────────────────────────────────

    def _start_tasks_load(self) -> None:
        area = self.query_one("#tasks-area", VerticalScroll)
        for old in self.query("#tasks-table, #load-error, #tasks-loading"):
            old.remove()
        area.mount(LoadingIndicator(id="tasks-loading"))

        snapshot = self.store.snapshot
        self._tasks_load = DeferredLoad(lambda: _task_rows(snapshot), name="tasks-list")
        self._tasks_load.start()
        self._load_poll = self.set_interval(0.1, self._poll_tasks_load)

    def _poll_tasks_load(self) -> None:
        load = self._tasks_load
        if load is None or load.status is LoadStatus.PENDING:
            return
        if self._load_poll is not None:
            self._load_poll.stop()
            self._load_poll = None

        for old in self.query("#tasks-loading"):
            old.remove()
        area = self.query_one("#tasks-area", VerticalScroll)
        if load.status is LoadStatus.FAILED:
            logger.error("Task list failed to load: %s", load.error)
            area.mount(Static(f"Could not load tasks: {load.error}  (press R to retry)", id="load-error"))
        else:
            table: DataTable = DataTable(id="tasks-table", cursor_type="row")
            area.mount(table)
            table.add_columns("Done", "Task", "Deadline")
            self._fill_table(_task_rows(self.store.snapshot))
        self.refresh_bindings()

    def _fill_table(self, rows: list[tuple[str, str, str, str]]) -> None:
        table = self.query_one("#tasks-table", DataTable)
        table.clear()
        for task_id, done, name, deadline in rows:
            table.add_row(done, name, deadline, key=task_id)

    def action_retry_load(self) -> None:
        if self._tasks_load is None or self._tasks_load.status is not LoadStatus.FAILED:
            return
        self._start_tasks_load()

    # ── Connectivity ───────────────────────────────────────────

    @work(thread=True, exclusive=True)
    def _probe_online(self) -> None:
        try:
            with socket.create_connection(("1.1.1.1", 53), timeout=2):
                online = True
        except OSError:
            online = False
        if online != self._online:
            self._online = online
            logger.info("Connectivity changed: %s", "online" if online else "offline")
            self.call_from_thread(self._render_dashboard)

    # ── Progress visibility ────────────────────────────────────

    def action_hide_progress(self) -> None:
        if self.controller.is_visible:
            self.controller.hide()

    def action_show_progress(self) -> None:
        self.controller.show()

    def offer_undo(self, action: UndoAction, timeout: float) -> None:
        """Keep *action* bound to u for as long as its toast is on screen."""
        if self._undo_timer is not None:
            self._undo_timer.stop()
        self._pending_undo = action
        self._undo_timer = self.set_timer(timeout, lambda: self._expire_undo(action))
        self.refresh_bindings()

    def _expire_undo(self, action: UndoAction) -> None:
        if self._pending_undo is action:
            self._pending_undo = None
            self.refresh_bindings()

    def action_undo(self) -> None:
        action = self._pending_undo
        self._pending_undo = None
        if action is not None:
            action()
        self.refresh_bindings()

    # ── Tasks ──────────────────────────────────────────────────

    def action_add_task(self) -> None:
        box = self.query_one("#new-task", Input)
        box.display = True
        box.value = ""
        box.focus()

    @on(Input.Submitted, "#new-task")
    def _on_new_task(self, event: Input.Submitted) -> None:
        data = _parse_new_task(event.value)
        errors = validate_task(data)
        if errors:
            self.notify("; ".join(errors), title="Cannot add task", severity="warning")
            return
        self.store.update(lambda prev: create_task(prev, data)[0])
        event.input.display = False
        self.set_focus(None)

    @on(DataTable.RowSelected, "#tasks-table")
    def _on_row_selected(self, event: DataTable.RowSelected) -> None:
        task_id = event.row_key.value
        if task_id:
            self.store.update(lambda prev: toggle_done(prev, task_id)[0])

    def action_delete_task(self) -> None:
        try:
            table = self.query_one("#tasks-table", DataTable)
        except NoMatches:
            return
        if table.row_count == 0:
            return
        row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        if row_key.value:
            self.store.update(lambda prev: delete_task(prev, row_key.value)[0])

    def action_blur_focus(self) -> None:
        box = self.query_one("#new-task", Input)
        box.display = False
        self.set_focus(None)


# ── Entry point ────────────────────────────────────────────────


def main() -> None:
    root = workspace_root()
    if not root.exists():
        print(f"Workspace not found: {root}")
        print("Set TASKPULSE_ROOT or create the directory first.")
        sys.exit(1)

    config = load_config(root)
    setup_logging(log_dir=log_dir(root), console=False, file_level=config.log_level)

    try:
        app = TaskPulseApp(root)
    except ValueError as e:
        print(e)
        sys.exit(1)
    app.run()


if __name__ == "__main__":
    main()
