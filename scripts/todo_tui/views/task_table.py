"""Task table screen: the table in Normal mode, a centred panel otherwise."""

from __future__ import annotations

from rich.text import Text
from textual import events
from textual.app import ComposeResult
from textual.containers import Center, Middle
from textual.screen import Screen
from textual.widgets import DataTable, Header, Static

from todo_tui.layout import Column, Row
from todo_tui.state import (
    AddTask,
    AddTaskDeadline,
    AddTaskDeadlineType,
    ArchiveConfirm,
    DeleteConfirm,
    InteractionState,
    Normal,
    ViewDetail,
)
from todo_tui.theme import THEME
from todo_tui.views.panels import (
    render_add_prompt,
    render_confirm,
    render_detail,
    render_help,
)

KEY_NAMES = {
    "escape": "esc",
}

EMPTY_MESSAGE = "No tasks found. Press 'a' to add a new task!"


def canonical_key(event: events.Key) -> str:
    """Map a Textual key event onto the state machine's key vocabulary."""
    char = event.character
    if char and len(char) == 1 and char.isprintable():
        return char
    return KEY_NAMES.get(event.key, event.key)


def styled_cells(row: Row, columns: tuple[Column, ...]) -> list[Text]:
    cells = []
    for column, value in zip(columns, row.cells):
        style = ""
        if column.key == "checkbox" and value != "[ ]":
            style = THEME.selected_checkbox
        elif column.key == "title" and row.archived:
            style = THEME.archived
        elif column.key == "status":
            style = THEME.status_complete if row.completed else THEME.status_pending
        elif column.key == "deadline" and value:
            if row.hard_deadline:
                style = THEME.hard_deadline
            elif row.overdue:
                style = THEME.overdue
        elif column.key == "created":
            style = THEME.created_at
        cells.append(Text(value, style=style, no_wrap=True, overflow="ellipsis"))
    return cells


class TaskTable(DataTable, can_focus=False):
    """Rows keyed by task id; the screen owns keyboard handling."""


class TaskTableScreen(Screen):
    """Single screen driven by an InteractionState."""

    DEFAULT_CSS = """
    TaskTableScreen {
        layout: vertical;
    }

    TaskTableScreen TaskTable {
        border: round $primary;
        height: auto;
    }

    TaskTableScreen #help-bar {
        height: auto;
        padding: 0 1;
    }

    TaskTableScreen #empty-message {
        padding: 1 2;
        color: $text-muted;
    }

    TaskTableScreen #panel-box {
        height: 1fr;
    }

    TaskTableScreen #panel {
        width: auto;
        max-width: 90%;
        border: round $accent;
        padding: 1 2;
    }
    """

    def __init__(self, state: InteractionState, **kwargs) -> None:
        super().__init__(**kwargs)
        self._state = state

    def compose(self) -> ComposeResult:
        yield Header()
        yield TaskTable(id="task-table", cursor_type="row")
        yield Static(EMPTY_MESSAGE, id="empty-message")
        yield Static(id="help-bar")
        with Middle(id="panel-box"):
            with Center():
                yield Static(id="panel")

    def on_mount(self) -> None:
        self._state.resize(self.app.size.width, self.app.size.height)
        self.redraw()

    def on_resize(self, event: events.Resize) -> None:
        self._state.resize(event.size.width, event.size.height)
        self.redraw()

    def on_key(self, event: events.Key) -> None:
        event.stop()
        event.prevent_default()
        if event.key == "ctrl+s":
            self.app.save_store()
        else:
            self._state.handle_key(canonical_key(event))
            if self._state.quit_requested:
                self.app.exit()
                return
        self.redraw()

    # -------------------- drawing --------------------

    def redraw(self) -> None:
        state = self._state
        table = self.query_one(TaskTable)
        empty = self.query_one("#empty-message", Static)
        help_bar = self.query_one("#help-bar", Static)
        panel_box = self.query_one("#panel-box")
        panel = self.query_one("#panel", Static)

        if isinstance(state.mode, Normal):
            has_tasks = len(state.store) > 0
            panel_box.display = False
            table.display = has_tasks
            empty.display = not has_tasks
            help_bar.display = True
            self._fill_table(table)
            help_bar.update(render_help(state))
            return

        table.display = False
        empty.display = False
        help_bar.display = False
        panel_box.display = True
        panel.update(self._panel_text())

    def _panel_text(self) -> Text:
        mode = self._state.mode
        if isinstance(mode, ViewDetail):
            return render_detail(self._state.store.get_by_id(mode.task_id))
        if isinstance(mode, (DeleteConfirm, ArchiveConfirm)):
            return render_confirm(mode)
        if isinstance(mode, (AddTask, AddTaskDeadline, AddTaskDeadlineType)):
            return render_add_prompt(mode)
        return Text("")

    def _fill_table(self, table: TaskTable) -> None:
        layout = self._state.layout
        table.clear(columns=True)
        for column in layout.columns:
            table.add_column(column.title, width=column.width, key=column.key)
        for row in layout.rows:
            table.add_row(*styled_cells(row, layout.columns), key=str(row.task_id))
        table.styles.max_height = layout.rows_height + 3
        if layout.rows:
            table.move_cursor(row=self._state.cursor, animate=False)
