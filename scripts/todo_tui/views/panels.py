"""Text for the panels shown instead of the table: detail, confirm, add-task."""

from __future__ import annotations

from rich.text import Text

from todo_deadline import format_deadline, format_relative_age, format_timestamp
from todo_store import Task, ViewFilter
from todo_tui.state import (
    AddTask,
    AddTaskDeadline,
    AddTaskDeadlineType,
    ArchiveConfirm,
    DeleteConfirm,
    InteractionState,
)
from todo_tui.theme import THEME

CURSOR = "█"

LIST_TITLES = {
    ViewFilter.ALL: "All Tasks",
    ViewFilter.ACTIVE: "Active Tasks",
    ViewFilter.ARCHIVED: "Archived Tasks",
}

HELP_NORMAL = (
    "→ t: toggle completion",
    "→ n: toggle archive/unarchive",
    "→ d: delete  x: archive",
    "→ space: select",
    "→ enter: view details",
    "→ a: add new task",
    "→ q: quit",
    "→ .: toggle help",
)

HELP_BULK = (
    "Bulk Mode:",
    "→ t: toggle completion for all selected",
    "→ n: toggle archive/unarchive for selected",
    "→ d: delete selected  x: archive selected",
    "→ space: toggle selection",
    "→ enter: view details",
    "→ a: add new task",
    "→ q: quit",
    "→ .: toggle help",
)

HELP_HINT = "→ .: toggle help"


def render_detail(task: Task | None) -> Text:
    if task is None:
        return Text("Task not found.")

    text = Text()
    text.append(task.title, style=THEME.task_title)
    text.append("\n\nStatus: ")
    if task.completed:
        text.append("Completed", style=THEME.status_complete)
    else:
        text.append("Pending", style=THEME.status_pending)
    if task.archived:
        text.append("\nArchived: ")
        text.append("Yes", style=THEME.archived)
    if task.deadline is not None:
        kind = "Hard Deadline" if task.hard_deadline else "Soft Deadline"
        relative = format_deadline(task.deadline, task.hard_deadline)
        text.append(f"\n{kind}: {format_timestamp(task.deadline)} ({relative})")
    text.append("\nCreated: ")
    text.append(format_relative_age(task.created_at), style=THEME.created_at)
    text.append("\n\n")
    text.append("Press Enter to go back", style=THEME.help)
    return text


def render_confirm(mode: DeleteConfirm | ArchiveConfirm) -> Text:
    action = "delete" if isinstance(mode, DeleteConfirm) else "archive"
    target = mode.target
    if target.bulk:
        message = f"Are you sure you want to {action} {len(target.task_ids)} selected tasks?"
    else:
        message = f'Are you sure you want to {action} task: "{target.label}"?'

    text = Text()
    text.append(message, style=THEME.confirm_text)
    text.append("\n\n")
    text.append(" Y - Yes ", style=THEME.confirm_yes)
    text.append(" ")
    text.append(" N - No ", style=THEME.confirm_no)
    return text


def render_add_prompt(mode: AddTask | AddTaskDeadline | AddTaskDeadlineType) -> Text:
    text = Text()
    if isinstance(mode, AddTask):
        text.append("Add New Task", style=THEME.prompt)
        text.append("\n\n> ")
        text.append(mode.title + CURSOR if mode.title else "Enter new task title")
        text.append("\n\n")
        text.append("Press Enter to continue, Esc to cancel", style=THEME.help)
    elif isinstance(mode, AddTaskDeadline):
        text.append("Set Deadline (Optional)", style=THEME.prompt)
        text.append("\n\n> ")
        text.append(
            mode.deadline_text + CURSOR
            if mode.deadline_text
            else "Enter deadline (e.g., 2h, 1d, 2026-01-15) or press Enter to skip"
        )
        text.append("\n\n")
        text.append(
            "Examples: 2h, 1d, 2026-01-15, 2026-01-15 15:30\n"
            "Press Enter to continue (or skip), Esc to cancel",
            style=THEME.help,
        )
    else:
        text.append("Deadline Type", style=THEME.prompt)
        text.append(f"\n\nTask: {mode.title}\nDeadline: {mode.deadline_text}\n\n")
        text.append(
            "H - Hard deadline (important!)\nS/Enter - Soft deadline\nEsc - Cancel",
            style=THEME.help,
        )
    return text


def render_help(state: InteractionState) -> Text:
    """Status bar plus key help shown under the table in Normal mode."""
    text = Text()
    text.append(f" {LIST_TITLES[state.view_filter]} ", style=THEME.list_title)
    if state.status_message:
        text.append("  ")
        text.append(state.status_message, style=THEME.status_message)
    if not state.show_help:
        text.append("\n" + HELP_HINT, style=THEME.help)
        return text
    lines = HELP_BULK if state.bulk_active else HELP_NORMAL
    text.append("\n" + "\n".join(lines), style=THEME.help)
    return text
