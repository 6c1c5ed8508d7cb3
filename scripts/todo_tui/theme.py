"""Static style configuration for the task table, built once at import."""

from dataclasses import dataclass

from rich.style import Style


@dataclass(frozen=True)
class Theme:
    archived: Style = Style(color="grey50", italic=True)
    status_complete: Style = Style(color="green", bold=True)
    status_pending: Style = Style(color="yellow")
    selected_checkbox: Style = Style(color="cyan", bold=True)
    hard_deadline: Style = Style(color="red", bold=True)
    overdue: Style = Style(color="red")
    task_title: Style = Style(bold=True, underline=True)
    created_at: Style = Style(color="grey62")
    help: Style = Style(color="grey50")
    status_message: Style = Style(color="green")
    list_title: Style = Style(color="white", bgcolor="purple4", bold=True)
    confirm_text: Style = Style(bold=True)
    confirm_yes: Style = Style(color="black", bgcolor="green", bold=True)
    confirm_no: Style = Style(color="black", bgcolor="red", bold=True)
    prompt: Style = Style(color="magenta", bold=True)


THEME = Theme()
