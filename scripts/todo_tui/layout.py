"""
Column and row layout for the task table.

Pure functions: given the viewport and the tasks to show, decide which
columns exist, how wide they are, and what each row's cells contain.
Every row always has exactly one cell per column.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime

from todo_deadline import format_deadline, format_relative_age, is_overdue, now_local
from todo_store import Task

CHECKBOX_EMPTY = "[ ]"
CHECKBOX_FILLED = "[×]"

CHECKBOX_WIDTH = 5
STATUS_WIDTH = 15
DEADLINE_WIDTH = 12
CREATED_WIDTH = 15
MIN_TITLE_WIDTH = 20

MIN_AVAILABLE_WIDTH = 40
# Border and margin around the table.
WIDTH_MARGIN = 8
# One cell of padding on each side of every column.
CELL_PADDING = 1

# Header bar, table header, status line and border.
EXTRA_HEIGHT = 4
MIN_ROWS_HEIGHT = 3
HELP_LINES_NORMAL = 8
HELP_LINES_BULK = 9


@dataclass(frozen=True)
class Column:
    key: str
    title: str
    width: int


@dataclass(frozen=True)
class Row:
    """One table row; task_id is the row's identity, never its text."""

    task_id: int
    cells: tuple[str, ...]
    archived: bool = False
    completed: bool = False
    hard_deadline: bool = False
    overdue: bool = False


@dataclass(frozen=True)
class Layout:
    columns: tuple[Column, ...]
    rows: tuple[Row, ...]
    rows_height: int

    @property
    def has_deadline_column(self) -> bool:
        return any(c.key == "deadline" for c in self.columns)


def available_width(width: int) -> int:
    return max(width - WIDTH_MARGIN, MIN_AVAILABLE_WIDTH)


def total_width(columns: Sequence[Column]) -> int:
    """Rendered width of the columns, padding included."""
    return sum(c.width + 2 * CELL_PADDING for c in columns)


def compute_columns(width: int) -> tuple[Column, ...]:
    """Fit the columns into the viewport width.

    The title takes whatever is left. Below MIN_TITLE_WIDTH the deadline
    column is dropped; on very narrow viewports status and created shrink
    so the title keeps its minimum.
    """
    available = available_width(width)

    padding = 2 * CELL_PADDING * 5
    title = available - padding - CHECKBOX_WIDTH - STATUS_WIDTH - DEADLINE_WIDTH - CREATED_WIDTH
    if title >= MIN_TITLE_WIDTH:
        return (
            Column("checkbox", "✓", CHECKBOX_WIDTH),
            Column("title", "Title", title),
            Column("status", "Status", STATUS_WIDTH),
            Column("deadline", "Deadline", DEADLINE_WIDTH),
            Column("created", "Created", CREATED_WIDTH),
        )

    padding = 2 * CELL_PADDING * 4
    status, created = STATUS_WIDTH, CREATED_WIDTH
    title = available - padding - CHECKBOX_WIDTH - status - created
    if title < MIN_TITLE_WIDTH:
        spare = max(available - padding - CHECKBOX_WIDTH - MIN_TITLE_WIDTH, 2)
        created = min(CREATED_WIDTH, max(spare // 2, 1))
        status = min(STATUS_WIDTH, max(spare - created, 1))
        title = available - padding - CHECKBOX_WIDTH - status - created

    return (
        Column("checkbox", "✓", CHECKBOX_WIDTH),
        Column("title", "Title", title),
        Column("status", "Status", status),
        Column("created", "Created", created),
    )


def help_line_count(is_normal_mode: bool, show_help: bool, bulk_active: bool) -> int:
    """Lines taken by the help text under the table."""
    if not is_normal_mode:
        return 0
    if not show_help:
        return 1
    return 2 + (HELP_LINES_BULK if bulk_active else HELP_LINES_NORMAL)


def rows_height(height: int, help_lines: int) -> int:
    return max(height - EXTRA_HEIGHT - help_lines, MIN_ROWS_HEIGHT)


def normalize_cells(cells: Sequence[str], n: int) -> tuple[str, ...]:
    """Pad with empty strings or truncate so there are exactly n cells."""
    if len(cells) >= n:
        return tuple(cells[:n])
    return tuple(cells) + ("",) * (n - len(cells))


def _cell_values(task: Task, selected: bool, now: datetime) -> dict[str, str]:
    return {
        "checkbox": CHECKBOX_FILLED if selected else CHECKBOX_EMPTY,
        "title": task.title,
        "status": "Completed" if task.completed else "Pending",
        "deadline": format_deadline(task.deadline, task.hard_deadline, now=now),
        "created": format_relative_age(task.created_at, now=now),
    }


def project_rows(
    tasks: Iterable[Task],
    columns: Sequence[Column],
    selected_ids: Collection[int] = (),
    now: datetime | None = None,
) -> tuple[Row, ...]:
    """Project tasks onto the given columns."""
    now = now or now_local()
    rows = []
    for task in tasks:
        values = _cell_values(task, task.id in selected_ids, now)
        cells = [values.get(c.key, "") for c in columns]
        rows.append(
            Row(
                task_id=task.id,
                cells=normalize_cells(cells, len(columns)),
                archived=task.archived,
                completed=task.completed,
                hard_deadline=task.hard_deadline,
                overdue=is_overdue(task.deadline, now=now),
            )
        )
    return tuple(rows)


def build_layout(
    tasks: Iterable[Task],
    width: int,
    height: int,
    *,
    is_normal_mode: bool = True,
    show_help: bool = True,
    selected_ids: Collection[int] = (),
    now: datetime | None = None,
) -> Layout:
    columns = compute_columns(width)
    help_lines = help_line_count(is_normal_mode, show_help, bool(selected_ids))
    return Layout(
        columns=columns,
        rows=project_rows(tasks, columns, selected_ids, now=now),
        rows_height=rows_height(height, help_lines),
    )
