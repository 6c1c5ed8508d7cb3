"""
Interaction state machine for the task table.

Framework-free: the Textual screen translates key presses into canonical
key strings and feeds them to InteractionState.handle_key(), then redraws
from the resulting state.

Canonical keys are single printable characters ("a", " ", ".") or names:
enter, esc, backspace, ctrl+u, up, down, home, end, pageup, pagedown.

Each mode carries only the data it needs, so leaving a mode drops its
in-progress input.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Union

from todo_deadline import DeadlineParseError, format_deadline, parse_deadline
from todo_store import Task, TaskStore, ViewFilter
from todo_tui.layout import Layout, Row, build_layout

TITLE_CHAR_LIMIT = 120
DEADLINE_CHAR_LIMIT = 50


@dataclass(frozen=True)
class ConfirmTarget:
    """What a pending confirmation will act on."""

    task_ids: tuple[int, ...]
    label: str
    bulk: bool = False


@dataclass(frozen=True)
class Normal:
    pass


@dataclass(frozen=True)
class ViewDetail:
    task_id: int


@dataclass(frozen=True)
class DeleteConfirm:
    target: ConfirmTarget


@dataclass(frozen=True)
class ArchiveConfirm:
    target: ConfirmTarget


@dataclass(frozen=True)
class AddTask:
    title: str = ""


@dataclass(frozen=True)
class AddTaskDeadline:
    title: str
    deadline_text: str = ""


@dataclass(frozen=True)
class AddTaskDeadlineType:
    title: str
    deadline_text: str


Mode = Union[
    Normal,
    ViewDetail,
    DeleteConfirm,
    ArchiveConfirm,
    AddTask,
    AddTaskDeadline,
    AddTaskDeadlineType,
]


def edit_text(text: str, key: str, limit: int) -> str:
    """Apply one key to a single-line input buffer."""
    if key == "backspace":
        return text[:-1]
    if key == "ctrl+u":
        return ""
    if len(key) == 1 and key.isprintable() and len(text) < limit:
        return text + key
    return text


class InteractionState:
    """Modal controller over a TaskStore."""

    def __init__(
        self,
        store: TaskStore,
        width: int = 80,
        height: int = 24,
        view_filter: ViewFilter = ViewFilter.ALL,
    ):
        self.store = store
        self.width = width
        self.height = height
        self.view_filter = view_filter
        self.mode: Mode = Normal()
        self.selected_ids: set[int] = set()
        self.show_help = True
        self.cursor = 0
        self.status_message = ""
        self.quit_requested = False
        self.layout: Layout = build_layout((), width, height)
        self.refresh()

    # -------------------- derived state --------------------

    @property
    def bulk_active(self) -> bool:
        return bool(self.selected_ids)

    @property
    def rows(self) -> tuple[Row, ...]:
        return self.layout.rows

    def current_row(self) -> Row | None:
        if not self.rows:
            return None
        return self.rows[self.cursor]

    def current_task(self) -> Task | None:
        row = self.current_row()
        if row is None:
            return None
        return self.store.get_by_id(row.task_id)

    def refresh(self) -> None:
        """Re-project rows and clamp the cursor."""
        self.selected_ids &= {t.id for t in self.store}
        self.layout = build_layout(
            self.store.tasks_for(self.view_filter),
            self.width,
            self.height,
            is_normal_mode=isinstance(self.mode, Normal),
            show_help=self.show_help,
            selected_ids=self.selected_ids,
        )
        self.cursor = min(max(self.cursor, 0), max(len(self.rows) - 1, 0))

    # -------------------- external events --------------------

    def resize(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.refresh()

    def set_filter(self, view_filter: ViewFilter) -> None:
        self.view_filter = view_filter
        self.refresh()

    def handle_key(self, key: str) -> None:
        """Consume one key press."""
        mode = self.mode
        if isinstance(mode, Normal):
            self._handle_normal(key)
        elif isinstance(mode, ViewDetail):
            if key in ("esc", "q", "enter"):
                self._enter(Normal())
        elif isinstance(mode, (DeleteConfirm, ArchiveConfirm)):
            self._handle_confirm(mode, key)
        elif isinstance(mode, AddTask):
            self._handle_add_title(mode, key)
        elif isinstance(mode, AddTaskDeadline):
            self._handle_add_deadline(mode, key)
        elif isinstance(mode, AddTaskDeadlineType):
            self._handle_add_deadline_type(mode, key)

    def _enter(self, mode: Mode) -> None:
        self.mode = mode
        self.refresh()

    # -------------------- Normal --------------------

    def _handle_normal(self, key: str) -> None:
        if key == ".":
            self.show_help = not self.show_help
            self.refresh()
        elif key in ("esc", "q"):
            self.quit_requested = True
        elif key == "a":
            self._enter(AddTask())
        elif key in ("up", "k"):
            self._move_cursor(-1)
        elif key in ("down", "j"):
            self._move_cursor(1)
        elif key in ("home", "g"):
            self.cursor = 0
        elif key in ("end", "G"):
            self.cursor = max(len(self.rows) - 1, 0)
        elif key == "pageup":
            self._move_cursor(-self.layout.rows_height)
        elif key == "pagedown":
            self._move_cursor(self.layout.rows_height)
        elif not self.rows:
            return
        elif key == "enter":
            task = self.current_task()
            if task is not None:
                self._enter(ViewDetail(task.id))
        elif key == "t":
            self._toggle_completed()
        elif key == "n":
            self._toggle_archived()
        elif key == "d":
            target = self._confirm_target()
            if target is not None:
                self._enter(DeleteConfirm(target))
        elif key == "x":
            target = self._confirm_target()
            if target is not None:
                self._enter(ArchiveConfirm(target))
        elif key == " ":
            row = self.current_row()
            if row is not None:
                self.selected_ids ^= {row.task_id}
                self.refresh()

    def _move_cursor(self, delta: int) -> None:
        if self.rows:
            self.cursor = min(max(self.cursor + delta, 0), len(self.rows) - 1)

    def _bulk_targets(self) -> list[Task]:
        tasks = (self.store.get_by_id(tid) for tid in sorted(self.selected_ids))
        return [t for t in tasks if t is not None]

    def _toggle_completed(self) -> None:
        if self.bulk_active:
            count = 0
            for task in self._bulk_targets():
                if task.archived:
                    self.store.unarchive(task.id)
                else:
                    self.store.toggle_completed(task.id)
                count += 1
            if count:
                self.status_message = f"{count} tasks updated"
        else:
            task = self.current_task()
            if task is None:
                return
            if task.archived:
                self.store.unarchive(task.id)
                self.status_message = "Task unarchived"
            else:
                self.store.toggle_completed(task.id)
                self.status_message = "Task updated"
        self.refresh()

    def _toggle_archived(self) -> None:
        if self.bulk_active:
            count = 0
            for task in self._bulk_targets():
                if task.archived:
                    self.store.unarchive(task.id)
                else:
                    self.store.archive(task.id)
                count += 1
            if count:
                self.status_message = f"{count} tasks updated"
        else:
            task = self.current_task()
            if task is None:
                return
            if task.archived:
                self.store.unarchive(task.id)
                self.status_message = "Task unarchived"
            else:
                self.store.archive(task.id)
                self.status_message = "Task archived"
        self.refresh()

    def _confirm_target(self) -> ConfirmTarget | None:
        if self.bulk_active:
            ids = tuple(sorted(self.selected_ids))
            return ConfirmTarget(ids, f"{len(ids)} selected tasks", bulk=True)
        task = self.current_task()
        if task is None:
            return None
        return ConfirmTarget((task.id,), task.title)

    # -------------------- confirmations --------------------

    def _handle_confirm(self, mode: DeleteConfirm | ArchiveConfirm, key: str) -> None:
        if key in ("y", "Y"):
            if isinstance(mode, DeleteConfirm):
                self._perform_delete(mode.target)
            else:
                self._perform_archive(mode.target)
            self._enter(Normal())
        elif key in ("n", "N", "esc", "q"):
            self._enter(Normal())

    def _perform_delete(self, target: ConfirmTarget) -> None:
        if target.bulk:
            count = sum(1 for tid in target.task_ids if self.store.delete(tid))
            self.selected_ids.clear()
            self.status_message = f"{count} tasks deleted"
        elif self.store.delete(target.task_ids[0]):
            self.status_message = "Task deleted"
        else:
            self.status_message = "Task not found"

    def _perform_archive(self, target: ConfirmTarget) -> None:
        if target.bulk:
            count = sum(1 for tid in target.task_ids if self.store.archive(tid))
            self.selected_ids.clear()
            self.status_message = f"{count} tasks archived"
        elif self.store.archive(target.task_ids[0]):
            self.status_message = "Task archived"
        else:
            self.status_message = "Task not found"

    # -------------------- add-task flow --------------------

    def _handle_add_title(self, mode: AddTask, key: str) -> None:
        if key == "enter":
            title = mode.title.strip()
            self._enter(AddTaskDeadline(title) if title else Normal())
        elif key == "esc":
            self._enter(Normal())
        else:
            self.mode = replace(mode, title=edit_text(mode.title, key, TITLE_CHAR_LIMIT))

    def _handle_add_deadline(self, mode: AddTaskDeadline, key: str) -> None:
        if key == "enter":
            deadline_text = mode.deadline_text.strip()
            if deadline_text:
                self._enter(AddTaskDeadlineType(mode.title, deadline_text))
            else:
                self.store.add(mode.title)
                self.status_message = "New task added"
                self._enter(Normal())
        elif key == "esc":
            self._enter(Normal())
        else:
            self.mode = replace(
                mode,
                deadline_text=edit_text(mode.deadline_text, key, DEADLINE_CHAR_LIMIT),
            )

    def _handle_add_deadline_type(self, mode: AddTaskDeadlineType, key: str) -> None:
        if key in ("h", "H"):
            self._create_with_deadline(mode, hard=True)
        elif key in ("s", "S", "enter"):
            self._create_with_deadline(mode, hard=False)
        elif key == "esc":
            self._enter(Normal())

    def _create_with_deadline(self, mode: AddTaskDeadlineType, hard: bool) -> None:
        try:
            deadline = parse_deadline(mode.deadline_text)
        except DeadlineParseError as e:
            self.status_message = f"Invalid deadline format: {e}"
        else:
            self.store.add_with_deadline(mode.title, deadline, hard)
            self.status_message = f"Task added with deadline: {format_deadline(deadline, hard)}"
        self._enter(Normal())
