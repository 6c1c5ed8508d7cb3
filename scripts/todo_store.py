"""
Task store for todo-tracker.

Single source of truth for the todo list. All task mutation goes through
TaskStore; load_store/save_store move it to and from a JSON file.

File layout:
    {
      "todos": [
        {"id": 1, "title": "...", "completed": false, "archived": false,
         "created_at": "2024-01-15T09:30:00+01:00",
         "deadline": "2024-01-16T00:00:00+01:00", "hard_deadline": true}
      ],
      "next_id": 2
    }
"""

from __future__ import annotations

import json
import logging
import os
import sys
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Iterator

from jsonschema import ValidationError, validate

from todo_deadline import now_local, to_local

logger = logging.getLogger(__name__)

APP_DIR_NAME = "todo-tracker"
DATA_FILENAME = "todos.json"
DATA_DIR_ENV = "TODO_DATA_DIR"

STORE_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "properties": {
        "todos": {
            "type": ["array", "null"],
            "items": {
                "type": "object",
                "required": ["id", "title"],
                "properties": {
                    "id": {"type": "integer", "minimum": 1},
                    "title": {"type": "string"},
                    "completed": {"type": "boolean"},
                    "archived": {"type": "boolean"},
                    "created_at": {"type": ["string", "null"]},
                    "deadline": {"type": ["string", "null"]},
                    "hard_deadline": {"type": "boolean"},
                },
            },
        },
        "next_id": {"type": "integer", "minimum": 0},
    },
}


class StoreIOError(Exception):
    """Reading or writing the todo file failed."""

    def __init__(self, path: Path, message: str):
        self.path = path
        super().__init__(f"{path}: {message}")


class ViewFilter(Enum):
    """Which tasks a view shows."""

    ALL = "all"
    ACTIVE = "active"
    ARCHIVED = "archived"


@dataclass
class Task:
    """One todo item. Only TaskStore creates these."""

    id: int
    title: str
    completed: bool = False
    archived: bool = False
    created_at: datetime = field(default_factory=now_local)
    deadline: datetime | None = None
    hard_deadline: bool = False

    def __post_init__(self) -> None:
        if self.deadline is None:
            self.hard_deadline = False

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "completed": self.completed,
            "archived": self.archived,
            "created_at": self.created_at.isoformat(),
        }
        if self.deadline is not None:
            data["deadline"] = self.deadline.isoformat()
        data["hard_deadline"] = self.hard_deadline
        return data


def _parse_datetime(s: str | None) -> datetime | None:
    """Parse an ISO datetime string; None for empty or zero timestamps.

    Raises ValueError for text that is not a usable timestamp.
    """
    if not s:
        return None
    parsed = datetime.fromisoformat(s.replace("Z", "+00:00"))
    if parsed.year <= 1:
        return None
    try:
        return to_local(parsed)
    except OverflowError as e:
        raise ValueError(f"timestamp out of range: {s}") from e


def _task_from_dict(data: dict[str, Any]) -> Task:
    try:
        created_at = _parse_datetime(data.get("created_at"))
    except ValueError:
        created_at = None
    if created_at is None:
        logger.debug("Backfilling created_at for task %s", data["id"])
        created_at = now_local()
    try:
        deadline = _parse_datetime(data.get("deadline"))
    except ValueError as e:
        raise ValueError(f"task {data['id']} has an invalid deadline: {e}") from e
    return Task(
        id=data["id"],
        title=data["title"],
        completed=data.get("completed", False),
        archived=data.get("archived", False),
        created_at=created_at,
        deadline=deadline,
        hard_deadline=data.get("hard_deadline", False),
    )


class TaskStore:
    """Ordered task list with monotonic id allocation."""

    def __init__(self, tasks: list[Task] | None = None, next_id: int = 1):
        self._tasks: list[Task] = list(tasks or [])
        highest = max((t.id for t in self._tasks), default=0)
        self.next_id = max(next_id, highest + 1)
        self._index: dict[int, int] = {}
        self._rebuild_index()

    def _rebuild_index(self) -> None:
        self._index = {task.id: pos for pos, task in enumerate(self._tasks)}

    @property
    def tasks(self) -> tuple[Task, ...]:
        return tuple(self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(tuple(self._tasks))

    # -------------------- creation --------------------

    def add(self, title: str) -> Task:
        """Append a new pending task. Title is not validated here."""
        return self.add_with_deadline(title, None, False)

    def add_with_deadline(
        self, title: str, deadline: datetime | None, hard: bool = False
    ) -> Task:
        task = Task(
            id=self.next_id,
            title=title,
            deadline=deadline,
            hard_deadline=hard,
        )
        self._tasks.append(task)
        self._index[task.id] = len(self._tasks) - 1
        self.next_id += 1
        return task

    # -------------------- mutation --------------------

    def toggle_completed(self, task_id: int) -> bool:
        task = self.get_by_id(task_id)
        if task is None:
            return False
        task.completed = not task.completed
        return True

    def archive(self, task_id: int) -> bool:
        task = self.get_by_id(task_id)
        if task is None:
            return False
        task.archived = True
        return True

    def unarchive(self, task_id: int) -> bool:
        task = self.get_by_id(task_id)
        if task is None:
            return False
        task.archived = False
        return True

    def delete(self, task_id: int) -> bool:
        pos = self._index.get(task_id)
        if pos is None:
            return False
        del self._tasks[pos]
        self._rebuild_index()
        return True

    def delete_by_title(self, title: str, case_sensitive: bool = True) -> bool:
        task = self.find_by_title(title, case_sensitive)
        if task is None:
            return False
        return self.delete(task.id)

    # -------------------- queries --------------------

    def get_by_id(self, task_id: int) -> Task | None:
        pos = self._index.get(task_id)
        if pos is None:
            return None
        return self._tasks[pos]

    def find_by_title(self, title: str, case_sensitive: bool = True) -> Task | None:
        """First task whose title matches exactly (or case-insensitively)."""
        if case_sensitive:
            return next((t for t in self._tasks if t.title == title), None)
        folded = title.casefold()
        return next((t for t in self._tasks if t.title.casefold() == folded), None)

    def active_tasks(self) -> list[Task]:
        return [t for t in self._tasks if not t.archived]

    def archived_tasks(self) -> list[Task]:
        return [t for t in self._tasks if t.archived]

    def tasks_for(self, view_filter: ViewFilter) -> list[Task]:
        if view_filter is ViewFilter.ARCHIVED:
            return self.archived_tasks()
        if view_filter is ViewFilter.ACTIVE:
            return self.active_tasks()
        return list(self._tasks)

    def titles(self) -> list[str]:
        return [t.title for t in self._tasks]

    def active_and_archived_titles(self) -> tuple[list[str], list[str]]:
        active = [t.title for t in self._tasks if not t.archived]
        archived = [t.title for t in self._tasks if t.archived]
        return active, archived

    # -------------------- serialisation --------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "todos": [t.to_dict() for t in self._tasks],
            "next_id": self.next_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TaskStore:
        """Build a store from the file layout; ValueError on duplicate ids or bad deadlines."""
        raw_tasks = data.get("todos") or []
        seen: set[int] = set()
        for raw in raw_tasks:
            if raw["id"] in seen:
                raise ValueError(f"duplicate task id {raw['id']}")
            seen.add(raw["id"])
        tasks = [_task_from_dict(raw) for raw in raw_tasks]
        return cls(tasks, next_id=data.get("next_id", 1))


# -------------------- persistence --------------------


def default_data_dir() -> Path:
    """Directory holding the todo file, honouring $TODO_DATA_DIR."""
    override = os.environ.get(DATA_DIR_ENV)
    if override:
        return Path(override).expanduser()

    if sys.platform == "darwin":
        cache_dir = Path.home() / "Library" / "Caches"
    elif sys.platform == "win32":
        cache_dir = Path(os.environ.get("LOCALAPPDATA") or Path.home() / "AppData" / "Local")
    else:
        xdg = os.environ.get("XDG_CACHE_HOME")
        cache_dir = Path(xdg) if xdg else Path.home() / ".cache"
    return cache_dir / APP_DIR_NAME


def default_data_file() -> Path:
    return default_data_dir() / DATA_FILENAME


def load_store(path: Path | None = None) -> TaskStore:
    """Load the store from path; a missing file yields an empty store."""
    path = path or default_data_file()
    if not path.exists():
        logger.info("No todo file at %s, starting empty", path)
        return TaskStore()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        logger.error("Could not read %s: %s", path, e)
        raise StoreIOError(path, f"could not read file: {e}") from e
    except json.JSONDecodeError as e:
        logger.error("Invalid JSON in %s: %s", path, e)
        raise StoreIOError(path, f"invalid JSON: {e}") from e

    try:
        validate(instance=data, schema=STORE_SCHEMA)
    except ValidationError as e:
        where = " -> ".join(str(p) for p in e.absolute_path) if e.absolute_path else "root"
        logger.error("Schema mismatch in %s at %s: %s", path, where, e.message)
        raise StoreIOError(path, f"validation error at '{where}': {e.message}") from e

    try:
        store = TaskStore.from_dict(data)
    except ValueError as e:
        logger.error("Inconsistent data in %s: %s", path, e)
        raise StoreIOError(path, f"inconsistent data: {e}") from e
    logger.info("Loaded %d task(s) from %s", len(store), path)
    return store


def save_store(store: TaskStore, path: Path | None = None) -> None:
    """Write the store to path, creating parent directories."""
    path = path or default_data_file()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(store.to_dict(), indent=2), encoding="utf-8")
    except OSError as e:
        logger.error("Could not write %s: %s", path, e)
        raise StoreIOError(path, f"could not write file: {e}") from e
    logger.info("Saved %d task(s) to %s", len(store), path)
