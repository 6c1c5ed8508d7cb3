#!/usr/bin/env python3
"""
Todo - personal task tracker.

Usage:
    todo.py add <title...> [-d DEADLINE] [--hard-deadline]
                                          Add a task, optionally with a deadline
    todo.py list [--all | --archived] [--json]
                                          List active (or all/archived) tasks
    todo.py toggle <id-or-title>          Toggle completion
    todo.py archive <id-or-title>         Archive a task
    todo.py unarchive <id-or-title>       Restore an archived task
    todo.py delete <id-or-title>          Delete a task
    todo.py tui [--all | --active | --archived]
                                          Interactive table view

Deadlines: 30m, 2h, 1d, 2024-01-15, 2024-01-15 15:30, 01-15, 01-15 15:30

Data lives in $TODO_DATA_DIR/todos.json (default: user cache dir/todo-tracker),
or wherever --data-file points.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

SCRIPT_DIR = Path(__file__).resolve().parent
if str(SCRIPT_DIR) not in sys.path:
    sys.path.insert(0, str(SCRIPT_DIR))

from todo_deadline import (  # noqa: E402
    DeadlineParseError,
    format_deadline,
    format_relative_age,
    parse_deadline,
)
from todo_logging import setup_logging  # noqa: E402
from todo_store import (  # noqa: E402
    StoreIOError,
    Task,
    TaskStore,
    ViewFilter,
    default_data_dir,
    load_store,
    save_store,
)

logger = logging.getLogger("todo")

ADD_USAGE = "Usage: todo add <title> [--deadline <deadline>] [--hard-deadline]"


def parse_task_id(ref: str) -> int | None:
    """Task id from ASCII digits, else None (so "²" is treated as a title)."""
    if ref.isascii() and ref.isdigit():
        return int(ref)
    return None


def resolve_task(store: TaskStore, ref: str, ignore_case: bool = False) -> Task | None:
    """Find a task by numeric id first, then by exact title."""
    task_id = parse_task_id(ref)
    if task_id is not None:
        task = store.get_by_id(task_id)
        if task:
            return task
    return store.find_by_title(ref, case_sensitive=not ignore_case)


def format_task_line(task: Task) -> str:
    check = "[×]" if task.completed else "[ ]"
    line = f"{task.id:>4} {check} {task.title}"
    if task.deadline:
        line += f"  ({format_deadline(task.deadline, task.hard_deadline)})"
    if task.archived:
        line += "  [archived]"
    return f"{line}  {format_relative_age(task.created_at)}"


# -------------------- commands --------------------


def cmd_add(args: argparse.Namespace) -> int:
    if not args.title:
        print("Error: Todo title is required")
        print(ADD_USAGE)
        return 1
    title = " ".join(args.title)

    deadline = None
    if args.deadline:
        try:
            deadline = parse_deadline(args.deadline)
        except DeadlineParseError as e:
            print(f"Error parsing deadline: {e}")
            return 1

    store = load_store(args.data_file)
    if deadline is not None:
        task = store.add_with_deadline(title, deadline, args.hard_deadline)
    else:
        task = store.add(title)
    save_store(store, args.data_file)
    logger.info("Added task %d", task.id)

    print(f"Todo added successfully with ID: {task.id}")
    print(f"Title: {task.title}")
    if task.deadline is not None:
        print(f"Deadline: {format_deadline(task.deadline, task.hard_deadline)}")
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    store = load_store(args.data_file)
    tasks = store.tasks_for(args.view_filter or ViewFilter.ACTIVE)

    if args.json:
        print(json.dumps([t.to_dict() for t in tasks], indent=2))
        return 0

    if not tasks:
        print("No tasks found.")
        return 0
    for task in tasks:
        print(format_task_line(task))
    return 0


def cmd_toggle(args: argparse.Namespace) -> int:
    store = load_store(args.data_file)
    ref = " ".join(args.ref)
    task = resolve_task(store, ref, args.ignore_case)
    if task is None:
        print(f"No task matching: {ref}")
        return 1
    store.toggle_completed(task.id)
    save_store(store, args.data_file)
    state = "completed" if task.completed else "pending"
    print(f"Task {task.id} marked as {state}: {task.title}")
    return 0


def cmd_archive(args: argparse.Namespace) -> int:
    store = load_store(args.data_file)
    ref = " ".join(args.ref)
    task = resolve_task(store, ref, args.ignore_case)
    if task is None:
        print(f"No task matching: {ref}")
        return 1
    if args.command == "archive":
        store.archive(task.id)
        verb = "archived"
    else:
        store.unarchive(task.id)
        verb = "unarchived"
    save_store(store, args.data_file)
    print(f"Task {task.id} {verb}: {task.title}")
    return 0


def cmd_delete(args: argparse.Namespace) -> int:
    store = load_store(args.data_file)
    ref = " ".join(args.ref)
    case_sensitive = not args.ignore_case

    task_id = parse_task_id(ref)
    task = store.get_by_id(task_id) if task_id is not None else None
    if task is not None:
        store.delete(task.id)
    else:
        task = store.find_by_title(ref, case_sensitive)
        if task is None:
            print(f"No task matching: {ref}")
            return 1
        store.delete_by_title(ref, case_sensitive)

    save_store(store, args.data_file)
    print(f"Task {task.id} deleted: {task.title}")
    return 0


def cmd_tui(args: argparse.Namespace) -> int:
    from todo_tui.app import run

    store = load_store(args.data_file)
    run(store, data_file=args.data_file, view_filter=args.view_filter or ViewFilter.ALL)
    save_store(store, args.data_file)
    return 0


# -------------------- argument parsing --------------------


def _add_filter_flags(parser: argparse.ArgumentParser, with_active: bool) -> None:
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "--all",
        dest="view_filter",
        action="store_const",
        const=ViewFilter.ALL,
        help="Show active and archived tasks",
    )
    if with_active:
        group.add_argument(
            "--active",
            dest="view_filter",
            action="store_const",
            const=ViewFilter.ACTIVE,
            help="Show only active tasks",
        )
    group.add_argument(
        "--archived",
        dest="view_filter",
        action="store_const",
        const=ViewFilter.ARCHIVED,
        help="Show only archived tasks",
    )


def _add_ref_command(subparsers, name: str, help_text: str, handler) -> None:
    p = subparsers.add_parser(name, help=help_text)
    p.add_argument("ref", nargs="+", help="Task id or exact title")
    p.add_argument(
        "-i",
        "--ignore-case",
        action="store_true",
        help="Match titles case-insensitively",
    )
    p.set_defaults(handler=handler)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="todo",
        description="Personal task tracker",
        epilog=__doc__,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--data-file",
        type=Path,
        help="Path to todos.json (default: $TODO_DATA_DIR or user cache dir)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug output to stderr",
    )
    subparsers = parser.add_subparsers(dest="command")

    add = subparsers.add_parser("add", help="Add a new todo")
    add.add_argument("title", nargs="*", help="Task title")
    add.add_argument(
        "-d",
        "--deadline",
        default="",
        help="Set deadline (e.g., '2h', '1d', '2024-01-15', '2024-01-15 15:30')",
    )
    add.add_argument(
        "--hard-deadline",
        action="store_true",
        help="Mark as hard deadline (shown with ! prefix)",
    )
    add.set_defaults(handler=cmd_add)

    list_cmd = subparsers.add_parser("list", help="List tasks")
    _add_filter_flags(list_cmd, with_active=False)
    list_cmd.add_argument("--json", action="store_true", help="Print tasks as JSON")
    list_cmd.set_defaults(handler=cmd_list)

    _add_ref_command(subparsers, "toggle", "Toggle completion", cmd_toggle)
    _add_ref_command(subparsers, "archive", "Archive a task", cmd_archive)
    _add_ref_command(subparsers, "unarchive", "Unarchive a task", cmd_archive)
    _add_ref_command(subparsers, "delete", "Delete a task", cmd_delete)

    tui = subparsers.add_parser("tui", help="Interactive table view")
    _add_filter_flags(tui, with_active=True)
    tui.set_defaults(handler=cmd_tui)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_usage()
        return 1

    log_dir = args.data_file.parent if args.data_file else default_data_dir()
    setup_logging(
        log_dir=log_dir,
        console=args.command != "tui",
        console_level=logging.DEBUG if args.verbose else logging.WARNING,
    )

    try:
        return args.handler(args)
    except StoreIOError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
