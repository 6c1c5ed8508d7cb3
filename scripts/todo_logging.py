"""Logging setup for the todo CLI and TUI."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILENAME = "todo.log"

# Top-level module names owned by this project.
PROJECT_LOGGERS = ("todo", "todo_store", "todo_deadline", "todo_logging", "todo_tui")


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the console readable:
    - our own modules pass through at the handler level
    - third-party libraries only reach the console at ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        root_name = record.name.split(".", 1)[0]
        if root_name in PROJECT_LOGGERS or record.name == "__main__":
            return True
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path | None = None,
    console: bool = True,
    console_level: int = logging.WARNING,
    file_level: int = logging.DEBUG,
) -> Path | None:
    """
    Configure logging with:
    - Console handler on stderr (skipped for the TUI, which owns the terminal)
    - File handler with full logs, when log_dir is writable

    Call this ONCE, before the first log call. Returns the log file path,
    or None when file logging could not be set up.
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if console:
        ch = logging.StreamHandler(sys.stderr)
        ch.setLevel(console_level)
        ch.setFormatter(fmt)
        ch.addFilter(_ConsoleNoiseFilter())
        root.addHandler(ch)

    log_file = None
    if log_dir is not None:
        log_file = Path(log_dir) / LOG_FILENAME
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            fh = logging.FileHandler(str(log_file), encoding="utf-8")
        except OSError as e:
            if console:
                logging.getLogger(__name__).warning("File logging disabled: %s", e)
            log_file = None
        else:
            fh.setLevel(file_level)
            fh.setFormatter(fmt)
            root.addHandler(fh)

    if not root.handlers:
        root.addHandler(logging.NullHandler())

    logging.captureWarnings(True)
    return log_file
