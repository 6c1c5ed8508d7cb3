"""
Todo TUI Application.

Main entry point for the interactive task table.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

# Ensure scripts directory is in path
SCRIPT_DIR = Path(__file__).resolve().parent.parent
if str(SCRIPT_DIR) not in sys.path:
    sys.path.insert(0, str(SCRIPT_DIR))

from textual.app import App  # noqa: E402

from todo_store import (  # noqa: E402
    StoreIOError,
    TaskStore,
    ViewFilter,
    load_store,
    save_store,
)
from todo_tui.state import InteractionState  # noqa: E402
from todo_tui.views.task_table import TaskTableScreen  # noqa: E402

logger = logging.getLogger(__name__)


class TodoApp(App):
    """Interactive todo table."""

    TITLE = "Todo"
    SUB_TITLE = "Task Tracker"

    CSS = """
    Screen {
        background: $surface;
    }
    """

    def __init__(
        self,
        store: TaskStore,
        data_file: Path | None = None,
        view_filter: ViewFilter = ViewFilter.ALL,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.store = store
        self.data_file = data_file
        self.state = InteractionState(store, view_filter=view_filter)

    def on_mount(self) -> None:
        """Called when app is mounted."""
        self.push_screen(TaskTableScreen(self.state))

    def save_store(self) -> None:
        """Explicit save; failures are reported, not raised."""
        try:
            save_store(self.store, self.data_file)
        except StoreIOError as e:
            logger.error("Save from TUI failed: %s", e)
            self.state.status_message = f"Save failed: {e}"
        else:
            self.state.status_message = "Saved"


def run(
    store: TaskStore,
    data_file: Path | None = None,
    view_filter: ViewFilter = ViewFilter.ALL,
) -> None:
    """Run the TUI application until the user quits."""
    app = TodoApp(store, data_file=data_file, view_filter=view_filter)
    app.run()


if __name__ == "__main__":
    run(load_store())
