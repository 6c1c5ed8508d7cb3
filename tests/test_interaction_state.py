"""Tests for todo_tui/state.py - the interaction state machine."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "scripts"))

import todo_deadline  # noqa: E402
from todo_store import TaskStore, ViewFilter  # noqa: E402
from todo_tui.state import (  # noqa: E402
    AddTask,
    AddTaskDeadline,
    AddTaskDeadlineType,
    ArchiveConfirm,
    ConfirmTarget,
    DeleteConfirm,
    InteractionState,
    Normal,
    ViewDetail,
    edit_text,
)


def make_state(*titles: str, view_filter: ViewFilter = ViewFilter.ALL) -> InteractionState:
    store = TaskStore()
    for title in titles:
        store.add(title)
    return InteractionState(store, width=120, height=40, view_filter=view_filter)


def press(state: InteractionState, *keys: str) -> None:
    for key in keys:
        state.handle_key(key)


def type_text(state: InteractionState, text: str) -> None:
    press(state, *text)


class TestNormalMode:
    """Tests for key handling in Normal mode."""

    def test_initial_state(self) -> None:
        state = make_state("A")

        assert state.mode == Normal()
        assert state.cursor == 0
        assert state.bulk_active is False
        assert state.status_message == ""

    def test_toggle_help_relayouts(self) -> None:
        state = make_state("A")
        before = state.layout.rows_height

        press(state, ".")

        assert state.show_help is False
        assert state.layout.rows_height > before
        assert state.mode == Normal()

    @pytest.mark.parametrize("key", ["q", "esc"])
    def test_quit(self, key: str) -> None:
        state = make_state("A")

        press(state, key)

        assert state.quit_requested is True

    @pytest.mark.parametrize("key", ["enter", "t", "n", "d", "x", " "])
    def test_empty_store_keys_are_noops(self, key: str) -> None:
        state = make_state()

        press(state, key)

        assert state.mode == Normal()
        assert state.selected_ids == set()
        assert len(state.store) == 0

    def test_navigation_clamps(self) -> None:
        state = make_state("A", "B", "C")

        press(state, "down", "j", "down", "down")
        assert state.cursor == 2
        press(state, "up", "k", "k")
        assert state.cursor == 0
        press(state, "G")
        assert state.cursor == 2
        press(state, "g")
        assert state.cursor == 0
        press(state, "pagedown")
        assert state.cursor == 2
        press(state, "pageup")
        assert state.cursor == 0

    def test_enter_opens_detail_for_row(self) -> None:
        state = make_state("A", "B")

        press(state, "down", "enter")

        assert state.mode == ViewDetail(2)

    def test_enter_binds_row_id_not_title(self) -> None:
        state = make_state("Buy milk and eggs", "Buy milk")

        press(state, "down", "enter")

        assert state.mode == ViewDetail(2)

    @pytest.mark.parametrize("key", ["esc", "q", "enter"])
    def test_detail_returns_to_normal(self, key: str) -> None:
        state = make_state("A")
        press(state, "enter")

        press(state, key)

        assert state.mode == Normal()
        assert state.quit_requested is False

    def test_detail_ignores_other_keys(self) -> None:
        state = make_state("A")
        press(state, "enter", "t", "d")

        assert state.mode == ViewDetail(1)
        assert state.store.get_by_id(1).completed is False

    def test_toggle_single(self) -> None:
        state = make_state("A", "B")

        press(state, "down", "t")

        assert state.store.get_by_id(2).completed is True
        assert state.store.get_by_id(1).completed is False
        assert state.status_message == "Task updated"

    def test_toggle_on_archived_unarchives(self) -> None:
        state = make_state("A")
        state.store.archive(1)
        state.refresh()

        press(state, "t")

        task = state.store.get_by_id(1)
        assert task.archived is False
        assert task.completed is False
        assert state.status_message == "Task unarchived"

    def test_archive_toggle_single(self) -> None:
        state = make_state("A")

        press(state, "n")
        assert state.store.get_by_id(1).archived is True
        assert state.status_message == "Task archived"

        press(state, "n")
        assert state.store.get_by_id(1).archived is False
        assert state.status_message == "Task unarchived"

    def test_archive_in_active_view_hides_row(self) -> None:
        state = make_state("A", "B", view_filter=ViewFilter.ACTIVE)
        press(state, "down", "n")

        assert [r.task_id for r in state.rows] == [1]
        assert state.cursor == 0

    def test_space_toggles_selection(self) -> None:
        state = make_state("A", "B")

        press(state, " ")
        assert state.selected_ids == {1}
        assert state.bulk_active is True

        press(state, " ")
        assert state.selected_ids == set()
        assert state.bulk_active is False

    def test_selection_marks_checkbox(self) -> None:
        state = make_state("A", "B")

        press(state, "down", " ")

        assert state.rows[1].cells[0] == "[×]"
        assert state.rows[0].cells[0] == "[ ]"


class TestBulkActions:
    """Tests for actions with a non-empty selection."""

    def test_bulk_toggle(self) -> None:
        state = make_state("A", "B", "C")
        press(state, " ", "down", "down", " ", "t")

        assert [t.completed for t in state.store] == [True, False, True]
        assert state.status_message == "2 tasks updated"
        assert state.selected_ids == {1, 3}

    def test_bulk_toggle_unarchives_archived(self) -> None:
        state = make_state("A", "B")
        state.store.archive(2)
        state.refresh()
        press(state, " ", "down", " ", "t")

        a, b = state.store.tasks
        assert a.completed is True
        assert b.archived is False
        assert b.completed is False

    def test_bulk_archive_toggle(self) -> None:
        state = make_state("A", "B")
        state.store.archive(2)
        state.refresh()
        press(state, " ", "down", " ", "n")

        a, b = state.store.tasks
        assert a.archived is True
        assert b.archived is False
        assert state.status_message == "2 tasks updated"

    def test_bulk_delete(self) -> None:
        state = make_state("A", "B", "C")
        press(state, " ", "down", " ", "d")

        assert state.mode == DeleteConfirm(ConfirmTarget((1, 2), "2 selected tasks", bulk=True))

        press(state, "y")

        assert [t.title for t in state.store] == ["C"]
        assert state.selected_ids == set()
        assert state.bulk_active is False
        assert state.status_message == "2 tasks deleted"
        assert state.mode == Normal()

    def test_bulk_archive_confirm(self) -> None:
        state = make_state("A", "B")
        press(state, " ", "down", " ", "x", "Y")

        assert all(t.archived for t in state.store)
        assert state.selected_ids == set()
        assert state.status_message == "2 tasks archived"

    def test_selection_forgets_deleted_tasks(self) -> None:
        state = make_state("A", "B")
        press(state, " ")
        state.store.delete(1)
        state.refresh()

        assert state.selected_ids == set()


class TestConfirmations:
    """Tests for DeleteConfirm and ArchiveConfirm."""

    def test_single_delete_records_title(self) -> None:
        state = make_state("A", "B")

        press(state, "down", "d")

        assert state.mode == DeleteConfirm(ConfirmTarget((2,), "B"))

    @pytest.mark.parametrize("key", ["y", "Y"])
    def test_single_delete_confirmed(self, key: str) -> None:
        state = make_state("A", "B")

        press(state, "down", "d", key)

        assert [t.title for t in state.store] == ["A"]
        assert state.status_message == "Task deleted"
        assert state.mode == Normal()
        assert state.cursor == 0

    def test_delete_overlapping_titles(self) -> None:
        state = make_state("Buy milk", "Buy milk and eggs")

        press(state, "down", "d", "y")

        assert [t.title for t in state.store] == ["Buy milk"]

    @pytest.mark.parametrize("key", ["n", "N", "esc", "q"])
    def test_cancel(self, key: str) -> None:
        state = make_state("A")

        press(state, "d", key)

        assert len(state.store) == 1
        assert state.mode == Normal()
        assert state.quit_requested is False

    def test_other_keys_keep_confirm_open(self) -> None:
        state = make_state("A")

        press(state, "d", "t", "enter")

        assert isinstance(state.mode, DeleteConfirm)
        assert len(state.store) == 1

    def test_single_archive_confirmed(self) -> None:
        state = make_state("A")

        press(state, "x")
        assert state.mode == ArchiveConfirm(ConfirmTarget((1,), "A"))

        press(state, "y")
        assert state.store.get_by_id(1).archived is True
        assert state.status_message == "Task archived"

    def test_target_gone(self) -> None:
        state = make_state("A")
        press(state, "d")
        state.store.delete(1)

        press(state, "y")

        assert state.status_message == "Task not found"
        assert state.mode == Normal()


class TestAddTaskFlow:
    """Tests for the multi-step add-task flow."""

    def test_title_only(self) -> None:
        state = make_state()
        press(state, "a")
        assert state.mode == AddTask()

        type_text(state, "Buy milk")
        assert state.mode == AddTask("Buy milk")

        press(state, "enter")
        assert state.mode == AddTaskDeadline("Buy milk")

        press(state, "enter")

        task = state.store.get_by_id(1)
        assert task.title == "Buy milk"
        assert task.deadline is None
        assert state.status_message == "New task added"
        assert state.mode == Normal()
        assert len(state.rows) == 1

    def test_title_is_trimmed(self) -> None:
        state = make_state()
        press(state, "a")
        type_text(state, "  Buy milk  ")
        press(state, "enter", "enter")

        assert state.store.get_by_id(1).title == "Buy milk"

    @pytest.mark.parametrize("text", ["", "   "])
    def test_blank_title_cancels(self, text: str) -> None:
        state = make_state()
        press(state, "a")
        type_text(state, text)

        press(state, "enter")

        assert state.mode == Normal()
        assert len(state.store) == 0

    def test_esc_discards_title(self) -> None:
        state = make_state()
        press(state, "a")
        type_text(state, "Draft")
        press(state, "esc")

        assert state.mode == Normal()
        assert len(state.store) == 0

        press(state, "a")
        assert state.mode == AddTask("")

    def test_keys_are_text_while_typing(self) -> None:
        state = make_state("A")
        press(state, "a")
        type_text(state, "q. tnd")

        assert state.mode == AddTask("q. tnd")
        assert state.quit_requested is False
        assert state.store.get_by_id(1).completed is False

    def test_hard_deadline(self) -> None:
        state = make_state()
        press(state, "a")
        type_text(state, "Taxes")
        press(state, "enter")
        type_text(state, "2d")
        press(state, "enter")

        assert state.mode == AddTaskDeadlineType("Taxes", "2d")

        press(state, "h")

        task = state.store.get_by_id(1)
        assert task.deadline is not None
        assert task.hard_deadline is True
        assert state.status_message.startswith("Task added with deadline: ! ")
        assert state.mode == Normal()

    @pytest.mark.parametrize("key", ["s", "S", "enter"])
    def test_soft_deadline(self, key: str) -> None:
        state = make_state()
        press(state, "a")
        type_text(state, "Call")
        press(state, "enter")
        type_text(state, "2024-01-15")
        press(state, "enter", key)

        task = state.store.get_by_id(1)
        assert task.hard_deadline is False
        assert (task.deadline.year, task.deadline.month, task.deadline.day) == (2024, 1, 15)
        assert state.status_message.startswith("Task added with deadline: Overdue ")

    def test_uppercase_h_is_hard(self) -> None:
        state = make_state()
        press(state, "a", "x", "enter", "3", "h", "enter", "H")

        assert state.store.get_by_id(1).hard_deadline is True

    def test_bad_deadline_creates_nothing(self) -> None:
        state = make_state()
        press(state, "a")
        type_text(state, "Thing")
        press(state, "enter")
        type_text(state, "bogus")
        press(state, "enter", "s")

        assert len(state.store) == 0
        assert state.status_message.startswith("Invalid deadline format: ")
        assert "bogus" in state.status_message
        assert state.mode == Normal()

    def test_out_of_range_deadline_creates_nothing(self, monkeypatch: pytest.MonkeyPatch) -> None:
        real_to_local = todo_deadline.to_local

        def overflowing_to_local(ts):
            if ts.year == 9999:
                raise OverflowError("date value out of range")
            return real_to_local(ts)

        monkeypatch.setattr(todo_deadline, "to_local", overflowing_to_local)
        state = make_state()
        press(state, "a")
        type_text(state, "Far")
        press(state, "enter")
        type_text(state, "9999-12-31 23:59")
        press(state, "enter", "s")

        assert len(state.store) == 0
        assert state.status_message.startswith("Invalid deadline format: deadline out of range")
        assert state.mode == Normal()

    def test_esc_in_deadline_step(self) -> None:
        state = make_state()
        press(state, "a", "x", "enter", "1", "esc")

        assert state.mode == Normal()
        assert len(state.store) == 0

    def test_esc_in_deadline_type_step(self) -> None:
        state = make_state()
        press(state, "a", "x", "enter", "1", "h", "enter", "esc")

        assert state.mode == Normal()
        assert len(state.store) == 0

    def test_deadline_type_ignores_other_keys(self) -> None:
        state = make_state()
        press(state, "a", "x", "enter", "1", "h", "enter", "z")

        assert state.mode == AddTaskDeadlineType("x", "1h")

    def test_backspace_and_clear(self) -> None:
        state = make_state()
        press(state, "a")
        type_text(state, "abc")
        press(state, "backspace")
        assert state.mode == AddTask("ab")

        press(state, "ctrl+u")
        assert state.mode == AddTask("")

    def test_title_char_limit(self) -> None:
        state = make_state()
        press(state, "a")
        type_text(state, "x" * 130)

        assert len(state.mode.title) == 120

    def test_named_keys_not_typed(self) -> None:
        state = make_state()
        press(state, "a", "up", "tab", "x")

        assert state.mode == AddTask("x")


class TestResizeAndFilter:
    """Tests for events orthogonal to mode."""

    def test_resize_keeps_mode(self) -> None:
        state = make_state("A")
        press(state, "a")

        state.resize(60, 20)

        assert state.mode == AddTask()
        assert (state.width, state.height) == (60, 20)
        assert not state.layout.has_deadline_column

    def test_resize_wide_has_deadline(self) -> None:
        state = make_state("A")

        state.resize(200, 50)

        assert state.layout.has_deadline_column

    def test_set_filter(self) -> None:
        state = make_state("A", "B")
        state.store.archive(1)

        state.set_filter(ViewFilter.ARCHIVED)
        assert [r.task_id for r in state.rows] == [1]

        state.set_filter(ViewFilter.ACTIVE)
        assert [r.task_id for r in state.rows] == [2]

        state.set_filter(ViewFilter.ALL)
        assert [r.task_id for r in state.rows] == [1, 2]


def test_edit_text() -> None:
    assert edit_text("ab", "c", 10) == "abc"
    assert edit_text("ab", "backspace", 10) == "a"
    assert edit_text("", "backspace", 10) == ""
    assert edit_text("ab", "ctrl+u", 10) == ""
    assert edit_text("ab", "c", 2) == "ab"
    assert edit_text("ab", "enter", 10) == "ab"
