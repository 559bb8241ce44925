"""
Tests for the task board state machine: drop planning and the single-field
status write.
"""
import unittest

from board.board import (
    BoardError,
    DropEvent,
    Location,
    StatusChange,
    apply_move,
    column_for,
    group_tasks,
    plan_move,
    sort_tasks,
)
from database.errors import NotFound
from database.memory import MemoryStore
from model import TASKS
from model.task import Task
from policy.permissions import Viewer

from helpers import add_task

ADMIN = Viewer("admin", "admin")
OWNER = Viewer("client-x", "client")
OTHER = Viewer("client-y", "client")


def board() -> list[Task]:
    return [
        Task(id="t1", title="Setup", assigned_to="client-x", project_id="acme"),
        Task(id="t2", title="Deploy", assigned_to="client-y", project_id="acme", status="done"),
    ]


class TestPlanMove(unittest.TestCase):
    def test_drop_outside_any_column_is_a_noop(self):
        event = DropEvent("t1", Location("todo", 0), None)
        assert plan_move(OWNER, board(), event).unwrap() is None

    def test_drop_in_same_column_is_a_noop(self):
        """Reordering inside a column is never persisted."""
        same_place = DropEvent("t1", Location("todo", 0), Location("todo", 0))
        other_index = DropEvent("t1", Location("todo", 0), Location("todo", 3))
        assert plan_move(OWNER, board(), same_place).unwrap() is None
        assert plan_move(OWNER, board(), other_index).unwrap() is None

    def test_owner_moves_own_task(self):
        event = DropEvent("t1", Location("todo", 0), Location("inprogress", 0))
        assert plan_move(OWNER, board(), event).unwrap() == StatusChange("t1", "todo", "inprogress")

    def test_admin_moves_any_task(self):
        event = DropEvent("t2", Location("done", 0), Location("todo", 1))
        assert plan_move(ADMIN, board(), event).unwrap() == StatusChange("t2", "done", "todo")

    def test_non_owner_is_denied(self):
        event = DropEvent("t1", Location("todo", 0), Location("done", 0))
        assert plan_move(OTHER, board(), event).unwrap_err() is BoardError.PERMISSION_DENIED

    def test_partner_is_denied(self):
        partner = Viewer("p", "partner", "acme")
        event = DropEvent("t1", Location("todo", 0), Location("done", 0))
        assert plan_move(partner, board(), event).unwrap_err() is BoardError.PERMISSION_DENIED

    def test_unknown_task(self):
        event = DropEvent("missing", Location("todo", 0), Location("done", 0))
        assert plan_move(ADMIN, board(), event).unwrap_err() is BoardError.TASK_NOT_FOUND

    def test_invalid_column(self):
        event = DropEvent("t1", Location("todo", 0), Location("archived", 0))
        assert plan_move(ADMIN, board(), event).unwrap_err() is BoardError.INVALID_COLUMN


class TestApplyMove(unittest.IsolatedAsyncioTestCase):
    async def test_only_status_changes(self):
        """A move writes the status field and leaves every other field alone."""
        store = MemoryStore()
        task_id = await add_task(store, "Setup", "client-x", "acme")
        before = await store.get(TASKS, task_id)

        await apply_move(store, StatusChange(task_id, "todo", "inprogress"))

        after = await store.get(TASKS, task_id)
        assert after is not None and before is not None
        assert after.pop("status") == "inprogress"
        assert before.pop("status") == "todo"
        assert after == before

    async def test_missing_task_raises(self):
        store = MemoryStore()
        with self.assertRaises(NotFound):
            await apply_move(store, StatusChange("gone", "todo", "done"))


class TestOrdering(unittest.TestCase):
    def test_sort_is_stable_by_status_rank(self):
        tasks = [
            Task(id="a", title="a", assigned_to="x", status="done"),
            Task(id="b", title="b", assigned_to="x", status="todo"),
            Task(id="c", title="c", assigned_to="x", status="inprogress"),
            Task(id="d", title="d", assigned_to="x", status="todo"),
        ]
        assert [task.id for task in sort_tasks(tasks)] == ["b", "d", "c", "a"]

    def test_group_tasks_has_every_column(self):
        grouped = group_tasks(board())
        assert [task.id for task in grouped["todo"]] == ["t1"]
        assert grouped["inprogress"] == []
        assert [task.id for task in grouped["done"]] == ["t2"]

    def test_column_for_accepts_ids_and_titles(self):
        assert column_for("inprogress") == "inprogress"
        assert column_for("In Progress") == "inprogress"
        assert column_for("to-do") == "todo"
        assert column_for("DONE") == "done"
        assert column_for("archived") is None
