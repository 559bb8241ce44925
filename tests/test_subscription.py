"""
Tests for live queries and the subscription manager.

These tests verify that:
- Each live query walks through its states and mirrors the latest snapshot
- Callbacks from a closed or superseded subscription are dropped
- Rebinding a slot tears the old subscription down before opening the new one
"""
import asyncio
import unittest
from unittest.mock import AsyncMock

from database.errors import PermissionDenied
from database.memory import MemoryStore
from database.store import Query
from model import TASKS
from model.task import Task
from sync.manager import SubscriptionManager
from sync.subscription import LiveQuery, SubscriptionState

from helpers import ScriptedStore, YieldingStore, add_task


class TestLiveQuery(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.store = MemoryStore()

    async def test_open_delivers_and_validates(self):
        """Documents become schema instances; malformed ones are skipped."""
        await add_task(self.store, "Setup", "u1", "p1")
        await self.store.set(TASKS, "broken", {"status": "todo"})
        on_change = AsyncMock()

        live = LiveQuery(self.store, Query(TASKS), Task, on_change)
        await live.open()

        assert live.state is SubscriptionState.OPEN
        assert live.received
        assert [task.title for task in live.items] == ["Setup"]
        on_change.assert_awaited_once_with(live)

    async def test_pushes_replace_the_mirror(self):
        live = LiveQuery(self.store, Query(TASKS).filter("assignedTo", "u1"), Task)
        await live.open()
        assert live.items == []

        task_id = await add_task(self.store, "Setup", "u1", "p1")
        assert [task.id for task in live.items] == [task_id]

        await self.store.delete(TASKS, task_id)
        assert live.items == []

    async def test_close_drops_later_snapshots(self):
        on_change = AsyncMock()
        live = LiveQuery(self.store, Query(TASKS), Task, on_change)
        await live.open()
        await live.close()

        await add_task(self.store, "Late", "u1", "p1")

        assert live.state is SubscriptionState.CLOSED
        assert live.items == []
        assert on_change.await_count == 1
        assert self.store.listener_count() == 0

    async def test_stale_generation_is_ignored(self):
        """A callback registered by an earlier open never reaches the mirror."""
        live = LiveQuery(self.store, Query(TASKS), Task)
        await live.open()
        stale = live.generation
        await live.reopen(Query(TASKS).filter("assignedTo", "nobody"))

        await live._deliver(stale, [{"id": "x", "title": "Ghost", "assignedTo": "u1"}])

        assert live.items == []

    async def test_subscribe_failure_empties_mirror(self):
        store = ScriptedStore()
        store.failures["subscribe"] = [PermissionDenied()]
        on_change = AsyncMock()

        live = LiveQuery(store, Query(TASKS), Task, on_change)
        await live.open()

        assert live.state is SubscriptionState.CLOSED
        assert live.items == []
        assert isinstance(live.error, PermissionDenied)
        on_change.assert_awaited_once()

    async def test_error_callback_empties_mirror(self):
        await add_task(self.store, "Setup", "u1", "p1")
        live = LiveQuery(self.store, Query(TASKS), Task)
        await live.open()
        assert len(live.items) == 1

        await live._fail(live.generation, PermissionDenied())

        assert live.items == []
        assert isinstance(live.error, PermissionDenied)


class TestSubscriptionManager(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.store = MemoryStore()
        self.manager = SubscriptionManager(self.store, role="client")

    async def test_same_key_is_a_noop(self):
        query = Query(TASKS).filter("assignedTo", "u1")
        first = await self.manager.bind("tasks", query, Task)
        second = await self.manager.bind("tasks", Query(TASKS).filter("assignedTo", "u1"), Task)

        assert first is second
        assert self.store.listener_count(TASKS) == 1

    async def test_rebind_closes_previous_before_opening(self):
        events = []
        first = await self.manager.bind("tasks", Query(TASKS).filter("projectId", "p1"), Task)
        original_close = first.close

        async def close():
            events.append(("close", self.store.listener_count(TASKS)))
            await original_close()

        first.close = close  # type: ignore
        original_subscribe = self.store.subscribe

        async def subscribe(query, on_snapshot, on_error):
            events.append(("open", self.store.listener_count(TASKS)))
            return await original_subscribe(query, on_snapshot, on_error)

        self.store.subscribe = subscribe  # type: ignore

        second = await self.manager.bind("tasks", Query(TASKS).filter("projectId", "p2"), Task)

        assert events == [("close", 1), ("open", 0)]
        assert first.state is SubscriptionState.CLOSED
        assert second.state is SubscriptionState.OPEN
        assert self.store.listener_count(TASKS) == 1

    async def test_close_releases_every_slot(self):
        await self.manager.bind("a", Query(TASKS), Task)
        await self.manager.bind("b", Query(TASKS).filter("projectId", "p1"), Task)
        assert len(self.manager) == 2

        await self.manager.close()

        assert len(self.manager) == 0
        assert self.store.listener_count() == 0

    async def test_items_of_unknown_slot_is_empty(self):
        assert self.manager.items("missing") == []
        assert "missing" not in self.manager


class TestOverlappingBinds(unittest.IsolatedAsyncioTestCase):
    """Binds of one slot that overlap while a teardown is awaited."""

    async def asyncSetUp(self):
        self.store = YieldingStore()
        self.manager = SubscriptionManager(self.store, role="admin")
        await self.manager.bind("tasks", Query(TASKS), Task)

    async def test_latest_rebind_wins_and_nothing_leaks(self):
        project_a = Query(TASKS).filter("projectId", "a")
        project_b = Query(TASKS).filter("projectId", "b")

        first, second = await asyncio.gather(
            self.manager.bind("tasks", project_a, Task),
            self.manager.bind("tasks", project_b, Task),
        )

        assert first is None
        assert second is not None and second.state is SubscriptionState.OPEN
        assert self.manager.slots["tasks"].query == project_b
        assert self.store.listener_count(TASKS) == 1

        await self.manager.close()
        assert self.store.listener_count(TASKS) == 0

    async def test_release_overtakes_rebind(self):
        result, _ = await asyncio.gather(
            self.manager.bind("tasks", Query(TASKS).filter("projectId", "a"), Task),
            self.manager.release("tasks"),
        )

        assert result is None
        assert "tasks" not in self.manager
        assert self.store.listener_count(TASKS) == 0

    async def test_close_during_open(self):
        await self.manager.release("tasks")
        pending = asyncio.ensure_future(
            self.manager.bind("reviews", Query(TASKS).filter("projectId", "a"), Task)
        )
        await asyncio.sleep(0)

        await self.manager.close()
        live = await pending

        assert live is not None and live.state is SubscriptionState.CLOSED
        assert self.store.listener_count() == 0
