"""
Tests for the user-facing actions, run against the in-memory store.
"""
import unittest

from actions.action import ActionContext
from actions.note import NoteDelete, NoteEdit, NoteList, NoteNew
from actions.project import ProjectDelete, ProjectList, ProjectNew
from actions.review import ReviewAdd, ReviewDelete, ReviewList
from actions.target import TargetDelete, TargetNew, TargetToggle
from actions.task import TaskDelete, TaskList, TaskMove, TaskNew
from actions.user import UserList, UserRemove, UserRename
from database.memory import MemoryStore
from database.store import Query
from model import NOTES, PROJECTS, REVIEWS, TARGETS, TASKS, USERS
from util.util import preflight_execute

from helpers import add_project, add_task, add_user


class ActionTestCase(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.store = MemoryStore()
        self.admin = ActionContext(await add_user(self.store, "admin", "admin"), self.store)
        self.client_x = ActionContext(await add_user(self.store, "client-x", "client"), self.store)
        self.client_y = ActionContext(await add_user(self.store, "client-y", "client"), self.store)

    def documents(self, collection: str):
        return list(self.store.collections.get(collection, {}).values())


class TestAcmeScenario(ActionTestCase):
    async def test_end_to_end(self):
        """
        An admin sets up a project and a task, the assigned client moves it,
        and a partner of another project cannot review it.
        """
        assert await preflight_execute(ProjectNew(name="Acme"), self.admin) == "Project Acme created."
        acme = self.documents(PROJECTS)[0]["id"]

        reply = await preflight_execute(
            TaskNew(title="Setup", project="Acme", assignee="client-x"), self.admin
        )
        assert reply == "Task Setup created."
        task = self.documents(TASKS)[0]
        assert task["assignedTo"] == "client-x"
        assert task["projectId"] == acme
        before = dict(task)

        reply = await preflight_execute(TaskMove(task=task["id"], column="inprogress"), self.client_x)
        assert reply == "Moved Setup to In Progress."
        after = await self.store.get(TASKS, task["id"])
        assert after is not None
        assert {k for k in after if after[k] != before[k]} == {"status"}
        assert after["status"] == "inprogress"

        beta = await add_project(self.store, "Beta")
        partner = ActionContext(
            await add_user(self.store, "partner", "partner", project_id=beta), self.store
        )
        reply = await preflight_execute(ReviewAdd(text="Looks good", project="Acme"), partner)
        assert reply == "Partners can only add reviews to their assigned projects"
        assert self.documents(REVIEWS) == []


class TestTaskActions(ActionTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        self.acme = await add_project(self.store, "Acme")

    async def test_admin_task_requires_client_and_project(self):
        assert (
            await preflight_execute(TaskNew(title="X", project="Acme"), self.admin)
            == "Please select a client to assign the task to"
        )
        assert (
            await preflight_execute(TaskNew(title="X", assignee="client-x"), self.admin)
            == "Please select a project for the task"
        )
        assert (
            await preflight_execute(TaskNew(title="X", project="Acme", assignee="admin"), self.admin)
            == "Selected client is not valid. Please select a client from the list."
        )
        assert await preflight_execute(TaskNew(title="  "), self.admin) == "Task title is required"
        assert self.documents(TASKS) == []

    async def test_client_creates_only_own_tasks(self):
        assert await preflight_execute(TaskNew(title="Mine"), self.client_x) == "Task Mine created."
        task = self.documents(TASKS)[0]
        assert task["assignedTo"] == "client-x"
        assert task["projectId"] is None

        reply = await preflight_execute(TaskNew(title="Theirs", assignee="client-y"), self.client_x)
        assert reply == "You can only create tasks for yourself."
        assert len(self.documents(TASKS)) == 1

    async def test_client_adds_tasks_only_to_member_projects(self):
        """A task in a foreign project would open that project's reviews."""
        secret = await add_project(self.store, "Secret")
        partner = ActionContext(await add_user(self.store, "partner", "partner", project_id=secret), self.store)
        await preflight_execute(ReviewAdd(text="Internal"), partner)

        reply = await preflight_execute(TaskNew(title="Sneak", project="Secret"), self.client_x)

        assert reply == "You can only add tasks to projects you are part of."
        assert self.documents(TASKS) == []
        assert (
            await preflight_execute(ReviewList(project="Secret"), self.client_x)
            == "You do not have access to this project's reviews."
        )

        await add_task(self.store, "Setup", "client-x", self.acme)
        assert await preflight_execute(TaskNew(title="More", project="Acme"), self.client_x) == "Task More created."
        assert {t["projectId"] for t in self.documents(TASKS)} == {self.acme}

    async def test_partner_cannot_create_tasks(self):
        partner = ActionContext(await add_user(self.store, "p", "partner", project_id=self.acme), self.store)
        reply = await preflight_execute(TaskNew(title="X", project="Acme"), partner)
        assert reply == "Permission denied: you cannot add tasks."

    async def test_move_to_same_column_writes_nothing(self):
        task_id = await add_task(self.store, "Setup", "client-x", self.acme)
        before = await self.store.get(TASKS, task_id)

        reply = await preflight_execute(TaskMove(task=task_id, column="To Do"), self.client_x)

        assert reply == "Task Setup is already in To Do."
        assert await self.store.get(TASKS, task_id) == before

    async def test_move_rules(self):
        task_id = await add_task(self.store, "Setup", "client-x", self.acme)
        assert (
            await preflight_execute(TaskMove(task=task_id, column="done"), self.client_y)
            == "You do not have permission to update this task."
        )
        assert (
            await preflight_execute(TaskMove(task=task_id, column="archived"), self.admin)
            == "Invalid task status."
        )
        assert (
            await preflight_execute(TaskMove(task="missing", column="done"), self.admin)
            == "Could not update task. Please refresh and try again."
        )
        assert (await self.store.get(TASKS, task_id))["status"] == "todo"  # type: ignore

    async def test_delete_is_admin_only(self):
        task_id = await add_task(self.store, "Setup", "client-x", self.acme)
        assert (
            await preflight_execute(TaskDelete(task=task_id), self.client_x)
            == "Permission denied: you cannot delete tasks."
        )
        assert await preflight_execute(TaskDelete(task=task_id), self.admin) == "Task Setup deleted."
        assert self.documents(TASKS) == []

    async def test_list_is_role_scoped(self):
        await add_task(self.store, "Mine", "client-x", self.acme)
        await add_task(self.store, "Theirs", "client-y", self.acme)

        mine = await preflight_execute(TaskList(), self.client_x)
        everything = await preflight_execute(TaskList(project="Acme"), self.admin)

        assert "Mine" in mine and "Theirs" not in mine
        assert "Mine" in everything and "Theirs" in everything


class TestProjectActions(ActionTestCase):
    async def test_only_admins_create_projects(self):
        assert (
            await preflight_execute(ProjectNew(name="Acme"), self.client_x)
            == "Permission denied: you cannot create projects."
        )
        assert await preflight_execute(ProjectNew(name=""), self.admin) == "Project name is required"
        await preflight_execute(ProjectNew(name="Acme"), self.admin)
        assert await preflight_execute(ProjectNew(name="Acme"), self.admin) == "Project Acme already exists."
        assert len(self.documents(PROJECTS)) == 1

    async def test_delete_cascades(self):
        """Tasks and reviews go with the project; partners lose the link."""
        acme = await add_project(self.store, "Acme")
        beta = await add_project(self.store, "Beta")
        await add_task(self.store, "A1", "client-x", acme)
        await add_task(self.store, "A2", "client-y", acme)
        await add_task(self.store, "B1", "client-x", beta)
        partner = ActionContext(await add_user(self.store, "partner", "partner", project_id=acme), self.store)
        await preflight_execute(ReviewAdd(text="Nice"), partner)

        reply = await preflight_execute(ProjectDelete(project="Acme"), self.admin)

        assert reply == "Project Acme deleted along with 2 tasks and 1 reviews."
        assert [p["name"] for p in self.documents(PROJECTS)] == ["Beta"]
        assert [t["title"] for t in self.documents(TASKS)] == ["B1"]
        assert self.documents(REVIEWS) == []
        assert (await self.store.get(USERS, "partner"))["assignedProjectId"] is None  # type: ignore

    async def test_client_lists_member_projects(self):
        acme = await add_project(self.store, "Acme")
        await add_project(self.store, "Beta")
        await add_task(self.store, "A1", "client-x", acme)

        reply = await preflight_execute(ProjectList(), self.client_x)

        assert "Acme" in reply and "Beta" not in reply


class TestReviewActions(ActionTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        self.acme = await add_project(self.store, "Acme")
        self.partner = ActionContext(
            await add_user(self.store, "partner", "partner", project_id=self.acme), self.store
        )

    async def test_partner_reviews_own_project(self):
        assert await preflight_execute(ReviewAdd(text="Nice"), self.partner) == "Review added successfully!"
        review = self.documents(REVIEWS)[0]
        assert review["projectId"] == self.acme
        assert review["authorId"] == "partner"
        assert review["authorRole"] == "partner"

    async def test_admins_and_clients_cannot_add(self):
        for ctx in (self.admin, self.client_x):
            reply = await preflight_execute(ReviewAdd(text="Hi", project="Acme"), ctx)
            assert reply == "Partners can only add reviews to their assigned projects"
        assert await preflight_execute(ReviewAdd(text=" "), self.partner) == "Review text is required"
        assert self.documents(REVIEWS) == []

    async def test_delete_is_admin_only(self):
        await preflight_execute(ReviewAdd(text="Nice"), self.partner)
        review_id = self.documents(REVIEWS)[0]["id"]

        assert (
            await preflight_execute(ReviewDelete(review=review_id), self.partner)
            == "Permission denied: you cannot delete this review."
        )
        assert await preflight_execute(ReviewDelete(review=review_id), self.admin) == "Review deleted."
        assert self.documents(REVIEWS) == []

    async def test_client_needs_a_task_to_read_reviews(self):
        await preflight_execute(ReviewAdd(text="Nice"), self.partner)

        denied = await preflight_execute(ReviewList(project="Acme"), self.client_x)
        await add_task(self.store, "Setup", "client-x", self.acme)
        allowed = await preflight_execute(ReviewList(project="Acme"), self.client_x)

        assert denied == "You do not have access to this project's reviews."
        assert "Nice" in allowed


class TestOwnedActions(ActionTestCase):
    async def test_notes_belong_to_their_owner(self):
        assert await preflight_execute(NoteNew(title="Plan", content="a"), self.client_x) == "Note Plan created."

        assert await preflight_execute(NoteDelete(note="Plan"), self.client_y) == "Note Plan not found."
        assert await preflight_execute(NoteEdit(note="Plan", content="b"), self.client_y) == "Note Plan not found."
        assert await preflight_execute(NoteList(), self.client_y) == "No notes yet."

        assert await preflight_execute(NoteEdit(note="plan", content=" "), self.client_x) == "Note content cannot be empty"
        assert await preflight_execute(NoteEdit(note="plan", content="b"), self.client_x) == "Note Plan updated."
        assert self.documents(NOTES)[0]["content"] == "b"
        assert await preflight_execute(NoteDelete(note="Plan"), self.client_x) == "Note Plan deleted."
        assert self.documents(NOTES) == []

    async def test_note_title_required(self):
        assert await preflight_execute(NoteNew(title=""), self.client_x) == "Note title is required"

    async def test_targets_toggle_and_delete(self):
        await preflight_execute(TargetNew(text="Ship it"), self.client_x)
        target_id = self.documents(TARGETS)[0]["id"]

        assert (
            await preflight_execute(TargetToggle(target=target_id), self.client_x)
            == "Target Ship it marked as completed."
        )
        assert self.documents(TARGETS)[0]["completed"] is True
        assert (
            await preflight_execute(TargetToggle(target="ship it"), self.client_x)
            == "Target Ship it marked as incomplete."
        )
        assert await preflight_execute(TargetDelete(target=target_id), self.client_y) == f"Target {target_id} not found."
        assert await preflight_execute(TargetDelete(target=target_id), self.client_x) == "Target Ship it deleted."
        assert await self.store.query(Query(TARGETS)) == []


class TestUserActions(ActionTestCase):
    async def test_rename_and_remove(self):
        assert (
            await preflight_execute(UserRename(user="client-x@web24.agency", name="Xavier"), self.admin)
            == "Renamed client-x to Xavier."
        )
        assert (await self.store.get(USERS, "client-x"))["name"] == "Xavier"  # type: ignore

        assert await preflight_execute(UserRemove(user="Xavier"), self.admin) == "Removed Xavier."
        assert await self.store.get(USERS, "client-x") is None

    async def test_admin_cannot_remove_self(self):
        assert await preflight_execute(UserRemove(user="admin"), self.admin) == "You cannot remove your own account."

    async def test_clients_cannot_manage_users(self):
        assert (
            await preflight_execute(UserList(role="client"), self.client_x)
            == "Permission denied: you cannot list users."
        )
        assert (
            await preflight_execute(UserRemove(user="client-y"), self.client_x)
            == "Permission denied: you cannot remove users."
        )
