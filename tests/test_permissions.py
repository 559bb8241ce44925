"""
Tests for the role-scoped permission predicates.

Every combination of role and ownership is checked against the access table
the board is built on.
"""
import itertools
import unittest

from model.task import Task
from policy.permissions import (
    Viewer,
    can_add_review,
    can_create_task,
    can_delete_review,
    can_delete_task,
    can_move_task,
    can_view_reviews,
    can_view_task,
    compose,
)

OWNER = "owner"
PROJECT = "p1"


def task_for(owner: str, project: str = PROJECT) -> Task:
    return Task(id="t1", title="Setup", assigned_to=owner, project_id=project)


class TestTaskPermissions(unittest.TestCase):
    """Create, move, delete and view rules for tasks."""

    def test_move_matches_table_for_every_role_and_ownership(self):
        """Only admins and the owning client may move a task."""
        expected = {
            ("admin", True): True,
            ("admin", False): True,
            ("client", True): True,
            ("client", False): False,
            ("partner", True): False,
            ("partner", False): False,
            (None, True): False,
            (None, False): False,
        }
        for role, owns in itertools.product(["admin", "client", "partner", None], [True, False]):
            viewer = Viewer(OWNER if owns else "someone-else", role, PROJECT)  # type: ignore
            with self.subTest(role=role, owns=owns):
                assert can_move_task(viewer, task_for(OWNER)) is expected[(role, owns)]

    def test_create_task(self):
        """Admins assign anyone, clients only themselves, partners nobody."""
        assert can_create_task(Viewer("a", "admin"), "anyone")
        assert can_create_task(Viewer("c", "client"))
        assert can_create_task(Viewer("c", "client"), "c")
        assert not can_create_task(Viewer("c", "client"), "other")
        assert not can_create_task(Viewer("p", "partner", PROJECT))
        assert not can_create_task(Viewer("x", None))

    def test_delete_task_is_admin_only(self):
        assert can_delete_task(Viewer("a", "admin"))
        assert not can_delete_task(Viewer(OWNER, "client"))
        assert not can_delete_task(Viewer("p", "partner", PROJECT))

    def test_view_task(self):
        """Clients see their own tasks, partners the tasks of their project."""
        assert can_view_task(Viewer("a", "admin"), task_for(OWNER))
        assert can_view_task(Viewer(OWNER, "client"), task_for(OWNER))
        assert not can_view_task(Viewer("c2", "client"), task_for(OWNER))
        assert can_view_task(Viewer("p", "partner", PROJECT), task_for(OWNER))
        assert not can_view_task(Viewer("p", "partner", "other"), task_for(OWNER))
        assert not can_view_task(Viewer("p", "partner", None), task_for(OWNER))


class TestReviewPermissions(unittest.TestCase):
    """Add, delete and view rules for reviews."""

    def test_add_review_only_for_assigned_partner(self):
        assert can_add_review(Viewer("p", "partner", PROJECT), PROJECT)
        assert not can_add_review(Viewer("p", "partner", "other"), PROJECT)
        assert not can_add_review(Viewer("p", "partner", None), None)
        assert not can_add_review(Viewer("a", "admin"), PROJECT)
        assert not can_add_review(Viewer("c", "client"), PROJECT)

    def test_delete_review_is_admin_only(self):
        assert can_delete_review(Viewer("a", "admin"))
        assert not can_delete_review(Viewer("c", "client"))
        assert not can_delete_review(Viewer("p", "partner", PROJECT))

    def test_view_reviews(self):
        """Clients need a task in the project, partners the assignment."""
        assert can_view_reviews(Viewer("a", "admin"), PROJECT)
        assert can_view_reviews(Viewer("c", "client"), PROJECT, {PROJECT})
        assert not can_view_reviews(Viewer("c", "client"), PROJECT, set())
        assert can_view_reviews(Viewer("p", "partner", PROJECT), PROJECT)
        assert not can_view_reviews(Viewer("p", "partner", "other"), PROJECT)
        assert not can_view_reviews(Viewer("a", "admin"), None)


class TestCompose(unittest.TestCase):
    def test_admin_affordances(self):
        affordances = compose(Viewer("a", "admin"), PROJECT, task_for(OWNER))
        assert affordances.create_task
        assert affordances.move_task
        assert affordances.delete_task
        assert affordances.view_task
        assert not affordances.add_review
        assert affordances.delete_review
        assert affordances.view_reviews

    def test_partner_affordances_are_read_only(self):
        """A partner reads its project and may only add reviews to it."""
        affordances = compose(Viewer("p", "partner", PROJECT), PROJECT, task_for(OWNER))
        assert not affordances.create_task
        assert not affordances.move_task
        assert not affordances.delete_task
        assert affordances.view_task
        assert affordances.add_review
        assert not affordances.delete_review
        assert affordances.view_reviews

    def test_without_task_task_affordances_are_false(self):
        affordances = compose(Viewer(OWNER, "client"), PROJECT, None, {PROJECT})
        assert affordances.create_task
        assert not affordances.move_task
        assert not affordances.view_task
        assert affordances.view_reviews
