"""
Who may do what on a board. These are pure functions of the viewer, the
selected project and the task at hand; they are evaluated on every render
and again before every mutation.
"""

from dataclasses import dataclass
from typing import AbstractSet, Optional

from identity.context import Identity
from model.record import Role
from model.task import Task


@dataclass(frozen=True)
class Viewer:
    user_id: str
    role: Optional[Role]
    assigned_project_id: Optional[str] = None

    @classmethod
    def of(cls, identity: Identity) -> "Viewer":
        return cls(identity.user_id, identity.role, identity.assigned_project_id)


@dataclass(frozen=True)
class Affordances:
    create_task: bool = False
    move_task: bool = False
    delete_task: bool = False
    view_task: bool = False
    add_review: bool = False
    delete_review: bool = False
    view_reviews: bool = False


def can_create_task(viewer: Viewer, assignee_id: Optional[str] = None) -> bool:
    if viewer.role == "admin":
        return True
    if viewer.role == "client":
        return assignee_id is None or assignee_id == viewer.user_id
    return False


def can_move_task(viewer: Viewer, task: Task) -> bool:
    if viewer.role == "admin":
        return True
    return viewer.role == "client" and task.assigned_to == viewer.user_id


def can_delete_task(viewer: Viewer) -> bool:
    return viewer.role == "admin"


def can_view_task(viewer: Viewer, task: Task) -> bool:
    if viewer.role == "admin":
        return True
    if viewer.role == "client":
        return task.assigned_to == viewer.user_id
    if viewer.role == "partner":
        return (
            viewer.assigned_project_id is not None
            and task.project_id == viewer.assigned_project_id
        )
    return False


def can_add_review(viewer: Viewer, project_id: Optional[str]) -> bool:
    return (
        viewer.role == "partner"
        and project_id is not None
        and viewer.assigned_project_id == project_id
    )


def can_delete_review(viewer: Viewer) -> bool:
    return viewer.role == "admin"


def can_view_reviews(
    viewer: Viewer,
    project_id: Optional[str],
    member_project_ids: AbstractSet[str] = frozenset(),
) -> bool:
    if project_id is None:
        return False
    if viewer.role == "admin":
        return True
    if viewer.role == "client":
        return project_id in member_project_ids
    if viewer.role == "partner":
        return viewer.assigned_project_id == project_id
    return False


def compose(
    viewer: Viewer,
    selected_project_id: Optional[str] = None,
    task: Optional[Task] = None,
    member_project_ids: AbstractSet[str] = frozenset(),
) -> Affordances:
    return Affordances(
        create_task=can_create_task(viewer),
        move_task=task is not None and can_move_task(viewer, task),
        delete_task=task is not None and can_delete_task(viewer),
        view_task=task is not None and can_view_task(viewer, task),
        add_review=can_add_review(viewer, selected_project_id),
        delete_review=can_delete_review(viewer),
        view_reviews=can_view_reviews(viewer, selected_project_id, member_project_ids),
    )
