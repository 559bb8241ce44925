import logging
from typing import List, Optional

from pydantic import ValidationError

from board.board import COLUMNS, group_tasks, sort_tasks
from database.errors import StoreError
from database.store import DocumentStore, Query
from identity.context import Identity
from model import PROJECTS, REVIEWS, TASKS, USERS
from model.project import Project
from model.review import Review
from model.task import Task
from model.user import User
from views.base import RenderCallback, View, names_by_id

LOGGER = logging.getLogger(__name__)


class PartnerView(View):
    """Read-only dashboard of the project a partner is assigned to."""

    title = "Partner Dashboard"

    project_id: str
    error: Optional[str]

    def __init__(
        self,
        store: DocumentStore,
        identity: Identity,
        project_id: str,
        on_render: Optional[RenderCallback] = None,
    ):
        super().__init__(store, identity, on_render)
        self.project_id = project_id
        self.error = None

    async def validate(self) -> Optional[str]:
        """Check the stored user document, not the cached identity."""
        try:
            document = await self.store.get(USERS, self.identity.user_id)
        except StoreError as e:
            LOGGER.error(f"Error validating project access: {e}")
            return "Failed to validate project access"
        if document is None:
            return "User data not found"
        try:
            user = User.model_validate(document)
        except ValidationError as e:
            LOGGER.error(f"Invalid user document {self.identity.user_id}: {e}")
            return "User data not found"
        if user.role != "partner":
            return "Access denied: User is not a partner"
        if user.assigned_project_id != self.project_id:
            return "Access denied: Project not assigned to this partner"
        return None

    async def bind(self):
        self.error = await self.validate()
        if self.error:
            LOGGER.warning(f"Partner view denied for {self.identity.user_id}: {self.error}")
            return
        await self.subscriptions.bind(
            "project", Query(PROJECTS).filter("id", self.project_id), Project, self.changed
        )
        await self.subscriptions.bind(
            "tasks", Query(TASKS).filter("projectId", self.project_id), Task, self.changed
        )
        await self.subscriptions.bind(
            "reviews",
            Query(REVIEWS).filter("projectId", self.project_id).order("createdAt", descending=True),
            Review,
            self.changed,
        )
        await self.subscriptions.bind(
            "clients", Query(USERS).filter("role", "client"), User, self.changed
        )

    @property
    def project(self) -> Optional[Project]:
        projects = self.subscriptions.items("project")
        return projects[0] if projects else None

    @property
    def tasks(self) -> List[Task]:
        return sort_tasks(self.subscriptions.items("tasks"))

    @property
    def reviews(self) -> List[Review]:
        return self.subscriptions.items("reviews")

    def client_name(self, client_id: str) -> str:
        return names_by_id(self.subscriptions.items("clients")).get(client_id, "Unknown Client")

    def render(self) -> str:
        if self.error:
            return f"**Error:** {self.error}"
        project = self.project
        if project is None:
            return "Project not found."

        lines = [f"## {self.title}: {project.name}"]
        columns = group_tasks(self.tasks)
        for column in COLUMNS:
            tasks = columns.get(column.id, [])
            lines.append(f"\n**{column.title}** ({len(tasks)})")
            for task in tasks:
                lines.append(f"- {task.title} - {self.client_name(task.assigned_to)}")

        lines.append(f"\n**Reviews** ({len(self.reviews)})")
        if not self.reviews:
            lines.append("*No reviews yet.*")
        for review in self.reviews:
            lines.append(f"> {review.text}\n> - {review.created_at.strftime('%Y-%m-%d %H:%M')}")
        return "\n".join(lines)
