import logging
from typing import AbstractSet, List, Optional

from result import Err, Ok, Result

from board.board import COLUMNS, group_tasks, sort_tasks
from database.store import Query
from model import PROJECTS, REVIEWS, TASKS, USERS
from model.project import Project
from model.review import Review
from model.task import Task
from model.user import User
from policy.permissions import Affordances, can_view_reviews, compose
from sync.subscription import LiveQuery
from views.base import View, names_by_id

LOGGER = logging.getLogger(__name__)


class KanbanView(View):
    """
    The task board of an admin or a client.

    Slots:
    - `users`: every user, for name lookups
    - `clients`: admins only, the possible assignees
    - `membership`: clients only, the tasks assigned to the viewer; the
      projects they touch decide which projects and reviews the client sees
    - `projects`: every project, narrowed to the membership for clients
    - `tasks`: the tasks of the selected project the viewer may see
    - `reviews`: the reviews of the selected project, bound only while the
      viewer may read them
    """

    title = "Kanban Board"

    selected_project_id: Optional[str] = None

    async def bind(self):
        uid = self.identity.user_id
        await self.subscriptions.bind("users", Query(USERS), User, self.changed)
        if self.viewer.role == "admin":
            await self.subscriptions.bind(
                "clients", Query(USERS).filter("role", "client"), User, self.changed
            )
        if self.viewer.role == "client":
            await self.subscriptions.bind(
                "membership",
                Query(TASKS).filter("assignedTo", uid),
                Task,
                self._selection_changed,
            )
        await self.subscriptions.bind(
            "projects", Query(PROJECTS), Project, self._selection_changed
        )
        await self._sync()

    @property
    def membership_ready(self) -> bool:
        live = self.subscriptions.slots.get("membership")
        return live is not None and live.received

    @property
    def member_project_ids(self) -> AbstractSet[str]:
        return frozenset(
            task.project_id
            for task in self.subscriptions.items("membership")
            if task.project_id
        )

    @property
    def projects(self) -> List[Project]:
        projects: List[Project] = self.subscriptions.items("projects")
        if self.viewer.role == "client":
            members = self.member_project_ids
            projects = [project for project in projects if project.id in members]
        return projects

    @property
    def selected_project(self) -> Optional[Project]:
        return next(
            (p for p in self.projects if p.id == self.selected_project_id), None
        )

    @property
    def tasks(self) -> List[Task]:
        return sort_tasks(self.subscriptions.items("tasks"))

    @property
    def reviews(self) -> List[Review]:
        return self.subscriptions.items("reviews")

    @property
    def clients(self) -> List[User]:
        return self.subscriptions.items("clients")

    def user_name(self, user_id: str) -> str:
        return names_by_id(self.subscriptions.items("users")).get(user_id, "Unknown User")

    def find_project(self, name: str) -> Optional[Project]:
        wanted = name.strip().lower()
        return next((p for p in self.projects if p.name.lower() == wanted), None)

    def affordances(self, task: Optional[Task] = None) -> Affordances:
        return compose(
            self.viewer, self.selected_project_id, task, self.member_project_ids
        )

    async def select_project(self, project_id: str) -> Result[Project, str]:
        project = next((p for p in self.projects if p.id == project_id), None)
        if project is None:
            return Err("You do not have access to that project.")
        self.selected_project_id = project.id
        await self._sync()
        await self.refresh()
        return Ok(project)

    async def _selection_changed(self, live: LiveQuery):
        await self._sync()
        await self.refresh()

    async def _sync(self):
        if self.closed:
            return
        visible = [project.id for project in self.projects]
        if self.selected_project_id not in visible:
            previous = self.selected_project_id
            self.selected_project_id = visible[0] if visible else None
            if previous != self.selected_project_id:
                LOGGER.debug(f"Selected project {previous} -> {self.selected_project_id}")
        await self._bind_tasks()
        await self._bind_reviews()

    async def _bind_tasks(self):
        query = Query(TASKS)
        if self.viewer.role != "admin":
            query = query.filter("assignedTo", self.identity.user_id)
        if self.selected_project_id:
            query = query.filter("projectId", self.selected_project_id)
        await self.subscriptions.bind("tasks", query, Task, self.changed)

    async def _bind_reviews(self):
        project_id = self.selected_project_id
        allowed = can_view_reviews(self.viewer, project_id, self.member_project_ids)
        if self.viewer.role == "client" and not self.membership_ready:
            allowed = False
        if not allowed or project_id is None:
            if "reviews" in self.subscriptions:
                LOGGER.debug(f"Releasing reviews for {self.identity.user_id}")
                await self.subscriptions.release("reviews")
            return
        query = Query(REVIEWS).filter("projectId", project_id).order("createdAt", descending=True)
        await self.subscriptions.bind("reviews", query, Review, self.changed)

    def render(self) -> str:
        lines = [f"## {self.title}"]
        project = self.selected_project
        if project is not None:
            lines.append(f"**Project:** {project.name}")
        elif self.viewer.role == "client":
            lines.append("*You have no tasks assigned yet.*")
        else:
            lines.append("*No project selected.*")

        columns = group_tasks(self.tasks)
        movable = False
        for column in COLUMNS:
            tasks = columns.get(column.id, [])
            lines.append(f"\n**{column.title}** ({len(tasks)})")
            for task in tasks:
                movable = movable or self.affordances(task).move_task
                suffix = ""
                if self.viewer.role == "admin":
                    suffix = f" - {self.user_name(task.assigned_to)}"
                if task.deadline:
                    suffix += f" *(due {task.deadline.strftime('%Y-%m-%d')})*"
                lines.append(f"- `{task.id}` {task.title}{suffix}")

        board = self.affordances()
        if board.view_reviews and "reviews" in self.subscriptions:
            lines.append(f"\n**Reviews** ({len(self.reviews)})")
            for review in self.reviews:
                lines.append(f"> {review.text}\n> - {self.user_name(review.author_id)}")

        hints = []
        if board.create_task:
            hints.append("`!board new [title]`")
        if movable:
            hints.append("`!board move [task id] [column]`")
        if any(self.affordances(task).delete_task for task in self.tasks):
            hints.append("`!board delete [task id]`")
        if hints:
            lines.append("\n" + " | ".join(hints))
        return "\n".join(lines)
