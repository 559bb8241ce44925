from typing import List, Optional

from database.store import Query
from model import PROJECTS, REVIEWS, USERS
from model.project import Project
from model.review import Review
from model.user import User
from views.base import View, names_by_id


class AdminView(View):
    title = "Admin Panel"

    async def bind(self):
        await self.subscriptions.bind(
            "clients", Query(USERS).filter("role", "client"), User, self.changed
        )
        await self.subscriptions.bind(
            "partners", Query(USERS).filter("role", "partner"), User, self.changed
        )
        await self.subscriptions.bind("projects", Query(PROJECTS), Project, self.changed)
        await self.subscriptions.bind(
            "reviews", Query(REVIEWS).order("createdAt", descending=True), Review, self.changed
        )

    @property
    def clients(self) -> List[User]:
        return self.subscriptions.items("clients")

    @property
    def partners(self) -> List[User]:
        return self.subscriptions.items("partners")

    @property
    def projects(self) -> List[Project]:
        return self.subscriptions.items("projects")

    @property
    def reviews(self) -> List[Review]:
        return self.subscriptions.items("reviews")

    def project_name(self, project_id: Optional[str]) -> str:
        for project in self.projects:
            if project.id == project_id:
                return project.name
        return "Unknown Project"

    def author_name(self, author_id: str) -> str:
        names = names_by_id(self.clients + self.partners)
        return names.get(author_id, "Unknown Author")

    def render(self) -> str:
        lines = [f"## {self.title}", f"\n**Clients** ({len(self.clients)})"]
        lines += [f"- `{user.id}` {user.display_name} ({user.email})" for user in self.clients]

        lines.append(f"\n**Partners** ({len(self.partners)})")
        lines += [
            f"- `{user.id}` {user.display_name} ({user.email}) - {self.project_name(user.assigned_project_id)}"
            for user in self.partners
        ]

        lines.append(f"\n**Projects** ({len(self.projects)})")
        lines += [f"- `{project.id}` {project.name}" for project in self.projects]

        lines.append(f"\n**Reviews** ({len(self.reviews)})")
        lines += [
            f"- `{review.id}` {self.project_name(review.project_id)}: {review.text} - {self.author_name(review.author_id)}"
            for review in self.reviews
        ]
        return "\n".join(lines)
