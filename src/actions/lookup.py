from typing import AbstractSet, List, Optional

from database.store import DocumentStore, Query
from model import PROJECTS, TASKS, USERS
from model.project import Project
from model.record import Role
from model.user import User


async def find_project(store: DocumentStore, name: str) -> Optional[Project]:
    """Find a project by exact name, falling back to its id."""
    name = name.strip()
    documents = await store.query(Query(PROJECTS).filter("name", name))
    if documents:
        return Project.model_validate(documents[0])
    document = await store.get(PROJECTS, name)
    return Project.model_validate(document) if document else None


async def list_users(store: DocumentStore, role: Optional[Role] = None) -> List[User]:
    query = Query(USERS)
    if role is not None:
        query = query.filter("role", role)
    return [User.model_validate(document) for document in await store.query(query)]


async def find_user(
    store: DocumentStore, who: str, role: Optional[Role] = None
) -> Optional[User]:
    """Match a user by id, email or name, ignoring case."""
    wanted = who.strip().lower()
    for user in await list_users(store, role):
        if wanted in (user.id.lower(), user.email.lower(), user.name.lower()):
            return user
    return None


async def member_projects(store: DocumentStore, user_id: str) -> AbstractSet[str]:
    """Projects in which the user holds at least one task."""
    tasks = await store.query(Query(TASKS).filter("assignedTo", user_id))
    return frozenset(task["projectId"] for task in tasks if task.get("projectId"))
