import asyncio
from typing import Dict, List, Optional

from database.errors import StoreError
from database.memory import MemoryStore
from database.store import Document, Query
from identity.context import Identity
from model import PROJECTS, TASKS, USERS
from model.project import Project
from model.record import Role
from model.task import Task
from model.user import User


async def add_user(
    store: MemoryStore,
    uid: str,
    role: Role,
    name: str = "",
    project_id: Optional[str] = None,
) -> Identity:
    email = f"{uid}@web24.agency"
    user = User(name=name or uid, email=email, role=role, assigned_project_id=project_id)
    await store.set(USERS, uid, user.to_document())
    return Identity(
        user_id=uid,
        email=email,
        role=role,
        assigned_project_id=project_id if role == "partner" else None,
        name=user.name,
    )


async def add_project(store: MemoryStore, name: str) -> str:
    return await store.add(PROJECTS, Project(name=name).to_document())


async def add_task(
    store: MemoryStore,
    title: str,
    assigned_to: str,
    project_id: Optional[str],
    status: str = "todo",
) -> str:
    task = Task(title=title, assigned_to=assigned_to, project_id=project_id, status=status)  # type: ignore
    return await store.add(TASKS, task.to_document())


class ScriptedStore(MemoryStore):
    """
    A memory store whose calls can be made to fail. `failures[name]` is a
    list of errors raised, in order, by the next calls to `name`; `calls`
    counts every call per method.
    """

    failures: Dict[str, List[StoreError]]
    calls: Dict[str, int]

    def __init__(self):
        super().__init__()
        self.failures = {}
        self.calls = {}

    def _hit(self, name: str):
        self.calls[name] = self.calls.get(name, 0) + 1
        pending = self.failures.get(name)
        if pending:
            raise pending.pop(0)

    async def query(self, query: Query) -> List[Document]:
        self._hit("query")
        return await super().query(query)

    async def set(self, collection: str, id: str, fields: Document) -> None:
        self._hit("set")
        await super().set(collection, id, fields)

    async def get(self, collection: str, id: str) -> Optional[Document]:
        self._hit("get")
        return await super().get(collection, id)

    async def subscribe(self, query, on_snapshot, on_error):
        self._hit("subscribe")
        return await super().subscribe(query, on_snapshot, on_error)


class YieldingStore(MemoryStore):
    """
    A memory store that yields to the event loop before subscribing and
    before unsubscribing, the way a networked store does, so overlapping
    binds interleave.
    """

    async def subscribe(self, query, on_snapshot, on_error):
        await asyncio.sleep(0)
        unsubscribe = await super().subscribe(query, on_snapshot, on_error)

        async def yielding_unsubscribe():
            await asyncio.sleep(0)
            await unsubscribe()

        return yielding_unsubscribe
