import logging
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, ClassVar, Dict, Iterable, Optional

from database.store import DocumentStore
from identity.context import Identity
from model.user import User
from policy.permissions import Viewer
from sync.manager import SubscriptionManager
from sync.subscription import LiveQuery

LOGGER = logging.getLogger(__name__)

RenderCallback = Callable[["View"], Awaitable[None]]


class View(ABC):
    """
    A screen bound to live queries. Subclasses bind their slots in `bind`;
    once the view is open every delivery ends in `refresh`, which hands it to
    `on_render` until the view is closed.
    """

    title: ClassVar[str]

    store: DocumentStore
    identity: Identity
    viewer: Viewer
    subscriptions: SubscriptionManager
    on_render: Optional[RenderCallback]
    closed: bool
    ready: bool

    def __init__(
        self,
        store: DocumentStore,
        identity: Identity,
        on_render: Optional[RenderCallback] = None,
    ):
        self.store = store
        self.identity = identity
        self.viewer = Viewer.of(identity)
        self.subscriptions = SubscriptionManager(store, role=identity.role)
        self.on_render = on_render
        self.closed = False
        self.ready = False

    @abstractmethod
    async def bind(self):
        pass

    @abstractmethod
    def render(self) -> str:
        pass

    async def open(self):
        await self.bind()
        self.ready = True
        await self.refresh()

    async def close(self):
        if self.closed:
            return
        self.closed = True
        await self.subscriptions.close()
        LOGGER.debug(f"Closed {self.__class__.__name__} for {self.identity.user_id}")

    async def changed(self, live: LiveQuery):
        await self.refresh()

    async def refresh(self):
        if self.closed or not self.ready or self.on_render is None:
            return
        await self.on_render(self)


def names_by_id(users: Iterable[User]) -> Dict[str, str]:
    return {user.id: user.display_name for user in users}
