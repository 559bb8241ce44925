import functools
import logging
from enum import Enum
from typing import Awaitable, Callable, Generic, List, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError

from database.errors import StoreError
from database.store import Document, DocumentStore, Query, Unsubscribe

LOGGER = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class SubscriptionState(Enum):
    CLOSED = "closed"
    OPENING = "opening"
    OPEN = "open"
    CLOSING = "closing"


class LiveQuery(Generic[T]):
    """
    A live query and its local mirror.

    Every snapshot replaces `items` wholesale. Each `open` starts a new
    generation and callbacks carry the generation they were registered with,
    so a snapshot from a closed or superseded subscription is dropped instead
    of being written into the mirror.
    """

    store: DocumentStore
    query: Query
    schema: Type[T]
    role: Optional[str]
    on_change: Optional[Callable[["LiveQuery[T]"], Awaitable[None]]]

    state: SubscriptionState
    items: List[T]
    error: Optional[StoreError]
    received: bool
    generation: int

    def __init__(
        self,
        store: DocumentStore,
        query: Query,
        schema: Type[T],
        on_change: Optional[Callable[["LiveQuery[T]"], Awaitable[None]]] = None,
        role: Optional[str] = None,
    ):
        self.store = store
        self.query = query
        self.schema = schema
        self.role = role
        self.on_change = on_change

        self.state = SubscriptionState.CLOSED
        self.items = []
        self.error = None
        self.received = False
        self.generation = 0
        self._unsubscribe: Optional[Unsubscribe] = None

    @property
    def key(self) -> Tuple[Query, Optional[str]]:
        return (self.query, self.role)

    @property
    def active(self) -> bool:
        return self.state in (SubscriptionState.OPENING, SubscriptionState.OPEN)

    def __repr__(self) -> str:
        return f"LiveQuery({self.query}, {self.state.value})"

    async def open(self):
        if self.state != SubscriptionState.CLOSED:
            return
        self.generation += 1
        generation = self.generation
        self.state = SubscriptionState.OPENING
        self.received = False
        self.error = None
        LOGGER.debug(f"Opening live query {self.query}")

        try:
            unsubscribe = await self.store.subscribe(
                self.query,
                functools.partial(self._deliver, generation),
                functools.partial(self._fail, generation),
            )
        except StoreError as e:
            await self._fail(generation, e)
            if self.generation == generation:
                self.state = SubscriptionState.CLOSED
            return

        if self.generation != generation:
            # Closed or reopened while the first snapshot was being handled.
            await unsubscribe()
            return
        self._unsubscribe = unsubscribe
        if self.state == SubscriptionState.OPENING:
            self.state = SubscriptionState.OPEN

    async def close(self):
        if self.state in (SubscriptionState.CLOSED, SubscriptionState.CLOSING):
            return
        self.state = SubscriptionState.CLOSING
        self.generation += 1
        unsubscribe, self._unsubscribe = self._unsubscribe, None
        try:
            if unsubscribe is not None:
                await unsubscribe()
        finally:
            self.items = []
            self.state = SubscriptionState.CLOSED
            LOGGER.debug(f"Closed live query {self.query}")

    async def reopen(self, query: Query):
        await self.close()
        self.query = query
        await self.open()

    def _stale(self, generation: int) -> bool:
        return generation != self.generation or not self.active

    def _coerce(self, documents: List[Document]) -> List[T]:
        items: List[T] = []
        for document in documents:
            try:
                items.append(self.schema.model_validate(document))
            except ValidationError as e:
                LOGGER.warning(
                    f"Skipping malformed {self.query.collection} document {document.get('id')}: {e.error_count()} errors"
                )
        return items

    async def _deliver(self, generation: int, documents: List[Document]):
        if self._stale(generation):
            LOGGER.debug(f"Dropping stale snapshot for {self.query}")
            return
        self.items = self._coerce(documents)
        self.error = None
        self.received = True
        self.state = SubscriptionState.OPEN
        if self.on_change is not None:
            await self.on_change(self)

    async def _fail(self, generation: int, error: StoreError):
        if self._stale(generation):
            return
        LOGGER.error(f"Error fetching {self.query}: {error}")
        self.items = []
        self.error = error
        self.received = True
        if self.on_change is not None:
            await self.on_change(self)
