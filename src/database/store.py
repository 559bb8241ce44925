from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Tuple

from database.errors import StoreError

Document = Dict[str, Any]
SnapshotCallback = Callable[[List[Document]], Awaitable[None]]
ErrorCallback = Callable[[StoreError], Awaitable[None]]
Unsubscribe = Callable[[], Awaitable[None]]


@dataclass(frozen=True)
class Where:
    field: str
    value: Any

    def matches(self, document: Mapping[str, Any]) -> bool:
        return document.get(self.field) == self.value


@dataclass(frozen=True)
class Query:
    """
    A query over one collection: equality predicates and an optional sort.
    Queries are hashable so they can key subscriptions.
    """

    collection: str
    where: Tuple[Where, ...] = ()
    order_by: Optional[str] = None
    descending: bool = False

    def filter(self, field: str, value: Any) -> "Query":
        return Query(
            self.collection,
            self.where + (Where(field, value),),
            self.order_by,
            self.descending,
        )

    def order(self, field: str, descending: bool = False) -> "Query":
        return Query(self.collection, self.where, field, descending)

    def matches(self, document: Mapping[str, Any]) -> bool:
        return all(where.matches(document) for where in self.where)

    def __str__(self) -> str:
        predicates = " and ".join(f"{w.field} == {w.value!r}" for w in self.where)
        text = self.collection
        if predicates:
            text += f" where {predicates}"
        if self.order_by:
            text += f" order by {self.order_by}{' desc' if self.descending else ''}"
        return text


class DocumentStore(ABC):
    """
    The document database. Every document handed out carries its key under
    "id". Backends raise `StoreError` subclasses.
    """

    @abstractmethod
    async def get(self, collection: str, id: str) -> Optional[Document]:
        pass

    @abstractmethod
    async def query(self, query: Query) -> List[Document]:
        pass

    @abstractmethod
    async def add(self, collection: str, fields: Document) -> str:
        pass

    @abstractmethod
    async def set(self, collection: str, id: str, fields: Document) -> None:
        pass

    @abstractmethod
    async def update(self, collection: str, id: str, fields: Document) -> None:
        """Partial update; raises `NotFound` if the document is gone."""
        pass

    @abstractmethod
    async def delete(self, collection: str, id: str) -> None:
        pass

    @abstractmethod
    async def subscribe(
        self, query: Query, on_snapshot: SnapshotCallback, on_error: ErrorCallback
    ) -> Unsubscribe:
        """
        Open a live query. `on_snapshot` receives the full current result set
        once the query is established and again after every change to the
        collection. The returned coroutine function cancels the subscription.
        """
        pass
