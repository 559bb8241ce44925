import copy
import logging
import uuid
from dataclasses import dataclass
from typing import Dict, List, Optional

from database.errors import NotFound
from database.store import (
    Document,
    DocumentStore,
    ErrorCallback,
    Query,
    SnapshotCallback,
    Unsubscribe,
)

LOGGER = logging.getLogger(__name__)


@dataclass(eq=False)
class _Listener:
    query: Query
    on_snapshot: SnapshotCallback
    on_error: ErrorCallback
    active: bool = True


class MemoryStore(DocumentStore):
    """
    In-process document store used in development and tests. Listeners of a
    collection are notified, in registration order, before a write returns.
    """

    collections: Dict[str, Dict[str, Document]]
    listeners: Dict[str, List[_Listener]]

    def __init__(self):
        self.collections = {}
        self.listeners = {}

    def _collection(self, name: str) -> Dict[str, Document]:
        return self.collections.setdefault(name, {})

    def _run(self, query: Query) -> List[Document]:
        documents = [
            copy.deepcopy(document)
            for document in self._collection(query.collection).values()
            if query.matches(document)
        ]
        if query.order_by:
            field = query.order_by
            present = [d for d in documents if d.get(field) is not None]
            missing = [d for d in documents if d.get(field) is None]
            present.sort(key=lambda d: d[field], reverse=query.descending)
            documents = present + missing
        return documents

    async def _notify(self, collection: str):
        for listener in list(self.listeners.get(collection, [])):
            if listener.active:
                await listener.on_snapshot(self._run(listener.query))

    async def get(self, collection: str, id: str) -> Optional[Document]:
        document = self._collection(collection).get(id)
        return copy.deepcopy(document) if document is not None else None

    async def query(self, query: Query) -> List[Document]:
        return self._run(query)

    async def add(self, collection: str, fields: Document) -> str:
        id = uuid.uuid4().hex
        await self.set(collection, id, fields)
        return id

    async def set(self, collection: str, id: str, fields: Document) -> None:
        document = copy.deepcopy(fields)
        document["id"] = id
        self._collection(collection)[id] = document
        LOGGER.debug(f"Set {collection}/{id}")
        await self._notify(collection)

    async def update(self, collection: str, id: str, fields: Document) -> None:
        document = self._collection(collection).get(id)
        if document is None:
            raise NotFound(f"{collection}/{id} does not exist")
        document.update(copy.deepcopy(fields))
        document["id"] = id
        LOGGER.debug(f"Updated {collection}/{id}: {sorted(fields)}")
        await self._notify(collection)

    async def delete(self, collection: str, id: str) -> None:
        if self._collection(collection).pop(id, None) is None:
            return
        LOGGER.debug(f"Deleted {collection}/{id}")
        await self._notify(collection)

    async def subscribe(
        self, query: Query, on_snapshot: SnapshotCallback, on_error: ErrorCallback
    ) -> Unsubscribe:
        listener = _Listener(query, on_snapshot, on_error)
        self.listeners.setdefault(query.collection, []).append(listener)

        async def unsubscribe():
            listener.active = False
            listeners = self.listeners.get(query.collection, [])
            if listener in listeners:
                listeners.remove(listener)

        await on_snapshot(self._run(query))
        return unsubscribe

    def listener_count(self, collection: Optional[str] = None) -> int:
        if collection is not None:
            return len(self.listeners.get(collection, []))
        return sum(len(listeners) for listeners in self.listeners.values())
