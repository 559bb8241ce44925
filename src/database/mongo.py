import asyncio
import contextlib
import functools
import logging
from typing import Any, Dict, List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import ConnectionFailure, OperationFailure, PyMongoError

from database.errors import NotFound, PermissionDenied, StoreError, Unavailable
from database.store import (
    Document,
    DocumentStore,
    ErrorCallback,
    Query,
    SnapshotCallback,
    Unsubscribe,
)

LOGGER = logging.getLogger(__name__)

UNAUTHORIZED_CODES = {13, 18}


def translate(error: PyMongoError) -> StoreError:
    if isinstance(error, OperationFailure) and error.code in UNAUTHORIZED_CODES:
        return PermissionDenied(str(error))
    if isinstance(error, ConnectionFailure):
        return Unavailable(str(error))
    return StoreError(str(error))


def translated(func):
    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except PyMongoError as e:
            raise translate(e) from e

    return wrapper


def key(id: str) -> Any:
    return ObjectId(id) if ObjectId.is_valid(id) else id


def from_mongo(document: Dict[str, Any]) -> Document:
    document = dict(document)
    document["id"] = str(document.pop("_id"))
    return document


def to_filter(query: Query) -> Dict[str, Any]:
    result: Dict[str, Any] = {}
    for where in query.where:
        if where.field == "id":
            result["_id"] = key(where.value)
        else:
            result[where.field] = where.value
    return result


class MongoStore(DocumentStore):
    """
    Document store on MongoDB. Live queries follow a change stream on the
    queried collection and re-run the query after every change, so the
    deployment must be a replica set.
    """

    db: AsyncIOMotorDatabase

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db

    @translated
    async def get(self, collection: str, id: str) -> Optional[Document]:
        document = await self.db[collection].find_one({"_id": key(id)})
        return from_mongo(document) if document else None

    @translated
    async def query(self, query: Query) -> List[Document]:
        cursor = self.db[query.collection].find(to_filter(query))
        if query.order_by:
            cursor = cursor.sort(
                query.order_by, DESCENDING if query.descending else ASCENDING
            )
        return [from_mongo(document) async for document in cursor]

    @translated
    async def add(self, collection: str, fields: Document) -> str:
        result = await self.db[collection].insert_one(dict(fields))
        return str(result.inserted_id)

    @translated
    async def set(self, collection: str, id: str, fields: Document) -> None:
        await self.db[collection].replace_one({"_id": key(id)}, dict(fields), upsert=True)

    @translated
    async def update(self, collection: str, id: str, fields: Document) -> None:
        result = await self.db[collection].update_one(
            {"_id": key(id)}, {"$set": dict(fields)}
        )
        if result.matched_count == 0:
            raise NotFound(f"{collection}/{id} does not exist")

    @translated
    async def delete(self, collection: str, id: str) -> None:
        await self.db[collection].delete_one({"_id": key(id)})

    async def subscribe(
        self, query: Query, on_snapshot: SnapshotCallback, on_error: ErrorCallback
    ) -> Unsubscribe:
        task = asyncio.create_task(
            self._watch(query, on_snapshot, on_error), name=f"watch {query}"
        )

        async def unsubscribe():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

        return unsubscribe

    async def _watch(
        self, query: Query, on_snapshot: SnapshotCallback, on_error: ErrorCallback
    ):
        try:
            async with self.db[query.collection].watch() as stream:
                await on_snapshot(await self.query(query))
                async for _ in stream:
                    await on_snapshot(await self.query(query))
        except StoreError as e:
            LOGGER.error(f"Live query {query} failed: {e}")
            await on_error(e)
        except PyMongoError as e:
            LOGGER.error(f"Live query {query} failed: {e}")
            await on_error(translate(e))
