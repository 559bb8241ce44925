import logging
from typing import List, Tuple

from beanie import init_beanie
from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
)
from pymongo import ASCENDING, DESCENDING, IndexModel
from pymongo.server_api import ServerApi

from auth.mongo import Credential
from database.mongo import MongoStore
from model import NOTES, PROJECTS, REVIEWS, TARGETS, TASKS, USERS

LOGGER = logging.getLogger(__name__)

INDEXES: List[Tuple[str, List[IndexModel]]] = [
    (USERS, [IndexModel([("role", ASCENDING)], name="role_index")]),
    (PROJECTS, [IndexModel([("name", ASCENDING)], name="name_index")]),
    (
        TASKS,
        [
            IndexModel([("assignedTo", ASCENDING)], name="assigned_to_index"),
            IndexModel([("projectId", ASCENDING)], name="project_id_index"),
        ],
    ),
    (NOTES, [IndexModel([("userId", ASCENDING)], name="user_id_index")]),
    (TARGETS, [IndexModel([("userId", ASCENDING)], name="user_id_index")]),
    (
        REVIEWS,
        [
            IndexModel(
                [("projectId", ASCENDING), ("createdAt", DESCENDING)],
                name="project_created_index",
            )
        ],
    ),
]


async def init_database(url: str, name: str) -> MongoStore:
    logging.getLogger("pymongo").setLevel(logging.INFO)
    client: AsyncIOMotorClient = AsyncIOMotorClient(url, server_api=ServerApi("1"))
    db = client[name]

    await init_beanie(database=db, document_models=[Credential])
    await create_indexes(db)

    return MongoStore(db)


async def create_indexes(db: AsyncIOMotorDatabase):
    for collection_name, indexes in INDEXES:
        collection: AsyncIOMotorCollection = db[collection_name]
        existing = {index["name"] async for index in collection.list_indexes()}
        missing = [index for index in indexes if index.document["name"] not in existing]
        if missing:
            await collection.create_indexes(missing)
            LOGGER.info(
                f"Created indexes {[index.document['name'] for index in missing]} on {collection_name}"
            )
