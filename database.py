"""
MongoDB connection shared by the whole service.

``db`` is created at import time; pymongo connects lazily, so importing this
module never blocks on the network. Route handlers receive the database
through the ``get_db`` dependency so tests can swap it out.
"""
import logging
from typing import Dict, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

import config

logger = logging.getLogger(__name__)

client = MongoClient(config.DATABASE_URL)
db = client[config.DATABASE_NAME]


def get_db() -> Database:
    return db


def sanitize(doc: Dict) -> Dict:
    if not doc:
        return doc
    d = {**doc}
    if "_id" in d:
        d["id"] = str(d.pop("_id"))
    return d


def to_obj_id(id_str: str) -> Optional[ObjectId]:
    try:
        return ObjectId(id_str)
    except (InvalidId, TypeError):
        return None


def ensure_indexes(database: Database) -> None:
    """Unique names are enforced by the store, not by the resolvers."""
    database["user"].create_index([("username", ASCENDING)], unique=True)
    database["food"].create_index([("name", ASCENDING)], unique=True)
    database["food"].create_index([("category", ASCENDING)])


def connect(database: Database) -> bool:
    logger.info("Connecting to MongoDB")
    try:
        database.client.admin.command("ping")
        ensure_indexes(database)
    except PyMongoError as e:
        logger.error("error connecting to MongoDB: %s", e)
        return False
    logger.info("connected to MongoDB")
    return True


def disconnect(database: Database) -> None:
    database.client.close()
    logger.info("MongoDB connection closed")
