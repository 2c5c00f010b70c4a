"""
MongoDB access helpers.

The connection is opened once by the application factory and handed to the
stores; nothing here keeps a module-level handle.
"""

import logging
from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database

from config import Settings

logger = logging.getLogger(__name__)

USER_COLLECTION = "user"
PRODUCT_COLLECTION = "product"


def connect(settings: Settings) -> Database:
    client = MongoClient(settings.database_url)
    logger.info("Using database %s", settings.database_name)
    return client[settings.database_name]


def ensure_indexes(db: Database) -> None:
    db[USER_COLLECTION].create_index([("email", ASCENDING)], unique=True)
    db[PRODUCT_COLLECTION].create_index([("productId", ASCENDING)], unique=True)


def to_object_id(value: str) -> Optional[ObjectId]:
    """Parse a path identifier, returning None when it is not a valid ObjectId."""
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def serialize(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if doc is None:
        return None
    # Convert ObjectId to str
    if "_id" in doc:
        doc["id"] = str(doc.pop("_id"))
    return doc


def create_document(db: Database, collection: str, data: Dict[str, Any]) -> str:
    result = db[collection].insert_one(dict(data))
    return str(result.inserted_id)


def get_documents(
    db: Database,
    collection: str,
    filter_dict: Optional[Dict[str, Any]] = None,
) -> List[Dict[str, Any]]:
    return [serialize(d) for d in db[collection].find(filter_dict or {})]


def status_report(db: Database, settings: Settings) -> Dict[str, Any]:
    response = {
        "backend": "Running",
        "database": "Not Available",
        "database_name": settings.database_name,
        "connection_status": "Not Connected",
        "collections": [],
    }

    try:
        response["collections"] = db.list_collection_names()
        response["connection_status"] = "Connected"
        response["database"] = "Connected & Working"
    except Exception as e:
        logger.warning("Database status check failed: %s", e)
        response["database"] = f"Error: {str(e)[:80]}"
    return response
