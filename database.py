"""
Database helpers

MongoDB access. ``db`` stays None when DATABASE_URL / DATABASE_NAME are not
configured; callers check for that and report the database as unavailable.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel
from pymongo import MongoClient

from config import get_settings

logger = logging.getLogger(__name__)

_settings = get_settings()

client: Optional[MongoClient] = None
db = None

if _settings.database_url and _settings.database_name:
    client = MongoClient(_settings.database_url, serverSelectionTimeoutMS=5000)
    db = client[_settings.database_name]
    logger.info("MongoDB client configured for database %s", _settings.database_name)


def get_db():
    if db is None:
        raise RuntimeError("Database not configured; set DATABASE_URL and DATABASE_NAME")
    return db


def create_document(collection_name: str, data: Union[BaseModel, Dict[str, Any]]) -> str:
    """Insert a document, stamping created_at / updated_at. Returns the new id."""
    database = get_db()
    doc = data.model_dump() if isinstance(data, BaseModel) else dict(data)
    now = datetime.now(timezone.utc)
    doc["created_at"] = now
    doc["updated_at"] = now
    result = database[collection_name].insert_one(doc)
    return str(result.inserted_id)


def get_documents(
    collection_name: str,
    filter_dict: Optional[Dict[str, Any]] = None,
    sort: Optional[List[tuple]] = None,
    limit: Optional[int] = None,
) -> List[Dict[str, Any]]:
    database = get_db()
    cursor = database[collection_name].find(filter_dict or {})
    if sort:
        cursor = cursor.sort(sort)
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)
