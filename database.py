"""
MongoDB access for the marketplace.

A single pymongo client is created at import time and shared by every router.
Collections are addressed by name through ``db["<collection>"]``.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel
from pymongo import MongoClient

from config import DATABASE_URL, DATABASE_NAME

logger = logging.getLogger(__name__)

client = MongoClient(DATABASE_URL)
db = client[DATABASE_NAME]


def now() -> datetime:
    return datetime.now(timezone.utc)


def create_document(collection_name: str, data: Union[BaseModel, Dict[str, Any]]) -> str:
    """Insert a document, stamping created_at/updated_at, and return its id."""
    doc = data.model_dump() if isinstance(data, BaseModel) else dict(data)
    stamp = now()
    doc.setdefault("created_at", stamp)
    doc.setdefault("updated_at", stamp)
    result = db[collection_name].insert_one(doc)
    logger.debug("Inserted %s into %s", result.inserted_id, collection_name)
    return str(result.inserted_id)


def get_documents(collection_name: str, filter_dict: Optional[Dict[str, Any]] = None,
                  sort: Optional[List] = None) -> List[dict]:
    cursor = db[collection_name].find(filter_dict or {})
    if sort:
        cursor = cursor.sort(sort)
    return list(cursor)


def parse_object_id(value: str) -> Optional[ObjectId]:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def serialize(doc: Optional[dict]) -> Optional[dict]:
    """Prepare a document for JSON: `_id` becomes `id`, ObjectIds become strings, secrets are dropped."""
    if not doc:
        return doc
    d = {}
    for k, v in doc.items():
        if k == "password_hash":
            continue
        if k == "_id":
            k = "id"
        d[k] = _plain(v)
    return d


def _plain(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {("id" if k == "_id" else k): _plain(v) for k, v in value.items() if k != "password_hash"}
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value
