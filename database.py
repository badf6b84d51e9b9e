"""
Database helpers

Thin wrapper around the managed MongoDB deployment. Every collection is a
"table" of the storefront; the helpers below cover the request shapes the
storefront issues: filtered/sorted/limited reads, single-row writes and
counts. Documents are returned with their ObjectId exposed as a string "id".
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import HTTPException
from pydantic import BaseModel
from pymongo import ASCENDING, DESCENDING, MongoClient

import config

db = None
if config.DATABASE_URL and config.DATABASE_NAME:
    client = MongoClient(config.DATABASE_URL)
    db = client[config.DATABASE_NAME]

SortSpec = Sequence[Tuple[str, int]]


def get_db():
    """FastAPI dependency returning the live database handle"""
    if db is None:
        raise HTTPException(status_code=503, detail="Database not configured")
    return db


def now() -> datetime:
    # Naive UTC, which is what pymongo hands back on reads
    return datetime.now(timezone.utc).replace(tzinfo=None)


def start_of_today() -> datetime:
    return now().replace(hour=0, minute=0, second=0, microsecond=0)


def to_object_id(value: str) -> Optional[ObjectId]:
    # ObjectId(None) would mint a fresh id
    if not isinstance(value, str):
        return None
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def serialize(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if doc is None:
        return None
    doc = dict(doc)
    if "_id" in doc:
        doc["id"] = str(doc.pop("_id"))
    return doc


def ensure_indexes(database) -> None:
    """Creates the unique constraints the storefront relies on"""
    database["user"].create_index([("email", ASCENDING)], unique=True)
    database["product"].create_index([("sku", ASCENDING)], unique=True)
    database["cart_item"].create_index([("user_id", ASCENDING), ("product_id", ASCENDING)], unique=True)
    database["review"].create_index([("product_id", ASCENDING), ("user_id", ASCENDING)], unique=True)
    database["storage_object"].create_index([("bucket", ASCENDING), ("path", ASCENDING)], unique=True)
    database["idempotency_key"].create_index([("user_id", ASCENDING), ("key", ASCENDING)], unique=True)
    database["order"].create_index([("user_id", ASCENDING), ("created_at", DESCENDING)])


def create_document(database, collection_name: str, data: Union[BaseModel, Dict[str, Any]]) -> str:
    """Insert a single document with timestamps, returning its id"""
    doc = data.model_dump() if isinstance(data, BaseModel) else dict(data)
    stamp = now()
    doc.setdefault("created_at", stamp)
    doc.setdefault("updated_at", stamp)
    res = database[collection_name].insert_one(doc)
    return str(res.inserted_id)


def get_documents(
    database,
    collection_name: str,
    filter_dict: Optional[Dict[str, Any]] = None,
    sort: Optional[SortSpec] = None,
    limit: Optional[int] = None,
    projection: Optional[Dict[str, Any]] = None,
) -> List[Dict[str, Any]]:
    cursor = database[collection_name].find(filter_dict or {}, projection)
    if sort:
        cursor = cursor.sort(list(sort))
    if limit:
        cursor = cursor.limit(limit)
    return [serialize(d) for d in cursor]


def get_document(database, collection_name: str, doc_id: str) -> Optional[Dict[str, Any]]:
    oid = to_object_id(doc_id)
    if oid is None:
        return None
    return serialize(database[collection_name].find_one({"_id": oid}))


def update_document(database, collection_name: str, doc_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Set fields on one document and return it, or None if it does not exist"""
    oid = to_object_id(doc_id)
    if oid is None:
        return None
    update = dict(fields)
    update["updated_at"] = now()
    res = database[collection_name].update_one({"_id": oid}, {"$set": update})
    if res.matched_count == 0:
        return None
    return serialize(database[collection_name].find_one({"_id": oid}))


def delete_document(database, collection_name: str, doc_id: str) -> bool:
    oid = to_object_id(doc_id)
    if oid is None:
        return False
    return database[collection_name].delete_one({"_id": oid}).deleted_count > 0


def count_documents(database, collection_name: str, filter_dict: Optional[Dict[str, Any]] = None) -> int:
    return database[collection_name].count_documents(filter_dict or {})
