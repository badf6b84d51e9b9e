"""
Object storage on top of the backend's "storage_object" collection.

Objects are addressed by (bucket, path) and exposed under a public URL that
the storefront serves from /storage/v1/object/public/<bucket>/<path>.
"""
from typing import Any, Dict, Optional

from pymongo.errors import DuplicateKeyError

import config
from database import now

PUBLIC_PREFIX = "/storage/v1/object/public"


class StorageError(Exception):
    pass


class Bucket:
    def __init__(self, database, name: str):
        self.db = database
        self.name = name

    @property
    def _objects(self):
        return self.db["storage_object"]

    def upload(self, path: str, data: bytes, content_type: str = "application/octet-stream", upsert: bool = False) -> Dict[str, Any]:
        path = path.strip("/")
        if not path:
            raise StorageError("Object path is required")
        stamp = now()
        doc = {
            "bucket": self.name,
            "path": path,
            "content_type": content_type,
            "data": bytes(data),
            "size": len(data),
            "updated_at": stamp,
        }
        key = {"bucket": self.name, "path": path}
        if upsert:
            self._objects.update_one(key, {"$set": doc, "$setOnInsert": {"created_at": stamp}}, upsert=True)
        else:
            try:
                self._objects.insert_one({**doc, "created_at": stamp})
            except DuplicateKeyError:
                raise StorageError(f"The resource already exists: {self.name}/{path}")
        return {"bucket": self.name, "path": path, "size": len(data)}

    def download(self, path: str) -> Optional[Dict[str, Any]]:
        return self._objects.find_one({"bucket": self.name, "path": path.strip("/")})

    def get_public_url(self, path: str) -> str:
        return f"{config.PUBLIC_BASE_URL}{PUBLIC_PREFIX}/{self.name}/{path.strip('/')}"


def bucket(database, name: str) -> Bucket:
    return Bucket(database, name)
