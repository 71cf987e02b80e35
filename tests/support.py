"""In-memory stand-ins for the MongoDB driver and a config builder for tests."""

import copy
from types import SimpleNamespace
from typing import Any

from casaconnect.config import Config

TEST_PASSWORD = "correct-horse-battery"


class FakeCollection:
    """Just enough of AsyncCollection for the services: equality filters on top-level keys."""

    def __init__(self) -> None:
        self.docs: dict[Any, dict[str, Any]] = {}
        self.indexes: list[tuple[list[tuple[str, int]], dict[str, Any]]] = []

    def _matches(self, doc: dict[str, Any], query: dict[str, Any]) -> bool:
        return all(doc.get(key) == value for key, value in query.items())

    async def create_index(self, keys: list[tuple[str, int]], **kwargs: Any) -> str:
        self.indexes.append((keys, kwargs))
        return "_".join(f"{k}_{d}" for k, d in keys)

    async def find_one(self, query: dict[str, Any]) -> dict[str, Any] | None:
        for doc in self.docs.values():
            if self._matches(doc, query):
                return copy.deepcopy(doc)
        return None

    async def insert_one(self, doc: dict[str, Any]) -> SimpleNamespace:
        self.docs[doc["_id"]] = copy.deepcopy(doc)
        return SimpleNamespace(inserted_id=doc["_id"])

    async def replace_one(self, query: dict[str, Any], doc: dict[str, Any], upsert: bool = False) -> SimpleNamespace:
        existing = await self.find_one(query)
        if existing is None and not upsert:
            return SimpleNamespace(matched_count=0)
        self.docs[doc["_id"]] = copy.deepcopy(doc)
        return SimpleNamespace(matched_count=0 if existing is None else 1)

    async def update_one(self, query: dict[str, Any], update: dict[str, Any]) -> SimpleNamespace:
        for doc in self.docs.values():
            if self._matches(doc, query):
                doc.update(copy.deepcopy(update["$set"]))
                return SimpleNamespace(matched_count=1)
        return SimpleNamespace(matched_count=0)

    async def delete_one(self, query: dict[str, Any]) -> SimpleNamespace:
        for key, doc in list(self.docs.items()):
            if self._matches(doc, query):
                del self.docs[key]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)


class FakeDatabase:
    def __init__(self, name: str) -> None:
        self.name = name
        self.collections: dict[str, FakeCollection] = {}

    def get_collection(self, name: str) -> FakeCollection:
        return self.collections.setdefault(name, FakeCollection())


class FakeAdmin:
    async def command(self, name: str) -> dict[str, int]:
        return {"ok": 1}


class FakeMongoClient:
    def __init__(self) -> None:
        self.databases: dict[str, FakeDatabase] = {}
        self.admin = FakeAdmin()
        self.closed = False

    def get_database(self, name: str) -> FakeDatabase:
        return self.databases.setdefault(name, FakeDatabase(name))

    async def aclose(self) -> None:
        self.closed = True


def make_config(**overrides: Any) -> Config:
    values: dict[str, Any] = {
        "environment": "development",
        "mongodb_uri_dev": "mongodb://localhost:27017",
        "db_name_dev": "casaconnect_dev",
        "mongodb_uri_prod": "mongodb+srv://cluster.example.net",
        "db_name_prod": "casaconnect",
        "session_secret": "test-session-secret",
    }
    values.update(overrides)
    return Config(_env_file=None, **values)
