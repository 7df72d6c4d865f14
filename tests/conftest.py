"""Shared test fixtures: an in-memory stand-in for the Mongo database and an API client."""

from types import SimpleNamespace
from typing import Any, Dict, List

import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import ASGITransport, AsyncClient

from app.db.mongodb import db
from main import app


def _matches(document: Dict[str, Any], query: Dict[str, Any]) -> bool:
    for key, expected in query.items():
        value = document.get(key)
        if isinstance(expected, dict) and "$in" in expected:
            if value not in expected["$in"]:
                return False
        elif value != expected:
            return False
    return True


class FakeCursor:
    def __init__(self, documents: List[Dict[str, Any]]):
        self._documents = documents

    def sort(self, key, direction=1):
        self._documents = sorted(
            self._documents, key=lambda document: document.get(key), reverse=direction < 0
        )
        return self

    async def to_list(self, length=None):
        if length:
            return self._documents[:length]
        return list(self._documents)


class FakeCollection:
    def __init__(self):
        self.documents: List[Dict[str, Any]] = []

    async def create_index(self, *args, **kwargs):
        return "index"

    async def insert_one(self, document):
        stored = dict(document)
        stored.setdefault("_id", ObjectId())
        self.documents.append(stored)
        return SimpleNamespace(inserted_id=stored["_id"], acknowledged=True)

    async def find_one(self, query):
        for document in self.documents:
            if _matches(document, query):
                return dict(document)
        return None

    def find(self, query):
        return FakeCursor([dict(document) for document in self.documents if _matches(document, query)])

    async def update_one(self, query, update):
        for document in self.documents:
            if _matches(document, query):
                document.update(update.get("$set", {}))
                return SimpleNamespace(modified_count=1, acknowledged=True)
        return SimpleNamespace(modified_count=0, acknowledged=True)

    async def delete_one(self, query):
        for index, document in enumerate(self.documents):
            if _matches(document, query):
                del self.documents[index]
                return SimpleNamespace(deleted_count=1, acknowledged=True)
        return SimpleNamespace(deleted_count=0, acknowledged=True)


class FakeDatabase:
    def __init__(self):
        self._collections: Dict[str, FakeCollection] = {}

    def __getitem__(self, name: str) -> FakeCollection:
        return self._collections.setdefault(name, FakeCollection())

    def __getattr__(self, name: str) -> FakeCollection:
        if name.startswith("_"):
            raise AttributeError(name)
        return self[name]


@pytest.fixture
def fake_db(monkeypatch):
    database = FakeDatabase()
    monkeypatch.setattr(db, "db", database)
    return database


@pytest_asyncio.fixture
async def client(fake_db):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as api_client:
        yield api_client


async def register(api_client: AsyncClient, email: str, user_type: str, **extra) -> Dict[str, Any]:
    """Register an account and return the token response, leaving no session cookie behind."""
    payload = {
        "email": email,
        "password": "motdepasse123",
        "firstName": "Camille",
        "lastName": "Martin",
        "userType": user_type,
    }
    payload.update(extra)
    response = await api_client.post("/api/v1/auth/register", json=payload)
    assert response.status_code == 200, response.text
    api_client.cookies.clear()
    return response.json()


def bearer(token_response: Dict[str, Any]) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token_response['access_token']}"}
