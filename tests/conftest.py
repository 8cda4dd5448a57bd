import copy
from types import SimpleNamespace

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from medcare.main import create_app
from medcare.services.database import Database


def matches(document: dict, query: dict) -> bool:
    for key, expected in query.items():
        value = document.get(key)
        if isinstance(expected, dict) and "$in" in expected:
            if value not in expected["$in"]:
                return False
        elif value != expected:
            return False
    return True


class FakeCursor:
    def __init__(self, documents):
        self.documents = documents

    def sort(self, key, direction):
        self.documents.sort(key=lambda doc: doc[key], reverse=direction < 0)
        return self

    def __aiter__(self):
        self._iter = iter(self.documents)
        return self

    async def __anext__(self):
        try:
            return next(self._iter)
        except StopIteration:
            raise StopAsyncIteration


class FakeCollection:
    """In-memory stand-in for the parts of an async pymongo collection we use"""

    def __init__(self):
        self.documents = []
        self.indexes = []

    async def insert_one(self, document):
        document = copy.deepcopy(document)
        document["_id"] = ObjectId()
        self.documents.append(document)
        return SimpleNamespace(inserted_id=document["_id"])

    async def find_one(self, query):
        for document in self.documents:
            if matches(document, query):
                return copy.deepcopy(document)
        return None

    def find(self, query):
        return FakeCursor(
            [copy.deepcopy(doc) for doc in self.documents if matches(doc, query)]
        )

    async def find_one_and_update(self, query, update, return_document=None):
        for document in self.documents:
            if matches(document, query):
                before = copy.deepcopy(document)
                document.update(update["$set"])
                if return_document == ReturnDocument.AFTER:
                    return copy.deepcopy(document)
                return before
        return None

    async def create_index(self, keys, **kwargs):
        self.indexes.append(keys)


class BrokenCollection(FakeCollection):
    """Collection whose every operation fails at the store layer"""

    async def insert_one(self, document):
        raise PyMongoError("connection refused")

    async def find_one(self, query):
        raise PyMongoError("connection refused")

    def find(self, query):
        raise PyMongoError("connection refused")

    async def find_one_and_update(self, query, update, return_document=None):
        raise PyMongoError("connection refused")


class FakeDatabase(Database):
    def __init__(self, collection=None):
        super().__init__(uri="mongodb://fake", name="medcare_test")
        self.collection = collection or FakeCollection()
        self.connected = False

    async def connect(self):
        self.database = {"bookings": self.collection}
        self.connected = True
        await self.setup_indexes()

    async def close(self):
        self.connected = False


@pytest.fixture
def collection():
    return FakeCollection()


@pytest.fixture
def database(collection):
    return FakeDatabase(collection)


@pytest.fixture
def client(database):
    with TestClient(create_app(database)) as test_client:
        yield test_client


@pytest.fixture
def broken_client():
    with TestClient(create_app(FakeDatabase(BrokenCollection()))) as test_client:
        yield test_client


@pytest.fixture
def create_booking(client):
    def _create_booking(**fields):
        payload = {"userEmail": "a@x.com", "pickup": "Main St"}
        payload.update(fields)
        response = client.post("/api/bookings", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _create_booking
