"""
Shared pytest fixtures for all tests.

This module provides an in-memory stand-in for the MongoDB client, stores
built on it, and test data for the ambulance waiting list.
"""

import copy
import threading
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient
from pymongo.errors import DuplicateKeyError

from core.mongo_store import MongoDocumentStore
from shared.mongo_config import MongoServiceConfig
from use_cases.ambulance import Ambulance, Condition, WaitingListEntry, WaitingListReconciler


# ============================================================================
# FAKE MONGODB
# ============================================================================


def _matches(doc: Dict[str, Any], filter: Dict[str, Any]) -> bool:
    return all(doc.get(key) == value for key, value in filter.items())


def _project(doc: Dict[str, Any], projection: Optional[Dict[str, bool]]) -> Dict[str, Any]:
    doc = copy.deepcopy(doc)
    if projection and projection.get("_id") is False:
        doc.pop("_id", None)
    return doc


class FakeCursor:
    def __init__(self, docs: List[Dict[str, Any]]):
        self._docs = docs
        self.closed = False

    def __iter__(self):
        return iter(self._docs)

    def close(self):
        self.closed = True


class FakeCollection:
    """Subset of pymongo Collection semantics used by MongoDocumentStore."""

    def __init__(self):
        self.docs: List[Dict[str, Any]] = []
        self.unique_fields: List[str] = []
        self._lock = threading.Lock()
        self._next_id = 0

    def create_index(self, field: str, unique: bool = False):
        if unique and field not in self.unique_fields:
            self.unique_fields.append(field)
        return f"{field}_1"

    def find_one(self, filter, projection=None):
        with self._lock:
            for doc in self.docs:
                if _matches(doc, filter):
                    return _project(doc, projection)
        return None

    def find(self, filter, projection=None):
        with self._lock:
            return FakeCursor([_project(doc, projection) for doc in self.docs if _matches(doc, filter)])

    def insert_one(self, document):
        with self._lock:
            for field in self.unique_fields:
                if any(doc.get(field) == document.get(field) for doc in self.docs):
                    raise DuplicateKeyError(f"E11000 duplicate key error: {field}", code=11000)
            self._next_id += 1
            stored = copy.deepcopy(document)
            stored["_id"] = self._next_id
            self.docs.append(stored)
        return SimpleNamespace(inserted_id=self._next_id)

    def replace_one(self, filter, replacement):
        with self._lock:
            for i, doc in enumerate(self.docs):
                if _matches(doc, filter):
                    stored = copy.deepcopy(replacement)
                    stored["_id"] = doc["_id"]
                    self.docs[i] = stored
                    return SimpleNamespace(matched_count=1, modified_count=1)
        return SimpleNamespace(matched_count=0, modified_count=0)

    def delete_one(self, filter):
        with self._lock:
            for i, doc in enumerate(self.docs):
                if _matches(doc, filter):
                    del self.docs[i]
                    return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)


class FakeDatabase:
    def __init__(self):
        self.collections: Dict[str, FakeCollection] = {}

    def __getitem__(self, name: str) -> FakeCollection:
        return self.collections.setdefault(name, FakeCollection())


class FakeMongoClient:
    def __init__(self, server: "FakeMongoServer", **options):
        self.server = server
        self.options = options
        self.closed = False

    def __getitem__(self, name: str) -> FakeDatabase:
        return self.server.databases.setdefault(name, FakeDatabase())

    def close(self):
        self.closed = True


class FakeMongoServer:
    """Holds data across client instances; its ``connect`` is the client factory."""

    def __init__(self):
        self.databases: Dict[str, FakeDatabase] = {}
        self.clients: List[FakeMongoClient] = []
        self._lock = threading.Lock()

    def connect(self, **options) -> FakeMongoClient:
        client = FakeMongoClient(self, **options)
        with self._lock:
            self.clients.append(client)
        return client

    def collection(self, config: MongoServiceConfig) -> FakeCollection:
        return self.databases.setdefault(config.database, FakeDatabase())[config.collection]


# ============================================================================
# STORE FIXTURES
# ============================================================================


@pytest.fixture
def mongo_config() -> MongoServiceConfig:
    return MongoServiceConfig(
        host="mongo.test",
        port=27017,
        database="ambulance-test",
        collection="ambulance",
        timeout_seconds=5,
    )


@pytest.fixture
def mongo_server() -> FakeMongoServer:
    return FakeMongoServer()


@pytest.fixture
def ambulance_store(mongo_config, mongo_server) -> MongoDocumentStore:
    store = MongoDocumentStore(Ambulance, mongo_config, client_factory=mongo_server.connect)
    yield store
    store.disconnect()


# ============================================================================
# TEST DATA
# ============================================================================

T0 = datetime(2099, 3, 1, 8, 0, tzinfo=timezone.utc)


@pytest.fixture
def t0() -> datetime:
    """A fixed moment far enough in the future that wall-clock 'now' never wins."""
    return T0


@pytest.fixture
def sample_ambulance(t0) -> Ambulance:
    return Ambulance(
        id="bobulova",
        name="Dr. Bobulová",
        room_number="356 - 3.posch",
        waiting_list=[
            WaitingListEntry(
                id="entry-1",
                name="Jožko Púčik",
                patient_id="10001",
                waiting_since=t0,
                estimated_start=t0,
                estimated_duration_minutes=30,
                condition_code="subfebrilia",
            ),
        ],
        predefined_conditions=[
            Condition(code="subfebrilia", value="Teploty", typical_duration_minutes=20),
            Condition(code="nausea", value="Nevoľnosť", typical_duration_minutes=45),
        ],
    )


# ============================================================================
# API FIXTURES
# ============================================================================


@pytest.fixture
def client(ambulance_store, t0) -> TestClient:
    from main import create_app

    app = create_app(store=ambulance_store, reconciler=WaitingListReconciler(clock=lambda: t0))
    with TestClient(app) as test_client:
        yield test_client
