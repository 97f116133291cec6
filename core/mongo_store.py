"""
MongoDB-based document store.

Implements the DocumentStore interface on top of a single MongoDB collection.
One pydantic document is stored per id; the ``id`` field carries a unique index
so concurrent creates of the same id cannot both succeed.

The MongoClient is created lazily on first use and shared by every caller.
Initialization uses double-checked locking: the handle slot is read without the
lock, and only when it is empty is the lock taken, the slot re-read and the
connection established. The handle is published only after it is fully set up.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional, Type, TypeVar

import pymongo
from pydantic import BaseModel, ValidationError
from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError, PyMongoError

from core.data import BackendError, ConflictError, DocumentStore, NotFoundError
from shared.mongo_config import MongoServiceConfig

logger = logging.getLogger(__name__)

DocT = TypeVar("DocT", bound=BaseModel)

ID_FIELD = "id"


class MongoDocumentStore(DocumentStore[DocT]):
    """
    Generic MongoDB store for pydantic documents.

    Safe to share between threads. Documents are written with their field
    aliases (the wire shape) and read back through ``document_type``.
    """

    def __init__(
        self,
        document_type: Type[DocT],
        config: Optional[MongoServiceConfig] = None,
        client_factory: Callable[..., MongoClient] = MongoClient,
    ):
        """
        Initialize the store. No connection is made until the first operation.

        Args:
            document_type: Pydantic model class of the stored documents
            config: Connection settings (defaults are read from the environment)
            client_factory: Callable building the client, ``MongoClient`` by default
        """
        self.document_type = document_type
        self.config = config or MongoServiceConfig()
        self._client_factory = client_factory
        self._client: Optional[MongoClient] = None
        self._client_lock = threading.Lock()

        logger.info(f"MongoDB config: {self.config.describe()}")

    # ----- connection lifecycle -----

    def _client_options(self) -> Dict[str, Any]:
        timeout_ms = int(self.config.timeout_seconds * 1000)
        options: Dict[str, Any] = {
            "host": self.config.host,
            "port": self.config.port,
            "tz_aware": True,
            "connectTimeoutMS": timeout_ms,
            "serverSelectionTimeoutMS": timeout_ms,
        }
        if self.config.uses_auth:
            options["username"] = self.config.username
            options["password"] = self.config.password
        return options

    def _connect(self, budget: float) -> MongoClient:
        """
        Return the shared client, creating it on first use.

        Waiting for another caller's connection attempt counts against
        ``budget``; running out of it raises BackendError.
        """
        client = self._client
        if client is not None:
            return client

        if not self._client_lock.acquire(timeout=budget):
            raise BackendError("timed out waiting for the MongoDB connection")
        try:
            client = self._client
            if client is not None:
                return client

            logger.info(f"Connecting to MongoDB at mongodb://{self.config.host}:{self.config.port}")
            client = self._client_factory(**self._client_options())
            try:
                collection = client[self.config.database][self.config.collection]
                collection.create_index(ID_FIELD, unique=True)
            except Exception:
                client.close()
                raise
            self._client = client
            return client
        finally:
            self._client_lock.release()

    def disconnect(self) -> None:
        """Close the shared client if there is one; the next operation reconnects."""
        if self._client is None:
            return
        with self._client_lock:
            client, self._client = self._client, None
        if client is None:
            return
        logger.info("Disconnecting from MongoDB")
        try:
            client.close()
        except PyMongoError as e:
            raise BackendError(f"disconnect failed: {e}") from e

    # ----- helpers -----

    def _effective_timeout(self, timeout: Optional[float]) -> float:
        """The earlier of the caller's budget and the configured one."""
        if timeout is None:
            return self.config.timeout_seconds
        if timeout <= 0:
            raise BackendError("deadline exceeded before the operation started")
        return min(timeout, self.config.timeout_seconds)

    @contextmanager
    def _operation(self, name: str, timeout: Optional[float]) -> Iterator[Collection]:
        """Run one store operation inside its deadline, classifying failures."""
        budget = self._effective_timeout(timeout)
        try:
            with pymongo.timeout(budget):
                client = self._connect(budget)
                yield client[self.config.database][self.config.collection]
        except DuplicateKeyError as e:
            raise ConflictError(f"{name}: document already exists") from e
        except PyMongoError as e:
            logger.error(f"MongoDB {name} failed: {e}")
            raise BackendError(f"{name} failed: {e}") from e
        except ValidationError as e:
            logger.error(f"MongoDB {name} returned an undecodable document: {e}")
            raise BackendError(f"{name} failed to decode document: {e}") from e

    def _encode(self, id: str, document: DocT) -> Dict[str, Any]:
        data = document.model_dump(by_alias=True)
        data[ID_FIELD] = id
        return data

    def _decode(self, raw: Dict[str, Any]) -> DocT:
        return self.document_type.model_validate(raw)

    # ----- CRUD -----

    def create(self, id: str, document: DocT, timeout: Optional[float] = None) -> None:
        with self._operation("create", timeout) as collection:
            # Fast path for a friendly error; the unique index is the real guarantee.
            if collection.find_one({ID_FIELD: id}, projection={"_id": True}) is not None:
                raise ConflictError(f"conflict: document {id!r} already exists")
            collection.insert_one(self._encode(id, document))
        logger.debug(f"Created document {id}")

    def find(self, id: str, timeout: Optional[float] = None) -> DocT:
        with self._operation("find", timeout) as collection:
            raw = collection.find_one({ID_FIELD: id}, projection={"_id": False})
            if raw is None:
                raise NotFoundError(f"document {id!r} not found")
            return self._decode(raw)

    def find_many(
        self, filter: Optional[Dict[str, Any]] = None, timeout: Optional[float] = None
    ) -> List[DocT]:
        with self._operation("find_many", timeout) as collection:
            cursor = collection.find(filter or {}, projection={"_id": False})
            try:
                return [self._decode(raw) for raw in cursor]
            finally:
                cursor.close()

    def update(self, id: str, document: DocT, timeout: Optional[float] = None) -> None:
        with self._operation("update", timeout) as collection:
            result = collection.replace_one({ID_FIELD: id}, self._encode(id, document))
            if result.matched_count == 0:
                raise NotFoundError(f"document {id!r} not found")
        logger.debug(f"Updated document {id}")

    def delete(self, id: str, timeout: Optional[float] = None) -> None:
        with self._operation("delete", timeout) as collection:
            result = collection.delete_one({ID_FIELD: id})
            if result.deleted_count == 0:
                raise NotFoundError(f"document {id!r} not found")
        logger.debug(f"Deleted document {id}")
