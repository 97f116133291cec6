"""
Data Layer Base Classes.

The data layer provides the DocumentStore pattern for data access.
This abstracts away the specific document database and provides a clean
CRUD interface over whole aggregates identified by a string id.

Key principles:
- Stores handle CRUD operations only
- No business logic in stores
- Return domain objects, not raw dicts
- Failures are reported by exception kind, never by message text
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, List, Optional, TypeVar

# Type variable for document types
T = TypeVar("T")


# =============================================================================
# ERROR TAXONOMY
# =============================================================================

class DocumentStoreError(Exception):
    """Base class for all document store failures."""


class NotFoundError(DocumentStoreError):
    """The referenced document does not exist."""


class ConflictError(DocumentStoreError):
    """A document with the same id already exists."""


class BackendError(DocumentStoreError):
    """
    Any lower-level transport, timeout or decode failure.

    The original exception is chained as ``__cause__`` for logging.
    """


# =============================================================================
# DOCUMENT STORE
# =============================================================================

class DocumentStore(ABC, Generic[T]):
    """
    Abstract base class for document stores.

    A DocumentStore persists one aggregate type as one document per id.
    Every operation accepts an optional ``timeout`` (seconds) which is
    combined with the store's own configured timeout; the earlier deadline wins.

    Type parameter T represents the document type this store manages.

    Example:
        store: DocumentStore[Ambulance] = MongoDocumentStore(Ambulance)
        ambulance = store.find("bobulova")
    """

    @abstractmethod
    def create(self, id: str, document: T, timeout: Optional[float] = None) -> None:
        """
        Insert a new document.

        Raises:
            ConflictError: a document with ``id`` already exists
            BackendError: the backend failed
        """
        pass

    @abstractmethod
    def find(self, id: str, timeout: Optional[float] = None) -> T:
        """
        Load a document by id.

        Raises:
            NotFoundError: no document with ``id``
            BackendError: the backend failed
        """
        pass

    @abstractmethod
    def find_many(
        self, filter: Optional[Dict[str, Any]] = None, timeout: Optional[float] = None
    ) -> List[T]:
        """
        Load every document matching ``filter``.

        An empty match is an empty list, not an error.
        """
        pass

    @abstractmethod
    def update(self, id: str, document: T, timeout: Optional[float] = None) -> None:
        """
        Replace the whole document stored under ``id``.

        Last writer wins; there is no version check.

        Raises:
            NotFoundError: no document with ``id``
            BackendError: the backend failed
        """
        pass

    @abstractmethod
    def delete(self, id: str, timeout: Optional[float] = None) -> None:
        """
        Remove the document stored under ``id``.

        Raises:
            NotFoundError: no document with ``id``
            BackendError: the backend failed
        """
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Tear down the backing connection. Safe to call repeatedly."""
        pass
