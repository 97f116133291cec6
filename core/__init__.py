"""
Core Framework for the Ambulance Waiting List service.

This module provides the base classes and interfaces shared by use cases.
The layered architecture keeps:

1. Domain Layer - Pure business rules, no I/O
2. Data Layer - DocumentStore pattern for persistence

Each use case builds on these layers for consistency and reusability.
"""

from .domain import DomainService, InvalidStateError
from .data import (
    BackendError,
    ConflictError,
    DocumentStore,
    DocumentStoreError,
    NotFoundError,
)

__all__ = [
    # Domain
    "DomainService",
    "InvalidStateError",
    # Data
    "DocumentStore",
    "DocumentStoreError",
    "NotFoundError",
    "ConflictError",
    "BackendError",
]
