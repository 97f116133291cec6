"""
Domain Layer Base Classes.

The domain layer contains pure business logic with no external dependencies.
This makes business rules:
- Easy to test (no mocking needed)
- Reusable across different interfaces
- Clear and self-documenting

Example Usage:
    class WaitingListReconciler(DomainService):
        def execute(self, entries, now=None):
            # Pure business logic here
            ...
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Any, Optional


class InvalidStateError(Exception):
    """A domain service was invoked on data it cannot operate on (caller bug)."""


class DomainService(ABC):
    """
    Abstract base class for domain services.

    Domain services contain business logic that doesn't belong to a single entity.

    Key principles:
    - No I/O operations (database, network, file)
    - All dependencies passed as parameters
    - Return domain objects, not DTOs
    """

    @abstractmethod
    def execute(self, *args, **kwargs) -> Any:
        """
        Execute the domain service operation.

        Implementation should contain pure business logic only.
        """
        pass


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime (naive values are taken as UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def floor_to_millis(value: datetime) -> datetime:
    """Drop sub-millisecond precision, which BSON dates cannot store."""
    return value.replace(microsecond=value.microsecond // 1000 * 1000)


def ceil_to_millis(value: datetime) -> datetime:
    """Round up to the next whole millisecond."""
    floored = floor_to_millis(value)
    if floored < value:
        floored += timedelta(milliseconds=1)
    return floored


def utc_now_millis() -> datetime:
    """Current UTC time rounded up to the next whole millisecond."""
    return ceil_to_millis(datetime.now(timezone.utc))


def parse_date(date_string: str) -> Optional[datetime]:
    """Parse an ISO format date string safely."""
    if not date_string:
        return None
    try:
        if "Z" in date_string:
            return datetime.fromisoformat(date_string.replace("Z", "+00:00"))
        return as_utc(datetime.fromisoformat(date_string))
    except (ValueError, TypeError):
        return None
