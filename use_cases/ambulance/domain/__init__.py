"""
Ambulance Waiting List Domain Layer.

Contains pure business logic for the waiting list use case.
No database access or I/O - just business rules.
"""

from .services import (
    WaitingListReconciler,
    reconcile_waiting_list,
)

__all__ = [
    "WaitingListReconciler",
    "reconcile_waiting_list",
]
