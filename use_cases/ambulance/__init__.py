"""
Ambulance Waiting List Use Case.

Tracks patients waiting at ambulances (clinic rooms) and estimates when
each of them will be seen.

Components:
- Ambulance, WaitingListEntry, Condition: the aggregate and its parts
- WaitingListReconciler: recomputes estimated start times (pure, no I/O)
- AmbulanceApi: FastAPI routes composing the store and the reconciler

Usage:
    from core.mongo_store import MongoDocumentStore
    from use_cases.ambulance import Ambulance, AmbulanceApi

    api = AmbulanceApi(MongoDocumentStore(Ambulance))
    app.include_router(api.router)
"""

from use_cases.ambulance.models import Ambulance, Condition, WaitingListEntry
from use_cases.ambulance.domain import WaitingListReconciler, reconcile_waiting_list
from use_cases.ambulance.api import AmbulanceApi

__all__ = [
    # Models
    "Ambulance",
    "Condition",
    "WaitingListEntry",
    # Domain
    "WaitingListReconciler",
    "reconcile_waiting_list",
    # API
    "AmbulanceApi",
]
