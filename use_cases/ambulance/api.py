"""
Ambulance Waiting List HTTP API.

FastAPI routes for ambulances, their waiting lists and predefined conditions.
Handlers are plain ``def`` functions, so FastAPI runs each request in its own
worker thread. Every waiting list mutation follows the same cycle:
load the ambulance, mutate it in memory, reconcile, write the whole document back.

The cycle holds no cross-request lock; two concurrent mutations of the same
ambulance can overwrite each other (last writer wins).
"""

import logging
import uuid
from http import HTTPStatus
from typing import Callable, List, Optional

from fastapi import APIRouter, Response
from fastapi.responses import JSONResponse

from core.data import BackendError, ConflictError, DocumentStore, NotFoundError

from .domain import WaitingListReconciler
from .models import Ambulance, Condition, WaitingListEntry

logger = logging.getLogger(__name__)

NEW_ENTRY_ID = "@new"


def error_response(status_code: int, message: str, error: str) -> JSONResponse:
    """Structured failure body shared by every route."""
    return JSONResponse(
        status_code=status_code,
        content={
            "status": HTTPStatus(status_code).phrase,
            "message": message,
            "error": error,
        },
    )


class ApiError(Exception):
    """Raised by a mutation to abort the cycle with a specific response."""

    def __init__(self, status_code: int, message: str, error: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.error = error or message

    def to_response(self) -> JSONResponse:
        return error_response(self.status_code, self.message, self.error)


class AmbulanceApi:
    """
    Routes for the ambulance waiting list service.

    The document store and the reconciler are passed in explicitly; mount
    ``router`` on the application.
    """

    def __init__(
        self,
        store: DocumentStore[Ambulance],
        reconciler: Optional[WaitingListReconciler] = None,
    ):
        self.store = store
        self.reconciler = reconciler or WaitingListReconciler()
        self.router = APIRouter(prefix="/api", tags=["Ambulances"])
        self._add_routes()

    def _add_routes(self):
        r = self.router
        r.add_api_route("/ambulance", self.create_ambulance, methods=["POST"],
                        response_model=Ambulance, status_code=201)
        r.add_api_route("/ambulance", self.list_ambulances, methods=["GET"],
                        response_model=List[Ambulance])
        r.add_api_route("/ambulance/{ambulance_id}", self.get_ambulance, methods=["GET"],
                        response_model=Ambulance)
        r.add_api_route("/ambulance/{ambulance_id}", self.delete_ambulance, methods=["DELETE"],
                        status_code=204)

        r.add_api_route("/waiting-list/{ambulance_id}/entries", self.get_waiting_list_entries,
                        methods=["GET"], response_model=List[WaitingListEntry])
        r.add_api_route("/waiting-list/{ambulance_id}/entries", self.create_waiting_list_entry,
                        methods=["POST"], response_model=WaitingListEntry)
        r.add_api_route("/waiting-list/{ambulance_id}/entries/{entry_id}", self.get_waiting_list_entry,
                        methods=["GET"], response_model=WaitingListEntry)
        r.add_api_route("/waiting-list/{ambulance_id}/entries/{entry_id}", self.update_waiting_list_entry,
                        methods=["PUT"], response_model=WaitingListEntry)
        r.add_api_route("/waiting-list/{ambulance_id}/entries/{entry_id}", self.delete_waiting_list_entry,
                        methods=["DELETE"], status_code=204)

        r.add_api_route("/waiting-list/{ambulance_id}/condition", self.get_conditions,
                        methods=["GET"], response_model=List[Condition])

    # =========================================================================
    # AMBULANCES
    # =========================================================================

    def create_ambulance(self, ambulance: Ambulance):
        """Saves new ambulance definition."""
        if not ambulance.id:
            ambulance.id = str(uuid.uuid4())
        if ambulance.waiting_list:
            self.reconciler.execute(ambulance.waiting_list)

        try:
            self.store.create(ambulance.id, ambulance)
        except ConflictError as e:
            return error_response(409, "Ambulance already exists", str(e))
        except BackendError as e:
            return error_response(502, "Failed to create ambulance in database", str(e))

        logger.info(f"Created ambulance {ambulance.id}")
        return ambulance

    def list_ambulances(self):
        """Lists all ambulances."""
        try:
            return self.store.find_many()
        except BackendError as e:
            return error_response(502, "Failed to load ambulances from database", str(e))

    def get_ambulance(self, ambulance_id: str):
        """Provides the ambulance definition."""
        try:
            return self.store.find(ambulance_id)
        except NotFoundError as e:
            return error_response(404, "Ambulance not found", str(e))
        except BackendError as e:
            return error_response(502, "Failed to load ambulance from database", str(e))

    def delete_ambulance(self, ambulance_id: str):
        """Deletes specific ambulance."""
        try:
            self.store.delete(ambulance_id)
        except NotFoundError as e:
            return error_response(404, "Ambulance not found", str(e))
        except BackendError as e:
            return error_response(502, "Failed to delete ambulance from database", str(e))

        logger.info(f"Deleted ambulance {ambulance_id}")
        return Response(status_code=204)

    # =========================================================================
    # LOAD - MUTATE - RECONCILE - STORE
    # =========================================================================

    def _read_ambulance(self, ambulance_id: str, read: Callable[[Ambulance], object]):
        try:
            ambulance = self.store.find(ambulance_id)
        except NotFoundError as e:
            return error_response(404, "Ambulance not found", str(e))
        except BackendError as e:
            return error_response(502, "Failed to load ambulance from database", str(e))

        try:
            return read(ambulance)
        except ApiError as e:
            return e.to_response()

    def _update_ambulance(
        self,
        ambulance_id: str,
        mutate: Callable[[Ambulance], object],
    ):
        """
        Apply ``mutate`` to the stored ambulance and persist the result.

        ``mutate`` returns the response payload (``None`` for 204 No Content)
        or raises ApiError. The waiting list is reconciled before the write.
        """
        try:
            ambulance = self.store.find(ambulance_id)
        except NotFoundError as e:
            return error_response(404, "Ambulance not found", str(e))
        except BackendError as e:
            return error_response(502, "Failed to load ambulance from database", str(e))

        try:
            result = mutate(ambulance)
        except ApiError as e:
            return e.to_response()

        if ambulance.waiting_list:
            self.reconciler.execute(ambulance.waiting_list)

        try:
            self.store.update(ambulance_id, ambulance)
        except NotFoundError as e:
            return error_response(404, "Ambulance was deleted while processing the request", str(e))
        except BackendError as e:
            return error_response(502, "Failed to update ambulance in database", str(e))

        if result is None:
            return Response(status_code=204)
        return result

    # =========================================================================
    # WAITING LIST
    # =========================================================================

    def get_waiting_list_entries(self, ambulance_id: str):
        """Provides the ambulance waiting list."""
        return self._read_ambulance(ambulance_id, lambda ambulance: ambulance.waiting_list)

    def get_waiting_list_entry(self, ambulance_id: str, entry_id: str):
        """Provides details about waiting list entry."""

        def read(ambulance: Ambulance):
            entry = ambulance.find_entry(entry_id)
            if entry is None:
                raise ApiError(404, "Entry not found")
            return entry

        return self._read_ambulance(ambulance_id, read)

    def create_waiting_list_entry(self, ambulance_id: str, entry: WaitingListEntry):
        """Saves new entry into waiting list."""

        def mutate(ambulance: Ambulance):
            if not entry.patient_id:
                raise ApiError(400, "Invalid request body", "Patient ID is required")

            if not entry.id or entry.id == NEW_ENTRY_ID:
                entry.id = str(uuid.uuid4())

            if ambulance.find_entry(entry.id) is not None:
                raise ApiError(409, "Entry already exists")

            if any(existing.patient_id == entry.patient_id for existing in ambulance.waiting_list):
                raise ApiError(409, "Patient already exists in the waiting list")

            if "estimated_duration_minutes" not in entry.model_fields_set:
                condition = ambulance.find_condition(entry.condition_code)
                if condition is not None:
                    entry.estimated_duration_minutes = condition.typical_duration_minutes

            ambulance.waiting_list.append(entry)
            logger.info(f"Patient {entry.patient_id} joined waiting list of {ambulance.id}")
            return entry

        return self._update_ambulance(ambulance_id, mutate)

    def update_waiting_list_entry(self, ambulance_id: str, entry_id: str, entry: WaitingListEntry):
        """Updates specific entry; only fields present in the body are changed."""

        def mutate(ambulance: Ambulance):
            existing = ambulance.find_entry(entry_id)
            if existing is None:
                raise ApiError(404, "Entry not found")

            changes = entry.model_dump(include=entry.model_fields_set)
            if "id" in changes and not changes["id"]:
                del changes["id"]
            if "patient_id" in changes and not changes["patient_id"]:
                del changes["patient_id"]
            if changes.get("id", entry_id) != entry_id and ambulance.find_entry(changes["id"]) is not None:
                raise ApiError(409, "Entry already exists")

            for field, value in changes.items():
                setattr(existing, field, value)
            return existing

        return self._update_ambulance(ambulance_id, mutate)

    def delete_waiting_list_entry(self, ambulance_id: str, entry_id: str):
        """Deletes specific entry."""

        def mutate(ambulance: Ambulance):
            entry = ambulance.find_entry(entry_id)
            if entry is None:
                raise ApiError(404, "Entry not found")
            ambulance.waiting_list.remove(entry)
            logger.info(f"Entry {entry_id} removed from waiting list of {ambulance.id}")
            return None

        return self._update_ambulance(ambulance_id, mutate)

    # =========================================================================
    # CONDITIONS
    # =========================================================================

    def get_conditions(self, ambulance_id: str):
        """Provides the list of conditions associated with ambulance."""
        return self._read_ambulance(ambulance_id, lambda ambulance: ambulance.predefined_conditions)
