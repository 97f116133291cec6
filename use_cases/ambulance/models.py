"""
Ambulance Waiting List Entity Model.

Pydantic models for the Ambulance aggregate and its nested waiting list
entries and condition definitions. Field aliases define the wire and
document shape (camelCase); Python code uses the snake_case names.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.domain import as_utc, floor_to_millis, utc_now_millis

DEFAULT_DURATION_MINUTES = 15


def _normalize_timestamp(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    return floor_to_millis(as_utc(value))


class Condition(BaseModel):
    """A predefined reason for a visit with its typical treatment duration."""

    model_config = ConfigDict(populate_by_name=True)

    code: str
    value: str = ""
    reference: Optional[str] = None
    typical_duration_minutes: int = Field(default=DEFAULT_DURATION_MINUTES, ge=0, alias="typicalDurationMinutes")


class WaitingListEntry(BaseModel):
    """One patient waiting at an ambulance."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = ""
    name: str = ""
    patient_id: str = Field(default="", alias="patientId")
    waiting_since: datetime = Field(default_factory=utc_now_millis, alias="waitingSince")
    estimated_start: Optional[datetime] = Field(default=None, alias="estimatedStart")
    estimated_duration_minutes: int = Field(
        default=DEFAULT_DURATION_MINUTES, ge=0, alias="estimatedDurationMinutes"
    )
    condition_code: str = Field(default="", alias="conditionCode")

    @field_validator("waiting_since", "estimated_start")
    @classmethod
    def _utc_millis(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _normalize_timestamp(value)


class Ambulance(BaseModel):
    """The aggregate root, persisted as one document per ambulance."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = ""
    name: str = ""
    room_number: str = Field(default="", alias="roomNumber")
    waiting_list: List[WaitingListEntry] = Field(default_factory=list, alias="waitingList")
    predefined_conditions: List[Condition] = Field(default_factory=list, alias="predefinedConditions")

    def find_entry(self, entry_id: str) -> Optional[WaitingListEntry]:
        for entry in self.waiting_list:
            if entry.id == entry_id:
                return entry
        return None

    def find_condition(self, code: str) -> Optional[Condition]:
        for condition in self.predefined_conditions:
            if condition.code == code:
                return condition
        return None
