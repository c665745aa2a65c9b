# course_slots/schemas/slots.py
"""
Pydantic schemas for slots API.
"""

from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, Field


class SlotsGenerateRequest(BaseModel):
    """Materialize slots for a course over an inclusive date range."""
    course_id: int
    date_from: date
    date_to: date

    model_config = {"from_attributes": True}


class SlotsGenerateResponse(BaseModel):
    course_id: int
    date_from: date
    date_to: date
    created_count: int = Field(description="Newly created slots only; existing ones are skipped")

    model_config = {"from_attributes": True}


class SlotRead(BaseModel):
    """A materialized slot with its ledger state."""
    id: int
    course_id: int
    date: date
    start_time: datetime
    end_time: datetime
    max_capacity: int
    booked_count: int
    is_available: bool

    model_config = {"from_attributes": True}


class SlotDetail(BaseModel):
    """Normalized slot reference handed to the booking orchestrator."""
    id: int
    course_id: int
    date: date
    start_time: datetime
    end_time: datetime
    max_capacity: int
    is_available: bool

    model_config = {"from_attributes": True}


class SlotResolveRequest(BaseModel):
    course_id: int
    slot_id: int
    date: date


class SlotCommitRequest(BaseModel):
    slot_id: int
    delta: int


class SlotReserveRequest(BaseModel):
    course_id: int
    slot_id: int
    date: date
    party_size: int = Field(1, ge=1)


class SlotReleaseRequest(BaseModel):
    course_id: int
    slot_id: int
    party_size: int = Field(1, ge=1)


class CapacityEvent(BaseModel):
    """Payload of the async capacity queue."""
    event_id: Optional[str] = None
    slot_id: int
    delta: int
