# course_slots/routers/slots.py
"""
Slots API endpoints (admin).

POST /slots/generate - Materialize slots from weekly schedules
GET  /slots/day      - Slots of a course on a day (advisory availability)
GET  /slots/range    - Slots of a course over a date range
"""

from datetime import date
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.slots import (
    SlotRead,
    SlotsGenerateRequest,
    SlotsGenerateResponse,
)
from ..services.slots import (
    generate_slots,
    list_available_slots,
    list_slots_in_range,
)


router = APIRouter(prefix="/slots", tags=["slots"])


@router.post("/generate", response_model=SlotsGenerateResponse)
def generate_course_slots(
    data: SlotsGenerateRequest,
    db: Session = Depends(get_db),
):
    """Expand weekly schedules into slots; safe to repeat over overlapping ranges."""
    created = generate_slots(db, data.course_id, data.date_from, data.date_to)

    return SlotsGenerateResponse(
        course_id=data.course_id,
        date_from=data.date_from,
        date_to=data.date_to,
        created_count=created,
    )


@router.get("/day", response_model=list[SlotRead])
def get_slots_day(
    course_id: int,
    target_date: date = Query(..., alias="date"),
    available_only: bool = False,
    db: Session = Depends(get_db),
):
    """Slots ordered by start time. Availability is advisory, not a hold."""
    return list_available_slots(db, course_id, target_date, available_only)


@router.get("/range", response_model=list[SlotRead])
def get_slots_range(
    course_id: int,
    date_from: date,
    date_to: date,
    db: Session = Depends(get_db),
):
    return list_slots_in_range(db, course_id, date_from, date_to)
