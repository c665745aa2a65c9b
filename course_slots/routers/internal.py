# course_slots/routers/internal.py
"""
Internal API endpoints for the booking orchestrator.

These endpoints are meant for trusted services only.

POST /internal/slots/resolve  - advisory slot reference check
POST /internal/slots/commit   - raw bounded capacity delta
POST /internal/slots/reserve  - check + increment in one transaction
POST /internal/slots/release  - give places back
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..errors import NotFoundError
from ..schemas.slots import (
    SlotCommitRequest,
    SlotDetail,
    SlotRead,
    SlotReleaseRequest,
    SlotReserveRequest,
    SlotResolveRequest,
)
from ..services.slots import (
    apply_capacity_change,
    release_slot,
    reserve_slot,
    resolve_slot,
)

router = APIRouter(prefix="/internal/slots", tags=["internal"])


@router.post("/resolve", response_model=SlotDetail)
def resolve(data: SlotResolveRequest, db: Session = Depends(get_db)):
    return resolve_slot(db, data.course_id, data.slot_id, data.date)


@router.post("/commit", response_model=SlotRead)
def commit(data: SlotCommitRequest, db: Session = Depends(get_db)):
    slot = apply_capacity_change(db, data.slot_id, data.delta)
    if slot is None:
        raise NotFoundError(f"Time slot with ID {data.slot_id} not found")
    return slot


@router.post("/reserve", response_model=SlotRead)
def reserve(data: SlotReserveRequest, db: Session = Depends(get_db)):
    return reserve_slot(db, data.course_id, data.slot_id, data.date, data.party_size)


@router.post("/release", response_model=SlotRead)
def release(data: SlotReleaseRequest, db: Session = Depends(get_db)):
    return release_slot(db, data.course_id, data.slot_id, data.party_size)
