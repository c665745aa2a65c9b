# course_slots/services/slots/resolver.py
"""
Slot detail lookup for the booking orchestrator.

Advisory pre-check only: resolve_slot and a later capacity change are two
separate transactions. The ledger's bounded update is the final authority;
reserve_slot performs both steps atomically.
"""

import logging
from datetime import date

from sqlalchemy.orm import Session

from ...errors import ConflictError, NotFoundError
from ...models.generated import CourseTimeSlots
from ...schemas.slots import SlotDetail

logger = logging.getLogger(__name__)


def resolve_slot(
    db: Session,
    course_id: int,
    slot_id: int,
    expected_date: date,
) -> SlotDetail:
    """
    Validate a slot reference held by a client.

    Raises:
        NotFoundError: slot missing, or it belongs to another course
        ConflictError: slot date differs from expected_date (stale reference)
    """
    logger.info(f"Resolving slot ID {slot_id} for course {course_id} on {expected_date}")

    slot = db.get(CourseTimeSlots, slot_id)
    if not slot or slot.course_id != course_id:
        raise NotFoundError(f"Time slot with ID {slot_id} not found for course ID {course_id}")

    if slot.date != expected_date:
        raise ConflictError(
            f"Requested date {expected_date.isoformat()} does not match "
            f"the slot date {slot.date.isoformat()}"
        )

    return SlotDetail(
        id=slot.id,
        course_id=slot.course_id,
        date=slot.date,
        start_time=slot.start_time,
        end_time=slot.end_time,
        max_capacity=slot.max_capacity,
        is_available=slot.booked_count < slot.max_capacity,
    )
