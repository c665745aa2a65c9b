# course_slots/services/slots/availability.py
"""
Read-only slot availability.

No locks are taken: the result is advisory and may be stale as soon as it is
returned. Securing a place always goes through the ledger.
"""

from datetime import date

from sqlalchemy.orm import Session

from ...errors import ConflictError
from ...models.generated import CourseTimeSlots


def list_available_slots(
    db: Session,
    course_id: int,
    target_date: date,
    available_only: bool = False,
) -> list[CourseTimeSlots]:
    """
    Slots of a course on a date, ordered by start_time.

    Each row exposes is_available = booked_count < max_capacity. An unknown
    course simply has no slots.
    """
    query = db.query(CourseTimeSlots).filter(
        CourseTimeSlots.course_id == course_id,
        CourseTimeSlots.date == target_date,
    )
    if available_only:
        query = query.filter(CourseTimeSlots.booked_count < CourseTimeSlots.max_capacity)

    return query.order_by(CourseTimeSlots.start_time).all()


def list_slots_in_range(
    db: Session,
    course_id: int,
    date_from: date,
    date_to: date,
) -> list[CourseTimeSlots]:
    """Admin view: every slot of a course in [date_from, date_to]."""
    if date_from > date_to:
        raise ConflictError("Start date cannot be later than end date")

    return (
        db.query(CourseTimeSlots)
        .filter(
            CourseTimeSlots.course_id == course_id,
            CourseTimeSlots.date >= date_from,
            CourseTimeSlots.date <= date_to,
        )
        .order_by(CourseTimeSlots.date, CourseTimeSlots.start_time)
        .all()
    )
