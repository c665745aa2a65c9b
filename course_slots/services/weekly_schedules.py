# course_slots/services/weekly_schedules.py
"""
Weekly schedule store: one operating-hours template per course and weekday.

Schedules are read by the slot materializer. Editing a schedule never touches
slots that were already generated from it.
"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..errors import ConflictError, InvalidInputError, NotFoundError
from ..models.generated import CourseWeeklySchedules
from .courses import get_course
from .slots.config import get_slot_rules, time_str_to_minutes

logger = logging.getLogger(__name__)

IDENTITY_FIELDS = ("course_id", "day_of_week")
MUTABLE_FIELDS = ("open_time", "close_time", "slot_duration_minutes", "max_capacity")


def list_weekly_schedules(db: Session, course_id: int) -> list[CourseWeeklySchedules]:
    get_course(db, course_id)
    return (
        db.query(CourseWeeklySchedules)
        .filter(CourseWeeklySchedules.course_id == course_id)
        .order_by(CourseWeeklySchedules.day_of_week)
        .all()
    )


def get_weekly_schedule(db: Session, schedule_id: int) -> CourseWeeklySchedules:
    schedule = db.get(CourseWeeklySchedules, schedule_id)
    if not schedule:
        raise NotFoundError(f"Weekly schedule with ID {schedule_id} not found")
    return schedule


def get_weekly_schedule_for_day(
    db: Session,
    course_id: int,
    day_of_week: int,
) -> CourseWeeklySchedules | None:
    """Schedule for a course/weekday, or None when the course is closed that day."""
    return (
        db.query(CourseWeeklySchedules)
        .filter(
            CourseWeeklySchedules.course_id == course_id,
            CourseWeeklySchedules.day_of_week == day_of_week,
        )
        .first()
    )


def create_weekly_schedule(
    db: Session,
    course_id: int,
    day_of_week: int,
    open_time: str,
    close_time: str,
    slot_duration_minutes: int,
    max_capacity: int,
) -> CourseWeeklySchedules:
    logger.info(f"Creating weekly schedule: course_id={course_id}, day={day_of_week}")

    get_course(db, course_id)

    if not 0 <= day_of_week <= 6:
        raise InvalidInputError(f"day_of_week must be within 0..6, got {day_of_week}")
    _validate_hours(open_time, close_time)
    _validate_limits(slot_duration_minutes, max_capacity)

    if get_weekly_schedule_for_day(db, course_id, day_of_week):
        raise ConflictError(
            f"A weekly schedule for course ID {course_id} and day {day_of_week} already exists"
        )

    schedule = CourseWeeklySchedules(
        course_id=course_id,
        day_of_week=day_of_week,
        open_time=open_time,
        close_time=close_time,
        slot_duration_minutes=slot_duration_minutes,
        max_capacity=max_capacity,
    )
    db.add(schedule)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race against a concurrent create for the same weekday
        db.rollback()
        raise ConflictError(
            f"A weekly schedule for course ID {course_id} and day {day_of_week} already exists"
        )
    db.refresh(schedule)
    return schedule


def update_weekly_schedule(
    db: Session,
    schedule_id: int,
    changes: dict,
) -> CourseWeeklySchedules:
    """
    Apply a partial update.

    course_id and day_of_week identify the schedule; supplying a different
    value for either is a conflict (delete and re-create instead).
    """
    logger.info(f"Updating weekly schedule ID {schedule_id}")

    schedule = get_weekly_schedule(db, schedule_id)

    for field in IDENTITY_FIELDS:
        value = changes.get(field)
        if value is not None and value != getattr(schedule, field):
            raise ConflictError("Cannot change course_id or day_of_week; create a new schedule instead")

    merged = {
        field: changes[field] if changes.get(field) is not None else getattr(schedule, field)
        for field in MUTABLE_FIELDS
    }
    _validate_hours(merged["open_time"], merged["close_time"])
    _validate_limits(merged["slot_duration_minutes"], merged["max_capacity"])

    for field, value in merged.items():
        setattr(schedule, field, value)

    db.commit()
    db.refresh(schedule)
    return schedule


def delete_weekly_schedule(db: Session, schedule_id: int) -> None:
    logger.info(f"Deleting weekly schedule ID {schedule_id}")
    schedule = get_weekly_schedule(db, schedule_id)
    db.delete(schedule)
    db.commit()


# ── Validation ───────────────────────────────────────────────────────────


def _validate_hours(open_time: str, close_time: str) -> None:
    # Format first so that the ordering check compares well-formed strings
    time_str_to_minutes(open_time)
    time_str_to_minutes(close_time)
    if open_time >= close_time:
        raise ConflictError("Open time must be earlier than close time")


def _validate_limits(slot_duration_minutes: int, max_capacity: int) -> None:
    rules = get_slot_rules()
    if slot_duration_minutes < rules.min_slot_duration_minutes:
        raise InvalidInputError(
            f"slot_duration_minutes must be at least {rules.min_slot_duration_minutes}"
        )
    if max_capacity < rules.min_capacity:
        raise InvalidInputError(f"max_capacity must be at least {rules.min_capacity}")
