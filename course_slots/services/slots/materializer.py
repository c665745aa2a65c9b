# course_slots/services/slots/materializer.py
"""
Slot materialization: weekly schedules -> concrete course_time_slots rows.

For each date in [date_from, date_to]:
✓ schedule for that weekday exists → carve slots from open_time
✓ slot accepted only if its end <= close_time (trailing remainder dropped)
✓ max_capacity copied from the schedule, booked_count = 0
✗ no schedule → closed day, zero slots (not an error)

Rows are inserted with ON CONFLICT DO NOTHING on (course_id, date, start_time),
so regenerating an overlapping range never resets booked_count on slots that
already exist. Only newly inserted rows are counted.
"""

import logging
from datetime import date, datetime, timedelta

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from ...errors import ConflictError, InvalidInputError
from ...models.generated import CourseTimeSlots, CourseWeeklySchedules
from ..courses import get_course
from .config import get_slot_rules, iter_dates, schedule_day_of_week, time_str_to_minutes

logger = logging.getLogger(__name__)

# Keeps multi-row VALUES under SQLite's bound-parameter limit
INSERT_BATCH_SIZE = 100

UNIQUE_SLOT_COLUMNS = ["course_id", "date", "start_time"]


def build_day_slots(schedule: CourseWeeklySchedules, target_date: date) -> list[dict]:
    """
    Carve one operating day into slot rows.

    Returns:
        Row dicts ready for insert, ordered by start_time.
    """
    open_min = time_str_to_minutes(schedule.open_time)
    close_min = time_str_to_minutes(schedule.close_time)
    step = schedule.slot_duration_minutes

    day_start = datetime.combine(target_date, datetime.min.time())
    rows: list[dict] = []

    t = open_min
    while t + step <= close_min:
        rows.append({
            "course_id": schedule.course_id,
            "date": target_date,
            "start_time": day_start + timedelta(minutes=t),
            "end_time": day_start + timedelta(minutes=t + step),
            "max_capacity": schedule.max_capacity,
            "booked_count": 0,
        })
        t += step

    return rows


def generate_slots(
    db: Session,
    course_id: int,
    date_from: date,
    date_to: date,
) -> int:
    """
    Materialize slots for a course over an inclusive date range.

    Returns:
        Number of newly created slots (0 is a valid result).

    Raises:
        NotFoundError: unknown course
        ConflictError: date_from > date_to
        InvalidInputError: range longer than the configured maximum
    """
    logger.info(f"Generating slots for course ID {course_id} from {date_from} to {date_to}")

    get_course(db, course_id)

    if date_from > date_to:
        raise ConflictError("Start date cannot be later than end date")

    rules = get_slot_rules()
    span_days = (date_to - date_from).days + 1
    if span_days > rules.max_generation_days:
        raise InvalidInputError(
            f"Date range of {span_days} days exceeds the maximum of {rules.max_generation_days}"
        )

    schedules = {
        s.day_of_week: s
        for s in (
            db.query(CourseWeeklySchedules)
            .filter(CourseWeeklySchedules.course_id == course_id)
            .all()
        )
    }
    if not schedules:
        logger.warning(f"No weekly schedule found for course {course_id}. No slots will be generated.")
        return 0

    rows: list[dict] = []
    for current in iter_dates(date_from, date_to):
        schedule = schedules.get(schedule_day_of_week(current))
        if schedule is None:
            continue
        rows.extend(build_day_slots(schedule, current))

    if not rows:
        logger.info(f"No operable slots to generate for course {course_id} in the given period")
        return 0

    created = 0
    try:
        for i in range(0, len(rows), INSERT_BATCH_SIZE):
            batch = rows[i:i + INSERT_BATCH_SIZE]
            result = db.execute(_insert_skip_duplicates(db, batch))
            created += result.rowcount
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(
        f"{created} time slots were created for course ID {course_id} "
        f"({len(rows) - created} already existed)"
    )
    return created


def _insert_skip_duplicates(db: Session, rows: list[dict]):
    """Multi-row INSERT that skips rows colliding on the slot identity."""
    dialect = db.get_bind().dialect.name

    if dialect == "postgresql":
        stmt = pg_insert(CourseTimeSlots).values(rows)
        return stmt.on_conflict_do_nothing(index_elements=UNIQUE_SLOT_COLUMNS)

    if dialect == "sqlite":
        stmt = sqlite_insert(CourseTimeSlots).values(rows)
        return stmt.on_conflict_do_nothing(index_elements=UNIQUE_SLOT_COLUMNS)

    raise RuntimeError(f"Unsupported database dialect for slot generation: {dialect}")
