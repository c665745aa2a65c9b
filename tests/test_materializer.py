from datetime import date, time

import pytest

from course_slots.errors import ConflictError, InvalidInputError, NotFoundError
from course_slots.models import CourseTimeSlots
from course_slots.services.slots import build_day_slots, generate_slots
from course_slots.services.weekly_schedules import update_weekly_schedule

from .factories import add_schedule

MONDAY = date(2025, 1, 6)
SUNDAY = date(2025, 1, 5)


def _slots(db, course_id=1):
    return (
        db.query(CourseTimeSlots)
        .filter(CourseTimeSlots.course_id == course_id)
        .order_by(CourseTimeSlots.start_time)
        .all()
    )


def test_monday_schedule_end_to_end(db, course):
    add_schedule(db, day_of_week=1, open_time="09:00", close_time="11:00",
                 slot_duration_minutes=30, max_capacity=4)

    created = generate_slots(db, 1, MONDAY, MONDAY)

    slots = _slots(db)
    assert created == 4
    assert [(s.start_time.time(), s.end_time.time()) for s in slots] == [
        (time(9, 0), time(9, 30)),
        (time(9, 30), time(10, 0)),
        (time(10, 0), time(10, 30)),
        (time(10, 30), time(11, 0)),
    ]
    assert all(s.date == MONDAY for s in slots)
    assert all(s.booked_count == 0 and s.max_capacity == 4 for s in slots)


def test_trailing_slot_is_dropped(db, course):
    schedule = add_schedule(db, day_of_week=1, open_time="09:00", close_time="10:00",
                            slot_duration_minutes=40)

    rows = build_day_slots(schedule, MONDAY)

    assert len(rows) == 1
    assert rows[0]["start_time"].time() == time(9, 0)
    assert rows[0]["end_time"].time() == time(9, 40)


def test_sunday_is_day_zero(db, course):
    add_schedule(db, day_of_week=0, open_time="08:00", close_time="09:00", slot_duration_minutes=60)

    assert generate_slots(db, 1, SUNDAY, MONDAY) == 1
    assert _slots(db)[0].date == SUNDAY


def test_days_without_schedule_produce_nothing(db, course):
    add_schedule(db, day_of_week=1)

    created = generate_slots(db, 1, date(2025, 1, 1), date(2025, 1, 14))

    # Mondays in range: Jan 6 and Jan 13
    assert created == 8
    assert {s.date for s in _slots(db)} == {date(2025, 1, 6), date(2025, 1, 13)}


def test_no_schedules_returns_zero(db, course):
    assert generate_slots(db, 1, MONDAY, MONDAY) == 0


def test_regeneration_is_idempotent(db, course):
    add_schedule(db, day_of_week=1)
    assert generate_slots(db, 1, MONDAY, MONDAY) == 4

    booked = _slots(db)[0]
    booked.booked_count = 3
    db.commit()

    assert generate_slots(db, 1, date(2025, 1, 1), date(2025, 1, 13)) == 4
    assert generate_slots(db, 1, MONDAY, MONDAY) == 0

    slots = _slots(db)
    assert len(slots) == 8
    db.refresh(booked)
    assert booked.booked_count == 3


def test_capacity_is_snapshotted(db, course):
    schedule = add_schedule(db, day_of_week=1, max_capacity=4)
    generate_slots(db, 1, MONDAY, MONDAY)

    update_weekly_schedule(db, schedule.id, {"max_capacity": 10})
    generate_slots(db, 1, date(2025, 1, 13), date(2025, 1, 13))

    capacities = {(s.date, s.max_capacity) for s in _slots(db)}
    assert capacities == {(MONDAY, 4), (date(2025, 1, 13), 10)}


def test_unknown_course(db):
    with pytest.raises(NotFoundError):
        generate_slots(db, 42, MONDAY, MONDAY)


def test_inverted_range(db, course):
    with pytest.raises(ConflictError):
        generate_slots(db, 1, date(2025, 1, 7), MONDAY)


def test_range_limit(db, course):
    add_schedule(db, day_of_week=1)
    with pytest.raises(InvalidInputError):
        generate_slots(db, 1, date(2025, 1, 1), date(2026, 12, 31))


def test_large_range_is_batched(db, course):
    for day in range(7):
        add_schedule(db, day_of_week=day, open_time="06:00", close_time="18:00",
                     slot_duration_minutes=10)

    created = generate_slots(db, 1, date(2025, 1, 1), date(2025, 1, 10))

    assert created == 72 * 10
    assert db.query(CourseTimeSlots).count() == 720
