import pytest

from course_slots.errors import ConflictError, InvalidInputError, NotFoundError
from course_slots.models import CourseWeeklySchedules
from course_slots.services.weekly_schedules import (
    create_weekly_schedule,
    delete_weekly_schedule,
    get_weekly_schedule_for_day,
    list_weekly_schedules,
    update_weekly_schedule,
)


def _create(db, **overrides):
    params = dict(
        course_id=1,
        day_of_week=1,
        open_time="09:00",
        close_time="18:00",
        slot_duration_minutes=10,
        max_capacity=4,
    )
    params.update(overrides)
    return create_weekly_schedule(db, **params)


def test_create_schedule(db, course):
    schedule = _create(db)

    assert schedule.id is not None
    assert schedule.course_id == 1
    assert schedule.day_of_week == 1
    assert get_weekly_schedule_for_day(db, 1, 1).id == schedule.id


@pytest.mark.parametrize("open_time, close_time", [("10:00", "10:00"), ("11:00", "10:00")])
def test_create_rejects_open_not_before_close(db, course, open_time, close_time):
    with pytest.raises(ConflictError):
        _create(db, open_time=open_time, close_time=close_time)


def test_create_rejects_duplicate_weekday(db, course):
    _create(db)
    with pytest.raises(ConflictError):
        _create(db, open_time="06:00")


def test_create_unknown_course(db):
    with pytest.raises(NotFoundError):
        _create(db, course_id=99)


@pytest.mark.parametrize(
    "overrides",
    [
        {"slot_duration_minutes": 9},
        {"max_capacity": 0},
        {"open_time": "9:00"},
        {"close_time": "24:00"},
        {"day_of_week": 7},
    ],
)
def test_create_rejects_invalid_values(db, course, overrides):
    with pytest.raises(InvalidInputError):
        _create(db, **overrides)


def test_update_changes_mutable_fields(db, course):
    schedule = _create(db)

    updated = update_weekly_schedule(db, schedule.id, {"max_capacity": 8, "close_time": "17:00"})

    assert updated.max_capacity == 8
    assert updated.close_time == "17:00"
    assert updated.open_time == "09:00"


@pytest.mark.parametrize("changes", [{"day_of_week": 2}, {"course_id": 2}])
def test_update_rejects_identity_change(db, course, changes):
    schedule = _create(db)
    with pytest.raises(ConflictError):
        update_weekly_schedule(db, schedule.id, changes)


def test_update_accepts_unchanged_identity(db, course):
    schedule = _create(db)
    updated = update_weekly_schedule(db, schedule.id, {"day_of_week": 1, "max_capacity": 2})
    assert updated.max_capacity == 2


def test_update_validates_merged_hours(db, course):
    schedule = _create(db)

    with pytest.raises(ConflictError):
        update_weekly_schedule(db, schedule.id, {"close_time": "08:00"})

    db.refresh(schedule)
    assert schedule.close_time == "18:00"


def test_update_missing_schedule(db, course):
    with pytest.raises(NotFoundError):
        update_weekly_schedule(db, 404, {"max_capacity": 2})


def test_delete_schedule(db, course):
    schedule = _create(db)

    delete_weekly_schedule(db, schedule.id)

    assert db.get(CourseWeeklySchedules, schedule.id) is None
    with pytest.raises(NotFoundError):
        delete_weekly_schedule(db, schedule.id)


def test_list_ordered_by_weekday(db, course):
    _create(db, day_of_week=5)
    _create(db, day_of_week=0)
    _create(db, day_of_week=3)

    assert [s.day_of_week for s in list_weekly_schedules(db, 1)] == [0, 3, 5]
