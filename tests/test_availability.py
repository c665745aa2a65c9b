from datetime import date, time

import pytest

from course_slots.errors import ConflictError
from course_slots.services.slots import list_available_slots, list_slots_in_range

from .factories import add_slot

DAY = date(2025, 1, 6)


@pytest.fixture
def day_slots(db, course):
    # Inserted out of order on purpose
    return [
        add_slot(db, start="10:00", end="10:30", max_capacity=2, booked_count=2),
        add_slot(db, start="09:00", end="09:30", max_capacity=2, booked_count=0),
        add_slot(db, start="09:30", end="10:00", max_capacity=2, booked_count=1),
        add_slot(db, slot_date=date(2025, 1, 7), start="09:00", end="09:30"),
    ]


def test_slots_ordered_by_start_time(db, day_slots):
    slots = list_available_slots(db, 1, DAY)

    assert [s.start_time.time() for s in slots] == [time(9, 0), time(9, 30), time(10, 0)]
    assert [s.is_available for s in slots] == [True, True, False]


def test_available_only_filters_full_slots(db, day_slots):
    slots = list_available_slots(db, 1, DAY, available_only=True)
    assert [s.start_time.time() for s in slots] == [time(9, 0), time(9, 30)]


def test_unknown_course_has_no_slots(db, day_slots):
    assert list_available_slots(db, 77, DAY) == []


def test_range_listing(db, day_slots):
    slots = list_slots_in_range(db, 1, DAY, date(2025, 1, 7))

    assert len(slots) == 4
    assert slots[-1].date == date(2025, 1, 7)
    with pytest.raises(ConflictError):
        list_slots_in_range(db, 1, date(2025, 1, 7), DAY)
