from datetime import date, datetime

from course_slots.models import CourseTimeSlots, CourseWeeklySchedules


def add_schedule(
    db,
    course_id: int = 1,
    day_of_week: int = 1,
    open_time: str = "09:00",
    close_time: str = "11:00",
    slot_duration_minutes: int = 30,
    max_capacity: int = 4,
) -> CourseWeeklySchedules:
    schedule = CourseWeeklySchedules(
        course_id=course_id,
        day_of_week=day_of_week,
        open_time=open_time,
        close_time=close_time,
        slot_duration_minutes=slot_duration_minutes,
        max_capacity=max_capacity,
    )
    db.add(schedule)
    db.commit()
    db.refresh(schedule)
    return schedule


def add_slot(
    db,
    course_id: int = 1,
    slot_date: date = date(2025, 1, 6),
    start: str = "09:00",
    end: str = "09:30",
    max_capacity: int = 4,
    booked_count: int = 0,
) -> CourseTimeSlots:
    slot = CourseTimeSlots(
        course_id=course_id,
        date=slot_date,
        start_time=datetime.combine(slot_date, datetime.strptime(start, "%H:%M").time()),
        end_time=datetime.combine(slot_date, datetime.strptime(end, "%H:%M").time()),
        max_capacity=max_capacity,
        booked_count=booked_count,
    )
    db.add(slot)
    db.commit()
    db.refresh(slot)
    return slot
