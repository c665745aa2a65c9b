from .generated import (
    Base,
    Courses,
    CourseWeeklySchedules,
    CourseTimeSlots,
    ProcessedCapacityEvents,
)

__all__ = [
    "Base",
    "Courses",
    "CourseWeeklySchedules",
    "CourseTimeSlots",
    "ProcessedCapacityEvents",
]
