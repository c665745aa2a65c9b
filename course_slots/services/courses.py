# course_slots/services/courses.py
"""
Lookups against courses owned by course management.

This service never creates or edits courses; it only needs to tell a known
course id from an unknown one.
"""

from sqlalchemy.orm import Session

from ..errors import NotFoundError
from ..models.generated import Courses


def get_course(db: Session, course_id: int) -> Courses:
    course = db.get(Courses, course_id)
    if not course:
        raise NotFoundError(f"Course with ID {course_id} not found")
    return course
