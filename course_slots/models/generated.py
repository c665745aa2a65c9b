from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Text,
    UniqueConstraint,
    func,
    text,
)

from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


class Courses(Base):
    """Owned by course management; read here to answer "unknown course"."""
    __tablename__ = 'courses'

    id = Column(Integer, primary_key=True)
    name = Column(Text, nullable=False)
    is_active = Column(Integer, nullable=False, server_default=text('1'))

    weekly_schedules = relationship('CourseWeeklySchedules', back_populates='course')
    time_slots = relationship('CourseTimeSlots', back_populates='course')


class CourseWeeklySchedules(Base):
    __tablename__ = 'course_weekly_schedules'
    __table_args__ = (
        UniqueConstraint('course_id', 'day_of_week'),
        CheckConstraint('day_of_week BETWEEN 0 AND 6', name='ck_weekly_day_of_week'),
        CheckConstraint('slot_duration_minutes >= 10', name='ck_weekly_slot_duration'),
        CheckConstraint('max_capacity >= 1', name='ck_weekly_max_capacity'),
    )

    id = Column(Integer, primary_key=True)
    course_id = Column(ForeignKey('courses.id', ondelete='CASCADE'), nullable=False)
    day_of_week = Column(Integer, nullable=False)  # 0 = Sunday ... 6 = Saturday
    open_time = Column(Text, nullable=False)       # "HH:MM"
    close_time = Column(Text, nullable=False)      # "HH:MM"
    slot_duration_minutes = Column(Integer, nullable=False)
    max_capacity = Column(Integer, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    course = relationship('Courses', back_populates='weekly_schedules')


class CourseTimeSlots(Base):
    __tablename__ = 'course_time_slots'
    __table_args__ = (
        UniqueConstraint('course_id', 'date', 'start_time'),
        CheckConstraint(
            'booked_count >= 0 AND booked_count <= max_capacity',
            name='ck_time_slot_booked_count',
        ),
    )

    id = Column(Integer, primary_key=True)
    course_id = Column(ForeignKey('courses.id', ondelete='CASCADE'), nullable=False, index=True)
    date = Column(Date, nullable=False)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    max_capacity = Column(Integer, nullable=False)  # snapshot of the schedule
    booked_count = Column(Integer, nullable=False, server_default=text('0'))
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    course = relationship('Courses', back_populates='time_slots')

    @property
    def is_available(self) -> bool:
        return self.booked_count < self.max_capacity


class ProcessedCapacityEvents(Base):
    __tablename__ = 'processed_capacity_events'

    event_id = Column(Text, primary_key=True)
    slot_id = Column(Integer, nullable=False)
    delta = Column(Integer, nullable=False)
    processed_at = Column(DateTime, server_default=func.now())
