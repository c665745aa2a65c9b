# course_slots/schemas/weekly_schedules.py

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

HHMM_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class WeeklyScheduleCreate(BaseModel):
    course_id: int
    day_of_week: int = Field(ge=0, le=6, description="0 = Sunday ... 6 = Saturday")
    open_time: str = Field(pattern=HHMM_PATTERN, description="HH:MM")
    close_time: str = Field(pattern=HHMM_PATTERN, description="HH:MM")
    slot_duration_minutes: int = Field(ge=10)
    max_capacity: int = Field(ge=1)

    model_config = {"from_attributes": True}


class WeeklyScheduleUpdate(BaseModel):
    # course_id/day_of_week are accepted only to reject identity changes
    course_id: Optional[int] = None
    day_of_week: Optional[int] = Field(None, ge=0, le=6)
    open_time: Optional[str] = Field(None, pattern=HHMM_PATTERN)
    close_time: Optional[str] = Field(None, pattern=HHMM_PATTERN)
    slot_duration_minutes: Optional[int] = Field(None, ge=10)
    max_capacity: Optional[int] = Field(None, ge=1)

    model_config = {"from_attributes": True}


class WeeklyScheduleRead(BaseModel):
    id: int
    course_id: int
    day_of_week: int
    open_time: str
    close_time: str
    slot_duration_minutes: int
    max_capacity: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
