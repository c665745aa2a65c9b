# course_slots/services/slots/config.py
"""
Slot rules and time helpers shared by the schedule store and materializer.
"""

import re
from dataclasses import dataclass
from datetime import date, timedelta
from functools import lru_cache
from typing import Iterator

from ...config import settings
from ...errors import InvalidInputError

TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


@dataclass(frozen=True)
class SlotRules:
    """
    Limits applied to weekly schedules and slot generation.

    Attributes:
        min_slot_duration_minutes: Shortest slot a schedule may carve
        min_capacity: Smallest max_capacity a schedule may declare
        max_generation_days: Longest date range one generate call may cover
    """
    min_slot_duration_minutes: int = 10
    min_capacity: int = 1
    max_generation_days: int = 366

    def __post_init__(self):
        if self.min_slot_duration_minutes < 1:
            raise ValueError("min_slot_duration_minutes must be positive")
        if self.max_generation_days < 1:
            raise ValueError("max_generation_days must be positive")


@lru_cache
def get_slot_rules() -> SlotRules:
    return SlotRules(max_generation_days=settings.max_generation_days)


def time_str_to_minutes(value: str) -> int:
    """Convert "HH:MM" to minutes since midnight."""
    if not isinstance(value, str) or not TIME_RE.match(value):
        raise InvalidInputError(f"Time must be in HH:MM format, got {value!r}")
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def schedule_day_of_week(target_date: date) -> int:
    """Weekday in schedule numbering: 0 = Sunday ... 6 = Saturday."""
    return target_date.isoweekday() % 7


def iter_dates(date_from: date, date_to: date) -> Iterator[date]:
    """Every calendar date in [date_from, date_to]."""
    current = date_from
    while current <= date_to:
        yield current
        current += timedelta(days=1)
