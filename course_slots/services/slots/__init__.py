# course_slots/services/slots/__init__.py
"""
Course time slots.

Materializer: weekly schedules → slot rows (idempotent)
Ledger: bounded booked_count updates (the only writer)
Availability / resolver: read-only, advisory
"""

from .config import SlotRules, get_slot_rules
from .materializer import build_day_slots, generate_slots
from .ledger import (
    CapacityEventResult,
    EventOutcome,
    apply_capacity_change,
    apply_capacity_event,
    release_slot,
    reserve_slot,
)
from .availability import list_available_slots, list_slots_in_range
from .resolver import resolve_slot

__all__ = [
    "SlotRules",
    "get_slot_rules",
    "build_day_slots",
    "generate_slots",
    "CapacityEventResult",
    "EventOutcome",
    "apply_capacity_change",
    "apply_capacity_event",
    "release_slot",
    "reserve_slot",
    "list_available_slots",
    "list_slots_in_range",
    "resolve_slot",
]
