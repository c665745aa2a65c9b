# course_slots/errors.py
"""
Error taxonomy for the slot service.

Every failure a service can report carries an explicit ErrorKind, so the HTTP
layer and the capacity event consumer branch on the kind instead of on
exception class names:

- NOT_FOUND           unknown course/schedule/slot, or slot of another course
- CONFLICT            duplicate weekday schedule, open >= close, inverted
                      date range, slot/date mismatch, identity change
- VALIDATION          malformed time strings, out-of-range numbers
- CAPACITY_VIOLATION  booked_count would leave [0, max_capacity]
- BUSY                ledger contention retries exhausted

All kinds except BUSY are deterministic for the state they were evaluated on.
"""

from enum import Enum


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    VALIDATION = "validation"
    CAPACITY_VIOLATION = "capacity_violation"
    BUSY = "busy"


HTTP_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.VALIDATION: 422,
    ErrorKind.CAPACITY_VIOLATION: 409,
    ErrorKind.BUSY: 503,
}


class SlotServiceError(Exception):
    kind: ErrorKind

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    @property
    def status_code(self) -> int:
        return HTTP_STATUS_BY_KIND[self.kind]


class NotFoundError(SlotServiceError):
    kind = ErrorKind.NOT_FOUND


class ConflictError(SlotServiceError):
    kind = ErrorKind.CONFLICT


class InvalidInputError(SlotServiceError):
    kind = ErrorKind.VALIDATION


class CapacityViolationError(SlotServiceError):
    kind = ErrorKind.CAPACITY_VIOLATION

    def __init__(self, slot_id: int, booked_count: int, delta: int, max_capacity: int):
        super().__init__(
            f"Capacity change {delta:+d} rejected for slot {slot_id}: "
            f"booked={booked_count}, max={max_capacity}"
        )
        self.slot_id = slot_id
        self.booked_count = booked_count
        self.delta = delta
        self.max_capacity = max_capacity


class LedgerBusyError(SlotServiceError):
    kind = ErrorKind.BUSY
