# course_slots/services/slots/ledger.py
"""
Slot capacity ledger.

This is the ONLY writer of course_time_slots.booked_count and the consistency
boundary that prevents overbooking.

Invariant: 0 <= booked_count <= max_capacity, for every slot, at all times.

Strategy:
1. Conditional UPDATE: the bound check and the increment are one statement,
   `SET booked_count = booked_count + :delta WHERE ... AND
   booked_count + :delta BETWEEN 0 AND max_capacity`. The database row lock
   taken by the UPDATE linearizes writers of the same slot; other slots never
   contend.
2. Zero rows matched → re-read to tell "no such slot" from "out of bounds".
3. Table CHECK constraint as the last line of defense.

Every attempt is bounded by a lock timeout; contention (OperationalError) is
retried with exponential backoff and surfaces as LedgerBusyError when the
retries are exhausted.
"""

import logging
import time
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Callable, TypeVar

from sqlalchemy import text, update
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from ...config import settings
from ...errors import CapacityViolationError, ConflictError, LedgerBusyError, NotFoundError
from ...models.generated import CourseTimeSlots, ProcessedCapacityEvents

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EventOutcome(str, Enum):
    APPLIED = "applied"
    DUPLICATE = "duplicate"
    MISSING_SLOT = "missing_slot"


@dataclass
class CapacityEventResult:
    outcome: EventOutcome
    slot: CourseTimeSlots | None = None


# ── Public API ───────────────────────────────────────────────────────────


def apply_capacity_change(
    db: Session,
    slot_id: int,
    delta: int,
) -> CourseTimeSlots | None:
    """
    Atomically add delta to a slot's booked_count.

    Returns:
        The updated slot, or None if the slot does not exist (callers
        replaying stale events treat this as non-fatal).

    Raises:
        CapacityViolationError: new count would leave [0, max_capacity]
        LedgerBusyError: contention retries exhausted
    """
    logger.info(f"Applying capacity change {delta:+d} to slot ID {slot_id}")

    def operation() -> CourseTimeSlots | None:
        matched = _conditional_increment(db, delta, CourseTimeSlots.id == slot_id)
        slot = _reload(db, slot_id)
        if matched:
            return slot
        if slot is None:
            logger.warning(f"Slot ID {slot_id} not found for capacity change {delta:+d}")
            return None
        raise _violation(slot, delta)

    return _run_in_transaction(db, operation)


def reserve_slot(
    db: Session,
    course_id: int,
    slot_id: int,
    expected_date: date,
    party_size: int,
) -> CourseTimeSlots:
    """
    Validate a slot reference and take party_size places in one statement.

    Replaces the resolve-then-commit handshake: the course/date checks and the
    bounded increment cannot be separated by a concurrent writer.

    Raises:
        NotFoundError: slot missing or owned by another course
        ConflictError: slot date differs from expected_date
        CapacityViolationError: not enough places left
        LedgerBusyError: contention retries exhausted
    """
    if party_size < 1:
        raise ValueError("party_size must be positive")

    logger.info(
        f"Reserving {party_size} place(s) on slot ID {slot_id} "
        f"(course {course_id}, date {expected_date})"
    )

    def operation() -> CourseTimeSlots:
        matched = _conditional_increment(
            db,
            party_size,
            CourseTimeSlots.id == slot_id,
            CourseTimeSlots.course_id == course_id,
            CourseTimeSlots.date == expected_date,
        )
        slot = _reload(db, slot_id)
        if matched:
            return slot
        _raise_reference_error(slot, course_id, slot_id, expected_date)
        raise _violation(slot, party_size)

    return _run_in_transaction(db, operation)


def release_slot(
    db: Session,
    course_id: int,
    slot_id: int,
    party_size: int,
) -> CourseTimeSlots:
    """Give back party_size places on a slot of the given course."""
    if party_size < 1:
        raise ValueError("party_size must be positive")

    logger.info(f"Releasing {party_size} place(s) on slot ID {slot_id} (course {course_id})")

    def operation() -> CourseTimeSlots:
        matched = _conditional_increment(
            db,
            -party_size,
            CourseTimeSlots.id == slot_id,
            CourseTimeSlots.course_id == course_id,
        )
        slot = _reload(db, slot_id)
        if matched:
            return slot
        _raise_reference_error(slot, course_id, slot_id, None)
        raise _violation(slot, -party_size)

    return _run_in_transaction(db, operation)


def apply_capacity_event(
    db: Session,
    event_id: str,
    slot_id: int,
    delta: int,
) -> CapacityEventResult:
    """
    Apply a capacity event exactly once per event_id.

    The processed-event row and the delta commit together, so a redelivered
    event is reported as DUPLICATE and changes nothing. A missing slot or a
    capacity violation rolls both back.
    """
    def operation() -> CapacityEventResult:
        db.add(ProcessedCapacityEvents(event_id=event_id, slot_id=slot_id, delta=delta))
        try:
            db.flush()
        except IntegrityError:
            db.rollback()
            logger.info(f"Capacity event {event_id} already processed, skipping")
            return CapacityEventResult(EventOutcome.DUPLICATE)

        matched = _conditional_increment(db, delta, CourseTimeSlots.id == slot_id)
        slot = _reload(db, slot_id)
        if matched:
            return CapacityEventResult(EventOutcome.APPLIED, slot)
        if slot is None:
            db.rollback()
            logger.warning(f"Slot ID {slot_id} not found for capacity event {event_id}")
            return CapacityEventResult(EventOutcome.MISSING_SLOT)
        raise _violation(slot, delta)

    return _run_in_transaction(db, operation)


# ── Internals ────────────────────────────────────────────────────────────


def _conditional_increment(db: Session, delta: int, *criteria) -> bool:
    """Bounded increment; True when the row was updated."""
    _set_lock_timeout(db)
    new_count = CourseTimeSlots.booked_count + delta
    result = db.execute(
        update(CourseTimeSlots)
        .where(*criteria, new_count >= 0, new_count <= CourseTimeSlots.max_capacity)
        .values(booked_count=new_count)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def _reload(db: Session, slot_id: int) -> CourseTimeSlots | None:
    return db.get(CourseTimeSlots, slot_id, populate_existing=True)


def _set_lock_timeout(db: Session) -> None:
    # SQLite gets its busy timeout from connect_args (see database.py)
    if db.get_bind().dialect.name == "postgresql":
        timeout_ms = int(settings.ledger_lock_timeout_seconds * 1000)
        db.execute(text(f"SET LOCAL lock_timeout = '{timeout_ms}ms'"))


def _raise_reference_error(
    slot: CourseTimeSlots | None,
    course_id: int,
    slot_id: int,
    expected_date: date | None,
) -> None:
    if slot is None or slot.course_id != course_id:
        raise NotFoundError(f"Time slot with ID {slot_id} not found for course ID {course_id}")
    if expected_date is not None and slot.date != expected_date:
        raise ConflictError(
            f"Requested date {expected_date.isoformat()} does not match "
            f"the slot date {slot.date.isoformat()}"
        )


def _violation(slot: CourseTimeSlots, delta: int) -> CapacityViolationError:
    logger.error(
        f"Invalid booked count update for slot {slot.id}: "
        f"current={slot.booked_count}, change={delta}, max={slot.max_capacity}"
    )
    return CapacityViolationError(slot.id, slot.booked_count, delta, slot.max_capacity)


def _run_in_transaction(db: Session, operation: Callable[[], T]) -> T:
    """
    Run operation and commit, retrying on lock contention.

    Domain errors roll back and propagate immediately; only OperationalError
    (lock timeout, busy database, serialization failure) is retried.
    """
    attempts = settings.ledger_max_retries + 1

    for attempt in range(1, attempts + 1):
        try:
            result = operation()
            db.commit()
        except OperationalError as e:
            db.rollback()
            if attempt == attempts:
                logger.error(f"Ledger contention not resolved after {attempts} attempts: {e}")
                raise LedgerBusyError("Slot is busy, try again later") from e
            delay = settings.ledger_backoff_base_seconds * (2 ** (attempt - 1))
            logger.warning(f"Ledger contention (attempt {attempt}/{attempts}), retrying in {delay:.2f}s")
            time.sleep(delay)
            continue
        except Exception:
            db.rollback()
            raise

        if isinstance(result, CourseTimeSlots):
            db.refresh(result)
        elif isinstance(result, CapacityEventResult) and result.slot is not None:
            db.refresh(result.slot)
        return result
