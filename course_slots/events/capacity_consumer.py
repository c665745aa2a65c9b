# course_slots/events/capacity_consumer.py
"""
Capacity event consumer loops.

The booking orchestrator pushes capacity deltas to a Redis list
(settings.capacity_queue) after a reservation or cancellation:

    {"event_id": "bk-42-created", "slot_id": 17, "delta": 2}

Delivery is at-least-once and unordered. Events carrying an event_id go
through the dedup ledger, so redelivery is a no-op; events without one are
applied as-is (redelivery re-applies the delta).

Dispositions:
- applied / duplicate       → done
- dropped                   → slot no longer exists, logged warning
- dead                      → malformed payload or capacity violation;
                              pushed to {queue}:dead and alerted
- retry                     → ledger busy or unexpected error; re-queued to
                              {queue}:retry up to MAX_RETRIES, then dead

Started as asyncio tasks in the API lifespan.
"""

import asyncio
import json
import logging
import time
from enum import Enum
from typing import Callable

import redis.asyncio as aioredis
from pydantic import ValidationError
from sqlalchemy.orm import Session

from ..database import SessionLocal
from ..errors import ErrorKind, SlotServiceError
from ..schemas.slots import CapacityEvent
from ..services.slots import (
    CapacityEventResult,
    EventOutcome,
    apply_capacity_change,
    apply_capacity_event,
)

logger = logging.getLogger(__name__)

MAX_RETRIES = 3
ALERT_QUEUE = "alerts:ops"


class Disposition(str, Enum):
    APPLIED = "applied"
    DUPLICATE = "duplicate"
    DROPPED = "dropped"
    DEAD = "dead"
    RETRY = "retry"


def handle_capacity_event(db: Session, event: CapacityEvent) -> CapacityEventResult:
    """Apply one capacity event to the ledger."""
    if event.event_id:
        return apply_capacity_event(db, event.event_id, event.slot_id, event.delta)

    slot = apply_capacity_change(db, event.slot_id, event.delta)
    if slot is None:
        return CapacityEventResult(EventOutcome.MISSING_SLOT)
    return CapacityEventResult(EventOutcome.APPLIED, slot)


def process_capacity_event(
    data: dict,
    session_factory: Callable[[], Session] = SessionLocal,
) -> tuple[Disposition, str]:
    """
    Validate and apply a decoded queue message.

    Returns:
        (disposition, detail); detail is a human-readable reason.
    """
    try:
        event = CapacityEvent.model_validate(data)
    except ValidationError as e:
        return Disposition.DEAD, f"Invalid capacity event: {e.errors()}"

    db = session_factory()
    try:
        result = handle_capacity_event(db, event)
    except SlotServiceError as e:
        if e.kind == ErrorKind.BUSY:
            return Disposition.RETRY, e.detail
        return Disposition.DEAD, e.detail
    finally:
        db.close()

    if result.outcome == EventOutcome.DUPLICATE:
        return Disposition.DUPLICATE, f"Event {event.event_id} already processed"
    if result.outcome == EventOutcome.MISSING_SLOT:
        logger.warning(f"Capacity event for missing slot {event.slot_id} dropped")
        return Disposition.DROPPED, f"Slot {event.slot_id} not found"

    return (
        Disposition.APPLIED,
        f"Slot {event.slot_id} booked_count={result.slot.booked_count}/{result.slot.max_capacity}",
    )


async def capacity_consumer_loop(
    redis_url: str,
    queue: str,
    session_factory: Callable[[], Session] = SessionLocal,
) -> None:
    """
    Consume capacity events from the queue.

    Uses BRPOP with 5s timeout to avoid busy-waiting.
    """
    r = aioredis.from_url(redis_url, decode_responses=True)
    logger.info(f"capacity_consumer_loop started on {queue}")

    try:
        while True:
            try:
                result = await r.brpop(queue, timeout=5)
                if result is None:
                    continue

                _, raw = result
                await _process_event_safe(r, raw, queue, session_factory)

            except asyncio.CancelledError:
                logger.info("capacity_consumer_loop cancelled")
                raise
            except Exception:
                logger.exception("capacity_consumer_loop error, retrying in 2s")
                await asyncio.sleep(2)
    finally:
        await r.aclose()


async def _process_event_safe(
    r: aioredis.Redis,
    raw: str,
    queue: str,
    session_factory: Callable[[], Session],
) -> Disposition:
    """
    Parse and process a single event with retry / dead-letter routing.
    """
    retry_queue = f"{queue}:retry"
    dead_queue = f"{queue}:dead"

    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        logger.error(f"Invalid JSON in capacity queue: {raw[:200]}")
        await r.rpush(dead_queue, raw)
        await _emit_alert(r, "capacity_event_dead", {"reason": "invalid_json", "raw": raw[:200]})
        return Disposition.DEAD

    if not isinstance(data, dict):
        logger.error(f"Capacity event is not an object: {raw[:200]}")
        await r.rpush(dead_queue, raw)
        await _emit_alert(r, "capacity_event_dead", {"reason": "not_an_object", "raw": raw[:200]})
        return Disposition.DEAD

    attempt = data.get("_attempt", 1)

    try:
        disposition, detail = await asyncio.to_thread(process_capacity_event, data, session_factory)
    except Exception as e:
        logger.exception(f"Failed to process capacity event (attempt {attempt}/{MAX_RETRIES})")
        disposition, detail = Disposition.RETRY, f"Internal error: {e}"

    if disposition == Disposition.RETRY and attempt >= MAX_RETRIES:
        disposition = Disposition.DEAD

    if disposition == Disposition.RETRY:
        data["_attempt"] = attempt + 1
        await r.rpush(retry_queue, json.dumps(data))
        logger.info(f"Capacity event re-queued to {retry_queue} (attempt {attempt + 1}): {detail}")

    elif disposition == Disposition.DEAD:
        data["_error"] = detail
        await r.rpush(dead_queue, json.dumps(data))
        logger.error(f"Capacity event moved to dead-letter queue {dead_queue}: {detail}")
        await _emit_alert(r, "capacity_event_dead", {
            "slot_id": data.get("slot_id"),
            "delta": data.get("delta"),
            "event_id": data.get("event_id"),
            "reason": detail,
        })

    else:
        logger.info(f"Capacity event {disposition.value}: {detail}")

    return disposition


async def _emit_alert(r: aioredis.Redis, alert_type: str, payload: dict) -> None:
    """Push an operational alert; a failed push is logged, never raised."""
    alert = {
        "type": alert_type,
        **payload,
        "ts": int(time.time()),
    }
    try:
        await r.rpush(ALERT_QUEUE, json.dumps(alert))
    except Exception as e:
        logger.error(f"Failed to emit alert {alert_type}: {e}")


async def retry_consumer_loop(redis_url: str, queue: str) -> None:
    """
    Move events from {queue}:retry back to the main queue with backoff.
    """
    r = aioredis.from_url(redis_url, decode_responses=True)
    retry_queue = f"{queue}:retry"
    logger.info(f"retry_consumer_loop started on {retry_queue}")

    try:
        while True:
            try:
                raw = await r.lpop(retry_queue)
                if raw:
                    await r.rpush(queue, raw)
                    logger.info(f"Retry: moved event from {retry_queue} → {queue}")
                else:
                    await asyncio.sleep(5)

            except asyncio.CancelledError:
                logger.info("retry_consumer_loop cancelled")
                raise
            except Exception:
                logger.exception("retry_consumer_loop error, retrying in 5s")
                await asyncio.sleep(5)
    finally:
        await r.aclose()
