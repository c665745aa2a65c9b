# course_slots/main.py

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from .config import settings
from .database import SessionLocal
from .errors import SlotServiceError
from .events import capacity_consumer_loop, retry_consumer_loop
from .redis_client import redis_client
from .routers import internal, slots, weekly_schedules

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    tasks: list[asyncio.Task] = []
    if settings.capacity_consumer_enabled:
        tasks = [
            asyncio.create_task(capacity_consumer_loop(settings.redis_url, settings.capacity_queue)),
            asyncio.create_task(retry_consumer_loop(settings.redis_url, settings.capacity_queue)),
        ]
    try:
        yield
    finally:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)


app = FastAPI(title="Course Slots API", lifespan=lifespan)

app.include_router(weekly_schedules.router)
app.include_router(slots.router)
app.include_router(internal.router)


@app.exception_handler(SlotServiceError)
async def slot_service_error_handler(request: Request, exc: SlotServiceError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.kind.value, "detail": exc.detail},
    )


@app.get("/health")
def health():
    db = SessionLocal()
    try:
        db_ok = db.execute(text("SELECT 1")).scalar() == 1
    finally:
        db.close()

    try:
        redis_ok = bool(redis_client.ping())
    except Exception as e:
        logger.warning(f"Redis ping failed: {e}")
        redis_ok = False

    return {"database": db_ok, "redis": redis_ok}
