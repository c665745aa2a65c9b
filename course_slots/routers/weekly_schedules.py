# course_slots/routers/weekly_schedules.py
# Schedules are hard-deleted; generated slots are kept.

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.weekly_schedules import (
    WeeklyScheduleCreate,
    WeeklyScheduleUpdate,
    WeeklyScheduleRead,
)
from ..services import weekly_schedules as store

router = APIRouter(tags=["weekly_schedules"])


@router.get("/courses/{course_id}/weekly-schedules", response_model=list[WeeklyScheduleRead])
def list_weekly_schedules(course_id: int, db: Session = Depends(get_db)):
    return store.list_weekly_schedules(db, course_id)


@router.get("/weekly-schedules/{id}", response_model=WeeklyScheduleRead)
def get_weekly_schedule(id: int, db: Session = Depends(get_db)):
    return store.get_weekly_schedule(db, id)


@router.post(
    "/weekly-schedules",
    response_model=WeeklyScheduleRead,
    status_code=status.HTTP_201_CREATED,
)
def create_weekly_schedule(
    data: WeeklyScheduleCreate,
    db: Session = Depends(get_db),
):
    return store.create_weekly_schedule(db, **data.model_dump())


@router.patch("/weekly-schedules/{id}", response_model=WeeklyScheduleRead)
def update_weekly_schedule(
    id: int,
    data: WeeklyScheduleUpdate,
    db: Session = Depends(get_db),
):
    return store.update_weekly_schedule(db, id, data.model_dump(exclude_unset=True))


@router.delete("/weekly-schedules/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_weekly_schedule(id: int, db: Session = Depends(get_db)):
    store.delete_weekly_schedule(db, id)
