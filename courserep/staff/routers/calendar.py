from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from courserep.core.database import get_session
from courserep.core.limits import limiter
from courserep.core.responses import ApiResponse, ok
from courserep.staff.crud.calendar import (
    get_calendar_events,
    get_student_schedule,
    get_upcoming_deadlines,
    get_upcoming_events,
)
from courserep.staff.schemas.calendar import DeadlineRead, WeeklySchedule
from courserep.staff.schemas.events import EventRead

router = APIRouter(prefix="/calendar", tags=["Calendar"])


@router.get("/events", response_model=ApiResponse[List[EventRead]])
@limiter.limit("30/minute")
async def month_events(
    request: Request,
    year: int = Query(..., ge=1970, le=2100),
    month: int = Query(..., ge=1, le=12),
    course_id: Optional[str] = Query(None, alias="courseId"),
    db: AsyncSession = Depends(get_session),
):
    """Events starting in the given month; general events are always included"""
    events = await get_calendar_events(db, year, month, course_id)
    return ok("Events retrieved successfully", [EventRead.model_validate(e) for e in events])


@router.get("/upcoming", response_model=ApiResponse[List[EventRead]])
@limiter.limit("30/minute")
async def upcoming_events(
    request: Request,
    limit: int = Query(10, ge=1, le=100),
    course_id: Optional[str] = Query(None, alias="courseId"),
    db: AsyncSession = Depends(get_session),
):
    events = await get_upcoming_events(db, limit, course_id)
    return ok(
        "Upcoming events retrieved successfully",
        [EventRead.model_validate(e) for e in events],
    )


@router.get("/schedule/{student_id}", response_model=ApiResponse[WeeklySchedule])
@limiter.limit("30/minute")
async def weekly_schedule(
    request: Request,
    student_id: str = Path(..., description="Student ID"),
    week_start: Optional[date] = Query(
        None, alias="weekStart", description="Any day of the wanted week, defaults to today"
    ),
    db: AsyncSession = Depends(get_session),
):
    schedule = await get_student_schedule(db, student_id, week_start)
    return ok("Schedule retrieved successfully", WeeklySchedule.model_validate(schedule))


@router.get("/deadlines", response_model=ApiResponse[List[DeadlineRead]])
@limiter.limit("30/minute")
async def upcoming_deadlines(
    request: Request,
    course_id: Optional[str] = Query(None, alias="courseId"),
    student_id: Optional[str] = Query(None, alias="studentId"),
    db: AsyncSession = Depends(get_session),
):
    """Assignments not yet due; with studentId each is marked submitted or pending"""
    deadlines = await get_upcoming_deadlines(db, course_id, student_id)
    return ok(
        "Deadlines retrieved successfully",
        [DeadlineRead.model_validate(d) for d in deadlines],
    )
