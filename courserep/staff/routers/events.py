from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from courserep.core.database import get_session
from courserep.core.limits import limiter
from courserep.core.responses import ApiResponse, ok
from courserep.staff.crud.events import (
    create_event,
    delete_event,
    get_event_by_id,
    get_events,
    update_event,
)
from courserep.staff.schemas.events import EventCreate, EventRead, EventUpdate

router = APIRouter(prefix="/event", tags=["Events"])


@router.post("", response_model=ApiResponse[EventRead], status_code=status.HTTP_201_CREATED)
@limiter.limit("10/minute")
async def create_new_event(
    request: Request,
    event: EventCreate,
    db: AsyncSession = Depends(get_session),
):
    db_event = await create_event(db, event)
    return ok("Event created successfully", EventRead.model_validate(db_event))


@router.get("", response_model=ApiResponse[List[EventRead]])
@limiter.limit("30/minute")
async def list_events(
    request: Request,
    course_id: Optional[str] = Query(None, alias="courseId", description="Filter by course"),
    db: AsyncSession = Depends(get_session),
):
    events = await get_events(db, course_id=course_id)
    return ok("Events retrieved successfully", [EventRead.model_validate(e) for e in events])


@router.get("/{event_id}", response_model=ApiResponse[EventRead])
@limiter.limit("30/minute")
async def get_event(
    request: Request,
    event_id: str = Path(..., description="Event ID"),
    db: AsyncSession = Depends(get_session),
):
    event = await get_event_by_id(db, event_id)
    return ok("Event retrieved successfully", EventRead.model_validate(event))


@router.put("/{event_id}", response_model=ApiResponse[EventRead])
@limiter.limit("10/minute")
async def update_existing_event(
    request: Request,
    event_update: EventUpdate,
    event_id: str = Path(..., description="Event ID"),
    db: AsyncSession = Depends(get_session),
):
    event = await update_event(db, event_id, event_update)
    return ok("Event updated successfully", EventRead.model_validate(event))


@router.delete("/{event_id}", response_model=ApiResponse[None])
@limiter.limit("10/minute")
async def delete_existing_event(
    request: Request,
    event_id: str = Path(..., description="Event ID"),
    db: AsyncSession = Depends(get_session),
):
    await delete_event(db, event_id)
    return ok("Event deleted successfully")
