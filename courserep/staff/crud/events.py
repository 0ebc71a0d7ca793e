from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from courserep.core.database import as_utc, db_operation
from courserep.core.exceptions import EmptyResultError, NotFoundError, ValidationError
from courserep.core.identifiers import generate_id
from courserep.staff.models import Course, Event
from courserep.staff.schemas.events import EventCreate, EventUpdate


@db_operation
async def get_event_by_id(session: AsyncSession, event_id: str):
    event = await session.get(Event, event_id)
    if not event:
        raise NotFoundError("Event not found", {"eventId": event_id})
    return event


@db_operation
async def get_events(session: AsyncSession, course_id: str = None):
    query = select(Event).order_by(Event.start_date)
    if course_id:
        query = query.where(Event.course_id == course_id)

    result = await session.execute(query)
    events = result.scalars().all()

    if not events:
        raise EmptyResultError("No Events found")

    return events


@db_operation
async def create_event(session: AsyncSession, data: EventCreate):
    if data.course_id and await session.get(Course, data.course_id) is None:
        raise NotFoundError("Course not found", {"courseId": data.course_id})

    event = Event(event_id=await generate_id(session, "EVT"), **data.model_dump())
    session.add(event)
    await session.commit()
    await session.refresh(event)
    return event


@db_operation
async def update_event(session: AsyncSession, event_id: str, data: EventUpdate):
    event = await get_event_by_id(session, event_id)
    update_data = data.model_dump(exclude_unset=True)

    if update_data.get("course_id") and await session.get(Course, update_data["course_id"]) is None:
        raise NotFoundError("Course not found", {"courseId": update_data["course_id"]})

    for field, value in update_data.items():
        setattr(event, field, value)

    if as_utc(event.end_date) < as_utc(event.start_date):
        await session.rollback()
        raise ValidationError("End date must be after start date")

    await session.commit()
    await session.refresh(event)
    return event


@db_operation
async def delete_event(session: AsyncSession, event_id: str):
    event = await get_event_by_id(session, event_id)
    await session.delete(event)
    await session.commit()
