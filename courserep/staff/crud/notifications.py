from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from courserep.core.database import db_operation
from courserep.core.exceptions import EmptyResultError, NotFoundError
from courserep.core.identifiers import generate_id
from courserep.staff.models import Course, Notification
from courserep.staff.schemas.notifications import NotificationCreate, NotificationUpdate


@db_operation
async def get_notification_by_id(session: AsyncSession, notification_id: str):
    notification = await session.get(Notification, notification_id)
    if not notification:
        raise NotFoundError("Notification not found", {"notificationId": notification_id})
    return notification


@db_operation
async def get_notifications(session: AsyncSession, course_id: str = None):
    """Newest first; a course filter also returns the general notices"""
    query = select(Notification).order_by(
        Notification.created_at.desc(), Notification.notification_id.desc()
    )
    if course_id:
        query = query.where(
            (Notification.course_id == course_id) | (Notification.course_id.is_(None))
        )

    result = await session.execute(query)
    notifications = result.scalars().all()

    if not notifications:
        raise EmptyResultError("No notifications found")

    return notifications


async def _ensure_course_exists(session: AsyncSession, course_id: str):
    if course_id and await session.get(Course, course_id) is None:
        raise NotFoundError("Course not found", {"courseId": course_id})


@db_operation
async def create_notification(session: AsyncSession, data: NotificationCreate):
    await _ensure_course_exists(session, data.course_id)

    notification = Notification(
        notification_id=await generate_id(session, "NTF"), **data.model_dump()
    )
    session.add(notification)
    await session.commit()
    await session.refresh(notification)
    return notification


@db_operation
async def update_notification(
    session: AsyncSession, notification_id: str, data: NotificationUpdate
):
    notification = await get_notification_by_id(session, notification_id)
    update_data = data.model_dump(exclude_unset=True)

    if update_data.get("course_id"):
        await _ensure_course_exists(session, update_data["course_id"])

    for field, value in update_data.items():
        setattr(notification, field, value)

    await session.commit()
    await session.refresh(notification)
    return notification


@db_operation
async def delete_notification(session: AsyncSession, notification_id: str):
    notification = await get_notification_by_id(session, notification_id)
    await session.delete(notification)
    await session.commit()
