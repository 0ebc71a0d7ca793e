from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from courserep.core.database import get_session
from courserep.core.limits import limiter
from courserep.core.responses import ApiResponse, ok
from courserep.staff.crud.notifications import (
    create_notification,
    delete_notification,
    get_notification_by_id,
    get_notifications,
    update_notification,
)
from courserep.staff.schemas.notifications import (
    NotificationCreate,
    NotificationRead,
    NotificationUpdate,
)

router = APIRouter(prefix="/notification", tags=["Notifications"])


@router.post(
    "", response_model=ApiResponse[NotificationRead], status_code=status.HTTP_201_CREATED
)
@limiter.limit("10/minute")
async def create_new_notification(
    request: Request,
    notification: NotificationCreate,
    db: AsyncSession = Depends(get_session),
):
    """Post a notice; without courseId it is shown to every course"""
    db_notification = await create_notification(db, notification)
    return ok(
        "Notification created successfully",
        NotificationRead.model_validate(db_notification),
    )


@router.get("", response_model=ApiResponse[List[NotificationRead]])
@limiter.limit("30/minute")
async def list_notifications(
    request: Request,
    course_id: Optional[str] = Query(None, alias="courseId", description="Filter by course"),
    db: AsyncSession = Depends(get_session),
):
    notifications = await get_notifications(db, course_id=course_id)
    return ok(
        "Notifications retrieved successfully",
        [NotificationRead.model_validate(n) for n in notifications],
    )


@router.get("/{notification_id}", response_model=ApiResponse[NotificationRead])
@limiter.limit("30/minute")
async def get_notification(
    request: Request,
    notification_id: str = Path(..., description="Notification ID"),
    db: AsyncSession = Depends(get_session),
):
    notification = await get_notification_by_id(db, notification_id)
    return ok(
        "Notification retrieved successfully",
        NotificationRead.model_validate(notification),
    )


@router.put("/{notification_id}", response_model=ApiResponse[NotificationRead])
@limiter.limit("10/minute")
async def update_existing_notification(
    request: Request,
    notification_update: NotificationUpdate,
    notification_id: str = Path(..., description="Notification ID"),
    db: AsyncSession = Depends(get_session),
):
    notification = await update_notification(db, notification_id, notification_update)
    return ok(
        "Notification updated successfully",
        NotificationRead.model_validate(notification),
    )


@router.delete("/{notification_id}", response_model=ApiResponse[None])
@limiter.limit("10/minute")
async def delete_existing_notification(
    request: Request,
    notification_id: str = Path(..., description="Notification ID"),
    db: AsyncSession = Depends(get_session),
):
    await delete_notification(db, notification_id)
    return ok("Notification deleted successfully")
