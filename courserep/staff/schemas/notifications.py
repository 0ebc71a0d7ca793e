from datetime import datetime
from typing import Optional

from pydantic import Field

from courserep.core.responses import CamelModel, InputModel


class NotificationCreate(InputModel):
    title: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)
    course_id: Optional[str] = Field(None, max_length=30)


class NotificationUpdate(InputModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    message: Optional[str] = Field(None, min_length=1)
    course_id: Optional[str] = Field(None, max_length=30)


class NotificationRead(CamelModel):
    notification_id: str
    title: str
    message: str
    course_id: Optional[str] = None
    created_at: Optional[datetime] = None
