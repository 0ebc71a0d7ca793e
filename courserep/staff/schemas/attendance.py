from datetime import date, datetime
from datetime import date as date_type
from typing import Optional

from pydantic import Field

from courserep.core.responses import CamelModel, InputModel


class AttendanceInitialize(InputModel):
    """
    Required fields are checked by the session service so a missing
    courseId, date or classType gets its dedicated message.
    """

    course_id: Optional[str] = Field(None, max_length=30)
    date: Optional[date_type] = None
    class_type: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)


class AttendanceInitialized(CamelModel):
    attendance_instance_id: str
    course_id: str
    date: date
    expires_at: datetime
    class_type: str
    qr_code: str
    qr_image: str


class AttendanceInstanceRead(CamelModel):
    instance_id: str
    course_id: str
    date: date
    class_type: str
    latitude: float
    longitude: float
    expires_at: datetime
    is_closed: bool
    state: str
    created_at: Optional[datetime] = None


class AttendanceRecordRead(CamelModel):
    record_id: str
    instance_id: str
    course_id: str
    student_id: str
    date: date
    status: str
    marked_at: Optional[datetime] = None


class ManualMark(InputModel):
    record_id: str = Field(..., min_length=1)
    student_id: str = Field(..., min_length=1)
