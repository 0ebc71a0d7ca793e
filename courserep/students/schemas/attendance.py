from datetime import datetime
from typing import Optional

from pydantic import Field

from courserep.core.responses import CamelModel, InputModel


class AutoMarkRequest(InputModel):
    # Optional here so a missing studentId gets the scan's own 409 message
    student_id: Optional[str] = Field(None, max_length=30)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)


class AutoMarkResult(CamelModel):
    attendance_instance_id: str
    student_id: str
    record_id: str
    location_checked: bool
    location_valid: bool


class CodeResolution(CamelModel):
    """What the client needs after scanning the ATT-<id> display code"""

    attendance_instance_id: str
    course_id: str
    class_type: str
    expires_at: datetime
    token: str
