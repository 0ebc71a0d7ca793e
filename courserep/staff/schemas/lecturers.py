from datetime import datetime
from typing import List, Optional

from pydantic import Field

from courserep.core.responses import CamelModel, InputModel


class LecturerCreate(InputModel):
    # Generated as LEC-000001 when omitted
    lecturer_id: Optional[str] = Field(None, min_length=1, max_length=30)
    name: str = Field(..., min_length=1, max_length=150)
    email: str = Field(..., min_length=3, max_length=255)
    phone: Optional[str] = Field(None, max_length=30)
    department: Optional[str] = Field(None, max_length=150)


class LecturerUpdate(InputModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    email: Optional[str] = Field(None, min_length=3, max_length=255)
    phone: Optional[str] = Field(None, max_length=30)
    department: Optional[str] = Field(None, max_length=150)


class LecturerRead(CamelModel):
    lecturer_id: str
    name: str
    email: str
    phone: Optional[str] = None
    department: Optional[str] = None
    created_at: Optional[datetime] = None


class LecturerCourseRead(CamelModel):
    course_id: str
    course_name: str
    course_code: str


class LecturerDetail(LecturerRead):
    courses: List[LecturerCourseRead] = []
