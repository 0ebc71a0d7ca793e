from datetime import datetime
from typing import Optional

from pydantic import Field

from courserep.core.responses import CamelModel, InputModel
from courserep.staff.models.courses import DEFAULT_CREDITS, DEFAULT_SEMESTER


class CourseCreate(InputModel):
    course_id: str = Field(..., min_length=1, max_length=30)
    course_name: str = Field(..., min_length=1, max_length=200)
    course_code: str = Field(..., min_length=1, max_length=30)
    lecturer_id: Optional[str] = Field(None, max_length=30)
    description: Optional[str] = None
    credits: int = Field(DEFAULT_CREDITS, ge=0, le=30)
    semester: str = Field(DEFAULT_SEMESTER, min_length=1, max_length=50)


class CourseUpdate(InputModel):
    course_name: Optional[str] = Field(None, min_length=1, max_length=200)
    course_code: Optional[str] = Field(None, min_length=1, max_length=30)
    lecturer_id: Optional[str] = Field(None, max_length=30)
    description: Optional[str] = None
    credits: Optional[int] = Field(None, ge=0, le=30)
    semester: Optional[str] = Field(None, min_length=1, max_length=50)


class CourseRegistration(InputModel):
    """Attach a student to a course"""

    student_id: str = Field(..., min_length=1)
    course_id: str = Field(..., min_length=1)


class CourseRead(CamelModel):
    course_id: str
    course_name: str
    course_code: str
    lecturer_id: Optional[str] = None
    lecturer_name: Optional[str] = None
    description: Optional[str] = None
    credits: int
    semester: str
    created_at: Optional[datetime] = None


class CourseDetail(CourseRead):
    lecturer_email: Optional[str] = None
    student_count: int = 0
