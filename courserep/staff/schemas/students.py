from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from courserep.core.responses import CamelModel, InputModel
from courserep.staff.models.students import StudentStatus


class StudentCreate(InputModel):
    student_id: str = Field(..., min_length=1, max_length=30)
    name: str = Field(..., min_length=1, max_length=150)
    email: str = Field(..., min_length=3, max_length=255)
    phone: str = Field(..., min_length=1, max_length=30)
    password: str = Field(..., min_length=6, max_length=128)
    course_id: Optional[str] = Field(None, max_length=30)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        if "@" not in v:
            raise ValueError("Invalid email address")
        return v.lower()


class StudentUpdate(InputModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    email: Optional[str] = Field(None, min_length=3, max_length=255)
    phone: Optional[str] = Field(None, min_length=1, max_length=30)
    course_id: Optional[str] = Field(None, max_length=30)
    status: Optional[StudentStatus] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        if v is not None and "@" not in v:
            raise ValueError("Invalid email address")
        return v.lower() if v else v


class StudentRead(CamelModel):
    """Password hash is never serialized"""

    student_id: str
    name: str
    email: str
    phone: str
    course_id: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None


class StudentGroupRead(CamelModel):
    group_id: str
    name: str
    is_leader: bool


class StudentDetail(StudentRead):
    groups: List[StudentGroupRead] = []
