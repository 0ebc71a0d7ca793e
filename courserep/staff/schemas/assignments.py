from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field

from courserep.core.responses import CamelModel, InputModel


class AssignmentCreate(InputModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    course_id: str = Field(..., min_length=1, max_length=30)
    due_date: datetime
    points: int = Field(100, ge=0, le=1000)


class AssignmentUpdate(InputModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    points: Optional[int] = Field(None, ge=0, le=1000)


class AssignmentRead(CamelModel):
    assignment_id: str
    title: str
    description: Optional[str] = None
    course_id: str
    due_date: datetime
    points: int
    submission_count: int = 0
    created_at: Optional[datetime] = None


class SubmissionCreate(InputModel):
    student_id: str = Field(..., min_length=1, max_length=30)
    content: Optional[str] = None


class SubmissionGrade(InputModel):
    grade: Decimal = Field(..., ge=0, le=1000, decimal_places=2)


class SubmissionRead(CamelModel):
    submission_id: str
    assignment_id: str
    student_id: str
    content: Optional[str] = None
    grade: Optional[float] = None
    submitted_at: Optional[datetime] = None
