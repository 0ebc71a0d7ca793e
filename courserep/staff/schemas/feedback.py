from datetime import datetime
from typing import Optional

from pydantic import Field, model_validator

from courserep.core.responses import CamelModel, InputModel


class FeedbackCreate(InputModel):
    student_id: Optional[str] = Field(None, max_length=30)
    content: str = Field(..., min_length=1, max_length=5000)
    is_anonymous: bool = False

    @model_validator(mode="after")
    def require_author(self):
        if not self.is_anonymous and not self.student_id:
            raise ValueError("studentId is required unless feedback is anonymous")
        return self


class FeedbackRead(CamelModel):
    feedback_id: str
    # Both hidden for anonymous feedback
    student_id: Optional[str] = None
    student_name: Optional[str] = None
    content: str
    is_anonymous: bool
    created_at: Optional[datetime] = None
