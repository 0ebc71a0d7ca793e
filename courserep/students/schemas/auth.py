from typing import Optional

from pydantic import Field

from courserep.core.responses import CamelModel, InputModel


class LoginRequest(InputModel):
    student_id: str = Field(..., min_length=1, max_length=30)
    password: str = Field(..., min_length=1, max_length=128)


class TokenRead(CamelModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class CurrentUser(CamelModel):
    student_id: str
    name: str
    email: str
    course_id: Optional[str] = None
    status: str
    role: str = "student"
