from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from courserep.core.database import get_session
from courserep.core.dependencies import get_access_tokens, get_current_user
from courserep.core.limits import limiter
from courserep.core.responses import ApiResponse, ok
from courserep.core.security import AccessTokenManager
from courserep.students.crud.auth import authenticate_student, get_authenticated_student
from courserep.students.schemas.auth import CurrentUser, LoginRequest, TokenRead

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/login", response_model=ApiResponse[TokenRead])
@limiter.limit("5/minute")
async def login(
    request: Request,
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_session),
    tokens: AccessTokenManager = Depends(get_access_tokens),
):
    """
    Log a student in with studentId and password.

    Returns a bearer token for the Authorization header.
    """
    student = await authenticate_student(db, credentials.student_id, credentials.password)
    token = tokens.create_access_token(student.student_id, "student")
    return ok("Login successful", TokenRead(**token))


@router.get("/me", response_model=ApiResponse[CurrentUser])
@limiter.limit("30/minute")
async def me(
    request: Request,
    current_user: Dict[str, Any] = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    student = await get_authenticated_student(db, current_user["sub"])
    user = CurrentUser.model_validate(student)
    user.role = current_user.get("role", "student")
    return ok("Current user retrieved successfully", user)
