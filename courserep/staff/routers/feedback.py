from typing import List

from fastapi import APIRouter, Depends, Path, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from courserep.core.database import get_session
from courserep.core.limits import limiter
from courserep.core.responses import ApiResponse, ok
from courserep.staff.crud.feedback import (
    create_feedback,
    delete_feedback,
    get_feedback_list,
)
from courserep.staff.schemas.feedback import FeedbackCreate, FeedbackRead

router = APIRouter(prefix="/feedback", tags=["Feedback"])


@router.post("", response_model=ApiResponse[FeedbackRead], status_code=status.HTTP_201_CREATED)
@limiter.limit("5/minute")
async def submit_feedback(
    request: Request,
    feedback: FeedbackCreate,
    db: AsyncSession = Depends(get_session),
):
    """
    Leave feedback for the representative.

    With **isAnonymous** the author is not stored, so it can never be
    revealed later.
    """
    db_feedback = await create_feedback(db, feedback)
    return ok("Feedback submitted successfully", FeedbackRead.model_validate(db_feedback))


@router.get("", response_model=ApiResponse[List[FeedbackRead]])
@limiter.limit("30/minute")
async def list_feedback(request: Request, db: AsyncSession = Depends(get_session)):
    rows = await get_feedback_list(db)
    items = []
    for feedback, student_name in rows:
        read = FeedbackRead.model_validate(feedback)
        read.student_name = None if feedback.is_anonymous else student_name
        items.append(read)
    return ok("Feedback retrieved successfully", items)


@router.delete("/{feedback_id}", response_model=ApiResponse[None])
@limiter.limit("10/minute")
async def delete_existing_feedback(
    request: Request,
    feedback_id: str = Path(..., description="Feedback ID"),
    db: AsyncSession = Depends(get_session),
):
    await delete_feedback(db, feedback_id)
    return ok("Feedback deleted successfully")
