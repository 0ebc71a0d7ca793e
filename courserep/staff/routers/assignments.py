from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from courserep.core.database import get_session
from courserep.core.limits import limiter
from courserep.core.responses import ApiResponse, ok
from courserep.staff.crud.assignments import (
    count_submissions,
    create_assignment,
    delete_assignment,
    get_assignment_by_id,
    get_assignments,
    grade_submission,
    submit_assignment,
    update_assignment,
)
from courserep.staff.schemas.assignments import (
    AssignmentCreate,
    AssignmentRead,
    AssignmentUpdate,
    SubmissionCreate,
    SubmissionGrade,
    SubmissionRead,
)

router = APIRouter(prefix="/assignment", tags=["Assignments"])


async def with_counts(db: AsyncSession, assignments) -> List[AssignmentRead]:
    counts = await count_submissions(db, [a.assignment_id for a in assignments])
    reads = []
    for assignment in assignments:
        read = AssignmentRead.model_validate(assignment)
        read.submission_count = counts.get(assignment.assignment_id, 0)
        reads.append(read)
    return reads


@router.post(
    "", response_model=ApiResponse[AssignmentRead], status_code=status.HTTP_201_CREATED
)
@limiter.limit("10/minute")
async def create_new_assignment(
    request: Request,
    assignment: AssignmentCreate,
    db: AsyncSession = Depends(get_session),
):
    """
    Create an assignment for a course.

    - **courseId**: required, must exist
    - **dueDate**: ISO 8601 datetime
    - **points**: defaults to 100
    """
    db_assignment = await create_assignment(db, assignment)
    return ok("Assignment created successfully", AssignmentRead.model_validate(db_assignment))


@router.get("", response_model=ApiResponse[List[AssignmentRead]])
@limiter.limit("30/minute")
async def list_assignments(
    request: Request,
    course_id: Optional[str] = Query(None, alias="courseId", description="Filter by course"),
    db: AsyncSession = Depends(get_session),
):
    assignments = await get_assignments(db, course_id=course_id)
    return ok("Assignments retrieved successfully", await with_counts(db, assignments))


@router.patch("/submissions/{submission_id}", response_model=ApiResponse[SubmissionRead])
@limiter.limit("20/minute")
async def grade_existing_submission(
    request: Request,
    grade: SubmissionGrade,
    submission_id: str = Path(..., description="Submission ID"),
    db: AsyncSession = Depends(get_session),
):
    submission = await grade_submission(db, submission_id, grade)
    return ok("Submission graded successfully", SubmissionRead.model_validate(submission))


@router.get("/{assignment_id}", response_model=ApiResponse[AssignmentRead])
@limiter.limit("30/minute")
async def get_assignment(
    request: Request,
    assignment_id: str = Path(..., description="Assignment ID"),
    db: AsyncSession = Depends(get_session),
):
    assignment = await get_assignment_by_id(db, assignment_id)
    reads = await with_counts(db, [assignment])
    return ok("Assignment retrieved successfully", reads[0])


@router.put("/{assignment_id}", response_model=ApiResponse[AssignmentRead])
@limiter.limit("10/minute")
async def update_existing_assignment(
    request: Request,
    assignment_update: AssignmentUpdate,
    assignment_id: str = Path(..., description="Assignment ID"),
    db: AsyncSession = Depends(get_session),
):
    assignment = await update_assignment(db, assignment_id, assignment_update)
    return ok("Assignment updated successfully", AssignmentRead.model_validate(assignment))


@router.delete("/{assignment_id}", response_model=ApiResponse[None])
@limiter.limit("10/minute")
async def delete_existing_assignment(
    request: Request,
    assignment_id: str = Path(..., description="Assignment ID"),
    db: AsyncSession = Depends(get_session),
):
    """Delete an assignment together with its submissions"""
    await delete_assignment(db, assignment_id)
    return ok("Assignment deleted successfully")


@router.post(
    "/{assignment_id}/submissions",
    response_model=ApiResponse[SubmissionRead],
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit("10/minute")
async def submit(
    request: Request,
    submission: SubmissionCreate,
    assignment_id: str = Path(..., description="Assignment ID"),
    db: AsyncSession = Depends(get_session),
):
    db_submission = await submit_assignment(db, assignment_id, submission)
    return ok("Assignment submitted successfully", SubmissionRead.model_validate(db_submission))
