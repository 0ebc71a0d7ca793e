from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from courserep.core.database import get_session
from courserep.core.limits import limiter
from courserep.core.responses import ApiResponse, ok
from courserep.staff.crud.students import (
    create_student,
    delete_student,
    get_student_by_id,
    get_students,
    update_student,
)
from courserep.staff.schemas.students import (
    StudentCreate,
    StudentDetail,
    StudentGroupRead,
    StudentRead,
    StudentUpdate,
)

router = APIRouter(prefix="/student", tags=["Students"])


@router.post(
    "/register",
    response_model=ApiResponse[StudentRead],
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit("10/minute")
async def register_student(
    request: Request,
    student: StudentCreate,
    db: AsyncSession = Depends(get_session),
):
    """
    Register a new student.

    - **studentId**: matriculation number, unique
    - **email**: unique
    - **password**: stored hashed, never returned
    - **courseId**: optional course the student follows
    """
    db_student = await create_student(db, student)
    return ok("Student registered successfully", StudentRead.model_validate(db_student))


@router.get("", response_model=ApiResponse[List[StudentRead]])
@limiter.limit("30/minute")
async def list_students(
    request: Request,
    course_id: Optional[str] = Query(None, alias="courseId", description="Filter by course"),
    db: AsyncSession = Depends(get_session),
):
    students = await get_students(db, course_id=course_id)
    return ok(
        "Students retrieved successfully",
        [StudentRead.model_validate(s) for s in students],
    )


@router.get("/{student_id}", response_model=ApiResponse[StudentDetail])
@limiter.limit("30/minute")
async def get_student(
    request: Request,
    student_id: str = Path(..., description="Student ID"),
    db: AsyncSession = Depends(get_session),
):
    """Student profile with the groups they belong to"""
    student = await get_student_by_id(db, student_id, with_groups=True)
    detail = StudentDetail(
        **StudentRead.model_validate(student).model_dump(),
        groups=[
            StudentGroupRead(
                group_id=m.group_id, name=m.group.name, is_leader=m.is_leader
            )
            for m in student.memberships
        ],
    )
    return ok("Student retrieved successfully", detail)


@router.put("/{student_id}", response_model=ApiResponse[StudentRead])
@limiter.limit("10/minute")
async def update_existing_student(
    request: Request,
    student_update: StudentUpdate,
    student_id: str = Path(..., description="Student ID"),
    db: AsyncSession = Depends(get_session),
):
    student = await update_student(db, student_id, student_update)
    return ok("Student updated successfully", StudentRead.model_validate(student))


@router.delete("/{student_id}", response_model=ApiResponse[None])
@limiter.limit("10/minute")
async def delete_existing_student(
    request: Request,
    student_id: str = Path(..., description="Student ID"),
    db: AsyncSession = Depends(get_session),
):
    """Delete a student with their attendance records and submissions"""
    await delete_student(db, student_id)
    return ok("Student deleted successfully")
