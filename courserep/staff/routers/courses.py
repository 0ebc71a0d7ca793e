from typing import List

from fastapi import APIRouter, Depends, Path, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from courserep.core.database import get_session
from courserep.core.limits import limiter
from courserep.core.responses import ApiResponse, ok
from courserep.staff.crud.courses import (
    count_course_students,
    create_course,
    delete_course,
    get_course_by_id,
    get_courses,
    get_student_courses,
    register_student_for_course,
    update_course,
)
from courserep.staff.models import Course
from courserep.staff.schemas.courses import (
    CourseCreate,
    CourseDetail,
    CourseRead,
    CourseRegistration,
    CourseUpdate,
)
from courserep.staff.schemas.students import StudentRead

router = APIRouter(prefix="/course", tags=["Courses"])


def course_read(course: Course) -> CourseRead:
    read = CourseRead.model_validate(course)
    read.lecturer_name = course.lecturer.name if course.lecturer else None
    return read


@router.post("", response_model=ApiResponse[CourseRead], status_code=status.HTTP_201_CREATED)
@limiter.limit("10/minute")
async def create_new_course(
    request: Request,
    course: CourseCreate,
    db: AsyncSession = Depends(get_session),
):
    """
    Create a course.

    - **courseId** / **courseCode**: both unique
    - **lecturerId**: optional, must exist
    - **credits**: defaults to 3
    - **semester**: defaults to "Fall 2024"
    """
    db_course = await create_course(db, course)
    return ok("Course created successfully", course_read(db_course))


@router.post("/register", response_model=ApiResponse[StudentRead])
@limiter.limit("10/minute")
async def register_for_course(
    request: Request,
    registration: CourseRegistration,
    db: AsyncSession = Depends(get_session),
):
    student = await register_student_for_course(
        db, registration.student_id, registration.course_id
    )
    return ok("Student registered for course", StudentRead.model_validate(student))


@router.get("", response_model=ApiResponse[List[CourseRead]])
@limiter.limit("30/minute")
async def list_courses(request: Request, db: AsyncSession = Depends(get_session)):
    courses = await get_courses(db)
    return ok("Courses retrieved successfully", [course_read(c) for c in courses])


@router.get("/student/{student_id}", response_model=ApiResponse[List[CourseRead]])
@limiter.limit("30/minute")
async def list_student_courses(
    request: Request,
    student_id: str = Path(..., description="Student ID"),
    db: AsyncSession = Depends(get_session),
):
    courses = await get_student_courses(db, student_id)
    return ok("Courses retrieved successfully", [course_read(c) for c in courses])


@router.get("/{course_id}", response_model=ApiResponse[CourseDetail])
@limiter.limit("30/minute")
async def get_course(
    request: Request,
    course_id: str = Path(..., description="Course ID"),
    db: AsyncSession = Depends(get_session),
):
    """Course with its lecturer and the number of enrolled students"""
    course = await get_course_by_id(db, course_id)
    detail = CourseDetail(
        **course_read(course).model_dump(),
        lecturer_email=course.lecturer.email if course.lecturer else None,
        student_count=await count_course_students(db, course_id),
    )
    return ok("Course retrieved successfully", detail)


@router.put("/{course_id}", response_model=ApiResponse[CourseRead])
@limiter.limit("10/minute")
async def update_existing_course(
    request: Request,
    course_update: CourseUpdate,
    course_id: str = Path(..., description="Course ID"),
    db: AsyncSession = Depends(get_session),
):
    course = await update_course(db, course_id, course_update)
    return ok("Course updated successfully", course_read(course))


@router.delete("/{course_id}", response_model=ApiResponse[None])
@limiter.limit("10/minute")
async def delete_existing_course(
    request: Request,
    course_id: str = Path(..., description="Course ID"),
    db: AsyncSession = Depends(get_session),
):
    await delete_course(db, course_id)
    return ok("Course deleted successfully")
