from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from courserep.core.database import db_operation
from courserep.core.exceptions import (
    ConflictError,
    DuplicateError,
    EmptyResultError,
    NotFoundError,
)
from courserep.core.logging_utils import log_business_event
from courserep.staff.models import Course, Lecturer, Student
from courserep.staff.schemas.courses import CourseCreate, CourseUpdate


@db_operation
async def get_course_by_id(session: AsyncSession, course_id: str):
    result = await session.execute(
        select(Course)
        .options(selectinload(Course.lecturer))
        .where(Course.course_id == course_id)
    )
    course = result.scalar_one_or_none()

    if not course:
        raise NotFoundError("Course not found", {"courseId": course_id})

    return course


@db_operation
async def count_course_students(session: AsyncSession, course_id: str) -> int:
    result = await session.execute(
        select(func.count(Student.student_id)).where(Student.course_id == course_id)
    )
    return result.scalar() or 0


@db_operation
async def get_courses(session: AsyncSession):
    result = await session.execute(
        select(Course).options(selectinload(Course.lecturer)).order_by(Course.course_code)
    )
    courses = result.scalars().all()

    if not courses:
        raise EmptyResultError("No courses found")

    return courses


async def _ensure_lecturer_exists(session: AsyncSession, lecturer_id: str):
    if lecturer_id and await session.get(Lecturer, lecturer_id) is None:
        raise NotFoundError("Lecturer not found", {"lecturerId": lecturer_id})


async def _ensure_code_free(session: AsyncSession, course_code: str, course_id: str = None):
    query = select(Course.course_id).where(Course.course_code == course_code)
    if course_id:
        query = query.where(Course.course_id != course_id)
    if (await session.execute(query)).scalar_one_or_none():
        raise DuplicateError("Course", "courseCode", course_code)


@db_operation
async def create_course(session: AsyncSession, data: CourseCreate):
    if await session.get(Course, data.course_id) is not None:
        raise DuplicateError("Course", "courseId", data.course_id)

    await _ensure_code_free(session, data.course_code)
    await _ensure_lecturer_exists(session, data.lecturer_id)

    course = Course(**data.model_dump())
    session.add(course)
    await session.commit()
    session.expire(course)
    return await get_course_by_id(session, data.course_id)


@db_operation
async def update_course(session: AsyncSession, course_id: str, data: CourseUpdate):
    course = await get_course_by_id(session, course_id)
    update_data = data.model_dump(exclude_unset=True)

    if update_data.get("course_code"):
        await _ensure_code_free(session, update_data["course_code"], course_id)
    if update_data.get("lecturer_id"):
        await _ensure_lecturer_exists(session, update_data["lecturer_id"])

    for field, value in update_data.items():
        setattr(course, field, value)

    await session.commit()
    session.expire(course)
    return await get_course_by_id(session, course_id)


@db_operation
async def delete_course(session: AsyncSession, course_id: str):
    """
    Deleting a course removes its assignments and attendance sessions;
    students and groups stay, detached from it.
    """
    course = await get_course_by_id(session, course_id)
    await session.delete(course)
    await session.commit()


@db_operation
async def register_student_for_course(session: AsyncSession, student_id: str, course_id: str):
    student = await session.get(Student, student_id)
    if student is None:
        raise NotFoundError("Student not found", {"studentId": student_id})

    await get_course_by_id(session, course_id)

    if student.course_id == course_id:
        raise ConflictError(
            "Student already registered for this course",
            error_code="ALREADY_REGISTERED",
            details={"studentId": student_id, "courseId": course_id},
        )

    student.course_id = course_id
    await session.commit()
    await session.refresh(student)

    log_business_event(
        "student_registered", "course", course_id, {"student_id": student_id}
    )
    return student


@db_operation
async def get_student_courses(session: AsyncSession, student_id: str):
    student = await session.get(Student, student_id)
    if student is None:
        raise NotFoundError("Student not found", {"studentId": student_id})

    if not student.course_id:
        raise EmptyResultError("Student is not registered for any course")

    return [await get_course_by_id(session, student.course_id)]
