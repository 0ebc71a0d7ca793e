from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from courserep.core.database import db_operation
from courserep.core.exceptions import DuplicateError, EmptyResultError, NotFoundError
from courserep.core.security import hash_password
from courserep.staff.models import Course, GroupMember, Student
from courserep.staff.schemas.students import StudentCreate, StudentUpdate


@db_operation
async def get_student_by_id(session: AsyncSession, student_id: str, with_groups: bool = False):
    query = select(Student).where(Student.student_id == student_id)
    if with_groups:
        query = query.options(
            selectinload(Student.memberships).selectinload(GroupMember.group)
        )

    result = await session.execute(query)
    student = result.scalar_one_or_none()

    if not student:
        raise NotFoundError("Student not found", {"studentId": student_id})

    return student


@db_operation
async def get_students(session: AsyncSession, course_id: str = None):
    query = select(Student).order_by(Student.created_at.desc(), Student.student_id)
    if course_id:
        query = query.where(Student.course_id == course_id)

    result = await session.execute(query)
    students = result.scalars().all()

    if not students:
        raise EmptyResultError("No students found", status_code=409)

    return students


async def _ensure_course_exists(session: AsyncSession, course_id: str):
    if course_id and await session.get(Course, course_id) is None:
        raise NotFoundError("Course not found", {"courseId": course_id})


async def _ensure_email_free(session: AsyncSession, email: str, student_id: str = None):
    query = select(Student.student_id).where(Student.email == email)
    if student_id:
        query = query.where(Student.student_id != student_id)
    if (await session.execute(query)).scalar_one_or_none():
        raise DuplicateError("Student", "email", email)


@db_operation
async def create_student(session: AsyncSession, data: StudentCreate):
    """Register a student; the plain password never reaches the database"""
    if await session.get(Student, data.student_id) is not None:
        raise DuplicateError("Student", "studentId", data.student_id)

    await _ensure_email_free(session, data.email)
    await _ensure_course_exists(session, data.course_id)

    student = Student(
        student_id=data.student_id,
        name=data.name,
        email=data.email,
        phone=data.phone,
        password_hash=hash_password(data.password),
        course_id=data.course_id,
    )
    session.add(student)
    await session.commit()
    await session.refresh(student)
    return student


@db_operation
async def update_student(session: AsyncSession, student_id: str, data: StudentUpdate):
    student = await get_student_by_id(session, student_id)
    update_data = data.model_dump(exclude_unset=True)

    if update_data.get("email"):
        await _ensure_email_free(session, update_data["email"], student_id)
    if update_data.get("course_id"):
        await _ensure_course_exists(session, update_data["course_id"])
    if update_data.get("status") is not None:
        update_data["status"] = update_data["status"].value

    for field, value in update_data.items():
        setattr(student, field, value)

    await session.commit()
    await session.refresh(student)
    return student


@db_operation
async def delete_student(session: AsyncSession, student_id: str):
    student = await get_student_by_id(session, student_id)
    await session.delete(student)
    await session.commit()
