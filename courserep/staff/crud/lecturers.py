from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from courserep.core.database import db_operation
from courserep.core.exceptions import DuplicateError, EmptyResultError, NotFoundError
from courserep.core.identifiers import generate_id
from courserep.staff.models import Lecturer
from courserep.staff.schemas.lecturers import LecturerCreate, LecturerUpdate


@db_operation
async def get_lecturer_by_id(session: AsyncSession, lecturer_id: str, with_courses: bool = False):
    query = select(Lecturer).where(Lecturer.lecturer_id == lecturer_id)
    if with_courses:
        query = query.options(selectinload(Lecturer.courses))

    result = await session.execute(query)
    lecturer = result.scalar_one_or_none()

    if not lecturer:
        raise NotFoundError("Lecturer not found", {"lecturerId": lecturer_id})

    return lecturer


@db_operation
async def get_lecturers(session: AsyncSession):
    result = await session.execute(select(Lecturer).order_by(Lecturer.name))
    lecturers = result.scalars().all()

    if not lecturers:
        raise EmptyResultError("No lecturers found")

    return lecturers


async def _ensure_email_free(session: AsyncSession, email: str, lecturer_id: str = None):
    query = select(Lecturer.lecturer_id).where(Lecturer.email == email)
    if lecturer_id:
        query = query.where(Lecturer.lecturer_id != lecturer_id)
    if (await session.execute(query)).scalar_one_or_none():
        raise DuplicateError("Lecturer", "email", email)


@db_operation
async def create_lecturer(session: AsyncSession, data: LecturerCreate):
    if data.lecturer_id and await session.get(Lecturer, data.lecturer_id) is not None:
        raise DuplicateError("Lecturer", "lecturerId", data.lecturer_id)

    await _ensure_email_free(session, data.email)

    lecturer = Lecturer(**data.model_dump(exclude={"lecturer_id"}))
    lecturer.lecturer_id = data.lecturer_id or await generate_id(session, "LEC")

    session.add(lecturer)
    await session.commit()
    await session.refresh(lecturer)
    return lecturer


@db_operation
async def update_lecturer(session: AsyncSession, lecturer_id: str, data: LecturerUpdate):
    lecturer = await get_lecturer_by_id(session, lecturer_id)
    update_data = data.model_dump(exclude_unset=True)

    if update_data.get("email"):
        await _ensure_email_free(session, update_data["email"], lecturer_id)

    for field, value in update_data.items():
        setattr(lecturer, field, value)

    await session.commit()
    await session.refresh(lecturer)
    return lecturer


@db_operation
async def delete_lecturer(session: AsyncSession, lecturer_id: str):
    """Courses keep existing with no lecturer assigned"""
    lecturer = await get_lecturer_by_id(session, lecturer_id)
    await session.delete(lecturer)
    await session.commit()
