from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from courserep.core.database import db_operation
from courserep.core.exceptions import ConflictError, EmptyResultError, NotFoundError
from courserep.core.identifiers import generate_id
from courserep.staff.models import Course, Group, GroupMember, Student
from courserep.staff.schemas.groups import GroupCreate, GroupMemberAdd, GroupUpdate


@db_operation
async def get_group_by_id(session: AsyncSession, group_id: str):
    """Get group with its members and their student rows"""
    result = await session.execute(
        select(Group)
        .options(selectinload(Group.members).selectinload(GroupMember.student))
        .where(Group.group_id == group_id)
    )
    group = result.scalar_one_or_none()

    if not group:
        raise NotFoundError("Group not found", {"groupId": group_id})

    return group


@db_operation
async def get_groups(session: AsyncSession, course_id: str = None):
    query = (
        select(Group)
        .options(selectinload(Group.members))
        .order_by(Group.created_at.desc(), Group.group_id.desc())
    )
    if course_id:
        query = query.where(Group.course_id == course_id)

    result = await session.execute(query)
    groups = result.scalars().all()

    if not groups:
        raise EmptyResultError("No groups found")

    return groups


async def _ensure_course_exists(session: AsyncSession, course_id: str):
    if course_id and await session.get(Course, course_id) is None:
        raise NotFoundError("Course not found", {"courseId": course_id})


@db_operation
async def create_group(session: AsyncSession, data: GroupCreate):
    await _ensure_course_exists(session, data.course_id)

    group_id = await generate_id(session, "GRP")
    group = Group(group_id=group_id, **data.model_dump())
    session.add(group)
    await session.commit()
    session.expire(group)
    return await get_group_by_id(session, group_id)


@db_operation
async def update_group(session: AsyncSession, group_id: str, data: GroupUpdate):
    group = await get_group_by_id(session, group_id)
    update_data = data.model_dump(exclude_unset=True)

    if update_data.get("course_id"):
        await _ensure_course_exists(session, update_data["course_id"])

    for field, value in update_data.items():
        setattr(group, field, value)

    await session.commit()
    return group


@db_operation
async def delete_group(session: AsyncSession, group_id: str):
    group = await get_group_by_id(session, group_id)
    await session.delete(group)
    await session.commit()


@db_operation
async def add_group_member(session: AsyncSession, group_id: str, data: GroupMemberAdd):
    group = await get_group_by_id(session, group_id)

    if await session.get(Student, data.student_id) is None:
        raise NotFoundError("Student not found", {"studentId": data.student_id})

    if any(m.student_id == data.student_id for m in group.members):
        raise ConflictError(
            "Student is already a member of this group",
            error_code="ALREADY_MEMBER",
            details={"groupId": group_id, "studentId": data.student_id},
        )

    session.add(
        GroupMember(
            group_id=group_id, student_id=data.student_id, is_leader=data.is_leader
        )
    )
    await session.commit()
    session.expire(group)
    return await get_group_by_id(session, group_id)


@db_operation
async def remove_group_member(session: AsyncSession, group_id: str, student_id: str):
    member = await session.get(GroupMember, (group_id, student_id))
    if member is None:
        raise NotFoundError(
            "Group member not found", {"groupId": group_id, "studentId": student_id}
        )

    await session.delete(member)
    await session.commit()
