from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from courserep.core.database import get_session
from courserep.core.limits import limiter
from courserep.core.responses import ApiResponse, ok
from courserep.staff.crud.groups import (
    add_group_member,
    create_group,
    delete_group,
    get_group_by_id,
    get_groups,
    remove_group_member,
    update_group,
)
from courserep.staff.models import Group
from courserep.staff.schemas.groups import (
    GroupCreate,
    GroupDetail,
    GroupMemberAdd,
    GroupMemberRead,
    GroupRead,
    GroupUpdate,
)

router = APIRouter(prefix="/group", tags=["Groups"])


def group_read(group: Group) -> GroupRead:
    read = GroupRead.model_validate(group)
    read.member_count = len(group.members)
    return read


def group_detail(group: Group) -> GroupDetail:
    return GroupDetail(
        **group_read(group).model_dump(),
        members=[
            GroupMemberRead(
                student_id=m.student_id,
                name=m.student.name if m.student else None,
                email=m.student.email if m.student else None,
                is_leader=m.is_leader,
                joined_at=m.joined_at,
            )
            for m in group.members
        ],
    )


@router.post("", response_model=ApiResponse[GroupDetail], status_code=status.HTTP_201_CREATED)
@limiter.limit("10/minute")
async def create_new_group(
    request: Request,
    group: GroupCreate,
    db: AsyncSession = Depends(get_session),
):
    """
    Create a study group.

    - **name**: group name
    - **courseId**: optional course the group belongs to
    - **isGeneral**: group spans the whole class
    """
    db_group = await create_group(db, group)
    return ok("Group created successfully", group_detail(db_group))


@router.get("", response_model=ApiResponse[List[GroupRead]])
@limiter.limit("30/minute")
async def list_groups(
    request: Request,
    course_id: Optional[str] = Query(None, alias="courseId", description="Filter by course"),
    db: AsyncSession = Depends(get_session),
):
    groups = await get_groups(db, course_id=course_id)
    return ok("Groups retrieved successfully", [group_read(g) for g in groups])


@router.get("/{group_id}", response_model=ApiResponse[GroupDetail])
@limiter.limit("30/minute")
async def get_group(
    request: Request,
    group_id: str = Path(..., description="Group ID"),
    db: AsyncSession = Depends(get_session),
):
    group = await get_group_by_id(db, group_id)
    return ok("Group retrieved successfully", group_detail(group))


@router.put("/{group_id}", response_model=ApiResponse[GroupDetail])
@limiter.limit("10/minute")
async def update_existing_group(
    request: Request,
    group_update: GroupUpdate,
    group_id: str = Path(..., description="Group ID"),
    db: AsyncSession = Depends(get_session),
):
    group = await update_group(db, group_id, group_update)
    return ok("Group updated successfully", group_detail(group))


@router.delete("/{group_id}", response_model=ApiResponse[None])
@limiter.limit("10/minute")
async def delete_existing_group(
    request: Request,
    group_id: str = Path(..., description="Group ID"),
    db: AsyncSession = Depends(get_session),
):
    await delete_group(db, group_id)
    return ok("Group deleted successfully")


@router.post(
    "/{group_id}/members",
    response_model=ApiResponse[GroupDetail],
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit("20/minute")
async def add_member(
    request: Request,
    member: GroupMemberAdd,
    group_id: str = Path(..., description="Group ID"),
    db: AsyncSession = Depends(get_session),
):
    group = await add_group_member(db, group_id, member)
    return ok("Member added successfully", group_detail(group))


@router.delete("/{group_id}/members/{student_id}", response_model=ApiResponse[None])
@limiter.limit("20/minute")
async def remove_member(
    request: Request,
    group_id: str = Path(..., description="Group ID"),
    student_id: str = Path(..., description="Student ID"),
    db: AsyncSession = Depends(get_session),
):
    await remove_group_member(db, group_id, student_id)
    return ok("Member removed successfully")
