from typing import List

from fastapi import APIRouter, Depends, Path, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from courserep.core.database import get_session
from courserep.core.limits import limiter
from courserep.core.responses import ApiResponse, ok
from courserep.staff.crud.lecturers import (
    create_lecturer,
    delete_lecturer,
    get_lecturer_by_id,
    get_lecturers,
    update_lecturer,
)
from courserep.staff.schemas.lecturers import (
    LecturerCreate,
    LecturerDetail,
    LecturerRead,
    LecturerUpdate,
)

router = APIRouter(prefix="/lecturer", tags=["Lecturers"])


@router.post("", response_model=ApiResponse[LecturerRead], status_code=status.HTTP_201_CREATED)
@limiter.limit("10/minute")
async def create_new_lecturer(
    request: Request,
    lecturer: LecturerCreate,
    db: AsyncSession = Depends(get_session),
):
    """Create a lecturer; lecturerId is generated when not supplied"""
    db_lecturer = await create_lecturer(db, lecturer)
    return ok("Lecturer created successfully", LecturerRead.model_validate(db_lecturer))


@router.get("", response_model=ApiResponse[List[LecturerRead]])
@limiter.limit("30/minute")
async def list_lecturers(request: Request, db: AsyncSession = Depends(get_session)):
    lecturers = await get_lecturers(db)
    return ok(
        "Lecturers retrieved successfully",
        [LecturerRead.model_validate(lecturer) for lecturer in lecturers],
    )


@router.get("/{lecturer_id}", response_model=ApiResponse[LecturerDetail])
@limiter.limit("30/minute")
async def get_lecturer(
    request: Request,
    lecturer_id: str = Path(..., description="Lecturer ID"),
    db: AsyncSession = Depends(get_session),
):
    lecturer = await get_lecturer_by_id(db, lecturer_id, with_courses=True)
    return ok("Lecturer retrieved successfully", LecturerDetail.model_validate(lecturer))


@router.put("/{lecturer_id}", response_model=ApiResponse[LecturerRead])
@limiter.limit("10/minute")
async def update_existing_lecturer(
    request: Request,
    lecturer_update: LecturerUpdate,
    lecturer_id: str = Path(..., description="Lecturer ID"),
    db: AsyncSession = Depends(get_session),
):
    lecturer = await update_lecturer(db, lecturer_id, lecturer_update)
    return ok("Lecturer updated successfully", LecturerRead.model_validate(lecturer))


@router.delete("/{lecturer_id}", response_model=ApiResponse[None])
@limiter.limit("10/minute")
async def delete_existing_lecturer(
    request: Request,
    lecturer_id: str = Path(..., description="Lecturer ID"),
    db: AsyncSession = Depends(get_session),
):
    await delete_lecturer(db, lecturer_id)
    return ok("Lecturer deleted successfully")
