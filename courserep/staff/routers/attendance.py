"""
Attendance session management for the course representative
"""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from courserep.core.database import as_utc, get_session
from courserep.core.limits import limiter
from courserep.core.responses import ApiResponse, ok
from courserep.staff.crud.attendance import (
    delete_attendance_record,
    get_attendance_records,
    mark_attendance_manually,
)
from courserep.staff.schemas.attendance import (
    AttendanceInitialize,
    AttendanceInitialized,
    AttendanceInstanceRead,
    AttendanceRecordRead,
    ManualMark,
)
from courserep.staff.services.attendance_session import (
    AttendanceSessionService,
    get_attendance_service,
    session_state,
)

router = APIRouter(prefix="/attendance", tags=["Attendance"])


@router.post(
    "/initialize",
    response_model=ApiResponse[AttendanceInitialized],
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit("10/minute")
async def initialize_attendance(
    request: Request,
    payload: AttendanceInitialize,
    db: AsyncSession = Depends(get_session),
    service: AttendanceSessionService = Depends(get_attendance_service),
):
    """
    Open an attendance session for a course.

    - **courseId**, **date**, **classType**: required
    - **classType**: "physical" or "online"
    - **latitude** / **longitude**: required for physical classes, the
      classroom position scans are checked against

    Every active student of the course gets an absent record. The response
    carries the short QR display code and its rendered image; the signed
    token itself is only handed out through /attendance/code/{code}.
    """
    created = await service.initialize(
        db,
        payload.course_id,
        payload.date,
        payload.class_type,
        payload.latitude,
        payload.longitude,
    )
    return ok(
        "Attendance initialized successfully",
        AttendanceInitialized(
            attendance_instance_id=created.instance_id,
            course_id=created.course_id,
            date=created.date,
            expires_at=created.expires_at,
            class_type=created.class_type,
            qr_code=created.qr_code,
            qr_image=created.qr_image,
        ),
    )


@router.post("/close", response_model=ApiResponse[None])
@limiter.limit("10/minute")
async def close_attendance(
    request: Request,
    instance_id: Optional[str] = Query(None, alias="instanceId"),
    db: AsyncSession = Depends(get_session),
    service: AttendanceSessionService = Depends(get_attendance_service),
):
    """Close a session for good; its token stops working immediately"""
    await service.close(db, instance_id)
    return ok("Attendance closed successfully")


@router.get("", response_model=ApiResponse[List[AttendanceInstanceRead]])
@limiter.limit("30/minute")
async def list_attendance_instances(
    request: Request,
    db: AsyncSession = Depends(get_session),
    service: AttendanceSessionService = Depends(get_attendance_service),
):
    instances = await service.list_instances(db)
    now = service.clock()
    return ok(
        "Attendance instances retrieved successfully",
        [
            AttendanceInstanceRead(
                instance_id=i.instance_id,
                course_id=i.course_id,
                date=i.date,
                class_type=i.class_type,
                latitude=i.latitude,
                longitude=i.longitude,
                expires_at=as_utc(i.expires_at),
                is_closed=i.is_closed,
                state=session_state(i, now).value,
                created_at=i.created_at,
            )
            for i in instances
        ],
    )


@router.delete("/instance/{instance_id}", response_model=ApiResponse[None])
@limiter.limit("10/minute")
async def delete_attendance_instance(
    request: Request,
    instance_id: str = Path(..., description="Attendance instance ID"),
    db: AsyncSession = Depends(get_session),
    service: AttendanceSessionService = Depends(get_attendance_service),
):
    """Delete a session together with its attendance records"""
    await service.delete_instance(db, instance_id)
    return ok("Attendance instance deleted successfully")


@router.get("/records", response_model=ApiResponse[List[AttendanceRecordRead]])
@limiter.limit("30/minute")
async def list_attendance_records(
    request: Request,
    record_date: Optional[date] = Query(None, alias="date"),
    student_id: Optional[str] = Query(None, alias="studentId"),
    course_id: Optional[str] = Query(None, alias="courseId"),
    instance_id: Optional[str] = Query(None, alias="instanceId"),
    db: AsyncSession = Depends(get_session),
):
    records = await get_attendance_records(
        db,
        record_date=record_date,
        student_id=student_id,
        course_id=course_id,
        instance_id=instance_id,
    )
    return ok(
        "Attendance records retrieved successfully",
        [AttendanceRecordRead.model_validate(r) for r in records],
    )


@router.post(
    "/mark",
    response_model=ApiResponse[AttendanceRecordRead],
    status_code=status.HTTP_202_ACCEPTED,
)
@limiter.limit("30/minute")
async def mark_attendance(
    request: Request,
    payload: ManualMark,
    db: AsyncSession = Depends(get_session),
):
    """Mark a student present by hand, bypassing the QR scan"""
    record = await mark_attendance_manually(db, payload.record_id, payload.student_id)
    return ok("Attendance marked successfully", AttendanceRecordRead.model_validate(record))


@router.delete("/records/{record_id}", response_model=ApiResponse[None])
@limiter.limit("10/minute")
async def delete_record(
    request: Request,
    record_id: str = Path(..., description="Attendance record ID"),
    db: AsyncSession = Depends(get_session),
):
    await delete_attendance_record(db, record_id)
    return ok("Attendance record deleted successfully")
