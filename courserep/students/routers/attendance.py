"""
Student side of attendance: resolve the scanned code, then auto-mark
"""
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from courserep.core.database import as_utc, get_session
from courserep.core.limits import (
    CLASSROOM_LIMIT,
    display_code_key,
    limiter,
    session_scan_key,
)
from courserep.core.responses import ApiResponse, ok
from courserep.staff.services.attendance_session import (
    AttendanceSessionService,
    get_attendance_service,
)
from courserep.students.schemas.attendance import (
    AutoMarkRequest,
    AutoMarkResult,
    CodeResolution,
)

router = APIRouter(prefix="/attendance", tags=["Student Attendance"])


@router.get("/code/{code}", response_model=ApiResponse[CodeResolution])
@limiter.limit(CLASSROOM_LIMIT, key_func=display_code_key)
async def resolve_attendance_code(
    request: Request,
    code: str = Path(..., description="Display code read from the QR image, ATT-<id>"),
    db: AsyncSession = Depends(get_session),
    service: AttendanceSessionService = Depends(get_attendance_service),
):
    """Exchange the QR display code for the session's signed token"""
    instance = await service.resolve_code(db, code)
    return ok(
        "Attendance session found",
        CodeResolution(
            attendance_instance_id=instance.instance_id,
            course_id=instance.course_id,
            class_type=instance.class_type,
            expires_at=as_utc(instance.expires_at),
            token=instance.qr_token,
        ),
    )


@router.post("/auto-mark", response_model=ApiResponse[AutoMarkResult])
@limiter.limit(CLASSROOM_LIMIT, key_func=session_scan_key)
async def auto_mark_attendance(
    request: Request,
    payload: AutoMarkRequest,
    token: Optional[str] = Query(None, description="Signed attendance token"),
    db: AsyncSession = Depends(get_session),
    service: AttendanceSessionService = Depends(get_attendance_service),
):
    """
    Mark the calling student present.

    - **token** (query): the signed session token
    - **studentId**: required
    - **latitude** / **longitude**: required for physical classes, and for
      online classes when a random location check is triggered
    """
    result = await service.scan(
        db, token, payload.student_id, payload.latitude, payload.longitude
    )
    return ok(
        result.message,
        AutoMarkResult(
            attendance_instance_id=result.instance_id,
            student_id=result.student_id,
            record_id=result.record_id,
            location_checked=result.location_checked,
            location_valid=result.location_valid,
        ),
    )
