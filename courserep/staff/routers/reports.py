from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from courserep.core.database import get_session
from courserep.core.exceptions import ValidationError
from courserep.core.limits import limiter
from courserep.core.responses import ApiResponse, ok
from courserep.staff.crud.reports import (
    get_assignment_report,
    get_attendance_report,
    get_course_report,
    get_dashboard,
)
from courserep.staff.schemas.reports import (
    AssignmentReportRow,
    AttendanceReportRow,
    CourseReportRow,
    DashboardRead,
)

router = APIRouter(prefix="/report", tags=["Reports"])


@router.get("/attendance", response_model=ApiResponse[List[AttendanceReportRow]])
@limiter.limit("20/minute")
async def attendance_report(
    request: Request,
    course_id: Optional[str] = Query(None, alias="courseId"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    db: AsyncSession = Depends(get_session),
):
    if start_date and end_date and end_date < start_date:
        raise ValidationError("endDate must not be before startDate")

    rows = await get_attendance_report(db, course_id, start_date, end_date)
    return ok(
        "Attendance report generated successfully",
        [AttendanceReportRow.model_validate(r) for r in rows],
    )


@router.get("/assignments", response_model=ApiResponse[List[AssignmentReportRow]])
@limiter.limit("20/minute")
async def assignment_report(
    request: Request,
    course_id: Optional[str] = Query(None, alias="courseId"),
    db: AsyncSession = Depends(get_session),
):
    rows = await get_assignment_report(db, course_id)
    return ok(
        "Assignment report generated successfully",
        [AssignmentReportRow.model_validate(r) for r in rows],
    )


@router.get("/courses", response_model=ApiResponse[List[CourseReportRow]])
@limiter.limit("20/minute")
async def course_report(request: Request, db: AsyncSession = Depends(get_session)):
    rows = await get_course_report(db)
    return ok(
        "Course report generated successfully",
        [CourseReportRow.model_validate(r) for r in rows],
    )


@router.get("/dashboard", response_model=ApiResponse[DashboardRead])
@limiter.limit("30/minute")
async def dashboard(request: Request, db: AsyncSession = Depends(get_session)):
    stats = await get_dashboard(db)
    return ok("Dashboard retrieved successfully", DashboardRead.model_validate(stats))
