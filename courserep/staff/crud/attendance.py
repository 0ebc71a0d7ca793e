from datetime import date
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from courserep.core.database import db_operation, utcnow
from courserep.core.exceptions import AlreadyMarkedError, EmptyResultError, NotFoundError
from courserep.core.logging_utils import log_business_event
from courserep.staff.models import AttendanceRecord, AttendanceStatus


@db_operation
async def get_attendance_records(
    session: AsyncSession,
    record_date: Optional[date] = None,
    student_id: Optional[str] = None,
    course_id: Optional[str] = None,
    instance_id: Optional[str] = None,
):
    """Filtered listing, newest session first"""
    query = select(AttendanceRecord).order_by(
        AttendanceRecord.date.desc(), AttendanceRecord.record_id.desc()
    )
    if record_date:
        query = query.where(AttendanceRecord.date == record_date)
    if student_id:
        query = query.where(AttendanceRecord.student_id == student_id)
    if course_id:
        query = query.where(AttendanceRecord.course_id == course_id)
    if instance_id:
        query = query.where(AttendanceRecord.instance_id == instance_id)

    result = await session.execute(query)
    records = result.scalars().all()

    if not records:
        raise EmptyResultError("No attendance records found", status_code=400)

    return records


@db_operation
async def mark_attendance_manually(session: AsyncSession, record_id: str, student_id: str):
    """Representative override for a student who could not scan"""
    result = await session.execute(
        select(AttendanceRecord)
        .where(
            AttendanceRecord.record_id == record_id,
            AttendanceRecord.student_id == student_id,
        )
        .with_for_update()
    )
    record = result.scalar_one_or_none()

    if record is None:
        raise NotFoundError(
            "Attendance record not found",
            {"recordId": record_id, "studentId": student_id},
        )

    if record.status == AttendanceStatus.present.value:
        raise AlreadyMarkedError()

    record.status = AttendanceStatus.present.value
    record.marked_at = utcnow()
    await session.commit()

    log_business_event(
        "attendance_marked_manually",
        "attendance_record",
        record_id,
        {"student_id": student_id, "instance_id": record.instance_id},
    )
    return record


@db_operation
async def delete_attendance_record(session: AsyncSession, record_id: str):
    record = await session.get(AttendanceRecord, record_id)
    if record is None:
        raise NotFoundError("Attendance record not found", {"recordId": record_id})

    await session.delete(record)
    await session.commit()
