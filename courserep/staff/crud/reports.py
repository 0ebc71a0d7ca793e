"""
Read-only aggregates for the representative's dashboard.

Each report returns whatever the aggregate query returns; there is no
caching or precomputation.
"""
from datetime import date
from typing import Optional

from sqlalchemy import and_, case, func, literal
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from courserep.core.database import db_operation
from courserep.staff.models import (
    Assignment,
    AttendanceInstance,
    AttendanceRecord,
    AttendanceStatus,
    Course,
    Event,
    Lecturer,
    Notification,
    Student,
    Submission,
)

RECENT_ACTIVITY_LIMIT = 10


def _percentage(part, whole) -> float:
    if not whole:
        return 0.0
    return round(float(part) * 100.0 / float(whole), 2)


def _to_float(value) -> Optional[float]:
    return None if value is None else round(float(value), 2)


@db_operation
async def get_attendance_report(
    session: AsyncSession,
    course_id: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
):
    """Per student: sessions on record, sessions present, percentage"""
    conditions = [AttendanceRecord.student_id == Student.student_id]
    if course_id:
        conditions.append(AttendanceRecord.course_id == course_id)
    if start_date:
        conditions.append(AttendanceRecord.date >= start_date)
    if end_date:
        conditions.append(AttendanceRecord.date <= end_date)

    present = func.sum(
        case((AttendanceRecord.status == AttendanceStatus.present.value, 1), else_=0)
    )
    query = (
        select(
            Student.student_id,
            Student.name,
            Student.course_id,
            func.count(AttendanceRecord.record_id).label("total_sessions"),
            func.coalesce(present, 0).label("present_sessions"),
        )
        .outerjoin(AttendanceRecord, and_(*conditions))
        .group_by(Student.student_id, Student.name, Student.course_id)
        .order_by(Student.name)
    )
    if course_id:
        query = query.where(Student.course_id == course_id)

    result = await session.execute(query)
    return [
        {
            "student_id": row.student_id,
            "name": row.name,
            "course_id": row.course_id,
            "total_sessions": row.total_sessions,
            "present_sessions": int(row.present_sessions),
            "attendance_percentage": _percentage(row.present_sessions, row.total_sessions),
        }
        for row in result.all()
    ]


@db_operation
async def get_assignment_report(session: AsyncSession, course_id: Optional[str] = None):
    query = (
        select(
            Assignment.assignment_id,
            Assignment.title,
            Assignment.course_id,
            Assignment.due_date,
            func.count(Submission.submission_id).label("total_submissions"),
            func.avg(Submission.grade).label("average_grade"),
            func.min(Submission.grade).label("min_grade"),
            func.max(Submission.grade).label("max_grade"),
        )
        .outerjoin(Submission, Submission.assignment_id == Assignment.assignment_id)
        .group_by(
            Assignment.assignment_id,
            Assignment.title,
            Assignment.course_id,
            Assignment.due_date,
        )
        .order_by(Assignment.due_date.desc())
    )
    if course_id:
        query = query.where(Assignment.course_id == course_id)

    result = await session.execute(query)
    return [
        {
            "assignment_id": row.assignment_id,
            "title": row.title,
            "course_id": row.course_id,
            "due_date": row.due_date,
            "total_submissions": row.total_submissions,
            "average_grade": _to_float(row.average_grade),
            "min_grade": _to_float(row.min_grade),
            "max_grade": _to_float(row.max_grade),
        }
        for row in result.all()
    ]


@db_operation
async def get_course_report(session: AsyncSession):
    def count_of(column, fk):
        return (
            select(func.count(column))
            .where(fk == Course.course_id)
            .correlate(Course)
            .scalar_subquery()
        )

    present_ratio = (
        select(
            func.avg(
                case(
                    (AttendanceRecord.status == AttendanceStatus.present.value, 100.0),
                    else_=0.0,
                )
            )
        )
        .where(AttendanceRecord.course_id == Course.course_id)
        .correlate(Course)
        .scalar_subquery()
    )

    result = await session.execute(
        select(
            Course.course_id,
            Course.course_name,
            Course.course_code,
            count_of(Student.student_id, Student.course_id).label("total_students"),
            count_of(Assignment.assignment_id, Assignment.course_id).label(
                "total_assignments"
            ),
            count_of(Event.event_id, Event.course_id).label("total_events"),
            present_ratio.label("avg_attendance"),
        ).order_by(Course.course_code)
    )
    return [
        {
            "course_id": row.course_id,
            "course_name": row.course_name,
            "course_code": row.course_code,
            "total_students": row.total_students,
            "total_assignments": row.total_assignments,
            "total_events": row.total_events,
            "avg_attendance": _to_float(row.avg_attendance),
        }
        for row in result.all()
    ]


async def _count(session: AsyncSession, column, *conditions) -> int:
    query = select(func.count(column))
    if conditions:
        query = query.where(*conditions)
    return (await session.execute(query)).scalar() or 0


@db_operation
async def get_dashboard(session: AsyncSession):
    activities = []
    for activity_type, model, id_column, title_column in (
        ("assignment", Assignment, Assignment.assignment_id, Assignment.title),
        ("event", Event, Event.event_id, Event.title),
        ("notification", Notification, Notification.notification_id, Notification.title),
    ):
        result = await session.execute(
            select(
                literal(activity_type).label("type"),
                id_column.label("id"),
                title_column.label("title"),
                model.created_at,
            )
            .order_by(model.created_at.desc(), id_column.desc())
            .limit(RECENT_ACTIVITY_LIMIT)
        )
        activities.extend(
            {"type": row.type, "id": row.id, "title": row.title, "created_at": row.created_at}
            for row in result.all()
        )

    activities.sort(key=lambda a: (a["created_at"], a["id"]), reverse=True)

    return {
        "total_students": await _count(session, Student.student_id),
        "total_lecturers": await _count(session, Lecturer.lecturer_id),
        "total_courses": await _count(session, Course.course_id),
        "total_assignments": await _count(session, Assignment.assignment_id),
        "total_events": await _count(session, Event.event_id),
        "open_attendance_sessions": await _count(
            session,
            AttendanceInstance.instance_id,
            AttendanceInstance.is_closed.is_(False),
        ),
        "recent_activities": activities[:RECENT_ACTIVITY_LIMIT],
    }
