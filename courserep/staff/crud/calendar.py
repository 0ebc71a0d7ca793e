from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from courserep.core.database import db_operation, utcnow
from courserep.core.exceptions import NotFoundError, ValidationError
from courserep.staff.models import Assignment, Event, Student, Submission


def month_bounds(year: int, month: int):
    if not 1 <= month <= 12:
        raise ValidationError("Month must be between 1 and 12")
    start = datetime(year, month, 1, tzinfo=timezone.utc)
    if month == 12:
        end = datetime(year + 1, 1, 1, tzinfo=timezone.utc)
    else:
        end = datetime(year, month + 1, 1, tzinfo=timezone.utc)
    return start, end


def week_bounds(week_start: Optional[date] = None):
    """Monday-based week containing week_start (today by default)"""
    day = week_start or utcnow().date()
    monday = day - timedelta(days=day.weekday())
    start = datetime.combine(monday, time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=7)


def _course_scope(column, course_id: Optional[str]):
    # General entries (no course) show up in every course calendar
    return (column == course_id) | (column.is_(None))


@db_operation
async def get_calendar_events(
    session: AsyncSession, year: int, month: int, course_id: Optional[str] = None
):
    start, end = month_bounds(year, month)
    query = (
        select(Event)
        .where(Event.start_date >= start, Event.start_date < end)
        .order_by(Event.start_date)
    )
    if course_id:
        query = query.where(_course_scope(Event.course_id, course_id))

    result = await session.execute(query)
    return result.scalars().all()


@db_operation
async def get_upcoming_events(
    session: AsyncSession, limit: int = 10, course_id: Optional[str] = None
):
    query = (
        select(Event)
        .where(Event.start_date >= utcnow())
        .order_by(Event.start_date)
        .limit(limit)
    )
    if course_id:
        query = query.where(_course_scope(Event.course_id, course_id))

    result = await session.execute(query)
    return result.scalars().all()


async def _submitted_assignment_ids(session: AsyncSession, student_id: str, assignment_ids):
    if not assignment_ids:
        return set()
    result = await session.execute(
        select(Submission.assignment_id).where(
            Submission.student_id == student_id,
            Submission.assignment_id.in_(assignment_ids),
        )
    )
    return set(result.scalars().all())


def _deadline(assignment: Assignment, submitted: Optional[set]):
    status = None
    if submitted is not None:
        status = "submitted" if assignment.assignment_id in submitted else "pending"
    return {
        "assignment_id": assignment.assignment_id,
        "title": assignment.title,
        "course_id": assignment.course_id,
        "due_date": assignment.due_date,
        "points": assignment.points,
        "status": status,
    }


@db_operation
async def get_upcoming_deadlines(
    session: AsyncSession,
    course_id: Optional[str] = None,
    student_id: Optional[str] = None,
    limit: int = 20,
):
    """Assignments not yet due; with a student, each carries submitted/pending"""
    if student_id:
        student = await session.get(Student, student_id)
        if student is None:
            raise NotFoundError("Student not found", {"studentId": student_id})
        course_id = course_id or student.course_id

    query = (
        select(Assignment)
        .where(Assignment.due_date >= utcnow())
        .order_by(Assignment.due_date)
        .limit(limit)
    )
    if course_id:
        query = query.where(Assignment.course_id == course_id)

    result = await session.execute(query)
    assignments = result.scalars().all()

    submitted = None
    if student_id:
        submitted = await _submitted_assignment_ids(
            session, student_id, [a.assignment_id for a in assignments]
        )
    return [_deadline(a, submitted) for a in assignments]


@db_operation
async def get_student_schedule(
    session: AsyncSession, student_id: str, week_start: Optional[date] = None
):
    """Events and deadlines falling in one week for the student's course"""
    student = await session.get(Student, student_id)
    if student is None:
        raise NotFoundError("Student not found", {"studentId": student_id})

    start, end = week_bounds(week_start)

    events = await session.execute(
        select(Event)
        .where(
            Event.start_date >= start,
            Event.start_date < end,
            _course_scope(Event.course_id, student.course_id),
        )
        .order_by(Event.start_date)
    )

    assignments = []
    if student.course_id:
        result = await session.execute(
            select(Assignment)
            .where(
                Assignment.course_id == student.course_id,
                Assignment.due_date >= start,
                Assignment.due_date < end,
            )
            .order_by(Assignment.due_date)
        )
        assignments = result.scalars().all()

    submitted = await _submitted_assignment_ids(
        session, student_id, [a.assignment_id for a in assignments]
    )

    return {
        "student_id": student_id,
        "course_id": student.course_id,
        "week_start": start.date(),
        "week_end": (end - timedelta(days=1)).date(),
        "events": events.scalars().all(),
        "deadlines": [_deadline(a, submitted) for a in assignments],
    }
