from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from courserep.core.database import db_operation, utcnow
from courserep.core.exceptions import (
    DuplicateError,
    EmptyResultError,
    NotFoundError,
)
from courserep.core.identifiers import generate_id
from courserep.core.logging_utils import log_business_event
from courserep.staff.models import Assignment, Course, Student, Submission
from courserep.staff.schemas.assignments import (
    AssignmentCreate,
    AssignmentUpdate,
    SubmissionCreate,
    SubmissionGrade,
)


@db_operation
async def get_assignment_by_id(session: AsyncSession, assignment_id: str):
    assignment = await session.get(Assignment, assignment_id)
    if not assignment:
        raise NotFoundError("Assignment not found", {"assignmentId": assignment_id})
    return assignment


@db_operation
async def count_submissions(session: AsyncSession, assignment_ids):
    """{assignment_id: submission count}"""
    if not assignment_ids:
        return {}
    result = await session.execute(
        select(Submission.assignment_id, func.count(Submission.submission_id))
        .where(Submission.assignment_id.in_(assignment_ids))
        .group_by(Submission.assignment_id)
    )
    return dict(result.all())


@db_operation
async def get_assignments(session: AsyncSession, course_id: str = None):
    query = select(Assignment).order_by(Assignment.due_date)
    if course_id:
        query = query.where(Assignment.course_id == course_id)

    result = await session.execute(query)
    assignments = result.scalars().all()

    if not assignments:
        raise EmptyResultError("No assignments found")

    return assignments


@db_operation
async def create_assignment(session: AsyncSession, data: AssignmentCreate):
    if await session.get(Course, data.course_id) is None:
        raise NotFoundError("Course not found", {"courseId": data.course_id})

    assignment = Assignment(
        assignment_id=await generate_id(session, "ASG"), **data.model_dump()
    )
    session.add(assignment)
    await session.commit()
    await session.refresh(assignment)

    log_business_event(
        "assignment_created",
        "assignment",
        assignment.assignment_id,
        {"course_id": assignment.course_id},
    )
    return assignment


@db_operation
async def update_assignment(session: AsyncSession, assignment_id: str, data: AssignmentUpdate):
    assignment = await get_assignment_by_id(session, assignment_id)

    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(assignment, field, value)

    await session.commit()
    await session.refresh(assignment)
    return assignment


@db_operation
async def delete_assignment(session: AsyncSession, assignment_id: str):
    assignment = await get_assignment_by_id(session, assignment_id)
    await session.delete(assignment)
    await session.commit()


@db_operation
async def submit_assignment(session: AsyncSession, assignment_id: str, data: SubmissionCreate):
    """One submission per student; resubmitting is a conflict"""
    await get_assignment_by_id(session, assignment_id)

    if await session.get(Student, data.student_id) is None:
        raise NotFoundError("Student not found", {"studentId": data.student_id})

    existing = await session.execute(
        select(Submission.submission_id).where(
            Submission.assignment_id == assignment_id,
            Submission.student_id == data.student_id,
        )
    )
    if existing.scalar_one_or_none():
        raise DuplicateError("Submission", "studentId", data.student_id)

    submission = Submission(
        submission_id=await generate_id(session, "SUB"),
        assignment_id=assignment_id,
        student_id=data.student_id,
        content=data.content,
        submitted_at=utcnow(),
    )
    session.add(submission)
    try:
        await session.commit()
    except IntegrityError:
        # Lost a race against a concurrent submission from the same student
        await session.rollback()
        raise DuplicateError("Submission", "studentId", data.student_id)

    await session.refresh(submission)
    return submission


@db_operation
async def grade_submission(session: AsyncSession, submission_id: str, data: SubmissionGrade):
    submission = await session.get(Submission, submission_id)
    if submission is None:
        raise NotFoundError("Submission not found", {"submissionId": submission_id})

    submission.grade = data.grade
    await session.commit()
    await session.refresh(submission)

    log_business_event(
        "submission_graded",
        "submission",
        submission_id,
        {"grade": str(data.grade)},
    )
    return submission
