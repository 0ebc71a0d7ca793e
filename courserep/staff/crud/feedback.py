from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from courserep.core.database import db_operation
from courserep.core.exceptions import EmptyResultError, NotFoundError
from courserep.core.identifiers import generate_id
from courserep.staff.models import Feedback, Student
from courserep.staff.schemas.feedback import FeedbackCreate


@db_operation
async def create_feedback(session: AsyncSession, data: FeedbackCreate):
    if data.student_id and await session.get(Student, data.student_id) is None:
        raise NotFoundError("Student not found", {"studentId": data.student_id})

    feedback = Feedback(
        feedback_id=await generate_id(session, "FDB"),
        # Anonymous feedback is not linked to the author at all
        student_id=None if data.is_anonymous else data.student_id,
        content=data.content,
        is_anonymous=data.is_anonymous,
    )
    session.add(feedback)
    await session.commit()
    await session.refresh(feedback)
    return feedback


@db_operation
async def get_feedback_list(session: AsyncSession):
    """Rows of (Feedback, student name or None)"""
    result = await session.execute(
        select(Feedback, Student.name)
        .outerjoin(Student, Feedback.student_id == Student.student_id)
        .order_by(Feedback.created_at.desc(), Feedback.feedback_id.desc())
    )
    rows = result.all()

    if not rows:
        raise EmptyResultError("No feedback found")

    return rows


@db_operation
async def delete_feedback(session: AsyncSession, feedback_id: str):
    feedback = await session.get(Feedback, feedback_id)
    if feedback is None:
        raise NotFoundError("Feedback not found", {"feedbackId": feedback_id})

    await session.delete(feedback)
    await session.commit()
