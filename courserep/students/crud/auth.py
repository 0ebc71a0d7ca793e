import logging

from sqlalchemy.ext.asyncio import AsyncSession

from courserep.core.database import db_operation
from courserep.core.exceptions import AuthenticationError
from courserep.core.security import verify_password
from courserep.staff.models import Student, StudentStatus

logger = logging.getLogger(__name__)


@db_operation
async def authenticate_student(session: AsyncSession, student_id: str, password: str):
    """
    Check a student's credentials.

    Unknown ID and wrong password give the same error.
    """
    student = await session.get(Student, student_id)

    if student is None or not verify_password(student.password_hash, password):
        logger.warning(f"Failed login attempt for student {student_id}")
        raise AuthenticationError("Invalid student ID or password")

    if student.status != StudentStatus.active.value:
        raise AuthenticationError("Student account is inactive")

    return student


@db_operation
async def get_authenticated_student(session: AsyncSession, student_id: str):
    student = await session.get(Student, student_id)
    if student is None:
        raise AuthenticationError("User no longer exists")
    return student
