from sqlalchemy import Column, String, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.sql import func

from courserep.core.database import Base, utcnow


class Feedback(Base):
    __tablename__ = "feedback"

    feedback_id = Column(String(30), primary_key=True)
    student_id = Column(
        String(30),
        ForeignKey("students.student_id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    content = Column(Text, nullable=False)
    is_anonymous = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())
