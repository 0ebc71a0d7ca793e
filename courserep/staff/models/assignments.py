from sqlalchemy import (
    Column,
    String,
    Text,
    Integer,
    Numeric,
    DateTime,
    ForeignKey,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from courserep.core.database import Base, utcnow


class Assignment(Base):
    __tablename__ = "assignments"

    assignment_id = Column(String(30), primary_key=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    course_id = Column(
        String(30),
        ForeignKey("courses.course_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    due_date = Column(DateTime(timezone=True), nullable=False, index=True)
    points = Column(Integer, nullable=False, default=100)

    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())

    course = relationship("Course")
    submissions = relationship(
        "Submission",
        back_populates="assignment",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Assignment(assignment_id='{self.assignment_id}', title='{self.title}')>"


class Submission(Base):
    __tablename__ = "submissions"
    __table_args__ = (
        UniqueConstraint(
            "assignment_id", "student_id", name="uq_submissions_assignment_student"
        ),
    )

    submission_id = Column(String(30), primary_key=True)
    assignment_id = Column(
        String(30),
        ForeignKey("assignments.assignment_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    student_id = Column(
        String(30),
        ForeignKey("students.student_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    content = Column(Text, nullable=True)
    grade = Column(Numeric(5, 2), nullable=True)

    submitted_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())

    assignment = relationship("Assignment", back_populates="submissions")
