from enum import Enum

from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from courserep.core.database import Base, utcnow


class StudentStatus(str, Enum):
    active = "active"
    inactive = "inactive"


class Student(Base):
    __tablename__ = "students"

    student_id = Column(String(30), primary_key=True)
    name = Column(String(150), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    phone = Column(String(30), nullable=False)
    password_hash = Column(String(255), nullable=False)

    # A student follows one course at a time
    course_id = Column(
        String(30),
        ForeignKey("courses.course_id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    status = Column(String(20), nullable=False, default=StudentStatus.active.value)

    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())

    course = relationship("Course", back_populates="students")
    memberships = relationship(
        "GroupMember", back_populates="student", passive_deletes=True
    )

    def __repr__(self):
        return f"<Student(student_id='{self.student_id}', status='{self.status}')>"
