from sqlalchemy import Column, String, Text, Integer, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from courserep.core.database import Base, utcnow

DEFAULT_CREDITS = 3
DEFAULT_SEMESTER = "Fall 2024"


class Course(Base):
    __tablename__ = "courses"

    course_id = Column(String(30), primary_key=True)
    course_name = Column(String(200), nullable=False)
    course_code = Column(String(30), nullable=False, unique=True)
    lecturer_id = Column(
        String(30),
        ForeignKey("lecturers.lecturer_id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    description = Column(Text, nullable=True)
    credits = Column(Integer, nullable=False, default=DEFAULT_CREDITS)
    semester = Column(String(50), nullable=False, default=DEFAULT_SEMESTER)

    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())

    lecturer = relationship("Lecturer", back_populates="courses")
    students = relationship("Student", back_populates="course", passive_deletes=True)

    def __repr__(self):
        return f"<Course(course_id='{self.course_id}', code='{self.course_code}')>"
