from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from courserep.core.database import Base, utcnow


class Lecturer(Base):
    __tablename__ = "lecturers"

    lecturer_id = Column(String(30), primary_key=True)
    name = Column(String(150), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    phone = Column(String(30), nullable=True)
    department = Column(String(150), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())

    courses = relationship("Course", back_populates="lecturer", passive_deletes=True)

    def __repr__(self):
        return f"<Lecturer(lecturer_id='{self.lecturer_id}', name='{self.name}')>"
