from sqlalchemy import Column, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from courserep.core.database import Base, utcnow


class Event(Base):
    __tablename__ = "events"

    event_id = Column(String(30), primary_key=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    start_date = Column(DateTime(timezone=True), nullable=False, index=True)
    end_date = Column(DateTime(timezone=True), nullable=False)
    location = Column(String(255), nullable=False)
    type = Column(String(30), nullable=False, default="general")
    course_id = Column(
        String(30),
        ForeignKey("courses.course_id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())

    course = relationship("Course")

    def __repr__(self):
        return f"<Event(event_id='{self.event_id}', title='{self.title}')>"
