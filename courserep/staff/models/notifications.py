from sqlalchemy import Column, String, Text, DateTime, ForeignKey
from sqlalchemy.sql import func

from courserep.core.database import Base, utcnow


class Notification(Base):
    __tablename__ = "notifications"

    notification_id = Column(String(30), primary_key=True)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    # None means the whole class
    course_id = Column(
        String(30),
        ForeignKey("courses.course_id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())
