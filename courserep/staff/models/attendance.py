"""Attendance sessions, per-student records and their audit trail"""
from enum import Enum

from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Boolean,
    Date,
    DateTime,
    Numeric,
    ForeignKey,
    UniqueConstraint,
    Index,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from courserep.core.database import Base, utcnow


class ClassType(str, Enum):
    physical = "physical"
    online = "online"


class AttendanceStatus(str, Enum):
    absent = "absent"
    present = "present"


class AttendanceInstance(Base):
    """One class session collecting attendance"""

    __tablename__ = "attendance_instances"

    instance_id = Column(String(30), primary_key=True)
    course_id = Column(
        String(30),
        ForeignKey("courses.course_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    date = Column(Date, nullable=False)
    class_type = Column(String(20), nullable=False)

    # (0, 0) for online sessions
    latitude = Column(Numeric(10, 8), nullable=False, default=0)
    longitude = Column(Numeric(11, 8), nullable=False, default=0)

    # Cleared on close, so the token can never be replayed
    qr_token = Column(Text, nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    is_closed = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())

    records = relationship(
        "AttendanceRecord",
        back_populates="instance",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("ix_attendance_instances_course_date", "course_id", "date"),
    )

    def __repr__(self):
        return (
            f"<AttendanceInstance(instance_id='{self.instance_id}', "
            f"course_id='{self.course_id}', closed={self.is_closed})>"
        )


class AttendanceRecord(Base):
    """Exactly one per (instance, student); absent until scanned"""

    __tablename__ = "attendance_records"

    record_id = Column(String(30), primary_key=True)
    instance_id = Column(
        String(30),
        ForeignKey("attendance_instances.instance_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    course_id = Column(String(30), nullable=False, index=True)
    student_id = Column(
        String(30),
        ForeignKey("students.student_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, default=AttendanceStatus.absent.value)
    marked_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())

    instance = relationship("AttendanceInstance", back_populates="records")

    __table_args__ = (
        UniqueConstraint(
            "instance_id", "student_id", name="uq_attendance_records_instance_student"
        ),
    )

    def __repr__(self):
        return (
            f"<AttendanceRecord(record_id='{self.record_id}', "
            f"student_id='{self.student_id}', status='{self.status}')>"
        )


class SecurityLog(Base):
    """Append-only: rejected verification attempts"""

    __tablename__ = "security_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(String(30), nullable=False, index=True)
    instance_id = Column(
        String(30),
        ForeignKey("attendance_instances.instance_id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    event_type = Column(String(50), nullable=False)
    details = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())


class AttendanceLog(Base):
    """Append-only: successful scans and how location was checked"""

    __tablename__ = "attendance_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(String(30), nullable=False, index=True)
    instance_id = Column(
        String(30),
        ForeignKey("attendance_instances.instance_id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    location_checked = Column(Boolean, nullable=False, default=False)
    location_valid = Column(Boolean, nullable=False, default=False)
    details = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())
