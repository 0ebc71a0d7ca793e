from sqlalchemy import (
    Column,
    String,
    Text,
    Boolean,
    DateTime,
    ForeignKey,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from courserep.core.database import Base, utcnow


class Group(Base):
    __tablename__ = "groups"

    group_id = Column(String(30), primary_key=True)
    name = Column(String(150), nullable=False)
    course_id = Column(
        String(30),
        ForeignKey("courses.course_id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    # General groups span the whole class rather than one course
    is_general = Column(Boolean, nullable=False, default=False)
    description = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())

    course = relationship("Course")
    members = relationship(
        "GroupMember",
        back_populates="group",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Group(group_id='{self.group_id}', name='{self.name}')>"


class GroupMember(Base):
    __tablename__ = "group_members"
    group_id = Column(
        String(30),
        ForeignKey("groups.group_id", ondelete="CASCADE"),
        primary_key=True,
    )
    student_id = Column(
        String(30),
        ForeignKey("students.student_id", ondelete="CASCADE"),
        primary_key=True,
    )
    is_leader = Column(Boolean, nullable=False, default=False)
    joined_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())

    group = relationship("Group", back_populates="members")
    student = relationship("Student", back_populates="memberships")
