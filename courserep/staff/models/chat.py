from enum import Enum

from sqlalchemy import (
    Column,
    String,
    Text,
    DateTime,
    ForeignKey,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from courserep.core.database import Base, utcnow


class ConversationType(str, Enum):
    direct = "direct"
    group = "group"
    course = "course"


class Conversation(Base):
    __tablename__ = "conversations"

    conversation_id = Column(String(30), primary_key=True)
    title = Column(String(200), nullable=False)
    type = Column(String(20), nullable=False, default=ConversationType.group.value)
    course_id = Column(
        String(30),
        ForeignKey("courses.course_id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())

    participants = relationship(
        "ConversationParticipant",
        back_populates="conversation",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class ConversationParticipant(Base):
    __tablename__ = "conversation_participants"
    conversation_id = Column(
        String(30),
        ForeignKey("conversations.conversation_id", ondelete="CASCADE"),
        primary_key=True,
    )
    # Either a studentId or a lecturerId
    user_id = Column(String(30), primary_key=True)
    joined_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())

    conversation = relationship("Conversation", back_populates="participants")


class Message(Base):
    __tablename__ = "messages"

    message_id = Column(String(30), primary_key=True)
    conversation_id = Column(
        String(30),
        ForeignKey("conversations.conversation_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sender_id = Column(String(30), nullable=False, index=True)
    content = Column(Text, nullable=False)

    created_at = Column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), index=True
    )
