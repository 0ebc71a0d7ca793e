from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from courserep.core.database import db_operation
from courserep.core.exceptions import ConflictError, EmptyResultError, NotFoundError
from courserep.core.identifiers import generate_id
from courserep.staff.models import (
    Conversation,
    ConversationParticipant,
    ConversationType,
    Course,
    Message,
    Student,
)
from courserep.staff.schemas.chat import ConversationCreate, MessageCreate


@db_operation
async def get_conversation_by_id(session: AsyncSession, conversation_id: str):
    result = await session.execute(
        select(Conversation)
        .options(selectinload(Conversation.participants))
        .where(Conversation.conversation_id == conversation_id)
    )
    conversation = result.scalar_one_or_none()

    if not conversation:
        raise NotFoundError("Conversation not found", {"conversationId": conversation_id})

    return conversation


@db_operation
async def get_last_message(session: AsyncSession, conversation_id: str) -> Optional[Message]:
    result = await session.execute(
        select(Message)
        .where(Message.conversation_id == conversation_id)
        .order_by(Message.created_at.desc(), Message.message_id.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


@db_operation
async def get_user_conversations(session: AsyncSession, user_id: str):
    """Conversations the user takes part in, paired with their last message"""
    result = await session.execute(
        select(Conversation)
        .join(
            ConversationParticipant,
            ConversationParticipant.conversation_id == Conversation.conversation_id,
        )
        .options(selectinload(Conversation.participants))
        .where(ConversationParticipant.user_id == user_id)
        .order_by(Conversation.created_at.desc())
    )
    conversations = result.scalars().unique().all()

    if not conversations:
        raise EmptyResultError("No conversations found")

    pairs = []
    for conversation in conversations:
        last_message = await get_last_message(session, conversation.conversation_id)
        pairs.append((conversation, last_message))

    # Most recently active first
    pairs.sort(
        key=lambda pair: (pair[1] or pair[0]).created_at,
        reverse=True,
    )
    return pairs


@db_operation
async def get_conversation_messages(
    session: AsyncSession, conversation_id: str, limit: int = 50, offset: int = 0
) -> List[Message]:
    """A page counted back from the newest message, returned oldest first"""
    await get_conversation_by_id(session, conversation_id)

    result = await session.execute(
        select(Message)
        .where(Message.conversation_id == conversation_id)
        .order_by(Message.created_at.desc(), Message.message_id.desc())
        .offset(offset)
        .limit(limit)
    )
    messages = list(result.scalars().all())
    messages.reverse()
    return messages


@db_operation
async def send_message(session: AsyncSession, data: MessageCreate):
    conversation = await get_conversation_by_id(session, data.conversation_id)

    if data.sender_id not in {p.user_id for p in conversation.participants}:
        raise ConflictError(
            "Sender is not a participant of this conversation",
            status_code=403,
            error_code="NOT_A_PARTICIPANT",
            details={"senderId": data.sender_id},
        )

    message = Message(
        message_id=await generate_id(session, "MSG"),
        conversation_id=data.conversation_id,
        sender_id=data.sender_id,
        content=data.content,
    )
    session.add(message)
    await session.commit()
    await session.refresh(message)
    return message


async def _create_conversation(
    session: AsyncSession,
    title: str,
    conversation_type: str,
    participants: List[str],
    course_id: Optional[str] = None,
) -> str:
    conversation_id = await generate_id(session, "CNV")
    session.add(
        Conversation(
            conversation_id=conversation_id,
            title=title,
            type=conversation_type,
            course_id=course_id,
        )
    )
    for user_id in participants:
        session.add(
            ConversationParticipant(conversation_id=conversation_id, user_id=user_id)
        )
    await session.commit()
    return conversation_id


@db_operation
async def create_conversation(session: AsyncSession, data: ConversationCreate):
    if data.course_id and await session.get(Course, data.course_id) is None:
        raise NotFoundError("Course not found", {"courseId": data.course_id})

    conversation_id = await _create_conversation(
        session, data.title, data.type.value, data.participants, data.course_id
    )
    return await get_conversation_by_id(session, conversation_id)


@db_operation
async def get_or_create_course_chat(session: AsyncSession, course_id: str):
    """The single course-wide conversation: the lecturer plus every student"""
    course = await session.get(Course, course_id)
    if course is None:
        raise NotFoundError("Course not found", {"courseId": course_id})

    result = await session.execute(
        select(Conversation.conversation_id).where(
            Conversation.course_id == course_id,
            Conversation.type == ConversationType.course.value,
        )
    )
    conversation_id = result.scalars().first()

    if conversation_id is None:
        students = await session.execute(
            select(Student.student_id)
            .where(Student.course_id == course_id)
            .order_by(Student.student_id)
        )
        participants = list(students.scalars().all())
        if course.lecturer_id:
            participants.insert(0, course.lecturer_id)

        conversation_id = await _create_conversation(
            session,
            f"{course.course_name} Chat",
            ConversationType.course.value,
            participants,
            course_id,
        )

    return await get_conversation_by_id(session, conversation_id)
