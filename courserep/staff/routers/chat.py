from typing import List

from fastapi import APIRouter, Depends, Path, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from courserep.core.database import get_session
from courserep.core.limits import limiter
from courserep.core.responses import ApiResponse, ok
from courserep.staff.crud.chat import (
    create_conversation,
    get_conversation_messages,
    get_or_create_course_chat,
    get_user_conversations,
    send_message,
)
from courserep.staff.models import Conversation
from courserep.staff.schemas.chat import (
    ConversationCreate,
    ConversationRead,
    MessageCreate,
    MessageRead,
)

router = APIRouter(prefix="/chat", tags=["Chat"])


def conversation_read(conversation: Conversation, last_message=None) -> ConversationRead:
    return ConversationRead(
        conversation_id=conversation.conversation_id,
        title=conversation.title,
        type=conversation.type,
        course_id=conversation.course_id,
        participants=[p.user_id for p in conversation.participants],
        last_message=MessageRead.model_validate(last_message) if last_message else None,
        created_at=conversation.created_at,
    )


@router.get("/conversations/{user_id}", response_model=ApiResponse[List[ConversationRead]])
@limiter.limit("60/minute")
async def list_user_conversations(
    request: Request,
    user_id: str = Path(..., description="Student or lecturer ID"),
    db: AsyncSession = Depends(get_session),
):
    """Conversations of a user with their last message, most recent first"""
    pairs = await get_user_conversations(db, user_id)
    return ok(
        "Conversations retrieved successfully",
        [conversation_read(c, last) for c, last in pairs],
    )


@router.get("/messages/{conversation_id}", response_model=ApiResponse[List[MessageRead]])
@limiter.limit("120/minute")
async def list_messages(
    request: Request,
    conversation_id: str = Path(..., description="Conversation ID"),
    limit: int = Query(50, ge=1, le=200, description="Messages per page"),
    offset: int = Query(0, ge=0, description="Messages to skip, counted from the newest"),
    db: AsyncSession = Depends(get_session),
):
    messages = await get_conversation_messages(db, conversation_id, limit, offset)
    return ok(
        "Messages retrieved successfully",
        [MessageRead.model_validate(m) for m in messages],
    )


@router.post("/messages", response_model=ApiResponse[MessageRead], status_code=status.HTTP_201_CREATED)
@limiter.limit("60/minute")
async def post_message(
    request: Request,
    message: MessageCreate,
    db: AsyncSession = Depends(get_session),
):
    db_message = await send_message(db, message)
    return ok("Message sent successfully", MessageRead.model_validate(db_message))


@router.post(
    "/conversations",
    response_model=ApiResponse[ConversationRead],
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit("10/minute")
async def create_new_conversation(
    request: Request,
    conversation: ConversationCreate,
    db: AsyncSession = Depends(get_session),
):
    db_conversation = await create_conversation(db, conversation)
    return ok("Conversation created successfully", conversation_read(db_conversation))


@router.get("/course-chat/{course_id}", response_model=ApiResponse[ConversationRead])
@limiter.limit("30/minute")
async def course_chat(
    request: Request,
    course_id: str = Path(..., description="Course ID"),
    db: AsyncSession = Depends(get_session),
):
    """The course-wide conversation, created on first access"""
    conversation = await get_or_create_course_chat(db, course_id)
    return ok("Course chat retrieved successfully", conversation_read(conversation))
