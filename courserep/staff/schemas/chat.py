from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from courserep.core.responses import CamelModel, InputModel
from courserep.staff.models.chat import ConversationType


class ConversationCreate(InputModel):
    title: str = Field(..., min_length=1, max_length=200)
    type: ConversationType = ConversationType.group
    course_id: Optional[str] = Field(None, max_length=30)
    participants: List[str] = Field(..., min_length=1)

    @field_validator("participants")
    @classmethod
    def unique_participants(cls, v):
        # Preserve order, drop blanks and repeats
        seen = []
        for user_id in v:
            user_id = user_id.strip()
            if user_id and user_id not in seen:
                seen.append(user_id)
        if not seen:
            raise ValueError("At least one participant is required")
        return seen


class MessageCreate(InputModel):
    conversation_id: str = Field(..., min_length=1)
    sender_id: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1, max_length=5000)


class MessageRead(CamelModel):
    message_id: str
    conversation_id: str
    sender_id: str
    content: str
    created_at: Optional[datetime] = None


class ConversationRead(CamelModel):
    conversation_id: str
    title: str
    type: str
    course_id: Optional[str] = None
    participants: List[str] = []
    last_message: Optional[MessageRead] = None
    created_at: Optional[datetime] = None
