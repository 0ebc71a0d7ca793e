from datetime import datetime
from typing import List, Optional

from pydantic import Field

from courserep.core.responses import CamelModel, InputModel


class GroupCreate(InputModel):
    name: str = Field(..., min_length=1, max_length=150)
    course_id: Optional[str] = Field(None, max_length=30)
    is_general: bool = False
    description: Optional[str] = Field(None, max_length=1000)


class GroupUpdate(InputModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    course_id: Optional[str] = Field(None, max_length=30)
    is_general: Optional[bool] = None
    description: Optional[str] = Field(None, max_length=1000)


class GroupMemberAdd(InputModel):
    student_id: str = Field(..., min_length=1)
    is_leader: bool = False


class GroupMemberRead(CamelModel):
    student_id: str
    name: Optional[str] = None
    email: Optional[str] = None
    is_leader: bool
    joined_at: Optional[datetime] = None


class GroupRead(CamelModel):
    group_id: str
    name: str
    course_id: Optional[str] = None
    is_general: bool
    description: Optional[str] = None
    member_count: int = 0
    created_at: Optional[datetime] = None


class GroupDetail(GroupRead):
    members: List[GroupMemberRead] = []
