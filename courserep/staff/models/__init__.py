from courserep.core.database import Base
from courserep.core.identifiers import IdSequence
from .lecturers import Lecturer
from .courses import Course
from .students import Student, StudentStatus
from .groups import Group, GroupMember
from .events import Event
from .assignments import Assignment, Submission
from .notifications import Notification
from .feedback import Feedback
from .chat import Conversation, ConversationParticipant, ConversationType, Message
from .attendance import (
    AttendanceInstance,
    AttendanceRecord,
    AttendanceLog,
    AttendanceStatus,
    ClassType,
    SecurityLog,
)

__all__ = [
    "Base",
    "IdSequence",
    "Lecturer",
    "Course",
    "Student",
    "StudentStatus",
    "Group",
    "GroupMember",
    "Event",
    "Assignment",
    "Submission",
    "Notification",
    "Feedback",
    "Conversation",
    "ConversationParticipant",
    "ConversationType",
    "Message",
    "AttendanceInstance",
    "AttendanceRecord",
    "AttendanceLog",
    "AttendanceStatus",
    "ClassType",
    "SecurityLog",
]
