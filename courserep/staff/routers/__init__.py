"""Staff Routers Package"""
from .students import router as students_router
from .lecturers import router as lecturers_router
from .courses import router as courses_router
from .groups import router as groups_router
from .events import router as events_router
from .assignments import router as assignments_router
from .notifications import router as notifications_router
from .feedback import router as feedback_router
from .chat import router as chat_router
from .calendar import router as calendar_router
from .reports import router as reports_router
from .attendance import router as attendance_router

__all__ = [
    "students_router",
    "lecturers_router",
    "courses_router",
    "groups_router",
    "events_router",
    "assignments_router",
    "notifications_router",
    "feedback_router",
    "chat_router",
    "calendar_router",
    "reports_router",
    "attendance_router",
]
