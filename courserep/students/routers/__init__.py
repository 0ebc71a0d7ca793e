"""Student Routers Package"""
from .attendance import router as attendance_router
from .auth import router as auth_router

__all__ = [
    "attendance_router",
    "auth_router",
]
