"""Student Schemas Package"""
from .attendance import (
    AutoMarkRequest,
    AutoMarkResult,
    CodeResolution,
)

from .auth import (
    LoginRequest,
    TokenRead,
    CurrentUser,
)

__all__ = [
    # Attendance
    "AutoMarkRequest",
    "AutoMarkResult",
    "CodeResolution",
    # Auth
    "LoginRequest",
    "TokenRead",
    "CurrentUser",
]
