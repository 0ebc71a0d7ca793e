"""Student CRUD Package"""
from .auth import (
    authenticate_student,
    get_authenticated_student,
)

__all__ = [
    # Auth
    "authenticate_student",
    "get_authenticated_student",
]
