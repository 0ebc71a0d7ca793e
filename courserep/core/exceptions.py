"""
Application exceptions, shaped into the JSON envelope by error_handlers
"""

from typing import Optional, Dict, Any, Iterable


class BaseAppException(Exception):
    """Base application exception"""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


# === Validation errors ===
class ValidationError(BaseAppException):
    """Malformed input"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, 400, "VALIDATION_ERROR", details)


class MissingFieldsError(BaseAppException):
    """Required input is absent"""

    def __init__(self, message: str, fields: Optional[Iterable[str]] = None):
        details = {"fields": list(fields)} if fields else {}
        super().__init__(message, 409, "MISSING_FIELDS", details)


# === Resource errors ===
class NotFoundError(BaseAppException):
    """Resource not found"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, 404, "NOT_FOUND", details)


class EmptyResultError(BaseAppException):
    """A listing returned no rows"""

    def __init__(self, message: str, status_code: int = 404):
        super().__init__(message, status_code, "EMPTY_RESULT")


class ConflictError(BaseAppException):
    """Request conflicts with the current state of the resource"""

    def __init__(
        self,
        message: str,
        status_code: int = 409,
        error_code: str = "CONFLICT",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, status_code, error_code, details)


class DuplicateError(ConflictError):
    """Duplicate data"""

    def __init__(self, resource: str, field: str, value: str):
        message = f"{resource} with {field} '{value}' already exists"
        details = {"resource": resource, "field": field, "value": value}
        super().__init__(message, 409, "DUPLICATE_ERROR", details)


class AlreadyClosedError(ConflictError):
    def __init__(self, message: str = "Attendance already closed"):
        super().__init__(message, 401, "ALREADY_CLOSED")


class AlreadyMarkedError(ConflictError):
    def __init__(self, message: str = "Attendance already marked"):
        super().__init__(message, 409, "ALREADY_MARKED")


# === Authentication / token errors ===
class AuthenticationError(BaseAppException):
    """Authentication failed"""

    def __init__(
        self,
        message: str = "Authentication failed",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, 401, "AUTHENTICATION_ERROR", details)


class AuthTokenError(BaseAppException):
    """Base for signed attendance token failures"""

    def __init__(self, message: str, status_code: int, error_code: str):
        super().__init__(message, status_code, error_code)


class InvalidTokenError(AuthTokenError):
    def __init__(self, message: str = "Invalid attendance token"):
        super().__init__(message, 401, "INVALID_TOKEN")


class ExpiredTokenError(AuthTokenError):
    def __init__(self, message: str = "Attendance token has expired"):
        super().__init__(message, 410, "EXPIRED_TOKEN")


class MalformedPayloadError(AuthTokenError):
    def __init__(self, message: str = "Invalid attendance token payload"):
        super().__init__(message, 400, "MALFORMED_PAYLOAD")


class TokenMismatchError(AuthTokenError):
    def __init__(self, message: str = "Invalid attendance token"):
        super().__init__(message, 401, "TOKEN_MISMATCH")


class SessionClosedError(AuthTokenError):
    def __init__(self, message: str = "Attendance session is closed"):
        super().__init__(message, 410, "SESSION_CLOSED")


class SessionExpiredError(AuthTokenError):
    def __init__(self, message: str = "Attendance session has expired"):
        super().__init__(message, 410, "SESSION_EXPIRED")


# === Location errors ===
class LocationError(BaseAppException):
    """Location verification failed"""

    def __init__(
        self,
        message: str,
        status_code: int = 403,
        error_code: str = "LOCATION_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, status_code, error_code, details)


class LocationRequiredError(LocationError):
    def __init__(self, message: str = "Location coordinates are required"):
        super().__init__(message, 409, "LOCATION_REQUIRED")


class OutOfRangeError(LocationError):
    def __init__(self, distance: int, radius: float):
        message = f"You must be within {radius:g}m of the classroom ({distance}m away)"
        details = {"distance": distance, "radius": radius}
        super().__init__(message, 403, "OUT_OF_RANGE", details)


# === Internal errors ===
class InternalError(BaseAppException):
    """Unexpected failure, message is safe to show to clients"""

    def __init__(self, message: str = "An unexpected error occurred"):
        super().__init__(message, 500, "INTERNAL_ERROR")


class DatabaseError(BaseAppException):
    """Database failure"""

    def __init__(
        self,
        message: str = "Database operation failed",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, 500, "DATABASE_ERROR", details)


class DatabaseConnectionError(BaseAppException):
    """Database connection failure"""

    def __init__(self, message: str = "Database connection failed"):
        super().__init__(message, 503, "DATABASE_CONNECTION_ERROR")


class DatabaseIntegrityError(BaseAppException):
    """Integrity constraint violation"""

    def __init__(self, constraint: str, details: Optional[Dict[str, Any]] = None):
        message = f"Database integrity constraint violated: {constraint}"
        error_details = {"constraint": constraint}
        if details:
            error_details.update(details)
        super().__init__(message, 409, "DATABASE_INTEGRITY_ERROR", error_details)


# === Configuration errors ===
class ConfigurationError(BaseAppException):
    """Configuration error"""

    def __init__(self, parameter: str, message: str = None):
        message = (
            message or f"Configuration parameter '{parameter}' is invalid or missing"
        )
        details = {"parameter": parameter}
        super().__init__(message, 500, "CONFIGURATION_ERROR", details)
