"""
Central exception handlers producing the failure envelope:

    {"success": false, "message": ..., "error": CODE, "details": {...}}
"""

import logging
import re
import traceback
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import (
    DisconnectionError,
    IntegrityError,
    OperationalError,
    SQLAlchemyError,
)

from courserep.core.exceptions import (
    BaseAppException,
    DatabaseConnectionError,
    DatabaseError,
    DatabaseIntegrityError,
)
from courserep.core.logging_utils import error_tracker

logger = logging.getLogger(__name__)

_CONSTRAINT_PATTERN = re.compile(r'constraint "([^"]+)"')


def error_body(
    message: str, error_code: str, details: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    return {
        "success": False,
        "message": message,
        "error": error_code,
        "details": details or {},
    }


def error_response(
    status_code: int,
    message: str,
    error_code: str,
    details: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(error_body(message, error_code, details)),
        headers=headers,
    )


def _request_context(request: Request, **extra) -> Dict[str, Any]:
    context = {
        "path": request.url.path,
        "method": request.method,
        "request_id": getattr(request.state, "request_id", None),
    }
    context.update(extra)
    return context


async def app_exception_handler(request: Request, exc: BaseAppException) -> JSONResponse:
    level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    logger.log(
        level,
        f"{exc.error_code}: {exc.message}",
        extra=_request_context(
            request, status_code=exc.status_code, details=exc.details
        ),
    )
    return error_response(exc.status_code, exc.message, exc.error_code, exc.details)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    # Unknown routes and wrong methods land here
    logger.warning(
        f"HTTP {exc.status_code}: {exc.detail}",
        extra=_request_context(request, status_code=exc.status_code),
    )
    return error_response(
        exc.status_code,
        str(exc.detail),
        "HTTP_ERROR",
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Only missing fields: 409 MISSING_FIELDS with the field names.
    Anything else malformed: 400 VALIDATION_ERROR with one entry per problem.
    """
    problems = []
    missing = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(
            {
                "field": field,
                "message": error.get("msg", "Validation error"),
                "type": error.get("type", "value_error"),
            }
        )
        if error.get("type") == "missing":
            missing.append(field)

    logger.warning(
        f"Validation error on {len(problems)} field(s)",
        extra=_request_context(request, errors=problems),
    )

    if missing and len(missing) == len(problems):
        return error_response(
            status.HTTP_409_CONFLICT,
            f"Missing required fields: {', '.join(missing)}",
            "MISSING_FIELDS",
            {"fields": missing},
        )

    return error_response(
        status.HTTP_400_BAD_REQUEST,
        f"Validation failed for {len(problems)} field(s)",
        "VALIDATION_ERROR",
        {"fields": problems},
    )


def _constraint_name(exc: IntegrityError) -> str:
    name = getattr(exc.orig, "constraint_name", None)
    if name:
        return name
    match = _CONSTRAINT_PATTERN.search(str(exc.orig))
    return match.group(1) if match else "unknown"


async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Translate driver errors into app errors without leaking SQL"""
    if isinstance(exc, IntegrityError):
        app_exc = DatabaseIntegrityError(_constraint_name(exc))
    elif isinstance(exc, (OperationalError, DisconnectionError)):
        app_exc = DatabaseConnectionError("Database service is temporarily unavailable")
    else:
        app_exc = DatabaseError("An unexpected database error occurred")

    logger.error(
        f"Database exception: {type(exc).__name__}",
        extra=_request_context(request, error=str(exc), traceback=traceback.format_exc()),
    )
    return await app_exception_handler(request, app_exc)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: log everything, leak nothing"""
    context = _request_context(request)
    logger.error(
        f"Unhandled exception: {type(exc).__name__} - {exc}",
        extra=dict(context, traceback=traceback.format_exc()),
    )
    error_tracker.track_error(f"UNHANDLED_{type(exc).__name__}", str(exc), context)

    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "An unexpected error occurred",
        "INTERNAL_SERVER_ERROR",
    )


def setup_exception_handlers(app: FastAPI):
    app.add_exception_handler(BaseAppException, app_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
