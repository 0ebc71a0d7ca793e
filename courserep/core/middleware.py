import logging
import time
import uuid
from typing import Callable, Iterable

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from courserep.core.logging_utils import error_tracker

logger = logging.getLogger(__name__)

UNLOGGED_PATHS = ("/health", "/docs", "/openapi.json", "/redoc", "/favicon.ico")

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


def client_ip(request: Request) -> str:
    """First hop of X-Forwarded-For, then X-Real-IP, then the socket peer"""
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.headers.get("x-real-ip") or (
        request.client.host if request.client else "unknown"
    )


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    One log line per request, tagged with a short X-Request-ID.

    Requests slower than slow_request_threshold seconds are logged as
    warnings and 5xx responses go to the error tracker.
    """

    def __init__(
        self,
        app: ASGIApp,
        slow_request_threshold: float = 1.0,
        unlogged_paths: Iterable[str] = UNLOGGED_PATHS,
    ):
        super().__init__(app)
        self.slow_request_threshold = slow_request_threshold
        self.unlogged_paths = frozenset(unlogged_paths)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in self.unlogged_paths:
            return await call_next(request)

        request_id = uuid.uuid4().hex[:8]
        request.state.request_id = request_id
        route = f"{request.method} {request.url.path}"
        context = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "client_ip": client_ip(request),
        }
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            context["duration_ms"] = round((time.perf_counter() - started) * 1000, 2)
            context["error_type"] = type(e).__name__
            logger.error(f"Request failed: {route}", extra=context)
            raise

        duration = time.perf_counter() - started
        context.update(
            status_code=response.status_code, duration_ms=round(duration * 1000, 2)
        )

        if duration > self.slow_request_threshold:
            logger.warning(f"Slow request: {route}", extra=context)
        else:
            logger.info(f"Request completed: {route}", extra=context)

        if response.status_code >= 500:
            error_tracker.track_error(
                f"HTTP_{response.status_code}", f"{route} returned {response.status_code}", context
            )

        response.headers["X-Request-ID"] = request_id
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response


def setup_middleware(
    app: FastAPI,
    slow_request_threshold: float = 1.0,
    unlogged_paths: Iterable[str] = UNLOGGED_PATHS,
):
    # Added last, so request logging is the outermost layer
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        RequestLoggingMiddleware,
        slow_request_threshold=slow_request_threshold,
        unlogged_paths=unlogged_paths,
    )
    logger.info("Middleware configured")
