import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded

from courserep.core.error_handlers import error_response
from courserep.core.middleware import client_ip

logger = logging.getLogger(__name__)

# A whole class scans from one lecture hall, usually behind a single NAT
CLASSROOM_LIMIT = "600/minute"


def session_scan_key(request: Request) -> str:
    """Client address plus the session token, so each session gets its own bucket"""
    return f"{client_ip(request)}:{request.query_params.get('token', '')}"


def display_code_key(request: Request) -> str:
    return f"{client_ip(request)}:{request.path_params.get('code', '')}"


# Shared by every router; create_app switches it on or off from settings
limiter = Limiter(key_func=client_ip)


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning(
        f"Rate limit exceeded: {request.method} {request.url.path}",
        extra={"limit": str(exc.detail), "client": client_ip(request)},
    )
    return error_response(
        429, f"Rate limit exceeded: {exc.detail}", "RATE_LIMIT_EXCEEDED"
    )
