import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError

from courserep.core.config import Settings
from courserep.core.database import DatabaseManager
from courserep.core.dependencies import get_app_settings
from courserep.core.error_handlers import setup_exception_handlers
from courserep.core.init_db import init_database
from courserep.core.limits import limiter, rate_limit_handler
from courserep.core.logging_utils import error_tracker, log_business_event, setup_logging
from courserep.core.middleware import setup_middleware
from courserep.core.security import AccessTokenManager
from courserep.staff.routers import (
    assignments_router,
    attendance_router as staff_attendance_router,
    calendar_router,
    chat_router,
    courses_router,
    events_router,
    feedback_router,
    groups_router,
    lecturers_router,
    notifications_router,
    reports_router,
    students_router,
)
from courserep.staff.services.attendance_session import AttendanceSessionService
from courserep.students.routers import (
    attendance_router as student_attendance_router,
    auth_router,
)

logger = logging.getLogger(__name__)

ROUTERS = (
    students_router,
    lecturers_router,
    courses_router,
    groups_router,
    events_router,
    assignments_router,
    notifications_router,
    feedback_router,
    chat_router,
    calendar_router,
    reports_router,
    staff_attendance_router,
    student_attendance_router,
    auth_router,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: database up on startup, pool disposed on shutdown"""
    settings: Settings = app.state.settings
    db_manager: DatabaseManager = app.state.db

    logger.info(f"Starting {settings.app_name} v{settings.app_version}")

    try:
        await init_database(db_manager)

        log_business_event(
            "application_started",
            "system",
            None,
            {"version": settings.app_version, "environment": settings.environment},
        )
        logger.info("Application startup completed")

    except Exception as e:
        logger.error(f"Application startup failed: {str(e)}")
        error_tracker.track_error(
            "STARTUP_ERROR",
            str(e),
            {"component": "application_startup", "version": settings.app_version},
        )
        raise

    yield

    logger.info("Shutting down application...")
    await db_manager.close_connections()
    logger.info("Application shutdown completed")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application around one Settings object.

    Run with: uvicorn courserep.main:create_app --factory
    """
    settings = settings or Settings.from_env()
    settings.validate()

    setup_logging(settings.log_level, settings.log_format)

    app = FastAPI(
        title=settings.app_name,
        description="Course representative backend: attendance, coursework and class communication",
        version=settings.app_version,
        lifespan=lifespan,
        debug=settings.debug,
    )

    app.state.settings = settings
    app.state.db = DatabaseManager(settings)
    app.state.access_tokens = AccessTokenManager(settings)
    app.state.attendance_service = AttendanceSessionService.from_settings(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_exception_handlers(app)

    setup_middleware(app, slow_request_threshold=5.0)

    limiter.enabled = settings.rate_limit_enabled
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)

    for router in ROUTERS:
        app.include_router(router, prefix=settings.api_prefix)

    @app.get("/health", tags=["Health"])
    async def health_check(
        request: Request, app_settings: Settings = Depends(get_app_settings)
    ):
        """Liveness plus a single database round trip"""
        database = "ok"
        try:
            async with request.app.state.db.engine.connect() as conn:
                await conn.exec_driver_sql("SELECT 1")
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Health check database failure: {str(e)}")
            database = "unavailable"

        return {
            "success": database == "ok",
            "message": "Service is healthy" if database == "ok" else "Database unavailable",
            "data": {
                "version": app_settings.app_version,
                "environment": app_settings.environment,
                "database": database,
                "totalErrors": error_tracker.get_stats()["total_errors"],
            },
        }

    return app
