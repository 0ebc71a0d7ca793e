import logging
from datetime import datetime, timezone
from functools import wraps
from typing import Callable, TypeVar, Any, AsyncGenerator, Optional

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import text
from sqlalchemy.exc import (
    SQLAlchemyError,
    OperationalError,
    DisconnectionError,
    TimeoutError,
)
from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from .config import Settings
from .exceptions import DatabaseConnectionError

logger = logging.getLogger(__name__)

Base = declarative_base()

F = TypeVar("F", bound=Callable[..., Any])

RETRYABLE_ERRORS = (OperationalError, DisconnectionError, TimeoutError, OSError)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # ON DELETE rules are ignored by SQLite unless switched on per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseManager:
    """Owns the engine and session factory for one application instance"""

    def __init__(self, settings: Settings):
        self.settings = settings
        engine_kwargs = {"echo": False, "pool_pre_ping": True}
        if not settings.database_url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                pool_timeout=30,
                pool_recycle=3600,
            )
        self.engine = create_async_engine(settings.database_url, **engine_kwargs)
        if self.engine.dialect.name == "sqlite":
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    async def create_tables(self):
        """Create all tables"""
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("Database tables created successfully")
        except Exception as e:
            logger.error(f"Failed to create database tables: {str(e)}")
            raise

    async def drop_tables(self):
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        logger.warning("All database tables dropped")

    async def check_connection(self) -> bool:
        """
        Check database connectivity, retrying with exponential backoff.

        This is the only retried database call; request handlers never retry.
        """
        settings = self.settings
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(settings.db_retry_attempts),
                wait=wait_exponential(
                    multiplier=settings.db_retry_delay,
                    exp_base=settings.db_retry_backoff_factor,
                ),
                retry=retry_if_exception_type(RETRYABLE_ERRORS),
                reraise=False,
            ):
                with attempt:
                    if attempt.retry_state.attempt_number > 1:
                        logger.warning(
                            f"Retrying database connection check "
                            f"(attempt {attempt.retry_state.attempt_number}/"
                            f"{settings.db_retry_attempts})"
                        )
                    async with self.engine.connect() as conn:
                        await conn.execute(text("SELECT 1"))
        except RetryError as e:
            logger.error(
                f"Database connection check failed after "
                f"{settings.db_retry_attempts} attempts: {e.last_attempt.exception()}"
            )
            raise DatabaseConnectionError("Database connection check failed")
        except SQLAlchemyError as e:
            logger.error(f"Database connection check failed: {str(e)}")
            raise DatabaseConnectionError("Database connection check failed")

        logger.info("Database connection check successful")
        return True

    async def close_connections(self):
        """Dispose of pooled connections"""
        try:
            await self.engine.dispose()
            logger.info("Database connections closed successfully")
        except Exception as e:
            logger.error(f"Error closing database connections: {str(e)}")


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Dependency yielding one session per request"""
    db_manager: DatabaseManager = request.app.state.db
    session = db_manager.session_factory()
    try:
        yield session
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(f"Session error: {str(e)}")
        raise
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


async def with_db_transaction(
    session: AsyncSession, operation: Callable, *args, **kwargs
):
    """
    Run operation(session, ...) as one transaction: commit when it returns,
    roll back and re-raise when it fails.
    """
    try:
        result = await operation(session, *args, **kwargs)
        await session.commit()
    except Exception as e:
        await session.rollback()
        logger.warning(f"Transaction rolled back: {type(e).__name__}: {e}")
        raise
    return result


def db_operation(func: F) -> F:
    """
    Decorator for CRUD functions: debug tracing and error logging
    """

    @wraps(func)
    async def wrapper(*args, **kwargs):
        operation_name = func.__name__

        try:
            logger.debug(f"Starting database operation: {operation_name}")
            result = await func(*args, **kwargs)
            logger.debug(f"Database operation completed: {operation_name}")
            return result

        except SQLAlchemyError as e:
            logger.error(
                f"SQLAlchemy error in {operation_name}: {str(e)}",
                extra={"operation": operation_name, "exception_type": type(e).__name__},
            )
            raise

    return wrapper


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive datetimes; treat them as UTC"""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)
