import asyncio
import logging

from sqlalchemy import inspect

from courserep.core.config import Settings
from courserep.core.database import Base, DatabaseManager
from courserep.core.exceptions import ConfigurationError, DatabaseError

# Registers every table on Base.metadata
import courserep.staff.models  # noqa: F401

logger = logging.getLogger(__name__)


async def init_database(db_manager: DatabaseManager):
    """Check connectivity, then create any missing tables"""
    try:
        logger.info("Starting database initialization...")

        await db_manager.check_connection()
        logger.info("Database connection verified")

        await db_manager.create_tables()
        logger.info("Database initialization completed successfully")

    except (DatabaseError, ConfigurationError):
        raise
    except Exception as e:
        logger.error(f"Unexpected error during database initialization: {e}")
        raise DatabaseError(f"Database initialization failed: {str(e)}")


async def verify_database_setup(db_manager: DatabaseManager) -> bool:
    """Every mapped table exists"""
    async with db_manager.engine.connect() as conn:
        existing = await conn.run_sync(
            lambda sync_conn: set(inspect(sync_conn).get_table_names())
        )

    missing = sorted(set(Base.metadata.tables) - existing)
    if missing:
        raise DatabaseError(
            "Database verification failed", {"missing_tables": missing}
        )

    logger.info(f"Database verification passed: {len(existing)} tables found")
    return True


async def reset_database(db_manager: DatabaseManager):
    """Drop and recreate everything (development/testing only)"""
    if db_manager.settings.environment not in ("development", "dev", "test"):
        raise ConfigurationError(
            "ENVIRONMENT",
            "Database reset is only allowed in development or test environments",
        )

    logger.warning("RESETTING DATABASE - ALL DATA WILL BE LOST!")
    await db_manager.drop_tables()
    await init_database(db_manager)
    logger.info("Database reset completed")


if __name__ == "__main__":
    import sys

    async def main():
        settings = Settings.from_env()
        db_manager = DatabaseManager(settings)
        command = sys.argv[1] if len(sys.argv) > 1 else "init"

        try:
            if command == "init":
                await init_database(db_manager)
            elif command == "verify":
                await verify_database_setup(db_manager)
            elif command == "reset":
                await reset_database(db_manager)
            else:
                print(f"Unknown command: {command}")
                print("Available commands: init, verify, reset")
                sys.exit(1)
        finally:
            await db_manager.close_connections()

    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Database initialization cancelled by user")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        sys.exit(1)
