import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes", "on")


def _build_database_url() -> str:
    explicit = os.getenv("DATABASE_URL")
    if explicit:
        return explicit

    # PostgreSQL settings
    user = os.getenv("POSTGRES_USER", "postgres")
    password = os.getenv("POSTGRES_PASSWORD", "postgres")
    db = os.getenv("POSTGRES_DB", "courserep")
    host = os.getenv("POSTGRES_HOST", "db")
    port = os.getenv("POSTGRES_PORT", "5432")
    return f"postgresql+asyncpg://{user}:{password}@{host}:{port}/{db}"


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration, built once at startup and injected"""

    database_url: str
    jwt_secret: str

    environment: str = "production"

    # Attendance rules
    attendance_token_ttl_minutes: int = 15
    geofence_radius_meters: float = 50.0
    online_audit_probability: float = 0.2

    # Access tokens for /auth/login
    access_token_expire_minutes: int = 60

    # Database pool and startup retry
    db_pool_size: int = 20
    db_max_overflow: int = 10
    db_retry_attempts: int = 3
    db_retry_delay: float = 1.0
    db_retry_backoff_factor: float = 2.0

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    # HTTP
    app_name: str = "Course Representative API"
    app_version: str = "1.0.0"
    api_prefix: str = ""
    rate_limit_enabled: bool = True
    cors_origins: List[str] = field(default_factory=lambda: ["http://localhost:3000"])

    @property
    def debug(self) -> bool:
        return self.environment in ("development", "dev")

    @classmethod
    def from_env(cls) -> "Settings":
        environment = os.getenv("ENVIRONMENT", "production").lower()
        debug = environment in ("development", "dev")
        origins = os.getenv("CORS_ORIGINS", "http://localhost:3000")

        return cls(
            database_url=_build_database_url(),
            jwt_secret=os.getenv("JWT_SECRET", ""),
            environment=environment,
            attendance_token_ttl_minutes=int(
                os.getenv("ATTENDANCE_TOKEN_TTL_MINUTES", "15")
            ),
            geofence_radius_meters=float(os.getenv("GEOFENCE_RADIUS_METERS", "50")),
            online_audit_probability=float(
                os.getenv("ONLINE_AUDIT_PROBABILITY", "0.2")
            ),
            access_token_expire_minutes=int(
                os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60")
            ),
            db_pool_size=int(os.getenv("DB_POOL_SIZE", "20")),
            db_max_overflow=int(os.getenv("DB_MAX_OVERFLOW", "10")),
            db_retry_attempts=int(os.getenv("DB_RETRY_ATTEMPTS", "3")),
            db_retry_delay=float(os.getenv("DB_RETRY_DELAY", "1.0")),
            db_retry_backoff_factor=float(os.getenv("DB_RETRY_BACKOFF_FACTOR", "2.0")),
            log_level=os.getenv("LOG_LEVEL", "INFO" if not debug else "DEBUG"),
            log_format=os.getenv("LOG_FORMAT", "json" if not debug else "text"),
            app_name=os.getenv("APP_NAME", "Course Representative API"),
            app_version=os.getenv("APP_VERSION", "1.0.0"),
            api_prefix=os.getenv("API_PREFIX", ""),
            rate_limit_enabled=_env_bool("RATE_LIMIT_ENABLED", "true"),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        )

    def validate(self) -> None:
        """Validate critical settings at startup"""
        errors = []

        if not self.jwt_secret:
            errors.append("JWT_SECRET is required")

        if not self.database_url:
            errors.append("DATABASE_URL is required")

        if self.attendance_token_ttl_minutes < 1:
            errors.append("ATTENDANCE_TOKEN_TTL_MINUTES must be >= 1")

        if self.geofence_radius_meters <= 0:
            errors.append("GEOFENCE_RADIUS_METERS must be > 0")

        if not 0 <= self.online_audit_probability <= 1:
            errors.append("ONLINE_AUDIT_PROBABILITY must be between 0 and 1")

        if self.db_retry_attempts < 1:
            errors.append("DB_RETRY_ATTEMPTS must be >= 1")

        if self.db_retry_delay < 0:
            errors.append("DB_RETRY_DELAY must be >= 0")

        if errors:
            raise ValueError(f"Configuration errors: {'; '.join(errors)}")


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()
