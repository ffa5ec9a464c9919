"""Application configuration via environment variables.

Provides type-safe settings loading using pydantic-settings.
Environment variables can be loaded from a .env file.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings have sensible defaults for development.

    Environment Variables:
        DATABASE_URL: SQLAlchemy connection string
        CELERY_BROKER_URL: Celery broker (Redis in dev)
        CELERY_RESULT_BACKEND: Celery result backend
        LOG_LEVEL: Logging level (default INFO)
        LOG_JSON: Emit JSON log lines (default True)
        RETENTION_SWEEP_HOUR / RETENTION_SWEEP_MINUTE: Daily sweep time (UTC)
        RETENTION_PURGE_ENABLED: Allow the irreversible purge job to run
        RETENTION_PURGE_GRACE_DAYS: Days a soft-deleted record stays recoverable
        RETENTION_ANOMALY_THRESHOLD: Deleted-record count that triggers an alert
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Database
    DATABASE_URL: str = "sqlite:///./hoa_portal.db"

    # Celery
    CELERY_BROKER_URL: str = "redis://localhost:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/0"

    # Application
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    # Retention
    RETENTION_SWEEP_HOUR: int = Field(default=2, ge=0, le=23)
    RETENTION_SWEEP_MINUTE: int = Field(default=0, ge=0, le=59)
    RETENTION_PURGE_ENABLED: bool = False
    RETENTION_PURGE_GRACE_DAYS: int = Field(default=30, ge=0)
    RETENTION_ANOMALY_THRESHOLD: int = Field(default=10000, ge=0)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache for singleton behavior.
    Call get_settings.cache_clear() to reload settings.
    """
    return Settings()
