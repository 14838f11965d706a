"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - get_settings() is cached (lru_cache) — single instance per process
    - Settings are passed explicitly to the store and URL builder at construction;
      nothing reads configuration at call time
    - retention_days is the sliding expiry window applied on every write
"""

from datetime import datetime, timezone
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables (BUILDSHARE_ prefix)."""

    model_config = SettingsConfigDict(
        env_prefix="BUILDSHARE_", env_file=".env", case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = "postgresql+asyncpg://builds:builds@db:5432/builds"

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosted providers hand out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Links
    base_url: str = "https://mids.app"
    app_protocol: str = "mrb"

    # Record lifecycle
    retention_days: int = Field(default=30, ge=1)
    insert_retry_limit: int = Field(default=3, ge=1, le=10)
    search_timeout_seconds: float | None = Field(default=30.0, gt=0)

    # Identifier allocation
    snowflake_worker_id: int = Field(default=0, ge=0, le=1023)
    snowflake_epoch: datetime = datetime(2024, 1, 1, tzinfo=timezone.utc)
    allocation_max_attempts: int = Field(default=8, ge=1, le=64)

    @field_validator("snowflake_epoch")
    @classmethod
    def ensure_aware_epoch(cls, v: datetime) -> datetime:
        return v if v.tzinfo else v.replace(tzinfo=timezone.utc)

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
