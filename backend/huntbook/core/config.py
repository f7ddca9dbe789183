"""Application configuration via pydantic settings."""

from functools import lru_cache
from pathlib import Path

from typing import Any

from pydantic import Field
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Typed application configuration."""

    app_env: str = Field("local", alias="APP_ENV")
    app_name: str = "Ranch Booking API"
    api_v1_prefix: str = "/api/v1"

    database_url: str = Field(..., alias="DATABASE_URL")
    sync_database_url: str | None = Field(default=None, alias="SYNC_DATABASE_URL")

    ranch_timezone: str = Field("America/Chicago", alias="RANCH_TIMEZONE")

    reservation_max_attempts: int = Field(5, ge=1, alias="RESERVATION_MAX_ATTEMPTS")
    reservation_retry_base_delay: float = Field(
        0.05, ge=0, alias="RESERVATION_RETRY_BASE_DELAY"
    )
    reservation_retry_max_delay: float = Field(
        1.0, ge=0, alias="RESERVATION_RETRY_MAX_DELAY"
    )
    availability_max_range_days: int = Field(
        366, ge=1, alias="AVAILABILITY_MAX_RANGE_DAYS"
    )

    admin_api_token: str | None = Field(default=None, alias="ADMIN_API_TOKEN")
    payment_callback_secret: str | None = Field(
        default=None, alias="PAYMENT_CALLBACK_SECRET"
    )
    payment_callback_verify: bool = Field(default=True, alias="PAYMENT_CALLBACK_VERIFY")

    redis_url: str | None = Field(default=None, alias="REDIS_URL")
    rate_limit_quote: str = Field("120/minute", alias="RATE_LIMIT_QUOTE")

    cors_allowlist: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173"], alias="CORS_ALLOWLIST"
    )
    cors_allow_credentials: bool = Field(default=False, alias="CORS_ALLOW_CREDENTIALS")

    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parents[3] / ".env",
        case_sensitive=False,
    )

    @field_validator("cors_allowlist", mode="before")
    @classmethod
    def _split_origins(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""
    return Settings()  # type: ignore[call-arg]
