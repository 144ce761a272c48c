"""Application configuration via pydantic settings."""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path

from typing import Any

from pydantic import Field
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Typed application configuration."""

    app_env: str = Field("local", alias="APP_ENV")
    app_name: str = "Booking Quote API"
    api_v1_prefix: str = Field("/api/v1", alias="API_V1_PREFIX")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    database_url: str = Field(..., alias="DATABASE_URL")

    booking_service_fee: Decimal = Field(Decimal("0"), alias="BOOKING_SERVICE_FEE")
    default_currency: str | None = Field(default=None, alias="DEFAULT_CURRENCY")

    cors_allow_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173"],
        alias="CORS_ALLOW_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=False, alias="CORS_ALLOW_CREDENTIALS")

    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parents[3] / ".env",
        case_sensitive=False,
    )

    @field_validator("cors_allow_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("booking_service_fee", mode="after")
    @classmethod
    def _clamp_service_fee(cls, value: Decimal) -> Decimal:
        return value if value > Decimal("0") else Decimal("0")


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""
    return Settings()  # type: ignore[call-arg]
