"""Typed settings loader for the trip weather updater."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import AnyUrl, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigError


class Settings(BaseSettings):
    """Application settings loaded from environment variables and `.env`."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    geocode_base_url: AnyUrl = Field(
        default=AnyUrl("https://geocoding-api.open-meteo.com/v1"),
        alias="OPEN_METEO_GEOCODE_BASE",
    )
    forecast_base_url: AnyUrl = Field(
        default=AnyUrl("https://api.open-meteo.com/v1"),
        alias="OPEN_METEO_FORECAST_BASE",
    )
    archive_base_url: AnyUrl = Field(
        default=AnyUrl("https://archive-api.open-meteo.com/v1"),
        alias="OPEN_METEO_ARCHIVE_BASE",
    )
    geocode_country: str = Field(default="IT", alias="GEOCODE_COUNTRY")
    fallback_timezone: str = Field(default="Europe/Rome", alias="FALLBACK_TIMEZONE")
    forecast_horizon_days: int = Field(default=16, alias="FORECAST_HORIZON_DAYS")

    weather_timeout_seconds: float = Field(default=15.0, alias="WEATHER_TIMEOUT_SECONDS")
    weather_max_attempts: int = Field(default=3, alias="WEATHER_MAX_ATTEMPTS")
    weather_initial_backoff_ms: int = Field(default=100, alias="WEATHER_INITIAL_BACKOFF_MS")

    journal_enabled: bool = Field(default=False, alias="JOURNAL_ENABLED")
    journal_dir: Path = Field(default=Path("./data/journal"), alias="JOURNAL_DIR")

    @field_validator("geocode_country", "fallback_timezone", mode="before")
    @classmethod
    def strip_strings(cls, value: Any) -> Any:
        """Trim whitespace around env-string values."""
        if isinstance(value, str):
            return value.strip()
        return value

    @model_validator(mode="after")
    def validate_limits(self) -> Settings:
        """Validate numeric limits and provider parameters."""
        if len(self.geocode_country) != 2 or not self.geocode_country.isalpha():
            raise ValueError("GEOCODE_COUNTRY must be a two-letter country code.")
        if not self.fallback_timezone:
            raise ValueError("FALLBACK_TIMEZONE must not be empty.")
        if self.forecast_horizon_days <= 0:
            raise ValueError("FORECAST_HORIZON_DAYS must be > 0.")
        if self.weather_timeout_seconds <= 0:
            raise ValueError("WEATHER_TIMEOUT_SECONDS must be > 0.")
        if self.weather_max_attempts <= 0:
            raise ValueError("WEATHER_MAX_ATTEMPTS must be > 0.")
        if self.weather_initial_backoff_ms < 0:
            raise ValueError("WEATHER_INITIAL_BACKOFF_MS must be >= 0.")
        return self

    def safe_summary(self) -> dict[str, Any]:
        """Return config summary safe for journaling."""
        return {
            "geocode_base_url": str(self.geocode_base_url),
            "forecast_base_url": str(self.forecast_base_url),
            "archive_base_url": str(self.archive_base_url),
            "geocode_country": self.geocode_country,
            "fallback_timezone": self.fallback_timezone,
            "forecast_horizon_days": self.forecast_horizon_days,
            "weather_timeout_seconds": self.weather_timeout_seconds,
            "weather_max_attempts": self.weather_max_attempts,
            "weather_initial_backoff_ms": self.weather_initial_backoff_ms,
        }


def load_settings() -> Settings:
    """Load and validate settings, raising ConfigError on failure."""
    try:
        settings = Settings()
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Failed reading environment/.env: {exc}") from exc

    if settings.journal_enabled:
        try:
            settings.journal_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ConfigError(
                f"Failed creating JOURNAL_DIR ({settings.journal_dir}): {exc}"
            ) from exc
    return settings
