"""
Configuration management for the flight-of-the-day service.

Loads settings from environment variables (and a local .env file).
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file before settings are initialized
load_dotenv()


# Value shipped in .env templates; treated the same as a missing key
PLACEHOLDER_ACCESS_KEY = "YOUR_ACCESS_KEY_HERE"


class AviationstackSettings(BaseSettings):
    """Aviationstack API configuration (primary source)."""

    base_url: str = Field(default="https://api.aviationstack.com/v1")
    access_key: str | None = Field(default=None)

    model_config = SettingsConfigDict(env_prefix="AVIATIONSTACK_")


class OpenSkySettings(BaseSettings):
    """OpenSky API configuration (fallback source)."""

    base_url: str = Field(default="https://opensky-network.org/api")
    auth_url: str = Field(
        default="https://auth.opensky-network.org/auth/realms/opensky-network/protocol/openid-connect/token"
    )
    # OAuth2 client credentials
    client_id: str | None = Field(default=None)
    client_secret: str | None = Field(default=None)

    model_config = SettingsConfigDict(env_prefix="OPENSKY_")


class HttpSettings(BaseSettings):
    """Timeouts and retry policy for outbound HTTP calls."""

    timeout_seconds: float = Field(default=10.0)
    probe_timeout_seconds: float = Field(default=5.0)
    max_attempts: int = Field(default=3)
    # Linear backoff: delay = backoff * attempt
    backoff_seconds: float = Field(default=2.0)
    overload_backoff_seconds: float = Field(default=3.0)

    model_config = SettingsConfigDict(env_prefix="HTTP_")


class FeedSettings(BaseSettings):
    """RSS output and flight selection policy."""

    output_path: str = Field(default="flight_feed.xml")
    channel_title: str = Field(default="Flight of the Day")
    channel_link: str = Field(default="https://github.com/TCdesign-dev/flight-rss-feed")
    channel_description: str = Field(default="Daily flights with live tracking links")
    tracking_link_base: str = Field(default="https://www.flightradar24.com/data/flights/")
    # Only keep primary flights departing within the current UTC day
    restrict_to_today_utc: bool = Field(default=True)
    # Query active flights when no scheduled flight qualifies
    include_active: bool = Field(default=False)
    # "now" uses the run time, "fixed" uses today at pub_date_hour_utc
    pub_date_mode: Literal["now", "fixed"] = Field(default="now")
    pub_date_hour_utc: int = Field(default=13, ge=0, le=23)
    probe_connectivity: bool = Field(default=True)

    model_config = SettingsConfigDict(env_prefix="FEED_")

    @property
    def output_file(self) -> Path:
        """Get the output path as a Path."""
        return Path(self.output_path)


class SchedulerSettings(BaseSettings):
    """Scheduler configuration."""

    # Daily run time (UTC)
    hour_utc: int = Field(default=6, ge=0, le=23)
    minute: int = Field(default=0, ge=0, le=59)
    # Run the job immediately on scheduler start
    run_on_start: bool = Field(default=True)

    model_config = SettingsConfigDict(env_prefix="SCHEDULER_")


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    level: str = Field(default="INFO")
    # Rotating log file (LOG_FILE); stdout only when unset
    file: str | None = Field(default=None)
    rotation: str = Field(default="10 MB")
    retention: str = Field(default="7 days")

    model_config = SettingsConfigDict(env_prefix="LOG_")


class Settings(BaseSettings):
    """Main settings aggregating all configuration."""

    aviationstack: AviationstackSettings = Field(default_factory=AviationstackSettings)
    opensky: OpenSkySettings = Field(default_factory=OpenSkySettings)
    http: HttpSettings = Field(default_factory=HttpSettings)
    feed: FeedSettings = Field(default_factory=FeedSettings)
    scheduler: SchedulerSettings = Field(default_factory=SchedulerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    # Environment name (development, staging, production)
    environment: str = Field(default="development")

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_nested_delimiter="__",
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: The application settings
    """
    return Settings()


# Export for easy access
settings = get_settings()

__all__ = [
    "PLACEHOLDER_ACCESS_KEY",
    "Settings",
    "AviationstackSettings",
    "OpenSkySettings",
    "HttpSettings",
    "FeedSettings",
    "SchedulerSettings",
    "LoggingSettings",
    "get_settings",
    "settings",
]
