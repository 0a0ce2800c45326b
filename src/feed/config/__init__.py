"""Configuration module for the flight-of-the-day service."""

from src.feed.config.config import (
    PLACEHOLDER_ACCESS_KEY,
    Settings,
    AviationstackSettings,
    OpenSkySettings,
    HttpSettings,
    FeedSettings,
    SchedulerSettings,
    LoggingSettings,
    get_settings,
    settings,
)

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
