"""
Flight-of-the-day service.

This module provides:
- Aviationstack client for scheduled flights (primary source)
- OpenSky client with OAuth2 token caching (live fallback)
- Scoring/selection of the flight of the day
- RSS rendering and writing
- Scheduler for a daily run

Quick start:
    from src.feed import start_scheduler
    start_scheduler()  # Regenerate the feed every day

One-time run:
    import asyncio
    from src.feed import run_feed
    result = asyncio.run(run_feed())

Configuration (environment variables):
    AVIATIONSTACK_ACCESS_KEY: Aviationstack API key
    OPENSKY_CLIENT_ID/CLIENT_SECRET: OpenSky OAuth2 client credentials
    FEED_OUTPUT_PATH: Where to write the RSS file
    SCHEDULER_HOUR_UTC: Daily run hour (UTC)
"""

from src.feed.config import settings, get_settings
from src.feed.components import (
    ResilientFetcher,
    TokenCache,
    OAuthTokenProvider,
    AviationstackClient,
    OpenSkyClient,
    LiveFallbackSource,
    AircraftModelEnricher,
    FeedWriter,
    build_date_patterns,
    score_flight,
    select_best,
)
from src.feed.jobs import (
    FeedStatus,
    FeedResult,
    FlightOfTheDayJob,
    create_job,
    run_feed,
    FeedScheduler,
    create_scheduler,
    start_scheduler,
)

__all__ = [
    # Config
    "settings",
    "get_settings",
    # Components
    "ResilientFetcher",
    "TokenCache",
    "OAuthTokenProvider",
    "AviationstackClient",
    "OpenSkyClient",
    "LiveFallbackSource",
    "AircraftModelEnricher",
    "FeedWriter",
    "build_date_patterns",
    "score_flight",
    "select_best",
    # Jobs
    "FeedStatus",
    "FeedResult",
    "FlightOfTheDayJob",
    "create_job",
    "run_feed",
    "FeedScheduler",
    "create_scheduler",
    "start_scheduler",
]
