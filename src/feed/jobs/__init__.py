"""Jobs module for the flight-of-the-day service."""

from src.feed.jobs.feed_job import (
    FeedStatus,
    FeedResult,
    FlightOfTheDayJob,
    create_job,
    run_feed,
)
from src.feed.jobs.scheduler import (
    FeedScheduler,
    create_scheduler,
    start_scheduler,
)

__all__ = [
    "FeedStatus",
    "FeedResult",
    "FlightOfTheDayJob",
    "create_job",
    "run_feed",
    "FeedScheduler",
    "create_scheduler",
    "start_scheduler",
]
