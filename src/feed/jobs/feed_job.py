"""
Flight-of-the-day job.

This is the main pipeline that:
1. Freezes "now" and derives today's date patterns
2. Picks the best scheduled flight from Aviationstack
3. Falls back to a live OpenSky callsign if that yields nothing
4. Looks up the aircraft model (best effort)
5. Renders and writes the RSS feed

"No flight today" is a normal outcome: nothing is written.
"""

from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import NamedTuple

from src.utils import logger
from src.utils.exceptions import (
    FlightServiceError,
    FeedWriteError,
    ConfigurationError,
    MissingConfigError,
)
from src.feed.config import settings, Settings
from src.feed.components.http import ResilientFetcher
from src.feed.components.token_cache import TokenCache, OAuthTokenProvider
from src.feed.components.patterns import build_date_patterns
from src.feed.components.aviationstack import AviationstackClient
from src.feed.components.opensky import OpenSkyClient
from src.feed.components.fallback import LiveFallbackSource
from src.feed.components.enricher import AircraftModelEnricher
from src.feed.components.feed_writer import FeedWriter, build_feed_item
from src.feed.components.models import FeedItem


class FeedStatus(str, Enum):
    """Outcome of a run."""
    WRITTEN = "written"
    NO_FLIGHT = "no_flight"
    FAILED = "failed"


class FeedResult(NamedTuple):
    """Result of a single run."""
    status: FeedStatus
    item: FeedItem | None = None
    output_path: Path | None = None
    error_message: str | None = None


class FlightOfTheDayJob:
    """
    Orchestrates one selection run.

    The job owns the token cache, so a long-lived job (the scheduler) reuses
    OpenSky tokens across runs until they expire.
    """

    def __init__(
        self,
        aviationstack: AviationstackClient,
        opensky: OpenSkyClient,
        writer: FeedWriter,
        fetcher: ResilientFetcher | None = None,
        app_settings: Settings | None = None,
    ):
        """
        Initialize the job.

        Args:
            aviationstack: Primary source client
            opensky: Fallback source client
            writer: Feed writer
            fetcher: Fetcher used for the connectivity probe
            app_settings: Settings (defaults to global settings)
        """
        self.settings = app_settings or settings
        self.aviationstack = aviationstack
        self.opensky = opensky
        self.fallback = LiveFallbackSource(opensky, aviationstack)
        self.enricher = AircraftModelEnricher(aviationstack, opensky)
        self.writer = writer
        self.fetcher = fetcher or aviationstack.fetcher

        logger.info("FlightOfTheDayJob initialized")

    def check_configuration(self) -> None:
        """
        Fail fast when no source can possibly be queried.

        Raises:
            MissingConfigError: If neither the Aviationstack key nor the
                OpenSky client credentials are configured
        """
        if self.aviationstack.is_configured:
            return
        if self.opensky.has_credentials:
            logger.warning("AVIATIONSTACK_ACCESS_KEY missing, only the live fallback will be used")
            return
        raise MissingConfigError("AVIATIONSTACK_ACCESS_KEY")

    def _categorize_error(self, error: Exception) -> tuple[str, str]:
        """
        Categorize an error for logging.

        Returns:
            Tuple of (error_category, error_message)
        """
        if isinstance(error, FeedWriteError):
            category = "FEED_WRITE"
            message = f"Failed to write feed to {error.path}: {error.message}"
        elif isinstance(error, ConfigurationError):
            category = "CONFIG"
            message = f"Configuration error: {error}"
        elif isinstance(error, FlightServiceError):
            category = "SERVICE"
            message = f"Service error: {error}"
        else:
            category = "UNEXPECTED"
            message = f"Unexpected error ({type(error).__name__}): {error}"

        return category, message

    async def _probe(self) -> None:
        if not self.settings.feed.probe_connectivity:
            return
        if self.aviationstack.is_configured:
            await self.fetcher.probe(self.aviationstack.base_url)
        if self.opensky.has_credentials:
            await self.fetcher.probe(self.opensky.base_url)

    async def run(self, now: datetime | None = None) -> FeedResult:
        """
        Run the pipeline once.

        Args:
            now: Frozen run time (defaults to the current local time)

        Returns:
            FeedResult (WRITTEN, NO_FLIGHT or FAILED)

        Raises:
            MissingConfigError: If no source is configured at all
        """
        self.check_configuration()

        now = (now or datetime.now()).astimezone()
        with logger.contextualize(run=now.astimezone(timezone.utc).date().isoformat()):
            return await self._run(now)

    async def _run(self, now: datetime) -> FeedResult:
        patterns = build_date_patterns(now)
        logger.info(f"Run time: {now.isoformat()}")
        logger.info(f"Date patterns: {', '.join(patterns)}")

        await self._probe()

        logger.info("Looking for the best scheduled flight on Aviationstack...")
        flight = await self.aviationstack.fetch_best_scheduled_flight(now, patterns)

        if flight is None:
            logger.info("No scheduled flight found, searching live flights on OpenSky...")
            flight = await self.fallback.fetch_live_fallback_flight(now, patterns)

        if flight is None:
            logger.info("No flight of the day found today")
            return FeedResult(status=FeedStatus.NO_FLIGHT)

        aircraft_model = await self.enricher.fetch_aircraft_model(flight, now)
        item = build_feed_item(flight, now, aircraft_model, self.settings.feed)

        try:
            path = self.writer.write(item)
        except Exception as e:
            category, message = self._categorize_error(e)
            logger.error(f"[{category}] {message}")
            return FeedResult(status=FeedStatus.FAILED, item=item, error_message=f"[{category}] {message}")

        logger.info(f"Flight of the day: {item.callsign} ({item.flight.source.value} source)")
        for line in item.description_lines:
            logger.info(f"  {line}")
        return FeedResult(status=FeedStatus.WRITTEN, item=item, output_path=path)


def create_job(
    output_path: str | Path | None = None,
    app_settings: Settings | None = None,
    cache: TokenCache | None = None,
) -> FlightOfTheDayJob:
    """Wire up a job from settings."""
    app_settings = app_settings or settings
    fetcher = ResilientFetcher()
    token_provider = OAuthTokenProvider(fetcher, cache=cache or TokenCache())
    return FlightOfTheDayJob(
        aviationstack=AviationstackClient(fetcher),
        opensky=OpenSkyClient(fetcher, token_provider),
        writer=FeedWriter(output_path, app_settings.feed),
        fetcher=fetcher,
        app_settings=app_settings,
    )


async def run_feed(output_path: str | Path | None = None) -> FeedResult:
    """
    Run a single flight-of-the-day cycle with default settings.

    Returns:
        FeedResult with the outcome
    """
    job = create_job(output_path=output_path)
    return await job.run()


__all__ = [
    "FeedStatus",
    "FeedResult",
    "FlightOfTheDayJob",
    "create_job",
    "run_feed",
]
