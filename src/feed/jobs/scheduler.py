"""
Scheduler for the daily flight-of-the-day run.

Uses APScheduler to regenerate the feed once a day at a fixed UTC time.
"""

import asyncio
import signal
import sys
from datetime import datetime, timezone

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED, JobExecutionEvent

from src.utils import logger
from src.utils.exceptions import MissingConfigError
from src.utils.logger import setup_logger
from src.feed.config import settings
from src.feed.jobs.feed_job import FlightOfTheDayJob, create_job


class FeedScheduler:
    """
    Scheduler for running the daily feed job.

    Features:
    - Configurable daily run time (UTC)
    - Graceful shutdown handling
    - Job execution logging
    """

    def __init__(
        self,
        job: FlightOfTheDayJob | None = None,
        hour_utc: int | None = None,
        minute: int | None = None,
        run_on_start: bool | None = None,
    ):
        """
        Initialize the scheduler.

        Args:
            job: Job to run (one job instance is reused so its token cache persists)
            hour_utc: Hour of the daily run, UTC (default from settings)
            minute: Minute of the daily run (default from settings)
            run_on_start: Whether to run the job immediately on start
        """
        self.job = job or create_job()
        self.hour_utc = hour_utc if hour_utc is not None else settings.scheduler.hour_utc
        self.minute = minute if minute is not None else settings.scheduler.minute
        self.run_on_start = run_on_start if run_on_start is not None else settings.scheduler.run_on_start

        self._scheduler = BlockingScheduler(timezone=timezone.utc)
        self._setup_listeners()
        self._setup_signal_handlers()

        logger.info(f"FeedScheduler initialized for {self.hour_utc:02d}:{self.minute:02d} UTC")

    def _setup_listeners(self) -> None:
        """Setup job event listeners."""
        self._scheduler.add_listener(self._on_job_executed, EVENT_JOB_EXECUTED)
        self._scheduler.add_listener(self._on_job_error, EVENT_JOB_ERROR)

    def _setup_signal_handlers(self) -> None:
        """Setup signal handlers for graceful shutdown."""
        signal.signal(signal.SIGINT, self._shutdown)
        signal.signal(signal.SIGTERM, self._shutdown)

    def _shutdown(self, signum: int, frame) -> None:
        """Handle shutdown signals."""
        logger.info(f"Received signal {signum}, shutting down gracefully...")
        self._scheduler.shutdown(wait=False)
        sys.exit(0)

    def _on_job_executed(self, event: JobExecutionEvent) -> None:
        logger.info(f"Job {event.job_id} executed successfully at {datetime.now(timezone.utc)}")

    def _on_job_error(self, event: JobExecutionEvent) -> None:
        logger.error(f"Job {event.job_id} failed with exception: {event.exception}")

    def _run_feed_job(self) -> None:
        """Wrapper running one async cycle in its own event loop."""
        logger.info("=" * 60)
        logger.info("Starting scheduled flight-of-the-day run")
        logger.info("=" * 60)

        try:
            result = asyncio.run(self.job.run())
        except MissingConfigError as e:
            logger.error(f"Configuration error: {e}")
            return
        except Exception as e:
            logger.exception(f"Unhandled error in feed job: {e}")
            return

        logger.info(f"Run completed with status: {result.status.value}")
        if result.output_path:
            logger.info(f"Feed written to: {result.output_path}")
        if result.error_message:
            logger.warning(f"Error message: {result.error_message}")

    def add_feed_job(self) -> None:
        """Add the daily feed job to the scheduler."""
        trigger = CronTrigger(hour=self.hour_utc, minute=self.minute, timezone=timezone.utc)

        self._scheduler.add_job(
            self._run_feed_job,
            trigger=trigger,
            id="flight_of_the_day",
            name="Flight of the Day",
            replace_existing=True,
        )

        logger.info(f"Added daily feed job ({self.hour_utc:02d}:{self.minute:02d} UTC)")

    def start(self) -> None:
        """Start the scheduler (blocking)."""
        logger.info("=" * 60)
        logger.info("STARTING FEED SCHEDULER")
        logger.info(f"Daily run: {self.hour_utc:02d}:{self.minute:02d} UTC")
        logger.info(f"Run on start: {self.run_on_start}")
        logger.info("=" * 60)

        self.add_feed_job()

        if self.run_on_start:
            logger.info("Running initial feed job...")
            self._run_feed_job()

        logger.info("Scheduler started, waiting for next scheduled run...")
        self._scheduler.start()


def create_scheduler(
    job: FlightOfTheDayJob | None = None,
    hour_utc: int | None = None,
    run_on_start: bool | None = None,
) -> FeedScheduler:
    """Create a new scheduler with the given settings."""
    return FeedScheduler(job=job, hour_utc=hour_utc, run_on_start=run_on_start)


def start_scheduler() -> None:
    """
    Convenience function to create and start a scheduler.

    Uses settings from environment variables.
    """
    setup_logger(
        level=settings.logging.level,
        log_file=settings.logging.file,
        rotation=settings.logging.rotation,
        retention=settings.logging.retention,
    )

    scheduler = create_scheduler()
    scheduler.start()


__all__ = [
    "FeedScheduler",
    "create_scheduler",
    "start_scheduler",
]
