"""
Flight of the Day - Entry Point

Generate the feed once:
    python main.py --run-once

Or run the daily scheduler:
    python main.py

Environment variables:
    AVIATIONSTACK_ACCESS_KEY: Aviationstack API key (primary source)
    OPENSKY_CLIENT_ID/OPENSKY_CLIENT_SECRET: OpenSky OAuth2 credentials (live fallback)
    FEED_OUTPUT_PATH: RSS output file (default: flight_feed.xml)
    SCHEDULER_HOUR_UTC: Daily run hour in UTC (default: 6)
"""

import argparse
import asyncio
import sys

from dotenv import load_dotenv
load_dotenv()

from src.utils.logger import setup_logger, logger
from src.utils.exceptions import MissingConfigError
from src.feed.config import settings


def main(argv: list[str] | None = None) -> int:
    """Main entry point. Returns the process exit code."""
    parser = argparse.ArgumentParser(
        description="Flight of the Day RSS generator"
    )
    parser.add_argument(
        "--run-once",
        action="store_true",
        help="Generate the feed once instead of scheduling",
    )
    parser.add_argument(
        "--output",
        default=None,
        help="RSS output path (default: from settings)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Log level (default: from settings)",
    )

    args = parser.parse_args(argv)

    setup_logger(
        level=args.log_level or settings.logging.level,
        log_file=settings.logging.file,
        rotation=settings.logging.rotation,
        retention=settings.logging.retention,
    )

    logger.info("=" * 60)
    logger.info("FLIGHT OF THE DAY")
    logger.info("=" * 60)
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Run once: {args.run_once}")

    from src.feed.jobs import create_job

    job = create_job(output_path=args.output)

    if args.run_once:
        try:
            result = asyncio.run(job.run())
        except MissingConfigError as e:
            logger.error(f"{e}. Set it in the environment or a .env file.")
            return 1

        logger.info(f"Result: {result.status.value}")
        if result.output_path:
            logger.info(f"Feed written to: {result.output_path}")
        if result.error_message:
            logger.error(f"Error: {result.error_message}")
        return 0

    from src.feed.jobs import create_scheduler

    try:
        job.check_configuration()
    except MissingConfigError as e:
        logger.error(f"{e}. Set it in the environment or a .env file.")
        return 1

    scheduler = create_scheduler(job=job)
    scheduler.start()
    return 0


if __name__ == "__main__":
    sys.exit(main())
