"""
Logging for the flight-of-the-day service.

Every module logs through the shared loguru logger. While a feed run is in
progress, records carry the UTC date being published in ``extra["run"]``
(see ``FlightOfTheDayJob.run``); outside a run the field reads "-".

Usage:
    from src.utils import logger

    logger.info("Selecting flight of the day...")
"""

import sys
from pathlib import Path

from loguru import logger

NO_RUN = "-"

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<magenta>run={extra[run]}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

# One line per record, greppable by run date
FILE_FORMAT = "{time:YYYY-MM-DDTHH:mm:ss.SSSZZ} {level} run={extra[run]} {name}:{function}:{line} {message}"


def setup_logger(
    level: str = "INFO",
    log_file: str | Path | None = None,
    rotation: str = "10 MB",
    retention: str = "7 days",
) -> None:
    """
    (Re)configure the sinks.

    Args:
        level: Minimum level for every sink
        log_file: Rotating log file; stdout only when None
        rotation: loguru rotation policy for the file sink
        retention: loguru retention policy for the file sink
    """
    logger.remove()
    logger.configure(extra={"run": NO_RUN})

    logger.add(sys.stdout, format=CONSOLE_FORMAT, level=level, colorize=True, backtrace=True, diagnose=False)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            path,
            format=FILE_FORMAT,
            level=level,
            rotation=rotation,
            retention=retention,
            compression="zip",
            enqueue=True,
        )

    logger.debug(f"Logging at {level}" + (f", file {log_file}" if log_file else ""))


setup_logger()


__all__ = ["logger", "setup_logger", "NO_RUN"]
