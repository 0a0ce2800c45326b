"""
Flight records returned by the data providers.

Every field is optional: providers routinely omit codes, airports and
timestamps, and the selection pipeline has to cope with any of them missing.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, NamedTuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from src.utils import logger


class FlightSource(str, Enum):
    """Which provider a candidate came from."""
    PRIMARY = "primary"
    FALLBACK = "fallback"


class FlightStatus(str, Enum):
    """Statuses the scorer rewards. Anything else is treated as unknown."""
    SCHEDULED = "scheduled"
    ACTIVE = "active"


class _Record(BaseModel):
    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )


class FlightIdent(_Record):
    number: str | None = None
    iata: str | None = None
    icao: str | None = None
    # OpenSky state vector transponder address
    icao24: str | None = None


class Airline(_Record):
    name: str | None = None
    iata: str | None = None
    icao: str | None = None


class Endpoint(_Record):
    """Departure or arrival side of a flight."""

    airport: str | None = None
    city: str | None = None
    iata: str | None = None
    icao: str | None = None
    scheduled: str | None = None
    estimated: str | None = None
    actual: str | None = None


class Aircraft(_Record):
    registration: str | None = None
    iata: str | None = None
    icao: str | None = None
    icao24: str | None = None


class FlightCandidate(_Record):
    """A flight as seen by one of the providers."""

    flight: FlightIdent = Field(default_factory=FlightIdent)
    airline: Airline = Field(default_factory=Airline)
    departure: Endpoint = Field(default_factory=Endpoint)
    arrival: Endpoint = Field(default_factory=Endpoint)
    aircraft: Aircraft = Field(default_factory=Aircraft)
    status: str | None = Field(default=None, alias="flight_status")
    source: FlightSource = FlightSource.PRIMARY

    @classmethod
    def from_api(cls, raw: Any, source: FlightSource = FlightSource.PRIMARY) -> "FlightCandidate | None":
        """
        Build a candidate from a provider payload.

        Returns None (and logs) when the payload is not a usable object.
        Null nested objects are treated as empty.
        """
        if not isinstance(raw, dict):
            return None

        cleaned = {k: v for k, v in raw.items() if v is not None}
        try:
            candidate = cls.model_validate(cleaned)
        except ValidationError as e:
            logger.warning(f"Skipping malformed flight record: {e.error_count()} validation error(s)")
            return None
        return candidate.model_copy(update={"source": source})

    @property
    def departure_time_raw(self) -> str | None:
        """Best available departure timestamp: scheduled, estimated, actual."""
        return self.departure.scheduled or self.departure.estimated or self.departure.actual

    @property
    def departure_time(self) -> datetime | None:
        """Parsed best departure timestamp (UTC-aware), or None."""
        return parse_timestamp(self.departure_time_raw)

    @property
    def display_code(self) -> str:
        """Code shown to readers: IATA, then number, then N/A."""
        return self.flight.iata or self.flight.number or "N/A"


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        logger.debug(f"Unparseable timestamp: {value!r}")
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_flights(raw_items: Any, source: FlightSource = FlightSource.PRIMARY) -> list[FlightCandidate]:
    """Parse a provider list into candidates, dropping unusable entries."""
    if not isinstance(raw_items, list):
        return []
    flights = []
    for raw in raw_items:
        candidate = FlightCandidate.from_api(raw, source=source)
        if candidate is not None:
            flights.append(candidate)
    return flights


class ScoredCandidate(NamedTuple):
    """A candidate with its selection score."""
    flight: FlightCandidate
    score: float


class FeedItem(NamedTuple):
    """Presentation record for the selected flight of the day."""
    flight: FlightCandidate
    callsign: str
    title: str
    link: str
    description_lines: tuple[str, ...]
    pub_date: str
    guid: str
    aircraft_model: str | None = None

    @property
    def description(self) -> str:
        """Description as a single multi-line string."""
        return "\n".join(self.description_lines)


__all__ = [
    "FlightSource",
    "FlightStatus",
    "FlightIdent",
    "Airline",
    "Endpoint",
    "Aircraft",
    "FlightCandidate",
    "ScoredCandidate",
    "FeedItem",
    "parse_timestamp",
    "parse_flights",
]
