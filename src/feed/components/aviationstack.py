"""
Aviationstack API client (primary flight source).

Documentation: https://aviationstack.com/documentation
"""

from datetime import datetime, time, timezone
from typing import Any

from src.utils import logger
from src.feed.config import settings, PLACEHOLDER_ACCESS_KEY
from src.feed.components.http import ResilientFetcher
from src.feed.components.models import FlightCandidate, FlightSource, FlightStatus, parse_flights
from src.feed.components.scoring import rank_flights


MAX_RESULTS = 100


def utc_day_window(now: datetime) -> tuple[datetime, datetime]:
    """Return [00:00:00, 23:59:59] of the UTC calendar day containing now."""
    day = now.astimezone(timezone.utc).date()
    start = datetime.combine(day, time(0, 0, 0), tzinfo=timezone.utc)
    end = datetime.combine(day, time(23, 59, 59), tzinfo=timezone.utc)
    return start, end


def departs_within(flight: FlightCandidate, start: datetime, end: datetime) -> bool:
    departure = flight.departure_time
    return departure is not None and start <= departure <= end


class AviationstackClient:
    """
    Client for the Aviationstack REST API.

    Every public method returns None (or an empty list) when the access key
    is missing or the provider cannot be reached.
    """

    def __init__(
        self,
        fetcher: ResilientFetcher,
        access_key: str | None = None,
        base_url: str | None = None,
        restrict_to_today_utc: bool | None = None,
        include_active: bool | None = None,
    ):
        """
        Initialize the Aviationstack client.

        Args:
            fetcher: Shared resilient fetcher
            access_key: API access key (defaults to settings)
            base_url: API base URL (defaults to settings)
            restrict_to_today_utc: Keep only flights departing today (UTC)
            include_active: Query active flights when no scheduled flight qualifies
        """
        self.fetcher = fetcher
        self.access_key = access_key or settings.aviationstack.access_key
        self.base_url = (base_url or settings.aviationstack.base_url).rstrip("/")
        self.restrict_to_today_utc = (
            restrict_to_today_utc if restrict_to_today_utc is not None
            else settings.feed.restrict_to_today_utc
        )
        self.include_active = (
            include_active if include_active is not None else settings.feed.include_active
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.access_key) and self.access_key != PLACEHOLDER_ACCESS_KEY

    async def _get(self, endpoint: str, params: dict[str, Any]) -> list[Any] | None:
        """GET an endpoint and return its 'data' list, or None."""
        body = await self.fetcher.fetch_json(
            f"{self.base_url}{endpoint}",
            params={"access_key": self.access_key, **params},
        )
        if not isinstance(body, dict) or not isinstance(body.get("data"), list):
            if isinstance(body, dict) and body.get("error"):
                logger.warning(f"Aviationstack error payload: {body['error']}")
            return None
        return body["data"]

    async def get_flights(self, status: str, limit: int = MAX_RESULTS) -> list[FlightCandidate]:
        """Fetch flights with the given status."""
        if not self.is_configured:
            return []
        logger.info(f"Fetching {status} flights from Aviationstack")
        data = await self._get("/flights", {"flight_status": status, "limit": limit})
        flights = parse_flights(data, source=FlightSource.PRIMARY)
        logger.info(f"Aviationstack returned {len(flights)} {status} flight(s)")
        return flights

    def _eligible(self, flights: list[FlightCandidate], now: datetime) -> list[FlightCandidate]:
        if not self.restrict_to_today_utc:
            return flights
        start, end = utc_day_window(now)
        today = [f for f in flights if departs_within(f, start, end)]
        logger.debug(f"{len(today)}/{len(flights)} flight(s) depart within {start:%Y-%m-%d} UTC")
        return today

    async def fetch_best_scheduled_flight(
        self,
        now: datetime,
        patterns: tuple[str, ...],
    ) -> FlightCandidate | None:
        """
        Pick the best scheduled flight for today.

        Args:
            now: Frozen run time
            patterns: Date pattern set for the run

        Returns:
            Top-ranked candidate, or None if the key is missing or nothing qualifies
        """
        if not self.is_configured:
            logger.info("Aviationstack access key not configured, skipping primary source")
            return None

        statuses = [FlightStatus.SCHEDULED.value]
        if self.include_active:
            statuses.append(FlightStatus.ACTIVE.value)

        # Sequential on purpose: the active query only runs if scheduled found nothing
        for status in statuses:
            candidates = self._eligible(await self.get_flights(status), now)
            ranked = rank_flights(candidates, now, patterns)
            if ranked:
                best = ranked[0]
                logger.info(f"Best {status} flight: {best.flight.display_code} (score {best.score:.1f})")
                return best.flight

        logger.info("No eligible flight from Aviationstack")
        return None

    async def lookup_flight(self, flight_iata: str) -> FlightCandidate | None:
        """Look up a single flight by IATA flight code."""
        if not self.is_configured or not flight_iata:
            return None
        data = await self._get("/flights", {"flight_iata": flight_iata, "limit": 1})
        flights = parse_flights(data, source=FlightSource.PRIMARY)
        return flights[0] if flights else None

    async def get_aircraft_model(self, icao_code: str | None) -> str | None:
        """Return "<manufacturer> <model>" for an ICAO aircraft type code."""
        if not self.is_configured or not icao_code:
            return None
        data = await self._get("/aircraft_types", {"icao_code": icao_code})
        if not data or not isinstance(data[0], dict):
            return None
        aircraft_type = data[0]
        model = f"{aircraft_type.get('manufacturer_name') or ''} {aircraft_type.get('aircraft_name') or ''}"
        return model.strip() or None


def create_client(fetcher: ResilientFetcher) -> AviationstackClient:
    """Create a new Aviationstack client with default settings."""
    return AviationstackClient(fetcher)


__all__ = [
    "MAX_RESULTS",
    "AviationstackClient",
    "create_client",
    "utc_day_window",
    "departs_within",
]
