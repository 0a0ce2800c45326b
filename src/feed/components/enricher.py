"""Optional aircraft model lookup for the selected flight."""

from datetime import datetime

from src.utils import logger
from src.feed.components.aviationstack import AviationstackClient
from src.feed.components.models import FlightCandidate, FlightSource
from src.feed.components.opensky import OpenSkyClient


class AircraftModelEnricher:
    """
    Resolve a "<manufacturer> <model>" string for a flight.

    Primary flights are looked up by ICAO aircraft type code on
    Aviationstack. Live fallback flights are looked up by transponder
    address on OpenSky first. Never raises; None means "omit the line".
    """

    def __init__(self, aviationstack: AviationstackClient, opensky: OpenSkyClient | None = None):
        self.aviationstack = aviationstack
        self.opensky = opensky

    async def fetch_aircraft_model(self, flight: FlightCandidate, now: datetime) -> str | None:
        try:
            model = None
            if flight.source == FlightSource.FALLBACK and self.opensky is not None:
                model = await self.opensky.get_aircraft_model(
                    flight.aircraft.icao24 or flight.flight.icao24, now
                )
            if model is None:
                model = await self.aviationstack.get_aircraft_model(flight.aircraft.icao)
        except Exception as e:
            logger.warning(f"Aircraft model lookup failed for {flight.display_code}: {e}")
            return None

        if model:
            logger.info(f"Aircraft model for {flight.display_code}: {model}")
        return model


__all__ = ["AircraftModelEnricher"]
