"""
Live fallback: pick a flight from OpenSky state vectors.

Used only when Aviationstack yields nothing. The first airborne callsign
containing one of today's date patterns wins; Aviationstack is then asked
(best effort) to fill in airline and airport details.
"""

from datetime import datetime
from typing import Any

from src.utils import logger
from src.feed.components.aviationstack import AviationstackClient
from src.feed.components.models import (
    Aircraft,
    FlightCandidate,
    FlightIdent,
    FlightSource,
    FlightStatus,
)
from src.feed.components.opensky import OpenSkyClient, STATE_CALLSIGN, STATE_ICAO24
from src.feed.components.patterns import matching_patterns


def find_matching_state(states: list[Any], patterns: tuple[str, ...]) -> list[Any] | None:
    """Return the first state vector whose callsign contains a pattern."""
    for state in states:
        if not isinstance(state, list) or len(state) <= STATE_CALLSIGN:
            continue
        callsign = state[STATE_CALLSIGN]
        if not isinstance(callsign, str) or not callsign.strip():
            continue
        if matching_patterns(callsign.strip(), patterns):
            return state
    return None


def candidate_from_state(state: list[Any]) -> FlightCandidate:
    """Build a minimal candidate from a state vector."""
    callsign = state[STATE_CALLSIGN].strip()
    icao24 = state[STATE_ICAO24] if isinstance(state[STATE_ICAO24], str) else None
    return FlightCandidate(
        flight=FlightIdent(iata=callsign, icao24=icao24),
        aircraft=Aircraft(icao24=icao24),
        status=FlightStatus.ACTIVE.value,
        source=FlightSource.FALLBACK,
    )


def merge_lookup(candidate: FlightCandidate, found: FlightCandidate) -> FlightCandidate:
    """Copy airline, airport and aircraft details from a lookup result."""
    return candidate.model_copy(update={
        "airline": candidate.airline.model_copy(update={
            "name": found.airline.name or candidate.airline.name,
            "iata": found.airline.iata or candidate.airline.iata,
            "icao": found.airline.icao or candidate.airline.icao,
        }),
        "departure": candidate.departure.model_copy(update={
            "airport": found.departure.airport or candidate.departure.airport,
            "iata": found.departure.iata,
            "icao": found.departure.icao,
        }),
        "arrival": candidate.arrival.model_copy(update={
            "airport": found.arrival.airport or candidate.arrival.airport,
            "iata": found.arrival.iata,
            "icao": found.arrival.icao,
        }),
        "flight": candidate.flight.model_copy(update={
            "number": found.flight.number or candidate.flight.number,
            "icao": found.flight.icao or candidate.flight.icao,
        }),
        "aircraft": candidate.aircraft.model_copy(update={
            "registration": found.aircraft.registration,
            "iata": found.aircraft.iata,
            "icao": found.aircraft.icao,
            "icao24": candidate.aircraft.icao24 or found.aircraft.icao24,
        }),
    })


class LiveFallbackSource:
    """Combines OpenSky live states with an Aviationstack detail lookup."""

    def __init__(self, opensky: OpenSkyClient, aviationstack: AviationstackClient):
        self.opensky = opensky
        self.aviationstack = aviationstack

    async def fetch_live_fallback_flight(
        self,
        now: datetime,
        patterns: tuple[str, ...],
    ) -> FlightCandidate | None:
        """
        Find a live flight whose callsign matches today's patterns.

        Returns:
            Candidate (status active), or None when OpenSky is unusable or
            no callsign matches
        """
        if not self.opensky.has_credentials:
            logger.info("OpenSky credentials not configured, skipping live fallback")
            return None

        states = await self.opensky.get_states(now)
        if not states:
            return None

        match = find_matching_state(states, patterns)
        if match is None:
            logger.info("No live callsign matches today's patterns")
            return None

        candidate = candidate_from_state(match)
        logger.info(f"Live fallback match: {candidate.flight.iata}")

        if self.aviationstack.is_configured:
            found = await self.aviationstack.lookup_flight(candidate.flight.iata)
            if found is not None:
                candidate = merge_lookup(candidate, found)
                logger.info(f"Enriched {candidate.flight.iata} with Aviationstack details")
            else:
                logger.info(f"No Aviationstack details for {candidate.flight.iata}")

        return candidate


__all__ = [
    "LiveFallbackSource",
    "find_matching_state",
    "candidate_from_state",
    "merge_lookup",
]
