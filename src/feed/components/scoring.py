"""
Ranking of candidate flights.

Score (higher is better):
    - no departure timestamp            -> -inf (never selected)
    - 10 points lost per hour between departure and now
    - +50 scheduled, +30 active
    - +10 flight has an IATA code
    - +10 both airport IATA codes known
    - +5 per date pattern found in number/IATA/ICAO
"""

import math
from datetime import datetime
from typing import Iterable

from src.feed.components.models import FlightCandidate, FlightStatus, ScoredCandidate
from src.feed.components.patterns import matching_patterns


INELIGIBLE = -math.inf

HOURLY_PENALTY = 10.0
STATUS_BONUS = {
    FlightStatus.SCHEDULED.value: 50.0,
    FlightStatus.ACTIVE.value: 30.0,
}
IATA_CODE_BONUS = 10.0
ROUTE_BONUS = 10.0
PATTERN_BONUS = 5.0


def score_flight(flight: FlightCandidate, now: datetime, patterns: tuple[str, ...]) -> float:
    """Score a single candidate against the frozen run time."""
    departure = flight.departure_time
    if departure is None:
        return INELIGIBLE

    score = 0.0
    hours = abs((departure - now).total_seconds()) / 3600
    score -= hours * HOURLY_PENALTY

    score += STATUS_BONUS.get(flight.status or "", 0.0)

    if flight.flight.iata:
        score += IATA_CODE_BONUS
    if flight.departure.iata and flight.arrival.iata:
        score += ROUTE_BONUS

    search_text = " ".join(
        part or "" for part in (flight.flight.number, flight.flight.iata, flight.flight.icao)
    )
    score += PATTERN_BONUS * len(matching_patterns(search_text, patterns))
    return score


def rank_flights(
    flights: Iterable[FlightCandidate],
    now: datetime,
    patterns: tuple[str, ...],
) -> list[ScoredCandidate]:
    """
    Score and sort candidates, best first.

    Ineligible candidates are dropped. Ties keep their source order.
    """
    scored = [ScoredCandidate(f, score_flight(f, now, patterns)) for f in flights]
    eligible = [s for s in scored if s.score != INELIGIBLE]
    return sorted(eligible, key=lambda s: s.score, reverse=True)


def select_best(
    flights: Iterable[FlightCandidate],
    now: datetime,
    patterns: tuple[str, ...],
) -> FlightCandidate | None:
    """Return the top-ranked candidate, or None if nothing is eligible."""
    ranked = rank_flights(flights, now, patterns)
    return ranked[0].flight if ranked else None


__all__ = [
    "INELIGIBLE",
    "score_flight",
    "rank_flights",
    "select_best",
]
