"""Components for the flight-of-the-day pipeline."""

from src.feed.components.http import ResilientFetcher, FetchResult, FetchState, FetchOutcome
from src.feed.components.token_cache import TokenCache, OAuthTokenProvider
from src.feed.components.patterns import build_date_patterns
from src.feed.components.models import FlightCandidate, FlightSource, ScoredCandidate, FeedItem
from src.feed.components.scoring import score_flight, rank_flights, select_best
from src.feed.components.aviationstack import AviationstackClient
from src.feed.components.opensky import OpenSkyClient
from src.feed.components.fallback import LiveFallbackSource
from src.feed.components.enricher import AircraftModelEnricher
from src.feed.components.feed_writer import FeedWriter, build_feed_item, render_rss

__all__ = [
    "ResilientFetcher",
    "FetchResult",
    "FetchState",
    "FetchOutcome",
    "TokenCache",
    "OAuthTokenProvider",
    "build_date_patterns",
    "FlightCandidate",
    "FlightSource",
    "ScoredCandidate",
    "FeedItem",
    "score_flight",
    "rank_flights",
    "select_best",
    "AviationstackClient",
    "OpenSkyClient",
    "LiveFallbackSource",
    "AircraftModelEnricher",
    "FeedWriter",
    "build_feed_item",
    "render_rss",
]
