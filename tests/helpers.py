"""Fakes and payload builders shared by the tests."""

from datetime import datetime, timezone
from typing import Any, Callable

import httpx

from src.feed.config import FeedSettings, Settings
from src.feed.components.aviationstack import AviationstackClient
from src.feed.components.feed_writer import FeedWriter
from src.feed.components.opensky import OpenSkyClient
from src.feed.components.token_cache import OAuthTokenProvider
from src.feed.jobs.feed_job import FlightOfTheDayJob


AVIATIONSTACK_URL = "https://api.aviationstack.test/v1"
OPENSKY_URL = "https://opensky.test/api"
AUTH_URL = "https://auth.opensky.test/token"

FLIGHTS_PATH = "/v1/flights"
AIRCRAFT_TYPES_PATH = "/v1/aircraft_types"
STATES_PATH = "/api/states/all"
TOKEN_PATH = "/token"

# Monday 12 October 2026; patterns: 12, 1012, 1210, OC, OCT, MO, MON
RUN_TIME = datetime(2026, 10, 12, 12, 0, tzinfo=timezone.utc)
RUN_PATTERNS = ("12", "1012", "1210", "OC", "OCT", "MO", "MON")


class SleepRecorder:
    """Stands in for asyncio.sleep and remembers requested delays."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


Handler = httpx.Response | Callable[[httpx.Request], Any]


class FakeAPI:
    """
    Path-based router for httpx.MockTransport.

    Each path maps to a list of responses/handlers consumed in order; the
    last one repeats. Unknown paths answer 404.
    """

    def __init__(self):
        self.routes: dict[str, list[Handler]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, path: str, *responses: Handler) -> "FakeAPI":
        self.routes[path] = list(responses)
        return self

    def calls(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    def __call__(self, request: httpx.Request):
        self.requests.append(request)
        queue = self.routes.get(request.url.path)
        if not queue:
            return httpx.Response(404, json={"error": "not found"})
        handler = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(handler, httpx.Response):
            return handler
        return handler(request)


def token_response(token: str = "tok-1", expires_in: int = 1800) -> httpx.Response:
    return httpx.Response(200, json={"access_token": token, "expires_in": expires_in, "token_type": "Bearer"})


def flights_response(*flights: dict) -> httpx.Response:
    return httpx.Response(200, json={"pagination": {"count": len(flights)}, "data": list(flights)})


def flight_payload(
    iata: str | None = "AB12",
    number: str | None = "12",
    icao: str | None = None,
    status: str | None = "scheduled",
    scheduled: str | None = "2026-10-12T14:00:00+00:00",
    dep_iata: str | None = "FCO",
    arr_iata: str | None = "LHR",
    airline: str | None = "Test Air",
    aircraft_icao: str | None = None,
) -> dict:
    """Aviationstack-shaped flight record."""
    return {
        "flight_date": "2026-10-12",
        "flight_status": status,
        "departure": {
            "airport": "Leonardo da Vinci" if dep_iata else None,
            "iata": dep_iata,
            "scheduled": scheduled,
            "estimated": None,
            "actual": None,
        },
        "arrival": {
            "airport": "Heathrow" if arr_iata else None,
            "iata": arr_iata,
        },
        "airline": {"name": airline, "iata": "AB"},
        "flight": {"number": number, "iata": iata, "icao": icao},
        "aircraft": {"icao": aircraft_icao} if aircraft_icao else None,
    }


def state_vector(icao24: str, callsign: str | None) -> list:
    """OpenSky-shaped state vector."""
    return [icao24, callsign, "Italy", 1760270000, 1760270000, 12.2, 41.8, 10000.0,
            False, 230.0, 90.0, 0.0, None, 10050.0, "1234", False, 0]


def states_response(*states: list) -> httpx.Response:
    return httpx.Response(200, json={"time": 1760270400, "states": list(states)})


def make_job(fetcher, tmp_path, access_key="test-key", with_opensky=True, **feed_overrides) -> FlightOfTheDayJob:
    """Job wired from real components on top of a faked fetcher."""
    feed_settings = FeedSettings(**{"probe_connectivity": False, **feed_overrides})
    provider = OAuthTokenProvider(
        fetcher,
        client_id="feed-client" if with_opensky else None,
        client_secret="s3cret" if with_opensky else None,
        auth_url=AUTH_URL,
    )
    return FlightOfTheDayJob(
        aviationstack=AviationstackClient(fetcher, access_key=access_key, base_url=AVIATIONSTACK_URL),
        opensky=OpenSkyClient(fetcher, provider, base_url=OPENSKY_URL),
        writer=FeedWriter(tmp_path / "flight_feed.xml", feed_settings),
        fetcher=fetcher,
        app_settings=Settings(feed=feed_settings),
    )
