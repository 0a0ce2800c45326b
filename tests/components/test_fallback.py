"""Tests for the OpenSky live fallback."""

import asyncio

import httpx

from src.feed.components.fallback import LiveFallbackSource, find_matching_state
from src.feed.components.aviationstack import AviationstackClient
from src.feed.components.models import FlightSource
from src.feed.components.opensky import OpenSkyClient
from src.feed.components.token_cache import OAuthTokenProvider

from tests.helpers import (
    AUTH_URL,
    AVIATIONSTACK_URL,
    FLIGHTS_PATH,
    OPENSKY_URL,
    RUN_PATTERNS,
    RUN_TIME,
    STATES_PATH,
    TOKEN_PATH,
    flight_payload,
    flights_response,
    state_vector,
    states_response,
    token_response,
)

LIVE_STATES = states_response(
    state_vector("3c6444", "DLH400  "),
    state_vector("4ca7b4", None),
    state_vector("400f01", "BAW9    "),
    state_vector("4b1805", "MON4821 "),
    state_vector("39de4f", "AFR1012 "),
)


def test_find_matching_state_first_match_wins():
    states = [
        state_vector("a", "   "),
        state_vector("b", "XYZ1"),
        state_vector("c", "abc12 "),
        state_vector("d", "MON1"),
    ]
    assert find_matching_state(states, RUN_PATTERNS)[0] == "c"
    assert find_matching_state([["short"]], RUN_PATTERNS) is None


def test_live_match_without_enrichment(api, fetcher, opensky):
    api.add(TOKEN_PATH, token_response("tok-1"))
    api.add(STATES_PATH, LIVE_STATES)
    no_key = AviationstackClient(fetcher, access_key=None, base_url=AVIATIONSTACK_URL)
    source = LiveFallbackSource(opensky, no_key)

    flight = asyncio.run(source.fetch_live_fallback_flight(RUN_TIME, RUN_PATTERNS))

    assert flight.flight.iata == "MON4821"
    assert flight.flight.icao24 == "4b1805"
    assert flight.status == "active"
    assert flight.source == FlightSource.FALLBACK
    assert flight.airline.name is None
    assert flight.departure.airport is None
    assert api.calls(STATES_PATH)[0].headers["authorization"] == "Bearer tok-1"
    assert api.calls(FLIGHTS_PATH) == []


def test_live_match_enriched_from_aviationstack(api, opensky, aviationstack):
    api.add(TOKEN_PATH, token_response())
    api.add(STATES_PATH, LIVE_STATES)
    api.add(FLIGHTS_PATH, flights_response(
        flight_payload(iata="MON4821", icao="MON4821", airline="Monarch", aircraft_icao="A321")
    ))
    source = LiveFallbackSource(opensky, aviationstack)

    flight = asyncio.run(source.fetch_live_fallback_flight(RUN_TIME, RUN_PATTERNS))

    assert flight.airline.name == "Monarch"
    assert flight.departure.airport == "Leonardo da Vinci"
    assert flight.departure.iata == "FCO"
    assert flight.arrival.iata == "LHR"
    assert flight.aircraft.icao == "A321"
    assert flight.aircraft.icao24 == "4b1805"
    assert flight.status == "active"
    assert api.calls(FLIGHTS_PATH)[0].url.params["flight_iata"] == "MON4821"


def test_enrichment_failure_keeps_the_candidate(api, opensky, aviationstack, sleeps):
    api.add(TOKEN_PATH, token_response())
    api.add(STATES_PATH, LIVE_STATES)
    api.add(FLIGHTS_PATH, httpx.Response(500))
    source = LiveFallbackSource(opensky, aviationstack)

    flight = asyncio.run(source.fetch_live_fallback_flight(RUN_TIME, RUN_PATTERNS))

    assert flight.flight.iata == "MON4821"
    assert flight.airline.name is None
    assert sleeps.delays == [2, 4]


def test_no_token_means_no_fallback(api, fetcher, aviationstack):
    provider = OAuthTokenProvider(fetcher, client_id=None, client_secret=None, auth_url=AUTH_URL)
    opensky = OpenSkyClient(fetcher, provider, base_url=OPENSKY_URL)
    source = LiveFallbackSource(opensky, aviationstack)

    assert asyncio.run(source.fetch_live_fallback_flight(RUN_TIME, RUN_PATTERNS)) is None
    assert api.requests == []


def test_token_exchange_failure_means_no_fallback(api, opensky, aviationstack):
    api.add(TOKEN_PATH, httpx.Response(401, json={"error": "invalid_client"}))
    source = LiveFallbackSource(opensky, aviationstack)

    assert asyncio.run(source.fetch_live_fallback_flight(RUN_TIME, RUN_PATTERNS)) is None
    assert api.calls(STATES_PATH) == []


def test_no_matching_callsign(api, opensky, aviationstack):
    api.add(TOKEN_PATH, token_response())
    api.add(STATES_PATH, states_response(state_vector("1", "BAW9"), state_vector("2", "DLH400")))
    source = LiveFallbackSource(opensky, aviationstack)

    assert asyncio.run(source.fetch_live_fallback_flight(RUN_TIME, RUN_PATTERNS)) is None


def test_token_is_reused_across_opensky_calls(api, opensky):
    api.add(TOKEN_PATH, token_response())
    api.add(STATES_PATH, states_response())
    api.add("/api/metadata/aircraft/icao/4b1805", httpx.Response(200, json={
        "manufacturerName": "Airbus", "model": "A321-231", "typecode": "A321"
    }))

    asyncio.run(opensky.get_states(RUN_TIME))
    model = asyncio.run(opensky.get_aircraft_model("4B1805", RUN_TIME))

    assert model == "Airbus A321-231"
    assert len(api.calls(TOKEN_PATH)) == 1
