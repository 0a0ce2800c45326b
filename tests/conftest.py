"""
Shared fixtures for the flight-of-the-day tests.

HTTP is faked with httpx.MockTransport and backoff sleeps are recorded
instead of awaited, so nothing here touches the network or waits.
"""

import httpx
import pytest

from src.utils.logger import setup_logger
from src.feed.config import settings
from src.feed.components.http import ResilientFetcher
from src.feed.components.token_cache import OAuthTokenProvider, TokenCache
from src.feed.components.aviationstack import AviationstackClient
from src.feed.components.opensky import OpenSkyClient

from tests.helpers import AUTH_URL, AVIATIONSTACK_URL, OPENSKY_URL, FakeAPI, SleepRecorder


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Ignore credentials from the developer's environment."""
    setup_logger(level="WARNING")  # Less noise during tests
    monkeypatch.setattr(settings.aviationstack, "access_key", None)
    monkeypatch.setattr(settings.opensky, "client_id", None)
    monkeypatch.setattr(settings.opensky, "client_secret", None)
    monkeypatch.setattr(settings.feed, "probe_connectivity", False)


@pytest.fixture
def api() -> FakeAPI:
    return FakeAPI()


@pytest.fixture
def sleeps() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def fetcher(api, sleeps) -> ResilientFetcher:
    return ResilientFetcher(
        timeout=10,
        probe_timeout=5,
        max_attempts=3,
        backoff=2,
        overload_backoff=3,
        transport=httpx.MockTransport(api),
        sleep=sleeps,
    )


@pytest.fixture
def token_cache() -> TokenCache:
    return TokenCache()


@pytest.fixture
def token_provider(fetcher, token_cache) -> OAuthTokenProvider:
    return OAuthTokenProvider(
        fetcher,
        cache=token_cache,
        client_id="feed-client",
        client_secret="s3cret",
        auth_url=AUTH_URL,
    )


@pytest.fixture
def aviationstack(fetcher) -> AviationstackClient:
    return AviationstackClient(
        fetcher,
        access_key="test-key",
        base_url=AVIATIONSTACK_URL,
        restrict_to_today_utc=True,
        include_active=False,
    )


@pytest.fixture
def opensky(fetcher, token_provider) -> OpenSkyClient:
    return OpenSkyClient(fetcher, token_provider, base_url=OPENSKY_URL)
