"""
OpenSky API client (fallback live source).

Provides live state vectors and aircraft metadata from the OpenSky Network.
Documentation: https://openskynetwork.github.io/opensky-api/
"""

from datetime import datetime
from typing import Any

from src.utils import logger
from src.feed.config import settings
from src.feed.components.http import ResilientFetcher
from src.feed.components.token_cache import OAuthTokenProvider


# Positions inside an OpenSky state vector array
STATE_ICAO24 = 0
STATE_CALLSIGN = 1


class OpenSkyClient:
    """
    Client for interacting with the OpenSky Network API.

    Every request is authenticated with an OAuth2 bearer token obtained
    through the shared token provider; without a token nothing is fetched.
    """

    def __init__(
        self,
        fetcher: ResilientFetcher,
        token_provider: OAuthTokenProvider,
        base_url: str | None = None,
    ):
        """
        Initialize the OpenSky client.

        Args:
            fetcher: Shared resilient fetcher
            token_provider: OAuth2 token provider (holds the cache)
            base_url: API base URL (defaults to settings)
        """
        self.fetcher = fetcher
        self.token_provider = token_provider
        self.base_url = (base_url or settings.opensky.base_url).rstrip("/")

    @property
    def has_credentials(self) -> bool:
        return self.token_provider.has_credentials

    async def _make_request(self, endpoint: str, now: datetime, retry_not_found: bool = True) -> Any:
        """GET an endpoint with a bearer token. None if no token or no data."""
        token = await self.token_provider.get_token(now)
        if not token:
            logger.info("No OpenSky token available, skipping request")
            return None

        return await self.fetcher.fetch_json(
            f"{self.base_url}{endpoint}",
            headers={"Authorization": f"Bearer {token}"},
            retry_not_found=retry_not_found,
        )

    async def get_states(self, now: datetime) -> list[list[Any]]:
        """
        Get current state vectors of all aircraft.

        Returns:
            List of state vector arrays (empty when unavailable)
        """
        logger.info("Fetching current state vectors from OpenSky API")
        data = await self._make_request("/states/all", now)
        if not isinstance(data, dict) or not isinstance(data.get("states"), list):
            return []
        states = data["states"]
        logger.info(f"OpenSky returned {len(states)} state vector(s)")
        return states

    async def get_aircraft_metadata(self, icao24: str, now: datetime) -> dict[str, Any] | None:
        """Get registry metadata for an aircraft by transponder address."""
        if not icao24:
            return None
        logger.info(f"Fetching metadata for aircraft {icao24}")
        # Unregistered transponders answer 404; retrying cannot help
        data = await self._make_request(
            f"/metadata/aircraft/icao/{icao24.lower()}", now, retry_not_found=False
        )
        return data if isinstance(data, dict) else None

    async def get_aircraft_model(self, icao24: str | None, now: datetime) -> str | None:
        """Return "<manufacturer> <model>" for an aircraft, or None."""
        if not icao24:
            return None
        metadata = await self.get_aircraft_metadata(icao24, now)
        if not metadata:
            return None
        model = f"{metadata.get('manufacturerName') or ''} {metadata.get('model') or ''}"
        return model.strip() or None


__all__ = [
    "STATE_ICAO24",
    "STATE_CALLSIGN",
    "OpenSkyClient",
]
