"""
OAuth2 client-credentials token handling for the OpenSky API.

The cache is a plain object owned by whoever builds the pipeline and
injected into the clients that need a bearer token, so tests can drive it
with any clock value.
"""

from datetime import datetime, timedelta
from typing import NamedTuple

from src.utils import logger
from src.feed.config import settings
from src.feed.components.http import ResilientFetcher, FetchOutcome


# Refresh this long before the provider-declared expiry
EXPIRY_MARGIN = timedelta(seconds=60)

CredentialKey = tuple[str, str]


class TokenCacheEntry(NamedTuple):
    """A bearer token and the instant it stops being usable."""
    token: str
    expires_at: datetime


class TokenCache:
    """In-memory token store keyed by credential pair."""

    def __init__(self):
        self._entries: dict[CredentialKey, TokenCacheEntry] = {}

    def is_valid(self, key: CredentialKey, now: datetime) -> bool:
        entry = self._entries.get(key)
        return entry is not None and now < entry.expires_at

    def get(self, key: CredentialKey, now: datetime) -> str | None:
        """Return the cached token for key if it has not expired."""
        if self.is_valid(key, now):
            return self._entries[key].token
        return None

    def set(self, key: CredentialKey, token: str, expires_at: datetime) -> None:
        self._entries[key] = TokenCacheEntry(token=token, expires_at=expires_at)


class OAuthTokenProvider:
    """
    Fetches and caches client-credentials tokens.

    A single failed exchange yields None for that call. If the token
    endpoint rejects the credentials outright, the provider disables itself
    for the rest of the process instead of asking again on every call.
    """

    def __init__(
        self,
        fetcher: ResilientFetcher,
        cache: TokenCache | None = None,
        client_id: str | None = None,
        client_secret: str | None = None,
        auth_url: str | None = None,
    ):
        """
        Initialize the token provider.

        Args:
            fetcher: HTTP fetcher used for the token exchange
            cache: Token cache (a private one is created if omitted)
            client_id: OAuth2 client ID
            client_secret: OAuth2 client secret
            auth_url: Token endpoint URL
        """
        self.fetcher = fetcher
        self.cache = cache if cache is not None else TokenCache()
        self.client_id = client_id or settings.opensky.client_id
        self.client_secret = client_secret or settings.opensky.client_secret
        self.auth_url = auth_url or settings.opensky.auth_url
        self._disabled = False

    @property
    def has_credentials(self) -> bool:
        return bool(self.client_id and self.client_secret)

    @property
    def disabled(self) -> bool:
        return self._disabled

    @property
    def _key(self) -> CredentialKey:
        return (self.client_id or "", self.client_secret or "")

    async def get_token(self, now: datetime) -> str | None:
        """
        Return a usable bearer token, or None if none can be obtained.

        Args:
            now: Current (frozen) time used for expiry checks
        """
        if not self.has_credentials or self._disabled:
            return None

        cached = self.cache.get(self._key, now)
        if cached:
            logger.debug("Using cached OpenSky token")
            return cached

        logger.info("Fetching OAuth2 token from OpenSky...")
        result = await self.fetcher.post_form(
            self.auth_url,
            data={
                "grant_type": "client_credentials",
                "client_id": self.client_id,
                "client_secret": self.client_secret,
            },
        )

        if not result.ok:
            if result.outcome == FetchOutcome.UNAUTHORIZED or result.status_code in (400, 401):
                logger.warning("OpenSky rejected the client credentials; live fallback disabled for this run")
                self._disabled = True
            else:
                logger.warning(f"OAuth token fetch failed ({result.outcome.value})")
            return None

        token_data = result.data if isinstance(result.data, dict) else {}
        token = token_data.get("access_token")
        if not token:
            logger.warning("OAuth response missing access_token")
            return None

        try:
            lifetime = timedelta(seconds=int(token_data.get("expires_in", 0)))
        except (TypeError, ValueError):
            lifetime = timedelta(0)

        self.cache.set(self._key, token, now + lifetime - EXPIRY_MARGIN)
        logger.info(f"OpenSky token acquired (valid for {int(lifetime.total_seconds())}s)")
        return token


__all__ = [
    "EXPIRY_MARGIN",
    "TokenCacheEntry",
    "TokenCache",
    "OAuthTokenProvider",
]
