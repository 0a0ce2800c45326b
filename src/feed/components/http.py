"""
Resilient JSON fetcher shared by the provider clients.

Every request goes through a small state machine:

    ATTEMPTING --success--------------------------> SUCCEEDED
    ATTEMPTING --bad JSON / rejected credentials--> FAILED_PERMANENT
    ATTEMPTING --404 on a single-record lookup----> FAILED_PERMANENT
    ATTEMPTING --503 / other error / timeout------> BACKOFF --> ATTEMPTING
    BACKOFF (attempts exhausted)------------------> FAILED_PERMANENT

Callers only ever see parsed JSON or None; the reason for a failure is
logged, never raised.
"""

import asyncio
from enum import Enum
from typing import Any, Awaitable, Callable, NamedTuple

import httpx

from src.utils import logger
from src.utils.exceptions import (
    APIError,
    AuthenticationError,
    ServiceUnavailableError,
    ResourceNotFoundError,
    ProviderAPIError,
    MalformedResponseError,
    APIConnectionError,
    APITimeoutError,
)
from src.feed.config import settings


# Error codes that mean the credential itself is wrong; retrying cannot help
INVALID_CREDENTIAL_CODES = frozenset({
    # Aviationstack
    "invalid_access_key",
    "missing_access_key",
    # OAuth2 token endpoint
    "invalid_client",
    "unauthorized_client",
})


class FetchState(str, Enum):
    """States of a single fetch."""
    ATTEMPTING = "attempting"
    BACKOFF = "backoff"
    FAILED_PERMANENT = "failed_permanent"
    SUCCEEDED = "succeeded"


class FetchOutcome(str, Enum):
    """Classified result of one attempt."""
    SUCCESS = "success"
    UNAUTHORIZED = "unauthorized"
    OVERLOADED = "overloaded"
    NOT_FOUND = "not_found"
    HTTP_ERROR = "http_error"
    PARSE_ERROR = "parse_error"
    CONNECTION_ERROR = "connection_error"
    TIMEOUT = "timeout"


class FetchResult(NamedTuple):
    """Final result of a fetch, including diagnostics."""
    data: Any
    state: FetchState
    outcome: FetchOutcome
    attempts: int
    status_code: int | None = None
    error: APIError | None = None

    @property
    def ok(self) -> bool:
        return self.state == FetchState.SUCCEEDED


def classify_error(error: APIError) -> FetchOutcome:
    """Map an attempt error onto its outcome category."""
    if isinstance(error, AuthenticationError):
        return FetchOutcome.UNAUTHORIZED
    if isinstance(error, ServiceUnavailableError):
        return FetchOutcome.OVERLOADED
    if isinstance(error, ResourceNotFoundError):
        return FetchOutcome.NOT_FOUND
    if isinstance(error, ProviderAPIError):
        return FetchOutcome.HTTP_ERROR
    if isinstance(error, MalformedResponseError):
        return FetchOutcome.PARSE_ERROR
    if isinstance(error, APITimeoutError):
        return FetchOutcome.TIMEOUT
    return FetchOutcome.CONNECTION_ERROR


def extract_error_code(body: Any) -> str | None:
    """
    Pull a machine-readable error code out of an error payload.

    Understands Aviationstack ({"error": {"code": ...}}) and OAuth2
    ({"error": "invalid_client"}) shapes.
    """
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    if isinstance(error, dict):
        code = error.get("code")
        return str(code) if code else None
    if isinstance(error, str):
        return error
    return None


class ResilientFetcher:
    """
    Async HTTP client with bounded timeouts and linear backoff.

    A new httpx.AsyncClient is opened per attempt so the fetcher can be
    shared across separate event loops (one per scheduled run).
    """

    def __init__(
        self,
        timeout: float | None = None,
        probe_timeout: float | None = None,
        max_attempts: int | None = None,
        backoff: float | None = None,
        overload_backoff: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[Any]] | None = None,
    ):
        """
        Initialize the fetcher.

        Args:
            timeout: Total per-attempt timeout for data calls (seconds)
            probe_timeout: Timeout for connectivity probes (seconds)
            max_attempts: Default number of attempts per request
            backoff: Generic backoff unit; delay is backoff * attempt
            overload_backoff: Backoff unit after HTTP 503
            transport: Optional httpx transport (used by tests)
            sleep: Coroutine used for backoff delays (defaults to asyncio.sleep)
        """
        self.timeout = timeout or settings.http.timeout_seconds
        self.probe_timeout = probe_timeout or settings.http.probe_timeout_seconds
        self.max_attempts = max_attempts or settings.http.max_attempts
        self.backoff = backoff if backoff is not None else settings.http.backoff_seconds
        self.overload_backoff = (
            overload_backoff if overload_backoff is not None else settings.http.overload_backoff_seconds
        )
        self._transport = transport
        self._sleep = sleep or asyncio.sleep

    def _client(self, timeout: float) -> httpx.AsyncClient:
        # httpx would otherwise apply its own 5 s default underneath wait_for
        return httpx.AsyncClient(transport=self._transport, timeout=timeout, follow_redirects=True)

    async def _attempt(
        self,
        method: str,
        url: str,
        timeout: float,
        **kwargs: Any,
    ) -> tuple[Any, int]:
        """
        Perform one request and return (parsed JSON, status code).

        Raises:
            AuthenticationError: 401 with an invalid/missing credential payload
            ServiceUnavailableError: HTTP 503
            ResourceNotFoundError: HTTP 404
            ProviderAPIError: Any other non-2xx status
            MalformedResponseError: 2xx whose body is not JSON
            APIConnectionError: Network failure
            APITimeoutError: Attempt exceeded its time budget
        """
        try:
            async with self._client(timeout) as client:
                response = await asyncio.wait_for(
                    client.request(method, url, **kwargs),
                    timeout=timeout,
                )
        except asyncio.TimeoutError:
            raise APITimeoutError(f"Request to {url} timed out after {timeout}s", timeout=timeout)
        except httpx.TimeoutException as e:
            raise APITimeoutError(f"Request to {url} timed out: {e}", timeout=timeout)
        except httpx.HTTPError as e:
            raise APIConnectionError(f"Failed to connect to {url}: {e}")

        status = response.status_code

        if status == 401:
            code = extract_error_code(_safe_json(response))
            if code in INVALID_CREDENTIAL_CODES:
                raise AuthenticationError(
                    f"Credentials rejected by {response.url.host} ({code})",
                    status_code=status,
                    error_code=code,
                )

        if status == 503:
            raise ServiceUnavailableError(f"{response.url.host} is overloaded (HTTP 503)")

        if status == 404:
            raise ResourceNotFoundError(
                f"Not found: {_redact(str(response.url))}",
                response_body=response.text[:500],
            )

        if not response.is_success:
            raise ProviderAPIError(
                message=f"Request failed: HTTP {status}",
                status_code=status,
                response_body=response.text[:500],
            )

        try:
            return response.json(), status
        except ValueError as e:
            raise MalformedResponseError(f"Invalid JSON from {response.url.host}: {e}", status_code=status)

    def _next_state(
        self,
        outcome: FetchOutcome,
        attempt: int,
        max_attempts: int,
        retry_not_found: bool = True,
    ) -> tuple[FetchState, float]:
        """Transition out of ATTEMPTING given the attempt outcome."""
        if outcome == FetchOutcome.SUCCESS:
            return FetchState.SUCCEEDED, 0.0
        if outcome in (FetchOutcome.PARSE_ERROR, FetchOutcome.UNAUTHORIZED):
            return FetchState.FAILED_PERMANENT, 0.0
        if outcome == FetchOutcome.NOT_FOUND and not retry_not_found:
            return FetchState.FAILED_PERMANENT, 0.0
        if attempt >= max_attempts:
            return FetchState.FAILED_PERMANENT, 0.0
        if outcome == FetchOutcome.OVERLOADED:
            return FetchState.BACKOFF, self.overload_backoff * attempt
        return FetchState.BACKOFF, self.backoff * attempt

    async def request_json(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        max_attempts: int | None = None,
        timeout: float | None = None,
        retry_not_found: bool = True,
    ) -> FetchResult:
        """
        Run the retry state machine for one logical request.

        A 404 is retried like any other HTTP error unless retry_not_found
        is False; lookups of a single record pass False.

        Never raises for HTTP or network problems; inspect the result.
        """
        max_attempts = max_attempts or self.max_attempts
        timeout = timeout or self.timeout
        kwargs: dict[str, Any] = {}
        if params:
            kwargs["params"] = params
        if data is not None:
            kwargs["data"] = data
        if headers:
            kwargs["headers"] = headers

        attempt = 0
        state = FetchState.ATTEMPTING
        outcome = FetchOutcome.CONNECTION_ERROR
        status_code: int | None = None
        last_error: APIError | None = None
        body: Any = None

        while state in (FetchState.ATTEMPTING, FetchState.BACKOFF):
            attempt += 1
            logger.debug(f"{method} {_redact(url)} attempt {attempt}/{max_attempts}")
            try:
                body, status_code = await self._attempt(method, url, timeout, **kwargs)
                outcome = FetchOutcome.SUCCESS
                last_error = None
            except APIError as e:
                outcome = classify_error(e)
                last_error = e
                status_code = getattr(e, "status_code", None)
                body = None

            state, delay = self._next_state(outcome, attempt, max_attempts, retry_not_found)

            if state == FetchState.BACKOFF:
                logger.warning(
                    f"{method} {_redact(url)} failed ({outcome.value}: {last_error}), "
                    f"retrying in {delay:.0f}s"
                )
                await self._sleep(delay)

        if state == FetchState.FAILED_PERMANENT:
            _log_failure(method, url, outcome, attempt, last_error)

        return FetchResult(
            data=body,
            state=state,
            outcome=outcome,
            attempts=attempt,
            status_code=status_code,
            error=last_error,
        )

    async def fetch_json(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        max_attempts: int | None = None,
        retry_not_found: bool = True,
    ) -> Any:
        """GET url and return parsed JSON, or None on any failure."""
        result = await self.request_json(
            "GET",
            url,
            params=params,
            headers=headers,
            max_attempts=max_attempts,
            retry_not_found=retry_not_found,
        )
        return result.data if result.ok else None

    async def post_form(
        self,
        url: str,
        data: dict[str, Any],
        max_attempts: int = 1,
    ) -> FetchResult:
        """POST a form-encoded body. Single attempt unless told otherwise."""
        return await self.request_json(
            "POST",
            url,
            data=data,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            max_attempts=max_attempts,
        )

    async def probe(self, url: str) -> bool:
        """
        Check that a host answers at all.

        Any HTTP response counts as reachable; only network errors and
        timeouts count as unreachable.
        """
        try:
            async with self._client(self.probe_timeout) as client:
                response = await asyncio.wait_for(client.get(url), timeout=self.probe_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Connectivity probe to {url} timed out after {self.probe_timeout}s")
            return False
        except httpx.HTTPError as e:
            logger.warning(f"Connectivity probe to {url} failed: {e}")
            return False

        logger.info(f"Connectivity probe to {url}: HTTP {response.status_code}")
        return True


def _safe_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _redact(url: str) -> str:
    # Query strings carry the Aviationstack access key
    return url.split("?", 1)[0]


def _log_failure(
    method: str,
    url: str,
    outcome: FetchOutcome,
    attempts: int,
    error: APIError | None,
) -> None:
    target = _redact(url)
    if outcome == FetchOutcome.UNAUTHORIZED:
        logger.error(f"{method} {target}: authentication failed, not retrying ({error})")
    elif outcome == FetchOutcome.PARSE_ERROR:
        logger.error(f"{method} {target}: malformed response, not retrying ({error})")
    elif outcome == FetchOutcome.NOT_FOUND and attempts == 1:
        logger.warning(f"{method} {target}: not found ({error})")
    else:
        logger.error(f"{method} {target}: giving up after {attempts} attempt(s) ({outcome.value}: {error})")


__all__ = [
    "INVALID_CREDENTIAL_CODES",
    "FetchState",
    "FetchOutcome",
    "FetchResult",
    "ResilientFetcher",
    "classify_error",
    "extract_error_code",
]
