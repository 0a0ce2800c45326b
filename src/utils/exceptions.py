"""
Custom exceptions for the flight-of-the-day service.

Provides a hierarchy of exceptions for different error scenarios:
- API errors (Aviationstack, OpenSky, OAuth token endpoint)
- Feed errors (rendering and writing the RSS file)
- Configuration errors
"""


class FlightServiceError(Exception):
    """Base exception for all flight service errors."""

    def __init__(self, message: str, *args, **kwargs):
        self.message = message
        super().__init__(message, *args, **kwargs)


# =============================================================================
# API Exceptions
# =============================================================================

class APIError(FlightServiceError):
    """Base exception for API-related errors."""
    pass


class ProviderAPIError(APIError):
    """Non-2xx response from a flight data provider."""

    def __init__(self, message: str, status_code: int | None = None, response_body: str | None = None):
        self.status_code = status_code
        self.response_body = response_body
        super().__init__(message)


class AuthenticationError(ProviderAPIError):
    """Provider rejected the access key or client credentials."""

    def __init__(self, message: str, status_code: int | None = 401, error_code: str | None = None):
        self.error_code = error_code
        super().__init__(message, status_code=status_code)


class ServiceUnavailableError(ProviderAPIError):
    """Provider is overloaded (HTTP 503)."""

    def __init__(self, message: str = "Provider temporarily unavailable"):
        super().__init__(message, status_code=503)


class ResourceNotFoundError(ProviderAPIError):
    """Provider has no such resource (HTTP 404)."""

    def __init__(self, message: str, response_body: str | None = None):
        super().__init__(message, status_code=404, response_body=response_body)


class MalformedResponseError(APIError):
    """Successful response whose body is not valid JSON."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class APIConnectionError(APIError):
    """Error when unable to connect to the API."""
    pass


class APITimeoutError(APIError):
    """Error when API request times out."""

    def __init__(self, message: str, timeout: float | None = None):
        self.timeout = timeout
        super().__init__(message)


# =============================================================================
# Feed Exceptions
# =============================================================================

class FeedError(FlightServiceError):
    """Base exception for feed rendering/writing errors."""
    pass


class FeedWriteError(FeedError):
    """Error when the RSS file cannot be written."""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        super().__init__(message)


# =============================================================================
# Configuration Exceptions
# =============================================================================

class ConfigurationError(FlightServiceError):
    """Error with service configuration."""
    pass


class MissingConfigError(ConfigurationError):
    """Error when required configuration is missing."""

    def __init__(self, config_key: str):
        self.config_key = config_key
        super().__init__(f"Missing required configuration: {config_key}")


# Export all exceptions
__all__ = [
    # Base
    "FlightServiceError",
    # API
    "APIError",
    "ProviderAPIError",
    "AuthenticationError",
    "ServiceUnavailableError",
    "MalformedResponseError",
    "APIConnectionError",
    "APITimeoutError",
    # Feed
    "FeedError",
    "FeedWriteError",
    # Configuration
    "ConfigurationError",
    "MissingConfigError",
]
