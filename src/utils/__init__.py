"""
Utility modules for the flight-of-the-day service.

Provides:
    - logger: Loguru-based logging with stdout and optional file output
    - exceptions: Custom exception classes for error handling
"""

from src.utils.logger import logger, setup_logger
from src.utils.exceptions import (
    # Base
    FlightServiceError,
    # API
    APIError,
    ProviderAPIError,
    AuthenticationError,
    ServiceUnavailableError,
    ResourceNotFoundError,
    MalformedResponseError,
    APIConnectionError,
    APITimeoutError,
    # Feed
    FeedError,
    FeedWriteError,
    # Configuration
    ConfigurationError,
    MissingConfigError,
)

__all__ = [
    # Logger
    "logger",
    "setup_logger",
    # Base
    "FlightServiceError",
    # API
    "APIError",
    "ProviderAPIError",
    "AuthenticationError",
    "ServiceUnavailableError",
    "ResourceNotFoundError",
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
