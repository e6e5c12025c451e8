"""Core infrastructure: settings, logging, exceptions, rate limiting."""

from .config import get_settings, parse_rate_limit, settings
from .exceptions import (
    AppException,
    InsufficientDataError,
    InvalidFilterError,
    RateLimitedError,
    UniverseUnavailableError,
    UpstreamForbiddenError,
    UpstreamTimeoutError,
    UpstreamUnavailableError,
)


__all__ = [
    "AppException",
    "InsufficientDataError",
    "InvalidFilterError",
    "RateLimitedError",
    "UniverseUnavailableError",
    "UpstreamForbiddenError",
    "UpstreamTimeoutError",
    "UpstreamUnavailableError",
    "get_settings",
    "parse_rate_limit",
    "settings",
]
