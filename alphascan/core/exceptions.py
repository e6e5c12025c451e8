"""Custom exceptions and centralized exception handlers."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse


class AppException(Exception):
    """Base application exception with structured error response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "INTERNAL_ERROR"
    message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: str | None = None,
        error_code: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message or self.message
        self.error_code = error_code or self.error_code
        self.status_code = status_code or self.status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert to RFC 7807 problem+json style response."""
        return {
            "error": self.error_code,
            "message": self.message,
            "status": self.status_code,
            **({"details": self.details} if self.details else {}),
        }


class InvalidFilterError(AppException):
    """Scan filters are contradictory or incomplete."""

    status_code = status.HTTP_422_UNPROCESSABLE_CONTENT
    error_code = "INVALID_FILTER"
    message = "Invalid scanner filter combination"


class InsufficientDataError(AppException):
    """Not enough input data to compute anything."""

    status_code = status.HTTP_422_UNPROCESSABLE_CONTENT
    error_code = "INSUFFICIENT_DATA"
    message = "Not enough data points"


class UpstreamUnavailableError(AppException):
    """Upstream market-data source failed or is unreachable."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error_code = "UPSTREAM_UNAVAILABLE"
    message = "Market data source temporarily unavailable"


class UpstreamForbiddenError(UpstreamUnavailableError):
    """Upstream refused the request (plan restriction or unknown symbol)."""

    error_code = "UPSTREAM_FORBIDDEN"
    message = "Market data source refused the request"


class UpstreamTimeoutError(UpstreamUnavailableError):
    """Upstream request did not complete in time."""

    status_code = status.HTTP_504_GATEWAY_TIMEOUT
    error_code = "UPSTREAM_TIMEOUT"
    message = "Market data source timed out"


class RateLimitedError(AppException):
    """Upstream kept answering 429 after all retries."""

    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    error_code = "RATE_LIMITED"
    message = "Upstream rate limit exceeded. Please try again later."


class UniverseUnavailableError(AppException):
    """Candidate universe could not be built."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error_code = "UNIVERSE_UNAVAILABLE"
    message = "Symbol universe unavailable"


def register_exception_handlers(app: FastAPI) -> None:
    """Register centralized exception handlers."""

    @app.exception_handler(AppException)
    async def app_exception_handler(
        request: Request, exc: AppException
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_dict(),
            headers={"X-Request-ID": getattr(request.state, "request_id", "unknown")},
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger = logging.getLogger("alphascan.error")
        logger.exception(
            "Unhandled exception",
            extra={
                "request_id": getattr(request.state, "request_id", "unknown"),
                "path": request.url.path,
                "method": request.method,
            },
        )

        from .config import settings

        message = str(exc) if settings.debug else "An unexpected error occurred"

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "INTERNAL_ERROR",
                "message": message,
                "status": 500,
            },
            headers={"X-Request-ID": getattr(request.state, "request_id", "unknown")},
        )
