"""
Rate-limited, deduplicated, cached HTTP access to upstream market-data APIs.

Every upstream JSON request goes through ``UpstreamGateway``:

    per-source fixed-window limiter -> dedup(httpx GET, deadline)
          -> 429: back off (Retry-After or fallback), retry (bounded)
          -> 403: UpstreamForbiddenError
          -> other failures: UpstreamUnavailableError

``fetch_cached`` layers the TTL cache (with stale fallback) on top.
"""

from __future__ import annotations

from typing import Any, Mapping

import httpx

from alphascan.cache import DataClass, HybridCache, ttl_for
from alphascan.core.config import settings
from alphascan.core.exceptions import (
    RateLimitedError,
    UpstreamForbiddenError,
    UpstreamUnavailableError,
)
from alphascan.core.logging import get_logger
from alphascan.core.rate_limiter import RateLimiterRegistry

from .resilience import RequestDeduplicator, generate_request_key


logger = get_logger("data_providers.gateway")

# Query params never included in dedup/cache keys
_SECRET_PARAMS = {"token", "apikey", "api_key"}


def _parse_retry_after(value: str | None) -> float | None:
    if not value:
        return None
    try:
        seconds = float(value)
    except ValueError:
        return None
    return seconds if seconds >= 0 else None


class UpstreamGateway:
    """Shared entry point for upstream HTTP calls."""

    def __init__(
        self,
        cache: HybridCache,
        limiters: RateLimiterRegistry,
        deduplicator: RequestDeduplicator,
        client: httpx.AsyncClient | None = None,
        *,
        max_retries: int | None = None,
        fallback_backoff: float | None = None,
    ):
        self.cache = cache
        self.limiters = limiters
        self.deduplicator = deduplicator
        self._client = client
        self._owns_client = client is None
        self.max_retries = (
            max_retries if max_retries is not None else settings.rate_limit_max_retries
        )
        self.fallback_backoff = (
            fallback_backoff
            if fallback_backoff is not None
            else settings.rate_limit_fallback_backoff
        )

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=settings.upstream_timeout)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    @staticmethod
    def request_key(url: str, params: Mapping[str, Any] | None = None) -> str:
        public = {k: v for k, v in (params or {}).items() if k not in _SECRET_PARAMS}
        return generate_request_key("GET", url, public)

    async def fetch_rate_limited(
        self,
        source: str,
        url: str,
        params: Mapping[str, Any] | None = None,
    ) -> Any:
        """
        GET ``url`` as JSON through the source's rate limiter.

        Limiter waits and 429 backoff happen outside the request deadline;
        only the HTTP exchange itself is raced against it. Concurrent
        duplicates share the in-flight exchange and skip the limiter.

        Args:
            source: Upstream name selecting the rate limiter (e.g. "finnhub")
            url: Endpoint URL
            params: Query parameters

        Returns:
            Decoded JSON body

        Raises:
            RateLimitedError: Upstream still answered 429 after all retries
            UpstreamForbiddenError: Upstream answered 403
            UpstreamUnavailableError: Network failure or other non-2xx answer
            UpstreamTimeoutError: An HTTP exchange missed its deadline
        """
        key = self.request_key(url, params)
        limiter = self.limiters.get(source)

        for attempt in range(self.max_retries + 1):
            if not self.deduplicator.is_pending(key):
                await limiter.acquire()
            response = await self.deduplicator.deduplicate(
                key, lambda: self._get(source, url, params)
            )

            if response.status_code == 429:
                backoff = _parse_retry_after(response.headers.get("Retry-After"))
                if backoff is None:
                    backoff = self.fallback_backoff
                logger.warning(
                    f"{source} returned 429 (attempt {attempt + 1}/{self.max_retries + 1}), "
                    f"backing off {backoff:.1f}s"
                )
                limiter.penalize(backoff)
                continue

            if response.status_code == 403:
                raise UpstreamForbiddenError(details={"source": source, "url": url})

            if response.status_code >= 400:
                raise UpstreamUnavailableError(
                    message=f"{source} returned HTTP {response.status_code}",
                    details={"source": source, "status": response.status_code},
                )

            try:
                return response.json()
            except ValueError as e:
                raise UpstreamUnavailableError(
                    message=f"{source} returned invalid JSON",
                    details={"source": source},
                ) from e

        raise RateLimitedError(
            details={"source": source, "attempts": self.max_retries + 1}
        )

    async def _get(
        self,
        source: str,
        url: str,
        params: Mapping[str, Any] | None,
    ) -> httpx.Response:
        try:
            return await self.client.get(url, params=dict(params or {}))
        except httpx.HTTPError as e:
            raise UpstreamUnavailableError(
                message=f"{source} request failed: {e}",
                details={"source": source},
            ) from e

    async def fetch_cached(
        self,
        source: str,
        url: str,
        params: Mapping[str, Any] | None,
        data_class: DataClass,
    ) -> Any:
        """``fetch_rate_limited`` behind the TTL cache, serving stale data on failure."""
        key = f"{data_class.value}:{self.request_key(url, params)}"
        return await self.cache.get_or_fetch(
            key,
            lambda: self.fetch_rate_limited(source, url, params),
            ttl=ttl_for(data_class),
        )
