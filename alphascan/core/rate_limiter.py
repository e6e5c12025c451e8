"""Per-source fixed-window rate limiting for upstream API calls."""

from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable

from alphascan.core.config import Settings, parse_rate_limit, settings
from alphascan.core.logging import get_logger


logger = get_logger("core.rate_limiter")

__all__ = [
    "FixedWindowRateLimiter",
    "RateLimiterRegistry",
    "get_rate_limiter_registry",
    "parse_rate_limit",
]


class FixedWindowRateLimiter:
    """
    Fixed-window request counter for one upstream source.

    At most ``limit`` acquisitions succeed per ``window`` seconds. When the
    quota is exhausted, callers sleep until the window resets instead of
    failing. Check-and-increment happens under an asyncio lock so concurrent
    callers never overshoot the quota.
    """

    def __init__(
        self,
        source: str,
        limit: int,
        window: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize rate limiter.

        Args:
            source: Upstream identifier for logging
            limit: Maximum requests per window
            window: Window length in seconds
            clock: Monotonic time source
            sleep: Async sleep function
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window <= 0:
            raise ValueError("window must be > 0")
        self.source = source
        self.limit = limit
        self.window = float(window)
        self._clock = clock
        self._sleep = sleep
        self._window_start = clock()
        self._count = 0
        self._blocked_until = 0.0
        self._lock: asyncio.Lock | None = None

    def _roll_window(self, now: float) -> None:
        if now - self._window_start >= self.window:
            self._window_start = now
            self._count = 0

    async def acquire(self) -> float:
        """
        Take one slot in the current window, waiting if necessary.

        Returns:
            Total seconds spent waiting
        """
        if self._lock is None:
            self._lock = asyncio.Lock()

        waited = 0.0
        while True:
            async with self._lock:
                now = self._clock()
                self._roll_window(now)

                if now < self._blocked_until:
                    wait_time = self._blocked_until - now
                elif self._count < self.limit:
                    self._count += 1
                    return waited
                else:
                    wait_time = self._window_start + self.window - now

            logger.info(
                f"Rate limit reached for {self.source}, waiting {wait_time:.1f}s"
            )
            await self._sleep(max(wait_time, 0.0))
            waited += max(wait_time, 0.0)

    def penalize(self, seconds: float) -> None:
        """Block all acquisitions for ``seconds`` (after an HTTP 429)."""
        until = self._clock() + max(seconds, 0.0)
        if until > self._blocked_until:
            self._blocked_until = until
            logger.warning(f"{self.source} rate limited upstream, backing off {seconds:.1f}s")

    def status(self) -> dict:
        """Get current rate limiter status."""
        now = self._clock()
        self._roll_window(now)
        return {
            "source": self.source,
            "limit": self.limit,
            "window_seconds": self.window,
            "used": self._count,
            "remaining": max(self.limit - self._count, 0),
            "resets_in": max(self._window_start + self.window - now, 0.0),
            "blocked_for": max(self._blocked_until - now, 0.0),
        }


class RateLimiterRegistry:
    """One limiter per upstream source, created from "N/unit" quotas."""

    def __init__(
        self,
        quotas: dict[str, str] | None = None,
        *,
        default_quota: str = "60/minute",
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._quotas = dict(quotas or {})
        self._default_quota = default_quota
        self._clock = clock
        self._sleep = sleep
        self._limiters: dict[str, FixedWindowRateLimiter] = {}

    @classmethod
    def from_settings(cls, s: Settings | None = None) -> "RateLimiterRegistry":
        s = s or settings
        return cls(
            {
                "finnhub": s.rate_limit_finnhub,
                "yahoo": s.rate_limit_yahoo,
                "alpha_vantage": s.rate_limit_alpha_vantage,
            }
        )

    def get(self, source: str) -> FixedWindowRateLimiter:
        """Get or create the limiter for ``source``."""
        if source not in self._limiters:
            limit, window = parse_rate_limit(
                self._quotas.get(source, self._default_quota)
            )
            self._limiters[source] = FixedWindowRateLimiter(
                source, limit, window, clock=self._clock, sleep=self._sleep
            )
            logger.info(f"Created rate limiter '{source}': {limit}/{window}s")
        return self._limiters[source]

    def status(self) -> list[dict]:
        return [limiter.status() for limiter in self._limiters.values()]


_registry: RateLimiterRegistry | None = None


def get_rate_limiter_registry() -> RateLimiterRegistry:
    """Process-wide limiter registry shared by concurrent scans."""
    global _registry
    if _registry is None:
        _registry = RateLimiterRegistry.from_settings()
    return _registry
