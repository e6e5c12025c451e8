"""
Tests for per-source fixed-window rate limiting.
"""

import asyncio

import pytest

from alphascan.core.config import parse_rate_limit
from alphascan.core.rate_limiter import FixedWindowRateLimiter, RateLimiterRegistry


class TestParseRateLimit:
    """Tests for quota strings."""

    @pytest.mark.parametrize(
        "value,expected",
        [("60/minute", (60, 60)), ("10/second", (10, 1)), ("1000/hour", (1000, 3600)), ("5/day", (5, 86400))],
    )
    def test_valid(self, value, expected):
        assert parse_rate_limit(value) == expected

    @pytest.mark.parametrize("value", ["60", "60/fortnight", "0/minute", "a/b/c"])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_rate_limit(value)


class TestFixedWindowRateLimiter:
    """Tests for blocking acquisition."""

    @pytest.mark.asyncio
    async def test_within_quota_does_not_wait(self, clock, fake_sleep):
        limiter = FixedWindowRateLimiter("test", 3, 60, clock=clock, sleep=fake_sleep)
        for _ in range(3):
            assert await limiter.acquire() == 0.0
        assert fake_sleep.calls == []

    @pytest.mark.asyncio
    async def test_exhausted_quota_waits_for_window_reset(self, clock, fake_sleep):
        limiter = FixedWindowRateLimiter("test", 2, 60, clock=clock, sleep=fake_sleep)
        await limiter.acquire()
        await limiter.acquire()
        clock.advance(15)

        waited = await limiter.acquire()

        assert waited == pytest.approx(45.0)
        assert fake_sleep.calls == [pytest.approx(45.0)]
        assert limiter.status()["used"] == 1

    @pytest.mark.asyncio
    async def test_penalize_blocks_until_backoff_elapses(self, clock, fake_sleep):
        limiter = FixedWindowRateLimiter("test", 10, 60, clock=clock, sleep=fake_sleep)
        limiter.penalize(30)
        assert limiter.status()["blocked_for"] == pytest.approx(30.0)

        waited = await limiter.acquire()

        assert waited == pytest.approx(30.0)

    @pytest.mark.asyncio
    async def test_penalize_never_shortens_existing_block(self, clock, fake_sleep):
        limiter = FixedWindowRateLimiter("test", 10, 60, clock=clock, sleep=fake_sleep)
        limiter.penalize(30)
        limiter.penalize(5)
        assert limiter.status()["blocked_for"] == pytest.approx(30.0)

    @pytest.mark.asyncio
    async def test_concurrent_callers_never_overshoot(self, clock, fake_sleep):
        limiter = FixedWindowRateLimiter("test", 3, 60, clock=clock, sleep=fake_sleep)
        waits = await asyncio.gather(*(limiter.acquire() for _ in range(5)))
        assert waits[:3] == [0.0, 0.0, 0.0]
        assert waits[3] == pytest.approx(60.0)
        assert limiter.status()["used"] <= 3

    def test_invalid_configuration(self):
        with pytest.raises(ValueError):
            FixedWindowRateLimiter("test", 0, 60)
        with pytest.raises(ValueError):
            FixedWindowRateLimiter("test", 1, 0)


class TestRateLimiterRegistry:
    """Tests for the per-source registry."""

    def test_one_limiter_per_source(self):
        registry = RateLimiterRegistry({"finnhub": "30/minute"})
        limiter = registry.get("finnhub")
        assert registry.get("finnhub") is limiter
        assert limiter.limit == 30
        assert limiter.window == 60.0

    def test_default_quota(self):
        registry = RateLimiterRegistry(default_quota="5/second")
        limiter = registry.get("unknown")
        assert (limiter.limit, limiter.window) == (5, 1.0)

    def test_status_lists_created_limiters(self):
        registry = RateLimiterRegistry()
        registry.get("a")
        registry.get("b")
        assert [s["source"] for s in registry.status()] == ["a", "b"]
