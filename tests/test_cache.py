"""
Tests for the two-tier market data cache.
"""

import pytest

from alphascan.cache import DataClass, HybridCache, cache_key, ttl_for
from alphascan.core.config import Settings
from alphascan.core.exceptions import UpstreamUnavailableError


class TestKeysAndTTL:
    """Tests for key building and TTL lookup."""

    def test_cache_key(self):
        assert cache_key("quote", "AAPL") == "alphascan:v1:cache:quote:AAPL"

    def test_cache_key_sanitizes_separators(self):
        assert cache_key("url", "https://x", prefix="p") == "alphascan:v1:p:url:https_//x"

    def test_ttl_per_data_class(self):
        s = Settings(cache_ttl_quote=120, cache_ttl_profile=7200)
        assert ttl_for(DataClass.QUOTE, s) == 120
        assert ttl_for("profile", s) == 7200


class TestHybridCache:
    """Tests for in-process TTL behavior and stale reads."""

    @pytest.mark.asyncio
    async def test_fresh_value_returned(self, cache):
        await cache.set("k", {"v": 1}, ttl=60)
        assert await cache.get("k") == {"v": 1}
        assert cache.stats()["hits"] == 1

    @pytest.mark.asyncio
    async def test_expired_value_is_miss_but_stale_available(self, cache, clock):
        await cache.set("k", "old", ttl=60)
        clock.advance(61)
        assert await cache.get("k") is None
        stale = cache.get_stale("k")
        assert stale is not None
        assert stale.value == "old"
        assert stale.age(clock()) == pytest.approx(61)

    @pytest.mark.asyncio
    async def test_get_or_fetch_caches(self, cache):
        calls = []

        async def factory():
            calls.append(1)
            return "fresh"

        assert await cache.get_or_fetch("k", factory, ttl=60) == "fresh"
        assert await cache.get_or_fetch("k", factory, ttl=60) == "fresh"
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_get_or_fetch_serves_stale_on_upstream_error(self, cache, clock):
        await cache.set("k", "old", ttl=60)
        clock.advance(120)

        async def failing():
            raise UpstreamUnavailableError(message="down")

        assert await cache.get_or_fetch("k", failing, ttl=60) == "old"
        assert cache.stats()["stale_hits"] == 1

    @pytest.mark.asyncio
    async def test_get_or_fetch_raises_without_stale(self, cache):
        async def failing():
            raise UpstreamUnavailableError(message="down")

        with pytest.raises(UpstreamUnavailableError):
            await cache.get_or_fetch("missing", failing, ttl=60)

    @pytest.mark.asyncio
    async def test_stale_fallback_can_be_disabled(self, cache, clock):
        await cache.set("k", "old", ttl=60)
        clock.advance(120)

        async def failing():
            raise UpstreamUnavailableError(message="down")

        with pytest.raises(UpstreamUnavailableError):
            await cache.get_or_fetch("k", failing, ttl=60, allow_stale=False)

    @pytest.mark.asyncio
    async def test_none_results_not_cached(self, cache):
        calls = []

        async def factory():
            calls.append(1)
            return None

        assert await cache.get_or_fetch("k", factory, ttl=60) is None
        assert await cache.get_or_fetch("k", factory, ttl=60) is None
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_size_bound_evicts_oldest(self, clock):
        cache = HybridCache(max_entries=2, use_shared=False, clock=clock)
        for key in ("a", "b", "c"):
            await cache.set(key, key, ttl=600)
            clock.advance(1)
        assert cache.get_stale("a") is None
        assert await cache.get("b") == "b"
        assert await cache.get("c") == "c"

    @pytest.mark.asyncio
    async def test_delete_and_clear(self, cache):
        await cache.set("a", 1, ttl=60)
        await cache.set("b", 2, ttl=60)
        await cache.delete("a")
        assert await cache.get("a") is None
        cache.clear()
        assert cache.stats()["entries"] == 0
