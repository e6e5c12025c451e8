"""
Tests for in-flight request deduplication.
"""

import asyncio

import pytest

from alphascan.core.exceptions import UpstreamTimeoutError
from alphascan.services.data_providers import RequestDeduplicator, generate_request_key


class TestRequestKey:
    """Tests for request key generation."""

    def test_params_sorted(self):
        assert generate_request_key("get", "https://api/x", {"b": 2, "a": 1}) == "GET https://api/x?a=1&b=2"

    def test_without_params(self):
        assert generate_request_key("GET", "https://api/x") == "GET https://api/x"


class TestRequestDeduplicator:
    """Tests for RequestDeduplicator."""

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_request(self):
        dedup = RequestDeduplicator(timeout=5)
        release = asyncio.Event()
        calls = []

        async def fetch():
            calls.append(1)
            await release.wait()
            return {"price": 10}

        tasks = [asyncio.create_task(dedup.deduplicate("k", fetch)) for _ in range(3)]
        await asyncio.sleep(0)
        release.set()
        results = await asyncio.gather(*tasks)

        assert results == [{"price": 10}] * 3
        assert len(calls) == 1
        assert dedup.stats()["shared"] == 2

    @pytest.mark.asyncio
    async def test_errors_fan_out_to_every_caller(self):
        dedup = RequestDeduplicator(timeout=5)
        release = asyncio.Event()

        async def fetch():
            await release.wait()
            raise ValueError("boom")

        tasks = [asyncio.create_task(dedup.deduplicate("k", fetch)) for _ in range(2)]
        await asyncio.sleep(0)
        release.set()
        results = await asyncio.gather(*tasks, return_exceptions=True)

        assert all(isinstance(r, ValueError) for r in results)

    @pytest.mark.asyncio
    async def test_completed_request_is_removed(self):
        dedup = RequestDeduplicator(timeout=5)

        async def fetch():
            return 1

        assert await dedup.deduplicate("k", fetch) == 1
        await asyncio.sleep(0)
        assert dedup.in_flight == 0
        assert await dedup.deduplicate("k", fetch) == 1
        assert dedup.stats()["started"] == 2

    @pytest.mark.asyncio
    async def test_timeout_raises_and_purges(self):
        dedup = RequestDeduplicator(timeout=5)
        release = asyncio.Event()

        async def hang():
            await release.wait()

        with pytest.raises(UpstreamTimeoutError):
            await dedup.deduplicate("k", hang, timeout=0.05)

        assert dedup.in_flight == 0
        assert dedup.stats()["timeouts"] == 1
        release.set()
        await asyncio.sleep(0)

    @pytest.mark.asyncio
    async def test_force_starts_fresh_request(self):
        dedup = RequestDeduplicator(timeout=5)
        release = asyncio.Event()
        calls = []

        async def fetch():
            calls.append(1)
            await release.wait()
            return len(calls)

        first = asyncio.create_task(dedup.deduplicate("k", fetch))
        await asyncio.sleep(0)
        second = asyncio.create_task(dedup.deduplicate("k", fetch, force=True))
        await asyncio.sleep(0)
        release.set()
        await asyncio.gather(first, second)

        assert len(calls) == 2
        assert dedup.stats()["started"] == 2

    @pytest.mark.asyncio
    async def test_stuck_entries_purged_for_new_callers(self, clock):
        dedup = RequestDeduplicator(timeout=30, clock=clock)
        release = asyncio.Event()
        calls = []

        async def fetch():
            calls.append(1)
            await release.wait()
            return "ok"

        first = asyncio.create_task(dedup.deduplicate("k", fetch))
        await asyncio.sleep(0)
        clock.advance(31)
        second = asyncio.create_task(dedup.deduplicate("k", fetch))
        await asyncio.sleep(0)
        release.set()

        assert await second == "ok"
        assert len(calls) == 2
        first.cancel()
        await asyncio.gather(first, return_exceptions=True)

    @pytest.mark.asyncio
    async def test_sub_second_deadline_in_message(self):
        dedup = RequestDeduplicator(timeout=0.4)
        release = asyncio.Event()

        async def hang():
            await release.wait()

        with pytest.raises(UpstreamTimeoutError) as exc_info:
            await dedup.deduplicate("k", hang)

        assert exc_info.value.message == "Request timed out after 0.4s"
        release.set()
        await asyncio.sleep(0)

    @pytest.mark.asyncio
    async def test_is_pending_tracks_live_requests(self, clock):
        dedup = RequestDeduplicator(timeout=30, clock=clock)
        release = asyncio.Event()

        async def fetch():
            await release.wait()
            return "ok"

        assert not dedup.is_pending("k")
        task = asyncio.create_task(dedup.deduplicate("k", fetch))
        await asyncio.sleep(0)
        assert dedup.is_pending("k")

        clock.advance(31)
        assert not dedup.is_pending("k")

        release.set()
        await task
        assert not dedup.is_pending("k")
