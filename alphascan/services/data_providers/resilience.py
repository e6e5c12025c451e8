"""
Request deduplication for upstream data providers.

Concurrent callers asking for the same upstream resource share one
in-flight request. Every shared request is raced against a deadline so a
hung upstream call cannot stall its duplicate callers forever.

Usage:
    dedup = RequestDeduplicator(timeout=30.0)

    key = generate_request_key("GET", url, {"symbol": "AAPL"})
    data = await dedup.deduplicate(key, lambda: client.get_json(url))
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping
from urllib.parse import urlencode

from alphascan.core.config import settings
from alphascan.core.exceptions import UpstreamTimeoutError
from alphascan.core.logging import get_logger


logger = get_logger("data_providers.resilience")


def generate_request_key(
    method: str, url: str, params: Mapping[str, Any] | None = None
) -> str:
    """Build a stable key from method, URL and sorted query params."""
    if not params:
        return f"{method.upper()} {url}"
    query = urlencode(sorted((k, str(v)) for k, v in params.items()))
    return f"{method.upper()} {url}?{query}"


@dataclass
class _InFlight:
    """An in-flight request shared by every caller with the same key."""

    task: asyncio.Task
    created_at: float


class RequestDeduplicator:
    """
    Shares in-flight requests between concurrent callers.

    The first caller for a key starts the request; later callers await the
    same task. All callers of one request share its deadline, measured from
    when the request started. Entries older than the timeout are purged so
    new callers start a fresh request instead of joining a stuck one.
    """

    def __init__(
        self,
        timeout: float | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            timeout: Per-request deadline in seconds
            clock: Monotonic time source
        """
        self._timeout = timeout if timeout is not None else settings.upstream_timeout
        self._clock = clock
        self._pending: dict[str, _InFlight] = {}
        self.started = 0
        self.shared = 0
        self.timeouts = 0

    @property
    def in_flight(self) -> int:
        return len(self._pending)

    def is_pending(self, key: str) -> bool:
        """Whether a live request for ``key`` can be joined right now."""
        entry = self._pending.get(key)
        if entry is None or entry.task.done():
            return False
        return self._clock() - entry.created_at < self._timeout

    def _discard(self, key: str, entry: _InFlight) -> None:
        if self._pending.get(key) is entry:
            del self._pending[key]

    def _on_done(self, key: str, entry: _InFlight, task: asyncio.Task) -> None:
        # Abandoned requests may finish with nobody awaiting them
        if not task.cancelled():
            task.exception()
        self._discard(key, entry)

    def _purge_expired(self, now: float) -> None:
        expired = [
            (key, entry)
            for key, entry in self._pending.items()
            if now - entry.created_at >= self._timeout
        ]
        for key, entry in expired:
            logger.warning(f"Purging stuck in-flight request {key}")
            self._discard(key, entry)

    async def deduplicate(
        self,
        key: str,
        fn: Callable[[], Awaitable[Any]],
        timeout: float | None = None,
        force: bool = False,
    ) -> Any:
        """
        Run ``fn`` once per key among concurrent callers.

        Args:
            key: Request identity (see ``generate_request_key``)
            fn: Coroutine function performing the request
            timeout: Override the deduplicator's deadline for a new request
            force: Start a fresh request even if one is in flight

        Returns:
            The shared result

        Raises:
            UpstreamTimeoutError: If the shared request misses its deadline
            Exception: Whatever ``fn`` raised, fanned out to every caller
        """
        deadline = timeout if timeout is not None else self._timeout
        now = self._clock()
        self._purge_expired(now)

        entry = None if force else self._pending.get(key)
        if entry is None:
            task = asyncio.ensure_future(fn())
            entry = _InFlight(task=task, created_at=now)
            self._pending[key] = entry
            task.add_done_callback(lambda t, k=key, e=entry: self._on_done(k, e, t))
            self.started += 1
        else:
            self.shared += 1
            logger.debug(f"Joining in-flight request {key}")

        remaining = max(deadline - (now - entry.created_at), 0.0)
        try:
            return await asyncio.wait_for(asyncio.shield(entry.task), timeout=remaining)
        except asyncio.TimeoutError:
            self.timeouts += 1
            self._discard(key, entry)
            raise UpstreamTimeoutError(
                message=f"Request timed out after {deadline:.1f}s",
                details={"key": key},
            ) from None

    def stats(self) -> dict:
        return {
            "in_flight": self.in_flight,
            "started": self.started,
            "shared": self.shared,
            "timeouts": self.timeouts,
        }
