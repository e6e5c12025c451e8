"""
Batched, cache-first retrieval of quotes and price history.

Symbols are split into fixed-size batches; up to ``max_concurrent_batches``
batches run concurrently as one group, and groups run in order with a short
delay between them so the upstream rate limiter is not flooded. Deadlines
belong to the providers, which race each upstream call once its rate-limit
slot is granted; a symbol waiting on the limiter is never timed out.
"""

from __future__ import annotations

import asyncio
from dataclasses import asdict, dataclass
from typing import Any, Awaitable, Callable, Optional, Sequence, TypeVar

from alphascan.cache import DataClass, HybridCache, ttl_for
from alphascan.core.exceptions import UpstreamForbiddenError, UpstreamTimeoutError
from alphascan.core.logging import get_logger
from alphascan.domain import OHLCVBar, Quote

from .base import MarketDataProvider


logger = get_logger("data_providers.batch")

T = TypeVar("T")

# Per-symbol failures beyond this are logged at debug level
_MAX_LOGGED_FAILURES = 5


@dataclass
class BatchStats:
    """Outcome tallies for one batched fetch."""

    requested: int = 0
    fetched: int = 0
    cache_hits: int = 0
    skipped: int = 0
    errors: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


class BatchFetcher:
    """Fetches many symbols through a provider, cache hits first."""

    def __init__(
        self,
        provider: MarketDataProvider,
        cache: HybridCache,
        *,
        batch_size: int = 10,
        max_concurrent_batches: int = 5,
        group_delay: float = 0.2,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if batch_size < 1 or max_concurrent_batches < 1:
            raise ValueError("batch_size and max_concurrent_batches must be >= 1")
        self.provider = provider
        self.cache = cache
        self.batch_size = batch_size
        self.max_concurrent_batches = max_concurrent_batches
        self.group_delay = group_delay
        self._sleep = sleep

    def _quote_key(self, symbol: str) -> str:
        return f"quote:{self.provider.name}:{symbol}"

    async def fetch_quotes(self, symbols: Sequence[str]) -> tuple[list[Quote], BatchStats]:
        """
        Fetch quotes for ``symbols``.

        Args:
            symbols: Symbols to fetch; duplicates are collapsed

        Returns:
            Quotes in input order (missing symbols omitted) and outcome tallies
        """
        unique = list(dict.fromkeys(s.strip().upper() for s in symbols if s and s.strip()))
        stats = BatchStats(requested=len(unique))
        found: dict[str, Quote] = {}

        pending = []
        for symbol in unique:
            cached = await self.cache.get(self._quote_key(symbol))
            if cached is not None:
                found[symbol] = cached if isinstance(cached, Quote) else Quote.model_validate(cached)
                stats.cache_hits += 1
            else:
                pending.append(symbol)

        if stats.cache_hits:
            logger.info(f"Quote cache hits: {stats.cache_hits}/{len(unique)}")

        async def fetch_one(symbol: str) -> Optional[Quote]:
            quote = await self.provider.fetch_quote(symbol)
            if quote is not None:
                await self.cache.set(self._quote_key(symbol), quote, ttl_for(DataClass.QUOTE))
            return quote

        fetched = await self._run_batched(pending, fetch_one, stats, "quote")
        found.update(fetched)
        return [found[s] for s in unique if s in found], stats

    async def fetch_histories(
        self, symbols: Sequence[str], days: int = 200
    ) -> tuple[dict[str, list[OHLCVBar]], BatchStats]:
        """Fetch daily history for each symbol; empty histories count as skipped."""
        unique = list(dict.fromkeys(s.upper() for s in symbols))
        stats = BatchStats(requested=len(unique))

        async def fetch_one(symbol: str) -> Optional[list[OHLCVBar]]:
            bars = await self.provider.fetch_history(symbol, days)
            return bars or None

        histories = await self._run_batched(unique, fetch_one, stats, "history")
        return histories, stats

    async def _run_batched(
        self,
        symbols: list[str],
        fetch_one: Callable[[str], Awaitable[Optional[T]]],
        stats: BatchStats,
        label: str,
    ) -> dict[str, T]:
        results: dict[str, T] = {}
        if not symbols:
            return results

        batches = [
            symbols[i : i + self.batch_size]
            for i in range(0, len(symbols), self.batch_size)
        ]
        group_size = self.max_concurrent_batches
        failures_logged = 0

        for g in range(0, len(batches), group_size):
            group = batches[g : g + group_size]
            members = [s for batch in group for s in batch]
            outcomes = await asyncio.gather(
                *(fetch_one(s) for s in members),
                return_exceptions=True,
            )

            for symbol, outcome in zip(members, outcomes):
                if isinstance(outcome, (UpstreamForbiddenError, UpstreamTimeoutError, asyncio.TimeoutError)):
                    stats.skipped += 1
                    reason: Any = type(outcome).__name__
                elif isinstance(outcome, Exception):
                    stats.errors += 1
                    reason = outcome
                elif outcome is None:
                    stats.skipped += 1
                    continue
                else:
                    results[symbol] = outcome
                    stats.fetched += 1
                    continue

                if failures_logged < _MAX_LOGGED_FAILURES:
                    logger.warning(f"{label} fetch failed for {symbol}: {reason}")
                else:
                    logger.debug(f"{label} fetch failed for {symbol}: {reason}")
                failures_logged += 1

            done = min(g + group_size, len(batches))
            logger.debug(
                f"{label} batches {done}/{len(batches)} done "
                f"({stats.fetched} fetched, {stats.skipped} skipped, {stats.errors} errors)"
            )
            if done < len(batches) and self.group_delay > 0:
                await self._sleep(self.group_delay)

        logger.info(
            f"Fetched {stats.fetched}/{len(symbols)} {label}s "
            f"(skipped={stats.skipped}, errors={stats.errors})"
        )
        return results
