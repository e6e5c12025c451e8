"""Pytest configuration and fixtures."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional, Sequence

import pytest

from alphascan.cache import HybridCache
from alphascan.core.exceptions import UpstreamUnavailableError
from alphascan.domain import CompanyProfile, FinancialRatiosRaw, OHLCVBar, Quote
from alphascan.scanner import ScannerConfig


pytest_plugins = ["pytest_asyncio"]


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSleep:
    """Records sleeps and advances an attached clock instead of waiting."""

    def __init__(self, clock: FakeClock | None = None):
        self.clock = clock
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        if self.clock is not None:
            self.clock.advance(seconds)


def make_bars(closes: Sequence[float], volume: float = 1_000_000, spread: float = 1.0) -> list[OHLCVBar]:
    """Daily bars with high/low one ``spread`` around each close."""
    start = datetime(2024, 1, 1)
    return [
        OHLCVBar(
            timestamp=start + timedelta(days=i),
            open=close,
            high=close + spread,
            low=max(close - spread, 0.0),
            close=close,
            volume=volume,
        )
        for i, close in enumerate(closes)
    ]


class FakeProvider:
    """In-memory market data provider driving scanner tests."""

    name = "fake"

    def __init__(
        self,
        quotes: dict[str, Quote] | None = None,
        *,
        symbols: list[str] | None = None,
        profiles: dict[str, CompanyProfile] | None = None,
        histories: dict[str, list[OHLCVBar]] | None = None,
        financials: dict[str, FinancialRatiosRaw] | None = None,
        failing: set[str] | None = None,
        directory_down: bool = False,
    ):
        self.quotes = dict(quotes or {})
        self.symbols = list(symbols) if symbols is not None else list(self.quotes)
        self.profiles = dict(profiles or {})
        self.histories = dict(histories or {})
        self.financials = dict(financials or {})
        self.failing = set(failing or ())
        self.directory_down = directory_down
        self.quote_calls: list[str] = []
        self.history_calls: list[str] = []
        self.profile_calls: list[str] = []
        self.list_calls = 0

    async def list_symbols(self, market: str = "US") -> list[str]:
        self.list_calls += 1
        if self.directory_down:
            raise UpstreamUnavailableError(message="directory down")
        return sorted(self.symbols, key=len)

    async def fetch_quote(self, symbol: str) -> Optional[Quote]:
        self.quote_calls.append(symbol)
        if symbol in self.failing:
            raise UpstreamUnavailableError(message=f"{symbol} unavailable")
        return self.quotes.get(symbol)

    async def fetch_quotes_batch(self, symbols: Sequence[str]) -> list[Quote]:
        quotes = []
        for symbol in symbols:
            quote = await self.fetch_quote(symbol)
            if quote is not None:
                quotes.append(quote)
        return quotes

    async def fetch_profile(self, symbol: str) -> Optional[CompanyProfile]:
        self.profile_calls.append(symbol)
        return self.profiles.get(symbol)

    async def fetch_history(self, symbol: str, days: int = 200) -> list[OHLCVBar]:
        self.history_calls.append(symbol)
        return list(self.histories.get(symbol, []))

    async def fetch_financials(self, symbol: str) -> Optional[FinancialRatiosRaw]:
        return self.financials.get(symbol)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_sleep(clock: FakeClock) -> FakeSleep:
    return FakeSleep(clock)


@pytest.fixture
def cache(clock: FakeClock) -> HybridCache:
    """Isolated in-process cache (no shared tier)."""
    return HybridCache(prefix="test", max_entries=100, use_shared=False, clock=clock)


@pytest.fixture
def scanner_config() -> ScannerConfig:
    """Scanner config without delays."""
    return ScannerConfig(
        sector_batch_delay=0.0,
        batch_group_delay=0.0,
        batch_size=3,
        max_concurrent_batches=2,
    )
