"""Provider protocol consumed by the scanner core."""

from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence, runtime_checkable

from alphascan.domain import CompanyProfile, FinancialRatiosRaw, OHLCVBar, Quote


@runtime_checkable
class MarketDataProvider(Protocol):
    """
    Upstream market data source.

    ``None`` or empty results mean "unknown, exclude this candidate". Providers
    may raise ``UpstreamUnavailableError`` (or its forbidden/timeout
    subclasses) and ``RateLimitedError``; the core treats those per symbol
    and never lets them fail a whole scan.
    """

    name: str

    async def list_symbols(self, market: str = "US") -> list[str]:
        """Tradable common-stock symbols, shortest (most liquid) first."""
        ...

    async def fetch_quote(self, symbol: str) -> Optional[Quote]:
        ...

    async def fetch_quotes_batch(self, symbols: Sequence[str]) -> list[Quote]:
        ...

    async def fetch_profile(self, symbol: str) -> Optional[CompanyProfile]:
        ...

    async def fetch_history(self, symbol: str, days: int = 200) -> list[OHLCVBar]:
        """Daily bars, oldest first. May be empty."""
        ...

    async def fetch_financials(self, symbol: str) -> Optional[FinancialRatiosRaw]:
        ...


def safe_float(value: Any) -> Optional[float]:
    """Safely convert value to float, mapping NaN/inf to None."""
    if value is None:
        return None
    try:
        f = float(value)
        if f != f or f == float("inf") or f == float("-inf"):
            return None
        return f
    except (ValueError, TypeError):
        return None


def positive_or_none(value: Any) -> Optional[float]:
    """Upstreams report missing numbers as 0; treat non-positive as unknown."""
    f = safe_float(value)
    return f if f is not None and f > 0 else None
