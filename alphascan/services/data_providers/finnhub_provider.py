"""Finnhub-backed market data provider."""

from __future__ import annotations

import asyncio
import time
from datetime import datetime, timezone
from typing import Any, Optional, Sequence

from alphascan.cache import DataClass
from alphascan.core.config import settings
from alphascan.core.logging import get_logger
from alphascan.domain import CompanyProfile, FinancialRatiosRaw, OHLCVBar, Quote
from alphascan.domain.sectors import map_industry_to_sector

from .base import positive_or_none, safe_float
from .gateway import UpstreamGateway


logger = get_logger("data_providers.finnhub")

SOURCE = "finnhub"

# Finnhub reports market cap and average volume in millions
_MILLION = 1_000_000


def _nonzero(value: Any) -> Optional[float]:
    f = safe_float(value)
    return f if f else None


class FinnhubProvider:
    """
    Finnhub REST provider.

    Quotes combine three endpoints (quote, profile2, metric), each cached
    with its own data class TTL. Balance-sheet data is not available on
    the free tier, so ``fetch_financials`` only knows market cap.
    """

    name = "finnhub"

    def __init__(
        self,
        gateway: UpstreamGateway,
        api_key: str | None = None,
        base_url: str | None = None,
    ):
        self.gateway = gateway
        self.api_key = api_key if api_key is not None else settings.finnhub_api_key
        self.base_url = (base_url or settings.finnhub_base_url).rstrip("/")

    async def _get(
        self, path: str, params: dict[str, Any], data_class: DataClass
    ) -> Any:
        if self.api_key:
            params = {**params, "token": self.api_key}
        return await self.gateway.fetch_cached(
            SOURCE, f"{self.base_url}{path}", params, data_class
        )

    async def list_symbols(self, market: str = "US") -> list[str]:
        rows = await self._get("/stock/symbol", {"exchange": market}, DataClass.PROFILE)
        symbols = []
        for row in rows or []:
            symbol = row.get("symbol") or ""
            if row.get("type") not in ("Common Stock", "Stock"):
                continue
            # Dotted symbols are foreign listings, long ones warrants/preferreds
            if "." in symbol or not symbol or len(symbol) > 5:
                continue
            currency = row.get("currency")
            if currency and currency != "USD":
                continue
            symbols.append(symbol)
        symbols.sort(key=len)
        logger.info(f"Fetched {len(symbols)} {market} symbols from Finnhub")
        return symbols

    async def fetch_profile(self, symbol: str) -> Optional[CompanyProfile]:
        data = await self._get("/stock/profile2", {"symbol": symbol}, DataClass.PROFILE)
        if not data:
            return None
        cap = positive_or_none(data.get("marketCapitalization"))
        return CompanyProfile(
            name=data.get("name"),
            sector=map_industry_to_sector(data.get("finnhubIndustry")),
            industry=data.get("finnhubIndustry"),
            country=data.get("country"),
            market_cap=cap * _MILLION if cap else None,
        )

    async def _metrics(self, symbol: str) -> dict[str, Any]:
        data = await self._get(
            "/stock/metric", {"symbol": symbol, "metric": "all"}, DataClass.METRICS
        )
        return (data or {}).get("metric") or {}

    async def fetch_quote(self, symbol: str) -> Optional[Quote]:
        symbol = symbol.upper()
        raw = await self._get("/quote", {"symbol": symbol}, DataClass.QUOTE)
        current = positive_or_none((raw or {}).get("c"))
        if current is None:
            return None

        profile_data, metric = await asyncio.gather(
            self._get("/stock/profile2", {"symbol": symbol}, DataClass.PROFILE),
            self._metrics(symbol),
        )
        profile_data = profile_data or {}
        cap = positive_or_none(metric.get("marketCapitalization")) or positive_or_none(
            profile_data.get("marketCapitalization")
        )
        avg_volume = positive_or_none(metric.get("10DayAverageTradingVolume"))
        industry = profile_data.get("finnhubIndustry")

        return Quote(
            symbol=symbol,
            name=profile_data.get("name"),
            exchange=profile_data.get("exchange"),
            currency=profile_data.get("currency") or "USD",
            current_price=current,
            previous_close=positive_or_none(raw.get("pc")),
            open_price=positive_or_none(raw.get("o")),
            day_high=positive_or_none(raw.get("h")),
            day_low=positive_or_none(raw.get("l")),
            avg_volume=avg_volume * _MILLION if avg_volume else None,
            market_cap=cap * _MILLION if cap else None,
            pe_ratio=_nonzero(metric.get("peExclExtraTTM") or metric.get("peTTM")),
            pb_ratio=_nonzero(metric.get("pbQuarterly") or metric.get("pbAnnual")),
            ps_ratio=_nonzero(metric.get("psTTM")),
            dividend_yield=_nonzero(metric.get("dividendYieldIndicatedAnnual")),
            beta=safe_float(metric.get("beta")),
            week52_high=positive_or_none(metric.get("52WeekHigh")),
            week52_low=positive_or_none(metric.get("52WeekLow")),
            sector=map_industry_to_sector(industry),
            industry=industry,
            country=profile_data.get("country"),
        )

    async def fetch_quotes_batch(self, symbols: Sequence[str]) -> list[Quote]:
        results = await asyncio.gather(
            *(self.fetch_quote(s) for s in symbols), return_exceptions=True
        )
        quotes = []
        for symbol, result in zip(symbols, results):
            if isinstance(result, Exception):
                logger.debug(f"Quote failed for {symbol}: {result}")
            elif result is not None:
                quotes.append(result)
        return quotes

    async def fetch_history(self, symbol: str, days: int = 200) -> list[OHLCVBar]:
        # Day-aligned bounds keep the cache key stable within a day
        end = (int(time.time()) // 86400 + 1) * 86400
        # Calendar span wide enough to cover ``days`` trading sessions
        start = end - int(days * 1.5 + 10) * 86400
        data = await self._get(
            "/stock/candle",
            {"symbol": symbol.upper(), "resolution": "D", "from": start, "to": end},
            DataClass.HISTORY,
        )
        if not data or data.get("s") != "ok":
            return []

        bars = []
        for t, o, h, l, c, v in zip(
            data.get("t", []),
            data.get("o", []),
            data.get("h", []),
            data.get("l", []),
            data.get("c", []),
            data.get("v", []),
        ):
            bars.append(
                OHLCVBar(
                    timestamp=datetime.fromtimestamp(t, tz=timezone.utc),
                    open=o,
                    high=h,
                    low=l,
                    close=c,
                    volume=v or 0,
                )
            )
        bars.sort(key=lambda b: b.timestamp)
        return bars[-days:]

    async def fetch_financials(self, symbol: str) -> Optional[FinancialRatiosRaw]:
        metric = await self._metrics(symbol.upper())
        cap = positive_or_none(metric.get("marketCapitalization"))
        if cap is None:
            return None
        return FinancialRatiosRaw(market_cap=cap * _MILLION)
