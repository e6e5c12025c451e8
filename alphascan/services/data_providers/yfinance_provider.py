"""
Yahoo Finance provider backed by yfinance.

yfinance is blocking, so every call runs on a dedicated thread pool after
taking a slot from the shared "yahoo" rate limiter, and is raced against
the upstream timeout from then on. Results are cached per data class in
the shared ``HybridCache``.

Usage:
    provider = YFinanceProvider(cache=get_cache(), limiters=get_rate_limiter_registry())
    quote = await provider.fetch_quote("AAPL")
    bars = await provider.fetch_history("AAPL", days=200)
"""

from __future__ import annotations

import asyncio
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional, Sequence, TypeVar

import pandas as pd
import yfinance as yf

from alphascan.cache import DataClass, HybridCache, ttl_for
from alphascan.core.config import settings
from alphascan.core.exceptions import UpstreamTimeoutError, UpstreamUnavailableError
from alphascan.core.logging import get_logger
from alphascan.core.rate_limiter import RateLimiterRegistry
from alphascan.domain import (
    CompanyProfile,
    FinancialRatiosRaw,
    OHLCVBar,
    Quote,
    frame_to_bars,
)

from .base import positive_or_none, safe_float


logger = get_logger("data_providers.yfinance")

SOURCE = "yahoo"

# Single shared executor for all yfinance calls
_executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="yfinance")

T = TypeVar("T")


def _latest(df: pd.DataFrame | None, *labels: str) -> Optional[float]:
    """Most recent value of the first statement row that exists."""
    if df is None or df.empty:
        return None
    for label in labels:
        if label in df.index:
            try:
                value = df.loc[label].iloc[0]
            except (KeyError, IndexError):
                continue
            if pd.notna(value):
                return float(value)
    return None


def _info_to_quote(symbol: str, info: dict[str, Any]) -> Optional[Quote]:
    price = positive_or_none(
        info.get("currentPrice") or info.get("regularMarketPrice")
    )
    if price is None:
        return None

    # Current yfinance releases report dividendYield already in percent
    dividend_yield = safe_float(info.get("dividendYield"))

    return Quote(
        symbol=symbol,
        name=info.get("shortName") or info.get("longName"),
        exchange=info.get("exchange"),
        currency=info.get("currency"),
        current_price=price,
        previous_close=positive_or_none(
            info.get("previousClose") or info.get("regularMarketPreviousClose")
        ),
        open_price=positive_or_none(info.get("open")),
        day_high=positive_or_none(info.get("dayHigh")),
        day_low=positive_or_none(info.get("dayLow")),
        week52_high=positive_or_none(info.get("fiftyTwoWeekHigh")),
        week52_low=positive_or_none(info.get("fiftyTwoWeekLow")),
        volume=positive_or_none(info.get("volume") or info.get("regularMarketVolume")),
        avg_volume=positive_or_none(info.get("averageVolume")),
        market_cap=positive_or_none(info.get("marketCap")),
        pe_ratio=safe_float(info.get("trailingPE")),
        forward_pe=safe_float(info.get("forwardPE")),
        pb_ratio=safe_float(info.get("priceToBook")),
        ps_ratio=safe_float(info.get("priceToSalesTrailing12Months")),
        dividend_yield=dividend_yield or None,
        beta=safe_float(info.get("beta")),
        sector=info.get("sector"),
        industry=info.get("industry"),
        country=info.get("country"),
    )


class YFinanceProvider:
    """Market data provider running yfinance calls in a thread pool."""

    name = "yfinance"

    def __init__(
        self,
        cache: HybridCache,
        limiters: RateLimiterRegistry,
        symbols: Sequence[str] | None = None,
        timeout: float | None = None,
    ):
        self.cache = cache
        self.limiters = limiters
        self.timeout = timeout if timeout is not None else settings.upstream_timeout
        self._symbols = list(symbols) if symbols is not None else list(settings.default_symbols)

    async def _run(self, func: Callable[..., T], *args: Any) -> T:
        """
        Run a blocking yfinance call once a "yahoo" slot is granted.

        The deadline starts after the limiter wait. yfinance and requests
        errors surface as ``UpstreamUnavailableError``.
        """
        await self.limiters.get(SOURCE).acquire()
        loop = asyncio.get_running_loop()
        call = getattr(func, "__name__", "call")
        try:
            return await asyncio.wait_for(
                loop.run_in_executor(_executor, func, *args), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            raise UpstreamTimeoutError(
                message=f"yfinance {call} timed out after {self.timeout:.1f}s",
                details={"source": SOURCE, "args": [str(a) for a in args]},
            ) from None
        except Exception as e:
            logger.warning(f"yfinance {call} failed for {args[0] if args else '-'}: {e}")
            raise UpstreamUnavailableError(
                message=f"yfinance request failed: {e}",
                details={"source": SOURCE},
            ) from e

    async def _cached(
        self, data_class: DataClass, symbol: str, func: Callable[[str], Any]
    ) -> Any:
        key = f"{self.name}:{data_class.value}:{symbol}"
        return await self.cache.get_or_fetch(
            key, lambda: self._run(func, symbol), ttl=ttl_for(data_class)
        )

    @staticmethod
    def _fetch_info_sync(symbol: str) -> dict[str, Any]:
        return yf.Ticker(symbol).info or {}

    async def _info(self, symbol: str) -> dict[str, Any]:
        # Quote and profile both read Ticker.info; one fetch per quote TTL
        return await self._cached(DataClass.QUOTE, symbol, self._fetch_info_sync)

    async def list_symbols(self, market: str = "US") -> list[str]:
        # yfinance has no listing endpoint; use the configured directory
        return sorted(dict.fromkeys(s.upper() for s in self._symbols), key=len)

    async def fetch_quote(self, symbol: str) -> Optional[Quote]:
        symbol = symbol.upper()
        info = await self._info(symbol)
        if not info:
            return None
        return _info_to_quote(symbol, info)

    async def fetch_quotes_batch(self, symbols: Sequence[str]) -> list[Quote]:
        results = await asyncio.gather(
            *(self.fetch_quote(s) for s in symbols), return_exceptions=True
        )
        quotes = []
        for symbol, result in zip(symbols, results):
            if isinstance(result, Exception):
                logger.debug(f"yfinance quote failed for {symbol}: {result}")
            elif result is not None:
                quotes.append(result)
        return quotes

    async def fetch_profile(self, symbol: str) -> Optional[CompanyProfile]:
        symbol = symbol.upper()
        info = await self._info(symbol)
        if not info:
            return None
        return CompanyProfile(
            name=info.get("shortName") or info.get("longName"),
            sector=info.get("sector"),
            industry=info.get("industry"),
            country=info.get("country"),
            business_summary=info.get("longBusinessSummary"),
            market_cap=positive_or_none(info.get("marketCap")),
        )

    @staticmethod
    def _fetch_history_sync(symbol: str, days: int) -> list[dict[str, Any]]:
        start = datetime.now(timezone.utc) - timedelta(days=int(days * 1.5) + 10)
        df = yf.Ticker(symbol).history(start=start.date().isoformat(), auto_adjust=True)
        if df is None or df.empty:
            return []
        bars = frame_to_bars(df)[-days:]
        return [bar.model_dump(mode="json") for bar in bars]

    async def fetch_history(self, symbol: str, days: int = 200) -> list[OHLCVBar]:
        symbol = symbol.upper()
        key = f"{self.name}:{DataClass.HISTORY.value}:{symbol}:{days}"
        rows = await self.cache.get_or_fetch(
            key,
            lambda: self._run(self._fetch_history_sync, symbol, days),
            ttl=ttl_for(DataClass.HISTORY),
        )
        return [OHLCVBar.model_validate(row) for row in rows or []]

    @staticmethod
    def _fetch_financials_sync(symbol: str) -> dict[str, Any]:
        ticker = yf.Ticker(symbol)
        info = ticker.info or {}
        try:
            balance = ticker.balance_sheet
        except Exception as e:
            logger.debug(f"balance_sheet failed for {symbol}: {e}")
            balance = None
        try:
            income = ticker.income_stmt
        except Exception as e:
            logger.debug(f"income_stmt failed for {symbol}: {e}")
            income = None

        return {
            "total_debt": safe_float(info.get("totalDebt"))
            or _latest(balance, "Total Debt"),
            "total_equity": _latest(balance, "Stockholders Equity", "Common Stock Equity"),
            "total_assets": _latest(balance, "Total Assets"),
            "market_cap": positive_or_none(info.get("marketCap")),
            "cash": _latest(balance, "Cash And Cash Equivalents")
            or safe_float(info.get("totalCash")),
            "short_term_investments": _latest(
                balance, "Other Short Term Investments", "Short Term Investments"
            ),
            "accounts_receivable": _latest(balance, "Accounts Receivable", "Receivables"),
            "total_revenue": safe_float(info.get("totalRevenue"))
            or _latest(income, "Total Revenue"),
            "interest_income": _latest(income, "Interest Income", "Interest Income Non Operating"),
            "interest_expense": _latest(income, "Interest Expense", "Interest Expense Non Operating"),
        }

    async def fetch_financials(self, symbol: str) -> Optional[FinancialRatiosRaw]:
        data = await self._cached(
            DataClass.METRICS, symbol.upper(), self._fetch_financials_sync
        )
        if not data:
            return None
        return FinancialRatiosRaw.model_validate(data)
