"""
Market scanner orchestration.

Pipeline per scan:

    validate filters -> select universe -> batched quote fetch
      -> market/range filters -> compliance tag -> strategy score
      -> history + indicators for the top candidates -> technical bonus
      -> stable rank by final score -> truncate

Per-symbol failures are counted in the report and never fail the scan;
only an empty universe does.

Usage:
    scanner = get_scanner()
    results = await scanner.run_scan(ScannerFilters(scan_type="value"))
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Union

from alphascan.cache import HybridCache, get_cache
from alphascan.compliance import quick_check
from alphascan.core.config import settings
from alphascan.core.logging import get_logger
from alphascan.core.rate_limiter import RateLimiterRegistry, get_rate_limiter_registry
from alphascan.domain import Quote
from alphascan.domain.sectors import CRYPTO_MINING_SECTOR
from alphascan.indicators import IndicatorBundle, compute_indicators
from alphascan.services.data_providers import (
    BatchFetcher,
    FinnhubProvider,
    MarketDataProvider,
    RequestDeduplicator,
    UpstreamGateway,
    YFinanceProvider,
)

from .config import ScannerConfig, get_scanner_config
from .filters import passes_basic_filters, passes_market_filter
from .strategies import (
    ScoreOutcome,
    ScoringStrategy,
    generate_reason_summary,
    get_recommendation,
    get_strategy,
)
from .technical import apply_technical_bonus
from .types import Market, ScannerFilters, ScanReport, ScanResult, ScanType
from .universe import UniverseSelector


logger = get_logger("scanner.service")


@dataclass
class _Candidate:
    stock: Quote
    is_shariah_compliant: bool
    fundamental: ScoreOutcome
    final: ScoreOutcome
    technicals: IndicatorBundle | None = None


class MarketScanner:
    """Runs scans against one market data provider."""

    def __init__(
        self,
        provider: MarketDataProvider,
        cache: HybridCache,
        config: ScannerConfig | None = None,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.provider = provider
        self.cache = cache
        self.config = config or get_scanner_config()
        self.universe = UniverseSelector(provider, self.config, sleep=sleep)
        self.fetcher = BatchFetcher(
            provider,
            cache,
            batch_size=self.config.batch_size,
            max_concurrent_batches=self.config.max_concurrent_batches,
            group_delay=self.config.batch_group_delay,
            sleep=sleep,
        )

    def _prepare(self, filters: ScannerFilters) -> ScannerFilters:
        if filters.scan_type == ScanType.PENNY_STOCKS:
            return filters.model_copy(
                update={"max_price": self.config.penny_max_price, "min_market_cap": None}
            )
        return filters

    @staticmethod
    def _strategy_for(filters: ScannerFilters) -> ScoringStrategy:
        if CRYPTO_MINING_SECTOR in filters.sectors:
            return get_strategy(ScanType.CRYPTO_MINING)
        return get_strategy(filters.scan_type)

    async def run_scan(
        self, filters: Union[ScannerFilters, dict[str, Any]]
    ) -> list[ScanResult]:
        """Ranked scan results (see ``scan`` for diagnostics)."""
        report = await self.scan(filters)
        return report.results

    async def scan(self, filters: Union[ScannerFilters, dict[str, Any]]) -> ScanReport:
        """
        Run a full scan.

        Args:
            filters: Validated filters or a raw mapping to validate

        Returns:
            ScanReport with ranked results and fetch/filter tallies

        Raises:
            InvalidFilterError: Filters failed validation (before any fetch)
            UniverseUnavailableError: No candidate symbols could be selected
        """
        if not isinstance(filters, ScannerFilters):
            filters = ScannerFilters.from_request(filters)

        started = time.perf_counter()
        filters = self._prepare(filters)
        strategy = self._strategy_for(filters)
        logger.info(
            f"Market scan starting: type={filters.scan_type.value}, "
            f"markets={[m.value for m in filters.markets]}, sectors={filters.sectors}"
        )

        symbols = await self.universe.select(filters)
        quotes, stats = await self.fetcher.fetch_quotes(symbols)

        candidates: list[_Candidate] = []
        filtered_out = 0
        for stock in quotes:
            if not passes_market_filter(stock, filters.markets) or not passes_basic_filters(
                stock, filters
            ):
                filtered_out += 1
                continue

            compliant = quick_check(stock.sector, stock.industry)
            if filters.shariah_compliant_only and not compliant:
                filtered_out += 1
                continue

            outcome = strategy.score(stock)
            if outcome.score <= 0:
                filtered_out += 1
                continue

            if compliant:
                outcome.add(0, "shariah", "Passes Shariah business prescreen")
            candidates.append(
                _Candidate(
                    stock=stock,
                    is_shariah_compliant=compliant,
                    fundamental=outcome,
                    final=outcome,
                )
            )

        enriched = await self._enrich(candidates, filters.scan_type)

        # Stable sort: equal scores keep fetch order
        candidates.sort(key=lambda c: c.final.score, reverse=True)
        if self.config.result_limit is not None:
            candidates = candidates[: self.config.result_limit]

        results = [
            ScanResult(
                stock=c.stock,
                score=c.final.score,
                fundamental_score=c.fundamental.score,
                signals=c.final.signals,
                recommendation=get_recommendation(c.final.score),
                reason_summary=generate_reason_summary(c.final.signals),
                is_shariah_compliant=c.is_shariah_compliant,
                technicals=c.technicals,
            )
            for c in candidates
        ]

        elapsed = time.perf_counter() - started
        compliant_count = sum(1 for r in results if r.is_shariah_compliant)
        logger.info(
            f"Scan completed in {elapsed:.2f}s: {len(results)} results "
            f"({compliant_count} Shariah compliant), fetched {stats.fetched + stats.cache_hits}"
            f"/{len(symbols)}, skipped={stats.skipped}, errors={stats.errors}"
        )

        return ScanReport(
            scan_type=filters.scan_type,
            results=results,
            universe_size=len(symbols),
            fetched=stats.fetched,
            cache_hits=stats.cache_hits,
            skipped=stats.skipped,
            errors=stats.errors,
            filtered_out=filtered_out,
            technical_enriched=enriched,
            elapsed_seconds=round(elapsed, 3),
        )

    async def _enrich(self, candidates: list[_Candidate], scan_type: ScanType) -> int:
        """Add indicators and technical bonus to the top fundamental scorers."""
        if not candidates or self.config.technical_top_n <= 0:
            return 0

        top = sorted(candidates, key=lambda c: c.fundamental.score, reverse=True)[
            : self.config.technical_top_n
        ]
        histories, _ = await self.fetcher.fetch_histories(
            [c.stock.symbol for c in top], self.config.history_days
        )

        enriched = 0
        for candidate in top:
            bars = histories.get(candidate.stock.symbol)
            if not bars or len(bars) < self.config.min_history_bars:
                continue
            candidate.technicals = compute_indicators(bars)
            candidate.final = apply_technical_bonus(
                candidate.fundamental, candidate.technicals, scan_type
            )
            enriched += 1

        logger.info(f"Technical enrichment applied to {enriched}/{len(top)} candidates")
        return enriched


# =============================================================================
# Process-wide wiring
# =============================================================================


@dataclass
class MarketContext:
    """Shared cache, limiters, deduplicator and provider for one process."""

    cache: HybridCache
    limiters: RateLimiterRegistry
    deduplicator: RequestDeduplicator
    gateway: UpstreamGateway
    provider: MarketDataProvider

    async def aclose(self) -> None:
        await self.gateway.aclose()


_context: Optional[MarketContext] = None
_scanner: Optional[MarketScanner] = None


def get_market_context() -> MarketContext:
    """Build the shared market context on first use."""
    global _context
    if _context is None:
        cache = get_cache()
        limiters = get_rate_limiter_registry()
        deduplicator = RequestDeduplicator()
        gateway = UpstreamGateway(cache, limiters, deduplicator)
        if settings.finnhub_api_key:
            provider: MarketDataProvider = FinnhubProvider(gateway)
        else:
            provider = YFinanceProvider(cache, limiters)
        logger.info(f"Market data provider: {provider.name}")
        _context = MarketContext(
            cache=cache,
            limiters=limiters,
            deduplicator=deduplicator,
            gateway=gateway,
            provider=provider,
        )
    return _context


def get_scanner() -> MarketScanner:
    """Process-wide scanner sharing the market context."""
    global _scanner
    if _scanner is None:
        context = get_market_context()
        _scanner = MarketScanner(context.provider, context.cache)
    return _scanner


async def close_market_context() -> None:
    global _context, _scanner
    if _context is not None:
        await _context.aclose()
    _context = None
    _scanner = None


QUICK_SCAN_FILTERS = ScannerFilters(
    scan_type=ScanType.UNDERVALUED,
    markets=[Market.US],
    min_market_cap=1000,
    max_pe_ratio=25,
)


async def quick_scan(scanner: MarketScanner | None = None) -> list[ScanResult]:
    """Undervalued US large caps (market cap >= $1B, P/E <= 25)."""
    return await (scanner or get_scanner()).run_scan(QUICK_SCAN_FILTERS)
