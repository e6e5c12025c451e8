"""
Market scanner: universe selection, fundamental scoring, technical
enrichment and ranking.

Usage:
    from alphascan.scanner import ScannerFilters, get_scanner

    results = await get_scanner().run_scan(ScannerFilters(scan_type="momentum"))
"""

from .config import ScannerConfig, get_scanner_config
from .filters import passes_basic_filters, passes_market_filter
from .service import (
    MarketContext,
    MarketScanner,
    close_market_context,
    get_market_context,
    get_scanner,
    quick_scan,
)
from .strategies import (
    STRATEGY_REGISTRY,
    ScoreOutcome,
    ScoringStrategy,
    generate_reason_summary,
    get_recommendation,
    get_strategy,
    score_stock,
)
from .technical import apply_technical_bonus, is_value_oriented
from .types import (
    Market,
    Recommendation,
    ScannerFilters,
    ScanReport,
    ScanResult,
    ScanSignal,
    ScanType,
)
from .universe import CRYPTO_MINING_SYMBOLS, SHARIAH_CANDIDATE_SYMBOLS, UniverseSelector


__all__ = [
    "CRYPTO_MINING_SYMBOLS",
    "Market",
    "MarketContext",
    "MarketScanner",
    "Recommendation",
    "SHARIAH_CANDIDATE_SYMBOLS",
    "STRATEGY_REGISTRY",
    "ScanReport",
    "ScanResult",
    "ScanSignal",
    "ScanType",
    "ScannerConfig",
    "ScannerFilters",
    "ScoreOutcome",
    "ScoringStrategy",
    "UniverseSelector",
    "apply_technical_bonus",
    "close_market_context",
    "generate_reason_summary",
    "get_market_context",
    "get_recommendation",
    "get_scanner",
    "get_scanner_config",
    "get_strategy",
    "is_value_oriented",
    "passes_basic_filters",
    "passes_market_filter",
    "quick_scan",
    "score_stock",
]
