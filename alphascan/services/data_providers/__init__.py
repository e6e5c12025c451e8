"""
Upstream market data providers.

Usage:
    from alphascan.services.data_providers import BatchFetcher, FinnhubProvider

    fetcher = BatchFetcher(provider, cache)
    quotes, stats = await fetcher.fetch_quotes(["AAPL", "MSFT"])
"""

from .base import MarketDataProvider, positive_or_none, safe_float
from .batch_fetcher import BatchFetcher, BatchStats
from .finnhub_provider import FinnhubProvider
from .gateway import UpstreamGateway
from .resilience import RequestDeduplicator, generate_request_key
from .yfinance_provider import YFinanceProvider


__all__ = [
    "BatchFetcher",
    "BatchStats",
    "FinnhubProvider",
    "MarketDataProvider",
    "RequestDeduplicator",
    "UpstreamGateway",
    "YFinanceProvider",
    "generate_request_key",
    "positive_or_none",
    "safe_float",
]
