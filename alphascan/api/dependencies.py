"""FastAPI dependencies."""

from __future__ import annotations

from alphascan.scanner import MarketScanner, get_scanner


def get_market_scanner() -> MarketScanner:
    """Process-wide scanner; overridden in tests."""
    return get_scanner()
