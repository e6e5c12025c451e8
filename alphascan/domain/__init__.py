"""Domain models for strongly-typed market data.

Usage:
    from alphascan.domain import Quote, OHLCVBar

    quote = Quote(symbol="AAPL", current_price=190.0, previous_close=187.5)
    quote.daily_change_percent  # 1.33...
"""

from alphascan.domain.price import (
    OHLCVBar,
    PriceHistory,
    bars_to_frame,
    frame_to_bars,
)
from alphascan.domain.quote import (
    CompanyProfile,
    FinancialRatiosRaw,
    Quote,
)


__all__ = [
    "CompanyProfile",
    "FinancialRatiosRaw",
    "OHLCVBar",
    "PriceHistory",
    "Quote",
    "bars_to_frame",
    "frame_to_bars",
]
