"""
Technical score adjustments applied after fundamental scoring.

Indicator readings add or subtract weighted ``technical`` signals. The
direction of some readings depends on the scan orientation: an oversold
RSI is an entry opportunity for value-oriented scans but a sign of weak
momentum for momentum-oriented ones. Indicators that are unavailable
contribute nothing.
"""

from __future__ import annotations

from alphascan.indicators import IndicatorBundle
from alphascan.indicators.signals import (
    RSI_OVERBOUGHT,
    RSI_OVERSOLD,
    VOLUME_SURGE_RATIO,
)

from .strategies import ScoreOutcome
from .types import ScanType


VALUE_ORIENTED: frozenset[ScanType] = frozenset(
    {
        ScanType.UNDERVALUED,
        ScanType.VALUE,
        ScanType.DIVIDEND,
        ScanType.QUALITY,
        ScanType.TURNAROUND,
    }
)

BOLLINGER_LOWER_ZONE = 0.1
BOLLINGER_UPPER_ZONE = 0.9


def is_value_oriented(scan_type: ScanType) -> bool:
    return scan_type in VALUE_ORIENTED


def apply_technical_bonus(
    outcome: ScoreOutcome,
    indicators: IndicatorBundle | None,
    scan_type: ScanType,
) -> ScoreOutcome:
    """
    Return a new outcome with technical signals appended.

    Args:
        outcome: Fundamental score and signals
        indicators: Indicator bundle for the stock (None if unavailable)
        scan_type: Scan type deciding the direction of orientation-dependent signals

    Returns:
        ScoreOutcome whose score includes the technical contributions
    """
    result = ScoreOutcome(score=outcome.score, signals=list(outcome.signals))
    if indicators is None:
        return result

    value = is_value_oriented(scan_type)
    price = indicators.current_price

    # RSI zone
    rsi = indicators.rsi
    if rsi is not None:
        if rsi <= RSI_OVERSOLD:
            if value:
                result.add(10, "technical", f"RSI oversold ({rsi:.1f}) - potential entry")
            else:
                result.add(-10, "technical", f"RSI oversold ({rsi:.1f}) - weak momentum")
        elif rsi >= RSI_OVERBOUGHT:
            if value:
                result.add(-10, "technical", f"RSI overbought ({rsi:.1f}) - stretched valuation")
            else:
                result.add(-5, "technical", f"RSI overbought ({rsi:.1f}) - extended move")
        elif rsi >= 50 and not value:
            result.add(5, "technical", f"RSI in bullish zone ({rsi:.1f})")

    # MACD momentum direction
    if indicators.macd is not None:
        weight = 5 if value else 10
        if indicators.macd.histogram > 0:
            result.add(weight, "technical", "MACD bullish momentum")
        elif indicators.macd.histogram < 0:
            result.add(-weight, "technical", "MACD bearish momentum")

    # Moving average relationship
    if price is not None:
        if indicators.sma200 is not None:
            if price > indicators.sma200:
                result.add(5, "technical", "Price above 200-day SMA (long-term uptrend)")
            elif price < indicators.sma200 and not value:
                result.add(-5, "technical", "Price below 200-day SMA")
        if indicators.sma50 is not None and price > indicators.sma50 and not value:
            result.add(5, "technical", "Price above 50-day SMA")

    # Volume surge
    ratio = indicators.volume_ratio
    if ratio is not None and ratio >= VOLUME_SURGE_RATIO:
        result.add(
            5 if value else 10,
            "technical",
            f"Volume surge {ratio:.1f}x 20-day average",
        )

    # Bollinger position
    if indicators.bollinger is not None and price is not None:
        position = indicators.bollinger.position(price)
        if position is not None:
            if position <= BOLLINGER_LOWER_ZONE and value:
                result.add(5, "technical", "Near lower Bollinger Band")
            elif position >= BOLLINGER_UPPER_ZONE:
                if value:
                    result.add(-5, "technical", "Near upper Bollinger Band")
                else:
                    result.add(5, "technical", "Riding upper Bollinger Band")

    # Overall trend
    if indicators.trend_signal == "bullish":
        result.add(5, "technical", "Bullish technical trend")
    elif indicators.trend_signal == "bearish":
        result.add(-5, "technical", "Bearish technical trend")

    return result
