"""Signal detection over indicator readings."""

from __future__ import annotations

from typing import Literal

from .results import MACDResult, OverallSignal, TrendSignal


RSI_OVERBOUGHT = 70.0
RSI_OVERSOLD = 30.0
STOCHASTIC_OVERBOUGHT = 80.0
STOCHASTIC_OVERSOLD = 20.0
CCI_OVERBOUGHT = 100.0
CCI_OVERSOLD = -100.0
WILLIAMS_R_OVERBOUGHT = -20.0
WILLIAMS_R_OVERSOLD = -80.0
VOLUME_SURGE_RATIO = 1.5

ZoneSignal = Literal["overbought", "oversold", "neutral"]
CrossoverSignal = Literal["bullish_crossover", "bearish_crossover", "neutral"]
MACrossoverSignal = Literal["golden_cross", "death_cross", "neutral"]
StochasticSignal = Literal[
    "overbought", "oversold", "bullish_crossover", "bearish_crossover", "neutral"
]


def _crossed_above(current_a: float, current_b: float, prev_a: float, prev_b: float) -> bool:
    return prev_a <= prev_b and current_a > current_b


def _crossed_below(current_a: float, current_b: float, prev_a: float, prev_b: float) -> bool:
    return prev_a >= prev_b and current_a < current_b


def detect_rsi_signal(rsi_value: float) -> ZoneSignal:
    if rsi_value >= RSI_OVERBOUGHT:
        return "overbought"
    if rsi_value <= RSI_OVERSOLD:
        return "oversold"
    return "neutral"


def detect_macd_crossover(current: MACDResult, previous: MACDResult) -> CrossoverSignal:
    """MACD line crossing its signal line between two consecutive readings."""
    if _crossed_above(current.line, current.signal, previous.line, previous.signal):
        return "bullish_crossover"
    if _crossed_below(current.line, current.signal, previous.line, previous.signal):
        return "bearish_crossover"
    return "neutral"


def detect_ma_crossover(
    current_fast: float, current_slow: float, prev_fast: float, prev_slow: float
) -> MACrossoverSignal:
    """Golden cross when the fast MA crosses above the slow one, death cross below."""
    if _crossed_above(current_fast, current_slow, prev_fast, prev_slow):
        return "golden_cross"
    if _crossed_below(current_fast, current_slow, prev_fast, prev_slow):
        return "death_cross"
    return "neutral"


def detect_stochastic_signal(
    k: float,
    d: float,
    prev_k: float | None = None,
    prev_d: float | None = None,
) -> StochasticSignal:
    """Zones take precedence over %K/%D crossovers."""
    if k >= STOCHASTIC_OVERBOUGHT and d >= STOCHASTIC_OVERBOUGHT:
        return "overbought"
    if k <= STOCHASTIC_OVERSOLD and d <= STOCHASTIC_OVERSOLD:
        return "oversold"
    if prev_k is not None and prev_d is not None:
        if _crossed_above(k, d, prev_k, prev_d):
            return "bullish_crossover"
        if _crossed_below(k, d, prev_k, prev_d):
            return "bearish_crossover"
    return "neutral"


def detect_cci_signal(cci_value: float) -> ZoneSignal:
    if cci_value > CCI_OVERBOUGHT:
        return "overbought"
    if cci_value < CCI_OVERSOLD:
        return "oversold"
    return "neutral"


def detect_williams_r_signal(williams_r_value: float) -> ZoneSignal:
    if williams_r_value >= WILLIAMS_R_OVERBOUGHT:
        return "overbought"
    if williams_r_value <= WILLIAMS_R_OVERSOLD:
        return "oversold"
    return "neutral"


def detect_volume_surge(
    volume: float | None,
    average_volume: float | None,
    threshold: float = VOLUME_SURGE_RATIO,
) -> bool:
    if not volume or not average_volume:
        return False
    return volume / average_volume >= threshold


def trend_signal(
    price: float | None,
    sma50: float | None,
    sma200: float | None,
    macd_histogram: float | None,
) -> TrendSignal:
    """Majority vote of price vs SMA50, price vs SMA200 and MACD momentum."""
    bullish = bearish = 0

    if price is not None:
        for average in (sma50, sma200):
            if average is None:
                continue
            if price > average:
                bullish += 1
            elif price < average:
                bearish += 1

    if macd_histogram is not None:
        if macd_histogram > 0:
            bullish += 1
        elif macd_histogram < 0:
            bearish += 1

    if bullish > bearish:
        return "bullish"
    if bearish > bullish:
        return "bearish"
    return "neutral"


def overall_score(
    price: float | None,
    sma20: float | None,
    sma50: float | None,
    sma200: float | None,
    rsi_value: float | None,
    macd_histogram: float | None,
) -> int:
    """
    Composite technical score.

    Price above/below each of SMA20/50/200 adds/subtracts 1; RSI below 30
    adds 2 (below 40 adds 1), above 70 subtracts 2 (above 60 subtracts 1);
    a positive/negative MACD histogram adds/subtracts 1.
    """
    score = 0

    if price is not None:
        for average in (sma20, sma50, sma200):
            if average is None:
                continue
            if price > average:
                score += 1
            elif price < average:
                score -= 1

    if rsi_value is not None:
        if rsi_value < 30:
            score += 2
        elif rsi_value < 40:
            score += 1
        elif rsi_value > 70:
            score -= 2
        elif rsi_value > 60:
            score -= 1

    if macd_histogram is not None:
        if macd_histogram > 0:
            score += 1
        elif macd_histogram < 0:
            score -= 1

    return score


def overall_signal(score: int) -> OverallSignal:
    if score >= 4:
        return "strong_buy"
    if score >= 2:
        return "buy"
    if score <= -2:
        return "strong_sell"
    if score <= 0:
        return "sell"
    return "hold"
