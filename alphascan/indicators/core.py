"""
Technical indicator calculations.

Pure functions over close-price sequences or OHLCV bars, backed by numpy.
Every indicator returns ``None`` (never raises) when the history is shorter
than its minimum window.

Usage:
    from alphascan.indicators import sma, rsi, macd

    closes = [100.0, 101.5, 99.0, 102.0, ...]
    rsi_value = rsi(closes, period=14)
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from alphascan.domain import OHLCVBar

from .results import (
    BollingerBandsResult,
    MACDResult,
    ParabolicSARResult,
    StochasticResult,
    SupportResistanceResult,
)


def _array(values: Sequence[float]) -> np.ndarray:
    return np.asarray(values, dtype=float)


def bar_arrays(
    bars: Sequence[OHLCVBar],
) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """Split bars into (highs, lows, closes, volumes) arrays."""
    highs = np.fromiter((b.high for b in bars), dtype=float, count=len(bars))
    lows = np.fromiter((b.low for b in bars), dtype=float, count=len(bars))
    closes = np.fromiter((b.close for b in bars), dtype=float, count=len(bars))
    volumes = np.fromiter((b.volume for b in bars), dtype=float, count=len(bars))
    return highs, lows, closes, volumes


# =============================================================================
# Moving averages
# =============================================================================


def sma(values: Sequence[float], period: int) -> float | None:
    """
    Calculate Simple Moving Average.

    Args:
        values: Price or value series
        period: Lookback period

    Returns:
        Mean of the last ``period`` values, or None if insufficient data
    """
    arr = _array(values)
    if period < 1 or len(arr) < period:
        return None
    return float(arr[-period:].mean())


def ema_series(values: Sequence[float], period: int) -> np.ndarray:
    """
    Full EMA series, NaN before the seed.

    The first value (index ``period - 1``) is the SMA of the first ``period``
    values; each later value is ``(x - prev) * 2 / (period + 1) + prev``.
    """
    arr = _array(values)
    out = np.full(len(arr), np.nan)
    if period < 1 or len(arr) < period:
        return out

    multiplier = 2 / (period + 1)
    value = arr[:period].mean()
    out[period - 1] = value
    for i in range(period, len(arr)):
        value = (arr[i] - value) * multiplier + value
        out[i] = value
    return out


def ema(values: Sequence[float], period: int) -> float | None:
    """
    Calculate Exponential Moving Average (SMA-seeded).

    Args:
        values: Price or value series
        period: Lookback period

    Returns:
        Latest EMA value or None if insufficient data
    """
    series = ema_series(values, period)
    if len(series) == 0 or np.isnan(series[-1]):
        return None
    return float(series[-1])


# =============================================================================
# Momentum
# =============================================================================


def rsi(closes: Sequence[float], period: int = 14) -> float | None:
    """
    Calculate Relative Strength Index over the trailing ``period`` changes.

    Average gain and loss are simple means of the last ``period`` deltas.
    Zero average loss yields 100.

    Args:
        closes: Closing prices
        period: RSI period (default 14)

    Returns:
        RSI value (0-100) or None if insufficient data
    """
    arr = _array(closes)
    if period < 1 or len(arr) < period + 1:
        return None

    changes = np.diff(arr[-(period + 1):])
    avg_gain = np.clip(changes, 0, None).mean()
    avg_loss = np.clip(-changes, 0, None).mean()

    if avg_loss == 0:
        return 100.0

    rs = avg_gain / avg_loss
    return float(100 - (100 / (1 + rs)))


def macd_line_series(
    closes: Sequence[float], fast_period: int = 12, slow_period: int = 26
) -> np.ndarray:
    """MACD line values from the first bar where the slow EMA exists."""
    arr = _array(closes)
    if len(arr) < slow_period:
        return np.array([])
    line = ema_series(arr, fast_period) - ema_series(arr, slow_period)
    return line[slow_period - 1:]


def macd(
    closes: Sequence[float],
    fast_period: int = 12,
    slow_period: int = 26,
    signal_period: int = 9,
) -> MACDResult | None:
    """
    Calculate MACD (Moving Average Convergence Divergence).

    Args:
        closes: Closing prices
        fast_period: Fast EMA period (default 12)
        slow_period: Slow EMA period (default 26)
        signal_period: Signal line period (default 9)

    Returns:
        MACDResult or None with fewer than ``slow + signal - 1`` bars
    """
    if len(closes) < slow_period + signal_period - 1:
        return None

    line_values = macd_line_series(closes, fast_period, slow_period)
    signal = ema(line_values, signal_period)
    if signal is None:
        return None

    line = float(line_values[-1])
    return MACDResult(line=line, signal=signal, histogram=line - signal)


def _stochastic_k(
    highs: np.ndarray, lows: np.ndarray, closes: np.ndarray, end: int, k_period: int
) -> float:
    window_high = highs[end - k_period + 1 : end + 1].max()
    window_low = lows[end - k_period + 1 : end + 1].min()
    if window_high == window_low:
        return 50.0
    k = (closes[end] - window_low) / (window_high - window_low) * 100
    return float(min(max(k, 0.0), 100.0))


def stochastic(
    bars: Sequence[OHLCVBar], k_period: int = 14, d_period: int = 3
) -> StochasticResult | None:
    """
    Calculate the Stochastic Oscillator.

    %K = 100 * (close - lowest low) / (highest high - lowest low) over
    ``k_period`` bars (50 when the window is flat); %D = SMA of the last
    ``d_period`` %K values.
    """
    if k_period < 1 or d_period < 1 or len(bars) < k_period + d_period - 1:
        return None

    highs, lows, closes, _ = bar_arrays(bars)
    n = len(closes)
    k_values = [
        _stochastic_k(highs, lows, closes, end, k_period)
        for end in range(n - d_period, n)
    ]
    d = min(max(sum(k_values) / d_period, 0.0), 100.0)
    return StochasticResult(k=k_values[-1], d=d)


def williams_r(bars: Sequence[OHLCVBar], period: int = 14) -> float | None:
    """Williams %R in [-100, 0]; -50 when the window is flat."""
    if period < 1 or len(bars) < period:
        return None

    highs, lows, closes, _ = bar_arrays(bars[-period:])
    highest, lowest = highs.max(), lows.min()
    if highest == lowest:
        return -50.0
    return float(-100 * (highest - closes[-1]) / (highest - lowest))


def cci(bars: Sequence[OHLCVBar], period: int = 20) -> float | None:
    """Commodity Channel Index; 0 when mean absolute deviation is 0."""
    if period < 1 or len(bars) < period:
        return None

    highs, lows, closes, _ = bar_arrays(bars[-period:])
    typical = (highs + lows + closes) / 3
    mean = typical.mean()
    mad = np.abs(typical - mean).mean()
    if mad == 0:
        return 0.0
    return float((typical[-1] - mean) / (0.015 * mad))


# =============================================================================
# Volatility
# =============================================================================


def bollinger_bands(
    closes: Sequence[float],
    period: int = 20,
    num_std: float = 2.0,
) -> BollingerBandsResult | None:
    """
    Calculate Bollinger Bands.

    Args:
        closes: Closing prices
        period: SMA period (default 20)
        num_std: Number of population standard deviations (default 2.0)

    Returns:
        BollingerBandsResult or None if insufficient data
    """
    arr = _array(closes)
    if period < 1 or len(arr) < period:
        return None

    window = arr[-period:]
    middle = float(window.mean())
    std_dev = float(window.std())
    upper = middle + num_std * std_dev
    lower = middle - num_std * std_dev
    width = (upper - lower) / middle if middle != 0 else 0.0
    return BollingerBandsResult(upper=upper, middle=middle, lower=lower, width=width)


def atr(bars: Sequence[OHLCVBar], period: int = 14) -> float | None:
    """
    Calculate Average True Range with Wilder smoothing.

    Args:
        bars: OHLCV bars
        period: ATR period (default 14)

    Returns:
        ATR value or None with fewer than ``period + 1`` bars
    """
    if period < 1 or len(bars) < period + 1:
        return None

    highs, lows, closes, _ = bar_arrays(bars)
    prev_close = closes[:-1]
    true_ranges = np.maximum.reduce(
        [
            highs[1:] - lows[1:],
            np.abs(highs[1:] - prev_close),
            np.abs(lows[1:] - prev_close),
        ]
    )

    value = true_ranges[:period].mean()
    for tr in true_ranges[period:]:
        value = (value * (period - 1) + tr) / period
    return float(value)


# =============================================================================
# Volume
# =============================================================================


def obv(bars: Sequence[OHLCVBar]) -> float | None:
    """On-Balance Volume; the first bar contributes 0."""
    if not bars:
        return None
    _, _, closes, volumes = bar_arrays(bars)
    direction = np.sign(np.diff(closes))
    return float((direction * volumes[1:]).sum())


def vwap(bars: Sequence[OHLCVBar]) -> float | None:
    """Cumulative volume-weighted average of the typical price."""
    if not bars:
        return None
    highs, lows, closes, volumes = bar_arrays(bars)
    total_volume = volumes.sum()
    if total_volume <= 0:
        return None
    typical = (highs + lows + closes) / 3
    return float((typical * volumes).sum() / total_volume)


def volume_sma(bars: Sequence[OHLCVBar], period: int = 20) -> float | None:
    """Average volume over the last ``period`` bars."""
    return sma([b.volume for b in bars], period)


# =============================================================================
# Price levels and trend following
# =============================================================================


def support_resistance(
    bars: Sequence[OHLCVBar], window: int = 10, max_levels: int = 5
) -> SupportResistanceResult | None:
    """
    Find support and resistance levels from local extrema.

    A bar's low is a support candidate when it is the minimum low within
    ``window`` bars on either side; a bar's high is a resistance candidate
    when it is the maximum high in that range. Levels are reported nearest
    to the current close first: resistance above it ascending, support
    below it descending.
    """
    if window < 1 or len(bars) < 2 * window + 1:
        return None

    highs, lows, closes, _ = bar_arrays(bars)
    current = closes[-1]
    supports: set[float] = set()
    resistances: set[float] = set()

    for i in range(window, len(bars) - window):
        lo = lows[i - window : i + window + 1]
        hi = highs[i - window : i + window + 1]
        if lows[i] == lo.min():
            supports.add(round(float(lows[i]), 4))
        if highs[i] == hi.max():
            resistances.add(round(float(highs[i]), 4))

    return SupportResistanceResult(
        support=sorted((s for s in supports if s < current), reverse=True)[:max_levels],
        resistance=sorted(r for r in resistances if r > current)[:max_levels],
    )


def parabolic_sar_series(
    bars: Sequence[OHLCVBar], step: float = 0.02, max_step: float = 0.2
) -> list[ParabolicSARResult]:
    """SAR value and trend for every bar; empty with fewer than 2 bars."""
    if len(bars) < 2:
        return []

    highs, lows, closes, _ = bar_arrays(bars)
    uptrend = closes[1] >= closes[0]
    sar = lows[0] if uptrend else highs[0]
    extreme = highs[0] if uptrend else lows[0]
    af = step
    series = [ParabolicSARResult(value=float(sar), trend="up" if uptrend else "down")]

    for i in range(1, len(bars)):
        sar = sar + af * (extreme - sar)
        if uptrend:
            # SAR may not rise above the two prior lows
            sar = min(sar, lows[i - 1], lows[max(i - 2, 0)])
            if lows[i] < sar:
                uptrend = False
                sar, extreme, af = extreme, lows[i], step
            elif highs[i] > extreme:
                extreme = highs[i]
                af = min(af + step, max_step)
        else:
            sar = max(sar, highs[i - 1], highs[max(i - 2, 0)])
            if highs[i] > sar:
                uptrend = True
                sar, extreme, af = extreme, highs[i], step
            elif lows[i] < extreme:
                extreme = lows[i]
                af = min(af + step, max_step)

        series.append(
            ParabolicSARResult(value=float(sar), trend="up" if uptrend else "down")
        )

    return series


def parabolic_sar(
    bars: Sequence[OHLCVBar], step: float = 0.02, max_step: float = 0.2
) -> ParabolicSARResult | None:
    """Latest Parabolic SAR reading."""
    series = parabolic_sar_series(bars, step, max_step)
    return series[-1] if series else None


__all__ = [
    "atr",
    "bar_arrays",
    "bollinger_bands",
    "cci",
    "ema",
    "ema_series",
    "macd",
    "macd_line_series",
    "obv",
    "parabolic_sar",
    "parabolic_sar_series",
    "rsi",
    "sma",
    "stochastic",
    "support_resistance",
    "volume_sma",
    "vwap",
    "williams_r",
]
