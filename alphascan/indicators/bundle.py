"""Compute indicator bundles and single parameterized indicators."""

from __future__ import annotations

from typing import Any, Sequence, Union

import pandas as pd

from alphascan.domain import OHLCVBar, frame_to_bars

from . import core
from .params import (
    ATRParams,
    BollingerParams,
    CCIParams,
    EMAParams,
    IndicatorParams,
    MACDParams,
    OBVParams,
    ParabolicSARParams,
    RSIParams,
    SMAParams,
    StochasticParams,
    SupportResistanceParams,
    VolumeSMAParams,
    VWAPParams,
    WilliamsRParams,
)
from .results import IndicatorBundle
from .signals import overall_score, overall_signal, trend_signal


PriceInput = Union[Sequence[OHLCVBar], pd.DataFrame]


def _as_bars(data: PriceInput) -> list[OHLCVBar]:
    if isinstance(data, pd.DataFrame):
        return frame_to_bars(data)
    return list(data)


def compute_indicators(data: PriceInput) -> IndicatorBundle:
    """
    Compute every indicator for a price history.

    Args:
        data: OHLCV bars (oldest first) or an OHLCV DataFrame

    Returns:
        IndicatorBundle; individual indicators are None where the history
        is too short
    """
    bars = _as_bars(data)
    if not bars:
        return IndicatorBundle(overall_signal=overall_signal(0), overall_score=0)

    closes = [b.close for b in bars]
    price = closes[-1]

    sma20 = core.sma(closes, 20)
    sma50 = core.sma(closes, 50)
    sma200 = core.sma(closes, 200)
    rsi = core.rsi(closes, 14)
    macd = core.macd(closes)
    histogram = macd.histogram if macd else None

    score = overall_score(price, sma20, sma50, sma200, rsi, histogram)

    return IndicatorBundle(
        bar_count=len(bars),
        current_price=price,
        sma20=sma20,
        sma50=sma50,
        sma200=sma200,
        ema20=core.ema(closes, 20),
        ema50=core.ema(closes, 50),
        ema200=core.ema(closes, 200),
        rsi=rsi,
        macd=macd,
        bollinger=core.bollinger_bands(closes),
        stochastic=core.stochastic(bars),
        williams_r=core.williams_r(bars),
        cci=core.cci(bars),
        obv=core.obv(bars),
        atr=core.atr(bars),
        vwap=core.vwap(bars),
        volume_sma20=core.volume_sma(bars, 20),
        current_volume=bars[-1].volume,
        support_resistance=core.support_resistance(bars),
        parabolic_sar=core.parabolic_sar(bars),
        trend_signal=trend_signal(price, sma50, sma200, histogram),
        overall_signal=overall_signal(score),
        overall_score=score,
    )


def compute_indicator(data: PriceInput, params: IndicatorParams) -> Any:
    """
    Compute one indicator selected by its parameter model.

    Returns the indicator's value or result model, None when history is
    insufficient.
    """
    bars = _as_bars(data)
    closes = [b.close for b in bars]

    if isinstance(params, SMAParams):
        return core.sma(closes, params.period)
    if isinstance(params, EMAParams):
        return core.ema(closes, params.period)
    if isinstance(params, RSIParams):
        return core.rsi(closes, params.period)
    if isinstance(params, MACDParams):
        return core.macd(closes, params.fast, params.slow, params.signal)
    if isinstance(params, BollingerParams):
        return core.bollinger_bands(closes, params.period, params.num_std)
    if isinstance(params, StochasticParams):
        return core.stochastic(bars, params.k_period, params.d_period)
    if isinstance(params, WilliamsRParams):
        return core.williams_r(bars, params.period)
    if isinstance(params, CCIParams):
        return core.cci(bars, params.period)
    if isinstance(params, OBVParams):
        return core.obv(bars)
    if isinstance(params, ATRParams):
        return core.atr(bars, params.period)
    if isinstance(params, VWAPParams):
        return core.vwap(bars)
    if isinstance(params, VolumeSMAParams):
        return core.volume_sma(bars, params.period)
    if isinstance(params, SupportResistanceParams):
        return core.support_resistance(bars, params.window, params.max_levels)
    if isinstance(params, ParabolicSARParams):
        return core.parabolic_sar(bars, params.step, params.max_step)
    raise TypeError(f"Unsupported indicator parameters: {type(params).__name__}")
