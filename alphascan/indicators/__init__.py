"""
Technical indicator library.

Usage:
    from alphascan.indicators import compute_indicators

    bundle = compute_indicators(bars)
    bundle.rsi, bundle.macd.histogram, bundle.overall_signal
"""

from .bundle import compute_indicator, compute_indicators
from .core import (
    atr,
    bollinger_bands,
    cci,
    ema,
    ema_series,
    macd,
    obv,
    parabolic_sar,
    parabolic_sar_series,
    rsi,
    sma,
    stochastic,
    support_resistance,
    volume_sma,
    vwap,
    williams_r,
)
from .params import IndicatorParams, parse_indicator_params
from .results import (
    BollingerBandsResult,
    IndicatorBundle,
    MACDResult,
    ParabolicSARResult,
    StochasticResult,
    SupportResistanceResult,
)
from .signals import (
    detect_cci_signal,
    detect_ma_crossover,
    detect_macd_crossover,
    detect_rsi_signal,
    detect_stochastic_signal,
    detect_volume_surge,
    detect_williams_r_signal,
    overall_score,
    overall_signal,
    trend_signal,
)


__all__ = [
    "BollingerBandsResult",
    "IndicatorBundle",
    "IndicatorParams",
    "MACDResult",
    "ParabolicSARResult",
    "StochasticResult",
    "SupportResistanceResult",
    "atr",
    "bollinger_bands",
    "cci",
    "compute_indicator",
    "compute_indicators",
    "detect_cci_signal",
    "detect_ma_crossover",
    "detect_macd_crossover",
    "detect_rsi_signal",
    "detect_stochastic_signal",
    "detect_volume_surge",
    "detect_williams_r_signal",
    "ema",
    "ema_series",
    "macd",
    "obv",
    "overall_score",
    "overall_signal",
    "parabolic_sar",
    "parabolic_sar_series",
    "parse_indicator_params",
    "rsi",
    "sma",
    "stochastic",
    "support_resistance",
    "trend_signal",
    "volume_sma",
    "vwap",
    "williams_r",
]
