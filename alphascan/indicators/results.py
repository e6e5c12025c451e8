"""Indicator result models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


TrendSignal = Literal["bullish", "bearish", "neutral"]
OverallSignal = Literal["strong_buy", "buy", "hold", "sell", "strong_sell"]


class _Result(BaseModel):
    model_config = ConfigDict(frozen=True)


class MACDResult(_Result):
    line: float
    signal: float
    histogram: float


class BollingerBandsResult(_Result):
    upper: float
    middle: float
    lower: float
    width: float = Field(..., description="(upper - lower) / middle")

    def position(self, price: float) -> float | None:
        """0 at the lower band, 1 at the upper band."""
        span = self.upper - self.lower
        if span <= 0:
            return None
        return (price - self.lower) / span


class StochasticResult(_Result):
    k: float = Field(..., ge=0, le=100)
    d: float = Field(..., ge=0, le=100)


class SupportResistanceResult(_Result):
    support: list[float] = Field(default_factory=list, description="Nearest first")
    resistance: list[float] = Field(default_factory=list, description="Nearest first")


class ParabolicSARResult(_Result):
    value: float
    trend: Literal["up", "down"]


class IndicatorBundle(_Result):
    """Every indicator for one price history; ``None`` where history is too short."""

    bar_count: int = 0
    current_price: float | None = None

    sma20: float | None = None
    sma50: float | None = None
    sma200: float | None = None
    ema20: float | None = None
    ema50: float | None = None
    ema200: float | None = None

    rsi: float | None = None
    macd: MACDResult | None = None
    bollinger: BollingerBandsResult | None = None
    stochastic: StochasticResult | None = None
    williams_r: float | None = None
    cci: float | None = None
    obv: float | None = None
    atr: float | None = None
    vwap: float | None = None
    volume_sma20: float | None = None
    current_volume: float | None = None

    support_resistance: SupportResistanceResult | None = None
    parabolic_sar: ParabolicSARResult | None = None

    trend_signal: TrendSignal = "neutral"
    # Same label overall_signal() gives a zero score
    overall_signal: OverallSignal = "sell"
    overall_score: int = 0

    @property
    def volume_ratio(self) -> float | None:
        if not self.current_volume or not self.volume_sma20:
            return None
        return self.current_volume / self.volume_sma20
