"""
Indicator parameters as a tagged union.

Each indicator has one parameter model discriminated by ``kind``; invalid
combinations (non-positive periods, fast >= slow, bad SAR steps) are
rejected at construction.

Usage:
    params = parse_indicator_params({"kind": "macd", "fast": 8, "slow": 21})
    result = compute_indicator(bars, params)
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator


class _Params(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class SMAParams(_Params):
    kind: Literal["sma"] = "sma"
    period: int = Field(20, ge=1)


class EMAParams(_Params):
    kind: Literal["ema"] = "ema"
    period: int = Field(20, ge=1)


class RSIParams(_Params):
    kind: Literal["rsi"] = "rsi"
    period: int = Field(14, ge=1)


class MACDParams(_Params):
    kind: Literal["macd"] = "macd"
    fast: int = Field(12, ge=1)
    slow: int = Field(26, ge=1)
    signal: int = Field(9, ge=1)

    @model_validator(mode="after")
    def check_periods(self) -> "MACDParams":
        if self.fast >= self.slow:
            raise ValueError("fast period must be shorter than slow period")
        return self


class BollingerParams(_Params):
    kind: Literal["bollinger"] = "bollinger"
    period: int = Field(20, ge=1)
    num_std: float = Field(2.0, gt=0)


class StochasticParams(_Params):
    kind: Literal["stochastic"] = "stochastic"
    k_period: int = Field(14, ge=1)
    d_period: int = Field(3, ge=1)


class WilliamsRParams(_Params):
    kind: Literal["williams_r"] = "williams_r"
    period: int = Field(14, ge=1)


class CCIParams(_Params):
    kind: Literal["cci"] = "cci"
    period: int = Field(20, ge=1)


class OBVParams(_Params):
    kind: Literal["obv"] = "obv"


class ATRParams(_Params):
    kind: Literal["atr"] = "atr"
    period: int = Field(14, ge=1)


class VWAPParams(_Params):
    kind: Literal["vwap"] = "vwap"


class VolumeSMAParams(_Params):
    kind: Literal["volume_sma"] = "volume_sma"
    period: int = Field(20, ge=1)


class SupportResistanceParams(_Params):
    kind: Literal["support_resistance"] = "support_resistance"
    window: int = Field(10, ge=1)
    max_levels: int = Field(5, ge=1)


class ParabolicSARParams(_Params):
    kind: Literal["parabolic_sar"] = "parabolic_sar"
    step: float = Field(0.02, gt=0)
    max_step: float = Field(0.2, gt=0)

    @model_validator(mode="after")
    def check_steps(self) -> "ParabolicSARParams":
        if self.step > self.max_step:
            raise ValueError("step must not exceed max_step")
        return self


IndicatorParams = Annotated[
    Union[
        SMAParams,
        EMAParams,
        RSIParams,
        MACDParams,
        BollingerParams,
        StochasticParams,
        WilliamsRParams,
        CCIParams,
        OBVParams,
        ATRParams,
        VWAPParams,
        VolumeSMAParams,
        SupportResistanceParams,
        ParabolicSARParams,
    ],
    Field(discriminator="kind"),
]

_adapter: TypeAdapter[Any] = TypeAdapter(IndicatorParams)


def parse_indicator_params(data: dict[str, Any]) -> IndicatorParams:
    """Validate a ``{"kind": ..., **params}`` mapping into its parameter model."""
    return _adapter.validate_python(data)
