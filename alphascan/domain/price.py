"""Price domain models.

OHLCV bars are the input to every technical indicator.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Iterator, Sequence

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, computed_field


class OHLCVBar(BaseModel):
    """Single OHLCV price bar. Immutable once fetched."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    timestamp: datetime = Field(..., description="Bar open time")
    open: float = Field(..., ge=0, description="Opening price")
    high: float = Field(..., ge=0, description="High price")
    low: float = Field(..., ge=0, description="Low price")
    close: float = Field(..., ge=0, description="Closing price")
    volume: float = Field(default=0, ge=0, description="Trading volume")

    @property
    def typical_price(self) -> float:
        """(high + low + close) / 3."""
        return (self.high + self.low + self.close) / 3


class PriceHistory(BaseModel):
    """Ordered OHLCV history for a symbol (ascending by time)."""

    model_config = ConfigDict(from_attributes=True)

    symbol: str = Field(..., description="Ticker symbol")
    bars: list[OHLCVBar] = Field(default_factory=list, description="Bars, oldest first")

    def __len__(self) -> int:
        return len(self.bars)

    def __iter__(self) -> Iterator[OHLCVBar]:  # type: ignore[override]
        return iter(self.bars)

    @computed_field
    @property
    def latest_close(self) -> float | None:
        """Most recent closing price."""
        return self.bars[-1].close if self.bars else None

    def to_dataframe(self) -> pd.DataFrame:
        return bars_to_frame(self.bars)

    @classmethod
    def from_dataframe(cls, symbol: str, df: pd.DataFrame) -> "PriceHistory":
        return cls(symbol=symbol, bars=frame_to_bars(df))


def bars_to_frame(bars: Sequence[OHLCVBar]) -> pd.DataFrame:
    """Convert bars to a DataFrame indexed by timestamp with lower-case columns."""
    columns = ["open", "high", "low", "close", "volume"]
    if not bars:
        return pd.DataFrame(columns=columns)

    df = pd.DataFrame(
        [
            {
                "timestamp": bar.timestamp,
                "open": bar.open,
                "high": bar.high,
                "low": bar.low,
                "close": bar.close,
                "volume": bar.volume,
            }
            for bar in bars
        ]
    )
    df.set_index("timestamp", inplace=True)
    return df


def frame_to_bars(df: pd.DataFrame | None) -> list[OHLCVBar]:
    """
    Convert an OHLCV DataFrame into bars sorted ascending by time.

    Accepts yfinance-style capitalized columns or lower-case columns, and
    either a DatetimeIndex or a ``timestamp``/``date`` column. Rows with
    missing or non-numeric prices are skipped.
    """
    if df is None or df.empty:
        return []

    frame = df.rename(columns={c: str(c).lower() for c in df.columns})
    if "timestamp" in frame.columns:
        frame = frame.set_index("timestamp")
    elif "date" in frame.columns:
        frame = frame.set_index("date")
    frame = frame.sort_index()

    bars: list[OHLCVBar] = []
    for idx, row in frame.iterrows():
        try:
            values = [float(row[c]) for c in ("open", "high", "low", "close")]
            if any(math.isnan(v) for v in values):
                continue
            volume = float(row["volume"]) if "volume" in frame.columns else 0.0
            if math.isnan(volume):
                volume = 0.0
            bars.append(
                OHLCVBar(
                    timestamp=pd.Timestamp(idx).to_pydatetime(),
                    open=values[0],
                    high=values[1],
                    low=values[2],
                    close=values[3],
                    volume=volume,
                )
            )
        except (ValueError, TypeError, KeyError):
            continue
    return bars
