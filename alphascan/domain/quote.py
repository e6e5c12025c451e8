"""Quote and company fundamentals domain models.

Snapshots of upstream market data used by filters, scoring and
compliance screening. All fields are optional except the symbol so
partial upstream payloads are represented faithfully.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Quote(BaseModel):
    """Immutable market snapshot for one symbol."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    symbol: str = Field(..., description="Ticker symbol (uppercase)")
    name: str | None = Field(None, description="Company name")
    exchange: str | None = Field(None, description="Exchange code")
    currency: str | None = Field(None, description="Trading currency")

    # Price
    current_price: float | None = Field(None, description="Last traded price")
    previous_close: float | None = Field(None, description="Previous session close")
    open_price: float | None = Field(None, description="Session open")
    day_high: float | None = Field(None, description="Session high")
    day_low: float | None = Field(None, description="Session low")
    week52_high: float | None = Field(None, description="52-week high")
    week52_low: float | None = Field(None, description="52-week low")

    # Market
    volume: float | None = Field(None, description="Session volume")
    avg_volume: float | None = Field(None, description="Average daily volume")
    market_cap: float | None = Field(None, description="Market capitalization (USD)")

    # Valuation
    pe_ratio: float | None = Field(None, description="Trailing P/E ratio")
    forward_pe: float | None = Field(None, description="Forward P/E ratio")
    pb_ratio: float | None = Field(None, description="Price to book")
    ps_ratio: float | None = Field(None, description="Price to sales")
    dividend_yield: float | None = Field(None, description="Dividend yield in percent")
    beta: float | None = Field(None, description="Beta vs market")

    # Classification
    sector: str | None = Field(None, description="Sector")
    industry: str | None = Field(None, description="Industry")
    country: str | None = Field(None, description="Country code or name")

    @field_validator("symbol")
    @classmethod
    def normalize_symbol(cls, v: str) -> str:
        return v.strip().upper()

    @property
    def daily_change_percent(self) -> float:
        """(current - previous close) / previous close * 100, 0 when unknown."""
        if not self.current_price or not self.previous_close:
            return 0.0
        return (self.current_price - self.previous_close) / self.previous_close * 100

    @property
    def volume_ratio(self) -> float | None:
        """Session volume relative to average volume."""
        if not self.volume or not self.avg_volume:
            return None
        return self.volume / self.avg_volume

    @property
    def position_in_52w_range(self) -> float | None:
        """0 at the 52-week low, 1 at the high."""
        if self.current_price is None or self.week52_high is None or self.week52_low is None:
            return None
        span = self.week52_high - self.week52_low
        if span <= 0:
            return None
        return (self.current_price - self.week52_low) / span

    @property
    def percent_from_52w_high(self) -> float | None:
        if not self.current_price or not self.week52_high:
            return None
        return (self.week52_high - self.current_price) / self.week52_high * 100


class CompanyProfile(BaseModel):
    """Business classification and description used for screening."""

    name: str | None = None
    sector: str | None = None
    industry: str | None = None
    country: str | None = None
    business_summary: str | None = None
    market_cap: float | None = None


class FinancialRatiosRaw(BaseModel):
    """Balance sheet and income figures needed for ratio screening."""

    total_debt: float | None = None
    total_equity: float | None = None
    total_assets: float | None = None
    market_cap: float | None = None
    cash: float | None = None
    short_term_investments: float | None = None
    accounts_receivable: float | None = None
    total_revenue: float | None = None
    interest_income: float | None = None
    interest_expense: float | None = None
