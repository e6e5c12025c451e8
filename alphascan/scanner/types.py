"""Scanner domain types: scan types, filters, signals and results."""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from alphascan.core.exceptions import InvalidFilterError
from alphascan.domain import Quote
from alphascan.indicators import IndicatorBundle


class ScanType(str, Enum):
    UNDERVALUED = "undervalued"
    MOMENTUM = "momentum"
    DIVIDEND = "dividend"
    GROWTH = "growth"
    VALUE = "value"
    QUALITY = "quality"
    TURNAROUND = "turnaround"
    BREAKOUT = "breakout"
    PENNY_STOCKS = "penny_stocks"
    CRYPTO_MINING = "crypto_mining"


class Market(str, Enum):
    US = "US"
    UK = "UK"
    DE = "DE"
    FR = "FR"
    JP = "JP"
    CN = "CN"
    HK = "HK"
    IN = "IN"
    AU = "AU"
    CA = "CA"
    SA = "SA"
    AE = "AE"


SignalType = Literal["positive", "negative", "neutral"]
SignalCategory = Literal[
    "valuation", "growth", "quality", "technical", "momentum", "shariah"
]
Recommendation = Literal["strong_buy", "buy", "hold", "sell", "strong_sell"]


class ScanSignal(BaseModel):
    """One weighted, human-readable scoring contribution."""

    model_config = ConfigDict(frozen=True)

    type: SignalType
    category: SignalCategory
    message: str
    weight: int


_RANGES = (
    ("min_price", "max_price"),
    ("min_market_cap", "max_market_cap"),
    ("min_pe_ratio", "max_pe_ratio"),
    ("min_dividend_yield", "max_dividend_yield"),
)


class ScannerFilters(BaseModel):
    """
    Scan request.

    Market caps are in millions of USD and dividend yields in percent.
    Unset (or zero) bounds are inactive.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    scan_type: ScanType = ScanType.UNDERVALUED
    markets: list[Market] = Field(default_factory=lambda: [Market.US])
    sectors: list[str] = Field(default_factory=list)
    shariah_compliant_only: bool = False

    min_price: Optional[float] = Field(None, ge=0)
    max_price: Optional[float] = Field(None, ge=0)
    min_market_cap: Optional[float] = Field(None, ge=0)
    max_market_cap: Optional[float] = Field(None, ge=0)
    min_pe_ratio: Optional[float] = None
    max_pe_ratio: Optional[float] = None
    max_pb_ratio: Optional[float] = Field(None, ge=0)
    min_dividend_yield: Optional[float] = Field(None, ge=0)
    max_dividend_yield: Optional[float] = Field(None, ge=0)

    @model_validator(mode="after")
    def check_consistency(self) -> "ScannerFilters":
        if not self.markets:
            raise ValueError("at least one market must be selected")
        for low_name, high_name in _RANGES:
            low, high = getattr(self, low_name), getattr(self, high_name)
            if low is not None and high is not None and low > high:
                raise ValueError(f"{low_name} ({low}) exceeds {high_name} ({high})")
        return self

    @classmethod
    def from_request(cls, data: dict[str, Any]) -> "ScannerFilters":
        """Validate raw input, reporting problems as ``InvalidFilterError``."""
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise InvalidFilterError(
                message="Invalid scanner filters",
                details={
                    "errors": [
                        {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
                        for err in e.errors()
                    ]
                },
            ) from e


class ScanResult(BaseModel):
    stock: Quote
    score: int
    fundamental_score: int
    signals: list[ScanSignal] = Field(default_factory=list)
    recommendation: Recommendation
    reason_summary: str
    is_shariah_compliant: bool = False
    technicals: IndicatorBundle | None = None


class ScanReport(BaseModel):
    """Ranked results plus diagnostics for one scan."""

    scan_type: ScanType
    results: list[ScanResult] = Field(default_factory=list)
    universe_size: int = 0
    fetched: int = 0
    cache_hits: int = 0
    skipped: int = 0
    errors: int = 0
    filtered_out: int = 0
    technical_enriched: int = 0
    elapsed_seconds: float = 0.0
