"""Request and response schemas for the HTTP surface."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from alphascan.domain import CompanyProfile, FinancialRatiosRaw, OHLCVBar
from alphascan.indicators import IndicatorParams
from alphascan.scanner import ScanType


class ErrorResponse(BaseModel):
    """Standard error response schema."""

    error: str = Field(..., description="Error code", examples=["INVALID_FILTER"])
    message: str = Field(..., description="Human-readable error message")
    status: int = Field(..., description="HTTP status code")
    details: Optional[Dict[str, Any]] = Field(
        default=None, description="Additional error details"
    )


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Overall health status", examples=["healthy", "degraded"])
    version: str = Field(..., description="Application version")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    checks: Dict[str, bool] = Field(default_factory=dict, description="Individual service checks")


class IndicatorRequest(BaseModel):
    """Bars to analyze and an optional single-indicator selection."""

    bars: List[OHLCVBar] = Field(default_factory=list, description="OHLCV bars, oldest first")
    params: Optional[IndicatorParams] = Field(
        default=None,
        description="Compute only this indicator; the full bundle when omitted",
    )


class IndicatorValueResponse(BaseModel):
    """Value of one parameterized indicator (None when history is too short)."""

    kind: str
    value: Any = None


class ComplianceRequest(BaseModel):
    """Company profile and optional financial figures to screen."""

    profile: CompanyProfile
    financials: Optional[FinancialRatiosRaw] = None


class StrategyInfo(BaseModel):
    """Registered scan type with its label and description."""

    scan_type: ScanType
    label: str
    description: str
