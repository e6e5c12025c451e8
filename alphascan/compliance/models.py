"""Compliance screening result models."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


ComplianceStatus = Literal["compliant", "non-compliant", "doubtful", "unknown"]


class BusinessScreening(BaseModel):
    passed: bool
    halal_percentage: float = Field(..., ge=0, le=100)
    concerns: list[str] = Field(default_factory=list)


class FinancialScreening(BaseModel):
    """Four ratios in percent; a ratio is None when it cannot be computed."""

    debt_to_market_cap_ratio: float | None = None
    debt_to_equity_passed: bool = False
    interest_income_ratio: float | None = None
    interest_income_passed: bool = False
    receivables_ratio: float | None = None
    receivables_passed: bool = False
    cash_and_interest_bearing_ratio: float | None = None
    cash_and_interest_bearing_passed: bool = False

    @property
    def flags(self) -> tuple[bool, bool, bool, bool]:
        return (
            self.debt_to_equity_passed,
            self.interest_income_passed,
            self.receivables_passed,
            self.cash_and_interest_bearing_passed,
        )

    @property
    def computable(self) -> bool:
        return self.debt_to_market_cap_ratio is not None


class ComplianceResult(BaseModel):
    overall_status: ComplianceStatus
    business_screening: BusinessScreening
    financial_screening: FinancialScreening
    purification_ratio: float = 0.0
    last_updated: datetime
