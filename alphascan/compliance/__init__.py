"""Shariah compliance screening."""

from .models import (
    BusinessScreening,
    ComplianceResult,
    ComplianceStatus,
    FinancialScreening,
)
from .screener import (
    HARAM_INDUSTRIES,
    HARAM_KEYWORDS,
    compliance_label,
    full_screen,
    purification_amount,
    purification_ratio,
    quick_check,
    screen_business_activity,
    screen_financial_ratios,
)


__all__ = [
    "BusinessScreening",
    "ComplianceResult",
    "ComplianceStatus",
    "FinancialScreening",
    "HARAM_INDUSTRIES",
    "HARAM_KEYWORDS",
    "compliance_label",
    "full_screen",
    "purification_amount",
    "purification_ratio",
    "quick_check",
    "screen_business_activity",
    "screen_financial_ratios",
]
