"""
Shariah compliance screening.

Two-part check: business activity (industry, sector and business summary
against prohibited activities) and AAOIFI-style financial ratios measured
against market capitalization.

Usage:
    from alphascan.compliance import full_screen, quick_check

    quick_check("Technology", "Software")  # True
    result = full_screen(profile, financials)
    result.overall_status  # "compliant" | "non-compliant" | "doubtful" | "unknown"
"""

from __future__ import annotations

from datetime import datetime, timezone

from alphascan.core.logging import get_logger
from alphascan.domain import CompanyProfile, FinancialRatiosRaw

from .models import (
    BusinessScreening,
    ComplianceResult,
    ComplianceStatus,
    FinancialScreening,
)


logger = get_logger("compliance.screener")

# Industries that are not permissible, matched as substrings
HARAM_INDUSTRIES: tuple[str, ...] = (
    "alcoholic beverages",
    "brewers",
    "wineries & distilleries",
    "tobacco",
    "gambling",
    "casinos",
    "adult entertainment",
    "pork",
    "conventional banking",
    "conventional insurance",
    "interest-based financial services",
)

# Business summary keywords; each distinct hit costs HALAL_KEYWORD_PENALTY
HARAM_KEYWORDS: tuple[str, ...] = (
    "alcohol",
    "beer",
    "wine",
    "spirits",
    "liquor",
    "tobacco",
    "cigarette",
    "casino",
    "gambling",
    "betting",
    "nightclub",
    "pork",
    "swine",
)

HALAL_KEYWORD_PENALTY = 20

# Thresholds in percent of market capitalization (interest: of revenue)
DEBT_TO_MARKET_CAP_MAX = 33.0
INTEREST_INCOME_MAX = 5.0
RECEIVABLES_TO_MARKET_CAP_MAX = 45.0
CASH_AND_INTEREST_BEARING_MAX = 33.0


def quick_check(sector: str | None, industry: str | None) -> bool:
    """
    Preliminary compliance check from classification alone.

    Fails closed: unknown sector and industry is not compliant.

    Args:
        sector: Sector name
        industry: Industry name

    Returns:
        True when the company is likely compliant
    """
    s = (sector or "").lower()
    i = (industry or "").lower()

    if not s and not i:
        return False

    if any(haram in i or haram in s for haram in HARAM_INDUSTRIES):
        return False

    if "financial" in s or "bank" in i or "insurance" in i:
        return "islamic" in s or "islamic" in i

    return True


def screen_business_activity(profile: CompanyProfile) -> BusinessScreening:
    concerns: list[str] = []
    halal = 100.0

    industry = (profile.industry or "").lower()
    sector = (profile.sector or "").lower()
    summary = (profile.business_summary or "").lower()

    for haram in HARAM_INDUSTRIES:
        if haram in industry or haram in sector:
            concerns.append(f"Industry classified as {haram}")
            halal = 0.0

    for keyword in HARAM_KEYWORDS:
        if keyword in summary and not any(keyword in c for c in concerns):
            concerns.append(f'Business description mentions "{keyword}"')
            halal = max(0.0, halal - HALAL_KEYWORD_PENALTY)

    if "financial" in sector or "bank" in industry:
        if "islamic" not in industry and "islamic" not in summary:
            concerns.append("Conventional financial services")
            halal = 0.0

    return BusinessScreening(passed=not concerns, halal_percentage=halal, concerns=concerns)


def _positive(value: float | None) -> float | None:
    return value if value is not None and value > 0 else None


def _interest_income_ratio(financials: FinancialRatiosRaw) -> float | None:
    interest = financials.interest_income or 0.0
    revenue = _positive(financials.total_revenue)
    if revenue is not None:
        return interest / revenue * 100
    # Without revenue only a zero interest income is known to pass
    return 0.0 if interest <= 0 else None


def screen_financial_ratios(
    financials: FinancialRatiosRaw, fallback_market_cap: float | None = None
) -> FinancialScreening:
    """
    Compute the four ratio screens.

    Market cap comes from ``financials``, then ``fallback_market_cap``, then
    total equity. Without any of them the market-cap ratios are None and
    their flags fail.
    """
    interest_ratio = _interest_income_ratio(financials)
    market_cap = (
        _positive(financials.market_cap)
        or _positive(fallback_market_cap)
        or _positive(financials.total_equity)
    )

    if market_cap is None:
        return FinancialScreening(
            interest_income_ratio=interest_ratio,
            interest_income_passed=interest_ratio is not None
            and interest_ratio <= INTEREST_INCOME_MAX,
        )

    debt_ratio = (financials.total_debt or 0.0) / market_cap * 100
    receivables_ratio = (financials.accounts_receivable or 0.0) / market_cap * 100
    cash_ratio = (
        (financials.cash or 0.0) + (financials.short_term_investments or 0.0)
    ) / market_cap * 100

    return FinancialScreening(
        debt_to_market_cap_ratio=debt_ratio,
        debt_to_equity_passed=debt_ratio <= DEBT_TO_MARKET_CAP_MAX,
        interest_income_ratio=interest_ratio,
        interest_income_passed=interest_ratio is not None
        and interest_ratio <= INTEREST_INCOME_MAX,
        receivables_ratio=receivables_ratio,
        receivables_passed=receivables_ratio <= RECEIVABLES_TO_MARKET_CAP_MAX,
        cash_and_interest_bearing_ratio=cash_ratio,
        cash_and_interest_bearing_passed=cash_ratio <= CASH_AND_INTEREST_BEARING_MAX,
    )


def _overall_status(
    business: BusinessScreening, financial: FinancialScreening
) -> ComplianceStatus:
    if not business.passed:
        return "non-compliant"
    if not financial.computable:
        return "unknown"
    flags = financial.flags
    if all(flags):
        return "compliant"
    if any(flags):
        return "doubtful"
    return "non-compliant"


def purification_ratio(financials: FinancialRatiosRaw) -> float:
    """Percent of income attributable to interest; 0 when revenue is unknown."""
    revenue = _positive(financials.total_revenue)
    if revenue is None:
        return 0.0
    return (financials.interest_income or 0.0) / revenue * 100


def full_screen(
    profile: CompanyProfile,
    financials: FinancialRatiosRaw | None = None,
    now: datetime | None = None,
) -> ComplianceResult:
    """
    Run business and financial screening.

    Args:
        profile: Company classification and business summary
        financials: Balance sheet and income figures (None if unavailable)
        now: Timestamp recorded on the result (defaults to current UTC time)

    Returns:
        ComplianceResult with the overall status and both screenings
    """
    financials = financials or FinancialRatiosRaw()
    business = screen_business_activity(profile)
    financial = screen_financial_ratios(financials, profile.market_cap)
    status = _overall_status(business, financial)

    if business.concerns:
        logger.debug(f"Business screening concerns: {business.concerns}")

    return ComplianceResult(
        overall_status=status,
        business_screening=business,
        financial_screening=financial,
        purification_ratio=purification_ratio(financials),
        last_updated=now or datetime.now(timezone.utc),
    )


def purification_amount(dividend: float, ratio: float) -> float:
    """Part of ``dividend`` to donate given a purification ratio in percent."""
    return dividend * (ratio / 100)


_LABELS: dict[str, str] = {
    "compliant": "Shariah Compliant",
    "non-compliant": "Not Shariah Compliant",
    "doubtful": "Requires Review",
}


def compliance_label(status: str) -> str:
    return _LABELS.get(status, "Unknown Status")
