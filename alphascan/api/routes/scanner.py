"""Scanner, indicator and compliance endpoints."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, Body, Depends

from alphascan.compliance import ComplianceResult, full_screen
from alphascan.core.exceptions import InsufficientDataError
from alphascan.core.logging import get_logger
from alphascan.indicators import IndicatorBundle, compute_indicator, compute_indicators
from alphascan.scanner import STRATEGY_REGISTRY, MarketScanner, ScanReport

from ..dependencies import get_market_scanner
from ..schemas import (
    ComplianceRequest,
    IndicatorRequest,
    IndicatorValueResponse,
    StrategyInfo,
)


router = APIRouter()

logger = get_logger("api.scanner")


@router.post(
    "/scan",
    response_model=ScanReport,
    summary="Run a market scan",
    description="Score and rank a candidate universe for one scan type.",
)
async def run_scan(
    filters: Optional[Dict[str, Any]] = Body(default=None),
    scanner: MarketScanner = Depends(get_market_scanner),
) -> ScanReport:
    """
    Run a scan with the given filters.

    Invalid filters are rejected with 422 before any data is fetched.
    """
    return await scanner.scan(filters or {})


@router.post(
    "/indicators",
    response_model=None,
    summary="Compute technical indicators",
)
async def indicators(payload: IndicatorRequest) -> Union[IndicatorBundle, IndicatorValueResponse]:
    """Full indicator bundle, or one indicator when ``params`` is supplied."""
    if not payload.bars:
        raise InsufficientDataError(message="No price bars supplied")

    if payload.params is not None:
        value = compute_indicator(payload.bars, payload.params)
        return IndicatorValueResponse(kind=payload.params.kind, value=value)
    return compute_indicators(payload.bars)


@router.post(
    "/compliance",
    response_model=ComplianceResult,
    summary="Shariah compliance screen",
)
async def compliance(payload: ComplianceRequest) -> ComplianceResult:
    result = full_screen(payload.profile, payload.financials)
    logger.info(
        f"Compliance screen for {payload.profile.name or 'unnamed company'}: "
        f"{result.overall_status}"
    )
    return result


@router.get(
    "/strategies",
    response_model=List[StrategyInfo],
    summary="List scan types",
)
async def strategies() -> List[StrategyInfo]:
    return [
        StrategyInfo(
            scan_type=strategy.scan_type,
            label=strategy.label,
            description=strategy.description,
        )
        for strategy in STRATEGY_REGISTRY.values()
    ]
