"""Health check endpoints."""

from __future__ import annotations

from datetime import UTC, datetime

from fastapi import APIRouter

from alphascan.cache import get_cache, valkey_enabled, valkey_healthcheck
from alphascan.core.config import settings
from alphascan.core.logging import get_logger

from ..schemas import HealthResponse


router = APIRouter(prefix="/health")

logger = get_logger("health")


@router.get(
    "",
    response_model=HealthResponse,
    summary="Health check",
    description="Check the health status of the API and its cache tiers.",
)
async def health_check() -> HealthResponse:
    """
    Perform health check on API and dependencies.

    The in-process cache is always available; the shared Valkey tier is
    only checked when configured. A failing shared tier degrades service
    since every read falls back to the in-process tier.
    """
    checks = {"memory_cache": True}
    if valkey_enabled():
        checks["valkey"] = await valkey_healthcheck()

    status = "healthy" if all(checks.values()) else "degraded"
    if status != "healthy":
        logger.warning(f"Health check degraded: {checks}")

    return HealthResponse(
        status=status,
        version=settings.app_version,
        timestamp=datetime.now(UTC),
        checks=checks,
    )


@router.get(
    "/live",
    summary="Liveness check",
    description="Check if the API process is alive.",
)
async def liveness_check() -> dict:
    return {"status": "alive"}


@router.get(
    "/cache",
    summary="Cache statistics",
    description="In-process cache size and hit counters.",
)
async def cache_stats() -> dict:
    return get_cache().stats()
