"""Scanner configuration with universe sizes, batching and ranking settings.

All values are loaded from ``SCANNER_*`` environment variables with
sensible defaults.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from functools import lru_cache
from typing import Optional

from pydantic import ConfigDict, Field
from pydantic_settings import BaseSettings


class ScannerSettings(BaseSettings):
    """Scanner settings from environment."""

    model_config = ConfigDict(extra="ignore")

    # Universe selection
    scanner_sector_sample_size: int = Field(
        default=200, ge=10, le=2000, description="Symbols sampled for sector matching"
    )
    scanner_sector_batch_size: int = Field(
        default=10, ge=1, le=50, description="Profiles fetched per sector batch"
    )
    scanner_sector_batch_delay: float = Field(
        default=0.15, ge=0, le=5.0, description="Delay between profile batches (seconds)"
    )
    scanner_fallback_sample_size: int = Field(
        default=30, ge=1, le=500, description="Sample used when no sector matches"
    )
    scanner_penny_universe_size: int = Field(
        default=60, ge=1, le=1000, description="Penny-stock candidate pool size"
    )
    scanner_shariah_universe_size: int = Field(
        default=60, ge=1, le=1000, description="Listed 3-4 character symbols added after the curated Shariah list"
    )
    scanner_default_short_symbols: int = Field(
        default=20, ge=0, le=1000, description="1-4 character symbols in default pool"
    )
    scanner_default_long_symbols: int = Field(
        default=10, ge=0, le=1000, description="5 character symbols in default pool"
    )

    # Fundamental fetch
    scanner_batch_size: int = Field(
        default=10, ge=1, le=100, description="Symbols per quote batch"
    )
    scanner_max_concurrent_batches: int = Field(
        default=5, ge=1, le=20, description="Batches fetched concurrently"
    )
    scanner_batch_group_delay: float = Field(
        default=0.2, ge=0, le=10.0, description="Delay between batch groups (seconds)"
    )

    # Technical enrichment
    scanner_technical_top_n: int = Field(
        default=100, ge=0, le=1000, description="Candidates enriched with indicators"
    )
    scanner_history_days: int = Field(
        default=200, ge=20, le=2000, description="Daily bars fetched per candidate"
    )
    scanner_min_history_bars: int = Field(
        default=20, ge=2, le=500, description="Minimum bars for technical scoring"
    )

    # Ranking
    scanner_result_limit: Optional[int] = Field(
        default=50, ge=1, description="Maximum results returned (unset for all)"
    )
    scanner_penny_max_price: float = Field(
        default=5.0, gt=0, description="Price ceiling forced on penny-stock scans"
    )


@dataclass
class ScannerConfig:
    """Complete scanner configuration."""

    # Universe
    sector_sample_size: int = 200
    sector_batch_size: int = 10
    sector_batch_delay: float = 0.15
    fallback_sample_size: int = 30
    penny_universe_size: int = 60
    shariah_universe_size: int = 60
    default_short_symbols: int = 20
    default_long_symbols: int = 10

    # Fetching
    batch_size: int = 10
    max_concurrent_batches: int = 5
    batch_group_delay: float = 0.2

    # Technicals
    technical_top_n: int = 100
    history_days: int = 200
    min_history_bars: int = 20

    # Ranking
    result_limit: Optional[int] = 50
    penny_max_price: float = 5.0

    @classmethod
    def from_settings(cls, settings: ScannerSettings | None = None) -> ScannerConfig:
        """Create config from settings."""
        if settings is None:
            settings = ScannerSettings()

        return cls(
            sector_sample_size=settings.scanner_sector_sample_size,
            sector_batch_size=settings.scanner_sector_batch_size,
            sector_batch_delay=settings.scanner_sector_batch_delay,
            fallback_sample_size=settings.scanner_fallback_sample_size,
            penny_universe_size=settings.scanner_penny_universe_size,
            shariah_universe_size=settings.scanner_shariah_universe_size,
            default_short_symbols=settings.scanner_default_short_symbols,
            default_long_symbols=settings.scanner_default_long_symbols,
            batch_size=settings.scanner_batch_size,
            max_concurrent_batches=settings.scanner_max_concurrent_batches,
            batch_group_delay=settings.scanner_batch_group_delay,
            technical_top_n=settings.scanner_technical_top_n,
            history_days=settings.scanner_history_days,
            min_history_bars=settings.scanner_min_history_bars,
            result_limit=settings.scanner_result_limit,
            penny_max_price=settings.scanner_penny_max_price,
        )

    def with_overrides(self, **overrides) -> ScannerConfig:
        """Return a new config with the given non-None fields replaced."""
        applied = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **applied) if applied else self


@lru_cache(maxsize=1)
def get_scanner_config() -> ScannerConfig:
    """Get cached scanner configuration from settings."""
    return ScannerConfig.from_settings()
