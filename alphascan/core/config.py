"""Application settings with Pydantic validation and environment loading."""

from __future__ import annotations

from functools import lru_cache
from typing import List, Optional, Tuple

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_WINDOWS = {
    "second": 1,
    "sec": 1,
    "s": 1,
    "minute": 60,
    "min": 60,
    "m": 60,
    "hour": 3600,
    "hr": 3600,
    "h": 3600,
    "day": 86400,
    "d": 86400,
}


def parse_rate_limit(rate_string: str) -> Tuple[int, int]:
    """
    Parse rate limit string like "60/minute" or "10/second".

    Returns (limit, window_in_seconds)
    """
    parts = rate_string.lower().split("/")
    if len(parts) != 2:
        raise ValueError(f"Invalid rate limit format: {rate_string}")

    limit = int(parts[0])
    unit = parts[1].strip()
    if unit not in _WINDOWS or limit < 1:
        raise ValueError(f"Invalid rate limit format: {rate_string}")

    return limit, _WINDOWS[unit]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_name: str = "AlphaScan API"
    app_version: str = "1.0.0"
    debug: bool = Field(
        default=False, description="Enable debug mode (disable in production)"
    )
    root_path: str = Field(default="", description="Root path for reverse proxy")
    cors_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        description="Allowed CORS origins",
    )
    environment: str = Field(
        default="production",
        description="Environment: development, staging, production",
    )

    # Valkey (Redis-compatible) shared cache tier, disabled when unset
    valkey_url: Optional[str] = Field(
        default=None, description="Valkey connection URL for the shared cache tier"
    )
    valkey_max_connections: int = Field(default=10, ge=1, le=100)

    # In-process cache
    cache_max_entries: int = Field(
        default=5000, ge=10, description="Upper bound on in-process cache entries"
    )
    cache_ttl_quote: int = Field(default=300, ge=1, description="Quote TTL (seconds)")
    cache_ttl_profile: int = Field(
        default=86400, ge=1, description="Company profile TTL (seconds)"
    )
    cache_ttl_metrics: int = Field(
        default=86400, ge=1, description="Financial metrics TTL (seconds)"
    )
    cache_ttl_history: int = Field(
        default=1800, ge=1, description="OHLCV history TTL (seconds)"
    )
    cache_ttl_news: int = Field(default=1800, ge=1, description="News TTL (seconds)")
    cache_ttl_benchmark: int = Field(
        default=3600, ge=1, description="Benchmark data TTL (seconds)"
    )
    cache_ttl_analyst: int = Field(
        default=3600, ge=1, description="Analyst data TTL (seconds)"
    )

    # Upstream rate limits ("N/unit" strings, see parse_rate_limit)
    rate_limit_finnhub: str = Field(
        default="60/minute", description="Finnhub request quota"
    )
    rate_limit_yahoo: str = Field(
        default="120/minute", description="Yahoo Finance request quota"
    )
    rate_limit_alpha_vantage: str = Field(
        default="5/minute", description="Alpha Vantage request quota"
    )
    rate_limit_fallback_backoff: float = Field(
        default=60.0,
        gt=0,
        description="Backoff in seconds after a 429 without a Retry-After header",
    )
    rate_limit_max_retries: int = Field(
        default=3, ge=0, le=10, description="Retries after HTTP 429 before giving up"
    )
    upstream_timeout: float = Field(
        default=30.0, gt=0, description="Per-request upstream timeout in seconds"
    )

    # Finnhub
    finnhub_base_url: str = Field(default="https://finnhub.io/api/v1")
    finnhub_api_key: Optional[str] = Field(default=None)

    # Symbol directory used by providers without a listing endpoint
    default_symbols: List[str] = Field(
        default_factory=lambda: [
            "T", "F", "V", "MA", "KO", "GE", "PG", "HD", "MU", "PM",
            "AMD", "AAPL", "MSFT", "GOOG", "AMZN", "META", "NVDA", "TSLA", "NFLX", "INTC",
            "CSCO", "ORCL", "ADBE", "CRM", "QCOM", "TXN", "AVGO", "IBM", "JNJ", "PFE",
            "MRK", "ABBV", "LLY", "UNH", "TMO", "ABT", "MDT", "XOM", "CVX", "COP",
            "SLB", "WMT", "COST", "PEP", "MCD", "NKE", "SBUX", "DIS", "CMCSA", "VZ",
            "JPM", "BAC", "WFC", "C", "GS", "MS", "BLK", "CAT", "DE", "HON",
            "UPS", "BA", "LMT", "RTX", "NEE", "DUK", "SO", "AMT", "PLD", "LIN",
            "APD", "NEM", "FCX", "MARA", "RIOT", "COIN", "MSTR", "HOOD", "SOFI", "PYPL",
            "SIRI", "NOK", "PLUG", "SNDL", "GRAB", "OPEN", "GOOGL", "LCID", "RIVN", "CLSK",
        ]
    )

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json", description="Log format: json or text")

    @field_validator("default_symbols", mode="before")
    @classmethod
    def parse_symbols(cls, v):
        if isinstance(v, str):
            return [s.strip().upper() for s in v.split(",") if s.strip()]
        return v

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            return [o.strip() for o in v.split(",") if o.strip()]
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid:
            raise ValueError(f"log_level must be one of {valid}")
        return upper

    @field_validator(
        "rate_limit_finnhub", "rate_limit_yahoo", "rate_limit_alpha_vantage"
    )
    @classmethod
    def validate_rate_limit(cls, v: str) -> str:
        parse_rate_limit(v)
        return v

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


@lru_cache
def get_settings() -> Settings:
    """Cached settings factory."""
    return Settings()


settings = get_settings()
