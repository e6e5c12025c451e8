"""
Candidate universe selection.

Picks the symbols a scan will fetch. Directory listings from the provider
are ordered shortest symbol first, which biases every sample toward the
most liquid names.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

from alphascan.core.exceptions import (
    RateLimitedError,
    UniverseUnavailableError,
    UpstreamUnavailableError,
)
from alphascan.core.logging import get_logger
from alphascan.domain.sectors import CRYPTO_MINING_SECTOR, industry_matches_sector
from alphascan.services.data_providers import MarketDataProvider

from .config import ScannerConfig
from .types import Market, ScannerFilters, ScanType


logger = get_logger("scanner.universe")

# Miners, exchanges and crypto-exposed fintech
CRYPTO_MINING_SYMBOLS: tuple[str, ...] = (
    "MARA", "RIOT", "CLSK", "BTBT", "HUT", "BITF", "IREN", "CIFR",
    "CORZ", "WULF", "HIVE", "BTDR", "SDIG", "DMGI", "DGHI", "CAN",
    "ARBK", "GREE", "SOS", "MSTR", "COIN", "HOOD", "SOFI", "SI",
    "SQ", "PYPL",
)

# Screened-compliant large caps, weighted toward technology and healthcare
SHARIAH_CANDIDATE_SYMBOLS: tuple[str, ...] = (
    "AAPL", "MSFT", "GOOGL", "META", "NVDA", "AMD", "INTC", "QCOM", "AVGO", "TXN",
    "ADBE", "CRM", "ORCL", "CSCO", "IBM", "NOW", "INTU", "PANW", "CRWD", "NET",
    "AMZN", "SHOP", "EBAY", "ETSY", "MELI", "BKNG", "ABNB", "UBER",
    "JNJ", "UNH", "LLY", "ABBV", "TMO", "ABT", "DHR", "AMGN", "GILD", "VRTX",
    "REGN", "ISRG", "BIIB", "MRNA", "ILMN", "ZTS",
    "PG", "NKE", "COST", "TGT", "LOW", "HD",
    "CAT", "DE", "HON", "MMM", "GE", "EMR", "ETN", "ITW",
)


class UniverseSelector:
    """Chooses candidate symbols for a scan."""

    def __init__(
        self,
        provider: MarketDataProvider,
        config: ScannerConfig,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.provider = provider
        self.config = config
        self._sleep = sleep

    async def select(self, filters: ScannerFilters) -> list[str]:
        """
        Select symbols for ``filters``.

        Raises:
            UniverseUnavailableError: If the symbol directory yields nothing
        """
        if filters.sectors:
            symbols = await self._by_sector(filters)
        elif filters.scan_type == ScanType.PENNY_STOCKS:
            symbols = (await self._directory(filters.markets))[: self.config.penny_universe_size]
        elif filters.scan_type == ScanType.CRYPTO_MINING:
            symbols = list(CRYPTO_MINING_SYMBOLS)
        elif filters.shariah_compliant_only:
            symbols = await self._shariah_candidates(filters.markets)
        else:
            directory = await self._directory(filters.markets)
            symbols = [s for s in directory if 1 <= len(s) <= 4][
                : self.config.default_short_symbols
            ] + [s for s in directory if len(s) == 5][: self.config.default_long_symbols]

        symbols = list(dict.fromkeys(symbols))
        if not symbols:
            raise UniverseUnavailableError(
                details={"scan_type": filters.scan_type.value}
            )
        logger.info(f"Selected {len(symbols)} candidate symbols for {filters.scan_type.value} scan")
        return symbols

    async def _directory(self, markets: list[Market]) -> list[str]:
        """Listed symbols across ``markets``, shortest first."""
        symbols: list[str] = []
        for market in markets:
            try:
                listed = await self.provider.list_symbols(market.value)
            except (UpstreamUnavailableError, RateLimitedError) as e:
                logger.warning(f"Symbol directory unavailable for {market.value}: {e}")
                continue
            symbols.extend(listed)

        directory = sorted(dict.fromkeys(symbols), key=len)
        if not directory:
            raise UniverseUnavailableError(
                message="Symbol directory returned no symbols",
                details={"markets": [m.value for m in markets]},
            )
        return directory

    async def _shariah_candidates(self, markets: list[Market]) -> list[str]:
        """Curated compliant names first, then a sample of 3-4 letter listings."""
        try:
            directory = await self._directory(markets)
        except UniverseUnavailableError as e:
            logger.warning(f"Using curated Shariah list only: {e}")
            directory = []
        sample = [s for s in directory if 3 <= len(s) <= 4][: self.config.shariah_universe_size]
        return list(SHARIAH_CANDIDATE_SYMBOLS) + sample

    async def _matches_sectors(self, symbol: str, sectors: list[str]) -> bool:
        try:
            profile = await self.provider.fetch_profile(symbol)
        except (UpstreamUnavailableError, RateLimitedError) as e:
            logger.debug(f"Profile lookup failed for {symbol}: {e}")
            return False
        if profile is None or not profile.industry:
            return False
        return any(
            profile.sector == sector or industry_matches_sector(profile.industry, sector)
            for sector in sectors
        )

    async def _by_sector(self, filters: ScannerFilters) -> list[str]:
        sectors = filters.sectors
        if sectors == [CRYPTO_MINING_SECTOR]:
            logger.info(f"Using {len(CRYPTO_MINING_SYMBOLS)} curated crypto mining stocks")
            return list(CRYPTO_MINING_SYMBOLS)

        directory = await self._directory(filters.markets)
        sample = directory[: self.config.sector_sample_size]
        batch_size = self.config.sector_batch_size
        matched: list[str] = []

        logger.info(f"Filtering {len(sample)} stocks by {len(sectors)} sector(s)")
        for i in range(0, len(sample), batch_size):
            batch = sample[i : i + batch_size]
            hits = await asyncio.gather(
                *(self._matches_sectors(s, sectors) for s in batch),
                return_exceptions=True,
            )
            for symbol, hit in zip(batch, hits):
                if isinstance(hit, Exception):
                    logger.warning(f"Sector check failed for {symbol}: {hit}")
                elif hit:
                    matched.append(symbol)

            if i + batch_size < len(sample) and self.config.sector_batch_delay > 0:
                await self._sleep(self.config.sector_batch_delay)

        logger.info(f"Sector filter matched {len(matched)}/{len(sample)} stocks")

        if CRYPTO_MINING_SECTOR in sectors:
            matched.extend(s for s in CRYPTO_MINING_SYMBOLS if s not in matched)

        if not matched:
            logger.warning(
                f"No stocks matched sectors {sectors}, "
                f"falling back to {self.config.fallback_sample_size} symbol sample"
            )
            return directory[: self.config.fallback_sample_size]

        return matched
