"""Market and numeric range filters applied before scoring."""

from __future__ import annotations

from alphascan.domain import Quote
from alphascan.domain.sectors import industry_matches_sector

from .types import Market, ScannerFilters


MARKET_TO_COUNTRY: dict[Market, tuple[str, ...]] = {
    Market.US: ("US", "United States"),
    Market.UK: ("GB", "UK", "United Kingdom"),
    Market.DE: ("DE", "Germany"),
    Market.FR: ("FR", "France"),
    Market.JP: ("JP", "Japan"),
    Market.CN: ("CN", "China"),
    Market.HK: ("HK", "Hong Kong"),
    Market.IN: ("IN", "India"),
    Market.AU: ("AU", "Australia"),
    Market.CA: ("CA", "Canada"),
    Market.SA: ("SA", "Saudi Arabia"),
    Market.AE: ("AE", "United Arab Emirates"),
}


def passes_market_filter(stock: Quote, markets: list[Market]) -> bool:
    """
    Whether the stock's country belongs to one of ``markets``.

    Stocks without a country pass. Country names and codes match as
    case-insensitive substrings in either direction.
    """
    if not stock.country:
        return True

    country = stock.country.upper()
    for market in markets:
        for alias in MARKET_TO_COUNTRY.get(market, ()):
            alias = alias.upper()
            if alias in country or country in alias:
                return True
    return False


def passes_basic_filters(stock: Quote, filters: ScannerFilters) -> bool:
    """Numeric range and sector filters; the first failing check drops the stock."""
    price = stock.current_price or 0
    if filters.min_price and price < filters.min_price:
        return False
    if filters.max_price and price > filters.max_price:
        return False

    cap_millions = (stock.market_cap or 0) / 1_000_000
    if filters.min_market_cap and cap_millions < filters.min_market_cap:
        return False
    if filters.max_market_cap and cap_millions > filters.max_market_cap:
        return False

    pe = stock.pe_ratio
    if filters.max_pe_ratio and pe and pe > filters.max_pe_ratio:
        return False
    if filters.min_pe_ratio and pe and pe < filters.min_pe_ratio:
        return False

    pb = stock.pb_ratio
    if filters.max_pb_ratio and pb and pb > filters.max_pb_ratio:
        return False

    dividend = stock.dividend_yield or 0
    if filters.min_dividend_yield and dividend < filters.min_dividend_yield:
        return False
    if filters.max_dividend_yield and dividend > filters.max_dividend_yield:
        return False

    if filters.sectors and stock.sector:
        if stock.sector not in filters.sectors and not any(
            industry_matches_sector(stock.industry, s) for s in filters.sectors
        ):
            return False

    return True
