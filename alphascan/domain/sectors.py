"""Standardized sector names and industry keyword mapping."""

from __future__ import annotations


CRYPTO_MINING_SECTOR = "Cryptocurrency Mining"

# Checked in order; the first sector with a matching keyword wins.
SECTOR_INDUSTRY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "Technology": (
        "software",
        "computer",
        "technology",
        "semiconductor",
        "electronics",
        "internet",
        "information",
        "it services",
        "cloud",
        "data",
        "cybersecurity",
        "telecom equipment",
    ),
    "Healthcare": (
        "health",
        "pharma",
        "biotech",
        "medical",
        "hospital",
        "drug",
        "diagnostic",
        "device",
    ),
    "Financial Services": (
        "bank",
        "financial",
        "insurance",
        "investment",
        "capital markets",
        "asset management",
        "credit",
        "mortgage",
    ),
    "Consumer Cyclical": (
        "retail",
        "auto",
        "apparel",
        "leisure",
        "restaurant",
        "hotel",
        "travel",
        "luxury",
        "gaming",
        "entertainment",
        "media",
        "publishing",
        "residential construction",
        "furnishing",
        "packaging",
        "textile",
    ),
    "Consumer Defensive": (
        "food",
        "beverage",
        "tobacco",
        "household",
        "personal products",
        "discount stores",
        "grocery",
        "farm products",
        "packaged foods",
        "confectioners",
    ),
    "Industrials": (
        "industrial",
        "aerospace",
        "defense",
        "construction",
        "machinery",
        "transport",
        "airline",
        "railroad",
        "trucking",
        "logistics",
        "engineering",
        "infrastructure",
        "waste management",
        "rental",
        "consulting",
        "staffing",
        "security",
        "specialty business services",
    ),
    "Energy": (
        "energy",
        "oil",
        "gas",
        "petroleum",
        "coal",
        "renewable",
        "solar",
        "wind",
    ),
    "Utilities": (
        "utilities",
        "electric",
        "water",
        "regulated",
        "independent power",
    ),
    "Real Estate": ("real estate", "reit", "property"),
    "Basic Materials": (
        "materials",
        "chemical",
        "metal",
        "mining",
        "steel",
        "aluminum",
        "copper",
        "gold",
        "silver",
        "lumber",
        "paper",
    ),
    "Communication Services": (
        "communication",
        "telecom",
        "broadcasting",
        "advertising",
    ),
    CRYPTO_MINING_SECTOR: ("crypto", "bitcoin", "blockchain", "digital currency"),
}

SECTORS: tuple[str, ...] = tuple(SECTOR_INDUSTRY_KEYWORDS)


def map_industry_to_sector(industry: str | None) -> str | None:
    """Map a free-form upstream industry name to a standardized sector."""
    if not industry:
        return None
    lowered = industry.lower()
    for sector, keywords in SECTOR_INDUSTRY_KEYWORDS.items():
        if any(k in lowered for k in keywords):
            return sector
    return None


def industry_matches_sector(industry: str | None, sector: str) -> bool:
    """Whether ``industry`` contains any keyword of ``sector`` (case-insensitive)."""
    if not industry:
        return False
    lowered = industry.lower()
    for name, keywords in SECTOR_INDUSTRY_KEYWORDS.items():
        if name.lower() == sector.lower():
            return any(k in lowered for k in keywords)
    return False
