"""
Per-scan-type fundamental scoring.

Each scan type has an independent additive scoring strategy over quote
fields (P/E, P/B, dividend yield, market cap, 52-week position, daily
change, volume ratio). Every contribution is recorded as a weighted
``ScanSignal``; the score is a plain integer sum, so scoring the same quote
twice always yields the same score and the same ordered signals.

Usage:
    outcome = score_stock(quote, ScanType.VALUE)
    outcome.score, outcome.signals
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from alphascan.domain import Quote

from .types import Recommendation, ScanSignal, ScanType, SignalCategory, SignalType


_BILLION = 1_000_000_000
_MILLION = 1_000_000


@dataclass
class ScoreOutcome:
    """Score and the ordered signals that produced it."""

    score: int = 0
    signals: list[ScanSignal] = field(default_factory=list)

    def add(
        self,
        weight: int,
        category: SignalCategory,
        message: str,
        signal_type: SignalType | None = None,
    ) -> None:
        if signal_type is None:
            signal_type = "positive" if weight > 0 else "negative" if weight < 0 else "neutral"
        self.score += weight
        self.signals.append(
            ScanSignal(type=signal_type, category=category, message=message, weight=weight)
        )


# =============================================================================
# Base Strategy
# =============================================================================


class ScoringStrategy(ABC):
    """Base class for scan-type scoring."""

    scan_type: ScanType
    label: str
    description: str

    @abstractmethod
    def score(self, stock: Quote) -> ScoreOutcome:
        """
        Score a quote for this scan type.

        Args:
            stock: Quote snapshot

        Returns:
            ScoreOutcome with the summed score and its signals
        """


def _pe(stock: Quote) -> float | None:
    return stock.pe_ratio if stock.pe_ratio and stock.pe_ratio > 0 else None


# =============================================================================
# Strategies
# =============================================================================


class UndervaluedStrategy(ScoringStrategy):
    scan_type = ScanType.UNDERVALUED
    label = "Undervalued Stocks"
    description = "Stocks trading below intrinsic value based on P/E, P/B and price range"

    # Points for any quote with a valid price
    BASE_POINTS = 5

    def score(self, stock: Quote) -> ScoreOutcome:
        out = ScoreOutcome()
        if stock.current_price and stock.current_price > 0:
            out.add(self.BASE_POINTS, "valuation", "Valid market price", "neutral")

        pe = _pe(stock)
        if pe is not None:
            if pe < 15:
                out.add(30, "valuation", f"Low P/E ratio of {pe:.1f}")
            elif pe < 20:
                out.add(20, "valuation", f"Reasonable P/E ratio of {pe:.1f}")
            elif pe > 40:
                out.add(-5, "valuation", f"High P/E ratio of {pe:.1f}")

        pb = stock.pb_ratio
        if pb and pb > 0:
            if pb < 1.5:
                out.add(25, "valuation", f"Low P/B ratio of {pb:.2f}")
            elif pb < 3:
                out.add(15, "valuation", f"Reasonable P/B ratio of {pb:.2f}")

        position = stock.position_in_52w_range
        if position is not None:
            if position < 0.3:
                out.add(20, "valuation", "Near 52-week low - value opportunity")
            elif position < 0.5:
                out.add(10, "valuation", "Below mid-range")

        dy = stock.dividend_yield
        if dy:
            if dy > 3:
                out.add(15, "valuation", f"Strong dividend yield of {dy:.1f}%")
            elif dy > 1:
                out.add(10, "valuation", f"Dividend yield of {dy:.1f}%")

        change = stock.daily_change_percent
        if change < -3:
            out.add(15, "valuation", f"Recent decline of {abs(change):.1f}% - potential value")

        return out


class MomentumStrategy(ScoringStrategy):
    scan_type = ScanType.MOMENTUM
    label = "Momentum Plays"
    description = "Strong price momentum with volume and 52-week high proximity"

    def score(self, stock: Quote) -> ScoreOutcome:
        out = ScoreOutcome()

        change = stock.daily_change_percent
        if change > 3:
            out.add(20, "momentum", f"Strong daily gain of {change:.1f}%")
        elif change > 1:
            out.add(10, "momentum", f"Positive daily movement of {change:.1f}%")

        ratio = stock.volume_ratio
        if ratio is not None and ratio > 2:
            out.add(15, "momentum", f"Volume {ratio:.1f}x above average")

        from_high = stock.percent_from_52w_high
        if from_high is not None and from_high < 5:
            out.add(20, "momentum", "Near 52-week high - strong momentum")

        return out


class DividendStrategy(ScoringStrategy):
    scan_type = ScanType.DIVIDEND
    label = "Dividend Gems"
    description = "High-yield dividend stocks with sustainable payouts"

    def score(self, stock: Quote) -> ScoreOutcome:
        out = ScoreOutcome()

        dy = stock.dividend_yield
        if dy:
            if dy > 5:
                out.add(30, "valuation", f"High dividend yield of {dy:.1f}%")
            elif dy > 3:
                out.add(20, "valuation", f"Good dividend yield of {dy:.1f}%")
            elif dy > 2:
                out.add(10, "valuation", f"Dividend yield of {dy:.1f}%")

        pe = _pe(stock)
        if pe is not None and pe < 20:
            out.add(15, "quality", "Reasonable P/E suggests sustainable dividend")

        if stock.market_cap and stock.market_cap > 10 * _BILLION:
            out.add(10, "quality", "Large cap company - dividend stability")

        return out


class GrowthStrategy(ScoringStrategy):
    scan_type = ScanType.GROWTH
    label = "Growth Stocks"
    description = "Growth-priced companies in growth sectors with positive price trend"

    GROWTH_KEYWORDS = (
        "technology",
        "healthcare",
        "biotechnology",
        "software",
        "internet",
        "e-commerce",
        "cloud",
    )

    def score(self, stock: Quote) -> ScoreOutcome:
        out = ScoreOutcome()

        pe = _pe(stock)
        if pe is not None:
            if pe > 30:
                out.add(25, "growth", f"High growth P/E of {pe:.1f} (market expects strong growth)")
            elif pe > 20:
                out.add(15, "growth", f"Growth-oriented P/E of {pe:.1f}")
            elif pe < 10:
                out.add(-5, "growth", f"Low P/E {pe:.1f} suggests value, not growth")

        sector = (stock.sector or "").lower()
        industry = (stock.industry or "").lower()
        if any(k in sector or k in industry for k in self.GROWTH_KEYWORDS):
            out.add(20, "growth", f"Growth sector: {stock.sector or stock.industry}")

        if stock.market_cap:
            cap_b = stock.market_cap / _BILLION
            if 2 < cap_b < 50:
                out.add(15, "growth", f"Mid-cap growth opportunity (${cap_b:.1f}B)")
            elif 50 <= cap_b < 200:
                out.add(10, "growth", "Large-cap with growth potential")

        position = stock.position_in_52w_range
        if position is not None:
            if position > 0.7:
                out.add(20, "growth", "Strong price momentum - near 52-week high")
            elif position > 0.5:
                out.add(10, "growth", "Positive price trend")

        dy = stock.dividend_yield
        if not dy or dy < 1:
            out.add(10, "growth", "Reinvesting profits for growth (low/no dividend)")
        elif dy > 3:
            out.add(-5, "growth", "High dividend suggests mature company, not growth")

        return out


class ValueStrategy(ScoringStrategy):
    scan_type = ScanType.VALUE
    label = "Value Investing"
    description = "Classic value approach: low valuations with solid fundamentals"

    def score(self, stock: Quote) -> ScoreOutcome:
        out = ScoreOutcome()

        pe = _pe(stock)
        if pe is not None:
            if pe < 10:
                out.add(30, "valuation", f"Deep value P/E of {pe:.1f}")
            elif pe < 15:
                out.add(20, "valuation", f"Value P/E of {pe:.1f}")
            elif pe > 30:
                out.add(-10, "valuation", f"High P/E {pe:.1f} - not a value stock")

        pb = stock.pb_ratio
        if pb and pb > 0:
            if pb < 1:
                out.add(25, "valuation", f"Trading below book value (P/B: {pb:.2f})")
            elif pb < 1.5:
                out.add(20, "valuation", f"Low P/B of {pb:.2f}")
            elif pb < 2.5:
                out.add(10, "valuation", f"Reasonable P/B of {pb:.2f}")

        dy = stock.dividend_yield
        if dy and dy > 0:
            if dy > 3:
                out.add(20, "valuation", f"High dividend yield of {dy:.1f}%")
            elif dy > 1:
                out.add(10, "valuation", f"Dividend yield of {dy:.1f}%")

        position = stock.position_in_52w_range
        if position is not None:
            if position < 0.2:
                out.add(15, "valuation", "Near 52-week low - potential value opportunity")
            elif position < 0.4:
                out.add(10, "valuation", "Below mid-range - value territory")

        return out


class QualityStrategy(ScoringStrategy):
    scan_type = ScanType.QUALITY
    label = "Quality Companies"
    description = "Established, profitable, lower-volatility companies"

    def score(self, stock: Quote) -> ScoreOutcome:
        out = ScoreOutcome()

        if stock.market_cap:
            cap_b = stock.market_cap / _BILLION
            if cap_b > 100:
                out.add(30, "quality", f"Mega-cap leader (${cap_b:.1f}B) - exceptional quality")
            elif cap_b > 50:
                out.add(25, "quality", f"Large-cap stability (${cap_b:.1f}B)")
            elif cap_b > 10:
                out.add(15, "quality", "Established mid-cap company")

        dy = stock.dividend_yield
        if dy and dy > 0:
            if 2 < dy < 6:
                out.add(25, "quality", f"Healthy dividend yield of {dy:.1f}% - sustainable returns")
            elif dy <= 2:
                out.add(15, "quality", "Pays dividend - shareholder-friendly")
            else:
                # Very high yields may be unsustainable
                out.add(5, "quality", f"High dividend {dy:.1f}% - verify sustainability", "neutral")

        pe = _pe(stock)
        if pe is not None:
            if 5 < pe < 25:
                out.add(20, "quality", f"Profitable with reasonable P/E of {pe:.1f}")
            elif 25 <= pe < 40:
                out.add(10, "quality", "Profitable - market values quality")
        else:
            out.add(-15, "quality", "Not currently profitable")

        beta = stock.beta
        if beta is not None:
            if 0 <= beta < 0.8:
                out.add(15, "quality", f"Low volatility (beta {beta:.2f}) - defensive quality")
            elif 0.8 <= beta <= 1.2:
                out.add(10, "quality", "Market-level volatility - stable")

        pb = stock.pb_ratio
        if pb and 1 < pb < 3:
            out.add(10, "quality", f"Reasonable P/B of {pb:.2f} - solid book value")

        return out


class TurnaroundStrategy(ScoringStrategy):
    scan_type = ScanType.TURNAROUND
    label = "Turnaround Candidates"
    description = "Companies recovering from lows with improving signals"

    def score(self, stock: Quote) -> ScoreOutcome:
        out = ScoreOutcome()

        position = stock.position_in_52w_range
        if position is not None:
            recovery = position * 100
            if 20 < recovery < 50:
                out.add(25, "momentum", f"Recovering from lows - {recovery:.0f}% off bottom")

        change = stock.daily_change_percent
        if change > 3:
            out.add(20, "momentum", f"Strong daily gain of {change:.1f}%")
        elif change > 0:
            out.add(10, "momentum", "Positive momentum")

        pe = _pe(stock)
        if pe is not None:
            out.add(20, "quality", f"Now profitable (P/E: {pe:.1f})")

        ratio = stock.volume_ratio
        if ratio is not None and ratio > 1.5:
            out.add(15, "momentum", "Increased trading interest")

        if pe is not None and pe < 15:
            out.add(10, "valuation", f"Attractive valuation P/E {pe:.1f}")

        return out


class BreakoutStrategy(ScoringStrategy):
    scan_type = ScanType.BREAKOUT
    label = "Breakout Potential"
    description = "Stocks breaking out near 52-week highs with volume confirmation"

    def score(self, stock: Quote) -> ScoreOutcome:
        out = ScoreOutcome()

        from_high = stock.percent_from_52w_high
        if from_high is not None:
            if from_high < 2:
                out.add(30, "momentum", "At 52-week high - strong breakout")
            elif from_high < 5:
                out.add(20, "momentum", "Near 52-week high - potential breakout")

        change = stock.daily_change_percent
        if change > 5:
            out.add(25, "momentum", f"Explosive move: {change:.1f}%")
        elif change > 2:
            out.add(15, "momentum", f"Strong momentum: {change:.1f}%")

        ratio = stock.volume_ratio
        if ratio is not None:
            if ratio > 2.5:
                out.add(30, "momentum", f"Massive volume: {ratio:.1f}x average")
            elif ratio > 1.5:
                out.add(20, "momentum", "High volume confirmation")

        return out


class PennyStockStrategy(ScoringStrategy):
    scan_type = ScanType.PENNY_STOCKS
    label = "Penny Stocks"
    description = "Low-priced stocks under $5 with activity and momentum"

    MAX_PRICE = 5.0

    def score(self, stock: Quote) -> ScoreOutcome:
        out = ScoreOutcome()
        price = stock.current_price
        if not price or price >= self.MAX_PRICE:
            return out

        out.add(30, "valuation", f"Penny stock at ${price:.2f}")

        ratio = stock.volume_ratio
        if ratio is not None:
            if ratio > 2:
                out.add(25, "momentum", f"High volume {ratio:.1f}x above average")
            elif ratio > 1.5:
                out.add(15, "momentum", "Above average volume")
            elif ratio > 0.3:
                out.add(10, "momentum", "Active trading")
        else:
            out.add(15, "valuation", "Low-priced opportunity")

        change = stock.daily_change_percent
        if change > 10:
            out.add(30, "momentum", f"Massive gain of {change:.1f}%")
        elif change > 5:
            out.add(20, "momentum", f"Strong gain of {change:.1f}%")
        elif change > 2:
            out.add(15, "momentum", f"Good momentum of {change:.1f}%")
        elif change > 0:
            out.add(10, "momentum", "Positive momentum")
        elif change >= -2:
            out.add(5, "momentum", "Stable price action")

        if stock.market_cap and stock.market_cap > 0:
            out.add(10, "quality", f"Market cap: ${stock.market_cap / _MILLION:.1f}M")

        return out


class CryptoMiningStrategy(ScoringStrategy):
    scan_type = ScanType.CRYPTO_MINING
    label = "Crypto Mining"
    description = "Cryptocurrency miners and blockchain-related companies"

    CRYPTO_KEYWORDS = (
        "mining",
        "bitcoin",
        "crypto",
        "blockchain",
        "ethereum",
        "digital asset",
        "miner",
        "btc",
        "eth",
        "coin",
        "fintech",
        "web3",
        "defi",
    )

    def score(self, stock: Quote) -> ScoreOutcome:
        out = ScoreOutcome()

        text = " ".join(
            (stock.industry or "", stock.sector or "", stock.name or "")
        ).lower()
        if any(k in text for k in self.CRYPTO_KEYWORDS):
            out.add(35, "quality", "Cryptocurrency/blockchain company")
        else:
            out.add(25, "quality", "Crypto-related stock")

        change = stock.daily_change_percent
        if change > 5:
            out.add(25, "momentum", f"Strong momentum of {change:.1f}%")
        elif change > 2:
            out.add(15, "momentum", f"Positive momentum of {change:.1f}%")
        elif change >= 0:
            out.add(10, "momentum", "Stable or rising")
        elif change >= -3:
            out.add(5, "momentum", "Normal volatility")

        ratio = stock.volume_ratio
        if ratio is not None:
            if ratio > 1.5:
                out.add(20, "momentum", "High trading volume")
            elif ratio > 0.8:
                out.add(10, "momentum", "Active trading")

        pe = _pe(stock)
        if pe is not None:
            out.add(20, "quality", f"Profitable (P/E: {pe:.1f})")
        else:
            out.add(0, "quality", "Growth-focused (currently unprofitable)")

        if stock.market_cap:
            cap_b = stock.market_cap / _BILLION
            cap_m = stock.market_cap / _MILLION
            if cap_b > 1:
                out.add(15, "quality", f"Established company (${cap_b:.1f}B)")
            elif cap_m > 100:
                out.add(10, "quality", f"Growing company (${cap_m:.0f}M)")
            elif cap_m > 10:
                out.add(5, "quality", f"Emerging company (${cap_m:.0f}M)")

        return out


# =============================================================================
# Registry
# =============================================================================


STRATEGY_REGISTRY: dict[ScanType, ScoringStrategy] = {
    strategy.scan_type: strategy
    for strategy in (
        UndervaluedStrategy(),
        MomentumStrategy(),
        DividendStrategy(),
        GrowthStrategy(),
        ValueStrategy(),
        QualityStrategy(),
        TurnaroundStrategy(),
        BreakoutStrategy(),
        PennyStockStrategy(),
        CryptoMiningStrategy(),
    )
}


def get_strategy(scan_type: ScanType | str) -> ScoringStrategy:
    """Get the scoring strategy for a scan type (raises ValueError if unknown)."""
    return STRATEGY_REGISTRY[ScanType(scan_type)]


def score_stock(stock: Quote, scan_type: ScanType | str) -> ScoreOutcome:
    return get_strategy(scan_type).score(stock)


def get_recommendation(score: int) -> Recommendation:
    if score >= 70:
        return "strong_buy"
    if score >= 50:
        return "buy"
    if score >= 30:
        return "hold"
    if score >= 10:
        return "sell"
    return "strong_sell"


def generate_reason_summary(signals: list[ScanSignal]) -> str:
    """The three highest-weight positive messages, ties kept in signal order."""
    positives = [s for s in signals if s.type == "positive"]
    if not positives:
        return "No significant positive signals detected."
    top = sorted(positives, key=lambda s: s.weight, reverse=True)[:3]
    return ". ".join(s.message for s in top) + "."
