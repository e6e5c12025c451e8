"""
Tests for per-scan-type scoring strategies.
"""

import pytest

from alphascan.domain import Quote
from alphascan.scanner import (
    STRATEGY_REGISTRY,
    ScanSignal,
    ScanType,
    generate_reason_summary,
    get_recommendation,
    get_strategy,
    score_stock,
)


def _quote(**fields) -> Quote:
    return Quote(symbol=fields.pop("symbol", "TEST"), **fields)


VALUE_QUOTE = _quote(
    current_price=50.0,
    previous_close=52.0,
    pe_ratio=9.0,
    pb_ratio=0.9,
    dividend_yield=4.0,
    week52_high=80.0,
    week52_low=45.0,
    market_cap=20e9,
)


class TestRegistry:
    """Tests for strategy lookup."""

    def test_every_scan_type_registered(self):
        assert set(STRATEGY_REGISTRY) == set(ScanType)

    def test_lookup_by_string(self):
        assert get_strategy("value").scan_type == ScanType.VALUE

    def test_unknown_scan_type(self):
        with pytest.raises(ValueError):
            get_strategy("astrology")


class TestDeterminism:
    """Scoring the same quote twice yields identical output."""

    @pytest.mark.parametrize("scan_type", list(ScanType))
    def test_identical_score_and_signals(self, scan_type):
        first = score_stock(VALUE_QUOTE, scan_type)
        second = score_stock(VALUE_QUOTE, scan_type)
        assert first.score == second.score
        assert first.signals == second.signals

    @pytest.mark.parametrize("scan_type", list(ScanType))
    @pytest.mark.parametrize(
        "quote",
        [
            VALUE_QUOTE,
            _quote(current_price=10.0),
            _quote(current_price=2.5, volume=900_000, avg_volume=200_000, market_cap=80e6),
        ],
    )
    def test_score_is_sum_of_signal_weights(self, scan_type, quote):
        outcome = score_stock(quote, scan_type)
        assert outcome.score == sum(s.weight for s in outcome.signals)


class TestStrategies:
    """Tests for individual strategy weights."""

    def test_value(self):
        outcome = score_stock(VALUE_QUOTE, ScanType.VALUE)
        # P/E < 10, P/B < 1, yield > 3, 52w position ~0.14
        assert outcome.score == 30 + 25 + 20 + 15
        assert all(s.category == "valuation" for s in outcome.signals)

    def test_undervalued_base_points(self):
        outcome = score_stock(_quote(current_price=10.0), ScanType.UNDERVALUED)
        assert outcome.score == 5
        [base] = outcome.signals
        assert base.type == "neutral"
        assert base.weight == 5

    def test_undervalued_recent_decline(self):
        outcome = score_stock(
            _quote(current_price=95.0, previous_close=100.0), ScanType.UNDERVALUED
        )
        assert outcome.score == 5 + 15
        assert "Recent decline of 5.0%" in outcome.signals[-1].message

    def test_momentum(self):
        quote = _quote(
            current_price=104.0,
            previous_close=100.0,
            volume=3_000_000,
            avg_volume=1_000_000,
            week52_high=105.0,
            week52_low=60.0,
        )
        outcome = score_stock(quote, ScanType.MOMENTUM)
        assert outcome.score == 20 + 15 + 20

    def test_quality_unprofitable_penalty(self):
        outcome = score_stock(_quote(current_price=10.0), ScanType.QUALITY)
        assert outcome.score == -15
        assert outcome.signals[0].type == "negative"

    def test_quality_very_high_yield_is_neutral(self):
        outcome = score_stock(_quote(current_price=10.0, dividend_yield=8.0, pe_ratio=12.0), ScanType.QUALITY)
        neutral = [s for s in outcome.signals if s.type == "neutral"]
        assert len(neutral) == 1
        assert neutral[0].weight == 5

    def test_penny_requires_price_under_limit(self):
        assert score_stock(_quote(current_price=7.0), ScanType.PENNY_STOCKS).score == 0

    def test_penny(self):
        quote = _quote(
            current_price=2.15,
            previous_close=2.0,
            volume=500_000,
            avg_volume=200_000,
            market_cap=50e6,
        )
        outcome = score_stock(quote, ScanType.PENNY_STOCKS)
        # base, volume 2.5x, 7.5% gain, market cap
        assert outcome.score == 30 + 25 + 20 + 10

    def test_crypto_keyword_bonus(self):
        quote = _quote(current_price=10.0, previous_close=10.0, industry="Bitcoin Mining")
        outcome = score_stock(quote, ScanType.CRYPTO_MINING)
        assert outcome.signals[0].weight == 35
        assert outcome.score == 35 + 10 + 0

    def test_growth_low_pe_penalty(self):
        outcome = score_stock(_quote(current_price=10.0, pe_ratio=8.0, dividend_yield=4.0), ScanType.GROWTH)
        assert outcome.score == -5 - 5

    def test_negative_pe_ignored(self):
        quote = _quote(current_price=10.0, pe_ratio=-12.0)
        assert score_stock(quote, ScanType.UNDERVALUED).score == 5


class TestRecommendation:
    """Tests for score to recommendation mapping."""

    @pytest.mark.parametrize(
        "score,expected",
        [
            (85, "strong_buy"),
            (70, "strong_buy"),
            (50, "buy"),
            (30, "hold"),
            (10, "sell"),
            (9, "strong_sell"),
            (-20, "strong_sell"),
        ],
    )
    def test_thresholds(self, score, expected):
        assert get_recommendation(score) == expected


class TestReasonSummary:
    """Tests for reason summaries."""

    def _signal(self, weight, message, type_="positive"):
        return ScanSignal(type=type_, category="valuation", message=message, weight=weight)

    def test_top_three_positive_by_weight(self):
        signals = [
            self._signal(10, "Ten"),
            self._signal(30, "Thirty"),
            self._signal(-40, "Bad", "negative"),
            self._signal(20, "Twenty"),
            self._signal(5, "Five"),
        ]
        assert generate_reason_summary(signals) == "Thirty. Twenty. Ten."

    def test_ties_keep_signal_order(self):
        signals = [self._signal(20, "First"), self._signal(20, "Second"), self._signal(20, "Third")]
        assert generate_reason_summary(signals) == "First. Second. Third."

    def test_no_positive_signals(self):
        assert generate_reason_summary([]) == "No significant positive signals detected."
