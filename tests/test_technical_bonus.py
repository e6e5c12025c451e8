"""
Tests for technical score adjustments by scan orientation.
"""

from alphascan.indicators import BollingerBandsResult, IndicatorBundle, MACDResult
from alphascan.scanner import ScanType, ScoreOutcome, apply_technical_bonus, is_value_oriented


def _bundle(**fields) -> IndicatorBundle:
    base = dict(bar_count=200, current_price=100.0)
    base.update(fields)
    return IndicatorBundle(**base)


def _technical_weights(outcome: ScoreOutcome) -> list[int]:
    return [s.weight for s in outcome.signals if s.category == "technical"]


BULLISH_OVERSOLD = _bundle(
    rsi=25.0,
    macd=MACDResult(line=1.5, signal=0.5, histogram=1.0),
    sma50=95.0,
    sma200=90.0,
    volume_sma20=1000.0,
    current_volume=2000.0,
    bollinger=BollingerBandsResult(upper=110.0, middle=100.0, lower=90.0, width=0.2),
    trend_signal="bullish",
)


class TestOrientation:
    """Tests for scan orientation."""

    def test_value_oriented_types(self):
        for scan_type in (ScanType.UNDERVALUED, ScanType.VALUE, ScanType.DIVIDEND, ScanType.QUALITY, ScanType.TURNAROUND):
            assert is_value_oriented(scan_type)

    def test_momentum_oriented_types(self):
        for scan_type in (ScanType.MOMENTUM, ScanType.BREAKOUT, ScanType.GROWTH, ScanType.PENNY_STOCKS, ScanType.CRYPTO_MINING):
            assert not is_value_oriented(scan_type)


class TestApplyTechnicalBonus:
    """Tests for apply_technical_bonus."""

    def test_value_scan(self):
        outcome = apply_technical_bonus(ScoreOutcome(score=40), BULLISH_OVERSOLD, ScanType.VALUE)
        # oversold entry, MACD, above SMA200, volume surge, bullish trend
        assert _technical_weights(outcome) == [10, 5, 5, 5, 5]
        assert outcome.score == 70

    def test_momentum_scan(self):
        outcome = apply_technical_bonus(ScoreOutcome(score=40), BULLISH_OVERSOLD, ScanType.MOMENTUM)
        # weak RSI, MACD, above SMA200, above SMA50, volume surge, bullish trend
        assert _technical_weights(outcome) == [-10, 10, 5, 5, 10, 5]
        assert outcome.score == 65

    def test_missing_indicators_leave_score_unchanged(self):
        original = ScoreOutcome(score=25)
        outcome = apply_technical_bonus(original, None, ScanType.VALUE)
        assert outcome.score == 25
        assert outcome is not original

    def test_empty_bundle_contributes_nothing(self):
        outcome = apply_technical_bonus(ScoreOutcome(score=25), IndicatorBundle(), ScanType.MOMENTUM)
        assert outcome.score == 25
        assert outcome.signals == []

    def test_original_outcome_not_mutated(self):
        original = ScoreOutcome(score=40)
        apply_technical_bonus(original, BULLISH_OVERSOLD, ScanType.VALUE)
        assert original.score == 40
        assert original.signals == []

    def test_bullish_rsi_zone_only_rewards_momentum(self):
        bundle = _bundle(rsi=60.0)
        assert apply_technical_bonus(ScoreOutcome(), bundle, ScanType.BREAKOUT).score == 5
        assert apply_technical_bonus(ScoreOutcome(), bundle, ScanType.VALUE).score == 0

    def test_overbought_rsi_penalty_by_orientation(self):
        bundle = _bundle(rsi=80.0)
        assert apply_technical_bonus(ScoreOutcome(), bundle, ScanType.VALUE).score == -10
        assert apply_technical_bonus(ScoreOutcome(), bundle, ScanType.MOMENTUM).score == -5

    def test_upper_bollinger_band(self):
        bundle = _bundle(
            current_price=99.5,
            bollinger=BollingerBandsResult(upper=100.0, middle=95.0, lower=90.0, width=0.1),
        )
        assert apply_technical_bonus(ScoreOutcome(), bundle, ScanType.VALUE).score == -5
        assert apply_technical_bonus(ScoreOutcome(), bundle, ScanType.MOMENTUM).score == 5

    def test_below_sma200_penalizes_momentum_only(self):
        bundle = _bundle(sma200=120.0)
        assert apply_technical_bonus(ScoreOutcome(), bundle, ScanType.MOMENTUM).score == -5
        assert apply_technical_bonus(ScoreOutcome(), bundle, ScanType.VALUE).score == 0

    def test_bearish_trend(self):
        bundle = _bundle(trend_signal="bearish")
        assert apply_technical_bonus(ScoreOutcome(), bundle, ScanType.QUALITY).score == -5
