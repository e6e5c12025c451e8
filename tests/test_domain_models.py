"""Tests for domain models.

Validates Pydantic domain models: Quote, OHLCVBar, PriceHistory and the
sector keyword helpers.
"""

from datetime import datetime

import pandas as pd
import pytest
from pydantic import ValidationError

from alphascan.domain import OHLCVBar, PriceHistory, Quote, bars_to_frame, frame_to_bars
from alphascan.domain.sectors import industry_matches_sector, map_industry_to_sector

from conftest import make_bars


class TestQuote:
    """Tests for Quote domain model."""

    def test_minimal_quote(self):
        """Quote should work with only symbol."""
        quote = Quote(symbol=" aapl ")
        assert quote.symbol == "AAPL"
        assert quote.current_price is None
        assert quote.daily_change_percent == 0.0
        assert quote.volume_ratio is None
        assert quote.position_in_52w_range is None

    def test_derived_fields(self):
        quote = Quote(
            symbol="AAPL",
            current_price=110.0,
            previous_close=100.0,
            volume=3_000_000,
            avg_volume=1_500_000,
            week52_high=120.0,
            week52_low=80.0,
        )
        assert quote.daily_change_percent == pytest.approx(10.0)
        assert quote.volume_ratio == pytest.approx(2.0)
        assert quote.position_in_52w_range == pytest.approx(0.75)
        assert quote.percent_from_52w_high == pytest.approx(100 / 12)

    def test_flat_52w_range_has_no_position(self):
        quote = Quote(symbol="X", current_price=5.0, week52_high=5.0, week52_low=5.0)
        assert quote.position_in_52w_range is None

    def test_quote_is_frozen(self):
        quote = Quote(symbol="AAPL", current_price=1.0)
        with pytest.raises(ValidationError):
            quote.current_price = 2.0


class TestOHLCVBar:
    """Tests for OHLCVBar."""

    def test_typical_price(self):
        bar = OHLCVBar(timestamp=datetime(2024, 1, 1), open=10, high=12, low=9, close=11)
        assert bar.typical_price == pytest.approx(32 / 3)
        assert bar.volume == 0

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            OHLCVBar(timestamp=datetime(2024, 1, 1), open=-1, high=1, low=0, close=1)


class TestPriceFrames:
    """Tests for DataFrame conversion."""

    def test_round_trip_through_frame(self):
        bars = make_bars([10.0, 11.0, 12.0])
        df = bars_to_frame(bars)
        assert list(df.columns) == ["open", "high", "low", "close", "volume"]
        assert frame_to_bars(df) == bars

    def test_yfinance_style_frame(self):
        df = pd.DataFrame(
            {
                "Open": [102.0, 100.0],
                "High": [108.0, 105.0],
                "Low": [101.0, 99.0],
                "Close": [107.0, float("nan")],
                "Volume": [1500000, 1000000],
            },
            index=pd.to_datetime(["2025-01-02", "2025-01-01"]),
        )
        bars = frame_to_bars(df)
        # sorted ascending, NaN row skipped
        assert [b.close for b in bars] == [107.0]

    def test_empty_frame(self):
        assert frame_to_bars(pd.DataFrame()) == []
        assert frame_to_bars(None) == []

    def test_price_history(self):
        history = PriceHistory(symbol="AAPL", bars=make_bars([1.0, 2.0]))
        assert len(history) == 2
        assert history.latest_close == 2.0
        assert PriceHistory(symbol="AAPL").latest_close is None


class TestSectors:
    """Tests for industry-to-sector mapping."""

    @pytest.mark.parametrize(
        "industry,sector",
        [
            ("Semiconductors", "Technology"),
            ("Drug Manufacturers", "Healthcare"),
            ("Banks - Regional", "Financial Services"),
            (None, None),
            ("Something Unheard Of", None),
        ],
    )
    def test_map_industry_to_sector(self, industry, sector):
        assert map_industry_to_sector(industry) == sector

    def test_industry_matches_sector(self):
        assert industry_matches_sector("Application Software", "technology")
        assert not industry_matches_sector("Software", "Utilities")
        assert not industry_matches_sector(None, "Technology")
