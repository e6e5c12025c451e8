"""
Tests for application and scanner settings.
"""

import pytest
from pydantic import ValidationError

from alphascan.core.config import Settings
from alphascan.scanner import ScannerConfig
from alphascan.scanner.config import ScannerSettings


class TestSettings:
    """Tests for application settings validation."""

    def test_comma_separated_lists(self):
        s = Settings(cors_origins="http://a.test, http://b.test", default_symbols="aapl, msft,")
        assert s.cors_origins == ["http://a.test", "http://b.test"]
        assert s.default_symbols == ["AAPL", "MSFT"]

    def test_log_level_normalized(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            Settings(log_level="verbose")

    def test_invalid_rate_limit(self):
        with pytest.raises(ValidationError):
            Settings(rate_limit_finnhub="sixty per minute")

    def test_environment_flags(self):
        assert Settings(environment="development").is_development
        assert Settings().is_production


class TestScannerConfig:
    """Tests for scanner configuration."""

    def test_defaults(self):
        config = ScannerConfig()
        assert config.result_limit == 50
        assert config.penny_max_price == 5.0
        assert config.technical_top_n == 100

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("SCANNER_BATCH_SIZE", "25")
        monkeypatch.setenv("SCANNER_SECTOR_BATCH_DELAY", "0")

        config = ScannerConfig.from_settings()

        assert config.batch_size == 25
        assert config.sector_batch_delay == 0.0

    def test_out_of_range_setting_rejected(self, monkeypatch):
        monkeypatch.setenv("SCANNER_MAX_CONCURRENT_BATCHES", "500")
        with pytest.raises(ValidationError):
            ScannerSettings()

    def test_with_overrides_ignores_none(self):
        config = ScannerConfig()
        updated = config.with_overrides(batch_size=3, result_limit=None)
        assert updated.batch_size == 3
        assert updated.result_limit == 50
        assert config.batch_size == 10

    def test_with_no_overrides_returns_same_config(self):
        config = ScannerConfig()
        assert config.with_overrides(result_limit=None) is config
