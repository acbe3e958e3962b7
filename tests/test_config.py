"""
Tests for settings loading.

Tests cover:
- Defaults
- YAML file loading
- Environment overrides
- Validation errors
"""

import os
import pytest
from stockcorr.config import Settings, load_settings
from stockcorr.errors import ConfigError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove any STOCKCORR_* variables from the environment."""
    for name in list(os.environ):
        if name.startswith("STOCKCORR_"):
            monkeypatch.delenv(name)


class TestSettings:
    """Tests for the Settings dataclass."""

    def test_defaults(self):
        """Test default settings."""
        settings = Settings()
        assert settings.max_stocks == 8
        assert settings.default_minutes == 15
        assert settings.time_ranges == (5, 15, 30, 60)
        assert settings.price_source == "api"

    def test_default_minutes_must_be_offered(self):
        """Test that default_minutes must be one of time_ranges."""
        with pytest.raises(ConfigError, match="default_minutes"):
            Settings(default_minutes=10)

    def test_invalid_source_raises(self):
        """Test that an unknown price source raises."""
        with pytest.raises(ConfigError, match="price_source"):
            Settings(price_source="bloomberg")

    def test_invalid_max_stocks_raises(self):
        """Test that max_stocks must be positive."""
        with pytest.raises(ConfigError, match="max_stocks"):
            Settings(max_stocks=0)


class TestLoadSettings:
    """Tests for load_settings."""

    def test_load_yaml(self, tmp_path):
        """Test reading settings from YAML."""
        config_file = tmp_path / "dashboard.yaml"
        config_file.write_text(
            "api_base_url: http://localhost:9000\n"
            "max_stocks: 4\n"
            "time_ranges: [10, 20]\n"
            "default_minutes: 20\n"
        )

        settings = load_settings(config_file)

        assert settings.api_base_url == "http://localhost:9000"
        assert settings.max_stocks == 4
        assert settings.time_ranges == (10, 20)
        assert settings.default_minutes == 20

    def test_env_overrides_yaml(self, tmp_path, monkeypatch):
        """Test that environment variables win over the file."""
        config_file = tmp_path / "dashboard.yaml"
        config_file.write_text("max_stocks: 4\n")
        monkeypatch.setenv("STOCKCORR_MAX_STOCKS", "6")
        monkeypatch.setenv("STOCKCORR_PRICE_SOURCE", "yfinance")
        monkeypatch.setenv("STOCKCORR_TIME_RANGES", "5,15")

        settings = load_settings(config_file)

        assert settings.max_stocks == 6
        assert settings.price_source == "yfinance"
        assert settings.time_ranges == (5, 15)

    def test_missing_explicit_file_raises(self, tmp_path):
        """Test that an explicit path must exist."""
        with pytest.raises(ConfigError, match="not found"):
            load_settings(tmp_path / "missing.yaml")

    def test_unknown_key_raises(self, tmp_path):
        """Test that typos in the file are reported."""
        config_file = tmp_path / "dashboard.yaml"
        config_file.write_text("max_stock: 4\n")
        with pytest.raises(ConfigError, match="Unknown settings"):
            load_settings(config_file)

    def test_bad_value_raises(self, tmp_path):
        """Test that uncoercible values raise ConfigError."""
        config_file = tmp_path / "dashboard.yaml"
        config_file.write_text("max_stocks: lots\n")
        with pytest.raises(ConfigError, match="Invalid value for max_stocks"):
            load_settings(config_file)

    def test_fractional_int_raises(self, tmp_path):
        """Test that a fractional value for an integer setting is rejected, not truncated."""
        config_file = tmp_path / "dashboard.yaml"
        config_file.write_text("max_stocks: 8.5\n")
        with pytest.raises(ConfigError, match="Invalid value for max_stocks"):
            load_settings(config_file)

    def test_whole_float_int_accepted(self, tmp_path):
        """Test that a whole-number float is accepted for an integer setting."""
        config_file = tmp_path / "dashboard.yaml"
        config_file.write_text("max_stocks: 6.0\n")
        assert load_settings(config_file).max_stocks == 6

    def test_non_mapping_raises(self, tmp_path):
        """Test that a YAML list is rejected."""
        config_file = tmp_path / "dashboard.yaml"
        config_file.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_settings(config_file)

    def test_empty_file_uses_defaults(self, tmp_path):
        """Test that an empty file yields defaults."""
        config_file = tmp_path / "dashboard.yaml"
        config_file.write_text("")
        assert load_settings(config_file) == Settings()
