"""
Tests for the command-line interface.

Tests cover:
- stocks, stats and heatmap commands (data access mocked)
- Source override and error exit codes
"""

from unittest.mock import patch
import pytest
from stockcorr.cli import main
from stockcorr.entities import PricePoint, PriceSeries, Stock
from stockcorr.errors import DataError


def make_series(symbol, prices):
    return PriceSeries(symbol, [
        PricePoint(timestamp=f"2024-05-01T10:{i:02d}:00Z", price=p)
        for i, p in enumerate(prices)
    ])


@pytest.fixture(autouse=True)
def isolated_cache(tmp_path, monkeypatch):
    """Keep the download cache inside a temporary directory."""
    monkeypatch.setenv("STOCKCORR_CACHE_DIR", str(tmp_path / "cache"))


class TestCli:
    """Tests for CLI commands."""

    @patch("stockcorr.cli.fetch_stock_list")
    def test_stocks_command(self, mock_list, capsys):
        """Test listing stocks."""
        mock_list.return_value = [Stock("AAPL", "Apple Inc.")]
        main(["stocks"])
        out = capsys.readouterr().out
        assert "1 stocks available" in out
        assert "Apple Inc." in out

    @patch("stockcorr.cli.get_price_history")
    def test_stats_command(self, mock_get, capsys):
        """Test printing price statistics."""
        mock_get.return_value = make_series("AAPL", [100, 110, 120])
        main(["stats", "AAPL", "--minutes", "30"])

        out = capsys.readouterr().out
        assert "AAPL Statistics (3 observations)" in out
        assert "$120.00" in out
        assert "$110.00" in out
        assert mock_get.call_args[0][1] == 30

    @patch("stockcorr.cli.get_price_history")
    def test_stats_command_error_exits(self, mock_get, capsys):
        """Test that data errors exit with status 1."""
        mock_get.side_effect = DataError("Failed to fetch stock prices for AAPL")
        with pytest.raises(SystemExit) as exc_info:
            main(["stats", "AAPL"])

        assert exc_info.value.code == 1
        assert "Failed to fetch" in capsys.readouterr().err

    @patch("stockcorr.cli.load_price_map")
    def test_heatmap_command(self, mock_load, capsys, tmp_path):
        """Test printing and saving the correlation heatmap."""
        mock_load.return_value = {
            "AAPL": make_series("AAPL", [1, 2, 3]),
            "MSFT": make_series("MSFT", [2, 4, 6]),
        }
        save_path = tmp_path / "heatmap.png"
        main(["heatmap", "--tickers", "AAPL,MSFT,XYZ", "--save", str(save_path)])

        out = capsys.readouterr().out
        assert "no price data for XYZ" in out
        assert "AAPL" in out and "MSFT" in out
        assert save_path.exists()

    @patch("stockcorr.cli.get_price_history")
    def test_source_override(self, mock_get):
        """Test that --source replaces the configured price source."""
        mock_get.return_value = make_series("AAPL", [1, 2])
        main(["--source", "yfinance", "stats", "AAPL"])

        settings = mock_get.call_args[0][2]
        assert settings.price_source == "yfinance"

    def test_no_command_exits(self):
        """Test that running without a command prints help and exits."""
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 1
