"""
Tests for chart generation.

Tests cover:
- Price history chart (file and in-memory output)
- Empty series placeholder
- Correlation heatmap chart
"""

import io
import tempfile
from pathlib import Path
import numpy as np
from stockcorr.analytics.correlation_matrix import build_correlation_matrix
from stockcorr.entities import PricePoint, PriceSeries
from stockcorr.reporting.charts import plot_correlation_heatmap, plot_price_history

PNG_MAGIC = b"\x89PNG"


def make_series(symbol, prices):
    return PriceSeries(symbol, [
        PricePoint(timestamp=f"2024-05-01T10:{i:02d}:00Z", price=p)
        for i, p in enumerate(prices)
    ])


class TestPlotPriceHistory:
    """Tests for plot_price_history."""

    def test_writes_png_file(self):
        """Test saving a chart to disk."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "aapl.png"
            plot_price_history(make_series("AAPL", [100, 102, 101, 105]), str(path))

            assert path.exists()
            assert path.read_bytes().startswith(PNG_MAGIC)

    def test_writes_to_buffer(self):
        """Test rendering into an in-memory buffer."""
        buffer = io.BytesIO()
        plot_price_history(make_series("AAPL", [100, 99, 98]), buffer)
        assert buffer.getvalue().startswith(PNG_MAGIC)

    def test_empty_series_placeholder(self):
        """Test that an empty series still renders an image."""
        buffer = io.BytesIO()
        plot_price_history(PriceSeries("AAPL"), buffer)
        assert buffer.getvalue().startswith(PNG_MAGIC)

    def test_constant_series(self):
        """Test that a flat price line renders (zero price range)."""
        buffer = io.BytesIO()
        plot_price_history(make_series("FLAT", [50, 50, 50]), buffer)
        assert buffer.getvalue().startswith(PNG_MAGIC)


class TestPlotCorrelationHeatmap:
    """Tests for plot_correlation_heatmap."""

    def test_heatmap_png(self):
        """Test rendering a heatmap for several tickers."""
        rng = np.random.default_rng(1)
        price_map = {
            symbol: make_series(symbol, rng.normal(100, 5, 15))
            for symbol in ["AAPL", "MSFT", "GOOGL"]
        }
        matrix = build_correlation_matrix(["AAPL", "MSFT", "GOOGL", "XYZ"], price_map)

        buffer = io.BytesIO()
        plot_correlation_heatmap(matrix, buffer)
        assert buffer.getvalue().startswith(PNG_MAGIC)

    def test_heatmap_empty_matrix(self):
        """Test that an empty matrix still renders."""
        buffer = io.BytesIO()
        plot_correlation_heatmap({}, buffer)
        assert buffer.getvalue().startswith(PNG_MAGIC)
