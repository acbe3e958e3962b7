"""
Stock Correlation Dashboard

A small dashboard for viewing recent stock price history and the
cross-stock correlation heatmap for a handful of tickers.
"""

__version__ = "0.1.0"
