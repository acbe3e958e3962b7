"""
Stock list download.

Fetches the list of available stocks from the stock price service. When the
service is unreachable a small built-in list is returned so the dashboard
still has something to show.
"""

import logging
from typing import List, Optional
import requests
from stockcorr.config import Settings
from stockcorr.entities import Stock

logger = logging.getLogger(__name__)

DEFAULT_STOCKS = [
    Stock("AAPL", "Apple Inc."),
    Stock("MSFT", "Microsoft Corporation"),
    Stock("GOOGL", "Alphabet Inc."),
    Stock("AMZN", "Amazon.com Inc."),
    Stock("META", "Meta Platforms Inc."),
]


def parse_stock_list(payload) -> List[Stock]:
    """
    Parse a stock list response.

    Two shapes are accepted:
    - a list of ``{"symbol": ..., "name": ...}`` objects
    - ``{"stocks": {name: symbol, ...}}``

    Raises:
        ValueError: If the payload has neither shape or holds invalid tickers
    """
    if isinstance(payload, dict) and isinstance(payload.get("stocks"), dict):
        return [Stock(symbol, name) for name, symbol in payload["stocks"].items()]
    if isinstance(payload, list):
        return [Stock(item["symbol"], item.get("name", "")) for item in payload]
    raise ValueError(f"unexpected stock list payload: {type(payload).__name__}")


def fetch_stock_list(
    settings: Settings,
    session: Optional[requests.Session] = None
) -> List[Stock]:
    """
    Download the list of available stocks.

    Postconditions:
        - Always returns a non-empty list; falls back to DEFAULT_STOCKS if the
          service fails or returns nothing usable

    Args:
        settings: Dashboard settings (base URL and timeout)
        session: Optional requests session (a plain ``requests.get`` is used otherwise)

    Returns:
        List of Stock descriptors, in service order
    """
    url = f"{settings.api_base_url}/stocks"
    http = session or requests

    try:
        response = http.get(url, timeout=settings.request_timeout)
        response.raise_for_status()
        stocks = parse_stock_list(response.json())
    except (requests.RequestException, ValueError, KeyError, TypeError) as e:
        logger.warning("Error fetching stock list from %s: %s; using defaults", url, e)
        return list(DEFAULT_STOCKS)

    if not stocks:
        logger.warning("Stock list from %s was empty; using defaults", url)
        return list(DEFAULT_STOCKS)

    logger.info("Fetched %d stocks from %s", len(stocks), url)
    return stocks


def limit_stocks(stocks: List[Stock], max_stocks: int) -> List[Stock]:
    """Keep the first max_stocks stocks (the heatmap is meant for a handful)."""
    return stocks[:max_stocks]
