"""
Price history download and caching.

This module fetches recent minute-level price histories, either from the
stock price service or from yfinance, with caching to avoid hammering the
service on every page refresh.
"""

import logging
from typing import Dict, Iterable, Optional, Union
import requests
import yfinance as yf
from stockcorr.cache import DataCache
from stockcorr.config import Settings
from stockcorr.entities import PricePoint, PriceSeries, Stock, normalize_ticker
from stockcorr.errors import DashboardError, DataError

logger = logging.getLogger(__name__)


def _cached(cache: Optional[DataCache], query_params: dict, max_age: float) -> Optional[PriceSeries]:
    if cache is None:
        return None
    cached = cache.get(query_params, max_age=max_age)
    if cached is not None:
        logger.debug("Cache hit for %s", query_params)
    return cached


def fetch_price_history(
    ticker: str,
    minutes: int,
    settings: Settings,
    cache: Optional[DataCache] = None,
    session: Optional[requests.Session] = None
) -> PriceSeries:
    """
    Download the last ``minutes`` of prices for one ticker from the stock service.

    Calls ``GET {api_base_url}/stocks/{ticker}?minutes=N``. The service returns
    a list of price records; each carries ``price`` and either ``timestamp``
    or ``lastUpdatedAt``. Records are kept in the order the service sends them.

    Preconditions:
        - ticker is a valid ticker symbol
        - minutes > 0

    Postconditions:
        - Returns a PriceSeries for the normalized ticker
        - Result is cached for settings.cache_ttl_seconds if a cache is given

    Args:
        ticker: Ticker symbol
        minutes: Size of the price window in minutes
        settings: Dashboard settings
        cache: Optional DataCache instance
        session: Optional requests session

    Returns:
        PriceSeries

    Raises:
        DataError: If the request fails or the response is malformed
    """
    symbol = normalize_ticker(ticker)
    if minutes <= 0:
        raise ValueError("minutes must be positive")

    query_params = {
        "source": "api",
        "base_url": settings.api_base_url,
        "ticker": symbol,
        "minutes": minutes,
    }
    cached = _cached(cache, query_params, settings.cache_ttl_seconds)
    if cached is not None:
        return cached

    url = f"{settings.api_base_url}/stocks/{symbol}"
    http = session or requests
    try:
        response = http.get(url, params={"minutes": minutes}, timeout=settings.request_timeout)
        response.raise_for_status()
        payload = response.json()
    except requests.RequestException as e:
        raise DataError(f"Failed to fetch stock prices for {symbol}: {e}") from e
    except ValueError as e:
        raise DataError(f"Invalid price response for {symbol}: {e}") from e

    if not isinstance(payload, list):
        raise DataError(f"Invalid price response for {symbol}: expected a list")

    try:
        series = PriceSeries.from_records(symbol, payload)
    except (ValueError, TypeError, AttributeError) as e:
        raise DataError(f"Invalid price response for {symbol}: {e}") from e

    if cache is not None:
        cache.set(query_params, series)

    return series


def fetch_yfinance_history(
    ticker: str,
    minutes: int,
    cache: Optional[DataCache] = None,
    max_age: float = 30.0
) -> PriceSeries:
    """
    Get the last ``minutes`` of 1-minute closes for a ticker from yfinance.

    Keeps ``minutes + 1`` bars so the window spans the full range, matching
    the inclusive windows served by the stock service.

    Args:
        ticker: Ticker symbol
        minutes: Size of the price window in minutes
        cache: Optional DataCache instance
        max_age: Cache freshness in seconds

    Returns:
        PriceSeries of close prices, oldest first

    Raises:
        DataError: If the download fails or returns empty data
    """
    symbol = normalize_ticker(ticker)
    if minutes <= 0:
        raise ValueError("minutes must be positive")

    query_params = {"source": "yfinance", "ticker": symbol, "minutes": minutes}
    cached = _cached(cache, query_params, max_age)
    if cached is not None:
        return cached

    try:
        data = yf.Ticker(symbol).history(period="1d", interval="1m")
    except Exception as e:
        raise DataError(f"Failed to download price data for {symbol}: {e}") from e

    if data is None or data.empty or "Close" not in data.columns:
        raise DataError(f"No data returned for {symbol}")

    closes = data["Close"].dropna().sort_index().tail(minutes + 1)
    if closes.empty:
        raise DataError(f"No data returned for {symbol}")

    series = PriceSeries(symbol, [
        PricePoint(timestamp=ts.isoformat(), price=float(price))
        for ts, price in closes.items()
    ])

    if cache is not None:
        cache.set(query_params, series)

    return series


def get_price_history(
    ticker: str,
    minutes: int,
    settings: Settings,
    cache: Optional[DataCache] = None
) -> PriceSeries:
    """Fetch a price history from the source named by ``settings.price_source``."""
    if settings.price_source == "yfinance":
        return fetch_yfinance_history(ticker, minutes, cache=cache, max_age=settings.cache_ttl_seconds)
    return fetch_price_history(ticker, minutes, settings, cache=cache)


def load_price_map(
    tickers: Iterable[Union[str, Stock]],
    minutes: int,
    settings: Settings,
    cache: Optional[DataCache] = None
) -> Dict[str, PriceSeries]:
    """
    Fetch price histories for several tickers, one at a time.

    A ticker whose download or cache lookup fails is logged and left out of
    the result, so downstream consumers see it as "no data".

    Args:
        tickers: Symbols or Stock descriptors
        minutes: Size of the price window in minutes
        settings: Dashboard settings
        cache: Optional DataCache instance

    Returns:
        Mapping from symbol to PriceSeries for every ticker that loaded
    """
    price_map: Dict[str, PriceSeries] = {}
    requested = list(tickers)
    for ticker in requested:
        symbol = ticker.symbol if isinstance(ticker, Stock) else normalize_ticker(ticker)
        try:
            price_map[symbol] = get_price_history(symbol, minutes, settings, cache=cache)
        except DashboardError as e:
            logger.warning("Error fetching price data for %s: %s", symbol, e)
    logger.info("Loaded prices for %d of %d tickers", len(price_map), len(requested))
    return price_map
