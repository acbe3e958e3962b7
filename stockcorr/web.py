"""
FastAPI web dashboard.

Serves the correlation heatmap and stock chart pages, PNG charts, and a small
JSON API. Ticker and time-range inputs are validated before any data is
fetched.
"""

import io
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional
from fastapi import FastAPI, HTTPException
from fastapi.responses import HTMLResponse, Response
from jinja2 import Environment, FileSystemLoader, select_autoescape
from stockcorr.analytics.correlation_matrix import (
    build_correlation_matrix, classify_correlation, legend
)
from stockcorr.analytics.statistics import summarize_prices
from stockcorr.cache import DataCache
from stockcorr.config import load_settings
from stockcorr.data_sources.prices import get_price_history, load_price_map
from stockcorr.data_sources.stocks import fetch_stock_list, limit_stocks
from stockcorr.entities import PriceSeries, Stock, normalize_ticker
from stockcorr.errors import DashboardError
from stockcorr.reporting.charts import plot_correlation_heatmap, plot_price_history

logger = logging.getLogger(__name__)

settings = load_settings()
cache = DataCache(settings.cache_dir)

app = FastAPI(title="Stock Correlation Dashboard")

template_env = Environment(
    loader=FileSystemLoader(str(Path(__file__).parent / "templates")),
    autoescape=select_autoescape(["html"])
)


def validate_ticker(ticker: str) -> str:
    """Normalize a ticker, mapping invalid input to HTTP 400."""
    try:
        return normalize_ticker(ticker)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def validate_minutes(minutes: Optional[int]) -> int:
    """Default a missing time range and reject ranges the dashboard does not offer."""
    if minutes is None:
        return settings.default_minutes
    if minutes not in settings.time_ranges:
        raise HTTPException(
            status_code=400,
            detail=f"minutes must be one of {list(settings.time_ranges)}"
        )
    return minutes


def parse_tickers(tickers: Optional[str]) -> Optional[List[Stock]]:
    """Parse a comma-separated ticker list (None means the default stock list)."""
    if not tickers:
        return None
    symbols = [validate_ticker(t) for t in tickers.split(",") if t.strip()]
    if len(symbols) > settings.max_stocks:
        raise HTTPException(
            status_code=400,
            detail=f"Too many tickers (max {settings.max_stocks})"
        )
    return [Stock(symbol) for symbol in dict.fromkeys(symbols)]


def dashboard_stocks(tickers: Optional[str] = None) -> List[Stock]:
    requested = parse_tickers(tickers)
    if requested is not None:
        return requested
    return limit_stocks(fetch_stock_list(settings), settings.max_stocks)


def load_series(ticker: str, minutes: int) -> Optional[PriceSeries]:
    try:
        return get_price_history(ticker, minutes, settings, cache=cache)
    except DashboardError as e:
        logger.warning("Error fetching price data for %s: %s", ticker, e)
        return None


def render(template_name: str, **context) -> HTMLResponse:
    template = template_env.get_template(template_name)
    return HTMLResponse(template.render(
        time_ranges=settings.time_ranges,
        last_updated=datetime.now().strftime("%H:%M:%S"),
        **context
    ))


def png_response(buffer: io.BytesIO) -> Response:
    return Response(content=buffer.getvalue(), media_type="image/png")


@app.get("/", response_class=HTMLResponse)
def heatmap_page(
    minutes: Optional[int] = None,
    selected: Optional[str] = None,
    tickers: Optional[str] = None
):
    """Correlation heatmap page with the selected stock's details panel."""
    minutes = validate_minutes(minutes)
    stocks = dashboard_stocks(tickers)
    price_map = load_price_map(stocks, minutes, settings, cache=cache)
    matrix = build_correlation_matrix(stocks, price_map)

    symbols = [s.symbol for s in stocks]
    selected_symbol = validate_ticker(selected) if selected else (symbols[0] if symbols else None)
    summary = None
    if selected_symbol and selected_symbol in price_map:
        summary = summarize_prices(price_map[selected_symbol])

    cells = {
        row: {column: classify_correlation(value) for column, value in columns.items()}
        for row, columns in matrix.items()
    }

    return render(
        "heatmap.html",
        stocks=stocks,
        matrix=matrix,
        bands=cells,
        legend=legend(),
        minutes=minutes,
        tickers=tickers or "",
        selected=selected_symbol,
        summary=summary,
        missing=[s for s in symbols if s not in price_map]
    )


@app.get("/stocks/{ticker}", response_class=HTMLResponse)
def stock_page(ticker: str, minutes: Optional[int] = None):
    """Price chart page for one stock."""
    symbol = validate_ticker(ticker)
    minutes = validate_minutes(minutes)
    stocks = fetch_stock_list(settings)
    series = load_series(symbol, minutes)
    summary = summarize_prices(series) if series is not None and len(series) else None

    return render(
        "stock.html",
        stocks=stocks,
        symbol=symbol,
        minutes=minutes,
        summary=summary
    )


@app.get("/chart/{ticker}.png")
def price_chart(ticker: str, minutes: Optional[int] = None):
    """PNG price chart; renders a placeholder when no data is available."""
    symbol = validate_ticker(ticker)
    minutes = validate_minutes(minutes)
    series = load_series(symbol, minutes) or PriceSeries(symbol)

    buffer = io.BytesIO()
    plot_price_history(series, buffer)
    return png_response(buffer)


@app.get("/heatmap.png")
def heatmap_chart(minutes: Optional[int] = None, tickers: Optional[str] = None):
    """PNG correlation heatmap."""
    minutes = validate_minutes(minutes)
    stocks = dashboard_stocks(tickers)
    matrix = build_correlation_matrix(stocks, load_price_map(stocks, minutes, settings, cache=cache))

    buffer = io.BytesIO()
    plot_correlation_heatmap(matrix, buffer)
    return png_response(buffer)


@app.get("/api/stocks")
def list_stocks():
    """List available stocks."""
    return {
        "stocks": [{"symbol": s.symbol, "name": s.name} for s in fetch_stock_list(settings)]
    }


@app.get("/api/stocks/{ticker}")
def stock_prices(ticker: str, minutes: Optional[int] = None):
    """Price history and summary statistics for one stock."""
    symbol = validate_ticker(ticker)
    minutes = validate_minutes(minutes)
    series = load_series(symbol, minutes)
    if series is None:
        raise HTTPException(status_code=404, detail=f"No price data for {symbol}")

    return {
        "symbol": symbol,
        "minutes": minutes,
        "prices": [{"timestamp": p.timestamp, "price": p.price} for p in series],
        "summary": summarize_prices(series).to_dict()
    }


@app.get("/api/correlation")
def correlation_matrix(minutes: Optional[int] = None, tickers: Optional[str] = None):
    """Correlation matrix across the dashboard stocks (or the given tickers)."""
    minutes = validate_minutes(minutes)
    stocks = dashboard_stocks(tickers)
    price_map = load_price_map(stocks, minutes, settings, cache=cache)
    matrix: Dict[str, Dict[str, float]] = build_correlation_matrix(stocks, price_map)

    return {
        "minutes": minutes,
        "tickers": [s.symbol for s in stocks],
        "missing": [s.symbol for s in stocks if s.symbol not in price_map],
        "matrix": matrix
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
