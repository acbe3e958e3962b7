"""
Command-line interface for the dashboard.

This module provides CLI commands for listing stocks, printing price
statistics, printing or saving the correlation heatmap, and serving the
web dashboard.
"""

import argparse
import logging
import sys
from dataclasses import replace
from stockcorr.analytics.correlation_matrix import build_correlation_matrix, matrix_to_frame
from stockcorr.analytics.statistics import summarize_prices
from stockcorr.cache import DataCache
from stockcorr.config import PRICE_SOURCES, load_settings
from stockcorr.data_sources.prices import get_price_history, load_price_map
from stockcorr.data_sources.stocks import fetch_stock_list, limit_stocks
from stockcorr.entities import Stock
from stockcorr.errors import DashboardError
from stockcorr.reporting.charts import plot_correlation_heatmap


def stocks_command(args, settings):
    """List available stocks."""
    stocks = fetch_stock_list(settings)
    print(f"{len(stocks)} stocks available:")
    for stock in stocks:
        print(f"  {stock.symbol:<8} {stock.name}")


def stats_command(args, settings):
    """Print summary statistics for one ticker."""
    cache = DataCache(settings.cache_dir)
    minutes = args.minutes or settings.default_minutes

    print(f"Fetching last {minutes} minutes of prices for {args.ticker}...")
    series = get_price_history(args.ticker, minutes, settings, cache=cache)
    summary = summarize_prices(series)

    arrow = "▲" if summary.is_positive else "▼"
    print(f"\n{summary.symbol} Statistics ({summary.n_observations} observations)")
    print(f"  Current price:      ${summary.last_price:.2f}")
    print(f"  Price change:       {arrow} ${abs(summary.change):.2f} ({summary.change_percent:.2f}%)")
    print(f"  Average price:      ${summary.average:.2f}")
    print(f"  Standard deviation: ${summary.std_dev:.2f}")
    print(f"  Range:              ${summary.min_price:.2f} - ${summary.max_price:.2f}")


def heatmap_command(args, settings):
    """Print the correlation matrix and optionally save the heatmap chart."""
    cache = DataCache(settings.cache_dir)
    minutes = args.minutes or settings.default_minutes

    if args.tickers:
        stocks = [Stock(t) for t in args.tickers.split(",") if t.strip()]
    else:
        stocks = limit_stocks(fetch_stock_list(settings), settings.max_stocks)

    print(f"Loading last {minutes} minutes of prices for {len(stocks)} stocks...")
    price_map = load_price_map(stocks, minutes, settings, cache=cache)

    missing = [s.symbol for s in stocks if s.symbol not in price_map]
    if missing:
        print(f"  Warning: no price data for {', '.join(missing)} (shown as 0)")

    matrix = build_correlation_matrix(stocks, price_map)
    print("\n" + matrix_to_frame(matrix).round(2).to_string())

    if args.save:
        plot_correlation_heatmap(matrix, args.save)
        print(f"\n✓ Heatmap saved to: {args.save}")


def serve_command(args, settings):
    """Run the web dashboard."""
    import uvicorn
    print(f"Serving dashboard on http://{args.host}:{args.port}")
    uvicorn.run("stockcorr.web:app", host=args.host, port=args.port)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Stock Correlation Dashboard",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument("--config", default=None, help="Path to a YAML settings file")
    parser.add_argument("--source", choices=PRICE_SOURCES, help="Price data source")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress details")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    subparsers.add_parser("stocks", help="List available stocks")

    stats_parser = subparsers.add_parser("stats", help="Show price statistics for a ticker")
    stats_parser.add_argument("ticker", help="Ticker symbol")
    stats_parser.add_argument("--minutes", type=int, help="Price window in minutes")

    heatmap_parser = subparsers.add_parser("heatmap", help="Print the correlation matrix")
    heatmap_parser.add_argument("--tickers", help="Comma-separated tickers (default: stock list)")
    heatmap_parser.add_argument("--minutes", type=int, help="Price window in minutes")
    heatmap_parser.add_argument("--save", help="Save the heatmap chart to this PNG path")

    serve_parser = subparsers.add_parser("serve", help="Run the web dashboard")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port")

    return parser


COMMANDS = {
    "stocks": stocks_command,
    "stats": stats_command,
    "heatmap": heatmap_command,
    "serve": serve_command,
}


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    command = COMMANDS.get(args.command)
    if command is None:
        parser.print_help()
        sys.exit(1)

    try:
        settings = load_settings(args.config)
        if args.source:
            settings = replace(settings, price_source=args.source)
        command(args, settings)
    except (DashboardError, ValueError) as e:
        print(f"\n✗ Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
