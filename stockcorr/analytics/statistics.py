"""
Descriptive statistics over price series.

This module provides pure, total functions: every well-formed input yields a
finite number. Degenerate inputs (empty series, zero variance, mismatched
lengths) map to neutral sentinel values instead of raising or producing NaN.
"""

from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Any, Iterable
import numpy as np
from stockcorr.entities import PriceSeries


def _price_of(sample: Any) -> float:
    """Read the price of a PricePoint-like object or a mapping."""
    if isinstance(sample, Mapping):
        return float(sample["price"])
    return float(sample.price)


def _as_prices(series: Iterable[Any]) -> np.ndarray:
    """Extract the price field of every sample as a float array."""
    if isinstance(series, PriceSeries):
        return series.prices
    return np.array([_price_of(sample) for sample in series], dtype=float)


def _mean_of(prices: np.ndarray) -> float:
    """Mean of an extracted price array (0.0 when empty)."""
    if len(prices) == 0:
        return 0.0
    return float(prices.sum() / len(prices))


def mean(series: Iterable[Any]) -> float:
    """
    Arithmetic mean of the prices in a series.

    Args:
        series: PriceSeries or sequence of price samples

    Returns:
        Mean price, or 0.0 for an empty series
    """
    return _mean_of(_as_prices(series))


def standard_deviation(series: Iterable[Any]) -> float:
    """
    Population standard deviation of the prices in a series.

    Divides by N (not N - 1): the series is treated as the whole population.

    Args:
        series: PriceSeries or sequence of price samples

    Returns:
        Standard deviation (>= 0), or 0.0 for an empty series
    """
    prices = _as_prices(series)
    if len(prices) == 0:
        return 0.0
    deviations = prices - _mean_of(prices)
    return float(np.sqrt(np.sum(deviations * deviations) / len(prices)))


def correlation(series_a: Iterable[Any], series_b: Iterable[Any]) -> float:
    """
    Pearson correlation coefficient between two index-aligned series.

    Sample i of one series is assumed to correspond in time to sample i of
    the other; timestamps are not checked, only lengths.

    Postconditions:
        - Result is finite and within [-1, 1]
        - 0.0 if lengths differ, either series is empty, or either series
          has zero variance

    Args:
        series_a: First series
        series_b: Second series

    Returns:
        Correlation coefficient
    """
    x = _as_prices(series_a)
    y = _as_prices(series_b)
    if len(x) != len(y) or len(x) == 0:
        return 0.0

    dx = x - _mean_of(x)
    dy = y - _mean_of(y)

    sum_xy = float(np.sum(dx * dy))
    sum_xx = float(np.sum(dx * dx))
    sum_yy = float(np.sum(dy * dy))

    # Constant series: correlation is undefined
    if sum_xx == 0 or sum_yy == 0:
        return 0.0

    # Separate roots: the product sum_xx * sum_yy underflows for tiny prices
    r = sum_xy / (np.sqrt(sum_xx) * np.sqrt(sum_yy))
    if not np.isfinite(r):
        return 0.0

    # Absorb floating-point overshoot from the sqrt/division chain
    return float(min(1.0, max(-1.0, r)))


@dataclass
class PriceSummary:
    """
    Summary statistics for one stock's price window.

    Attributes:
        symbol: Ticker symbol
        n_observations: Number of price samples
        first_price: Oldest price in the window
        last_price: Most recent price in the window
        change: last_price - first_price
        change_percent: Change relative to first_price, in percent
        average: Mean price
        std_dev: Population standard deviation
        min_price: Lowest price
        max_price: Highest price
    """
    symbol: str
    n_observations: int
    first_price: float
    last_price: float
    change: float
    change_percent: float
    average: float
    std_dev: float
    min_price: float
    max_price: float

    @property
    def is_positive(self) -> bool:
        return self.change >= 0

    def to_dict(self) -> dict:
        return asdict(self)


def summarize_prices(series: PriceSeries) -> PriceSummary:
    """
    Compute the details panel statistics for a price series.

    An empty series yields an all-zero summary with n_observations == 0.

    Args:
        series: PriceSeries for one ticker

    Returns:
        PriceSummary
    """
    prices = series.prices
    if len(prices) == 0:
        return PriceSummary(
            symbol=series.symbol, n_observations=0,
            first_price=0.0, last_price=0.0, change=0.0, change_percent=0.0,
            average=0.0, std_dev=0.0, min_price=0.0, max_price=0.0
        )

    first_price = float(prices[0])
    last_price = float(prices[-1])
    change = last_price - first_price
    change_percent = (change / first_price) * 100 if first_price > 0 else 0.0

    return PriceSummary(
        symbol=series.symbol,
        n_observations=len(prices),
        first_price=first_price,
        last_price=last_price,
        change=change,
        change_percent=change_percent,
        average=mean(series),
        std_dev=standard_deviation(series),
        min_price=float(prices.min()),
        max_price=float(prices.max())
    )
