"""
Correlation matrix construction for the heatmap view.

Builds a square, symbol-keyed matrix of pairwise Pearson correlations across
a set of tickers, and classifies values into the heatmap's colour bands.
"""

import logging
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Union
import pandas as pd
from stockcorr.analytics.statistics import correlation
from stockcorr.entities import Stock

logger = logging.getLogger(__name__)

CorrelationMatrix = Dict[str, Dict[str, float]]


def _symbol_of(ticker: Union[str, Stock]) -> str:
    return ticker.symbol if isinstance(ticker, Stock) else ticker


def build_correlation_matrix(
    tickers: Iterable[Union[str, Stock]],
    series_by_ticker: Mapping[str, Any]
) -> CorrelationMatrix:
    """
    Build the full correlation matrix for a set of tickers.

    Every ordered (row, column) pair is filled independently:
    - row == column: 1.0 by convention, even if the series is missing
    - both series present: correlation(row series, column series)
    - otherwise: 0.0 (no data)

    Preconditions:
        - tickers are symbols or Stock descriptors
        - series_by_ticker maps symbols to price series; a symbol may be
          absent if its data failed to load

    Postconditions:
        - Matrix is square over the input tickers, in input order
        - Diagonal is exactly 1.0
        - All values are within [-1, 1]

    Args:
        tickers: Ordered tickers to include
        series_by_ticker: Mapping from symbol to its price series

    Returns:
        Nested dict, matrix[row][column] -> correlation
    """
    symbols = [_symbol_of(t) for t in tickers]
    matrix: CorrelationMatrix = {}

    for row in symbols:
        matrix[row] = {}
        for column in symbols:
            if row == column:
                matrix[row][column] = 1.0
            elif row in series_by_ticker and column in series_by_ticker:
                matrix[row][column] = correlation(
                    series_by_ticker[row], series_by_ticker[column]
                )
            else:
                matrix[row][column] = 0.0

    missing = [s for s in symbols if s not in series_by_ticker]
    if missing:
        logger.debug("No price data for %s; reporting 0 correlation", ", ".join(missing))

    return matrix


def matrix_to_frame(matrix: CorrelationMatrix) -> pd.DataFrame:
    """
    Convert a correlation matrix into a DataFrame (rows and columns in matrix order).

    Args:
        matrix: Nested dict from build_correlation_matrix

    Returns:
        Square DataFrame of correlations
    """
    symbols = list(matrix.keys())
    return pd.DataFrame(
        [[matrix[row][column] for column in symbols] for row in symbols],
        index=symbols,
        columns=symbols
    )


class CorrelationBand(Enum):
    """Heatmap colour bands, strongest positive first."""

    STRONG_POSITIVE = ("Strong Positive (0.75-1.0)", "high-positive", 0.75)
    MEDIUM_POSITIVE = ("Medium Positive (0.5-0.75)", "medium-positive", 0.5)
    WEAK_POSITIVE = ("Weak Positive (0.25-0.5)", "low-positive", 0.25)
    NEUTRAL = ("No Correlation (-0.25-0.25)", "neutral", -0.25)
    WEAK_NEGATIVE = ("Weak Negative (-0.5--0.25)", "low-negative", -0.5)
    MEDIUM_NEGATIVE = ("Medium Negative (-0.75--0.5)", "medium-negative", -0.75)
    STRONG_NEGATIVE = ("Strong Negative (-1.0--0.75)", "high-negative", float("-inf"))

    def __init__(self, label: str, css_suffix: str, lower_bound: float):
        self.label = label
        self.css_suffix = css_suffix
        self.lower_bound = lower_bound

    @property
    def css_class(self) -> str:
        return f"correlation-{self.css_suffix}"


def classify_correlation(value: float) -> CorrelationBand:
    """
    Map a correlation value to its heatmap band.

    Bands are closed at their lower bound: 0.75 is strong positive,
    -0.25 is neutral.
    """
    for band in CorrelationBand:
        if value >= band.lower_bound:
            return band
    return CorrelationBand.STRONG_NEGATIVE


def legend() -> List[CorrelationBand]:
    """Return the bands in legend order."""
    return list(CorrelationBand)
