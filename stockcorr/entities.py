"""
Core entity classes for the dashboard.

These classes describe stocks and their price histories as they flow from
the data layer into the statistics engine.
"""

import math
import re
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Tuple, Union
import numpy as np
import pandas as pd


_TICKER_PATTERN = re.compile(r"^[A-Z0-9.\-]{1,10}$")


def normalize_ticker(ticker: str) -> str:
    """
    Clean and validate a ticker symbol.

    Allows alphanumerics, dots (BRK.A) and hyphens (BF-B), up to 10 characters.

    Args:
        ticker: Raw ticker string (any case, may have surrounding whitespace)

    Returns:
        Upper-case ticker

    Raises:
        ValueError: If the ticker is empty or has an invalid format
    """
    cleaned = (ticker or "").strip().upper()
    if not cleaned:
        raise ValueError("ticker cannot be empty")
    if not _TICKER_PATTERN.match(cleaned):
        raise ValueError(f"Invalid ticker format: {cleaned}")
    return cleaned


@dataclass(frozen=True)
class Stock:
    """
    A stock descriptor as listed by the stock service.

    Attributes:
        symbol: Ticker symbol (e.g., "AAPL")
        name: Human-readable name (e.g., "Apple Inc.")

    Representation Invariants:
        - symbol is upper-case and matches the ticker format
        - name is non-empty (falls back to the symbol)
    """
    symbol: str
    name: str = ""

    def __post_init__(self):
        """Normalize the symbol and fill in a missing name."""
        object.__setattr__(self, "symbol", normalize_ticker(self.symbol))
        if not self.name:
            object.__setattr__(self, "name", self.symbol)


@dataclass(frozen=True)
class PricePoint:
    """
    A single price observation.

    Attributes:
        timestamp: ISO-8601 timestamp string
        price: Observed price

    Representation Invariants:
        - timestamp is non-empty
        - price is a finite float
    """
    timestamp: str
    price: float

    def __post_init__(self):
        """Validate representation invariants."""
        if not self.timestamp:
            raise ValueError("timestamp cannot be empty")
        price = float(self.price)
        if not math.isfinite(price):
            raise ValueError(f"price must be finite, got {self.price}")
        object.__setattr__(self, "price", price)


class PriceSeries:
    """
    An ordered sequence of price observations for one ticker.

    The series is chronological by construction (the producer's
    responsibility); it is never re-sorted here.

    Attributes:
        symbol: Ticker the prices belong to
        points: Tuple of PricePoint objects, in producer order
    """

    def __init__(self, symbol: str, points: Iterable[PricePoint] = ()):
        self._symbol = normalize_ticker(symbol)
        self._points: Tuple[PricePoint, ...] = tuple(points)

    @classmethod
    def from_records(cls, symbol: str, records: Iterable[dict]) -> "PriceSeries":
        """
        Build a series from raw ``{"timestamp": ..., "price": ...}`` records.

        ``lastUpdatedAt`` is accepted in place of ``timestamp``.

        Raises:
            ValueError: If a record is missing a price or timestamp
        """
        points = []
        for record in records:
            timestamp = record.get("timestamp") or record.get("lastUpdatedAt")
            if "price" not in record or timestamp is None:
                raise ValueError(f"malformed price record for {symbol}: {record!r}")
            points.append(PricePoint(timestamp=str(timestamp), price=record["price"]))
        return cls(symbol, points)

    @property
    def symbol(self) -> str:
        """Return the ticker symbol (read-only)."""
        return self._symbol

    @property
    def points(self) -> Tuple[PricePoint, ...]:
        """Return the price points (read-only)."""
        return self._points

    @property
    def prices(self) -> np.ndarray:
        """Return the prices as a float array, in series order."""
        return np.array([p.price for p in self._points], dtype=float)

    @property
    def timestamps(self) -> Tuple[str, ...]:
        return tuple(p.timestamp for p in self._points)

    def to_series(self) -> pd.Series:
        """Return prices as a pandas Series indexed by parsed timestamps."""
        index = pd.to_datetime(list(self.timestamps), utc=True, format="ISO8601")
        return pd.Series(self.prices, index=index, name=self._symbol)

    def latest(self) -> Optional[PricePoint]:
        return self._points[-1] if self._points else None

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[PricePoint]:
        return iter(self._points)

    def __getitem__(self, index: Union[int, slice]):
        return self._points[index]

    def __repr__(self) -> str:
        return f"PriceSeries({self._symbol}, {len(self)} obs)"
