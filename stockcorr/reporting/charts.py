"""
Chart generation for the dashboard.

This module renders price history and correlation heatmap charts with
matplotlib. Charts are written to a file path or to any binary file-like
object (the web dashboard streams them from memory).
"""

from typing import BinaryIO, Union
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
from stockcorr.analytics.correlation_matrix import CorrelationMatrix, matrix_to_frame
from stockcorr.analytics.statistics import mean
from stockcorr.entities import PriceSeries

ChartOutput = Union[str, BinaryIO]


def _save(fig, output: ChartOutput) -> None:
    fig.tight_layout()
    fig.savefig(output, dpi=150, bbox_inches="tight", format="png")
    plt.close(fig)


def plot_price_history(series: PriceSeries, output: ChartOutput) -> None:
    """
    Plot a price history as an area chart with the average price marked.

    The y-axis is padded by 10% of the price range. An empty series renders
    a placeholder message instead of a chart.

    Args:
        series: PriceSeries to plot
        output: Path or binary file-like object for the PNG
    """
    fig, ax = plt.subplots(figsize=(10, 5))

    if len(series) == 0:
        ax.text(0.5, 0.5, "No price data available", ha="center", va="center",
                transform=ax.transAxes, fontsize=14, color="gray")
        ax.set_title(f"{series.symbol} Price History")
        ax.set_axis_off()
        _save(fig, output)
        return

    prices = series.to_series()
    average = mean(series)

    color = "green" if prices.iloc[-1] >= prices.iloc[0] else "red"
    ax.plot(prices.index, prices.values, color=color, linewidth=2, label="Price")
    ax.fill_between(prices.index, prices.values, prices.min(), color=color, alpha=0.15)
    ax.axhline(y=average, color="gray", linestyle="--", alpha=0.7,
               label=f"Average ${average:.2f}")

    buffer = (prices.max() - prices.min()) * 0.1
    if buffer > 0:
        ax.set_ylim(prices.min() - buffer, prices.max() + buffer)

    ax.set_xlabel("Time")
    ax.set_ylabel("Price (USD)")
    ax.set_title(f"{series.symbol} Price History")
    ax.legend()
    ax.grid(True, alpha=0.3)

    _save(fig, output)


def plot_correlation_heatmap(matrix: CorrelationMatrix, output: ChartOutput) -> None:
    """
    Plot a correlation matrix as an annotated heatmap over [-1, 1].

    Args:
        matrix: Nested dict from build_correlation_matrix
        output: Path or binary file-like object for the PNG
    """
    frame = matrix_to_frame(matrix)
    n = max(len(frame), 1)

    fig, ax = plt.subplots(figsize=(1.2 * n + 3, 1.0 * n + 2))
    image = ax.imshow(frame.values if len(frame) else np.zeros((1, 1)),
                      cmap="RdYlGn", vmin=-1, vmax=1)

    ax.set_xticks(np.arange(len(frame.columns)))
    ax.set_yticks(np.arange(len(frame.index)))
    ax.set_xticklabels(frame.columns, rotation=45, ha="right")
    ax.set_yticklabels(frame.index)

    for i in range(len(frame.index)):
        for j in range(len(frame.columns)):
            value = frame.iat[i, j]
            ax.text(j, i, f"{value:.2f}", ha="center", va="center",
                    color="white" if abs(value) >= 0.75 else "black", fontsize=9)

    fig.colorbar(image, ax=ax, label="Correlation")
    ax.set_title("Stock Correlation Heatmap")

    _save(fig, output)
