"""Candlestick chart with volume-bar colouring using mplfinance."""

from typing import List, Optional

import mplfinance as mpf
import numpy as np
import pandas as pd

from config import (
    FIGURE_SIZE,
    HISTOGRAM_ALPHA,
    HISTOGRAM_WIDTH,
    NEUTRAL_COLOR,
    PANEL_RATIOS,
    SAVE_DPI,
)


class ChartSink:
    """Collects bar colours and histogram points painted by the indicator.

    The indicator addresses bars by offset (0 = newest); the sink stores
    them by row position in ``df`` so they line up with the chart.
    """

    def __init__(self, df: pd.DataFrame):
        self.n = len(df)
        self.bar_colors: List[Optional[str]] = [None] * self.n
        self.values = np.full(self.n, np.nan)
        self.markers: List[str] = [NEUTRAL_COLOR] * self.n

    def _position(self, index: int) -> int:
        if not 0 <= index < self.n:
            raise IndexError(f"Bar offset {index} outside chart of {self.n} bars")
        return self.n - 1 - index

    def set_value(self, index: int, value: float) -> None:
        self.values[self._position(index)] = value

    def set_bar_color(self, index: int, color: Optional[str]) -> None:
        self.bar_colors[self._position(index)] = color

    def set_marker(self, index: int, color: str) -> None:
        self.markers[self._position(index)] = color


def plot_volume_bars(
    df: pd.DataFrame,
    sink: ChartSink,
    title: str = "",
    savefig: str | None = None,
) -> None:
    """Plot a candlestick chart with classified bar colours and a volume histogram.

    Args:
        df: OHLCV DataFrame with DatetimeIndex.
        sink: ChartSink filled by ``VolumeBarsIndicator.run``.
        title: Chart title.
        savefig: If provided, save chart to this file path instead of showing.
    """
    histogram = pd.Series(sink.values, index=df.index, dtype=float)

    addplots = [
        mpf.make_addplot(
            histogram, panel=1, type="bar", color=list(sink.markers),
            width=HISTOGRAM_WIDTH, alpha=HISTOGRAM_ALPHA, ylabel="Volume",
        ),
    ]

    kwargs = dict(
        type="candle",
        style="charles",
        title=title,
        addplot=addplots,
        figsize=FIGURE_SIZE,
        tight_layout=True,
        panel_ratios=PANEL_RATIOS,
        marketcolor_overrides=list(sink.bar_colors),
    )

    if savefig:
        kwargs["savefig"] = dict(fname=savefig, dpi=SAVE_DPI, bbox_inches="tight")

    mpf.plot(df, **kwargs)
