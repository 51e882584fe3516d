"""Offset-based access to OHLCV bars across two history segments.

Bars are addressed by offset from the newest bar: offset 0 is the current
bar, offset 1 the bar before it, and so on.  The primary window is the
chart data; the extension segment holds the bars immediately before it and
is only read once an offset runs past the primary window:

    offset < primary_size  → primary[offset]
    otherwise              → extension[offset - primary_size]
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List

import numpy as np
import pandas as pd

FIELDS = ("open", "high", "low", "close", "volume")
_COLUMNS = {f: f.capitalize() for f in FIELDS}


class OutOfRangeError(IndexError):
    """An offset reaches past both loaded history segments."""


@dataclass(frozen=True)
class Bar:
    time: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float


def _newest_first(df: pd.DataFrame | None) -> dict:
    if df is None or df.empty:
        cols = {f: np.empty(0, dtype=float) for f in FIELDS}
        cols["time"] = np.empty(0, dtype=object)
        return cols

    missing = [c for c in _COLUMNS.values() if c not in df.columns]
    if missing:
        raise ValueError(f"Missing OHLCV columns: {missing}")

    cols = {f: df[_COLUMNS[f]].values.astype(float)[::-1] for f in FIELDS}
    cols["time"] = np.array(df.index.to_list(), dtype=object)[::-1]
    return cols


class BarAccessor:
    """Read-only view over a primary window plus an older extension segment.

    Both DataFrames use the [Open, High, Low, Close, Volume] layout returned
    by ``data_fetcher.fetch_ohlcv``, ordered oldest to newest.  They are copied
    into newest-first arrays so the caller's frames are never touched.
    """

    def __init__(self, primary: pd.DataFrame, extension: pd.DataFrame | None = None):
        self._primary = _newest_first(primary)
        self._extension = _newest_first(extension)

    @classmethod
    def from_bars(cls, bars: Iterable[Bar], extension: Iterable[Bar] = ()) -> "BarAccessor":
        """Build an accessor from newest-first bars."""
        return cls(_bars_to_frame(bars), _bars_to_frame(extension))

    @property
    def primary_size(self) -> int:
        return len(self._primary["close"])

    @property
    def extension_size(self) -> int:
        return len(self._extension["close"])

    def __len__(self) -> int:
        return self.primary_size + self.extension_size

    def _locate(self, offset: int):
        if offset < 0:
            raise OutOfRangeError(f"Negative bar offset {offset}")
        if offset < self.primary_size:
            return self._primary, offset
        ext_offset = offset - self.primary_size
        if ext_offset < self.extension_size:
            return self._extension, ext_offset
        raise OutOfRangeError(
            f"Offset {offset} beyond loaded history "
            f"({self.primary_size} primary + {self.extension_size} extension bars)"
        )

    def get(self, offset: int, field: str) -> float:
        if field not in _COLUMNS:
            raise KeyError(f"Unknown bar field '{field}'")
        segment, i = self._locate(offset)
        return float(segment[field][i])

    def time(self, offset: int):
        segment, i = self._locate(offset)
        return segment["time"][i]

    def bar(self, offset: int) -> Bar:
        segment, i = self._locate(offset)
        return Bar(
            time=segment["time"][i],
            open=float(segment["open"][i]),
            high=float(segment["high"][i]),
            low=float(segment["low"][i]),
            close=float(segment["close"][i]),
            volume=float(segment["volume"][i]),
        )

    def ensure_depth(self, bars: int) -> None:
        """Raise OutOfRangeError unless at least ``bars`` bars are loaded."""
        if bars > len(self):
            raise OutOfRangeError(
                f"{bars} bars of history required, only {len(self)} loaded "
                f"({self.primary_size} primary + {self.extension_size} extension)"
            )

    def release(self) -> None:
        """Drop the extension segment."""
        self._extension = _newest_first(None)


def _bars_to_frame(bars: Iterable[Bar]) -> pd.DataFrame:
    rows: List[Bar] = list(bars)
    if not rows:
        return pd.DataFrame(columns=list(_COLUMNS.values()))
    # newest-first in, oldest-first out
    rows = rows[::-1]
    return pd.DataFrame(
        {
            "Open": [b.open for b in rows],
            "High": [b.high for b in rows],
            "Low": [b.low for b in rows],
            "Close": [b.close for b in rows],
            "Volume": [b.volume for b in rows],
        },
        index=pd.Index([b.time for b in rows], name="Date"),
    )
