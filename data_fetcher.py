"""Fetch OHLCV stock data from Yahoo Finance via yfinance.

Two reads per chart: the primary window (``fetch_ohlcv``) and the extension
segment of older bars the classifier needs for its oldest rows
(``fetch_history_before``).
"""

import logging
from typing import Callable

import pandas as pd
import yfinance as yf

from config import (
    HISTORY_PADDING_DAYS,
    HISTORY_PADDING_FACTOR,
    INTRADAY_MAX_LOOKBACK_DAYS,
)

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ["Open", "High", "Low", "Close", "Volume"]

# Wall-clock length of one bar per yfinance interval string.
INTERVAL_DURATIONS = {
    "1m": pd.Timedelta(minutes=1),
    "2m": pd.Timedelta(minutes=2),
    "5m": pd.Timedelta(minutes=5),
    "15m": pd.Timedelta(minutes=15),
    "30m": pd.Timedelta(minutes=30),
    "60m": pd.Timedelta(hours=1),
    "90m": pd.Timedelta(minutes=90),
    "1h": pd.Timedelta(hours=1),
    "1d": pd.Timedelta(days=1),
    "5d": pd.Timedelta(days=5),
    "1wk": pd.Timedelta(weeks=1),
    "1mo": pd.Timedelta(days=31),
    "3mo": pd.Timedelta(days=92),
}


def _clean(df: pd.DataFrame, what: str) -> pd.DataFrame:
    # yfinance >= 0.2.51 returns MultiIndex columns for single tickers
    if isinstance(df.columns, pd.MultiIndex):
        df = df.droplevel("Ticker", axis=1)

    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Missing columns in downloaded data: {missing}")

    df = df[REQUIRED_COLUMNS].dropna()
    df = df.sort_index()

    if df.empty:
        raise ValueError(f"All rows were NaN for {what}")
    return df


def fetch_ohlcv(ticker: str, period: str = "1y", interval: str = "1d") -> pd.DataFrame:
    """Download OHLCV data for a ticker.

    Args:
        ticker: Stock ticker symbol (e.g. "AAPL").
        period: yfinance period string (e.g. "1y", "6mo", "2y").
        interval: yfinance interval string (e.g. "1d", "1h").

    Returns:
        DataFrame with DatetimeIndex and columns [Open, High, Low, Close, Volume].

    Raises:
        ValueError: If no data is returned for the given ticker/period.
    """
    df = yf.download(ticker, period=period, interval=interval, progress=False)

    if df.empty:
        raise ValueError(f"No data returned for ticker '{ticker}' with period='{period}'")

    return _clean(df, f"ticker '{ticker}'")


def history_window_start(
    end: pd.Timestamp,
    bars: int,
    interval: str,
    now: pd.Timestamp | None = None,
) -> pd.Timestamp:
    """Start of a calendar window wide enough to hold ``bars`` bars before ``end``.

    Intraday windows never start earlier than Yahoo's lookback limit for the
    interval (counted back from ``now``), so the download may come back short.
    """
    if interval not in INTERVAL_DURATIONS:
        raise ValueError(f"Unsupported interval '{interval}'")
    span = INTERVAL_DURATIONS[interval] * bars * HISTORY_PADDING_FACTOR
    start = end - span - pd.Timedelta(days=HISTORY_PADDING_DAYS)

    limit_days = INTRADAY_MAX_LOOKBACK_DAYS.get(interval)
    if limit_days is not None:
        now = now if now is not None else pd.Timestamp.now(tz=end.tz)
        earliest = now - pd.Timedelta(days=limit_days)
        if start < earliest:
            logger.warning(
                "%s history is limited to %d days; extension window clamped to %s",
                interval, limit_days, earliest,
            )
            start = earliest
    return start


def fetch_history_before(
    ticker: str,
    end: pd.Timestamp,
    bars: int,
    interval: str = "1d",
) -> pd.DataFrame:
    """Download the ``bars`` bars strictly before ``end`` (oldest first).

    May return fewer rows when the listing is younger than the window; the
    caller checks depth.
    """
    start = history_window_start(end, bars, interval)
    df = yf.download(ticker, start=start, end=end, interval=interval, progress=False)

    if df.empty:
        logger.warning(
            "no %s history before %s for '%s' (intraday data may be past Yahoo's lookback limit)",
            interval, end, ticker,
        )
        return pd.DataFrame(columns=REQUIRED_COLUMNS)

    df = _clean(df, f"history of '{ticker}'")
    return trim_history(df, end, bars)


def trim_history(df: pd.DataFrame, end: pd.Timestamp, bars: int) -> pd.DataFrame:
    """Keep the last ``bars`` rows strictly before ``end``."""
    df = df[df.index < end]
    if len(df) < bars:
        logger.warning("only %d of %d extension bars available", len(df), bars)
    return df.iloc[-bars:] if bars > 0 else df.iloc[0:0]


def history_loader(ticker: str, df: pd.DataFrame, interval: str = "1d") -> Callable[[int], pd.DataFrame]:
    """Loader for the bars preceding ``df``, for ``VolumeBarsIndicator``."""
    first = df.index[0]

    def load(bars: int) -> pd.DataFrame:
        return fetch_history_before(ticker, first, bars, interval)

    return load
