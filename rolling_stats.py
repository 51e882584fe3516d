"""Rolling-window statistics over offset-addressed bars.

Every scan starts at ``offset`` and walks ``window`` bars into the past
(offsets offset .. offset + window - 1) through a ``BarAccessor``.

Extremum tests are non-strict: the anchor bar only fails when another bar
in the window strictly beats it, so equal values all count as extreme.

Churn compares volume against the price range it produced.  A zero range
makes the ratio +inf, so a flat bar is always the local churn maximum.
"""

import math

from bar_accessor import BarAccessor


def _check_window(window: int, name: str = "window") -> None:
    if window < 1:
        raise ValueError(f"{name} must be >= 1, got {window}")


# ──────────────────────────────────────────────────────────────────────
# Price / volume window helpers
# ──────────────────────────────────────────────────────────────────────

def highest_high(acc: BarAccessor, offset: int, window: int) -> float:
    """Highest High over ``window`` bars starting at ``offset``."""
    _check_window(window)
    high = acc.get(offset, "high")
    for i in range(1, window):
        current = acc.get(offset + i, "high")
        if current > high:
            high = current
    return high


def lowest_low(acc: BarAccessor, offset: int, window: int) -> float:
    """Lowest Low over ``window`` bars starting at ``offset``."""
    _check_window(window)
    low = acc.get(offset, "low")
    for i in range(1, window):
        current = acc.get(offset + i, "low")
        if current < low:
            low = current
    return low


def sma_volume(acc: BarAccessor, offset: int, length: int) -> float:
    """Simple moving average of Volume over ``length`` bars."""
    _check_window(length, "length")
    total = 0.0
    for i in range(length):
        total += acc.get(offset + i, "volume")
    return total / length


def is_extreme_in_window(
    acc: BarAccessor,
    value: float,
    offset: int,
    lookback: int,
    kind: str,
) -> bool:
    """True if ``value`` is the max (kind="high") or min (kind="low") volume.

    ``value`` is compared against the volumes of the lookback - 1 bars
    preceding ``offset``.  With lookback=1 there is nothing to compare and
    the bar is trivially extreme.
    """
    _check_window(lookback, "lookback")
    if kind not in ("high", "low"):
        raise ValueError(f"kind must be 'high' or 'low', got '{kind}'")

    for i in range(1, lookback):
        volume = acc.get(offset + i, "volume")
        if kind == "high" and volume > value:
            return False
        if kind == "low" and volume < value:
            return False
    return True


# ──────────────────────────────────────────────────────────────────────
# Churn
# ──────────────────────────────────────────────────────────────────────

def churn_ratio(volume: float, bar_range: float) -> float:
    """Volume per unit of price range; +inf for a zero range."""
    if bar_range == 0:
        return math.inf
    return volume / bar_range


def _one_day_ratio(acc: BarAccessor, offset: int) -> float:
    bar_range = acc.get(offset, "high") - acc.get(offset, "low")
    return churn_ratio(acc.get(offset, "volume"), bar_range)


def _two_day_ratio(acc: BarAccessor, offset: int) -> float:
    period_range = highest_high(acc, offset, 2) - lowest_low(acc, offset, 2)
    two_day_volume = acc.get(offset, "volume") + acc.get(offset + 1, "volume")
    return churn_ratio(two_day_volume, period_range)


def one_day_churn_extreme(acc: BarAccessor, offset: int, lookback: int) -> bool:
    """True if the bar at ``offset`` has the highest volume/range ratio."""
    _check_window(lookback, "lookback")
    value = _one_day_ratio(acc, offset)
    for i in range(1, lookback):
        if _one_day_ratio(acc, offset + i) > value:
            return False
    return True


def two_day_churn_extreme(acc: BarAccessor, offset: int, lookback: int) -> bool:
    """Same as ``one_day_churn_extreme`` on 2-bar aggregates.

    Each window position k aggregates bars k and k + 1, so the scan reads
    one bar past the lookback window.
    """
    _check_window(lookback, "lookback")
    value = _two_day_ratio(acc, offset)
    for i in range(1, lookback):
        if _two_day_ratio(acc, offset + i) > value:
            return False
    return True
