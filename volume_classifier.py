"""Volume-bar classification for OHLCV candles.

Each bar gets one category, decided by the first rule that matches:
  1. Low volume   - lowest volume of the lookback window
  2. High volume  - highest volume of the lookback window
  3. RVOL         - volume / SMA(volume) above the high or below the low threshold
  4. Churn        - highest volume per unit of range (1-bar or 2-bar aggregate)
  5. Default      - none of the above

Window extremes always win over RVOL, and RVOL over churn.  Direction is
independent: a bar is up only when Close > Open.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import pandas as pd

from bar_accessor import BarAccessor, OutOfRangeError
from config import (
    CHURN_COLOR,
    DEFAULT_LOOKBACK_BARS,
    DEFAULT_MA_LENGTH,
    DEFAULT_RVOL_HIGH,
    DEFAULT_RVOL_LOW,
    HIGH_VOLUME_COLOR,
    LOW_VOLUME_COLOR,
    MAX_WINDOW,
    MIN_WINDOW,
)
from rolling_stats import (
    is_extreme_in_window,
    one_day_churn_extreme,
    sma_volume,
    two_day_churn_extreme,
)


class Category(Enum):
    LOW_VOLUME = "low_volume"
    HIGH_VOLUME = "high_volume"
    RELATIVE_VOLUME_HIGH = "rvol_high"
    RELATIVE_VOLUME_LOW = "rvol_low"
    CHURN = "churn"
    DEFAULT = "default"


class Direction(Enum):
    UP = "up"
    DOWN = "down"


@dataclass(frozen=True)
class PairColor:
    up: str
    down: str

    def pick(self, direction: Direction) -> str:
        return self.up if direction is Direction.UP else self.down


@dataclass(frozen=True)
class Classification:
    category: Category
    direction: Direction


@dataclass(frozen=True)
class ClassificationConfig:
    """User-tunable classifier settings, validated on construction."""
    lookback_bars: int = DEFAULT_LOOKBACK_BARS
    enable_low_volume: bool = True
    low_volume_color: PairColor = field(default_factory=lambda: PairColor(*LOW_VOLUME_COLOR))
    enable_high_volume: bool = True
    high_volume_color: PairColor = field(default_factory=lambda: PairColor(*HIGH_VOLUME_COLOR))
    enable_churn: bool = True
    churn_color: PairColor = field(default_factory=lambda: PairColor(*CHURN_COLOR))
    enable_relative_volume: bool = True
    rvol_high_threshold: float = DEFAULT_RVOL_HIGH
    rvol_low_threshold: float = DEFAULT_RVOL_LOW
    ma_length: int = DEFAULT_MA_LENGTH

    def __post_init__(self):
        for name in ("lookback_bars", "ma_length"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer, got {value!r}")
            if not MIN_WINDOW <= value <= MAX_WINDOW:
                raise ValueError(f"{name} must be in [{MIN_WINDOW}, {MAX_WINDOW}], got {value}")
        for name in ("rvol_high_threshold", "rvol_low_threshold"):
            value = getattr(self, name)
            if not math.isfinite(value) or value < 0:
                raise ValueError(f"{name} must be a finite non-negative number, got {value!r}")


def required_history(config: ClassificationConfig) -> int:
    """Bars to pre-fetch before the primary window (extension segment size)."""
    return max(config.lookback_bars, config.ma_length)


def bars_needed(index: int, config: ClassificationConfig) -> int:
    """Total bars that must be loaded to classify offset ``index``."""
    # the 2-bar churn scan reads offset index + lookback
    return index + max(config.lookback_bars + 1, config.ma_length)


def direction_of(open_: float, close: float) -> Direction:
    return Direction.UP if open_ < close else Direction.DOWN


def classify(acc: BarAccessor, index: int, config: ClassificationConfig) -> Classification:
    """Classify the bar at offset ``index`` (0 = newest).

    Raises:
        OutOfRangeError: If the loaded history is too short for this index
            and config.  Checked before any scan starts.
    """
    if index < 0:
        raise OutOfRangeError(f"Negative bar index {index}")
    acc.ensure_depth(bars_needed(index, config))

    direction = direction_of(acc.get(index, "open"), acc.get(index, "close"))
    volume = acc.get(index, "volume")
    lookback = config.lookback_bars

    if config.enable_low_volume and is_extreme_in_window(acc, volume, index, lookback, "low"):
        return Classification(Category.LOW_VOLUME, direction)

    if config.enable_high_volume and is_extreme_in_window(acc, volume, index, lookback, "high"):
        return Classification(Category.HIGH_VOLUME, direction)

    if config.enable_relative_volume:
        sma = sma_volume(acc, index, config.ma_length)
        # zero average: RVOL undefined, rule does not fire
        if sma > 0:
            rvol = volume / sma
            if rvol > config.rvol_high_threshold:
                return Classification(Category.RELATIVE_VOLUME_HIGH, direction)
            if rvol < config.rvol_low_threshold:
                return Classification(Category.RELATIVE_VOLUME_LOW, direction)

    if config.enable_churn and (
        one_day_churn_extreme(acc, index, lookback)
        or two_day_churn_extreme(acc, index, lookback)
    ):
        return Classification(Category.CHURN, direction)

    return Classification(Category.DEFAULT, direction)


def bar_color(result: Classification, config: ClassificationConfig) -> Optional[str]:
    """Colour for a classified bar; None means the host's default colour.

    RVOL categories reuse the high/low volume colour pairs.
    """
    pair = {
        Category.LOW_VOLUME: config.low_volume_color,
        Category.RELATIVE_VOLUME_LOW: config.low_volume_color,
        Category.HIGH_VOLUME: config.high_volume_color,
        Category.RELATIVE_VOLUME_HIGH: config.high_volume_color,
        Category.CHURN: config.churn_color,
    }.get(result.category)
    if pair is None:
        return None
    return pair.pick(result.direction)


def classify_volume_bars(
    df: pd.DataFrame,
    config: ClassificationConfig | None = None,
    extension: pd.DataFrame | None = None,
) -> pd.DataFrame:
    """Add volume-bar classification columns to the OHLCV DataFrame.

    Args:
        df: DataFrame with columns [Open, High, Low, Close, Volume], oldest first.
        config: Classifier settings (defaults if None).
        extension: Older bars immediately preceding ``df``; must hold at least
            ``required_history(config)`` bars for the oldest rows to classify.

    Returns:
        A copy of ``df`` with 3 new columns:
          VolumeCategory - Category value string
          Direction      - "up" / "down"
          BarColor       - colour string, or None for default bars

    Raises:
        OutOfRangeError: If ``df`` plus ``extension`` is too short.
    """
    config = config or ClassificationConfig()
    acc = BarAccessor(df, extension)
    n = acc.primary_size
    # oldest row needs the deepest history; fail before classifying anything
    if n:
        acc.ensure_depth(bars_needed(n - 1, config))

    results = [classify(acc, n - 1 - pos, config) for pos in range(n)]

    out = df.copy()
    out["VolumeCategory"] = [r.category.value for r in results]
    out["Direction"] = [r.direction.value for r in results]
    # object dtype keeps None; string inference would turn it into NaN
    out["BarColor"] = pd.Series([bar_color(r, config) for r in results], index=out.index, dtype=object)
    return out
