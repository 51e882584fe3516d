"""
Unit tests for rolling-window statistics.

Tests cover:
- Highest high / lowest low / SMA windows, including window=1
- Non-strict extremum test and its permutation invariance
- 1-bar and 2-bar churn scans, including zero-range bars
"""

import itertools
import math

import pandas as pd
import pytest

from bar_accessor import BarAccessor
from rolling_stats import (
    churn_ratio,
    highest_high,
    is_extreme_in_window,
    lowest_low,
    one_day_churn_extreme,
    sma_volume,
    two_day_churn_extreme,
)


def _col(value, n):
    if isinstance(value, (list, tuple)):
        return list(value)[::-1]
    return [value] * n


def make_accessor(volumes, high=110.0, low=100.0):
    """Accessor over bars given newest-first (index 0 = offset 0)."""
    n = len(volumes)
    df = pd.DataFrame(
        {
            "Open": [101.0] * n,
            "High": _col(high, n),
            "Low": _col(low, n),
            "Close": [109.0] * n,
            "Volume": _col(list(volumes), n),
        },
        index=pd.bdate_range(end="2024-03-29", periods=n),
    )
    return BarAccessor(df)


class TestPriceWindows:
    def test_highest_high(self):
        acc = make_accessor([1, 1, 1, 1], high=[110.0, 115.0, 112.0, 130.0])
        assert highest_high(acc, 0, 3) == 115.0
        assert highest_high(acc, 0, 4) == 130.0

    def test_lowest_low(self):
        acc = make_accessor([1, 1, 1], low=[100.0, 95.0, 97.0])
        assert lowest_low(acc, 0, 3) == 95.0
        assert lowest_low(acc, 2, 1) == 97.0

    def test_window_one_returns_own_value(self):
        acc = make_accessor([1, 1], high=[110.0, 150.0], low=[100.0, 50.0])
        assert highest_high(acc, 0, 1) == 110.0
        assert lowest_low(acc, 0, 1) == 100.0

    def test_sma_volume(self):
        acc = make_accessor([30, 20, 10, 99, 99])
        assert sma_volume(acc, 0, 3) == 20.0
        assert sma_volume(acc, 1, 2) == 15.0

    @pytest.mark.parametrize("fn", [highest_high, lowest_low, sma_volume])
    def test_window_below_one_rejected(self, fn):
        acc = make_accessor([1, 2])
        with pytest.raises(ValueError):
            fn(acc, 0, 0)


class TestExtremeInWindow:
    def test_strict_maximum(self):
        acc = make_accessor([50, 10, 20, 30])
        assert is_extreme_in_window(acc, 50, 0, 4, "high")
        assert not is_extreme_in_window(acc, 50, 0, 4, "low")

    def test_strict_minimum(self):
        acc = make_accessor([5, 10, 20, 30])
        assert is_extreme_in_window(acc, 5, 0, 4, "low")
        assert not is_extreme_in_window(acc, 5, 0, 4, "high")

    def test_ties_count_as_extreme(self):
        acc = make_accessor([10, 10, 5])
        assert is_extreme_in_window(acc, 10, 0, 3, "high")
        acc = make_accessor([5, 5, 10])
        assert is_extreme_in_window(acc, 5, 0, 3, "low")

    def test_window_stops_at_lookback(self):
        acc = make_accessor([50, 10, 20, 999])
        assert is_extreme_in_window(acc, 50, 0, 3, "high")
        assert not is_extreme_in_window(acc, 50, 0, 4, "high")

    def test_lookback_one_is_trivially_extreme(self):
        acc = make_accessor([50, 100, 1])
        assert is_extreme_in_window(acc, 50, 0, 1, "high")
        assert is_extreme_in_window(acc, 50, 0, 1, "low")

    def test_scan_from_later_offset(self):
        acc = make_accessor([1000, 40, 10, 20])
        assert is_extreme_in_window(acc, 40, 1, 3, "high")

    def test_permutation_of_other_bars_does_not_change_outcome(self):
        others = [12, 7, 30, 7, 19]
        for anchor in (7, 19, 30, 31, 6):
            for kind in ("high", "low"):
                expected = is_extreme_in_window(make_accessor([anchor] + others), anchor, 0, 6, kind)
                for perm in itertools.permutations(others):
                    acc = make_accessor([anchor] + list(perm))
                    assert is_extreme_in_window(acc, anchor, 0, 6, kind) == expected

    def test_invalid_kind(self):
        acc = make_accessor([1, 2])
        with pytest.raises(ValueError):
            is_extreme_in_window(acc, 1, 0, 2, "middle")


class TestChurn:
    def test_ratio(self):
        assert churn_ratio(50.0, 10.0) == 5.0

    def test_zero_range_is_infinite(self):
        assert churn_ratio(50.0, 0.0) == math.inf
        assert churn_ratio(0.0, 0.0) == math.inf

    def test_one_day_churn_scenario(self):
        acc = make_accessor([50, 10, 10, 10, 10])
        assert one_day_churn_extreme(acc, 0, 5)

    def test_one_day_churn_beaten(self):
        acc = make_accessor([50, 10, 10, 10, 60])
        assert not one_day_churn_extreme(acc, 0, 5)
        assert one_day_churn_extreme(acc, 0, 4)

    def test_one_day_churn_ties(self):
        acc = make_accessor([50, 10, 10, 10, 10])
        assert one_day_churn_extreme(acc, 1, 4)

    def test_narrow_range_beats_higher_volume(self):
        # offset 0: 20 / 2 = 10; offset 1: 50 / 10 = 5
        acc = make_accessor([20, 50], high=[102.0, 110.0], low=[100.0, 100.0])
        assert one_day_churn_extreme(acc, 0, 2)

    def test_zero_range_bar_is_local_maximum(self):
        acc = make_accessor([1, 1_000_000, 1_000_000], high=[100.0, 110.0, 110.0], low=[100.0, 100.0, 100.0])
        assert one_day_churn_extreme(acc, 0, 3)

    def test_zero_range_bar_in_window_blocks_anchor(self):
        acc = make_accessor([1_000_000, 1], high=[110.0, 100.0], low=[100.0, 100.0])
        assert not one_day_churn_extreme(acc, 0, 2)

    def test_two_day_churn(self):
        # 2-bar ratios: (50+50)/10 = 10, (50+10)/10 = 6, then 2
        acc = make_accessor([50, 50, 10, 10, 10, 10])
        assert two_day_churn_extreme(acc, 0, 5)
        assert two_day_churn_extreme(acc, 1, 4)

    def test_two_day_churn_uses_combined_range(self):
        # offset 0 pair range: 120 - 100 = 20 -> (30+30)/20 = 3
        # offset 1 pair range: 110 - 100 = 10 -> (30+20)/10 = 5
        acc = make_accessor(
            [30, 30, 20],
            high=[120.0, 110.0, 110.0],
            low=[100.0, 100.0, 100.0],
        )
        assert not two_day_churn_extreme(acc, 0, 2)

    def test_two_day_reads_one_bar_past_lookback(self):
        acc = make_accessor([50, 50, 10])
        assert two_day_churn_extreme(acc, 0, 2)
        with pytest.raises(IndexError):
            two_day_churn_extreme(acc, 0, 3)
