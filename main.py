#!/usr/bin/env python3
"""Volume Bars: colour candles by volume behaviour over a lookback window.

Usage:
    python main.py --ticker AAPL --period 1y --verbose
    python main.py --ticker TSLA --period 6mo --lookback 20 --ma-length 10
    python main.py --ticker AAPL --no-churn --rvol-high 2.5 --savefig chart.png
"""

import argparse
import logging
from collections import Counter
from typing import List, Optional

from config import (
    DEFAULT_LOOKBACK_BARS,
    DEFAULT_MA_LENGTH,
    DEFAULT_RVOL_HIGH,
    DEFAULT_RVOL_LOW,
)
from data_fetcher import fetch_ohlcv, history_loader
from indicator import VolumeBarsIndicator
from visualizer import ChartSink, plot_volume_bars
from volume_classifier import Category, ClassificationConfig


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Volume-based bar colouring")
    p.add_argument("--ticker", default="AAPL", help="Stock ticker symbol")
    p.add_argument("--period", default="1y", help="yfinance period (e.g. 1y, 6mo, 2y)")
    p.add_argument("--interval", default="1d", help="yfinance interval (e.g. 1d, 1h)")
    p.add_argument("--lookback", type=int, default=DEFAULT_LOOKBACK_BARS, help="Lookback bars for volume extremes and churn")
    p.add_argument("--ma-length", type=int, default=DEFAULT_MA_LENGTH, help="Volume SMA window for RVOL")
    p.add_argument("--rvol-high", type=float, default=DEFAULT_RVOL_HIGH, help="RVOL above this triggers the high-volume colour")
    p.add_argument("--rvol-low", type=float, default=DEFAULT_RVOL_LOW, help="RVOL below this triggers the low-volume colour")
    p.add_argument("--no-low-volume", action="store_true", help="Do not colour lowest-volume bars")
    p.add_argument("--no-high-volume", action="store_true", help="Do not colour highest-volume bars")
    p.add_argument("--no-rvol", action="store_true", help="Do not colour bars by relative volume")
    p.add_argument("--no-churn", action="store_true", help="Do not colour churn bars")
    p.add_argument("--verbose", action="store_true", help="Print every coloured bar and debug logs")
    p.add_argument("--savefig", default=None, help="Save chart to file instead of displaying")
    return p.parse_args(argv)


def build_config(args: argparse.Namespace) -> ClassificationConfig:
    return ClassificationConfig(
        lookback_bars=args.lookback,
        enable_low_volume=not args.no_low_volume,
        enable_high_volume=not args.no_high_volume,
        enable_churn=not args.no_churn,
        enable_relative_volume=not args.no_rvol,
        rvol_high_threshold=args.rvol_high,
        rvol_low_threshold=args.rvol_low,
        ma_length=args.ma_length,
    )


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = build_config(args)

    # Step 1: Fetch data
    print(f"Fetching {args.ticker} ({args.period}, {args.interval})...")
    df = fetch_ohlcv(args.ticker, args.period, args.interval)
    print(f"  {len(df)} bars from {df.index[0].date()} to {df.index[-1].date()}")

    # Step 2: Extension history + classification
    sink = ChartSink(df)
    loader = history_loader(args.ticker, df, args.interval)
    with VolumeBarsIndicator(df, loader, config, sink) as indicator:
        results = indicator.run()

    # Step 3: Summary
    counts = Counter(r.category for r in results)
    print(f"\n  Classified bars (lookback={config.lookback_bars}, MA={config.ma_length}):")
    for category in Category:
        n = counts.get(category, 0)
        print(f"    {category.value:<12} {n:4d} ({100 * n / len(results):.1f}%)")

    if args.verbose:
        print("\n  Coloured bars:")
        for date, r in zip(df.index, results):
            if r.category is not Category.DEFAULT:
                print(f"    {date.date()}  {r.category.value:<12} {r.direction.value}")

    # Step 4: Visualize
    title = f"{args.ticker} — Volume Bars ({args.period})"
    plot_volume_bars(df, sink, title, args.savefig)
    if args.savefig:
        print(f"\n  Chart saved to {args.savefig}")


if __name__ == "__main__":
    main()
