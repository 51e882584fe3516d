"""Central configuration for all tunable constants.

Every default used by the volume-bar classifier and its chart lives here.
Modules import what they need instead of embedding magic numbers.

Organisation follows the pipeline order:
  Classifier defaults → History / data source → Visualisation
"""

# ──────────────────────────────────────────────────────────────────────
# Classifier defaults  (volume_classifier.py, main.py)
# ──────────────────────────────────────────────────────────────────────

# Bars scanned (current bar included) when deciding whether the current
# bar is the highest / lowest volume bar.  30 ≈ six trading weeks.
DEFAULT_LOOKBACK_BARS = 30

# Volume SMA window for relative volume (RVOL).  20 ≈ one trading month.
DEFAULT_MA_LENGTH = 20

# Accepted range for both windows.
MIN_WINDOW = 1
MAX_WINDOW = 100

# RVOL = volume / SMA(volume).  Above HIGH the bar gets the high-volume
# colour, below LOW the low-volume colour.
DEFAULT_RVOL_HIGH = 3.0
DEFAULT_RVOL_LOW = 0.15

# Category colours (up, down).  Same shade both ways by default.
HIGH_VOLUME_COLOR = ("#2962ff", "#2962ff")
LOW_VOLUME_COLOR = ("#f4c443", "#f4c443")
CHURN_COLOR = ("#e91e63", "#e91e63")

# Histogram colour for bars that match no rule.
NEUTRAL_COLOR = "#708090"

# ──────────────────────────────────────────────────────────────────────
# History / data source  (data_fetcher.py)
# ──────────────────────────────────────────────────────────────────────

# Calendar padding when fetching the extension segment: weekends and
# holidays mean N bars span more than N × interval of wall time.
HISTORY_PADDING_FACTOR = 2.0
# Extra calendar days always added on top of the padded window.
HISTORY_PADDING_DAYS = 10

# Yahoo only serves intraday bars this far back from today; windows are
# clamped so the request is not rejected outright.
INTRADAY_MAX_LOOKBACK_DAYS = {
    "1m": 7,
    "2m": 59,
    "5m": 59,
    "15m": 59,
    "30m": 59,
    "90m": 59,
    "60m": 729,
    "1h": 729,
}

# ──────────────────────────────────────────────────────────────────────
# Visualiser  (visualizer.py)
# ──────────────────────────────────────────────────────────────────────

# Chart dimensions (inches).
FIGURE_SIZE = (16, 9)
# Saved image resolution.
SAVE_DPI = 150
# Panel ratios: candlestick : volume histogram.
PANEL_RATIOS = (3, 1)
# Histogram bar width (fraction of bar spacing).
HISTOGRAM_WIDTH = 0.7
HISTOGRAM_ALPHA = 0.75
