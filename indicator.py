"""Volume-bars indicator: history lifecycle and per-bar painting.

The indicator owns the extension segment for its whole lifetime.  It is
fetched once on construction, sized from the config, and dropped on
close().  Each update() classifies one bar and paints it on the sink.
"""

import logging
from typing import Callable, Optional, Protocol

import pandas as pd

from bar_accessor import BarAccessor
from config import NEUTRAL_COLOR
from volume_classifier import (
    Category,
    Classification,
    ClassificationConfig,
    bar_color,
    bars_needed,
    classify,
    required_history,
)

logger = logging.getLogger(__name__)


class BarSink(Protocol):
    """Render target for painted bars, addressed by offset (0 = newest)."""

    def set_value(self, index: int, value: float) -> None: ...

    def set_bar_color(self, index: int, color: Optional[str]) -> None: ...

    def set_marker(self, index: int, color: str) -> None: ...


# Called with the number of bars required; returns the bars just before the
# primary window, oldest first.
HistoryLoader = Callable[[int], pd.DataFrame]


class VolumeBarsIndicator:
    def __init__(
        self,
        primary: pd.DataFrame,
        history_loader: HistoryLoader,
        config: ClassificationConfig,
        sink: BarSink,
    ):
        self.config = config
        self.sink = sink
        self._closed = False

        bars = required_history(config)
        extension = history_loader(bars)
        logger.info("loaded %d extension bars (%d requested)", len(extension), bars)

        self._acc = BarAccessor(primary, extension)
        # undersized history is an initialization failure, not a mid-scan one
        if self._acc.primary_size:
            self._acc.ensure_depth(bars_needed(self._acc.primary_size - 1, config))

    @property
    def bar_count(self) -> int:
        return self._acc.primary_size

    def update(self, index: int = 0) -> Classification:
        """Classify bar ``index`` and paint it with the current config."""
        if self._closed:
            raise RuntimeError("indicator is closed")

        result = classify(self._acc, index, self.config)
        self.sink.set_value(index, self._acc.get(index, "volume"))

        if result.category is Category.DEFAULT:
            self.sink.set_bar_color(index, None)
            self.sink.set_marker(index, NEUTRAL_COLOR)
        else:
            color = bar_color(result, self.config)
            self.sink.set_marker(index, color)
            self.sink.set_bar_color(index, color)

        logger.debug(
            "bar %s: %s/%s",
            self._acc.time(index), result.category.value, result.direction.value,
        )
        return result

    def run(self) -> list:
        """Replay every primary bar, oldest first."""
        return [self.update(index) for index in range(self.bar_count - 1, -1, -1)]

    def close(self) -> None:
        if not self._closed:
            self._acc.release()
            self._closed = True
            logger.info("extension history released")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
