from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from netlabel.monitoring.filters import AggregateTotals

# Totals are kept modulo 2**64; a sum past that registers as a counter reset.
COUNTER_WRAP = 2**64


@dataclass(frozen=True)
class RateEstimate:
    down_bps: float = 0.0
    up_bps: float = 0.0


class SampleWindow:
    """
    Fixed-capacity FIFO of cumulative (rx, tx) totals.

    Backed by preallocated (capacity, 2) uint64 arenas and a write index.
    Alongside each total the arena keeps the clamped growth from the sample
    before it, and the window keeps a running sum of that growth over its
    consecutive pairs, so a push is O(1).
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 2:
            raise ValueError("capacity must be >= 2")
        self.capacity = int(capacity)
        self._totals = np.zeros((self.capacity, 2), dtype=np.uint64)
        self._growth = np.zeros((self.capacity, 2), dtype=np.uint64)
        self._growth_sum = [0, 0]
        self._write = 0
        self._count = 0

    def __len__(self) -> int:
        return self._count

    def is_full(self) -> bool:
        return self._count == self.capacity

    def clear(self) -> None:
        self._totals.fill(0)
        self._growth.fill(0)
        self._growth_sum = [0, 0]
        self._write = 0
        self._count = 0

    def push(self, totals: AggregateTotals) -> int:
        """Appends totals, evicting the oldest at capacity. Returns how many
        counters went backwards against the previous newest sample."""
        new = (totals.rx_bytes % COUNTER_WRAP, totals.tx_bytes % COUNTER_WRAP)
        prev = self._newest_index()
        if self.is_full():
            # the slot after the evicted one becomes the oldest and loses its pair
            oldest = (self._write + 1) % self.capacity
            for c in (0, 1):
                self._growth_sum[c] -= int(self._growth[oldest, c])
            self._growth[oldest] = 0

        regressions = 0
        for c in (0, 1):
            grown = 0
            if prev is not None:
                before = int(self._totals[prev, c])
                if new[c] >= before:
                    grown = new[c] - before
                else:
                    regressions += 1
            self._totals[self._write, c] = new[c]
            self._growth[self._write, c] = grown
            self._growth_sum[c] += grown

        self._write = (self._write + 1) % self.capacity
        self._count = min(self._count + 1, self.capacity)
        return regressions

    def growth(self) -> tuple[int, int]:
        """Sum of clamped (rx, tx) growth over consecutive retained pairs."""
        return self._growth_sum[0], self._growth_sum[1]

    def ordered(self) -> np.ndarray:
        """Oldest -> newest copy of the retained totals."""
        if not self.is_full():
            return self._totals[: self._count].copy()
        return np.concatenate((self._totals[self._write :], self._totals[: self._write]))

    def _newest_index(self) -> int | None:
        if self._count == 0:
            return None
        return (self._write - 1) % self.capacity

    def newest(self) -> AggregateTotals | None:
        i = self._newest_index()
        if i is None:
            return None
        return AggregateTotals(rx_bytes=int(self._totals[i, 0]), tx_bytes=int(self._totals[i, 1]))


class RateEstimator:
    """
    Smoothed transfer rate over the last `history_depth` cumulative totals.

    The window starts pre-filled with zero totals and the rate is always the
    clamped growth divided by the full window span, (N - 1) intervals. The
    first window of output therefore includes the jump from zero to the
    counters at process start.
    """

    def __init__(self, history_depth: int = 10, sample_interval_seconds: float = 0.1) -> None:
        if history_depth < 2:
            raise ValueError("history_depth must be >= 2")
        if sample_interval_seconds <= 0:
            raise ValueError("sample_interval_seconds must be > 0")
        self.history_depth = int(history_depth)
        self.sample_interval_seconds = float(sample_interval_seconds)
        self.span_seconds = (self.history_depth - 1) * self.sample_interval_seconds
        self._window = SampleWindow(self.history_depth)
        self.counter_resets = 0
        self._log = logging.getLogger("netlabel.estimator")
        self.reset()

    def reset(self) -> None:
        self._window.clear()
        for _ in range(self.history_depth):
            self._window.push(AggregateTotals())
        self.counter_resets = 0

    @property
    def window(self) -> SampleWindow:
        return self._window

    def on_tick(self, totals: AggregateTotals) -> RateEstimate:
        resets = self._window.push(totals)
        if resets:
            # A counter that went backwards contributes zero for that pair.
            self.counter_resets += resets
            self._log.debug("counter reset clamped", extra={"resets": self.counter_resets})
        down, up = self._window.growth()
        return RateEstimate(down_bps=down / self.span_seconds, up_bps=up / self.span_seconds)

    def skip_tick(self) -> None:
        """Keeps the window on cadence across a failed read by repeating the
        newest totals as a zero-growth sample."""
        newest = self._window.newest()
        if newest is not None:
            self._window.push(newest)
