from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable

from netlabel.core.config import AppConfig
from netlabel.core.exceptions import SourceUnavailableError
from netlabel.core.utils import monotonic_us
from netlabel.monitoring.counters import CounterReader
from netlabel.monitoring.estimator import RateEstimate, RateEstimator
from netlabel.monitoring.filters import InterfaceFilter
from netlabel.monitoring.formatting import SpeedFormatter

TickCallback = Callable[[], bool]


class DisplaySink(ABC):
    @abstractmethod
    def set_text(self, text: str) -> None:
        raise NotImplementedError

    def close(self) -> None:
        return None


class TimerHandle(ABC):
    @abstractmethod
    def cancel(self) -> None:
        raise NotImplementedError


class TimerService(ABC):
    @abstractmethod
    def schedule(self, interval_seconds: float, callback: TickCallback) -> TimerHandle:
        raise NotImplementedError


class _LoopHandle(TimerHandle):
    def __init__(self, stop: threading.Event) -> None:
        self._stop = stop

    def cancel(self) -> None:
        self._stop.set()


class LoopTimerService(TimerService):
    """
    Headless timer: `run_forever()` blocks the calling thread and fires the
    scheduled callback every interval until cancelled or the callback
    returns False. Ticks never overlap.
    """

    def __init__(self) -> None:
        self._stop = threading.Event()
        self._interval: float | None = None
        self._callback: TickCallback | None = None

    def schedule(self, interval_seconds: float, callback: TickCallback) -> TimerHandle:
        if self._callback is not None:
            raise RuntimeError("LoopTimerService runs a single callback")
        self._interval = float(interval_seconds)
        self._callback = callback
        self._stop.clear()
        return _LoopHandle(self._stop)

    def run_forever(self) -> None:
        if self._callback is None or self._interval is None:
            raise RuntimeError("nothing scheduled")
        while not self._stop.wait(self._interval):
            if not self._callback():
                break
        self._callback = None


class NetSpeedPoller:
    def __init__(
        self,
        *,
        config: AppConfig,
        reader: CounterReader,
        sink: DisplaySink,
        clock: Callable[[], int] = monotonic_us,
    ) -> None:
        self.config = config
        self.reader = reader
        self.sink = sink
        self._clock = clock
        self._filter = InterfaceFilter(config.interfaces)
        self._estimator = RateEstimator(
            history_depth=config.sampler.history_depth,
            sample_interval_seconds=config.sampler.sample_interval_seconds,
        )
        self._formatter = SpeedFormatter(config.display)
        self._timer: TimerHandle | None = None
        self._closed = False
        self._log = logging.getLogger("netlabel.poller")

    @property
    def estimator(self) -> RateEstimator:
        return self._estimator

    def reset(self) -> None:
        self._estimator.reset()
        self._formatter.reset()
        self._log.info("sampler reset")

    def estimate(self) -> RateEstimate:
        try:
            rows = self.reader.read_rows()
        except SourceUnavailableError as exc:
            self._log.warning("counter source unavailable: %s", exc)
            self._estimator.skip_tick()
            return RateEstimate()
        totals = self._filter.totals(rows)
        return self._estimator.on_tick(totals)

    def sample(self) -> str:
        return self._formatter.to_display_string(self.estimate(), self._clock())

    def on_tick(self) -> bool:
        self.sink.set_text(self.sample())
        return True

    def start(self, timers: TimerService) -> TimerHandle:
        if self._timer is not None:
            return self._timer
        self.sink.set_text(self.config.display.idle_text)
        self._timer = timers.schedule(self.config.sampler.sample_interval_seconds, self.on_tick)
        self._log.info(
            "poller started",
            extra={
                "interval_s": self.config.sampler.sample_interval_seconds,
                "history_depth": self.config.sampler.history_depth,
            },
        )
        return self._timer

    def stop(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if not self._closed:
            self.sink.close()
            self._closed = True
            self._log.info("poller stopped")
