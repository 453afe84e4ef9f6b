from __future__ import annotations

from dataclasses import dataclass

from netlabel.core.config import DisplayConfig
from netlabel.monitoring.estimator import RateEstimate

SPEED_UNITS = ("B/s", "KiB/s", "MiB/s", "GiB/s", "TiB/s", "PiB/s", "EiB/s", "ZiB/s", "YiB/s")


def format_rate(bytes_per_sec: float) -> str:
    amount = float(bytes_per_sec)
    unit = 0
    while amount >= 1024 and unit < len(SPEED_UNITS) - 1:
        amount /= 1024
        unit += 1
    return f"{amount:.0f} {SPEED_UNITS[unit]}"


@dataclass
class HysteresisState:
    last_down_active_us: int | None = None
    last_up_active_us: int | None = None


class SpeedFormatter:
    """Turns a rate estimate into the indicator text, holding a direction
    visible for `hide_seconds` after it last went above `min_speed_bytes`."""

    def __init__(self, cfg: DisplayConfig | None = None) -> None:
        self.cfg = cfg or DisplayConfig()
        self.state = HysteresisState()

    def reset(self) -> None:
        self.state = HysteresisState()

    def _idle(self, last_active_us: int | None, now_us: int) -> bool:
        if last_active_us is None:
            return True
        return last_active_us < now_us - self.cfg.hide_seconds * 1e6

    def to_display_string(self, estimate: RateEstimate, now_us: int) -> str:
        down = max(estimate.down_bps, 0.0)
        up = max(estimate.up_bps, 0.0)
        if down > self.cfg.min_speed_bytes:
            self.state.last_down_active_us = now_us
        if up > self.cfg.min_speed_bytes:
            self.state.last_up_active_us = now_us

        down_idle = self._idle(self.state.last_down_active_us, now_us)
        if self.cfg.shared_idle_timestamp:
            up_idle = self._idle(self.state.last_down_active_us, now_us)
        else:
            up_idle = self._idle(self.state.last_up_active_us, now_us)

        down_text = f"{self.cfg.down_glyph} {format_rate(down)}"
        up_text = f"{self.cfg.up_glyph} {format_rate(up)}"
        if down_idle and up_idle:
            return self.cfg.idle_text
        if down_idle:
            return up_text
        if up_idle:
            return down_text
        return f"{down_text} {up_text}"
