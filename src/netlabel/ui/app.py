from __future__ import annotations

from typing import Any

from textual.app import App, ComposeResult
from textual.widgets import Footer

from netlabel.core.config import AppConfig
from netlabel.engine.poller import NetSpeedPoller, TickCallback, TimerHandle, TimerService
from netlabel.monitoring.counters import CounterReader
from netlabel.ui.widgets import LabelSink, SpeedLabel


class _TextualTimerHandle(TimerHandle):
    def __init__(self, timer: Any) -> None:
        self._timer = timer

    def cancel(self) -> None:
        self._timer.stop()


class TextualTimerService(TimerService):
    """Runs callbacks on the app's event loop via `App.set_interval`."""

    def __init__(self, app: Any) -> None:
        self._app = app

    def schedule(self, interval_seconds: float, callback: TickCallback) -> TimerHandle:
        timer: Any = None

        def _fire() -> None:
            if not callback() and timer is not None:
                timer.stop()

        timer = self._app.set_interval(interval_seconds, _fire)
        return _TextualTimerHandle(timer)


class NetLabelApp(App):
    CSS = """
    Screen { align: right top; }
    #speed { padding: 0 1; }
    """

    BINDINGS = [
        ("r", "reset", "Reset"),
        ("q", "quit_app", "Quit"),
    ]

    def __init__(self, *, config: AppConfig, reader: CounterReader) -> None:
        super().__init__()
        self.config = config
        self.reader = reader
        self.poller: NetSpeedPoller | None = None

    def compose(self) -> ComposeResult:
        yield SpeedLabel(self.config.display.idle_text, id="speed")
        yield Footer()

    def on_mount(self) -> None:
        label = self.query_one("#speed", SpeedLabel)
        self.poller = NetSpeedPoller(config=self.config, reader=self.reader, sink=LabelSink(label))
        self.poller.start(TextualTimerService(self))

    def on_unmount(self) -> None:
        if self.poller is not None:
            self.poller.stop()

    def action_reset(self) -> None:
        if self.poller is not None:
            self.poller.reset()

    def action_quit_app(self) -> None:
        if self.poller is not None:
            self.poller.stop()
        self.exit()
