from __future__ import annotations

import sys
from typing import TextIO

from textual.widgets import Static

from netlabel.engine.poller import DisplaySink


class SpeedLabel(Static):
    DEFAULT_CSS = """
    SpeedLabel {
        width: auto;
        height: 1;
        content-align: center middle;
    }
    """


class LabelSink(DisplaySink):
    def __init__(self, label: Static) -> None:
        self._label: Static | None = label

    def set_text(self, text: str) -> None:
        if self._label is not None:
            self._label.update(text)

    def close(self) -> None:
        self._label = None


class ConsoleSink(DisplaySink):
    """Writes the indicator text as a line whenever it changes."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream or sys.stdout
        self._last: str | None = None

    @property
    def last_text(self) -> str | None:
        return self._last

    def set_text(self, text: str) -> None:
        if text == self._last:
            return
        self._last = text
        self._stream.write(text + "\n")
        self._stream.flush()

    def close(self) -> None:
        self._stream.flush()
