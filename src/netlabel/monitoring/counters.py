from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path

import psutil

from netlabel.core.config import InterfaceConfig
from netlabel.core.exceptions import SourceUnavailableError

_log = logging.getLogger("netlabel.counters")


class CounterReader(ABC):
    @abstractmethod
    def read_rows(self) -> list[str]:
        raise NotImplementedError


class ProcNetDevReader(CounterReader):
    """Reads the kernel's per-interface counter table, one row per line."""

    def __init__(self, path: str | Path = "/proc/net/dev") -> None:
        self.path = Path(path)

    def read_rows(self) -> list[str]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise SourceUnavailableError(f"cannot read {self.path}: {exc}") from exc
        rows = text.splitlines()
        if not rows:
            raise SourceUnavailableError(f"{self.path} is empty")
        return rows


class PsutilCounterReader(CounterReader):
    """
    Portable backend for hosts without procfs. Each NIC is rendered as a
    /proc/net/dev shaped row so the same filter rules apply.
    """

    def read_rows(self) -> list[str]:
        try:
            per_nic = psutil.net_io_counters(pernic=True)
        except (OSError, RuntimeError) as exc:
            raise SourceUnavailableError(f"psutil.net_io_counters failed: {exc}") from exc
        if not per_nic:
            raise SourceUnavailableError("psutil reported no interfaces")
        rows = []
        for name, c in per_nic.items():
            rows.append(
                f"{name}: {c.bytes_recv} {c.packets_recv} {c.errin} {c.dropin} 0 0 0 0 "
                f"{c.bytes_sent} {c.packets_sent} {c.errout} {c.dropout} 0 0 0 0"
            )
        return rows


def make_reader(cfg: InterfaceConfig) -> CounterReader:
    if cfg.source == "psutil":
        return PsutilCounterReader()
    _log.debug("using procfs counters", extra={"path": cfg.proc_path})
    return ProcNetDevReader(cfg.proc_path)
