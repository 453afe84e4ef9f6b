from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable

from netlabel.core.config import InterfaceConfig
from netlabel.core.exceptions import RowParseError

MIN_FIELDS = 10
RX_FIELD = 1
TX_FIELD = 9


@dataclass(frozen=True)
class InterfaceSample:
    name: str
    rx_bytes: int
    tx_bytes: int


@dataclass(frozen=True)
class AggregateTotals:
    rx_bytes: int = 0
    tx_bytes: int = 0


def split_fields(row: str) -> list[str]:
    # "  eth0: 1234 5 0 ..." -> ["eth0", "1234", "5", "0", ...]
    name, sep, counters = row.partition(":")
    if not sep:
        return []
    return [name.strip(), *counters.split()]


def _counter(raw: str, what: str) -> int:
    try:
        value = int(raw)
    except ValueError as exc:
        raise RowParseError(f"{what} is not an integer: {raw!r}") from exc
    if value < 0:
        raise RowParseError(f"{what} is negative: {value}")
    return value


def parse_row(row: str) -> InterfaceSample:
    fields = split_fields(row)
    if len(fields) < MIN_FIELDS:
        raise RowParseError(f"expected at least {MIN_FIELDS} fields, got {len(fields)}")
    return InterfaceSample(
        name=fields[0],
        rx_bytes=_counter(fields[RX_FIELD], "rx bytes"),
        tx_bytes=_counter(fields[TX_FIELD], "tx bytes"),
    )


class InterfaceFilter:
    def __init__(self, cfg: InterfaceConfig | None = None) -> None:
        cfg = cfg or InterfaceConfig()
        self.loopback_name = cfg.loopback_name
        prefixes = "|".join(re.escape(p) for p in cfg.virtual_prefixes)
        self._virtual_re = re.compile(rf"^(?:{prefixes})\d+") if prefixes else None

    def is_excluded_name(self, name: str) -> bool:
        if name == self.loopback_name:
            return True
        return bool(self._virtual_re and self._virtual_re.match(name))

    def exclusion_reason(self, row: str) -> str | None:
        """Returns why a row is skipped, or None if it counts towards the totals."""
        fields = split_fields(row)
        if len(fields) < MIN_FIELDS:
            return "malformed"
        name = fields[0]
        if name == self.loopback_name:
            return "loopback"
        if self.is_excluded_name(name):
            return "virtual"
        try:
            _counter(fields[RX_FIELD], "rx bytes")
            _counter(fields[TX_FIELD], "tx bytes")
        except RowParseError:
            return "bad counters"
        return None

    def accept(self, row: str) -> InterfaceSample | None:
        if self.exclusion_reason(row) is not None:
            return None
        return parse_row(row)

    def totals(self, rows: Iterable[str]) -> AggregateTotals:
        rx = 0
        tx = 0
        for row in rows:
            sample = self.accept(row)
            if sample is None:
                continue
            rx += sample.rx_bytes
            tx += sample.tx_bytes
        return AggregateTotals(rx_bytes=rx, tx_bytes=tx)
