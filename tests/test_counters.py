from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from netlabel.core.config import InterfaceConfig
from netlabel.core.exceptions import SourceUnavailableError
from netlabel.monitoring import counters
from netlabel.monitoring.counters import PsutilCounterReader, ProcNetDevReader, make_reader
from netlabel.monitoring.filters import AggregateTotals, InterfaceFilter


def _nic(rx: int, tx: int) -> SimpleNamespace:
    return SimpleNamespace(
        bytes_recv=rx,
        bytes_sent=tx,
        packets_recv=1,
        packets_sent=1,
        errin=0,
        errout=0,
        dropin=0,
        dropout=0,
    )


def test_procfs_reader_rows_in_file_order(proc_file: Path) -> None:
    rows = ProcNetDevReader(proc_file).read_rows()
    assert len(rows) == 5
    assert rows[2].strip().startswith("lo:")
    assert rows[3].strip().startswith("eth0:")


def test_procfs_reader_feeds_filter(proc_file: Path) -> None:
    rows = ProcNetDevReader(proc_file).read_rows()
    assert InterfaceFilter().totals(rows) == AggregateTotals(rx_bytes=100, tx_bytes=50)


def test_procfs_reader_missing_file(tmp_path: Path) -> None:
    with pytest.raises(SourceUnavailableError):
        ProcNetDevReader(tmp_path / "nope").read_rows()


def test_procfs_reader_empty_file(tmp_path: Path) -> None:
    p = tmp_path / "dev"
    p.write_text("", encoding="utf-8")
    with pytest.raises(SourceUnavailableError):
        ProcNetDevReader(p).read_rows()


def test_procfs_reader_undecodable_file(tmp_path: Path) -> None:
    p = tmp_path / "dev"
    p.write_bytes(b"\xff\xfe\xfa")
    with pytest.raises(SourceUnavailableError):
        ProcNetDevReader(p).read_rows()


def test_psutil_reader_rows_parse_like_procfs(monkeypatch) -> None:
    fake = {"lo": _nic(999, 999), "eth0": _nic(100, 50), "virbr0": _nic(5000, 5000)}
    monkeypatch.setattr(counters.psutil, "net_io_counters", lambda pernic=False: fake)

    rows = PsutilCounterReader().read_rows()
    assert len(rows) == 3
    assert InterfaceFilter().totals(rows) == AggregateTotals(rx_bytes=100, tx_bytes=50)


def test_psutil_reader_failure(monkeypatch) -> None:
    def _boom(pernic: bool = False) -> dict:
        raise OSError("no permission")

    monkeypatch.setattr(counters.psutil, "net_io_counters", _boom)
    with pytest.raises(SourceUnavailableError):
        PsutilCounterReader().read_rows()


def test_psutil_reader_no_interfaces(monkeypatch) -> None:
    monkeypatch.setattr(counters.psutil, "net_io_counters", lambda pernic=False: {})
    with pytest.raises(SourceUnavailableError):
        PsutilCounterReader().read_rows()


def test_make_reader_selects_backend(tmp_path: Path) -> None:
    r = make_reader(InterfaceConfig(proc_path=str(tmp_path / "dev")))
    assert isinstance(r, ProcNetDevReader)
    assert r.path == tmp_path / "dev"
    assert isinstance(make_reader(InterfaceConfig(source="psutil")), PsutilCounterReader)
