from __future__ import annotations

import logging
from pathlib import Path

import pytest

PROC_NET_DEV = """\
Inter-|   Receive                                                |  Transmit
 face |bytes    packets errs drop fifo frame compressed multicast|bytes    packets errs drop fifo colls carrier compressed
    lo:     999       9    0    0    0     0          0         0      999       9    0    0    0     0       0          0
  eth0:     100       1    0    0    0     0          0         0       50       1    0    0    0     0       0          0
   br0: 7777777      77    0    0    0     0          0         0  7777777      77    0    0    0     0       0          0
"""


@pytest.fixture
def proc_file(tmp_path: Path) -> Path:
    p = tmp_path / "dev"
    p.write_text(PROC_NET_DEV, encoding="utf-8")
    return p


@pytest.fixture(autouse=True)
def _restore_root_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
