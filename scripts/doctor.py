from __future__ import annotations

import argparse
import sys

from netlabel.core.config import load_config
from netlabel.core.exceptions import ConfigError, SourceUnavailableError
from netlabel.monitoring.counters import make_reader
from netlabel.monitoring.filters import InterfaceFilter, split_fields


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="doctor")
    p.add_argument("--config", type=str, default=None)
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    try:
        cfg = load_config(args.config)
    except ConfigError as exc:
        print(f"[FAIL] Config: {exc}")
        return 2
    print(f"[OK] Config loaded (source={cfg.interfaces.source})")

    reader = make_reader(cfg.interfaces)
    try:
        rows = reader.read_rows()
    except SourceUnavailableError as exc:
        print(f"[FAIL] Counter source: {exc}")
        return 2
    print(f"[OK] Counter source: {len(rows)} rows")

    flt = InterfaceFilter(cfg.interfaces)
    for row in rows:
        fields = split_fields(row)
        if not fields:
            continue
        sample = flt.accept(row)
        if sample is not None:
            print(f"  [OK] {sample.name}: rx={sample.rx_bytes} tx={sample.tx_bytes}")
        else:
            print(f"  [SKIP] {fields[0]}: {flt.exclusion_reason(row)}")

    totals = flt.totals(rows)
    print(f"[OK] Totals: rx={totals.rx_bytes} tx={totals.tx_bytes}")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
