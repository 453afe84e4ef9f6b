from __future__ import annotations

import argparse
import logging
import signal
import sys

from netlabel.core.config import load_config
from netlabel.core.exceptions import ConfigError
from netlabel.core.utils import platform_summary, setup_logging
from netlabel.engine.poller import LoopTimerService, NetSpeedPoller
from netlabel.monitoring.counters import make_reader
from netlabel.ui.widgets import ConsoleSink


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="netlabel")
    p.add_argument("--config", type=str, default=None, help="Path to config.yaml")
    p.add_argument("--no-ui", action="store_true", help="Print speed lines instead of the TUI")
    p.add_argument("--log-level", type=str, default=None)
    return p.parse_args(argv)


def run_headless(poller: NetSpeedPoller, timers: LoopTimerService) -> None:
    handle = poller.start(timers)

    def _handle_sig(signum: int, _frame: object) -> None:
        logging.getLogger("netlabel").warning("shutdown requested", extra={"signal": signum})
        handle.cancel()

    signal.signal(signal.SIGINT, _handle_sig)
    signal.signal(signal.SIGTERM, _handle_sig)
    try:
        timers.run_forever()
    finally:
        poller.stop()


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    try:
        config = load_config(args.config)
    except ConfigError as exc:
        setup_logging(args.log_level or "INFO")
        logging.getLogger("netlabel").error("invalid configuration: %s", exc)
        return 2

    setup_logging(args.log_level or config.logging.level, config.logging.log_dir)
    log = logging.getLogger("netlabel")
    log.info("starting", extra={"platform": dict(platform_summary())})

    reader = make_reader(config.interfaces)
    if config.ui.enabled and not args.no_ui:
        from netlabel.ui.app import NetLabelApp

        NetLabelApp(config=config, reader=reader).run()
    else:
        poller = NetSpeedPoller(config=config, reader=reader, sink=ConsoleSink())
        run_headless(poller, LoopTimerService())

    log.info("stopped")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
