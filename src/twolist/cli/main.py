# src/twolist/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState (loading the saved document), runs the
launch tick, then starts:
- the periodic ticker in a background thread (optional),
- the console REPL in the main thread (optional).
"""

from __future__ import annotations

import logging
import signal
import threading

from ..cli.bootstrap import create_initial_state, on_launch, shutdown
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..engine.scheduler import TickerRunner, start_ticker_in_background
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()

    # choose console log level from settings.log_level
    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    log_dir = getattr(settings, "data_dir", ".local/twolist")
    setup_logging(log_dir=log_dir, console_level=console_level)

    logger.info("Starting %s...", getattr(settings, "app_name", "twolist"))

    # IMPORTANT: reuse same settings object
    state = create_initial_state(settings=settings)
    on_launch(state)

    ticker: TickerRunner | None = None
    if settings.ticker_enabled:
        ticker = start_ticker_in_background(
            state.store,
            lock=state.lock,
            notifier=state.notifier,
            interval_seconds=settings.tick_interval_seconds,
        )

    # Use an Event so main can wait without a busy while-loop.
    stop_main = threading.Event()

    def _handle_signal(signum, _frame) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop_main.set()

    try:
        signal.signal(signal.SIGINT, _handle_signal)
        signal.signal(signal.SIGTERM, _handle_signal)
    except (ValueError, OSError):
        # Not in the main thread, or the platform lacks SIGTERM.
        pass

    try:
        if settings.console_enabled:
            run_console_loop(state)
            stop_main.set()
        else:
            logger.info("Console disabled. Running the ticker only. Press Ctrl+C to stop.")
            stop_main.wait()

    finally:
        if ticker is not None:
            ticker.stop()
            ticker.join(timeout=10.0)

        shutdown(state)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
