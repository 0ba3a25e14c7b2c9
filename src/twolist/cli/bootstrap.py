# src/twolist/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- loads the saved document into a fresh ItemStore,
- wires the debounced saver and the notifier into AppState,
- runs the launch tick.
"""

from __future__ import annotations

import contextlib
import logging
from datetime import datetime

from ..config import get_settings
from ..core.ports import Clock, Notifier
from ..core.state import AppState
from ..engine.scheduler import TickReport, tick
from ..items.store import ItemStore
from ..notifications.console import ConsoleNotifier
from ..persistence.state_file import DebouncedSaver, JsonStateFile, load_into

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.state_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None, notifier: Notifier | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    repo = JsonStateFile(settings.state_path)
    store = ItemStore()
    load_into(store, repo)

    state = AppState(
        settings=settings,
        store=store,
        repo=repo,
        notifier=notifier or ConsoleNotifier(),
    )
    state.saver = DebouncedSaver(
        store,
        repo,
        delay_seconds=float(getattr(settings, "save_debounce_seconds", 0.3)),
        lock=state.lock,
    )
    return state


def on_launch(state: AppState, *, clock: Clock = datetime.now) -> TickReport:
    """Launch/foreground entry: (re)register daily reminders, then tick."""
    times = list(getattr(state.settings, "daily_reminder_times", []) or [])
    try:
        state.notifier.register_daily_reminders(times)
    except Exception:
        logger.exception("Failed to register daily reminders.")

    with state.lock:
        report = tick(state.store, clock(), state.notifier)

    logger.info(
        "Launch tick: promoted=%d generated=%d reminders=%d aged=%d",
        len(report.promoted),
        len(report.generated),
        len(report.reminders),
        len(report.aged),
    )
    return report


def reset_state(state: AppState) -> None:
    """Clear every collection and delete the saved document."""
    with state.lock:
        state.store.reset()
    if state.saver is None:
        with contextlib.suppress(Exception):
            state.repo.delete()


def shutdown(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        if state.saver is not None:
            state.saver.close()
    except Exception:
        logger.exception("Failed to flush state on shutdown.")
