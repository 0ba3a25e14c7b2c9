# tests/conftest.py

from __future__ import annotations

from datetime import datetime, time
from pathlib import Path
from types import SimpleNamespace

import pytest

from twolist.core.state import AppState
from twolist.items.store import ItemStore
from twolist.persistence.state_file import DebouncedSaver, JsonStateFile

from .fakes import RecordingNotifier


@pytest.fixture()
def now() -> datetime:
    # A Saturday, mid-morning.
    return datetime(2026, 10, 17, 10, 30)


@pytest.fixture()
def store() -> ItemStore:
    return ItemStore()


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="twolist-test",
        data_dir=tmp_path,
        state_path=tmp_path / "state.json",
        save_debounce_seconds=0.01,
        tick_interval_seconds=60.0,
        daily_reminder_times=[time(9, 0), time(20, 0)],
        console_enabled=False,
        ticker_enabled=False,
    )


@pytest.fixture()
def state(settings: SimpleNamespace) -> AppState:
    """
    AppState wired with a recording notifier.

    NOTE: We keep the real JSON state file (in tmp_path) but no saver;
    saver behaviour is covered in test_persistence.py.
    """
    return AppState(
        settings=settings,
        store=ItemStore(),
        repo=JsonStateFile(settings.state_path),
        notifier=RecordingNotifier(),
    )


@pytest.fixture()
def saved_state(state: AppState) -> AppState:
    state.saver = DebouncedSaver(state.store, state.repo, delay_seconds=0.01, lock=state.lock)
    return state
