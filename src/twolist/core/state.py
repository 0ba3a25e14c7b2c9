# src/twolist/core/state.py

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from ..items.store import ItemStore
from ..persistence.state_file import DebouncedSaver, JsonStateFile
from .ports import Notifier


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: Any

    store: ItemStore
    repo: JsonStateFile
    notifier: Notifier
    saver: DebouncedSaver | None = None

    # Single writer: console commands, the ticker thread and the save timer all take this.
    lock: threading.RLock = field(default_factory=threading.RLock)
