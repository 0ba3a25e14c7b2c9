# src/twolist/persistence/state_file.py

from __future__ import annotations

import contextlib
import json
import logging
import os
import threading
from collections.abc import Callable
from pathlib import Path

from ..items.models import ListCollections, ListKind
from ..items.store import ItemStore, StoreChange
from .codec import decode_document, encode_document

logger = logging.getLogger(__name__)


class JsonStateFile:
    """
    The whole app state as one JSON file.

    - load() never raises: a missing or unreadable file is "no prior state"
    - save() writes atomically (tmp file + os.replace)
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> tuple[dict[ListKind, ListCollections], ListKind]:
        empty: tuple[dict[ListKind, ListCollections], ListKind] = (
            {kind: ListCollections() for kind in ListKind},
            ListKind.TASKS,
        )
        if not self._path.exists():
            logger.info("No saved state at %s; starting empty", self._path)
            return empty
        try:
            data = json.loads(self._path.read_text("utf-8"))
            lists, tab = decode_document(data)
        except Exception:
            logger.exception("Failed to load state from %s; starting empty", self._path)
            return empty

        total = sum(len(c.live_items()) + len(c.archive) for c in lists.values())
        logger.info("Loaded state: %d items from %s", total, self._path)
        return lists, tab

    def save(self, lists: dict[ListKind, ListCollections], selected_tab: ListKind) -> None:
        doc = encode_document(lists, selected_tab)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(".tmp")
        tmp.write_text(json.dumps(doc, ensure_ascii=False, indent=2), "utf-8")
        os.replace(tmp, self._path)
        with contextlib.suppress(Exception):
            os.chmod(self._path, 0o600)
        logger.debug("Saved state to %s", self._path)

    def delete(self) -> None:
        with contextlib.suppress(FileNotFoundError):
            self._path.unlink()
        logger.info("Deleted saved state %s", self._path)


def load_into(store: ItemStore, repo: JsonStateFile) -> None:
    lists, tab = repo.load()
    store.replace_all(lists, tab)


class DebouncedSaver:
    """
    Store subscriber that coalesces bursts of mutations into one write.

    Every change (re)starts a timer; the write happens after `delay_seconds`
    of quiescence. A "reset" change deletes the file instead of writing.
    The snapshot is taken under `lock` so it never sees a half-applied mutation.
    """

    def __init__(
        self,
        store: ItemStore,
        repo: JsonStateFile,
        *,
        delay_seconds: float = 0.3,
        lock: threading.RLock | None = None,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
    ) -> None:
        self._store = store
        self._repo = repo
        self._delay = max(0.0, float(delay_seconds))
        self._lock = lock or threading.RLock()
        self._timer_factory = timer_factory
        self._timer: threading.Timer | None = None
        self._pending = False
        self._guard = threading.Lock()
        self._generation = 0
        self._unsubscribe = store.subscribe(self._on_change)
        self.writes = 0

    def _on_change(self, change: StoreChange) -> None:
        if change.action == "reset":
            self._cancel_timer()
            with self._guard:
                self._pending = False
                self._generation += 1
            try:
                self._repo.delete()
            except Exception:
                logger.exception("Failed to delete saved state")
            return
        self.schedule()

    def schedule(self) -> None:
        with self._guard:
            self._pending = True
            if self._timer is not None:
                self._timer.cancel()
            timer = self._timer_factory(self._delay, self.flush)
            timer.daemon = True
            self._timer = timer
        timer.start()

    def flush(self) -> bool:
        """Write now if anything is pending. Returns True if a write happened."""
        with self._guard:
            if not self._pending:
                return False
            self._pending = False
            self._timer = None
            generation = self._generation

        try:
            with self._lock:
                with self._guard:
                    # A reset landed while this flush waited for the lock.
                    if generation != self._generation:
                        return False
                self._repo.save(
                    {kind: self._store.lists(kind) for kind in ListKind},
                    self._store.selected_tab,
                )
            self.writes += 1
            return True
        except Exception:
            logger.exception("Failed to save state to %s", self._repo.path)
            return False

    def _cancel_timer(self) -> None:
        with self._guard:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def close(self) -> None:
        """Stop listening and write whatever is pending."""
        self._unsubscribe()
        self._cancel_timer()
        self.flush()
