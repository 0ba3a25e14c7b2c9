# src/twolist/engine/scheduler.py

from __future__ import annotations

"""
Scheduler trigger and the `tick` entry point.

tick(now) is what the host calls on launch and whenever the app comes back to
the foreground:
- promote deferred items whose scheduled day has come,
- let every recurring series generate or remind,
- age stale priorities,
- hand reminders to the notifier.

run_tick_loop is a small polling loop standing in for "periodic re-entry into foreground".
"""

import asyncio
import contextlib
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime

from ..core.ports import Clock, Notifier
from ..items.models import Item, ItemStatus, ListKind, Location, ReminderEvent
from ..items.store import ItemStore
from .aging import age_priorities
from .recurrence import process_series

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TickReport:
    promoted: list[Item] = field(default_factory=list)
    generated: list[Item] = field(default_factory=list)
    reminders: list[ReminderEvent] = field(default_factory=list)
    aged: list[Item] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.promoted or self.generated or self.aged)


def promote_scheduled(
    deferred_items: list[Item],
    active_items: list[Item],
    now: datetime,
) -> tuple[list[Item], list[Item], list[Item]]:
    """
    Move deferred items whose scheduled day is today or earlier into the work area.

    Promoted items lose their scheduled_date, become ACTIVE and go to the front.
    An item whose id is already in active_items is dropped from the deferred
    list without being inserted again.
    An instance of a series that already has an item in active_items stays
    deferred until that item leaves the work area.

    Returns (deferred_items, active_items, promoted), lists mutated in place.
    """
    today = now.date()
    active_ids = {item.id for item in active_items}
    open_series = {item.series_id for item in active_items if item.series_id}
    promoted: list[Item] = []
    remaining: list[Item] = []

    for item in deferred_items:
        if item.scheduled_date is None or item.scheduled_date > today:
            remaining.append(item)
            continue

        if item.id in active_ids:
            logger.debug("Deferred item %s already in work area; dropping duplicate", item.id)
            continue

        if item.series_id is not None and item.series_id in open_series:
            logger.debug("Deferred item %s waits for its series instance to finish", item.id)
            remaining.append(item)
            continue

        item.scheduled_date = None
        item.status = ItemStatus.ACTIVE
        active_items.insert(0, item)
        active_ids.add(item.id)
        if item.series_id is not None:
            open_series.add(item.series_id)
        promoted.append(item)
        logger.info("Promoted scheduled item id=%s title=%r", item.id, item.title)

    deferred_items[:] = remaining
    return deferred_items, active_items, promoted


def tick(store: ItemStore, now: datetime, notifier: Notifier | None = None) -> TickReport:
    """Run every engine pass for every list, in order, then notify."""
    report = TickReport()

    for kind in ListKind:
        lists = store.lists(kind)

        _, _, promoted = promote_scheduled(lists.scheduled, lists.working, now)
        report.promoted.extend(promoted)

        result = process_series(lists.series, lists.working, now, kind=kind)
        report.generated.extend(result.generated)
        report.reminders.extend(result.reminders)

        report.aged.extend(age_priorities([*lists.backlog, *lists.working], now))

    if notifier is not None:
        for event in report.reminders:
            try:
                notifier.notify_series_still_active(event)
            except Exception:
                logger.exception("notify_series_still_active failed series_id=%s", event.series_id)

    logger.debug(
        "tick now=%s promoted=%d generated=%d reminders=%d aged=%d",
        now.isoformat(),
        len(report.promoted),
        len(report.generated),
        len(report.reminders),
        len(report.aged),
    )
    if report.changed:
        store.notify("tick")
    return report


async def run_tick_loop(
    store: ItemStore,
    *,
    clock: Clock = datetime.now,
    notifier: Notifier | None = None,
    lock: threading.RLock | None = None,
    interval_seconds: float = 60.0,
) -> None:
    """
    Simple polling loop: call tick(clock()) every interval_seconds.

    tick runs under `lock` when given, so the console and this loop never mutate
    the store at the same time. To stop the loop, cancel the coroutine/task.
    """
    sleep_s = max(0.01, float(interval_seconds))

    while True:
        try:
            if lock is not None:
                with lock:
                    tick(store, clock(), notifier)
            else:
                tick(store, clock(), notifier)
        except Exception:
            logger.exception("tick failed")

        await asyncio.sleep(sleep_s)


@dataclass
class TickerRunner:
    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    task: asyncio.Task

    def stop(self) -> None:
        try:
            self.loop.call_soon_threadsafe(self.task.cancel)
        except Exception:
            logger.debug("Failed to signal ticker stop.", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


def start_ticker_in_background(
    store: ItemStore,
    *,
    lock: threading.RLock,
    notifier: Notifier | None = None,
    interval_seconds: float = 60.0,
) -> TickerRunner | None:
    """
    Start run_tick_loop on its own event loop in a daemon thread.

    The console REPL blocks on input(), so periodic ticks need their own thread.
    """
    ready = threading.Event()
    holder: dict[str, object] = {}

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        task = loop.create_task(
            run_tick_loop(
                store,
                notifier=notifier,
                lock=lock,
                interval_seconds=interval_seconds,
            )
        )
        holder["loop"] = loop
        holder["task"] = task
        ready.set()

        try:
            with contextlib.suppress(asyncio.CancelledError):
                loop.run_until_complete(task)
        finally:
            with contextlib.suppress(Exception):
                loop.close()

    t = threading.Thread(target=runner, name="twolist-ticker", daemon=True)
    t.start()

    ready.wait(timeout=5.0)
    loop = holder.get("loop")
    task = holder.get("task")

    if not isinstance(loop, asyncio.AbstractEventLoop) or not isinstance(task, asyncio.Task):
        logger.error("Ticker thread did not initialize properly.")
        return None

    logger.info("Ticker background thread started (interval=%ss).", interval_seconds)
    return TickerRunner(thread=t, loop=loop, task=task)
