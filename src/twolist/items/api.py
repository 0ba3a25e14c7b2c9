# src/twolist/items/api.py

from __future__ import annotations

"""
Edit-boundary helpers used by front-ends.

Validation happens here, not in the engines: an empty title simply produces
no item (None), never an exception.
"""

import logging
from datetime import date, datetime
from typing import Any

from ..engine.selection import lowest_hanging_fruit, top_recommendation
from .models import (
    MAX_PRIORITY,
    MIN_PRIORITY,
    FrequencyMode,
    Item,
    ListKind,
    Location,
    RecurringSeries,
    Subtask,
    Weekday,
)
from .store import ItemStore

logger = logging.getLogger(__name__)


def parse_priority(value: Any) -> int:
    """Lenient priority input: anything non-numeric is 1, numbers clamp to 1..5."""
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        return MIN_PRIORITY
    return max(MIN_PRIORITY, min(MAX_PRIORITY, parsed))


def clean_title(title: str | None) -> str:
    return (title or "").strip()


def create_item(
    store: ItemStore,
    kind: ListKind,
    title: str | None,
    *,
    now: datetime,
    priority: Any = MIN_PRIORITY,
    due_date: date | None = None,
    estimate_minutes: int | None = None,
    scheduled_date: date | None = None,
    location: Location = Location.BACKLOG,
) -> Item | None:
    """
    Create an item at the front of a list.

    A scheduled_date in the future sends the item to the scheduled set
    regardless of `location`; it enters the work area on that day.
    """
    text = clean_title(title)
    if not text:
        logger.debug("Rejected item with empty title")
        return None
    if estimate_minutes is not None and estimate_minutes <= 0:
        estimate_minutes = None

    target = location
    if scheduled_date is not None and scheduled_date > now.date():
        target = Location.SCHEDULED
    elif scheduled_date is not None:
        scheduled_date = None

    item = Item.create(
        text,
        now,
        priority=parse_priority(priority),
        due_date=due_date,
        estimate_minutes=estimate_minutes,
        scheduled_date=scheduled_date,
    )
    return store.insert(kind, target, item, front=True)


def rename_item(store: ItemStore, item_id: str, title: str | None) -> Item | None:
    text = clean_title(title)
    if not text:
        return None
    return store.update(item_id, title=text)


def add_subtask(store: ItemStore, item_id: str, title: str | None) -> Subtask | None:
    text = clean_title(title)
    if not text:
        return None
    return store.add_subtask(item_id, Subtask(title=text))


def create_series(
    store: ItemStore,
    kind: ListKind,
    title: str | None,
    *,
    now: datetime,
    priority: Any = MIN_PRIORITY,
    interval_days: int | None = None,
    weekdays: list[str | int] | None = None,
    due_offset_days: int | None = None,
    last_generated: datetime | None = None,
) -> RecurringSeries | None:
    """
    Create a recurring series.

    Exactly one of interval_days / weekdays selects the mode. The series starts
    "as if generated" at `last_generated` (default: now), so the first item
    appears on the next occurrence, not immediately.
    """
    text = clean_title(title)
    if not text:
        return None

    if weekdays:
        try:
            days = frozenset(Weekday.parse(d) for d in weekdays)
        except ValueError:
            logger.debug("Rejected series with invalid weekdays %r", weekdays)
            return None
        mode = FrequencyMode.WEEKLY_ON_DAYS
        interval = 1
    else:
        days = frozenset()
        mode = FrequencyMode.EVERY_N_DAYS
        interval = max(1, int(interval_days or 1))

    series = RecurringSeries(
        title=text,
        last_generated=last_generated or now,
        priority=parse_priority(priority),
        mode=mode,
        interval_days=interval,
        weekdays=days,
        due_offset_days=due_offset_days if due_offset_days is None else max(0, due_offset_days),
    )
    return store.add_series(kind, series)


def recommend_next(store: ItemStore, kind: ListKind, now: datetime) -> Item | None:
    """What to work on: the work area first, the backlog when nothing there qualifies."""
    lists = store.lists(kind)
    return top_recommendation(lists.working, now) or top_recommendation(lists.backlog, now)


def quickest_win(store: ItemStore, kind: ListKind) -> Item | None:
    lists = store.lists(kind)
    return lowest_hanging_fruit(lists.working) or lowest_hanging_fruit(lists.backlog)
