# src/twolist/engine/selection.py

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date, datetime

from ..items.models import Item, ItemStatus

logger = logging.getLogger(__name__)

SortKey = tuple[int, date, int, str]


def sort_key(item: Item) -> SortKey:
    """
    Presentation order:
    1. items with a due date first, earliest due date first
    2. higher priority first
    3. case-insensitive title
    """
    has_due = item.due_date is not None
    return (
        0 if has_due else 1,
        item.due_date if has_due else date.max,
        -item.priority,
        item.title.casefold(),
    )


def sorted_items(items: Iterable[Item]) -> list[Item]:
    return sorted(items, key=sort_key)


def worked_on(item: Item, day: date) -> bool:
    return item.last_worked_at is not None and item.last_worked_at.date() == day


def top_recommendation(items: Iterable[Item], now: datetime) -> Item | None:
    """Best item to work on now: skips items on hold and items already worked today."""
    today = now.date()
    candidates = [
        item
        for item in items
        if item.status != ItemStatus.ON_HOLD and not worked_on(item, today)
    ]
    if not candidates:
        return None
    return min(candidates, key=sort_key)


def lowest_hanging_fruit(items: Iterable[Item]) -> Item | None:
    """Quickest estimated item; ties fall back to the standard order."""
    estimated = [item for item in items if item.estimate_minutes is not None]
    if not estimated:
        return None
    return min(estimated, key=lambda item: (item.estimate_minutes, *sort_key(item)))


def unblock_dependents(items: Iterable[Item], completed_id: str) -> list[Item]:
    """
    Release items waiting on `completed_id`.

    One level only: the reference is cleared and an on-hold dependent becomes active.
    """
    released: list[Item] = []
    for item in items:
        if item.dependency_id != completed_id:
            continue
        item.dependency_id = None
        if item.status == ItemStatus.ON_HOLD:
            item.status = ItemStatus.ACTIVE
        released.append(item)
        logger.debug("Item %s unblocked by completion of %s", item.id, completed_id)
    return released
