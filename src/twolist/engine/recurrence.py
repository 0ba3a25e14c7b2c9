# src/twolist/engine/recurrence.py

from __future__ import annotations

"""
Recurrence engine.

Decides, for every recurring series of a list:
- if the previous instance is still sitting in the work area, emit a reminder,
- otherwise, once its next occurrence has come (calendar-day granularity),
  generate a fresh item into the work area.

The engine never delivers reminders itself; the notifier decides how to surface them.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from ..items.models import (
    FrequencyMode,
    Item,
    ItemStatus,
    ListKind,
    RecurringSeries,
    ReminderEvent,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RecurrenceResult:
    series: list[RecurringSeries]
    active_items: list[Item]
    reminders: list[ReminderEvent] = field(default_factory=list)
    generated: list[Item] = field(default_factory=list)


def next_occurrence(series: RecurringSeries) -> date | None:
    """
    Next calendar day the series is due, counted from its last generation day.

    Returns None for a weekly series with no weekdays configured (inactive series).
    """
    last_day = series.last_generated.date()

    if series.mode == FrequencyMode.EVERY_N_DAYS:
        return last_day + timedelta(days=max(series.interval_days, 1))

    if not series.weekdays:
        return None
    wanted = {int(d) for d in series.weekdays}
    for offset in range(1, 8):
        candidate = last_day + timedelta(days=offset)
        if candidate.weekday() in wanted:
            return candidate
    return None


def generate_item(series: RecurringSeries, now: datetime) -> Item:
    """Build a concrete item from the series template."""
    due = None
    if series.due_offset_days is not None:
        due = now.date() + timedelta(days=series.due_offset_days)
    return Item.create(
        series.title,
        now,
        priority=series.priority,
        due_date=due,
        status=ItemStatus.ACTIVE,
        series_id=series.id,
    )


def process_series(
    series_list: list[RecurringSeries],
    active_items: list[Item],
    now: datetime,
    *,
    kind: ListKind = ListKind.TASKS,
) -> RecurrenceResult:
    """
    Run every series of one list against its work area.

    Mutates in place:
    - active_items: generated items are inserted at the front
    - series.last_generated: advanced to `now` only when an item was generated

    A series with an instance (any status) already in active_items produces a
    ReminderEvent on every call instead of a second item, whether or not its
    next day has come. Inactive series (no next occurrence) stay silent.
    """
    result = RecurrenceResult(series=series_list, active_items=active_items)

    for series in series_list:
        nxt = next_occurrence(series)
        if nxt is None:
            continue

        if any(item.series_id == series.id for item in active_items):
            logger.debug("Series %s still has an open instance; reminding", series.id)
            result.reminders.append(
                ReminderEvent(series_title=series.title, series_id=series.id, kind=kind)
            )
            continue

        if nxt > now.date():
            continue

        item = generate_item(series, now)
        active_items.insert(0, item)
        series.last_generated = now
        result.generated.append(item)
        logger.info("Series %s generated item id=%s title=%r", series.id, item.id, item.title)

    return result
