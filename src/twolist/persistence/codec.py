# src/twolist/persistence/codec.py

from __future__ import annotations

"""
Document <-> store encoding.

One JSON document holds the whole app state:

    {"version": 1, "selected_tab": "tasks",
     "lists": {"tasks": {"backlog": [...], "working": [...], "archive": [...],
                         "scheduled": [...], "series": [...]},
               "ideas": {...}}}

Calendar days are "YYYY-MM-DD", timestamps are full ISO-8601.
Decoding is lenient per entry: a malformed item or series is skipped with a
warning instead of failing the whole document.
"""

import logging
from datetime import date, datetime
from typing import Any

from dateutil.parser import isoparse

from ..items.models import (
    MAX_PRIORITY,
    MIN_PRIORITY,
    FrequencyMode,
    Item,
    ItemStatus,
    ListCollections,
    ListKind,
    Location,
    RecurringSeries,
    Subtask,
    Weekday,
)

logger = logging.getLogger(__name__)

DOCUMENT_VERSION = 1


class DocumentError(ValueError):
    """The persisted document is not usable as a whole."""


# ---- scalar helpers ----


def _day_to_str(value: date | None) -> str | None:
    return value.isoformat() if value is not None else None


def _ts_to_str(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _str_to_day(raw: Any) -> date | None:
    if raw in (None, ""):
        return None
    return isoparse(str(raw)).date()


def _str_to_ts(raw: Any) -> datetime | None:
    if raw in (None, ""):
        return None
    value = isoparse(str(raw))
    # The engines compare against naive local time.
    if value.tzinfo is not None:
        value = value.astimezone().replace(tzinfo=None)
    return value


def _clamp_priority(raw: Any) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return MIN_PRIORITY
    return max(MIN_PRIORITY, min(MAX_PRIORITY, value))


def _opt_int(raw: Any) -> int | None:
    if raw in (None, ""):
        return None
    return int(raw)


# ---- encode ----


def encode_item(item: Item) -> dict[str, Any]:
    return {
        "id": item.id,
        "title": item.title,
        "priority": item.priority,
        "due_date": _day_to_str(item.due_date),
        "estimate_minutes": item.estimate_minutes,
        "scheduled_date": _day_to_str(item.scheduled_date),
        "status": item.status.value,
        "subtasks": [{"id": s.id, "title": s.title, "done": s.done} for s in item.subtasks],
        "created_at": _ts_to_str(item.created_at),
        "last_priority_bump": _ts_to_str(item.last_priority_bump),
        "dependency_id": item.dependency_id,
        "last_worked_at": _ts_to_str(item.last_worked_at),
        "series_id": item.series_id,
        "completed_at": _ts_to_str(item.completed_at),
    }


def encode_series(series: RecurringSeries) -> dict[str, Any]:
    return {
        "id": series.id,
        "title": series.title,
        "priority": series.priority,
        "mode": series.mode.value,
        "interval_days": series.interval_days,
        "weekdays": [d.name.lower() for d in sorted(series.weekdays)],
        "due_offset_days": series.due_offset_days,
        "last_generated": _ts_to_str(series.last_generated),
    }


def encode_document(lists: dict[ListKind, ListCollections], selected_tab: ListKind) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for kind in ListKind:
        coll = lists.get(kind) or ListCollections()
        entry: dict[str, Any] = {
            location.value: [encode_item(i) for i in coll.at(location)] for location in Location
        }
        entry["series"] = [encode_series(s) for s in coll.series]
        out[kind.value] = entry
    return {"version": DOCUMENT_VERSION, "selected_tab": selected_tab.value, "lists": out}


# ---- decode ----


def decode_item(raw: dict[str, Any]) -> Item:
    title = str(raw.get("title") or "").strip()
    if not title:
        raise ValueError("item without title")

    created_at = _str_to_ts(raw.get("created_at"))
    if created_at is None:
        raise ValueError("item without created_at")
    bump = _str_to_ts(raw.get("last_priority_bump")) or created_at

    subtasks: list[Subtask] = []
    for s in raw.get("subtasks") or []:
        if not isinstance(s, dict):
            continue
        sub_title = str(s.get("title") or "").strip()
        if not sub_title:
            continue
        sub = Subtask(title=sub_title, done=bool(s.get("done", False)))
        if s.get("id"):
            sub.id = str(s["id"])
        subtasks.append(sub)

    item = Item(
        title=title,
        created_at=created_at,
        last_priority_bump=bump,
        priority=_clamp_priority(raw.get("priority")),
        due_date=_str_to_day(raw.get("due_date")),
        estimate_minutes=_opt_int(raw.get("estimate_minutes")),
        scheduled_date=_str_to_day(raw.get("scheduled_date")),
        status=ItemStatus.from_raw(raw.get("status")),
        subtasks=subtasks,
        dependency_id=raw.get("dependency_id") or None,
        last_worked_at=_str_to_ts(raw.get("last_worked_at")),
        series_id=raw.get("series_id") or None,
        completed_at=_str_to_ts(raw.get("completed_at")),
    )
    if raw.get("id"):
        item.id = str(raw["id"])
    return item


def decode_series(raw: dict[str, Any]) -> RecurringSeries:
    title = str(raw.get("title") or "").strip()
    if not title:
        raise ValueError("series without title")
    last_generated = _str_to_ts(raw.get("last_generated"))
    if last_generated is None:
        raise ValueError("series without last_generated")

    series = RecurringSeries(
        title=title,
        last_generated=last_generated,
        priority=_clamp_priority(raw.get("priority")),
        mode=FrequencyMode(raw.get("mode") or FrequencyMode.EVERY_N_DAYS.value),
        interval_days=max(1, int(raw.get("interval_days") or 1)),
        weekdays=frozenset(Weekday.parse(d) for d in raw.get("weekdays") or []),
        due_offset_days=_opt_int(raw.get("due_offset_days")),
    )
    if raw.get("id"):
        series.id = str(raw["id"])
    return series


def _decode_entries(raw_list: Any, decoder, label: str) -> list:
    out = []
    if not isinstance(raw_list, list):
        return out
    for raw in raw_list:
        if not isinstance(raw, dict):
            logger.warning("Skipping non-object %s entry", label)
            continue
        try:
            out.append(decoder(raw))
        except Exception as e:
            logger.warning("Skipping malformed %s entry id=%s: %s", label, raw.get("id"), e)
    return out


def decode_document(data: Any) -> tuple[dict[ListKind, ListCollections], ListKind]:
    if not isinstance(data, dict):
        raise DocumentError("document root is not an object")
    lists_raw = data.get("lists")
    if not isinstance(lists_raw, dict):
        raise DocumentError("document has no 'lists' object")

    lists: dict[ListKind, ListCollections] = {}
    for kind in ListKind:
        entry = lists_raw.get(kind.value)
        coll = ListCollections()
        if isinstance(entry, dict):
            for location in Location:
                coll.at(location).extend(
                    _decode_entries(entry.get(location.value), decode_item, "item")
                )
            coll.series.extend(_decode_entries(entry.get("series"), decode_series, "series"))
        lists[kind] = coll

    return lists, ListKind.from_raw(data.get("selected_tab"))
