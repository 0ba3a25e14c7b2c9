# src/twolist/items/models.py

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import IntEnum, StrEnum

MIN_PRIORITY = 1
MAX_PRIORITY = 5


def new_id() -> str:
    return str(uuid.uuid4())


class ListKind(StrEnum):
    """The two curated lists. Also used as the selected-tab value."""

    TASKS = "tasks"
    IDEAS = "ideas"

    @classmethod
    def from_raw(cls, raw: str | None) -> ListKind:
        if not raw:
            return cls.TASKS
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return cls.TASKS


class Location(StrEnum):
    BACKLOG = "backlog"
    WORKING = "working"
    ARCHIVE = "archive"
    SCHEDULED = "scheduled"


class ItemStatus(StrEnum):
    """
    Item lifecycle status.

    Notes:
    - older documents used a tri-state active/waiting/done; "waiting" maps to
      ON_HOLD and "done" is meaningless outside the archive, so it loads as ACTIVE.
    """

    ACTIVE = "active"
    ON_HOLD = "onHold"

    @classmethod
    def from_raw(cls, raw: str | None) -> ItemStatus:
        if not raw:
            return cls.ACTIVE
        if raw == "waiting":
            return cls.ON_HOLD
        try:
            return cls(raw)
        except ValueError:
            return cls.ACTIVE


class FrequencyMode(StrEnum):
    EVERY_N_DAYS = "everyNDays"
    WEEKLY_ON_DAYS = "weeklyOnDays"


class Weekday(IntEnum):
    # Values match date.weekday().
    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @classmethod
    def parse(cls, raw: str | int) -> Weekday:
        if isinstance(raw, int):
            return cls(raw)
        text = raw.strip().upper()
        for day in cls:
            if day.name == text or day.name[:3] == text:
                return day
        raise ValueError(f"unknown weekday: {raw!r}")


@dataclass(slots=True)
class Subtask:
    title: str
    done: bool = False
    id: str = field(default_factory=new_id)


@dataclass(slots=True)
class Item:
    """
    A task or an idea.

    Dates:
    - due_date / scheduled_date are calendar days
    - created_at / last_priority_bump / last_worked_at / completed_at are timestamps
    """

    title: str
    created_at: datetime
    last_priority_bump: datetime
    priority: int = MIN_PRIORITY
    id: str = field(default_factory=new_id)
    due_date: date | None = None
    estimate_minutes: int | None = None
    scheduled_date: date | None = None
    status: ItemStatus = ItemStatus.ACTIVE
    subtasks: list[Subtask] = field(default_factory=list)
    dependency_id: str | None = None
    last_worked_at: datetime | None = None
    series_id: str | None = None
    completed_at: datetime | None = None

    @classmethod
    def create(cls, title: str, now: datetime, **fields) -> Item:
        return cls(title=title, created_at=now, last_priority_bump=now, **fields)


@dataclass(slots=True)
class RecurringSeries:
    title: str
    last_generated: datetime
    priority: int = MIN_PRIORITY
    mode: FrequencyMode = FrequencyMode.EVERY_N_DAYS
    interval_days: int = 1
    weekdays: frozenset[Weekday] = frozenset()
    due_offset_days: int | None = None
    id: str = field(default_factory=new_id)


@dataclass(slots=True, frozen=True)
class ReminderEvent:
    """A due series still has an unresolved instance in the work area."""

    series_title: str
    series_id: str
    kind: ListKind


@dataclass(slots=True)
class ListCollections:
    backlog: list[Item] = field(default_factory=list)
    working: list[Item] = field(default_factory=list)
    archive: list[Item] = field(default_factory=list)
    scheduled: list[Item] = field(default_factory=list)
    series: list[RecurringSeries] = field(default_factory=list)

    def at(self, location: Location) -> list[Item]:
        return getattr(self, location.value)

    def live_items(self) -> list[Item]:
        return [*self.backlog, *self.working, *self.scheduled]
