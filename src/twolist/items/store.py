# src/twolist/items/store.py

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, fields
from datetime import date, datetime

from ..engine.selection import unblock_dependents
from .models import (
    Item,
    ItemStatus,
    ListCollections,
    ListKind,
    Location,
    RecurringSeries,
    Subtask,
)

logger = logging.getLogger(__name__)

_ITEM_FIELDS = {f.name for f in fields(Item)} - {"id"}
_SERIES_FIELDS = {f.name for f in fields(RecurringSeries)} - {"id"}


@dataclass(slots=True, frozen=True)
class StoreChange:
    """Emitted after every mutation; persistence subscribes to these."""

    action: str
    kind: ListKind | None = None
    target_id: str | None = None


@dataclass(slots=True, frozen=True)
class ItemRef:
    item: Item
    kind: ListKind
    location: Location


Listener = Callable[[StoreChange], None]


class ItemStore:
    """
    In-memory owner of every item and recurring series.

    Layout:
    - one ListCollections per ListKind (backlog / working / archive / scheduled / series)
    - an item lives in exactly one collection; moves are remove-then-insert

    Thread-safety:
    - none; callers from other threads must hold AppState.lock
    """

    def __init__(
        self,
        lists: dict[ListKind, ListCollections] | None = None,
        *,
        selected_tab: ListKind = ListKind.TASKS,
    ) -> None:
        self._lists: dict[ListKind, ListCollections] = {kind: ListCollections() for kind in ListKind}
        if lists:
            self._lists.update(lists)
        self.selected_tab = selected_tab
        self._listeners: list[Listener] = []

    # ---- observers ----

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def notify(self, action: str, kind: ListKind | None = None, target_id: str | None = None) -> None:
        change = StoreChange(action=action, kind=kind, target_id=target_id)
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception:
                logger.exception("Store listener failed action=%s", action)

    # ---- read side ----

    def lists(self, kind: ListKind) -> ListCollections:
        """Live collections for engines (mutable references)."""
        return self._lists[kind]

    def items(self, kind: ListKind, location: Location) -> tuple[Item, ...]:
        return tuple(self._lists[kind].at(location))

    def series(self, kind: ListKind) -> tuple[RecurringSeries, ...]:
        return tuple(self._lists[kind].series)

    def find(self, item_id: str) -> ItemRef | None:
        for kind, lists in self._lists.items():
            for location in Location:
                for item in lists.at(location):
                    if item.id == item_id:
                        return ItemRef(item=item, kind=kind, location=location)
        return None

    def find_series(self, series_id: str) -> tuple[RecurringSeries, ListKind] | None:
        for kind, lists in self._lists.items():
            for series in lists.series:
                if series.id == series_id:
                    return series, kind
        return None

    def count(self) -> int:
        return sum(
            len(lists.at(location)) for lists in self._lists.values() for location in Location
        )

    # ---- item mutations ----

    def insert(
        self,
        kind: ListKind,
        location: Location,
        item: Item,
        *,
        front: bool = True,
    ) -> Item | None:
        """
        Store a new item. Returns None when the work area already holds an
        instance of the item's series.
        """
        if self.find(item.id) is not None:
            raise ValueError(f"item {item.id} is already stored")
        if self._series_conflict(kind, location, item):
            return None
        self._place(kind, location, item, front=front)
        self.notify("insert", kind, item.id)
        return item

    def update(self, item_id: str, **changes) -> Item | None:
        unknown = set(changes) - _ITEM_FIELDS
        if unknown:
            raise ValueError(f"unknown item fields: {sorted(unknown)}")
        ref = self.find(item_id)
        if ref is None:
            return None
        for name, value in changes.items():
            setattr(ref.item, name, value)
        self.notify("update", ref.kind, item_id)
        return ref.item

    def remove(self, item_id: str) -> Item | None:
        ref = self._detach(item_id)
        if ref is None:
            return None
        self.notify("remove", ref.kind, item_id)
        return ref.item

    def move(
        self,
        item_id: str,
        location: Location,
        *,
        kind: ListKind | None = None,
        front: bool = True,
        today: date | None = None,
    ) -> Item | None:
        """
        Relocate one item. Moving onto its current collection is a no-op.

        Refused (returns None) when:
        - the target work area already holds an instance of the item's series
        - the target is the scheduled set and the item has no scheduled_date
          after `today` (when given)

        Leaving the scheduled set clears scheduled_date.
        """
        ref = self.find(item_id)
        if ref is None:
            return None
        target_kind = kind or ref.kind
        if ref.kind == target_kind and ref.location == location:
            return ref.item
        if self._series_conflict(target_kind, location, ref.item):
            return None
        if location == Location.SCHEDULED:
            day = ref.item.scheduled_date
            if day is None or (today is not None and day <= today):
                logger.debug("Refused to schedule item %s without a future date", item_id)
                return None
        self._detach(item_id)
        if ref.location == Location.SCHEDULED and location != Location.SCHEDULED:
            ref.item.scheduled_date = None
        self._place(target_kind, location, ref.item, front=front)
        logger.debug(
            "Moved item %s %s/%s -> %s/%s",
            item_id,
            ref.kind.value,
            ref.location.value,
            target_kind.value,
            location.value,
        )
        self.notify("move", target_kind, item_id)
        return ref.item

    def complete(self, item_id: str, now: datetime) -> Item | None:
        """Archive an item and release anything that depended on it."""
        ref = self.find(item_id)
        if ref is None:
            return None
        if ref.location == Location.ARCHIVE:
            return ref.item

        self._detach(item_id)
        ref.item.completed_at = now
        self._place(ref.kind, Location.ARCHIVE, ref.item, front=True)

        released = unblock_dependents(self._all_live_items(), item_id)
        logger.info("Completed item id=%s (released %d dependents)", item_id, len(released))
        self.notify("complete", ref.kind, item_id)
        return ref.item

    def restore(self, item_id: str, location: Location = Location.BACKLOG) -> Item | None:
        """Bring an item back from the graveyard."""
        ref = self.find(item_id)
        if ref is None or ref.location != Location.ARCHIVE:
            return None
        if self._series_conflict(ref.kind, location, ref.item):
            return None
        self._detach(item_id)
        ref.item.completed_at = None
        self._place(ref.kind, location, ref.item, front=True)
        self.notify("restore", ref.kind, item_id)
        return ref.item

    def set_status(self, item_id: str, status: ItemStatus) -> Item | None:
        return self.update(item_id, status=status)

    def mark_worked(self, item_id: str, now: datetime) -> Item | None:
        return self.update(item_id, last_worked_at=now)

    def set_dependency(self, item_id: str, dependency_id: str | None) -> Item | None:
        """
        Make item wait for another one.

        The item goes on hold while the dependency is still live; clearing the
        dependency does not change status.
        """
        ref = self.find(item_id)
        if ref is None or dependency_id == item_id:
            return None
        ref.item.dependency_id = dependency_id
        if dependency_id is not None:
            dep = self.find(dependency_id)
            if dep is not None and dep.location != Location.ARCHIVE:
                ref.item.status = ItemStatus.ON_HOLD
        self.notify("update", ref.kind, item_id)
        return ref.item

    # ---- subtasks ----

    def add_subtask(self, item_id: str, subtask: Subtask) -> Subtask | None:
        ref = self.find(item_id)
        if ref is None:
            return None
        ref.item.subtasks.append(subtask)
        self.notify("update", ref.kind, item_id)
        return subtask

    def toggle_subtask(self, item_id: str, subtask_id: str, done: bool | None = None) -> Subtask | None:
        ref = self.find(item_id)
        if ref is None:
            return None
        for sub in ref.item.subtasks:
            if sub.id == subtask_id:
                sub.done = (not sub.done) if done is None else done
                self.notify("update", ref.kind, item_id)
                return sub
        return None

    def remove_subtask(self, item_id: str, subtask_id: str) -> bool:
        ref = self.find(item_id)
        if ref is None:
            return False
        before = len(ref.item.subtasks)
        ref.item.subtasks = [s for s in ref.item.subtasks if s.id != subtask_id]
        if len(ref.item.subtasks) == before:
            return False
        self.notify("update", ref.kind, item_id)
        return True

    # ---- series ----

    def add_series(self, kind: ListKind, series: RecurringSeries) -> RecurringSeries:
        if self.find_series(series.id) is not None:
            raise ValueError(f"series {series.id} is already stored")
        self._lists[kind].series.append(series)
        self.notify("series_add", kind, series.id)
        return series

    def update_series(self, series_id: str, **changes) -> RecurringSeries | None:
        unknown = set(changes) - _SERIES_FIELDS
        if unknown:
            raise ValueError(f"unknown series fields: {sorted(unknown)}")
        found = self.find_series(series_id)
        if found is None:
            return None
        series, kind = found
        for name, value in changes.items():
            setattr(series, name, value)
        self.notify("series_update", kind, series_id)
        return series

    def delete_series(self, series_id: str) -> int:
        """
        Delete a series and every item it spawned (archive included).

        Returns the number of removed items, or -1 if the series was unknown.
        """
        found = self.find_series(series_id)
        if found is None:
            return -1
        series, kind = found
        self._lists[kind].series.remove(series)

        removed = 0
        for lists in self._lists.values():
            for location in Location:
                bucket = lists.at(location)
                keep = [item for item in bucket if item.series_id != series_id]
                removed += len(bucket) - len(keep)
                bucket[:] = keep

        logger.info("Deleted series id=%s (cascade removed %d items)", series_id, removed)
        self.notify("series_delete", kind, series_id)
        return removed

    # ---- whole-store ----

    def select_tab(self, kind: ListKind) -> None:
        if self.selected_tab == kind:
            return
        self.selected_tab = kind
        self.notify("select_tab", kind)

    def replace_all(self, lists: dict[ListKind, ListCollections], selected_tab: ListKind) -> None:
        """Swap in loaded state (used on launch). Listeners are not notified."""
        self._lists = {kind: ListCollections() for kind in ListKind}
        self._lists.update(lists)
        self.selected_tab = selected_tab

    def reset(self) -> None:
        self._lists = {kind: ListCollections() for kind in ListKind}
        self.selected_tab = ListKind.TASKS
        logger.info("Store reset")
        self.notify("reset")

    # ---- internals ----

    def _place(self, kind: ListKind, location: Location, item: Item, *, front: bool) -> None:
        bucket = self._lists[kind].at(location)
        if front:
            bucket.insert(0, item)
        else:
            bucket.append(item)

    def _detach(self, item_id: str) -> ItemRef | None:
        ref = self.find(item_id)
        if ref is None:
            return None
        bucket = self._lists[ref.kind].at(ref.location)
        bucket[:] = [item for item in bucket if item.id != item_id]
        return ref

    def _series_conflict(self, kind: ListKind, location: Location, item: Item) -> bool:
        """True when placing `item` would give its series a second open instance."""
        if location != Location.WORKING or item.series_id is None:
            return False
        for other in self._lists[kind].working:
            if other.series_id == item.series_id and other.id != item.id:
                logger.debug(
                    "Series %s already has item %s in %s/working", item.series_id, other.id, kind.value
                )
                return True
        return False

    def _all_live_items(self) -> Iterable[Item]:
        for lists in self._lists.values():
            yield from lists.live_items()
