# tests/test_store.py

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from twolist.engine.scheduler import tick
from twolist.items.models import ItemStatus, ListKind, Location, RecurringSeries, Subtask
from twolist.items.store import ItemStore

from .fakes import make_item


def test_insert_find_and_snapshot(store: ItemStore, now: datetime) -> None:
    first = store.insert(ListKind.TASKS, Location.BACKLOG, make_item("First", now))
    second = store.insert(ListKind.TASKS, Location.BACKLOG, make_item("Second", now))

    snapshot = store.items(ListKind.TASKS, Location.BACKLOG)
    assert snapshot == (second, first)
    assert isinstance(snapshot, tuple)

    ref = store.find(first.id)
    assert ref is not None
    assert (ref.kind, ref.location) == (ListKind.TASKS, Location.BACKLOG)
    assert store.find("missing") is None


def test_insert_rejects_duplicate_ids(store: ItemStore, now: datetime) -> None:
    item = make_item("Once", now)
    store.insert(ListKind.TASKS, Location.BACKLOG, item)
    with pytest.raises(ValueError):
        store.insert(ListKind.IDEAS, Location.WORKING, item)


def test_move_relocates_exactly_once(store: ItemStore, now: datetime) -> None:
    item = store.insert(ListKind.TASKS, Location.BACKLOG, make_item("Move me", now))

    store.move(item.id, Location.WORKING)
    store.move(item.id, Location.WORKING)
    assert store.items(ListKind.TASKS, Location.BACKLOG) == ()
    assert store.items(ListKind.TASKS, Location.WORKING) == (item,)

    store.move(item.id, Location.BACKLOG, kind=ListKind.IDEAS)
    assert store.items(ListKind.TASKS, Location.WORKING) == ()
    assert store.items(ListKind.IDEAS, Location.BACKLOG) == (item,)
    assert store.count() == 1
    assert store.move("missing", Location.WORKING) is None


def test_update_validates_field_names(store: ItemStore, now: datetime) -> None:
    item = store.insert(ListKind.TASKS, Location.BACKLOG, make_item("Edit", now))

    store.update(item.id, priority=4, estimate_minutes=20)
    assert (item.priority, item.estimate_minutes) == (4, 20)

    with pytest.raises(ValueError):
        store.update(item.id, colour="red")
    assert store.update("missing", priority=2) is None


def test_complete_archives_and_unblocks(store: ItemStore, now: datetime) -> None:
    blocker = store.insert(ListKind.TASKS, Location.WORKING, make_item("Blocker", now))
    waiting = store.insert(ListKind.IDEAS, Location.BACKLOG, make_item("Waiting", now))
    store.set_dependency(waiting.id, blocker.id)
    assert waiting.status == ItemStatus.ON_HOLD

    store.complete(blocker.id, now)

    assert store.items(ListKind.TASKS, Location.ARCHIVE) == (blocker,)
    assert store.items(ListKind.TASKS, Location.WORKING) == ()
    assert blocker.completed_at == now
    assert waiting.dependency_id is None
    assert waiting.status == ItemStatus.ACTIVE


def test_dependency_on_archived_item_does_not_hold(store: ItemStore, now: datetime) -> None:
    done = store.insert(ListKind.TASKS, Location.ARCHIVE, make_item("Done", now))
    item = store.insert(ListKind.TASKS, Location.BACKLOG, make_item("Next", now))

    store.set_dependency(item.id, done.id)

    assert item.status == ItemStatus.ACTIVE
    assert store.set_dependency(item.id, item.id) is None


def test_removing_a_dependency_target_leaves_reference_inert(store: ItemStore, now: datetime) -> None:
    blocker = store.insert(ListKind.TASKS, Location.WORKING, make_item("Blocker", now))
    waiting = store.insert(ListKind.TASKS, Location.BACKLOG, make_item("Waiting", now))
    store.set_dependency(waiting.id, blocker.id)

    store.remove(blocker.id)

    assert waiting.dependency_id == blocker.id
    assert waiting.status == ItemStatus.ON_HOLD


def test_restore_from_archive(store: ItemStore, now: datetime) -> None:
    item = store.insert(ListKind.IDEAS, Location.WORKING, make_item("Back again", now))
    store.complete(item.id, now)

    assert store.restore(item.id) is item
    assert item.completed_at is None
    assert store.items(ListKind.IDEAS, Location.BACKLOG) == (item,)
    assert store.restore(item.id) is None


def test_delete_series_cascades_everywhere(store: ItemStore, now: datetime) -> None:
    series = store.add_series(ListKind.TASKS, RecurringSeries(title="Gym", last_generated=now))
    keep = store.insert(ListKind.TASKS, Location.WORKING, make_item("Manual", now))
    store.insert(ListKind.TASKS, Location.WORKING, make_item("Gym", now, series_id=series.id))
    old = store.insert(ListKind.TASKS, Location.BACKLOG, make_item("Gym", now, series_id=series.id))
    store.complete(old.id, now)

    removed = store.delete_series(series.id)

    assert removed == 2
    assert store.series(ListKind.TASKS) == ()
    assert store.items(ListKind.TASKS, Location.WORKING) == (keep,)
    assert store.items(ListKind.TASKS, Location.ARCHIVE) == ()
    assert store.delete_series(series.id) == -1


def test_update_series_only_known_fields(store: ItemStore, now: datetime) -> None:
    series = store.add_series(ListKind.IDEAS, RecurringSeries(title="Read", last_generated=now))

    store.update_series(series.id, interval_days=3, title="Read more")
    assert (series.interval_days, series.title) == (3, "Read more")
    with pytest.raises(ValueError):
        store.update_series(series.id, frequency="daily")


def test_subtasks(store: ItemStore, now: datetime) -> None:
    item = store.insert(ListKind.TASKS, Location.BACKLOG, make_item("Trip", now))
    sub = store.add_subtask(item.id, Subtask(title="Book hotel"))
    assert sub is not None

    store.toggle_subtask(item.id, sub.id)
    assert sub.done is True
    store.toggle_subtask(item.id, sub.id, done=False)
    assert sub.done is False

    assert store.remove_subtask(item.id, sub.id) is True
    assert store.remove_subtask(item.id, sub.id) is False


def test_listeners_receive_changes_and_can_unsubscribe(store: ItemStore, now: datetime) -> None:
    seen: list[tuple[str, str | None]] = []
    unsubscribe = store.subscribe(lambda c: seen.append((c.action, c.target_id)))

    item = store.insert(ListKind.TASKS, Location.BACKLOG, make_item("Observed", now))
    store.mark_worked(item.id, now + timedelta(hours=1))
    unsubscribe()
    store.remove(item.id)

    assert seen == [("insert", item.id), ("update", item.id)]


def test_failing_listener_does_not_break_mutation(store: ItemStore, now: datetime) -> None:
    def boom(change) -> None:
        raise RuntimeError("listener broke")

    store.subscribe(boom)
    item = store.insert(ListKind.TASKS, Location.BACKLOG, make_item("Still stored", now))

    assert store.find(item.id) is not None


def test_reset_and_tab(store: ItemStore, now: datetime) -> None:
    store.insert(ListKind.TASKS, Location.BACKLOG, make_item("Gone soon", now))
    store.select_tab(ListKind.IDEAS)
    assert store.selected_tab == ListKind.IDEAS

    store.reset()

    assert store.count() == 0
    assert store.selected_tab == ListKind.TASKS


def test_work_area_holds_one_instance_per_series(store: ItemStore, now: datetime) -> None:
    series = store.add_series(
        ListKind.TASKS,
        RecurringSeries(title="Water plants", last_generated=now - timedelta(days=1), interval_days=1),
    )
    tick(store, now)
    (first,) = store.items(ListKind.TASKS, Location.WORKING)
    store.move(first.id, Location.BACKLOG)

    tick(store, now + timedelta(days=1))
    (second,) = store.items(ListKind.TASKS, Location.WORKING)
    assert second.id != first.id

    assert store.move(first.id, Location.WORKING) is None
    assert store.items(ListKind.TASKS, Location.WORKING) == (second,)
    assert store.items(ListKind.TASKS, Location.BACKLOG) == (first,)

    twin = make_item("Water plants", now, series_id=series.id)
    assert store.insert(ListKind.TASKS, Location.WORKING, twin) is None
    assert store.find(twin.id) is None

    store.complete(first.id, now)
    assert store.restore(first.id, Location.WORKING) is None
    assert store.find(first.id).location == Location.ARCHIVE

    # Another list's work area is independent.
    assert store.move(second.id, Location.WORKING, kind=ListKind.IDEAS) is second


def test_scheduling_requires_a_future_date(store: ItemStore, now: datetime) -> None:
    item = store.insert(ListKind.TASKS, Location.BACKLOG, make_item("Dentist", now))

    assert store.move(item.id, Location.SCHEDULED, today=now.date()) is None
    item.scheduled_date = now.date()
    assert store.move(item.id, Location.SCHEDULED, today=now.date()) is None
    assert store.items(ListKind.TASKS, Location.BACKLOG) == (item,)

    item.scheduled_date = now.date() + timedelta(days=3)
    assert store.move(item.id, Location.SCHEDULED, today=now.date()) is item
    assert store.items(ListKind.TASKS, Location.SCHEDULED) == (item,)


def test_leaving_scheduled_clears_the_date(store: ItemStore, now: datetime) -> None:
    later = make_item("Later", now, scheduled_date=now.date() + timedelta(days=5))
    store.insert(ListKind.TASKS, Location.SCHEDULED, later)

    store.move(later.id, Location.SCHEDULED, kind=ListKind.IDEAS)
    assert later.scheduled_date == now.date() + timedelta(days=5)

    store.move(later.id, Location.WORKING)
    assert later.scheduled_date is None
    assert store.items(ListKind.IDEAS, Location.WORKING) == (later,)
