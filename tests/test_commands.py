# tests/test_commands.py

from __future__ import annotations

from datetime import datetime, timedelta

from twolist.cli.commands import CommandRegistry, registry
from twolist.items.models import ItemStatus, ListKind, Location


def test_command_registry_routes_3_and_4_params(state, now) -> None:
    reg = CommandRegistry()
    called = {"h3": 0, "h4": 0}

    def h3(state, args, now):
        called["h3"] += 1
        return "h3"

    def h4(state, args, now, emit):
        called["h4"] += 1
        if emit is not None:
            emit("note")
        return "h4"

    reg.register("a", h3, "a")
    reg.register("b", h4, "b")

    assert reg.handle(state, "/a x", now=now) == "h3"
    assert reg.handle(state, "/b y", now=now, emit=lambda _: None) == "h4"
    assert called["h3"] == 1
    assert called["h4"] == 1


def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")


def test_add_list_and_done_flow(state, now) -> None:
    reply = registry.handle(state, "/add Buy milk p=3 due=2026-10-18 est=10 to=working", now=now)
    assert reply is not None and reply.startswith("Added")

    (item,) = state.store.items(ListKind.TASKS, Location.WORKING)
    assert (item.title, item.priority, item.estimate_minutes) == ("Buy milk", 3, 10)

    listing = registry.handle(state, "/list working", now=now) or ""
    assert "Buy milk" in listing and "due 2026-10-18" in listing

    assert "Completed" in (registry.handle(state, f"/done {item.id[:8]}", now=now) or "")
    assert state.store.items(ListKind.TASKS, Location.ARCHIVE) == (item,)


def test_add_rejects_empty_title_and_bad_dates(state, now) -> None:
    assert "empty" in (registry.handle(state, "/add p=3", now=now) or "")
    assert "Invalid" in (registry.handle(state, "/add Thing due=tomorrow", now=now) or "")
    assert state.store.count() == 0


def test_tab_switch_routes_new_items(state, now) -> None:
    registry.handle(state, "/tab ideas", now=now)
    registry.handle(state, "/add Learn Rust", now=now)

    assert state.store.selected_tab == ListKind.IDEAS
    assert [i.title for i in state.store.items(ListKind.IDEAS, Location.BACKLOG)] == ["Learn Rust"]
    assert "Usage" in (registry.handle(state, "/tab chores", now=now) or "")


def test_series_add_then_tick_generates(state, now) -> None:
    reply = registry.handle(state, "/series add Water plants every=2", now=now - timedelta(days=2))
    assert reply is not None and reply.startswith("Added series")

    tick_reply = registry.handle(state, "/tick", now=now) or ""
    assert "generated 1" in tick_reply
    (item,) = state.store.items(ListKind.TASKS, Location.WORKING)
    assert item.title == "Water plants"

    again = registry.handle(state, "/tick", now=now) or ""
    assert "generated 0" in again and "reminders 1" in again
    assert len(state.notifier.reminders) == 1


def test_series_delete_cascades(state, now) -> None:
    registry.handle(state, "/series add Gym days=mon,thu", now=now)
    (series,) = state.store.series(ListKind.TASKS)

    reply = registry.handle(state, f"/series del {series.id[:8]}", now=now) or ""

    assert "Deleted series Gym" in reply
    assert state.store.series(ListKind.TASKS) == ()


def test_next_quick_hold_and_dep(state, now) -> None:
    registry.handle(state, "/add Blocker p=2 est=30", now=now)
    registry.handle(state, "/add Follow-up p=5 est=5", now=now)
    follow, blocker = state.store.items(ListKind.TASKS, Location.BACKLOG)

    assert "Follow-up" in (registry.handle(state, "/next", now=now) or "")
    assert "Follow-up" in (registry.handle(state, "/quick", now=now) or "")

    registry.handle(state, f"/dep {follow.id[:8]} {blocker.id[:8]}", now=now)
    assert follow.status == ItemStatus.ON_HOLD
    assert "Blocker" in (registry.handle(state, "/next", now=now) or "")

    registry.handle(state, f"/done {blocker.id[:8]}", now=now)
    assert follow.status == ItemStatus.ACTIVE and follow.dependency_id is None

    registry.handle(state, f"/hold {follow.id[:8]}", now=now)
    assert follow.status == ItemStatus.ON_HOLD
    registry.handle(state, f"/hold {follow.id[:8]} off", now=now)
    assert follow.status == ItemStatus.ACTIVE


def test_worked_today_hides_from_next(state, now) -> None:
    registry.handle(state, "/add Only one", now=now)
    (item,) = state.store.items(ListKind.TASKS, Location.BACKLOG)

    registry.handle(state, f"/worked {item.id[:8]}", now=now)

    assert item.last_worked_at == now
    assert "Nothing to recommend" in (registry.handle(state, "/next", now=now) or "")


def test_reset_requires_confirmation(state, now) -> None:
    registry.handle(state, "/add Keep me", now=now)

    assert "confirm" in (registry.handle(state, "/reset", now=now) or "")
    assert state.store.count() == 1

    registry.handle(state, "/reset confirm", now=now)
    assert state.store.count() == 0


def test_move_to_scheduled_needs_a_future_day(state, now) -> None:
    registry.handle(state, "/add Dentist", now=now)
    (item,) = state.store.items(ListKind.TASKS, Location.BACKLOG)

    assert "future day" in (registry.handle(state, f"/move {item.id[:8]} scheduled", now=now) or "")
    assert "future day" in (
        registry.handle(state, f"/move {item.id[:8]} scheduled on=2026-10-17", now=now) or ""
    )

    reply = registry.handle(state, f"/move {item.id[:8]} scheduled on=2026-10-20", now=now) or ""
    assert reply.startswith("Moved")
    assert state.store.items(ListKind.TASKS, Location.SCHEDULED) == (item,)

    registry.handle(state, f"/move {item.id[:8]} backlog", now=now)
    assert item.scheduled_date is None


def test_move_refuses_second_series_instance_in_working(state, now) -> None:
    registry.handle(state, "/series add Water plants every=1", now=now - timedelta(days=1))
    registry.handle(state, "/tick", now=now)
    (first,) = state.store.items(ListKind.TASKS, Location.WORKING)
    registry.handle(state, f"/move {first.id[:8]} backlog", now=now)
    registry.handle(state, "/tick", now=now + timedelta(days=1))

    reply = registry.handle(state, f"/move {first.id[:8]} working", now=now) or ""

    assert "already has an item in working" in reply
    assert len(state.store.items(ListKind.TASKS, Location.WORKING)) == 1
