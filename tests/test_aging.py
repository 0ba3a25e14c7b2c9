# tests/test_aging.py

from __future__ import annotations

from datetime import datetime

from twolist.engine.aging import age_priorities, whole_months_between
from twolist.items.models import ItemStatus

from .fakes import make_item


def test_whole_months_between() -> None:
    assert whole_months_between(datetime(2026, 1, 15), datetime(2026, 2, 14)) == 0
    assert whole_months_between(datetime(2026, 1, 15), datetime(2026, 2, 15)) == 1
    assert whole_months_between(datetime(2025, 1, 15), datetime(2026, 3, 20)) == 14
    assert whole_months_between(datetime(2026, 3, 1), datetime(2026, 1, 1)) == 0


def test_one_month_bumps_one_step_and_advances_bump_date() -> None:
    start = datetime(2026, 1, 10, 8, 0)
    item = make_item("Stale", start, priority=2)

    changed = age_priorities([item], datetime(2026, 2, 20, 9, 0))

    assert changed == [item]
    assert item.priority == 3
    # Advanced by exactly one month, not reset to now.
    assert item.last_priority_bump == datetime(2026, 2, 10, 8, 0)


def test_multiple_months_capped_at_four() -> None:
    start = datetime(2025, 6, 1)
    item = make_item("Very stale", start, priority=1)

    age_priorities([item], datetime(2026, 1, 5))

    assert item.priority == 4
    assert item.last_priority_bump == datetime(2026, 1, 1)


def test_aging_is_idempotent_at_the_same_instant() -> None:
    item = make_item("Stale", datetime(2026, 1, 10), priority=1)
    now = datetime(2026, 3, 12)

    age_priorities([item], now)
    first = (item.priority, item.last_priority_bump)
    changed = age_priorities([item], now)

    assert changed == []
    assert (item.priority, item.last_priority_bump) == first


def test_remainder_carries_to_next_bump() -> None:
    item = make_item("Stale", datetime(2026, 1, 10), priority=1)

    age_priorities([item], datetime(2026, 2, 25))
    assert item.priority == 2

    # 2026-02-10 + 1 month = 2026-03-10: only 15 days after the previous run.
    age_priorities([item], datetime(2026, 3, 11))
    assert item.priority == 3


def test_priority_five_and_on_hold_are_left_alone() -> None:
    start = datetime(2025, 1, 1)
    top = make_item("Manual top", start, priority=5)
    held = make_item("Held", start, priority=1, status=ItemStatus.ON_HOLD)

    changed = age_priorities([top, held], datetime(2026, 1, 1))

    assert changed == []
    assert top.priority == 5
    assert held.priority == 1
    assert held.last_priority_bump == start


def test_aging_never_lowers_priority() -> None:
    item = make_item("At ceiling", datetime(2026, 1, 1), priority=4)

    age_priorities([item], datetime(2026, 6, 1))

    assert item.priority == 4


def test_month_end_bump_date_is_idempotent() -> None:
    # Jan 31 + 1 month clamps to Feb 28, which leaves another whole month before Mar 30.
    item = make_item("Month end", datetime(2026, 1, 31, 12, 0), priority=1)
    now = datetime(2026, 3, 30, 12, 0)

    first = age_priorities([item], now)
    assert first == [item]
    assert item.priority == 3
    assert item.last_priority_bump == datetime(2026, 3, 28, 12, 0)

    assert age_priorities([item], now) == []
    assert item.priority == 3
