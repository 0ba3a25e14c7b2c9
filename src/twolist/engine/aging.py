# src/twolist/engine/aging.py

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime

from dateutil.relativedelta import relativedelta

from ..items.models import MAX_PRIORITY, Item, ItemStatus

logger = logging.getLogger(__name__)

# Aging alone stops here; MAX_PRIORITY is reserved for manual escalation.
AGING_CEILING = MAX_PRIORITY - 1


def whole_months_between(start: datetime, end: datetime) -> int:
    if end <= start:
        return 0
    delta = relativedelta(end, start)
    return delta.years * 12 + delta.months


def age_priorities(items: Iterable[Item], now: datetime) -> list[Item]:
    """
    Escalate priority of active items by one step per whole elapsed month.

    The bump timestamp advances by exactly the months consumed, so the
    remainder carries over to the next bump and re-running is a no-op.
    Months are consumed until less than one whole month remains before `now`.
    Returns the items that changed.
    """
    changed: list[Item] = []
    for item in items:
        if item.status != ItemStatus.ACTIVE or item.priority >= MAX_PRIORITY:
            continue

        # Month-end clamping (Jan 31 + 1 month = Feb 28) can leave a whole month
        # still to consume, so advance until none remains.
        months = 0
        bump = item.last_priority_bump
        step = whole_months_between(bump, now)
        while step > 0:
            months += step
            bump = bump + relativedelta(months=step)
            step = whole_months_between(bump, now)
        if months < 1:
            continue

        old = item.priority
        item.priority = min(item.priority + months, AGING_CEILING)
        item.last_priority_bump = bump
        changed.append(item)
        logger.debug(
            "Aged item id=%s priority %s -> %s (months=%s)", item.id, old, item.priority, months
        )

    return changed
