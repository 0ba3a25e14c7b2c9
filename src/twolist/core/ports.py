# src/twolist/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The engines depend on Protocols instead of concrete implementations.
This keeps notification delivery and storage swappable and makes testing easier.
"""

from datetime import datetime, time
from typing import Protocol

from ..items.models import ListCollections, ListKind, ReminderEvent


class Notifier(Protocol):
    """
    Notification collaborator.

    The engine decides *when* a reminder is needed; the notifier decides how
    (and whether) it reaches the user.
    """

    def register_daily_reminders(self, times: list[time]) -> None: ...

    def notify_series_still_active(self, event: ReminderEvent) -> None: ...


class StateRepo(Protocol):
    """Persistence collaborator: one document in, one document out."""

    def load(self) -> tuple[dict[ListKind, ListCollections], ListKind]: ...

    def save(self, lists: dict[ListKind, ListCollections], selected_tab: ListKind) -> None: ...

    def delete(self) -> None: ...


class Clock(Protocol):
    def __call__(self) -> datetime: ...
