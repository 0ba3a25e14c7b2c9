# src/twolist/notifications/console.py

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, time

from ..items.models import ReminderEvent

logger = logging.getLogger(__name__)

DAILY_REMINDER_PREFIX = "daily-reminder"
SERIES_REMINDER_PREFIX = "series-active"

Emitter = Callable[[str], None]
Today = Callable[[], date]


@dataclass(slots=True, frozen=True)
class DailyReminder:
    identifier: str
    at: time
    text: str


class ConsoleNotifier:
    """
    Notifier that surfaces reminders on the console.

    - daily reminders are only registered (delivery at the given times belongs to the host OS)
    - series reminders are printed through `emit`, at most once per series per day
      (the ticker re-detects an open instance on every pass)
    """

    def __init__(self, emit: Emitter | None = None, *, today: Today = date.today) -> None:
        self._emit = emit or print
        self._today = today
        self._shown: dict[str, date] = {}
        self.daily: dict[str, DailyReminder] = {}
        self.sent: list[str] = []

    def register_daily_reminders(self, times: list[time]) -> None:
        # Fixed identifiers: re-registering replaces the previous set.
        for key in [k for k in self.daily if k.startswith(DAILY_REMINDER_PREFIX)]:
            del self.daily[key]
        for index, at in enumerate(times):
            identifier = f"{DAILY_REMINDER_PREFIX}-{index}"
            self.daily[identifier] = DailyReminder(
                identifier=identifier,
                at=at,
                text="Check your lists: what is the one thing to do next?",
            )
        logger.info(
            "Registered daily reminders at %s",
            ", ".join(t.strftime("%H:%M") for t in times) or "(none)",
        )

    def notify_series_still_active(self, event: ReminderEvent) -> None:
        identifier = f"{SERIES_REMINDER_PREFIX}-{event.series_id}"
        day = self._today()
        if self._shown.get(identifier) == day:
            logger.debug("Series reminder id=%s already shown today", identifier)
            return
        self._shown[identifier] = day
        text = f"[reminder] '{event.series_title}' is still open in {event.kind.value}; finish it before the next one."
        self.sent.append(identifier)
        logger.info("Series reminder id=%s", identifier)
        try:
            self._emit(text)
        except Exception:
            logger.debug("Reminder emit failed.", exc_info=True)
