# src/twolist/cli/commands.py

from __future__ import annotations

import contextlib
import inspect
import logging
from collections.abc import Callable
from datetime import date, datetime
from typing import cast

from ..core.state import AppState
from ..engine.scheduler import tick
from ..engine.selection import sorted_items
from ..items import api
from ..items.models import FrequencyMode, Item, ItemStatus, ListKind, Location, RecurringSeries
from .bootstrap import reset_state

CommandEmitter = Callable[[str], None]
CommandHandler3 = Callable[[AppState, list[str], datetime], str]
CommandHandler4 = Callable[[AppState, list[str], datetime, CommandEmitter | None], str]
CommandHandler = CommandHandler3 | CommandHandler4

logger = logging.getLogger(__name__)

SHORT_ID = 8


class CommandRegistry:
    """Simple slash-command registry used by connectors (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        now: datetime | None = None,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        if now is None:
            now = datetime.now()

        try:
            nparams = len(inspect.signature(handler).parameters)
        except Exception:
            nparams = 4

        if nparams >= 4:
            h4 = cast(CommandHandler4, handler)
            return h4(state, args, now, emit)

        h3 = cast(CommandHandler3, handler)
        return h3(state, args, now)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- argument helpers ----


def _split_options(args: list[str]) -> tuple[str, dict[str, str]]:
    """Split "key=value" tokens from the free-text rest ("Buy milk p=3 due=2026-10-20")."""
    words: list[str] = []
    opts: dict[str, str] = {}
    for token in args:
        key, sep, value = token.partition("=")
        if sep and key.isalpha():
            opts[key.lower()] = value
        else:
            words.append(token)
    return " ".join(words), opts


def _parse_day(raw: str | None) -> date | None:
    if not raw:
        return None
    return date.fromisoformat(raw)


def _parse_location(raw: str) -> Location | None:
    try:
        return Location(raw.lower())
    except ValueError:
        return None


def _resolve_item(state: AppState, token: str) -> Item | None:
    """Find an item by id or unique id prefix."""
    ref = state.store.find(token)
    if ref is not None:
        return ref.item
    matches: list[Item] = []
    for kind in ListKind:
        for location in Location:
            matches.extend(i for i in state.store.items(kind, location) if i.id.startswith(token))
    return matches[0] if len(matches) == 1 else None


def _resolve_series(state: AppState, token: str) -> RecurringSeries | None:
    matches = [
        s for kind in ListKind for s in state.store.series(kind) if s.id.startswith(token)
    ]
    return matches[0] if len(matches) == 1 else None


def format_item(item: Item, now: datetime | None = None) -> str:
    parts = [f"[{item.id[:SHORT_ID]}]", f"P{item.priority}", item.title]
    if item.due_date is not None:
        parts.append(f"(due {item.due_date.isoformat()})")
    if item.scheduled_date is not None:
        parts.append(f"(on {item.scheduled_date.isoformat()})")
    if item.estimate_minutes is not None:
        parts.append(f"~{item.estimate_minutes}m")
    if item.status == ItemStatus.ON_HOLD:
        parts.append("[on hold]")
    if item.series_id:
        parts.append("[recurring]")
    if now is not None and item.last_worked_at is not None and item.last_worked_at.date() == now.date():
        parts.append("[worked today]")
    if item.subtasks:
        done = sum(1 for s in item.subtasks if s.done)
        parts.append(f"{{{done}/{len(item.subtasks)}}}")
    return " ".join(parts)


def format_series(series: RecurringSeries) -> str:
    if series.mode == FrequencyMode.WEEKLY_ON_DAYS:
        rule = "weekly on " + (",".join(d.name[:3].lower() for d in sorted(series.weekdays)) or "-")
    else:
        rule = f"every {series.interval_days}d"
    offset = f", due +{series.due_offset_days}d" if series.due_offset_days is not None else ""
    return f"[{series.id[:SHORT_ID]}] P{series.priority} {series.title} ({rule}{offset})"


# ---- handlers ----


def cmd_help(state: AppState, args: list[str], now: datetime) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str], now: datetime) -> str:
    store = state.store
    lines = ["Status:", f"  Tab: {store.selected_tab.value}"]
    for kind in ListKind:
        counts = ", ".join(
            f"{loc.value}={len(store.items(kind, loc))}" for loc in Location
        )
        lines.append(f"  {kind.value}: {counts}, series={len(store.series(kind))}")
    lines.append(f"  State file: {state.repo.path}")
    return "\n".join(lines)


def cmd_tab(state: AppState, args: list[str], now: datetime) -> str:
    """
    /tab          -> show current list
    /tab ideas    -> switch to ideas
    """
    if not args:
        return f"Current list: {state.store.selected_tab.value}. Use /tab tasks or /tab ideas."
    raw = args[0].lower()
    if raw not in {k.value for k in ListKind}:
        return "Usage: /tab tasks | /tab ideas."
    state.store.select_tab(ListKind(raw))
    return f"Switched to {raw}."


def cmd_add(state: AppState, args: list[str], now: datetime) -> str:
    """/add <title> [p=1..5] [due=YYYY-MM-DD] [est=MIN] [on=YYYY-MM-DD] [to=working]"""
    title, opts = _split_options(args)
    try:
        due = _parse_day(opts.get("due"))
        scheduled = _parse_day(opts.get("on"))
        est = int(opts["est"]) if opts.get("est") else None
    except ValueError:
        return "Invalid date or estimate. Dates are YYYY-MM-DD, estimates are minutes."

    location = _parse_location(opts.get("to", "backlog")) or Location.BACKLOG
    if location in (Location.ARCHIVE, Location.SCHEDULED):
        location = Location.BACKLOG

    item = api.create_item(
        state.store,
        state.store.selected_tab,
        title,
        now=now,
        priority=opts.get("p", 1),
        due_date=due,
        estimate_minutes=est,
        scheduled_date=scheduled,
        location=location,
    )
    if item is None:
        return "Nothing added: the title is empty."
    return f"Added {format_item(item)}"


def cmd_list(state: AppState, args: list[str], now: datetime) -> str:
    """/list [working|backlog|scheduled|archive|series]"""
    kind = state.store.selected_tab
    wanted = [_parse_location(a) for a in args if a.lower() != "series"]
    show_series = any(a.lower() == "series" for a in args)
    locations = [loc for loc in wanted if loc is not None]
    if not args:
        locations = [Location.WORKING, Location.BACKLOG]

    lines: list[str] = []
    for location in locations:
        items = state.store.items(kind, location)
        lines.append(f"{kind.value} / {location.value} ({len(items)}):")
        ordered = items if location == Location.ARCHIVE else sorted_items(items)
        lines.extend(f"  {format_item(i, now)}" for i in ordered)
    if show_series:
        series = state.store.series(kind)
        lines.append(f"{kind.value} / series ({len(series)}):")
        lines.extend(f"  {format_series(s)}" for s in series)
    return "\n".join(lines) if lines else "Usage: /list [working|backlog|scheduled|archive|series]"


def cmd_move(state: AppState, args: list[str], now: datetime) -> str:
    """/move <id> <backlog|working|scheduled> [tasks|ideas] [on=YYYY-MM-DD]"""
    rest, opts = _split_options(args)
    words = rest.split()
    if len(words) < 2:
        return "Usage: /move <id> <backlog|working|scheduled> [tasks|ideas] [on=YYYY-MM-DD]."
    item = _resolve_item(state, words[0])
    location = _parse_location(words[1])
    if item is None:
        return f"No single item matches '{words[0]}'."
    if location is None or location == Location.ARCHIVE:
        return "Target must be backlog, working or scheduled. Use /done to archive."
    kind = ListKind.from_raw(words[2]) if len(words) > 2 else None

    if location == Location.SCHEDULED:
        try:
            day = _parse_day(opts.get("on")) or item.scheduled_date
        except ValueError:
            return "Invalid date. Dates are YYYY-MM-DD."
        if day is None or day <= now.date():
            return "Scheduling needs a future day: /move <id> scheduled on=YYYY-MM-DD."
        state.store.update(item.id, scheduled_date=day)

    if state.store.move(item.id, location, kind=kind, today=now.date()) is None:
        return f"Cannot move {item.title}: its recurring series already has an item in working."
    return f"Moved {format_item(item)} to {location.value}."


def cmd_done(state: AppState, args: list[str], now: datetime) -> str:
    if not args:
        return "Usage: /done <id>."
    item = _resolve_item(state, args[0])
    if item is None:
        return f"No single item matches '{args[0]}'."
    state.store.complete(item.id, now)
    return f"Completed {item.title}."


def cmd_restore(state: AppState, args: list[str], now: datetime) -> str:
    if not args:
        return "Usage: /restore <id>."
    item = _resolve_item(state, args[0])
    if item is None or state.store.restore(item.id) is None:
        return f"No archived item matches '{args[0]}'."
    return f"Restored {item.title} to the backlog."


def cmd_hold(state: AppState, args: list[str], now: datetime) -> str:
    """/hold <id> [off]"""
    if not args:
        return "Usage: /hold <id> [off]."
    item = _resolve_item(state, args[0])
    if item is None:
        return f"No single item matches '{args[0]}'."
    release = len(args) > 1 and args[1].lower() in ("off", "0", "no", "false")
    status = ItemStatus.ACTIVE if release else ItemStatus.ON_HOLD
    state.store.set_status(item.id, status)
    return f"{item.title} is now {status.value}."


def cmd_worked(state: AppState, args: list[str], now: datetime) -> str:
    if not args:
        return "Usage: /worked <id>."
    item = _resolve_item(state, args[0])
    if item is None:
        return f"No single item matches '{args[0]}'."
    state.store.mark_worked(item.id, now)
    return f"Marked {item.title} as worked on today."


def cmd_prio(state: AppState, args: list[str], now: datetime) -> str:
    if len(args) < 2:
        return "Usage: /prio <id> <1..5>."
    item = _resolve_item(state, args[0])
    if item is None:
        return f"No single item matches '{args[0]}'."
    state.store.update(item.id, priority=api.parse_priority(args[1]), last_priority_bump=now)
    return f"{item.title} is now P{item.priority}."


def cmd_rename(state: AppState, args: list[str], now: datetime) -> str:
    if len(args) < 2:
        return "Usage: /rename <id> <new title>."
    item = _resolve_item(state, args[0])
    if item is None:
        return f"No single item matches '{args[0]}'."
    if api.rename_item(state.store, item.id, " ".join(args[1:])) is None:
        return "Title cannot be empty."
    return f"Renamed to {item.title}."


def cmd_sub(state: AppState, args: list[str], now: datetime) -> str:
    """
    /sub <id> add <title>      -> add a subtask
    /sub <id> toggle <sub-id>  -> flip a subtask's done flag
    """
    if len(args) < 3:
        return "Usage: /sub <id> add <title> | /sub <id> toggle <sub-id>."
    item = _resolve_item(state, args[0])
    if item is None:
        return f"No single item matches '{args[0]}'."
    action = args[1].lower()
    if action == "add":
        sub = api.add_subtask(state.store, item.id, " ".join(args[2:]))
        return f"Added subtask [{sub.id[:SHORT_ID]}] {sub.title}." if sub else "Subtask title is empty."
    if action == "toggle":
        matches = [s for s in item.subtasks if s.id.startswith(args[2])]
        if len(matches) != 1:
            return f"No single subtask matches '{args[2]}'."
        sub = state.store.toggle_subtask(item.id, matches[0].id)
        return f"Subtask {sub.title} is {'done' if sub and sub.done else 'open'}."
    return "Usage: /sub <id> add <title> | /sub <id> toggle <sub-id>."


def cmd_dep(state: AppState, args: list[str], now: datetime) -> str:
    """/dep <id> <blocking-id|none>"""
    if len(args) < 2:
        return "Usage: /dep <id> <blocking-id|none>."
    item = _resolve_item(state, args[0])
    if item is None:
        return f"No single item matches '{args[0]}'."
    if args[1].lower() == "none":
        state.store.set_dependency(item.id, None)
        return f"{item.title} no longer waits on anything."
    blocker = _resolve_item(state, args[1])
    if blocker is None or blocker.id == item.id:
        return f"No single other item matches '{args[1]}'."
    state.store.set_dependency(item.id, blocker.id)
    return f"{item.title} now waits on {blocker.title}."


def cmd_series(state: AppState, args: list[str], now: datetime) -> str:
    """
    /series                                   -> list series of the current tab
    /series add <title> every=N [p=] [offset=]
    /series add <title> days=mon,thu [p=] [offset=]
    /series del <id>                          -> delete series and everything it spawned
    """
    kind = state.store.selected_tab
    if not args or args[0].lower() == "list":
        series = state.store.series(kind)
        if not series:
            return f"No recurring series in {kind.value}."
        return "\n".join(format_series(s) for s in series)

    sub = args[0].lower()
    if sub == "add":
        title, opts = _split_options(args[1:])
        try:
            interval = int(opts["every"]) if opts.get("every") else None
            offset = int(opts["offset"]) if opts.get("offset") else None
        except ValueError:
            return "every= and offset= take whole days."
        days = [d for d in opts.get("days", "").split(",") if d]
        series = api.create_series(
            state.store,
            kind,
            title,
            now=now,
            priority=opts.get("p", 1),
            interval_days=interval,
            weekdays=days or None,
            due_offset_days=offset,
        )
        if series is None:
            return "Nothing added: empty title or unknown weekday."
        return f"Added series {format_series(series)}"

    if sub in ("del", "delete", "rm"):
        if len(args) < 2:
            return "Usage: /series del <id>."
        series = _resolve_series(state, args[1])
        if series is None:
            return f"No single series matches '{args[1]}'."
        removed = state.store.delete_series(series.id)
        return f"Deleted series {series.title} and {removed} item(s)."

    return "Usage: /series [list] | /series add <title> every=N|days=mon,.. | /series del <id>."


def cmd_next(state: AppState, args: list[str], now: datetime) -> str:
    item = api.recommend_next(state.store, state.store.selected_tab, now)
    if item is None:
        return "Nothing to recommend right now."
    return f"Work on: {format_item(item, now)}"


def cmd_quick(state: AppState, args: list[str], now: datetime) -> str:
    item = api.quickest_win(state.store, state.store.selected_tab)
    if item is None:
        return "No estimated items. Add est=MIN to items to get quick wins."
    return f"Quick win: {format_item(item, now)}"


def cmd_tick(
    state: AppState,
    args: list[str],
    now: datetime,
    emit: CommandEmitter | None = None,
) -> str:
    if emit:
        with contextlib.suppress(Exception):
            emit("[tick] Running scheduled promotions, series and aging...")
    report = tick(state.store, now, state.notifier)
    return (
        f"Promoted {len(report.promoted)}, generated {len(report.generated)}, "
        f"reminders {len(report.reminders)}, aged {len(report.aged)}."
    )


def cmd_reset(state: AppState, args: list[str], now: datetime) -> str:
    if not args or args[0].lower() != "confirm":
        return "This deletes everything. Use /reset confirm."
    reset_state(state)
    logger.debug("Reset requested from console")
    return "All lists cleared and saved state deleted."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show counts per list and the state file.")
registry.register("tab", cmd_tab, help_text="Switch list: /tab tasks | /tab ideas.")
registry.register(
    "add", cmd_add, help_text="Add: /add <title> [p=N] [due=YYYY-MM-DD] [est=MIN] [on=YYYY-MM-DD] [to=working]."
)
registry.register("list", cmd_list, help_text="List: /list [working|backlog|scheduled|archive|series].", aliases=["ls"])
registry.register("move", cmd_move, help_text="Move: /move <id> <backlog|working|scheduled> [tasks|ideas] [on=YYYY-MM-DD].", aliases=["mv"])
registry.register("done", cmd_done, help_text="Complete an item (moves it to the archive).")
registry.register("restore", cmd_restore, help_text="Restore an archived item to the backlog.")
registry.register("hold", cmd_hold, help_text="Put on hold: /hold <id> [off].")
registry.register("worked", cmd_worked, help_text="Mark an item as worked on today.")
registry.register("prio", cmd_prio, help_text="Set priority: /prio <id> <1..5>.")
registry.register("rename", cmd_rename, help_text="Rename: /rename <id> <title>.")
registry.register("sub", cmd_sub, help_text="Subtasks: /sub <id> add <title> | /sub <id> toggle <sub-id>.")
registry.register("dep", cmd_dep, help_text="Dependency: /dep <id> <blocking-id|none>.")
registry.register("series", cmd_series, help_text="Recurring: /series [add|del|list].")
registry.register("next", cmd_next, help_text="Recommend what to work on next.")
registry.register("quick", cmd_quick, help_text="Lowest hanging fruit (shortest estimate).")
registry.register("tick", cmd_tick, help_text="Run promotions, recurring series and aging now.")
registry.register("reset", cmd_reset, help_text="Delete everything: /reset confirm.")
