"""Command handlers for the gcal CLI.

Each run_<command>(ctx) composes the client and the formatters, prints to
ctx.out, and returns an exit code. Failures are raised as CLIError
subclasses and reported by the dispatcher.
"""
from __future__ import annotations

import datetime as _dt
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

from core.cli_args import ParsedArguments
from core.cli_errors import UsageError
from core.cli_output import OutputWriter
from core.constants import DEFAULT_UPCOMING_DAYS, LIST_WINDOW_DAYS
from core.date_utils import now_local, parse_date_arg, parse_iso, to_api_timestamp

from .cli.options import CommandOptions, parse_count
from .client import CalendarClient
from .config import Settings
from .formatting import (
    event_date_label,
    format_day,
    format_event_details,
    format_summary_line,
)
from .model import NO_TITLE, CalendarDescriptor, EventDraft

SUMMARY_DISPLAY_LIMIT = 10
FULL_DISPLAY_LIMIT = 50


def prompt_yes_no(question: str) -> bool:
    """Ask on stdin; only 'y'/'yes' counts as agreement."""
    try:
        answer = input(f"{question} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in ("y", "yes")


@dataclass
class CommandContext:
    """Everything a handler needs for one invocation."""
    args: ParsedArguments
    options: CommandOptions
    settings: Settings
    out: OutputWriter
    client_factory: Callable[[], CalendarClient]
    confirm: Callable[[str], bool] = prompt_yes_no
    now: Callable[[], _dt.datetime] = now_local
    tz: Optional[_dt.tzinfo] = None
    _client: Optional[CalendarClient] = field(default=None, repr=False)

    @property
    def calendar_id(self) -> str:
        return self.options.calendar or self.settings.default_calendar

    @property
    def positional(self) -> List[str]:
        return list(self.args.positional)

    def client(self) -> CalendarClient:
        if self._client is None:
            self._client = self.client_factory()
        return self._client


# -------------------- helpers --------------------

def _items(data: Any) -> List[Any]:
    if isinstance(data, dict):
        return list(data.get("items") or [])
    return []


def _print_summary(ctx: CommandContext, event: Any) -> None:
    opts = ctx.options
    ctx.out.print(format_summary_line(
        event,
        show_location=not opts.summary,
        show_attendees=opts.full,
        show_status=opts.full,
        tz=ctx.tz,
    ))
    ctx.out.print("")


def _required_event_id(ctx: CommandContext, command: str) -> str:
    if not ctx.positional:
        raise UsageError("Event ID required", hint=f"Usage: gcal {command} <eventId>")
    return ctx.positional[0]


def _timestamp(value: Optional[str], flag: str, tz: Optional[_dt.tzinfo]) -> Optional[str]:
    if value is None:
        return None
    try:
        return to_api_timestamp(parse_date_arg(value, tz))
    except ValueError:
        raise UsageError(f"Invalid {flag} date '{value}'", hint="Use YYYY-MM-DD or an ISO datetime") from None


def _check_time(value: Optional[str], flag: str) -> None:
    if value is None:
        return
    try:
        parse_iso(value)
    except ValueError:
        raise UsageError(
            f"Invalid {flag} value '{value}'",
            hint="Use an ISO datetime (2026-01-05T09:00:00) or a date (2026-01-05) for all-day events",
        ) from None


def _draft(ctx: CommandContext) -> EventDraft:
    opts = ctx.options
    _check_time(opts.start, "--start")
    _check_time(opts.end, "--end")
    return EventDraft(
        title=opts.title,
        start=opts.start,
        end=opts.end,
        timezone=opts.timezone or ctx.settings.default_timezone,
        description=opts.description,
        location=opts.location,
        attendees=list(opts.attendees),
        reminder_minutes=opts.reminder,
    )


def _report_event(ctx: CommandContext, verb: str, event: Any) -> None:
    event = event if isinstance(event, dict) else {}
    ctx.out.print(f"Event {verb}: {event.get('summary') or NO_TITLE}")
    if event.get("id"):
        ctx.out.print(f"ID: {event['id']}")
    if event.get("htmlLink"):
        ctx.out.print(f"Link: {event['htmlLink']}")


# -------------------- commands --------------------

def run_auth(ctx: CommandContext) -> int:
    data = ctx.client().list_calendars(max_results=1)
    if ctx.options.json:
        ctx.out.print_json(data)
        return 0
    calendars = [CalendarDescriptor.from_dict(item) for item in _items(data)]
    ctx.out.print("Authentication successful")
    ctx.out.print(f"Access to {len(calendars)} calendar(s) confirmed")
    primary = next((cal for cal in calendars if cal.primary), None)
    if primary is not None:
        ctx.out.print(f"Primary calendar: {primary.summary}")
    return 0


def run_calendars(ctx: CommandContext) -> int:
    data = ctx.client().list_calendars(max_results=ctx.options.max or 250)
    if ctx.options.json:
        ctx.out.print_json(data)
        return 0

    calendars = [CalendarDescriptor.from_dict(item) for item in _items(data)]
    ctx.out.print(f"Found {len(calendars)} calendar(s):")
    ctx.out.print("")
    for cal in calendars:
        primary = " (PRIMARY)" if cal.primary else ""
        access = f" [{cal.access_role}]" if cal.access_role else ""
        ctx.out.print(f"{cal.summary}{primary}{access}")
        if not ctx.options.summary:
            ctx.out.print(f"   ID: {cal.id}")
            if cal.description:
                ctx.out.print(f"   Description: {cal.description}")
            if cal.time_zone:
                ctx.out.print(f"   Timezone: {cal.time_zone}")
            ctx.out.print("")
    return 0


def run_today(ctx: CommandContext) -> int:
    now = ctx.now()
    data = ctx.client().get_today_events(ctx.calendar_id, max_results=ctx.options.max or 50, now=now, tz=ctx.tz)
    if ctx.options.json:
        ctx.out.print_json(data)
        return 0

    ctx.out.print(f"Events for {format_day(now.astimezone(ctx.tz).date())}:")
    ctx.out.print("")
    events = _items(data)
    if not events:
        ctx.out.print("No events scheduled for today")
        return 0
    for event in events:
        _print_summary(ctx, event)
    return 0


def run_upcoming(ctx: CommandContext, *, days: Optional[int] = None, calendar_id: Optional[str] = None) -> int:
    if days is None:
        if ctx.positional:
            days = parse_count(ctx.positional[0], "days")
        else:
            days = ctx.options.days or DEFAULT_UPCOMING_DAYS
    data = ctx.client().get_upcoming_events(
        days,
        calendar_id or ctx.calendar_id,
        max_results=ctx.options.max or 100,
        now=ctx.now(),
    )
    if ctx.options.json:
        ctx.out.print_json(data)
        return 0

    ctx.out.print(f"Upcoming events (next {days} days):")
    ctx.out.print("")
    events = _items(data)
    if not events:
        ctx.out.print(f"No upcoming events in the next {days} days")
        return 0

    limit = SUMMARY_DISPLAY_LIMIT if ctx.options.summary else FULL_DISPLAY_LIMIT
    current_date = None
    for event in events[:limit]:
        label = event_date_label(event, ctx.tz)
        if label != current_date:
            current_date = label
            ctx.out.print(f"--- {label} ---")
        _print_summary(ctx, event)

    if len(events) > limit:
        ctx.out.print(f"... and {len(events) - limit} more events")
        ctx.out.print("Use --max to increase limit or remove --summary for more details")
    return 0


def run_list(ctx: CommandContext) -> int:
    """Events for the next year, optionally from the calendar named positionally."""
    calendar_id = ctx.positional[0] if ctx.positional else ctx.calendar_id
    return run_upcoming(ctx, days=LIST_WINDOW_DAYS, calendar_id=calendar_id)


def run_search(ctx: CommandContext) -> int:
    query = " ".join(ctx.positional) or ctx.options.query
    if not query:
        raise UsageError("Search query required", hint='Usage: gcal search "meeting" [--from YYYY-MM-DD] [--to YYYY-MM-DD]')
    time_min = _timestamp(ctx.options.from_date, "--from", ctx.tz)
    time_max = _timestamp(ctx.options.to_date, "--to", ctx.tz)
    if time_min and time_max and time_min > time_max:
        raise UsageError("--from must not be after --to")

    data = ctx.client().search_events(
        query,
        calendar_id=ctx.calendar_id,
        time_min=time_min,
        time_max=time_max,
        max_results=ctx.options.max or 50,
    )
    if ctx.options.json:
        ctx.out.print_json(data)
        return 0

    ctx.out.print(f'Search results for "{query}":')
    ctx.out.print("")
    events = _items(data)
    if not events:
        ctx.out.print(f'No events found matching "{query}"')
        return 0
    for event in events:
        ctx.out.print(event_date_label(event, ctx.tz))
        _print_summary(ctx, event)
    return 0


def run_event(ctx: CommandContext) -> int:
    event_id = _required_event_id(ctx, "event")
    data = ctx.client().get_event(ctx.calendar_id, event_id)
    if ctx.options.json:
        ctx.out.print_json(data)
        return 0
    ctx.out.print_lines(format_event_details(data, ctx.tz))
    return 0


def run_create(ctx: CommandContext) -> int:
    opts = ctx.options
    missing = [flag for flag, value in (("--title", opts.title), ("--start", opts.start), ("--end", opts.end)) if not value]
    if missing:
        raise UsageError(
            f"Missing required option(s): {', '.join(missing)}",
            hint='Usage: gcal create --title "Standup" --start 2026-01-05T09:00:00 --end 2026-01-05T09:30:00',
        )
    draft = _draft(ctx)
    created = ctx.client().create_event(ctx.calendar_id, draft)
    if opts.json:
        ctx.out.print_json(created)
        return 0
    _report_event(ctx, "created", created)
    return 0


def run_update(ctx: CommandContext) -> int:
    event_id = _required_event_id(ctx, "update")
    draft = _draft(ctx)
    if draft.is_empty():
        raise UsageError(
            "Nothing to update",
            hint="Pass at least one of --title --start --end --description --location --attendees --reminder",
        )
    updated = ctx.client().update_event(ctx.calendar_id, event_id, draft)
    if ctx.options.json:
        ctx.out.print_json(updated)
        return 0
    _report_event(ctx, "updated", updated)
    return 0


def run_delete(ctx: CommandContext) -> int:
    event_id = _required_event_id(ctx, "delete")
    calendar_id = ctx.calendar_id
    if not ctx.options.yes and not ctx.confirm(f"Delete event {event_id}?"):
        ctx.out.print("Delete cancelled.")
        return 0
    ctx.client().delete_event(calendar_id, event_id, confirmed=True)
    if ctx.options.json:
        ctx.out.print_json({"id": event_id, "calendarId": calendar_id, "deleted": True})
        return 0
    ctx.out.print(f"Event deleted: {event_id}")
    return 0
