"""Event normalization and text renderings.

normalize() turns any event payload into a NormalizedEvent; the format_*
helpers build the compact summary line, the full detail block and the
date/time labels used by the command handlers. Times are shown in the
viewer's zone (tz=None means the system zone); all-day dates are calendar
dates and are never shifted.
"""
from __future__ import annotations

import datetime as _dt
from typing import Any, List, Mapping, Optional, Union

from core.date_utils import DateOrDateTime, parse_iso, to_local

from .model import NO_TITLE, EventRecord, NormalizedEvent

EventLike = Union[Mapping[str, Any], EventRecord, NormalizedEvent]

_WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

TIME_COLUMN = 20
CONTINUATION_INDENT = " " * 22
MAX_LISTED_ATTENDEES = 10


def normalize(raw: EventLike) -> NormalizedEvent:
    """Canonical view of an event. Total over any mapping the API returns."""
    if isinstance(raw, NormalizedEvent):
        return raw
    record = raw if isinstance(raw, EventRecord) else EventRecord.from_dict(raw)
    start = record.start.value if record.start else None
    end = record.end.value if record.end else None
    return NormalizedEvent(
        id=record.id,
        summary=record.summary or NO_TITLE,
        description=record.description or "",
        location=record.location or "",
        start=start,
        end=end,
        is_all_day=record.start is None or record.start.is_all_day,
        status=record.status,
        created=record.created,
        updated=record.updated,
        html_link=record.html_link,
        attendees=record.attendees,
        attendee_count=len(record.attendees),
        organizer=record.organizer,
        recurrence=record.recurrence,
        reminders=record.reminders,
    )


def _parse(value: Optional[str]) -> Optional[DateOrDateTime]:
    if not value:
        return None
    try:
        return parse_iso(value)
    except ValueError:
        return None


def _local_date(value: Optional[str], tz: Optional[_dt.tzinfo]) -> Optional[_dt.date]:
    parsed = _parse(value)
    if parsed is None:
        return None
    if isinstance(parsed, _dt.datetime):
        return to_local(parsed, tz).date()
    return parsed


def _clock(dt: _dt.datetime) -> str:
    return f"{dt.hour % 12 or 12}:{dt.minute:02d} {'AM' if dt.hour < 12 else 'PM'}"


def format_time(value: Optional[str], tz: Optional[_dt.tzinfo] = None) -> str:
    """'9:00 AM' in the viewer's zone; '' for missing or unparseable values."""
    parsed = _parse(value)
    if parsed is None:
        return ""
    if not isinstance(parsed, _dt.datetime):
        return _clock(_dt.datetime.combine(parsed, _dt.time(0)))
    return _clock(to_local(parsed, tz))


def format_day(d: _dt.date) -> str:
    """'Mon, Jan 5, 2026'."""
    return f"{_WEEKDAYS[d.weekday()]}, {_MONTHS[d.month - 1]} {d.day}, {d.year}"


def format_date(value: Optional[str], tz: Optional[_dt.tzinfo] = None) -> str:
    d = _local_date(value, tz)
    if d is None:
        return ""
    return format_day(d)


def format_datetime(value: Optional[str], tz: Optional[_dt.tzinfo] = None) -> str:
    """'Mon, Jan 5, 2026 9:00 AM' for created/updated stamps."""
    parsed = _parse(value)
    if parsed is None:
        return value or ""
    if not isinstance(parsed, _dt.datetime):
        return format_date(value, tz)
    return f"{format_date(value, tz)} {_clock(to_local(parsed, tz))}"


def _month_day(d: _dt.date) -> str:
    return f"{_MONTHS[d.month - 1]} {d.day}"


def format_date_range(start: Optional[str], end: Optional[str], tz: Optional[_dt.tzinfo] = None) -> str:
    """'Jan 5' when both ends share a day (or no end), else 'Jan 5 - Jan 7'."""
    start_day = _local_date(start, tz)
    if start_day is None:
        return ""
    end_day = _local_date(end, tz)
    if end_day is None or end_day == start_day:
        return _month_day(start_day)
    return f"{_month_day(start_day)} - {_month_day(end_day)}"


def format_time_range(raw: EventLike, tz: Optional[_dt.tzinfo] = None) -> str:
    ev = normalize(raw)
    if ev.is_all_day:
        return "All day"
    return f"{format_time(ev.start, tz)} - {format_time(ev.end, tz)}"


def event_date_label(raw: EventLike, tz: Optional[_dt.tzinfo] = None) -> str:
    """Date of the event's start, used for grouping and search results."""
    return format_date(normalize(raw).start, tz)


def format_summary_line(
    raw: EventLike,
    *,
    show_location: bool = False,
    show_attendees: bool = False,
    show_status: bool = False,
    tz: Optional[_dt.tzinfo] = None,
) -> str:
    """One line '<time range> <title>' plus optional indented detail lines."""
    ev = normalize(raw)
    title = " ".join(ev.summary.splitlines())
    lines = [f"{format_time_range(ev, tz).ljust(TIME_COLUMN)} {title}"]
    if show_location and ev.location:
        location = " ".join(ev.location.splitlines())
        lines.append(f"{CONTINUATION_INDENT} Location: {location}")
    if show_attendees and ev.attendee_count > 0:
        lines.append(f"{CONTINUATION_INDENT} {ev.attendee_count} attendee(s)")
    if show_status and ev.status and ev.status != "confirmed":
        lines.append(f"{CONTINUATION_INDENT} Status: {ev.status}")
    return "\n".join(lines)


def format_event_details(raw: EventLike, tz: Optional[_dt.tzinfo] = None) -> List[str]:
    """Full detail block for the `event` command."""
    ev = normalize(raw)
    lines = [
        "Event Details:",
        "",
        f"Title: {ev.summary}",
        f"Time: {format_time_range(ev, tz)}",
        f"Date: {format_date(ev.start, tz)}",
    ]
    if ev.location:
        lines.append(f"Location: {ev.location}")
    if ev.description:
        lines.append(f"Description: {ev.description}")

    if ev.attendees:
        lines.append("")
        lines.append(f"Attendees ({ev.attendee_count}):")
        for attendee in ev.attendees[:MAX_LISTED_ATTENDEES]:
            lines.append(f"  - {attendee.label} ({attendee.response_status or 'unknown'})")
        if ev.attendee_count > MAX_LISTED_ATTENDEES:
            lines.append(f"  ... and {ev.attendee_count - MAX_LISTED_ATTENDEES} more")

    lines.append("")
    lines.append(f"Status: {ev.status or 'unknown'}")
    lines.append(f"Created: {format_datetime(ev.created, tz)}")
    lines.append(f"Updated: {format_datetime(ev.updated, tz)}")
    if ev.html_link:
        lines.append(f"Link: {ev.html_link}")
    return lines
