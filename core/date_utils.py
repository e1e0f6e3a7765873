"""Shared date and time utilities.

ISO-8601 parsing for API values, local-day windows, and the UTC timestamp
format the Google APIs expect for timeMin/timeMax.
"""
from __future__ import annotations

import datetime as _dt
import re
from typing import Optional, Tuple, Union

__all__ = [
    "DateOrDateTime",
    "is_date_only",
    "local_day_bounds",
    "now_local",
    "parse_date_arg",
    "parse_iso",
    "to_api_timestamp",
    "to_local",
]

DateOrDateTime = Union[_dt.date, _dt.datetime]

_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def is_date_only(value: Optional[str]) -> bool:
    """True for 'YYYY-MM-DD' strings (all-day values)."""
    return bool(value) and bool(_DATE_ONLY.match(value.strip()))


def parse_iso(value: str) -> DateOrDateTime:
    """Parse an API date ('2026-01-05') or datetime ('2026-01-05T09:00:00Z').

    Date-only input returns a date; everything else a datetime.
    Raises ValueError on malformed input.
    """
    s = (value or "").strip()
    if is_date_only(s):
        return _dt.date.fromisoformat(s)
    if s.endswith("Z") or s.endswith("z"):
        s = s[:-1] + "+00:00"
    return _dt.datetime.fromisoformat(s)


def now_local() -> _dt.datetime:
    """Current time as an aware datetime in the system zone."""
    return _dt.datetime.now().astimezone()


def to_local(value: _dt.datetime, tz: Optional[_dt.tzinfo] = None) -> _dt.datetime:
    """Convert to tz (system zone when None). Naive input is taken as local."""
    return value.astimezone(tz)


def local_day_bounds(
    now: _dt.datetime,
    tz: Optional[_dt.tzinfo] = None,
) -> Tuple[_dt.datetime, _dt.datetime]:
    """Return (midnight, next midnight) for the day containing now.

    Each midnight is resolved on its own, so the two bounds carry different
    offsets across a daylight-saving change. tz=None means the system zone.
    """
    if tz is not None:
        day = now.astimezone(tz).date() if now.tzinfo else now.date()
        start = _dt.datetime.combine(day, _dt.time(0)).replace(tzinfo=tz)
        end = _dt.datetime.combine(day + _dt.timedelta(days=1), _dt.time(0)).replace(tzinfo=tz)
        return start, end
    day = now.astimezone().date()
    start = _dt.datetime.combine(day, _dt.time(0)).astimezone()
    end = _dt.datetime.combine(day + _dt.timedelta(days=1), _dt.time(0)).astimezone()
    return start, end


def to_api_timestamp(value: _dt.datetime) -> str:
    """RFC 3339 UTC timestamp with milliseconds, e.g. 2026-01-05T01:00:00.000Z."""
    if value.tzinfo is None:
        value = value.astimezone()
    utc = value.astimezone(_dt.timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def parse_date_arg(text: str, tz: Optional[_dt.tzinfo] = None) -> _dt.datetime:
    """Parse a user-supplied --from/--to value into an aware datetime.

    'YYYY-MM-DD' means local midnight of that day; ISO datetimes without an
    offset are taken in tz (system zone when None).
    Raises ValueError on malformed input.
    """
    parsed = parse_iso(text)
    if not isinstance(parsed, _dt.datetime):
        parsed = _dt.datetime.combine(parsed, _dt.time(0))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz) if tz is not None else parsed.astimezone()
    return parsed
