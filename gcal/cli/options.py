"""Canonical option resolution for gcal commands.

Short aliases are folded onto long names once, and values are coerced to
their types here, so handlers read plain attributes.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from core.cli_args import OptionValue, ParsedArguments, resolve_aliases
from core.cli_errors import UsageError

OPTION_ALIASES = {
    "c": "calendar",
    "n": "max",
    "q": "query",
    "f": "from",
    "t": "to",
    "d": "days",
    "y": "yes",
    "h": "help",
    "v": "verbose",
}

_FALSY = {"false", "0", "no", "off"}


@dataclass(frozen=True)
class CommandOptions:
    calendar: Optional[str] = None
    max: Optional[int] = None
    query: Optional[str] = None
    from_date: Optional[str] = None
    to_date: Optional[str] = None
    days: Optional[int] = None
    summary: bool = False
    full: bool = False
    json: bool = False
    yes: bool = False
    verbose: bool = False
    title: Optional[str] = None
    start: Optional[str] = None
    end: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    attendees: Tuple[str, ...] = ()
    timezone: Optional[str] = None
    reminder: Optional[int] = None


def _text(opts: Mapping[str, OptionValue], key: str) -> Optional[str]:
    value = opts.get(key)
    if value is None:
        return None
    if value is True:
        raise UsageError(f"--{key} requires a value")
    return str(value)


def parse_count(value: Optional[str], what: str) -> Optional[int]:
    """Positive integer from text, or None; malformed input is a usage error."""
    if value is None:
        return None
    try:
        n = int(str(value).strip())
    except ValueError:
        raise UsageError(f"{what} must be a whole number, got '{value}'") from None
    if n < 1:
        raise UsageError(f"{what} must be at least 1, got {n}")
    return n


def _flag(opts: Mapping[str, OptionValue], key: str) -> bool:
    value = opts.get(key)
    if value is None or value is False:
        return False
    if value is True:
        return True
    return str(value).strip().lower() not in _FALSY


def _reminder(opts: Mapping[str, OptionValue]) -> Optional[int]:
    value = _text(opts, "reminder")
    if value is None:
        return None
    try:
        minutes = int(value.strip())
    except ValueError:
        raise UsageError(f"--reminder must be minutes as a whole number, got '{value}'") from None
    if minutes < 0:
        raise UsageError("--reminder cannot be negative")
    return minutes


def _emails(value: Optional[str]) -> Tuple[str, ...]:
    if not value:
        return ()
    return tuple(part.strip() for part in value.split(",") if part.strip())


def resolve_options(parsed: ParsedArguments) -> CommandOptions:
    """Fold aliases and coerce option values for one invocation."""
    opts = resolve_aliases(parsed.options, OPTION_ALIASES)
    return CommandOptions(
        calendar=_text(opts, "calendar"),
        max=parse_count(_text(opts, "max"), "--max"),
        query=_text(opts, "query"),
        from_date=_text(opts, "from"),
        to_date=_text(opts, "to"),
        days=parse_count(_text(opts, "days"), "--days"),
        summary=_flag(opts, "summary"),
        full=_flag(opts, "full"),
        json=_flag(opts, "json"),
        yes=_flag(opts, "yes"),
        verbose=_flag(opts, "verbose"),
        title=_text(opts, "title"),
        start=_text(opts, "start"),
        end=_text(opts, "end"),
        description=_text(opts, "description"),
        location=_text(opts, "location"),
        attendees=_emails(_text(opts, "attendees")),
        timezone=_text(opts, "timezone"),
        reminder=_reminder(opts),
    )
