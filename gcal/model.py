"""Typed views of Google Calendar payloads.

Remote JSON is parsed at the boundary into these dataclasses. Parsing is
lenient: every field except the record itself is optional, so a sparse
event never fails here. Only a non-mapping payload raises.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from core.date_utils import is_date_only

NO_TITLE = "(No title)"


def _require_mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise TypeError(f"{what} must be a mapping, got {type(data).__name__}")
    return data


def _opt_str(v: Any) -> Optional[str]:
    if v is None:
        return None
    return str(v)


@dataclass(frozen=True)
class CalendarDescriptor:
    id: str
    summary: str = ""
    description: Optional[str] = None
    time_zone: Optional[str] = None
    access_role: Optional[str] = None
    primary: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CalendarDescriptor":
        data = _require_mapping(data, "calendar")
        return cls(
            id=str(data.get("id") or ""),
            summary=str(data.get("summary") or data.get("summaryOverride") or ""),
            description=_opt_str(data.get("description")),
            time_zone=_opt_str(data.get("timeZone")),
            access_role=_opt_str(data.get("accessRole")),
            primary=bool(data.get("primary", False)),
        )


@dataclass(frozen=True)
class EventTime:
    """start/end of an event: exactly one of date_time or date is expected."""
    date_time: Optional[str] = None
    date: Optional[str] = None
    time_zone: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> Optional["EventTime"]:
        if not isinstance(data, Mapping):
            return None
        return cls(
            date_time=_opt_str(data.get("dateTime")),
            date=_opt_str(data.get("date")),
            time_zone=_opt_str(data.get("timeZone")),
        )

    @property
    def value(self) -> Optional[str]:
        return self.date_time or self.date

    @property
    def is_all_day(self) -> bool:
        return not self.date_time

    def to_dict(self) -> Dict[str, str]:
        out: Dict[str, str] = {}
        if self.date_time:
            out["dateTime"] = self.date_time
        elif self.date:
            out["date"] = self.date
        if self.time_zone:
            out["timeZone"] = self.time_zone
        return out


@dataclass(frozen=True)
class Attendee:
    email: str = ""
    display_name: Optional[str] = None
    response_status: Optional[str] = None
    optional: Optional[bool] = None
    organizer: Optional[bool] = None
    is_self: Optional[bool] = None

    @classmethod
    def from_dict(cls, data: Any) -> "Attendee":
        if not isinstance(data, Mapping):
            return cls(email=str(data or ""))
        return cls(
            email=str(data.get("email") or ""),
            display_name=_opt_str(data.get("displayName")),
            response_status=_opt_str(data.get("responseStatus")),
            optional=data.get("optional"),
            organizer=data.get("organizer"),
            is_self=data.get("self"),
        )

    @property
    def label(self) -> str:
        return self.display_name or self.email

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"email": self.email}
        for key, value in (
            ("displayName", self.display_name),
            ("responseStatus", self.response_status),
            ("optional", self.optional),
            ("organizer", self.organizer),
            ("self", self.is_self),
        ):
            if value is not None:
                out[key] = value
        return out


@dataclass(frozen=True)
class EventRecord:
    """An event as returned by the API."""
    id: str = ""
    summary: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    start: Optional[EventTime] = None
    end: Optional[EventTime] = None
    status: Optional[str] = None
    created: Optional[str] = None
    updated: Optional[str] = None
    html_link: Optional[str] = None
    attendees: Tuple[Attendee, ...] = ()
    organizer: Optional[Dict[str, Any]] = None
    recurrence: Optional[Tuple[str, ...]] = None
    reminders: Optional[Dict[str, Any]] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EventRecord":
        data = _require_mapping(data, "event")
        attendees = data.get("attendees") or []
        recurrence = data.get("recurrence")
        organizer = data.get("organizer")
        reminders = data.get("reminders")
        return cls(
            id=str(data.get("id") or ""),
            summary=_opt_str(data.get("summary")),
            description=_opt_str(data.get("description")),
            location=_opt_str(data.get("location")),
            start=EventTime.from_dict(data.get("start")),
            end=EventTime.from_dict(data.get("end")),
            status=_opt_str(data.get("status")),
            created=_opt_str(data.get("created")),
            updated=_opt_str(data.get("updated")),
            html_link=_opt_str(data.get("htmlLink")),
            attendees=tuple(Attendee.from_dict(a) for a in attendees if a is not None),
            organizer=dict(organizer) if isinstance(organizer, Mapping) else None,
            recurrence=tuple(str(r) for r in recurrence) if isinstance(recurrence, (list, tuple)) else None,
            reminders=dict(reminders) if isinstance(reminders, Mapping) else None,
        )


@dataclass(frozen=True)
class NormalizedEvent:
    """Canonical display record derived from an EventRecord."""
    id: str
    summary: str
    description: str
    location: str
    start: Optional[str]
    end: Optional[str]
    is_all_day: bool
    status: Optional[str]
    created: Optional[str]
    updated: Optional[str]
    html_link: Optional[str]
    attendees: Tuple[Attendee, ...]
    attendee_count: int
    organizer: Optional[Dict[str, Any]]
    recurrence: Optional[Tuple[str, ...]]
    reminders: Optional[Dict[str, Any]]

    def to_record(self) -> Dict[str, Any]:
        """JSON-compatible EventRecord shape; normalizing it again yields self."""
        out: Dict[str, Any] = {
            "id": self.id,
            "summary": self.summary,
            "description": self.description,
            "location": self.location,
        }
        time_key = "date" if self.is_all_day else "dateTime"
        if self.start is not None:
            out["start"] = {time_key: self.start}
        if self.end is not None:
            out["end"] = {time_key: self.end}
        for key, value in (
            ("status", self.status),
            ("created", self.created),
            ("updated", self.updated),
            ("htmlLink", self.html_link),
            ("organizer", self.organizer),
            ("reminders", self.reminders),
        ):
            if value is not None:
                out[key] = value
        out["attendees"] = [a.to_dict() for a in self.attendees]
        if self.recurrence is not None:
            out["recurrence"] = list(self.recurrence)
        return out


@dataclass
class EventDraft:
    """Fields for creating or patching an event."""
    title: Optional[str] = None
    start: Optional[str] = None
    end: Optional[str] = None
    timezone: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    attendees: List[str] = field(default_factory=list)
    reminder_minutes: Optional[int] = None

    def _time(self, value: str) -> Dict[str, str]:
        if is_date_only(value):
            return {"date": value.strip()}
        out = {"dateTime": value.strip()}
        if self.timezone:
            out["timeZone"] = self.timezone
        return out

    def is_empty(self) -> bool:
        return not any(
            (
                self.title,
                self.start,
                self.end,
                self.description is not None,
                self.location is not None,
                self.attendees,
                self.reminder_minutes is not None,
            )
        )

    def to_payload(self) -> Dict[str, Any]:
        """API body containing only the fields that were provided."""
        body: Dict[str, Any] = {}
        if self.title:
            body["summary"] = self.title
        if self.start:
            body["start"] = self._time(self.start)
        if self.end:
            body["end"] = self._time(self.end)
        if self.description is not None:
            body["description"] = self.description
        if self.location is not None:
            body["location"] = self.location
        if self.attendees:
            body["attendees"] = [{"email": email} for email in self.attendees]
        if self.reminder_minutes is not None:
            body["reminders"] = {
                "useDefault": False,
                "overrides": [{"method": "popup", "minutes": int(self.reminder_minutes)}],
            }
        return body
