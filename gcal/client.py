"""Thin Google Calendar API client.

Wraps a TokenProvider into typed calendar operations. Every call goes
through request(), which surfaces the decoded JSON body or raises a
RemoteError / NetworkPermissionError.
"""
from __future__ import annotations

import datetime as _dt
import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

from core.cli_errors import (
    ConfigError,
    EnvironmentUnavailableError,
    NetworkPermissionError,
    RemoteError,
    UsageError,
)
from core.constants import (
    DEFAULT_CALENDAR,
    DEFAULT_REQUEST_TIMEOUT,
    GOOGLE_API_NETWORK_ALLOWANCE,
    GOOGLE_CALENDAR_API_URL,
    GOOGLE_CALENDAR_TOKEN_NAME,
)
from core.date_utils import local_day_bounds, now_local, to_api_timestamp
from core.query import build_query_string

from .config import Settings
from .model import EventDraft
from .tokens import FetchRequest, TokenProvider, setup_instructions

LOG = logging.getLogger(__name__)

_PERMISSION_DENIED = "Network permission denied"


def _seg(value: str) -> str:
    return quote(str(value), safe="")


class CalendarClient:
    def __init__(
        self,
        provider: Optional[TokenProvider],
        token_name: str = GOOGLE_CALENDAR_TOKEN_NAME,
        base_url: str = GOOGLE_CALENDAR_API_URL,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        setup_hint: Optional[str] = None,
    ) -> None:
        if provider is None:
            raise EnvironmentUnavailableError(
                "Secure token system not available",
                hint="Create a token registry (default ~/.pave/permissions.yaml) or set GCAL_PERMISSIONS",
            )
        if not provider.is_available(token_name):
            raise ConfigError(
                "Google Calendar token not configured",
                hint=setup_hint or setup_instructions(Settings(token_name=token_name)),
            )
        self.provider = provider
        self.token_name = token_name
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    # -------------------- Transport --------------------
    def request(self, path: str, method: str = "GET", body: Optional[Dict[str, Any]] = None) -> Any:
        """Issue an authenticated call and return the decoded JSON body."""
        url = f"{self.base_url}{path}"
        req = FetchRequest(url=url, method=method, body=body, timeout=self.timeout)
        LOG.debug("%s %s", method, url)
        try:
            resp = self.provider.fetch(self.token_name, req)
        except PermissionError as exc:
            raise NetworkPermissionError(
                f"Network permission required: --allow-network={GOOGLE_API_NETWORK_ALLOWANCE}",
                hint=str(exc) or None,
            ) from exc
        except requests.RequestException as exc:
            raise RemoteError(f"Request failed: {exc}") from exc
        except Exception as exc:
            if _PERMISSION_DENIED in str(exc):
                raise NetworkPermissionError(
                    f"Network permission required: --allow-network={GOOGLE_API_NETWORK_ALLOWANCE}",
                ) from exc
            raise

        if not resp.ok:
            try:
                data = resp.json()
            except ValueError:
                data = None
            err = data.get("error") if isinstance(data, dict) else None
            err = err if isinstance(err, dict) else {}
            message = err.get("message") or f"HTTP {resp.status}: {resp.status_text}"
            LOG.debug("%s %s failed: %s", method, url, message)
            raise RemoteError(message, status=resp.status, remote_code=err.get("code"), data=data)
        try:
            return resp.json()
        except ValueError as exc:
            raise RemoteError(f"Invalid JSON from Google Calendar: {exc}", status=resp.status) from exc

    # -------------------- Calendars --------------------
    def list_calendars(self, max_results: int = 250, show_deleted: bool = False, show_hidden: bool = False) -> Any:
        params = build_query_string({
            "maxResults": max_results,
            "showDeleted": show_deleted,
            "showHidden": show_hidden,
        })
        return self.request(f"/users/me/calendarList?{params}")

    def get_calendar(self, calendar_id: str) -> Any:
        return self.request(f"/calendars/{_seg(calendar_id)}")

    # -------------------- Events --------------------
    def list_events(
        self,
        calendar_id: str = DEFAULT_CALENDAR,
        *,
        time_min: Optional[str] = None,
        time_max: Optional[str] = None,
        query: Optional[str] = None,
        max_results: int = 250,
        single_events: bool = True,
        order_by: str = "startTime",
        show_deleted: bool = False,
    ) -> Any:
        """List events; recurring events are expanded into instances unless single_events is False."""
        params = build_query_string({
            "timeMin": time_min,
            "timeMax": time_max,
            "q": query,
            "maxResults": max_results,
            "singleEvents": single_events is not False,
            "orderBy": order_by,
            "showDeleted": show_deleted,
        })
        return self.request(f"/calendars/{_seg(calendar_id)}/events?{params}")

    def get_event(self, calendar_id: str, event_id: str) -> Any:
        return self.request(f"/calendars/{_seg(calendar_id)}/events/{_seg(event_id)}")

    def get_today_events(
        self,
        calendar_id: str = DEFAULT_CALENDAR,
        *,
        max_results: int = 50,
        now: Optional[_dt.datetime] = None,
        tz: Optional[_dt.tzinfo] = None,
    ) -> Any:
        """Events between local midnight and the next one (tz=None: system zone)."""
        start, end = local_day_bounds(now or now_local(), tz)
        return self.list_events(
            calendar_id,
            time_min=to_api_timestamp(start),
            time_max=to_api_timestamp(end),
            max_results=max_results,
        )

    def get_upcoming_events(
        self,
        days: int = 7,
        calendar_id: str = DEFAULT_CALENDAR,
        *,
        max_results: int = 100,
        now: Optional[_dt.datetime] = None,
    ) -> Any:
        start = now or now_local()
        end = start + _dt.timedelta(seconds=days * 86400)
        return self.list_events(
            calendar_id,
            time_min=to_api_timestamp(start),
            time_max=to_api_timestamp(end),
            max_results=max_results,
        )

    def search_events(
        self,
        query: str,
        *,
        calendar_id: Optional[str] = None,
        time_min: Optional[str] = None,
        time_max: Optional[str] = None,
        max_results: int = 50,
    ) -> Any:
        return self.list_events(
            calendar_id or DEFAULT_CALENDAR,
            time_min=time_min,
            time_max=time_max,
            query=query,
            max_results=max_results,
        )

    # -------------------- Mutations --------------------
    def create_event(self, calendar_id: str, draft: EventDraft) -> Any:
        return self.request(f"/calendars/{_seg(calendar_id)}/events", method="POST", body=draft.to_payload())

    def update_event(self, calendar_id: str, event_id: str, draft: EventDraft) -> Any:
        """Patch only the fields set on draft."""
        return self.request(
            f"/calendars/{_seg(calendar_id)}/events/{_seg(event_id)}",
            method="PATCH",
            body=draft.to_payload(),
        )

    def delete_event(self, calendar_id: str, event_id: str, *, confirmed: bool = False) -> Any:
        if not confirmed:
            raise UsageError("Refusing to delete without confirmation", hint="Pass --yes to skip the prompt")
        return self.request(f"/calendars/{_seg(calendar_id)}/events/{_seg(event_id)}", method="DELETE")
