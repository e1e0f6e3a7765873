"""Shared constants used across the CLI packages."""

from __future__ import annotations

import os

# -----------------------------------------------------------------------------
# Config paths
# -----------------------------------------------------------------------------

def config_roots() -> list[str]:
    """Return ordered list of config root directories."""
    roots: list[str] = []
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        roots.append(os.path.expanduser(xdg))
    roots.append(os.path.expanduser("~/.config"))
    # Dedupe while preserving order
    seen: set[str] = set()
    unique: list[str] = []
    for r in roots:
        if r not in seen:
            seen.add(r)
            unique.append(r)
    return unique


DEFAULT_PERMISSIONS_PATH = "~/.pave/permissions.yaml"


# -----------------------------------------------------------------------------
# Google Calendar API
# -----------------------------------------------------------------------------

GOOGLE_CALENDAR_API_URL = "https://www.googleapis.com/calendar/v3"
GOOGLE_CALENDAR_TOKEN_NAME = "google-calendar"
GOOGLE_API_NETWORK_ALLOWANCE = "googleapis.com"


# -----------------------------------------------------------------------------
# HTTP and timeouts
# -----------------------------------------------------------------------------

# Per-request timeout in seconds
DEFAULT_REQUEST_TIMEOUT = 15.0


# -----------------------------------------------------------------------------
# CLI defaults
# -----------------------------------------------------------------------------

DEFAULT_CALENDAR = "primary"
DEFAULT_TIMEZONE = "Asia/Hong_Kong"
DEFAULT_UPCOMING_DAYS = 7
LIST_WINDOW_DAYS = 365
