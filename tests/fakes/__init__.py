"""Shared fake/mock objects for testing.

Centralized location for fakes used across test suites.

Modules:
    calendar - FakeTokenProvider, FakeSession and event builders for Google Calendar testing
"""

from __future__ import annotations

from tests.fakes.calendar import (
    FakeHTTPResponse,
    FakeSession,
    FakeTokenProvider,
    error_response,
    json_response,
    make_event,
)

__all__ = [
    "FakeHTTPResponse",
    "FakeSession",
    "FakeTokenProvider",
    "error_response",
    "json_response",
    "make_event",
]
