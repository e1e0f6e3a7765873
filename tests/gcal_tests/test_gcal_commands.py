"""End-to-end tests for gcal commands through main() with a fake provider."""

from __future__ import annotations

import json
import unittest

from tests.fakes import FakeTokenProvider, error_response, json_response, make_event
from tests.fixtures import run_cli


def _events(n, **kwargs):
    return [make_event(summary=f"Event {i}", event_id=f"e{i}", **kwargs) for i in range(n)]


class TestDispatch(unittest.TestCase):
    def test_handlers_declare_int_exit_code(self):
        from gcal.cli.main import app

        for cmd in app.commands:
            self.assertEqual(cmd.func.__annotations__.get("return"), "int", cmd.name)

    def test_help(self):
        for argv in ([], ["help"], ["--help"], ["-h"], ["today", "-h"]):
            result = run_cli(argv, FakeTokenProvider())
            self.assertEqual(result.code, 0, argv)
            self.assertIn("USAGE:", result.stdout)
            self.assertIn("create/add", result.stdout)
            self.assertIn("TOKEN SETUP:", result.stdout)

    def test_unknown_command(self):
        provider = FakeTokenProvider()
        result = run_cli(["frobnicate"], provider)
        self.assertEqual(result.code, 1)
        self.assertIn("Unknown command: frobnicate", result.stderr)
        self.assertIn("Run: gcal help", result.stderr)
        self.assertEqual(provider.requests, [])

    def test_missing_capability(self):
        result = run_cli(["today"], None)
        self.assertEqual(result.code, 1)
        self.assertIn("Secure token system not available", result.stderr)

    def test_unconfigured_token(self):
        result = run_cli(["today"], FakeTokenProvider(available=False))
        self.assertEqual(result.code, 1)
        self.assertIn("Error: Failed to get today's events: Google Calendar token not configured", result.stderr)
        self.assertIn("Hint: Add to ~/.pave/permissions.yaml:", result.stderr)

    def test_network_permission(self):
        provider = FakeTokenProvider(error=PermissionError("Network permission denied: www.googleapis.com"))
        result = run_cli(["calendars"], provider)
        self.assertEqual(result.code, 1)
        self.assertIn("--allow-network=googleapis.com", result.stderr)


class TestAuthAndCalendars(unittest.TestCase):
    CALENDARS = {
        "items": [
            {"id": "me@example.com", "summary": "Me", "primary": True, "accessRole": "owner",
             "timeZone": "Asia/Hong_Kong", "description": "Personal"},
            {"id": "team@example.com", "summary": "Team", "accessRole": "reader"},
        ]
    }

    def test_auth(self):
        provider = FakeTokenProvider(responses=[json_response({"items": self.CALENDARS["items"][:1]})])
        result = run_cli(["auth"], provider)
        self.assertEqual(result.code, 0)
        self.assertIn("Authentication successful", result.stdout)
        self.assertIn("Access to 1 calendar(s) confirmed", result.stdout)
        self.assertIn("Primary calendar: Me", result.stdout)
        self.assertEqual(provider.last_params()["maxResults"], ["1"])

    def test_auth_remote_failure(self):
        provider = FakeTokenProvider(responses=[error_response(401, "Invalid Credentials")])
        result = run_cli(["auth"], provider)
        self.assertEqual(result.code, 1)
        self.assertIn("Error: Authentication failed: Invalid Credentials", result.stderr)

    def test_calendars(self):
        result = run_cli(["calendars"], FakeTokenProvider(responses=[json_response(self.CALENDARS)]))
        self.assertEqual(result.code, 0)
        lines = result.stdout.splitlines()
        self.assertEqual(lines[0], "Found 2 calendar(s):")
        self.assertIn("Me (PRIMARY) [owner]", lines)
        self.assertIn("   ID: me@example.com", lines)
        self.assertIn("   Description: Personal", lines)
        self.assertIn("   Timezone: Asia/Hong_Kong", lines)
        self.assertIn("Team [reader]", lines)

    def test_calendars_summary(self):
        result = run_cli(["calendars", "--summary"], FakeTokenProvider(responses=[json_response(self.CALENDARS)]))
        self.assertNotIn("ID:", result.stdout)

    def test_calendars_json(self):
        result = run_cli(["calendars", "--json"], FakeTokenProvider(responses=[json_response(self.CALENDARS)]))
        self.assertEqual(json.loads(result.stdout), self.CALENDARS)


class TestToday(unittest.TestCase):
    def test_no_events(self):
        provider = FakeTokenProvider(responses=[json_response({"items": []})])
        result = run_cli(["today"], provider)
        self.assertEqual(result.code, 0)
        self.assertIn("Events for Mon, Jan 5, 2026:", result.stdout)
        self.assertIn("No events scheduled for today", result.stdout)

    def test_events_and_calendar_option(self):
        provider = FakeTokenProvider(responses=[json_response({"items": [make_event(location="HQ")]})])
        result = run_cli(["today", "-c", "team@example.com"], provider)
        self.assertEqual(result.code, 0)
        self.assertIn("Standup", result.stdout)
        self.assertIn("Location: HQ", result.stdout)
        self.assertEqual(provider.last_path(), "/calendar/v3/calendars/team%40example.com/events")

    def test_summary_hides_location(self):
        provider = FakeTokenProvider(responses=[json_response({"items": [make_event(location="HQ")]})])
        result = run_cli(["today", "--summary"], provider)
        self.assertNotIn("Location:", result.stdout)

    def test_default_calendar_from_environment(self):
        provider = FakeTokenProvider(responses=[json_response({"items": []})])
        run_cli(["today"], provider, env={"GCAL_CALENDAR": "work@example.com"})
        self.assertEqual(provider.last_path(), "/calendar/v3/calendars/work%40example.com/events")

    def test_max_option(self):
        provider = FakeTokenProvider()
        run_cli(["today", "--max", "5"], provider)
        self.assertEqual(provider.last_params()["maxResults"], ["5"])

    def test_bad_max_is_usage_error(self):
        provider = FakeTokenProvider()
        result = run_cli(["today", "--max", "abc"], provider)
        self.assertEqual(result.code, 1)
        self.assertEqual(provider.requests, [])


class TestUpcoming(unittest.TestCase):
    def test_display_cap_with_summary(self):
        provider = FakeTokenProvider(responses=[json_response({"items": _events(23)})])
        result = run_cli(["upcoming", "14", "--summary"], provider)
        self.assertEqual(result.code, 0)
        self.assertIn("Upcoming events (next 14 days):", result.stdout)
        shown = [line for line in result.stdout.splitlines() if "Event " in line]
        self.assertEqual(len(shown), 10)
        self.assertIn("... and 13 more events", result.stdout)
        self.assertIn("Use --max to increase limit", result.stdout)
        self.assertEqual(provider.last_params()["timeMax"], ["2026-01-19T10:00:00.000Z"])

    def test_full_cap_is_fifty(self):
        provider = FakeTokenProvider(responses=[json_response({"items": _events(23)})])
        result = run_cli(["upcoming"], provider)
        self.assertNotIn("more events", result.stdout)
        self.assertIn("Upcoming events (next 7 days):", result.stdout)

    def test_days_option_and_positional(self):
        provider = FakeTokenProvider()
        run_cli(["upcoming", "-d", "3"], provider)
        self.assertEqual(provider.last_params()["timeMax"], ["2026-01-08T10:00:00.000Z"])
        run_cli(["upcoming", "2", "--days", "9"], provider)
        self.assertEqual(provider.last_params()["timeMax"], ["2026-01-07T10:00:00.000Z"])

    def test_date_separators(self):
        items = [
            make_event(summary="A", start="2026-01-05", end="2026-01-06", all_day=True),
            make_event(summary="B", start="2026-01-05", end="2026-01-06", all_day=True, event_id="b"),
            make_event(summary="C", start="2026-01-06", end="2026-01-07", all_day=True, event_id="c"),
        ]
        result = run_cli(["upcoming"], FakeTokenProvider(responses=[json_response({"items": items})]))
        separators = [line for line in result.stdout.splitlines() if line.startswith("--- ")]
        self.assertEqual(separators, ["--- Mon, Jan 5, 2026 ---", "--- Tue, Jan 6, 2026 ---"])

    def test_no_events(self):
        result = run_cli(["upcoming", "3"], FakeTokenProvider(responses=[json_response({})]))
        self.assertIn("No upcoming events in the next 3 days", result.stdout)

    def test_malformed_days(self):
        provider = FakeTokenProvider()
        result = run_cli(["upcoming", "abc"], provider)
        self.assertEqual(result.code, 1)
        self.assertIn("Failed to get upcoming events", result.stderr)
        self.assertEqual(provider.requests, [])

    def test_list_uses_year_window_and_calendar(self):
        provider = FakeTokenProvider()
        result = run_cli(["list", "team@example.com"], provider)
        self.assertEqual(result.code, 0)
        self.assertIn("next 365 days", result.stdout)
        self.assertEqual(provider.last_path(), "/calendar/v3/calendars/team%40example.com/events")
        self.assertEqual(provider.last_params()["timeMax"], ["2027-01-05T10:00:00.000Z"])


class TestSearch(unittest.TestCase):
    def test_requires_query(self):
        provider = FakeTokenProvider()
        result = run_cli(["search"], provider)
        self.assertEqual(result.code, 1)
        self.assertIn("Search failed: Search query required", result.stderr)
        self.assertIn("Usage: gcal search", result.stderr)
        self.assertEqual(provider.requests, [])

    def test_positional_query(self):
        provider = FakeTokenProvider(responses=[json_response({"items": [make_event(summary="Team sync")]})])
        result = run_cli(["search", "sync"], provider)
        self.assertEqual(result.code, 0)
        self.assertIn('Search results for "sync":', result.stdout)
        self.assertIn("Team sync", result.stdout)
        self.assertEqual(provider.last_params()["q"], ["sync"])

    def test_query_option_and_window(self):
        provider = FakeTokenProvider(responses=[json_response({"items": []})])
        result = run_cli(["search", "-q", "retro", "--from", "2026-01-01T00:00:00Z", "--to", "2026-01-31T00:00:00Z"], provider)
        self.assertIn('No events found matching "retro"', result.stdout)
        params = provider.last_params()
        self.assertEqual(params["timeMin"], ["2026-01-01T00:00:00.000Z"])
        self.assertEqual(params["timeMax"], ["2026-01-31T00:00:00.000Z"])

    def test_date_only_bounds_are_timestamps(self):
        provider = FakeTokenProvider()
        run_cli(["search", "retro", "--from", "2026-01-01"], provider)
        self.assertRegex(provider.last_params()["timeMin"][0], r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.000Z$")

    def test_invalid_date(self):
        provider = FakeTokenProvider()
        result = run_cli(["search", "retro", "--from", "01/01/2026"], provider)
        self.assertEqual(result.code, 1)
        self.assertIn("Invalid --from date", result.stderr)
        self.assertEqual(provider.requests, [])


class TestEvent(unittest.TestCase):
    def test_details(self):
        provider = FakeTokenProvider(responses=[json_response(make_event(htmlLink="https://cal/e/1"))])
        result = run_cli(["event", "evt1"], provider)
        self.assertEqual(result.code, 0)
        self.assertIn("Event Details:", result.stdout)
        self.assertIn("Title: Standup", result.stdout)
        self.assertIn("Link: https://cal/e/1", result.stdout)
        self.assertEqual(provider.last_path(), "/calendar/v3/calendars/primary/events/evt1")

    def test_requires_id(self):
        result = run_cli(["event"], FakeTokenProvider())
        self.assertEqual(result.code, 1)
        self.assertIn("Event ID required", result.stderr)

    def test_not_found(self):
        provider = FakeTokenProvider(responses=[error_response(404, "Not Found")])
        result = run_cli(["event", "missing"], provider)
        self.assertEqual(result.code, 1)
        self.assertIn("Error: Failed to get event: Not Found", result.stderr)

    def test_not_found_json_envelope(self):
        provider = FakeTokenProvider(responses=[error_response(404, "Not Found")])
        result = run_cli(["event", "missing", "--json"], provider)
        self.assertEqual(result.code, 1)
        self.assertEqual(result.stdout, "")
        envelope = json.loads(result.stderr[result.stderr.index("{"):])
        self.assertEqual(envelope["status"], 404)
        self.assertEqual(envelope["error"], "Not Found")
        self.assertEqual(envelope["data"]["error"]["code"], 404)


class TestCreateUpdate(unittest.TestCase):
    def test_create(self):
        provider = FakeTokenProvider(responses=[json_response({"id": "new1", "summary": "Standup", "htmlLink": "https://cal/e/new1"})])
        result = run_cli([
            "create", "--title", "Standup", "--start", "2026-01-05T09:00:00", "--end", "2026-01-05T09:30:00",
            "--attendees", "a@x.com,b@x.com", "--reminder", "10",
        ], provider)
        self.assertEqual(result.code, 0)
        self.assertIn("Event created: Standup", result.stdout)
        self.assertIn("ID: new1", result.stdout)
        self.assertIn("Link: https://cal/e/new1", result.stdout)
        body = provider.last.body
        self.assertEqual(provider.last.method, "POST")
        self.assertEqual(body["start"], {"dateTime": "2026-01-05T09:00:00", "timeZone": "Asia/Hong_Kong"})
        self.assertEqual(body["attendees"], [{"email": "a@x.com"}, {"email": "b@x.com"}])
        self.assertEqual(body["reminders"]["overrides"], [{"method": "popup", "minutes": 10}])

    def test_add_alias_all_day(self):
        provider = FakeTokenProvider(responses=[json_response({"id": "h1"})])
        result = run_cli(["add", "--title", "Holiday", "--start", "2026-01-05", "--end", "2026-01-06"], provider)
        self.assertEqual(result.code, 0)
        self.assertEqual(provider.last.body["start"], {"date": "2026-01-05"})

    def test_create_missing_fields(self):
        provider = FakeTokenProvider()
        result = run_cli(["create", "--title", "Standup"], provider)
        self.assertEqual(result.code, 1)
        self.assertIn("--start, --end", result.stderr)
        self.assertEqual(provider.requests, [])

    def test_create_bad_time(self):
        provider = FakeTokenProvider()
        result = run_cli(["create", "--title", "x", "--start", "tomorrow", "--end", "2026-01-05"], provider)
        self.assertEqual(result.code, 1)
        self.assertIn("Invalid --start value", result.stderr)
        self.assertEqual(provider.requests, [])

    def test_update_patch(self):
        provider = FakeTokenProvider(responses=[json_response({"id": "evt1", "summary": "Renamed"})])
        result = run_cli(["edit", "evt1", "--title", "Renamed", "--timezone", "UTC"], provider)
        self.assertEqual(result.code, 0)
        self.assertIn("Event updated: Renamed", result.stdout)
        self.assertEqual(provider.last.method, "PATCH")
        self.assertEqual(provider.last.body, {"summary": "Renamed"})

    def test_update_requires_fields(self):
        provider = FakeTokenProvider()
        result = run_cli(["update", "evt1"], provider)
        self.assertEqual(result.code, 1)
        self.assertIn("Nothing to update", result.stderr)
        self.assertEqual(provider.requests, [])


class TestDelete(unittest.TestCase):
    def test_declined(self):
        provider = FakeTokenProvider()
        result = run_cli(["delete", "evt1"], provider, answers=["n"])
        self.assertEqual(result.code, 0)
        self.assertIn("Delete cancelled.", result.stdout)
        self.assertEqual(provider.prompts, ["Delete event evt1?"])
        self.assertEqual(provider.requests, [])

    def test_confirmed(self):
        provider = FakeTokenProvider(responses=[json_response(None, status=204)])
        result = run_cli(["remove", "evt1"], provider, answers=["yes"])
        self.assertEqual(result.code, 0)
        self.assertIn("Event deleted: evt1", result.stdout)
        self.assertEqual(provider.last.method, "DELETE")

    def test_yes_skips_prompt(self):
        provider = FakeTokenProvider(responses=[json_response(None, status=204)])
        result = run_cli(["delete", "evt1", "-y"], provider)
        self.assertEqual(result.code, 0)
        self.assertEqual(provider.prompts, [])
        self.assertEqual(len(provider.requests), 1)

    def test_remote_failure(self):
        provider = FakeTokenProvider(responses=[error_response(410, "Resource has been deleted")])
        result = run_cli(["delete", "evt1", "--yes"], provider)
        self.assertEqual(result.code, 1)
        self.assertIn("Failed to delete event: Resource has been deleted", result.stderr)


if __name__ == '__main__':  # pragma: no cover
    unittest.main()
