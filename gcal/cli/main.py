"""Google Calendar CLI using the CLIApp framework.

Commands:
  auth | calendars | today | upcoming [days] | list [calendar]
  search <query> | event <eventId>
  create/add | update/edit <eventId> | delete/remove <eventId>

Credentials never pass through this process's arguments: calls are made
through a token provider configured by a token registry file.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Callable, List, Mapping, Optional

from core.cli_args import ParsedArguments, parse_argv, resolve_aliases
from core.cli_framework import CLIApp, CommandDef
from core.cli_output import OutputWriter
from core.date_utils import now_local

from .. import commands
from ..client import CalendarClient
from ..config import Settings, load_settings
from ..tokens import TokenProvider, load_token_provider, registry_snippet, setup_instructions
from .options import OPTION_ALIASES, resolve_options

ProviderFactory = Callable[[Settings], Optional[TokenProvider]]

_TRUTHY = {"1", "true", "yes", "on"}

EPILOG = (
    "TOKEN SETUP:\n"
    "  Register the calendar token in ~/.pave/permissions.yaml (or $GCAL_PERMISSIONS):\n"
    + "\n".join(f"    {line}" for line in registry_snippet("google-calendar").splitlines())
    + "\n  then export the variable named by 'env'.\n"
    "\n"
    "EXAMPLES:\n"
    "  gcal today\n"
    "  gcal upcoming 14 --summary\n"
    '  gcal search "standup" --from 2026-01-01 --to 2026-01-31\n'
    '  gcal create --title "Standup" --start 2026-01-05T09:00:00 --end 2026-01-05T09:30:00\n'
    "  gcal delete abc123 --yes"
)

app = CLIApp(
    "gcal",
    "Google Calendar CLI: read, search and manage events",
    epilog=EPILOG,
    aliases=OPTION_ALIASES,
)

app.option("-c, --calendar <id>", "Calendar ID (default: primary)")
app.option("-n, --max <n>", "Maximum number of events to fetch")
app.option("-q, --query <text>", "Search query")
app.option("-f, --from <date>", "Search from date (YYYY-MM-DD or ISO datetime)")
app.option("-t, --to <date>", "Search to date")
app.option("-d, --days <n>", "Days ahead for upcoming (default: 7)")
app.option("--summary", "Compact output")
app.option("--full", "Show attendees and status")
app.option("--json", "Print the raw API response")
app.option("--title, --start, --end", "Event fields for create/update")
app.option("--description, --location", "Optional event fields")
app.option("--attendees <a,b>", "Comma-separated attendee emails")
app.option("--timezone <tz>", "Time zone for event times (default: Asia/Hong_Kong)")
app.option("--reminder <minutes>", "Popup reminder before the event")
app.option("-y, --yes", "Delete without asking")
app.option("-v, --verbose", "Debug logging and tracebacks")
app.option("-h, --help", "Show this help")


@app.command("auth", help="Check access to Google Calendar", failure="Authentication failed")
def cmd_auth(ctx) -> int:
    return commands.run_auth(ctx)


@app.command("calendars", help="List your calendars", failure="Failed to list calendars")
def cmd_calendars(ctx) -> int:
    return commands.run_calendars(ctx)


@app.command("today", help="Show today's events", failure="Failed to get today's events")
def cmd_today(ctx) -> int:
    return commands.run_today(ctx)


@app.command("upcoming", usage="[days]", help="Show upcoming events", failure="Failed to get upcoming events")
def cmd_upcoming(ctx) -> int:
    return commands.run_upcoming(ctx)


@app.command("list", usage="[calendar]", help="List events for the next year", failure="Failed to list events")
def cmd_list(ctx) -> int:
    return commands.run_list(ctx)


@app.command("search", usage="<query>", help="Search events", failure="Search failed")
def cmd_search(ctx) -> int:
    return commands.run_search(ctx)


@app.command("event", usage="<eventId>", help="Show event details", failure="Failed to get event")
def cmd_event(ctx) -> int:
    return commands.run_event(ctx)


@app.command("create", aliases=["add"], help="Create an event", failure="Failed to create event")
def cmd_create(ctx) -> int:
    return commands.run_create(ctx)


@app.command("update", aliases=["edit"], usage="<eventId>", help="Update an event", failure="Failed to update event")
def cmd_update(ctx) -> int:
    return commands.run_update(ctx)


@app.command("delete", aliases=["remove"], usage="<eventId>", help="Delete an event", failure="Failed to delete event")
def cmd_delete(ctx) -> int:
    return commands.run_delete(ctx)


def build_context(
    parsed: ParsedArguments,
    settings: Settings,
    output: OutputWriter,
    *,
    provider_factory: ProviderFactory = load_token_provider,
    confirm: Callable[[str], bool] = commands.prompt_yes_no,
    now: Callable = now_local,
) -> commands.CommandContext:
    """Resolve options and wire a lazily-built client for one invocation."""
    options = resolve_options(parsed)

    def client_factory() -> CalendarClient:
        return CalendarClient(
            provider_factory(settings),
            token_name=settings.token_name,
            setup_hint=setup_instructions(settings),
        )

    return commands.CommandContext(
        args=parsed,
        options=options,
        settings=settings,
        out=output,
        client_factory=client_factory,
        confirm=confirm,
        now=now,
    )


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(
    argv: Optional[List[str]] = None,
    *,
    env: Optional[Mapping[str, str]] = None,
    output: Optional[OutputWriter] = None,
    provider_factory: ProviderFactory = load_token_provider,
    confirm: Callable[[str], bool] = commands.prompt_yes_no,
    now: Callable = now_local,
) -> int:
    """Main entry point for the gcal CLI."""
    args = sys.argv[1:] if argv is None else list(argv)
    env = os.environ if env is None else env
    debug = (env.get("DEBUG") or "").strip().lower() in _TRUTHY
    verbose = bool(resolve_aliases(parse_argv(args).options, OPTION_ALIASES).get("verbose"))
    _configure_logging(debug or verbose)
    writer = output or OutputWriter()

    def context_factory(parsed: ParsedArguments, cmd_def: CommandDef) -> commands.CommandContext:
        settings = load_settings(env)
        logging.getLogger(__name__).debug("dispatching %s (calendar=%s)", cmd_def.name, settings.default_calendar)
        return build_context(
            parsed,
            settings,
            writer,
            provider_factory=provider_factory,
            confirm=confirm,
            now=now,
        )

    return app.run(args, context_factory=context_factory, output=writer, debug=debug)


if __name__ == "__main__":
    raise SystemExit(main())
