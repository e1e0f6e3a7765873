"""CLI application framework for the command-line tools.

Provides a declarative way to build CLI applications with:
- Command registration via decorators (with aliases)
- Tokenizing argv with core.cli_args (no argparse validation)
- A single dispatcher that turns raised errors into exit codes
- Generated usage text
"""
from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from .cli_args import ParsedArguments, parse_argv, resolve_aliases
from .cli_errors import ExitCode, handle_error
from .cli_output import OutputWriter

CommandFunc = Callable[[Any], int]
ContextFactory = Callable[[ParsedArguments, "CommandDef"], Any]


@dataclass
class CommandDef:
    """Definition of a CLI command."""
    name: str
    func: CommandFunc
    help: str = ""
    usage: str = ""
    failure: str = ""
    aliases: List[str] = field(default_factory=list)


@dataclass
class OptionDef:
    """Help-text entry for an accepted option."""
    flags: str
    help: str = ""


class CLIApp:
    """Command registry plus dispatcher.

    Example usage:
        app = CLIApp("my-tool", "My tool CLI")

        @app.command("list", help="List items", failure="Failed to list items")
        def cmd_list(ctx):
            print("listing")
            return 0

        if __name__ == "__main__":
            raise SystemExit(app.run(context_factory=lambda parsed, cmd: parsed))
    """

    def __init__(
        self,
        name: str,
        description: str = "",
        *,
        epilog: Optional[str] = None,
        aliases: Optional[Mapping[str, str]] = None,
    ):
        """Initialize the CLI application.

        Args:
            name: Program name (used in help text).
            description: Program description.
            epilog: Optional text to display after help.
            aliases: Short option -> canonical long option mapping.
        """
        self.name = name
        self.description = description
        self.epilog = epilog
        self.aliases: Dict[str, str] = dict(aliases or {})
        self._commands: Dict[str, CommandDef] = {}
        self._lookup: Dict[str, CommandDef] = {}
        self._options: List[OptionDef] = []

    def command(
        self,
        name: str,
        *,
        help: str = "",
        usage: str = "",
        failure: str = "",
        aliases: Optional[List[str]] = None,
    ) -> Callable[[CommandFunc], CommandFunc]:
        """Decorator to register a command.

        Args:
            name: Command name.
            help: Short help text for the command.
            usage: Positional synopsis shown in help (e.g. "<eventId>").
            failure: Label prefixed to error messages from this command.
            aliases: Alternative names for the command.

        Returns:
            Decorator function.
        """
        def decorator(func: CommandFunc) -> CommandFunc:
            cmd_def = CommandDef(
                name=name,
                func=func,
                help=help,
                usage=usage,
                failure=failure,
                aliases=list(aliases or []),
            )
            self._commands[name] = cmd_def
            self._lookup[name] = cmd_def
            for alias in cmd_def.aliases:
                self._lookup[alias] = cmd_def
            return func
        return decorator

    def option(self, flags: str, help: str = "") -> None:
        """Document an accepted option in the generated help."""
        self._options.append(OptionDef(flags, help))

    def find(self, name: Optional[str]) -> Optional[CommandDef]:
        if not name:
            return None
        return self._lookup.get(name)

    @property
    def commands(self) -> List[CommandDef]:
        return list(self._commands.values())

    def format_help(self) -> str:
        """Build usage text from the registered commands and options."""
        lines = [self.description, "", "USAGE:", f"  {self.name} <command> [options]", "", "COMMANDS:"]
        for cmd in self.commands:
            names = "/".join([cmd.name, *cmd.aliases])
            synopsis = f"{names} {cmd.usage}".strip()
            lines.append(f"  {synopsis:<28} {cmd.help}".rstrip())
        if self._options:
            lines += ["", "OPTIONS:"]
            for opt in self._options:
                lines.append(f"  {opt.flags:<28} {opt.help}".rstrip())
        if self.epilog:
            lines += ["", self.epilog.rstrip()]
        return "\n".join(lines)

    def run(
        self,
        argv: Optional[Sequence[str]] = None,
        *,
        context_factory: ContextFactory,
        output: Optional[OutputWriter] = None,
        debug: bool = False,
    ) -> int:
        """Run the CLI application.

        Args:
            argv: Command-line arguments (defaults to sys.argv[1:]).
            context_factory: Builds the handler context for a dispatched command.
            output: Writer for help text and dispatch errors.
            debug: Print tracebacks for unexpected errors.

        Returns:
            Exit code.
        """
        writer = output or OutputWriter()
        parsed = parse_argv(sys.argv[1:] if argv is None else argv)
        options = resolve_aliases(parsed.options, self.aliases)

        if not parsed.command or parsed.command == "help" or options.get("help"):
            writer.print(self.format_help())
            return ExitCode.SUCCESS

        cmd_def = self.find(parsed.command)
        if cmd_def is None:
            writer.print_error(f"Unknown command: {parsed.command}")
            writer.print_hint(f"Run: {self.name} help")
            return ExitCode.ERROR

        verbose = debug or bool(options.get("verbose"))
        try:
            ctx = context_factory(parsed, cmd_def)
            return int(cmd_def.func(ctx))
        except KeyboardInterrupt as e:
            return handle_error(e, stream=writer.config.err_stream)
        except Exception as e:
            return handle_error(
                e,
                context=cmd_def.failure or None,
                verbose=verbose,
                json_envelope=bool(options.get("json")),
                stream=writer.config.err_stream,
            )
