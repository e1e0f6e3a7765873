"""Flat argv tokenizer shared by the CLIs.

Splits a raw argument list into a command name, positional arguments and an
option mapping. Supports:
- Long options (--key value, --key=value, --flag)
- Short options (-k value, -k)
- Alias folding (-c -> calendar) via resolve_aliases()

Parsing never validates: unknown options are kept and unknown commands are
left for dispatch to reject.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Sequence, Tuple, Union

__all__ = ["OptionValue", "ParsedArguments", "parse_argv", "resolve_aliases"]

OptionValue = Union[str, bool]


@dataclass(frozen=True)
class ParsedArguments:
    """Result of tokenizing one invocation's argv."""
    command: Optional[str] = None
    positional: Tuple[str, ...] = ()
    options: Mapping[str, OptionValue] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "positional", tuple(self.positional))
        object.__setattr__(self, "options", MappingProxyType(dict(self.options)))


def _is_flag(token: str) -> bool:
    return token.startswith("-")


def parse_argv(argv: Sequence[str]) -> ParsedArguments:
    """Tokenize argv into command, positionals and options.

    Value consumption: an option takes the next token as its value unless
    that token is missing or itself starts with '-', in which case the
    option is boolean True.
    """
    command: Optional[str] = None
    positional: list[str] = []
    options: Dict[str, OptionValue] = {}

    tokens = list(argv)
    i = 0
    while i < len(tokens):
        tok = tokens[i]
        if _is_flag(tok):
            if tok.startswith("--"):
                body = tok[2:]
                if "=" in body:
                    key, value = body.split("=", 1)
                    options[key] = value
                    i += 1
                    continue
                key = body
            else:
                key = tok[1:]
            if i + 1 < len(tokens) and not _is_flag(tokens[i + 1]):
                options[key] = tokens[i + 1]
                i += 2
                continue
            options[key] = True
        elif command is None:
            command = tok
        else:
            positional.append(tok)
        i += 1

    return ParsedArguments(command=command, positional=tuple(positional), options=options)


def resolve_aliases(
    options: Mapping[str, OptionValue],
    aliases: Mapping[str, str],
) -> Dict[str, OptionValue]:
    """Fold short aliases onto their canonical long keys.

    When both the long and the short form are given, the long form wins.
    Keys with no alias entry pass through unchanged.
    """
    out: Dict[str, OptionValue] = {}
    for key, value in options.items():
        if key not in aliases:
            out[key] = value
    for short, long_key in aliases.items():
        if short in options and long_key not in options:
            out[long_key] = options[short]
    return out
