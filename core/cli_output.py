"""Stream routing for CLI output.

Human-readable text goes to stdout, failures and hints to stderr. --json
output is the decoded remote body, pretty-printed verbatim.
"""
from __future__ import annotations

import json
import sys
from dataclasses import asdict, dataclass, is_dataclass
from typing import Any, Iterable, Optional, TextIO


@dataclass
class OutputConfig:
    """Destinations for one invocation (None means the process streams)."""
    file: Optional[TextIO] = None
    err_file: Optional[TextIO] = None

    @property
    def stream(self) -> TextIO:
        return self.file or sys.stdout

    @property
    def err_stream(self) -> TextIO:
        return self.err_file or sys.stderr


class OutputWriter:
    """Writes command results and diagnostics to the configured streams."""

    def __init__(self, config: Optional[OutputConfig] = None):
        self.config = config or OutputConfig()

    def print(self, *args, **kwargs) -> None:
        kwargs.setdefault("file", self.config.stream)
        print(*args, **kwargs)

    def print_lines(self, lines: Iterable[str]) -> None:
        for line in lines:
            self.print(line)

    def print_error(self, message: str) -> None:
        print(f"Error: {message}", file=self.config.err_stream)

    def print_hint(self, message: str) -> None:
        print(f"Hint: {message}", file=self.config.err_stream)

    def print_json(self, data: Any) -> None:
        """Pretty-print data (indent 2); dataclasses are converted to dicts."""
        if is_dataclass(data) and not isinstance(data, type):
            data = asdict(data)
        self.print(json.dumps(data, indent=2, default=str))
