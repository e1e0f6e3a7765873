"""Standardized CLI error types and error handling.

Every failure a command can report is a CLIError subclass. Handlers raise;
the dispatcher calls handle_error() once to print and pick the exit code.
"""
from __future__ import annotations

import json
import sys
import traceback
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Optional, TextIO


class ExitCode(IntEnum):
    """Standard CLI exit codes."""
    SUCCESS = 0
    ERROR = 1
    INTERRUPTED = 130  # Standard for Ctrl+C


@dataclass
class CLIError(Exception):
    """CLI error with exit code and message."""
    message: str
    code: ExitCode = ExitCode.ERROR
    hint: Optional[str] = None

    def __str__(self) -> str:
        return self.message


class EnvironmentUnavailableError(CLIError):
    """The host credential capability is missing entirely."""
    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message, ExitCode.ERROR, hint)


class ConfigError(CLIError):
    """Configuration-related error (e.g. credential not configured)."""
    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message, ExitCode.ERROR, hint)


class UsageError(CLIError):
    """Usage/argument error."""
    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message, ExitCode.ERROR, hint)


class NetworkPermissionError(CLIError):
    """Transport refused to reach the API host."""
    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message, ExitCode.ERROR, hint)


class RemoteError(CLIError):
    """Non-success response (or transport failure) from the remote API."""
    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        remote_code: Any = None,
        data: Any = None,
        hint: Optional[str] = None,
    ):
        super().__init__(message, ExitCode.ERROR, hint)
        self.status = status
        self.remote_code = remote_code
        self.data = data


def error_envelope(error: BaseException) -> dict:
    """JSON-safe {error, status, data} envelope for an exception."""
    return {
        "error": str(error),
        "status": getattr(error, "status", None),
        "data": getattr(error, "data", None),
    }


def handle_error(
    error: BaseException,
    *,
    context: Optional[str] = None,
    verbose: bool = False,
    json_envelope: bool = False,
    stream: Optional[TextIO] = None,
) -> int:
    """Report an exception and return the exit code to use.

    Args:
        error: The exception to handle.
        context: Failure label prefixed to the message (e.g. "Search failed").
        verbose: If True, print stack trace for unexpected errors.
        json_envelope: Also write the {error, status, data} envelope.
        stream: Destination (defaults to sys.stderr).

    Returns:
        Exit code to use.
    """
    out = stream or sys.stderr

    if isinstance(error, KeyboardInterrupt):
        print("\nInterrupted.", file=out)
        return ExitCode.INTERRUPTED

    prefix = f"{context}: " if context else ""
    print(f"Error: {prefix}{error}", file=out)

    code = ExitCode.ERROR
    if isinstance(error, CLIError):
        if error.hint:
            first, *rest = error.hint.splitlines()
            print(f"Hint: {first}", file=out)
            for line in rest:
                print(line, file=out)
        code = error.code
    elif verbose:
        traceback.print_exception(type(error), error, error.__traceback__, file=out)

    if json_envelope:
        print(json.dumps(error_envelope(error), indent=2, default=str), file=out)
    return code
