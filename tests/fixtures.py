"""Shared test fixtures and utilities.

This module provides common helpers to simplify testing across the gcal
test suite: temporary YAML files, output capture, and a harness that runs
the CLI against a fake token provider.
"""

from __future__ import annotations

import datetime as _dt
import io
import os
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from core.cli_output import OutputConfig, OutputWriter

REPO_ROOT = Path(__file__).resolve().parents[1]

# Fixed "now" for handler tests: Mon, Jan 5, 2026 10:00 UTC.
FIXED_NOW = _dt.datetime(2026, 1, 5, 10, 0, tzinfo=_dt.timezone.utc)


# -----------------------------------------------------------------------------
# Path helpers
# -----------------------------------------------------------------------------


def repo_root() -> Path:
    return REPO_ROOT


def repo_path(*parts: str) -> Path:
    return REPO_ROOT.joinpath(*parts)


# -----------------------------------------------------------------------------
# YAML config helpers
# -----------------------------------------------------------------------------


def write_yaml(data: dict, dir: Optional[str] = None, filename: str = "config.yaml") -> str:
    """Write a dict to a temporary YAML file, return the path."""
    import yaml

    td = dir or tempfile.mkdtemp()
    p = os.path.join(td, filename)
    with open(p, "w", encoding="utf-8") as fh:
        yaml.safe_dump(data, fh, sort_keys=False)
    return p


@contextmanager
def temp_yaml_file(data: dict, suffix: str = ".yaml"):
    """Context manager that yields a path to a temporary YAML file."""
    import yaml

    with tempfile.NamedTemporaryFile("w+", delete=False, suffix=suffix) as tf:
        yaml.safe_dump(data, tf)
        tf.flush()
        yield tf.name
    os.unlink(tf.name)


def registry_data(env: str = "GOOGLE_CALENDAR_ACCESS_TOKEN", **entry) -> dict:
    """A token registry with a single google-calendar entry."""
    spec = {
        "env": env,
        "type": "oauth",
        "domains": ["www.googleapis.com", "*.googleapis.com"],
        "placement": {"type": "header", "name": "Authorization", "format": "Bearer {token}"},
    }
    spec.update(entry)
    return {"tokens": {"google-calendar": spec}}


# -----------------------------------------------------------------------------
# Output capture helpers
# -----------------------------------------------------------------------------


def make_writer():
    """OutputWriter bound to fresh buffers; returns (writer, out, err)."""
    out, err = io.StringIO(), io.StringIO()
    return OutputWriter(OutputConfig(file=out, err_file=err)), out, err


@dataclass
class CLIResult:
    code: int
    stdout: str
    stderr: str


def run_cli(
    argv: Sequence[str],
    provider=None,
    *,
    env: Optional[Dict[str, str]] = None,
    answers: Optional[List[str]] = None,
    now: _dt.datetime = FIXED_NOW,
) -> CLIResult:
    """Run gcal's main() with a fake provider, captured output and canned prompts.

    `answers` feeds the delete confirmation; the questions asked are recorded
    on `provider.prompts` when the provider has that list.
    """
    from gcal.cli.main import main

    writer, out, err = make_writer()
    replies = list(answers or [])

    def confirm(question: str) -> bool:
        if provider is not None and hasattr(provider, "prompts"):
            provider.prompts.append(question)
        reply = replies.pop(0) if replies else ""
        return reply.strip().lower() in ("y", "yes")

    code = main(
        list(argv),
        env=env if env is not None else {},
        output=writer,
        provider_factory=lambda settings: provider,
        confirm=confirm,
        now=lambda: now,
    )
    return CLIResult(code=code, stdout=out.getvalue(), stderr=err.getvalue())
