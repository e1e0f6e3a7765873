"""YAML config loading for the CLIs."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .cli_errors import ConfigError

__all__ = ["load_mapping"]


def load_mapping(path: Optional[str]) -> Dict[str, Any]:
    """Load a YAML file whose root is a mapping.

    Returns {} when the path is unset, missing or empty. A file that cannot
    be parsed, or whose root is not a mapping, raises ConfigError.
    """
    if not path:
        return {}
    p = Path(path).expanduser()
    if not p.exists():
        return {}
    text = p.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {p}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a mapping at the top of {p}, got {type(data).__name__}")
    return data
