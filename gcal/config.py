"""Runtime settings for the gcal CLI.

Resolution order for every field: CLI option (applied by handlers) >
environment > config file > default. The config file is YAML, found at
$GCAL_CONFIG or gcal/config.yaml under the first config root that has one.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

from core.constants import (
    DEFAULT_CALENDAR,
    DEFAULT_PERMISSIONS_PATH,
    DEFAULT_TIMEZONE,
    GOOGLE_CALENDAR_TOKEN_NAME,
    config_roots,
)
from core.yamlio import load_mapping

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """Immutable configuration container."""

    permissions_path: str = DEFAULT_PERMISSIONS_PATH
    token_name: str = GOOGLE_CALENDAR_TOKEN_NAME
    default_calendar: str = DEFAULT_CALENDAR
    default_timezone: str = DEFAULT_TIMEZONE
    debug: bool = False
    config_path: Optional[str] = None

    @property
    def permissions_file(self) -> Path:
        return Path(self.permissions_path).expanduser()


def find_config_file(env: Mapping[str, str]) -> Optional[str]:
    """Locate the gcal config file, or None."""
    explicit = env.get("GCAL_CONFIG")
    if explicit:
        return os.path.expanduser(explicit)
    for root in config_roots():
        candidate = os.path.join(root, "gcal", "config.yaml")
        if os.path.exists(candidate):
            return candidate
    return None


def _pick(env: Mapping[str, str], env_key: str, cfg: Mapping[str, Any], cfg_key: str, default: str) -> str:
    value = env.get(env_key)
    if value:
        return value
    value = cfg.get(cfg_key)
    if value:
        return str(value)
    return default


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from the environment and the optional config file."""
    env = os.environ if env is None else env
    config_path = find_config_file(env)
    cfg = load_mapping(config_path)
    return Settings(
        permissions_path=_pick(env, "GCAL_PERMISSIONS", cfg, "permissions", DEFAULT_PERMISSIONS_PATH),
        token_name=_pick(env, "GCAL_TOKEN_NAME", cfg, "token_name", GOOGLE_CALENDAR_TOKEN_NAME),
        default_calendar=_pick(env, "GCAL_CALENDAR", cfg, "calendar", DEFAULT_CALENDAR),
        default_timezone=_pick(env, "GCAL_TIMEZONE", cfg, "timezone", DEFAULT_TIMEZONE),
        debug=(env.get("DEBUG") or "").strip().lower() in _TRUTHY,
        config_path=config_path,
    )
