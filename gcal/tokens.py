"""Credential capability: authenticated fetch by token name.

The calendar client never sees a token. It asks a TokenProvider whether a
named credential is available and hands it requests to send. The bundled
EnvTokenProvider reads a token registry (permissions.yaml), takes the
access token from the environment variable the registry names, restricts
calls to the registry's domains, and sends the request with requests.
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from fnmatch import fnmatch
from typing import Any, Dict, Mapping, Optional, Protocol, Tuple
from urllib.parse import urlsplit

import requests

from core.cli_errors import ConfigError
from core.constants import DEFAULT_REQUEST_TIMEOUT
from core.query import build_query_string
from core.yamlio import load_mapping

from .config import Settings

LOG = logging.getLogger(__name__)


@dataclass
class FetchRequest:
    """One outbound call, minus credentials."""
    url: str
    method: str = "GET"
    body: Optional[Any] = None
    headers: Dict[str, str] = field(default_factory=dict)
    timeout: float = DEFAULT_REQUEST_TIMEOUT


@dataclass
class FetchResponse:
    status: int
    status_text: str = ""
    text: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def json(self) -> Any:
        """Decoded body; an empty body (e.g. 204) decodes to {}."""
        if not self.text or not self.text.strip():
            return {}
        return json.loads(self.text)


class TokenProvider(Protocol):
    def is_available(self, name: str) -> bool:
        ...

    def fetch(self, name: str, request: FetchRequest) -> FetchResponse:
        ...


@dataclass(frozen=True)
class TokenSpec:
    """A token registry entry."""
    name: str
    env: str
    type: str = "oauth"
    domains: Tuple[str, ...] = ()
    placement_type: str = "header"
    placement_name: str = "Authorization"
    placement_format: str = "Bearer {token}"

    @classmethod
    def from_dict(cls, name: str, data: Mapping[str, Any]) -> "TokenSpec":
        if not isinstance(data, Mapping) or not data.get("env"):
            raise ConfigError(f"Token '{name}' needs an 'env' entry naming its environment variable")
        placement = data.get("placement") or {}
        if not isinstance(placement, Mapping):
            raise ConfigError(f"Token '{name}' has an invalid 'placement' entry")
        domains = data.get("domains") or []
        if isinstance(domains, str):
            domains = [domains]
        return cls(
            name=name,
            env=str(data["env"]),
            type=str(data.get("type") or "oauth"),
            domains=tuple(str(d) for d in domains),
            placement_type=str(placement.get("type") or "header"),
            placement_name=str(placement.get("name") or "Authorization"),
            placement_format=str(placement.get("format") or "Bearer {token}"),
        )

    def allows(self, host: Optional[str]) -> bool:
        """True when host matches one of the domain patterns (any host if none)."""
        if not self.domains:
            return True
        host = (host or "").lower()
        return any(fnmatch(host, pattern.lower()) for pattern in self.domains)


class EnvTokenProvider:
    """TokenProvider backed by a token registry and environment variables."""

    def __init__(
        self,
        specs: Mapping[str, TokenSpec],
        env: Optional[Mapping[str, str]] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.specs = dict(specs)
        self.env = os.environ if env is None else env
        self.session = session or requests.Session()

    @classmethod
    def from_file(
        cls,
        path: str,
        env: Optional[Mapping[str, str]] = None,
        session: Optional[requests.Session] = None,
    ) -> "EnvTokenProvider":
        data = load_mapping(path)
        tokens = data.get("tokens") or {}
        if not isinstance(tokens, Mapping):
            raise ConfigError(f"'tokens' in {path} must be a mapping of token names")
        specs = {str(name): TokenSpec.from_dict(str(name), entry) for name, entry in tokens.items()}
        return cls(specs, env=env, session=session)

    def _token(self, name: str) -> Optional[str]:
        spec = self.specs.get(name)
        if spec is None:
            return None
        return (self.env.get(spec.env) or "").strip() or None

    def is_available(self, name: str) -> bool:
        return self._token(name) is not None

    def fetch(self, name: str, request: FetchRequest) -> FetchResponse:
        token = self._token(name)
        if token is None:
            raise ConfigError(f"Token '{name}' is not configured")
        spec = self.specs[name]
        host = urlsplit(request.url).hostname
        if not spec.allows(host):
            raise PermissionError(f"Network permission denied: {host}")

        url = request.url
        headers = dict(request.headers)
        value = spec.placement_format.replace("{token}", token)
        if spec.placement_type == "query":
            sep = "&" if "?" in url else "?"
            url = f"{url}{sep}{build_query_string({spec.placement_name: value})}"
        else:
            headers[spec.placement_name] = value

        LOG.debug("%s %s", request.method.upper(), request.url)
        resp = self.session.request(
            request.method.upper(),
            url,
            headers=headers,
            json=request.body,
            timeout=request.timeout,
        )
        LOG.debug("-> %s %s", resp.status_code, resp.reason)
        return FetchResponse(status=resp.status_code, status_text=resp.reason or "", text=resp.text or "")


def load_token_provider(settings: Settings) -> Optional[EnvTokenProvider]:
    """Provider for the configured registry, or None when no registry exists."""
    path = settings.permissions_file
    if not path.exists():
        LOG.debug("token registry %s not found", path)
        return None
    return EnvTokenProvider.from_file(str(path))


def registry_snippet(token_name: str) -> str:
    return (
        "tokens:\n"
        f"  {token_name}:\n"
        "    env: GOOGLE_CALENDAR_ACCESS_TOKEN\n"
        "    type: oauth\n"
        "    domains:\n"
        "      - www.googleapis.com\n"
        '      - "*.googleapis.com"\n'
        "    placement:\n"
        "      type: header\n"
        "      name: Authorization\n"
        '      format: "Bearer {token}"'
    )


def setup_instructions(settings: Settings) -> str:
    """Remediation text for an unconfigured credential."""
    return (
        f"Add to {settings.permissions_path}:\n"
        f"{registry_snippet(settings.token_name)}\n"
        "\n"
        "Then set the environment variable named by 'env', e.g.:\n"
        "  export GOOGLE_CALENDAR_ACCESS_TOKEN=<access token>"
    )
