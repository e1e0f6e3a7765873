"""URL query string helpers."""
from __future__ import annotations

from typing import Any, Mapping
from urllib.parse import quote

__all__ = ["build_query_string", "encode_component"]

# Characters left unescaped by JavaScript's encodeURIComponent
_SAFE = "-_.!~*'()"


def encode_component(value: Any) -> str:
    """Percent-encode a single key or value; booleans become true/false."""
    if isinstance(value, bool):
        text = "true" if value else "false"
    else:
        text = str(value)
    return quote(text, safe=_SAFE)


def build_query_string(params: Mapping[str, Any]) -> str:
    """Serialize params to 'k=v&k2=v2', dropping None values.

    0 and False are kept. Order follows the mapping's iteration order.
    """
    parts = [
        f"{encode_component(key)}={encode_component(value)}"
        for key, value in params.items()
        if value is not None
    ]
    return "&".join(parts)
