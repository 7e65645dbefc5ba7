from __future__ import annotations

from collections.abc import Iterable, Mapping
from urllib.parse import quote

import httpx

from bitbucket_provider.errors import ConfigurationError


def _escape(value: str, safe: str = "") -> str:
    # ``quote`` leaves "~" alone; the platform expects it escaped.
    return quote(value, safe=safe).replace("~", "%7E")


def quote_path_value(value: str, *, allow_slash: bool = False) -> str:
    """URL-encode a single path placeholder value."""
    return _escape(value, safe="/" if allow_slash else "")


def encode_query(pairs: Mapping[str, str] | Iterable[tuple[str, str]]) -> str:
    """Encode query pairs in the order given, escaping names and values."""
    items = pairs.items() if isinstance(pairs, Mapping) else pairs
    return "&".join(f"{_escape(name)}={_escape(value)}" for name, value in items)


def join_target(path: str, query: str = "") -> str:
    """Combine an encoded path and an encoded query string."""
    if not query:
        return path
    separator = "&" if "?" in path else "?"
    return f"{path}{separator}{query}"


def validate_base_url(base_url: str) -> str:
    """Return *base_url* with a trailing slash, or raise ``ConfigurationError``.

    The base URL must be absolute ``http``/``https`` and must not embed
    user-info, since credentials are only ever sent as headers.
    """
    try:
        url = httpx.URL(base_url)
    except (httpx.InvalidURL, TypeError) as exc:
        raise ConfigurationError(f"invalid base URL {base_url!r}") from exc
    if url.scheme not in ("http", "https") or not url.host:
        raise ConfigurationError(
            f"invalid base URL {base_url!r}: expected an absolute http(s) URL"
        )
    if url.userinfo:
        raise ConfigurationError("invalid base URL: credentials must not be embedded in the URL")
    return base_url if base_url.endswith("/") else f"{base_url}/"
