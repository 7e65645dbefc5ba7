from __future__ import annotations

import logging
from collections.abc import Mapping

from pydantic import SecretStr

from bitbucket_provider.config import Settings
from bitbucket_provider.errors import ConfigurationError
from bitbucket_provider.models.enums import AuthMode
from bitbucket_provider.schemas.credentials import Credentials

logger = logging.getLogger(__name__)

# Keys of each credentialled group, in the order they are reported.
AUTH_GROUPS: dict[AuthMode, tuple[str, ...]] = {
    AuthMode.basic: ("username", "password"),
    AuthMode.oauth_client_credentials: ("oauth_client_id", "oauth_client_secret"),
    AuthMode.oauth_token: ("oauth_token",),
}

CONFIG_KEYS: tuple[str, ...] = tuple(key for keys in AUTH_GROUPS.values() for key in keys)

_GROUP_LABELS: dict[AuthMode, str] = {
    AuthMode.basic: "basic auth (username/password)",
    AuthMode.oauth_client_credentials: "OAuth client credentials (oauth_client_id/oauth_client_secret)",
    AuthMode.oauth_token: "OAuth access token (oauth_token)",
}


def _present_values(
    config: Mapping[str, str | None],
    settings: Settings,
) -> dict[str, str]:
    """Return every credential key that is non-empty after environment fallback."""
    present: dict[str, str] = {}
    for key in CONFIG_KEYS:
        value = config.get(key) or settings.fallback_for(key)
        if value:
            present[key] = value
    return present


def resolve_credentials(
    config: Mapping[str, str | None] | None = None,
    settings: Settings | None = None,
) -> Credentials:
    """Select exactly one authentication variant from *config*.

    Every key missing from *config* (or set to an empty string) falls back to
    its ``BITBUCKET_*`` environment variable via *settings*.  Conflict
    detection is total: all keys that span more than one group are named,
    not just the first offender.

    Args:
        config: Provider configuration attributes; any subset may be absent.
        settings: Settings supplying the environment fallbacks.  A fresh
            :class:`~bitbucket_provider.config.Settings` is read when omitted.

    Returns:
        The resolved :class:`~bitbucket_provider.schemas.credentials.Credentials`.

    Raises:
        ConfigurationError: If keys from more than one group are present,
            or a group is only partially supplied.
    """
    settings = settings or Settings()
    present = _present_values(config or {}, settings)

    groups = [
        mode for mode, keys in AUTH_GROUPS.items() if any(key in present for key in keys)
    ]

    if len(groups) > 1:
        conflicting = [key for mode in groups for key in AUTH_GROUPS[mode] if key in present]
        labels = ", ".join(_GROUP_LABELS[mode] for mode in groups)
        raise ConfigurationError(
            f"conflicting authentication settings {', '.join(conflicting)}: "
            f"only one of {labels} may be configured"
        )

    if not groups:
        logger.warning(
            "No Bitbucket credentials configured; protected reads will be unauthorized."
        )
        return Credentials(mode=AuthMode.unauthenticated)

    mode = groups[0]
    missing = [key for key in AUTH_GROUPS[mode] if key not in present]
    if missing:
        supplied = [key for key in AUTH_GROUPS[mode] if key in present]
        raise ConfigurationError(
            f"incomplete credentials: {', '.join(supplied)} requires {', '.join(missing)}"
        )

    logger.debug("Resolved Bitbucket auth mode: %s", mode.value)

    if mode is AuthMode.basic:
        return Credentials(
            mode=mode,
            username=present["username"],
            password=SecretStr(present["password"]),
        )
    if mode is AuthMode.oauth_client_credentials:
        return Credentials(
            mode=mode,
            client_id=present["oauth_client_id"],
            client_secret=SecretStr(present["oauth_client_secret"]),
        )
    return Credentials(mode=mode, token=SecretStr(present["oauth_token"]))
