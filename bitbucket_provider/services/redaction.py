from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from bitbucket_provider.bindings.base import Attribute

REDACTED = "<redacted>"


def sanitise_params(
    params: Mapping[str, Any],
    secret_names: Iterable[str] = (),
) -> dict[str, Any]:
    """Return a copy of *params* safe to format into a log line.

    Values whose key is in *secret_names* are replaced with ``<redacted>``;
    empty values are dropped, mirroring what the host would report as unset.
    """
    secrets = set(secret_names)
    clean: dict[str, Any] = {}
    for key, value in params.items():
        if value is None or value == "":
            continue
        clean[key] = REDACTED if key in secrets else value
    return clean


def redact_attributes(attributes: Mapping[str, Any], schema: Iterable[Attribute]) -> dict[str, Any]:
    """Return a copy of a decoded attribute tree with secret attributes masked.

    Object and object-list attributes are walked with their nested schema, so
    a secret field inside every list element is masked too.  Unset secrets
    stay unset.
    """
    clean = dict(attributes)
    for attr in schema:
        value = clean.get(attr.name)
        if value is None:
            continue
        if attr.secret:
            clean[attr.name] = REDACTED if value != "" else value
        elif isinstance(attr.elem, tuple):
            if isinstance(value, Mapping):
                clean[attr.name] = redact_attributes(value, attr.elem)
            elif isinstance(value, list):
                clean[attr.name] = [
                    redact_attributes(item, attr.elem) if isinstance(item, Mapping) else item
                    for item in value
                ]
    return clean


class SecretRedactionFilter(logging.Filter):
    """Mask literal credential values in every record passing through.

    The message is rendered once with its arguments and each secret is
    replaced with ``<redacted>``, so a value that slips into an exception
    string or a third-party log call is still not emitted.
    """

    def __init__(self, secrets: Iterable[str]) -> None:
        super().__init__()
        # Longest first so a secret containing another is masked whole.
        self._secrets = sorted({s for s in secrets if s}, key=len, reverse=True)

    def filter(self, record: logging.LogRecord) -> bool:
        if not self._secrets:
            return True
        message = record.getMessage()
        redacted = message
        for secret in self._secrets:
            redacted = redacted.replace(secret, REDACTED)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


# Logger filters are not inherited by child loggers, so the filter goes on
# every existing package logger and also on the root logger's handlers,
# which see records propagated from loggers created later.  Handlers added
# to the root logger after install_redaction() and records from loggers with
# propagate=False are not covered.
_WATCHED_PREFIXES: tuple[str, ...] = ("bitbucket_provider", "httpx", "httpcore")


def _watched_loggers() -> list[logging.Logger]:
    names = {
        name
        for name in logging.Logger.manager.loggerDict
        if name.startswith(_WATCHED_PREFIXES)
    }
    names.update(_WATCHED_PREFIXES)
    return [logging.getLogger(name) for name in sorted(names)]


def _filterers() -> list[logging.Filterer]:
    return [*_watched_loggers(), *logging.getLogger().handlers]


def install_redaction(secrets: Iterable[str]) -> SecretRedactionFilter:
    """Attach a :class:`SecretRedactionFilter` for *secrets*.

    The filter is added to the package and HTTP-client loggers that exist
    now and to the handlers currently on the root logger.
    """
    redaction = SecretRedactionFilter(secrets)
    for target in _filterers():
        target.addFilter(redaction)
    return redaction


def uninstall_redaction(redaction: SecretRedactionFilter) -> None:
    for target in _filterers():
        target.removeFilter(redaction)
