from __future__ import annotations

"""Error taxonomy and the HTTP response classifier.

Every failure inside the provider is raised as a :class:`ProviderError`
subclass tagged with an :class:`~bitbucket_provider.models.enums.ErrorKind`.
The host-facing facade converts them into
:class:`~bitbucket_provider.schemas.diagnostics.Diagnostic` values with
:meth:`ProviderError.to_diagnostic`; nothing is retried or collapsed on the
way.  Messages name the binding and the resolved URL but never a credential.
"""

import json
import logging
from collections.abc import Mapping

from bitbucket_provider.models.enums import ErrorKind
from bitbucket_provider.schemas.diagnostics import Diagnostic

logger = logging.getLogger(__name__)

_SUMMARIES: dict[ErrorKind, str] = {
    ErrorKind.configuration: "Invalid provider configuration",
    ErrorKind.transport: "Request to Bitbucket failed",
    ErrorKind.empty_response: "Bitbucket returned an empty response",
    ErrorKind.not_found: "Resource not found",
    ErrorKind.unauthorized: "Unauthorized",
    ErrorKind.forbidden: "Forbidden",
    ErrorKind.rate_limited: "Rate limited by Bitbucket",
    ErrorKind.server: "Bitbucket server error",
    ErrorKind.decode: "Unable to decode Bitbucket response",
    ErrorKind.contract: "Unexpected Bitbucket API contract",
}

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ProviderError(Exception):
    """Base class for every error the provider surfaces to the host runtime."""

    kind: ErrorKind = ErrorKind.contract

    def __init__(
        self,
        detail: str,
        *,
        binding: str | None = None,
        url: str | None = None,
        kind: ErrorKind | None = None,
        sub_kind: str | None = None,
    ) -> None:
        super().__init__(detail)
        self.detail = detail
        self.binding = binding
        self.url = url
        if kind is not None:
            self.kind = kind
        self.sub_kind = sub_kind

    def __str__(self) -> str:
        prefix = f"{self.binding}: " if self.binding else ""
        return f"{prefix}{self.detail}"

    def to_diagnostic(self) -> Diagnostic:
        """Render this error as a host diagnostic."""
        return Diagnostic(
            kind=self.kind,
            summary=_SUMMARIES[self.kind],
            detail=str(self),
            binding=self.binding,
            url=self.url,
            sub_kind=self.sub_kind,
        )


class ConfigurationError(ProviderError):
    """Fatal at provider initialisation: auth conflicts, bad base URL."""

    kind = ErrorKind.configuration


class TransportError(ProviderError):
    """DNS, TCP, TLS or timeout failure, or an oversized body."""

    kind = ErrorKind.transport


class ReadCancelledError(TransportError):
    """The host runtime tripped the read's cancellation token."""

    def __init__(self, detail: str = "request cancelled", **kwargs: object) -> None:
        kwargs.setdefault("sub_kind", "cancelled")
        super().__init__(detail, **kwargs)  # type: ignore[arg-type]


class HTTPStatusError(ProviderError):
    """A non-success HTTP status mapped onto the error taxonomy."""

    def __init__(
        self,
        detail: str,
        *,
        status_code: int,
        retry_after: str | None = None,
        **kwargs: object,
    ) -> None:
        super().__init__(detail, **kwargs)  # type: ignore[arg-type]
        self.status_code = status_code
        self.retry_after = retry_after


class EmptyResponseError(ProviderError):
    kind = ErrorKind.empty_response


class DecodeError(ProviderError):
    kind = ErrorKind.decode


class ContractError(ProviderError):
    kind = ErrorKind.contract


# ---------------------------------------------------------------------------
# Classifier
# ---------------------------------------------------------------------------


def api_error_message(body: bytes | None) -> str | None:
    """Extract ``error.message`` from a Bitbucket error document, if any."""
    if not body:
        return None
    try:
        document = json.loads(body)
    except (ValueError, UnicodeDecodeError):
        return None
    if isinstance(document, Mapping):
        error = document.get("error")
        if isinstance(error, Mapping) and isinstance(error.get("message"), str):
            return error["message"]
    return None


def classify_status(
    status_code: int | None,
    headers: Mapping[str, str] | None = None,
    *,
    binding: str,
    url: str,
    not_found: str,
    body: bytes | None = None,
) -> None:
    """Raise the :class:`ProviderError` matching an HTTP outcome.

    Returns ``None`` for any 2xx status so callers can proceed to the body
    read.  A ``status_code`` of ``None`` stands for a missing response
    object and is reported as a contract error that hints at credentials.

    Args:
        status_code: The HTTP status, or ``None`` if no response exists.
        headers: Response headers, consulted for ``Retry-After``.
        binding: Stable binding name for the message.
        url: Resolved request URL (path and query only).
        not_found: Pre-rendered message naming the missing entity.
        body: Optional error body used to enrich 4xx contract errors.

    Raises:
        ContractError: Missing response or an unmapped 4xx status.
        HTTPStatusError: 401, 403, 404, 429 and 5xx statuses.
    """
    if status_code is None:
        raise ContractError(
            "no response returned from Bitbucket. Make sure your credentials are accurate.",
            binding=binding,
            url=url,
        )
    if 200 <= status_code < 300:
        return

    context = {"binding": binding, "url": url, "status_code": status_code}
    if status_code == 404:
        raise HTTPStatusError(not_found, kind=ErrorKind.not_found, **context)
    if status_code == 401:
        raise HTTPStatusError(
            "authentication was rejected (HTTP 401); check the provider credentials",
            kind=ErrorKind.unauthorized,
            **context,
        )
    if status_code == 403:
        raise HTTPStatusError(
            "the authenticated principal is not allowed to access this resource (HTTP 403)",
            kind=ErrorKind.forbidden,
            **context,
        )
    if status_code == 429:
        retry_after = (headers or {}).get("Retry-After")
        detail = "rate limit exceeded (HTTP 429)"
        if retry_after is not None:
            detail = f"{detail}; Retry-After: {retry_after}"
        logger.warning("Rate limited reading %s (Retry-After=%s)", binding, retry_after)
        raise HTTPStatusError(
            detail,
            kind=ErrorKind.rate_limited,
            retry_after=retry_after,
            **context,
        )
    if status_code >= 500:
        raise HTTPStatusError(
            f"Bitbucket returned HTTP {status_code}",
            kind=ErrorKind.server,
            **context,
        )

    message = api_error_message(body)
    detail = f"Bitbucket rejected the request with HTTP {status_code}"
    if message:
        detail = f"{detail}: {message}"
    raise ContractError(detail, binding=binding, url=url)
