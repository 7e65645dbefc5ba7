from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

import httpx

from bitbucket_provider.config import Settings
from bitbucket_provider.errors import ConfigurationError, TransportError
from bitbucket_provider.models.enums import AuthMode
from bitbucket_provider.schemas.credentials import Credentials
from bitbucket_provider.services.token_source import ClientCredentialsTokenSource
from bitbucket_provider.transport.auth import build_auth
from bitbucket_provider.transport.cancellation import CancellationToken, run_cancellable
from bitbucket_provider.transport.urls import encode_query, join_target, validate_base_url

logger = logging.getLogger(__name__)


def _consumer_credentials(credentials: Credentials) -> tuple[str, str] | None:
    """Return the OAuth consumer id and secret, or ``None`` outside client-credentials mode."""
    if credentials.mode is not AuthMode.oauth_client_credentials:
        return None
    if credentials.client_id is None or credentials.client_secret is None:
        raise ConfigurationError("client-credentials auth requires both a client id and a client secret")
    return credentials.client_id, credentials.client_secret.get_secret_value()


@dataclass
class TransportResponse:
    """A fully-read HTTP response as returned by :meth:`AuthenticatedTransport.send`."""

    status_code: int
    url: str
    body: bytes = b""
    headers: Mapping[str, str] = field(default_factory=dict)


async def _next_chunk(iterator: AsyncIterator[bytes]) -> bytes | None:
    return await anext(iterator, None)


class AuthenticatedTransport:
    """One shared HTTP client per provider instance with credentials baked in.

    The transport resolves every path against the platform base URL,
    attaches the credential of the selected auth mode to each request,
    applies a default per-request deadline, and refuses to buffer response
    bodies larger than ``max_response_bytes``.  It never retries.

    The credential binding is fixed at construction; the instance is safe to
    share between concurrent reads on one event loop.

    Args:
        credentials: Resolved credentials for exactly one auth mode.
        base_url: Platform API root that ``2.0/...`` paths resolve against.
        timeout: Default per-request deadline in seconds.
        max_response_bytes: Largest response body that will be read.
        token_url: Token endpoint for the client-credentials mode.
        token_leeway: Seconds before expiry at which OAuth tokens renew.
        http_transport: Optional ``httpx`` transport, e.g. a
            :class:`httpx.MockTransport` in tests.

    Example::

        transport = AuthenticatedTransport(credentials, base_url="https://api.bitbucket.org/")
        response = await transport.send("GET", "2.0/user")
    """

    def __init__(
        self,
        credentials: Credentials,
        *,
        base_url: str = "https://api.bitbucket.org/",
        timeout: float = 30.0,
        max_response_bytes: int = 10 * 1024 * 1024,
        token_url: str = "https://bitbucket.org/site/oauth2/access_token",
        token_leeway: float = 30.0,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        consumer = _consumer_credentials(credentials)
        self._base_url = validate_base_url(base_url)
        self._mode = credentials.mode
        self._max_response_bytes = max_response_bytes
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout,
            transport=http_transport,
            follow_redirects=True,
        )
        self._token_source: ClientCredentialsTokenSource | None = None
        if consumer is not None:
            client_id, client_secret = consumer
            self._token_source = ClientCredentialsTokenSource(
                client_id=client_id,
                client_secret=client_secret,
                token_url=token_url,
                http_client=self._client,
                leeway=token_leeway,
            )
        self._auth = build_auth(credentials, self._token_source)

    @classmethod
    def from_settings(
        cls,
        credentials: Credentials,
        settings: Settings,
        *,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> AuthenticatedTransport:
        return cls(
            credentials,
            base_url=settings.BITBUCKET_BASE_URL,
            timeout=settings.BITBUCKET_REQUEST_TIMEOUT,
            max_response_bytes=settings.BITBUCKET_MAX_RESPONSE_BYTES,
            token_url=settings.BITBUCKET_TOKEN_URL,
            token_leeway=settings.BITBUCKET_TOKEN_EXPIRY_LEEWAY,
            http_transport=http_transport,
        )

    @property
    def mode(self) -> AuthMode:
        return self._mode

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def token_source(self) -> ClientCredentialsTokenSource | None:
        return self._token_source

    # ------------------------------------------------------------------
    # Request primitives
    # ------------------------------------------------------------------

    async def open(
        self,
        method: str,
        target: str,
        *,
        headers: Mapping[str, str] | None = None,
        json: Any = None,
        cancel: CancellationToken | None = None,
        timeout: float | None = None,
        binding: str | None = None,
    ) -> httpx.Response:
        """Send a request and return the response with its body unread.

        The caller owns the response and must close it (see :meth:`stream`).

        Args:
            method: HTTP method.
            target: Encoded path (optionally with query) relative to the base URL.
            headers: Extra request headers; never an authorization header.
            json: Optional JSON request body.
            cancel: Host cancellation token observed during setup and send.
            timeout: Per-request deadline overriding the transport default.
            binding: Binding name used to tag errors.

        Raises:
            TransportError: On any network-level failure or timeout.
            ReadCancelledError: If *cancel* is tripped before the response arrives.
        """
        request = self._client.build_request(
            method,
            target,
            headers=headers,
            json=json,
            timeout=timeout if timeout is not None else httpx.USE_CLIENT_DEFAULT,
        )
        url = str(request.url)
        # Credentials only go to the platform host; absolute targets elsewhere are sent bare.
        auth = self._auth if request.url.host == self._client.base_url.host else None
        if cancel is not None:
            cancel.raise_if_cancelled(binding=binding, url=url)

        try:
            response = await run_cancellable(
                self._client.send(request, auth=auth, stream=True),
                cancel,
                binding=binding,
                url=url,
            )
        except httpx.TimeoutException as exc:
            raise TransportError(
                f"request timed out ({type(exc).__name__})",
                binding=binding,
                url=url,
                sub_kind="timeout",
            ) from exc
        except httpx.TransportError as exc:
            raise TransportError(
                f"request failed ({type(exc).__name__}): {exc}",
                binding=binding,
                url=url,
            ) from exc

        logger.debug("%s %s -> HTTP %s", method, url, response.status_code)
        return response

    async def read_body(
        self,
        response: httpx.Response,
        *,
        cancel: CancellationToken | None = None,
        binding: str | None = None,
    ) -> bytes:
        """Read *response*'s body, observing cancellation and the size limit.

        Raises:
            TransportError: If the body exceeds the limit or the connection drops.
            ReadCancelledError: If *cancel* is tripped mid-read.
        """
        url = str(response.request.url)
        chunks: list[bytes] = []
        total = 0
        iterator = response.aiter_bytes().__aiter__()
        while True:
            try:
                chunk = await run_cancellable(
                    _next_chunk(iterator), cancel, binding=binding, url=url
                )
            except httpx.TransportError as exc:
                raise TransportError(
                    f"failed reading response body ({type(exc).__name__})",
                    binding=binding,
                    url=url,
                ) from exc
            if chunk is None:
                break
            total += len(chunk)
            if total > self._max_response_bytes:
                raise TransportError(
                    f"response body exceeds the {self._max_response_bytes} byte limit",
                    binding=binding,
                    url=url,
                )
            chunks.append(chunk)

        logger.debug("Read %d response bytes from %s", total, url)
        return b"".join(chunks)

    @asynccontextmanager
    async def stream(
        self,
        method: str,
        target: str,
        **kwargs: Any,
    ) -> AsyncIterator[httpx.Response]:
        """Context manager around :meth:`open` that always closes the response."""
        response = await self.open(method, target, **kwargs)
        try:
            yield response
        finally:
            await response.aclose()

    async def send(
        self,
        method: str,
        path: str,
        *,
        query: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
        body: Any = None,
        cancel: CancellationToken | None = None,
        timeout: float | None = None,
        binding: str | None = None,
    ) -> TransportResponse:
        """Execute one request and return its fully-read response.

        This is the transport's ``send(method, path, query, headers, body)``
        capability; the credential is attached automatically.
        """
        target = join_target(path, encode_query(query or {}))
        async with self.stream(
            method,
            target,
            headers=headers,
            json=body,
            cancel=cancel,
            timeout=timeout,
            binding=binding,
        ) as response:
            payload = await self.read_body(response, cancel=cancel, binding=binding)
            return TransportResponse(
                status_code=response.status_code,
                url=str(response.request.url),
                body=payload,
                headers=httpx.Headers(response.headers),
            )

    async def aclose(self) -> None:
        await self._client.aclose()
