from __future__ import annotations

from collections.abc import AsyncGenerator, Generator

import httpx

from bitbucket_provider.errors import ConfigurationError
from bitbucket_provider.models.enums import AuthMode
from bitbucket_provider.schemas.credentials import Credentials
from bitbucket_provider.services.token_source import ClientCredentialsTokenSource


class BearerAuth(httpx.Auth):
    """Attach an opaque OAuth access token verbatim as a bearer header."""

    def __init__(self, token: str) -> None:
        self._header = f"Bearer {token}"

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        request.headers["Authorization"] = self._header
        yield request


class ClientCredentialsAuth(httpx.Auth):
    """Attach a bearer token obtained from a client-credentials token source.

    Only the async flow is supported; the provider never builds a
    synchronous client.  A 401 on a request signed with a cached token
    invalidates the cache so the next request fetches a fresh token; the
    401 itself is passed through, since the transport does not retry.
    """

    def __init__(self, token_source: ClientCredentialsTokenSource) -> None:
        self._token_source = token_source

    def sync_auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        raise RuntimeError("ClientCredentialsAuth requires an httpx.AsyncClient")

    async def async_auth_flow(
        self, request: httpx.Request
    ) -> AsyncGenerator[httpx.Request, httpx.Response]:
        token = await self._token_source.token()
        request.headers["Authorization"] = f"Bearer {token}"
        response = yield request
        if response.status_code == 401:
            self._token_source.invalidate()


def build_auth(
    credentials: Credentials,
    token_source: ClientCredentialsTokenSource | None = None,
) -> httpx.Auth | None:
    """Return the ``httpx.Auth`` implementing *credentials*' injection rule.

    Returns ``None`` for the unauthenticated mode so no authorization header
    is ever added.
    """
    if credentials.mode is AuthMode.basic:
        if credentials.username is None or credentials.password is None:
            raise ConfigurationError("basic auth requires both a username and a password")
        return httpx.BasicAuth(credentials.username, credentials.password.get_secret_value())
    if credentials.mode is AuthMode.oauth_token:
        if credentials.token is None:
            raise ConfigurationError("OAuth token auth requires an access token")
        return BearerAuth(credentials.token.get_secret_value())
    if credentials.mode is AuthMode.oauth_client_credentials:
        if token_source is None:
            raise ConfigurationError("client-credentials auth requires a token source")
        return ClientCredentialsAuth(token_source)
    return None
