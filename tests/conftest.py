from __future__ import annotations

import os
from collections.abc import AsyncGenerator, Callable
from typing import Any

import httpx
import pytest
import pytest_asyncio

from bitbucket_provider.config import Settings
from bitbucket_provider.provider import BitbucketProvider
from bitbucket_provider.schemas.credentials import Credentials
from bitbucket_provider.schemas.diagnostics import Diagnostic
from bitbucket_provider.transport.client import AuthenticatedTransport

BASE_URL = "https://api.bitbucket.org/"
TOKEN_URL = "https://bitbucket.org/site/oauth2/access_token"

# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Drop any BITBUCKET_* variables and run from an empty directory.

    Settings read the process environment and a ``.env`` file in the
    working directory; neither may leak a developer's real credentials
    into the suite.
    """
    for name in list(os.environ):
        if name.startswith("BITBUCKET_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)


# ---------------------------------------------------------------------------
# HTTP test double
# ---------------------------------------------------------------------------


class RecordingHandler:
    """``httpx.MockTransport`` handler that records requests and replays routes.

    Routes are keyed by method and decoded URL path (``/2.0/...``).  A route
    is either a canned response description or a callable receiving the
    request; callables may be coroutine functions.  Unrouted requests get a
    Bitbucket-style 404.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._routes: dict[tuple[str, str], Callable[[httpx.Request], Any]] = {}

    def add(
        self,
        method: str,
        path: str,
        status: int = 200,
        *,
        json: Any = None,
        content: bytes | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        def respond(request: httpx.Request) -> httpx.Response:
            if json is not None:
                return httpx.Response(status, json=json, headers=headers)
            return httpx.Response(status, content=content or b"", headers=headers)

        self._routes[(method, path)] = respond

    def route(self, method: str, path: str, handler: Callable[[httpx.Request], Any]) -> None:
        self._routes[(method, path)] = handler

    def __call__(self, request: httpx.Request) -> Any:
        self.requests.append(request)
        handler = self._routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"type": "error", "error": {"message": "Not found"}})
        return handler(request)

    def api_requests(self) -> list[httpx.Request]:
        """Requests sent to the API host, excluding token fetches."""
        return [r for r in self.requests if str(r.url) != TOKEN_URL]


@pytest.fixture()
def handler() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture()
def settings() -> Settings:
    return Settings(_env_file=None)


# ---------------------------------------------------------------------------
# Transport and provider factories
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture()
async def make_transport(
    handler: RecordingHandler,
) -> AsyncGenerator[Callable[..., AuthenticatedTransport], None]:
    """Build transports over the recording handler and close them afterwards."""
    created: list[AuthenticatedTransport] = []

    def _make(credentials: Credentials, **kwargs: Any) -> AuthenticatedTransport:
        transport = AuthenticatedTransport(
            credentials,
            http_transport=httpx.MockTransport(handler),
            **kwargs,
        )
        created.append(transport)
        return transport

    yield _make

    for transport in created:
        await transport.aclose()


@pytest_asyncio.fixture()
async def make_provider(
    handler: RecordingHandler,
) -> AsyncGenerator[Callable[..., tuple[BitbucketProvider, list[Diagnostic]]], None]:
    """Configure providers over the recording handler and close them afterwards.

    Keyword arguments are passed to :class:`Settings` by field name, e.g.
    ``make_provider({...}, BITBUCKET_REQUEST_TIMEOUT=1.0)``.
    """
    created: list[BitbucketProvider] = []

    def _make(
        config: dict[str, str] | None = None, **overrides: Any
    ) -> tuple[BitbucketProvider, list[Diagnostic]]:
        provider = BitbucketProvider()
        diagnostics = provider.configure(
            config,
            settings=Settings(_env_file=None, **overrides),
            http_transport=httpx.MockTransport(handler),
        )
        created.append(provider)
        return provider, diagnostics

    yield _make

    for provider in created:
        await provider.aclose()
