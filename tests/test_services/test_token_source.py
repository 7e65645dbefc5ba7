from __future__ import annotations

import asyncio
import base64
import time

import httpx
import pytest

from bitbucket_provider.errors import ContractError, HTTPStatusError
from bitbucket_provider.models.enums import ErrorKind
from bitbucket_provider.services.token_source import AccessToken, ClientCredentialsTokenSource

TOKEN_URL = "https://bitbucket.org/site/oauth2/access_token"


def _token_handler(seen: list[httpx.Request], *, expires_in: int = 7200, status: int = 200):
    def handle(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if status != 200:
            return httpx.Response(status, json={"error": "invalid_client"})
        return httpx.Response(
            200,
            json={"access_token": f"token-{len(seen)}", "expires_in": expires_in, "token_type": "bearer"},
        )

    return handle


def _source(client: httpx.AsyncClient, leeway: float = 30.0) -> ClientCredentialsTokenSource:
    return ClientCredentialsTokenSource(
        client_id="client",
        client_secret="client-secret",
        token_url=TOKEN_URL,
        http_client=client,
        leeway=leeway,
    )


# ---------------------------------------------------------------------------
# AccessToken
# ---------------------------------------------------------------------------


def test_token_without_expiry_never_expires() -> None:
    assert AccessToken("t").is_expired(leeway=1_000_000) is False


def test_token_expires_within_leeway() -> None:
    token = AccessToken("t", expires_at=time.monotonic() + 10)

    assert token.is_expired(leeway=0) is False
    assert token.is_expired(leeway=60) is True


# ---------------------------------------------------------------------------
# ClientCredentialsTokenSource
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_token_request_uses_client_credentials_grant() -> None:
    seen: list[httpx.Request] = []
    async with httpx.AsyncClient(transport=httpx.MockTransport(_token_handler(seen))) as client:
        token = await _source(client).token()

    assert token == "token-1"
    request = seen[0]
    assert request.method == "POST"
    assert request.content == b"grant_type=client_credentials"
    expected = base64.b64encode(b"client:client-secret").decode()
    assert request.headers["Authorization"] == f"Basic {expected}"


@pytest.mark.asyncio
async def test_token_is_cached_until_expiry() -> None:
    seen: list[httpx.Request] = []
    async with httpx.AsyncClient(transport=httpx.MockTransport(_token_handler(seen))) as client:
        source = _source(client)
        first = await source.token()
        second = await source.token()

    assert first == second == "token-1"
    assert source.refresh_count == 1
    assert len(seen) == 1


@pytest.mark.asyncio
async def test_concurrent_callers_share_one_refresh() -> None:
    seen: list[httpx.Request] = []
    async with httpx.AsyncClient(transport=httpx.MockTransport(_token_handler(seen))) as client:
        source = _source(client)
        tokens = await asyncio.gather(*(source.token() for _ in range(10)))

    assert set(tokens) == {"token-1"}
    assert source.refresh_count == 1
    assert len(seen) == 1


@pytest.mark.asyncio
async def test_stale_token_is_refreshed() -> None:
    seen: list[httpx.Request] = []
    handler = _token_handler(seen, expires_in=0)
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        source = _source(client, leeway=0)
        await source.token()
        await source.token()

    assert source.refresh_count == 2


@pytest.mark.asyncio
async def test_invalidate_forces_refetch() -> None:
    seen: list[httpx.Request] = []
    async with httpx.AsyncClient(transport=httpx.MockTransport(_token_handler(seen))) as client:
        source = _source(client)
        await source.token()
        source.invalidate()
        token = await source.token()

    assert token == "token-2"
    assert source.refresh_count == 2


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [400, 401])
async def test_rejected_credentials_are_unauthorized(status: int) -> None:
    seen: list[httpx.Request] = []
    handler = _token_handler(seen, status=status)
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(HTTPStatusError) as exc_info:
            await _source(client).token()

    assert exc_info.value.kind is ErrorKind.unauthorized
    assert "client-secret" not in str(exc_info.value)


@pytest.mark.asyncio
async def test_response_without_access_token_is_contract_error() -> None:
    def handle(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"token_type": "bearer"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handle)) as client:
        with pytest.raises(ContractError):
            await _source(client).token()
