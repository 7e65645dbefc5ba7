from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass

import httpx

from bitbucket_provider.errors import (
    ContractError,
    DecodeError,
    HTTPStatusError,
    TransportError,
)
from bitbucket_provider.models.enums import ErrorKind

logger = logging.getLogger(__name__)

_BINDING = "oauth_client_credentials"


@dataclass(frozen=True)
class AccessToken:
    """A bearer token and the monotonic instant after which it is stale."""

    value: str
    expires_at: float | None = None

    def is_expired(self, leeway: float = 0.0) -> bool:
        if self.expires_at is None:
            return False
        return time.monotonic() >= self.expires_at - leeway


class ClientCredentialsTokenSource:
    """Refreshable producer of bearer tokens for the client-credentials grant.

    Tokens are cached and renewed ``leeway`` seconds before they expire.
    Concurrent callers that find the cache stale wait on a single refresh:
    the lock is held for the whole token request, and the cache is
    re-checked once it is acquired.

    Args:
        client_id: OAuth consumer key.
        client_secret: OAuth consumer secret.
        token_url: Token endpoint accepting ``grant_type=client_credentials``.
        http_client: Unauthenticated client used for the token request.
        leeway: Seconds subtracted from ``expires_in`` when deciding staleness.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        token_url: str,
        http_client: httpx.AsyncClient,
        leeway: float = 30.0,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._token_url = token_url
        self._http_client = http_client
        self._leeway = leeway
        self._lock = asyncio.Lock()
        self._token: AccessToken | None = None
        self.refresh_count = 0

    async def token(self) -> str:
        """Return a valid access token, refreshing it at most once per expiry."""
        current = self._token
        if current is not None and not current.is_expired(self._leeway):
            return current.value

        async with self._lock:
            current = self._token
            if current is not None and not current.is_expired(self._leeway):
                return current.value
            self._token = await self._fetch()
            return self._token.value

    def invalidate(self) -> None:
        """Drop the cached token so the next call fetches a fresh one."""
        self._token = None

    async def _fetch(self) -> AccessToken:
        logger.debug("Requesting OAuth access token via client credentials grant.")
        try:
            response = await self._http_client.post(
                self._token_url,
                data={"grant_type": "client_credentials"},
                auth=httpx.BasicAuth(self._client_id, self._client_secret),
            )
        except httpx.TransportError as exc:
            raise TransportError(
                f"token request failed: {type(exc).__name__}",
                binding=_BINDING,
                url=self._token_url,
            ) from exc

        if response.status_code in (400, 401):
            raise HTTPStatusError(
                f"token endpoint rejected the client credentials (HTTP {response.status_code})",
                status_code=response.status_code,
                kind=ErrorKind.unauthorized,
                binding=_BINDING,
                url=self._token_url,
            )
        if response.status_code >= 400:
            raise HTTPStatusError(
                f"token endpoint returned HTTP {response.status_code}",
                status_code=response.status_code,
                kind=ErrorKind.server if response.status_code >= 500 else ErrorKind.contract,
                binding=_BINDING,
                url=self._token_url,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise DecodeError(
                "token endpoint returned a non-JSON body",
                binding=_BINDING,
                url=self._token_url,
            ) from exc

        access_token = payload.get("access_token") if isinstance(payload, dict) else None
        if not isinstance(access_token, str) or not access_token:
            raise ContractError(
                "token endpoint response has no access_token",
                binding=_BINDING,
                url=self._token_url,
            )

        expires_in = payload.get("expires_in")
        expires_at = None
        if isinstance(expires_in, (int, float)) and not isinstance(expires_in, bool):
            expires_at = time.monotonic() + float(expires_in)

        self.refresh_count += 1
        logger.debug("OAuth access token refreshed (expires_in=%s).", expires_in)
        return AccessToken(value=access_token, expires_at=expires_at)
