from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import httpx

from bitbucket_provider.bindings.base import BindingDescriptor
from bitbucket_provider.bindings.catalog import DATA_SOURCES
from bitbucket_provider.bindings.reader import read_binding
from bitbucket_provider.config import Settings
from bitbucket_provider.errors import ConfigurationError, ContractError, ProviderError
from bitbucket_provider.resources import lifecycle
from bitbucket_provider.resources.base import ResourceDescriptor
from bitbucket_provider.resources.catalog import RESOURCES
from bitbucket_provider.schemas.credentials import ConfigField
from bitbucket_provider.schemas.diagnostics import Diagnostic, ReadResponse
from bitbucket_provider.schemas.resources import ResourceResponse, ResourceState
from bitbucket_provider.services.credentials import CONFIG_KEYS, resolve_credentials
from bitbucket_provider.services.redaction import (
    SecretRedactionFilter,
    install_redaction,
    uninstall_redaction,
)
from bitbucket_provider.transport.cancellation import CancellationToken
from bitbucket_provider.transport.client import AuthenticatedTransport

logger = logging.getLogger(__name__)

_BASIC = ("username", "password")
_CLIENT_CREDENTIALS = ("oauth_client_id", "oauth_client_secret")
_TOKEN = ("oauth_token",)

# Published configuration schema; conflicts and pairings let the host
# pre-validate before configure() runs.
PROVIDER_SCHEMA: tuple[ConfigField, ...] = (
    ConfigField(
        name="username",
        env_var="BITBUCKET_USERNAME",
        description="Username for basic authentication.",
        conflicts_with=(*_CLIENT_CREDENTIALS, *_TOKEN),
        required_with=("password",),
    ),
    ConfigField(
        name="password",
        env_var="BITBUCKET_PASSWORD",
        secret=True,
        description="Password or app password for basic authentication.",
        conflicts_with=(*_CLIENT_CREDENTIALS, *_TOKEN),
        required_with=("username",),
    ),
    ConfigField(
        name="oauth_client_id",
        env_var="BITBUCKET_OAUTH_CLIENT_ID",
        description="OAuth consumer key for the client-credentials grant.",
        conflicts_with=(*_BASIC, *_TOKEN),
        required_with=("oauth_client_secret",),
    ),
    ConfigField(
        name="oauth_client_secret",
        env_var="BITBUCKET_OAUTH_CLIENT_SECRET",
        secret=True,
        description="OAuth consumer secret for the client-credentials grant.",
        conflicts_with=(*_BASIC, *_TOKEN),
        required_with=("oauth_client_id",),
    ),
    ConfigField(
        name="oauth_token",
        env_var="BITBUCKET_OAUTH_TOKEN",
        secret=True,
        description="Pre-issued OAuth access token sent as a bearer credential.",
        conflicts_with=(*_BASIC, *_CLIENT_CREDENTIALS),
    ),
)


class BitbucketProvider:
    """Host-facing entry point: registration, configuration, reads and resources.

    The data-source and resource registries are fixed when the instance is
    created and exposed read-only.  :meth:`configure` resolves credentials
    and builds the shared transport; it may succeed once.  Every call that
    crosses the host boundary returns diagnostics instead of raising, and a
    failed call hands the host's prior state back unchanged.

    Example::

        async with BitbucketProvider() as provider:
            diagnostics = provider.configure({"oauth_token": token})
            response = await provider.read_data_source(
                "bitbucket_repository",
                {"workspace": "acme", "repo_slug": "api"},
            )
    """

    def __init__(self) -> None:
        self._data_sources: Mapping[str, BindingDescriptor] = DATA_SOURCES
        self._resources: Mapping[str, ResourceDescriptor] = RESOURCES
        self._transport: AuthenticatedTransport | None = None
        self._redaction: SecretRedactionFilter | None = None

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    @property
    def schema(self) -> tuple[ConfigField, ...]:
        return PROVIDER_SCHEMA

    @property
    def data_sources(self) -> Mapping[str, BindingDescriptor]:
        return self._data_sources

    @property
    def resources(self) -> Mapping[str, ResourceDescriptor]:
        return self._resources

    @property
    def configured(self) -> bool:
        return self._transport is not None

    def validate(self) -> list[str]:
        """Check the published schema and every registered descriptor.

        Returns:
            Human-readable problems; empty when the provider is consistent.
        """
        problems: list[str] = []
        schema_names = tuple(f.name for f in PROVIDER_SCHEMA)
        if sorted(schema_names) != sorted(CONFIG_KEYS):
            problems.append(f"configuration schema {schema_names} does not match {CONFIG_KEYS}")
        for name, descriptor in self._data_sources.items():
            if name != descriptor.name:
                problems.append(f"data source {name!r} is registered as {descriptor.name!r}")
            problems.extend(descriptor.validate())
        for name, resource in self._resources.items():
            if name != resource.name:
                problems.append(f"resource {name!r} is registered as {resource.name!r}")
            problems.extend(resource.validate())
        return problems

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def configure(
        self,
        config: Mapping[str, str | None] | None = None,
        *,
        settings: Settings | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> list[Diagnostic]:
        """Resolve credentials and build the shared authenticated transport.

        Args:
            config: Provider configuration attributes (see :data:`PROVIDER_SCHEMA`).
            settings: Environment-backed settings; read afresh when omitted.
            http_transport: Optional ``httpx`` transport, used by tests.

        Returns:
            An empty list on success, otherwise the configuration diagnostics.
            No HTTP request is made either way.
        """
        try:
            if self._transport is not None:
                raise ConfigurationError("provider is already configured")
            settings = settings or Settings()
            credentials = resolve_credentials(config, settings)
            transport = AuthenticatedTransport.from_settings(
                credentials, settings, http_transport=http_transport
            )
        except ProviderError as exc:
            logger.error("Provider configuration failed: %s", exc)
            return [exc.to_diagnostic()]

        self._redaction = install_redaction(credentials.secret_values())
        self._transport = transport
        logger.info(
            "Bitbucket provider configured (auth=%s, base_url=%s)",
            credentials.mode.value,
            transport.base_url,
        )
        return []

    def _require_transport(self) -> AuthenticatedTransport:
        if self._transport is None:
            raise ConfigurationError("provider is not configured")
        return self._transport

    # ------------------------------------------------------------------
    # Data sources
    # ------------------------------------------------------------------

    async def read_data_source(
        self,
        name: str,
        inputs: Mapping[str, Any],
        *,
        cancel: CancellationToken | None = None,
        timeout: float | None = None,
        prior_id: str | None = None,
        prior_state: Mapping[str, Any] | None = None,
    ) -> ReadResponse:
        """Read the data source *name* with *inputs*.

        Args:
            name: Stable public binding name, e.g. ``bitbucket_commit_comments``.
            inputs: Caller-supplied parameter values.
            cancel: Host cancellation token for this read.
            timeout: Per-request deadline overriding the configured default.
            prior_id: Identity the host currently holds for this read.
            prior_state: Attribute tree the host currently holds.

        Returns:
            The new identity and attributes, or the prior ones plus a
            diagnostic when the read fails.
        """
        try:
            descriptor = self._data_sources.get(name)
            if descriptor is None:
                raise ContractError(f"unknown data source {name!r}", binding=name)
            result = await read_binding(
                self._require_transport(),
                descriptor,
                inputs,
                cancel=cancel,
                timeout=timeout,
            )
        except ProviderError as exc:
            logger.warning("Read of %s failed (%s): %s", name, exc.kind.value, exc)
            return ReadResponse(
                id=prior_id,
                state=dict(prior_state or {}),
                diagnostics=[exc.to_diagnostic()],
            )
        return ReadResponse(id=result.id, state=result.attributes)

    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------

    def _resource(self, name: str) -> ResourceDescriptor:
        descriptor = self._resources.get(name)
        if descriptor is None:
            raise ContractError(f"unknown resource {name!r}", binding=name)
        return descriptor

    async def create_resource(
        self,
        name: str,
        params: Mapping[str, Any],
        body: Mapping[str, Any] | None = None,
        *,
        cancel: CancellationToken | None = None,
        timeout: float | None = None,
    ) -> ResourceResponse:
        try:
            state = await lifecycle.create_resource(
                self._require_transport(),
                self._resource(name),
                params,
                body,
                cancel=cancel,
                timeout=timeout,
            )
        except ProviderError as exc:
            logger.warning("Create of %s failed (%s): %s", name, exc.kind.value, exc)
            return ResourceResponse(diagnostics=[exc.to_diagnostic()])
        return ResourceResponse(state=state)

    async def read_resource(
        self,
        name: str,
        state: ResourceState,
        *,
        cancel: CancellationToken | None = None,
        timeout: float | None = None,
    ) -> ResourceResponse:
        try:
            refreshed = await lifecycle.read_resource(
                self._require_transport(),
                self._resource(name),
                state,
                cancel=cancel,
                timeout=timeout,
            )
        except ProviderError as exc:
            logger.warning("Refresh of %s failed (%s): %s", name, exc.kind.value, exc)
            return ResourceResponse(state=state, diagnostics=[exc.to_diagnostic()])
        return ResourceResponse(state=refreshed)

    async def update_resource(
        self,
        name: str,
        state: ResourceState,
        body: Mapping[str, Any] | None = None,
        *,
        cancel: CancellationToken | None = None,
        timeout: float | None = None,
    ) -> ResourceResponse:
        try:
            updated = await lifecycle.update_resource(
                self._require_transport(),
                self._resource(name),
                state,
                body,
                cancel=cancel,
                timeout=timeout,
            )
        except ProviderError as exc:
            logger.warning("Update of %s failed (%s): %s", name, exc.kind.value, exc)
            return ResourceResponse(state=state, diagnostics=[exc.to_diagnostic()])
        return ResourceResponse(state=updated)

    async def delete_resource(
        self,
        name: str,
        state: ResourceState,
        *,
        cancel: CancellationToken | None = None,
        timeout: float | None = None,
    ) -> ResourceResponse:
        try:
            await lifecycle.delete_resource(
                self._require_transport(),
                self._resource(name),
                state,
                cancel=cancel,
                timeout=timeout,
            )
        except ProviderError as exc:
            logger.warning("Delete of %s failed (%s): %s", name, exc.kind.value, exc)
            return ResourceResponse(state=state, diagnostics=[exc.to_diagnostic()])
        return ResourceResponse(state=None)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def aclose(self) -> None:
        """Release the HTTP client and detach the log redaction filter."""
        if self._transport is not None:
            await self._transport.aclose()
        if self._redaction is not None:
            uninstall_redaction(self._redaction)
            self._redaction = None

    async def __aenter__(self) -> BitbucketProvider:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


__all__ = ["BitbucketProvider", "PROVIDER_SCHEMA"]
