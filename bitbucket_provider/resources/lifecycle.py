from __future__ import annotations

"""Generic create/read/update/delete for every managed resource.

Request bodies are opaque JSON objects supplied by the host and the
attribute tree of a resource is the decoded response object.  All calls go
through the provider's authenticated transport and the shared status
classifier, so resources report the same error taxonomy as data bindings.
"""

import json
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from bitbucket_provider.bindings.base import Param
from bitbucket_provider.bindings.reader import format_value
from bitbucket_provider.errors import (
    ContractError,
    DecodeError,
    HTTPStatusError,
    classify_status,
)
from bitbucket_provider.models.enums import ErrorKind
from bitbucket_provider.resources.base import ResourceDescriptor
from bitbucket_provider.schemas.resources import ResourceState
from bitbucket_provider.transport.cancellation import CancellationToken
from bitbucket_provider.transport.client import AuthenticatedTransport, TransportResponse
from bitbucket_provider.transport.urls import quote_path_value

logger = logging.getLogger(__name__)

_JSON_HEADERS = {"Accept": "application/json"}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _bind(descriptor: ResourceDescriptor, params: Iterable[Param], values: Mapping[str, Any]) -> dict[str, str]:
    bound: dict[str, str] = {}
    for param in params:
        raw = values.get(param.name)
        if raw is None or raw == "":
            raise ContractError(
                f"missing required parameter {param.name!r}",
                binding=descriptor.name,
            )
        bound[param.name] = format_value(raw)
    return bound


def _render(descriptor: ResourceDescriptor, template: str, values: Mapping[str, str]) -> str:
    slash = descriptor.slash_params
    return template.format_map(
        {name: quote_path_value(value, allow_slash=name in slash) for name, value in values.items()}
    )


def _not_found(descriptor: ResourceDescriptor, values: Mapping[str, str]) -> str:
    shown = ", ".join(f"{k}={v}" for k, v in values.items())
    return f"unable to locate {descriptor.entity} ({shown})"


def _document(descriptor: ResourceDescriptor, response: TransportResponse) -> dict[str, Any]:
    if not response.body.strip():
        return {}
    try:
        document = json.loads(response.body)
    except (ValueError, UnicodeDecodeError) as exc:
        raise DecodeError(
            f"{descriptor.name} decoder: response is not valid JSON ({exc})",
            binding=descriptor.name,
            url=response.url,
        ) from exc
    if not isinstance(document, Mapping):
        raise DecodeError(
            f"{descriptor.name} decoder: expected a JSON object",
            binding=descriptor.name,
            url=response.url,
        )
    return dict(document)


async def _call(
    transport: AuthenticatedTransport,
    descriptor: ResourceDescriptor,
    method: str,
    path: str,
    values: Mapping[str, str],
    *,
    body: Any = None,
    query: Mapping[str, str] | None = None,
    cancel: CancellationToken | None = None,
    timeout: float | None = None,
) -> dict[str, Any]:
    response = await transport.send(
        method,
        path,
        query=query,
        headers=_JSON_HEADERS,
        body=body,
        cancel=cancel,
        timeout=timeout,
        binding=descriptor.name,
    )
    classify_status(
        response.status_code,
        response.headers,
        binding=descriptor.name,
        url=response.url,
        not_found=_not_found(descriptor, values),
        body=response.body,
    )
    return _document(descriptor, response)


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


async def create_resource(
    transport: AuthenticatedTransport,
    descriptor: ResourceDescriptor,
    params: Mapping[str, Any],
    body: Mapping[str, Any] | None = None,
    *,
    cancel: CancellationToken | None = None,
    timeout: float | None = None,
) -> ResourceState:
    """Create a resource and return its initial state.

    Raises:
        ContractError: A path parameter is missing, or the response lacks
            the field carrying the server-assigned id.
        ProviderError: Any other failure from the transport or classifier.
    """
    values = _bind(descriptor, descriptor.creation_params(), params)
    template = descriptor.collection_path or descriptor.path
    document = await _call(
        transport,
        descriptor,
        descriptor.create_method,
        _render(descriptor, template, values),
        values,
        body=dict(body or {}),
        cancel=cancel,
        timeout=timeout,
    )

    if descriptor.id_param is not None:
        assigned = document.get(descriptor.id_field or "")
        if assigned is None or assigned == "":
            raise ContractError(
                f"create response has no {descriptor.id_field!r} to identify the new {descriptor.entity}",
                binding=descriptor.name,
            )
        values[descriptor.id_param] = format_value(assigned)

    identity = descriptor.identity.format_map(values)
    logger.info("Created %s %s", descriptor.name, identity)
    return ResourceState(id=identity, params=values, attributes=document)


async def read_resource(
    transport: AuthenticatedTransport,
    descriptor: ResourceDescriptor,
    state: ResourceState,
    *,
    cancel: CancellationToken | None = None,
    timeout: float | None = None,
) -> ResourceState | None:
    """Refresh *state* from the platform; ``None`` if the resource is gone."""
    values = _bind(descriptor, descriptor.params, state.params)
    try:
        document = await _call(
            transport,
            descriptor,
            "GET",
            _render(descriptor, descriptor.path, values),
            values,
            query=dict(descriptor.fixed_query),
            cancel=cancel,
            timeout=timeout,
        )
    except HTTPStatusError as exc:
        if exc.kind is not ErrorKind.not_found:
            raise
        logger.info("%s %s no longer exists; dropping it from state", descriptor.name, state.id)
        return None
    return ResourceState(id=state.id, params=values, attributes=document)


async def update_resource(
    transport: AuthenticatedTransport,
    descriptor: ResourceDescriptor,
    state: ResourceState,
    body: Mapping[str, Any] | None = None,
    *,
    cancel: CancellationToken | None = None,
    timeout: float | None = None,
) -> ResourceState:
    """Apply *body* to an existing resource and return its new state."""
    if descriptor.update_method is None:
        return await create_resource(
            transport, descriptor, state.params, body, cancel=cancel, timeout=timeout
        )

    values = _bind(descriptor, descriptor.params, state.params)
    document = await _call(
        transport,
        descriptor,
        descriptor.update_method,
        _render(descriptor, descriptor.path + descriptor.update_suffix, values),
        values,
        body=dict(body or {}),
        cancel=cancel,
        timeout=timeout,
    )
    logger.info("Updated %s %s", descriptor.name, state.id)
    return ResourceState(id=state.id, params=values, attributes=document or dict(state.attributes))


async def delete_resource(
    transport: AuthenticatedTransport,
    descriptor: ResourceDescriptor,
    state: ResourceState,
    *,
    cancel: CancellationToken | None = None,
    timeout: float | None = None,
) -> None:
    """Delete the resource; a resource that is already gone counts as deleted."""
    if not descriptor.deletable:
        logger.info("%s %s has no delete endpoint; forgetting it", descriptor.name, state.id)
        return

    values = _bind(descriptor, descriptor.params, state.params)
    try:
        await _call(
            transport,
            descriptor,
            "DELETE",
            _render(descriptor, descriptor.path, values),
            values,
            cancel=cancel,
            timeout=timeout,
        )
    except HTTPStatusError as exc:
        if exc.kind is not ErrorKind.not_found:
            raise
        logger.debug("%s %s was already deleted", descriptor.name, state.id)
        return
    logger.info("Deleted %s %s", descriptor.name, state.id)
