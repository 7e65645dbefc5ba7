from __future__ import annotations

"""The single generic read pipeline shared by every data binding.

For a descriptor and caller inputs the pipeline binds and coerces the
parameters, builds the request target, traces the sanitised parameters,
dispatches one GET over the shared transport, classifies the response,
reads and decodes the body, and renders the synthetic identity.  Steps run
strictly in that order; nothing is retried.
"""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from bitbucket_provider.bindings.base import BindingDescriptor, template_fields
from bitbucket_provider.bindings.decoder import Decoder
from bitbucket_provider.errors import (
    ContractError,
    DecodeError,
    EmptyResponseError,
    classify_status,
)
from bitbucket_provider.models.enums import ParamType
from bitbucket_provider.services.redaction import redact_attributes, sanitise_params
from bitbucket_provider.transport.cancellation import CancellationToken
from bitbucket_provider.transport.client import AuthenticatedTransport
from bitbucket_provider.transport.urls import encode_query, join_target, quote_path_value

logger = logging.getLogger(__name__)

_TRUE = {"true", "1", "yes"}
_FALSE = {"false", "0", "no"}


@dataclass(frozen=True)
class ReadResult:
    """Decoded attribute tree and synthetic identity of one successful read."""

    id: str
    attributes: dict[str, Any]


# ---------------------------------------------------------------------------
# Parameter binding and URL construction
# ---------------------------------------------------------------------------


def _coerce(descriptor: BindingDescriptor, name: str, kind: ParamType, value: Any) -> Any:
    if kind is ParamType.integer:
        if isinstance(value, bool):
            raise ContractError(f"parameter {name!r} must be an integer", binding=descriptor.name)
        if isinstance(value, int):
            return value
        try:
            return int(str(value).strip())
        except ValueError as exc:
            raise ContractError(
                f"parameter {name!r} must be an integer, got {value!r}",
                binding=descriptor.name,
            ) from exc
    if kind is ParamType.boolean:
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in _TRUE:
            return True
        if text in _FALSE:
            return False
        raise ContractError(
            f"parameter {name!r} must be a boolean, got {value!r}",
            binding=descriptor.name,
        )
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value is False or (
        isinstance(value, int) and not isinstance(value, bool) and value == 0
    )


def bind_parameters(descriptor: BindingDescriptor, inputs: Mapping[str, Any]) -> dict[str, Any]:
    """Read and coerce every declared parameter of *descriptor* from *inputs*.

    Optional parameters that are absent or empty are left out of the
    result.  Inputs the descriptor does not declare are ignored.

    Raises:
        ContractError: A required parameter is missing or fails coercion.
    """
    bound: dict[str, Any] = {}
    for param in descriptor.params:
        raw = inputs.get(param.name)
        if raw is None or raw == "":
            if param.required:
                raise ContractError(
                    f"missing required parameter {param.name!r}",
                    binding=descriptor.name,
                )
            continue
        value = _coerce(descriptor, param.name, param.type, raw)
        if not param.required and _is_empty(value):
            continue
        bound[param.name] = value
    return bound


def format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_target(descriptor: BindingDescriptor, bound: Mapping[str, Any]) -> str:
    """Return the encoded request target (path plus query) for *bound* inputs.

    Each path placeholder is URL-encoded; parameters marked ``allow_slash``
    keep their ``/`` separators.  Fixed query pairs come first, followed by
    the optional parameters present in *bound*.
    """
    path_values = {
        p.name: quote_path_value(format_value(bound[p.name]), allow_slash=p.allow_slash)
        for p in descriptor.path_params
    }
    path = descriptor.path.format_map(path_values)
    pairs = list(descriptor.fixed_query)
    pairs.extend(
        (p.query_name, format_value(bound[p.name]))
        for p in descriptor.query_params
        if p.name in bound
    )
    return join_target(path, encode_query(pairs))


def render_identity(
    descriptor: BindingDescriptor,
    bound: Mapping[str, Any],
    attributes: Mapping[str, Any],
) -> str:
    """Substitute inputs, then top-level scalar outputs, into the identity template.

    Raises:
        ContractError: A template variable has no non-empty value.
    """
    values: dict[str, str] = {}
    for variable in template_fields(descriptor.identity):
        if variable in bound:
            values[variable] = format_value(bound[variable])
            continue
        attr = descriptor.attribute(variable)
        value = attributes.get(variable) if attr is not None and attr.is_scalar else None
        if value is None or value == "":
            raise ContractError(
                f"identity variable {variable!r} is unbound",
                binding=descriptor.name,
            )
        values[variable] = format_value(value)
    return descriptor.identity.format_map(values)


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


async def read_binding(
    transport: AuthenticatedTransport,
    descriptor: BindingDescriptor,
    inputs: Mapping[str, Any],
    *,
    cancel: CancellationToken | None = None,
    timeout: float | None = None,
) -> ReadResult:
    """Execute one read of *descriptor* with *inputs* over *transport*.

    Args:
        transport: The provider's shared authenticated transport.
        descriptor: Static description of the binding.
        inputs: Caller-supplied parameter values.
        cancel: Optional host cancellation token.
        timeout: Optional per-request deadline in seconds.

    Returns:
        The decoded attribute tree and synthetic identity.

    Raises:
        ProviderError: Any subclass, per the error taxonomy; nothing is retried.
    """
    bound = bind_parameters(descriptor, inputs)
    target = build_target(descriptor, bound)
    logger.debug(
        "read %s params=%s",
        descriptor.name,
        sanitise_params(bound, descriptor.secret_params),
    )

    async with transport.stream(
        "GET",
        target,
        headers={"Accept": "application/json"},
        cancel=cancel,
        timeout=timeout,
        binding=descriptor.name,
    ) as response:
        url = str(response.request.url)
        error_body = None
        if not response.is_success:
            error_body = await transport.read_body(response, cancel=cancel, binding=descriptor.name)
        classify_status(
            response.status_code,
            response.headers,
            binding=descriptor.name,
            url=url,
            not_found=descriptor.not_found_message({k: format_value(v) for k, v in bound.items()}),
            body=error_body,
        )
        body = await transport.read_body(response, cancel=cancel, binding=descriptor.name)

    if not body.strip():
        raise EmptyResponseError(
            "Bitbucket returned an empty response body",
            binding=descriptor.name,
            url=url,
        )

    decoder = Decoder(descriptor, url=url)
    try:
        document = json.loads(body)
    except (ValueError, UnicodeDecodeError) as exc:
        raise DecodeError(
            f"{decoder.name}: response is not valid JSON ({exc})",
            binding=descriptor.name,
            url=url,
        ) from exc

    attributes = decoder.decode(document)
    identity = render_identity(descriptor, bound, attributes)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "decoded %s id=%s attributes=%s",
            descriptor.name,
            identity,
            redact_attributes(attributes, descriptor.attributes),
        )
    return ReadResult(id=identity, attributes=attributes)
