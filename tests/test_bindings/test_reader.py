from __future__ import annotations

import logging

import pytest
from pydantic import SecretStr

from bitbucket_provider.bindings.base import integer, query_param, scalar, string
from bitbucket_provider.bindings.catalog import DATA_SOURCES
from bitbucket_provider.bindings.reader import (
    bind_parameters,
    build_target,
    read_binding,
    render_identity,
)
from bitbucket_provider.errors import (
    ContractError,
    DecodeError,
    EmptyResponseError,
    HTTPStatusError,
)
from bitbucket_provider.models.enums import AuthMode, ErrorKind, ParamType
from bitbucket_provider.schemas.credentials import Credentials
from bitbucket_provider.services.redaction import REDACTED

TOKEN = Credentials(mode=AuthMode.oauth_token, token=SecretStr("T"))

REPO_INPUTS = {"workspace": "w", "repo_slug": "r"}


# ---------------------------------------------------------------------------
# Parameter binding
# ---------------------------------------------------------------------------


def test_missing_required_parameter_is_contract_error() -> None:
    with pytest.raises(ContractError) as exc_info:
        bind_parameters(DATA_SOURCES["bitbucket_tag"], {"workspace": "w", "repo_slug": "r"})

    assert "missing required parameter 'tag_name'" in str(exc_info.value)


def test_empty_string_counts_as_missing() -> None:
    with pytest.raises(ContractError):
        bind_parameters(DATA_SOURCES["bitbucket_tag"], {**REPO_INPUTS, "tag_name": ""})


def test_optional_zero_values_are_omitted() -> None:
    descriptor = DATA_SOURCES["bitbucket_repository_refs"]

    bound = bind_parameters(descriptor, {**REPO_INPUTS, "q": "", "sort": None, "unused": "x"})

    assert bound == REPO_INPUTS


def test_integer_parameters_are_coerced() -> None:
    descriptor = scalar(
        "bitbucket_sample",
        "2.0/sample/{id}",
        string("name"),
        params=[query_param("page", ParamType.integer), query_param("limit", ParamType.integer)],
    )

    bound = bind_parameters(descriptor, {"id": 7, "page": "2", "limit": 0})

    assert bound == {"id": "7", "page": 2}


def test_invalid_integer_is_contract_error() -> None:
    descriptor = scalar(
        "bitbucket_sample",
        "2.0/sample",
        string("name"),
        params=[query_param("page", ParamType.integer)],
    )

    with pytest.raises(ContractError) as exc_info:
        bind_parameters(descriptor, {"page": "two"})

    assert "must be an integer" in str(exc_info.value)


# ---------------------------------------------------------------------------
# Request targets
# ---------------------------------------------------------------------------


def test_query_parameters_are_escaped() -> None:
    descriptor = DATA_SOURCES["bitbucket_repository_refs"]
    bound = bind_parameters(descriptor, {**REPO_INPUTS, "q": "name~main", "sort": "-name"})

    assert build_target(descriptor, bound) == "2.0/repositories/w/r/refs?q=name%7Emain&sort=-name"


def test_path_values_are_escaped() -> None:
    descriptor = DATA_SOURCES["bitbucket_tag"]
    bound = bind_parameters(descriptor, {"workspace": "my team", "repo_slug": "r", "tag_name": "release/1.0"})

    assert build_target(descriptor, bound) == "2.0/repositories/my%20team/r/refs/tags/release%2F1.0"


def test_file_path_keeps_slashes_and_fixed_query() -> None:
    descriptor = DATA_SOURCES["bitbucket_file"]
    bound = bind_parameters(descriptor, {**REPO_INPUTS, "commit": "main", "path": "docs/read me.md"})

    assert build_target(descriptor, bound) == "2.0/repositories/w/r/src/main/docs/read%20me.md?format=meta"


def test_wire_name_renames_query_parameter() -> None:
    descriptor = DATA_SOURCES["bitbucket_commits"]
    bound = bind_parameters(descriptor, {**REPO_INPUTS, "branch": "main"})

    assert build_target(descriptor, bound) == "2.0/repositories/w/r/commits?include=main"


def test_pipelines_page_input_is_sent_as_page_without_shadowing_output() -> None:
    descriptor = DATA_SOURCES["bitbucket_pipelines"]
    bound = bind_parameters(descriptor, {**REPO_INPUTS, "page_number": "2"})

    assert descriptor.validate() == []
    assert descriptor.attribute("page") is not None
    assert build_target(descriptor, bound) == "2.0/repositories/w/r/pipelines?page=2"


# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------


def test_identity_prefers_inputs_then_scalar_outputs() -> None:
    descriptor = DATA_SOURCES["bitbucket_tag"]
    bound = {**REPO_INPUTS, "tag_name": "v1"}

    assert render_identity(descriptor, bound, {"name": "v1"}) == "w/r/v1"


def test_identity_with_empty_output_is_contract_error() -> None:
    descriptor = DATA_SOURCES["bitbucket_tag"]

    with pytest.raises(ContractError):
        render_identity(descriptor, {**REPO_INPUTS, "tag_name": "v1"}, {"name": ""})


def test_identity_is_deterministic() -> None:
    descriptor = DATA_SOURCES["bitbucket_commit_comments"]
    bound = {**REPO_INPUTS, "commit": "abc"}

    first = render_identity(descriptor, bound, {"comments": []})
    second = render_identity(descriptor, dict(reversed(list(bound.items()))), {"comments": [{"id": 1}]})

    assert first == second == "w/r/commits/abc/comments"


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_read_binding_decodes_scalar(handler, make_transport) -> None:
    handler.add(
        "GET",
        "/2.0/repositories/w/r/refs/tags/v1",
        json={"name": "v1", "type": "tag", "target": {"hash": "deadbeef", "type": "commit"}},
    )

    result = await read_binding(
        make_transport(TOKEN), DATA_SOURCES["bitbucket_tag"], {**REPO_INPUTS, "tag_name": "v1"}
    )

    assert result.id == "w/r/v1"
    assert result.attributes["target_hash"] == "deadbeef"
    assert handler.requests[0].headers["Accept"] == "application/json"


@pytest.mark.asyncio
async def test_not_found_names_the_inputs(handler, make_transport) -> None:
    with pytest.raises(HTTPStatusError) as exc_info:
        await read_binding(
            make_transport(TOKEN), DATA_SOURCES["bitbucket_issue"], {**REPO_INPUTS, "issue_id": "99"}
        )

    error = exc_info.value
    assert error.kind is ErrorKind.not_found
    assert error.status_code == 404
    assert "unable to locate issue 99 in repository w/r" in str(error)
    assert error.url == "https://api.bitbucket.org/2.0/repositories/w/r/issues/99"


@pytest.mark.asyncio
async def test_empty_body_is_empty_response_error(handler, make_transport) -> None:
    handler.add("GET", "/2.0/repositories/w/r/refs/tags/v1", content=b"  \n")

    with pytest.raises(EmptyResponseError):
        await read_binding(
            make_transport(TOKEN), DATA_SOURCES["bitbucket_tag"], {**REPO_INPUTS, "tag_name": "v1"}
        )


@pytest.mark.asyncio
async def test_invalid_json_is_decode_error(handler, make_transport) -> None:
    handler.add("GET", "/2.0/repositories/w/r/refs/tags/v1", content=b"<html>oops</html>")

    with pytest.raises(DecodeError) as exc_info:
        await read_binding(
            make_transport(TOKEN), DATA_SOURCES["bitbucket_tag"], {**REPO_INPUTS, "tag_name": "v1"}
        )

    assert "bitbucket_tag decoder: response is not valid JSON" in str(exc_info.value)


@pytest.mark.asyncio
async def test_unmapped_client_error_carries_api_message(handler, make_transport) -> None:
    handler.add(
        "GET",
        "/2.0/repositories/w/r/refs",
        400,
        json={"type": "error", "error": {"message": "Invalid field name: nope"}},
    )

    with pytest.raises(ContractError) as exc_info:
        await read_binding(
            make_transport(TOKEN), DATA_SOURCES["bitbucket_repository_refs"], {**REPO_INPUTS, "q": "nope=1"}
        )

    assert "HTTP 400: Invalid field name: nope" in str(exc_info.value)


@pytest.mark.asyncio
async def test_rate_limit_surfaces_retry_after(handler, make_transport) -> None:
    handler.add("GET", "/2.0/repositories/w/r/refs/tags/v1", 429, content=b"", headers={"Retry-After": "17"})

    with pytest.raises(HTTPStatusError) as exc_info:
        await read_binding(
            make_transport(TOKEN), DATA_SOURCES["bitbucket_tag"], {**REPO_INPUTS, "tag_name": "v1"}
        )

    assert exc_info.value.kind is ErrorKind.rate_limited
    assert exc_info.value.retry_after == "17"
    assert "Retry-After: 17" in str(exc_info.value)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("status", "kind"),
    [
        (401, ErrorKind.unauthorized),
        (403, ErrorKind.forbidden),
        (500, ErrorKind.server),
        (503, ErrorKind.server),
    ],
)
async def test_status_codes_map_to_error_kinds(handler, make_transport, status: int, kind: ErrorKind) -> None:
    handler.add("GET", "/2.0/repositories/w/r/refs/tags/v1", status, content=b"")

    with pytest.raises(HTTPStatusError) as exc_info:
        await read_binding(
            make_transport(TOKEN), DATA_SOURCES["bitbucket_tag"], {**REPO_INPUTS, "tag_name": "v1"}
        )

    assert exc_info.value.kind is kind


@pytest.mark.asyncio
async def test_integer_required_output_missing_is_contract_error(handler, make_transport) -> None:
    descriptor = scalar("bitbucket_sample", "2.0/sample", integer("id", required=True))
    handler.add("GET", "/2.0/sample", json={"name": "no id"})

    with pytest.raises(ContractError):
        await read_binding(make_transport(TOKEN), descriptor, {})


@pytest.mark.asyncio
async def test_file_history_sends_revision_query(handler, make_transport) -> None:
    handler.add(
        "GET",
        "/2.0/repositories/w/r/filehistory/a/b.txt",
        json={"values": [{"path": "a/b.txt", "type": "commit_file"}], "page": 1, "size": 1},
    )

    result = await read_binding(
        make_transport(TOKEN),
        DATA_SOURCES["bitbucket_repository_file_history"],
        {**REPO_INPUTS, "path": "a/b.txt", "revision": "abc"},
    )

    request = handler.requests[0]
    assert request.url.path == "/2.0/repositories/w/r/filehistory/a/b.txt"
    assert request.url.params["revision"] == "abc"
    assert result.attributes["history"][0]["path"] == "a/b.txt"


def test_variable_values_are_published_as_sensitive() -> None:
    assert DATA_SOURCES["bitbucket_repository_variables"].sensitive_attributes == {"variables.value"}
    assert DATA_SOURCES["bitbucket_tag"].sensitive_attributes == frozenset()


@pytest.mark.asyncio
async def test_read_trace_masks_secret_attributes(
    handler, make_transport, caplog: pytest.LogCaptureFixture
) -> None:
    handler.add(
        "GET",
        "/2.0/repositories/w/r/pipelines_config/variables",
        json={"values": [{"uuid": "{v}", "key": "DEPLOY_TOKEN", "value": "s3cr3t-value"}], "page": 1},
    )
    caplog.set_level(logging.DEBUG, logger="bitbucket_provider")

    result = await read_binding(make_transport(TOKEN), DATA_SOURCES["bitbucket_repository_variables"], REPO_INPUTS)

    assert result.attributes["variables"][0]["value"] == "s3cr3t-value"
    assert "DEPLOY_TOKEN" in caplog.text
    assert REDACTED in caplog.text
    assert "s3cr3t-value" not in caplog.text
