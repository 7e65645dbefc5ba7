from __future__ import annotations

import asyncio
import base64
import logging
from types import MappingProxyType

import httpx
import pytest

from bitbucket_provider import PROVIDER_SCHEMA, BitbucketProvider
from bitbucket_provider.models.enums import ErrorKind
from bitbucket_provider.schemas.resources import ResourceState
from bitbucket_provider.transport.cancellation import CancellationToken

COMMENTS = {
    "values": [
        {
            "id": 1,
            "content": {"raw": "x"},
            "created_on": "2020",
            "updated_on": "2020",
            "user": {"name": "u"},
            "links": {},
        }
    ],
    "page": 1,
    "size": 1,
    "next": "",
}

TAG = {"name": "v1", "type": "tag", "target": {"hash": "deadbeef", "type": "commit"}}


def _issue_token(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"access_token": "issued", "expires_in": 3600})


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


def test_registries_are_consistent_and_read_only() -> None:
    provider = BitbucketProvider()

    assert provider.validate() == []
    assert isinstance(provider.data_sources, MappingProxyType)
    assert isinstance(provider.resources, MappingProxyType)
    assert provider.configured is False


def test_schema_marks_secrets_and_conflicts() -> None:
    fields = {f.name: f for f in PROVIDER_SCHEMA}

    assert {name for name, f in fields.items() if f.secret} == {"password", "oauth_client_secret", "oauth_token"}
    assert fields["password"].required_with == ("username",)
    assert "oauth_token" in fields["username"].conflicts_with
    assert fields["oauth_token"].env_var == "BITBUCKET_OAUTH_TOKEN"


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_basic_auth_collection_read(handler, make_provider) -> None:
    handler.add("GET", "/2.0/repositories/w/r/commits/abc/comments", json=COMMENTS)
    provider, diagnostics = make_provider({"username": "u", "password": "p"})
    assert diagnostics == []

    response = await provider.read_data_source(
        "bitbucket_commit_comments", {"workspace": "w", "repo_slug": "r", "commit": "abc"}
    )

    assert response.ok
    assert len(handler.requests) == 1
    request = handler.requests[0]
    assert request.method == "GET"
    assert request.headers["Authorization"] == "Basic dTpw"
    assert response.state["comments"][0]["id"] == 1
    assert response.state["comments"][0]["content"]["raw"] == "x"
    assert response.state["page"] == 1
    assert response.id == "w/r/commits/abc/comments"


@pytest.mark.asyncio
async def test_oauth_token_scalar_read(handler, make_provider) -> None:
    handler.add("GET", "/2.0/repositories/w/r/refs/tags/v1", json=TAG)
    provider, _ = make_provider({"oauth_token": "T"})

    response = await provider.read_data_source(
        "bitbucket_tag", {"workspace": "w", "repo_slug": "r", "tag_name": "v1"}
    )

    assert response.ok
    assert handler.requests[0].headers["Authorization"] == "Bearer T"
    assert response.state["name"] == "v1"
    assert response.state["target_hash"] == "deadbeef"
    assert response.id == "w/r/v1"


@pytest.mark.asyncio
async def test_conflicting_auth_fails_configuration(handler, make_provider) -> None:
    provider, diagnostics = make_provider({"username": "u", "password": "p", "oauth_token": "T"})

    assert len(diagnostics) == 1
    assert diagnostics[0].kind is ErrorKind.configuration
    assert provider.configured is False
    assert handler.requests == []


@pytest.mark.asyncio
async def test_not_found_diagnostic_names_inputs(handler, make_provider) -> None:
    provider, _ = make_provider({"oauth_token": "T"})

    response = await provider.read_data_source(
        "bitbucket_issue", {"workspace": "w", "repo_slug": "r", "issue_id": "99"}
    )

    assert not response.ok
    diagnostic = response.diagnostics[0]
    assert diagnostic.kind is ErrorKind.not_found
    assert diagnostic.binding == "bitbucket_issue"
    for fragment in ("99", "w", "r"):
        assert fragment in diagnostic.detail
    assert response.state == {}
    assert response.id is None


@pytest.mark.asyncio
async def test_query_parameters_reach_the_wire(handler, make_provider) -> None:
    handler.add("GET", "/2.0/repositories/w/r/refs", json={"values": [], "page": 1, "size": 0})
    provider, _ = make_provider({"oauth_token": "T"})

    response = await provider.read_data_source(
        "bitbucket_repository_refs",
        {"workspace": "w", "repo_slug": "r", "q": "name~main", "sort": "-name"},
    )

    assert response.ok
    query = handler.requests[0].url.query.decode()
    assert "q=name%7Emain" in query
    assert "sort=-name" in query


@pytest.mark.asyncio
async def test_cancellation_keeps_prior_state(handler, make_provider) -> None:
    started = asyncio.Event()

    async def stall(request: httpx.Request) -> httpx.Response:
        started.set()
        await asyncio.sleep(30)
        return httpx.Response(200, json=TAG)

    handler.route("GET", "/2.0/repositories/w/r/refs/tags/v1", stall)
    provider, _ = make_provider({"oauth_token": "T"})
    token = CancellationToken()
    prior = {"name": "v0", "target_hash": "cafe"}

    task = asyncio.create_task(
        provider.read_data_source(
            "bitbucket_tag",
            {"workspace": "w", "repo_slug": "r", "tag_name": "v1"},
            cancel=token,
            prior_id="w/r/v0",
            prior_state=prior,
        )
    )
    await started.wait()
    token.cancel()
    response = await asyncio.wait_for(task, timeout=5)

    assert response.diagnostics[0].kind is ErrorKind.transport
    assert response.diagnostics[0].sub_kind == "cancelled"
    assert response.id == "w/r/v0"
    assert response.state == prior


@pytest.mark.asyncio
async def test_read_before_configure_is_diagnostic(handler) -> None:
    provider = BitbucketProvider()

    response = await provider.read_data_source("bitbucket_current_user", {})

    assert response.diagnostics[0].kind is ErrorKind.configuration
    assert "not configured" in response.diagnostics[0].detail
    assert handler.requests == []


@pytest.mark.asyncio
async def test_unknown_data_source_is_contract_diagnostic(make_provider) -> None:
    provider, _ = make_provider({"oauth_token": "T"})

    response = await provider.read_data_source("bitbucket_nope", {})

    assert response.diagnostics[0].kind is ErrorKind.contract
    assert "unknown data source 'bitbucket_nope'" in response.diagnostics[0].detail


@pytest.mark.asyncio
async def test_second_configure_is_rejected(make_provider) -> None:
    provider, _ = make_provider({"oauth_token": "T"})

    diagnostics = provider.configure({"oauth_token": "T"})

    assert diagnostics[0].kind is ErrorKind.configuration
    assert "already configured" in diagnostics[0].detail


@pytest.mark.asyncio
async def test_invalid_base_url_fails_configuration(make_provider) -> None:
    provider, diagnostics = make_provider({"oauth_token": "T"}, BITBUCKET_BASE_URL="ftp://example.com")

    assert diagnostics[0].kind is ErrorKind.configuration
    assert provider.configured is False


@pytest.mark.asyncio
async def test_concurrent_reads_match_sequential_reads(handler, make_provider) -> None:
    for tag in ("v1", "v2", "v3"):
        handler.add(
            "GET",
            f"/2.0/repositories/w/r/refs/tags/{tag}",
            json={"name": tag, "target": {"hash": f"hash-{tag}"}},
        )
    provider, _ = make_provider({"oauth_token": "T"})

    def read(tag: str):
        return provider.read_data_source(
            "bitbucket_tag", {"workspace": "w", "repo_slug": "r", "tag_name": tag}
        )

    sequential = [await read(tag) for tag in ("v1", "v2", "v3")]
    concurrent = await asyncio.gather(*(read(tag) for tag in ("v1", "v2", "v3")))

    assert [r.model_dump() for r in concurrent] == [r.model_dump() for r in sequential]
    assert [r.state["target_hash"] for r in concurrent] == ["hash-v1", "hash-v2", "hash-v3"]


# ---------------------------------------------------------------------------
# Secrets
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_secrets_never_reach_logs_or_diagnostics(
    handler, make_provider, caplog: pytest.LogCaptureFixture
) -> None:
    encoded = base64.b64encode(b"u:hunter2").decode()
    handler.add("GET", "/2.0/user", 401, json={"type": "error", "error": {"message": "hunter2 rejected"}})
    caplog.set_level(logging.DEBUG)

    provider, _ = make_provider({"username": "u", "password": "hunter2"})
    responses = [
        await provider.read_data_source("bitbucket_current_user", {}),
        await provider.read_data_source("bitbucket_issue", {"workspace": "w", "repo_slug": "r", "issue_id": "1"}),
    ]

    assert all(r.diagnostics for r in responses)
    dumped = " ".join(r.model_dump_json() for r in responses)
    for secret in ("hunter2", encoded):
        assert secret not in caplog.text
        assert secret not in dumped


@pytest.mark.asyncio
async def test_client_credentials_token_reused_and_invalidated(handler, make_provider) -> None:
    handler.route("POST", "/site/oauth2/access_token", _issue_token)
    handler.add("GET", "/2.0/repositories/w/r/refs/tags/v1", json=TAG)
    handler.add("GET", "/2.0/user", 401)
    provider, _ = make_provider({"oauth_client_id": "client", "oauth_client_secret": "client-secret"})
    tag_inputs = {"workspace": "w", "repo_slug": "r", "tag_name": "v1"}

    await provider.read_data_source("bitbucket_tag", tag_inputs)
    await provider.read_data_source("bitbucket_tag", tag_inputs)
    rejected = await provider.read_data_source("bitbucket_current_user", {})
    await provider.read_data_source("bitbucket_tag", tag_inputs)

    token_fetches = [r for r in handler.requests if r.url.path == "/site/oauth2/access_token"]
    assert len(token_fetches) == 2
    assert rejected.diagnostics[0].kind is ErrorKind.unauthorized


# ---------------------------------------------------------------------------
# Resources
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_resource_lifecycle_through_provider(handler, make_provider) -> None:
    path = "/2.0/repositories/w/r/deploy-keys"
    handler.add("POST", path, json={"id": 42, "label": "ci", "key": "ssh-ed25519 AAAA"})
    handler.add("DELETE", f"{path}/42", 204)
    provider, _ = make_provider({"oauth_token": "T"})

    created = await provider.create_resource(
        "bitbucket_deploy_key", {"workspace": "w", "repo_slug": "r"}, {"label": "ci", "key": "ssh-ed25519 AAAA"}
    )
    assert created.ok
    assert created.state is not None
    assert created.state.id == "w/r/deploy-keys/42"

    refreshed = await provider.read_resource("bitbucket_deploy_key", created.state)
    assert refreshed.ok
    assert refreshed.state is None

    deleted = await provider.delete_resource("bitbucket_deploy_key", created.state)
    assert deleted.ok
    assert deleted.state is None


@pytest.mark.asyncio
async def test_failed_resource_update_keeps_prior_state(handler, make_provider) -> None:
    handler.add("PUT", "/2.0/repositories/w/r/deploy-keys/42", 403)
    provider, _ = make_provider({"oauth_token": "T"})
    state = ResourceState(
        id="w/r/deploy-keys/42",
        params={"workspace": "w", "repo_slug": "r", "key_id": "42"},
        attributes={"label": "ci"},
    )

    response = await provider.update_resource("bitbucket_deploy_key", state, {"label": "ci-2"})

    assert response.state == state
    assert response.diagnostics[0].kind is ErrorKind.forbidden


@pytest.mark.asyncio
async def test_unknown_resource_is_contract_diagnostic(make_provider) -> None:
    provider, _ = make_provider({"oauth_token": "T"})

    response = await provider.create_resource("bitbucket_nope", {})

    assert response.state is None
    assert response.diagnostics[0].kind is ErrorKind.contract
