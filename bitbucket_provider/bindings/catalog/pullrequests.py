from __future__ import annotations

from bitbucket_provider.bindings.base import (
    LINKS,
    TIMESTAMPS,
    boolean,
    collection,
    integer,
    map_list,
    mapping,
    object_list,
    query_param,
    scalar,
    string,
)
from bitbucket_provider.bindings.catalog.common import REPO
from bitbucket_provider.models.enums import ParamType

PULL_REQUEST = f"{REPO}/pullrequests/{{pull_request_id}}"

_PR_NOT_FOUND = (
    "unable to locate pull request {pull_request_id} in repository {workspace}/{repo_slug}"
)

PULL_REQUEST_DETAIL = scalar(
    "bitbucket_pull_request",
    PULL_REQUEST,
    integer("id", required=True),
    string("title"),
    string("description"),
    string("state"),
    mapping("author"),
    mapping("source"),
    mapping("destination"),
    map_list("reviewers"),
    string("created_date", "created_on"),
    string("updated_date", "updated_on"),
    string("merge_commit", "merge_commit.hash"),
    mapping("closed_by"),
    LINKS,
    identity="{workspace}/{repo_slug}/{id}",
    entity="pull request",
    not_found=_PR_NOT_FOUND,
)

PULLREQUESTS = collection(
    "bitbucket_pullrequests",
    f"{REPO}/pullrequests",
    "pull_requests",
    integer("id"),
    string("title"),
    string("description"),
    string("state"),
    mapping("author"),
    mapping("source"),
    mapping("destination"),
    *TIMESTAMPS,
    mapping("merge_commit"),
    mapping("closed_by"),
    object_list(
        "reviewers",
        string("display_name"),
        string("uuid"),
        string("account_id"),
        string("type"),
    ),
    LINKS,
    params=[
        query_param("state"),
        query_param("source_branch"),
        query_param("destination_branch"),
        query_param("author"),
        query_param("reviewer"),
        query_param("q"),
        query_param("sort"),
    ],
)

REPOSITORY_PULL_REQUEST_ACTIVITY = collection(
    "bitbucket_repository_pull_request_activity",
    f"{PULL_REQUEST}/activity",
    "activity",
    mapping("update"),
    mapping("comment"),
    mapping("approval"),
    mapping("changes_requested"),
    mapping("pull_request"),
    not_found=_PR_NOT_FOUND,
)

REPOSITORY_PULL_REQUEST_APPROVALS = collection(
    "bitbucket_repository_pull_request_approvals",
    f"{PULL_REQUEST}/approve",
    "approvals",
    mapping("user"),
    string("approved_on"),
    string("role"),
    LINKS,
    not_found=_PR_NOT_FOUND,
)

REPOSITORY_PULL_REQUEST_COMMENTS = collection(
    "bitbucket_repository_pull_request_comments",
    f"{PULL_REQUEST}/comments",
    "comments",
    integer("id"),
    mapping("content"),
    mapping("user"),
    *TIMESTAMPS,
    boolean("deleted"),
    mapping("parent"),
    mapping("inline"),
    LINKS,
    not_found=_PR_NOT_FOUND,
)

REPOSITORY_PULL_REQUEST_DIFF = collection(
    "bitbucket_repository_pull_request_diff",
    f"{PULL_REQUEST}/diff",
    "diff",
    mapping("new"),
    mapping("old"),
    object_list(
        "hunks",
        string("type"),
        object_list(
            "lines",
            integer("line_old"),
            integer("line_new"),
            string("content"),
        ),
    ),
    params=[query_param("context", ParamType.integer), query_param("path")],
    not_found=_PR_NOT_FOUND,
)

REPOSITORY_PULL_REQUEST_MERGE = scalar(
    "bitbucket_repository_pull_request_merge",
    f"{PULL_REQUEST}/merge",
    mapping("merge_status"),
    mapping("merge_commit"),
    boolean("close_source_branch"),
    string("merge_strategy"),
    mapping("destination"),
    mapping("source"),
    not_found=_PR_NOT_FOUND,
)

PULL_REQUEST_BINDINGS = (
    PULL_REQUEST_DETAIL,
    PULLREQUESTS,
    REPOSITORY_PULL_REQUEST_ACTIVITY,
    REPOSITORY_PULL_REQUEST_APPROVALS,
    REPOSITORY_PULL_REQUEST_COMMENTS,
    REPOSITORY_PULL_REQUEST_DIFF,
    REPOSITORY_PULL_REQUEST_MERGE,
)
