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

COMMIT = scalar(
    "bitbucket_commit",
    f"{REPO}/commit/{{commit_sha}}",
    string("hash", required=True),
    string("message"),
    string("date"),
    mapping("author"),
    object_list("parents", string("hash"), string("type"), LINKS),
    identity="{workspace}/{repo_slug}/{hash}",
    entity="commit",
    not_found="unable to locate commit {commit_sha} in repository {workspace}/{repo_slug}",
)

COMMITS = collection(
    "bitbucket_commits",
    f"{REPO}/commits",
    "commits",
    string("hash"),
    string("author", "author.raw"),
    mapping("author_user", "author.user"),
    string("message"),
    string("date"),
    map_list("parents"),
    mapping("rendered"),
    LINKS,
    params=[
        query_param("branch", wire_name="include"),
        query_param("path"),
        query_param("include"),
        query_param("exclude"),
        query_param("merges"),
    ],
)

COMMIT_COMMENTS = collection(
    "bitbucket_commit_comments",
    f"{REPO}/commits/{{commit}}/comments",
    "comments",
    integer("id"),
    mapping("content"),
    mapping("user"),
    mapping("inline"),
    boolean("deleted"),
    string("type"),
    *TIMESTAMPS,
    LINKS,
)

COMMIT_APPROVALS = collection(
    "bitbucket_commit_approvals",
    f"{REPO}/commits/{{commit}}/approvals",
    "approvals",
    string("uuid"),
    mapping("user"),
    boolean("approved"),
    *TIMESTAMPS,
    LINKS,
)

COMMIT_DIFF = collection(
    "bitbucket_commit_diff",
    f"{REPO}/commits/{{commit}}/diff",
    "diff",
    string("new_path"),
    string("old_path"),
    boolean("new_file"),
    boolean("renamed_file"),
    boolean("deleted_file"),
    integer("similarity"),
    string("status"),
    integer("lines_added"),
    integer("lines_removed"),
    object_list(
        "hunks",
        integer("old_start"),
        integer("old_lines"),
        integer("new_start"),
        integer("new_lines"),
        string("content"),
    ),
)

COMMIT_DIFFSTAT = collection(
    "bitbucket_commit_diffstat",
    f"{REPO}/commits/{{commit}}/diffstat",
    "diffstat",
    string("new_path", "new.path"),
    string("old_path", "old.path"),
    integer("lines_added"),
    integer("lines_removed"),
    string("type"),
    string("status"),
)

COMMIT_PROPERTIES = collection(
    "bitbucket_commit_properties",
    f"{REPO}/commits/{{commit}}/properties",
    "properties",
    string("key"),
    string("value"),
)

COMMIT_PULLREQUESTS = collection(
    "bitbucket_commit_pullrequests",
    f"{REPO}/commit/{{commit_sha}}/pullrequests",
    "pull_requests",
    integer("id"),
    string("title"),
    string("description"),
    string("state"),
    mapping("author"),
    mapping("source"),
    mapping("destination"),
    mapping("merge_commit"),
    mapping("closed_by"),
    *TIMESTAMPS,
    LINKS,
)

COMMIT_REPORTS = collection(
    "bitbucket_commit_reports",
    f"{REPO}/commit/{{commit_sha}}/reports",
    "reports",
    string("uuid"),
    string("external_id"),
    string("title"),
    string("details"),
    string("report_type"),
    string("reporter"),
    string("result"),
    *TIMESTAMPS,
    LINKS,
)

COMMIT_STATUSES = collection(
    "bitbucket_commit_statuses",
    f"{REPO}/commits/{{commit}}/statuses",
    "statuses",
    string("uuid"),
    string("key"),
    string("refname"),
    string("url"),
    string("state"),
    string("name"),
    string("description"),
    *TIMESTAMPS,
    LINKS,
)

COMMIT_BINDINGS = (
    COMMIT,
    COMMITS,
    COMMIT_COMMENTS,
    COMMIT_APPROVALS,
    COMMIT_DIFF,
    COMMIT_DIFFSTAT,
    COMMIT_PROPERTIES,
    COMMIT_PULLREQUESTS,
    COMMIT_REPORTS,
    COMMIT_STATUSES,
)
