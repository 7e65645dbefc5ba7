from __future__ import annotations

from bitbucket_provider.bindings.base import (
    LINKS,
    TIMESTAMPS,
    boolean,
    collection,
    integer,
    mapping,
    scalar,
    string,
)
from bitbucket_provider.bindings.catalog.common import REPO, USER_ENTRY_FIELDS

ISSUE = f"{REPO}/issues/{{issue_id}}"

_ISSUE_NOT_FOUND = "unable to locate issue {issue_id} in repository {workspace}/{repo_slug}"

_NAMED_FIELDS = (
    string("uuid"),
    string("name"),
    string("description"),
    *TIMESTAMPS,
    LINKS,
)

ISSUE_DETAIL = scalar(
    "bitbucket_issue",
    ISSUE,
    integer("id", required=True),
    string("title"),
    string("content", "content.raw"),
    string("state"),
    string("kind"),
    string("priority"),
    mapping("assignee"),
    mapping("reporter"),
    mapping("milestone"),
    mapping("component"),
    mapping("version"),
    *TIMESTAMPS,
    integer("votes"),
    integer("watches"),
    LINKS,
    entity="issue",
    not_found=_ISSUE_NOT_FOUND,
)

ISSUES = collection(
    "bitbucket_issues",
    f"{REPO}/issues",
    "issues",
    integer("id"),
    string("title"),
    mapping("content"),
    string("state"),
    string("kind"),
    string("priority"),
    mapping("assignee"),
    mapping("reporter"),
    *TIMESTAMPS,
    LINKS,
)

# ---------------------------------------------------------------------------
# Per-issue collections
# ---------------------------------------------------------------------------

ISSUE_ATTACHMENTS = collection(
    "bitbucket_issue_attachments",
    f"{ISSUE}/attachments",
    "attachments",
    string("uuid"),
    string("name"),
    integer("size"),
    LINKS,
    not_found=_ISSUE_NOT_FOUND,
)

ISSUE_CHANGES = collection(
    "bitbucket_issue_changes",
    f"{ISSUE}/changes",
    "changes",
    string("uuid"),
    mapping("user"),
    mapping("changes"),
    string("created_on"),
    LINKS,
    not_found=_ISSUE_NOT_FOUND,
)

ISSUE_COMMENTS = collection(
    "bitbucket_issue_comments",
    f"{ISSUE}/comments",
    "comments",
    integer("id"),
    mapping("content"),
    mapping("user"),
    *TIMESTAMPS,
    LINKS,
    not_found=_ISSUE_NOT_FOUND,
)

ISSUE_TRANSITIONS = collection(
    "bitbucket_issue_transitions",
    f"{ISSUE}/transitions",
    "transitions",
    string("uuid"),
    string("name"),
    mapping("to"),
    mapping("fields"),
    LINKS,
    not_found=_ISSUE_NOT_FOUND,
)

ISSUE_VOTES = collection(
    "bitbucket_issue_votes",
    f"{ISSUE}/votes",
    "votes",
    *USER_ENTRY_FIELDS,
    not_found=_ISSUE_NOT_FOUND,
)

ISSUE_WATCHES = collection(
    "bitbucket_issue_watches",
    f"{ISSUE}/watches",
    "watches",
    *USER_ENTRY_FIELDS,
    not_found=_ISSUE_NOT_FOUND,
)

REPOSITORY_ISSUE_ATTACHMENTS = collection(
    "bitbucket_repository_issue_attachments",
    f"{ISSUE}/attachments",
    "attachments",
    string("name"),
    integer("size"),
    string("created_on"),
    LINKS,
    not_found=_ISSUE_NOT_FOUND,
)

REPOSITORY_ISSUE_CHANGES = collection(
    "bitbucket_repository_issue_changes",
    f"{ISSUE}/changes",
    "changes",
    integer("id"),
    string("type"),
    mapping("user"),
    string("created_on"),
    mapping("changes"),
    LINKS,
    not_found=_ISSUE_NOT_FOUND,
)

REPOSITORY_ISSUE_VOTES = collection(
    "bitbucket_repository_issue_votes",
    f"{ISSUE}/votes",
    "votes",
    *USER_ENTRY_FIELDS,
    not_found=_ISSUE_NOT_FOUND,
)

REPOSITORY_ISSUE_WATCHES = collection(
    "bitbucket_repository_issue_watches",
    f"{ISSUE}/watches",
    "watches",
    *USER_ENTRY_FIELDS,
    not_found=_ISSUE_NOT_FOUND,
)

REPOSITORY_ISSUE_EXPORT = scalar(
    "bitbucket_repository_issue_export",
    f"{REPO}/issues/export/{{export_id}}",
    string("uuid"),
    string("status"),
    string("download_url"),
    *TIMESTAMPS,
    LINKS,
    entity="issue export",
)

# ---------------------------------------------------------------------------
# Issue tracker metadata
# ---------------------------------------------------------------------------

ISSUE_COMPONENTS = collection(
    "bitbucket_issue_components",
    f"{REPO}/components",
    "components",
    *_NAMED_FIELDS,
)

ISSUE_MILESTONES = collection(
    "bitbucket_issue_milestones",
    f"{REPO}/milestones",
    "milestones",
    *_NAMED_FIELDS,
    string("state"),
)

ISSUE_VERSIONS = collection(
    "bitbucket_issue_versions",
    f"{REPO}/versions",
    "versions",
    *_NAMED_FIELDS,
    boolean("released"),
)

ISSUE_STATES = collection(
    "bitbucket_issue_states",
    f"{REPO}/issue-states",
    "states",
    *_NAMED_FIELDS,
    string("icon"),
    string("color"),
)

ISSUE_TYPES = collection(
    "bitbucket_issue_types",
    f"{REPO}/issue-types",
    "types",
    *_NAMED_FIELDS,
    string("icon"),
)

ISSUE_BINDINGS = (
    ISSUE_DETAIL,
    ISSUES,
    ISSUE_ATTACHMENTS,
    ISSUE_CHANGES,
    ISSUE_COMMENTS,
    ISSUE_TRANSITIONS,
    ISSUE_VOTES,
    ISSUE_WATCHES,
    REPOSITORY_ISSUE_ATTACHMENTS,
    REPOSITORY_ISSUE_CHANGES,
    REPOSITORY_ISSUE_VOTES,
    REPOSITORY_ISSUE_WATCHES,
    REPOSITORY_ISSUE_EXPORT,
    ISSUE_COMPONENTS,
    ISSUE_MILESTONES,
    ISSUE_VERSIONS,
    ISSUE_STATES,
    ISSUE_TYPES,
)
