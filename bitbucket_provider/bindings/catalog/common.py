from __future__ import annotations

from bitbucket_provider.bindings.base import (
    LINKS,
    TIMESTAMPS,
    boolean,
    mapping,
    string,
)

REPO = "2.0/repositories/{workspace}/{repo_slug}"
WORKSPACE = "2.0/workspaces/{workspace}"

# Fields of an account object as returned in member, watcher and reviewer lists.
ACCOUNT_FIELDS = (
    string("uuid"),
    string("username"),
    string("display_name"),
    string("nickname"),
    string("type"),
    string("account_id"),
    string("created_on"),
    boolean("is_staff"),
    string("account_status"),
    LINKS,
)

# Pipeline and deployment variables; ``value`` is empty for secured entries.
VARIABLE_FIELDS = (
    string("uuid"),
    string("key"),
    string("value", secret=True),
    boolean("secured"),
    string("type"),
    *TIMESTAMPS,
    LINKS,
)

# User-or-group grants on workspaces, projects and repositories.
PERMISSION_FIELDS = (
    string("type"),
    mapping("user"),
    mapping("group"),
    string("permission"),
    mapping("granted_by"),
    string("granted_at"),
)

USER_ENTRY_FIELDS = (
    mapping("user"),
    string("created_on"),
    LINKS,
)

STEP_LOG_FIELDS = (
    string("level"),
    string("message"),
    string("step"),
    *TIMESTAMPS,
)
