from __future__ import annotations

from bitbucket_provider.bindings.base import (
    LINKS,
    TIMESTAMPS,
    boolean,
    collection,
    integer,
    mapping,
    query_param,
    scalar,
    string,
    string_list,
)
from bitbucket_provider.bindings.catalog.common import (
    ACCOUNT_FIELDS,
    PERMISSION_FIELDS,
    VARIABLE_FIELDS,
    WORKSPACE,
)

IP_RANGES_URL = "https://ip-ranges.atlassian.com/"

_HOOK_FIELDS = (
    string("uuid"),
    string("url"),
    string("description"),
    string("subject_type"),
    mapping("subject"),
    boolean("active"),
    string_list("events"),
    string("created_at"),
    LINKS,
)

# ---------------------------------------------------------------------------
# Workspaces
# ---------------------------------------------------------------------------

WORKSPACES = collection(
    "bitbucket_workspaces",
    "2.0/workspaces",
    "workspaces",
    string("uuid"),
    string("slug"),
    string("name"),
    boolean("is_private"),
    string("type"),
    string("created_on"),
    LINKS,
    params=[query_param("q")],
    identity="workspaces",
)

WORKSPACE_DETAIL = scalar(
    "bitbucket_workspace",
    WORKSPACE,
    string("uuid", required=True),
    string("slug"),
    string("name"),
    boolean("is_private"),
    string("type"),
    string("created_on"),
    LINKS,
    identity="{uuid}",
    entity="workspace",
    not_found="unable to locate workspace {workspace}",
)

WORKSPACE_HOOKS = collection(
    "bitbucket_workspace_hooks",
    f"{WORKSPACE}/hooks",
    "hooks",
    *_HOOK_FIELDS,
)

WEBHOOKS = collection(
    "bitbucket_webhooks",
    f"{WORKSPACE}/hooks",
    "webhooks",
    *_HOOK_FIELDS,
    identity="{workspace}/webhooks",
)

WORKSPACE_MEMBERS = collection(
    "bitbucket_workspace_members",
    f"{WORKSPACE}/members",
    "members",
    mapping("user"),
    mapping("workspace"),
    LINKS,
)

WORKSPACE_PERMISSIONS = collection(
    "bitbucket_workspace_permissions",
    f"{WORKSPACE}/permissions",
    "permissions",
    string("permission"),
    mapping("user"),
    mapping("workspace"),
    string("added_on"),
    string("last_accessed"),
    LINKS,
)

WORKSPACE_VARIABLES = collection(
    "bitbucket_workspace_variables",
    f"{WORKSPACE}/pipelines-config/variables",
    "variables",
    *VARIABLE_FIELDS,
    identity="{workspace}/variables",
)

SSH_KEYS = collection(
    "bitbucket_ssh_keys",
    f"{WORKSPACE}/ssh-keys",
    "ssh_keys",
    string("uuid"),
    string("key"),
    string("label"),
    string("comment"),
    mapping("owner"),
    string("created_on"),
    string("last_used"),
    LINKS,
)

# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------

PROJECTS = collection(
    "bitbucket_projects",
    f"{WORKSPACE}/projects",
    "projects",
    string("uuid"),
    string("key"),
    string("name"),
    string("description"),
    boolean("is_private"),
    boolean("has_publicly_visible_repos"),
    mapping("owner"),
    *TIMESTAMPS,
    LINKS,
    params=[query_param("q")],
)

PROJECT = scalar(
    "bitbucket_project",
    f"{WORKSPACE}/projects/{{key}}",
    string("uuid"),
    string("name"),
    string("description"),
    boolean("is_private"),
    boolean("has_publicly_visible_repos"),
    mapping("owner"),
    *TIMESTAMPS,
    LINKS,
    identity="{workspace}/{key}",
    entity="project",
    not_found="unable to locate project {key} in workspace {workspace}",
)

PROJECT_PERMISSIONS = collection(
    "bitbucket_project_permissions",
    f"{WORKSPACE}/projects/{{project_key}}/permissions",
    "permissions",
    *PERMISSION_FIELDS,
    LINKS,
)

# ---------------------------------------------------------------------------
# Users and groups
# ---------------------------------------------------------------------------

USERS = collection(
    "bitbucket_users",
    "2.0/users",
    "users",
    *ACCOUNT_FIELDS,
    params=[query_param("q")],
    identity="users",
)

USER = scalar(
    "bitbucket_user",
    "2.0/users/{selected_user}",
    *ACCOUNT_FIELDS,
    identity="{uuid}",
    entity="user",
    not_found="unable to locate user {selected_user}",
)

CURRENT_USER = scalar(
    "bitbucket_current_user",
    "2.0/user",
    *ACCOUNT_FIELDS,
    identity="{uuid}",
    entity="current user",
)

GROUPS = collection(
    "bitbucket_groups",
    f"{WORKSPACE}/groups",
    "groups",
    string("slug"),
    string("name"),
    string("permission"),
    boolean("auto_add"),
    mapping("owner"),
    string("full_slug"),
    LINKS,
    params=[query_param("q")],
)

GROUP = scalar(
    "bitbucket_group",
    f"{WORKSPACE}/groups/{{slug}}",
    string("name"),
    string("permission"),
    boolean("auto_add"),
    boolean("email_forwarding_disabled"),
    mapping("owner"),
    string("full_slug"),
    LINKS,
    identity="{workspace}/{slug}",
    entity="group",
    not_found="unable to locate group {slug} in workspace {workspace}",
)

GROUP_MEMBERS = collection(
    "bitbucket_group_members",
    f"{WORKSPACE}/groups/{{group_slug}}/members",
    "members",
    *ACCOUNT_FIELDS,
)

# ---------------------------------------------------------------------------
# Platform metadata
# ---------------------------------------------------------------------------

HOOK_TYPES = collection(
    "bitbucket_hook_types",
    "2.0/hook_events/{subject_type}",
    "hook_types",
    string("event"),
    string("category"),
    string("label"),
    string("description"),
)

IP_RANGES = collection(
    "bitbucket_ip_ranges",
    IP_RANGES_URL,
    "ranges",
    string("network"),
    integer("mask_len"),
    string("cidr"),
    string("mask"),
    string_list("region"),
    string_list("product"),
    string_list("direction"),
    items_key="items",
    identity="ip-ranges",
    entity="IP ranges",
)

WORKSPACE_BINDINGS = (
    WORKSPACES,
    WORKSPACE_DETAIL,
    WORKSPACE_HOOKS,
    WEBHOOKS,
    WORKSPACE_MEMBERS,
    WORKSPACE_PERMISSIONS,
    WORKSPACE_VARIABLES,
    SSH_KEYS,
    PROJECTS,
    PROJECT,
    PROJECT_PERMISSIONS,
    USERS,
    USER,
    CURRENT_USER,
    GROUPS,
    GROUP,
    GROUP_MEMBERS,
    HOOK_TYPES,
    IP_RANGES,
)
