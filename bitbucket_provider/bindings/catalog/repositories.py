from __future__ import annotations

from bitbucket_provider.bindings.base import (
    LINKS,
    TIMESTAMPS,
    boolean,
    collection,
    integer,
    mapping,
    object_list,
    path_param,
    query_param,
    scalar,
    string,
    string_list,
)
from bitbucket_provider.bindings.catalog.common import ACCOUNT_FIELDS, REPO

_BRANCH_TYPE_FIELDS = (
    string("kind"),
    string("prefix"),
    boolean("enabled"),
)

# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------

REPOSITORY = scalar(
    "bitbucket_repository",
    REPO,
    string("uuid", required=True),
    string("name"),
    string("full_name"),
    string("description"),
    string("scm"),
    string("language"),
    string("fork_policy"),
    boolean("is_private"),
    boolean("has_wiki"),
    boolean("has_issues"),
    string("main_branch", "mainbranch.name"),
    mapping("owner"),
    mapping("project"),
    mapping("link", "links"),
    identity="{uuid}",
    entity="repository",
    not_found="unable to locate repository {workspace}/{repo_slug}",
)

REPOSITORY_SETTINGS = scalar(
    "bitbucket_repository_settings",
    REPO,
    string("name"),
    string("description"),
    boolean("is_private"),
    string("fork_policy"),
    string("language"),
    boolean("has_issues"),
    boolean("has_wiki"),
    integer("size"),
    *TIMESTAMPS,
    string("scm"),
    string("website"),
    mapping("project"),
    mapping("mainbranch"),
    LINKS,
    entity="repository",
    not_found="unable to locate repository {workspace}/{repo_slug}",
)

REPOSITORY_PERMISSIONS = collection(
    "bitbucket_repository_permissions",
    f"{REPO}/permissions",
    "permissions",
    string("type"),
    mapping("user"),
    mapping("repository"),
    string("permission"),
    mapping("granted_by"),
    string("granted_at"),
)

REPOSITORY_DEPLOY_KEYS = collection(
    "bitbucket_repository_deploy_keys",
    f"{REPO}/deploy-keys",
    "deploy_keys",
    integer("id"),
    string("key"),
    string("label"),
    string("comment"),
    string("created_on"),
    string("last_used"),
    LINKS,
)

REPOSITORY_DEFAULT_REVIEWERS = collection(
    "bitbucket_repository_default_reviewers",
    f"{REPO}/default-reviewers",
    "default_reviewers",
    *ACCOUNT_FIELDS,
)

REPOSITORY_WATCHERS = collection(
    "bitbucket_repository_watchers",
    f"{REPO}/watchers",
    "watchers",
    *ACCOUNT_FIELDS,
)

REPOSITORY_FORKS = collection(
    "bitbucket_repository_forks",
    f"{REPO}/forks",
    "forks",
    string("uuid"),
    string("name"),
    string("full_name"),
    string("description"),
    boolean("is_private"),
    string("fork_policy"),
    string("language"),
    integer("size"),
    *TIMESTAMPS,
    mapping("workspace"),
    mapping("project"),
    mapping("mainbranch"),
    params=[query_param("q")],
)

REPOSITORY_HOOKS = collection(
    "bitbucket_repository_hooks",
    f"{REPO}/hooks",
    "hooks",
    string("uuid"),
    string("description"),
    string("url"),
    boolean("active"),
    string_list("events"),
    boolean("skip_cert_verification"),
    *TIMESTAMPS,
)

REPOSITORY_DOWNLOADS = collection(
    "bitbucket_repository_downloads",
    f"{REPO}/downloads",
    "downloads",
    string("name"),
    integer("size"),
    integer("downloads"),
    string("created_on"),
    LINKS,
)

REPOSITORY_PATCHES = collection(
    "bitbucket_repository_patches",
    f"{REPO}/patches",
    "patches",
    string("name"),
    integer("size"),
    string("created_on"),
    LINKS,
)

REPOSITORY_COMPONENTS = collection(
    "bitbucket_repository_components",
    f"{REPO}/components",
    "components",
    integer("id"),
    string("name"),
    string("description"),
    mapping("assignee"),
    *TIMESTAMPS,
    LINKS,
)

REPOSITORY_MILESTONES = collection(
    "bitbucket_repository_milestones",
    f"{REPO}/milestones",
    "milestones",
    integer("id"),
    string("name"),
    string("description"),
    string("state"),
    string("start_date"),
    string("release_date"),
    *TIMESTAMPS,
    LINKS,
)

# ---------------------------------------------------------------------------
# Source tree
# ---------------------------------------------------------------------------

FILE = scalar(
    "bitbucket_file",
    f"{REPO}/src/{{commit}}/{{path}}",
    string("type"),
    string("escaped_path"),
    integer("size"),
    string("mimetype"),
    mapping("commit_info", "commit"),
    mapping("links"),
    params=[path_param("path", allow_slash=True)],
    fixed_query={"format": "meta"},
    identity="{commit}/{path}",
    not_found="unable to locate file {path} at {commit} in repository {workspace}/{repo_slug}",
)

REPOSITORY_FILES = collection(
    "bitbucket_repository_files",
    f"{REPO}/src/{{ref}}",
    "files",
    string("path"),
    string("type"),
    integer("size"),
    string("hash", "commit.hash"),
    LINKS,
    params=[query_param("path")],
)

REPOSITORY_FILE_HISTORY = collection(
    "bitbucket_repository_file_history",
    f"{REPO}/filehistory/{{path}}",
    "history",
    mapping("commit"),
    string("path"),
    string("type"),
    integer("size"),
    LINKS,
    params=[path_param("path", allow_slash=True), query_param("revision")],
)

# ---------------------------------------------------------------------------
# Refs
# ---------------------------------------------------------------------------

REPOSITORY_REFS = collection(
    "bitbucket_repository_refs",
    f"{REPO}/refs",
    "refs",
    string("name"),
    string("type"),
    mapping("target"),
    LINKS,
    params=[query_param("q"), query_param("sort")],
)

BRANCH = scalar(
    "bitbucket_branch",
    f"{REPO}/refs/branches/{{branch_name}}",
    string("name", required=True),
    string("target_hash", "target.hash"),
    string("target_date", "target.date"),
    mapping("target_author", "target.author"),
    string("target_message", "target.message"),
    identity="{workspace}/{repo_slug}/{name}",
    entity="branch",
    not_found="unable to locate branch {branch_name} in repository {workspace}/{repo_slug}",
)

BRANCH_MERGE_BASE = scalar(
    "bitbucket_branch_merge_base",
    f"{REPO}/commits/{{source}}/merge-base/{{target}}",
    string("merge_base"),
    LINKS,
    identity="{workspace}/{repo_slug}/commits/{source}/merge-base/{target}",
    entity="merge base",
)

BRANCH_RESTRICTIONS = collection(
    "bitbucket_branch_restrictions",
    f"{REPO}/branch-restrictions",
    "restrictions",
    integer("id"),
    string("kind"),
    string("pattern"),
    integer("value"),
    boolean("enabled"),
    string_list("users"),
    string_list("groups"),
    LINKS,
)

BRANCHING_MODEL = scalar(
    "bitbucket_branching_model",
    f"{REPO}/branching-model",
    mapping("development"),
    mapping("production"),
    object_list("branch_types", *_BRANCH_TYPE_FIELDS),
    LINKS,
)

EFFECTIVE_BRANCHING_MODEL = scalar(
    "bitbucket_effective_branching_model",
    f"{REPO}/branching-model/effective",
    mapping("development"),
    mapping("production"),
    object_list("branch_types", *_BRANCH_TYPE_FIELDS),
    LINKS,
)

TAG = scalar(
    "bitbucket_tag",
    f"{REPO}/refs/tags/{{tag_name}}",
    string("name", required=True),
    string("target_hash", "target.hash"),
    string("target_date", "target.date"),
    string("message"),
    mapping("author", "tagger"),
    identity="{workspace}/{repo_slug}/{name}",
    entity="tag",
    not_found="unable to locate tag {tag_name} in repository {workspace}/{repo_slug}",
)

TAGS = collection(
    "bitbucket_tags",
    f"{REPO}/refs/tags",
    "tags",
    string("name"),
    mapping("target"),
    string("message"),
    mapping("tagger"),
    string("date"),
    LINKS,
)

TAG_PROPERTIES = collection(
    "bitbucket_tag_properties",
    f"{REPO}/refs/tags/{{tag}}/properties",
    "properties",
    string("key"),
    string("value"),
)

REPOSITORY_BINDINGS = (
    REPOSITORY,
    REPOSITORY_SETTINGS,
    REPOSITORY_PERMISSIONS,
    REPOSITORY_DEPLOY_KEYS,
    REPOSITORY_DEFAULT_REVIEWERS,
    REPOSITORY_WATCHERS,
    REPOSITORY_FORKS,
    REPOSITORY_HOOKS,
    REPOSITORY_DOWNLOADS,
    REPOSITORY_PATCHES,
    REPOSITORY_COMPONENTS,
    REPOSITORY_MILESTONES,
    FILE,
    REPOSITORY_FILES,
    REPOSITORY_FILE_HISTORY,
    REPOSITORY_REFS,
    BRANCH,
    BRANCH_MERGE_BASE,
    BRANCH_RESTRICTIONS,
    BRANCHING_MODEL,
    EFFECTIVE_BRANCHING_MODEL,
    TAG,
    TAGS,
    TAG_PROPERTIES,
)
