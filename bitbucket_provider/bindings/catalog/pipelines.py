from __future__ import annotations

from bitbucket_provider.bindings.base import (
    LINKS,
    TIMESTAMPS,
    boolean,
    collection,
    integer,
    map_list,
    mapping,
    number,
    query_param,
    scalar,
    string,
    summary,
)
from bitbucket_provider.bindings.catalog.common import (
    REPO,
    STEP_LOG_FIELDS,
    VARIABLE_FIELDS,
    WORKSPACE,
)
from bitbucket_provider.models.enums import ParamType

PIPELINE = f"{REPO}/pipelines/{{pipeline_uuid}}"
STEP = f"{PIPELINE}/steps/{{step_uuid}}"

_TEST_REPORT_FIELDS = (
    string("name"),
    integer("total_tests"),
    integer("passed_tests"),
    integer("failed_tests"),
    integer("skipped_tests"),
    number("duration"),
)

_ARTIFACT_FIELDS = (
    string("name"),
    string("type"),
    integer("size"),
    string("path"),
)

_STEP_VARIABLE_FIELDS = (
    string("key"),
    string("value", secret=True),
    string("type"),
    boolean("secured"),
)

# ---------------------------------------------------------------------------
# Pipelines
# ---------------------------------------------------------------------------

PIPELINE_DETAIL = scalar(
    "bitbucket_pipeline",
    f"{REPO}/pipelines/{{pipeline_number}}",
    string("uuid", required=True),
    integer("build_number"),
    string("state", "state.name"),
    string("result", "state.result.name"),
    string("created_on"),
    string("completed_on"),
    integer("duration_in_seconds"),
    mapping("trigger"),
    mapping("target"),
    LINKS,
    identity="{workspace}/{repo_slug}/{uuid}",
    entity="pipeline",
    not_found="unable to locate pipeline {pipeline_number} in repository {workspace}/{repo_slug}",
)

PIPELINES = collection(
    "bitbucket_pipelines",
    f"{REPO}/pipelines",
    "pipelines",
    string("uuid"),
    integer("build_number"),
    mapping("state"),
    mapping("trigger"),
    mapping("target"),
    string("created_on"),
    string("completed_on"),
    integer("duration_in_seconds"),
    integer("build_seconds_used"),
    boolean("first_successful"),
    boolean("expired"),
    mapping("repository"),
    params=[
        query_param("state"),
        query_param("target"),
        query_param("page_number", ParamType.integer, wire_name="page"),
    ],
)

PIPELINE_STEPS = collection(
    "bitbucket_pipeline_steps",
    f"{PIPELINE}/steps",
    "steps",
    string("uuid"),
    string("name"),
    string("type"),
    string("state", "state.name"),
    string("started_on"),
    string("completed_on"),
    integer("duration_in_seconds"),
    integer("max_time"),
    mapping("script"),
    LINKS,
)

PIPELINE_ARTIFACTS = collection(
    "bitbucket_pipeline_artifacts",
    f"{PIPELINE}/artifacts",
    "artifacts",
    string("name"),
    string("type"),
    integer("size"),
    string("download_url"),
    string("created_on"),
)

PIPELINE_LOGS = collection(
    "bitbucket_pipeline_logs",
    f"{PIPELINE}/logs",
    "logs",
    *STEP_LOG_FIELDS,
)

PIPELINE_TEST_REPORTS = collection(
    "bitbucket_pipeline_test_reports",
    f"{PIPELINE}/test-reports",
    "test_reports",
    *_TEST_REPORT_FIELDS,
)

PIPELINE_VARIABLES = collection(
    "bitbucket_pipeline_variables",
    f"{PIPELINE}/variables",
    "variables",
    *VARIABLE_FIELDS,
)

# ---------------------------------------------------------------------------
# Pipeline steps
# ---------------------------------------------------------------------------

PIPELINE_STEP_ANNOTATIONS = collection(
    "bitbucket_pipeline_step_annotations",
    f"{STEP}/annotations",
    "annotations",
    string("id"),
    string("type"),
    string("message"),
    string("severity"),
    integer("line"),
    string("file_path"),
    items_key="annotations",
)

PIPELINE_STEP_ARTIFACTS = collection(
    "bitbucket_pipeline_step_artifacts",
    f"{STEP}/artifacts",
    "artifacts",
    *_ARTIFACT_FIELDS,
)

PIPELINE_STEP_ARTIFACTS_LIST = collection(
    "bitbucket_pipeline_step_artifacts_list",
    f"{STEP}/artifacts-list",
    "artifacts_list",
    *_ARTIFACT_FIELDS,
    items_key="artifacts_list",
)

PIPELINE_STEP_BUILD_SECONDS = scalar(
    "bitbucket_pipeline_step_build_seconds",
    f"{STEP}/build-seconds",
    integer("build_seconds_used"),
    integer("max_seconds"),
)

PIPELINE_STEP_ENVIRONMENT = scalar(
    "bitbucket_pipeline_step_environment",
    f"{STEP}/environment",
    mapping("environment"),
)

PIPELINE_STEP_ENVIRONMENT_LIST = collection(
    "bitbucket_pipeline_step_environment_list",
    f"{STEP}/environment-list",
    "environment_list",
    string("key"),
    string("value", secret=True),
    string("type"),
    items_key="environment_list",
)

PIPELINE_STEP_IMAGE = scalar(
    "bitbucket_pipeline_step_image",
    f"{STEP}/image",
    string("image"),
)

PIPELINE_STEP_LOGS = collection(
    "bitbucket_pipeline_step_logs",
    f"{STEP}/logs",
    "logs",
    *STEP_LOG_FIELDS,
)

PIPELINE_STEP_LOGS_LIST = collection(
    "bitbucket_pipeline_step_logs_list",
    f"{STEP}/logs-list",
    "logs_list",
    *STEP_LOG_FIELDS,
    items_key="logs_list",
)

PIPELINE_STEP_MAX_SECONDS = scalar(
    "bitbucket_pipeline_step_max_seconds",
    f"{STEP}/max-seconds",
    integer("max_seconds"),
)

PIPELINE_STEP_SCRIPT = scalar(
    "bitbucket_pipeline_step_script",
    f"{STEP}/script",
    mapping("script"),
)

PIPELINE_STEP_SCRIPT_LIST = collection(
    "bitbucket_pipeline_step_script_list",
    f"{STEP}/script-list",
    "script_list",
    string("name"),
    string("type"),
    string("content"),
    items_key="script_list",
)

PIPELINE_STEP_STATE = scalar(
    "bitbucket_pipeline_step_state",
    f"{STEP}/state",
    string("state"),
    string("name"),
    string("started_on"),
    string("completed_on"),
)

PIPELINE_STEP_TEST_REPORTS = collection(
    "bitbucket_pipeline_step_test_reports",
    f"{STEP}/test-reports",
    "test_reports",
    *_TEST_REPORT_FIELDS,
)

PIPELINE_STEP_TEST_REPORTS_LIST = collection(
    "bitbucket_pipeline_step_test_reports_list",
    f"{STEP}/test-reports-list",
    "test_reports_list",
    *_TEST_REPORT_FIELDS,
    items_key="test_reports_list",
)

PIPELINE_STEP_VARIABLES = collection(
    "bitbucket_pipeline_step_variables",
    f"{STEP}/variables",
    "variables",
    *_STEP_VARIABLE_FIELDS,
)

PIPELINE_STEP_VARIABLES_LIST = collection(
    "bitbucket_pipeline_step_variables_list",
    f"{STEP}/variables-list",
    "variables_list",
    *_STEP_VARIABLE_FIELDS,
    items_key="variables_list",
)

# ---------------------------------------------------------------------------
# Repository pipeline configuration
# ---------------------------------------------------------------------------

_CACHE_FIELDS = (
    string("uuid"),
    string("name"),
    string("path"),
    integer("size"),
    string("last_accessed"),
    *TIMESTAMPS,
    LINKS,
)

_SCHEDULE_FIELDS = (
    string("uuid"),
    string("name"),
    boolean("enabled"),
    string("cron_pattern"),
    string("next_run"),
    mapping("target"),
    *TIMESTAMPS,
    LINKS,
)

_KNOWN_HOST_FIELDS = (
    string("uuid"),
    string("hostname"),
    mapping("public_key"),
    string("comment"),
    *TIMESTAMPS,
    LINKS,
)

PIPELINE_CACHES = collection(
    "bitbucket_pipeline_caches",
    f"{REPO}/pipelines_config/caches",
    "caches",
    *_CACHE_FIELDS,
)

PIPELINE_SCHEDULES = collection(
    "bitbucket_pipeline_schedules",
    f"{REPO}/pipelines_config/schedules",
    "schedules",
    *_SCHEDULE_FIELDS,
)

PIPELINE_KNOWN_HOSTS = collection(
    "bitbucket_pipeline_known_hosts",
    f"{REPO}/pipelines/ssh/known-hosts",
    "known_hosts",
    string("uuid"),
    string("hostname"),
    string("public_key"),
    string("key_type"),
    string("fingerprint"),
    *TIMESTAMPS,
    LINKS,
)

REPOSITORY_PIPELINE_CACHES = collection(
    "bitbucket_repository_pipeline_caches",
    f"{REPO}/pipelines_config/caches",
    "caches",
    *_CACHE_FIELDS,
)

REPOSITORY_PIPELINE_SCHEDULES = collection(
    "bitbucket_repository_pipeline_schedules",
    f"{REPO}/pipelines_config/schedules",
    "schedules",
    *_SCHEDULE_FIELDS,
)

REPOSITORY_PIPELINE_SSH_KEYS = collection(
    "bitbucket_repository_pipeline_ssh_keys",
    f"{REPO}/pipelines_config/ssh/keys",
    "ssh_keys",
    string("uuid"),
    string("label"),
    string("public_key"),
    string("comment"),
    *TIMESTAMPS,
    LINKS,
)

REPOSITORY_PIPELINE_SSH_KNOWN_HOSTS = collection(
    "bitbucket_repository_pipeline_ssh_known_hosts",
    f"{REPO}/pipelines_config/ssh/known_hosts",
    "known_hosts",
    *_KNOWN_HOST_FIELDS,
)

REPOSITORY_PIPELINE_VARIABLES = collection(
    "bitbucket_repository_pipeline_variables",
    f"{REPO}/pipelines_config/variables",
    "variables",
    *VARIABLE_FIELDS,
)

REPOSITORY_VARIABLES = collection(
    "bitbucket_repository_variables",
    f"{REPO}/pipelines_config/variables",
    "variables",
    *VARIABLE_FIELDS,
    identity="{workspace}/{repo_slug}/variables",
)

# ---------------------------------------------------------------------------
# OpenID Connect
# ---------------------------------------------------------------------------

_OIDC = f"{WORKSPACE}/pipelines-config/identity/oidc"

PIPELINE_OIDC_CONFIG = summary(
    "bitbucket_pipeline_oidc_config",
    f"{_OIDC}/.well-known/openid-configuration",
    "oidc_config",
    identity="{workspace}/pipelines-config/identity/oidc",
    entity="pipeline OIDC configuration",
)

PIPELINE_OIDC_CONFIG_KEYS = scalar(
    "bitbucket_pipeline_oidc_config_keys",
    f"{_OIDC}/keys.json",
    map_list("keys"),
    identity="{workspace}/pipelines-config/identity/oidc/keys",
    entity="pipeline OIDC keys",
)

PIPELINE_BINDINGS = (
    PIPELINE_DETAIL,
    PIPELINES,
    PIPELINE_STEPS,
    PIPELINE_ARTIFACTS,
    PIPELINE_LOGS,
    PIPELINE_TEST_REPORTS,
    PIPELINE_VARIABLES,
    PIPELINE_STEP_ANNOTATIONS,
    PIPELINE_STEP_ARTIFACTS,
    PIPELINE_STEP_ARTIFACTS_LIST,
    PIPELINE_STEP_BUILD_SECONDS,
    PIPELINE_STEP_ENVIRONMENT,
    PIPELINE_STEP_ENVIRONMENT_LIST,
    PIPELINE_STEP_IMAGE,
    PIPELINE_STEP_LOGS,
    PIPELINE_STEP_LOGS_LIST,
    PIPELINE_STEP_MAX_SECONDS,
    PIPELINE_STEP_SCRIPT,
    PIPELINE_STEP_SCRIPT_LIST,
    PIPELINE_STEP_STATE,
    PIPELINE_STEP_TEST_REPORTS,
    PIPELINE_STEP_TEST_REPORTS_LIST,
    PIPELINE_STEP_VARIABLES,
    PIPELINE_STEP_VARIABLES_LIST,
    PIPELINE_CACHES,
    PIPELINE_SCHEDULES,
    PIPELINE_KNOWN_HOSTS,
    REPOSITORY_PIPELINE_CACHES,
    REPOSITORY_PIPELINE_SCHEDULES,
    REPOSITORY_PIPELINE_SSH_KEYS,
    REPOSITORY_PIPELINE_SSH_KNOWN_HOSTS,
    REPOSITORY_PIPELINE_VARIABLES,
    REPOSITORY_VARIABLES,
    PIPELINE_OIDC_CONFIG,
    PIPELINE_OIDC_CONFIG_KEYS,
)
