from __future__ import annotations

from bitbucket_provider.bindings.base import (
    LINKS,
    boolean,
    collection,
    integer,
    mapping,
    scalar,
    string,
)
from bitbucket_provider.bindings.catalog.common import REPO, VARIABLE_FIELDS

ENVIRONMENT = f"{REPO}/environments/{{environment_uuid}}"

_ENVIRONMENT_NOT_FOUND = (
    "unable to locate deployment environment {environment_uuid} "
    "in repository {workspace}/{repo_slug}"
)

_ENVIRONMENT_FIELDS = (
    string("uuid"),
    string("name"),
    string("slug"),
    string("environment_type", "environment_type.name"),
    integer("rank"),
    boolean("hidden"),
    mapping("lock"),
    mapping("restrictions"),
    LINKS,
)

PIPELINE_DEPLOYMENTS = collection(
    "bitbucket_pipeline_deployments",
    f"{REPO}/deployments",
    "deployments",
    string("uuid"),
    string("state", "state.name"),
    mapping("environment"),
    mapping("release"),
    mapping("deployable"),
    string("last_update_time"),
    LINKS,
)

PIPELINE_ENVIRONMENTS = collection(
    "bitbucket_pipeline_environments",
    f"{REPO}/environments",
    "environments",
    *_ENVIRONMENT_FIELDS,
)

REPOSITORY_DEPLOYMENT_ENVIRONMENTS = collection(
    "bitbucket_repository_deployment_environments",
    f"{REPO}/environments",
    "environments",
    *_ENVIRONMENT_FIELDS,
)

REPOSITORY_DEPLOYMENT_CHANGES = collection(
    "bitbucket_repository_deployment_changes",
    f"{ENVIRONMENT}/changes",
    "changes",
    string("uuid"),
    string("type"),
    mapping("environment"),
    mapping("deployment"),
    string("created_on"),
    LINKS,
    not_found=_ENVIRONMENT_NOT_FOUND,
)

REPOSITORY_DEPLOYMENT_ENVIRONMENT_VARIABLES = collection(
    "bitbucket_repository_deployment_environment_variables",
    f"{ENVIRONMENT}/variables",
    "variables",
    *VARIABLE_FIELDS,
    not_found=_ENVIRONMENT_NOT_FOUND,
)

DEPLOYMENT = scalar(
    "bitbucket_deployment",
    ENVIRONMENT,
    *_ENVIRONMENT_FIELDS,
    entity="deployment environment",
    not_found=_ENVIRONMENT_NOT_FOUND,
)

DEPLOYMENTS = collection(
    "bitbucket_deployments",
    f"{REPO}/environments",
    "environments",
    *_ENVIRONMENT_FIELDS,
    identity="{workspace}/{repo_slug}/deployments",
    entity="deployment environments",
)

DEPLOYMENT_BINDINGS = (
    PIPELINE_DEPLOYMENTS,
    PIPELINE_ENVIRONMENTS,
    REPOSITORY_DEPLOYMENT_ENVIRONMENTS,
    REPOSITORY_DEPLOYMENT_CHANGES,
    REPOSITORY_DEPLOYMENT_ENVIRONMENT_VARIABLES,
    DEPLOYMENT,
    DEPLOYMENTS,
)
