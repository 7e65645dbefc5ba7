from __future__ import annotations

from types import MappingProxyType

from bitbucket_provider.bindings.catalog.common import REPO, WORKSPACE
from bitbucket_provider.resources.base import ResourceDescriptor

PROJECT = f"{WORKSPACE}/projects/{{project_key}}"

RESOURCE_DESCRIPTORS: tuple[ResourceDescriptor, ...] = (
    # Repositories
    ResourceDescriptor(
        "bitbucket_repository",
        REPO,
        description="A repository; created by POSTing to its own URL.",
    ),
    ResourceDescriptor(
        "bitbucket_forked_repository",
        "2.0/repositories/{workspace}/{fork_slug}",
        collection_path=f"{REPO}/forks",
        id_field="slug",
        id_param="fork_slug",
    ),
    ResourceDescriptor(
        "bitbucket_branch_restriction",
        f"{REPO}/branch-restrictions/{{restriction_id}}",
        collection_path=f"{REPO}/branch-restrictions",
        id_field="id",
        id_param="restriction_id",
    ),
    ResourceDescriptor(
        "bitbucket_branching_model",
        f"{REPO}/branching-model/settings",
        create_method="PUT",
        deletable=False,
    ),
    ResourceDescriptor(
        "bitbucket_commit_file",
        f"{REPO}/src/{{branch}}/{{filename}}",
        collection_path=f"{REPO}/src",
        update_method=None,
        deletable=False,
        slash_params=frozenset({"filename"}),
        fixed_query=(("format", "meta"),),
        description="A file committed through the source endpoint; history is never rewritten.",
    ),
    ResourceDescriptor(
        "bitbucket_default_reviewers",
        f"{REPO}/default-reviewers/{{target_username}}",
        create_method="PUT",
    ),
    ResourceDescriptor(
        "bitbucket_deploy_key",
        f"{REPO}/deploy-keys/{{key_id}}",
        collection_path=f"{REPO}/deploy-keys",
        id_field="id",
        id_param="key_id",
    ),
    ResourceDescriptor(
        "bitbucket_hook",
        f"{REPO}/hooks/{{hook_uuid}}",
        collection_path=f"{REPO}/hooks",
        id_field="uuid",
        id_param="hook_uuid",
    ),
    ResourceDescriptor(
        "bitbucket_repository_group_permission",
        f"{REPO}/permissions-config/groups/{{group_slug}}",
        create_method="PUT",
    ),
    ResourceDescriptor(
        "bitbucket_repository_user_permission",
        f"{REPO}/permissions-config/users/{{user_id}}",
        create_method="PUT",
    ),
    # Pipelines and deployments
    ResourceDescriptor(
        "bitbucket_repository_variable",
        f"{REPO}/pipelines_config/variables/{{variable_uuid}}",
        collection_path=f"{REPO}/pipelines_config/variables",
        id_field="uuid",
        id_param="variable_uuid",
    ),
    ResourceDescriptor(
        "bitbucket_pipeline_schedule",
        f"{REPO}/pipelines_config/schedules/{{schedule_uuid}}",
        collection_path=f"{REPO}/pipelines_config/schedules",
        id_field="uuid",
        id_param="schedule_uuid",
    ),
    ResourceDescriptor(
        "bitbucket_pipeline_ssh_key",
        f"{REPO}/pipelines_config/ssh/key_pair",
        create_method="PUT",
    ),
    ResourceDescriptor(
        "bitbucket_pipeline_ssh_known_host",
        f"{REPO}/pipelines_config/ssh/known_hosts/{{known_host_uuid}}",
        collection_path=f"{REPO}/pipelines_config/ssh/known_hosts",
        id_field="uuid",
        id_param="known_host_uuid",
    ),
    ResourceDescriptor(
        "bitbucket_deployment",
        f"{REPO}/environments/{{environment_uuid}}",
        collection_path=f"{REPO}/environments",
        id_field="uuid",
        id_param="environment_uuid",
        update_method="POST",
        update_suffix="/changes",
    ),
    ResourceDescriptor(
        "bitbucket_deployment_variable",
        f"{REPO}/deployments_config/environments/{{environment_uuid}}/variables/{{variable_uuid}}",
        collection_path=f"{REPO}/deployments_config/environments/{{environment_uuid}}/variables",
        id_field="uuid",
        id_param="variable_uuid",
    ),
    # Workspaces and projects
    ResourceDescriptor(
        "bitbucket_project",
        PROJECT,
        collection_path=f"{WORKSPACE}/projects",
        id_field="key",
        id_param="project_key",
    ),
    ResourceDescriptor(
        "bitbucket_project_branching_model",
        f"{PROJECT}/branching-model/settings",
        create_method="PUT",
        deletable=False,
    ),
    ResourceDescriptor(
        "bitbucket_project_default_reviewers",
        f"{PROJECT}/default-reviewers/{{selected_user}}",
        create_method="PUT",
    ),
    ResourceDescriptor(
        "bitbucket_project_group_permission",
        f"{PROJECT}/permissions-config/groups/{{group_slug}}",
        create_method="PUT",
    ),
    ResourceDescriptor(
        "bitbucket_project_user_permission",
        f"{PROJECT}/permissions-config/users/{{user_id}}",
        create_method="PUT",
    ),
    ResourceDescriptor(
        "bitbucket_workspace_hook",
        f"{WORKSPACE}/hooks/{{hook_uuid}}",
        collection_path=f"{WORKSPACE}/hooks",
        id_field="uuid",
        id_param="hook_uuid",
    ),
    ResourceDescriptor(
        "bitbucket_workspace_variable",
        f"{WORKSPACE}/pipelines-config/variables/{{variable_uuid}}",
        collection_path=f"{WORKSPACE}/pipelines-config/variables",
        id_field="uuid",
        id_param="variable_uuid",
    ),
    # Groups use the 1.0 API
    ResourceDescriptor(
        "bitbucket_group",
        "1.0/groups/{workspace}/{group_slug}",
        collection_path="1.0/groups/{workspace}",
        id_field="slug",
        id_param="group_slug",
    ),
    ResourceDescriptor(
        "bitbucket_group_membership",
        "1.0/groups/{workspace}/{group_slug}/members/{user_uuid}",
        create_method="PUT",
        update_method=None,
    ),
    # Users
    ResourceDescriptor(
        "bitbucket_ssh_key",
        "2.0/users/{user}/ssh-keys/{key_uuid}",
        collection_path="2.0/users/{user}/ssh-keys",
        id_field="uuid",
        id_param="key_uuid",
    ),
)

RESOURCES = MappingProxyType({d.name: d for d in RESOURCE_DESCRIPTORS})
