from __future__ import annotations

from collections.abc import Iterable
from types import MappingProxyType

from bitbucket_provider.bindings.base import BindingDescriptor
from bitbucket_provider.bindings.catalog.addons import ADDON_BINDINGS
from bitbucket_provider.bindings.catalog.commits import COMMIT_BINDINGS
from bitbucket_provider.bindings.catalog.deployments import DEPLOYMENT_BINDINGS
from bitbucket_provider.bindings.catalog.issue_fields import ISSUE_FIELD_BINDINGS
from bitbucket_provider.bindings.catalog.issues import ISSUE_BINDINGS
from bitbucket_provider.bindings.catalog.pipelines import PIPELINE_BINDINGS
from bitbucket_provider.bindings.catalog.pullrequests import PULL_REQUEST_BINDINGS
from bitbucket_provider.bindings.catalog.repositories import REPOSITORY_BINDINGS
from bitbucket_provider.bindings.catalog.workspaces import WORKSPACE_BINDINGS

ALL_BINDINGS: tuple[BindingDescriptor, ...] = (
    *REPOSITORY_BINDINGS,
    *COMMIT_BINDINGS,
    *PIPELINE_BINDINGS,
    *ISSUE_BINDINGS,
    *ISSUE_FIELD_BINDINGS,
    *PULL_REQUEST_BINDINGS,
    *WORKSPACE_BINDINGS,
    *ADDON_BINDINGS,
    *DEPLOYMENT_BINDINGS,
)


def build_registry(descriptors: Iterable[BindingDescriptor]) -> MappingProxyType[str, BindingDescriptor]:
    """Index *descriptors* by name, rejecting duplicates.

    Raises:
        ValueError: If two descriptors share a name.
    """
    registry: dict[str, BindingDescriptor] = {}
    for descriptor in descriptors:
        if descriptor.name in registry:
            raise ValueError(f"duplicate binding name {descriptor.name!r}")
        registry[descriptor.name] = descriptor
    return MappingProxyType(registry)


DATA_SOURCES = build_registry(ALL_BINDINGS)

__all__ = ["ALL_BINDINGS", "DATA_SOURCES", "build_registry"]
