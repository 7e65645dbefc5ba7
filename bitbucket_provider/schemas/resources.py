from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from bitbucket_provider.schemas.diagnostics import Diagnostic


class ResourceState(BaseModel):
    """Persisted identity and attributes of one managed resource.

    ``params`` keeps the resolved path parameters (including any
    server-assigned id) so later lifecycle calls can rebuild the item URL
    without parsing ``id``.
    """

    id: str
    params: dict[str, str] = Field(default_factory=dict)
    attributes: dict[str, Any] = Field(default_factory=dict)


class ResourceResponse(BaseModel):
    """Outcome of one resource lifecycle call as handed back to the host runtime.

    ``state`` is ``None`` once the resource is gone (deleted, or missing on
    refresh).  On failure ``diagnostics`` is non-empty and ``state`` is the
    state the host passed in, unchanged.
    """

    state: ResourceState | None = None
    diagnostics: list[Diagnostic] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.diagnostics
