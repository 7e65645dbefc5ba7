from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from bitbucket_provider.models.enums import ErrorKind, Severity

# ---------------------------------------------------------------------------
# Host-facing result models
# ---------------------------------------------------------------------------


class Diagnostic(BaseModel):
    """A single problem reported back to the host runtime.

    Diagnostics are the only way errors cross the host boundary; the
    ``detail`` never contains a credential value.
    """

    model_config = ConfigDict(frozen=True)

    severity: Severity = Severity.error
    kind: ErrorKind
    summary: str
    detail: str = ""
    binding: str | None = None
    url: str | None = None
    sub_kind: str | None = None


class ReadResponse(BaseModel):
    """Outcome of one data-source read as handed back to the host runtime.

    On success ``id`` and ``state`` hold the synthetic identifier and the
    flattened attribute tree.  On failure ``diagnostics`` is non-empty and
    ``id`` / ``state`` are whatever the host passed in as prior state.
    """

    id: str | None = None
    state: dict[str, Any] = Field(default_factory=dict)
    diagnostics: list[Diagnostic] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.diagnostics
