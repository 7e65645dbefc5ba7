from __future__ import annotations

from dataclasses import dataclass, field

from bitbucket_provider.bindings.base import Param, default_identity, path_param, template_fields


@dataclass(frozen=True)
class ResourceDescriptor:
    """Static description of one mutating resource.

    ``path`` is the item URL template.  When ``collection_path`` is set the
    create request goes there; if ``id_field`` is also set, the
    server-assigned id is read from that response field into the path
    parameter ``id_param``.  Without a collection path ``create_method`` is
    sent to the item path itself (singletons and caller-keyed entries).

    ``update_method`` of ``None`` means the resource has no update endpoint
    and an update re-issues the create request.  A resource that is not
    ``deletable`` is only forgotten by the host on delete.
    """

    name: str
    path: str
    collection_path: str | None = None
    id_field: str | None = None
    id_param: str | None = None
    create_method: str = "POST"
    update_method: str | None = "PUT"
    update_suffix: str = ""
    deletable: bool = True
    slash_params: frozenset[str] = frozenset()
    fixed_query: tuple[tuple[str, str], ...] = ()
    description: str = ""
    params: tuple[Param, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        names = template_fields(self.path)
        for name in template_fields(self.collection_path or ""):
            if name not in names:
                names.append(name)
        object.__setattr__(
            self,
            "params",
            tuple(path_param(n, allow_slash=n in self.slash_params) for n in names),
        )

    @property
    def identity(self) -> str:
        return default_identity(self.path)

    @property
    def entity(self) -> str:
        return self.name.removeprefix("bitbucket_").replace("_", " ")

    def creation_params(self) -> tuple[Param, ...]:
        """Parameters the caller must supply before the resource exists."""
        if self.id_param is None:
            return self.params
        return tuple(p for p in self.params if p.name != self.id_param)

    def validate(self) -> list[str]:
        problems: list[str] = []
        if not self.name.startswith("bitbucket_"):
            problems.append(f"{self.name}: resource names must start with 'bitbucket_'")
        if bool(self.id_field) != bool(self.id_param):
            problems.append(f"{self.name}: id_field and id_param must be set together")
        elif self.id_param is not None:
            if self.collection_path is None:
                problems.append(f"{self.name}: a server-assigned id needs a collection path")
            elif self.id_param not in template_fields(self.path):
                problems.append(f"{self.name}: id parameter {{{self.id_param}}} is not in the item path")
            elif self.id_param in template_fields(self.collection_path):
                problems.append(f"{self.name}: id parameter {{{self.id_param}}} appears in the collection path")
        unknown = sorted(self.slash_params - {p.name for p in self.params})
        if unknown:
            problems.append(f"{self.name}: allow_slash names unknown parameters {unknown}")
        return problems
