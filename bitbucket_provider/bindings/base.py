from __future__ import annotations

import string as _string
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from bitbucket_provider.models.enums import AttrType, BindingShape, ParamType

_FORMATTER = _string.Formatter()

SCALAR_TYPES = frozenset({AttrType.string, AttrType.integer, AttrType.number, AttrType.boolean})

_IDENTITY_PREFIXES = ("2.0/repositories/", "2.0/workspaces/", "2.0/")


def template_fields(template: str) -> list[str]:
    """Return the ``{placeholder}`` names of *template* in order of appearance."""
    return [name for _, name, _, _ in _FORMATTER.parse(template) if name]


# ---------------------------------------------------------------------------
# Parameters
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Param:
    """One caller-supplied input of a binding.

    A parameter whose name appears as a placeholder in the path template is a
    path parameter; every other parameter is sent in the query string under
    ``wire_name`` (defaulting to ``name``).
    """

    name: str
    type: ParamType = ParamType.string
    required: bool = True
    wire_name: str | None = None
    allow_slash: bool = False
    secret: bool = False
    description: str = ""

    @property
    def query_name(self) -> str:
        return self.wire_name or self.name


def path_param(name: str, *, allow_slash: bool = False, description: str = "") -> Param:
    return Param(name=name, allow_slash=allow_slash, description=description)


def query_param(
    name: str,
    type: ParamType = ParamType.string,
    *,
    required: bool = False,
    wire_name: str | None = None,
    description: str = "",
) -> Param:
    return Param(
        name=name,
        type=type,
        required=required,
        wire_name=wire_name,
        description=description,
    )


# ---------------------------------------------------------------------------
# Attributes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Attribute:
    """A host attribute and where its value lives in the JSON document.

    ``source`` is a dotted JSON path relative to the enclosing object and
    defaults to the attribute name.  The empty string denotes the enclosing
    object itself.  For list attributes ``elem`` is either a scalar
    :class:`AttrType` or a tuple of nested attributes describing an object
    element; for object attributes it is the tuple of nested attributes.
    """

    name: str
    type: AttrType
    source: str | None = None
    required: bool = False
    secret: bool = False
    elem: AttrType | tuple[Attribute, ...] | None = None

    @property
    def source_path(self) -> tuple[str, ...]:
        source = self.name if self.source is None else self.source
        return tuple(source.split(".")) if source else ()

    @property
    def is_scalar(self) -> bool:
        return self.type in SCALAR_TYPES


def string(name: str, source: str | None = None, *, required: bool = False, secret: bool = False) -> Attribute:
    return Attribute(name, AttrType.string, source=source, required=required, secret=secret)


def integer(name: str, source: str | None = None, *, required: bool = False) -> Attribute:
    return Attribute(name, AttrType.integer, source=source, required=required)


def number(name: str, source: str | None = None, *, required: bool = False) -> Attribute:
    return Attribute(name, AttrType.number, source=source, required=required)


def boolean(name: str, source: str | None = None, *, required: bool = False) -> Attribute:
    return Attribute(name, AttrType.boolean, source=source, required=required)


def mapping(name: str, source: str | None = None, *, required: bool = False) -> Attribute:
    """An opaque map attribute; nested values are preserved as decoded."""
    return Attribute(name, AttrType.map, source=source, required=required)


def string_list(name: str, source: str | None = None) -> Attribute:
    return Attribute(name, AttrType.list, source=source, elem=AttrType.string)


def map_list(name: str, source: str | None = None) -> Attribute:
    return Attribute(name, AttrType.list, source=source, elem=AttrType.map)


def obj(name: str, *fields: Attribute, source: str | None = None, required: bool = False) -> Attribute:
    return Attribute(name, AttrType.object, source=source, required=required, elem=tuple(fields))


def object_list(name: str, *fields: Attribute, source: str | None = None) -> Attribute:
    return Attribute(name, AttrType.list, source=source, elem=tuple(fields))


def secret_paths(attributes: Iterable[Attribute], prefix: str = "") -> frozenset[str]:
    """Dotted names of every attribute marked secret, nested ones included."""
    paths: set[str] = set()
    for attr in attributes:
        dotted = f"{prefix}{attr.name}"
        if attr.secret:
            paths.add(dotted)
        if isinstance(attr.elem, tuple):
            paths.update(secret_paths(attr.elem, f"{dotted}."))
    return frozenset(paths)


LINKS = mapping("links")
TIMESTAMPS = (string("created_on"), string("updated_on"))


# ---------------------------------------------------------------------------
# Descriptor
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BindingDescriptor:
    """Static description of one read binding.

    Descriptors are data: the single generic reader in
    :mod:`bitbucket_provider.bindings.reader` interprets them.  Build them
    with :func:`collection`, :func:`scalar` or :func:`summary` rather than
    directly.
    """

    name: str
    path: str
    shape: BindingShape
    params: tuple[Param, ...]
    attributes: tuple[Attribute, ...]
    identity: str
    entity: str
    not_found: str | None = None
    fixed_query: tuple[tuple[str, str], ...] = ()
    description: str = ""
    _path_names: frozenset[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_path_names", frozenset(template_fields(self.path)))

    @property
    def path_params(self) -> tuple[Param, ...]:
        return tuple(p for p in self.params if p.name in self._path_names)

    @property
    def query_params(self) -> tuple[Param, ...]:
        return tuple(p for p in self.params if p.name not in self._path_names)

    @property
    def secret_params(self) -> frozenset[str]:
        return frozenset(p.name for p in self.params if p.secret)

    @property
    def sensitive_attributes(self) -> frozenset[str]:
        """Attributes the host must treat as sensitive, e.g. ``variables.value``."""
        return secret_paths(self.attributes)

    def param(self, name: str) -> Param | None:
        return next((p for p in self.params if p.name == name), None)

    def attribute(self, name: str) -> Attribute | None:
        return next((a for a in self.attributes if a.name == name), None)

    def not_found_message(self, values: Mapping[str, str]) -> str:
        """Render the 404 message naming the missing entity and its inputs."""
        if self.not_found:
            return self.not_found.format_map(_Blank(values))
        shown = ", ".join(f"{p.name}={values[p.name]}" for p in self.params if values.get(p.name))
        return f"unable to locate {self.entity} ({shown})" if shown else f"unable to locate {self.entity}"

    def validate(self) -> list[str]:
        """Return every inconsistency in this descriptor; empty when valid."""
        problems: list[str] = []
        if not self.name.startswith("bitbucket_"):
            problems.append(f"{self.name}: binding names must start with 'bitbucket_'")

        param_names = [p.name for p in self.params]
        attr_names = [a.name for a in self.attributes]
        for names, label in ((param_names, "parameter"), (attr_names, "attribute")):
            duplicates = sorted({n for n in names if names.count(n) > 1})
            if duplicates:
                problems.append(f"{self.name}: duplicate {label} names {duplicates}")
        clashes = sorted(set(param_names) & set(attr_names))
        if clashes:
            problems.append(f"{self.name}: inputs and outputs share names {clashes}")

        for placeholder in self._path_names:
            declared = self.param(placeholder)
            if declared is None:
                problems.append(f"{self.name}: path placeholder {{{placeholder}}} has no parameter")
            elif not declared.required:
                problems.append(f"{self.name}: path parameter {placeholder!r} must be required")
        for p in self.query_params:
            if p.allow_slash:
                problems.append(f"{self.name}: allow_slash only applies to path parameter {p.name!r}")
        for p in self.path_params:
            if p.wire_name:
                problems.append(f"{self.name}: wire_name only applies to query parameter {p.name!r}")

        scalar_outputs = {a.name for a in self.attributes if a.is_scalar}
        for variable in template_fields(self.identity):
            if variable not in param_names and variable not in scalar_outputs:
                problems.append(f"{self.name}: identity variable {{{variable}}} is unbound")
        for variable in template_fields(self.not_found or ""):
            if variable not in param_names:
                problems.append(f"{self.name}: not_found variable {{{variable}}} is not an input")

        if self.shape is BindingShape.collection and not any(
            a.type is AttrType.list for a in self.attributes
        ):
            problems.append(f"{self.name}: collection binding has no list attribute")
        if self.shape is BindingShape.summary and not any(
            a.type is AttrType.map and a.source == "" for a in self.attributes
        ):
            problems.append(f"{self.name}: summary binding has no whole-document map attribute")
        return problems


class _Blank(dict):
    def __missing__(self, key: str) -> str:
        return ""


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


def _resolve_params(path: str, params: Iterable[Param]) -> tuple[Param, ...]:
    """Declare every path placeholder, keeping explicit overrides.

    Undeclared placeholders become required string parameters; path
    parameters come first in template order, query parameters after them.
    """
    explicit = {p.name: p for p in params}
    placeholders = template_fields(path)
    resolved = [explicit.pop(name, None) or path_param(name) for name in placeholders]
    resolved.extend(explicit.values())
    return tuple(resolved)


def default_identity(path: str) -> str:
    """Mirror the endpoint path beneath the repository or workspace."""
    for prefix in _IDENTITY_PREFIXES:
        if path.startswith(prefix):
            return path[len(prefix):]
    return path


def default_entity(name: str) -> str:
    return name.removeprefix("bitbucket_").replace("_", " ")


def _descriptor(
    name: str,
    path: str,
    shape: BindingShape,
    attributes: tuple[Attribute, ...],
    *,
    params: Iterable[Param],
    identity: str | None,
    entity: str | None,
    not_found: str | None,
    fixed_query: Mapping[str, str] | None,
    description: str,
) -> BindingDescriptor:
    return BindingDescriptor(
        name=name,
        path=path,
        shape=shape,
        params=_resolve_params(path, params),
        attributes=attributes,
        identity=identity if identity is not None else default_identity(path),
        entity=entity or default_entity(name),
        not_found=not_found,
        fixed_query=tuple((fixed_query or {}).items()),
        description=description,
    )


def collection(
    name: str,
    path: str,
    attr: str,
    *fields: Attribute,
    items_key: str = "values",
    params: Iterable[Param] = (),
    identity: str | None = None,
    entity: str | None = None,
    not_found: str | None = None,
    fixed_query: Mapping[str, str] | None = None,
    description: str = "",
) -> BindingDescriptor:
    """A binding whose response holds an array of objects plus pagination markers.

    The array found under *items_key* is exposed as the list attribute
    *attr*; ``page``, ``size`` and ``next`` are surfaced as-is and never
    followed.

    Example::

        collection(
            "bitbucket_tags",
            "2.0/repositories/{workspace}/{repo_slug}/refs/tags",
            "tags",
            string("name"),
            mapping("target"),
        )
    """
    attributes = (
        object_list(attr, *fields, source=items_key),
        integer("page"),
        integer("size"),
        string("next"),
    )
    return _descriptor(
        name,
        path,
        BindingShape.collection,
        attributes,
        params=params,
        identity=identity,
        entity=entity,
        not_found=not_found,
        fixed_query=fixed_query,
        description=description,
    )


def scalar(
    name: str,
    path: str,
    *attributes: Attribute,
    params: Iterable[Param] = (),
    identity: str | None = None,
    entity: str | None = None,
    not_found: str | None = None,
    fixed_query: Mapping[str, str] | None = None,
    description: str = "",
) -> BindingDescriptor:
    """A binding whose response is one object flattened into top-level attributes."""
    return _descriptor(
        name,
        path,
        BindingShape.scalar,
        tuple(attributes),
        params=params,
        identity=identity,
        entity=entity,
        not_found=not_found,
        fixed_query=fixed_query,
        description=description,
    )


def summary(
    name: str,
    path: str,
    attr: str = "summary",
    *,
    params: Iterable[Param] = (),
    identity: str | None = None,
    entity: str | None = None,
    not_found: str | None = None,
    fixed_query: Mapping[str, str] | None = None,
    description: str = "",
) -> BindingDescriptor:
    """A binding whose whole response document becomes the map attribute *attr*."""
    return _descriptor(
        name,
        path,
        BindingShape.summary,
        (mapping(attr, source=""),),
        params=params,
        identity=identity,
        entity=entity,
        not_found=not_found,
        fixed_query=fixed_query,
        description=description,
    )
