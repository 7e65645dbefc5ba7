from __future__ import annotations

import copy
from collections.abc import Iterable, Mapping
from typing import Any

from bitbucket_provider.bindings.base import Attribute, BindingDescriptor
from bitbucket_provider.errors import ContractError, DecodeError
from bitbucket_provider.models.enums import AttrType

_MISSING = object()

_ZERO: dict[AttrType, Any] = {
    AttrType.string: "",
    AttrType.integer: 0,
    AttrType.number: 0.0,
    AttrType.boolean: False,
}


def zero_value(attr: Attribute) -> Any:
    """Return the zero value of *attr*'s type (nested zeros for objects)."""
    if attr.type in _ZERO:
        return _ZERO[attr.type]
    if attr.type is AttrType.map:
        return {}
    if attr.type is AttrType.list:
        return []
    return {child.name: zero_value(child) for child in _children(attr)}


def _children(attr: Attribute) -> tuple[Attribute, ...]:
    return attr.elem if isinstance(attr.elem, tuple) else ()


def _lookup(document: Any, path: Iterable[str]) -> Any:
    current = document
    for key in path:
        if not isinstance(current, Mapping) or key not in current:
            return _MISSING
        current = current[key]
    return current


class Decoder:
    """Flatten a JSON document into a binding's attribute tree.

    Missing fields, and fields that are JSON ``null``, take the zero value of
    their declared type.  A present value of the wrong type raises
    :class:`~bitbucket_provider.errors.DecodeError`; a missing field declared
    ``required`` raises :class:`~bitbucket_provider.errors.ContractError`.
    Unknown fields are ignored, except inside map attributes where they are
    kept verbatim.
    """

    def __init__(self, descriptor: BindingDescriptor, *, url: str | None = None) -> None:
        self.descriptor = descriptor
        self.url = url

    @property
    def name(self) -> str:
        return f"{self.descriptor.name} decoder"

    def decode(self, document: Any) -> dict[str, Any]:
        if not isinstance(document, Mapping):
            raise DecodeError(
                f"{self.name}: expected a JSON object, got {_json_type(document)}",
                binding=self.descriptor.name,
                url=self.url,
            )
        return self._decode_fields(self.descriptor.attributes, document, prefix="")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _decode_fields(
        self, attributes: Iterable[Attribute], document: Mapping[str, Any], prefix: str
    ) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for attr in attributes:
            location = f"{prefix}{attr.name}"
            raw = document if not attr.source_path else _lookup(document, attr.source_path)
            if raw is _MISSING or raw is None:
                if attr.required:
                    raise ContractError(
                        f"required field {location!r} is absent from the response",
                        binding=self.descriptor.name,
                        url=self.url,
                    )
                result[attr.name] = zero_value(attr)
                continue
            result[attr.name] = self._convert(attr, raw, location)
        return result

    def _convert(self, attr: Attribute, value: Any, location: str) -> Any:
        kind = attr.type
        if kind is AttrType.string and isinstance(value, str):
            return value
        if kind is AttrType.integer and _is_int(value):
            return int(value)
        if kind is AttrType.number and _is_number(value):
            return float(value)
        if kind is AttrType.boolean and isinstance(value, bool):
            return value
        if kind is AttrType.map and isinstance(value, Mapping):
            return copy.deepcopy(dict(value))
        if kind is AttrType.object and isinstance(value, Mapping):
            return self._decode_fields(_children(attr), value, prefix=f"{location}.")
        if kind is AttrType.list and isinstance(value, list):
            return [self._convert_element(attr, item, f"{location}[{i}]") for i, item in enumerate(value)]
        raise self._mismatch(location, kind.value, value)

    def _convert_element(self, attr: Attribute, item: Any, location: str) -> Any:
        if isinstance(attr.elem, tuple):
            if not isinstance(item, Mapping):
                raise self._mismatch(location, "object", item)
            return self._decode_fields(attr.elem, item, prefix=f"{location}.")
        element = Attribute(attr.name, attr.elem or AttrType.string)
        if item is None:
            return zero_value(element)
        return self._convert(element, item, location)

    def _mismatch(self, location: str, expected: str, value: Any) -> DecodeError:
        return DecodeError(
            f"{self.name}: field {location!r} expected {expected}, got {_json_type(value)}",
            binding=self.descriptor.name,
            url=self.url,
        )


def _is_int(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and value.is_integer()


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _json_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    return type(value).__name__


def decode(descriptor: BindingDescriptor, document: Any, *, url: str | None = None) -> dict[str, Any]:
    """Convenience wrapper around :meth:`Decoder.decode`."""
    return Decoder(descriptor, url=url).decode(document)
