from __future__ import annotations

from enum import Enum


class AuthMode(str, Enum):
    """Mutually-exclusive authentication variants accepted by the provider."""

    basic = "basic"
    oauth_token = "oauth_token"
    oauth_client_credentials = "oauth_client_credentials"
    unauthenticated = "unauthenticated"


class ErrorKind(str, Enum):
    """Error taxonomy surfaced to the host runtime as diagnostics."""

    configuration = "configuration"
    transport = "transport"
    empty_response = "empty_response"
    not_found = "not_found"
    unauthorized = "unauthorized"
    forbidden = "forbidden"
    rate_limited = "rate_limited"
    server = "server"
    decode = "decode"
    contract = "contract"


class Severity(str, Enum):
    """Diagnostic severity levels understood by the host runtime."""

    error = "error"
    warning = "warning"


class ParamType(str, Enum):
    """Declared type of a binding input parameter."""

    string = "string"
    integer = "integer"
    boolean = "boolean"


class AttrType(str, Enum):
    """Host attribute types a response field can be flattened into."""

    string = "string"
    integer = "integer"
    number = "number"
    boolean = "boolean"
    map = "map"
    list = "list"
    object = "object"


class BindingShape(str, Enum):
    """Response-shape categories for read bindings."""

    collection = "collection"
    scalar = "scalar"
    summary = "summary"
