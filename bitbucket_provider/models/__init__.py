from __future__ import annotations

from bitbucket_provider.models.enums import (
    AttrType,
    AuthMode,
    BindingShape,
    ErrorKind,
    ParamType,
    Severity,
)

__all__ = [
    "AttrType",
    "AuthMode",
    "BindingShape",
    "ErrorKind",
    "ParamType",
    "Severity",
]
