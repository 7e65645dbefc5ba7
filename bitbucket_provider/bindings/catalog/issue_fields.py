from __future__ import annotations

# The issue-field endpoints are not part of the documented public API; they
# are kept as opaque templates and nothing is assumed beyond "GET returns
# JSON" in the shape declared here.

from bitbucket_provider.bindings.base import (
    LINKS,
    TIMESTAMPS,
    Attribute,
    BindingDescriptor,
    boolean,
    collection,
    integer,
    mapping,
    number,
    object_list,
    string,
    string_list,
    summary,
)
from bitbucket_provider.bindings.catalog.common import REPO

FIELD = f"{REPO}/issue-fields/{{field_uuid}}"
ADDON = f"{FIELD}/addons/{{addon_uuid}}"

_HEAD = (string("uuid"), string("name"), string("type"))
_TAIL = (*TIMESTAMPS, LINKS)


def _field_collection(suffix: str, attr: str, *fields: Attribute) -> BindingDescriptor:
    return collection(
        f"bitbucket_issue_field_{suffix}",
        f"{FIELD}/{suffix}",
        attr,
        *fields,
    )


ISSUE_FIELDS = collection(
    "bitbucket_issue_fields",
    f"{REPO}/issue-fields",
    "fields",
    *_HEAD,
    boolean("required"),
    string("default_value"),
    *_TAIL,
)

ISSUE_FIELD_ACTIONS = _field_collection(
    "actions", "actions", *_HEAD, mapping("field"), string("value"), *_TAIL
)
ISSUE_FIELD_ADDONS = _field_collection(
    "addons",
    "addons",
    *_HEAD,
    string("version"),
    string("description"),
    boolean("enabled"),
    mapping("config"),
    *_TAIL,
)
ISSUE_FIELD_ANALYTICS = _field_collection(
    "analytics",
    "analytics",
    *_HEAD,
    mapping("data"),
    string_list("insights"),
    mapping("trends"),
    *_TAIL,
)
ISSUE_FIELD_CONDITIONS = _field_collection(
    "conditions", "conditions", *_HEAD, string("operator"), string("value"), *_TAIL
)
ISSUE_FIELD_DEPENDENCIES = _field_collection(
    "dependencies", "dependencies", *_HEAD, mapping("field"), string("value"), *_TAIL
)
ISSUE_FIELD_INTEGRATIONS = _field_collection(
    "integrations",
    "integrations",
    *_HEAD,
    string("provider"),
    mapping("config"),
    boolean("enabled"),
    *_TAIL,
)
ISSUE_FIELD_LOGS = _field_collection(
    "logs",
    "logs",
    string("uuid"),
    string("level"),
    string("message"),
    string("timestamp"),
    mapping("user"),
    mapping("details"),
    LINKS,
)
ISSUE_FIELD_METRICS = _field_collection(
    "metrics",
    "metrics",
    *_HEAD,
    number("value"),
    string("unit"),
    string("timestamp"),
    mapping("metadata"),
    LINKS,
)
ISSUE_FIELD_NOTIFICATIONS = _field_collection(
    "notifications",
    "notifications",
    *_HEAD,
    mapping("user"),
    mapping("group"),
    string("email"),
    boolean("enabled"),
    *_TAIL,
)
ISSUE_FIELD_OPTIONS = _field_collection(
    "options",
    "options",
    string("uuid"),
    string("name"),
    string("value"),
    string("icon"),
    string("color"),
    *_TAIL,
)
ISSUE_FIELD_PERMISSIONS = _field_collection(
    "permissions",
    "permissions",
    *_HEAD,
    mapping("user"),
    mapping("group"),
    string("permission"),
    *_TAIL,
)
ISSUE_FIELD_REPORTS = _field_collection(
    "reports", "reports", *_HEAD, string("format"), mapping("data"), *_TAIL
)
ISSUE_FIELD_RULES = _field_collection(
    "rules",
    "rules",
    *_HEAD,
    mapping("condition"),
    mapping("action"),
    boolean("enabled"),
    *_TAIL,
)
ISSUE_FIELD_TRIGGERS = _field_collection(
    "triggers", "triggers", *_HEAD, string("event"), boolean("enabled"), *_TAIL
)
ISSUE_FIELD_VALIDATIONS = _field_collection(
    "validations",
    "validations",
    string("uuid"),
    string("type"),
    string("value"),
    string("message"),
    *_TAIL,
)
ISSUE_FIELD_VALUES = _field_collection(
    "values", "values", string("uuid"), string("name"), string("value"), *_TAIL
)
ISSUE_FIELD_WEBHOOKS = _field_collection(
    "webhooks",
    "webhooks",
    string("uuid"),
    string("name"),
    string("url"),
    string_list("events"),
    boolean("enabled"),
    *_TAIL,
)
ISSUE_FIELD_WORKFLOWS = _field_collection(
    "workflows",
    "workflows",
    *_HEAD,
    object_list(
        "steps",
        string("uuid"),
        string("name"),
        integer("order"),
        string_list("actions"),
    ),
    boolean("enabled"),
    *_TAIL,
)

ISSUE_FIELD_ADDON_WEBHOOK_LOGS = collection(
    "bitbucket_issue_field_addon_webhook_logs",
    f"{ADDON}/webhook-logs",
    "logs",
    string("uuid"),
    string("level"),
    string("message"),
    string("timestamp"),
    mapping("webhook"),
    mapping("request"),
    mapping("response"),
    LINKS,
)

ISSUE_FIELD_ADDON_WEBHOOK_LOGS_SUMMARY = summary(
    "bitbucket_issue_field_addon_webhook_logs_summary",
    f"{ADDON}/webhook-logs/summary",
)

ISSUE_FIELD_BINDINGS = (
    ISSUE_FIELDS,
    ISSUE_FIELD_ACTIONS,
    ISSUE_FIELD_ADDONS,
    ISSUE_FIELD_ANALYTICS,
    ISSUE_FIELD_CONDITIONS,
    ISSUE_FIELD_DEPENDENCIES,
    ISSUE_FIELD_INTEGRATIONS,
    ISSUE_FIELD_LOGS,
    ISSUE_FIELD_METRICS,
    ISSUE_FIELD_NOTIFICATIONS,
    ISSUE_FIELD_OPTIONS,
    ISSUE_FIELD_PERMISSIONS,
    ISSUE_FIELD_REPORTS,
    ISSUE_FIELD_RULES,
    ISSUE_FIELD_TRIGGERS,
    ISSUE_FIELD_VALIDATIONS,
    ISSUE_FIELD_VALUES,
    ISSUE_FIELD_WEBHOOKS,
    ISSUE_FIELD_WORKFLOWS,
    ISSUE_FIELD_ADDON_WEBHOOK_LOGS,
    ISSUE_FIELD_ADDON_WEBHOOK_LOGS_SUMMARY,
)
