from __future__ import annotations

from bitbucket_provider.bindings.base import (
    LINKS,
    TIMESTAMPS,
    boolean,
    collection,
    mapping,
    query_param,
    scalar,
    string,
    string_list,
    summary,
)
from bitbucket_provider.bindings.catalog.common import REPO

ADDON = f"{REPO}/addons/{{addon_key}}"
WEBHOOK = f"{ADDON}/webhooks/{{webhook_uuid}}"

_ADDON_NOT_FOUND = "unable to locate addon {addon_key} in repository {workspace}/{repo_slug}"
_WEBHOOK_NOT_FOUND = "unable to locate webhook {webhook_uuid} of addon {addon_key}"

_WEBHOOK_FIELDS = (
    string("uuid"),
    string("url"),
    string("description"),
    string("subject_type"),
    mapping("subject"),
    boolean("active"),
    *TIMESTAMPS,
    LINKS,
)

_EVENT_FIELDS = (
    string("uuid"),
    string("event_type"),
    string("status"),
    mapping("request"),
    mapping("response"),
    *TIMESTAMPS,
    LINKS,
)

_LOG_FIELDS = (
    string("uuid"),
    string("level"),
    string("message"),
    string("timestamp"),
    mapping("details"),
)

ADDONS = collection(
    "bitbucket_addons",
    f"{REPO}/addon",
    "addons",
    string("key"),
    string("name"),
    string("description"),
    string("vendor", "vendor.name"),
    string("base_url", "baseUrl"),
    string_list("scopes"),
    LINKS,
)

REPOSITORY_ADDON_LINKERS = collection(
    "bitbucket_repository_addon_linkers",
    f"{REPO}/addons",
    "linkers",
    string("key"),
    string("type"),
    string_list("values"),
    LINKS,
)

REPOSITORY_ADDON_SETTINGS = scalar(
    "bitbucket_repository_addon_settings",
    ADDON,
    mapping("settings", ""),
    not_found=_ADDON_NOT_FOUND,
)

REPOSITORY_ADDON_VALUES = scalar(
    "bitbucket_repository_addon_values",
    ADDON,
    mapping("values", ""),
    not_found=_ADDON_NOT_FOUND,
)

REPOSITORY_ADDON_STATUS = scalar(
    "bitbucket_repository_addon_status",
    f"{ADDON}/status",
    string("status"),
    string("message"),
    mapping("details"),
    not_found=_ADDON_NOT_FOUND,
)

# ---------------------------------------------------------------------------
# Addon webhooks, their events and delivery logs
# ---------------------------------------------------------------------------

REPOSITORY_ADDON_WEBHOOKS = collection(
    "bitbucket_repository_addon_webhooks",
    f"{ADDON}/webhooks",
    "webhooks",
    *_WEBHOOK_FIELDS,
    not_found=_ADDON_NOT_FOUND,
)

REPOSITORY_ADDON_WEBHOOK = scalar(
    "bitbucket_repository_addon_webhook",
    WEBHOOK,
    *_WEBHOOK_FIELDS,
    entity="addon webhook",
    not_found=_WEBHOOK_NOT_FOUND,
)

REPOSITORY_ADDON_WEBHOOK_EVENTS = collection(
    "bitbucket_repository_addon_webhook_events",
    f"{WEBHOOK}/events",
    "events",
    *_EVENT_FIELDS,
    not_found=_WEBHOOK_NOT_FOUND,
)

REPOSITORY_ADDON_WEBHOOK_EVENT = scalar(
    "bitbucket_repository_addon_webhook_event",
    f"{WEBHOOK}/events/{{event_uuid}}",
    *_EVENT_FIELDS,
    entity="addon webhook event",
    not_found="unable to locate event {event_uuid} of webhook {webhook_uuid}",
)

REPOSITORY_ADDON_WEBHOOK_LOGS = collection(
    "bitbucket_repository_addon_webhook_logs",
    f"{WEBHOOK}/logs",
    "logs",
    *_LOG_FIELDS,
    not_found=_WEBHOOK_NOT_FOUND,
)

REPOSITORY_ADDON_WEBHOOK_LOG = scalar(
    "bitbucket_repository_addon_webhook_log",
    f"{WEBHOOK}/logs/{{log_uuid}}",
    *_LOG_FIELDS,
    entity="addon webhook log",
    not_found="unable to locate log {log_uuid} of webhook {webhook_uuid}",
)

REPOSITORY_ADDON_WEBHOOK_LOGS_SUMMARY = summary(
    "bitbucket_repository_addon_webhook_logs_summary",
    f"{WEBHOOK}/logs/summary",
    not_found=_WEBHOOK_NOT_FOUND,
)

REPOSITORY_ADDON_WEBHOOK_LOGS_SUMMARY_BY_LEVEL = summary(
    "bitbucket_repository_addon_webhook_logs_summary_by_level",
    f"{WEBHOOK}/logs/summary/{{level}}",
    not_found=_WEBHOOK_NOT_FOUND,
)

REPOSITORY_ADDON_WEBHOOK_LOGS_SUMMARY_BY_TIME_RANGE = summary(
    "bitbucket_repository_addon_webhook_logs_summary_by_time_range",
    f"{WEBHOOK}/logs/summary",
    params=[
        query_param("from", required=True),
        query_param("to", required=True),
        query_param("range", required=True),
    ],
    identity=(
        "{workspace}/{repo_slug}/addons/{addon_key}/webhooks/{webhook_uuid}"
        "/logs/summary/{from}/{to}/{range}"
    ),
    not_found=_WEBHOOK_NOT_FOUND,
)

ADDON_BINDINGS = (
    ADDONS,
    REPOSITORY_ADDON_LINKERS,
    REPOSITORY_ADDON_SETTINGS,
    REPOSITORY_ADDON_VALUES,
    REPOSITORY_ADDON_STATUS,
    REPOSITORY_ADDON_WEBHOOKS,
    REPOSITORY_ADDON_WEBHOOK,
    REPOSITORY_ADDON_WEBHOOK_EVENTS,
    REPOSITORY_ADDON_WEBHOOK_EVENT,
    REPOSITORY_ADDON_WEBHOOK_LOGS,
    REPOSITORY_ADDON_WEBHOOK_LOG,
    REPOSITORY_ADDON_WEBHOOK_LOGS_SUMMARY,
    REPOSITORY_ADDON_WEBHOOK_LOGS_SUMMARY_BY_LEVEL,
    REPOSITORY_ADDON_WEBHOOK_LOGS_SUMMARY_BY_TIME_RANGE,
)
