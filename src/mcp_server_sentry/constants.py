"""Constants shared across the Sentry MCP server."""

from typing import Final

SERVER_NAME: Final = "sentry"
SERVER_VERSION: Final = "0.5.0"

SENTRY_API_BASE: Final = "https://sentry.io/api/0/"
SENTRY_DOMAIN: Final = "sentry.io"

# Not configurable. Sentry list endpoints can be slow for large orgs.
REQUEST_TIMEOUT: Final = 30.0

AUTH_TOKEN_ENV_VARS: Final = ("SENTRY_AUTH", "SENTRY_TOKEN")
DEFAULT_ORG_ENV_VAR: Final = "SENTRY_ORG"
API_BASE_ENV_VAR: Final = "SENTRY_API_BASE"

MISSING_AUTH_TOKEN_MESSAGE: Final = (
    "Sentry authentication token is required. "
    "Set the SENTRY_AUTH environment variable or pass --auth-token."
)

MISSING_ORGANIZATION_MESSAGE: Final = (
    "Could not determine the organization slug. Pass a full issue URL, "
    "an 'org_slug:issue_id' reference, the organization_slug argument, "
    f"or set the {DEFAULT_ORG_ENV_VAR} environment variable."
)

PAGINATION_NOTE: Final = "Note: This is a paginated result. Use the cursor parameter for the next page."

# Fields requested from the replay index endpoint
REPLAY_FIELDS: Final = (
    "activity",
    "browser",
    "count_dead_clicks",
    "count_errors",
    "count_rage_clicks",
    "count_segments",
    "count_urls",
    "device",
    "dist",
    "duration",
    "environment",
    "error_ids",
    "finished_at",
    "id",
    "is_archived",
    "os",
    "platform",
    "project_id",
    "releases",
    "sdk",
    "started_at",
    "tags",
    "trace_ids",
    "urls",
    "user",
    "clicks",
    "info_ids",
    "warning_ids",
    "count_warnings",
    "count_infos",
    "has_viewed",
)
