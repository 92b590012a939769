"""Turns validated tool arguments into concrete Sentry API requests.

Every path identifier is encoded as a single URL path component, and query
parameters are kept as ordered pairs so array filters can repeat a key.
"""

from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote, urlencode

from .config import SentryConfig
from .constants import REPLAY_FIELDS
from .params import ListReplaysInput

QueryPairs = tuple[tuple[str, str], ...]


@dataclass(frozen=True)
class RequestDescriptor:
    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    json: dict[str, Any] | None = None

    @property
    def path(self) -> str:
        return self.url.split("?", 1)[0]


def encode_segment(value: str) -> str:
    return quote(value, safe="")


def build_request(
    config: SentryConfig,
    method: str,
    template: str,
    *segments: str,
    query: QueryPairs = (),
    body: dict[str, Any] | None = None,
) -> RequestDescriptor:
    """Interpolate encoded segments into a path template relative to the API base."""
    path = template.format(*(encode_segment(s) for s in segments))
    url = f"{config.api_base}{path}"
    if query:
        url = f"{url}?{urlencode(query)}"
    headers = {
        "Authorization": f"Bearer {config.auth_token}",
        "Content-Type": "application/json",
    }
    return RequestDescriptor(method=method, url=url, headers=headers, json=body)


def list_projects_request(config: SentryConfig, organization_slug: str) -> RequestDescriptor:
    return build_request(config, "GET", "organizations/{}/projects/", organization_slug)


def resolve_short_id_request(config: SentryConfig, organization_slug: str, short_id: str) -> RequestDescriptor:
    return build_request(config, "GET", "organizations/{}/shortids/{}/", organization_slug, short_id)


def event_lookup_request(config: SentryConfig, organization_slug: str, event_id: str) -> RequestDescriptor:
    return build_request(config, "GET", "organizations/{}/eventids/{}/", organization_slug, event_id)


def project_events_request(config: SentryConfig, organization_slug: str, project_slug: str) -> RequestDescriptor:
    return build_request(config, "GET", "projects/{}/{}/events/", organization_slug, project_slug)


def project_issues_request(config: SentryConfig, organization_slug: str, project_slug: str) -> RequestDescriptor:
    return build_request(config, "GET", "projects/{}/{}/issues/", organization_slug, project_slug)


def issue_events_request(config: SentryConfig, organization_slug: str, issue_id: str) -> RequestDescriptor:
    return build_request(config, "GET", "organizations/{}/issues/{}/events/", organization_slug, issue_id)


def issue_details_request(config: SentryConfig, organization_slug: str, issue_id: str) -> RequestDescriptor:
    return build_request(config, "GET", "organizations/{}/issues/{}/", organization_slug, issue_id)


def create_project_request(
    config: SentryConfig,
    organization_slug: str,
    team_slug: str,
    name: str,
    platform: str | None = None,
) -> RequestDescriptor:
    body: dict[str, Any] = {"name": name}
    if platform:
        body["platform"] = platform
    return build_request(config, "POST", "teams/{}/{}/projects/", organization_slug, team_slug, body=body)


def project_keys_request(config: SentryConfig, organization_slug: str, project_slug: str) -> RequestDescriptor:
    return build_request(config, "GET", "projects/{}/{}/keys/", organization_slug, project_slug)


def replay_query(params: ListReplaysInput) -> QueryPairs:
    """Query pairs for the replay index.

    A relative stats_period wins over an explicit range, and start/end are
    only sent as a pair.
    """
    pairs: list[tuple[str, str]] = []

    if params.stats_period:
        pairs.append(("statsPeriod", params.stats_period))
    elif params.start and params.end:
        pairs.append(("start", params.start))
        pairs.append(("end", params.end))

    for project_id in params.project_ids or ():
        pairs.append(("project", project_id))

    if params.environment:
        pairs.append(("environment", params.environment))
    if params.sort:
        pairs.append(("sort", params.sort))
    if params.query:
        pairs.append(("query", params.query))
    if params.per_page is not None:
        pairs.append(("per_page", str(params.per_page)))
    if params.cursor:
        pairs.append(("cursor", params.cursor))

    pairs.extend(("field", name) for name in REPLAY_FIELDS)
    return tuple(pairs)


def list_replays_request(config: SentryConfig, params: ListReplaysInput) -> RequestDescriptor:
    return build_request(
        config, "GET", "organizations/{}/replays/", params.organization_slug, query=replay_query(params)
    )
