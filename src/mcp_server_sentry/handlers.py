"""One coroutine per tool: build the request, send it, check the payload, wrap it in a report.

Handlers raise SentryError subclasses; conversion into tool results happens
once, in tools.run_tool.
"""

import logging
from typing import Any
from urllib.parse import quote

import httpx

from .config import SentryConfig
from .errors import RemoteApiError, SentryError
from .models import (
    ClientKey,
    CreatedProject,
    ErrorEvent,
    EventDetails,
    IssueDetails,
    IssueSummary,
    Project,
    Replay,
    ShortIdResolution,
)
from .params import (
    CreateProjectInput,
    GetEventInput,
    GetIssueInput,
    ListIssueEventsInput,
    ListProjectEventsInput,
    ListProjectIssuesInput,
    ListProjectsInput,
    ListReplaysInput,
    ResolveShortIdInput,
    SetupSentryInput,
)
from .reports import (
    CreatedProjectReport,
    EventListReport,
    EventReport,
    IssueListReport,
    IssueReport,
    ProjectListReport,
    ReplayListReport,
    SetupReport,
    ShortIdReport,
    describe_replay_filters,
)
from .request_builder import (
    RequestDescriptor,
    create_project_request,
    event_lookup_request,
    issue_details_request,
    issue_events_request,
    list_projects_request,
    list_replays_request,
    project_events_request,
    project_issues_request,
    project_keys_request,
    resolve_short_id_request,
)
from .responses import check_response, expect_list, expect_object, unwrap_data_list
from .transport import execute
from .urls import extract_issue_id

logger = logging.getLogger(__name__)


async def _fetch(http_client: httpx.AsyncClient, request: RequestDescriptor, context: str, action: str) -> Any:
    response = await execute(http_client, request, context)
    return check_response(response, action)


async def handle_list_projects(
    http_client: httpx.AsyncClient, config: SentryConfig, params: ListProjectsInput
) -> ProjectListReport:
    """
    Lists all projects of an organization.

    Args:
        http_client: The HTTP client to use
        config: Server configuration (token, API base)
        params: Validated tool arguments

    Returns:
        ProjectListReport over the organization's projects
    """
    logger.debug(f"[Projects] Listing projects for org: {params.organization_slug}")
    payload = await _fetch(
        http_client, list_projects_request(config, params.organization_slug), "[Projects]", "fetch projects"
    )
    projects = expect_list(payload, "projects", identity="id")
    logger.debug(f"[Projects] Successfully retrieved {len(projects)} projects")
    return ProjectListReport([Project.from_dict(p) for p in projects])


async def handle_resolve_short_id(
    http_client: httpx.AsyncClient, config: SentryConfig, params: ResolveShortIdInput
) -> ShortIdReport:
    logger.debug(f"[ShortId] Resolving {params.short_id} in org: {params.organization_slug}")
    request = resolve_short_id_request(config, params.organization_slug, params.short_id)
    payload = await _fetch(http_client, request, "[ShortId]", "resolve short ID")
    resolution = ShortIdResolution.from_dict(expect_object(payload, "short ID resolution", "group"))
    return ShortIdReport(resolution)


async def handle_get_event(
    http_client: httpx.AsyncClient, config: SentryConfig, params: GetEventInput
) -> EventReport:
    """
    Retrieves a specific event of a Sentry issue.

    The organization comes from the issue reference when it names one, then
    from the organization_slug argument, then from the configured default.
    The lookup itself goes through the organization-wide event ID endpoint.
    """
    reference = extract_issue_id(params.issue_id_or_url)
    org_slug = config.resolve_organization(reference.org_slug, params.organization_slug)
    logger.debug(f"[Event] Using organization slug: {org_slug} for issue ID: {reference.issue_id} and event ID: {params.event_id}")

    request = event_lookup_request(config, org_slug, params.event_id)
    payload = await _fetch(http_client, request, "[Event]", "retrieve event")
    event = EventDetails.from_dict(expect_object(payload, "event lookup", "event"))

    if event.group_id is not None and str(event.group_id) != reference.issue_id:
        logger.warning(f"[Event] Event {params.event_id} belongs to issue {event.group_id}, not {reference.issue_id}")
    if not event.stacktrace:
        logger.debug("[Event] No stacktrace found in event data")
    return EventReport(event)


async def handle_list_project_events(
    http_client: httpx.AsyncClient, config: SentryConfig, params: ListProjectEventsInput
) -> EventListReport:
    logger.debug(f"[Events] Listing events for org: {params.organization_slug}, project: {params.project_slug}")
    request = project_events_request(config, params.organization_slug, params.project_slug)
    payload = await _fetch(http_client, request, "[Events]", "fetch events")
    events = expect_list(payload, "events", identity="eventID")
    logger.debug(f"[Events] Successfully retrieved {len(events)} events")
    return EventListReport(
        f"Error Events for Project: {params.project_slug}",
        [ErrorEvent.from_dict(e) for e in events],
        "No events found for this project.",
    )


async def handle_create_project(
    http_client: httpx.AsyncClient, config: SentryConfig, params: CreateProjectInput
) -> CreatedProjectReport:
    """
    Creates a project under a team, then fetches its client keys.

    A failed key lookup does not fail the tool: the project already exists,
    so it is reported with a warning in place of the keys.
    """
    logger.debug(f"[Projects] Creating project {params.name} for team {params.team_slug} in org: {params.organization_slug}")
    request = create_project_request(
        config, params.organization_slug, params.team_slug, params.name, params.platform
    )
    payload = await _fetch(http_client, request, "[Projects]", "create project")
    project = CreatedProject.from_dict(expect_object(payload, "created project", "slug"))

    try:
        keys_payload = await _fetch(
            http_client,
            project_keys_request(config, params.organization_slug, project.slug),
            "[Keys]",
            "fetch client keys",
        )
        keys = [ClientKey.from_dict(k) for k in expect_list(keys_payload, "client keys")]
    except RemoteApiError as e:
        logger.warning(f"[Keys] Client key lookup for {project.slug} failed: {e.status_code}")
        return CreatedProjectReport(project, [], f"Failed to fetch client keys: {e.status_code} {e.reason}")
    except SentryError as e:
        logger.warning(f"[Keys] Client key lookup for {project.slug} failed: {e.message}")
        return CreatedProjectReport(project, [], e.message)

    return CreatedProjectReport(project, keys)


async def handle_list_project_issues(
    http_client: httpx.AsyncClient, config: SentryConfig, params: ListProjectIssuesInput
) -> IssueListReport:
    logger.debug(f"[Issues] Listing issues for org: {params.organization_slug}, project: {params.project_slug}")
    request = project_issues_request(config, params.organization_slug, params.project_slug)
    payload = await _fetch(http_client, request, "[Issues]", "fetch project issues")
    issues = expect_list(payload, "issues", identity="id")
    logger.debug(f"[Issues] Successfully retrieved {len(issues)} issues")
    return IssueListReport(params.project_slug, [IssueSummary.from_dict(i) for i in issues])


async def handle_list_issue_events(
    http_client: httpx.AsyncClient, config: SentryConfig, params: ListIssueEventsInput
) -> EventListReport:
    logger.debug(f"[IssueEvents] Listing events for issue: {params.issue_id} in org: {params.organization_slug}")
    request = issue_events_request(config, params.organization_slug, params.issue_id)
    payload = await _fetch(http_client, request, "[IssueEvents]", "fetch issue events")
    events = expect_list(payload, "events", identity="eventID")
    return EventListReport(
        f"Events for Issue: {params.issue_id}",
        [ErrorEvent.from_dict(e) for e in events],
        "No events found for this issue.",
        overview_table=True,
    )


async def handle_get_issue(
    http_client: httpx.AsyncClient, config: SentryConfig, params: GetIssueInput
) -> IssueReport:
    reference = extract_issue_id(params.issue_id_or_url)
    org_slug = config.resolve_organization(reference.org_slug, params.organization_slug)
    logger.debug(f"[Issue] Fetching issue {reference.issue_id} in org: {org_slug}")

    request = issue_details_request(config, org_slug, reference.issue_id)
    payload = await _fetch(http_client, request, "[Issue]", "fetch issue details")
    return IssueReport(IssueDetails.from_dict(expect_object(payload, "issue", "id")))


async def handle_list_replays(
    http_client: httpx.AsyncClient, config: SentryConfig, params: ListReplaysInput
) -> ReplayListReport:
    """
    Lists session replays of an organization.

    Filters are passed through as query parameters; the cursor is passed back
    verbatim and only changes the report by adding a pagination note.
    """
    logger.debug(f"[Replays] Listing replays for org: {params.organization_slug}")
    if params.stats_period and (params.start or params.end):
        logger.debug("[Replays] stats_period given, ignoring start/end")
    elif bool(params.start) != bool(params.end):
        logger.warning("[Replays] start and end must be given together, ignoring the time range")

    payload = await _fetch(http_client, list_replays_request(config, params), "[Replays]", "fetch replays")
    replays = unwrap_data_list(payload, "replays", identity="id")
    logger.debug(f"[Replays] Found {len(replays)} replays")
    return ReplayListReport(
        params.organization_slug,
        [Replay.from_dict(r) for r in replays],
        filters=describe_replay_filters(params),
        paginated=bool(params.cursor),
    )


async def handle_setup_sentry(
    http_client: httpx.AsyncClient, config: SentryConfig, params: SetupSentryInput
) -> SetupReport:
    """
    Creates a project and returns its public DSN with an SDK init snippet.

    Unlike create_project, a failed or empty key lookup fails the tool since
    the DSN is the point of the call.
    """
    logger.debug(f"[Setup] Setting up project {params.project_name} for team {params.team_slug} in org: {params.organization_slug}")
    request = create_project_request(config, params.organization_slug, params.team_slug, params.project_name)
    payload = await _fetch(http_client, request, "[Setup]", "create Sentry project")
    project = CreatedProject.from_dict(expect_object(payload, "created project", "slug"))

    keys_payload = await _fetch(
        http_client,
        project_keys_request(config, params.organization_slug, project.slug),
        "[Setup]",
        "fetch client keys",
    )
    keys = [ClientKey.from_dict(k) for k in expect_list(keys_payload, "client keys")]
    if not keys or not keys[0].dsn.public:
        raise SentryError("No client keys found for the project. Please check the project settings.")

    issues_url = f"{config.web_base}/organizations/{quote(params.organization_slug, safe='')}/issues/"
    return SetupReport(project, keys[0].dsn.public, issues_url, params.environment)
