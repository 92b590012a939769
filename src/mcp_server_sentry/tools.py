import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping

import httpx

from . import handlers
from .config import SentryConfig
from .errors import SentryError
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
    ToolInput,
    validate_arguments,
)
from .reports import Report

logger = logging.getLogger(__name__)

Handler = Callable[[httpx.AsyncClient, SentryConfig, Any], Awaitable[Report]]


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    input_model: type[ToolInput]
    handler: Handler


@dataclass(frozen=True)
class ToolResult:
    content: str
    is_error: bool = False


TOOLS: tuple[ToolSpec, ...] = (
    ToolSpec(
        name="list_projects",
        description="""List all accessible Sentry projects in an organization. Use this tool to:
        - View all projects you have access to
        - Get project slugs and IDs for use with other tools
        - Review project platforms, teams, environments and features
        The detailed markdown view is a table, convenient for copying slugs and IDs.""",
        input_model=ListProjectsInput,
        handler=handlers.handle_list_projects,
    ),
    ToolSpec(
        name="resolve_short_id",
        description="""Retrieve details about an issue using its short ID (e.g., PROJECT-123). Use this tool to:
        - Convert short IDs to full issue details
        - Get project and organization context for an issue
        - Access the issue permalink""",
        input_model=ResolveShortIdInput,
        handler=handlers.handle_resolve_short_id,
    ),
    ToolSpec(
        name="get_sentry_event",
        description="""Retrieve and analyze a specific Sentry event from an issue. Requires:
        1. An issue reference: a full Sentry issue URL (e.g., https://org-name.sentry.io/issues/123456),
           'org_slug:issue_id', or just the numeric issue ID
        2. An event ID (e.g., ab29e1067f214acb8ce89f3a03be25e8)
        The detailed view includes tags, user, request, context and the stack trace.""",
        input_model=GetEventInput,
        handler=handlers.handle_get_event,
    ),
    ToolSpec(
        name="list_error_events_in_project",
        description="""List error events from a specific Sentry project. Use this tool to:
        - View recent error events across a project
        - Monitor error frequency and patterns
        - Analyze error distribution by level and platform""",
        input_model=ListProjectEventsInput,
        handler=handlers.handle_list_project_events,
    ),
    ToolSpec(
        name="create_project",
        description="""Create a new project in Sentry under a team and return its details and client keys (DSNs).""",
        input_model=CreateProjectInput,
        handler=handlers.handle_create_project,
    ),
    ToolSpec(
        name="list_project_issues",
        description="""List issues from a specific Sentry project. Use this tool to:
        - View all issues in a project
        - Monitor issue status and severity
        - Track issue frequency and timing
        - Get issue IDs for use with other tools""",
        input_model=ListProjectIssuesInput,
        handler=handlers.handle_list_project_issues,
    ),
    ToolSpec(
        name="list_issue_events",
        description="""List events for a specific Sentry issue. Use this tool to:
        - View all events associated with an issue
        - Analyze event details and metadata
        - Identify patterns across related events""",
        input_model=ListIssueEventsInput,
        handler=handlers.handle_list_issue_events,
    ),
    ToolSpec(
        name="get_sentry_issue",
        description="""Retrieve and analyze a Sentry issue. Accepts either:
        1. A full Sentry issue URL (e.g., https://org-name.sentry.io/issues/123456)
        2. 'org_slug:issue_id'
        3. Just the numeric issue ID, with organization_slug or SENTRY_ORG naming the organization""",
        input_model=GetIssueInput,
        handler=handlers.handle_get_issue,
    ),
    ToolSpec(
        name="list_organization_replays",
        description="""List session replays from a Sentry organization. Use this tool to:
        - Monitor user interactions and errors
        - Identify user experience issues like rage clicks and dead clicks
        - Filter by project, environment and time range
        Pass the cursor parameter through to page through results.""",
        input_model=ListReplaysInput,
        handler=handlers.handle_list_replays,
    ),
    ToolSpec(
        name="setup_sentry",
        description="""Set up Sentry for a project. Creates a new Sentry project and returns its DSN together
        with language-agnostic setup instructions for integrating Sentry into an application.""",
        input_model=SetupSentryInput,
        handler=handlers.handle_setup_sentry,
    ),
)

TOOLS_BY_NAME: dict[str, ToolSpec] = {spec.name: spec for spec in TOOLS}


def get_tool(name: str) -> ToolSpec | None:
    return TOOLS_BY_NAME.get(name)


async def run_tool(
    name: str,
    arguments: Mapping[str, Any] | None,
    http_client: httpx.AsyncClient,
    config: SentryConfig,
) -> ToolResult:
    """Run one tool call end to end.

    Every failure comes back as an error result; only cancellation propagates.
    """
    spec = get_tool(name)
    if spec is None:
        return ToolResult(f"Unknown tool: {name}", is_error=True)

    try:
        params = validate_arguments(spec.input_model, arguments)
        report = await spec.handler(http_client, config, params)
        return ToolResult(report.render(params.render_mode))
    except SentryError as e:
        logger.error(f"[{name}] {type(e).__name__}: {e.message}")
        return ToolResult(e.message, is_error=True)
    except Exception as e:
        logger.error(f"Unexpected error in {name}: {e}", exc_info=True)
        return ToolResult(f"An unexpected error occurred while using the {name} tool: {e}", is_error=True)
