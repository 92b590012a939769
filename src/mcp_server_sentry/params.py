"""Input models for every tool.

Each model is both the validator for caller arguments and the source of the
JSON schema advertised to MCP clients.
"""

from enum import Enum
from typing import Annotated, Any, Mapping, NamedTuple, TypeVar

import pydantic
from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr

from .errors import ValidationError


class OutputFormat(str, Enum):
    PLAIN = "plain"
    MARKDOWN = "markdown"


class ViewType(str, Enum):
    SUMMARY = "summary"
    DETAILED = "detailed"


class RenderMode(NamedTuple):
    view: ViewType
    format: OutputFormat


NonEmptyStr = Annotated[StrictStr, Field(min_length=1)]
View = Annotated[ViewType, Field(description="View type (default: detailed)")]
Format = Annotated[OutputFormat, Field(description="Output format (default: markdown)")]
StatsPeriod = Annotated[StrictStr, Field(pattern=r"^\d+[mhdw]$")]
PerPage = Annotated[StrictInt, Field(ge=1)]


class ToolInput(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore", frozen=True)

    @property
    def render_mode(self) -> RenderMode:
        # Tools without a view parameter always render the detailed layout
        return RenderMode(getattr(self, "view", ViewType.DETAILED), self.format)


class ListProjectsInput(ToolInput):
    """Input for listing the projects of an organization."""

    organization_slug: NonEmptyStr = Field(description="The slug of the organization to list projects from")
    view: View = ViewType.DETAILED
    format: Format = OutputFormat.MARKDOWN


class ResolveShortIdInput(ToolInput):
    """Input for resolving a short ID such as PROJECT-123."""

    organization_slug: NonEmptyStr = Field(description="The slug of the organization the issue belongs to")
    short_id: NonEmptyStr = Field(description="The short ID of the issue to resolve (e.g., PROJECT-123)")
    format: Format = OutputFormat.MARKDOWN


class GetEventInput(ToolInput):
    """Input for retrieving a single event of an issue."""

    issue_id_or_url: NonEmptyStr = Field(
        description="Either a full Sentry issue URL, 'org_slug:issue_id', or just the numeric issue ID"
    )
    event_id: NonEmptyStr = Field(description="The specific event ID to retrieve")
    organization_slug: NonEmptyStr | None = Field(
        default=None,
        description="Optional organization slug, used when issue_id_or_url does not name one "
        "(default: SENTRY_ORG environment variable)",
    )
    view: View = ViewType.DETAILED
    format: Format = OutputFormat.MARKDOWN


class ListProjectEventsInput(ToolInput):
    """Input for listing error events of a project."""

    organization_slug: NonEmptyStr = Field(description="The slug of the organization the project belongs to")
    project_slug: NonEmptyStr = Field(description="The slug of the project to list events from")
    view: View = ViewType.DETAILED
    format: Format = OutputFormat.MARKDOWN


class CreateProjectInput(ToolInput):
    """Input for creating a project under a team."""

    organization_slug: NonEmptyStr = Field(description="The slug of the organization to create the project in")
    team_slug: NonEmptyStr = Field(description="The slug of the team to associate the project with")
    name: NonEmptyStr = Field(description="The name of the project to create")
    platform: NonEmptyStr | None = Field(
        default=None, description="The platform for the project (e.g., python, javascript, etc.)"
    )
    view: View = ViewType.DETAILED
    format: Format = OutputFormat.MARKDOWN


class ListProjectIssuesInput(ToolInput):
    """Input for listing issues of a project."""

    organization_slug: NonEmptyStr = Field(description="The slug of the organization the project belongs to")
    project_slug: NonEmptyStr = Field(description="The slug of the project to list issues from")
    view: View = ViewType.DETAILED
    format: Format = OutputFormat.MARKDOWN


class ListIssueEventsInput(ToolInput):
    """Input for listing events of an issue."""

    organization_slug: NonEmptyStr = Field(description="The slug of the organization the issue belongs to")
    issue_id: NonEmptyStr = Field(description="The ID of the issue to list events for")
    view: View = ViewType.DETAILED
    format: Format = OutputFormat.MARKDOWN


class GetIssueInput(ToolInput):
    """Input for retrieving issue details."""

    issue_id_or_url: NonEmptyStr = Field(
        description="Either a full Sentry issue URL, 'org_slug:issue_id', or just the numeric issue ID"
    )
    organization_slug: NonEmptyStr | None = Field(
        default=None, description="Optional organization slug (default: SENTRY_ORG environment variable)"
    )
    view: View = ViewType.DETAILED
    format: Format = OutputFormat.MARKDOWN


class ListReplaysInput(ToolInput):
    """Input for listing session replays of an organization."""

    organization_slug: NonEmptyStr = Field(description="The slug of the organization to list replays from")
    project_ids: list[StrictStr] | None = Field(
        default=None, description="Optional array of project IDs to filter replays by"
    )
    environment: NonEmptyStr | None = Field(default=None, description="Optional environment to filter replays by")
    stats_period: StatsPeriod | None = Field(
        default=None,
        description="Optional time range in format <number><unit> (e.g., '1d' for one day). "
        "Units: m (minutes), h (hours), d (days), w (weeks). Takes precedence over start/end",
    )
    start: NonEmptyStr | None = Field(
        default=None,
        description="Optional start of time range (UTC ISO8601 or epoch seconds). Use with 'end' instead of 'stats_period'",
    )
    end: NonEmptyStr | None = Field(
        default=None,
        description="Optional end of time range (UTC ISO8601 or epoch seconds). Use with 'start' instead of 'stats_period'",
    )
    sort: NonEmptyStr | None = Field(default=None, description="Optional field to sort results by")
    query: NonEmptyStr | None = Field(default=None, description="Optional structured query string to filter results")
    per_page: PerPage | None = Field(default=None, description="Optional limit on number of results to return")
    cursor: NonEmptyStr | None = Field(default=None, description="Optional cursor for pagination")
    view: View = ViewType.DETAILED
    format: Format = OutputFormat.MARKDOWN


class SetupSentryInput(ToolInput):
    """Input for creating a project and returning its DSN and setup snippet."""

    organization_slug: NonEmptyStr = Field(description="The slug of the organization to create the project in")
    team_slug: NonEmptyStr = Field(description="The slug of the team to associate the project with")
    project_name: NonEmptyStr = Field(description="The name of the project to create")
    environment: NonEmptyStr | None = Field(
        default=None, description="Optional environment name (e.g., production, staging, development)"
    )
    format: Format = OutputFormat.MARKDOWN


ToolInputT = TypeVar("ToolInputT", bound=ToolInput)


def validate_arguments(model: type[ToolInputT], arguments: Mapping[str, Any] | None) -> ToolInputT:
    """Validate caller arguments against a tool's model, filling in defaults.

    Raises:
        ValidationError: If a required field is missing or a value has the wrong type
    """
    try:
        return model.model_validate(dict(arguments or {}))
    except pydantic.ValidationError as e:
        raise ValidationError(f"Invalid arguments: {_describe_errors(e)}") from e


def input_schema(model: type[ToolInput]) -> dict[str, Any]:
    """JSON schema for a tool's input, as advertised in tools/list."""
    return model.model_json_schema()


def _describe_errors(error: pydantic.ValidationError) -> str:
    problems = []
    for detail in error.errors():
        location = ".".join(str(part) for part in detail["loc"]) or "arguments"
        problems.append(f"{location}: {detail['msg']}")
    return "; ".join(problems)
