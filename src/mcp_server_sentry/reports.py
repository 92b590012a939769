"""Report rendering for every tool.

A report wraps validated resource records and renders them through a table
of four templates keyed by RenderMode. Subclasses implement ``detailed`` and,
where the tool has a terse layout, ``summary``; both take a ``markdown`` flag
so the plain and markdown variants share one content walk.

Fields the payload did not carry get no line at all; only table cells fall
back to N/A.
"""

import json
from functools import partial
from typing import Callable, Sequence

from .constants import PAGINATION_NOTE
from .formatting import (
    code,
    display,
    fields,
    format_duration,
    format_local_time,
    heading,
    inline_fields,
    key_value_table,
    link,
    list_field,
    name_and_slug,
    present,
    section,
    stats_table,
    table,
)
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
    User,
    tag_value,
)
from .params import ListReplaysInput, OutputFormat, RenderMode, ViewType


class Report:
    def templates(self) -> dict[RenderMode, Callable[[], str]]:
        return {
            RenderMode(ViewType.SUMMARY, OutputFormat.MARKDOWN): partial(self.summary, markdown=True),
            RenderMode(ViewType.DETAILED, OutputFormat.MARKDOWN): partial(self.detailed, markdown=True),
            RenderMode(ViewType.SUMMARY, OutputFormat.PLAIN): partial(self.summary, markdown=False),
            RenderMode(ViewType.DETAILED, OutputFormat.PLAIN): partial(self.detailed, markdown=False),
        }

    def render(self, mode: RenderMode) -> str:
        key = RenderMode(ViewType(mode.view), OutputFormat(mode.format))
        return self.templates()[key]()

    def summary(self, markdown: bool) -> str:
        # Tools without a terse layout render the same text for both views
        return self.detailed(markdown)

    def detailed(self, markdown: bool) -> str:
        raise NotImplementedError


def _user_lines(user: User | None, markdown: bool, level: int) -> list[str]:
    if user is None:
        return []
    details = fields(
        (
            ("ID", user.id),
            ("Name", user.name),
            ("Email", user.email),
            ("Username", user.username),
            ("IP Address", user.ip_address),
        ),
        markdown,
    )
    if not details:
        return []
    return ["", section("User Information", level, markdown), ""] + details


class ProjectListReport(Report):
    HEADERS = ("ID", "Name", "Slug", "Platform", "Teams", "Environments", "Features")

    def __init__(self, projects: Sequence[Project]):
        self.projects = projects

    def _row(self, p: Project) -> tuple:
        return (
            p.id,
            p.name,
            p.slug,
            p.platform,
            ", ".join(p.teams) or "None",
            ", ".join(p.environments) or "None",
            ", ".join(p.features) or "None",
        )

    def detailed(self, markdown: bool) -> str:
        rows = [self._row(p) for p in self.projects]
        lines = [heading("Sentry Projects", 1, markdown), ""]
        if markdown:
            lines += table(self.HEADERS, rows, markdown)
            lines += ["", section("Summary", 2, markdown), ""]
        else:
            for row in rows:
                lines += fields(zip(self.HEADERS, row), markdown)
                lines.append("")
        lines.append(f"Total Projects: {len(self.projects)}")
        return "\n".join(lines)

    def summary(self, markdown: bool) -> str:
        lines = [heading("Sentry Projects", 1, markdown), ""]
        for p in self.projects:
            name = p.name or p.slug or p.id
            slug = f" ({p.slug})" if present(p.slug) else ""
            if markdown:
                lines.append(f"- **{display(name)}**{slug}: ID {display(p.id)}")
            else:
                lines.append(f"{display(name)}{slug}: ID {display(p.id)}")
        lines += ["", f"Total Projects: {len(self.projects)}"]
        return "\n".join(lines)


class ShortIdReport(Report):
    def __init__(self, resolution: ShortIdResolution):
        self.resolution = resolution

    def detailed(self, markdown: bool) -> str:
        group = self.resolution.group
        short_id = self.resolution.short_id or group.short_id or group.id
        lines = [heading(f"Issue Details: {display(short_id)}", 1, markdown), ""]
        lines += [section("Issue Information", 2, markdown), ""]
        lines += fields(
            (
                ("Title", group.title),
                ("Status", group.status),
                ("Level", group.level),
                ("First Seen", group.first_seen),
                ("Last Seen", group.last_seen),
                ("Event Count", group.count),
                ("User Count", group.user_count),
                ("Culprit", group.culprit),
            ),
            markdown,
        )
        project = fields(
            (
                ("Project", name_and_slug(group.project.name, group.project.slug)),
                ("Project ID", group.project.id),
                ("Organization", self.resolution.organization_slug),
            ),
            markdown,
        )
        if project:
            lines += ["", section("Project Information", 2, markdown), ""] + project
        if present(group.permalink):
            lines += ["", section("Links", 2, markdown), ""]
            lines += fields((("Permalink", link(group.permalink, markdown)),), markdown)
        return "\n".join(lines)


class EventReport(Report):
    def __init__(self, event: EventDetails):
        self.event = event

    def detailed(self, markdown: bool) -> str:
        event = self.event
        lines = [heading(f"Event Details: {display(event.event_id)}", 1, markdown), ""]
        lines += [section("Event Information", 2, markdown), ""]
        lines += fields(
            (
                ("Event ID", event.event_id),
                ("Title", event.title),
                ("Platform", event.platform),
                ("Date Created", event.date_created),
                ("Date Received", event.date_received),
                ("Size", f"{event.size} bytes" if event.size is not None else None),
                ("Type", event.type),
            ),
            markdown,
        )

        if event.tags:
            lines += ["", section("Tags", 2, markdown), ""]
            lines += fields(((tag.key, tag.value) for tag in event.tags), markdown)

        lines += _user_lines(event.user, markdown, 2)

        if event.request is not None:
            request = fields((("URL", event.request.url), ("Method", event.request.method)), markdown)
            headers = fields(event.request.headers, markdown)
            if request or headers:
                lines += ["", section("Request Information", 2, markdown), ""] + request
            if headers:
                lines += ["", section("Headers", 3, markdown), ""] + headers

        if event.context:
            lines += ["", section("Context", 2, markdown), ""]
            context = json.dumps(event.context, indent=2, sort_keys=True)
            lines += ["```json", context, "```"] if markdown else [context]

        if event.stacktrace:
            lines += ["", section("Stack Trace", 2, markdown), ""]
            lines += ["```", event.stacktrace, "```"] if markdown else [event.stacktrace]

        project = fields(
            (
                ("Organization", event.organization_slug),
                ("Project", event.project_slug),
                ("Group ID", event.group_id),
            ),
            markdown,
        )
        if project:
            lines += ["", section("Project Information", 2, markdown), ""] + project
        return "\n".join(lines)

    def summary(self, markdown: bool) -> str:
        event = self.event
        lines = [heading(f"Event Details: {display(event.event_id)}", 1, markdown), ""]
        lines += [section("Summary", 2, markdown), ""]
        lines += fields(
            (
                ("Event ID", event.event_id),
                ("Title", event.title),
                ("Platform", event.platform),
                ("Date Created", event.date_created),
                ("Organization", event.organization_slug),
                ("Project", event.project_slug),
                ("Level", tag_value(event.tags, "level")),
                ("Release", tag_value(event.tags, "release")),
                ("User", event.user.label if event.user is not None else None),
            ),
            markdown,
        )
        return "\n".join(lines)


class EventListReport(Report):
    """Events listed under a project or under an issue.

    Issue listings open with an overview table and carry each event's
    project ID; project listings go straight to per-event sections.
    """

    def __init__(self, title: str, events: Sequence[ErrorEvent], empty_message: str, overview_table: bool = False):
        self.title = title
        self.events = events
        self.empty_message = empty_message
        self.overview_table = overview_table

    def detailed(self, markdown: bool) -> str:
        lines = [heading(self.title, 1, markdown), ""]
        if not self.events:
            lines.append(self.empty_message)
            return "\n".join(lines)

        level = 2
        if self.overview_table and markdown:
            headers = ("Event ID", "Title", "Platform", "Date Created", "Location", "Culprit")
            lines += table(
                headers,
                [(e.event_id, e.title, e.platform, e.date_created, e.location, e.culprit) for e in self.events],
                markdown,
            )
            lines += ["", section("Event Details", 2, markdown), ""]
            level = 3

        for index, event in enumerate(self.events, start=1):
            lines += [heading(f"Event {index}: {event.title or event.event_id}", level, markdown), ""]
            lines += fields(
                (
                    ("Event ID", event.event_id),
                    ("Group ID", event.group_id),
                    ("Date Created", event.date_created),
                    ("Platform", event.platform),
                    ("Type", event.event_type),
                    ("Location", event.location),
                    ("Culprit", event.culprit),
                    ("Project ID", event.project_id if self.overview_table else None),
                ),
                markdown,
            )
            if event.tags:
                lines += ["", section("Tags", level + 1, markdown), ""]
                lines += key_value_table(((tag.key, tag.value) for tag in event.tags), markdown)
            lines += _user_lines(event.user, markdown, level + 1)
            lines += ["", "---", ""]

        lines += [section("Summary", 2, markdown), ""]
        lines.append(f"Total Events: {len(self.events)}")
        return "\n".join(lines)

    def summary(self, markdown: bool) -> str:
        lines = [heading(self.title, 1, markdown), ""]
        if not self.events:
            lines.append(self.empty_message)
            return "\n".join(lines)

        for event in self.events:
            title = event.title or event.event_id
            details = inline_fields(
                (("Level", event.level), ("Environment", event.environment), ("Platform", event.platform))
            )
            date = inline_fields((("Date", event.date_created),))
            if markdown:
                lines.append(f"- **{title}** (ID: {event.event_id})")
                lines += [f"  - {text}" for text in (details, date) if text]
            else:
                lines.append(f"{title} (ID: {event.event_id})")
                lines += [text for text in (details, date) if text]
            lines.append("")
        lines.append(f"Total Events: {len(self.events)}")
        return "\n".join(lines)


def _issue_pairs(issue: IssueSummary) -> tuple[tuple[str, object], ...]:
    return (
        ("ID", issue.id),
        ("Short ID", issue.short_id),
        ("Status", issue.status),
        ("Level", issue.level),
        ("First Seen", issue.first_seen),
        ("Last Seen", issue.last_seen),
        ("Event Count", issue.count),
        ("User Count", issue.user_count),
        ("Culprit", issue.culprit),
    )


def _issue_title(issue: IssueSummary) -> str:
    return display(issue.title or issue.short_id or issue.id)


class IssueListReport(Report):
    def __init__(self, project_slug: str, issues: Sequence[IssueSummary]):
        self.project_slug = project_slug
        self.issues = issues

    @property
    def title(self) -> str:
        return f"Issues for Project: {self.project_slug}"

    def detailed(self, markdown: bool) -> str:
        lines = [heading(self.title, 1, markdown), ""]
        if not self.issues:
            lines.append("No issues found for this project.")
            return "\n".join(lines)

        level = 2
        if markdown:
            headers = ("ID", "Short ID", "Title", "Status", "Level", "First Seen", "Last Seen", "Events", "Users")
            rows = [
                (i.id, i.short_id, i.title, i.status, i.level, i.first_seen, i.last_seen, i.count, i.user_count)
                for i in self.issues
            ]
            lines += table(headers, rows, markdown)
            lines += ["", section("Issue Details", 2, markdown), ""]
            level = 3

        for index, issue in enumerate(self.issues, start=1):
            lines += [heading(f"Issue {index}: {_issue_title(issue)}", level, markdown), ""]
            lines += fields(_issue_pairs(issue), markdown)
            if issue.stats_24h:
                lines += ["", section("24-Hour Event Distribution", level + 1, markdown), ""]
                lines += stats_table(issue.stats_24h, markdown)
            lines += ["", "---", ""]

        lines += [section("Summary", 2, markdown), ""]
        lines.append(f"Total Issues: {len(self.issues)}")
        return "\n".join(lines)

    def summary(self, markdown: bool) -> str:
        lines = [heading(self.title, 1, markdown), ""]
        if not self.issues:
            lines.append("No issues found for this project.")
            return "\n".join(lines)

        for issue in self.issues:
            short_id = f" ({issue.short_id})" if present(issue.short_id) else ""
            counts = inline_fields((("Status", issue.status), ("Level", issue.level), ("Events", issue.count)))
            seen = inline_fields((("First seen", issue.first_seen), ("Last seen", issue.last_seen)))
            if markdown:
                lines.append(f"- **{_issue_title(issue)}**{short_id}")
                lines += [f"  - {text}" for text in (counts, seen) if text]
            else:
                lines.append(f"{_issue_title(issue)}{short_id}")
                lines += [text for text in (counts, seen) if text]
            lines.append("")
        lines.append(f"Total Issues: {len(self.issues)}")
        return "\n".join(lines)


class IssueReport(Report):
    def __init__(self, issue: IssueDetails):
        self.issue = issue

    def detailed(self, markdown: bool) -> str:
        issue = self.issue
        lines = [heading(f"Issue: {_issue_title(issue)}", 1, markdown), ""]
        lines += [section("Overview", 2, markdown), ""]
        lines += fields(
            _issue_pairs(issue)
            + (
                ("Permalink", link(issue.permalink, markdown)),
                ("24-Hour Event Count", issue.total_24h if issue.stats_24h else None),
            ),
            markdown,
        )

        project = fields(
            (("Name", issue.project.name), ("ID", issue.project.id), ("Slug", issue.project.slug)), markdown
        )
        if project:
            lines += ["", section("Project", 2, markdown), ""] + project

        if release := issue.first_release:
            lines += ["", section("First Release", 2, markdown), ""]
            lines += fields(
                (
                    ("Version", release.version),
                    ("Short Version", release.short_version),
                    ("Date Created", release.date_created),
                    ("First Event", release.first_event),
                    ("Last Event", release.last_event),
                ),
                markdown,
            )
            projects = [label for p in release.projects if (label := name_and_slug(p.name, p.slug))]
            lines += list_field("Projects", projects, markdown)

        if issue.activity:
            lines += ["", section("Activity", 2, markdown), ""]
            lines += table(
                ("Type", "Date", "User"),
                [(a.type, a.date_created, a.user_name or "System") for a in issue.activity],
                markdown,
            )

        if issue.tags:
            lines += ["", section("Tags", 2, markdown), ""]
            lines += key_value_table(((tag.key, tag.value) for tag in issue.tags), markdown)

        if issue.stats_24h:
            lines += ["", section("24-Hour Event Distribution", 2, markdown), ""]
            lines += stats_table(issue.stats_24h, markdown)

        if issue.stats_30d:
            lines += ["", section("30-Day Event Distribution", 2, markdown), ""]
            lines += stats_table(issue.stats_30d, markdown, daily=True)

        return "\n".join(lines)

    def summary(self, markdown: bool) -> str:
        issue = self.issue
        groups = (
            (("Short ID", issue.short_id),),
            (("Status", issue.status), ("Level", issue.level)),
            (("First Seen", issue.first_seen), ("Last Seen", issue.last_seen)),
            (("Events", issue.count), ("Users Affected", issue.user_count)),
            (("Project", issue.project.name),),
            (("Permalink", link(issue.permalink, markdown)),),
        )
        lines = [heading(f"Issue: {_issue_title(issue)}", 1, markdown), ""]
        lines += [text for group in groups if (text := inline_fields(group, bold=markdown))]
        if issue.stats_24h:
            lines += ["", inline_fields((("24-Hour Event Count", issue.total_24h),), bold=markdown)]
        return "\n".join(lines)


class CreatedProjectReport(Report):
    """A newly created project and its client keys.

    When the key lookup failed the project is still reported, with the
    failure as a warning line in place of the keys.
    """

    def __init__(self, project: CreatedProject, keys: Sequence[ClientKey], keys_warning: str | None = None):
        self.project = project
        self.keys = keys
        self.keys_warning = keys_warning

    @property
    def title(self) -> str:
        return f"Project Created: {self.project.name or self.project.slug}"

    def _warning(self, markdown: bool) -> list[str]:
        label = "**Warning**" if markdown else "Warning"
        return [f"{label}: {self.keys_warning}", ""]

    def _project_pairs(self) -> tuple[tuple[str, object], ...]:
        project = self.project
        return (
            ("ID", project.id),
            ("Name", project.name),
            ("Slug", project.slug),
            ("Platform", project.platform or "Not specified"),
        )

    def detailed(self, markdown: bool) -> str:
        project = self.project
        lines = [heading(self.title, 1, markdown), ""]
        if self.keys_warning:
            lines += self._warning(markdown)
        lines += [section("Project Information", 2, markdown), ""]
        lines += fields(
            self._project_pairs() + (("Date Created", project.date_created), ("Status", project.status)),
            markdown,
        )

        if project.features:
            lines += ["", section("Features", 2, markdown), ""]
            lines += [f"- {feature}" for feature in project.features]

        if not self.keys_warning:
            lines += ["", section("Client Keys", 2, markdown), ""]
            for index, key in enumerate(self.keys, start=1):
                lines += [heading(f"Key {index}: {display(key.name or key.id)}", 3, markdown), ""]
                lines += fields(
                    (
                        ("ID", key.id),
                        ("Public Key", key.public),
                        ("Secret Key", key.secret),
                        ("Project ID", key.project_id),
                        ("Is Active", key.is_active),
                        ("Date Created", key.date_created),
                    ),
                    markdown,
                )
                dsn = fields(
                    (
                        ("Public DSN", code(key.dsn.public, markdown)),
                        ("Secret DSN", code(key.dsn.secret, markdown)),
                        ("CSP Endpoint", code(key.dsn.csp, markdown)),
                        ("Security Endpoint", code(key.dsn.security, markdown)),
                        ("Minidump Endpoint", code(key.dsn.minidump, markdown)),
                        ("CDN URL", code(key.dsn.cdn, markdown)),
                    ),
                    markdown,
                )
                if dsn:
                    lines += ["", section("DSN Information", 4, markdown), ""] + dsn
                lines.append("")
        return "\n".join(lines).rstrip("\n")

    def summary(self, markdown: bool) -> str:
        lines = [heading(self.title, 1, markdown), ""]
        if self.keys_warning:
            lines += self._warning(markdown)
        lines += [section("Project Summary", 2, markdown), ""]
        lines += fields(self._project_pairs(), markdown)
        if not self.keys_warning:
            lines += ["", section("Client Keys Summary", 2, markdown), ""]
            for index, key in enumerate(self.keys, start=1):
                lines += [heading(f"Key {index}: {display(key.name or key.id)}", 3, markdown), ""]
                lines += fields((("Public DSN", code(key.dsn.public, markdown)),), markdown)
                lines.append("")
        return "\n".join(lines).rstrip("\n")


def describe_replay_filters(params: ListReplaysInput) -> list[str]:
    """Human-readable filters, in the order the request applies them."""
    filters = []
    if params.project_ids:
        filters.append(f"Projects: {', '.join(params.project_ids)}")
    if params.environment:
        filters.append(f"Environment: {params.environment}")
    if params.stats_period:
        filters.append(f"Time Range: Last {params.stats_period}")
    elif params.start and params.end:
        filters.append(f"Time Range: {params.start} to {params.end}")
    return filters


class ReplayListReport(Report):
    SUMMARY_HEADERS = ("ID", "Project ID", "Started", "Duration", "Browser", "Platform", "Environment", "Errors")

    def __init__(self, organization_slug: str, replays: Sequence[Replay], filters: Sequence[str] = (), paginated: bool = False):
        self.organization_slug = organization_slug
        self.replays = replays
        self.filters = filters
        self.paginated = paginated

    @property
    def title(self) -> str:
        title = f"Replays for Organization: {self.organization_slug}"
        if self.filters:
            title += f" (Filtered by: {' | '.join(self.filters)})"
        return title

    def _summary_row(self, replay: Replay) -> tuple:
        return (
            replay.id,
            replay.project_id,
            format_local_time(replay.started_at),
            format_duration(replay.duration),
            replay.browser,
            replay.platform,
            replay.environment,
            replay.count_errors,
        )

    def _note(self, markdown: bool) -> list[str]:
        if not self.paginated:
            return []
        return ["", f"*{PAGINATION_NOTE}*" if markdown else PAGINATION_NOTE]

    def _total(self) -> list[str]:
        return ["", f"Total Replays: {len(self.replays)}"]

    def _replay_lines(self, replay: Replay, markdown: bool) -> list[str]:
        lines = fields(
            (
                ("Project ID", replay.project_id),
                ("Started", format_local_time(replay.started_at)),
                ("Finished", format_local_time(replay.finished_at)),
                ("Duration", format_duration(replay.duration)),
                ("Environment", replay.environment),
                ("Platform", replay.platform),
                ("Activity", replay.activity),
                ("Viewed", replay.has_viewed),
                ("User", replay.user.label if replay.user else None),
                ("Browser", replay.browser),
                ("OS", replay.os),
                ("Device", replay.device),
                ("SDK", replay.sdk),
                ("Dead Clicks", replay.count_dead_clicks),
                ("Rage Clicks", replay.count_rage_clicks),
                ("Errors", replay.count_errors),
                ("Warnings", replay.count_warnings),
                ("Infos", replay.count_infos),
                ("URLs Visited", replay.count_urls),
            ),
            markdown,
        )
        lines += list_field("URLs", replay.urls, markdown)
        lines += list_field("Error IDs", replay.error_ids, markdown)
        lines += list_field("Warning IDs", replay.warning_ids, markdown)
        lines += list_field("Info IDs", replay.info_ids, markdown)
        lines += list_field("Trace IDs", replay.trace_ids, markdown)
        lines += list_field("Releases", replay.releases, markdown)
        lines += list_field("Tags", [f"{key}: {', '.join(values)}" for key, values in replay.tags.items()], markdown)
        return lines

    def detailed(self, markdown: bool) -> str:
        lines = [heading(self.title, 1, markdown), ""]
        if markdown:
            lines += [section("Summary", 2, markdown), ""]
            lines += table(self.SUMMARY_HEADERS, [self._summary_row(r) for r in self.replays], markdown, align_left=True)
            lines += self._note(markdown)
            lines += ["", section("Replay Details", 2, markdown), ""]
        if not self.replays:
            lines.append("No replays found.")
        for index, replay in enumerate(self.replays, start=1):
            lines.append(heading(f"Replay {index}: {replay.id}", 3, markdown))
            if markdown:
                lines.append("")
            lines += self._replay_lines(replay, markdown)
            lines.append("")
        if not markdown:
            lines += self._note(markdown)
        lines += self._total()
        return "\n".join(lines)

    def summary(self, markdown: bool) -> str:
        lines = [heading(self.title, 1, markdown), ""]
        lines += table(self.SUMMARY_HEADERS, [self._summary_row(r) for r in self.replays], markdown, align_left=True)
        lines += self._note(markdown)
        lines += self._total()
        return "\n".join(lines)


class SetupReport(Report):
    """DSN and a generic SDK init snippet for a freshly created project."""

    def __init__(self, project: CreatedProject, dsn: str, issues_url: str, environment: str | None = None):
        self.project = project
        self.dsn = dsn
        self.issues_url = issues_url
        self.environment = environment

    def snippet(self) -> str:
        lines = ["Sentry.init({", f'  dsn: "{self.dsn}",']
        if self.environment:
            lines.append(f'  environment: "{self.environment}",')
        lines += [
            "  // Set tracesSampleRate to 1.0 to capture 100% of transactions for performance monitoring",
            "  tracesSampleRate: 1.0,",
            "});",
        ]
        return "\n".join(lines)

    def detailed(self, markdown: bool) -> str:
        project = self.project
        lines = [heading(f"Sentry Project Setup: {project.name or project.slug}", 1, markdown), ""]
        lines += [section("Project Information", 2, markdown), ""]
        info = [
            ("Project Name", project.name),
            ("Project Slug", project.slug),
            ("Environment", self.environment),
            ("DSN", code(self.dsn, markdown)),
        ]
        # Plain text keeps the bullets so the block reads as a list
        if markdown:
            lines += fields(info, markdown)
        else:
            lines += [f"- {label}: {value}" for label, value in info if present(value)]

        lines += ["", section("Installation Instructions", 2, markdown), ""]
        lines += [section("Generic Setup", 3, markdown), ""]
        lines += ["```javascript", self.snippet(), "```"] if markdown else [self.snippet()]

        if markdown:
            visit = f"4. Visit your [Sentry dashboard]({self.issues_url}) to view and manage your errors."
        else:
            visit = f"4. Visit your Sentry dashboard to view and manage your errors: {self.issues_url}"
        lines += ["", section("Next Steps", 2, markdown), ""]
        lines += [
            "1. Choose the appropriate SDK for your platform and follow the installation instructions above.",
            "2. Configure additional options as needed for your specific use case.",
            "3. Test your integration by triggering a test event.",
            visit,
        ]
        return "\n".join(lines)
