"""Typed records for the Sentry resources the reports read.

Each record keeps only the fields a renderer touches. Unknown fields in the
JSON are ignored and absent optional fields become None or an empty list.
"""

from dataclasses import dataclass, field
from typing import Any

from .errors import MalformedResponseError
from .utils import create_stacktrace

StatPoint = tuple[int, Any]


def _dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _stats(raw: Any, period: str) -> list[StatPoint]:
    points = []
    for pair in _list(raw):
        if not isinstance(pair, (list, tuple)) or len(pair) != 2 or not isinstance(pair[0], (int, float)):
            raise MalformedResponseError(f"invalid {period} stats entry: {pair!r}")
        points.append((int(pair[0]), pair[1]))
    return points


def _tags(raw: Any) -> list["Tag"]:
    return [Tag.from_dict(tag) for tag in _list(raw) if isinstance(tag, dict)]


@dataclass
class Tag:
    key: str
    value: Any = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Tag":
        return cls(key=data.get("key", ""), value=data.get("value"))


def tag_value(tags: list[Tag], key: str) -> Any:
    for tag in tags:
        if tag.key == key:
            return tag.value
    return None


@dataclass
class ProjectRef:
    id: Any = None
    name: str | None = None
    slug: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "ProjectRef":
        data = _dict(data)
        return cls(id=data.get("id"), name=data.get("name"), slug=data.get("slug"))


@dataclass
class Project:
    id: Any
    name: str | None
    slug: str | None
    platform: str | None = None
    teams: list[str] = field(default_factory=list)
    environments: list[str] = field(default_factory=list)
    features: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Project":
        return cls(
            id=data.get("id"),
            name=data.get("name"),
            slug=data.get("slug"),
            platform=data.get("platform"),
            teams=[
                str(label)
                for team in _list(data.get("teams"))
                if isinstance(team, dict) and (label := team.get("name") or team.get("slug"))
            ],
            environments=[str(env) for env in _list(data.get("environments"))],
            features=[str(feature) for feature in _list(data.get("features"))],
        )


@dataclass
class CreatedProject:
    id: Any
    name: str | None
    slug: str
    platform: str | None = None
    date_created: str | None = None
    status: str | None = None
    features: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CreatedProject":
        return cls(
            id=data.get("id"),
            name=data.get("name"),
            slug=data["slug"],
            platform=data.get("platform"),
            date_created=data.get("dateCreated"),
            status=data.get("status"),
            features=[str(feature) for feature in _list(data.get("features"))],
        )


@dataclass
class Dsn:
    public: str | None = None
    secret: str | None = None
    csp: str | None = None
    security: str | None = None
    minidump: str | None = None
    cdn: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "Dsn":
        data = _dict(data)
        return cls(**{name: data.get(name) for name in ("public", "secret", "csp", "security", "minidump", "cdn")})


@dataclass
class ClientKey:
    id: Any
    name: str | None
    public: str | None = None
    secret: str | None = None
    project_id: Any = None
    is_active: bool | None = None
    date_created: str | None = None
    dsn: Dsn = field(default_factory=Dsn)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ClientKey":
        return cls(
            id=data.get("id"),
            name=data.get("name"),
            public=data.get("public"),
            secret=data.get("secret"),
            project_id=data.get("projectId"),
            is_active=data.get("isActive"),
            date_created=data.get("dateCreated"),
            dsn=Dsn.from_dict(data.get("dsn")),
        )


@dataclass
class User:
    id: Any = None
    name: str | None = None
    email: str | None = None
    username: str | None = None
    ip_address: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "User | None":
        if not isinstance(data, dict):
            return None
        return cls(
            id=data.get("id"),
            name=data.get("name"),
            email=data.get("email"),
            username=data.get("username"),
            ip_address=data.get("ip_address"),
        )

    @property
    def label(self) -> Any:
        return self.email or self.username or self.id


@dataclass
class IssueSummary:
    """An issue as it appears in list and short-ID responses."""

    id: Any
    title: str | None = None
    short_id: str | None = None
    status: str | None = None
    level: str | None = None
    first_seen: str | None = None
    last_seen: str | None = None
    count: Any = None
    user_count: Any = None
    culprit: str | None = None
    permalink: str | None = None
    project: ProjectRef = field(default_factory=ProjectRef)
    stats_24h: list[StatPoint] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "IssueSummary":
        stats = _dict(data.get("stats"))
        return cls(
            id=data.get("id"),
            title=data.get("title"),
            short_id=data.get("shortId"),
            status=data.get("status"),
            level=data.get("level"),
            first_seen=data.get("firstSeen"),
            last_seen=data.get("lastSeen"),
            count=data.get("count"),
            user_count=data.get("userCount"),
            culprit=data.get("culprit"),
            permalink=data.get("permalink"),
            project=ProjectRef.from_dict(data.get("project")),
            stats_24h=_stats(stats.get("24h"), "24h"),
        )


@dataclass
class ShortIdResolution:
    short_id: str | None
    organization_slug: str | None
    group: IssueSummary

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ShortIdResolution":
        group = data["group"]
        if not isinstance(group, dict):
            raise MalformedResponseError("short ID resolution 'group' is not an object")
        return cls(
            short_id=data.get("shortId"),
            organization_slug=data.get("organizationSlug"),
            group=IssueSummary.from_dict(group),
        )


@dataclass
class Release:
    version: str | None = None
    short_version: str | None = None
    date_created: str | None = None
    first_event: str | None = None
    last_event: str | None = None
    projects: list[ProjectRef] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "Release | None":
        if not isinstance(data, dict):
            return None
        return cls(
            version=data.get("version"),
            short_version=data.get("shortVersion"),
            date_created=data.get("dateCreated"),
            first_event=data.get("firstEvent"),
            last_event=data.get("lastEvent"),
            projects=[ProjectRef.from_dict(p) for p in _list(data.get("projects"))],
        )


@dataclass
class Activity:
    type: str | None
    date_created: str | None
    user_name: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Activity":
        user = data.get("user")
        return cls(
            type=data.get("type"),
            date_created=data.get("dateCreated"),
            user_name=user.get("name") if isinstance(user, dict) else None,
        )


@dataclass
class IssueDetails(IssueSummary):
    first_release: Release | None = None
    activity: list[Activity] = field(default_factory=list)
    tags: list[Tag] = field(default_factory=list)
    stats_30d: list[StatPoint] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "IssueDetails":
        summary = IssueSummary.from_dict(data)
        return cls(
            **vars(summary),
            first_release=Release.from_dict(data.get("firstRelease")),
            activity=[Activity.from_dict(a) for a in _list(data.get("activity")) if isinstance(a, dict)],
            tags=_tags(data.get("tags")),
            stats_30d=_stats(_dict(data.get("stats")).get("30d"), "30d"),
        )

    @property
    def total_24h(self) -> Any:
        return sum(count for _, count in self.stats_24h if isinstance(count, (int, float)))


@dataclass
class ErrorEvent:
    """An event as listed under a project or an issue."""

    event_id: str
    title: str | None = None
    group_id: Any = None
    project_id: Any = None
    date_created: str | None = None
    platform: str | None = None
    event_type: str | None = None
    location: str | None = None
    culprit: str | None = None
    tags: list[Tag] = field(default_factory=list)
    user: User | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ErrorEvent":
        return cls(
            event_id=data["eventID"],
            title=data.get("title"),
            group_id=data.get("groupID"),
            project_id=data.get("projectID"),
            date_created=data.get("dateCreated"),
            platform=data.get("platform"),
            event_type=data.get("event.type"),
            location=data.get("location"),
            culprit=data.get("culprit"),
            tags=_tags(data.get("tags")),
            user=User.from_dict(data.get("user")),
        )

    @property
    def level(self) -> Any:
        return tag_value(self.tags, "level") or "unknown"

    @property
    def environment(self) -> Any:
        return tag_value(self.tags, "environment") or "unknown"


@dataclass
class RequestInfo:
    url: str | None = None
    method: str | None = None
    headers: list[tuple[str, Any]] = field(default_factory=list)

    @classmethod
    def from_entries(cls, entries: list[Any]) -> "RequestInfo | None":
        for entry in entries:
            if isinstance(entry, dict) and entry.get("type") == "request":
                data = _dict(entry.get("data"))
                headers = [
                    (str(pair[0]), pair[1])
                    for pair in _list(data.get("headers"))
                    if isinstance(pair, (list, tuple)) and len(pair) == 2
                ]
                return cls(url=data.get("url"), method=data.get("method"), headers=headers)
        return None


@dataclass
class EventDetails:
    """The event-ID lookup result: the event plus where it lives."""

    event_id: str | None
    organization_slug: str | None
    project_slug: str | None
    group_id: Any
    title: str | None = None
    platform: str | None = None
    date_created: str | None = None
    date_received: str | None = None
    size: Any = None
    type: str | None = None
    tags: list[Tag] = field(default_factory=list)
    user: User | None = None
    request: RequestInfo | None = None
    context: dict[str, Any] = field(default_factory=dict)
    stacktrace: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EventDetails":
        event = data["event"]
        if not isinstance(event, dict):
            raise MalformedResponseError("event lookup 'event' is not an object")
        return cls(
            event_id=event.get("eventID"),
            organization_slug=data.get("organizationSlug"),
            project_slug=data.get("projectSlug"),
            group_id=data.get("groupId"),
            title=event.get("title") or _dict(event.get("metadata")).get("title"),
            platform=event.get("platform"),
            date_created=event.get("dateCreated"),
            date_received=event.get("dateReceived"),
            size=event.get("size"),
            type=event.get("type"),
            tags=_tags(event.get("tags")),
            user=User.from_dict(event.get("user")),
            request=RequestInfo.from_entries(_list(event.get("entries"))),
            context=_dict(event.get("context")),
            stacktrace=create_stacktrace(event),
        )


@dataclass
class ReplayUser:
    display_name: str | None = None
    username: str | None = None
    email: str | None = None

    @property
    def label(self) -> str:
        name = self.display_name or self.username or "Unknown"
        return f"{name} ({self.email})" if self.email else name


@dataclass
class Replay:
    id: str
    project_id: Any = None
    started_at: str | None = None
    finished_at: str | None = None
    duration: Any = None
    environment: str | None = None
    platform: str | None = None
    activity: Any = None
    has_viewed: bool = False
    user: ReplayUser | None = None
    browser: str | None = None
    os: str | None = None
    device: str | None = None
    sdk: str | None = None
    count_dead_clicks: Any = None
    count_rage_clicks: Any = None
    count_errors: Any = None
    count_warnings: Any = None
    count_infos: Any = None
    count_urls: Any = None
    urls: list[str] = field(default_factory=list)
    error_ids: list[str] = field(default_factory=list)
    warning_ids: list[str] = field(default_factory=list)
    info_ids: list[str] = field(default_factory=list)
    trace_ids: list[str] = field(default_factory=list)
    releases: list[str] = field(default_factory=list)
    tags: dict[str, list[str]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Replay":
        user = data.get("user")
        device = _dict(data.get("device"))
        device_label = None
        if device:
            device_label = device.get("name") or "Unknown"
            if brand_model := _join_present(device.get("brand"), device.get("model")):
                device_label += f" ({brand_model})"
        return cls(
            id=data["id"],
            project_id=data.get("project_id"),
            started_at=data.get("started_at"),
            finished_at=data.get("finished_at"),
            duration=data.get("duration"),
            environment=data.get("environment"),
            platform=data.get("platform"),
            activity=data.get("activity"),
            has_viewed=bool(data.get("has_viewed")),
            user=ReplayUser(
                display_name=user.get("display_name"),
                username=user.get("username"),
                email=user.get("email"),
            )
            if isinstance(user, dict)
            else None,
            browser=_name_version(data.get("browser")),
            os=_name_version(data.get("os")),
            device=device_label,
            sdk=_name_version(data.get("sdk")),
            count_dead_clicks=data.get("count_dead_clicks"),
            count_rage_clicks=data.get("count_rage_clicks"),
            count_errors=data.get("count_errors"),
            count_warnings=data.get("count_warnings"),
            count_infos=data.get("count_infos"),
            count_urls=data.get("count_urls"),
            urls=[str(u) for u in _list(data.get("urls"))],
            error_ids=[str(i) for i in _list(data.get("error_ids"))],
            warning_ids=[str(i) for i in _list(data.get("warning_ids"))],
            info_ids=[str(i) for i in _list(data.get("info_ids"))],
            trace_ids=[str(i) for i in _list(data.get("trace_ids"))],
            releases=[str(r) for r in _list(data.get("releases"))],
            tags={
                str(key): [str(v) for v in values] if isinstance(values, list) else [str(values)]
                for key, values in _dict(data.get("tags")).items()
            },
        )


def _join_present(*parts: Any) -> str:
    return " ".join(str(p) for p in parts if p)


def _name_version(data: Any) -> str | None:
    if not isinstance(data, dict) or not (data.get("name") or data.get("version")):
        return None
    return _join_present(data.get("name"), data.get("version"))
