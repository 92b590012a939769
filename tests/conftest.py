"""Shared fixtures: configuration, a fake Sentry API and sample payloads."""
import httpx
import pytest

from mcp_server_sentry.config import SentryConfig


class FakeSentry:
    """Answers requests from registered routes and records every request sent."""

    def __init__(self, api_prefix: str = "/api/0/"):
        self.api_prefix = api_prefix
        self.routes = {}
        self.requests = []

    def add(self, method, path, json=None, status=200, text=None):
        def respond(request):
            if text is not None:
                return httpx.Response(status, text=text)
            return httpx.Response(status, json=json)

        self.routes[(method, self.api_prefix + path)] = respond

    def fail(self, method, path, exc_type=httpx.ConnectError, message="connection refused"):
        def respond(request):
            if issubclass(exc_type, httpx.RequestError):
                raise exc_type(message, request=request)
            raise exc_type(message)

        self.routes[(method, self.api_prefix + path)] = respond

    def handler(self, request):
        self.requests.append(request)
        respond = self.routes.get((request.method, request.url.path))
        if respond is None:
            return httpx.Response(404, json={"detail": "The requested resource does not exist"})
        return respond(request)

    def client(self):
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def config():
    return SentryConfig(auth_token="test-token")


@pytest.fixture
def config_with_org():
    return SentryConfig(auth_token="test-token", default_organization="acme")


@pytest.fixture
def sentry():
    return FakeSentry()


@pytest.fixture
async def http_client(sentry):
    async with sentry.client() as client:
        yield client


@pytest.fixture
def project_payload():
    return {
        "id": "1",
        "name": "Web",
        "slug": "web",
        "platform": "javascript",
        "teams": [{"id": "10", "name": "Frontend", "slug": "frontend"}],
        "environments": ["production", "staging"],
        "features": ["releases"],
    }


@pytest.fixture
def issue_payload():
    return {
        "id": "42",
        "shortId": "WEB-7",
        "title": "TypeError: x is undefined",
        "status": "unresolved",
        "level": "error",
        "firstSeen": "2024-03-01T10:00:00Z",
        "lastSeen": "2024-03-02T12:30:00Z",
        "count": "17",
        "userCount": 4,
        "culprit": "app/main.js in render",
        "permalink": "https://acme.sentry.io/issues/42/",
        "project": {"id": "1", "name": "Web", "slug": "web"},
        "stats": {
            "24h": [[1709287200, 3], [1709290800, 2]],
            "30d": [[1709251200, 5]],
        },
        "firstRelease": {
            "version": "web@1.2.0",
            "shortVersion": "1.2.0",
            "dateCreated": "2024-02-28T09:00:00Z",
            "projects": [{"name": "Web", "slug": "web"}],
        },
        "activity": [{"type": "set_resolved", "dateCreated": "2024-03-02T13:00:00Z", "user": {"name": "Ada"}}],
        "tags": [{"key": "browser", "value": "Chrome"}],
    }


@pytest.fixture
def event_lookup_payload():
    return {
        "organizationSlug": "acme",
        "projectSlug": "web",
        "groupId": "42",
        "eventId": "ab29e1067f214acb8ce89f3a03be25e8",
        "event": {
            "eventID": "ab29e1067f214acb8ce89f3a03be25e8",
            "title": "TypeError: x is undefined",
            "platform": "javascript",
            "dateCreated": "2024-03-02T12:30:00Z",
            "dateReceived": "2024-03-02T12:30:01Z",
            "size": 2048,
            "type": "error",
            "tags": [{"key": "level", "value": "error"}, {"key": "release", "value": "web@1.2.0"}],
            "user": {"id": "u1", "email": "ada@example.com"},
            "context": {"build": "1234"},
            "entries": [
                {
                    "type": "exception",
                    "data": {
                        "values": [
                            {
                                "type": "TypeError",
                                "value": "x is undefined",
                                "stacktrace": {
                                    "frames": [
                                        {
                                            "filename": "app/main.js",
                                            "lineNo": 12,
                                            "function": "render",
                                            "context": [[12, "return x.value;"]],
                                        }
                                    ]
                                },
                            }
                        ]
                    },
                },
                {
                    "type": "request",
                    "data": {
                        "url": "https://example.com/checkout",
                        "method": "POST",
                        "headers": [["Accept", "application/json"]],
                    },
                },
            ],
        },
    }


@pytest.fixture
def replay_payload():
    return {
        "id": "r1",
        "project_id": "1",
        "started_at": "2024-03-02T12:00:00Z",
        "finished_at": "2024-03-02T12:02:05Z",
        "duration": 125,
        "environment": "production",
        "platform": "javascript",
        "activity": 6,
        "has_viewed": True,
        "user": {"display_name": "Ada", "email": "ada@example.com"},
        "browser": {"name": "Chrome", "version": "122.0"},
        "os": {"name": "macOS", "version": "14.3"},
        "device": {"name": "Mac", "brand": "Apple", "model": None},
        "sdk": {"name": "sentry.javascript.react", "version": "7.100.0"},
        "count_dead_clicks": 2,
        "count_rage_clicks": 1,
        "count_errors": 3,
        "count_urls": 2,
        "urls": ["https://example.com/", "https://example.com/checkout"],
        "error_ids": ["e1"],
        "trace_ids": ["t1"],
        "releases": ["web@1.2.0"],
        "tags": {"browser.name": ["Chrome"]},
    }
