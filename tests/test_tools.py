"""End-to-end tool calls against a fake Sentry API."""
import json
from urllib.parse import parse_qsl

from mcp_server_sentry.constants import MISSING_ORGANIZATION_MESSAGE, PAGINATION_NOTE
from mcp_server_sentry.tools import TOOLS, get_tool, run_tool


class TestToolRegistry:
    """Test the advertised tool set."""

    def test_tool_names(self):
        assert [spec.name for spec in TOOLS] == [
            "list_projects",
            "resolve_short_id",
            "get_sentry_event",
            "list_error_events_in_project",
            "create_project",
            "list_project_issues",
            "list_issue_events",
            "get_sentry_issue",
            "list_organization_replays",
            "setup_sentry",
        ]

    def test_lookup(self):
        assert get_tool("get_sentry_issue").name == "get_sentry_issue"
        assert get_tool("get_replay") is None


class TestRunTool:
    """Test results and error conversion at the tool boundary."""

    async def test_list_projects_summary(self, sentry, http_client, config, project_payload):
        sentry.add("GET", "organizations/acme/projects/", json=[project_payload])

        result = await run_tool(
            "list_projects", {"organization_slug": "acme", "view": "summary"}, http_client, config
        )

        assert not result.is_error
        assert result.content == "# Sentry Projects\n\n- **Web** (web): ID 1\n\nTotal Projects: 1"
        assert sentry.requests[0].headers["Authorization"] == "Bearer test-token"

    async def test_non_2xx_is_error_with_status(self, sentry, http_client, config):
        sentry.add("GET", "organizations/acme/projects/", status=403, json={"detail": "Forbidden"})

        result = await run_tool("list_projects", {"organization_slug": "acme"}, http_client, config)

        assert result.is_error
        assert "403" in result.content
        assert result.content.startswith("Failed to fetch projects")

    async def test_non_json_body_is_error(self, sentry, http_client, config):
        sentry.add("GET", "projects/acme/web/issues/", text="<html>maintenance</html>")

        result = await run_tool(
            "list_project_issues", {"organization_slug": "acme", "project_slug": "web"}, http_client, config
        )

        assert result.is_error
        assert result.content.startswith("Unexpected API response format")

    async def test_wrong_shape_is_error(self, sentry, http_client, config):
        sentry.add("GET", "projects/acme/web/events/", json={"detail": "not a list"})

        result = await run_tool(
            "list_error_events_in_project", {"organization_slug": "acme", "project_slug": "web"}, http_client, config
        )

        assert result.is_error
        assert "Unexpected API response format" in result.content
        assert "Error Events" not in result.content

    async def test_network_error(self, sentry, http_client, config):
        sentry.fail("GET", "organizations/acme/projects/")

        result = await run_tool("list_projects", {"organization_slug": "acme"}, http_client, config)

        assert result.is_error
        assert result.content.startswith("Network error while contacting Sentry")
        assert "connection refused" in result.content

    async def test_invalid_arguments_send_nothing(self, sentry, http_client, config):
        result = await run_tool("list_projects", {"format": "html"}, http_client, config)

        assert result.is_error
        assert result.content.startswith("Invalid arguments")
        assert sentry.requests == []

    async def test_unknown_tool(self, http_client, config):
        result = await run_tool("get_replay", {}, http_client, config)
        assert result.is_error
        assert result.content == "Unknown tool: get_replay"

    async def test_unexpected_exception_is_error(self, sentry, http_client, config):
        sentry.fail("GET", "organizations/acme/projects/", exc_type=RuntimeError, message="boom")

        result = await run_tool("list_projects", {"organization_slug": "acme"}, http_client, config)

        assert result.is_error
        assert "boom" in result.content


class TestIssueLookups:
    """Test resolve_short_id and list_issue_events."""

    async def test_resolve_short_id(self, sentry, http_client, config, issue_payload):
        sentry.add(
            "GET",
            "organizations/acme/shortids/WEB-7/",
            json={"shortId": "WEB-7", "organizationSlug": "acme", "group": issue_payload},
        )

        result = await run_tool(
            "resolve_short_id", {"organization_slug": "acme", "short_id": "WEB-7", "format": "plain"}, http_client, config
        )

        assert not result.is_error
        assert result.content.startswith("Issue Details: WEB-7")
        assert "Organization: acme" in result.content
        assert "Permalink: https://acme.sentry.io/issues/42/" in result.content

    async def test_resolve_short_id_without_group(self, sentry, http_client, config):
        sentry.add("GET", "organizations/acme/shortids/WEB-7/", json={"shortId": "WEB-7"})

        result = await run_tool("resolve_short_id", {"organization_slug": "acme", "short_id": "WEB-7"}, http_client, config)

        assert result.is_error
        assert "'group'" in result.content

    async def test_unknown_short_id(self, http_client, config):
        result = await run_tool("resolve_short_id", {"organization_slug": "acme", "short_id": "NOPE-1"}, http_client, config)

        assert result.is_error
        assert result.content.startswith("Failed to resolve short ID: 404 Not Found")

    async def test_list_issue_events(self, sentry, http_client, config, event_lookup_payload):
        event = dict(event_lookup_payload["event"], groupID="42", projectID="1")
        sentry.add("GET", "organizations/acme/issues/42/events/", json=[event])

        result = await run_tool(
            "list_issue_events", {"organization_slug": "acme", "issue_id": "42"}, http_client, config
        )

        assert not result.is_error
        assert result.content.startswith("# Events for Issue: 42")
        assert "- **Project ID**: 1" in result.content
        assert result.content.endswith("Total Events: 1")

    async def test_list_issue_events_empty(self, sentry, http_client, config):
        sentry.add("GET", "organizations/acme/issues/42/events/", json=[])

        result = await run_tool(
            "list_issue_events", {"organization_slug": "acme", "issue_id": "42", "view": "summary"}, http_client, config
        )

        assert not result.is_error
        assert "No events found for this issue." in result.content


class TestIssueReferences:
    """Test organization resolution for issue and event lookups."""

    async def test_issue_url_resolves_org_and_id(self, sentry, http_client, config, issue_payload):
        sentry.add("GET", "organizations/acme/issues/42/", json=issue_payload)

        result = await run_tool(
            "get_sentry_issue", {"issue_id_or_url": "https://acme.sentry.io/issues/42"}, http_client, config
        )

        assert not result.is_error
        assert sentry.requests[0].url.path == "/api/0/organizations/acme/issues/42/"
        assert result.content.startswith("# Issue: TypeError: x is undefined")

    async def test_bare_id_without_org_fails_before_request(self, sentry, http_client, config):
        result = await run_tool("get_sentry_issue", {"issue_id_or_url": "42"}, http_client, config)

        assert result.is_error
        assert result.content == MISSING_ORGANIZATION_MESSAGE
        assert sentry.requests == []

    async def test_bare_id_uses_explicit_org(self, sentry, http_client, config, issue_payload):
        sentry.add("GET", "organizations/globex/issues/42/", json=issue_payload)

        result = await run_tool(
            "get_sentry_issue", {"issue_id_or_url": "42", "organization_slug": "globex"}, http_client, config
        )

        assert not result.is_error

    async def test_bare_id_uses_default_org(self, sentry, http_client, config_with_org, issue_payload):
        sentry.add("GET", "organizations/acme/issues/42/", json=issue_payload)

        result = await run_tool(
            "get_sentry_issue", {"issue_id_or_url": "42", "view": "summary"}, http_client, config_with_org
        )

        assert not result.is_error
        assert "**Short ID**: WEB-7" in result.content

    async def test_embedded_org_wins_over_argument(self, sentry, http_client, config, issue_payload):
        sentry.add("GET", "organizations/acme/issues/42/", json=issue_payload)

        result = await run_tool(
            "get_sentry_issue", {"issue_id_or_url": "acme:42", "organization_slug": "globex"}, http_client, config
        )

        assert not result.is_error
        assert sentry.requests[0].url.path == "/api/0/organizations/acme/issues/42/"

    async def test_event_lookup(self, sentry, http_client, config, event_lookup_payload):
        sentry.add("GET", "organizations/acme/eventids/ab29e1067f214acb8ce89f3a03be25e8/", json=event_lookup_payload)

        result = await run_tool(
            "get_sentry_event",
            {"issue_id_or_url": "acme:42", "event_id": "ab29e1067f214acb8ce89f3a03be25e8"},
            http_client,
            config,
        )

        assert not result.is_error
        assert "## Stack Trace" in result.content

    async def test_invalid_reference(self, sentry, http_client, config):
        result = await run_tool("get_sentry_issue", {"issue_id_or_url": "not-an-issue"}, http_client, config)
        assert result.is_error
        assert sentry.requests == []


class TestProjectCreation:
    """Test create_project and setup_sentry."""

    created = {"id": "5", "name": "Checkout", "slug": "checkout", "platform": "python", "dateCreated": "2024-03-02T12:00:00Z"}
    keys = [{"id": "k1", "name": "Default", "public": "abc", "dsn": {"public": "https://abc@o1.ingest.sentry.io/5"}}]

    async def test_create_project(self, sentry, http_client, config):
        sentry.add("POST", "teams/acme/payments/projects/", status=201, json=self.created)
        sentry.add("GET", "projects/acme/checkout/keys/", json=self.keys)

        result = await run_tool(
            "create_project",
            {"organization_slug": "acme", "team_slug": "payments", "name": "Checkout", "platform": "python"},
            http_client,
            config,
        )

        assert not result.is_error
        assert "`https://abc@o1.ingest.sentry.io/5`" in result.content
        assert json.loads(sentry.requests[0].content) == {"name": "Checkout", "platform": "python"}
        assert sentry.requests[1].url.path == "/api/0/projects/acme/checkout/keys/"

    async def test_create_project_key_failure_is_warning(self, sentry, http_client, config):
        sentry.add("POST", "teams/acme/payments/projects/", status=201, json=self.created)
        sentry.add("GET", "projects/acme/checkout/keys/", status=500, text="oops")

        result = await run_tool(
            "create_project",
            {"organization_slug": "acme", "team_slug": "payments", "name": "Checkout"},
            http_client,
            config,
        )

        assert not result.is_error
        assert "Failed to fetch client keys: 500 Internal Server Error" in result.content
        assert "- **Slug**: checkout" in result.content

    async def test_create_project_failure(self, sentry, http_client, config):
        sentry.add("POST", "teams/acme/payments/projects/", status=409, json={"detail": "A project with this slug already exists."})

        result = await run_tool(
            "create_project",
            {"organization_slug": "acme", "team_slug": "payments", "name": "Checkout"},
            http_client,
            config,
        )

        assert result.is_error
        assert result.content.startswith("Failed to create project: 409 Conflict")
        assert "already exists" in result.content

    async def test_setup_sentry(self, sentry, http_client, config):
        sentry.add("POST", "teams/acme/payments/projects/", status=201, json=self.created)
        sentry.add("GET", "projects/acme/checkout/keys/", json=self.keys)

        result = await run_tool(
            "setup_sentry",
            {"organization_slug": "acme", "team_slug": "payments", "project_name": "Checkout", "environment": "staging"},
            http_client,
            config,
        )

        assert not result.is_error
        assert 'dsn: "https://abc@o1.ingest.sentry.io/5",' in result.content
        assert 'environment: "staging",' in result.content
        assert "https://sentry.io/organizations/acme/issues/" in result.content

    async def test_setup_sentry_without_keys(self, sentry, http_client, config):
        sentry.add("POST", "teams/acme/payments/projects/", status=201, json=self.created)
        sentry.add("GET", "projects/acme/checkout/keys/", json=[])

        result = await run_tool(
            "setup_sentry",
            {"organization_slug": "acme", "team_slug": "payments", "project_name": "Checkout"},
            http_client,
            config,
        )

        assert result.is_error
        assert result.content == "No client keys found for the project. Please check the project settings."


class TestReplays:
    """Test list_organization_replays."""

    async def test_empty_page_with_cursor(self, sentry, http_client, config):
        sentry.add("GET", "organizations/acme/replays/", json={"data": []})

        result = await run_tool(
            "list_organization_replays",
            {"organization_slug": "acme", "cursor": "0:100:0", "project_ids": ["1", "2"], "view": "summary"},
            http_client,
            config,
        )

        assert not result.is_error
        assert PAGINATION_NOTE in result.content
        assert "No replays found." not in result.content
        query = parse_qsl(sentry.requests[0].url.query.decode())
        assert ("cursor", "0:100:0") in query
        assert [value for key, value in query if key == "project"] == ["1", "2"]

    async def test_empty_page_without_cursor(self, sentry, http_client, config):
        sentry.add("GET", "organizations/acme/replays/", json={"data": []})

        result = await run_tool("list_organization_replays", {"organization_slug": "acme"}, http_client, config)

        assert not result.is_error
        assert PAGINATION_NOTE not in result.content
        assert "No replays found." in result.content

    async def test_replays(self, sentry, http_client, config, replay_payload):
        sentry.add("GET", "organizations/acme/replays/", json={"data": [replay_payload]})

        result = await run_tool(
            "list_organization_replays", {"organization_slug": "acme", "format": "plain"}, http_client, config
        )

        assert not result.is_error
        assert "Replay 1: r1" in result.content
        assert "Rage Clicks: 1" in result.content
        assert result.content.endswith("Total Replays: 1")
