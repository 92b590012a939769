"""Tests for Sentry request construction."""
from urllib.parse import parse_qsl, urlsplit

from mcp_server_sentry.config import SentryConfig
from mcp_server_sentry.constants import REPLAY_FIELDS
from mcp_server_sentry.params import ListReplaysInput
from mcp_server_sentry.request_builder import (
    create_project_request,
    issue_details_request,
    list_projects_request,
    list_replays_request,
    project_keys_request,
)


def query_pairs(request):
    return parse_qsl(urlsplit(request.url).query)


def replays(**arguments):
    return ListReplaysInput(organization_slug="acme", **arguments)


class TestPaths:
    """Test path construction and encoding."""

    def test_absolute_url_under_api_base(self, config):
        request = list_projects_request(config, "acme")
        assert request.method == "GET"
        assert request.url == "https://sentry.io/api/0/organizations/acme/projects/"

    def test_segments_are_encoded(self, config):
        request = issue_details_request(config, "my org/x", "42")
        assert request.url == "https://sentry.io/api/0/organizations/my%20org%2Fx/issues/42/"

    def test_bearer_token_header(self, config):
        request = project_keys_request(config, "acme", "web")
        assert request.headers["Authorization"] == "Bearer test-token"
        assert request.headers["Content-Type"] == "application/json"

    def test_custom_api_base_without_trailing_slash(self):
        config = SentryConfig(auth_token="t", api_base="https://sentry.example.com/api/0")
        request = list_projects_request(config, "acme")
        assert request.url == "https://sentry.example.com/api/0/organizations/acme/projects/"

    def test_path_strips_query(self, config):
        request = list_replays_request(config, replays(cursor="0:100:0"))
        assert request.path == "https://sentry.io/api/0/organizations/acme/replays/"


class TestCreateProjectBody:
    """Test the project creation payload."""

    def test_name_only(self, config):
        request = create_project_request(config, "acme", "frontend", "Web")
        assert request.method == "POST"
        assert request.url.endswith("/teams/acme/frontend/projects/")
        assert request.json == {"name": "Web"}

    def test_with_platform(self, config):
        request = create_project_request(config, "acme", "frontend", "Web", "javascript")
        assert request.json == {"name": "Web", "platform": "javascript"}


class TestReplayQuery:
    """Test replay filters as query parameters."""

    def test_repeated_project_parameters_in_order(self, config):
        pairs = query_pairs(list_replays_request(config, replays(project_ids=["3", "1", "2"])))
        assert [value for key, value in pairs if key == "project"] == ["3", "1", "2"]

    def test_every_filter_present(self, config):
        request = list_replays_request(
            config,
            replays(environment="production", sort="-started_at", query="count_errors:>0", per_page=25, cursor="0:25:0"),
        )
        params = dict(query_pairs(request))
        assert params["environment"] == "production"
        assert params["sort"] == "-started_at"
        assert params["query"] == "count_errors:>0"
        assert params["per_page"] == "25"
        assert params["cursor"] == "0:25:0"

    def test_stats_period_wins_over_range(self, config):
        request = list_replays_request(
            config, replays(stats_period="1d", start="2024-03-01T00:00:00Z", end="2024-03-02T00:00:00Z")
        )
        keys = [key for key, _ in query_pairs(request)]
        assert ("statsPeriod", "1d") in query_pairs(request)
        assert "start" not in keys
        assert "end" not in keys

    def test_range_sent_as_pair(self, config):
        pairs = query_pairs(
            list_replays_request(config, replays(start="2024-03-01T00:00:00Z", end="2024-03-02T00:00:00Z"))
        )
        assert ("start", "2024-03-01T00:00:00Z") in pairs
        assert ("end", "2024-03-02T00:00:00Z") in pairs

    def test_half_range_dropped(self, config):
        keys = [key for key, _ in query_pairs(list_replays_request(config, replays(start="2024-03-01T00:00:00Z")))]
        assert "start" not in keys
        assert "end" not in keys

    def test_requested_fields(self, config):
        pairs = query_pairs(list_replays_request(config, replays()))
        assert [value for key, value in pairs if key == "field"] == list(REPLAY_FIELDS)
        assert {key for key, _ in pairs} == {"field"}
