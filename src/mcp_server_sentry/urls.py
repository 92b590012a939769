import logging
import re
from dataclasses import dataclass
from urllib.parse import urlparse

from .constants import SENTRY_DOMAIN
from .errors import ValidationError

logger = logging.getLogger(__name__)

_ORG_SLUG_PATTERN = re.compile(r"^[a-zA-Z0-9](?:[-_a-zA-Z0-9]*[a-zA-Z0-9])?$")


@dataclass(frozen=True)
class IssueReference:
    """An issue ID plus the organization slug it was qualified with, if any."""

    org_slug: str | None
    issue_id: str


def parse_sentry_url(url: str) -> IssueReference:
    """
    Parses and validates a Sentry issue URL.

    Accepted shapes:
        https://<org>.sentry.io/issues/<id>/
        https://<org>.sentry.io/organizations/<org>/issues/<id>/
        https://sentry.io/organizations/<org>/issues/<id>/

    The query string and fragment are ignored. A URL on the bare sentry.io
    host with no /organizations/ segment carries no organization slug.

    Raises:
        ValidationError: If the URL is not a recognisable Sentry issue URL
    """
    logger.debug(f"Parsing URL: {url}")
    parsed = urlparse(url)

    if parsed.scheme not in ("http", "https"):
        raise ValidationError("Invalid URL scheme. Must be http or https")

    host = (parsed.hostname or "").lower()
    if host == SENTRY_DOMAIN:
        host_org = None
    elif host.endswith(f".{SENTRY_DOMAIN}"):
        host_org = host.split(".")[0]
    else:
        raise ValidationError(f"Invalid Sentry URL. Host must be {SENTRY_DOMAIN} or end with .{SENTRY_DOMAIN}")

    path_parts = [p for p in parsed.path.split("/") if p]
    logger.debug(f"Path parts after cleaning: {path_parts}")

    if len(path_parts) >= 4 and path_parts[0] == "organizations" and path_parts[2] == "issues":
        org_slug, issue_id = path_parts[1], path_parts[3]
    elif len(path_parts) >= 2 and path_parts[0] == "issues":
        org_slug, issue_id = host_org, path_parts[1]
    else:
        raise ValidationError(
            f"Failed to parse Sentry issue URL: {url}. Expected /issues/{{id}} or /organizations/{{org}}/issues/{{id}}"
        )

    if org_slug is not None and not _is_valid_org_slug(org_slug):
        raise ValidationError(f"Invalid organization slug format: {org_slug}")
    if not issue_id.isdigit():
        raise ValidationError(f"Invalid issues ID format: {issue_id}")

    result = IssueReference(org_slug=org_slug, issue_id=issue_id)
    logger.debug(f"Successfully parsed URL into: {result}")
    return result


def _is_valid_org_slug(slug: str) -> bool:
    """
    Validates organization slug format.
    Alphanumeric with hyphen or underscore separators, 1-64 chars
    """
    if not slug or len(slug) > 64:
        return False
    return bool(_ORG_SLUG_PATTERN.match(slug))


def extract_issue_id(issue_id_or_url: str) -> IssueReference:
    """
    Extracts the Sentry issue ID and organization slug from either a full URL,
    org_slug:issue_id format, or standalone ID.

    Args:
        issue_id_or_url: Full URL, "org_slug:issue_id" format, or just the ID

    Returns:
        IssueReference, whose org_slug is None when the reference did not name one
    """
    value = issue_id_or_url.strip()
    if not value:
        raise ValidationError("Missing issue_id_or_url argument")

    if value.startswith(("http://", "https://")):
        return parse_sentry_url(value)

    if ":" in value:
        org_slug, issue_id = (part.strip() for part in value.split(":", 1))
        if not _is_valid_org_slug(org_slug):
            raise ValidationError(f"Invalid organization slug format: {org_slug}")
        if not issue_id.isdigit():
            raise ValidationError("Invalid Sentry issue ID. Must be a numeric value.")
        return IssueReference(org_slug=org_slug, issue_id=issue_id)

    if not value.isdigit():
        raise ValidationError(
            "Invalid Sentry issue ID. Must be either a URL, 'org_slug:issue_id', or just the numeric issue ID"
        )
    return IssueReference(org_slug=None, issue_id=value)
