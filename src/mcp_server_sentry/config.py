import logging
from dataclasses import dataclass

from .constants import MISSING_AUTH_TOKEN_MESSAGE, MISSING_ORGANIZATION_MESSAGE, SENTRY_API_BASE
from .errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SentryConfig:
    """Process-wide settings, built once at startup and passed to every handler."""

    auth_token: str
    default_organization: str | None = None
    api_base: str = SENTRY_API_BASE

    def __post_init__(self):
        if not self.auth_token:
            raise ConfigurationError(MISSING_AUTH_TOKEN_MESSAGE)
        # Path templates are relative, so the base must end with a slash
        if not self.api_base.endswith("/"):
            object.__setattr__(self, "api_base", self.api_base + "/")

    def __repr__(self) -> str:
        return (
            f"SentryConfig(auth_token='***', default_organization={self.default_organization!r}, "
            f"api_base={self.api_base!r})"
        )

    def resolve_organization(self, *candidates: str | None) -> str:
        """Return the first non-empty candidate slug, falling back to the default organization."""
        for candidate in candidates:
            if candidate:
                return candidate
        if self.default_organization:
            logger.debug(f"Using default organization slug: {self.default_organization}")
            return self.default_organization
        raise ConfigurationError(MISSING_ORGANIZATION_MESSAGE)

    @property
    def web_base(self) -> str:
        """Web UI root matching the API base, e.g. https://sentry.io for https://sentry.io/api/0/."""
        base = self.api_base.rstrip("/")
        if base.endswith("/api/0"):
            base = base[: -len("/api/0")]
        return base
