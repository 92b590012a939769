"""Error taxonomy for tool invocations.

Every error raised while serving a tool call derives from SentryError and is
converted into an error result at the tool boundary (see tools.run_tool).
"""


class SentryError(Exception):
    """Base class for all errors surfaced to the calling assistant."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(SentryError):
    """A required setting (auth token, organization slug) is unavailable."""


class ValidationError(SentryError):
    """Caller-supplied arguments do not match the tool's parameter schema."""


class NetworkError(SentryError):
    """The request never produced an HTTP response (DNS, connection, timeout)."""


class RemoteApiError(SentryError):
    """Sentry answered with a non-2xx status."""

    def __init__(self, status_code: int, reason: str, body: str, action: str | None = None):
        self.status_code = status_code
        self.reason = reason
        self.body = body
        prefix = f"Failed to {action}" if action else "Sentry API request failed"
        super().__init__(f"{prefix}: {status_code} {reason}\n{body}".rstrip())


class MalformedResponseError(SentryError):
    """A 2xx response whose body is not JSON or lacks the expected shape."""

    def __init__(self, message: str):
        super().__init__(f"Unexpected API response format: {message}")
