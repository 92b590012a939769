"""Utility functions for the Sentry server."""

import json
import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


def redacted_headers(headers: httpx.Headers) -> httpx.Headers:
    """Copy of the headers with the bearer token masked."""
    safe = headers.copy()
    if "authorization" in safe:
        safe["authorization"] = "Bearer ***"
    return safe


def log_response(response: httpx.Response, context: str = "") -> None:
    """Helper function to log API response details"""
    if not logger.isEnabledFor(logging.DEBUG):
        return
    logger.debug(f"{context} API Request URL: {response.request.method} {response.request.url}")
    logger.debug(f"{context} API Request Headers: {redacted_headers(response.request.headers)}")
    logger.debug(f"{context} API Response Status: {response.status_code}")
    logger.debug(f"{context} API Response Headers: {response.headers}")

    try:
        content = response.json()
        logger.debug(f"{context} API Response Content: {json.dumps(content, indent=2)}")
    except ValueError:
        logger.debug(f"{context} API Response Content (raw): {response.text}")


def create_stacktrace(event: dict[str, Any]) -> str | None:
    """
    Creates a formatted stacktrace string from a Sentry event.

    Every exception entry contributes its type and value followed by one
    "file:line in function" line per frame, plus the frame's source context
    when Sentry sent it.

    Returns:
        The formatted text, or None if the event has no exception entry
    """
    stacktraces = []
    for entry in event.get("entries") or []:
        if not isinstance(entry, dict) or entry.get("type") != "exception":
            continue

        for exception in (entry.get("data") or {}).get("values") or []:
            exception_type = exception.get("type", "Unknown")
            exception_value = exception.get("value", "")

            stacktrace_text = f"Exception: {exception_type}: {exception_value}\n"
            stacktrace = exception.get("stacktrace")
            if stacktrace:
                stacktrace_text += "\nStacktrace:\n"
                for frame in stacktrace.get("frames") or []:
                    filename = frame.get("filename") or "Unknown"
                    lineno = frame.get("lineNo") or "?"
                    function = frame.get("function") or "Unknown"
                    stacktrace_text += f"{filename}:{lineno} in {function}\n"

                    for ctx_line in frame.get("context") or []:
                        if isinstance(ctx_line, (list, tuple)) and len(ctx_line) == 2:
                            stacktrace_text += f"    {ctx_line[1]}\n"

            stacktraces.append(stacktrace_text)

    return "\n".join(stacktraces).rstrip("\n") if stacktraces else None
