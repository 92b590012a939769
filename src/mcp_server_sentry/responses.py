"""Status classification and minimal shape checks for Sentry responses.

Renderers only ever see payloads that passed through these functions.
"""

import logging
from typing import Any

import httpx

from .errors import MalformedResponseError, RemoteApiError

logger = logging.getLogger(__name__)


def check_response(response: httpx.Response, action: str | None = None) -> Any:
    """Return the decoded JSON body of a 2xx response.

    Raises:
        RemoteApiError: For any status outside 200-299, carrying the raw body
        MalformedResponseError: If a 2xx body is not JSON
    """
    if not response.is_success:
        logger.error(f"API request failed: {response.status_code} {response.text}")
        raise RemoteApiError(response.status_code, response.reason_phrase, response.text, action)

    try:
        return response.json()
    except ValueError as e:
        raise MalformedResponseError("response body is not valid JSON") from e


def expect_list(payload: Any, what: str, identity: str | None = None) -> list[dict[str, Any]]:
    """Require a JSON array of objects, each carrying the identity field if one is named."""
    if not isinstance(payload, list):
        raise MalformedResponseError(f"expected a list of {what}, got {type(payload).__name__}")
    for index, item in enumerate(payload):
        if not isinstance(item, dict):
            raise MalformedResponseError(f"{what} item {index} is not an object")
        if identity and identity not in item:
            raise MalformedResponseError(f"{what} item {index} has no '{identity}' field")
    return payload


def expect_object(payload: Any, what: str, required_field: str) -> dict[str, Any]:
    """Require a JSON object that carries the named field."""
    if not isinstance(payload, dict):
        raise MalformedResponseError(f"expected {what} object, got {type(payload).__name__}")
    if required_field not in payload:
        raise MalformedResponseError(f"{what} has no '{required_field}' field")
    return payload


def unwrap_data_list(payload: Any, what: str, identity: str | None = None) -> list[dict[str, Any]]:
    """Unwrap a {"data": [...]} envelope; an absent data field means no items."""
    if not isinstance(payload, dict):
        raise MalformedResponseError(f"expected an object with a 'data' list of {what}, got {type(payload).__name__}")
    data = payload.get("data")
    if data is None:
        return []
    return expect_list(data, what, identity)
