import logging

import httpx

from .constants import REQUEST_TIMEOUT
from .errors import NetworkError
from .request_builder import RequestDescriptor
from .utils import log_response

logger = logging.getLogger(__name__)


def create_http_client(**kwargs) -> httpx.AsyncClient:
    """The client shared by every tool call for the lifetime of the server."""
    kwargs.setdefault("timeout", REQUEST_TIMEOUT)
    kwargs.setdefault("follow_redirects", True)
    return httpx.AsyncClient(**kwargs)


async def execute(http_client: httpx.AsyncClient, request: RequestDescriptor, context: str = "") -> httpx.Response:
    """Send one request and return the response whatever its status.

    Raises:
        NetworkError: If no HTTP response was received (DNS, connection, timeout)
    """
    logger.debug(f"{context} Making request to: {request.method} {request.url}")
    try:
        response = await http_client.request(
            request.method,
            request.url,
            headers=request.headers,
            json=request.json,
        )
    except httpx.RequestError as e:
        logger.error(f"{context} Request to {request.path} failed: {e!r}")
        raise NetworkError(f"Network error while contacting Sentry: {e}") from e

    log_response(response, context)
    return response
