import asyncio
import logging
import sys

import click
import httpx
import mcp.server.stdio
import mcp.types as types
from mcp.server import NotificationOptions, Server
from mcp.server.models import InitializationOptions
from mcp.shared.exceptions import McpError

from .config import SentryConfig
from .constants import (
    API_BASE_ENV_VAR,
    AUTH_TOKEN_ENV_VARS,
    DEFAULT_ORG_ENV_VAR,
    SENTRY_API_BASE,
    SERVER_NAME,
    SERVER_VERSION,
)
from .errors import ConfigurationError
from .params import input_schema
from .tools import TOOLS, ToolSpec, run_tool
from .transport import create_http_client

logger = logging.getLogger(__name__)


def to_mcp_tool(spec: ToolSpec) -> types.Tool:
    return types.Tool(
        name=spec.name,
        description=spec.description,
        inputSchema=input_schema(spec.input_model),
    )


def create_server(config: SentryConfig, http_client: httpx.AsyncClient) -> Server:
    """Build the MCP server with every tool bound to the given config and client."""
    server = Server(SERVER_NAME)

    @server.list_tools()
    async def handle_list_tools() -> list[types.Tool]:
        return [to_mcp_tool(spec) for spec in TOOLS]

    @server.call_tool()
    async def handle_call_tool(name: str, arguments: dict | None) -> list[types.TextContent]:
        result = await run_tool(name, arguments, http_client, config)
        if result.is_error:
            raise McpError(types.ErrorData(code=types.INTERNAL_ERROR, message=result.content))
        return [types.TextContent(type="text", text=result.content)]

    return server


async def serve(config: SentryConfig) -> None:
    """Serve MCP over stdio until the client disconnects."""
    async with create_http_client() as http_client:
        server = create_server(config, http_client)
        logger.info(f"Starting {SERVER_NAME} MCP server {SERVER_VERSION} against {config.api_base}")
        async with mcp.server.stdio.stdio_server() as (read_stream, write_stream):
            await server.run(
                read_stream,
                write_stream,
                InitializationOptions(
                    server_name=SERVER_NAME,
                    server_version=SERVER_VERSION,
                    capabilities=server.get_capabilities(
                        notification_options=NotificationOptions(),
                        experimental_capabilities={},
                    ),
                ),
            )


def _log_level(verbose: int) -> int:
    if verbose >= 2:
        return logging.DEBUG
    if verbose == 1:
        return logging.INFO
    return logging.WARNING


@click.command()
@click.option(
    "--auth-token",
    envvar=list(AUTH_TOKEN_ENV_VARS),
    required=True,
    help="Sentry authentication token",
)
@click.option(
    "--organization",
    envvar=DEFAULT_ORG_ENV_VAR,
    default=None,
    help="Default organization slug for issue references that do not name one",
)
@click.option(
    "--api-base",
    envvar=API_BASE_ENV_VAR,
    default=SENTRY_API_BASE,
    show_default=True,
    help="Sentry API base URL",
)
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (-v info, -vv debug)")
def main(auth_token: str, organization: str | None, api_base: str, verbose: int):
    # stdout carries the MCP protocol
    logging.basicConfig(
        level=_log_level(verbose),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        config = SentryConfig(auth_token=auth_token, default_organization=organization or None, api_base=api_base)
    except ConfigurationError as e:
        raise click.UsageError(e.message) from e

    asyncio.run(serve(config))
