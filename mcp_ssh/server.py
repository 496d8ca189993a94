"""mcp-ssh FastMCP server.

This is a thin wrapper that wires together the MCP server with tools and resources.
All business logic is delegated to the tools/, resources/, and services/ modules.
"""

import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import PlainTextResponse

from mcp_ssh.config import Settings
from mcp_ssh.dependencies import Dependencies
from mcp_ssh.middleware import ErrorHandlingMiddleware, LoggingMiddleware
from mcp_ssh.resources import register_resources
from mcp_ssh.tools import register_tools
from mcp_ssh.utils.console import ConsoleFormatter

SERVER_NAME = "mcp-ssh"

NOISY_LOGGERS = (
    "asyncssh",
    "fastmcp",
    "mcp",
    "uvicorn",
    "uvicorn.access",
    "uvicorn.error",
    "httpx",
    "httpcore",
    "starlette",
    "anyio",
)

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    """Configure logging for the mcp_ssh package.

    Logs go to stderr; stdout carries the stdio transport.
    """
    use_colors = settings.log_colors and sys.stderr.isatty()

    package_logger = logging.getLogger("mcp_ssh")
    package_logger.setLevel(getattr(logging, settings.log_level, logging.INFO))

    # Only add handler if not already configured
    if not package_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(ConsoleFormatter(use_colors=use_colors))
        package_logger.addHandler(handler)
        package_logger.propagate = False

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def configure_middleware(server: FastMCP, settings: Settings) -> None:
    """Add middleware in order: ErrorHandling -> Logging (with timing)."""
    server.add_middleware(
        ErrorHandlingMiddleware(include_traceback=settings.include_traceback)
    )
    server.add_middleware(
        LoggingMiddleware(
            include_payloads=settings.log_payloads,
            slow_threshold_ms=settings.slow_threshold_ms,
        )
    )


def create_server(deps: Dependencies | None = None) -> FastMCP:
    """Create and configure the MCP server with middleware, tools and resources.

    Args:
        deps: Dependencies to serve (default: built from environment)

    Returns:
        Configured FastMCP server instance
    """
    if deps is None:
        deps = Dependencies.create()

    @asynccontextmanager
    async def app_lifespan(server: FastMCP) -> AsyncIterator[dict[str, Any]]:
        logger.info("%s server starting up", SERVER_NAME)
        hosts = deps.resolver.list_hosts()
        logger.info(
            "Loaded %d SSH host(s): %s",
            len(hosts),
            ", ".join(host.name for host in hosts) if hosts else "(none)",
        )
        logger.info("%s server ready to accept connections", SERVER_NAME)
        try:
            yield {"hosts": [host.name for host in hosts]}
        finally:
            # Sessions are per operation, so there is nothing to drain
            logger.info("%s server shutting down", SERVER_NAME)

    server = FastMCP(SERVER_NAME, lifespan=app_lifespan)

    configure_middleware(server, deps.settings)
    register_tools(server, deps)
    register_resources(server, deps)

    @server.custom_route("/health", methods=["GET"])
    async def health_check(request: Request) -> PlainTextResponse:
        """Health check endpoint for the HTTP transport."""
        client_host = request.client.host if request.client else "unknown"
        logger.debug("Health check from %s", client_host)
        return PlainTextResponse("OK")

    return server
