"""Entry point for the mcp-ssh server."""

import logging

from mcp_ssh.config import Settings
from mcp_ssh.dependencies import Dependencies
from mcp_ssh.server import configure_logging, create_server

logger = logging.getLogger(__name__)


def run_server() -> None:
    """Run the MCP server with configured transport."""
    settings = Settings.from_env()
    configure_logging(settings)

    mcp = create_server(Dependencies.from_settings(settings))

    if settings.transport == "stdio":
        logger.info("Starting mcp-ssh server (transport=stdio)")
        mcp.run(transport="stdio")
    else:
        logger.info(
            "Starting mcp-ssh server (transport=http, host=%s, port=%d)",
            settings.http_host,
            settings.http_port,
        )
        mcp.run(
            transport="http",
            host=settings.http_host,
            port=settings.http_port,
        )


if __name__ == "__main__":
    run_server()
