"""MCP tool registration for mcp-ssh."""

from typing import TYPE_CHECKING, Annotated, Any, Literal

from mcp_ssh.tools.handlers import (
    build_overrides,
    handle_execute,
    handle_list_hosts,
    handle_transfer,
)

if TYPE_CHECKING:
    from fastmcp import FastMCP

    from mcp_ssh.dependencies import Dependencies


def register_tools(server: "FastMCP", deps: "Dependencies") -> None:
    """Register ssh_list_hosts, ssh_execute and ssh_transfer on the server.

    Args:
        server: FastMCP server instance
        deps: Dependencies the tools operate on
    """

    @server.tool(name="ssh_list_hosts")
    async def ssh_list_hosts() -> dict[str, Any]:
        """List all available SSH hosts from ~/.ssh/config.

        Returns host names, addresses, users, and connection details.
        """
        return handle_list_hosts(deps)

    @server.tool(name="ssh_execute")
    async def ssh_execute(
        hosts: Annotated[
            list[str],
            "List of host names (from ssh_list_hosts) or IP addresses/hostnames to execute on",
        ],
        command: Annotated[str, "The shell command to execute"],
        timeout: Annotated[
            int | None, "Connection timeout in milliseconds (default: 30000)"
        ] = None,
        username: Annotated[
            str | None, "SSH username for direct connection (overrides config)"
        ] = None,
        password: Annotated[
            str | None, "SSH password for direct connection (use with caution)"
        ] = None,
        port: Annotated[int | None, "SSH port for direct connection (default: 22)"] = None,
        privateKeyPath: Annotated[  # noqa: N803
            str | None, "Path to SSH private key file for direct connection"
        ] = None,
    ) -> dict[str, Any]:
        """Execute a command on one or more SSH hosts.

        Runs concurrently on multiple hosts and returns results from each.
        """
        overrides = build_overrides(username, password, port, privateKeyPath)
        return await handle_execute(deps, hosts, command, timeout, overrides)

    @server.tool(name="ssh_transfer")
    async def ssh_transfer(
        direction: Annotated[
            Literal["upload", "download"], "Transfer direction: upload or download"
        ],
        hosts: Annotated[
            list[str], "List of host names or IP addresses to transfer files to/from"
        ],
        localPath: Annotated[  # noqa: N803
            str,
            "Local file path. For multi-host downloads, use {host} placeholder "
            "(e.g., ./logs/{host}.log) or files will be auto-suffixed with hostname",
        ],
        remotePath: Annotated[str, "Remote file path on the SSH host"],  # noqa: N803
        username: Annotated[
            str | None, "SSH username for direct connection (overrides config)"
        ] = None,
        password: Annotated[
            str | None, "SSH password for direct connection (use with caution)"
        ] = None,
        port: Annotated[int | None, "SSH port for direct connection (default: 22)"] = None,
        privateKeyPath: Annotated[  # noqa: N803
            str | None, "Path to SSH private key file for direct connection"
        ] = None,
    ) -> dict[str, Any]:
        """Transfer files between the local machine and remote SSH hosts.

        Supports upload to multiple hosts or download from multiple hosts.
        """
        overrides = build_overrides(username, password, port, privateKeyPath)
        return await handle_transfer(
            deps, direction, hosts, localPath, remotePath, overrides
        )
