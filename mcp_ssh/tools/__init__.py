"""MCP tools for mcp-ssh."""

from mcp_ssh.tools.handlers import (
    format_execute_output,
    format_hosts_output,
    format_transfer_output,
    handle_execute,
    handle_list_hosts,
    handle_transfer,
)
from mcp_ssh.tools.ssh import register_tools

__all__ = [
    "format_execute_output",
    "format_hosts_output",
    "format_transfer_output",
    "handle_execute",
    "handle_list_hosts",
    "handle_transfer",
    "register_tools",
]
