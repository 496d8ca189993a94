"""MCP resources for mcp-ssh."""

from mcp_ssh.resources.hosts import (
    create_host_uri,
    host_resource,
    list_hosts_resource,
    parse_host_uri,
    register_resources,
)

__all__ = [
    "create_host_uri",
    "host_resource",
    "list_hosts_resource",
    "parse_host_uri",
    "register_resources",
]
