"""Host resources: one JSON document per configured SSH alias."""

import json
from typing import TYPE_CHECKING

from mcp_ssh.tools.handlers import host_details

if TYPE_CHECKING:
    from fastmcp import FastMCP

    from mcp_ssh.dependencies import Dependencies

SSH_RESOURCE_PREFIX = "ssh://"


def create_host_uri(host_name: str) -> str:
    """Create resource URI for a host."""
    return f"{SSH_RESOURCE_PREFIX}{host_name}"


def parse_host_uri(uri: str) -> str | None:
    """Parse host name from resource URI, or None for other schemes."""
    if not uri.startswith(SSH_RESOURCE_PREFIX):
        return None
    return uri[len(SSH_RESOURCE_PREFIX) :]


def list_hosts_resource(deps: "Dependencies") -> str:
    """JSON array of configured hosts with their resource URIs."""
    hosts = deps.resolver.list_hosts()
    return json.dumps(
        [
            {
                "uri": create_host_uri(host.name),
                "name": host.name,
                "description": host.address,
            }
            for host in hosts
        ],
        indent=2,
    )


def host_resource(deps: "Dependencies", host_name: str) -> str:
    """JSON details for one configured host, or an error object."""
    host = deps.resolver.find_host(host_name)
    if host is None:
        return json.dumps({"error": f"Host '{host_name}' not found"}, indent=2)
    return json.dumps(host_details(host), indent=2)


def register_resources(server: "FastMCP", deps: "Dependencies") -> None:
    """Register hosts://list and ssh://{host} on the server."""

    @server.resource(
        "hosts://list",
        name="SSH hosts",
        description="All hosts from the SSH config",
        mime_type="application/json",
    )
    async def _list_hosts() -> str:
        return list_hosts_resource(deps)

    @server.resource(
        "ssh://{host}",
        name="SSH host",
        description="Connection details for one SSH config host",
        mime_type="application/json",
    )
    async def _host(host: str) -> str:
        return host_resource(deps, host)
