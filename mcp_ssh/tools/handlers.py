"""Tool handlers for listing hosts, executing commands and transferring files.

Handlers never raise: invalid input and per-host failures are returned in
the payload.
"""

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from mcp_ssh.models import (
    ConnectionOverrides,
    ExecuteResult,
    SSHHost,
    TransferResult,
)
from mcp_ssh.services.executors import run_on_hosts
from mcp_ssh.services.transfer import run_transfer

if TYPE_CHECKING:
    from mcp_ssh.dependencies import Dependencies

logger = logging.getLogger(__name__)


def build_overrides(
    username: str | None = None,
    password: str | None = None,
    port: int | None = None,
    private_key_path: str | None = None,
) -> ConnectionOverrides | None:
    """Collect direct-connection arguments, or None if none were given."""
    overrides = ConnectionOverrides(
        username=username,
        password=password,
        port=port,
        private_key_path=private_key_path,
    )
    return None if overrides.is_empty() else overrides


def _error_payload(message: str) -> dict[str, Any]:
    logger.warning("Rejected request: %s", message)
    return {"error": message, "results": []}


def _results_payload(
    results: Sequence[ExecuteResult | TransferResult], summary: str
) -> dict[str, Any]:
    return {
        "results": [r.to_dict() for r in results],
        "succeeded": sum(1 for r in results if r.success),
        "total": len(results),
        "summary": summary,
    }


def format_hosts_output(hosts: Sequence[SSHHost], config_path: str) -> str:
    """Format configured hosts for display."""
    if not hosts:
        return f"No SSH hosts found in {config_path}"

    lines = []
    for host in hosts:
        line = f"{host.name} -> {host.address}"
        if host.identity_file:
            line += f" (key: {host.identity_file})"
        if host.proxy_jump:
            line += f" (via: {host.proxy_jump})"
        lines.append(line)

    return f"Found {len(hosts)} SSH hosts:\n\n" + "\n".join(lines)


def format_execute_output(results: Sequence[ExecuteResult]) -> str:
    """Format execution results with a per-host block and a summary line."""
    lines: list[str] = []

    for result in results:
        lines.append(f"=== {result.host} ===")
        if result.exit_code is not None:
            lines.append(f"Exit code: {result.exit_code}")
            if result.stdout:
                lines.append(f"stdout:\n{result.stdout}")
            if result.stderr:
                lines.append(f"stderr:\n{result.stderr}")
        else:
            lines.append(f"Error: {result.error}")
        lines.append("")

    success_count = sum(1 for r in results if r.success)
    lines.append(f"Summary: {success_count}/{len(results)} succeeded")
    return "\n".join(lines)


def format_transfer_output(results: Sequence[TransferResult], direction: str) -> str:
    """Format transfer results with one line per host and a summary line."""
    lines: list[str] = []
    action = "Uploaded" if direction == "upload" else "Downloaded"

    for result in results:
        if not result.success:
            lines.append(f"✗ {result.host}: {result.error}")
        elif direction == "upload":
            lines.append(f"✓ {result.host}: {result.local_path} -> {result.remote_path}")
        else:
            lines.append(f"✓ {result.host}: {result.remote_path} -> {result.local_path}")

    success_count = sum(1 for r in results if r.success)
    lines.append("")
    lines.append(f"{action} {success_count}/{len(results)} successfully")
    return "\n".join(lines)


def handle_list_hosts(deps: "Dependencies") -> dict[str, Any]:
    """List SSH config aliases."""
    hosts = deps.resolver.list_hosts()
    return {
        "hosts": [host_details(host) for host in hosts],
        "summary": format_hosts_output(hosts, deps.settings.ssh_config_path),
    }


def host_details(host: SSHHost) -> dict[str, Any]:
    """JSON-ready description of a host, without unset fields."""
    details: dict[str, Any] = {
        "name": host.name,
        "hostname": host.hostname,
        "port": host.port,
        "user": host.user,
    }
    if host.identity_file:
        details["identityFile"] = host.identity_file
    if host.proxy_jump:
        details["proxyJump"] = host.proxy_jump
    return details


async def handle_execute(
    deps: "Dependencies",
    hosts: list[str],
    command: str,
    timeout: int | None = None,
    overrides: ConnectionOverrides | None = None,
) -> dict[str, Any]:
    """Validate input and run a command on every host."""
    if not hosts:
        return _error_payload("At least one host is required")
    if not command:
        return _error_payload("Command is required")
    max_length = deps.settings.max_command_length
    if len(command) > max_length:
        return _error_payload(f"Command too long (max {max_length} characters)")

    results = await run_on_hosts(
        deps.sessions, hosts, command, timeout_ms=timeout, overrides=overrides
    )
    return _results_payload(results, format_execute_output(results))


async def handle_transfer(
    deps: "Dependencies",
    direction: str,
    hosts: list[str],
    local_path: str,
    remote_path: str,
    overrides: ConnectionOverrides | None = None,
) -> dict[str, Any]:
    """Validate input and transfer a file to or from every host."""
    if direction not in ("upload", "download"):
        return _error_payload(
            f"direction must be 'upload' or 'download', got '{direction}'"
        )
    if not hosts:
        return _error_payload("At least one host is required")
    if not local_path or not remote_path:
        return _error_payload("Both localPath and remotePath are required")

    results = await run_transfer(
        deps.sessions,
        direction,  # type: ignore[arg-type]
        hosts,
        local_path,
        remote_path,
        overrides=overrides,
    )
    return _results_payload(results, format_transfer_output(results, direction))
