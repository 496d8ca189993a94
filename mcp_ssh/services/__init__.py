"""Services for mcp-ssh."""

from mcp_ssh.services.agent import find_agent_socket, is_agent_available
from mcp_ssh.services.concurrency import run_bounded
from mcp_ssh.services.connection import ConnectionError, SessionFactory
from mcp_ssh.services.executors import execute_command, run_on_hosts
from mcp_ssh.services.resolver import AliasCache, HostResolver
from mcp_ssh.services.transfer import (
    HOST_PLACEHOLDER,
    download_file,
    resolve_download_path,
    run_transfer,
    upload_file,
)

__all__ = [
    "AliasCache",
    "ConnectionError",
    "HOST_PLACEHOLDER",
    "HostResolver",
    "SessionFactory",
    "download_file",
    "execute_command",
    "find_agent_socket",
    "is_agent_available",
    "resolve_download_path",
    "run_bounded",
    "run_on_hosts",
    "run_transfer",
    "upload_file",
]
