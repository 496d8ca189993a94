"""Utilities for mcp-ssh."""

from mcp_ssh.utils.console import ConsoleFormatter
from mcp_ssh.utils.sanitize import error_message, sanitize_error
from mcp_ssh.utils.validation import (
    PathTraversalError,
    ensure_no_escape,
    sanitize_host_name,
)

__all__ = [
    "ConsoleFormatter",
    "PathTraversalError",
    "ensure_no_escape",
    "error_message",
    "sanitize_error",
    "sanitize_host_name",
]
