"""mcp-ssh middleware components."""

from mcp_ssh.middleware.base import SSHServerMiddleware
from mcp_ssh.middleware.errors import ErrorHandlingMiddleware
from mcp_ssh.middleware.logging import LoggingMiddleware

__all__ = [
    "ErrorHandlingMiddleware",
    "LoggingMiddleware",
    "SSHServerMiddleware",
]
