"""Data models for mcp-ssh."""

from mcp_ssh.models.results import ExecuteResult, TransferResult
from mcp_ssh.models.ssh import (
    DEFAULT_SSH_PORT,
    ConnectionOverrides,
    EffectiveConnection,
    SSHHost,
    current_user,
)

__all__ = [
    "ConnectionOverrides",
    "DEFAULT_SSH_PORT",
    "EffectiveConnection",
    "ExecuteResult",
    "SSHHost",
    "TransferResult",
    "current_user",
]
