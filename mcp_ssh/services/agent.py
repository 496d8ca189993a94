"""SSH agent socket discovery.

Supports Linux, macOS and Windows, including the 1Password SSH agent.
"""

import os
import sys
from pathlib import Path

WINDOWS_OPENSSH_PIPE = r"\\.\pipe\openssh-ssh-agent"

# 1Password agent sockets, relative to the home directory
ONEPASSWORD_SOCKETS = {
    "darwin": "Library/Group Containers/2BUA8C4S2C.com.1password/t/agent.sock",
    "linux": ".1password/agent.sock",
}


def find_agent_socket() -> str | None:
    """Locate an SSH agent socket or named pipe.

    Checks, in order: SSH_AUTH_SOCK; on Windows OP_SSH_AUTH_SOCK then the
    OpenSSH agent pipe; on macOS and Linux the 1Password agent socket.

    Returns:
        Socket path, or None if no agent is known
    """
    env_socket = os.environ.get("SSH_AUTH_SOCK")
    if env_socket:
        return env_socket

    if sys.platform == "win32":
        return os.environ.get("OP_SSH_AUTH_SOCK") or WINDOWS_OPENSSH_PIPE

    relative = ONEPASSWORD_SOCKETS.get(sys.platform)
    if relative:
        candidate = Path.home() / relative
        if candidate.exists():
            return str(candidate)

    return None


def is_agent_available(socket_path: str | None = None) -> bool:
    """Check if an SSH agent is reachable.

    Named pipes cannot be checked cheaply on Windows, so they are assumed
    to exist.

    Args:
        socket_path: Socket to check (default: discovered socket)
    """
    socket_path = socket_path or find_agent_socket()
    if not socket_path:
        return False
    if sys.platform == "win32":
        return True
    return os.path.exists(socket_path)
