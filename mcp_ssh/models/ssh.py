"""SSH-related data models."""

import getpass
from dataclasses import dataclass, field

DEFAULT_SSH_PORT = 22


def current_user() -> str:
    """Return the local OS user name, or "root" when it cannot be determined."""
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return "root"


@dataclass(frozen=True)
class SSHHost:
    """SSH host configuration resolved from the alias store or a bare hostname."""

    name: str
    hostname: str
    port: int = DEFAULT_SSH_PORT
    user: str = field(default_factory=current_user)
    identity_file: str | None = None
    proxy_jump: str | None = None

    def __post_init__(self) -> None:
        if not self.hostname:
            raise ValueError(f"Host '{self.name}' has an empty hostname")
        if not 0 < self.port <= 65535:
            raise ValueError(f"Host '{self.name}' has invalid port {self.port}")

    @property
    def address(self) -> str:
        """user@hostname:port, for display and logging."""
        return f"{self.user}@{self.hostname}:{self.port}"


@dataclass
class ConnectionOverrides:
    """Per-call connection parameters that take precedence over SSH config."""

    username: str | None = None
    password: str | None = field(default=None, repr=False)
    port: int | None = None
    private_key_path: str | None = None

    def is_empty(self) -> bool:
        """Check if no override field is set."""
        return (
            not self.username
            and not self.password
            and not self.port
            and not self.private_key_path
        )


@dataclass(frozen=True)
class EffectiveConnection:
    """Merged parameters for a single connection attempt.

    Never persisted; the password is kept out of repr() so it cannot leak
    into log lines.
    """

    name: str
    hostname: str
    port: int
    user: str
    identity_file: str | None = None
    proxy_jump: str | None = None
    password: str | None = field(default=None, repr=False)

    @classmethod
    def from_host(cls, host: SSHHost) -> "EffectiveConnection":
        return cls(
            name=host.name,
            hostname=host.hostname,
            port=host.port,
            user=host.user,
            identity_file=host.identity_file,
            proxy_jump=host.proxy_jump,
        )
