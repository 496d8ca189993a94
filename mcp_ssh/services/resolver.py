"""Host identifier resolution.

Turns an alias or bare hostname into connection parameters. Precedence:
per-call overrides > SSH config alias > bare-hostname defaults.
"""

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path

from mcp_ssh.config.parser import SSHConfigParser
from mcp_ssh.models import (
    DEFAULT_SSH_PORT,
    ConnectionOverrides,
    EffectiveConnection,
    SSHHost,
    current_user,
)

logger = logging.getLogger(__name__)


@dataclass
class AliasCache:
    """Parsed SSH config keyed by the file's modification time."""

    path: Path
    mtime: float | None
    hosts: dict[str, SSHHost] = field(default_factory=dict)

    def is_current(self, mtime: float | None) -> bool:
        return mtime is not None and self.mtime == mtime


class HostResolver:
    """Resolves host identifiers against the SSH config alias store."""

    def __init__(self, parser: SSHConfigParser):
        """Initialize resolver.

        Args:
            parser: Parser for the SSH config file
        """
        self.parser = parser
        self._cache: AliasCache | None = None

    def _stat_mtime(self) -> float | None:
        try:
            return self.parser.config_path.stat().st_mtime
        except OSError:
            return None

    def get_hosts(self) -> dict[str, SSHHost]:
        """Get configured aliases, re-parsing when the file has changed.

        Returns:
            Dictionary of alias to SSHHost
        """
        mtime = self._stat_mtime()
        if self._cache is None or not self._cache.is_current(mtime):
            hosts = self.parser.parse() if mtime is not None else {}
            self._cache = AliasCache(
                path=self.parser.config_path, mtime=mtime, hosts=hosts
            )
        return self._cache.hosts

    def list_hosts(self) -> list[SSHHost]:
        """Configured aliases in file order."""
        return list(self.get_hosts().values())

    def find_host(self, name: str) -> SSHHost | None:
        """Look up an alias by exact name."""
        return self.get_hosts().get(name)

    def resolve(self, identifier: str) -> SSHHost:
        """Resolve an alias, or treat the identifier as a literal hostname.

        Never raises for an unknown identifier.

        Args:
            identifier: SSH config alias, hostname or IP address

        Returns:
            SSHHost for the identifier
        """
        host = self.find_host(identifier)
        if host is not None:
            return host

        logger.debug("Host %s not in SSH config, using it as a hostname", identifier)
        return SSHHost(
            name=identifier,
            hostname=identifier,
            port=DEFAULT_SSH_PORT,
            user=current_user(),
        )

    @staticmethod
    def merge_overrides(
        host: SSHHost, overrides: ConnectionOverrides | None = None
    ) -> EffectiveConnection:
        """Apply per-call overrides on top of a resolved host.

        Each override field replaces the host's value only when it is set.
        The password comes only from overrides.

        Args:
            host: Resolved host
            overrides: Optional per-call connection parameters

        Returns:
            Parameters for one connection attempt
        """
        effective = EffectiveConnection.from_host(host)
        if overrides is None:
            return effective

        return replace(
            effective,
            user=overrides.username or effective.user,
            port=overrides.port or effective.port,
            identity_file=overrides.private_key_path or effective.identity_file,
            password=overrides.password,
        )

    def effective_connection(
        self, identifier: str, overrides: ConnectionOverrides | None = None
    ) -> EffectiveConnection:
        """Resolve an identifier and apply overrides in one step."""
        return self.merge_overrides(self.resolve(identifier), overrides)
