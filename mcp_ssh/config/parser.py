"""SSH config file parser.

Reads ~/.ssh/config and extracts concrete host aliases. Only the
Host/HostName/Port/User/IdentityFile/ProxyJump directives are understood.
"""

import logging
import os
import re
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from pathlib import Path

from mcp_ssh.models import DEFAULT_SSH_PORT, SSHHost, current_user

logger = logging.getLogger(__name__)

SUPPORTED_KEYS = frozenset(
    {"hostname", "port", "user", "identityfile", "proxyjump"}
)

_DIRECTIVE_RE = re.compile(r"^(\w+)(?:\s*=\s*|\s+)(.+)$")


@dataclass
class _Section:
    """One Host block: its patterns and the directives it sets."""

    patterns: list[str]
    options: dict[str, str] = field(default_factory=dict)

    def matches(self, name: str) -> bool:
        matched = False
        for pattern in self.patterns:
            if pattern.startswith("!"):
                if fnmatchcase(name, pattern[1:]):
                    return False
            elif fnmatchcase(name, pattern):
                matched = True
        return matched


def _is_wildcard(name: str) -> bool:
    return "*" in name or "?" in name or name.startswith("!")


def _strip_quotes(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1]
    return value


class SSHConfigParser:
    """Parser for SSH config files.

    Wildcard patterns are never listed as hosts, but their blocks provide
    defaults for the concrete aliases they match. As in OpenSSH, the first
    value obtained for a directive wins.
    """

    def __init__(self, config_path: Path | str | None = None):
        """Initialize SSH config parser.

        Args:
            config_path: Path to SSH config file (default: ~/.ssh/config)
        """
        if config_path is None:
            config_path = Path.home() / ".ssh" / "config"

        self.config_path = Path(config_path)

    def parse(self) -> dict[str, SSHHost]:
        """Parse SSH config and return host definitions.

        Returns:
            Dictionary mapping alias to SSHHost, in file order. Empty if the
            file is missing or unreadable.
        """
        if not self.config_path.exists():
            logger.warning("SSH config not found: %s", self.config_path)
            return {}

        try:
            content = self.config_path.read_text(encoding="utf-8", errors="replace")
            logger.debug("Reading SSH config from %s", self.config_path)
        except OSError as e:
            logger.warning("Cannot read SSH config %s: %s", self.config_path, e)
            return {}

        sections = self._read_sections(content)
        names: list[str] = []
        for section in sections:
            for pattern in section.patterns:
                if not _is_wildcard(pattern) and pattern not in names:
                    names.append(pattern)

        hosts: dict[str, SSHHost] = {}
        for name in names:
            host = self._compute_host(name, sections)
            if host is not None:
                hosts[name] = host

        logger.info("Parsed %d hosts from %s", len(hosts), self.config_path)
        return hosts

    def _read_sections(self, content: str) -> list[_Section]:
        # Directives before the first Host line apply to every host.
        current: _Section | None = _Section(patterns=["*"])
        sections = [current]

        for raw_line in content.splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#"):
                continue

            match = _DIRECTIVE_RE.match(line)
            if not match:
                logger.debug("Skipping malformed SSH config line: %r", line)
                continue

            key = match.group(1).lower()
            value = match.group(2).split(" #", 1)[0].strip()

            if key == "host":
                current = _Section(patterns=value.split())
                sections.append(current)
                continue
            if key == "match":
                # Match blocks are not supported; ignore their directives
                current = None
                continue

            if current is None or key not in SUPPORTED_KEYS:
                continue

            value = _strip_quotes(value)
            if key == "identityfile":
                value = os.path.expanduser(value)
            current.options.setdefault(key, value)

        return sections

    def _compute_host(self, name: str, sections: list[_Section]) -> SSHHost | None:
        options: dict[str, str] = {}
        for section in sections:
            if section.matches(name):
                for key, value in section.options.items():
                    options.setdefault(key, value)

        port = self._parse_port(name, options.get("port"))
        try:
            return SSHHost(
                name=name,
                hostname=options.get("hostname") or name,
                port=port,
                user=options.get("user") or current_user(),
                identity_file=options.get("identityfile"),
                proxy_jump=options.get("proxyjump"),
            )
        except ValueError as e:
            logger.warning("Skipping host %s: %s", name, e)
            return None

    @staticmethod
    def _parse_port(name: str, value: str | None) -> int:
        if value is None:
            return DEFAULT_SSH_PORT
        try:
            port = int(value)
        except ValueError:
            port = 0
        if not 0 < port <= 65535:
            logger.warning(
                "Invalid port %r for host %s, using %d", value, name, DEFAULT_SSH_PORT
            )
            return DEFAULT_SSH_PORT
        return port
