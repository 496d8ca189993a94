"""SSH host key verification against a known_hosts file.

Used only when strict host key checking is enabled. Hashed host entries
(``|1|...``) are not de-obfuscated, so they never match.
"""

import base64
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from mcp_ssh.models import DEFAULT_SSH_PORT

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrustedKeyEntry:
    """One (host pattern, algorithm, key) triple from known_hosts."""

    host_pattern: str
    key_algorithm: str
    key_material: str


@dataclass
class _KnownHostsIndex:
    path: Path
    mtime: float | None
    entries: dict[str, list[TrustedKeyEntry]] = field(default_factory=dict)


def parse_known_hosts(content: str) -> dict[str, list[TrustedKeyEntry]]:
    """Index known_hosts lines by each individual host token.

    Blank lines, comments, marker lines and lines with fewer than three
    fields are skipped.

    Args:
        content: known_hosts file contents

    Returns:
        Mapping of host token to its trusted keys
    """
    index: dict[str, list[TrustedKeyEntry]] = {}

    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or line.startswith("@"):
            continue

        parts = line.split()
        if len(parts) < 3:
            logger.debug("Skipping malformed known_hosts line: %r", line)
            continue

        hosts, key_algorithm, key_material = parts[0], parts[1], parts[2]
        for host in hosts.split(","):
            if not host:
                continue
            index.setdefault(host, []).append(
                TrustedKeyEntry(host, key_algorithm, key_material)
            )

    return index


class TrustStore:
    """Known host keys loaded from a known_hosts file.

    The parsed index is cached and reloaded when the file's modification
    time changes. A missing or unreadable file yields an empty index, so
    every host is untrusted.
    """

    def __init__(self, known_hosts_path: Path | str | None = None):
        """Initialize trust store.

        Args:
            known_hosts_path: Path to known_hosts (default: ~/.ssh/known_hosts)
        """
        if known_hosts_path is None:
            known_hosts_path = Path.home() / ".ssh" / "known_hosts"
        self.known_hosts_path = Path(os.path.expanduser(str(known_hosts_path)))
        self._cache: _KnownHostsIndex | None = None

    def entries(self) -> dict[str, list[TrustedKeyEntry]]:
        """Return the current index, reloading it if the file changed."""
        try:
            mtime: float | None = self.known_hosts_path.stat().st_mtime
        except OSError:
            mtime = None

        if (
            self._cache is not None
            and mtime is not None
            and self._cache.mtime == mtime
        ):
            return self._cache.entries

        self._cache = _KnownHostsIndex(
            path=self.known_hosts_path,
            mtime=mtime,
            entries=self._load() if mtime is not None else {},
        )
        if mtime is None:
            logger.warning("known_hosts not found: %s", self.known_hosts_path)
        return self._cache.entries

    def _load(self) -> dict[str, list[TrustedKeyEntry]]:
        try:
            content = self.known_hosts_path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.warning("Cannot read known_hosts %s: %s", self.known_hosts_path, e)
            return {}
        index = parse_known_hosts(content)
        logger.debug(
            "Loaded %d known host token(s) from %s", len(index), self.known_hosts_path
        )
        return index

    @staticmethod
    def candidate_keys(hostname: str, port: int) -> list[str]:
        """Lookup keys for a host: bare hostname, plus [host]:port off port 22."""
        candidates = [hostname]
        if port != DEFAULT_SSH_PORT:
            candidates.append(f"[{hostname}]:{port}")
        return candidates

    def verify(self, hostname: str, port: int, presented_key: bytes) -> bool:
        """Check a server's public key against known_hosts.

        The first candidate key with entries decides: a matching key is
        trusted, a mismatch is rejected without trying further candidates.
        Unknown hosts are rejected.

        Args:
            hostname: Host name or address that was connected to
            port: Port that was connected to
            presented_key: Server public key in SSH wire format

        Returns:
            True if the key is trusted for this host
        """
        presented = base64.b64encode(presented_key).decode("ascii")
        index = self.entries()

        for candidate in self.candidate_keys(hostname, port):
            known = index.get(candidate)
            if not known:
                continue
            if any(entry.key_material == presented for entry in known):
                logger.debug("Host key for %s matches known_hosts", candidate)
                return True
            logger.error(
                "Host key mismatch for %s: presented key is not in %s",
                candidate,
                self.known_hosts_path,
            )
            return False

        logger.error(
            "Unknown host %s:%d, no entry in %s", hostname, port, self.known_hosts_path
        )
        return False
