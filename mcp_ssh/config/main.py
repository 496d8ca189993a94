"""Application configuration.

Delegates to specialized components:
- Settings: Environment variables
- SSHConfigParser: Reads ~/.ssh/config
- TrustStore: Reads ~/.ssh/known_hosts
"""

import logging
from dataclasses import dataclass

from mcp_ssh.config.host_keys import TrustStore
from mcp_ssh.config.parser import SSHConfigParser
from mcp_ssh.config.settings import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Config:
    """Application configuration.

    Built once at startup and injected into the services; nothing reads
    it from global state.
    """

    settings: Settings
    parser: SSHConfigParser
    trust_store: TrustStore

    @classmethod
    def from_env(cls) -> "Config":
        """Create config from environment.

        Returns:
            Configured instance with all components initialized
        """
        return cls.from_settings(Settings.from_env())

    @classmethod
    def from_settings(cls, settings: Settings) -> "Config":
        """Create config from an explicit Settings instance."""
        if settings.strict_host_key_checking:
            logger.info(
                "Strict host key checking enabled (known_hosts=%s)",
                settings.known_hosts_path,
            )
        else:
            logger.warning(
                "Host key verification DISABLED - any server key is accepted. "
                "Set SSH_STRICT_HOST_KEY=true to verify against %s",
                settings.known_hosts_path,
            )
        return cls(
            settings=settings,
            parser=SSHConfigParser(settings.ssh_config_path),
            trust_store=TrustStore(settings.known_hosts_path),
        )

    @property
    def strict_host_key_checking(self) -> bool:
        """Whether server keys must be present in known_hosts."""
        return self.settings.strict_host_key_checking

    @property
    def max_concurrency(self) -> int:
        """Maximum number of hosts handled at once."""
        return self.settings.max_concurrency
