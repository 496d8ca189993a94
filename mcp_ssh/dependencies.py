"""Dependency injection container for mcp-ssh.

Built once at startup and handed to the tools and resources; nothing
fetches configuration from global state.
"""

from dataclasses import dataclass

from mcp_ssh.config import Config, Settings
from mcp_ssh.services.connection import SessionFactory
from mcp_ssh.services.resolver import HostResolver


@dataclass(frozen=True)
class Dependencies:
    """Container for mcp-ssh dependencies.

    Example:
        deps = Dependencies.create()
        results = await run_on_hosts(deps.sessions, ["web1"], "uptime")
    """

    config: Config
    resolver: HostResolver
    sessions: SessionFactory

    @classmethod
    def create(cls) -> "Dependencies":
        """Create dependencies from environment configuration."""
        return cls.from_config(Config.from_env())

    @classmethod
    def from_settings(cls, settings: Settings) -> "Dependencies":
        """Create dependencies from explicit settings."""
        return cls.from_config(Config.from_settings(settings))

    @classmethod
    def from_config(cls, config: Config) -> "Dependencies":
        """Create dependencies with custom configuration.

        Args:
            config: Config instance

        Returns:
            Dependencies with resolver and session factory wired to config
        """
        resolver = HostResolver(config.parser)
        sessions = SessionFactory(
            settings=config.settings,
            resolver=resolver,
            trust_store=config.trust_store,
        )
        return cls(config=config, resolver=resolver, sessions=sessions)

    @property
    def settings(self) -> Settings:
        return self.config.settings
