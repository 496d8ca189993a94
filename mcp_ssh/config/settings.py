"""Application settings from environment variables.

Centralized environment variable parsing and validation.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)


def _default_ssh_path(name: str) -> str:
    return str(Path.home() / ".ssh" / name)


@dataclass(frozen=True)
class Settings:
    """Application settings from environment.

    Created once at startup and passed to the components that need it.
    """

    # SSH files
    ssh_config_path: str = field(default_factory=lambda: _default_ssh_path("config"))
    known_hosts_path: str = field(
        default_factory=lambda: _default_ssh_path("known_hosts")
    )
    agent_socket: str | None = None

    # Connection
    timeout_ms: int = 30_000
    strict_host_key_checking: bool = False
    operation_timeout: int = 0  # seconds, 0 = no deadline

    # Concurrency
    max_concurrency: int = 10

    # Tool limits
    max_command_length: int = 100_000

    # Transport
    transport: str = "stdio"
    http_host: str = "127.0.0.1"
    http_port: int = 8000

    # Logging
    log_level: str = "INFO"
    log_colors: bool = True
    log_payloads: bool = False
    slow_threshold_ms: int = 1000
    include_traceback: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables.

        Returns:
            Settings instance with values from environment
        """
        return cls(
            ssh_config_path=os.path.expanduser(
                os.getenv("SSH_CONFIG_PATH") or _default_ssh_path("config")
            ),
            known_hosts_path=os.path.expanduser(
                os.getenv("SSH_KNOWN_HOSTS_PATH") or _default_ssh_path("known_hosts")
            ),
            agent_socket=os.getenv("SSH_AGENT_SOCKET") or None,
            timeout_ms=cls._get_int("SSH_TIMEOUT", 30_000),
            strict_host_key_checking=cls._get_bool("SSH_STRICT_HOST_KEY", False),
            operation_timeout=cls._get_int("SSH_OPERATION_TIMEOUT", 0),
            max_concurrency=cls._get_int("SSH_MAX_CONCURRENCY", 10),
            max_command_length=cls._get_int("SSH_MAX_COMMAND_LENGTH", 100_000),
            transport=cls._get_transport(),
            http_host=os.getenv("SSH_HTTP_HOST", "127.0.0.1"),
            http_port=cls._get_int("SSH_HTTP_PORT", 8000),
            log_level=os.getenv("SSH_LOG_LEVEL", "INFO").upper(),
            log_colors=cls._get_bool("SSH_LOG_COLORS", True),
            log_payloads=cls._get_bool("SSH_LOG_PAYLOADS", False),
            slow_threshold_ms=cls._get_int("SSH_SLOW_THRESHOLD_MS", 1000),
            include_traceback=cls._get_bool("SSH_INCLUDE_TRACEBACK", False),
        )

    @staticmethod
    def _get_int(key: str, default: int) -> int:
        """Get integer from environment.

        Args:
            key: Environment variable key
            default: Default value if not set or invalid

        Returns:
            Integer value from environment or default
        """
        value = os.getenv(key)
        if value is None or not value.strip():
            return default

        try:
            return int(value)
        except ValueError:
            logger.warning("Invalid int for %s: %s, using default %d", key, value, default)
            return default

    @staticmethod
    def _get_bool(key: str, default: bool) -> bool:
        """Get boolean from environment.

        Only "true" (any case) and "1" count as true.
        """
        value = os.getenv(key)
        if value is None:
            return default
        return value.lower() == "true" or value == "1"

    @staticmethod
    def _get_transport() -> str:
        transport = os.getenv("SSH_TRANSPORT", "").lower()
        if transport in ("http", "stdio"):
            return transport
        return "stdio"

    @property
    def timeout_seconds(self) -> float:
        """Handshake timeout in seconds."""
        return self.timeout_ms / 1000
