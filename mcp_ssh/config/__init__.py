"""Configuration module for mcp-ssh.

Provides focused classes for different configuration concerns:
- Config: Main configuration class (aggregates all components)
- SSHConfigParser: Parses ~/.ssh/config files
- TrustStore: Verifies host keys against known_hosts
- Settings: Environment variable configuration
"""

from mcp_ssh.config.host_keys import TrustedKeyEntry, TrustStore
from mcp_ssh.config.main import Config
from mcp_ssh.config.parser import SSHConfigParser
from mcp_ssh.config.settings import Settings

__all__ = ["Config", "SSHConfigParser", "Settings", "TrustStore", "TrustedKeyEntry"]
