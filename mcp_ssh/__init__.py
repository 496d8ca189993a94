"""mcp-ssh: run commands and transfer files on many SSH hosts over MCP."""

__version__ = "1.1.0"
