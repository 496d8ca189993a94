"""SSH session creation with credential fallback and host key verification.

Sessions are never pooled: every (host, operation) pair opens its own
connection and closes it when the operation ends.
"""

import asyncio
import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import asyncssh

from mcp_ssh.config.host_keys import TrustStore
from mcp_ssh.config.settings import Settings
from mcp_ssh.models import ConnectionOverrides, EffectiveConnection
from mcp_ssh.services.agent import find_agent_socket, is_agent_available
from mcp_ssh.services.resolver import HostResolver
from mcp_ssh.utils.sanitize import sanitize_error

logger = logging.getLogger(__name__)


class ConnectionError(Exception):
    """Failed to establish an SSH session.

    The message is already sanitized and safe to return to callers.
    """

    def __init__(self, host_name: str, message: str):
        """Initialize connection error.

        Args:
            host_name: Identifier the caller asked for
            message: Sanitized description of the failure
        """
        self.host_name = host_name
        self.reason = message
        super().__init__(f"Cannot connect to {host_name}: {message}")


def parse_jump_host(spec: str) -> tuple[str | None, str, int | None]:
    """Split one ProxyJump hop into (user, host, port).

    Accepts ``host``, ``user@host``, ``host:port``, ``[v6addr]:port`` and
    the ``ssh://`` URI form. User and port are None when not given.

    Raises:
        ValueError: If the host is empty or the port is not a number
    """
    text = spec.strip().removeprefix("ssh://")
    user, _, hostport = text.rpartition("@")
    host, port_text = hostport, ""
    if hostport.startswith("["):
        host, _, rest = hostport[1:].partition("]")
        port_text = rest.removeprefix(":")
    elif hostport.count(":") == 1:
        host, _, port_text = hostport.partition(":")

    if not host:
        raise ValueError(f"Invalid ProxyJump host: {spec.strip()!r}")
    try:
        port = int(port_text) if port_text else None
    except ValueError:
        raise ValueError(f"Invalid ProxyJump port in {spec.strip()!r}") from None
    return user or None, host, port


class _TrustStoreClient(asyncssh.SSHClient):
    """Client that checks server keys against the TrustStore."""

    def __init__(self, trust_store: TrustStore, hostname: str, port: int):
        self._trust_store = trust_store
        self._hostname = hostname
        self._port = port

    def validate_host_public_key(
        self, host: str, addr: str, port: int, key: asyncssh.SSHKey
    ) -> bool:
        return self._trust_store.verify(self._hostname, self._port, key.public_data)


class SessionFactory:
    """Opens authenticated SSH sessions for host identifiers."""

    def __init__(
        self,
        settings: Settings,
        resolver: HostResolver,
        trust_store: TrustStore,
    ) -> None:
        """Initialize session factory.

        Args:
            settings: Timeouts, strict mode and agent override
            resolver: Host identifier resolver
            trust_store: Known host keys, consulted only in strict mode
        """
        self.settings = settings
        self.resolver = resolver
        self.trust_store = trust_store
        self._tunnel_watchers: set[asyncio.Task[None]] = set()

    def _agent_socket(self) -> str | None:
        socket_path = self.settings.agent_socket or find_agent_socket()
        if socket_path and is_agent_available(socket_path):
            return socket_path
        return None

    def auth_options(self, conn: EffectiveConnection) -> dict[str, Any]:
        """Build asyncssh credential arguments.

        Fallback order: password (exclusive), SSH agent, identity file.
        asyncssh tries agent keys before the identity file when both are
        offered.

        Args:
            conn: Merged connection parameters

        Returns:
            Keyword arguments for asyncssh.connect
        """
        if conn.password:
            logger.debug("Using password authentication for %s", conn.name)
            return {"password": conn.password, "client_keys": None, "agent_path": None}

        options: dict[str, Any] = {"agent_path": self._agent_socket()}
        if options["agent_path"]:
            logger.debug("Using SSH agent at %s for %s", options["agent_path"], conn.name)

        identity = conn.identity_file
        if identity and os.path.exists(os.path.expanduser(identity)):
            options["client_keys"] = [
                asyncssh.read_private_key(os.path.expanduser(identity))
            ]
            logger.debug("Using identity file %s for %s", identity, conn.name)
        elif identity:
            logger.warning("Identity file for %s not found: %s", conn.name, identity)

        return options

    def host_key_options(self, conn: EffectiveConnection) -> dict[str, Any]:
        """Build asyncssh host key arguments for the configured mode."""
        if not self.settings.strict_host_key_checking:
            return {"known_hosts": None}

        # No keys trusted up front, so every server key goes through
        # _TrustStoreClient.validate_host_public_key
        return {
            "known_hosts": ([], [], []),
            "client_factory": lambda: _TrustStoreClient(
                self.trust_store, conn.hostname, conn.port
            ),
        }

    async def connect(
        self,
        identifier: str,
        overrides: ConnectionOverrides | None = None,
        timeout_ms: int | None = None,
    ) -> asyncssh.SSHClientConnection:
        """Open an authenticated session.

        ProxyJump hosts are resolved and opened the same way as the target,
        with the same credentials fallback and host key mode, and are closed
        once the returned connection closes. The caller owns the returned
        connection and must close it; prefer :meth:`session`.

        Args:
            identifier: SSH config alias, hostname or IP address
            overrides: Per-call connection parameters
            timeout_ms: Handshake timeout per hop (default: settings.timeout_ms)

        Returns:
            Connected asyncssh client connection

        Raises:
            ConnectionError: On DNS, TCP, timeout, authentication or host
                key failures, on this host or any jump host
        """
        return await self._open(identifier, overrides, timeout_ms, via=())

    async def _open(
        self,
        identifier: str,
        overrides: ConnectionOverrides | None,
        timeout_ms: int | None,
        via: tuple[str, ...],
        tunnel: asyncssh.SSHClientConnection | None = None,
    ) -> asyncssh.SSHClientConnection:
        conn = self.resolver.effective_connection(identifier, overrides)
        timeout_ms = timeout_ms or self.settings.timeout_ms
        secrets = (conn.password,)

        # An explicit tunnel (next hop of a chain) replaces the host's own ProxyJump
        if tunnel is None and conn.proxy_jump and conn.proxy_jump.lower() != "none":
            tunnel = await self._open_jump(
                identifier, conn.proxy_jump, timeout_ms, via + (identifier,)
            )

        logger.info(
            "Opening SSH connection to %s (%s@%s:%d)%s",
            identifier,
            conn.user,
            conn.hostname,
            conn.port,
            " via jump host" if tunnel is not None else "",
        )

        try:
            options = {
                **self.auth_options(conn),
                **self.host_key_options(conn),
            }
            if tunnel is not None:
                options["tunnel"] = tunnel

            session = await asyncio.wait_for(
                asyncssh.connect(
                    conn.hostname,
                    port=conn.port,
                    username=conn.user,
                    config=None,
                    **options,
                ),
                timeout=timeout_ms / 1000,
            )
        except asyncio.TimeoutError:
            self._close_tunnel(tunnel)
            logger.error("Connection to %s timed out after %dms", identifier, timeout_ms)
            raise ConnectionError(
                identifier, f"Connection timed out after {timeout_ms}ms"
            ) from None
        except asyncssh.HostKeyNotVerifiable as e:
            self._close_tunnel(tunnel)
            logger.error("Host key verification failed for %s: %s", identifier, e)
            raise ConnectionError(
                identifier,
                f"Host key verification failed: {sanitize_error(e, secrets)}",
            ) from e
        except Exception as e:
            self._close_tunnel(tunnel)
            message = sanitize_error(e, secrets)
            logger.error("Connection to %s failed: %s", identifier, message)
            raise ConnectionError(identifier, message) from e

        if tunnel is not None:
            self._close_tunnel_with(session, tunnel)
        logger.info("SSH connection established to %s", identifier)
        return session

    async def _open_jump(
        self,
        identifier: str,
        proxy_jump: str,
        timeout_ms: int,
        via: tuple[str, ...],
    ) -> asyncssh.SSHClientConnection:
        """Open each ProxyJump hop through the previous one; return the last."""
        tunnel: asyncssh.SSHClientConnection | None = None
        try:
            for spec in proxy_jump.split(","):
                user, host, port = parse_jump_host(spec)
                if host in via:
                    raise ConnectionError(
                        identifier, f"ProxyJump loop through {host}"
                    )
                try:
                    tunnel = await self._open(
                        host,
                        ConnectionOverrides(username=user, port=port),
                        timeout_ms,
                        via,
                        tunnel=tunnel,
                    )
                except ConnectionError as e:
                    # The failed hop already closed the hops before it
                    tunnel = None
                    raise ConnectionError(
                        identifier, f"ProxyJump {host}: {e.reason}"
                    ) from e
        except ValueError as e:
            self._close_tunnel(tunnel)
            raise ConnectionError(identifier, str(e)) from e
        except ConnectionError:
            self._close_tunnel(tunnel)
            raise
        assert tunnel is not None
        return tunnel

    @staticmethod
    def _close_tunnel(tunnel: asyncssh.SSHClientConnection | None) -> None:
        if tunnel is not None:
            tunnel.close()

    def _close_tunnel_with(
        self,
        session: asyncssh.SSHClientConnection,
        tunnel: asyncssh.SSHClientConnection,
    ) -> None:
        async def close_when_done() -> None:
            try:
                await session.wait_closed()
            finally:
                tunnel.close()

        task = asyncio.create_task(close_when_done())
        self._tunnel_watchers.add(task)
        task.add_done_callback(self._tunnel_watchers.discard)

    @asynccontextmanager
    async def session(
        self,
        identifier: str,
        overrides: ConnectionOverrides | None = None,
        timeout_ms: int | None = None,
    ) -> AsyncIterator[asyncssh.SSHClientConnection]:
        """Open a session that is closed on every exit path.

        Example:
            async with factory.session("web1") as conn:
                await conn.run("uptime", check=False)
        """
        conn = await self.connect(identifier, overrides, timeout_ms)
        try:
            yield conn
        finally:
            conn.close()
            logger.debug("Closed SSH connection to %s", identifier)
