"""Remote command execution across many hosts."""

import asyncio
import logging
from typing import TYPE_CHECKING

from mcp_ssh.models import ConnectionOverrides, ExecuteResult
from mcp_ssh.services.concurrency import run_bounded
from mcp_ssh.services.connection import ConnectionError
from mcp_ssh.utils.sanitize import sanitize_error

if TYPE_CHECKING:
    import asyncssh

    from mcp_ssh.services.connection import SessionFactory

logger = logging.getLogger(__name__)


def _decode(stream: str | bytes | None) -> str:
    """Normalize asyncssh output (str, bytes or None) to stripped text."""
    if stream is None:
        return ""
    if isinstance(stream, bytes):
        return stream.decode("utf-8", errors="replace").strip()
    return stream.strip()


def operation_deadline(factory: "SessionFactory") -> float | None:
    """Overall deadline for a command or transfer, or None if unbounded."""
    seconds = factory.settings.operation_timeout
    return seconds if seconds > 0 else None


async def run_command(
    conn: "asyncssh.SSHClientConnection",
    command: str,
    timeout: float | None = None,
) -> tuple[str, str, int | None]:
    """Run a command verbatim and collect its output.

    No quoting or escaping is applied.

    Args:
        conn: Open SSH connection
        command: Command line passed to the remote shell as-is
        timeout: Optional overall deadline in seconds

    Returns:
        Tuple of (stdout, stderr, exit status or None if none was reported)
    """
    # Raw bytes; _decode replaces invalid UTF-8 instead of dropping the stream
    result = await asyncio.wait_for(
        conn.run(command, check=False, encoding=None), timeout=timeout
    )
    return _decode(result.stdout), _decode(result.stderr), result.exit_status


async def execute_command(
    factory: "SessionFactory",
    host: str,
    command: str,
    timeout_ms: int | None = None,
    overrides: ConnectionOverrides | None = None,
) -> ExecuteResult:
    """Execute a command on a single host.

    Never raises: connection and transport failures become an error result.

    Args:
        factory: Session factory
        host: SSH config alias, hostname or IP address
        command: Command to run
        timeout_ms: Connection timeout in milliseconds
        overrides: Per-call connection parameters

    Returns:
        ExecuteResult for the host
    """
    secrets = (overrides.password,) if overrides else ()
    deadline = operation_deadline(factory)

    try:
        async with factory.session(host, overrides, timeout_ms) as conn:
            stdout, stderr, exit_code = await run_command(conn, command, deadline)
    except ConnectionError as e:
        return ExecuteResult(host=host, success=False, error=e.reason)
    except asyncio.TimeoutError:
        logger.warning("Command on %s exceeded %ss deadline", host, deadline)
        return ExecuteResult(
            host=host,
            success=False,
            error=f"Command timed out after {deadline}s",
        )
    except Exception as e:
        message = sanitize_error(e, secrets)
        logger.error("Command on %s failed: %s", host, message)
        return ExecuteResult(host=host, success=False, error=message)

    if exit_code is None:
        logger.warning("Command on %s ended without an exit status", host)
        return ExecuteResult(
            host=host,
            success=False,
            stdout=stdout,
            stderr=stderr,
            error="Remote process ended without an exit status",
        )

    logger.info("Command on %s completed with exit code %d", host, exit_code)
    return ExecuteResult(
        host=host,
        success=exit_code == 0,
        stdout=stdout,
        stderr=stderr,
        exit_code=exit_code,
    )


async def run_on_hosts(
    factory: "SessionFactory",
    hosts: list[str],
    command: str,
    timeout_ms: int | None = None,
    overrides: ConnectionOverrides | None = None,
    limit: int | None = None,
) -> list[ExecuteResult]:
    """Execute a command on multiple hosts with bounded concurrency.

    Args:
        factory: Session factory
        hosts: Host identifiers
        command: Command to run on every host
        timeout_ms: Connection timeout in milliseconds
        overrides: Per-call connection parameters applied to every host
        limit: Concurrency ceiling (default: settings.max_concurrency)

    Returns:
        One ExecuteResult per host, in input order
    """
    if limit is None:
        limit = factory.settings.max_concurrency

    secrets = (overrides.password,) if overrides else ()
    logger.info("Running command on %d host(s) (concurrency=%d)", len(hosts), limit)

    return await run_bounded(
        hosts,
        lambda host: execute_command(factory, host, command, timeout_ms, overrides),
        limit,
        on_error=lambda host, exc: ExecuteResult(
            host=host, success=False, error=sanitize_error(exc, secrets)
        ),
    )
